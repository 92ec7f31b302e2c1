"""Household ledger endpoints: categories, monthly budgets, expenses, stats"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from woyu_finance.api.dependencies import get_request_id
from woyu_finance.api.errors import transaction
from woyu_finance.api.v1.payment_items import pagination_of
from woyu_finance.api.v1.schemas import (
    CategoryStatsResponse,
    HouseholdBudgetResponse,
    HouseholdBudgetUpsert,
    HouseholdCategoryCreate,
    HouseholdCategoryResponse,
    HouseholdCategoryUpdate,
    HouseholdExpenseCreate,
    HouseholdExpensePage,
    HouseholdExpenseResponse,
    HouseholdExpenseUpdate,
    MonthSummaryResponse,
)
from woyu_finance.config import settings
from woyu_finance.domain.exceptions import NotFoundError
from woyu_finance.domain.models import to_money
from woyu_finance.infrastructure.database.repositories import HouseholdRepository, paginate_query
from woyu_finance.infrastructure.database.session import get_db
from woyu_finance.services import household as household_service
from woyu_finance.utils import date_utils

router = APIRouter()


def _get_category(repo: HouseholdRepository, category_id: int):
    category = repo.get_category(category_id)
    if category is None:
        raise NotFoundError("Household category", category_id)
    return category


def _get_expense(repo: HouseholdRepository, expense_id: int):
    expense = repo.get_expense(expense_id)
    if expense is None:
        raise NotFoundError("Household expense", expense_id)
    return expense


@router.get("/categories", response_model=List[HouseholdCategoryResponse])
def list_categories(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db),
):
    return HouseholdRepository(db).list_categories(include_inactive=include_inactive)


@router.post("/categories", response_model=HouseholdCategoryResponse, status_code=201)
def create_category(body: HouseholdCategoryCreate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        category = HouseholdRepository(db).create_category(**body.model_dump())
    return category


@router.put("/categories/{category_id}", response_model=HouseholdCategoryResponse)
def update_category(
    category_id: int,
    body: HouseholdCategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    with transaction(db, get_request_id(request)):
        category = _get_category(HouseholdRepository(db), category_id)
        for name, value in body.model_dump(exclude_unset=True).items():
            setattr(category, name, value)
    return category


@router.delete("/categories/{category_id}", status_code=204)
def deactivate_category(category_id: int, request: Request, db: Session = Depends(get_db)):
    """Categories referenced by expenses are deactivated, not removed"""
    with transaction(db, get_request_id(request)):
        _get_category(HouseholdRepository(db), category_id).is_active = False
    return Response(status_code=204)


@router.get("/categories/{category_id}/stats", response_model=CategoryStatsResponse)
def category_stats(
    category_id: int,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    """Budget vs. spend for one category; a year without month covers the whole year"""
    today = date_utils.today()
    if year is None:
        year, month = today.year, month or today.month
    return household_service.category_stats(db, category_id, year, month)


@router.get("/budgets", response_model=List[HouseholdBudgetResponse])
def list_budgets(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    return HouseholdRepository(db).list_budgets(year=year, month=month)


@router.post("/budgets", response_model=HouseholdBudgetResponse)
def upsert_budget(body: HouseholdBudgetUpsert, request: Request, db: Session = Depends(get_db)):
    """Create or replace the budget for (category, year, month)"""
    repo = HouseholdRepository(db)
    with transaction(db, get_request_id(request)):
        _get_category(repo, body.category_id)
        budget = repo.upsert_budget(
            body.category_id,
            body.year,
            body.month,
            to_money(body.budget_amount),
            notes=body.notes,
        )
    return budget


@router.get("/expenses", response_model=HouseholdExpensePage)
def list_expenses(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1),
    db: Session = Depends(get_db),
):
    start = end = None
    if year is not None:
        start, end = household_service.period(year, month)

    query = HouseholdRepository(db).query_expenses(category_id=category_id, start=start, end=end)
    result = paginate_query(query, page=page, page_size=min(limit, settings.max_page_size))
    return HouseholdExpensePage(
        items=[HouseholdExpenseResponse.model_validate(expense) for expense in result.items],
        pagination=pagination_of(result),
    )


@router.post("/expenses", response_model=HouseholdExpenseResponse, status_code=201)
def create_expense(body: HouseholdExpenseCreate, request: Request, db: Session = Depends(get_db)):
    repo = HouseholdRepository(db)
    with transaction(db, get_request_id(request)):
        if body.category_id is not None:
            _get_category(repo, body.category_id)
        expense = repo.create_expense(**{**body.model_dump(), "amount": to_money(body.amount)})
    return expense


@router.get("/expenses/{expense_id}", response_model=HouseholdExpenseResponse)
def get_expense(expense_id: int, db: Session = Depends(get_db)):
    return _get_expense(HouseholdRepository(db), expense_id)


@router.put("/expenses/{expense_id}", response_model=HouseholdExpenseResponse)
def update_expense(expense_id: int, body: HouseholdExpenseUpdate, request: Request, db: Session = Depends(get_db)):
    repo = HouseholdRepository(db)
    with transaction(db, get_request_id(request)):
        expense = _get_expense(repo, expense_id)
        for name, value in body.model_dump(exclude_unset=True).items():
            setattr(expense, name, to_money(value) if name == "amount" and value is not None else value)
    return expense


@router.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(expense_id: int, request: Request, db: Session = Depends(get_db)):
    repo = HouseholdRepository(db)
    with transaction(db, get_request_id(request)):
        repo.delete_expense(_get_expense(repo, expense_id))
    return Response(status_code=204)


@router.get("/stats", response_model=MonthSummaryResponse)
def month_stats(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    today = date_utils.today()
    return household_service.month_summary(db, year or today.year, month or today.month)
