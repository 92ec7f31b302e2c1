"""Budget plan and budget item endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from woyu_finance.api.dependencies import get_request_id
from woyu_finance.api.errors import transaction
from woyu_finance.api.v1.schemas import (
    BudgetConversionResponse,
    BudgetItemCreate,
    BudgetItemResponse,
    BudgetItemUpdate,
    BudgetPlanCreate,
    BudgetPlanResponse,
    BudgetPlanUpdate,
    PaymentItemResponse,
)
from woyu_finance.infrastructure.database.models import BudgetPlan
from woyu_finance.infrastructure.database.repositories import BudgetRepository
from woyu_finance.infrastructure.database.session import get_db
from woyu_finance.services import budget as budget_service

router = APIRouter()


def to_response(db: Session, plan: BudgetPlan) -> BudgetPlanResponse:
    """Plan with its live (non-deleted) items"""
    items = BudgetRepository(db).list_items(plan.id)
    response = BudgetPlanResponse.model_validate(plan)
    response.items = [BudgetItemResponse.model_validate(item) for item in items]
    return response


@router.get("/plans", response_model=List[BudgetPlanResponse])
def list_plans(
    project_id: Optional[int] = Query(None, alias="projectId"),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return [to_response(db, plan) for plan in BudgetRepository(db).list_plans(project_id=project_id, status=status)]


@router.post("/plans", response_model=BudgetPlanResponse, status_code=201)
def create_plan(body: BudgetPlanCreate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        plan = budget_service.create_plan(db, body.model_dump())
    return to_response(db, plan)


@router.get("/plans/{plan_id}", response_model=BudgetPlanResponse)
def get_plan(plan_id: int, db: Session = Depends(get_db)):
    return to_response(db, budget_service.get_plan(db, plan_id))


@router.put("/plans/{plan_id}", response_model=BudgetPlanResponse)
def update_plan(plan_id: int, body: BudgetPlanUpdate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        plan = budget_service.update_plan(db, plan_id, body.model_dump(exclude_unset=True))
    return to_response(db, plan)


@router.delete("/plans/{plan_id}", status_code=204)
def delete_plan(plan_id: int, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        budget_service.delete_plan(db, plan_id)
    return Response(status_code=204)


@router.get("/plans/{plan_id}/items", response_model=List[BudgetItemResponse])
def list_items(plan_id: int, db: Session = Depends(get_db)):
    budget_service.get_plan(db, plan_id)
    return BudgetRepository(db).list_items(plan_id)


@router.post("/plans/{plan_id}/items", response_model=BudgetItemResponse, status_code=201)
def create_item(plan_id: int, body: BudgetItemCreate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        item = budget_service.create_budget_item(db, plan_id, body.model_dump())
    return item


@router.get("/items/{item_id}", response_model=BudgetItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return budget_service.get_item(db, item_id)


@router.put("/items/{item_id}", response_model=BudgetItemResponse)
def update_item(item_id: int, body: BudgetItemUpdate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        item = budget_service.update_budget_item(db, item_id, body.model_dump(exclude_unset=True))
    return item


@router.delete("/items/{item_id}", status_code=204)
def delete_item(item_id: int, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        budget_service.delete_budget_item(db, item_id)
    return Response(status_code=204)


@router.post("/items/{item_id}/convert", response_model=BudgetConversionResponse, status_code=201)
def convert_item(item_id: int, request: Request, db: Session = Depends(get_db)):
    """Create a payment item from a budget item; a second conversion is a 409"""
    with transaction(db, get_request_id(request)):
        payment_item, budget_item = budget_service.convert_budget_item(db, item_id)
    return BudgetConversionResponse(
        payment_item=PaymentItemResponse.model_validate(payment_item),
        budget_item=BudgetItemResponse.model_validate(budget_item),
    )
