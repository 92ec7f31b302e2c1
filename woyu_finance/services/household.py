"""Household ledger aggregates"""

from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from woyu_finance.domain.exceptions import NotFoundError
from woyu_finance.domain.models import to_money
from woyu_finance.infrastructure.database.repositories import HouseholdRepository
from woyu_finance.utils import date_utils


def period(year: int, month: Optional[int]):
    """[start, end) covering one month, or the whole year when month is None"""
    if month is None:
        return date_utils.month_bounds(year, 1)[0], date_utils.month_bounds(year, 12)[1]
    return date_utils.month_bounds(year, month)


def category_stats(db: Session, category_id: int, year: int, month: Optional[int] = None) -> Dict[str, Any]:
    repo = HouseholdRepository(db)
    category = repo.get_category(category_id)
    if category is None:
        raise NotFoundError("Household category", category_id)

    start, end = period(year, month)
    budget = repo.sum_budgets(start, end, category_id=category_id)
    spent, count = repo.expense_totals(start, end, category_id=category_id)

    return {
        "category_id": category.id,
        "category_name": category.category_name,
        "budget": to_money(budget),
        "total_expenses": to_money(spent),
        "remaining": to_money(budget - spent),
        "expense_count": count,
    }


def month_summary(db: Session, year: int, month: int) -> Dict[str, Any]:
    """Budget vs. spend for a month, broken down per category"""
    repo = HouseholdRepository(db)
    start, end = period(year, month)

    by_category = repo.expenses_by_category(start, end)
    budgets = {b.category_id: Decimal(b.budget_amount) for b in repo.list_budgets(year=year, month=month)}
    names = {c.id: c.category_name for c in repo.list_categories(include_inactive=True)}

    breakdown = []
    for category_id in sorted(set(by_category) | set(budgets), key=lambda c: (c is None, c or 0)):
        spent, count = by_category.get(category_id, (Decimal("0"), 0))
        budget = budgets.get(category_id, Decimal("0"))
        breakdown.append({
            "category_id": category_id,
            "category_name": names.get(category_id, "未分類"),
            "budget": to_money(budget),
            "total_expenses": to_money(spent),
            "remaining": to_money(budget - spent),
            "expense_count": count,
        })

    total_budget = sum(budgets.values(), Decimal("0"))
    total_spent = sum((spent for spent, _ in by_category.values()), Decimal("0"))
    return {
        "year": year,
        "month": month,
        "total_budget": to_money(total_budget),
        "total_expenses": to_money(total_spent),
        "remaining": to_money(total_budget - total_spent),
        "categories": breakdown,
    }
