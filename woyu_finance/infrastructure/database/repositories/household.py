"""Data access layer for household categories, budgets, and expenses"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from woyu_finance.infrastructure.database.models import HouseholdBudget, HouseholdCategory, HouseholdExpense


class HouseholdRepository:
    """Repository for the household ledger"""

    def __init__(self, db: Session):
        self.db = db

    # Categories

    def list_categories(self, include_inactive: bool = False) -> List[HouseholdCategory]:
        query = self.db.query(HouseholdCategory)
        if not include_inactive:
            query = query.filter(HouseholdCategory.is_active.is_(True))
        return query.order_by(HouseholdCategory.category_name).all()

    def get_category(self, category_id: int) -> Optional[HouseholdCategory]:
        return self.db.query(HouseholdCategory).filter(HouseholdCategory.id == category_id).first()

    def create_category(self, **fields: Any) -> HouseholdCategory:
        category = HouseholdCategory(**fields)
        self.db.add(category)
        self.db.flush()
        return category

    # Budgets

    def list_budgets(self, year: Optional[int] = None, month: Optional[int] = None) -> List[HouseholdBudget]:
        query = self.db.query(HouseholdBudget).filter(HouseholdBudget.is_active.is_(True))
        if year is not None:
            query = query.filter(HouseholdBudget.year == year)
        if month is not None:
            query = query.filter(HouseholdBudget.month == month)
        return query.order_by(HouseholdBudget.year, HouseholdBudget.month, HouseholdBudget.category_id).all()

    def get_budget(self, category_id: int, year: int, month: int) -> Optional[HouseholdBudget]:
        return (
            self.db.query(HouseholdBudget)
            .filter(
                HouseholdBudget.category_id == category_id,
                HouseholdBudget.year == year,
                HouseholdBudget.month == month,
            )
            .first()
        )

    def upsert_budget(self, category_id: int, year: int, month: int, budget_amount: Decimal, notes: Optional[str] = None) -> HouseholdBudget:
        """One budget row per (category, year, month); later writes replace the amount"""
        budget = self.get_budget(category_id, year, month)
        if budget is None:
            budget = HouseholdBudget(category_id=category_id, year=year, month=month, budget_amount=budget_amount)
            self.db.add(budget)
        else:
            budget.budget_amount = budget_amount
            budget.is_active = True
        budget.notes = notes
        self.db.flush()
        return budget

    def sum_budgets(self, start: date, end: date, category_id: Optional[int] = None) -> Decimal:
        """Budget total over the months in [start, end)"""
        query = self.db.query(func.coalesce(func.sum(HouseholdBudget.budget_amount), 0)).filter(
            HouseholdBudget.is_active.is_(True),
            HouseholdBudget.year * 12 + HouseholdBudget.month >= start.year * 12 + start.month,
            HouseholdBudget.year * 12 + HouseholdBudget.month < end.year * 12 + end.month,
        )
        if category_id is not None:
            query = query.filter(HouseholdBudget.category_id == category_id)
        return Decimal(str(query.scalar()))

    # Expenses

    def query_expenses(
        self,
        category_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Query:
        query = self.db.query(HouseholdExpense)
        if category_id is not None:
            query = query.filter(HouseholdExpense.category_id == category_id)
        if start is not None:
            query = query.filter(HouseholdExpense.date >= start)
        if end is not None:
            query = query.filter(HouseholdExpense.date < end)
        return query.order_by(HouseholdExpense.date.desc(), HouseholdExpense.id.desc())

    def get_expense(self, expense_id: int) -> Optional[HouseholdExpense]:
        return self.db.query(HouseholdExpense).filter(HouseholdExpense.id == expense_id).first()

    def create_expense(self, **fields: Any) -> HouseholdExpense:
        expense = HouseholdExpense(**fields)
        self.db.add(expense)
        self.db.flush()
        return expense

    def delete_expense(self, expense: HouseholdExpense) -> None:
        self.db.delete(expense)
        self.db.flush()

    def expense_totals(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        category_id: Optional[int] = None,
    ) -> Tuple[Decimal, int]:
        """(sum, count) of expenses in [start, end)"""
        query = self.db.query(
            func.coalesce(func.sum(HouseholdExpense.amount), 0),
            func.count(HouseholdExpense.id),
        )
        if category_id is not None:
            query = query.filter(HouseholdExpense.category_id == category_id)
        if start is not None:
            query = query.filter(HouseholdExpense.date >= start)
        if end is not None:
            query = query.filter(HouseholdExpense.date < end)
        total, count = query.one()
        return Decimal(str(total)), count

    def expenses_by_category(self, start: date, end: date) -> Dict[Optional[int], Tuple[Decimal, int]]:
        """SUM / COUNT grouped by category for expenses in [start, end)"""
        rows = (
            self.db.query(
                HouseholdExpense.category_id,
                func.coalesce(func.sum(HouseholdExpense.amount), 0),
                func.count(HouseholdExpense.id),
            )
            .filter(HouseholdExpense.date >= start, HouseholdExpense.date < end)
            .group_by(HouseholdExpense.category_id)
            .all()
        )
        return {category_id: (Decimal(str(total)), count) for category_id, total, count in rows}
