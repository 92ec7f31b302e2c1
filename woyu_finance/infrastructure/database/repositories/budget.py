"""Data access layer for budget plans and budget items"""

from decimal import Decimal
from typing import Any, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from woyu_finance.infrastructure.database.models import BudgetItem, BudgetPlan
from woyu_finance.infrastructure.database.repositories.base import exclude_deleted


class BudgetRepository:
    """Repository for budget plans and their items"""

    def __init__(self, db: Session):
        self.db = db

    def list_plans(self, project_id: Optional[int] = None, status: Optional[str] = None) -> List[BudgetPlan]:
        query = exclude_deleted(self.db.query(BudgetPlan), BudgetPlan)
        if project_id is not None:
            query = query.filter(BudgetPlan.project_id == project_id)
        if status:
            query = query.filter(BudgetPlan.status == status)
        return query.order_by(BudgetPlan.start_date.desc(), BudgetPlan.id.desc()).all()

    def get_plan(self, plan_id: int) -> Optional[BudgetPlan]:
        return exclude_deleted(self.db.query(BudgetPlan), BudgetPlan).filter(BudgetPlan.id == plan_id).first()

    def create_plan(self, **fields: Any) -> BudgetPlan:
        plan = BudgetPlan(**fields)
        self.db.add(plan)
        self.db.flush()
        return plan

    def list_items(self, plan_id: int) -> List[BudgetItem]:
        return (
            exclude_deleted(self.db.query(BudgetItem), BudgetItem)
            .filter(BudgetItem.budget_plan_id == plan_id)
            .order_by(BudgetItem.priority.asc(), BudgetItem.id.asc())
            .all()
        )

    def get_item(self, item_id: int, for_update: bool = False) -> Optional[BudgetItem]:
        query = exclude_deleted(self.db.query(BudgetItem), BudgetItem).filter(BudgetItem.id == item_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def create_item(self, **fields: Any) -> BudgetItem:
        item = BudgetItem(**fields)
        self.db.add(item)
        self.db.flush()
        return item

    def sum_actual(self, plan_id: int) -> Decimal:
        """Sum of actual amounts over the plan's non-deleted items (unset counts as 0)"""
        total = (
            exclude_deleted(
                self.db.query(func.coalesce(func.sum(func.coalesce(BudgetItem.actual_amount, 0)), 0)),
                BudgetItem,
            )
            .filter(BudgetItem.budget_plan_id == plan_id)
            .scalar()
        )
        return Decimal(str(total))
