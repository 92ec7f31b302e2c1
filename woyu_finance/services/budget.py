"""Budget plans, budget items, and conversion of budget items into payment items"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from woyu_finance.domain.exceptions import AlreadyConvertedError, InvalidInputError, NotFoundError
from woyu_finance.domain.models import PaymentType, to_money
from woyu_finance.infrastructure.database.models import BudgetItem, BudgetPlan, PaymentItem
from woyu_finance.infrastructure.database.repositories import BudgetRepository
from woyu_finance.infrastructure.observability.metrics import budget_conversion_counter
from woyu_finance.services.items import create_item
from woyu_finance.utils import date_utils

logger = logging.getLogger(__name__)

MONEY_FIELDS = ("total_budget", "planned_amount", "actual_amount", "installment_amount")


def _money_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        name: to_money(value) if name in MONEY_FIELDS and value is not None else value
        for name, value in fields.items()
    }


def _apply(entity, fields: Dict[str, Any]) -> None:
    for name, value in _money_values(fields).items():
        setattr(entity, name, value)


def _check_dates(fields: Dict[str, Any]) -> None:
    start, end = fields.get("start_date"), fields.get("end_date")
    if start is not None and end is not None and end < start:
        raise InvalidInputError("End date cannot be before start date")


def get_plan(db: Session, plan_id: int) -> BudgetPlan:
    plan = BudgetRepository(db).get_plan(plan_id)
    if plan is None:
        raise NotFoundError("Budget plan", plan_id)
    return plan


def create_plan(db: Session, fields: Dict[str, Any]) -> BudgetPlan:
    _check_dates(fields)
    return BudgetRepository(db).create_plan(**_money_values({"total_budget": 0, **fields}))


def update_plan(db: Session, plan_id: int, fields: Dict[str, Any]) -> BudgetPlan:
    plan = get_plan(db, plan_id)
    _check_dates({"start_date": plan.start_date, "end_date": plan.end_date, **fields})
    _apply(plan, fields)
    db.flush()
    return plan


def delete_plan(db: Session, plan_id: int) -> None:
    get_plan(db, plan_id).soft_delete()
    db.flush()


def recompute_actual_spent(db: Session, plan_id: int) -> BudgetPlan:
    """actual_spent = sum of actual amounts over the plan's live items"""
    repo = BudgetRepository(db)
    plan = get_plan(db, plan_id)
    plan.actual_spent = to_money(repo.sum_actual(plan_id))
    db.flush()
    return plan


def get_item(db: Session, item_id: int) -> BudgetItem:
    item = BudgetRepository(db).get_item(item_id)
    if item is None:
        raise NotFoundError("Budget item", item_id)
    return item


def create_budget_item(db: Session, plan_id: int, fields: Dict[str, Any]) -> BudgetItem:
    get_plan(db, plan_id)
    _check_dates(fields)
    item = BudgetRepository(db).create_item(budget_plan_id=plan_id, **_money_values(fields))
    recompute_actual_spent(db, plan_id)
    return item


def update_budget_item(db: Session, item_id: int, fields: Dict[str, Any]) -> BudgetItem:
    item = get_item(db, item_id)
    _check_dates({"start_date": item.start_date, "end_date": item.end_date, **fields})
    _apply(item, fields)
    db.flush()
    recompute_actual_spent(db, item.budget_plan_id)
    return item


def delete_budget_item(db: Session, item_id: int) -> None:
    item = get_item(db, item_id)
    item.soft_delete()
    db.flush()
    recompute_actual_spent(db, item.budget_plan_id)


def convert_budget_item(
    db: Session,
    item_id: int,
    user_info: Optional[str] = None,
) -> Tuple[PaymentItem, BudgetItem]:
    """
    Turn a budget item into a payment item, at most once.

    The budget item row is locked so two concurrent conversions cannot both
    see converted_to_payment = False.
    """
    repo = BudgetRepository(db)
    budget_item = repo.get_item(item_id, for_update=True)
    if budget_item is None:
        raise NotFoundError("Budget item", item_id)
    if budget_item.converted_to_payment:
        raise AlreadyConvertedError(item_id)

    plan = repo.get_plan(budget_item.budget_plan_id)
    start_date = budget_item.start_date or budget_item.end_date or date_utils.today()
    notes = f"[預算轉換] {budget_item.notes}" if budget_item.notes else "[預算轉換項目]"

    fields = {
        "item_name": budget_item.item_name,
        "project_id": plan.project_id if plan else None,
        "category_id": budget_item.category_id,
        "total_amount": budget_item.planned_amount,
        "start_date": start_date,
        "end_date": budget_item.end_date if budget_item.end_date and budget_item.end_date >= start_date else None,
        "priority": budget_item.priority,
        "notes": notes,
        "payment_type": PaymentType.SINGLE,
    }
    if budget_item.payment_type == PaymentType.INSTALLMENT and budget_item.installment_count:
        fields.update(
            payment_type=PaymentType.INSTALLMENT,
            installment_count=budget_item.installment_count,
            installment_amount=budget_item.installment_amount,
        )
    elif budget_item.payment_type == PaymentType.MONTHLY:
        fields["payment_type"] = PaymentType.MONTHLY

    payment_item = create_item(db, fields, user_info=user_info)

    budget_item.converted_to_payment = True
    budget_item.linked_payment_item_id = payment_item.id
    budget_item.conversion_date = datetime.now(timezone.utc)
    db.flush()

    budget_conversion_counter.inc()
    logger.info(
        "Budget item converted",
        extra={"budget_item_id": budget_item.id, "payment_item_id": payment_item.id},
    )
    return payment_item, budget_item
