"""In-memory filter, sort, and paginate helpers for payment item lists"""

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Sequence

from woyu_finance.domain.exceptions import InvalidInputError
from woyu_finance.domain.models import FilterCriteria, Page, PaymentStatus

# Unknown statuses sort alongside pending
STATUS_ORDER = {
    PaymentStatus.OVERDUE: 0,
    PaymentStatus.PENDING: 1,
    PaymentStatus.PARTIAL: 2,
    PaymentStatus.PAID: 3,
}

SORT_KEYS = ("due_date", "amount", "name", "project", "priority", "status", "created_at")


def _snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def get_field(item: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping (snake_case or camelCase key) or an object"""
    if isinstance(item, Mapping):
        if name in item:
            return item[name]
        return item.get(_snake_to_camel(name), default)
    return getattr(item, name, default)


def _as_date(value: Any):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _as_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value)) if value not in (None, "") else Decimal("0")
    except InvalidOperation:
        raise InvalidInputError(f"Invalid amount: {value!r}")


def due_date_of(item: Any):
    return _as_date(get_field(item, "end_date")) or _as_date(get_field(item, "start_date"))


def _matches(item: Any, criteria: FilterCriteria) -> bool:
    if not criteria.include_deleted and get_field(item, "is_deleted", False):
        return False

    if criteria.search:
        needle = criteria.search.lower()
        haystacks = (
            get_field(item, "item_name"),
            get_field(item, "notes"),
            get_field(item, "project_name"),
        )
        if not any(h and needle in str(h).lower() for h in haystacks):
            return False

    if criteria.project_id is not None and get_field(item, "project_id") != criteria.project_id:
        return False
    if criteria.category_id is not None and get_field(item, "category_id") != criteria.category_id:
        return False
    if criteria.status is not None and get_field(item, "status") != criteria.status:
        return False
    if criteria.payment_type is not None and get_field(item, "payment_type") != criteria.payment_type:
        return False

    if criteria.start_date is not None or criteria.end_date is not None:
        due = due_date_of(item)
        if due is None:
            return False
        if criteria.start_date is not None and due < criteria.start_date:
            return False
        if criteria.end_date is not None and due > criteria.end_date:
            return False

    return True


def filter_items(items: Sequence[Any], criteria: FilterCriteria) -> List[Any]:
    """Keep items matching every predicate in criteria; preserves input order"""
    return [item for item in items if _matches(item, criteria)]


_SORT_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "due_date": lambda i: due_date_of(i) or date.min,
    "amount": lambda i: _as_decimal(get_field(i, "total_amount")),
    "name": lambda i: str(get_field(i, "item_name") or ""),
    "project": lambda i: str(get_field(i, "project_name") or ""),
    "priority": lambda i: get_field(i, "priority") or 0,
    "status": lambda i: STATUS_ORDER.get(get_field(i, "status"), 1),
    "created_at": lambda i: get_field(i, "created_at") or datetime.min,
}


def sort_items(items: Sequence[Any], key: str = "due_date", direction: str = "asc") -> List[Any]:
    """
    Stable sort by one of SORT_KEYS.

    Ties keep their input order in both directions, so descending order is not
    simply the ascending result reversed.
    """
    if key not in _SORT_FIELDS:
        raise InvalidInputError(f"Unsupported sort key: {key}")
    if direction not in ("asc", "desc"):
        raise InvalidInputError(f"Unsupported sort direction: {direction}")

    key_fn = _SORT_FIELDS[key]
    # sorted() with reverse=True keeps equal elements in original order
    return sorted(items, key=key_fn, reverse=(direction == "desc"))


def paginate_items(items: Sequence[Any], page: int = 1, page_size: int = 50) -> Page:
    """Slice a 1-based page out of items and report totals"""
    if page < 1:
        raise InvalidInputError("page must be >= 1")
    if page_size < 1:
        raise InvalidInputError("page_size must be >= 1")

    total_items = len(items)
    total_pages = math.ceil(total_items / page_size)
    offset = (page - 1) * page_size

    return Page(
        items=list(items[offset:offset + page_size]),
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
    )
