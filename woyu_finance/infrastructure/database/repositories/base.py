"""Shared query helpers for repositories"""

import math

from sqlalchemy.orm import Query

from woyu_finance.domain.models import Page


def exclude_deleted(query: Query, model, include_deleted: bool = False) -> Query:
    """Hide soft-deleted rows unless the caller explicitly asks for them"""
    if include_deleted:
        return query
    return query.filter(model.is_deleted.is_(False))


def paginate_query(query: Query, page: int, page_size: int) -> Page:
    """Run a count plus one LIMIT/OFFSET slice and wrap it in a domain Page"""
    total_items = query.order_by(None).count()
    total_pages = math.ceil(total_items / page_size)
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return Page(
        items=items,
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
    )
