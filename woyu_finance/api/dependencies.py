"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Header, Request

from woyu_finance.config import settings
from woyu_finance.infrastructure.uploads import ReceiptStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: Optional[int] = Header(None)) -> int:
    """Acting user; identity is established upstream and forwarded in X-User-Id"""
    return x_user_id if x_user_id is not None else settings.default_user_id


def get_receipt_store() -> ReceiptStore:
    """Provide receipt storage rooted at the configured upload directory"""
    return ReceiptStore(settings.upload_dir)
