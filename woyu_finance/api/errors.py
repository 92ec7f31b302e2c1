"""Translation of domain exceptions into HTTP responses"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from woyu_finance.domain.exceptions import (
    ConflictError,
    DomainException,
    NotFoundError,
)


def _body(message: str, errors=None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def status_for(exc: DomainException) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    # InvalidInputError and its subclasses
    return 400


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    errors = getattr(exc, "errors", None)
    return JSONResponse(status_code=status_for(exc), content=_body(str(exc), errors))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=_body("Invalid request data", errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_body(str(exc.detail)), headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    logging.error(f"Unhandled error: {exc}", extra={"request_id": request_id}, exc_info=exc)
    return JSONResponse(status_code=500, content=_body("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


@contextmanager
def transaction(db: Session, request_id: str) -> Iterator[None]:
    """
    Commit the session when the block finishes.

    Domain errors roll back and propagate to domain_exception_handler; anything
    else rolls back, is logged, and becomes an opaque 500.
    """
    try:
        yield
        db.commit()

    except (DomainException, HTTPException):
        db.rollback()
        raise

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id}, exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
