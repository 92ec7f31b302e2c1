"""Batch import of payment items from CSV / Excel"""

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.orm import Session

from woyu_finance.api.dependencies import get_request_id
from woyu_finance.api.errors import transaction
from woyu_finance.api.v1.schemas import (
    ImportExecuteRequest,
    ImportExecuteResponse,
    ImportPreviewResponse,
    ImportRecordSchema,
    ImportRowSchema,
)
from woyu_finance.domain.importing import parse_import_file
from woyu_finance.domain.models import ImportRecord
from woyu_finance.infrastructure.database.session import get_db
from woyu_finance.services.batch_import import execute_import

router = APIRouter()


@router.post("/batch-import/preview", response_model=ImportPreviewResponse)
def preview_import(file: UploadFile = File(...)):
    """Parse and validate an uploaded file without writing anything"""
    records = parse_import_file(file.file.read(), file.filename or "")
    valid = sum(1 for r in records if r.is_valid)
    return ImportPreviewResponse(
        total_records=len(records),
        valid_records=valid,
        invalid_records=len(records) - valid,
        records=[ImportRecordSchema.model_validate(r) for r in records],
    )


@router.post("/batch-import/execute", response_model=ImportExecuteResponse)
def execute_batch_import(body: ImportExecuteRequest, request: Request, db: Session = Depends(get_db)):
    """Import previewed records; each row succeeds or fails on its own"""
    records = [
        ImportRecord(**r.model_dump(exclude={"is_valid", "errors"}))
        for r in body.records
    ]
    with transaction(db, get_request_id(request)):
        result = execute_import(db, records)

    return ImportExecuteResponse(
        success=result.success,
        failed=result.failed,
        details=[
            ImportRowSchema(
                item_name=row.record.item_name,
                success=row.success,
                error=row.error,
                item_id=row.item_id,
                payment_id=row.payment_id,
            )
            for row in result.details
        ],
    )
