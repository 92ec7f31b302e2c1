"""Spreadsheet / CSV parsing for batch payment item import"""

import io
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional

import pandas as pd

from woyu_finance.domain.exceptions import UnsupportedFileError
from woyu_finance.domain.models import ImportRecord
from woyu_finance.utils.date_utils import parse_flexible_date

# Accepted headers per field, Chinese first
COLUMN_ALIASES = {
    "item_name": ("項目名稱", "itemName", "Item Name"),
    "amount": ("金額", "amount", "Amount", "總金額", "totalAmount"),
    "date": ("日期", "date", "Date", "付款日期", "paymentDate"),
    "project_name": ("專案", "project", "Project", "專案名稱", "projectName"),
    "category_name": ("分類", "category", "Category", "分類名稱", "categoryName"),
    "vendor": ("廠商", "vendor", "Vendor"),
    "notes": ("備註", "notes", "Notes"),
    "priority": ("優先級", "priority", "Priority"),
    "payment_method": ("付款方式", "paymentMethod", "Payment Method"),
    "payment_status": ("付款狀態", "paymentStatus", "Payment Status"),
    "payment_date": ("付款日期", "paymentDate", "Payment Date"),
    "payment_notes": ("付款備註", "paymentNotes", "Payment Notes"),
}

PAID_STATUSES = {"已付款", "paid", "Paid", "PAID"}

_AMOUNT_NOISE = re.compile(r"[,\$NT\s]")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and value != value:  # NaN from pandas
        return True
    return isinstance(value, str) and not value.strip()


def _pick(row: Mapping[str, Any], field: str) -> Any:
    for header in COLUMN_ALIASES[field]:
        value = row.get(header)
        if not _is_blank(value):
            return value
    return None


def _text(value: Any) -> Optional[str]:
    return None if _is_blank(value) else str(value).strip()


def parse_amount(value: Any) -> Decimal:
    """Strip thousands separators and currency marks; 0 when unparseable"""
    if _is_blank(value):
        return Decimal("0")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    try:
        return Decimal(_AMOUNT_NOISE.sub("", str(value)))
    except InvalidOperation:
        return Decimal("0")


def parse_priority(value: Any) -> int:
    try:
        priority = int(float(value))
    except (TypeError, ValueError):
        return 2
    return max(1, min(3, priority))


def map_row(row: Mapping[str, Any]) -> Optional[ImportRecord]:
    """Map one raw row to an ImportRecord; None when a required column is empty"""
    item_name = _text(_pick(row, "item_name"))
    amount = parse_amount(_pick(row, "amount"))
    row_date = parse_flexible_date(_pick(row, "date"))
    project_name = _text(_pick(row, "project_name"))

    if not item_name or not amount or not row_date or not project_name:
        return None

    return ImportRecord(
        item_name=item_name,
        amount=amount,
        date=row_date,
        project_name=project_name,
        category_name=_text(_pick(row, "category_name")) or "",
        vendor=_text(_pick(row, "vendor")),
        notes=_text(_pick(row, "notes")),
        priority=parse_priority(_pick(row, "priority")),
        payment_method=_text(_pick(row, "payment_method")),
        payment_status=_text(_pick(row, "payment_status")) or "未付款",
        payment_date=parse_flexible_date(_pick(row, "payment_date")),
        payment_notes=_text(_pick(row, "payment_notes")),
    )


def validate_record(record: ImportRecord) -> ImportRecord:
    errors: List[str] = []

    if not record.item_name:
        errors.append("項目名稱不能為空")
    if record.amount is None or record.amount <= 0:
        errors.append("金額必須大於 0")
    if record.date is None:
        errors.append("日期格式錯誤")
    if not record.project_name:
        errors.append("專案名稱不能為空")

    record.errors = errors
    record.is_valid = not errors
    return record


def records_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[ImportRecord]:
    records = []
    for row in rows:
        record = map_row(row)
        if record is not None:
            records.append(validate_record(record))
    return records


def read_frame(content: bytes, filename: str) -> pd.DataFrame:
    extension = filename.lower().rsplit(".", 1)[-1] if "." in filename else ""

    try:
        if extension == "csv":
            frame = pd.read_csv(io.BytesIO(content), encoding="utf-8-sig", dtype=str)
        elif extension in ("xlsx", "xls"):
            frame = pd.read_excel(io.BytesIO(content))
        else:
            raise UnsupportedFileError("不支援的檔案格式。請使用 CSV 或 Excel 檔案。")
    except UnsupportedFileError:
        raise
    except Exception as e:
        raise UnsupportedFileError(f"檔案解析錯誤: {e}") from e

    frame.columns = [str(c).strip() for c in frame.columns]
    return frame


def parse_import_file(content: bytes, filename: str) -> List[ImportRecord]:
    """Parse an uploaded CSV / Excel file into validated import records"""
    frame = read_frame(content, filename)
    rows = frame.to_dict(orient="records")
    return records_from_rows(rows)


def is_paid_status(payment_status: Optional[str]) -> bool:
    return (payment_status or "").strip() in PAID_STATUSES
