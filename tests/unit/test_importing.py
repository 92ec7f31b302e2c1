"""Unit tests for spreadsheet parsing and validation"""

import pytest
from decimal import Decimal
from datetime import date
from woyu_finance.domain.exceptions import UnsupportedFileError
from woyu_finance.domain.importing import (
    is_paid_status,
    map_row,
    parse_amount,
    parse_import_file,
    parse_priority,
    validate_record,
)
from woyu_finance.domain.models import ImportRecord

CSV_CONTENT = (
    "項目名稱,金額,日期,專案,分類,廠商,付款狀態\n"
    "水電工程,\"12,500\",2024/03/05,浯島文旅,工程,大同水電,已付款\n"
    "冷氣維修,NT$ 3000,2024-03-10,浯島文旅,,,\n"
    ",500,2024-03-11,浯島文旅,,,\n"
).encode("utf-8-sig")


def test_parse_csv_file():
    records = parse_import_file(CSV_CONTENT, "payments.csv")

    # Row without an item name is dropped
    assert len(records) == 2

    first, second = records
    assert first.item_name == "水電工程"
    assert first.amount == Decimal("12500")
    assert first.date == date(2024, 3, 5)
    assert first.project_name == "浯島文旅"
    assert first.category_name == "工程"
    assert first.vendor == "大同水電"
    assert is_paid_status(first.payment_status)
    assert first.is_valid

    assert second.amount == Decimal("3000")
    assert second.category_name == ""
    assert second.payment_status == "未付款"
    assert not is_paid_status(second.payment_status)


def test_unsupported_extension():
    with pytest.raises(UnsupportedFileError):
        parse_import_file(b"anything", "payments.txt")


def test_map_row_accepts_english_headers():
    record = map_row({"Item Name": "Internet", "Amount": 899, "Date": "2024-05-01", "Project": "Home"})

    assert record is not None
    assert record.item_name == "Internet"
    assert record.amount == Decimal("899")
    assert record.priority == 2


def test_map_row_requires_core_columns():
    assert map_row({"項目名稱": "水費", "金額": "300", "日期": "bad", "專案": "家"}) is None


def test_parse_amount():
    assert parse_amount("1,234.50") == Decimal("1234.50")
    assert parse_amount("$99") == Decimal("99")
    assert parse_amount("abc") == Decimal("0")
    assert parse_amount(None) == Decimal("0")


def test_parse_priority_is_clamped():
    assert parse_priority("5") == 3
    assert parse_priority(0) == 1
    assert parse_priority("high") == 2


def test_validate_record_collects_errors():
    record = validate_record(ImportRecord(item_name="", amount=Decimal("0"), date=None, project_name=""))

    assert not record.is_valid
    assert len(record.errors) == 4
