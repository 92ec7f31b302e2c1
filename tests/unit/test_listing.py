"""Unit tests for in-memory filtering, sorting and pagination"""

import pytest
from datetime import date
from woyu_finance.domain.exceptions import InvalidInputError
from woyu_finance.domain.listing import filter_items, paginate_items, sort_items
from woyu_finance.domain.models import FilterCriteria


@pytest.fixture
def items() -> list[dict]:
    return [
        {"id": 1, "itemName": "水電工程", "totalAmount": "5000", "startDate": "2024-03-01", "status": "pending",
         "priority": 2, "projectName": "浯島文旅", "notes": None},
        {"id": 2, "itemName": "冷氣維修", "totalAmount": "1200", "startDate": "2024-01-10", "endDate": "2024-02-01",
         "status": "overdue", "priority": 1, "projectName": "民宿", "notes": "二樓"},
        {"id": 3, "itemName": "網路費", "totalAmount": "1200", "startDate": "2024-02-15", "status": "paid",
         "priority": 3, "projectName": "浯島文旅", "notes": None},
        {"id": 4, "itemName": "舊帳", "totalAmount": "100", "startDate": "2024-02-20", "status": "partial",
         "priority": 1, "projectName": "民宿", "notes": None, "isDeleted": True},
    ]


def ids(rows) -> list[int]:
    return [row["id"] for row in rows]


def test_filter_hides_deleted_by_default(items):
    assert ids(filter_items(items, FilterCriteria())) == [1, 2, 3]
    assert ids(filter_items(items, FilterCriteria(include_deleted=True))) == [1, 2, 3, 4]


def test_filter_search_matches_name_notes_and_project(items):
    assert ids(filter_items(items, FilterCriteria(search="二樓"))) == [2]
    assert ids(filter_items(items, FilterCriteria(search="民宿"))) == [2]
    assert ids(filter_items(items, FilterCriteria(search="網路"))) == [3]


def test_filter_due_date_range_uses_end_date(items):
    criteria = FilterCriteria(start_date=date(2024, 2, 1), end_date=date(2024, 2, 28))
    assert ids(filter_items(items, criteria)) == [2, 3]


def test_filter_is_idempotent(items):
    criteria = FilterCriteria(search="浯島")
    once = filter_items(items, criteria)
    assert filter_items(once, criteria) == once


def test_sort_by_amount_is_stable(items):
    rows = sort_items(filter_items(items, FilterCriteria()), key="amount")
    assert ids(rows) == [2, 3, 1]

    rows = sort_items(filter_items(items, FilterCriteria()), key="amount", direction="desc")
    assert ids(rows) == [1, 2, 3]


def test_sort_by_status_puts_overdue_first(items):
    rows = sort_items(items, key="status")
    assert ids(rows) == [2, 1, 4, 3]


def test_sort_by_due_date(items):
    assert ids(sort_items(items, key="due_date")) == [2, 3, 4, 1]


def test_sort_rejects_unknown_key(items):
    with pytest.raises(InvalidInputError):
        sort_items(items, key="colour")
    with pytest.raises(InvalidInputError):
        sort_items(items, key="amount", direction="sideways")


def test_pages_reconstruct_input():
    rows = list(range(23))
    pages = [paginate_items(rows, page=n, page_size=10) for n in (1, 2, 3)]

    assert [len(p.items) for p in pages] == [10, 10, 3]
    assert sum((p.items for p in pages), []) == rows
    assert pages[0].total_pages == 3
    assert pages[0].has_next and not pages[0].has_previous
    assert pages[2].has_previous and not pages[2].has_next


def test_page_past_end_is_empty():
    page = paginate_items([1, 2, 3], page=5, page_size=2)
    assert page.items == []
    assert page.total_items == 3


def test_empty_list_has_no_pages():
    page = paginate_items([], page=1, page_size=10)
    assert page.total_pages == 0
    assert not page.has_next


def test_invalid_page_arguments():
    with pytest.raises(InvalidInputError):
        paginate_items([1], page=0)
    with pytest.raises(InvalidInputError):
        paginate_items([1], page_size=0)
