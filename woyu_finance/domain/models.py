"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize to two decimal places (NT$ cents)"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    """Decimal-as-string wire format, e.g. "1000.00" """
    return str(to_money(value if value is not None else 0))


class PaymentStatus:
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"

    ALL = (PENDING, PARTIAL, PAID, OVERDUE)


class PaymentType:
    SINGLE = "single"
    MONTHLY = "monthly"
    INSTALLMENT = "installment"

    ALL = (SINGLE, MONTHLY, INSTALLMENT)


class ItemSource:
    MANUAL = "manual"
    AI_SCAN = "ai_scan"
    BATCH_IMPORT = "batch_import"

    ALL = (MANUAL, AI_SCAN, BATCH_IMPORT)


class AmortizationOutcome:
    PAID_OFF = "paid_off"
    # Monthly payment does not cover the interest accrued in the period
    PAYMENT_TOO_LOW = "payment_too_low"
    MAX_PERIODS_REACHED = "max_periods_reached"


@dataclass
class AmortizationEntry:
    """One period of a loan repayment"""

    period: int
    principal_portion: Decimal
    interest_portion: Decimal
    payment: Decimal
    remaining_balance: Decimal


@dataclass
class AmortizationSchedule:
    """Period-by-period breakdown plus why generation stopped"""

    entries: List[AmortizationEntry]
    outcome: str

    @property
    def total_interest(self) -> Decimal:
        return sum((e.interest_portion for e in self.entries), Decimal("0"))

    def head(self, periods: int) -> "AmortizationSchedule":
        return AmortizationSchedule(entries=self.entries[:periods], outcome=self.outcome)


@dataclass
class RiskLevel:
    code: str
    label: str


@dataclass
class FilterCriteria:
    """Conjunctive predicates applied by filter_items"""

    search: Optional[str] = None
    project_id: Optional[int] = None
    category_id: Optional[int] = None
    status: Optional[str] = None
    payment_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    include_deleted: bool = False


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


@dataclass
class ImportRecord:
    """Candidate payment item parsed from a spreadsheet row"""

    item_name: str
    amount: Decimal
    date: Optional[date]
    project_name: str
    category_name: str = ""
    vendor: Optional[str] = None
    notes: Optional[str] = None
    priority: int = 2
    payment_method: Optional[str] = None
    payment_status: str = "未付款"
    payment_date: Optional[date] = None
    payment_notes: Optional[str] = None
    is_valid: bool = False
    errors: List[str] = field(default_factory=list)


@dataclass
class ImportRowResult:
    record: ImportRecord
    success: bool
    error: Optional[str] = None
    item_id: Optional[int] = None
    payment_id: Optional[int] = None


@dataclass
class ImportResult:
    success: int = 0
    failed: int = 0
    details: List[ImportRowResult] = field(default_factory=list)

    def add(self, row: ImportRowResult) -> None:
        if row.success:
            self.success += 1
        else:
            self.failed += 1
        self.details.append(row)


@dataclass
class ReminderCandidate:
    """Unpaid item close to (or past) its due date"""

    item_id: int
    item_name: str
    due_date: date
    outstanding: Decimal
    overdue: bool
    extra: dict = field(default_factory=dict)

    def metadata(self) -> dict[str, Any]:
        return {"paymentId": self.item_id, "dueDate": self.due_date.isoformat(), **self.extra}


@dataclass
class PaymentInput:
    """A payment submitted against a payment item"""

    amount: Decimal
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    receipt_image_url: Optional[str] = None
