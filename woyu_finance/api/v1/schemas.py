"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from woyu_finance.domain.models import format_money

# Decimal in Python, "1000.00" on the wire
Money = Annotated[Decimal, PlainSerializer(format_money, return_type=str, when_used="json")]

PaymentTypeName = Literal["single", "monthly", "installment"]
Priority = Annotated[int, Field(ge=1, le=3)]

# Models below have a field named "date"; annotate through this alias instead of the bare name
OptionalDate = Optional[date]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python; readable from ORM rows"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RequestModel(ApiModel):
    model_config = ConfigDict(extra="forbid")


class Pagination(ApiModel):
    current_page: int
    total_pages: int
    total_items: int
    page_size: int
    has_next_page: bool
    has_previous_page: bool


# Projects & categories


class ProjectCreate(RequestModel):
    project_name: str = Field(..., min_length=1, max_length=255)
    project_type: Literal["general", "business", "rental", "home"] = "general"
    description: Optional[str] = None


class ProjectResponse(ApiModel):
    id: int
    project_name: str
    project_type: str
    description: Optional[str] = None


class CategoryCreate(RequestModel):
    category_name: str = Field(..., min_length=1, max_length=255)
    category_type: Literal["project", "home"] = "project"


class CategoryResponse(ApiModel):
    id: int
    category_name: str
    category_type: str


# Payment items


class PaymentItemFields(RequestModel):
    """Editable payment item fields shared by create and full update"""

    item_name: str = Field(..., min_length=1, max_length=255)
    total_amount: Decimal = Field(..., gt=0)
    item_type: Literal["project", "home"] = "project"
    payment_type: PaymentTypeName = "single"
    installment_count: Optional[int] = Field(None, ge=1)
    installment_amount: Optional[Decimal] = Field(None, gt=0)
    start_date: date
    end_date: Optional[date] = None
    priority: Priority = 1
    notes: Optional[str] = None
    project_id: Optional[int] = None
    category_id: Optional[int] = None


class PaymentItemCreate(PaymentItemFields):
    source: Literal["manual", "ai_scan"] = "manual"


class PaymentItemUpdate(PaymentItemFields):
    change_reason: Optional[str] = None


class PaymentItemPatch(RequestModel):
    """Partial update; merged over the current item and re-validated as a full update"""

    item_name: Optional[str] = None
    total_amount: Optional[Decimal] = None
    item_type: Optional[str] = None
    payment_type: Optional[str] = None
    installment_count: Optional[int] = None
    installment_amount: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    priority: Optional[int] = None
    notes: Optional[str] = None
    project_id: Optional[int] = None
    category_id: Optional[int] = None
    change_reason: Optional[str] = None


class PaymentItemResponse(ApiModel):
    id: int
    item_name: str
    total_amount: Money
    paid_amount: Money
    remaining_amount: Money
    status: str
    item_type: str
    payment_type: str
    installment_count: Optional[int] = None
    installment_amount: Optional[Money] = None
    start_date: date
    end_date: Optional[date] = None
    due_date: date
    priority: int
    notes: Optional[str] = None
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    source: str
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentItemPage(ApiModel):
    items: List[PaymentItemResponse]
    pagination: Pagination


# Payment records


class PaymentRecordUpdate(RequestModel):
    amount_paid: Optional[Decimal] = Field(None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    receipt_image_url: Optional[str] = None


class PaymentRecordResponse(ApiModel):
    id: int
    item_id: int
    amount_paid: Money
    payment_date: date
    payment_method: Optional[str] = None
    receipt_image_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentRecordPage(ApiModel):
    items: List[PaymentRecordResponse]
    pagination: Pagination


class AuditLogResponse(ApiModel):
    id: int
    table_name: str
    record_id: int
    action: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    changed_fields: Optional[List[str]] = None
    user_info: Optional[str] = None
    change_reason: Optional[str] = None
    created_at: Optional[datetime] = None


# Batch import


class ImportRecordSchema(ApiModel):
    item_name: str
    amount: Money
    date: OptionalDate = None
    project_name: str
    category_name: str = ""
    vendor: Optional[str] = None
    notes: Optional[str] = None
    priority: int = 2
    payment_method: Optional[str] = None
    payment_status: str = "未付款"
    payment_date: OptionalDate = None
    payment_notes: Optional[str] = None
    is_valid: bool = False
    errors: List[str] = Field(default_factory=list)


class ImportRecordIn(ImportRecordSchema):
    """A previewed record sent back for execution; validity is recomputed server-side"""

    model_config = ConfigDict(extra="forbid")


class ImportPreviewResponse(ApiModel):
    total_records: int
    valid_records: int
    invalid_records: int
    records: List[ImportRecordSchema]


class ImportExecuteRequest(RequestModel):
    records: List[ImportRecordIn] = Field(..., min_length=1)


class ImportRowSchema(ApiModel):
    item_name: str
    success: bool
    error: Optional[str] = None
    item_id: Optional[int] = None
    payment_id: Optional[int] = None


class ImportExecuteResponse(ApiModel):
    success: int
    failed: int
    details: List[ImportRowSchema]


# Notifications


class NotificationCreate(RequestModel):
    type: str = Field("custom", min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    priority: Literal["low", "medium", "high"] = "medium"
    action_url: Optional[str] = None
    payment_item_id: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class NotificationResponse(ApiModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    priority: str
    is_read: bool
    read_at: Optional[datetime] = None
    action_url: Optional[str] = None
    payment_item_id: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("extra", "metadata"))
    created_at: Optional[datetime] = None


class UnreadCountResponse(ApiModel):
    count: int


class MarkAllReadResponse(ApiModel):
    updated: int


class ReminderRunResponse(ApiModel):
    overdue_marked: int
    created: int


class NotificationSettingsResponse(ApiModel):
    user_id: int
    email_enabled: bool
    line_enabled: bool
    browser_enabled: bool
    payment_due_reminder: bool
    payment_overdue_alert: bool
    system_updates: bool
    weekly_report: bool
    daily_digest_time: str
    weekly_report_day: str
    advance_warning_days: int


class NotificationSettingsUpdate(RequestModel):
    email_enabled: Optional[bool] = None
    line_enabled: Optional[bool] = None
    browser_enabled: Optional[bool] = None
    payment_due_reminder: Optional[bool] = None
    payment_overdue_alert: Optional[bool] = None
    system_updates: Optional[bool] = None
    weekly_report: Optional[bool] = None
    daily_digest_time: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    weekly_report_day: Optional[
        Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
    ] = None
    advance_warning_days: Optional[int] = Field(None, ge=0, le=30)


# Loans & investments


class LoanRecordCreate(RequestModel):
    item_name: str = Field(..., min_length=1, max_length=255)
    record_type: Literal["loan", "investment"]
    party_name: str = Field(..., min_length=1, max_length=255)
    party_phone: Optional[str] = None
    principal_amount: Decimal = Field(..., gt=0)
    annual_interest_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    monthly_payment_amount: Optional[Decimal] = Field(None, gt=0)
    start_date: date
    end_date: Optional[date] = None
    status: Literal["active", "completed", "overdue", "cancelled"] = "active"
    notes: Optional[str] = None


class LoanRecordUpdate(RequestModel):
    item_name: Optional[str] = Field(None, min_length=1, max_length=255)
    party_name: Optional[str] = Field(None, min_length=1, max_length=255)
    party_phone: Optional[str] = None
    principal_amount: Optional[Decimal] = Field(None, gt=0)
    annual_interest_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    monthly_payment_amount: Optional[Decimal] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[Literal["active", "completed", "overdue", "cancelled"]] = None
    notes: Optional[str] = None


class LoanRecordResponse(ApiModel):
    id: int
    item_name: str
    record_type: str
    party_name: str
    party_phone: Optional[str] = None
    principal_amount: Money
    annual_interest_rate: Decimal
    monthly_payment_amount: Optional[Money] = None
    start_date: date
    end_date: Optional[date] = None
    total_paid_amount: Money
    status: str
    notes: Optional[str] = None
    risk_level: str
    risk_label: str
    is_high_risk: bool
    monthly_interest: Money
    remaining_principal: Money
    created_at: Optional[datetime] = None


class LoanPaymentCreate(RequestModel):
    amount: Decimal = Field(..., gt=0)
    payment_type: Literal["interest", "principal", "mixed"] = "interest"
    payment_date: Optional[date] = None
    payment_method: str = "bank_transfer"
    notes: Optional[str] = None


class LoanPaymentResponse(ApiModel):
    id: int
    record_id: int
    amount: Money
    payment_type: str
    payment_date: date
    payment_method: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class AmortizationEntrySchema(ApiModel):
    period: int
    principal_portion: Money
    interest_portion: Money
    payment: Money
    remaining_balance: Money


class ScheduleResponse(ApiModel):
    outcome: str
    total_periods: int
    total_interest: Money
    entries: List[AmortizationEntrySchema]


class LoanCalculateRequest(RequestModel):
    principal: Decimal = Field(..., gt=0)
    annual_interest_rate: Decimal = Field(..., ge=0, le=100)
    monthly_payment: Optional[Decimal] = Field(None, gt=0)
    term_months: Optional[int] = Field(None, ge=1, le=360)
    periods: Optional[int] = Field(None, ge=1, le=360)


class LoanCalculateResponse(ApiModel):
    monthly_payment: Money
    monthly_interest: Money
    implied_annual_rate: Decimal
    total_periods: int
    total_interest: Money
    risk_level: str
    risk_label: str
    outcome: str
    schedule: List[AmortizationEntrySchema]


class LoanStatsResponse(ApiModel):
    total_loan_amount: Money
    active_loan_amount: Money
    total_investment_amount: Money
    active_investment_amount: Money
    monthly_interest: Money
    yearly_interest: Money
    high_risk_count: int
    active_count: int


# Budget planning


class BudgetPlanCreate(RequestModel):
    plan_name: str = Field(..., min_length=1, max_length=255)
    plan_type: str = "project"
    project_id: Optional[int] = None
    budget_period: str = "monthly"
    start_date: date
    end_date: date
    total_budget: Decimal = Field(Decimal("0"), ge=0)
    status: Literal["active", "completed", "cancelled"] = "active"


class BudgetPlanUpdate(RequestModel):
    plan_name: Optional[str] = Field(None, min_length=1, max_length=255)
    plan_type: Optional[str] = None
    project_id: Optional[int] = None
    budget_period: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_budget: Optional[Decimal] = Field(None, ge=0)
    status: Optional[Literal["active", "completed", "cancelled"]] = None


class BudgetItemCreate(RequestModel):
    item_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    payment_type: PaymentTypeName = "single"
    planned_amount: Decimal = Field(..., gt=0)
    actual_amount: Optional[Decimal] = Field(None, ge=0)
    installment_count: Optional[int] = Field(None, ge=1)
    installment_amount: Optional[Decimal] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    priority: Priority = 1
    notes: Optional[str] = None


class BudgetItemUpdate(RequestModel):
    item_name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    payment_type: Optional[PaymentTypeName] = None
    planned_amount: Optional[Decimal] = Field(None, gt=0)
    actual_amount: Optional[Decimal] = Field(None, ge=0)
    installment_count: Optional[int] = Field(None, ge=1)
    installment_amount: Optional[Decimal] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    priority: Optional[Priority] = None
    notes: Optional[str] = None


class BudgetItemResponse(ApiModel):
    id: int
    budget_plan_id: int
    category_id: Optional[int] = None
    item_name: str
    description: Optional[str] = None
    payment_type: str
    planned_amount: Money
    actual_amount: Optional[Money] = None
    installment_count: Optional[int] = None
    installment_amount: Optional[Money] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    priority: int
    notes: Optional[str] = None
    converted_to_payment: bool
    linked_payment_item_id: Optional[int] = None
    conversion_date: Optional[datetime] = None


class BudgetPlanResponse(ApiModel):
    id: int
    plan_name: str
    plan_type: str
    project_id: Optional[int] = None
    budget_period: str
    start_date: date
    end_date: date
    total_budget: Money
    actual_spent: Money
    status: str
    items: List[BudgetItemResponse] = Field(default_factory=list)


class BudgetConversionResponse(ApiModel):
    payment_item: PaymentItemResponse
    budget_item: BudgetItemResponse


# Household


class HouseholdCategoryCreate(RequestModel):
    category_name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = None
    is_active: bool = True


class HouseholdCategoryUpdate(RequestModel):
    category_name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    is_active: Optional[bool] = None


class HouseholdCategoryResponse(ApiModel):
    id: int
    category_name: str
    color: Optional[str] = None
    is_active: bool


class HouseholdBudgetUpsert(RequestModel):
    category_id: int
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    budget_amount: Decimal = Field(..., ge=0)
    notes: Optional[str] = None


class HouseholdBudgetResponse(ApiModel):
    id: int
    category_id: int
    year: int
    month: int
    budget_amount: Money
    notes: Optional[str] = None


class HouseholdExpenseCreate(RequestModel):
    category_id: Optional[int] = None
    amount: Decimal = Field(..., gt=0)
    date: date
    payment_method: Optional[str] = None
    description: Optional[str] = Field(None, max_length=255)
    tags: List[str] = Field(default_factory=list)


class HouseholdExpenseUpdate(RequestModel):
    category_id: Optional[int] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    date: OptionalDate = None
    payment_method: Optional[str] = None
    description: Optional[str] = Field(None, max_length=255)
    tags: Optional[List[str]] = None


class HouseholdExpenseResponse(ApiModel):
    id: int
    category_id: Optional[int] = None
    amount: Money
    date: date
    payment_method: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class HouseholdExpensePage(ApiModel):
    items: List[HouseholdExpenseResponse]
    pagination: Pagination


class CategoryStatsResponse(ApiModel):
    category_id: Optional[int] = None
    category_name: str
    budget: Money
    total_expenses: Money
    remaining: Money
    expense_count: int


class MonthSummaryResponse(ApiModel):
    year: int
    month: int
    total_budget: Money
    total_expenses: Money
    remaining: Money
    categories: List[CategoryStatsResponse]
