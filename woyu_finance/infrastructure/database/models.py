"""SQLAlchemy ORM models"""

from datetime import datetime, timezone
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

Money = Numeric(12, 2)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class SoftDeleteMixin:
    """Rows are hidden rather than purged; see repositories.base.exclude_deleted"""

    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.deleted_at = datetime.now(timezone.utc)

    def restore(self) -> None:
        self.is_deleted = False
        self.deleted_at = None


class PaymentProject(SoftDeleteMixin, TimestampMixin, Base):
    """Project (or household) that payment items belong to"""

    __tablename__ = "payment_projects"

    id = Column(Integer, primary_key=True)
    project_name = Column(String(255), nullable=False)
    project_type = Column(String(20), nullable=False, default="general")
    description = Column(Text, nullable=True)


class DebtCategory(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "debt_categories"

    id = Column(Integer, primary_key=True)
    category_name = Column(String(255), nullable=False)
    category_type = Column(String(20), nullable=False, default="project")


class PaymentItem(SoftDeleteMixin, TimestampMixin, Base):
    """Planned obligation tracked against partial/full settlement"""

    __tablename__ = "payment_items"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("payment_projects.id"), nullable=True, index=True)
    category_id = Column(Integer, ForeignKey("debt_categories.id"), nullable=True, index=True)
    item_name = Column(String(255), nullable=False)
    total_amount = Column(Money, nullable=False)
    paid_amount = Column(Money, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending", index=True)
    item_type = Column(String(20), nullable=False, default="project")
    payment_type = Column(String(20), nullable=False, default="single")
    installment_count = Column(Integer, nullable=True)
    installment_amount = Column(Money, nullable=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    priority = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)
    source = Column(String(20), nullable=False, default="manual")

    project = relationship("PaymentProject")
    category = relationship("DebtCategory")
    records = relationship("PaymentRecord", back_populates="item", cascade="all, delete-orphan")

    @property
    def project_name(self):
        return self.project.project_name if self.project else None

    @property
    def category_name(self):
        return self.category.category_name if self.category else None

    @property
    def due_date(self):
        return self.end_date or self.start_date

    @property
    def remaining_amount(self):
        return max((self.total_amount or 0) - (self.paid_amount or 0), 0)


class PaymentRecord(SoftDeleteMixin, TimestampMixin, Base):
    """Single payment made against a payment item"""

    __tablename__ = "payment_records"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("payment_items.id", ondelete="CASCADE"), nullable=False, index=True)
    amount_paid = Column(Money, nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    payment_method = Column(String(50), nullable=True)
    receipt_image_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    item = relationship("PaymentItem", back_populates="records")


class AuditLog(Base):
    """Change history for audited tables"""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    table_name = Column(String(50), nullable=False)
    record_id = Column(Integer, nullable=False, index=True)
    action = Column(String(20), nullable=False)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    changed_fields = Column(JSON, nullable=True)
    user_info = Column(String(255), nullable=True)
    change_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(20), nullable=False, default="medium")
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    action_url = Column(String(500), nullable=True)
    payment_item_id = Column(Integer, ForeignKey("payment_items.id", ondelete="SET NULL"), nullable=True)
    extra = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class NotificationSettings(TimestampMixin, Base):
    __tablename__ = "notification_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, unique=True)
    email_enabled = Column(Boolean, nullable=False, default=True)
    line_enabled = Column(Boolean, nullable=False, default=False)
    browser_enabled = Column(Boolean, nullable=False, default=True)
    payment_due_reminder = Column(Boolean, nullable=False, default=True)
    payment_overdue_alert = Column(Boolean, nullable=False, default=True)
    system_updates = Column(Boolean, nullable=False, default=False)
    weekly_report = Column(Boolean, nullable=False, default=True)
    daily_digest_time = Column(String(5), nullable=False, default="09:00")
    weekly_report_day = Column(String(10), nullable=False, default="monday")
    advance_warning_days = Column(Integer, nullable=False, default=3)


class LoanInvestmentRecord(SoftDeleteMixin, TimestampMixin, Base):
    """Money lent/borrowed or invested with a counterparty"""

    __tablename__ = "loan_investment_records"

    id = Column(Integer, primary_key=True)
    item_name = Column(String(255), nullable=False)
    record_type = Column(String(20), nullable=False)
    party_name = Column(String(255), nullable=False)
    party_phone = Column(String(50), nullable=True)
    principal_amount = Column(Money, nullable=False)
    annual_interest_rate = Column(Numeric(5, 2), nullable=False, default=0)
    monthly_payment_amount = Column(Money, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    total_paid_amount = Column(Money, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active", index=True)
    notes = Column(Text, nullable=True)

    payments = relationship("LoanPayment", back_populates="record", cascade="all, delete-orphan")


class LoanPayment(TimestampMixin, Base):
    __tablename__ = "loan_payments"

    id = Column(Integer, primary_key=True)
    record_id = Column(Integer, ForeignKey("loan_investment_records.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    payment_type = Column(String(20), nullable=False, default="interest")
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String(50), nullable=False, default="bank_transfer")
    notes = Column(Text, nullable=True)

    record = relationship("LoanInvestmentRecord", back_populates="payments")


class BudgetPlan(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "budget_plans"

    id = Column(Integer, primary_key=True)
    plan_name = Column(String(255), nullable=False)
    plan_type = Column(String(50), nullable=False, default="project")
    project_id = Column(Integer, ForeignKey("payment_projects.id"), nullable=True, index=True)
    budget_period = Column(String(50), nullable=False, default="monthly")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_budget = Column(Money, nullable=False, default=0)
    actual_spent = Column(Money, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")

    items = relationship("BudgetItem", back_populates="plan")


class BudgetItem(SoftDeleteMixin, TimestampMixin, Base):
    """Planned spend that may be converted (once) into a PaymentItem"""

    __tablename__ = "budget_items"

    id = Column(Integer, primary_key=True)
    budget_plan_id = Column(Integer, ForeignKey("budget_plans.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("debt_categories.id"), nullable=True)
    item_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    payment_type = Column(String(20), nullable=False, default="single")
    planned_amount = Column(Money, nullable=False)
    actual_amount = Column(Money, nullable=True)
    installment_count = Column(Integer, nullable=True)
    installment_amount = Column(Money, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    priority = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)
    converted_to_payment = Column(Boolean, nullable=False, default=False, index=True)
    linked_payment_item_id = Column(Integer, ForeignKey("payment_items.id", ondelete="SET NULL"), nullable=True)
    conversion_date = Column(DateTime(timezone=True), nullable=True)

    plan = relationship("BudgetPlan", back_populates="items")


class HouseholdCategory(TimestampMixin, Base):
    __tablename__ = "household_categories"

    id = Column(Integer, primary_key=True)
    category_name = Column(String(100), nullable=False)
    color = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class HouseholdBudget(TimestampMixin, Base):
    """Monthly budget per household category"""

    __tablename__ = "household_budgets"
    __table_args__ = (
        UniqueConstraint("category_id", "year", "month", name="uq_household_budget_month"),
    )

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey("household_categories.id"), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    budget_amount = Column(Money, nullable=False)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class HouseholdExpense(TimestampMixin, Base):
    __tablename__ = "household_expenses"

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey("household_categories.id"), nullable=True, index=True)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False, index=True)
    payment_method = Column(String(50), nullable=True)
    description = Column(String(255), nullable=True)
    tags = Column(JSON, nullable=True)
