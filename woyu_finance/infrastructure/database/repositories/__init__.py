"""Data access layer"""

from woyu_finance.infrastructure.database.repositories.audit import AuditLogRepository
from woyu_finance.infrastructure.database.repositories.base import exclude_deleted, paginate_query
from woyu_finance.infrastructure.database.repositories.budget import BudgetRepository
from woyu_finance.infrastructure.database.repositories.household import HouseholdRepository
from woyu_finance.infrastructure.database.repositories.loans import LoanRepository
from woyu_finance.infrastructure.database.repositories.notifications import (
    NotificationRepository,
    NotificationSettingsRepository,
)
from woyu_finance.infrastructure.database.repositories.payments import PaymentItemRepository, PaymentRecordRepository
from woyu_finance.infrastructure.database.repositories.projects import CategoryRepository, ProjectRepository

__all__ = [
    "AuditLogRepository",
    "BudgetRepository",
    "CategoryRepository",
    "HouseholdRepository",
    "LoanRepository",
    "NotificationRepository",
    "NotificationSettingsRepository",
    "PaymentItemRepository",
    "PaymentRecordRepository",
    "ProjectRepository",
    "exclude_deleted",
    "paginate_query",
]
