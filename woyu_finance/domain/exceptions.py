"""Domain-specific exceptions"""

from typing import Any, List, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced entity does not exist (or is soft-deleted)"""

    def __init__(self, resource: str, identifier: Any = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found")


class InvalidInputError(DomainException):
    """Input is malformed or violates a constraint"""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        self.errors = errors or []
        super().__init__(message)


class PaymentExceedsBalanceError(InvalidInputError):
    """Payment would push the paid amount above the item's total"""

    def __init__(self, remaining):
        self.remaining = remaining
        super().__init__("Payment amount exceeds remaining balance")


class ConflictError(DomainException):
    """Operation conflicts with the current state of the entity"""

    pass


class AlreadyConvertedError(ConflictError):
    """Budget item was already turned into a payment item"""

    def __init__(self, budget_item_id: int):
        self.budget_item_id = budget_item_id
        super().__init__("Budget item has already been converted to a payment item")


class UnsupportedFileError(InvalidInputError):
    """Uploaded import file has an unknown format or cannot be parsed"""

    pass
