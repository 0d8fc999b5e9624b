"""Error types raised by the lending ledger and the persistence layer.

Every error carries an ``ErrorKind`` so callers can branch on ``err.kind``
instead of matching on message text.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kind of failure."""

    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    ALREADY_RETURNED = "already_returned"
    INSUFFICIENT_PAYMENT = "insufficient_payment"
    PERSISTENCE = "persistence"


class LudotecaError(Exception):
    """Base exception for ledger and storage errors."""

    kind: ErrorKind = ErrorKind.VALIDATION


class ValidationError(LudotecaError):
    """Raised when input has the wrong shape, e.g. a blank name."""

    kind = ErrorKind.VALIDATION


class DuplicateError(LudotecaError):
    """Raised when a uniqueness rule would be broken."""

    kind = ErrorKind.DUPLICATE


class NotFoundError(LudotecaError):
    """Raised when an id does not resolve to a record."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} #{entity_id} not found")


class ConflictError(LudotecaError):
    """Raised when an operation would break a state rule, e.g. lending twice."""

    kind = ErrorKind.CONFLICT


class AlreadyReturnedError(LudotecaError):
    """Raised when returning a loan that is already closed."""

    kind = ErrorKind.ALREADY_RETURNED

    def __init__(self, loan_id: int):
        self.loan_id = loan_id
        super().__init__(f"Loan #{loan_id} was already returned")


class InsufficientPaymentError(LudotecaError):
    """Raised when the amount paid does not cover the fine."""

    kind = ErrorKind.INSUFFICIENT_PAYMENT

    def __init__(self, amount_due: Decimal, amount_paid: Optional[Decimal] = None):
        self.amount_due = amount_due
        self.amount_paid = amount_paid
        super().__init__(f"Insufficient payment. Fine due: {amount_due:.2f}")


class PersistenceError(LudotecaError):
    """Raised when saved state cannot be read, parsed or written."""

    kind = ErrorKind.PERSISTENCE
