"""Domain records for the game library.

Records:
- Game: an item that can be lent
- Member: a person who borrows games
- Loan: one lending of a game to a member
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..errors import AlreadyReturnedError, ValidationError

DEFAULT_CATEGORY = "Other"
DEFAULT_CONTACT = "-"

CENTS = Decimal("0.01")


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert a value to a Decimal rounded to cents."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _required(value: Optional[str], label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{label} cannot be empty")
    return cleaned


def _or_default(value: Optional[str], default: str) -> str:
    cleaned = (value or "").strip()
    return cleaned or default


@dataclass
class Game:
    """A game in the library."""

    id: int
    name: str
    category: str = DEFAULT_CATEGORY
    is_on_loan: bool = False

    def __post_init__(self) -> None:
        self.name = _required(self.name, "Game name")
        self.category = _or_default(self.category, DEFAULT_CATEGORY)

    @property
    def name_key(self) -> str:
        """Case-insensitive key used for uniqueness checks."""
        return self.name.casefold()

    def mark_on_loan(self) -> None:
        self.is_on_loan = True

    def mark_available(self) -> None:
        self.is_on_loan = False


@dataclass(frozen=True)
class Member:
    """A library member who can borrow games."""

    id: int
    name: str
    contact: str = DEFAULT_CONTACT

    def __post_init__(self) -> None:
        # frozen dataclass, normalise through object.__setattr__
        object.__setattr__(self, "name", _required(self.name, "Member name"))
        object.__setattr__(self, "contact", _or_default(self.contact, DEFAULT_CONTACT))


@dataclass
class Loan:
    """A game lent to a member.

    A loan is active until ``register_return`` is called once; after that
    ``return_date`` and ``fine_paid`` never change.
    """

    id: int
    game_id: int
    member_id: int
    loan_date: datetime
    due_date: datetime
    return_date: Optional[datetime] = None
    fine_paid: Decimal = field(default_factory=lambda: Decimal("0.00"))

    def __post_init__(self) -> None:
        if self.due_date < self.loan_date:
            raise ValidationError("Due date cannot be before the loan date")
        self.fine_paid = to_money(self.fine_paid)

    def __repr__(self) -> str:
        return (
            f"<Loan(id={self.id}, game_id={self.game_id}, "
            f"member_id={self.member_id}, returned={self.is_returned})>"
        )

    @classmethod
    def open(
        cls,
        loan_id: int,
        game_id: int,
        member_id: int,
        loan_date: datetime,
        grace_days: int = 7,
    ) -> "Loan":
        """Create an active loan due ``grace_days`` after ``loan_date``."""
        if grace_days < 0:
            raise ValidationError(f"Grace days cannot be negative: {grace_days}")
        return cls(
            id=loan_id,
            game_id=game_id,
            member_id=member_id,
            loan_date=loan_date,
            due_date=loan_date + timedelta(days=grace_days),
        )

    @property
    def is_returned(self) -> bool:
        """Check if the game has been brought back."""
        return self.return_date is not None

    @property
    def is_active(self) -> bool:
        return self.return_date is None

    def days_late_on(self, when: datetime) -> int:
        """Whole calendar days past the due date on ``when`` (0 if not late)."""
        late = (when.date() - self.due_date.date()).days
        return max(0, late)

    @property
    def days_late(self) -> int:
        """Days the return came after the due date (0 while active)."""
        if self.return_date is None:
            return 0
        return self.days_late_on(self.return_date)

    def compute_fine(self, daily_rate: Decimal) -> Decimal:
        """Fine for the recorded return at ``daily_rate`` per late day."""
        return to_money(self.days_late * daily_rate)

    def fine_due_on(self, when: datetime, daily_rate: Decimal) -> Decimal:
        """Fine that a return on ``when`` would be charged."""
        return to_money(self.days_late_on(when) * daily_rate)

    def register_return(self, return_date: datetime, fine_paid: Decimal) -> None:
        """Close the loan.

        Raises:
            AlreadyReturnedError: If the loan was already closed
            ValidationError: If the return predates the loan
        """
        if self.return_date is not None:
            raise AlreadyReturnedError(self.id)
        if return_date.date() < self.loan_date.date():
            raise ValidationError("Return date cannot be before the loan date")
        self.return_date = return_date
        self.fine_paid = to_money(fine_paid)
