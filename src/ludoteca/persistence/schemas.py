"""Pydantic schemas for the saved library state.

The file keeps camelCase keys:

    {
      "version": "1.0",
      "savedAt": "...",
      "games": [{"id", "name", "category", "isOnLoan"}],
      "members": [{"id", "name", "contact"}],
      "loans": [{"id", "gameId", "memberId", "loanDate", "dueDate",
                 "returnDate", "finePaid"}],
      "nextIds": {"game", "member", "loan"}
    }
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..lending.models import Game, Loan, Member

STATE_VERSION = "1.0"


class GameRecord(BaseModel):
    """Saved game."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    category: str = "Other"
    is_on_loan: bool = Field(False, alias="isOnLoan")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, game: Game) -> "GameRecord":
        return cls(id=game.id, name=game.name, category=game.category, is_on_loan=game.is_on_loan)

    def to_model(self) -> Game:
        return Game(id=self.id, name=self.name, category=self.category, is_on_loan=self.is_on_loan)


class MemberRecord(BaseModel):
    """Saved member."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    contact: str = "-"

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, member: Member) -> "MemberRecord":
        return cls(id=member.id, name=member.name, contact=member.contact)

    def to_model(self) -> Member:
        return Member(id=self.id, name=self.name, contact=self.contact)


class LoanRecord(BaseModel):
    """Saved loan. ``returnDate`` is null while the loan is active."""

    id: int = Field(..., ge=1)
    game_id: int = Field(..., ge=1, alias="gameId")
    member_id: int = Field(..., ge=1, alias="memberId")
    loan_date: datetime = Field(..., alias="loanDate")
    due_date: datetime = Field(..., alias="dueDate")
    return_date: Optional[datetime] = Field(None, alias="returnDate")
    fine_paid: Decimal = Field(Decimal("0.00"), ge=0, alias="finePaid")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, loan: Loan) -> "LoanRecord":
        return cls(
            id=loan.id,
            game_id=loan.game_id,
            member_id=loan.member_id,
            loan_date=loan.loan_date,
            due_date=loan.due_date,
            return_date=loan.return_date,
            fine_paid=loan.fine_paid,
        )

    def to_model(self) -> Loan:
        return Loan(
            id=self.id,
            game_id=self.game_id,
            member_id=self.member_id,
            loan_date=self.loan_date,
            due_date=self.due_date,
            return_date=self.return_date,
            fine_paid=self.fine_paid,
        )


class NextIds(BaseModel):
    """Id each allocator hands out next."""

    game: int = Field(1, ge=1)
    member: int = Field(1, ge=1)
    loan: int = Field(1, ge=1)


class LedgerState(BaseModel):
    """Everything needed to rebuild a ledger."""

    version: str = STATE_VERSION
    saved_at: Optional[datetime] = Field(None, alias="savedAt")
    games: list[GameRecord]
    members: list[MemberRecord]
    loans: list[LoanRecord]
    next_ids: NextIds = Field(..., alias="nextIds")

    model_config = {"populate_by_name": True}
