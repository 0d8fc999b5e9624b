"""Lending ledger: the in-memory state of the library and its operations."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional, Union

from ..config import DEFAULT_DAILY_FINE_RATE, DEFAULT_GRACE_DAYS
from ..errors import (
    AlreadyReturnedError,
    ConflictError,
    DuplicateError,
    InsufficientPaymentError,
    NotFoundError,
    ValidationError,
)
from ..ids import IdAllocator
from .models import Game, Loan, Member, to_money

logger = logging.getLogger(__name__)


class ReturnReceipt(NamedTuple):
    """Outcome of a return: the closed loan and the fine charged."""

    loan: Loan
    fine: Decimal


class FinePreview(NamedTuple):
    """Fine a loan would be charged if returned at a given moment."""

    days_late: int
    fine: Decimal


@dataclass(frozen=True)
class LedgerSnapshot:
    """Read-only view of the ledger used for reports."""

    games: tuple[Game, ...]
    members: tuple[Member, ...]
    active_loans: tuple[Loan, ...]
    returned_loans: tuple[Loan, ...]

    def game_name(self, game_id: int) -> str:
        """Name of a game, or the raw id when unknown."""
        for game in self.games:
            if game.id == game_id:
                return game.name
        return str(game_id)

    def member_name(self, member_id: int) -> str:
        """Name of a member, or the raw id when unknown."""
        for member in self.members:
            if member.id == member_id:
                return member.name
        return str(member_id)


class LendingLedger:
    """Holds games, members and loans and applies the lending rules.

    Each ledger owns its own id allocators, so separate instances never
    share numbering.
    """

    def __init__(
        self,
        daily_fine_rate: Union[Decimal, str] = DEFAULT_DAILY_FINE_RATE,
        default_grace_days: int = DEFAULT_GRACE_DAYS,
    ):
        """Initialize an empty ledger.

        Args:
            daily_fine_rate: Amount charged per late day
            default_grace_days: Days between loan and due date when not given
        """
        self.daily_fine_rate = to_money(daily_fine_rate)
        if self.daily_fine_rate < 0:
            raise ValidationError(f"Daily fine rate cannot be negative: {daily_fine_rate}")
        if default_grace_days < 0:
            raise ValidationError(f"Grace days cannot be negative: {default_grace_days}")
        self.default_grace_days = default_grace_days

        self._games: dict[int, Game] = {}
        self._members: dict[int, Member] = {}
        self._loans: dict[int, Loan] = {}

        self.game_ids = IdAllocator()
        self.member_ids = IdAllocator()
        self.loan_ids = IdAllocator()

    def __repr__(self) -> str:
        return (
            f"<LendingLedger(games={len(self._games)}, members={len(self._members)}, "
            f"loans={len(self._loans)})>"
        )

    @classmethod
    def from_records(
        cls,
        games: Iterable[Game],
        members: Iterable[Member],
        loans: Iterable[Loan],
        next_ids: Optional[dict[str, int]] = None,
        daily_fine_rate: Union[Decimal, str] = DEFAULT_DAILY_FINE_RATE,
        default_grace_days: int = DEFAULT_GRACE_DAYS,
    ) -> "LendingLedger":
        """Rebuild a ledger from previously created records.

        Ids are kept as given. ``is_on_loan`` is recomputed from the active
        loans. Counters are restored from ``next_ids`` and then moved past
        the highest id present so ids are never handed out twice.

        Raises:
            ValidationError: If the records are inconsistent
        """
        ledger = cls(daily_fine_rate=daily_fine_rate, default_grace_days=default_grace_days)

        for game in games:
            if game.id in ledger._games:
                raise ValidationError(f"Duplicate game id {game.id}")
            if ledger._find_game_by_name(game.name) is not None:
                raise ValidationError(f"Duplicate game name {game.name!r}")
            ledger._games[game.id] = game

        for member in members:
            if member.id in ledger._members:
                raise ValidationError(f"Duplicate member id {member.id}")
            ledger._members[member.id] = member

        on_loan: set[int] = set()
        for loan in loans:
            if loan.id in ledger._loans:
                raise ValidationError(f"Duplicate loan id {loan.id}")
            if loan.game_id not in ledger._games:
                raise ValidationError(f"Loan #{loan.id} refers to unknown game #{loan.game_id}")
            if loan.member_id not in ledger._members:
                raise ValidationError(
                    f"Loan #{loan.id} refers to unknown member #{loan.member_id}"
                )
            if loan.is_active:
                if loan.game_id in on_loan:
                    raise ValidationError(f"Game #{loan.game_id} has more than one active loan")
                on_loan.add(loan.game_id)
            ledger._loans[loan.id] = loan

        for game in ledger._games.values():
            if game.is_on_loan != (game.id in on_loan):
                logger.warning("Correcting on-loan flag of game #%s", game.id)
            game.is_on_loan = game.id in on_loan

        next_ids = next_ids or {}
        for key, allocator, records in (
            ("game", ledger.game_ids, ledger._games),
            ("member", ledger.member_ids, ledger._members),
            ("loan", ledger.loan_ids, ledger._loans),
        ):
            if key in next_ids:
                allocator.import_state(next_ids[key])
            if records and allocator.ensure_above(max(records)):
                logger.warning(
                    "Saved %s counter %s is not above existing ids, resuming at %s",
                    key,
                    next_ids.get(key),
                    allocator.peek(),
                )

        return ledger

    # -------------------------------------------------------------------------
    # Games and Members
    # -------------------------------------------------------------------------

    def _find_game_by_name(self, name: str) -> Optional[Game]:
        key = name.strip().casefold()
        for game in self._games.values():
            if game.name_key == key:
                return game
        return None

    def register_game(self, name: str, category: Optional[str] = "") -> Game:
        """Register a new game.

        Args:
            name: Game name, unique regardless of case
            category: Free-text category, "Other" when blank

        Returns:
            Created game

        Raises:
            ValidationError: If the name is blank
            DuplicateError: If a game with the same name exists
        """
        if not (name or "").strip():
            raise ValidationError("Game name cannot be empty")
        existing = self._find_game_by_name(name)
        if existing is not None:
            raise DuplicateError(f"A game named {existing.name!r} already exists")

        game = Game(id=self.game_ids.peek(), name=name, category=category or "")
        self.game_ids.next()
        self._games[game.id] = game
        logger.info("Registered game #%s %r", game.id, game.name)
        return game

    def register_member(self, name: str, contact: Optional[str] = "") -> Member:
        """Register a new member.

        Raises:
            ValidationError: If the name is blank
        """
        member = Member(id=self.member_ids.peek(), name=name, contact=contact or "")
        self.member_ids.next()
        self._members[member.id] = member
        logger.info("Registered member #%s %r", member.id, member.name)
        return member

    def get_game(self, game_id: int) -> Game:
        """Get a game by id.

        Raises:
            NotFoundError: If no game has this id
        """
        game = self._games.get(game_id)
        if game is None:
            raise NotFoundError("Game", game_id)
        return game

    def get_member(self, member_id: int) -> Member:
        """Get a member by id.

        Raises:
            NotFoundError: If no member has this id
        """
        member = self._members.get(member_id)
        if member is None:
            raise NotFoundError("Member", member_id)
        return member

    def list_games(self) -> list[Game]:
        """List all games ordered by id."""
        return sorted(self._games.values(), key=lambda g: g.id)

    def list_members(self) -> list[Member]:
        """List all members ordered by id."""
        return sorted(self._members.values(), key=lambda m: m.id)

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    def get_loan(self, loan_id: int) -> Loan:
        """Get a loan by id.

        Raises:
            NotFoundError: If no loan has this id
        """
        loan = self._loans.get(loan_id)
        if loan is None:
            raise NotFoundError("Loan", loan_id)
        return loan

    def list_loans(self, active: Optional[bool] = None) -> list[Loan]:
        """List loans ordered by id.

        Args:
            active: True for open loans only, False for returned only
        """
        loans = sorted(self._loans.values(), key=lambda loan: loan.id)
        if active is None:
            return loans
        return [loan for loan in loans if loan.is_active == active]

    def lend(
        self,
        game_id: int,
        member_id: int,
        loan_date: Optional[datetime] = None,
        grace_days: Optional[int] = None,
    ) -> Loan:
        """Lend a game to a member.

        Args:
            game_id: Game to lend
            member_id: Borrowing member
            loan_date: When the game leaves (default: now)
            grace_days: Days until due (default: the ledger's grace period)

        Returns:
            Created loan

        Raises:
            NotFoundError: If the game or member does not exist
            ConflictError: If the game is already on loan
        """
        game = self.get_game(game_id)
        self.get_member(member_id)
        if game.is_on_loan:
            raise ConflictError(f"Game #{game.id} {game.name!r} is already on loan")

        loan = Loan.open(
            loan_id=self.loan_ids.peek(),
            game_id=game.id,
            member_id=member_id,
            loan_date=loan_date or datetime.now(),
            grace_days=self.default_grace_days if grace_days is None else grace_days,
        )
        self.loan_ids.next()
        self._loans[loan.id] = loan
        game.mark_on_loan()
        logger.info("Lent game #%s to member #%s as loan #%s", game_id, member_id, loan.id)
        return loan

    def preview_fine(self, loan_id: int, when: Optional[datetime] = None) -> FinePreview:
        """Work out the fine for returning a loan at ``when`` (default: now).

        Raises:
            NotFoundError: If the loan does not exist
            AlreadyReturnedError: If the loan is closed
        """
        loan = self.get_loan(loan_id)
        if loan.is_returned:
            raise AlreadyReturnedError(loan.id)
        when = when or datetime.now()
        return FinePreview(
            days_late=loan.days_late_on(when),
            fine=loan.fine_due_on(when, self.daily_fine_rate),
        )

    def return_loan(
        self,
        loan_id: int,
        return_date: Optional[datetime] = None,
        amount_paid: Union[Decimal, int, str] = Decimal("0"),
    ) -> ReturnReceipt:
        """Record the return of a loan and charge its fine.

        Args:
            loan_id: Loan being returned
            return_date: When the game came back (default: now)
            amount_paid: Money handed over for the fine

        Returns:
            ReturnReceipt with the closed loan and the fine charged

        Raises:
            NotFoundError: If the loan does not exist
            AlreadyReturnedError: If the loan is already closed
            ValidationError: If ``amount_paid`` is negative
            InsufficientPaymentError: If ``amount_paid`` is below the fine
        """
        return_date = return_date or datetime.now()
        preview = self.preview_fine(loan_id, return_date)
        paid = to_money(amount_paid)
        if paid < 0:
            raise ValidationError(f"Amount paid cannot be negative: {paid}")
        if paid < preview.fine:
            raise InsufficientPaymentError(preview.fine, paid)

        loan = self._loans[loan_id]
        loan.register_return(return_date, preview.fine)
        game = self._games.get(loan.game_id)
        if game is not None:
            game.mark_available()
        logger.info(
            "Returned loan #%s, %s day(s) late, fine %s", loan.id, preview.days_late, preview.fine
        )
        return ReturnReceipt(loan=loan, fine=preview.fine)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def next_ids(self) -> dict[str, int]:
        """Export the id counters."""
        return {
            "game": self.game_ids.export_state(),
            "member": self.member_ids.export_state(),
            "loan": self.loan_ids.export_state(),
        }

    def snapshot(self) -> LedgerSnapshot:
        """Take a read-only view of the current state."""
        loans = self.list_loans()
        return LedgerSnapshot(
            games=tuple(replace(game) for game in self.list_games()),
            members=tuple(self.list_members()),
            active_loans=tuple(replace(loan) for loan in loans if loan.is_active),
            returned_loans=tuple(replace(loan) for loan in loans if loan.is_returned),
        )
