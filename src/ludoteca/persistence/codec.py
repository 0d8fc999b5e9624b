"""Convert a ledger to and from its saved JSON form."""

import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import ValidationError as SchemaError

from ..config import DEFAULT_DAILY_FINE_RATE, DEFAULT_GRACE_DAYS
from ..errors import PersistenceError, ValidationError
from ..lending.ledger import LendingLedger
from .schemas import STATE_VERSION, GameRecord, LedgerState, LoanRecord, MemberRecord, NextIds

logger = logging.getLogger(__name__)


def dump_state(ledger: LendingLedger, saved_at: Optional[datetime] = None) -> LedgerState:
    """Capture the full state of a ledger, counters included."""
    return LedgerState(
        saved_at=saved_at or datetime.now(),
        games=[GameRecord.from_model(g) for g in ledger.list_games()],
        members=[MemberRecord.from_model(m) for m in ledger.list_members()],
        loans=[LoanRecord.from_model(loan) for loan in ledger.list_loans()],
        next_ids=NextIds(**ledger.next_ids()),
    )


def restore_state(
    state: LedgerState,
    daily_fine_rate: Union[Decimal, str] = DEFAULT_DAILY_FINE_RATE,
    default_grace_days: int = DEFAULT_GRACE_DAYS,
) -> LendingLedger:
    """Rebuild a ledger from a validated state.

    Raises:
        PersistenceError: If the records are inconsistent with each other
    """
    try:
        return LendingLedger.from_records(
            games=[record.to_model() for record in state.games],
            members=[record.to_model() for record in state.members],
            loans=[record.to_model() for record in state.loans],
            next_ids=state.next_ids.model_dump(),
            daily_fine_rate=daily_fine_rate,
            default_grace_days=default_grace_days,
        )
    except (ValidationError, ValueError, TypeError, ArithmeticError) as e:
        raise PersistenceError(f"Saved state is inconsistent: {e}") from e


def encode(ledger: LendingLedger, saved_at: Optional[datetime] = None, pretty: bool = True) -> str:
    """Serialize a ledger to JSON text."""
    data = dump_state(ledger, saved_at).model_dump(mode="json", by_alias=True)
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


def decode(
    text: str,
    daily_fine_rate: Union[Decimal, str] = DEFAULT_DAILY_FINE_RATE,
    default_grace_days: int = DEFAULT_GRACE_DAYS,
) -> LendingLedger:
    """Rebuild a ledger from JSON text.

    Raises:
        PersistenceError: If the text is not valid JSON, misses required
            fields, or describes inconsistent records
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Saved state is not valid JSON: {e}") from e

    try:
        state = LedgerState.model_validate(data)
    except SchemaError as e:
        raise PersistenceError(f"Saved state is malformed: {e}") from e

    if state.version != STATE_VERSION:
        logger.warning("Loading saved state with unknown version %r", state.version)

    return restore_state(state, daily_fine_rate, default_grace_days)
