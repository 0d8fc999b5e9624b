"""Pytest configuration and shared fixtures.

This module provides fixtures for testing ludoteca, including a temporary
data directory, configured ledgers and sample records.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Generator

import pytest

from ludoteca.config import reset_config
from ludoteca.lending import LendingLedger


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point the app at a temporary data directory."""
    reset_config()
    directory = tmp_path / "data"
    monkeypatch.setenv("LUDOTECA_DATA_DIR", str(directory))
    monkeypatch.delenv("LUDOTECA_DAILY_FINE_RATE", raising=False)
    monkeypatch.delenv("LUDOTECA_GRACE_DAYS", raising=False)
    yield directory
    reset_config()


# ============================================================================
# Ledger Fixtures
# ============================================================================


@pytest.fixture
def ledger() -> LendingLedger:
    """Create an empty ledger with the default rules."""
    return LendingLedger(daily_fine_rate=Decimal("2.00"), default_grace_days=7)


@pytest.fixture
def loan_date() -> datetime:
    """A fixed loan date."""
    return datetime(2024, 1, 1, 10, 30)


@pytest.fixture
def stocked_ledger(ledger: LendingLedger, loan_date: datetime) -> LendingLedger:
    """Ledger with games, members, one active and one returned loan."""
    ledger.register_game("Chess", "Strategy")
    ledger.register_game("Catan", "Family")
    ledger.register_game("Uno", "")
    ledger.register_member("Ana", "")
    ledger.register_member("Bruno", "bruno@example.com")

    ledger.lend(1, 1, loan_date=loan_date, grace_days=7)
    ledger.lend(2, 2, loan_date=loan_date, grace_days=3)
    ledger.return_loan(2, return_date=datetime(2024, 1, 6), amount_paid=Decimal("4.00"))
    return ledger
