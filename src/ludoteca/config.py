"""Configuration management for ludoteca.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

DEFAULT_DAILY_FINE_RATE = Decimal("2.00")
DEFAULT_GRACE_DAYS = 7

STATE_FILE_NAME = "library.json"
REPORT_FILE_NAME = "report.txt"
LOG_FILE_NAME = "debug.log"


@dataclass
class Config:
    """Application configuration."""

    # Storage
    data_dir: Path

    # Lending rules
    daily_fine_rate: Decimal
    grace_days: int

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        data_dir = Path(os.environ.get("LUDOTECA_DATA_DIR", "data")).expanduser()

        raw_rate = os.environ.get("LUDOTECA_DAILY_FINE_RATE", str(DEFAULT_DAILY_FINE_RATE))
        try:
            daily_fine_rate = Decimal(raw_rate)
        except InvalidOperation:
            raise ValueError(f"LUDOTECA_DAILY_FINE_RATE is not a number: {raw_rate!r}")

        return cls(
            data_dir=data_dir,
            daily_fine_rate=daily_fine_rate,
            grace_days=int(os.environ.get("LUDOTECA_GRACE_DAYS", str(DEFAULT_GRACE_DAYS))),
        )

    @property
    def state_path(self) -> Path:
        """Path of the saved library state."""
        return self.data_dir / STATE_FILE_NAME

    @property
    def report_path(self) -> Path:
        """Path of the generated text report."""
        return self.data_dir / REPORT_FILE_NAME

    @property
    def log_path(self) -> Path:
        """Path of the append-only error log."""
        return self.data_dir / LOG_FILE_NAME

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.daily_fine_rate < 0:
            errors.append(f"Daily fine rate cannot be negative: {self.daily_fine_rate}")
        if self.grace_days < 0:
            errors.append(f"Grace days cannot be negative: {self.grace_days}")

        # Check data directory is writable
        if not self.data_dir.exists():
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
            except OSError:
                errors.append(f"Cannot create data directory: {self.data_dir}")

        return errors


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
