"""File storage for the saved state and the text report."""

import logging
import os
import shutil
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Optional, Protocol, Union

from ..config import DEFAULT_DAILY_FINE_RATE, DEFAULT_GRACE_DAYS
from ..errors import PersistenceError
from ..lending.ledger import LendingLedger
from . import codec

logger = logging.getLogger(__name__)


class TextStorage(Protocol):
    """A named location holding one text document."""

    def exists(self) -> bool: ...

    def read_text(self) -> str: ...

    def write_text(self, text: str) -> None: ...


class FileStorage:
    """Text document stored in a file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so an interrupted write leaves the previous content intact.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"<FileStorage(path='{self.path}')>"

    def exists(self) -> bool:
        return self.path.is_file()

    def read_text(self) -> str:
        """Read the whole document.

        Raises:
            PersistenceError: If the file cannot be read
        """
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e

    def write_text(self, text: str) -> None:
        """Replace the whole document.

        Raises:
            PersistenceError: If the file cannot be written
        """
        tmp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def copy_aside(self, suffix: str = ".corrupt") -> Path:
        """Copy the document next to itself with ``suffix`` appended.

        An earlier copy with the same name is replaced.

        Returns:
            Path of the copy

        Raises:
            PersistenceError: If the file cannot be copied
        """
        target = self.path.with_name(self.path.name + suffix)
        try:
            shutil.copy2(self.path, target)
        except OSError as e:
            raise PersistenceError(f"Cannot copy {self.path} to {target}: {e}") from e
        logger.info("Copied %s to %s", self.path, target)
        return target


class LedgerStore:
    """Saves and loads a ledger through a text storage."""

    def __init__(
        self,
        storage: TextStorage,
        daily_fine_rate: Union[Decimal, str] = DEFAULT_DAILY_FINE_RATE,
        default_grace_days: int = DEFAULT_GRACE_DAYS,
    ):
        """Initialize store.

        Args:
            storage: Where the state lives
            daily_fine_rate: Fine rate given to loaded ledgers
            default_grace_days: Grace period given to loaded ledgers
        """
        self.storage = storage
        self.daily_fine_rate = daily_fine_rate
        self.default_grace_days = default_grace_days

    def new_ledger(self) -> LendingLedger:
        """Create an empty ledger with this store's lending rules."""
        return LendingLedger(
            daily_fine_rate=self.daily_fine_rate,
            default_grace_days=self.default_grace_days,
        )

    def save(self, ledger: LendingLedger) -> None:
        """Write the full ledger state.

        Raises:
            PersistenceError: If the state cannot be written
        """
        self.storage.write_text(codec.encode(ledger))
        logger.info("Saved ledger to %s", self.storage)

    def load(self) -> LendingLedger:
        """Read the saved ledger, or an empty one when nothing was saved.

        Raises:
            PersistenceError: If the saved state cannot be read or parsed
        """
        if not self.storage.exists():
            logger.info("No saved state at %s, starting empty", self.storage)
            return self.new_ledger()

        ledger = codec.decode(
            self.storage.read_text(),
            daily_fine_rate=self.daily_fine_rate,
            default_grace_days=self.default_grace_days,
        )
        logger.info("Loaded %r from %s", ledger, self.storage)
        return ledger
