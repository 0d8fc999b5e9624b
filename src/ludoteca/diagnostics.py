"""Diagnostics: console logging setup and the append-only error log."""

import logging
import traceback
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "[%(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Send ludoteca log records to stderr through Rich.

    Args:
        verbose: Show INFO records instead of only warnings and errors
        console: Console to write to (default: a stderr console)
    """
    logger = logging.getLogger("ludoteca")
    logger.setLevel(logging.INFO if verbose else logging.WARNING)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


class ErrorLog:
    """Append-only log of failures, one entry per error.

    Recording never raises: a failure to write the log is dropped so the
    outcome of the operation being logged is not masked. Entries go straight
    to a file handler, so no logger is registered per log file.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize error log.

        Args:
            path: Log file, created on first write
        """
        self.path = Path(path)
        self._handler: Optional[logging.FileHandler] = None

    def __enter__(self) -> "ErrorLog":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        """Whether the log file handler is currently held."""
        return self._handler is not None

    def _get_handler(self) -> logging.FileHandler:
        if self._handler is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(self.path, mode="a", encoding="utf-8", delay=True)
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            self._handler = handler
        return self._handler

    def record(self, exc: BaseException, context: str = "") -> None:
        """Append an entry for ``exc``.

        Args:
            exc: The failure to record
            context: Short description of what was being done
        """
        try:
            handler = self._get_handler()
            kind = getattr(exc, "kind", None)
            label = type(exc).__name__
            if kind is not None:
                label = f"{label} ({kind.value})"
            message = f"{label}: {exc}"
            if context:
                message = f"{context}: {message}"
            if exc.__traceback__ is not None:
                trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
                message = f"{message}\n{trace.rstrip()}"
            handler.handle(
                logging.LogRecord(
                    name="ludoteca.errorlog",
                    level=logging.ERROR,
                    pathname=__file__,
                    lineno=0,
                    msg=message,
                    args=None,
                    exc_info=None,
                )
            )
        except Exception:
            pass

    def close(self) -> None:
        """Close the underlying file handler."""
        if self._handler is not None:
            self._handler.close()
            self._handler = None
