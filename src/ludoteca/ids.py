"""Sequential id allocation, one allocator per entity type."""


class IdAllocator:
    """Hands out increasing integer ids.

    The counter holds the id the next call to ``next()`` returns. Its value
    is exported and imported explicitly so saved state can resume numbering
    without reuse.
    """

    def __init__(self, start: int = 1):
        """Initialize allocator.

        Args:
            start: First id to hand out
        """
        self._check(start)
        self._next = start

    def __repr__(self) -> str:
        return f"<IdAllocator(next={self._next})>"

    @staticmethod
    def _check(value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Id counter must be an int, got {type(value).__name__}")
        if value < 1:
            raise ValueError(f"Id counter must be >= 1, got {value}")

    def next(self) -> int:
        """Return the current counter value and advance it."""
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        """Return the id the next ``next()`` call will hand out."""
        return self._next

    def export_state(self) -> int:
        """Export the counter for persistence."""
        return self._next

    def import_state(self, value: int) -> None:
        """Restore the counter so the next ``next()`` returns ``value``."""
        self._check(value)
        self._next = value

    def ensure_above(self, max_id: int) -> bool:
        """Move the counter past ``max_id`` if needed.

        Returns:
            True if the counter was moved
        """
        if self._next <= max_id:
            self._next = max_id + 1
            return True
        return False
