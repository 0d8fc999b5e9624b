"""Persistence of the ledger to a JSON file."""

from .codec import decode, dump_state, encode, restore_state
from .schemas import LedgerState
from .storage import FileStorage, LedgerStore, TextStorage

__all__ = [
    "encode",
    "decode",
    "dump_state",
    "restore_state",
    "LedgerState",
    "FileStorage",
    "LedgerStore",
    "TextStorage",
]
