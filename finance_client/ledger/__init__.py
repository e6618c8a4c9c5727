"""Paginated ledger package."""

from finance_client.ledger.controller import LedgerController, Notifier
from finance_client.ledger.state import (
    LedgerEvent,
    LoadMoreStarted,
    PageFailed,
    PageLoaded,
    WindowOpened,
    initial_state,
    is_stale,
    transition,
)

__all__ = [
    "LedgerController",
    "LedgerEvent",
    "LoadMoreStarted",
    "Notifier",
    "PageFailed",
    "PageLoaded",
    "WindowOpened",
    "initial_state",
    "is_stale",
    "transition",
]
