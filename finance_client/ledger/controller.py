"""
Ledger Controller

One instance per open account or reserve detail view. It fetches
movements page by page for one month window and accumulates them.

IMPORTANT BOUNDARIES:
1. At most one load-more in flight; extra calls are dropped, not queued
2. A failed fetch keeps what already loaded and stops the spinner
3. Items are never removed locally; a deleted movement disappears
   when the refresh bus makes the controller reload
4. A newer request always wins: stale responses are discarded by
   sequence number, never merged
"""

import asyncio
from typing import Callable, Optional

from finance_client import messages
from finance_client.audit import AuditLogger
from finance_client.config import get_settings
from finance_client.events import RefreshBus, get_refresh_bus
from finance_client.ledger.state import (
    LedgerEvent,
    LoadMoreStarted,
    PageFailed,
    PageLoaded,
    WindowOpened,
    initial_state,
    transition,
)
from finance_client.models.ledger import LedgerKind, LedgerWindow, PageState
from finance_client.services.api import ApiError, MovementSourceInterface

# (title, message) -> shown as a blocking notification by the view
Notifier = Callable[[str, str], None]


class LedgerController:
    """
    Paginated, month-filtered movement list.

    Args:
        source: Where movements come from.
        kind: Account or reserve ledger.
        ledger_id: The account or reserve id.
        window: Initial month window; defaults to the current month.
        page_size: Defaults to the ledger settings (10).
        refresh_bus: Invalidation channel; defaults to the process bus.
        notify: Receives load failures for display.
    """

    def __init__(
        self,
        source: MovementSourceInterface,
        kind: LedgerKind,
        ledger_id: int,
        window: Optional[LedgerWindow] = None,
        page_size: Optional[int] = None,
        refresh_bus: Optional[RefreshBus] = None,
        notify: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._source = source
        self._kind = kind
        self._ledger_id = ledger_id
        self._page_size = page_size or get_settings().ledger.page_size
        self._bus = refresh_bus or get_refresh_bus()
        self._notify = notify
        self._audit = audit_logger or AuditLogger()

        self._state = initial_state(window or LedgerWindow.current())
        self._sequence = 0
        self._loaded_generation: Optional[int] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._pending: set[asyncio.Task] = set()

    @property
    def state(self) -> PageState:
        """Read-only snapshot of the current page state."""
        return self._state

    @property
    def window(self) -> LedgerWindow:
        return self._state.window

    @property
    def kind(self) -> LedgerKind:
        return self._kind

    @property
    def ledger_id(self) -> int:
        return self._ledger_id

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self) -> PageState:
        """Subscribe to refreshes and load the first page."""
        if self._unsubscribe is None:
            self._unsubscribe = self._bus.subscribe(self._on_refresh)
        return await self._load_initial(self._state.window)

    def close(self) -> None:
        """Stop listening for refreshes. In-flight fetches still land."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    async def change_window(self, window: LedgerWindow) -> PageState:
        """Discard accumulated pages and load page 0 of ``window``."""
        return await self._load_initial(window)

    async def shift_window(self, months: int) -> PageState:
        return await self.change_window(self._state.window.shifted(months))

    async def reload(self) -> PageState:
        return await self._load_initial(self._state.window)

    async def load_more(self) -> PageState:
        """
        Fetch the next page if there is one and nothing is in flight.

        Calls made while a fetch is pending are dropped.
        """
        if self._state.is_busy:
            self._audit.load_more_dropped(self._kind.value, self._ledger_id, "fetch in flight")
            return self._state
        if not self._state.has_more:
            self._audit.load_more_dropped(self._kind.value, self._ledger_id, "no more pages")
            return self._state

        sequence = self._next_sequence()
        page = self._state.page_index
        self._apply(LoadMoreStarted(sequence=sequence))
        return await self._fetch(sequence, page)

    async def refresh_if_stale(self) -> PageState:
        """Reload from page 0 if the bus generation moved since the last load."""
        if self._loaded_generation != self._bus.generation:
            return await self.reload()
        return self._state

    async def wait_for_pending(self) -> None:
        """Wait for reloads scheduled by refresh signals."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def _on_refresh(self, generation: int) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the next refresh_if_stale() call picks it up
            return
        task = loop.create_task(self.refresh_if_stale())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _load_initial(self, window: LedgerWindow) -> PageState:
        sequence = self._next_sequence()
        self._loaded_generation = self._bus.generation
        self._apply(WindowOpened(window=window, sequence=sequence))
        return await self._fetch(sequence, 0)

    async def _fetch(self, sequence: int, page: int) -> PageState:
        window = self._state.window
        self._audit.load_started(
            self._kind.value, self._ledger_id, page, sequence, window.month, window.year
        )

        try:
            result = await self._source.list_movements(
                self._kind,
                self._ledger_id,
                window,
                page,
                self._page_size,
            )
        except ApiError as e:
            self._fail(sequence, page, e.user_message(messages.LEDGER_LOAD_FAILED))
            return self._state
        except Exception:
            self._fail(sequence, page, messages.LEDGER_LOAD_FAILED)
            raise

        if self._apply(PageLoaded(sequence=sequence, page=result)):
            self._audit.page_loaded(
                self._kind.value,
                self._ledger_id,
                page,
                len(result.content),
                result.total_pages,
            )
        return self._state

    def _fail(self, sequence: int, page: int, message: str) -> None:
        if self._apply(PageFailed(sequence=sequence, message=message)):
            self._audit.load_failed(self._kind.value, self._ledger_id, page, message)
            if self._notify:
                self._notify(messages.ERROR_TITLE, message)

    def _apply(self, event: LedgerEvent) -> bool:
        """Run the transition; returns False if the event was a no-op."""
        new_state = transition(self._state, event)
        if new_state is self._state:
            if isinstance(event, (PageLoaded, PageFailed)):
                self._audit.stale_response_discarded(
                    self._kind.value,
                    self._ledger_id,
                    event.sequence,
                    self._state.sequence,
                )
            return False
        self._state = new_state
        return True
