"""
Ledger Page State Machine

Pure transitions over PageState. No I/O and no clock: the controller
feeds events in and keeps whatever comes out.

    IDLE ──WindowOpened──▶ LOADING_INITIAL ──PageLoaded──▶ READY
    READY ──LoadMoreStarted──▶ LOADING_MORE ──PageLoaded──▶ READY
    LOADING_* ──PageFailed──▶ ERROR (items kept)

Every fetch carries a sequence number. A result whose sequence is not
the state's current one belongs to a superseded request and leaves the
state untouched, so two windows' items can never mix.
"""

from typing import Union

from pydantic import BaseModel, ConfigDict

from finance_client.models.ledger import (
    LedgerWindow,
    LoadStatus,
    MovementPage,
    PageState,
)


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    sequence: int


class WindowOpened(_Event):
    """A fresh load of page 0 for ``window`` (mount, window change, refresh)."""
    window: LedgerWindow


class LoadMoreStarted(_Event):
    """A request for the next page was issued."""
    pass


class PageLoaded(_Event):
    page: MovementPage


class PageFailed(_Event):
    message: str


LedgerEvent = Union[WindowOpened, LoadMoreStarted, PageLoaded, PageFailed]


def initial_state(window: LedgerWindow) -> PageState:
    return PageState(window=window)


def is_stale(state: PageState, event: LedgerEvent) -> bool:
    """True if ``event`` answers a request the state no longer waits on."""
    if not isinstance(event, (PageLoaded, PageFailed)):
        return False
    return event.sequence != state.sequence or not state.is_busy


def _evolve(state: PageState, **changes) -> PageState:
    fields = {name: getattr(state, name) for name in PageState.model_fields}
    fields.update(changes)
    return PageState(**fields)


def transition(state: PageState, event: LedgerEvent) -> PageState:
    """
    Apply ``event`` to ``state``.

    Returns the same object when the event does not apply (a stale
    result, or a load-more with nothing left to load or a fetch in
    flight), so callers can detect a no-op with ``is``.
    """
    if isinstance(event, WindowOpened):
        return PageState(
            window=event.window,
            status=LoadStatus.LOADING_INITIAL,
            sequence=event.sequence,
        )

    if isinstance(event, LoadMoreStarted):
        if not state.can_load_more:
            return state
        return _evolve(
            state,
            status=LoadStatus.LOADING_MORE,
            sequence=event.sequence,
            error_message=None,
        )

    if is_stale(state, event):
        return state

    if isinstance(event, PageLoaded):
        content = tuple(event.page.content)
        if state.status is LoadStatus.LOADING_INITIAL:
            items = content
        else:
            items = state.items + content
        total_pages = event.page.total_pages
        return _evolve(
            state,
            status=LoadStatus.READY,
            items=items,
            total_pages=total_pages,
            # An empty month reports zero pages; stay at 0/0
            page_index=min(state.page_index + 1, total_pages),
            error_message=None,
        )

    if isinstance(event, PageFailed):
        return _evolve(
            state,
            status=LoadStatus.ERROR,
            error_message=event.message,
        )

    raise TypeError(f"Unknown ledger event: {event!r}")
