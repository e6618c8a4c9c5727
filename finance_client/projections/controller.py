"""
Projections Controller

The projections list and its total. Writes go through ``WriteFlow``;
this view only reloads when the refresh bus says something changed.
"""

import asyncio
from decimal import Decimal
from typing import Callable, Optional

from finance_client import messages
from finance_client.audit import AuditLogger
from finance_client.events import RefreshBus, get_refresh_bus
from finance_client.ledger import Notifier
from finance_client.models.projection import Projection, projected_total
from finance_client.services.api import ApiError, ProjectionSourceInterface


class ProjectionsController:
    """
    Projected amounts for the projections screen.

    Args:
        source: Where the projection list comes from.
        refresh_bus: Invalidation channel; defaults to the process bus.
        notify: Receives (title, message) pairs for display.
    """

    def __init__(
        self,
        source: ProjectionSourceInterface,
        refresh_bus: Optional[RefreshBus] = None,
        notify: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._source = source
        self._bus = refresh_bus or get_refresh_bus()
        self._notify = notify
        self._audit = audit_logger or AuditLogger()

        self._projections: list[Projection] = []
        self._loading = False
        self._error_message: Optional[str] = None
        self._sequence = 0
        self._loaded_generation: Optional[int] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._pending: set[asyncio.Task] = set()

    @property
    def projections(self) -> list[Projection]:
        return list(self._projections)

    @property
    def total(self) -> Decimal:
        return projected_total(self._projections)

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    async def open(self) -> list[Projection]:
        if self._unsubscribe is None:
            self._unsubscribe = self._bus.subscribe(self._on_refresh)
        return await self.load()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def load(self) -> list[Projection]:
        """Fetch the list; a failure keeps the previous one."""
        self._sequence += 1
        sequence = self._sequence
        self._loaded_generation = self._bus.generation
        self._loading = True

        try:
            projections = await self._source.list_projections()
        except ApiError as e:
            if sequence == self._sequence:
                message = e.user_message(messages.PROJECTIONS_LOAD_FAILED)
                self._loading = False
                self._error_message = message
                self._audit.projections_load_failed(message)
                if self._notify:
                    self._notify(messages.ERROR_TITLE, message)
            return self.projections
        except Exception:
            if sequence == self._sequence:
                self._loading = False
                self._error_message = messages.PROJECTIONS_LOAD_FAILED
            raise

        if sequence != self._sequence:
            return self.projections

        self._projections = list(projections)
        self._loading = False
        self._error_message = None
        self._audit.projections_loaded(len(self._projections))
        return self.projections

    async def refresh_if_stale(self) -> list[Projection]:
        if self._loaded_generation != self._bus.generation:
            return await self.load()
        return self.projections

    async def wait_for_pending(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _on_refresh(self, generation: int) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.refresh_if_stale())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
