"""
Refresh Bus

A generation counter with explicit subscribers. Any successful write
advances the generation; every view showing server-derived data
subscribes and treats any change as "reload from the first page".

The signal carries no payload on purpose: subscribers do not learn
what changed, only that something did, and re-fetch their own range.
"""

from functools import lru_cache
from typing import Callable, Optional

from finance_client.audit import AuditLogger

RefreshHandler = Callable[[int], None]


class RefreshBus:
    """
    Process-wide invalidation channel.

    Fan-out is synchronous: every subscriber sees the new generation
    before ``trigger_refresh`` returns. The generation only ever goes up.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._generation = 0
        self._subscribers: list[RefreshHandler] = []
        self._audit = audit_logger or AuditLogger()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, handler: RefreshHandler) -> Callable[[], None]:
        """Register ``handler``; returns a callable that unregisters it."""
        self._subscribers.append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(handler)

        return unsubscribe

    def unsubscribe(self, handler: RefreshHandler) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def trigger_refresh(self) -> int:
        """
        Advance the generation and notify every subscriber.

        A subscriber that raises is logged and skipped; the others are
        still notified.
        """
        self._generation += 1
        generation = self._generation
        self._audit.refresh_triggered(generation, len(self._subscribers))

        for handler in list(self._subscribers):
            try:
                handler(generation)
            except Exception as e:
                self._audit.refresh_subscriber_failed(generation, str(e))

        return generation


@lru_cache()
def get_refresh_bus() -> RefreshBus:
    """
    Get the process-wide refresh bus (cached).

    Components take their bus by injection; this is the default they
    fall back to.
    """
    return RefreshBus()
