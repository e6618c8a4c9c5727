"""Invalidation signalling package."""

from finance_client.events.refresh_bus import RefreshBus, RefreshHandler, get_refresh_bus

__all__ = ["RefreshBus", "RefreshHandler", "get_refresh_bus"]
