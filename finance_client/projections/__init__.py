"""Projections screen state."""

from finance_client.projections.controller import ProjectionsController

__all__ = ["ProjectionsController"]
