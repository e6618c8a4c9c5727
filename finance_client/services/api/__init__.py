"""
Finance Server API Package

Provides the abstract server interfaces and the httpx implementation.
"""

from finance_client.services.api.interface import (
    ApiError,
    BudgetSourceInterface,
    MalformedResponseError,
    MovementSourceInterface,
    ProjectionSourceInterface,
    SessionExpiredError,
    TransportError,
    WriteTargetInterface,
)
from finance_client.services.api.client import FinanceApiClient

__all__ = [
    # Interfaces
    "BudgetSourceInterface",
    "MovementSourceInterface",
    "ProjectionSourceInterface",
    "WriteTargetInterface",
    # Exceptions
    "ApiError",
    "MalformedResponseError",
    "SessionExpiredError",
    "TransportError",
    # HTTP implementation
    "FinanceApiClient",
]
