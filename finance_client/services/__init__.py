"""Services package."""

from finance_client.services.api import (
    ApiError,
    BudgetSourceInterface,
    FinanceApiClient,
    MalformedResponseError,
    MovementSourceInterface,
    SessionExpiredError,
    TransportError,
    WriteTargetInterface,
)

__all__ = [
    "ApiError",
    "BudgetSourceInterface",
    "FinanceApiClient",
    "MalformedResponseError",
    "MovementSourceInterface",
    "SessionExpiredError",
    "TransportError",
    "WriteTargetInterface",
]
