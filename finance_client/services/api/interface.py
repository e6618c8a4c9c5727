"""
Abstract Server Interfaces

DESIGN DECISION: Controllers depend on these interfaces, not on the
HTTP client. This allows us to:
1. Drive every state machine in tests with in-memory fakes
2. Hold a response back to test in-flight behavior
3. Swap the transport without touching business logic

The split follows what each consumer needs: ledgers read and delete
movements, the budget view reads the summary and saves the config,
the projections view lists and deletes projections, write flows create
and update.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from finance_client.models.budget import AllocationSubmission, BudgetSummary
from finance_client.models.forms import (
    AccountAdjustmentForm,
    AccountMovementForm,
    BulkReserveDepositForm,
    NewAccountForm,
    NewProjectionForm,
    NewReserveForm,
    ProjectionUpdateForm,
    ReserveDepositForm,
    ReserveWithdrawalForm,
)
from finance_client.models.ledger import LedgerKind, LedgerWindow, MovementPage
from finance_client.models.projection import Projection
from finance_client.models.reserve import Reserve


class MovementSourceInterface(ABC):
    """Paged access to the movements of an account or reserve."""

    @abstractmethod
    async def list_movements(
        self,
        kind: LedgerKind,
        ledger_id: int,
        window: LedgerWindow,
        page: int,
        size: int,
    ) -> MovementPage:
        """
        Fetch one page of movements inside a month window.

        Raises:
            ApiError: If the request fails or the server rejects it
        """
        pass

    @abstractmethod
    async def delete_movement(self, kind: LedgerKind, movement_id: int) -> None:
        """
        Delete a movement on the server.

        Raises:
            ApiError: If the request fails or the server rejects it
        """
        pass


class BudgetSourceInterface(ABC):
    """Budget summary and allocation configuration."""

    @abstractmethod
    async def get_budget_summary(self) -> BudgetSummary:
        pass

    @abstractmethod
    async def save_allocation(self, submission: AllocationSubmission) -> None:
        """
        Replace the allocation configuration.

        The server re-checks that percentages sum to 100.
        """
        pass


class ProjectionSourceInterface(ABC):
    """The user's projected amounts."""

    @abstractmethod
    async def list_projections(self) -> list[Projection]:
        pass

    @abstractmethod
    async def delete_projection(self, projection_id: int) -> None:
        """
        Delete a projection on the server.

        Raises:
            ApiError: If the request fails or the server rejects it
        """
        pass


class WriteTargetInterface(ABC):
    """Create/update operations behind the typed write forms."""

    @abstractmethod
    async def create_account_movement(self, form: AccountMovementForm) -> None:
        pass

    @abstractmethod
    async def create_account(self, form: NewAccountForm) -> None:
        pass

    @abstractmethod
    async def adjust_account(self, form: AccountAdjustmentForm) -> None:
        pass

    @abstractmethod
    async def create_reserve_movement(
        self,
        form: Union[ReserveDepositForm, ReserveWithdrawalForm],
    ) -> None:
        pass

    @abstractmethod
    async def create_reserve(self, form: NewReserveForm) -> None:
        pass

    @abstractmethod
    async def get_reserve(self, reserve_id: int) -> Reserve:
        pass

    @abstractmethod
    async def update_reserve(self, reserve_id: int, payload: dict) -> None:
        """Replace a reserve with a full server-shaped payload."""
        pass

    @abstractmethod
    async def bulk_reserve_deposit(self, form: BulkReserveDepositForm) -> None:
        pass

    @abstractmethod
    async def reset_reserve_month(self) -> None:
        pass

    @abstractmethod
    async def create_projection(self, form: NewProjectionForm) -> None:
        pass

    @abstractmethod
    async def update_projection(self, form: ProjectionUpdateForm) -> None:
        pass


class ApiError(Exception):
    """
    A request failed or the server answered with a non-success status.

    ``server_message`` is the server's own error text, when it sent one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        self.status_code = status_code
        self.server_message = server_message
        super().__init__(message)

    def user_message(self, fallback: str) -> str:
        """Text to show the user: the server's, or ``fallback``."""
        return self.server_message or fallback


class TransportError(ApiError):
    """The server could not be reached or did not answer in time."""
    pass


class SessionExpiredError(ApiError):
    """The server rejected the credentials (401/403)."""
    pass


class MalformedResponseError(ApiError):
    """The server answered with a body that does not match the contract."""
    pass
