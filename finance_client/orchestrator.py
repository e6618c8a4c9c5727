"""
Write Flows and Session Wiring

This module ties the components together and defines the
end-to-end write flow:

    form -> validate -> send -> trigger_refresh -> views reload

DESIGN DECISION: The write flow enforces the boundaries:
- No request is built from a form that failed validation
- No local state is ever edited by a write; views learn about the
  change only through the refresh bus and reload from the server
- Every write is audited with a correlation ID

``FinanceSession`` wires one API client, one bus and the screen
controllers together for an app.
"""

from typing import Callable, Optional
from uuid import UUID

from finance_client import messages
from finance_client.audit import AuditLogger, create_correlation_id
from finance_client.budget import BudgetController
from finance_client.events import RefreshBus
from finance_client.ledger import LedgerController, Notifier
from finance_client.projections import ProjectionsController
from finance_client.models.forms import (
    AccountAdjustmentForm,
    AccountMovementForm,
    BulkReserveDepositForm,
    NewAccountForm,
    NewProjectionForm,
    NewReserveForm,
    OperationResult,
    ProjectionUpdateForm,
    ReserveDepositForm,
    ReserveQuotaUpdateForm,
    ReserveUpdateForm,
    ReserveWithdrawalForm,
    WriteForm,
)
from finance_client.models.ledger import LedgerKind, LedgerWindow
from finance_client.services.api import (
    ApiError,
    FinanceApiClient,
    MovementSourceInterface,
    ProjectionSourceInterface,
    WriteTargetInterface,
)
from finance_client.validation import FormValidator

# form type -> (operation name, success message, failure fallback)
_OPERATIONS: dict[type, tuple[str, str, str]] = {
    AccountMovementForm: (
        "create_account_movement", messages.MOVEMENT_CREATED, messages.MOVEMENT_CREATE_FAILED
    ),
    NewAccountForm: (
        "create_account", messages.ACCOUNT_CREATED, messages.ACCOUNT_CREATE_FAILED
    ),
    AccountAdjustmentForm: (
        "adjust_account", messages.ACCOUNT_ADJUSTED, messages.ACCOUNT_ADJUST_FAILED
    ),
    ReserveDepositForm: (
        "reserve_deposit", messages.DEPOSIT_DONE, messages.DEPOSIT_FAILED
    ),
    ReserveWithdrawalForm: (
        "reserve_withdrawal", messages.WITHDRAWAL_DONE, messages.WITHDRAWAL_FAILED
    ),
    NewReserveForm: (
        "create_reserve", messages.RESERVE_CREATED, messages.RESERVE_CREATE_FAILED
    ),
    ReserveUpdateForm: (
        "update_reserve", messages.RESERVE_UPDATED, messages.RESERVE_UPDATE_FAILED
    ),
    ReserveQuotaUpdateForm: (
        "update_reserve_quota", messages.RESERVE_UPDATED, messages.RESERVE_QUOTA_UPDATE_FAILED
    ),
    BulkReserveDepositForm: (
        "bulk_reserve_deposit", messages.BULK_DEPOSIT_DONE, messages.BULK_DEPOSIT_FAILED
    ),
    NewProjectionForm: (
        "create_projection", messages.PROJECTION_CREATED, messages.PROJECTION_CREATE_FAILED
    ),
    ProjectionUpdateForm: (
        "update_projection", messages.PROJECTION_UPDATED, messages.PROJECTION_UPDATE_FAILED
    ),
}


class WriteFlow:
    """
    Orchestrates every write against the server.

    Flow:
    1. Validate -> two-stage form validation (nothing sent on failure)
    2. Send -> one request (two for a quota update: read, then write)
    3. Refresh -> bump the bus generation so views reload

    A failed write never triggers a refresh.
    """

    def __init__(
        self,
        api: WriteTargetInterface,
        refresh_bus: RefreshBus,
        movement_source: Optional[MovementSourceInterface] = None,
        projection_source: Optional[ProjectionSourceInterface] = None,
        validator: Optional[FormValidator] = None,
        notify: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._api = api
        self._bus = refresh_bus
        if movement_source is None and isinstance(api, MovementSourceInterface):
            movement_source = api
        self._movements = movement_source
        if projection_source is None and isinstance(api, ProjectionSourceInterface):
            projection_source = api
        self._projections = projection_source
        self._validator = validator or FormValidator()
        self._notify = notify
        self._audit = audit_logger or AuditLogger()

    async def submit(
        self,
        form: WriteForm,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """
        Validate and send one write form.

        Returns:
            OperationResult with the message to show.
        """
        correlation_id = correlation_id or create_correlation_id()
        operation, success_message, failure_message = _OPERATIONS[type(form)]

        validation = self._validator.validate(form)
        if validation.has_errors:
            self._audit.validation_rejected(
                operation,
                [issue.model_dump() for issue in validation.issues],
                correlation_id,
            )
            return self._report(OperationResult.failed(validation.first_error))

        try:
            await self._send(form)
        except ApiError as e:
            return self._failed(operation, e, failure_message, correlation_id)

        return self._succeeded(operation, success_message, correlation_id, _entity_id(form))

    async def delete_movement(
        self,
        kind: LedgerKind,
        movement_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """
        Delete a movement from an account or reserve ledger.

        Open ledgers drop the movement when they reload; nothing is
        removed locally.
        """
        if self._movements is None:
            raise ValueError("delete_movement needs a movement source")
        correlation_id = correlation_id or create_correlation_id()
        operation = f"delete_{kind.value}_movement"

        try:
            await self._movements.delete_movement(kind, movement_id)
        except ApiError as e:
            return self._failed(operation, e, messages.MOVEMENT_DELETE_FAILED, correlation_id)

        return self._succeeded(operation, messages.MOVEMENT_DELETED, correlation_id, movement_id)

    async def delete_projection(
        self,
        projection_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Delete a projection; the projections view reloads from the bus."""
        if self._projections is None:
            raise ValueError("delete_projection needs a projection source")
        correlation_id = correlation_id or create_correlation_id()
        operation = "delete_projection"

        try:
            await self._projections.delete_projection(projection_id)
        except ApiError as e:
            return self._failed(operation, e, messages.PROJECTION_DELETE_FAILED, correlation_id)

        return self._succeeded(operation, messages.PROJECTION_DELETED, correlation_id, projection_id)

    async def reset_reserve_month(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Start a new month for every reserve."""
        correlation_id = correlation_id or create_correlation_id()
        operation = "reset_reserve_month"

        try:
            await self._api.reset_reserve_month()
        except ApiError as e:
            return self._failed(operation, e, messages.MONTH_RESET_FAILED, correlation_id)

        return self._succeeded(operation, messages.MONTH_RESET_DONE, correlation_id)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _send(self, form: WriteForm) -> None:
        if isinstance(form, AccountMovementForm):
            await self._api.create_account_movement(form)
        elif isinstance(form, NewAccountForm):
            await self._api.create_account(form)
        elif isinstance(form, AccountAdjustmentForm):
            await self._api.adjust_account(form)
        elif isinstance(form, (ReserveDepositForm, ReserveWithdrawalForm)):
            await self._api.create_reserve_movement(form)
        elif isinstance(form, NewReserveForm):
            await self._api.create_reserve(form)
        elif isinstance(form, ReserveUpdateForm):
            await self._api.update_reserve(form.reserve_id, form.to_payload())
        elif isinstance(form, ReserveQuotaUpdateForm):
            # The server replaces the whole record, so start from its copy
            reserve = await self._api.get_reserve(form.reserve_id)
            await self._api.update_reserve(form.reserve_id, form.apply_to(reserve))
        elif isinstance(form, BulkReserveDepositForm):
            await self._api.bulk_reserve_deposit(form)
        elif isinstance(form, NewProjectionForm):
            await self._api.create_projection(form)
        elif isinstance(form, ProjectionUpdateForm):
            await self._api.update_projection(form)
        else:
            raise TypeError(f"Unsupported form: {type(form).__name__}")

    def _succeeded(
        self,
        operation: str,
        message: str,
        correlation_id: UUID,
        entity_id: Optional[int] = None,
    ) -> OperationResult:
        self._audit.write_succeeded(operation, correlation_id, entity_id)
        self._bus.trigger_refresh()
        return self._report(OperationResult.ok(message))

    def _failed(
        self,
        operation: str,
        error: ApiError,
        fallback: str,
        correlation_id: UUID,
    ) -> OperationResult:
        message = error.user_message(fallback)
        self._audit.write_failed(operation, message, correlation_id, error.status_code)
        return self._report(OperationResult.failed(message))

    def _report(self, result: OperationResult) -> OperationResult:
        if self._notify and result.message:
            title = messages.SUCCESS_TITLE if result.success else messages.ERROR_TITLE
            self._notify(title, result.message)
        return result


def _entity_id(form: WriteForm) -> Optional[int]:
    for attribute in ("reserve_id", "account_id", "projection_id"):
        value = getattr(form, attribute, None)
        if value is not None:
            return value
    return None


class FinanceSession:
    """
    One signed-in session: an API client, a private refresh bus, and
    factories for the controllers that share them.

    Usage:
        async with FinanceSession(token_provider=store.token) as session:
            ledger = session.ledger(LedgerKind.ACCOUNT, account_id)
            await ledger.open()
            await session.writes.submit(AccountMovementForm(...))
    """

    def __init__(
        self,
        api: Optional[FinanceApiClient] = None,
        refresh_bus: Optional[RefreshBus] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_session_expired: Optional[Callable[[], None]] = None,
        notify: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit = audit_logger or AuditLogger()
        self.api = api or FinanceApiClient(
            token_provider=token_provider,
            on_session_expired=on_session_expired,
            audit_logger=self._audit,
        )
        self.bus = refresh_bus or RefreshBus(self._audit)
        self._notify = notify
        self.writes = WriteFlow(
            self.api,
            self.bus,
            notify=notify,
            audit_logger=self._audit,
        )

    def ledger(
        self,
        kind: LedgerKind,
        ledger_id: int,
        window: Optional[LedgerWindow] = None,
    ) -> LedgerController:
        return LedgerController(
            self.api,
            kind,
            ledger_id,
            window=window,
            refresh_bus=self.bus,
            notify=self._notify,
            audit_logger=self._audit,
        )

    def budget(self) -> BudgetController:
        return BudgetController(
            self.api,
            refresh_bus=self.bus,
            notify=self._notify,
            audit_logger=self._audit,
        )

    def projections(self) -> ProjectionsController:
        return ProjectionsController(
            self.api,
            refresh_bus=self.bus,
            notify=self._notify,
            audit_logger=self._audit,
        )

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "FinanceSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
