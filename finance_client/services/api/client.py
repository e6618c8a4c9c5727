"""
Finance Server HTTP Client

DESIGN DECISION: One async client implements every server interface.
It owns the cross-cutting transport concerns:
1. Bearer token on every request
2. Session expiry (401/403) reported through a hook, never swallowed
3. The server's ``error`` text carried on the raised exception
4. Retries with backoff for reads only; a write is never re-sent

Everything returned is parsed into models at this boundary.
"""

from typing import Any, Callable, Optional, Union

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_client.audit import AuditLogger
from finance_client.config import ApiSettings, get_settings
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

BUDGET_SUMMARY_PATH = "/api/presupuesto/resumen"
BUDGET_CONFIG_PATH = "/api/presupuesto/config"
ACCOUNTS_PATH = "/api/cuentas"
ACCOUNT_MOVEMENTS_PATH = "/api/finanzas/movimientos"
ACCOUNT_ADJUST_PATH = "/api/cuentas/reajustar"
RESERVES_PATH = "/api/reservas"
RESERVE_MOVEMENTS_PATH = "/api/reservas/movimientos"
RESERVE_BULK_DEPOSIT_PATH = "/api/reservas/reservas-masivas"
RESERVE_RESET_MONTH_PATH = "/api/reservas/reiniciar-mes"
PROJECTIONS_PATH = "/api/proyecciones"


def _server_error_text(response: httpx.Response) -> Optional[str]:
    """Pull the ``error`` field out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        text = body.get("error") or body.get("message")
        return str(text) if text else None
    return None


class FinanceApiClient(
    MovementSourceInterface,
    BudgetSourceInterface,
    ProjectionSourceInterface,
    WriteTargetInterface,
):
    """
    Async JSON-over-HTTP client for the finance server.

    Args:
        settings: Server settings; defaults to the environment.
        token_provider: Called before every request for the bearer token.
                        Falls back to ``settings.token``.
        on_session_expired: Called when the server rejects the session.
        transport: Optional httpx transport (tests use MockTransport).
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_session_expired: Optional[Callable[[], None]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().api
        self._token_provider = token_provider
        self._on_session_expired = on_session_expired
        self._transport = transport
        self._audit = audit_logger or AuditLogger()
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else self._settings.token
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FinanceApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        """
        Send one request and decode the JSON body.

        Returns None for an empty (or non-JSON) success body.

        Raises:
            TransportError: Connection failure or timeout
            SessionExpiredError: 401/403
            ApiError: Any other non-success status
        """
        client = self._get_client()

        try:
            response = await client.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code in (401, 403):
            self._audit.session_expired(response.status_code, path)
            if self._on_session_expired:
                self._on_session_expired()
            raise SessionExpiredError(
                f"{method} {path} rejected the session",
                status_code=response.status_code,
                server_message=_server_error_text(response),
            )

        if response.is_error:
            raise ApiError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                server_message=_server_error_text(response),
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        """GET with retries on transport failures only."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.retry_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=self._settings.retry_wait_min,
                max=self._settings.retry_wait_max,
            ),
            retry=retry_if_exception_type(TransportError),
            reraise=True,
        )
        data = None
        async for attempt in retrying:
            with attempt:
                data = await self._send("GET", path, params=params)
        return data

    # -------------------------------------------------------------------------
    # Movements
    # -------------------------------------------------------------------------

    async def list_movements(
        self,
        kind: LedgerKind,
        ledger_id: int,
        window: LedgerWindow,
        page: int,
        size: int,
    ) -> MovementPage:
        path = f"{kind.list_root}/{ledger_id}/movimientos"
        params = {"page": page, "size": size, **window.as_params()}
        data = await self._get(path, params=params)
        try:
            return MovementPage.model_validate(data or {})
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected movement page from {path}: {e}") from e

    async def delete_movement(self, kind: LedgerKind, movement_id: int) -> None:
        await self._send("DELETE", f"{kind.delete_root}/movimientos/{movement_id}")

    # -------------------------------------------------------------------------
    # Budget
    # -------------------------------------------------------------------------

    async def get_budget_summary(self) -> BudgetSummary:
        data = await self._get(BUDGET_SUMMARY_PATH)
        try:
            return BudgetSummary.model_validate(data or {})
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected budget summary: {e}") from e

    async def save_allocation(self, submission: AllocationSubmission) -> None:
        await self._send("POST", BUDGET_CONFIG_PATH, json=submission.to_payload())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_account_movement(self, form: AccountMovementForm) -> None:
        await self._send("POST", ACCOUNT_MOVEMENTS_PATH, json=form.to_payload())

    async def create_account(self, form: NewAccountForm) -> None:
        await self._send("POST", ACCOUNTS_PATH, json=form.to_payload())

    async def adjust_account(self, form: AccountAdjustmentForm) -> None:
        await self._send("POST", ACCOUNT_ADJUST_PATH, json=form.to_payload())

    async def create_reserve_movement(
        self,
        form: Union[ReserveDepositForm, ReserveWithdrawalForm],
    ) -> None:
        await self._send("POST", RESERVE_MOVEMENTS_PATH, json=form.to_payload())

    async def create_reserve(self, form: NewReserveForm) -> None:
        await self._send("POST", RESERVES_PATH, json=form.to_payload())

    async def get_reserve(self, reserve_id: int) -> Reserve:
        data = await self._get(f"{RESERVES_PATH}/{reserve_id}")
        try:
            return Reserve.model_validate(data or {})
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected reserve {reserve_id}: {e}") from e

    async def update_reserve(self, reserve_id: int, payload: dict) -> None:
        await self._send("PUT", f"{RESERVES_PATH}/{reserve_id}", json=payload)

    async def bulk_reserve_deposit(self, form: BulkReserveDepositForm) -> None:
        await self._send("POST", RESERVE_BULK_DEPOSIT_PATH, json=form.to_payload())

    async def reset_reserve_month(self) -> None:
        await self._send("POST", RESERVE_RESET_MONTH_PATH)

    # -------------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------------

    async def list_projections(self) -> list[Projection]:
        data = await self._get(PROJECTIONS_PATH)
        try:
            return [Projection.model_validate(item) for item in data or []]
        except (ValidationError, TypeError) as e:
            raise MalformedResponseError(f"Unexpected projection list: {e}") from e

    async def create_projection(self, form: NewProjectionForm) -> None:
        await self._send("POST", PROJECTIONS_PATH, json=form.to_payload())

    async def update_projection(self, form: ProjectionUpdateForm) -> None:
        await self._send(
            "PUT",
            f"{PROJECTIONS_PATH}/{form.projection_id}",
            json=form.to_payload(),
        )

    async def delete_projection(self, projection_id: int) -> None:
        await self._send("DELETE", f"{PROJECTIONS_PATH}/{projection_id}")
