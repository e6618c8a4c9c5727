"""
Tests for the HTTP client, using httpx.MockTransport.

No real network calls are made.
"""

import json
from decimal import Decimal

import httpx
import pytest

from finance_client.config import ApiSettings
from finance_client.models.forms import (
    AccountMovementForm,
    BulkReserveDepositForm,
    NewAccountForm,
    NewProjectionForm,
    ProjectionUpdateForm,
    ReserveWithdrawalForm,
)
from finance_client.models.ledger import LedgerKind, LedgerWindow, MovementDirection
from finance_client.models.projection import AccountType
from finance_client.services.api import (
    ApiError,
    FinanceApiClient,
    MalformedResponseError,
    SessionExpiredError,
    TransportError,
)


class Recorder:
    """A MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def settings(**overrides) -> ApiSettings:
    values = {
        "base_url": "https://finance.test/",
        "token": "secret",
        "retry_attempts": 3,
        "retry_wait_min": 0,
        "retry_wait_max": 0,
    }
    values.update(overrides)
    return ApiSettings(**values)


def client_for(recorder: Recorder, **kwargs) -> FinanceApiClient:
    return FinanceApiClient(
        settings=kwargs.pop("settings", settings()),
        transport=httpx.MockTransport(recorder),
        **kwargs,
    )


class TestMovements:
    """Tests for the paginated movement endpoints."""

    @pytest.mark.asyncio
    async def test_list_account_movements(self):
        """Path, paging and window parameters are sent; the page is parsed."""
        recorder = Recorder(httpx.Response(200, json={
            "content": [{
                "id": 1,
                "concepto": "Salario",
                "valor": 1500.5,
                "tipoMovimiento": "INGRESO",
                "fecha": "2026-10-03",
            }],
            "totalPages": 3,
        }))

        async with client_for(recorder) as client:
            page = await client.list_movements(
                LedgerKind.ACCOUNT, 5, LedgerWindow(month=10, year=2026), 0, 10
            )

        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/api/cuentas/5/movimientos"
        assert dict(request.url.params) == {"page": "0", "size": "10", "mes": "10", "anio": "2026"}
        assert request.headers["Authorization"] == "Bearer secret"
        assert page.total_pages == 3
        assert page.content[0].direction == MovementDirection.INCOME
        assert page.content[0].value == Decimal("1500.5")

    @pytest.mark.asyncio
    async def test_list_reserve_movements_path(self):
        recorder = Recorder(httpx.Response(200, json={"content": [], "totalPages": 0}))

        async with client_for(recorder) as client:
            await client.list_movements(
                LedgerKind.RESERVE, 9, LedgerWindow(month=1, year=2026), 2, 10
            )

        assert recorder.requests[0].url.path == "/api/reservas/9/movimientos"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind,path", [
        (LedgerKind.ACCOUNT, "/api/finanzas/movimientos/7"),
        (LedgerKind.RESERVE, "/api/reservas/movimientos/7"),
    ])
    async def test_delete_paths(self, kind, path):
        """Account and reserve movements are deleted through different roots."""
        recorder = Recorder(httpx.Response(204))

        async with client_for(recorder) as client:
            await client.delete_movement(kind, 7)

        assert recorder.requests[0].method == "DELETE"
        assert recorder.requests[0].url.path == path

    @pytest.mark.asyncio
    async def test_malformed_page(self):
        """A body that is not a movement page is reported as malformed."""
        recorder = Recorder(httpx.Response(200, json={"content": [{"id": "x"}], "totalPages": 1}))

        async with client_for(recorder) as client:
            with pytest.raises(MalformedResponseError):
                await client.list_movements(
                    LedgerKind.ACCOUNT, 5, LedgerWindow(month=10, year=2026), 0, 10
                )


class TestErrors:
    """Tests for error mapping."""

    @pytest.mark.asyncio
    async def test_server_error_text_is_carried(self):
        """The server's ``error`` field becomes the user message."""
        recorder = Recorder(httpx.Response(400, json={"error": "Saldo insuficiente"}))

        async with client_for(recorder) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.create_account_movement(AccountMovementForm(
                    account_id=1, value=Decimal("10"), concept="Café"
                ))

        assert exc_info.value.status_code == 400
        assert exc_info.value.user_message("fallback") == "Saldo insuficiente"

    @pytest.mark.asyncio
    async def test_error_without_text_uses_fallback(self):
        recorder = Recorder(httpx.Response(500, text="oops"))

        async with client_for(recorder) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.reset_reserve_month()

        assert exc_info.value.user_message("fallback") == "fallback"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_session_expired_calls_hook(self, status):
        """401/403 call the hook and raise SessionExpiredError."""
        expired = []
        recorder = Recorder(httpx.Response(status))

        async with client_for(recorder, on_session_expired=lambda: expired.append(True)) as client:
            with pytest.raises(SessionExpiredError):
                await client.get_budget_summary()

        assert expired == [True]

    @pytest.mark.asyncio
    async def test_token_provider_wins_over_settings(self):
        recorder = Recorder(httpx.Response(200, json={}))

        async with client_for(recorder, token_provider=lambda: "fresh") as client:
            await client.get_budget_summary()

        assert recorder.requests[0].headers["Authorization"] == "Bearer fresh"

    @pytest.mark.asyncio
    async def test_no_token_no_header(self):
        recorder = Recorder(httpx.Response(200, json={}))

        async with client_for(recorder, settings=settings(token=None)) as client:
            await client.get_budget_summary()

        assert "Authorization" not in recorder.requests[0].headers


class TestRetries:
    """Tests for read retries."""

    @pytest.mark.asyncio
    async def test_get_retries_transport_failures(self):
        """A read that fails to connect is retried until it succeeds."""
        request = httpx.Request("GET", "https://finance.test/api/presupuesto/resumen")
        recorder = Recorder(
            httpx.ConnectError("refused", request=request),
            httpx.ConnectError("refused", request=request),
            httpx.Response(200, json={"config": {"ingresoSemanal": 500}}),
        )

        async with client_for(recorder) as client:
            summary = await client.get_budget_summary()

        assert len(recorder.requests) == 3
        assert summary.config.weekly_income == Decimal("500")

    @pytest.mark.asyncio
    async def test_get_gives_up_after_attempts(self):
        request = httpx.Request("GET", "https://finance.test/api/presupuesto/resumen")
        recorder = Recorder(httpx.ConnectError("refused", request=request))

        async with client_for(recorder, settings=settings(retry_attempts=2)) as client:
            with pytest.raises(TransportError):
                await client.get_budget_summary()

        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_server_errors_are_not_retried(self):
        recorder = Recorder(httpx.Response(500, json={"error": "x"}))

        async with client_for(recorder) as client:
            with pytest.raises(ApiError):
                await client.get_budget_summary()

        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_writes_are_never_retried(self):
        """A write is sent once even if the connection fails."""
        request = httpx.Request("POST", "https://finance.test/api/reservas/reservas-masivas")
        recorder = Recorder(httpx.ConnectError("refused", request=request))

        async with client_for(recorder) as client:
            with pytest.raises(TransportError):
                await client.bulk_reserve_deposit(BulkReserveDepositForm(weeks=2, concept="Q"))

        assert len(recorder.requests) == 1


class TestWrites:
    """Tests for write payloads."""

    @pytest.mark.asyncio
    async def test_withdrawal_payload(self):
        recorder = Recorder(httpx.Response(200))

        async with client_for(recorder) as client:
            await client.create_reserve_movement(ReserveWithdrawalForm(
                reserve_id=3, value=Decimal("50"), concept="Retiro", account_id=1
            ))

        request = recorder.requests[0]
        assert request.url.path == "/api/reservas/movimientos"
        assert json.loads(request.content) == {
            "idReserva": 3,
            "tipoMovimiento": "Retiro",
            "valor": 50.0,
            "concepto": "Retiro",
            "idCuenta": 1,
        }

    @pytest.mark.asyncio
    async def test_update_reserve_uses_put(self):
        recorder = Recorder(httpx.Response(200))

        async with client_for(recorder) as client:
            await client.update_reserve(4, {"concepto": "Viaje"})

        assert recorder.requests[0].method == "PUT"
        assert recorder.requests[0].url.path == "/api/reservas/4"

    @pytest.mark.asyncio
    async def test_get_reserve_keeps_unknown_fields(self):
        recorder = Recorder(httpx.Response(200, json={
            "id": 4, "concepto": "Viaje", "tipo": "AHORRO", "usuarioId": 12,
        }))

        async with client_for(recorder) as client:
            reserve = await client.get_reserve(4)

        assert reserve.to_payload()["usuarioId"] == 12

    @pytest.mark.asyncio
    async def test_create_account(self):
        recorder = Recorder(httpx.Response(201))

        async with client_for(recorder) as client:
            await client.create_account(NewAccountForm(
                description="Tarjeta", account_type=AccountType.CREDIT
            ))

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/cuentas"
        assert json.loads(request.content) == {"descripcion": "Tarjeta", "tipo": "CREDITO"}


class TestProjections:
    """Tests for the projection endpoints."""

    @pytest.mark.asyncio
    async def test_list_projections(self):
        recorder = Recorder(httpx.Response(200, json=[
            {"id": 1, "concepto": "Prima", "valor": 750000},
            {"id": 2, "concepto": "Impuestos", "valor": None},
        ]))

        async with client_for(recorder) as client:
            projections = await client.list_projections()

        assert recorder.requests[0].url.path == "/api/proyecciones"
        assert [p.concept for p in projections] == ["Prima", "Impuestos"]
        assert projections[0].value == Decimal("750000")
        assert projections[1].value == Decimal("0")

    @pytest.mark.asyncio
    async def test_empty_body_is_empty_list(self):
        async with client_for(Recorder(httpx.Response(200))) as client:
            assert await client.list_projections() == []

    @pytest.mark.asyncio
    async def test_malformed_list(self):
        recorder = Recorder(httpx.Response(200, json=[{"concepto": "sin id"}]))

        async with client_for(recorder) as client:
            with pytest.raises(MalformedResponseError):
                await client.list_projections()

    @pytest.mark.asyncio
    async def test_create_projection(self):
        recorder = Recorder(httpx.Response(201))

        async with client_for(recorder) as client:
            await client.create_projection(NewProjectionForm(
                concept="Prima", value=Decimal("750000")
            ))

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/proyecciones"
        assert json.loads(request.content) == {"concepto": "Prima", "valor": 750000.0}

    @pytest.mark.asyncio
    async def test_update_projection_uses_put(self):
        recorder = Recorder(httpx.Response(200))

        async with client_for(recorder) as client:
            await client.update_projection(ProjectionUpdateForm(
                projection_id=7, concept="Prima", value=Decimal("800000")
            ))

        request = recorder.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/api/proyecciones/7"
        assert json.loads(request.content) == {"concepto": "Prima", "valor": 800000.0}

    @pytest.mark.asyncio
    async def test_delete_projection(self):
        recorder = Recorder(httpx.Response(204))

        async with client_for(recorder) as client:
            await client.delete_projection(7)

        assert recorder.requests[0].method == "DELETE"
        assert recorder.requests[0].url.path == "/api/proyecciones/7"

    @pytest.mark.asyncio
    async def test_delete_error_text_is_carried(self):
        recorder = Recorder(httpx.Response(404, json={"error": "Proyección no encontrada"}))

        async with client_for(recorder) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.delete_projection(7)

        assert exc_info.value.user_message("x") == "Proyección no encontrada"
