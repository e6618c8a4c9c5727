"""
Tests for the write flows and session wiring.
"""

from decimal import Decimal

import pytest

from finance_client import messages
from finance_client.ledger import LedgerController
from finance_client.models.forms import (
    AccountAdjustmentForm,
    AccountMovementForm,
    BulkReserveDepositForm,
    NewAccountForm,
    NewProjectionForm,
    NewReserveForm,
    ProjectionUpdateForm,
    ReserveDepositForm,
    ReserveQuotaUpdateForm,
    ReserveUpdateForm,
    ReserveWithdrawalForm,
)
from finance_client.models.ledger import LedgerKind, MovementDirection
from finance_client.models.projection import AccountType, Projection
from finance_client.models.reserve import Reserve, ReserveType
from finance_client.orchestrator import FinanceSession, WriteFlow
from finance_client.projections import ProjectionsController
from finance_client.services.api import ApiError

from conftest import FakeWriteApi


@pytest.fixture
def reserve():
    return Reserve.model_validate({
        "id": 4,
        "concepto": "Viaje",
        "tipo": "AHORRO",
        "valorMeta": 1000,
        "valorReservaSemanal": 50,
        "fechaMeta": "2027-01-01",
        "usuarioId": 12,
    })


@pytest.fixture
def projection():
    return Projection.model_validate({"id": 3, "concepto": "Prima", "valor": 750000})


@pytest.fixture
def api(reserve, projection):
    return FakeWriteApi(reserves={4: reserve}, projections=[projection])


@pytest.fixture
def flow(api, bus, notifications, audit):
    return WriteFlow(api, bus, notify=notifications, audit_logger=audit)


class TestSubmit:
    """Tests for submitting write forms."""

    @pytest.mark.asyncio
    async def test_valid_movement_is_sent_and_refreshes(self, flow, api, bus, notifications):
        """A successful write bumps the refresh generation once."""
        result = await flow.submit(AccountMovementForm(
            account_id=1,
            value=Decimal("25000"),
            concept="  Mercado ",
            direction=MovementDirection.EXPENSE,
        ))

        assert result.success
        assert result.message == messages.MOVEMENT_CREATED
        assert api.writes == [("create_account_movement", {
            "idCuenta": 1,
            "valor": 25000.0,
            "concepto": "Mercado",
            "tipoMovimiento": "EGRESO",
        })]
        assert bus.generation == 1
        assert notifications.received == [(messages.SUCCESS_TITLE, messages.MOVEMENT_CREATED)]

    @pytest.mark.asyncio
    async def test_invalid_form_is_not_sent(self, flow, api, bus):
        """Missing value and concept stop the write before any request."""
        result = await flow.submit(AccountMovementForm(account_id=1))

        assert not result.success
        assert result.message == messages.VALUE_AND_CONCEPT_REQUIRED
        assert api.writes == []
        assert bus.generation == 0

    @pytest.mark.asyncio
    async def test_server_error_does_not_refresh(self, flow, api, bus):
        """A rejected write shows the server text and leaves the generation alone."""
        api.error = ApiError("rejected", status_code=400, server_message="Saldo insuficiente")

        result = await flow.submit(ReserveWithdrawalForm(
            reserve_id=4, value=Decimal("10"), concept="x", account_id=1
        ))

        assert not result.success
        assert result.message == "Saldo insuficiente"
        assert bus.generation == 0

    @pytest.mark.asyncio
    async def test_server_error_without_text_uses_operation_fallback(self, flow, api):
        api.error = ApiError("timeout")

        result = await flow.submit(ReserveDepositForm(reserve_id=4, value=Decimal("10")))

        assert result.message == messages.DEPOSIT_FAILED

    @pytest.mark.asyncio
    async def test_credit_adjustment_sends_debt(self, flow, api):
        """Credit accounts are adjusted to total minus available credit."""
        form = AccountAdjustmentForm.from_credit_limits(2, Decimal("5000"), Decimal("3200"))

        result = await flow.submit(form)

        assert result.success
        assert api.writes == [("adjust_account", {"idCuenta": 2, "valor": 1800.0})]

    @pytest.mark.asyncio
    async def test_monthly_fixed_expense_has_no_goal_date(self, flow, api):
        result = await flow.submit(NewReserveForm(
            concept="Arriendo",
            reserve_type=ReserveType.MONTHLY_FIXED_EXPENSE,
            goal_value=Decimal("800"),
            weekly_quota=Decimal("200"),
        ))

        assert result.success
        assert api.writes[0][1]["fechaMeta"] is None
        assert api.writes[0][1]["tipo"] == "GASTO_FIJO_MES"

    @pytest.mark.asyncio
    async def test_reserve_update_sends_whole_record(self, flow, api, reserve):
        """Unknown server fields survive an edit."""
        form = ReserveUpdateForm.from_reserve(reserve).model_copy(update={"concept": "Vacaciones"})

        await flow.submit(form)

        name, (reserve_id, payload) = api.writes[0]
        assert name == "update_reserve"
        assert reserve_id == 4
        assert payload["concepto"] == "Vacaciones"
        assert payload["usuarioId"] == 12

    @pytest.mark.asyncio
    async def test_quota_update_reads_then_writes(self, flow, api):
        """Only the weekly quota changes on the fetched record."""
        result = await flow.submit(ReserveQuotaUpdateForm(reserve_id=4, weekly_quota=Decimal("75")))

        assert result.success
        _, (reserve_id, payload) = api.writes[0]
        assert payload["valorReservaSemanal"] == 75.0
        assert payload["concepto"] == "Viaje"

    @pytest.mark.asyncio
    async def test_bulk_deposit_rejects_zero_weeks(self, flow, api):
        result = await flow.submit(BulkReserveDepositForm(weeks=0, concept="Quincena"))

        assert result.message == messages.WEEKS_MUST_BE_POSITIVE
        assert api.writes == []

    @pytest.mark.asyncio
    async def test_bulk_deposit_targets_all_by_default(self, flow, api):
        await flow.submit(BulkReserveDepositForm(weeks=2, concept="Quincena"))

        assert api.writes[0][1]["tipoReserva"] == "ALL"


class TestDeleteAndReset:
    """Tests for deletes and the month reset."""

    @pytest.mark.asyncio
    async def test_delete_reloads_open_ledger(self, flow, api, bus, window, audit):
        """A deleted movement disappears through a reload, not a local splice."""
        api.default_total = 3
        ledger = LedgerController(
            api, LedgerKind.ACCOUNT, 1, window=window, page_size=10,
            refresh_bus=bus, audit_logger=audit,
        )
        await ledger.open()
        assert len(ledger.state.items) == 3

        result = await flow.delete_movement(LedgerKind.ACCOUNT, 10002)
        await ledger.wait_for_pending()

        assert result.success
        assert api.deleted == [(LedgerKind.ACCOUNT, 10002)]
        assert len(ledger.state.items) == 2
        assert len(api.calls) == 2

    @pytest.mark.asyncio
    async def test_delete_failure(self, flow, api, bus):
        api.failures[99] = ApiError("gone", status_code=404)

        result = await flow.delete_movement(LedgerKind.RESERVE, 99)

        assert result.message == messages.MOVEMENT_DELETE_FAILED
        assert bus.generation == 0

    @pytest.mark.asyncio
    async def test_reset_month(self, flow, api, bus):
        result = await flow.reset_reserve_month()

        assert result.message == messages.MONTH_RESET_DONE
        assert api.writes == [("reset_reserve_month", None)]
        assert bus.generation == 1


class TestAccounts:
    """Tests for opening accounts."""

    @pytest.mark.asyncio
    async def test_new_account_is_sent_and_refreshes(self, flow, api, bus, notifications):
        result = await flow.submit(NewAccountForm(
            description=" Tarjeta ", account_type=AccountType.CREDIT
        ))

        assert result.success
        assert result.message == messages.ACCOUNT_CREATED
        assert api.writes == [("create_account", {"descripcion": "Tarjeta", "tipo": "CREDITO"})]
        assert bus.generation == 1
        assert notifications.received == [(messages.SUCCESS_TITLE, messages.ACCOUNT_CREATED)]

    @pytest.mark.asyncio
    async def test_default_account_type_is_savings(self, flow, api):
        await flow.submit(NewAccountForm(description="Nequi"))

        assert api.writes[0][1]["tipo"] == "AHORRO"

    @pytest.mark.asyncio
    async def test_blank_name_is_not_sent(self, flow, api, bus):
        result = await flow.submit(NewAccountForm(description="   "))

        assert not result.success
        assert result.message == messages.ACCOUNT_NAME_REQUIRED
        assert api.writes == []
        assert bus.generation == 0

    @pytest.mark.asyncio
    async def test_server_rejection_does_not_refresh(self, flow, api, bus):
        api.error = ApiError("conflict", status_code=409, server_message="La cuenta ya existe")

        result = await flow.submit(NewAccountForm(description="Nequi"))

        assert result.message == "La cuenta ya existe"
        assert bus.generation == 0

    @pytest.mark.asyncio
    async def test_failure_without_text_uses_fallback(self, flow, api):
        api.error = ApiError("timeout")

        result = await flow.submit(NewAccountForm(description="Nequi"))

        assert result.message == messages.ACCOUNT_CREATE_FAILED


class TestProjections:
    """Tests for projection writes and the projections view."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("form", [
        NewProjectionForm(value=Decimal("100")),
        NewProjectionForm(concept="Prima"),
        ProjectionUpdateForm(projection_id=3, concept=" ", value=Decimal("100")),
        ProjectionUpdateForm(projection_id=3, concept="Prima"),
    ])
    async def test_concept_and_value_are_required(self, flow, api, bus, form):
        result = await flow.submit(form)

        assert not result.success
        assert result.message == messages.ALL_FIELDS_REQUIRED
        assert api.writes == []
        assert bus.generation == 0

    @pytest.mark.asyncio
    async def test_new_projection_reloads_open_view(self, flow, api, bus, audit):
        """The list picks up the new projection through the refresh bus."""
        view = ProjectionsController(api, refresh_bus=bus, audit_logger=audit)
        await view.open()
        assert view.total == Decimal("750000")

        result = await flow.submit(NewProjectionForm(concept="Impuestos", value=Decimal("-200000")))
        await view.wait_for_pending()

        assert result.success
        assert result.message == messages.PROJECTION_CREATED
        assert api.writes == [("create_projection", {"concepto": "Impuestos", "valor": -200000.0})]
        assert bus.generation == 1
        assert api.projection_calls == 2
        assert [p.concept for p in view.projections] == ["Prima", "Impuestos"]
        assert view.total == Decimal("550000")

    @pytest.mark.asyncio
    async def test_update_sends_edited_fields_by_id(self, flow, api, bus, projection):
        form = ProjectionUpdateForm.from_projection(projection).model_copy(
            update={"value": Decimal("800000")}
        )

        result = await flow.submit(form)

        assert result.success
        assert result.message == messages.PROJECTION_UPDATED
        assert api.writes == [("update_projection", (3, {"concepto": "Prima", "valor": 800000.0}))]
        assert bus.generation == 1

    @pytest.mark.asyncio
    async def test_update_failure_uses_fallback(self, flow, api, bus, projection):
        api.error = ApiError("timeout")

        result = await flow.submit(ProjectionUpdateForm.from_projection(projection))

        assert not result.success
        assert result.message == messages.PROJECTION_UPDATE_FAILED
        assert bus.generation == 0

    @pytest.mark.asyncio
    async def test_create_failure_shows_server_text(self, flow, api, bus):
        api.error = ApiError("bad", status_code=400, server_message="Valor inválido")

        result = await flow.submit(NewProjectionForm(concept="Prima", value=Decimal("1")))

        assert result.message == "Valor inválido"
        assert bus.generation == 0

    @pytest.mark.asyncio
    async def test_delete_reloads_open_view(self, flow, api, bus, audit, notifications):
        view = ProjectionsController(api, refresh_bus=bus, audit_logger=audit)
        await view.open()

        result = await flow.delete_projection(3)
        await view.wait_for_pending()

        assert result.success
        assert api.writes == [("delete_projection", 3)]
        assert bus.generation == 1
        assert view.projections == []
        assert view.total == Decimal("0")
        assert notifications.received == [(messages.SUCCESS_TITLE, messages.PROJECTION_DELETED)]

    @pytest.mark.asyncio
    async def test_delete_failure_does_not_refresh(self, flow, api, bus):
        api.error = ApiError("gone", status_code=404)

        result = await flow.delete_projection(3)

        assert not result.success
        assert result.message == messages.PROJECTION_DELETE_FAILED
        assert bus.generation == 0
        assert 3 in api.projections


class TestFinanceSession:
    """Tests for session wiring."""

    def test_controllers_share_the_session_bus(self, api, audit):
        session = FinanceSession(api=api, audit_logger=audit)

        ledger = session.ledger(LedgerKind.RESERVE, 4)
        budget = session.budget()
        projections = session.projections()

        assert session.writes is not None
        assert ledger.kind == LedgerKind.RESERVE
        assert budget.draft.percentages == (60, 20, 10, 10)
        assert projections.projections == []
        assert session.bus.generation == 0
