"""
Shared fakes for the finance client tests.

The fakes implement the same abstract interfaces as the HTTP client,
so controllers and write flows run unchanged against them.
"""

import asyncio
import math
from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytest

from finance_client.audit import AuditLogger
from finance_client.events import RefreshBus
from finance_client.models.budget import AllocationSubmission, BudgetSummary
from finance_client.models.ledger import (
    LedgerKind,
    LedgerWindow,
    Movement,
    MovementDirection,
    MovementPage,
)
from finance_client.models.projection import Projection
from finance_client.models.reserve import Reserve
from finance_client.services.api import (
    ApiError,
    BudgetSourceInterface,
    MovementSourceInterface,
    ProjectionSourceInterface,
    WriteTargetInterface,
)


def make_movement(
    movement_id: int,
    value: str = "100",
    direction: MovementDirection = MovementDirection.INCOME,
    when: Optional[datetime] = None,
) -> Movement:
    return Movement(
        id=movement_id,
        concept=f"Movimiento {movement_id}",
        value=Decimal(value),
        direction=direction,
        timestamp=when or datetime(2026, 10, 1, 12, 0),
    )


class FakeMovementSource(MovementSourceInterface):
    """
    Serves ``total`` movements per window in pages.

    Movement ids encode the window month (month * 1000 + index) so tests
    can tell which window an item came from.
    """

    def __init__(self, totals: Optional[dict] = None, default_total: int = 25):
        self.totals = totals or {}
        self.default_total = default_total
        self.calls: list[tuple] = []
        self.deleted: list[tuple] = []
        self.failures: dict[int, Exception] = {}
        self.gates: dict[Optional[int], asyncio.Event] = {}

    def hold(self, month: Optional[int] = None) -> asyncio.Event:
        """Block responses for ``month`` (or all months) until the event is set."""
        gate = asyncio.Event()
        self.gates[month] = gate
        return gate

    async def list_movements(
        self,
        kind: LedgerKind,
        ledger_id: int,
        window: LedgerWindow,
        page: int,
        size: int,
    ) -> MovementPage:
        self.calls.append((kind, ledger_id, window, page, size))

        gate = self.gates.get(window.month) or self.gates.get(None)
        if gate is not None:
            await gate.wait()

        if page in self.failures:
            raise self.failures.pop(page)

        total = self.totals.get((window.month, window.year), self.default_total)
        start = page * size
        content = [
            make_movement(window.month * 1000 + index)
            for index in range(start, min(start + size, total))
        ]
        return MovementPage(content=content, total_pages=math.ceil(total / size))

    async def delete_movement(self, kind: LedgerKind, movement_id: int) -> None:
        self.deleted.append((kind, movement_id))
        if movement_id in self.failures:
            raise self.failures.pop(movement_id)
        # Deleted movements shrink every window
        self.default_total = max(self.default_total - 1, 0)


class FakeBudgetSource(BudgetSourceInterface):
    """Serves a fixed summary payload and records saved allocations."""

    def __init__(self, payload: Optional[dict] = None):
        self.payload = payload or {}
        self.summary_calls = 0
        self.saved: list[AllocationSubmission] = []
        self.load_error: Optional[Exception] = None
        self.save_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    def hold(self) -> asyncio.Event:
        """Block the next summary request until the event is set."""
        self.gate = asyncio.Event()
        return self.gate

    async def get_budget_summary(self) -> BudgetSummary:
        self.summary_calls += 1
        # The payload is taken when the request is made, not when it returns
        payload, gate = self.payload, self.gate
        self.gate = None
        if gate is not None:
            await gate.wait()
        if self.load_error is not None:
            raise self.load_error
        return BudgetSummary.model_validate(payload)

    async def save_allocation(self, submission: AllocationSubmission) -> None:
        if self.save_error is not None:
            raise self.save_error
        self.saved.append(submission)
        self.payload = {
            **self.payload,
            "config": {
                "ingresoSemanal": float(submission.weekly_income),
                "gastos": {"porcentaje": submission.expenses},
                "ahorros": {"porcentaje": submission.savings},
                "inversiones": {"porcentaje": submission.investments},
                "libre": {"porcentaje": submission.free},
            },
        }


class FakeWriteApi(WriteTargetInterface, ProjectionSourceInterface, FakeMovementSource):
    """
    Records every write as ``(method_name, payload)``.

    Projection writes also update an in-memory store, so an open
    projections view sees them when it reloads.
    """

    def __init__(
        self,
        reserves: Optional[dict[int, Reserve]] = None,
        projections: Optional[list[Projection]] = None,
    ):
        FakeMovementSource.__init__(self)
        self.writes: list[tuple[str, object]] = []
        self.reserves = reserves or {}
        self.projections = {projection.id: projection for projection in projections or []}
        self.projection_calls = 0
        self.error: Optional[ApiError] = None

    def _record(self, name: str, payload) -> None:
        if self.error is not None:
            raise self.error
        self.writes.append((name, payload))

    async def create_account_movement(self, form) -> None:
        self._record("create_account_movement", form.to_payload())

    async def create_account(self, form) -> None:
        self._record("create_account", form.to_payload())

    async def adjust_account(self, form) -> None:
        self._record("adjust_account", form.to_payload())

    async def create_reserve_movement(self, form) -> None:
        self._record("create_reserve_movement", form.to_payload())

    async def create_reserve(self, form) -> None:
        self._record("create_reserve", form.to_payload())

    async def get_reserve(self, reserve_id: int) -> Reserve:
        return self.reserves[reserve_id]

    async def update_reserve(self, reserve_id: int, payload: dict) -> None:
        self._record("update_reserve", (reserve_id, payload))

    async def bulk_reserve_deposit(self, form) -> None:
        self._record("bulk_reserve_deposit", form.to_payload())

    async def reset_reserve_month(self) -> None:
        self._record("reset_reserve_month", None)

    async def list_projections(self) -> list[Projection]:
        self.projection_calls += 1
        return list(self.projections.values())

    async def create_projection(self, form) -> None:
        payload = form.to_payload()
        self._record("create_projection", payload)
        projection_id = max(self.projections, default=0) + 1
        self.projections[projection_id] = Projection.model_validate({"id": projection_id, **payload})

    async def update_projection(self, form) -> None:
        payload = form.to_payload()
        self._record("update_projection", (form.projection_id, payload))
        self.projections[form.projection_id] = Projection.model_validate(
            {"id": form.projection_id, **payload}
        )

    async def delete_projection(self, projection_id: int) -> None:
        self._record("delete_projection", projection_id)
        self.projections.pop(projection_id, None)


class Notifications:
    """Collects (title, message) notifications."""

    def __init__(self):
        self.received: list[tuple[str, str]] = []

    def __call__(self, title: str, message: str) -> None:
        self.received.append((title, message))


@pytest.fixture
def window() -> LedgerWindow:
    return LedgerWindow(month=10, year=2026)


@pytest.fixture
def bus() -> RefreshBus:
    return RefreshBus()


@pytest.fixture
def audit() -> AuditLogger:
    return AuditLogger("finance_client.tests")


@pytest.fixture
def notifications() -> Notifications:
    return Notifications()
