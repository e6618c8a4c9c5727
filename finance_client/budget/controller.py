"""
Budget Controller

State of one visit to the budget screen: the server summary, the
allocation form the user is editing, and the charts derived from the
summary.

IMPORTANT BOUNDARIES:
1. Nothing is recomputed locally except the monthly target and the
   free percentage; every aggregate is the server's
2. After a successful save the configuration is reloaded wholesale,
   never patched with the submitted values
3. A failed load keeps the previous summary
"""

import asyncio
from typing import Callable, Optional

from finance_client import messages
from finance_client.audit import AuditLogger, create_correlation_id
from finance_client.budget.balancer import apply_edit, build_submission, draft_from_config
from finance_client.budget.decomposer import decompose_budget
from finance_client.config import get_settings
from finance_client.events import RefreshBus, get_refresh_bus
from finance_client.ledger import Notifier
from finance_client.models.budget import (
    AllocationDraft,
    BudgetChart,
    BudgetPeriod,
    BudgetSummary,
)
from finance_client.models.forms import OperationResult
from finance_client.services.api import ApiError, BudgetSourceInterface
from finance_client.validation import FormValidationError, FormValidator

SAVE_OPERATION = "save_allocation"


class BudgetController:
    """
    Budget summary, charts and allocation form.

    Args:
        source: Where the summary comes from and the allocation goes.
        refresh_bus: Invalidation channel; defaults to the process bus.
        notify: Receives (title, message) pairs for display.
        weeks_per_month: Monthly multiplier; defaults to the budget settings.
    """

    def __init__(
        self,
        source: BudgetSourceInterface,
        refresh_bus: Optional[RefreshBus] = None,
        notify: Optional[Notifier] = None,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        weeks_per_month: Optional[int] = None,
    ):
        self._source = source
        self._bus = refresh_bus or get_refresh_bus()
        self._notify = notify
        self._validator = validator or FormValidator()
        self._audit = audit_logger or AuditLogger()
        self._weeks_per_month = weeks_per_month or get_settings().budget.weeks_per_month

        self._summary: Optional[BudgetSummary] = None
        self._draft = AllocationDraft()
        self._loading = False
        self._error_message: Optional[str] = None
        self._sequence = 0
        self._loaded_generation: Optional[int] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._pending: set[asyncio.Task] = set()

    @property
    def summary(self) -> Optional[BudgetSummary]:
        return self._summary

    @property
    def draft(self) -> AllocationDraft:
        return self._draft

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def needs_initial_config(self) -> bool:
        """True once loaded for a user with no stored configuration."""
        return self._summary is not None and not self._summary.is_configured

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self) -> Optional[BudgetSummary]:
        """Subscribe to refreshes and load the summary."""
        if self._unsubscribe is None:
            self._unsubscribe = self._bus.subscribe(self._on_refresh)
        return await self.load()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def load(self) -> Optional[BudgetSummary]:
        """
        Fetch the summary and reseed the allocation form from it.

        Only the latest load's result is kept.
        """
        self._sequence += 1
        sequence = self._sequence
        self._loaded_generation = self._bus.generation
        self._loading = True

        try:
            summary = await self._source.get_budget_summary()
        except ApiError as e:
            if sequence == self._sequence:
                message = e.user_message(messages.BUDGET_LOAD_FAILED)
                self._loading = False
                self._error_message = message
                self._audit.budget_load_failed(message)
                if self._notify:
                    self._notify(messages.ERROR_TITLE, message)
            return self._summary
        except Exception:
            if sequence == self._sequence:
                self._loading = False
                self._error_message = messages.BUDGET_LOAD_FAILED
            raise

        if sequence != self._sequence:
            return self._summary

        self._summary = summary
        self._draft = draft_from_config(summary.config)
        self._loading = False
        self._error_message = None
        self._audit.budget_loaded(summary.is_configured)
        return summary

    async def refresh_if_stale(self) -> Optional[BudgetSummary]:
        if self._loaded_generation != self._bus.generation:
            return await self.load()
        return self._summary

    async def wait_for_pending(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # -------------------------------------------------------------------------
    # View
    # -------------------------------------------------------------------------

    def chart(self, period: BudgetPeriod) -> BudgetChart:
        """Chart and legend for one period of the loaded summary."""
        return decompose_budget(
            self._summary or BudgetSummary(),
            period,
            self._weeks_per_month,
        )

    def weekly_chart(self) -> BudgetChart:
        return self.chart(BudgetPeriod.WEEKLY)

    def monthly_chart(self) -> BudgetChart:
        return self.chart(BudgetPeriod.MONTHLY)

    # -------------------------------------------------------------------------
    # Allocation form
    # -------------------------------------------------------------------------

    def edit(self, field: str, value) -> AllocationDraft:
        """Apply a form edit; see ``balancer.apply_edit``."""
        self._draft = apply_edit(self._draft, field, value)
        return self._draft

    def reset_draft(self) -> AllocationDraft:
        """Discard edits and go back to the stored configuration."""
        self._draft = draft_from_config(self._summary.config if self._summary else None)
        return self._draft

    async def save(self) -> OperationResult:
        """
        Validate and post the allocation.

        On success every view is told to refresh and the summary is
        reloaded from the server.
        """
        correlation_id = create_correlation_id()

        try:
            submission = build_submission(self._draft, self._validator)
        except FormValidationError as e:
            self._audit.validation_rejected(
                SAVE_OPERATION,
                [issue.model_dump() for issue in e.result.issues],
                correlation_id,
            )
            return self._report(OperationResult.failed(e.user_message))
        except ValueError as e:
            self._audit.write_failed(SAVE_OPERATION, str(e), correlation_id, None)
            return self._report(OperationResult.failed(messages.ALLOCATION_SAVE_FAILED))

        try:
            await self._source.save_allocation(submission)
        except ApiError as e:
            message = e.user_message(messages.ALLOCATION_SAVE_FAILED)
            self._audit.write_failed(SAVE_OPERATION, message, correlation_id, e.status_code)
            return self._report(OperationResult.failed(message))

        self._audit.write_succeeded(SAVE_OPERATION, correlation_id)
        self._bus.trigger_refresh()
        await self.load()
        return self._report(OperationResult.ok(messages.ALLOCATION_SAVED))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _report(self, result: OperationResult) -> OperationResult:
        if self._notify and result.message:
            title = messages.SUCCESS_TITLE if result.success else messages.ERROR_TITLE
            self._notify(title, result.message)
        return result

    def _on_refresh(self, generation: int) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.refresh_if_stale())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
