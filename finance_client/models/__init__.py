"""
Data Models Package

All Pydantic models used by the finance client. Server payloads are
parsed into these at the API boundary; nothing past it sees raw JSON.
"""

from finance_client.models.ledger import (
    LedgerKind,
    LedgerWindow,
    LoadStatus,
    Movement,
    MovementDirection,
    MovementPage,
    PageState,
)
from finance_client.models.reserve import (
    Reserve,
    ReserveType,
)
from finance_client.models.projection import (
    AccountType,
    Projection,
    projected_total,
)
from finance_client.models.budget import (
    AllocationConfig,
    AllocationDraft,
    AllocationSubmission,
    BudgetAggregate,
    BudgetCategory,
    BudgetChart,
    BudgetPeriod,
    BudgetSummary,
    CategoryAmount,
    CategoryBreakdown,
    LegendEntry,
    LegendTone,
)
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
from finance_client.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from finance_client.models.audit import (
    ClientEvent,
    ClientEventBuilder,
    ClientEventSeverity,
    ClientEventType,
)

__all__ = [
    # Ledger models
    "LedgerKind",
    "LedgerWindow",
    "LoadStatus",
    "Movement",
    "MovementDirection",
    "MovementPage",
    "PageState",
    # Reserve models
    "Reserve",
    "ReserveType",
    # Account and projection models
    "AccountType",
    "Projection",
    "projected_total",
    # Budget models
    "AllocationConfig",
    "AllocationDraft",
    "AllocationSubmission",
    "BudgetAggregate",
    "BudgetCategory",
    "BudgetChart",
    "BudgetPeriod",
    "BudgetSummary",
    "CategoryAmount",
    "CategoryBreakdown",
    "LegendEntry",
    "LegendTone",
    # Write forms
    "AccountAdjustmentForm",
    "AccountMovementForm",
    "BulkReserveDepositForm",
    "NewAccountForm",
    "NewProjectionForm",
    "NewReserveForm",
    "OperationResult",
    "ProjectionUpdateForm",
    "ReserveDepositForm",
    "ReserveQuotaUpdateForm",
    "ReserveUpdateForm",
    "ReserveWithdrawalForm",
    "WriteForm",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Client events
    "ClientEvent",
    "ClientEventBuilder",
    "ClientEventSeverity",
    "ClientEventType",
]
