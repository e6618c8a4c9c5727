"""Budget decomposition, allocation editing and the budget screen state."""

from finance_client.budget.balancer import (
    ReadOnlyFieldError,
    apply_edit,
    build_submission,
    draft_from_config,
    parse_income,
    parse_percentage,
    recompute_free,
)
from finance_client.budget.controller import BudgetController
from finance_client.budget.decomposer import (
    BAR_COLORS,
    CHART_LEGEND,
    decompose,
    decompose_budget,
    legend_entry,
    period_income,
    split_category,
    target_value,
)

__all__ = [
    "BAR_COLORS",
    "BudgetController",
    "CHART_LEGEND",
    "ReadOnlyFieldError",
    "apply_edit",
    "build_submission",
    "decompose",
    "decompose_budget",
    "draft_from_config",
    "legend_entry",
    "parse_income",
    "parse_percentage",
    "period_income",
    "recompute_free",
    "split_category",
    "target_value",
]
