"""
Allocation Balancer

Keeps the allocation form's four percentages summing to 100 while the
user edits: expenses, savings and investments are editable, and the
free percentage is always recomputed as what is left.

The free percentage may go negative mid-edit so the user sees the
overshoot. Only ``build_submission`` rejects it.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import ValidationError

from finance_client.models.budget import AllocationConfig, AllocationDraft, AllocationSubmission
from finance_client.validation import FormValidationError, FormValidator

EDITABLE_PERCENTAGES = ("expense_pct", "savings_pct", "investment_pct")
INCOME_FIELD = "weekly_income"
FREE_FIELD = "free_pct"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")

Input = Union[str, int, float, Decimal, None]


class ReadOnlyFieldError(ValueError):
    """Raised on an attempt to edit the derived free percentage."""


def parse_percentage(value: Input) -> int:
    """
    Read a percentage from form input.

    Leading integer digits are taken (``"25abc"`` -> 25); empty,
    unparseable or non-finite input counts as 0.
    """
    if value is None:
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, Decimal) and not value.is_finite():
        return 0
    if isinstance(value, (int, Decimal, float)):
        return int(value)
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def parse_income(value: Input) -> Decimal:
    """Read an income amount from form input; unparseable or non-finite is 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, float) and not math.isfinite(value):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    match = _LEADING_NUMBER.match(value)
    if not match:
        return Decimal("0")
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return Decimal("0")


def recompute_free(draft: AllocationDraft) -> AllocationDraft:
    free = 100 - draft.expense_pct - draft.savings_pct - draft.investment_pct
    return draft.model_copy(update={FREE_FIELD: free})


def apply_edit(draft: AllocationDraft, field: str, value: Input) -> AllocationDraft:
    """
    Apply one form edit and return the new draft.

    Editing a percentage recomputes the free percentage. Editing the
    income leaves all percentages alone.

    Raises:
        ReadOnlyFieldError: If ``field`` is the free percentage.
        ValueError: If ``field`` is not an allocation field.
    """
    if field == FREE_FIELD:
        raise ReadOnlyFieldError("The free percentage is derived and cannot be edited")
    if field == INCOME_FIELD:
        return draft.model_copy(update={INCOME_FIELD: parse_income(value)})
    if field not in EDITABLE_PERCENTAGES:
        raise ValueError(f"Unknown allocation field: {field}")
    return recompute_free(draft.model_copy(update={field: parse_percentage(value)}))


def draft_from_config(config: Optional[AllocationConfig]) -> AllocationDraft:
    """
    Seed the form from the stored configuration.

    An unconfigured user starts from the 60/20/10/10 default split.
    """
    if config is None or not config.is_configured:
        return AllocationDraft()
    return AllocationDraft(
        weekly_income=config.weekly_income,
        expense_pct=int(config.expenses.percentage),
        savings_pct=int(config.savings.percentage),
        investment_pct=int(config.investments.percentage),
        free_pct=int(config.free.percentage),
    )


def build_submission(
    draft: AllocationDraft,
    validator: Optional[FormValidator] = None,
) -> AllocationSubmission:
    """
    Validate the draft and turn it into the payload model.

    Raises:
        FormValidationError: If income is not positive, a percentage
            is negative, or the four do not sum to exactly 100.
    """
    result = (validator or FormValidator()).validate_allocation(draft)
    if result.has_errors:
        raise FormValidationError(result)

    try:
        return AllocationSubmission(
            weekly_income=draft.weekly_income,
            expenses=draft.expense_pct,
            savings=draft.savings_pct,
            investments=draft.investment_pct,
            free=draft.free_pct,
        )
    except ValidationError as e:
        raise ValueError(f"Allocation passed validation but was rejected: {e}") from e
