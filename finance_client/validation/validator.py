"""
Two-Stage Form Validation

DESIGN DECISION: Every write is checked on the client before a request
is built, in two distinct stages:

STAGE 1 - REQUIRED FIELDS:
- Value, concept, account present
- Account name present for a new account
- Income present and positive for the allocation form

STAGE 2 - BUSINESS RULES:
- Movement values strictly positive
- No negative amounts or percentages
- Allocation percentages summing to exactly 100

Stage 2 is skipped when stage 1 fails, so the user sees the most
basic problem first. A rejected form is never sent to the server.
"""

from decimal import Decimal
from typing import Callable, Optional

from finance_client import messages
from finance_client.models.budget import AllocationDraft
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
    WriteForm,
)
from finance_client.models.ledger import LedgerKind
from finance_client.models.validation import ValidationIssue, ValidationResult

ALLOCATION_OPERATION = "allocation"


class FormValidationError(Exception):
    """A form failed client-side validation; nothing was sent."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.first_error or "Invalid form")

    @property
    def user_message(self) -> str:
        return self.result.first_error or ""


def _missing(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type="missing", message=message)


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


class FormValidator:
    """
    Validates write forms and the allocation draft.

    Each form type has one required-fields check and, optionally,
    one business-rules check.
    """

    def __init__(self):
        Check = Callable[[WriteForm], list[ValidationIssue]]
        self._checks: dict[type, tuple[Check, Optional[Check]]] = {
            AccountMovementForm: (self._required_account_movement, self._rules_account_movement),
            AccountAdjustmentForm: (self._required_adjustment, None),
            ReserveDepositForm: (self._required_deposit, self._rules_positive_value),
            ReserveWithdrawalForm: (self._required_withdrawal, self._rules_positive_value),
            NewReserveForm: (self._required_concept, self._rules_reserve_amounts),
            ReserveUpdateForm: (self._required_concept, self._rules_reserve_amounts),
            ReserveQuotaUpdateForm: (self._required_quota, self._rules_quota),
            BulkReserveDepositForm: (self._required_bulk, self._rules_bulk),
            NewAccountForm: (self._required_account_name, None),
            NewProjectionForm: (self._required_projection, None),
            ProjectionUpdateForm: (self._required_projection, None),
        }

    def validate(self, form: WriteForm) -> ValidationResult:
        """Run both stages for ``form``."""
        required, rules = self._checks[type(form)]
        return self._run(form.kind, lambda: required(form), lambda: rules(form) if rules else [])

    def validate_allocation(self, draft: AllocationDraft) -> ValidationResult:
        """
        Check the allocation draft.

        The sum check is exact: all four values are integers.
        """
        return self._run(
            ALLOCATION_OPERATION,
            lambda: self._required_allocation(draft),
            lambda: self._rules_allocation(draft),
        )

    def ensure_valid(self, form: WriteForm) -> None:
        """Raise FormValidationError if ``form`` does not pass."""
        result = self.validate(form)
        if result.has_errors:
            raise FormValidationError(result)

    def _run(
        self,
        operation: str,
        required: Callable[[], list[ValidationIssue]],
        rules: Callable[[], list[ValidationIssue]],
    ) -> ValidationResult:
        issues = required()
        required_valid = not any(issue.severity == "error" for issue in issues)

        rules_valid = False
        if required_valid:
            rule_issues = rules()
            rules_valid = not any(issue.severity == "error" for issue in rule_issues)
            issues.extend(rule_issues)

        return ValidationResult(
            operation=operation,
            required_valid=required_valid,
            rules_valid=rules_valid,
            issues=issues,
        )

    # -------------------------------------------------------------------------
    # Stage 1: required fields
    # -------------------------------------------------------------------------

    def _required_account_movement(self, form: AccountMovementForm) -> list[ValidationIssue]:
        issues = []
        if form.value is None:
            issues.append(_missing("value", messages.VALUE_AND_CONCEPT_REQUIRED))
        if _is_blank(form.concept):
            issues.append(_missing("concept", messages.VALUE_AND_CONCEPT_REQUIRED))
        if form.account_id is None:
            issues.append(_missing("account_id", messages.ALL_FIELDS_REQUIRED))
        return issues

    def _required_adjustment(self, form: AccountAdjustmentForm) -> list[ValidationIssue]:
        if form.value is None:
            return [_missing("value", messages.ADJUSTMENT_VALUE_REQUIRED)]
        return []

    def _required_deposit(self, form: ReserveDepositForm) -> list[ValidationIssue]:
        if form.value is None:
            return [_missing("value", messages.VALUE_REQUIRED)]
        return []

    def _required_withdrawal(self, form: ReserveWithdrawalForm) -> list[ValidationIssue]:
        issues = []
        if form.value is None:
            issues.append(_missing("value", messages.VALUE_REQUIRED))
        if form.account_id is None:
            issues.append(_missing("account_id", messages.ACCOUNT_REQUIRED))
        return issues

    def _required_concept(self, form) -> list[ValidationIssue]:
        if _is_blank(form.concept):
            return [_missing("concept", messages.CONCEPT_REQUIRED)]
        return []

    def _required_quota(self, form: ReserveQuotaUpdateForm) -> list[ValidationIssue]:
        if form.weekly_quota is None:
            return [_missing("weekly_quota", messages.VALUE_REQUIRED)]
        return []

    def _required_bulk(self, form: BulkReserveDepositForm) -> list[ValidationIssue]:
        issues = []
        if form.weeks is None:
            issues.append(_missing("weeks", messages.ALL_FIELDS_REQUIRED))
        if _is_blank(form.concept):
            issues.append(_missing("concept", messages.ALL_FIELDS_REQUIRED))
        return issues

    def _required_account_name(self, form: NewAccountForm) -> list[ValidationIssue]:
        if _is_blank(form.description):
            return [_missing("description", messages.ACCOUNT_NAME_REQUIRED)]
        return []

    def _required_projection(self, form) -> list[ValidationIssue]:
        issues = []
        if _is_blank(form.concept):
            issues.append(_missing("concept", messages.ALL_FIELDS_REQUIRED))
        if form.value is None:
            issues.append(_missing("value", messages.ALL_FIELDS_REQUIRED))
        return issues

    def _required_allocation(self, draft: AllocationDraft) -> list[ValidationIssue]:
        income = draft.weekly_income
        if income is None or not income.is_finite() or income <= 0:
            return [ValidationIssue(
                field="weekly_income",
                issue_type="missing",
                message=messages.INCOME_REQUIRED,
            )]
        return []

    # -------------------------------------------------------------------------
    # Stage 2: business rules
    # -------------------------------------------------------------------------

    def _rules_positive_value(self, form) -> list[ValidationIssue]:
        if form.value <= 0:
            return [ValidationIssue(
                field="value",
                issue_type="not_positive",
                message=messages.VALUE_MUST_BE_POSITIVE,
            )]
        return []

    def _rules_account_movement(self, form: AccountMovementForm) -> list[ValidationIssue]:
        issues = self._rules_positive_value(form)
        if form.direction not in LedgerKind.ACCOUNT.directions:
            issues.append(ValidationIssue(
                field="direction",
                issue_type="invalid_value",
                message=messages.DIRECTION_NOT_ALLOWED,
            ))
        return issues

    def _rules_reserve_amounts(self, form) -> list[ValidationIssue]:
        issues = []
        for field in ("goal_value", "weekly_quota"):
            value = getattr(form, field)
            if value is not None and value < 0:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="negative",
                    message=messages.AMOUNT_CANNOT_BE_NEGATIVE,
                ))
        return issues

    def _rules_quota(self, form: ReserveQuotaUpdateForm) -> list[ValidationIssue]:
        if form.weekly_quota < Decimal("0"):
            return [ValidationIssue(
                field="weekly_quota",
                issue_type="negative",
                message=messages.AMOUNT_CANNOT_BE_NEGATIVE,
            )]
        return []

    def _rules_bulk(self, form: BulkReserveDepositForm) -> list[ValidationIssue]:
        if form.weeks <= 0:
            return [ValidationIssue(
                field="weeks",
                issue_type="not_positive",
                message=messages.WEEKS_MUST_BE_POSITIVE,
            )]
        return []

    def _rules_allocation(self, draft: AllocationDraft) -> list[ValidationIssue]:
        issues = []
        fields = ("expense_pct", "savings_pct", "investment_pct", "free_pct")
        negative = [field for field in fields if getattr(draft, field) < 0]
        if negative:
            issues.append(ValidationIssue(
                field=",".join(negative),
                issue_type="negative",
                message=messages.NEGATIVE_PERCENTAGES,
            ))

        total = draft.total
        if total != 100:
            issues.append(ValidationIssue(
                field="total",
                issue_type="bad_total",
                message=messages.PERCENTAGE_TOTAL.format(total=total),
            ))
        return issues
