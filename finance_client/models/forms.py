"""
Write Forms

One model per write operation, each carrying only the fields that
operation needs. The ``kind`` tag makes the union discriminable, so a
form can never be half one operation and half another.

DESIGN DECISION: Forms hold raw user input (values may be missing).
They are checked by the FormValidator before a request is built;
``to_payload`` assumes that has happened.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from finance_client.models.ledger import MovementDirection
from finance_client.models.projection import AccountType, Projection
from finance_client.models.reserve import Reserve, ReserveType


def _number(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0.0


class _Form(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


# =============================================================================
# ACCOUNT FORMS
# =============================================================================

class AccountMovementForm(_Form):
    """Register an income or an expense against an account."""
    kind: Literal["account_movement"] = "account_movement"

    account_id: Optional[int] = None
    value: Optional[Decimal] = None
    concept: str = ""
    direction: MovementDirection = MovementDirection.INCOME

    def to_payload(self) -> dict:
        return {
            "idCuenta": self.account_id,
            "valor": _number(self.value),
            "concepto": self.concept,
            "tipoMovimiento": self.direction.value,
        }


class NewAccountForm(_Form):
    """Open a new account."""
    kind: Literal["new_account"] = "new_account"

    description: str = ""
    account_type: AccountType = AccountType.SAVINGS

    def to_payload(self) -> dict:
        return {
            "descripcion": self.description,
            "tipo": self.account_type.value,
        }


class AccountAdjustmentForm(_Form):
    """
    Set an account's current value.

    For credit accounts the value is the outstanding debt, derived
    from the total and available credit limits.
    """
    kind: Literal["account_adjustment"] = "account_adjustment"

    account_id: int
    value: Optional[Decimal] = None

    @classmethod
    def from_credit_limits(
        cls,
        account_id: int,
        total_limit: Optional[Decimal],
        available_limit: Optional[Decimal],
    ) -> "AccountAdjustmentForm":
        debt = (total_limit or Decimal("0")) - (available_limit or Decimal("0"))
        return cls(account_id=account_id, value=debt)

    def to_payload(self) -> dict:
        return {
            "idCuenta": self.account_id,
            "valor": _number(self.value),
        }


# =============================================================================
# RESERVE FORMS
# =============================================================================

class ReserveDepositForm(_Form):
    """Put money into a reserve."""
    kind: Literal["reserve_deposit"] = "reserve_deposit"

    reserve_id: int
    value: Optional[Decimal] = None
    concept: str = ""

    def to_payload(self) -> dict:
        return {
            "idReserva": self.reserve_id,
            "tipoMovimiento": MovementDirection.DEPOSIT.value,
            "valor": _number(self.value),
            "concepto": self.concept,
        }


class ReserveWithdrawalForm(_Form):
    """Take money out of a reserve into an account."""
    kind: Literal["reserve_withdrawal"] = "reserve_withdrawal"

    reserve_id: int
    value: Optional[Decimal] = None
    concept: str = ""
    account_id: Optional[int] = None

    def to_payload(self) -> dict:
        return {
            "idReserva": self.reserve_id,
            "tipoMovimiento": MovementDirection.WITHDRAWAL.value,
            "valor": _number(self.value),
            "concepto": self.concept,
            "idCuenta": self.account_id,
        }


class NewReserveForm(_Form):
    """Create a reserve."""
    kind: Literal["new_reserve"] = "new_reserve"

    concept: str = ""
    reserve_type: ReserveType = ReserveType.SAVINGS
    goal_value: Optional[Decimal] = None
    weekly_quota: Optional[Decimal] = None
    goal_date: Optional[date] = None

    def to_payload(self) -> dict:
        return {
            "concepto": self.concept,
            "tipo": self.reserve_type.value,
            "valorMeta": _number(self.goal_value),
            "valorReservaSemanal": _number(self.weekly_quota),
            "fechaMeta": _goal_date(self.reserve_type, self.goal_date),
        }


class ReserveUpdateForm(_Form):
    """
    Edit a reserve's definition.

    The current record is sent back whole with the edited fields
    replaced, so server-side fields the client does not know survive.
    """
    kind: Literal["reserve_update"] = "reserve_update"

    reserve: Reserve
    concept: str = ""
    reserve_type: ReserveType = ReserveType.SAVINGS
    goal_value: Optional[Decimal] = None
    weekly_quota: Optional[Decimal] = None
    goal_date: Optional[date] = None

    @classmethod
    def from_reserve(cls, reserve: Reserve) -> "ReserveUpdateForm":
        return cls(
            reserve=reserve,
            concept=reserve.concept,
            reserve_type=reserve.reserve_type or ReserveType.SAVINGS,
            goal_value=reserve.goal_value,
            weekly_quota=reserve.weekly_quota,
            goal_date=reserve.goal_date or date.today(),
        )

    @property
    def reserve_id(self) -> int:
        return self.reserve.id

    def to_payload(self) -> dict:
        payload = self.reserve.to_payload()
        payload.update({
            "concepto": self.concept,
            "tipo": self.reserve_type.value,
            "valorMeta": _number(self.goal_value),
            "valorReservaSemanal": _number(self.weekly_quota),
            "fechaMeta": _goal_date(self.reserve_type, self.goal_date),
        })
        return payload


class ReserveQuotaUpdateForm(_Form):
    """Change only a reserve's weekly quota (budget drill-down edit)."""
    kind: Literal["reserve_quota_update"] = "reserve_quota_update"

    reserve_id: int
    weekly_quota: Optional[Decimal] = None

    def apply_to(self, reserve: Reserve) -> dict:
        payload = reserve.to_payload()
        payload["valorReservaSemanal"] = _number(self.weekly_quota)
        return payload


class BulkReserveDepositForm(_Form):
    """Deposit several weeks of quota into every reserve of a type."""
    kind: Literal["bulk_reserve_deposit"] = "bulk_reserve_deposit"

    weeks: Optional[int] = None
    concept: str = ""
    reserve_type: Optional[ReserveType] = Field(
        default=None,
        description="None targets every reserve"
    )

    def to_payload(self) -> dict:
        return {
            "nmSemanas": self.weeks,
            "concepto": self.concept,
            "tipoReserva": self.reserve_type.value if self.reserve_type else "ALL",
        }


def _goal_date(reserve_type: ReserveType, goal_date: Optional[date]) -> Optional[str]:
    if not reserve_type.has_goal_date or goal_date is None:
        return None
    return goal_date.isoformat()


# =============================================================================
# PROJECTION FORMS
# =============================================================================

class NewProjectionForm(_Form):
    """Add a projected amount."""
    kind: Literal["new_projection"] = "new_projection"

    concept: str = ""
    value: Optional[Decimal] = None

    def to_payload(self) -> dict:
        return {
            "concepto": self.concept,
            "valor": _number(self.value),
        }


class ProjectionUpdateForm(_Form):
    """Replace a projection's concept and value."""
    kind: Literal["projection_update"] = "projection_update"

    projection_id: int
    concept: str = ""
    value: Optional[Decimal] = None

    @classmethod
    def from_projection(cls, projection: Projection) -> "ProjectionUpdateForm":
        return cls(
            projection_id=projection.id,
            concept=projection.concept,
            value=projection.value,
        )

    def to_payload(self) -> dict:
        return {
            "concepto": self.concept,
            "valor": _number(self.value),
        }


WriteForm = Annotated[
    Union[
        AccountMovementForm,
        AccountAdjustmentForm,
        NewAccountForm,
        ReserveDepositForm,
        ReserveWithdrawalForm,
        NewReserveForm,
        ReserveUpdateForm,
        ReserveQuotaUpdateForm,
        BulkReserveDepositForm,
        NewProjectionForm,
        ProjectionUpdateForm,
    ],
    Field(discriminator="kind"),
]


class OperationResult(BaseModel):
    """Outcome of a write, ready to show in a notification."""
    model_config = ConfigDict(frozen=True)

    success: bool
    message: Optional[str] = None

    @classmethod
    def ok(cls, message: Optional[str] = None) -> "OperationResult":
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, message: str) -> "OperationResult":
        return cls(success=False, message=message)
