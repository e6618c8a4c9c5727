"""
Ledger Data Models

These models describe what the movement endpoints return and the
state a paginated ledger view accumulates from them.

DESIGN DECISION: Wire names stay on the wire. The server speaks
Spanish camelCase (``concepto``, ``tipoMovimiento``, ``totalPages``);
every model maps those through aliases so the rest of the package
only ever sees snake_case English attributes.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class MovementDirection(str, Enum):
    """
    Direction of a movement, using the server's own values.

    Accounts use INCOME/EXPENSE, reserves use DEPOSIT/WITHDRAWAL.
    """
    INCOME = "INGRESO"
    EXPENSE = "EGRESO"
    DEPOSIT = "Reserva"
    WITHDRAWAL = "Retiro"

    @property
    def is_inflow(self) -> bool:
        return self in (MovementDirection.INCOME, MovementDirection.DEPOSIT)


class LedgerKind(str, Enum):
    """
    Which kind of ledger owns a set of movements.

    The two kinds share the paging contract but not their URL roots:
    listing hangs off the owner, deleting an account movement goes
    through the generic finance root.
    """
    ACCOUNT = "account"
    RESERVE = "reserve"

    @property
    def list_root(self) -> str:
        return "/api/cuentas" if self is LedgerKind.ACCOUNT else "/api/reservas"

    @property
    def delete_root(self) -> str:
        return "/api/finanzas" if self is LedgerKind.ACCOUNT else "/api/reservas"

    @property
    def directions(self) -> tuple[MovementDirection, MovementDirection]:
        if self is LedgerKind.ACCOUNT:
            return (MovementDirection.INCOME, MovementDirection.EXPENSE)
        return (MovementDirection.DEPOSIT, MovementDirection.WITHDRAWAL)


class LoadStatus(str, Enum):
    """Lifecycle of a paginated ledger view."""
    IDLE = "idle"
    LOADING_INITIAL = "loading_initial"
    LOADING_MORE = "loading_more"
    READY = "ready"
    ERROR = "error"


# =============================================================================
# SERVER RECORDS
# =============================================================================

class Movement(BaseModel):
    """
    One ledger entry against an account or a reserve.

    Movements are immutable once created; the only way one changes
    is by being deleted on the server.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: int
    concept: str = Field(
        default="",
        alias="concepto",
        description="Free text describing the movement"
    )
    value: Decimal = Field(
        ...,
        alias="valor",
        description="Amount of the movement"
    )
    direction: MovementDirection = Field(
        ...,
        alias="tipoMovimiento",
    )
    timestamp: datetime = Field(
        ...,
        alias="fecha",
    )
    ledger_id: Optional[int] = Field(
        default=None,
        description="Owning account or reserve, when the server reports it"
    )

    @field_validator('timestamp', mode='before')
    @classmethod
    def accept_date_only(cls, v):
        """The server sends bare dates for some ledgers."""
        if isinstance(v, str) and len(v) == 10:
            return datetime.combine(date.fromisoformat(v), datetime.min.time())
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, datetime.min.time())
        return v


class MovementPage(BaseModel):
    """One page of movements as returned by the server."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content: list[Movement] = Field(default_factory=list)
    total_pages: int = Field(
        default=0,
        ge=0,
        alias="totalPages",
    )


# =============================================================================
# CLIENT STATE
# =============================================================================

class LedgerWindow(BaseModel):
    """The (month, year) filter a ledger view is scoped to."""
    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1900, le=9999)

    @classmethod
    def current(cls, today: Optional[date] = None) -> "LedgerWindow":
        today = today or date.today()
        return cls(month=today.month, year=today.year)

    def shifted(self, months: int) -> "LedgerWindow":
        """Move the window by ``months`` (negative goes back), carrying the year."""
        index = self.year * 12 + (self.month - 1) + months
        return LedgerWindow(month=index % 12 + 1, year=index // 12)

    def as_params(self) -> dict[str, int]:
        return {"mes": self.month, "anio": self.year}


class PageState(BaseModel):
    """
    Read-only snapshot of a paginated ledger view.

    ``items`` keeps server page order, oldest accumulation first.
    ``sequence`` identifies the fetch this state is waiting on; any
    response stamped with another sequence is stale.
    """
    model_config = ConfigDict(frozen=True)

    window: LedgerWindow
    status: LoadStatus = LoadStatus.IDLE
    page_index: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)
    items: tuple[Movement, ...] = ()
    sequence: int = Field(default=0, ge=0)
    error_message: Optional[str] = None

    @model_validator(mode='after')
    def validate_page_bounds(self) -> 'PageState':
        if self.page_index > self.total_pages:
            raise ValueError(
                f"Page index {self.page_index} exceeds total pages {self.total_pages}"
            )
        return self

    @property
    def is_busy(self) -> bool:
        return self.status in (LoadStatus.LOADING_INITIAL, LoadStatus.LOADING_MORE)

    @property
    def has_more(self) -> bool:
        return self.page_index < self.total_pages

    @property
    def can_load_more(self) -> bool:
        """A next page exists and nothing is in flight."""
        return not self.is_busy and self.has_more

    @property
    def is_empty(self) -> bool:
        return self.status is LoadStatus.READY and not self.items
