"""
Budget Data Models

Three families of models live here:
1. What the budget summary endpoint returns (config + aggregates)
2. The editable allocation form and the payload it turns into
3. What the decomposer hands to a chart and its legend

DESIGN DECISION: Every aggregate figure is computed by the server.
These models only carry those figures; the one client-side derivation
(the monthly target) happens in the decomposer, not here.
"""

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

from finance_client.models.reserve import Reserve


# =============================================================================
# ENUMS
# =============================================================================

class BudgetCategory(str, Enum):
    """
    The four allocation categories, in display order.

    The value is the config key. The aggregate reports the free
    category under a different key (``disponible``).
    """
    EXPENSES = "gastos"
    SAVINGS = "ahorros"
    INVESTMENTS = "inversiones"
    FREE = "libre"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    BudgetCategory.EXPENSES: "Gastos",
    BudgetCategory.SAVINGS: "Ahorros",
    BudgetCategory.INVESTMENTS: "Inversión",
    BudgetCategory.FREE: "Libre",
}


class BudgetPeriod(str, Enum):
    """Which aggregate a budget view shows."""
    WEEKLY = "semanal"
    MONTHLY = "mensual"

    @property
    def label(self) -> str:
        return "Semanal" if self is BudgetPeriod.WEEKLY else "Mensual"


class LegendTone(str, Enum):
    """Tone of the legend's secondary line."""
    NEUTRAL = "neutral"
    WARNING = "warning"


# =============================================================================
# SERVER AGGREGATES
# =============================================================================

class CategoryAmount(BaseModel):
    """An absolute value and its share of income."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    value: Decimal = Field(default=Decimal("0"), alias="valor")
    percentage: Decimal = Field(default=Decimal("0"), alias="porcentaje")

    @field_validator('value', 'percentage', mode='before')
    @classmethod
    def null_as_zero(cls, v):
        return Decimal("0") if v is None else v


class AllocationConfig(BaseModel):
    """
    The user's budget configuration, as stored on the server.

    An unconfigured user comes back with a zero weekly income.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    weekly_income: Decimal = Field(default=Decimal("0"), alias="ingresoSemanal")
    monthly_income: Optional[Decimal] = Field(default=None, alias="ingresosMensuales")
    expenses: CategoryAmount = Field(default_factory=CategoryAmount, alias="gastos")
    savings: CategoryAmount = Field(default_factory=CategoryAmount, alias="ahorros")
    investments: CategoryAmount = Field(default_factory=CategoryAmount, alias="inversiones")
    free: CategoryAmount = Field(default_factory=CategoryAmount, alias="libre")

    @field_validator('weekly_income', mode='before')
    @classmethod
    def null_income_as_zero(cls, v):
        return Decimal("0") if v is None else v

    @property
    def is_configured(self) -> bool:
        return self.weekly_income > 0

    def amount(self, category: BudgetCategory) -> CategoryAmount:
        return {
            BudgetCategory.EXPENSES: self.expenses,
            BudgetCategory.SAVINGS: self.savings,
            BudgetCategory.INVESTMENTS: self.investments,
            BudgetCategory.FREE: self.free,
        }[category]


class BudgetAggregate(BaseModel):
    """
    Real spending/saving for one period, computed by the server.

    The reserve lists break a category down into the reserves whose
    weekly quotas make it up.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    expenses: CategoryAmount = Field(default_factory=CategoryAmount, alias="gastos")
    savings: CategoryAmount = Field(default_factory=CategoryAmount, alias="ahorros")
    investments: CategoryAmount = Field(default_factory=CategoryAmount, alias="inversiones")
    available: CategoryAmount = Field(default_factory=CategoryAmount, alias="disponible")

    expense_reserves: list[Reserve] = Field(default_factory=list, alias="detalleGastos")
    savings_reserves: list[Reserve] = Field(default_factory=list, alias="detalleAhorros")
    investment_reserves: list[Reserve] = Field(default_factory=list, alias="detalleInversiones")

    @field_validator(
        'expense_reserves', 'savings_reserves', 'investment_reserves', mode='before'
    )
    @classmethod
    def null_as_empty(cls, v):
        return [] if v is None else v

    def amount(self, category: BudgetCategory) -> CategoryAmount:
        return {
            BudgetCategory.EXPENSES: self.expenses,
            BudgetCategory.SAVINGS: self.savings,
            BudgetCategory.INVESTMENTS: self.investments,
            BudgetCategory.FREE: self.available,
        }[category]

    def reserves(self, category: BudgetCategory) -> list[Reserve]:
        return {
            BudgetCategory.EXPENSES: self.expense_reserves,
            BudgetCategory.SAVINGS: self.savings_reserves,
            BudgetCategory.INVESTMENTS: self.investment_reserves,
            BudgetCategory.FREE: [],
        }[category]


class BudgetSummary(BaseModel):
    """Response of the budget summary endpoint."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    config: Optional[AllocationConfig] = None
    weekly: BudgetAggregate = Field(default_factory=BudgetAggregate, alias="pptoSemanal")
    monthly: BudgetAggregate = Field(default_factory=BudgetAggregate, alias="pptoMensual")

    @field_validator('weekly', 'monthly', mode='before')
    @classmethod
    def null_as_empty_aggregate(cls, v):
        return {} if v is None else v

    @property
    def is_configured(self) -> bool:
        return self.config is not None and self.config.is_configured

    def aggregate(self, period: BudgetPeriod) -> BudgetAggregate:
        return self.weekly if period is BudgetPeriod.WEEKLY else self.monthly


# =============================================================================
# ALLOCATION FORM
# =============================================================================

class AllocationDraft(BaseModel):
    """
    The allocation form while the user edits it.

    ``free_pct`` is derived and may go negative mid-edit; nothing here
    is validated until submission.
    """
    model_config = ConfigDict(frozen=True)

    weekly_income: Decimal = Decimal("0")
    expense_pct: int = 60
    savings_pct: int = 20
    investment_pct: int = 10
    free_pct: int = 10

    @property
    def percentages(self) -> tuple[int, int, int, int]:
        return (self.expense_pct, self.savings_pct, self.investment_pct, self.free_pct)

    @property
    def total(self) -> int:
        return sum(self.percentages)


class AllocationSubmission(BaseModel):
    """
    A validated allocation, ready to post.

    CRITICAL: An instance can only exist if the four percentages are
    non-negative and sum to exactly 100 and income is positive.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    weekly_income: Decimal = Field(..., gt=0, alias="ingresoSemanal")
    expenses: int = Field(..., ge=0, alias="gastos")
    savings: int = Field(..., ge=0, alias="ahorros")
    investments: int = Field(..., ge=0, alias="inversiones")
    free: int = Field(..., ge=0, alias="libre")

    @model_validator(mode='after')
    def validate_total(self) -> 'AllocationSubmission':
        total = self.expenses + self.savings + self.investments + self.free
        if total != 100:
            raise ValueError(f"Percentages must sum to 100, got {total}")
        return self

    def to_payload(self) -> dict:
        return {
            "ingresoSemanal": float(self.weekly_income),
            "gastos": self.expenses,
            "ahorros": self.savings,
            "inversiones": self.investments,
            "libre": self.free,
        }


# =============================================================================
# DECOMPOSITION OUTPUT
# =============================================================================

class CategoryBreakdown(BaseModel):
    """
    Stacked-bar figures for one category, in percentage points.

    At most one of ``shortfall`` and ``excess`` is non-zero.
    """
    model_config = ConfigDict(frozen=True)

    category: BudgetCategory
    real: Decimal
    target: Decimal
    achieved: Decimal
    shortfall: Decimal
    excess: Decimal

    @property
    def series(self) -> list[Decimal]:
        return [self.achieved, self.shortfall, self.excess]


class LegendEntry(BaseModel):
    """Legend row for one category, in currency."""
    model_config = ConfigDict(frozen=True)

    category: BudgetCategory
    label: str
    real_value: Decimal
    target_value: Decimal
    difference: Decimal = Field(
        ...,
        description="Signed target minus real"
    )
    secondary_label: str
    secondary_value: Decimal
    tone: LegendTone
    reserves: list[Reserve] = Field(default_factory=list)

    @property
    def is_over_target(self) -> bool:
        return self.tone is LegendTone.WARNING


class BudgetChart(BaseModel):
    """Everything a stacked bar chart and its legend need for one period."""
    model_config = ConfigDict(frozen=True)

    period: BudgetPeriod
    total_income: Decimal
    labels: list[str]
    legend: list[str]
    bar_colors: list[str]
    categories: list[CategoryBreakdown] = Field(default_factory=list)
    entries: list[LegendEntry] = Field(default_factory=list)

    @property
    def data(self) -> list[list[Decimal]]:
        return [category.series for category in self.categories]

    @property
    def has_series(self) -> bool:
        return bool(self.categories)
