"""
Budget Decomposer

Turns real vs target figures into what a stacked bar chart and its
legend show. Pure functions only.

Each category bar is split into three stacked channels:
    achieved  = min(real, target)
    shortfall = max(target - real, 0)
    excess    = max(real - target, 0)

At most one of shortfall/excess is non-zero; both are zero when real
equals target.

WEEKLY VS MONTHLY (kept as the server reports it):
- weekly real and weekly target both come from the weekly aggregate
  and the configuration;
- the monthly target value is the weekly configured value times
  ``weeks_per_month``;
- the monthly real value is the server's own monthly aggregate, NOT
  weekly real times four. The two need not be consistent multiples.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from finance_client.config import get_settings
from finance_client.models.budget import (
    AllocationConfig,
    BudgetCategory,
    BudgetChart,
    BudgetPeriod,
    BudgetSummary,
    CategoryBreakdown,
    LegendEntry,
    LegendTone,
)
from finance_client.models.reserve import Reserve

Number = Union[Decimal, int, float]

CHART_LEGEND = ["Real", "Faltante Sugerido", "Exceso"]
BAR_COLORS = ["#007bff", "#e9ecef", "#dc3545"]
SHORTFALL_LABEL = "Faltante Sugerido"
EXCESS_LABEL = "Exceso"

_ZERO = Decimal("0")


def _decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def split_category(real: Number, target: Number) -> tuple[Decimal, Decimal, Decimal]:
    """Return ``(achieved, shortfall, excess)`` for one category."""
    real, target = _decimal(real), _decimal(target)
    achieved = min(real, target)
    shortfall = target - real if target > real else _ZERO
    excess = real - target if real > target else _ZERO
    return achieved, shortfall, excess


def decompose(pairs: Sequence[tuple[Number, Number]]) -> list[CategoryBreakdown]:
    """
    Decompose four ``(real, target)`` pairs, in category display order.

    Raises:
        ValueError: If there is not exactly one pair per category.
    """
    categories = list(BudgetCategory)
    if len(pairs) != len(categories):
        raise ValueError(
            f"Expected {len(categories)} (real, target) pairs, got {len(pairs)}"
        )

    breakdowns = []
    for category, (real, target) in zip(categories, pairs):
        achieved, shortfall, excess = split_category(real, target)
        breakdowns.append(CategoryBreakdown(
            category=category,
            real=_decimal(real),
            target=_decimal(target),
            achieved=achieved,
            shortfall=shortfall,
            excess=excess,
        ))
    return breakdowns


def legend_entry(
    category: BudgetCategory,
    real_value: Number,
    target_value: Number,
    reserves: Iterable[Reserve] = (),
) -> LegendEntry:
    """
    Build the legend row for one category.

    Real at or under target shows the remaining shortfall in a neutral
    tone; real over target shows the excess as a warning.
    """
    real_value, target_value = _decimal(real_value), _decimal(target_value)
    difference = target_value - real_value

    if difference >= 0:
        secondary_label, secondary_value, tone = SHORTFALL_LABEL, difference, LegendTone.NEUTRAL
    else:
        secondary_label, secondary_value, tone = EXCESS_LABEL, abs(difference), LegendTone.WARNING

    return LegendEntry(
        category=category,
        label=category.label,
        real_value=real_value,
        target_value=target_value,
        difference=difference,
        secondary_label=secondary_label,
        secondary_value=secondary_value,
        tone=tone,
        reserves=list(reserves),
    )


def target_value(
    config: AllocationConfig,
    category: BudgetCategory,
    period: BudgetPeriod,
    weeks_per_month: int,
) -> Decimal:
    """Configured amount for a category; monthly is weekly times weeks_per_month."""
    weekly = config.amount(category).value
    if period is BudgetPeriod.WEEKLY:
        return weekly
    return weekly * weeks_per_month


def period_income(
    config: AllocationConfig,
    period: BudgetPeriod,
    weeks_per_month: int,
) -> Decimal:
    """
    Income the period's chart is drawn against.

    The monthly figure is the server's when reported.
    """
    if period is BudgetPeriod.WEEKLY:
        return config.weekly_income
    if config.monthly_income is not None:
        return config.monthly_income
    return config.weekly_income * weeks_per_month


def decompose_budget(
    summary: BudgetSummary,
    period: BudgetPeriod,
    weeks_per_month: Optional[int] = None,
) -> BudgetChart:
    """
    Build the chart and legend for one period of a budget summary.

    Chart bars use percentages: the aggregate's real share against the
    configured target share. No bars are produced while the period's
    income is zero; the legend is always produced.
    """
    weeks = weeks_per_month or get_settings().budget.weeks_per_month
    config = summary.config or AllocationConfig()
    aggregate = summary.aggregate(period)
    income = period_income(config, period, weeks)

    categories: list[CategoryBreakdown] = []
    if income > 0:
        categories = decompose([
            (aggregate.amount(category).percentage, config.amount(category).percentage)
            for category in BudgetCategory
        ])

    entries = [
        legend_entry(
            category,
            aggregate.amount(category).value,
            target_value(config, category, period, weeks),
            aggregate.reserves(category),
        )
        for category in BudgetCategory
    ]

    return BudgetChart(
        period=period,
        total_income=income,
        labels=[category.label for category in BudgetCategory],
        legend=list(CHART_LEGEND),
        bar_colors=list(BAR_COLORS),
        categories=categories,
        entries=entries,
    )
