"""
Display formatting shared by every screen.

Amounts are whole pesos with a dot as thousands separator
(``$ 1.234``); dates and months are written in Spanish.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from finance_client.models.ledger import LedgerWindow
from finance_client.models.reserve import ReserveType

MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]
MONTH_ABBREVIATIONS = [
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sep", "oct", "nov", "dic",
]

_RESERVE_TYPE_LABELS = {
    ReserveType.FIXED_EXPENSE: "Gasto Fijo",
    ReserveType.MONTHLY_FIXED_EXPENSE: "Gasto Fijo Mensual",
}


def format_currency(value: Union[Decimal, int, float, None]) -> str:
    """
    Format an amount as ``$ 1.234``.

    Rounds half up to whole units. Anything that is not a number
    formats as ``$ 0``.
    """
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float)):
        return "$ 0"
    try:
        amount = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return "$ 0"
    if not amount.is_finite():
        return "$ 0"
    return "$ " + f"{int(amount):,}".replace(",", ".")


def format_percentage(value: Union[Decimal, int, float]) -> str:
    """``12.5`` -> ``12.5%``; whole numbers drop the decimals."""
    amount = Decimal(str(value))
    if amount == amount.to_integral_value():
        return f"{int(amount)}%"
    return f"{amount.normalize()}%"


def format_date(value: Union[date, datetime]) -> str:
    """``date(2026, 10, 19)`` -> ``19 oct 2026``."""
    return f"{value.day} {MONTH_ABBREVIATIONS[value.month - 1]} {value.year}"


def format_window(window: LedgerWindow) -> str:
    """Header of the month selector, e.g. ``octubre de 2026``."""
    return f"{MONTH_NAMES[window.month - 1]} de {window.year}"


def format_reserve_type(reserve_type: ReserveType) -> str:
    """Human label for a reserve type."""
    if reserve_type in _RESERVE_TYPE_LABELS:
        return _RESERVE_TYPE_LABELS[reserve_type]
    return reserve_type.value.replace("_", " ").capitalize()
