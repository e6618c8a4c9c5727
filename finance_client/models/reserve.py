"""
Reserve Models

A reserve is a savings or fixed-expense bucket with its own goal,
weekly quota and movements. The client never computes any of its
figures; it only reads them and sends edits back.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReserveType(str, Enum):
    """Reserve categories known to the server."""
    SAVINGS = "AHORRO"
    INVESTMENT = "INVERSION"
    FIXED_EXPENSE = "GASTO_FIJO"
    MONTHLY_FIXED_EXPENSE = "GASTO_FIJO_MES"

    @property
    def has_goal_date(self) -> bool:
        """Monthly fixed expenses recur, so they carry no goal date."""
        return self is not ReserveType.MONTHLY_FIXED_EXPENSE


class Reserve(BaseModel):
    """
    A reserve as reported by the server.

    Unknown fields are kept so a full record fetched from the server
    can be sent back with a single field changed.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    concept: str = Field(default="", alias="concepto")
    reserve_type: Optional[ReserveType] = Field(default=None, alias="tipo")
    goal_value: Decimal = Field(default=Decimal("0"), alias="valorMeta")
    weekly_quota: Decimal = Field(default=Decimal("0"), alias="valorReservaSemanal")
    reserved_value: Decimal = Field(default=Decimal("0"), alias="valorReservado")
    saved_value: Decimal = Field(default=Decimal("0"), alias="valorAhorrado")
    spent_value: Decimal = Field(default=Decimal("0"), alias="valorGastado")
    missing_value: Decimal = Field(default=Decimal("0"), alias="valorFaltante")
    goal_date: Optional[date] = Field(default=None, alias="fechaMeta")

    @field_validator(
        'goal_value',
        'weekly_quota',
        'reserved_value',
        'saved_value',
        'spent_value',
        'missing_value',
        mode='before',
    )
    @classmethod
    def null_as_zero(cls, v):
        return Decimal("0") if v is None else v

    def to_payload(self) -> dict:
        """Serialize back to the server's shape, unknown fields included."""
        payload = self.model_dump(by_alias=True)
        for key, value in payload.items():
            if isinstance(value, Decimal):
                payload[key] = float(value)
            elif isinstance(value, date):
                payload[key] = value.isoformat()
            elif isinstance(value, Enum):
                payload[key] = value.value
        return payload
