"""
Projection and Account Models

A projection is money the user expects to receive or spend, kept as a
concept and a value. Accounts are only created from the client; their
balances always come from the server.
"""

from decimal import Decimal
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AccountType(str, Enum):
    """Account categories known to the server."""
    SAVINGS = "AHORRO"
    INVESTMENT = "INVERSION"
    CREDIT = "CREDITO"

    @property
    def is_credit(self) -> bool:
        return self is AccountType.CREDIT


class Projection(BaseModel):
    """A projected amount as reported by the server."""
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    id: int
    concept: str = Field(default="", alias="concepto")
    value: Decimal = Field(default=Decimal("0"), alias="valor")

    @field_validator('value', mode='before')
    @classmethod
    def null_as_zero(cls, v):
        return Decimal("0") if v is None else v


def projected_total(projections: Iterable[Projection]) -> Decimal:
    """Sum of every projected value."""
    return sum((projection.value for projection in projections), Decimal("0"))
