"""Company DTOs consumed by the order engine."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator

from modules.companies.constants import FeeType


class FeeConfig(BaseModel):
    """Immutable tenant fee configuration (``{fee_type, fee_value}``)."""

    model_config = ConfigDict(frozen=True)

    fee_type: FeeType
    fee_value: Decimal

    @field_validator("fee_value")
    @classmethod
    def fee_value_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Fee value cannot be negative.")
        return v
