"""Discount DTOs for the Service Layer.

Pydantic v2 contracts between the API layer and ``DiscountService`` /
``DiscountResolver``.  All DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.discounts.constants import DiscountType, MechanismKind

# ---------------------------------------------------------------------------
# Definition (input) DTOs
# ---------------------------------------------------------------------------


class _MechanismDefinitionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    tenant_id: UUID
    discount_type: DiscountType
    discount_value: Decimal
    menu_item_id: Optional[UUID] = None
    min_order_value: Optional[Decimal] = None
    max_total_uses: Optional[int] = None
    max_uses_per_customer: Optional[int] = None
    is_active: bool = True
    start_date: datetime
    end_date: datetime

    @field_validator("discount_value")
    @classmethod
    def value_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Discount value must be greater than zero.")
        return v

    @field_validator("min_order_value")
    @classmethod
    def min_order_value_not_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Minimum order value cannot be negative.")
        return v

    @field_validator("max_total_uses", "max_uses_per_customer")
    @classmethod
    def limits_must_be_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("Usage limits must be at least 1.")
        return v

    @model_validator(mode="after")
    def check_window_and_target(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must not precede start date.")
        if self.discount_type == DiscountType.FREE_ITEM and self.menu_item_id is None:
            raise ValueError("Free-item discounts need a menu item.")
        if (
            self.discount_type == DiscountType.PERCENTAGE
            and self.discount_value > 100
        ):
            raise ValueError("A percentage discount cannot exceed 100.")
        return self


class CreateCouponDTO(_MechanismDefinitionDTO):
    code: str = Field(min_length=1, max_length=50)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        code = v.strip().upper()
        if not code:
            raise ValueError("Coupon code cannot be blank.")
        return code


class CreatePromotionDTO(_MechanismDefinitionDTO):
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    days_of_week: List[int] = Field(default_factory=list)
    hours: str = ""
    image_url: str = ""

    @field_validator("days_of_week")
    @classmethod
    def days_in_range(cls, v: List[int]) -> List[int]:
        if any(day < 0 or day > 6 for day in v):
            raise ValueError("Days of week must be between 0 (Monday) and 6 (Sunday).")
        return sorted(set(v))


# ---------------------------------------------------------------------------
# Resolution DTOs
# ---------------------------------------------------------------------------


class UsageCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    by_customer: int


class AppliedDiscount(BaseModel):
    """The mechanism that priced an order, with the limits it was checked against."""

    model_config = ConfigDict(frozen=True)

    kind: MechanismKind
    mechanism_id: UUID
    tenant_id: UUID
    customer_phone_number: str
    max_total_uses: Optional[int] = None
    max_uses_per_customer: Optional[int] = None


class DiscountResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    applied: Optional[AppliedDiscount] = None

    @property
    def coupon_id(self) -> Optional[UUID]:
        if self.applied and self.applied.kind == MechanismKind.COUPON:
            return self.applied.mechanism_id
        return None

    @property
    def promotion_id(self) -> Optional[UUID]:
        if self.applied and self.applied.kind == MechanismKind.PROMOTION:
            return self.applied.mechanism_id
        return None


NO_DISCOUNT = DiscountResolution(amount=Decimal("0.00"))
