"""Discount domain exceptions."""

from __future__ import annotations

from modules.discounts.constants import (
    COUPON_CODE_TAKEN,
    COUPON_NOT_FOUND,
    PROMOTION_NOT_FOUND,
)
from shared.domain.errors import BusinessRuleViolation, NotFound


class CouponNotFound(NotFound):
    default_code = COUPON_NOT_FOUND


class PromotionNotFound(NotFound):
    default_code = PROMOTION_NOT_FOUND


class CouponCodeTaken(BusinessRuleViolation):
    """Another coupon of the tenant already uses this code."""

    default_code = COUPON_CODE_TAKEN
