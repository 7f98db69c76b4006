"""Discount domain constants."""

from django.db import models


class DiscountType(models.TextChoices):
    PERCENTAGE = "PERCENTAGE", "Percentage"
    FIXED = "FIXED", "Fixed amount"
    FREE_ITEM = "FREE_ITEM", "Free item"


class MechanismKind(models.TextChoices):
    COUPON = "COUPON", "Coupon"
    PROMOTION = "PROMOTION", "Promotion"


# Rule codes, one family per mechanism kind.
COUPON_NOT_FOUND = "COUPON_NOT_FOUND"
COUPON_INVALID = "COUPON_INVALID"
COUPON_MAX_TOTAL_USES = "COUPON_MAX_TOTAL_USES"
COUPON_MAX_USES_PER_CUSTOMER = "COUPON_MAX_USES_PER_CUSTOMER"
COUPON_USAGE_LIMIT_RACE = "COUPON_USAGE_LIMIT_RACE"
COUPON_CODE_TAKEN = "COUPON_CODE_TAKEN"

PROMOTION_NOT_FOUND = "PROMOTION_NOT_FOUND"
PROMOTION_INVALID = "PROMOTION_INVALID"
PROMOTION_MAX_TOTAL_USES = "PROMOTION_MAX_TOTAL_USES"
PROMOTION_MAX_USES_PER_CUSTOMER = "PROMOTION_MAX_USES_PER_CUSTOMER"
PROMOTION_USAGE_LIMIT_RACE = "PROMOTION_USAGE_LIMIT_RACE"
