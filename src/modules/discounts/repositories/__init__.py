"""Discount repositories package."""

from modules.discounts.repositories.django_repository import (
    CouponDjangoRepository,
    PromotionDjangoRepository,
)
from modules.discounts.repositories.interfaces import (
    ICouponRepository,
    IDiscountMechanismRepository,
    IPromotionRepository,
)

__all__ = [
    "CouponDjangoRepository",
    "ICouponRepository",
    "IDiscountMechanismRepository",
    "IPromotionRepository",
    "PromotionDjangoRepository",
]
