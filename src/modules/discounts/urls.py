"""Discount URL configuration."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.discounts.views import CouponViewSet, PromotionViewSet

router = SimpleRouter(trailing_slash=True)
router.register("coupons", CouponViewSet, basename="coupon")
router.register("promotions", PromotionViewSet, basename="promotion")

urlpatterns = router.urls
