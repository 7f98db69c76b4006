"""Coupon, Promotion and their usage records.

Business rules implemented:
- A mechanism discounts an order only while active and inside
  ``[start_date, end_date]``.
- ``FREE_ITEM`` mechanisms must name a target menu item.
- Coupon codes are unique per tenant.
- Usage records are append-only facts: they can be inserted, never updated
  or deleted one by one.  They disappear only when their order is purged.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import TenantScopedModel
from modules.discounts.constants import DiscountType


class UsageRecordImmutable(Exception):
    """Raised on any attempt to update or delete a usage record."""


# ---------------------------------------------------------------------------
# Discount mechanisms
# ---------------------------------------------------------------------------


class DiscountMechanism(TenantScopedModel):
    """Fields shared by coupons and promotions."""

    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    menu_item = models.ForeignKey(
        "menu.MenuItem",
        on_delete=models.PROTECT,
        related_name="+",
        null=True,
        blank=True,
    )
    min_order_value = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    max_total_uses = models.PositiveIntegerField(null=True, blank=True)
    max_uses_per_customer = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()

    class Meta:
        abstract = True

    def clean(self) -> None:
        super().clean()
        if self.discount_type == DiscountType.FREE_ITEM and not self.menu_item_id:
            raise ValidationError({"menu_item": "Free-item discounts need a menu item."})
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "End date must not precede start date."})

    def is_valid_at(self, moment: datetime) -> bool:
        """Active and inside the validity window (both bounds inclusive)."""
        return self.is_active and self.start_date <= moment <= self.end_date


def _mechanism_constraints(prefix: str) -> list:
    return [
        models.CheckConstraint(
            condition=models.Q(end_date__gte=models.F("start_date")),
            name=f"{prefix}_window_ordered",
        ),
        models.CheckConstraint(
            condition=models.Q(discount_value__gt=0),
            name=f"{prefix}_value_positive",
        ),
        models.CheckConstraint(
            condition=~models.Q(discount_type=DiscountType.FREE_ITEM)
            | models.Q(menu_item__isnull=False),
            name=f"{prefix}_free_item_target",
        ),
    ]


class Coupon(DiscountMechanism):
    """Discount redeemed by code."""

    code = models.CharField(max_length=50)

    class Meta:
        db_table = "coupons"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "code"], name="coupons_tenant_code_unique"
            ),
            *_mechanism_constraints("coupons"),
        ]

    def __str__(self) -> str:
        return self.code


class Promotion(DiscountMechanism):
    """Discount advertised by the tenant.

    ``days_of_week``, ``hours`` and ``image_url`` are descriptive and are not
    evaluated when an order is priced.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    days_of_week = models.JSONField(default=list, blank=True)
    hours = models.CharField(max_length=100, blank=True, default="")
    image_url = models.URLField(blank=True, default="")

    class Meta:
        db_table = "promotions"
        ordering = ["-created_at"]
        constraints = _mechanism_constraints("promotions")

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Usage records (append-only)
# ---------------------------------------------------------------------------


class UsageRecord(models.Model):
    tenant = models.ForeignKey(
        "companies.Company", on_delete=models.PROTECT, related_name="+"
    )
    customer_phone_number = models.CharField(max_length=20)
    order = models.ForeignKey(
        "orders.Order", on_delete=models.PROTECT, related_name="+"
    )
    used_at = models.DateTimeField(default=timezone.now)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        if not self._state.adding:
            raise UsageRecordImmutable(
                f"{type(self).__name__} {self.pk} cannot be modified."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise UsageRecordImmutable(f"{type(self).__name__} {self.pk} cannot be deleted.")


class CouponUsage(UsageRecord):
    coupon = models.ForeignKey(Coupon, on_delete=models.PROTECT, related_name="usages")

    class Meta:
        db_table = "coupon_usages"
        constraints = [
            models.UniqueConstraint(
                fields=["coupon", "customer_phone_number", "order"],
                name="coupon_usages_unique_redemption",
            ),
        ]
        indexes = [
            models.Index(
                fields=["coupon", "customer_phone_number"],
                name="coupon_usages_customer_idx",
            ),
        ]


class PromotionUsage(UsageRecord):
    promotion = models.ForeignKey(
        Promotion, on_delete=models.PROTECT, related_name="usages"
    )

    class Meta:
        db_table = "promotion_usages"
        constraints = [
            models.UniqueConstraint(
                fields=["promotion", "customer_phone_number", "order"],
                name="promotion_usages_unique_redemption",
            ),
        ]
        indexes = [
            models.Index(
                fields=["promotion", "customer_phone_number"],
                name="promotion_usages_customer_idx",
            ),
        ]
