"""Order and OrderItem models.

Business rules implemented:
- ``total_amount = max(0, subtotal - discount_amount)``.
- ``platform_fee`` is computed from the pre-discount subtotal.
- At most one discount mechanism per order (database check constraint).
- ``subtotal`` is derived from the items, never stored on the order.
- OrderItem snapshots the menu price at creation time (``unit_price``) and
  refuses to change it afterwards.
- OrderItem subtotal is always ``quantity * unit_price`` (calculated on save).
- Menu item FK uses PROTECT to preserve financial history.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, TenantScopedModel
from modules.core.money import ZERO
from modules.orders.constants import TERMINAL_STATES, OrderStatus, PaymentStatus

logger = structlog.get_logger(__name__)


class Order(TenantScopedModel):
    """Order aggregate root.

    Mutated only by ``OrderService``: pricing on creation, the state machine
    and line re-pricing on patch.
    """

    customer_phone_number: models.CharField = models.CharField(max_length=20)
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_status: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    discount_amount: models.DecimalField = models.DecimalField(
        max_digits=10, decimal_places=2, default=ZERO
    )
    platform_fee: models.DecimalField = models.DecimalField(
        max_digits=10, decimal_places=2, default=ZERO
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=10, decimal_places=2, default=ZERO
    )
    coupon: models.ForeignKey = models.ForeignKey(
        "discounts.Coupon",
        on_delete=models.PROTECT,
        related_name="orders",
        null=True,
        blank=True,
    )
    promotion: models.ForeignKey = models.ForeignKey(
        "discounts.Promotion",
        on_delete=models.PROTECT,
        related_name="orders",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["tenant", "status"], name="orders_tenant_status_idx"),
            models.Index(
                fields=["tenant", "customer_phone_number"],
                name="orders_tenant_phone_idx",
            ),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(coupon__isnull=True)
                | models.Q(promotion__isnull=True),
                name="orders_single_discount_mechanism",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="orders_total_not_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def subtotal(self) -> Decimal:
        """Sum of the line subtotals (uses prefetched items when available)."""
        return sum((item.subtotal for item in self.items.all()), ZERO)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def has_discount(self) -> bool:
        return self.coupon_id is not None or self.promotion_id is not None

    def clean(self) -> None:
        super().clean()
        if self.coupon_id and self.promotion_id:
            raise ValidationError("An order cannot use a coupon and a promotion.")

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a MenuItem.

    ``unit_price`` is a **snapshot** of the menu price at the time of
    purchase: it never changes even if the menu price is updated later.
    ``subtotal`` is always ``quantity * unit_price``, recalculated on every save.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    menu_item: models.ForeignKey = models.ForeignKey(
        "menu.MenuItem",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        editable=False,
    )
    notes: models.TextField = models.TextField(blank=True, default="")
    tags: models.JSONField = models.JSONField(default=list, blank=True)
    additional_ids: models.JSONField = models.JSONField(default=list, blank=True)
    customizations: models.JSONField = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._snapshot_price = instance.__dict__.get("unit_price")
        return instance

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self.unit_price is None:
            raise ValidationError({"unit_price": "Unit price snapshot is required."})
        snapshot = getattr(self, "_snapshot_price", None)
        if snapshot is not None and snapshot != self.unit_price:
            raise ValidationError({"unit_price": "Unit price cannot change."})
        self.subtotal = self.quantity * self.unit_price
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "subtotal" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["subtotal"]
        super().save(*args, **kwargs)
        self._snapshot_price = self.unit_price

    def __str__(self) -> str:
        return f"{self.menu_item_id} x{self.quantity} ({self.subtotal})"
