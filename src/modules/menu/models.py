"""MenuItem model.

Business rules implemented:
- Price must be greater than zero.
- A menu item belongs to exactly one tenant; look-ups are always tenant-scoped.
- Order lines copy ``price`` at order time, so later price changes never
  affect existing orders.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import TenantScopedModel

logger = structlog.get_logger(__name__)


class MenuItem(TenantScopedModel):
    """A sellable item on a tenant's menu."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    is_available = models.BooleanField(default=True)

    class Meta:
        db_table = "menu_items"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["tenant", "name"], name="menu_items_tenant_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="menu_items_price_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "menu_item.created",
                menu_item_id=str(self.id),
                tenant_id=str(self.tenant_id),
                price=str(self.price),
            )

    def __str__(self) -> str:
        return f"{self.name} ({self.price})"
