"""Company model: the tenant that owns menus, discounts and orders.

Only the fields the order engine reads are modelled here: the tenant's
platform-fee configuration and its enabled flag.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.companies.constants import FeeType
from modules.core.models import BaseModel


class Company(BaseModel):
    """Tenant account (restaurant).

    ``fee_type`` / ``fee_value`` drive the platform fee charged on every
    order: a percentage of the pre-discount subtotal or a flat amount.
    """

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    is_enabled = models.BooleanField(default=True)
    fee_type = models.CharField(
        max_length=20,
        choices=FeeType.choices,
        default=FeeType.PERCENTAGE,
    )
    fee_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    class Meta:
        db_table = "companies"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(fee_value__gte=0),
                name="companies_fee_value_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.name
