"""Order domain constants.

Status choices, payment status choices and the adjacency table of the
order state machine.  The guards evaluated before the table live in
``modules.orders.state_machine``.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    IN_PRODUCTION = "IN_PRODUCTION", "In production"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    FAILED = "FAILED", "Failed"
    REFUNDED = "REFUNDED", "Refunded"
    PROCESSED = "PROCESSED", "Processed"


class CustomizationType(models.TextChoices):
    ADD_INGREDIENT = "ADD_INGREDIENT", "Add ingredient"
    REMOVE_INGREDIENT = "REMOVE_INGREDIENT", "Remove ingredient"
    SIZE = "SIZE", "Size"
    COOKING_POINT = "COOKING_POINT", "Cooking point"
    OTHER = "OTHER", "Other"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.IN_PRODUCTION, OrderStatus.CANCELLED},
    OrderStatus.IN_PRODUCTION: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

# Rule codes
ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
ORDER_CANCEL_PAID = "ORDER_CANCEL_PAID"
ORDER_FINALIZE_NOT_IN_PRODUCTION = "ORDER_FINALIZE_NOT_IN_PRODUCTION"
ORDER_FINALIZE_PENDING = "ORDER_FINALIZE_PENDING"
ORDER_PRODUCTION_PENDING = "ORDER_PRODUCTION_PENDING"
ORDER_INVALID_STATUS_TRANSITION = "ORDER_INVALID_STATUS_TRANSITION"
ORDER_DISCOUNT_ALREADY_APPLIED = "ORDER_DISCOUNT_ALREADY_APPLIED"
