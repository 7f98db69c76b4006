"""Order domain exceptions.

Raised by the Service Layer at the transaction boundary when a pricing or
state-machine rejection comes back.  The API layer (Views) catches these and
translates them into HTTP responses.
"""

from __future__ import annotations

from modules.orders.constants import (
    ORDER_DISCOUNT_ALREADY_APPLIED,
    ORDER_INVALID_STATUS_TRANSITION,
    ORDER_NOT_FOUND,
)
from shared.domain.errors import BusinessRuleViolation, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist for the tenant."""

    default_code = ORDER_NOT_FOUND


class InvalidOrderStatus(BusinessRuleViolation):
    """A status transition was refused by the state machine."""

    default_code = ORDER_INVALID_STATUS_TRANSITION


class DiscountAlreadyApplied(BusinessRuleViolation):
    """The order already carries a different coupon or promotion."""

    default_code = ORDER_DISCOUNT_ALREADY_APPLIED
