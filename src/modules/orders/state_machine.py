"""Order status state machine.

When the requested status differs from the current one, the guards below
run in this order and the first match rejects the transition:

1. Cancelling a paid order (``ORDER_CANCEL_PAID``).
2. Completing an order that is not in production
   (``ORDER_FINALIZE_NOT_IN_PRODUCTION``).
3. Completing a pending order (``ORDER_FINALIZE_PENDING``).  Rule 2 always
   matches first; the guard is kept so the code order stays explicit.
4. Moving a pending order to production (``ORDER_PRODUCTION_PENDING``).
   This makes the PENDING -> IN_PRODUCTION entry of ``VALID_TRANSITIONS``
   unreachable.
5. Anything missing from ``VALID_TRANSITIONS``
   (``ORDER_INVALID_STATUS_TRANSITION``).

Requesting the current status is a no-op.
"""

from __future__ import annotations

from typing import Optional

from modules.orders.constants import (
    ORDER_CANCEL_PAID,
    ORDER_FINALIZE_NOT_IN_PRODUCTION,
    ORDER_FINALIZE_PENDING,
    ORDER_INVALID_STATUS_TRANSITION,
    ORDER_PRODUCTION_PENDING,
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentStatus,
)
from shared.domain.errors import Rejection


def evaluate_transition(
    current: str, requested: str, payment_status: str
) -> Optional[Rejection]:
    """Return the rejection for ``current -> requested``, or ``None`` if allowed."""
    if requested == current:
        return None

    context = {
        "current_status": current,
        "requested_status": requested,
        "payment_status": payment_status,
    }

    if requested == OrderStatus.CANCELLED and payment_status == PaymentStatus.PAID:
        return Rejection.business_rule(
            ORDER_CANCEL_PAID, "A paid order cannot be cancelled.", **context
        )
    if requested == OrderStatus.COMPLETED and current != OrderStatus.IN_PRODUCTION:
        return Rejection.business_rule(
            ORDER_FINALIZE_NOT_IN_PRODUCTION,
            "Only orders in production can be completed.",
            **context,
        )
    if current == OrderStatus.PENDING and requested == OrderStatus.COMPLETED:
        return Rejection.business_rule(
            ORDER_FINALIZE_PENDING, "A pending order cannot be completed.", **context
        )
    if current == OrderStatus.PENDING and requested == OrderStatus.IN_PRODUCTION:
        return Rejection.business_rule(
            ORDER_PRODUCTION_PENDING,
            "A pending order cannot be moved to production.",
            **context,
        )
    if requested not in VALID_TRANSITIONS.get(current, set()):
        return Rejection.business_rule(
            ORDER_INVALID_STATUS_TRANSITION,
            f"Cannot transition from {current} to {requested}.",
            **context,
        )
    return None


def can_transition(current: str, requested: str, payment_status: str) -> bool:
    return evaluate_transition(current, requested, payment_status) is None
