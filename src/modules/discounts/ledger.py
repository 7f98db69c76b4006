"""Usage ledger: counts redemptions over the append-only usage tables.

The ledger exposes no update or delete; a count taken inside the locked
section can only grow afterwards.
"""

from __future__ import annotations

from typing import Type, Union
from uuid import UUID

import structlog

from modules.discounts.models import CouponUsage, PromotionUsage, UsageRecord

logger = structlog.get_logger(__name__)

Identifier = Union[str, UUID]


class UsageLedger:
    """Counting view over one usage table.

    ``mechanism_field`` is the foreign key naming the coupon or promotion
    (``"coupon"`` for ``CouponUsage``).
    """

    def __init__(self, usage_model: Type[UsageRecord], mechanism_field: str) -> None:
        self._model = usage_model
        self._field = mechanism_field

    def _for_mechanism(self, mechanism_id: Identifier, tenant_id: Identifier):
        return self._model.objects.filter(
            **{f"{self._field}_id": mechanism_id}, tenant_id=tenant_id
        )

    def count_total(self, mechanism_id: Identifier, tenant_id: Identifier) -> int:
        return self._for_mechanism(mechanism_id, tenant_id).count()

    def count_by_customer(
        self,
        mechanism_id: Identifier,
        tenant_id: Identifier,
        customer_phone_number: str,
    ) -> int:
        return (
            self._for_mechanism(mechanism_id, tenant_id)
            .filter(customer_phone_number=customer_phone_number)
            .count()
        )

    def record(
        self,
        mechanism_id: Identifier,
        tenant_id: Identifier,
        customer_phone_number: str,
        order_id: Identifier,
    ) -> UsageRecord:
        usage = self._model.objects.create(
            **{f"{self._field}_id": mechanism_id},
            tenant_id=tenant_id,
            customer_phone_number=customer_phone_number,
            order_id=order_id,
        )
        logger.info(
            "discount.usage_recorded",
            mechanism=self._field,
            mechanism_id=str(mechanism_id),
            order_id=str(order_id),
            customer_phone=customer_phone_number,
        )
        return usage


def coupon_ledger() -> UsageLedger:
    return UsageLedger(CouponUsage, "coupon")


def promotion_ledger() -> UsageLedger:
    return UsageLedger(PromotionUsage, "promotion")
