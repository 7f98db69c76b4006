"""Django ORM implementations of the coupon and promotion stores.

Usage counting and recording are delegated to :class:`UsageLedger`.
Look-ups return ``None`` for missing, foreign-tenant or malformed ids.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Optional, Type

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.discounts.dtos import UsageCounts
from modules.discounts.ledger import UsageLedger, coupon_ledger, promotion_ledger
from modules.discounts.models import Coupon, DiscountMechanism, Promotion
from modules.discounts.repositories.interfaces import (
    ICouponRepository,
    IPromotionRepository,
)

logger = structlog.get_logger(__name__)


class _MechanismDjangoRepository(ABC):
    model: ClassVar[Type[DiscountMechanism]]

    def __init__(self, ledger: Optional[UsageLedger] = None) -> None:
        self._ledger = ledger or self._default_ledger()

    @abstractmethod
    def _default_ledger(self) -> UsageLedger:
        """Ledger used when none is injected."""

    def get_by_id(self, id: str, tenant_id: str):
        try:
            return self.model.objects.filter(id=id, tenant_id=tenant_id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str, tenant_id: str):
        try:
            return (
                self.model.objects.select_for_update()
                .filter(id=id, tenant_id=tenant_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, tenant_id: str, filters: Optional[Dict[str, Any]] = None) -> List:
        queryset = self.model.objects.filter(tenant_id=tenant_id)
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity):
        entity.save()
        logger.info(
            "discount.saved",
            mechanism=self.model.__name__.lower(),
            mechanism_id=str(entity.id),
        )
        return entity

    def get_usage_counts(
        self, mechanism_id: str, tenant_id: str, customer_phone_number: str
    ) -> UsageCounts:
        return UsageCounts(
            total=self._ledger.count_total(mechanism_id, tenant_id),
            by_customer=self._ledger.count_by_customer(
                mechanism_id, tenant_id, customer_phone_number
            ),
        )

    def record_usage(
        self,
        mechanism_id: str,
        tenant_id: str,
        customer_phone_number: str,
        order_id: str,
    ) -> None:
        self._ledger.record(mechanism_id, tenant_id, customer_phone_number, order_id)


class CouponDjangoRepository(_MechanismDjangoRepository, ICouponRepository):
    model = Coupon

    def _default_ledger(self) -> UsageLedger:
        return coupon_ledger()

    def code_exists(self, code: str, tenant_id: str) -> bool:
        return Coupon.objects.filter(tenant_id=tenant_id, code=code).exists()


class PromotionDjangoRepository(_MechanismDjangoRepository, IPromotionRepository):
    model = Promotion

    def _default_ledger(self) -> UsageLedger:
        return promotion_ledger()
