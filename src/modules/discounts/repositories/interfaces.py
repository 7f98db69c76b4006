"""Coupon and promotion store interfaces."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from modules.core.repositories.interfaces import ITenantRepository

if TYPE_CHECKING:
    from modules.discounts.dtos import UsageCounts
    from modules.discounts.models import Coupon, Promotion

M = TypeVar("M")


class IDiscountMechanismRepository(ITenantRepository[M], Generic[M]):
    """Contract shared by the coupon and promotion stores."""

    @abstractmethod
    def get_for_update(self, id: str, tenant_id: str) -> Optional[M]:
        """Load the mechanism and lock its row until the transaction ends.

        Concurrent redemptions of the same mechanism serialize on this lock.
        """

    @abstractmethod
    def get_usage_counts(
        self, mechanism_id: str, tenant_id: str, customer_phone_number: str
    ) -> UsageCounts:
        """Total redemptions and redemptions by this customer."""

    @abstractmethod
    def record_usage(
        self,
        mechanism_id: str,
        tenant_id: str,
        customer_phone_number: str,
        order_id: str,
    ) -> None:
        """Append one usage record."""


class ICouponRepository(IDiscountMechanismRepository["Coupon"]):
    @abstractmethod
    def code_exists(self, code: str, tenant_id: str) -> bool:
        """Whether the tenant already has a coupon with this code."""


class IPromotionRepository(IDiscountMechanismRepository["Promotion"]):
    pass
