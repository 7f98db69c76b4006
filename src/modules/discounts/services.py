"""Discount definition use cases.

Tenant staff define coupons and promotions here; ``DiscountResolver``
consumes them at order time.

Business rules enforced:
- The tenant must exist.
- A ``FREE_ITEM`` mechanism must target a menu item of the same tenant.
- Coupon codes are unique per tenant (compared upper-cased).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import transaction

from modules.companies.exceptions import CompanyNotFound
from modules.discounts.constants import DiscountType, MechanismKind
from modules.discounts.exceptions import (
    CouponCodeTaken,
    CouponNotFound,
    PromotionNotFound,
)
from modules.discounts.models import Coupon, Promotion
from modules.menu.exceptions import MenuItemNotFound

if TYPE_CHECKING:
    from modules.companies.repositories.interfaces import ICompanyRepository
    from modules.discounts.dtos import (
        CreateCouponDTO,
        CreatePromotionDTO,
        _MechanismDefinitionDTO,
    )
    from modules.discounts.models import DiscountMechanism
    from modules.discounts.repositories.interfaces import (
        ICouponRepository,
        IPromotionRepository,
    )
    from modules.menu.repositories.interfaces import IMenuItemRepository

logger = structlog.get_logger(__name__)


class DiscountService:
    """Application service for coupon and promotion definitions."""

    def __init__(
        self,
        coupon_repository: ICouponRepository,
        promotion_repository: IPromotionRepository,
        menu_repository: IMenuItemRepository,
        company_repository: ICompanyRepository,
    ) -> None:
        self._coupon_repo = coupon_repository
        self._promotion_repo = promotion_repository
        self._menu_repo = menu_repository
        self._company_repo = company_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_coupon(self, dto: CreateCouponDTO) -> Coupon:
        """Define a coupon.

        Raises:
            CompanyNotFound: the tenant does not exist.
            MenuItemNotFound: the free-item target is not on the tenant's menu.
            CouponCodeTaken: the tenant already has a coupon with this code.
        """
        tenant_id = str(dto.tenant_id)
        self._check_definition(dto)
        if self._coupon_repo.code_exists(dto.code, tenant_id):
            raise CouponCodeTaken(
                f"Coupon code {dto.code} is already in use.",
                context={"code": dto.code, "tenant_id": tenant_id},
            )

        coupon = Coupon(code=dto.code, **self._mechanism_fields(dto))
        self._coupon_repo.save(coupon)
        logger.info(
            "coupon.created",
            coupon_id=str(coupon.id),
            tenant_id=tenant_id,
            code=coupon.code,
        )
        return coupon

    @transaction.atomic
    def create_promotion(self, dto: CreatePromotionDTO) -> Promotion:
        """Define a promotion.

        Raises:
            CompanyNotFound: the tenant does not exist.
            MenuItemNotFound: the free-item target is not on the tenant's menu.
        """
        self._check_definition(dto)
        promotion = Promotion(
            name=dto.name,
            description=dto.description,
            days_of_week=list(dto.days_of_week),
            hours=dto.hours,
            image_url=dto.image_url,
            **self._mechanism_fields(dto),
        )
        self._promotion_repo.save(promotion)
        logger.info(
            "promotion.created",
            promotion_id=str(promotion.id),
            tenant_id=str(dto.tenant_id),
        )
        return promotion

    @transaction.atomic
    def set_active(
        self,
        kind: MechanismKind,
        mechanism_id: UUID,
        tenant_id: UUID,
        is_active: bool,
    ) -> DiscountMechanism:
        """Enable or disable a coupon or promotion.

        Takes the same row lock as order pricing, so a deactivation waits for
        in-flight redemptions of the mechanism.
        """
        kind = MechanismKind(kind)
        repo = self._repo_for(kind)
        mechanism = repo.get_for_update(str(mechanism_id), str(tenant_id))
        if mechanism is None:
            raise self._not_found(kind, mechanism_id, tenant_id)
        if mechanism.is_active != is_active:
            mechanism.is_active = is_active
            repo.save(mechanism)
            logger.info(
                "discount.activation_changed",
                mechanism=kind.value,
                mechanism_id=str(mechanism_id),
                is_active=is_active,
            )
        return mechanism

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_coupon(self, coupon_id: str, tenant_id: str) -> Coupon:
        coupon = self._coupon_repo.get_by_id(coupon_id, tenant_id)
        if coupon is None:
            raise self._not_found(MechanismKind.COUPON, coupon_id, tenant_id)
        return coupon

    def get_promotion(self, promotion_id: str, tenant_id: str) -> Promotion:
        promotion = self._promotion_repo.get_by_id(promotion_id, tenant_id)
        if promotion is None:
            raise self._not_found(MechanismKind.PROMOTION, promotion_id, tenant_id)
        return promotion

    def list_coupons(
        self, tenant_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Coupon]:
        return self._coupon_repo.list(tenant_id, filters)

    def list_promotions(
        self, tenant_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Promotion]:
        return self._promotion_repo.list(tenant_id, filters)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_definition(self, dto: _MechanismDefinitionDTO) -> None:
        tenant_id = str(dto.tenant_id)
        if self._company_repo.get_by_id(tenant_id) is None:
            raise CompanyNotFound(
                f"Company {tenant_id} not found.", context={"tenant_id": tenant_id}
            )
        if dto.discount_type == DiscountType.FREE_ITEM and not self._menu_repo.exists(
            str(dto.menu_item_id), tenant_id
        ):
            raise MenuItemNotFound(
                f"Menu item {dto.menu_item_id} not found.",
                context={"menu_item_id": dto.menu_item_id, "tenant_id": tenant_id},
            )

    @staticmethod
    def _mechanism_fields(dto: _MechanismDefinitionDTO) -> Dict[str, Any]:
        return {
            "tenant_id": dto.tenant_id,
            "discount_type": dto.discount_type,
            "discount_value": dto.discount_value,
            "menu_item_id": dto.menu_item_id,
            "min_order_value": dto.min_order_value,
            "max_total_uses": dto.max_total_uses,
            "max_uses_per_customer": dto.max_uses_per_customer,
            "is_active": dto.is_active,
            "start_date": dto.start_date,
            "end_date": dto.end_date,
        }

    def _repo_for(self, kind: MechanismKind):
        if kind == MechanismKind.COUPON:
            return self._coupon_repo
        return self._promotion_repo

    @staticmethod
    def _not_found(kind: MechanismKind, mechanism_id, tenant_id):
        error_class = CouponNotFound if kind == MechanismKind.COUPON else PromotionNotFound
        return error_class(
            f"{kind.label} {mechanism_id} not found.",
            context={"mechanism_id": mechanism_id, "tenant_id": tenant_id},
        )
