"""Order service layer (Use Cases).

Orchestrates order creation, patching and the read-side queries.  All
write operations are atomic: the service defines the unit-of-work
boundary.  Pricing components report failures as ``Result`` values; the
service unwraps them here, so a rejection raises the matching
``DomainError`` inside ``transaction.atomic`` and nothing is committed.

Business rules enforced:
- Menu prices are snapshotted into the lines at creation time.
- At most one discount mechanism per order; a coupon wins over a promotion.
- Usage limits hold in the committed state (row lock + recount).
- Status transitions go through ``state_machine.evaluate_transition``.
- Item changes re-price the order without re-validating its discount.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.companies.repositories.django_repository import CompanyDjangoRepository
from modules.discounts.repositories.django_repository import (
    CouponDjangoRepository,
    PromotionDjangoRepository,
)
from modules.discounts.resolver import DiscountResolver
from modules.menu.repositories.django_repository import MenuItemDjangoRepository
from modules.menu.services import MenuSnapshotResolver
from modules.orders.dtos import OrderStatusDTO
from modules.orders.exceptions import (
    DiscountAlreadyApplied,
    InvalidOrderStatus,
    OrderNotFound,
)
from modules.orders.pricing import (
    OrderPricingEngine,
    compute_final_total,
    plan_line_changes,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.state_machine import evaluate_transition

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO, PatchOrderDTO, PatchOrderLineDTO
    from modules.orders.models import Order, OrderItem
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        pricing_engine: OrderPricingEngine,
        discount_resolver: DiscountResolver,
    ) -> None:
        self._order_repo = order_repository
        self._engine = pricing_engine
        self._discounts = discount_resolver

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Price and persist a new order, recording its discount usage.

        Steps:
        1. Price the order (menu snapshots, discount, fee, final total).
           The discount mechanism row stays locked until commit.
        2. Persist order + items with ``PENDING`` status and payment status.
        3. Record the usage record and recount the limits.

        Raises:
            NotFound: a menu item, the coupon/promotion or the tenant is missing.
            BusinessRuleViolation: the discount is not eligible.
            Conflict: a concurrent order used up the discount.
        """
        tenant_id = str(dto.tenant_id)
        log = logger.bind(
            tenant_id=tenant_id, customer_phone=dto.customer_phone_number
        )
        log.info("order.creation_started", line_count=len(dto.items))

        priced = self._engine.price(
            tenant_id,
            dto.customer_phone_number,
            dto.items,
            coupon_id=dto.coupon_id,
            promotion_id=dto.promotion_id,
        ).unwrap()

        order = self._order_repo.create(
            {
                "tenant_id": dto.tenant_id,
                "customer_phone_number": dto.customer_phone_number,
                "discount_amount": priced.discount_amount,
                "platform_fee": priced.platform_fee,
                "total_amount": priced.final_total,
                "coupon_id": priced.discount.coupon_id,
                "promotion_id": priced.discount.promotion_id,
                "items": [
                    {
                        "menu_item_id": pl.line.menu_item_id,
                        "quantity": pl.line.quantity,
                        "unit_price": pl.unit_price,
                        **pl.line.detail_fields(),
                    }
                    for pl in priced.lines
                ],
            }
        )

        self._discounts.record(priced.discount, order.id).unwrap()

        log.info(
            "order.created",
            order_id=str(order.id),
            total_amount=str(order.total_amount),
            coupon_id=str(order.coupon_id) if order.coupon_id else None,
            promotion_id=str(order.promotion_id) if order.promotion_id else None,
        )
        return self._order_repo.get_by_id(str(order.id), tenant_id) or order

    @transaction.atomic
    def patch_order(self, dto: PatchOrderDTO) -> Order:
        """Apply a partial update to an order.

        Acquires a row-level lock (``SELECT FOR UPDATE``) on the order
        first.  The status transition is checked before anything changes,
        against the payment status the order will have after this patch.

        Raises:
            OrderNotFound: order does not exist for the tenant.
            InvalidOrderStatus: the state machine refused the transition.
            DiscountAlreadyApplied: the order already has another discount.
            NotFound / BusinessRuleViolation / Conflict: pricing of new lines
                or of a newly attached discount failed.
        """
        tenant_id = str(dto.tenant_id)
        order = self._order_repo.get_for_update(str(dto.order_id), tenant_id)
        if order is None:
            raise OrderNotFound(
                f"Order {dto.order_id} not found.",
                context={"order_id": dto.order_id, "tenant_id": tenant_id},
            )

        log = logger.bind(order_id=str(order.id), current_status=order.status)
        payment_status = dto.payment_status or order.payment_status

        if dto.status is not None:
            rejection = evaluate_transition(order.status, dto.status, payment_status)
            if rejection is not None:
                log.warning(
                    "order.invalid_transition",
                    new_status=dto.status,
                    code=rejection.code,
                )
                raise rejection.to_exception(InvalidOrderStatus)

        if dto.customer_phone_number is not None:
            order.customer_phone_number = dto.customer_phone_number

        # A replaced item list always re-reads the tenant fee, even unchanged.
        reprice = dto.items is not None
        if dto.items is not None:
            self._apply_line_changes(order, dto.items, log)

        if dto.coupon_id is not None or dto.promotion_id is not None:
            reprice = self._attach_discount(order, dto, log) or reprice

        if reprice:
            subtotal = order.subtotal
            if dto.items is not None:
                order.platform_fee = self._engine.fee_for(tenant_id, subtotal).unwrap()
            order.total_amount = compute_final_total(subtotal, order.discount_amount)

        if dto.payment_status is not None:
            order.payment_status = dto.payment_status
        if dto.status is not None and dto.status != order.status:
            log.info("order.status_updated", new_status=dto.status)
            order.status = dto.status

        self._order_repo.save(order)
        log.info(
            "order.patched",
            status=order.status,
            payment_status=order.payment_status,
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(str(order.id), tenant_id) or order

    @transaction.atomic
    def purge_stale_pending_orders(self, max_age_minutes: Optional[int] = None) -> int:
        """Delete unpaid orders left ``PENDING`` longer than ``max_age_minutes``.

        Orders that redeemed a coupon or promotion are kept: usage records
        are never deleted, so their counts only grow.
        """
        minutes = (
            max_age_minutes
            if max_age_minutes is not None
            else settings.PENDING_ORDER_MAX_AGE_MINUTES
        )
        cutoff = timezone.now() - timedelta(minutes=minutes)
        deleted = self._order_repo.delete_stale_pending(cutoff)
        logger.info(
            "order.stale_pending_purged",
            deleted=deleted,
            cutoff=cutoff.isoformat(),
        )
        return deleted

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str, tenant_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist for the tenant.
        """
        order = self._order_repo.get_by_id(str(order_id), str(tenant_id))
        if order is None:
            raise OrderNotFound(
                f"Order {order_id} not found.",
                context={"order_id": order_id, "tenant_id": tenant_id},
            )
        return order

    def list_orders(
        self, tenant_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Order]:
        """Return a tenant's orders, optionally filtered."""
        return self._order_repo.list(str(tenant_id), filters)

    def list_customer_orders(
        self, tenant_id: str, customer_phone_number: str
    ) -> List[OrderStatusDTO]:
        """Status of every order a customer placed with the tenant."""
        orders = self._order_repo.list_by_customer(
            str(tenant_id), customer_phone_number.strip()
        )
        return [OrderStatusDTO.from_entity(order) for order in orders]

    # ------------------------------------------------------------------
    # Patch helpers
    # ------------------------------------------------------------------

    def _apply_line_changes(
        self, order: Order, lines: List[PatchOrderLineDTO], log
    ) -> None:
        """Apply the line delta; new lines get a fresh price snapshot."""
        current: List[OrderItem] = list(order.items.all())
        delta = plan_line_changes(current, lines)
        if delta.is_empty:
            return

        priced = self._engine.price_lines(order.tenant_id, delta.added).unwrap()

        self._order_repo.remove_items(delta.removed)
        for item, line in delta.updated:
            self._order_repo.update_item(
                item, {"quantity": line.quantity, **line.detail_fields()}
            )
        for pl in priced:
            self._order_repo.add_item(
                order,
                {
                    "menu_item_id": pl.line.menu_item_id,
                    "quantity": pl.line.quantity,
                    "unit_price": pl.unit_price,
                    **pl.line.detail_fields(),
                },
            )

        # Drop the prefetched lines so ``order.subtotal`` reads the new ones.
        getattr(order, "_prefetched_objects_cache", {}).pop("items", None)
        log.info(
            "order.lines_changed",
            added=len(delta.added),
            updated=len(delta.updated),
            removed=len(delta.removed),
        )

    def _attach_discount(self, order: Order, dto: PatchOrderDTO, log) -> bool:
        """Attach a coupon or promotion to an order that has none.

        The same mechanism requested again is a no-op.  Returns whether the
        order's discount changed.
        """
        if dto.coupon_id is not None:
            requested_field, requested_id = "coupon_id", dto.coupon_id
        else:
            requested_field, requested_id = "promotion_id", dto.promotion_id

        if order.has_discount:
            if str(getattr(order, requested_field)) == str(requested_id):
                return False
            raise DiscountAlreadyApplied(
                "The order already has a discount applied.",
                context={
                    "order_id": order.id,
                    "coupon_id": order.coupon_id,
                    "promotion_id": order.promotion_id,
                },
            )

        resolution = self._discounts.resolve(
            order.tenant_id,
            order.customer_phone_number,
            order.subtotal,
            coupon_id=dto.coupon_id,
            promotion_id=dto.promotion_id,
        ).unwrap()
        self._discounts.record(resolution, order.id).unwrap()

        order.coupon_id = resolution.coupon_id
        order.promotion_id = resolution.promotion_id
        order.discount_amount = resolution.amount
        log.info(
            "order.discount_attached",
            coupon_id=str(order.coupon_id) if order.coupon_id else None,
            promotion_id=str(order.promotion_id) if order.promotion_id else None,
            amount=str(resolution.amount),
        )
        return True


def build_order_service() -> OrderService:
    """Wire ``OrderService`` with the Django ORM repositories."""
    resolver = DiscountResolver(
        coupon_repository=CouponDjangoRepository(),
        promotion_repository=PromotionDjangoRepository(),
    )
    engine = OrderPricingEngine(
        menu_resolver=MenuSnapshotResolver(MenuItemDjangoRepository()),
        discount_resolver=resolver,
        company_repository=CompanyDjangoRepository(),
    )
    return OrderService(
        order_repository=OrderDjangoRepository(),
        pricing_engine=engine,
        discount_resolver=resolver,
    )
