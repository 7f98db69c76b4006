"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` to ensure
the Order aggregate (Order + OrderItems) is persisted atomically.

Concurrency control on patches uses ``select_for_update()``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Exists, OuterRef, Prefetch, QuerySet

from modules.discounts.models import CouponUsage, PromotionUsage
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

_LINE_FIELDS = ("notes", "tags", "additional_ids", "customizations")


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(
            tenant_id=data["tenant_id"],
            customer_phone_number=data["customer_phone_number"],
            discount_amount=data["discount_amount"],
            platform_fee=data["platform_fee"],
            total_amount=data["total_amount"],
            coupon_id=data.get("coupon_id"),
            promotion_id=data.get("promotion_id"),
        )
        order.save()

        items = data.get("items", [])
        for item_data in items:
            self.add_item(order, item_data)

        logger.info("order.persisted", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _with_items(self, queryset: QuerySet) -> QuerySet:
        return queryset.prefetch_related(
            Prefetch("items", queryset=OrderItem.objects.order_by("created_at", "id"))
        )

    def get_by_id(self, id: str, tenant_id: str) -> Optional[Order]:
        """Retrieve an order with prefetched items.

        Returns ``None`` for non-existent, foreign-tenant or invalid IDs.
        """
        try:
            return self._with_items(
                Order.objects.filter(id=id, tenant_id=tenant_id)
            ).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str, tenant_id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Items are prefetched in a separate query, so only the order row
        is locked.
        """
        try:
            return self._with_items(
                Order.objects.select_for_update().filter(id=id, tenant_id=tenant_id)
            ).first()
        except (ValueError, ValidationError):
            return None

    def queryset(self, tenant_id: str) -> QuerySet:
        return self._with_items(Order.objects.filter(tenant_id=tenant_id))

    def list(
        self, tenant_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Order]:
        """List a tenant's orders with optional filters.

        Supported filter keys include ``status``, ``payment_status``,
        ``customer_phone_number`` and ``created_at__range``.
        """
        queryset = self.queryset(tenant_id)
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_by_customer(
        self, tenant_id: str, customer_phone_number: str
    ) -> List[Order]:
        return list(
            Order.objects.filter(
                tenant_id=tenant_id, customer_phone_number=customer_phone_number
            ).order_by("-created_at")
        )

    # ------------------------------------------------------------------
    # Save / line changes
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist (create or update) an order."""
        entity.save()
        logger.info("order.saved", order_id=str(entity.id))
        return entity

    def add_item(self, order: Order, data: Dict[str, Any]) -> OrderItem:
        item = OrderItem(
            order=order,
            menu_item_id=data["menu_item_id"],
            quantity=data["quantity"],
            unit_price=data["unit_price"],
            **{name: data[name] for name in _LINE_FIELDS if name in data},
        )
        item.save()
        return item

    def update_item(self, item: OrderItem, fields: Dict[str, Any]) -> OrderItem:
        changed = []
        for name, value in fields.items():
            if name == "unit_price":
                raise ValidationError({"unit_price": "Unit price cannot change."})
            setattr(item, name, value)
            changed.append(name)
        if changed:
            item.save(update_fields=changed)
        return item

    def remove_items(self, items: Iterable[OrderItem]) -> int:
        ids = [item.id for item in items]
        if not ids:
            return 0
        deleted, _ = OrderItem.objects.filter(id__in=ids).delete()
        return deleted

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    @transaction.atomic
    def delete_stale_pending(self, cutoff: datetime) -> int:
        """Items go with their order; orders holding a usage record are kept."""
        stale = (
            Order.objects.filter(
                status=OrderStatus.PENDING,
                payment_status=PaymentStatus.PENDING,
                created_at__lt=cutoff,
            )
            .exclude(Exists(CouponUsage.objects.filter(order=OuterRef("pk"))))
            .exclude(Exists(PromotionUsage.objects.filter(order=OuterRef("pk"))))
        )
        _, per_model = stale.delete()
        return per_model.get(Order._meta.label, 0)
