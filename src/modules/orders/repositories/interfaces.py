"""Order repository interface.

Extends ``ITenantRepository[Order]`` with the methods required by the Order
aggregate: atomic creation with items, line-level changes for patches,
row locking, the customer status lookup and stale-order cleanup.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import ITenantRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.models import Order, OrderItem


class IOrderRepository(ITenantRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderItem children.  Mutations must be
    atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` must include ``tenant_id``, ``customer_phone_number``,
        the pricing fields and ``items`` (list of dicts with
        ``menu_item_id``, ``quantity``, ``unit_price`` and line details).
        """

    @abstractmethod
    def get_for_update(self, id: str, tenant_id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def queryset(self, tenant_id: str) -> QuerySet:
        """Lazy, filterable queryset of the tenant's orders."""

    @abstractmethod
    def add_item(self, order: Order, data: Dict[str, Any]) -> OrderItem:
        """Append a line with a fresh price snapshot."""

    @abstractmethod
    def update_item(self, item: OrderItem, fields: Dict[str, Any]) -> OrderItem:
        """Change quantity or details of a line; ``unit_price`` is untouched."""

    @abstractmethod
    def remove_items(self, items: Iterable[OrderItem]) -> int:
        """Delete lines from the order."""

    @abstractmethod
    def list_by_customer(
        self, tenant_id: str, customer_phone_number: str
    ) -> List[Order]:
        """Orders of one customer, newest first."""

    @abstractmethod
    def delete_stale_pending(self, cutoff: datetime) -> int:
        """Delete unpaid PENDING orders created before ``cutoff``.

        Returns the number of orders removed.
        """
