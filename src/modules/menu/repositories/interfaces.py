"""Menu item repository interface (the menu catalog consumed by orders)."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import ITenantRepository

if TYPE_CHECKING:
    from modules.menu.dtos import MenuSnapshot
    from modules.menu.models import MenuItem


class IMenuItemRepository(ITenantRepository["MenuItem"]):
    """Repository contract for tenant menu items."""

    @abstractmethod
    def get_price(self, menu_item_id: str, tenant_id: str) -> Optional[MenuSnapshot]:
        """Current price of the item, or ``None`` if it is not on the tenant's menu."""

    @abstractmethod
    def exists(self, menu_item_id: str, tenant_id: str) -> bool:
        """Whether the item is on the tenant's menu."""
