"""Django ORM implementation of the MenuItem repository.

Error handling follows the Null Object pattern: methods return ``None``
instead of raising; the Service Layer decides how to report a missing item.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.menu.dtos import MenuSnapshot
from modules.menu.models import MenuItem
from modules.menu.repositories.interfaces import IMenuItemRepository

logger = structlog.get_logger(__name__)


class MenuItemDjangoRepository(IMenuItemRepository):
    """Concrete MenuItem repository backed by Django ORM."""

    def get_by_id(self, id: str, tenant_id: str) -> Optional[MenuItem]:
        """Returns ``None`` for non-existent, foreign-tenant or invalid IDs."""
        try:
            return MenuItem.objects.filter(id=id, tenant_id=tenant_id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, tenant_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[MenuItem]:
        queryset = MenuItem.objects.filter(tenant_id=tenant_id)
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: MenuItem) -> MenuItem:
        entity.save()
        logger.info("menu_item.saved", menu_item_id=str(entity.id))
        return entity

    def get_price(self, menu_item_id: str, tenant_id: str) -> Optional[MenuSnapshot]:
        try:
            row = (
                MenuItem.objects.filter(id=menu_item_id, tenant_id=tenant_id)
                .values("id", "price")
                .first()
            )
        except (ValueError, ValidationError):
            return None
        if row is None:
            return None
        return MenuSnapshot(menu_item_id=row["id"], price=row["price"])

    def exists(self, menu_item_id: str, tenant_id: str) -> bool:
        try:
            return MenuItem.objects.filter(
                id=menu_item_id, tenant_id=tenant_id
            ).exists()
        except (ValueError, ValidationError):
            return False
