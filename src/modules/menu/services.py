"""Menu snapshot resolution for order pricing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.menu.exceptions import MENU_ITEM_NOT_FOUND
from shared.domain.errors import Rejection
from shared.domain.results import Result

if TYPE_CHECKING:
    from modules.menu.dtos import MenuSnapshot
    from modules.menu.repositories.interfaces import IMenuItemRepository

logger = structlog.get_logger(__name__)


class MenuSnapshotResolver:
    """Resolve the current price of a tenant's menu item.

    Called once per order line; the returned price is copied into the line
    and never re-read for that line.
    """

    def __init__(self, menu_repository: IMenuItemRepository) -> None:
        self._menu_repo = menu_repository

    def resolve(self, tenant_id: str, menu_item_id: str) -> Result[MenuSnapshot]:
        snapshot = self._menu_repo.get_price(str(menu_item_id), str(tenant_id))
        if snapshot is None:
            logger.warning(
                "menu.item_not_found",
                menu_item_id=str(menu_item_id),
                tenant_id=str(tenant_id),
            )
            return Result.fail(
                Rejection.not_found(
                    MENU_ITEM_NOT_FOUND,
                    f"Menu item {menu_item_id} not found.",
                    menu_item_id=menu_item_id,
                    tenant_id=tenant_id,
                )
            )
        return Result.ok(snapshot)
