"""Menu domain exceptions."""

from __future__ import annotations

from shared.domain.errors import NotFound

MENU_ITEM_NOT_FOUND = "MENU_ITEM_NOT_FOUND"


class MenuItemNotFound(NotFound):
    """The menu item does not exist for the tenant."""

    default_code = MENU_ITEM_NOT_FOUND
