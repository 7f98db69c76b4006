"""Menu repositories package."""

from modules.menu.repositories.django_repository import MenuItemDjangoRepository
from modules.menu.repositories.interfaces import IMenuItemRepository

__all__ = ["IMenuItemRepository", "MenuItemDjangoRepository"]
