"""Generic repository interface (Dependency Inversion Principle).

Provides ``ITenantRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.

Every look-up takes the tenant id: a repository never returns a row that
belongs to another tenant.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ITenantRepository(ABC, Generic[T]):
    """Base generic repository contract for tenant-scoped entities.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``MenuItem``, ``Order``).
    """

    @abstractmethod
    def get_by_id(self, id: str, tenant_id: str) -> Optional[T]:
        """Retrieve an entity by primary key within a tenant."""

    @abstractmethod
    def list(
        self, tenant_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[T]:
        """List a tenant's entities with optional filters."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""
