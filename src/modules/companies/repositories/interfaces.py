"""Company repository interface (tenant configuration look-ups)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from modules.companies.dtos import FeeConfig
    from modules.companies.models import Company


class ICompanyRepository(ABC):
    """Read-only access to tenant configuration."""

    @abstractmethod
    def get_by_id(self, tenant_id: str) -> Optional[Company]:
        """Retrieve the tenant, or ``None``."""

    @abstractmethod
    def get_fee_config(self, tenant_id: str) -> Optional[FeeConfig]:
        """Return the tenant's platform-fee configuration, or ``None``."""
