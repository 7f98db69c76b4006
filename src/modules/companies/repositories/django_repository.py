"""Django ORM implementation of the Company repository."""

from __future__ import annotations

from typing import Optional

from django.core.exceptions import ValidationError

from modules.companies.dtos import FeeConfig
from modules.companies.models import Company
from modules.companies.repositories.interfaces import ICompanyRepository


class CompanyDjangoRepository(ICompanyRepository):
    """Concrete Company repository backed by Django ORM."""

    def get_by_id(self, tenant_id: str) -> Optional[Company]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            return Company.objects.filter(id=tenant_id).first()
        except (ValueError, ValidationError):
            return None

    def get_fee_config(self, tenant_id: str) -> Optional[FeeConfig]:
        company = self.get_by_id(tenant_id)
        if company is None:
            return None
        return FeeConfig(fee_type=company.fee_type, fee_value=company.fee_value)
