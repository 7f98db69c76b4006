"""Company domain exceptions."""

from __future__ import annotations

from shared.domain.errors import NotFound


class CompanyNotFound(NotFound):
    """The tenant referenced by the request does not exist."""

    default_code = "COMPANY_NOT_FOUND"
