"""Helpers shared by the tenant-scoped API views."""

from __future__ import annotations

from uuid import UUID

import structlog
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from modules.core.middleware import TENANT_HEADER
from shared.domain.errors import DomainError, ErrorKind

logger = structlog.get_logger(__name__)

HTTP_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BUSINESS_RULE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def domain_error_response(exc: DomainError) -> Response:
    """Translate a domain error into ``{detail, code, context}``."""
    logger.info("api.domain_error", kind=exc.kind.value, code=exc.code)
    return Response(exc.to_dict(), status=HTTP_STATUS_BY_KIND[exc.kind])


class TenantScopedViewMixin:
    """Reads the tenant id from the ``X-Tenant-ID`` header.

    A missing or malformed header is a 400; identity checks belong to the
    authentication layer.
    """

    def get_tenant_id(self) -> str:
        raw = self.request.META.get(TENANT_HEADER, "").strip()
        if not raw:
            raise ValidationError({"detail": "X-Tenant-ID header is required."})
        try:
            return str(UUID(raw))
        except ValueError:
            raise ValidationError({"detail": "X-Tenant-ID must be a valid UUID."})
