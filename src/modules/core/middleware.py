import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

TENANT_HEADER = "HTTP_X_TENANT_ID"

logger = structlog.get_logger()


class CorrelationIdMiddleware:
    """Middleware that binds request-scoped logging context.

    Reads the X-Request-ID header from the incoming request; if absent,
    generates a new UUID4.  The ID is stored in a ContextVar and bound into
    structlog contextvars together with the tenant id (X-Tenant-ID), so every
    log line emitted while serving the request carries both.  The correlation
    ID is returned to the client via the X-Request-ID response header.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)
        tenant_id = request.META.get(TENANT_HEADER)
        if tenant_id:
            structlog.contextvars.bind_contextvars(tenant_id=tenant_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.get_full_path(),
        )

        response = self.get_response(request)

        logger.info(
            "request_finished",
            method=request.method,
            path=request.get_full_path(),
            status_code=response.status_code,
        )

        response["X-Request-ID"] = cid
        return response
