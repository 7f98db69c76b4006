"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain errors are caught and translated into HTTP status codes by kind
(404 not found, 400 business rule, 409 conflict); the view never swallows
generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.http import TenantScopedViewMixin, domain_error_response
from modules.orders.dtos import CreateOrderDTO, PatchOrderDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    PatchOrderSerializer,
)
from modules.orders.services import build_order_service
from shared.domain.errors import DomainError


class OrderViewSet(TenantScopedViewMixin, GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.  Every request is scoped to the tenant
    named by the ``X-Tenant-ID`` header.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Scoped throttling per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "customer_status"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        return OrderDjangoRepository().queryset(self.get_tenant_id())

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        tenant_id = self.get_tenant_id()
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            dto = CreateOrderDTO(tenant_id=tenant_id, **serializer.validated_data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self._service.create_order(dto)
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, payment status, phone, date range, total range)
        is handled by ``OrderFilter``; results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk, self.get_tenant_id())
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Patch
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Any of items, status, payment status, coupon, promotion and
        customer phone; omitted fields are left unchanged.
        """
        tenant_id = self.get_tenant_id()
        serializer = PatchOrderSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            dto = PatchOrderDTO(
                order_id=pk, tenant_id=tenant_id, **serializer.validated_data
            )
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self._service.patch_order(dto)
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Customer status lookup
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path="status", url_name="status")
    def customer_status(self, request: Request) -> Response:
        """GET /api/v1/orders/status/?phone=<customer phone>"""
        phone = request.query_params.get("phone", "").strip()
        if not phone:
            return Response(
                {"detail": "Query parameter 'phone' is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        statuses = self._service.list_customer_orders(self.get_tenant_id(), phone)
        data = OrderStatusSerializer([s.model_dump() for s in statuses], many=True).data
        return Response(data)
