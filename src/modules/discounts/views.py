"""Coupon and promotion API views.

Tenant staff define discount mechanisms here through ``DiscountService``.
"""

from __future__ import annotations

from typing import ClassVar, Type

from pydantic import BaseModel as PydanticModel
from pydantic import ValidationError as PydanticValidationError
from rest_framework import serializers, status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.companies.repositories.django_repository import CompanyDjangoRepository
from modules.core.http import TenantScopedViewMixin, domain_error_response
from modules.discounts.constants import MechanismKind
from modules.discounts.dtos import CreateCouponDTO, CreatePromotionDTO
from modules.discounts.models import Coupon, Promotion
from modules.discounts.repositories.django_repository import (
    CouponDjangoRepository,
    PromotionDjangoRepository,
)
from modules.discounts.serializers import (
    ActivationSerializer,
    CouponSerializer,
    CreateCouponSerializer,
    CreatePromotionSerializer,
    PromotionSerializer,
)
from modules.discounts.services import DiscountService
from modules.menu.repositories.django_repository import MenuItemDjangoRepository
from shared.domain.errors import DomainError


class _DiscountMechanismViewSet(TenantScopedViewMixin, GenericViewSet):
    kind: ClassVar[MechanismKind]
    input_serializer_class: ClassVar[Type[serializers.Serializer]]
    dto_class: ClassVar[Type[PydanticModel]]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = DiscountService(
            coupon_repository=CouponDjangoRepository(),
            promotion_repository=PromotionDjangoRepository(),
            menu_repository=MenuItemDjangoRepository(),
            company_repository=CompanyDjangoRepository(),
        )

    def _create(self, dto):
        raise NotImplementedError

    def _get(self, pk: str, tenant_id: str):
        raise NotImplementedError

    def _list(self, tenant_id: str):
        raise NotImplementedError

    def create(self, request: Request) -> Response:
        tenant_id = self.get_tenant_id()
        serializer = self.input_serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = self.dto_class(tenant_id=tenant_id, **serializer.validated_data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            mechanism = self._create(dto)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(
            self.get_serializer(mechanism).data, status=status.HTTP_201_CREATED
        )

    def list(self, request: Request) -> Response:
        mechanisms = self._list(self.get_tenant_id())
        page = self.paginate_queryset(mechanisms)
        return self.get_paginated_response(self.get_serializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            mechanism = self._get(pk, self.get_tenant_id())
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(mechanism).data)

    @action(detail=True, methods=["post"])
    def activation(self, request: Request, pk: str | None = None) -> Response:
        """POST .../{pk}/activation/ with ``{"is_active": bool}``."""
        serializer = ActivationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            mechanism = self._service.set_active(
                self.kind,
                pk,
                self.get_tenant_id(),
                serializer.validated_data["is_active"],
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(mechanism).data)


class CouponViewSet(_DiscountMechanismViewSet):
    """/api/v1/coupons/"""

    kind = MechanismKind.COUPON
    queryset = Coupon.objects.none()
    serializer_class = CouponSerializer
    input_serializer_class = CreateCouponSerializer
    dto_class = CreateCouponDTO

    def _create(self, dto):
        return self._service.create_coupon(dto)

    def _get(self, pk, tenant_id):
        return self._service.get_coupon(pk, tenant_id)

    def _list(self, tenant_id):
        return self._service.list_coupons(tenant_id)


class PromotionViewSet(_DiscountMechanismViewSet):
    """/api/v1/promotions/"""

    kind = MechanismKind.PROMOTION
    queryset = Promotion.objects.none()
    serializer_class = PromotionSerializer
    input_serializer_class = CreatePromotionSerializer
    dto_class = CreatePromotionDTO

    def _create(self, dto):
        return self._service.create_promotion(dto)

    def _get(self, pk, tenant_id):
        return self._service.get_promotion(pk, tenant_id)

    def _list(self, tenant_id):
        return self._service.list_promotions(tenant_id)
