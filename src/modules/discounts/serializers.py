"""Coupon and promotion DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.discounts.constants import DiscountType
from modules.discounts.models import Coupon, Promotion

_MECHANISM_FIELDS = [
    "id",
    "discount_type",
    "discount_value",
    "menu_item_id",
    "min_order_value",
    "max_total_uses",
    "max_uses_per_customer",
    "is_active",
    "start_date",
    "end_date",
    "created_at",
    "updated_at",
]


class _MechanismInputSerializer(serializers.Serializer):
    discount_type = serializers.ChoiceField(choices=DiscountType.choices)
    discount_value = serializers.DecimalField(max_digits=10, decimal_places=2)
    menu_item_id = serializers.UUIDField(required=False, allow_null=True)
    min_order_value = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True
    )
    max_total_uses = serializers.IntegerField(required=False, allow_null=True)
    max_uses_per_customer = serializers.IntegerField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()


class CreateCouponSerializer(_MechanismInputSerializer):
    code = serializers.CharField(max_length=50)


class CreatePromotionSerializer(_MechanismInputSerializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, default="", allow_blank=True)
    days_of_week = serializers.ListField(
        child=serializers.IntegerField(), required=False, default=list
    )
    hours = serializers.CharField(required=False, default="", allow_blank=True)
    image_url = serializers.URLField(required=False, default="", allow_blank=True)


class ActivationSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = ["code", *_MECHANISM_FIELDS]
        read_only_fields = fields


class PromotionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Promotion
        fields = [
            "name",
            "description",
            "days_of_week",
            "hours",
            "image_url",
            *_MECHANISM_FIELDS,
        ]
        read_only_fields = fields
