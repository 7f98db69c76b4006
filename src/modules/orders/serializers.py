"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import CustomizationType, OrderStatus, PaymentStatus
from modules.orders.models import Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CustomizationSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=CustomizationType.choices)
    value = serializers.CharField(max_length=255)


class OrderLineSerializer(serializers.Serializer):
    """Validates a single line in an order request."""

    menu_item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, default="", allow_blank=True)
    tags = serializers.ListField(
        child=serializers.CharField(), required=False, default=list
    )
    additional_ids = serializers.ListField(
        child=serializers.CharField(), required=False, default=list
    )
    customizations = CustomizationSerializer(many=True, required=False, default=list)


class PatchOrderLineSerializer(OrderLineSerializer):
    id = serializers.UUIDField(required=False, allow_null=True)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    customer_phone_number = serializers.CharField(max_length=20)
    items = OrderLineSerializer(many=True, allow_empty=False)
    coupon_id = serializers.UUIDField(required=False, allow_null=True)
    promotion_id = serializers.UUIDField(required=False, allow_null=True)


class PatchOrderSerializer(serializers.Serializer):
    """Validates a partial order update; omitted fields stay unchanged."""

    customer_phone_number = serializers.CharField(max_length=20, required=False)
    items = PatchOrderLineSerializer(many=True, required=False, allow_empty=False)
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    payment_status = serializers.ChoiceField(
        choices=PaymentStatus.choices, required=False
    )
    coupon_id = serializers.UUIDField(required=False, allow_null=True)
    promotion_id = serializers.UUIDField(required=False, allow_null=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order lines with their price snapshot."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item_id",
            "quantity",
            "unit_price",
            "subtotal",
            "notes",
            "tags",
            "additional_ids",
            "customizations",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and pricing breakdown."""

    items = OrderItemSerializer(many=True, read_only=True)
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "tenant_id",
            "customer_phone_number",
            "status",
            "payment_status",
            "subtotal",
            "discount_amount",
            "platform_fee",
            "total_amount",
            "coupon_id",
            "promotion_id",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "customer_phone_number",
            "status",
            "payment_status",
            "total_amount",
            "created_at",
        ]
        read_only_fields = fields


class OrderStatusSerializer(serializers.Serializer):
    """Renders ``OrderStatusDTO`` for the customer status lookup."""

    order_id = serializers.UUIDField()
    status = serializers.CharField()
    payment_status = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
