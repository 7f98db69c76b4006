"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CustomizationDTO``: one ``{type, value}`` customization of a line.
- ``OrderLineDTO``: input for a single order line.
- ``CreateOrderDTO``: input for order creation (nested lines).
- ``PatchOrderLineDTO`` / ``PatchOrderDTO``: input for order patches.
- ``OrderItemOutputDTO`` / ``OrderOutputDTO``: order view.
- ``OrderStatusDTO``: customer-facing status lookup.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import CustomizationType, OrderStatus, PaymentStatus

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem

PHONE_MAX_LENGTH = 20


def _normalize_phone(v: str) -> str:
    phone = v.strip()
    if not phone:
        raise ValueError("Customer phone number is required.")
    if len(phone) > PHONE_MAX_LENGTH:
        raise ValueError(f"Phone number cannot exceed {PHONE_MAX_LENGTH} characters.")
    return phone


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CustomizationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: CustomizationType
    value: str = Field(min_length=1, max_length=255)


class OrderLineDTO(BaseModel):
    """Immutable DTO for a single order line in a creation request.

    The client sends ``menu_item_id`` and ``quantity``.
    ``unit_price`` is resolved by the Service Layer from the menu.
    """

    model_config = ConfigDict(frozen=True)

    menu_item_id: UUID
    quantity: int
    notes: str = ""
    tags: List[str] = Field(default_factory=list)
    additional_ids: List[str] = Field(default_factory=list)
    customizations: List[CustomizationDTO] = Field(default_factory=list)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    def detail_fields(self) -> dict:
        """Line attributes stored verbatim on the OrderItem."""
        return {
            "notes": self.notes,
            "tags": list(self.tags),
            "additional_ids": list(self.additional_ids),
            "customizations": [c.model_dump(mode="json") for c in self.customizations],
        }


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one line.
    - Each line quantity must be positive.

    ``coupon_id`` and ``promotion_id`` may both be sent; the coupon wins.
    """

    model_config = ConfigDict(frozen=True)

    tenant_id: UUID
    customer_phone_number: str
    items: List[OrderLineDTO]
    coupon_id: Optional[UUID] = None
    promotion_id: Optional[UUID] = None

    @field_validator("customer_phone_number")
    @classmethod
    def phone_must_not_be_blank(cls, v: str) -> str:
        return _normalize_phone(v)

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(cls, v: List[OrderLineDTO]) -> List[OrderLineDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v


class PatchOrderLineDTO(OrderLineDTO):
    """A line of the replacement item list.

    ``id`` names an existing line to keep (and possibly update); a line
    without ``id`` is added.
    """

    id: Optional[UUID] = None


class PatchOrderDTO(BaseModel):
    """Immutable DTO for partial order updates.

    Every field except the ids is optional; ``None`` means "leave unchanged".
    ``items``, when sent, is the complete new item list.
    """

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    tenant_id: UUID
    items: Optional[List[PatchOrderLineDTO]] = None
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    coupon_id: Optional[UUID] = None
    promotion_id: Optional[UUID] = None
    customer_phone_number: Optional[str] = None

    @field_validator("customer_phone_number")
    @classmethod
    def phone_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _normalize_phone(v)

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: Optional[List[PatchOrderLineDTO]]
    ) -> Optional[List[PatchOrderLineDTO]]:
        if v is not None and not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def no_duplicate_line_ids(self):
        """The same existing line cannot appear twice in the new list."""
        if self.items:
            ids = [line.id for line in self.items if line.id is not None]
            if len(ids) != len(set(ids)):
                raise ValueError("Duplicate line IDs are not allowed.")
        return self


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderItemOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    menu_item_id: UUID
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    notes: str
    tags: List[str]
    additional_ids: List[str]
    customizations: List[CustomizationDTO]

    @classmethod
    def from_entity(cls, item: OrderItem) -> OrderItemOutputDTO:
        return cls(
            id=item.id,
            menu_item_id=item.menu_item_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
            notes=item.notes,
            tags=item.tags,
            additional_ids=item.additional_ids,
            customizations=item.customizations,
        )


class OrderOutputDTO(BaseModel):
    """Immutable view of an order with its pricing breakdown."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    tenant_id: UUID
    customer_phone_number: str
    status: str
    payment_status: str
    subtotal: Decimal
    discount_amount: Decimal
    platform_fee: Decimal
    total_amount: Decimal
    coupon_id: Optional[UUID]
    promotion_id: Optional[UUID]
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOutputDTO]

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Build an output DTO from an Order model instance.

        Assumes ``items`` are prefetched.
        """
        items = [OrderItemOutputDTO.from_entity(item) for item in order.items.all()]
        return cls(
            id=order.id,
            tenant_id=order.tenant_id,
            customer_phone_number=order.customer_phone_number,
            status=order.status,
            payment_status=order.payment_status,
            subtotal=order.subtotal,
            discount_amount=order.discount_amount,
            platform_fee=order.platform_fee,
            total_amount=order.total_amount,
            coupon_id=order.coupon_id,
            promotion_id=order.promotion_id,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=items,
        )


class OrderStatusDTO(BaseModel):
    """Status of one of a customer's orders."""

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    status: str
    payment_status: str
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderStatusDTO:
        return cls(
            order_id=order.id,
            status=order.status,
            payment_status=order.payment_status,
            total_amount=order.total_amount,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
