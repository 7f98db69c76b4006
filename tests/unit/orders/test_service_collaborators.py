"""OrderService tests with mocked collaborators.

The service methods are called through ``__wrapped__`` to skip
``transaction.atomic``; no database is touched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from modules.discounts.constants import MechanismKind
from modules.discounts.dtos import NO_DISCOUNT, AppliedDiscount, DiscountResolution
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.dtos import CreateOrderDTO, OrderLineDTO, PatchOrderDTO
from modules.orders.exceptions import (
    DiscountAlreadyApplied,
    InvalidOrderStatus,
    OrderNotFound,
)
from modules.orders.pricing import PricedLine, PricedOrder
from modules.orders.services import OrderService
from shared.domain.errors import Conflict, NotFound, Rejection
from shared.domain.results import Result

pytestmark = pytest.mark.unit

TENANT_ID = uuid4()
PHONE = "+5511999990001"


@dataclass
class StubOrder:
    id: UUID = field(default_factory=uuid4)
    tenant_id: UUID = TENANT_ID
    customer_phone_number: str = PHONE
    status: str = OrderStatus.PENDING
    payment_status: str = PaymentStatus.PENDING
    discount_amount: Decimal = Decimal("0.00")
    platform_fee: Decimal = Decimal("0.00")
    total_amount: Decimal = Decimal("100.00")
    coupon_id: UUID | None = None
    promotion_id: UUID | None = None
    subtotal: Decimal = Decimal("100.00")

    @property
    def has_discount(self) -> bool:
        return self.coupon_id is not None or self.promotion_id is not None


def _coupon_resolution(amount: str = "10.00") -> DiscountResolution:
    return DiscountResolution(
        amount=Decimal(amount),
        applied=AppliedDiscount(
            kind=MechanismKind.COUPON,
            mechanism_id=uuid4(),
            tenant_id=TENANT_ID,
            customer_phone_number=PHONE,
            max_total_uses=1,
            max_uses_per_customer=None,
        ),
    )


def _priced(dto: CreateOrderDTO, discount: DiscountResolution) -> PricedOrder:
    lines = [PricedLine(line=line, unit_price=Decimal("50.00")) for line in dto.items]
    subtotal = sum((pl.subtotal for pl in lines), Decimal("0.00"))
    return PricedOrder(
        lines=lines,
        subtotal=subtotal,
        discount=discount,
        platform_fee=Decimal("10.00"),
        final_total=subtotal - discount.amount,
    )


@pytest.fixture()
def repo():
    return MagicMock()


@pytest.fixture()
def engine():
    return MagicMock()


@pytest.fixture()
def resolver():
    return MagicMock()


@pytest.fixture()
def service(repo, engine, resolver):
    return OrderService(
        order_repository=repo, pricing_engine=engine, discount_resolver=resolver
    )


def _create_dto(**kwargs) -> CreateOrderDTO:
    return CreateOrderDTO(
        tenant_id=TENANT_ID,
        customer_phone_number=PHONE,
        items=[OrderLineDTO(menu_item_id=uuid4(), quantity=2)],
        **kwargs,
    )


def _call_create(service: OrderService, dto: CreateOrderDTO):
    return OrderService.create_order.__wrapped__(service, dto)


def _call_patch(service: OrderService, dto: PatchOrderDTO):
    return OrderService.patch_order.__wrapped__(service, dto)


# ---------------------------------------------------------------------------
# create_order
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def test_persists_priced_order_and_records_usage(
        self, service, repo, engine, resolver
    ):
        dto = _create_dto(coupon_id=uuid4())
        resolution = _coupon_resolution()
        engine.price.return_value = Result.ok(_priced(dto, resolution))
        resolver.record.return_value = Result.ok(None)
        created = StubOrder()
        repo.create.return_value = created
        repo.get_by_id.return_value = created

        result = _call_create(service, dto)

        assert result is created
        data = repo.create.call_args.args[0]
        assert data["total_amount"] == Decimal("90.00")
        assert data["discount_amount"] == Decimal("10.00")
        assert data["coupon_id"] == resolution.applied.mechanism_id
        assert data["promotion_id"] is None
        assert data["items"][0]["unit_price"] == Decimal("50.00")
        resolver.record.assert_called_once_with(resolution, created.id)

    def test_pricing_rejection_raises_before_persisting(self, service, repo, engine):
        engine.price.return_value = Result.fail(
            Rejection.not_found("MENU_ITEM_NOT_FOUND", "Menu item missing.")
        )

        with pytest.raises(NotFound) as exc_info:
            _call_create(service, _create_dto())

        assert exc_info.value.code == "MENU_ITEM_NOT_FOUND"
        repo.create.assert_not_called()

    def test_usage_limit_race_raises_conflict(self, service, repo, engine, resolver):
        dto = _create_dto(coupon_id=uuid4())
        engine.price.return_value = Result.ok(_priced(dto, _coupon_resolution()))
        repo.create.return_value = StubOrder()
        resolver.record.return_value = Result.fail(
            Rejection.conflict("COUPON_USAGE_LIMIT_RACE", "Used up concurrently.")
        )

        with pytest.raises(Conflict) as exc_info:
            _call_create(service, dto)

        assert exc_info.value.code == "COUPON_USAGE_LIMIT_RACE"
        repo.get_by_id.assert_not_called()

    def test_order_without_discount_records_nothing_new(
        self, service, repo, engine, resolver
    ):
        dto = _create_dto()
        engine.price.return_value = Result.ok(_priced(dto, NO_DISCOUNT))
        resolver.record.return_value = Result.ok(None)
        repo.create.return_value = StubOrder()

        _call_create(service, dto)

        resolver.record.assert_called_once()
        assert resolver.record.call_args.args[0].applied is None


# ---------------------------------------------------------------------------
# patch_order
# ---------------------------------------------------------------------------


class TestPatchOrder:
    def _dto(self, order: StubOrder, **fields) -> PatchOrderDTO:
        return PatchOrderDTO(order_id=order.id, tenant_id=TENANT_ID, **fields)

    def test_missing_order(self, service, repo):
        repo.get_for_update.return_value = None
        with pytest.raises(OrderNotFound):
            _call_patch(service, PatchOrderDTO(order_id=uuid4(), tenant_id=TENANT_ID))

    def test_rejected_transition_saves_nothing(self, service, repo):
        order = StubOrder(status=OrderStatus.IN_PRODUCTION, payment_status=PaymentStatus.PAID)
        repo.get_for_update.return_value = order

        with pytest.raises(InvalidOrderStatus) as exc_info:
            _call_patch(
                service,
                self._dto(order, status=OrderStatus.CANCELLED, customer_phone_number="+1"),
            )

        assert exc_info.value.code == "ORDER_CANCEL_PAID"
        assert order.customer_phone_number == PHONE
        repo.save.assert_not_called()

    def test_status_and_payment_applied(self, service, repo):
        order = StubOrder(status=OrderStatus.IN_PRODUCTION)
        repo.get_for_update.return_value = order
        repo.get_by_id.return_value = order

        _call_patch(
            service,
            self._dto(
                order,
                status=OrderStatus.COMPLETED,
                payment_status=PaymentStatus.PAID,
            ),
        )

        assert order.status == OrderStatus.COMPLETED
        assert order.payment_status == PaymentStatus.PAID
        repo.save.assert_called_once_with(order)

    def test_attach_discount_reprices_without_touching_fee(
        self, service, repo, engine, resolver
    ):
        order = StubOrder(platform_fee=Decimal("7.00"))
        repo.get_for_update.return_value = order
        repo.get_by_id.return_value = order
        resolution = _coupon_resolution("15.00")
        resolver.resolve.return_value = Result.ok(resolution)
        resolver.record.return_value = Result.ok(None)

        _call_patch(service, self._dto(order, coupon_id=resolution.applied.mechanism_id))

        assert order.coupon_id == resolution.applied.mechanism_id
        assert order.discount_amount == Decimal("15.00")
        assert order.total_amount == Decimal("85.00")
        assert order.platform_fee == Decimal("7.00")
        engine.fee_for.assert_not_called()
        resolver.record.assert_called_once_with(resolution, order.id)

    def test_second_discount_rejected(self, service, repo, resolver):
        order = StubOrder(coupon_id=uuid4(), discount_amount=Decimal("10.00"))
        repo.get_for_update.return_value = order

        with pytest.raises(DiscountAlreadyApplied):
            _call_patch(service, self._dto(order, promotion_id=uuid4()))

        resolver.resolve.assert_not_called()
        repo.save.assert_not_called()

    def test_same_discount_again_is_noop(self, service, repo, resolver):
        coupon_id = uuid4()
        order = StubOrder(coupon_id=coupon_id, discount_amount=Decimal("10.00"))
        repo.get_for_update.return_value = order
        repo.get_by_id.return_value = order

        _call_patch(service, self._dto(order, coupon_id=coupon_id))

        resolver.resolve.assert_not_called()
        assert order.total_amount == Decimal("100.00")
