"""DiscountResolver tests: selection, eligibility checks and recording."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from django.utils import timezone

from modules.discounts.constants import DiscountType, MechanismKind
from modules.discounts.dtos import NO_DISCOUNT, UsageCounts
from modules.discounts.models import CouponUsage
from modules.discounts.repositories.django_repository import (
    CouponDjangoRepository,
    PromotionDjangoRepository,
)
from modules.discounts.resolver import DiscountResolver, discount_amount
from modules.orders.dtos import CreateOrderDTO, OrderLineDTO
from shared.domain.errors import ErrorKind

pytestmark = pytest.mark.unit

PHONE = "+5511999990001"
SUBTOTAL = Decimal("100.00")


@pytest.fixture()
def resolver():
    return DiscountResolver(
        coupon_repository=CouponDjangoRepository(),
        promotion_repository=PromotionDjangoRepository(),
    )


@pytest.fixture()
def place_order(order_service, company, pizza):
    """Create an order redeeming the given coupon or promotion."""

    def _place(phone=PHONE, **discount):
        return order_service.create_order(
            CreateOrderDTO(
                tenant_id=company.id,
                customer_phone_number=phone,
                items=[OrderLineDTO(menu_item_id=pizza.id, quantity=2)],
                **discount,
            )
        )

    return _place


# ---------------------------------------------------------------------------
# Amount
# ---------------------------------------------------------------------------


class TestDiscountAmount:
    def test_percentage_of_subtotal(self):
        assert discount_amount(DiscountType.PERCENTAGE, Decimal("10"), SUBTOTAL) == Decimal("10.00")

    def test_percentage_rounds_half_up(self):
        assert discount_amount(
            DiscountType.PERCENTAGE, Decimal("15"), Decimal("33.33")
        ) == Decimal("5.00")

    def test_fixed_is_the_value(self):
        assert discount_amount(DiscountType.FIXED, Decimal("7.5"), SUBTOTAL) == Decimal("7.50")

    def test_free_item_is_the_value(self):
        assert discount_amount(DiscountType.FREE_ITEM, Decimal("12.00"), SUBTOTAL) == Decimal("12.00")


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestSelection:
    def test_no_discount_requested(self, resolver, company):
        result = resolver.resolve(company.id, PHONE, SUBTOTAL)

        assert result.is_ok
        assert result.value == NO_DISCOUNT
        assert result.value.applied is None

    def test_coupon_preferred_over_promotion(
        self, resolver, company, make_coupon, make_promotion
    ):
        coupon = make_coupon()
        result = resolver.resolve(
            company.id,
            PHONE,
            SUBTOTAL,
            coupon_id=coupon.id,
            promotion_id=make_promotion().id,
        )

        assert result.value.applied.kind == MechanismKind.COUPON
        assert result.value.coupon_id == coupon.id
        assert result.value.promotion_id is None

    def test_promotion_used_alone(self, resolver, company, make_promotion):
        promotion = make_promotion()

        result = resolver.resolve(company.id, PHONE, SUBTOTAL, promotion_id=promotion.id)

        assert result.value.promotion_id == promotion.id
        assert result.value.amount == Decimal("5.00")

    def test_invalid_coupon_does_not_fall_back_to_promotion(
        self, resolver, company, make_coupon, make_promotion
    ):
        coupon = make_coupon(is_active=False)

        result = resolver.resolve(
            company.id,
            PHONE,
            SUBTOTAL,
            coupon_id=coupon.id,
            promotion_id=make_promotion().id,
        )

        assert result.rejection.code == "COUPON_INVALID"


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


class TestEligibility:
    def test_unknown_coupon(self, resolver, company):
        result = resolver.resolve(company.id, PHONE, SUBTOTAL, coupon_id=uuid4())

        assert result.rejection.kind == ErrorKind.NOT_FOUND
        assert result.rejection.code == "COUPON_NOT_FOUND"

    def test_unknown_promotion(self, resolver, company):
        result = resolver.resolve(company.id, PHONE, SUBTOTAL, promotion_id=uuid4())

        assert result.rejection.code == "PROMOTION_NOT_FOUND"

    def test_coupon_of_other_tenant_not_found(
        self, resolver, other_company, make_coupon
    ):
        coupon = make_coupon()

        result = resolver.resolve(other_company.id, PHONE, SUBTOTAL, coupon_id=coupon.id)

        assert result.rejection.code == "COUPON_NOT_FOUND"

    def test_inactive_coupon(self, resolver, company, make_coupon):
        coupon = make_coupon(is_active=False)

        result = resolver.resolve(company.id, PHONE, SUBTOTAL, coupon_id=coupon.id)

        assert result.rejection.kind == ErrorKind.BUSINESS_RULE
        assert result.rejection.code == "COUPON_INVALID"

    def test_window_bounds_are_inclusive(self, resolver, company, make_coupon):
        start = timezone.now() - timedelta(hours=1)
        end = start + timedelta(hours=2)
        coupon = make_coupon(start_date=start, end_date=end)

        for moment in (start, end):
            result = resolver.resolve(
                company.id, PHONE, SUBTOTAL, coupon_id=coupon.id, now=moment
            )
            assert result.is_ok

    @pytest.mark.parametrize("offset", [timedelta(seconds=-1), timedelta(hours=2, seconds=1)])
    def test_outside_window_invalid(self, resolver, company, make_coupon, offset):
        start = timezone.now() - timedelta(hours=1)
        coupon = make_coupon(start_date=start, end_date=start + timedelta(hours=2))

        result = resolver.resolve(
            company.id, PHONE, SUBTOTAL, coupon_id=coupon.id, now=start + offset
        )

        assert result.rejection.code == "COUPON_INVALID"

    def test_expired_promotion(self, resolver, company, make_promotion):
        past = timezone.now() - timedelta(days=10)
        promotion = make_promotion(start_date=past, end_date=past + timedelta(days=1))

        result = resolver.resolve(company.id, PHONE, SUBTOTAL, promotion_id=promotion.id)

        assert result.rejection.code == "PROMOTION_INVALID"

    def test_max_total_uses_reached(self, resolver, company, make_coupon, place_order):
        coupon = make_coupon(max_total_uses=1)
        place_order(phone="+5500000001", coupon_id=coupon.id)

        result = resolver.resolve(company.id, PHONE, SUBTOTAL, coupon_id=coupon.id)

        assert result.rejection.code == "COUPON_MAX_TOTAL_USES"
        assert result.rejection.context["max_total_uses"] == 1

    def test_max_uses_per_customer_reached(
        self, resolver, company, make_coupon, place_order
    ):
        coupon = make_coupon(max_uses_per_customer=1)
        place_order(coupon_id=coupon.id)

        mine = resolver.resolve(company.id, PHONE, SUBTOTAL, coupon_id=coupon.id)
        someone_else = resolver.resolve(
            company.id, "+5500000001", SUBTOTAL, coupon_id=coupon.id
        )

        assert mine.rejection.code == "COUPON_MAX_USES_PER_CUSTOMER"
        assert someone_else.is_ok

    def test_total_limit_checked_before_customer_limit(
        self, resolver, company, make_coupon, place_order
    ):
        coupon = make_coupon(max_total_uses=1, max_uses_per_customer=1)
        place_order(coupon_id=coupon.id)

        result = resolver.resolve(company.id, PHONE, SUBTOTAL, coupon_id=coupon.id)

        assert result.rejection.code == "COUPON_MAX_TOTAL_USES"

    def test_promotion_per_customer_limit(
        self, resolver, company, make_promotion, place_order
    ):
        promotion = make_promotion(max_uses_per_customer=2)
        place_order(promotion_id=promotion.id)
        assert resolver.resolve(
            company.id, PHONE, SUBTOTAL, promotion_id=promotion.id
        ).is_ok

        place_order(promotion_id=promotion.id)
        result = resolver.resolve(company.id, PHONE, SUBTOTAL, promotion_id=promotion.id)

        assert result.rejection.code == "PROMOTION_MAX_USES_PER_CUSTOMER"

    def test_unlimited_coupon(self, resolver, company, make_coupon, place_order):
        coupon = make_coupon()
        for _ in range(3):
            place_order(coupon_id=coupon.id)

        assert resolver.resolve(company.id, PHONE, SUBTOTAL, coupon_id=coupon.id).is_ok

    def test_min_order_value_not_enforced(self, resolver, company, make_coupon):
        coupon = make_coupon(min_order_value=Decimal("500.00"))

        assert resolver.resolve(company.id, PHONE, SUBTOTAL, coupon_id=coupon.id).is_ok


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------


def _stub_resolver(company, *counts, **limits):
    """Resolver over a mocked coupon store returning ``counts`` in order."""
    coupons = MagicMock()
    coupons.get_for_update.return_value = MagicMock(
        id=uuid4(),
        tenant_id=company.id,
        discount_type=DiscountType.FIXED,
        discount_value=Decimal("5.00"),
        max_total_uses=limits.get("max_total_uses"),
        max_uses_per_customer=limits.get("max_uses_per_customer"),
        **{"is_valid_at.return_value": True},
    )
    coupons.get_usage_counts.side_effect = list(counts)
    resolver = DiscountResolver(coupon_repository=coupons, promotion_repository=MagicMock())
    resolution = resolver.resolve(company.id, PHONE, SUBTOTAL, coupon_id=uuid4()).value
    return resolver, coupons, resolution


class TestRecord:
    def test_nothing_to_record_without_discount(self):
        coupons = MagicMock()
        resolver = DiscountResolver(coupons, MagicMock())

        assert resolver.record(NO_DISCOUNT, uuid4()).is_ok
        coupons.record_usage.assert_not_called()

    def test_records_usage_for_order(self, resolver, company, make_coupon, place_order):
        coupon = make_coupon(max_total_uses=5)
        order = place_order()
        resolution = resolver.resolve(
            company.id, PHONE, SUBTOTAL, coupon_id=coupon.id
        ).value

        result = resolver.record(resolution, order.id)

        assert result.is_ok
        usage = CouponUsage.objects.get(coupon=coupon)
        assert usage.order_id == order.id
        assert usage.customer_phone_number == PHONE
        assert usage.tenant_id == company.id

    def test_recount_above_total_limit_is_conflict(self, company):
        resolver, coupons, resolution = _stub_resolver(
            company,
            UsageCounts(total=0, by_customer=0),
            UsageCounts(total=2, by_customer=1),
            max_total_uses=1,
        )

        result = resolver.record(resolution, uuid4())

        assert result.rejection.kind == ErrorKind.CONFLICT
        assert result.rejection.code == "COUPON_USAGE_LIMIT_RACE"
        coupons.record_usage.assert_called_once()

    def test_recount_above_customer_limit_is_conflict(self, company):
        resolver, _, resolution = _stub_resolver(
            company,
            UsageCounts(total=1, by_customer=0),
            UsageCounts(total=2, by_customer=2),
            max_uses_per_customer=1,
        )

        result = resolver.record(resolution, uuid4())

        assert result.rejection.code == "COUPON_USAGE_LIMIT_RACE"

    def test_recount_at_limit_is_fine(self, company):
        resolver, _, resolution = _stub_resolver(
            company,
            UsageCounts(total=0, by_customer=0),
            UsageCounts(total=1, by_customer=1),
            max_total_uses=1,
            max_uses_per_customer=1,
        )

        assert resolver.record(resolution, uuid4()).is_ok
