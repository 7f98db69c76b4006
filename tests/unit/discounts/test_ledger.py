"""Usage ledger tests: counting and append-only records."""

import pytest
from django.db.models import ProtectedError

from modules.discounts.ledger import coupon_ledger, promotion_ledger
from modules.discounts.models import CouponUsage, PromotionUsage, UsageRecordImmutable
from modules.orders.dtos import CreateOrderDTO, OrderLineDTO

pytestmark = pytest.mark.unit

PHONE = "+5511999990001"


@pytest.fixture()
def order(order_service, company, pizza):
    return order_service.create_order(
        CreateOrderDTO(
            tenant_id=company.id,
            customer_phone_number=PHONE,
            items=[OrderLineDTO(menu_item_id=pizza.id, quantity=1)],
        )
    )


@pytest.fixture()
def another_order(order_service, company, pizza):
    return order_service.create_order(
        CreateOrderDTO(
            tenant_id=company.id,
            customer_phone_number="+5511000000002",
            items=[OrderLineDTO(menu_item_id=pizza.id, quantity=1)],
        )
    )


class TestCounting:
    def test_empty_ledger(self, company, make_coupon):
        ledger = coupon_ledger()
        coupon = make_coupon()

        assert ledger.count_total(coupon.id, company.id) == 0
        assert ledger.count_by_customer(coupon.id, company.id, PHONE) == 0

    def test_counts_total_and_per_customer(
        self, company, make_coupon, order, another_order
    ):
        ledger = coupon_ledger()
        coupon = make_coupon()
        ledger.record(coupon.id, company.id, PHONE, order.id)
        ledger.record(coupon.id, company.id, "+5511000000002", another_order.id)

        assert ledger.count_total(coupon.id, company.id) == 2
        assert ledger.count_by_customer(coupon.id, company.id, PHONE) == 1

    def test_counts_are_per_mechanism(self, company, make_coupon, order):
        ledger = coupon_ledger()
        used = make_coupon(code="USED")
        unused = make_coupon(code="UNUSED")
        ledger.record(used.id, company.id, PHONE, order.id)

        assert ledger.count_total(unused.id, company.id) == 0

    def test_counts_are_per_tenant(self, company, other_company, make_coupon, order):
        ledger = coupon_ledger()
        coupon = make_coupon()
        ledger.record(coupon.id, company.id, PHONE, order.id)

        assert ledger.count_total(coupon.id, other_company.id) == 0

    def test_promotion_ledger_writes_promotion_usages(
        self, company, make_promotion, order
    ):
        promotion = make_promotion()

        promotion_ledger().record(promotion.id, company.id, PHONE, order.id)

        assert PromotionUsage.objects.filter(promotion=promotion).count() == 1
        assert CouponUsage.objects.count() == 0


class TestAppendOnly:
    def test_record_cannot_be_updated(self, company, make_coupon, order):
        usage = coupon_ledger().record(make_coupon().id, company.id, PHONE, order.id)
        usage.customer_phone_number = "+5500000000000"

        with pytest.raises(UsageRecordImmutable):
            usage.save()

    def test_record_cannot_be_deleted(self, company, make_coupon, order):
        usage = coupon_ledger().record(make_coupon().id, company.id, PHONE, order.id)

        with pytest.raises(UsageRecordImmutable):
            usage.delete()

        assert CouponUsage.objects.filter(pk=usage.pk).exists()

    def test_order_holding_records_cannot_be_deleted(self, company, make_coupon, order):
        coupon_ledger().record(make_coupon().id, company.id, PHONE, order.id)

        with pytest.raises(ProtectedError):
            order.delete()

        assert CouponUsage.objects.count() == 1


class TestRepositoryLedgerWiring:
    def test_each_store_counts_on_its_own_ledger(self, company, make_coupon, order):
        from modules.discounts.repositories.django_repository import (
            CouponDjangoRepository,
            PromotionDjangoRepository,
        )

        coupon = make_coupon()
        CouponDjangoRepository().record_usage(coupon.id, company.id, PHONE, order.id)

        assert CouponUsage.objects.filter(coupon=coupon).count() == 1
        counts = PromotionDjangoRepository().get_usage_counts(coupon.id, company.id, PHONE)
        assert (counts.total, counts.by_customer) == (0, 0)

    def test_store_without_a_ledger_cannot_be_built(self):
        from modules.discounts.models import Coupon
        from modules.discounts.repositories.django_repository import (
            _MechanismDjangoRepository,
        )

        class LedgerlessRepository(_MechanismDjangoRepository):
            model = Coupon

        with pytest.raises(TypeError):
            LedgerlessRepository()
