"""Integration tests for the ``seed_data`` management command."""

from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from modules.companies.models import Company
from modules.discounts.models import Coupon, Promotion
from modules.menu.models import MenuItem
from modules.orders.models import Order

pytestmark = pytest.mark.integration


def _seed(orders: int = 5) -> str:
    out = StringIO()
    call_command("seed_data", orders=orders, stdout=out)
    return out.getvalue()


def test_seed_creates_tenants_menu_and_discounts():
    output = _seed()

    assert "Seed completed" in output
    assert Company.objects.count() == 2
    assert MenuItem.objects.count() == 12
    assert Coupon.objects.filter(code="WELCOME10").count() == 2
    assert Promotion.objects.filter(name="Lunch Deal").count() == 2
    assert get_user_model().objects.filter(username="admin").exists()


def test_seeded_orders_are_priced():
    _seed(orders=10)

    orders = list(Order.objects.all())
    assert orders
    for order in orders:
        assert order.subtotal > 0
        assert order.total_amount >= 0


def test_seed_is_rerunnable():
    _seed(orders=0)
    _seed(orders=0)

    assert Company.objects.count() == 2
    assert MenuItem.objects.count() == 12
