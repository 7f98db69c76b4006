from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from modules.companies.constants import FeeType
from modules.companies.models import Company
from modules.discounts.constants import DiscountType
from modules.discounts.models import Coupon, Promotion
from modules.menu.models import MenuItem
from modules.orders.services import build_order_service


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Tenant, menu and discount fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def company():
    """Tenant charging a 10% platform fee."""
    return Company.objects.create(
        name="Cantina Teste",
        email="cantina@example.com",
        fee_type=FeeType.PERCENTAGE,
        fee_value=Decimal("10.00"),
    )


@pytest.fixture()
def other_company():
    """Second tenant with a flat 2.50 fee."""
    return Company.objects.create(
        name="Outra Cantina",
        email="outra@example.com",
        fee_type=FeeType.FIXED,
        fee_value=Decimal("2.50"),
    )


@pytest.fixture()
def make_menu_item(company):
    def _make(price="50.00", name="Pizza", tenant=None):
        return MenuItem.objects.create(
            tenant=tenant or company, name=name, price=Decimal(price)
        )

    return _make


@pytest.fixture()
def pizza(make_menu_item):
    return make_menu_item("50.00", "Pizza")


@pytest.fixture()
def soda(make_menu_item):
    return make_menu_item("8.00", "Soda")


def _window():
    now = timezone.now()
    return {"start_date": now - timedelta(days=1), "end_date": now + timedelta(days=1)}


@pytest.fixture()
def make_coupon(company):
    def _make(**overrides):
        fields = {
            "tenant": company,
            "code": "SAVE10",
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": Decimal("10"),
            **_window(),
        }
        fields.update(overrides)
        return Coupon.objects.create(**fields)

    return _make


@pytest.fixture()
def make_promotion(company):
    def _make(**overrides):
        fields = {
            "tenant": company,
            "name": "Lunch Deal",
            "discount_type": DiscountType.FIXED,
            "discount_value": Decimal("5.00"),
            **_window(),
        }
        fields.update(overrides)
        return Promotion.objects.create(**fields)

    return _make


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def auth_client(company):
    """APIClient with a force-authenticated user and the tenant header set."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="staff", password="testpass123"
    )
    client.force_authenticate(user=user)
    client.defaults["HTTP_X_TENANT_ID"] = str(company.id)
    return client
