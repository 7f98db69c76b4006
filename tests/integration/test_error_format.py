"""Integration tests for error response bodies.

Domain errors render as ``{detail, code, context}`` with the status of
their kind; request validation errors keep DRF's field-keyed format.
"""

from uuid import uuid4

import pytest

pytestmark = pytest.mark.integration

ORDERS = "/api/v1/orders/"


class TestDomainErrorFormat:
    def test_not_found(self, auth_client):
        response = auth_client.get(f"{ORDERS}{uuid4()}/")

        assert response.status_code == 404
        body = response.json()
        assert set(body) == {"detail", "code", "context"}
        assert body["code"] == "ORDER_NOT_FOUND"

    def test_business_rule(self, auth_client, pizza, make_coupon):
        coupon = make_coupon(is_active=False)

        response = auth_client.post(
            ORDERS,
            {
                "customer_phone_number": "+5511999990001",
                "items": [{"menu_item_id": str(pizza.id), "quantity": 1}],
                "coupon_id": str(coupon.id),
            },
            format="json",
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "COUPON_INVALID"
        assert body["context"] == {"mechanism_id": str(coupon.id)}

    def test_context_values_are_strings(self, auth_client):
        order_id = uuid4()

        body = auth_client.get(f"{ORDERS}{order_id}/").json()

        assert body["context"]["order_id"] == str(order_id)


class TestValidationErrorFormat:
    def test_malformed_json(self, auth_client):
        response = auth_client.post(
            ORDERS, data="{", content_type="application/json"
        )

        assert response.status_code == 400
        assert "detail" in response.json()

    def test_field_errors_keyed_by_field(self, auth_client):
        response = auth_client.post(ORDERS, {"items": []}, format="json")

        assert response.status_code == 400
        body = response.json()
        assert "customer_phone_number" in body
        assert "items" in body
