"""Integration tests for JWT authentication (SimpleJWT).

Validates:
  - /health is public (plain Django view, no DRF).
  - API endpoints return 401 without a token or with a bad one.
  - A token from /api/v1/auth/token/ grants access.
"""

import pytest
from django.contrib.auth import get_user_model

pytestmark = pytest.mark.integration

ORDERS = "/api/v1/orders/"


class TestPublicEndpoints:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProtectedEndpoints:
    """All DRF endpoints require a valid JWT by default (fail closed)."""

    def test_no_token_returns_401(self, api_client):
        response = api_client.get(ORDERS)
        assert response.status_code == 401

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        response = api_client.get(ORDERS)
        assert response.status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        response = api_client.get("/api/v1/coupons/")
        assert response.status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get(ORDERS)
        assert response.status_code == 401
        assert "Bearer" in response.get("WWW-Authenticate", "")


class TestTokenFlow:
    def test_obtained_token_grants_access(self, api_client, company):
        get_user_model().objects.create_user(username="cashier", password="s3cret-pass")

        token = api_client.post(
            "/api/v1/auth/token/",
            {"username": "cashier", "password": "s3cret-pass"},
            format="json",
        )
        assert token.status_code == 200

        api_client.credentials(
            HTTP_AUTHORIZATION=f"Bearer {token.json()['access']}",
            HTTP_X_TENANT_ID=str(company.id),
        )
        response = api_client.get(ORDERS)

        assert response.status_code == 200
        assert response.json()["count"] == 0

    def test_wrong_password(self, api_client):
        get_user_model().objects.create_user(username="cashier", password="s3cret-pass")

        response = api_client.post(
            "/api/v1/auth/token/",
            {"username": "cashier", "password": "nope"},
            format="json",
        )

        assert response.status_code == 401
