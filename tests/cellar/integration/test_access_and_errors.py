"""Caller identity, admin checks and the error envelope."""

import pytest


@pytest.mark.parametrize(
    "method, path",
    [("get", "/cart"), ("get", "/orders/mine"), ("get", "/favorites"), ("get", "/notifications")],
)
def test_customer_routes_need_a_user(client, method, path):
    response = getattr(client, method)(path)
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": {"code": "UNAUTHORIZED", "message": "Not authorized, no token"},
    }


@pytest.mark.parametrize(
    "path",
    ["/analytics/sales", "/analytics/dashboard", "/suppliers", "/orders", "/flash-sales", "/coupons"],
)
def test_admin_routes_reject_customers(client, customer, path):
    response = client.get(path, headers=customer)
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_role_header_is_case_insensitive(client):
    response = client.get("/analytics/dashboard", headers={"X-User-Id": "ops-1", "X-User-Role": "ADMIN"})
    assert response.status_code == 200


def test_not_found_envelope(client):
    response = client.get("/products/prod-missing")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"
    assert body["error"]["message"] == "Product not found"


def test_request_validation_envelope(client, customer):
    response = client.post("/reviews", json={"productId": "p-1", "rating": 9}, headers=customer)
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID"
    assert "body.rating" in error["details"]


def test_inverted_reporting_range(client, admin):
    response = client.get(
        "/analytics/sales",
        params={"startDate": "2026-03-01T00:00:00Z", "endDate": "2026-02-01T00:00:00Z"},
        headers=admin,
    )
    assert response.status_code == 400
