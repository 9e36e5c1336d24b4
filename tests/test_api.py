"""Tests for the FastAPI API."""

from decimal import Decimal

import pytest


def order_payload(product_id, quantity=1, **extra):
    payload = {
        "items": [{"product_id": product_id, "quantity": quantity}],
        "payment_method": "credit_card",
        "shipping_info": {
            "address": "1 Main St", "city": "Dublin", "state": "Leinster",
            "country": "IE", "postal_code": "D01", "phone_number": "+353100",
        },
    }
    payload.update(extra)
    return payload


@pytest.fixture
def order_id(client, seed, buyer_headers):
    response = client.post("/api/v1/orders", json=order_payload(seed["p1"], 3), headers=buyer_headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestOps:
    def test_health_and_info(self, client):
        assert client.get("/health").json() == {"status": "ok"}
        assert client.get("/v1/_info").json()["service"] == "storefront"

    def test_metrics(self, client):
        response = client.get("/metrics")
        assert response.status_code == 200


class TestAuth:
    def test_register_login_me(self, client, seed):
        response = client.post("/api/v1/auth/register",
                               json={"username": "newbie", "email": "newbie@example.com", "password": "hunter22"})
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["status_code"] == 201
        assert body["data"]["role"] == "user"
        assert "password_hash" not in body["data"]
        assert "timestamp" in body

        response = client.post("/api/v1/auth/login", json={"email": "newbie@example.com", "password": "hunter22"})
        assert response.status_code == 200
        token = response.json()["data"]["token"]

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["data"]["username"] == "newbie"

    def test_duplicate_registration(self, client, seed):
        response = client.post("/api/v1/auth/register",
                               json={"username": "buyer", "email": "buyer@example.com", "password": "hunter22"})
        assert response.status_code == 409
        assert response.json()["success"] is False

    def test_bad_login(self, client, seed):
        response = client.post("/api/v1/auth/login", json={"email": "buyer@example.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_missing_and_invalid_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_validation_errors_use_error_envelope(self, client):
        response = client.post("/api/v1/auth/register", json={"username": "x", "email": "not-an-email"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        fields = {e["field"] for e in body["errors"]}
        assert {"username", "email", "password"} <= fields


class TestUsers:
    def test_listing_is_admin_only(self, client, buyer_headers, admin_headers):
        assert client.get("/api/v1/users", headers=buyer_headers).status_code == 403

        body = client.get("/api/v1/users", headers=admin_headers).json()
        assert body["meta"]["total"] == 3

    def test_self_or_admin(self, client, seed, buyer_headers, admin_headers):
        assert client.get(f"/api/v1/users/{seed['buyer']}", headers=buyer_headers).status_code == 200
        assert client.get(f"/api/v1/users/{seed['other']}", headers=buyer_headers).status_code == 403
        assert client.get(f"/api/v1/users/{seed['other']}", headers=admin_headers).status_code == 200

    def test_only_admin_changes_roles(self, client, seed, buyer_headers):
        response = client.put(f"/api/v1/users/{seed['buyer']}", json={"role": "admin"}, headers=buyer_headers)
        assert response.status_code == 403


class TestCatalog:
    def test_public_listing_is_paginated(self, client, seed):
        body = client.get("/api/v1/products", params={"page": 1, "per_page": 1}).json()
        assert body["meta"] == {"page": 1, "per_page": 1, "total_page": 2, "total": 2}
        assert len(body["data"]) == 1

    def test_lookups(self, client, seed):
        assert client.get("/api/v1/products/sku/GAD-001").json()["data"]["id"] == seed["p2"]
        assert client.get(f"/api/v1/products/category/{seed['category']}").json()["meta"]["total"] == 2
        assert client.get("/api/v1/products/search", params={"q": "shiny"}).json()["meta"]["total"] == 1
        assert client.get("/api/v1/categories/slug/books").json()["data"]["id"] == seed["category"]

        response = client.get("/api/v1/products/9999")
        assert response.status_code == 404
        assert response.json()["message"] == "Product with ID 9999 not found"

    def test_admin_writes(self, client, seed, buyer_headers, admin_headers):
        payload = {"name": "Thing", "price": "4.99", "sku": "THG-001", "stock": 3, "category_id": seed["category"]}

        assert client.post("/api/v1/products", json=payload, headers=buyer_headers).status_code == 403

        response = client.post("/api/v1/products", json=payload, headers=admin_headers)
        assert response.status_code == 201
        assert Decimal(str(response.json()["data"]["price"])) == Decimal("4.99")

        assert client.post("/api/v1/products", json=payload, headers=admin_headers).status_code == 409

        payload.update(sku="THG-002", category_id=9999)
        response = client.post("/api/v1/products", json=payload, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid category ID"

    def test_stock_patch(self, client, seed, admin_headers):
        url = f"/api/v1/products/{seed['p1']}/stock"
        response = client.patch(url, json={"quantity": -2}, headers=admin_headers)
        assert response.json()["data"] == {"product_id": seed["p1"], "stock": 3}

        response = client.patch(url, json={"quantity": -4}, headers=admin_headers)
        assert response.status_code == 400

    def test_category_conflict(self, client, admin_headers):
        response = client.post("/api/v1/categories", json={"name": "Books", "slug": "other"}, headers=admin_headers)
        assert response.status_code == 409

    def test_category_with_products_cannot_be_deleted(self, client, seed, admin_headers):
        response = client.delete(f"/api/v1/categories/{seed['category']}", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert client.get(f"/api/v1/products/{seed['p1']}").json()["data"]["category_id"] == seed["category"]


class TestOrders:
    def test_create(self, client, seed, buyer_headers):
        response = client.post("/api/v1/orders", json=order_payload(seed["p1"], 3), headers=buyer_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user_id"] == seed["buyer"]
        assert data["status"] == "pending"
        assert Decimal(str(data["total_amount"])) == Decimal("30.00")
        assert data["shipping_info"]["city"] == "Dublin"

        product = client.get(f"/api/v1/products/{seed['p1']}").json()["data"]
        assert product["stock"] == 2

    def test_insufficient_stock(self, client, seed, buyer_headers):
        response = client.post("/api/v1/orders", json=order_payload(seed["p1"], 10), headers=buyer_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Insufficient stock for product: Widget"
        assert client.get(f"/api/v1/products/{seed['p1']}").json()["data"]["stock"] == 5

    def test_requires_authentication(self, client, seed):
        assert client.post("/api/v1/orders", json=order_payload(seed["p1"])).status_code == 401

    def test_ownership(self, client, order_id, other_headers, admin_headers, buyer_headers):
        assert client.get(f"/api/v1/orders/{order_id}", headers=buyer_headers).status_code == 200
        assert client.get(f"/api/v1/orders/{order_id}", headers=other_headers).status_code == 403
        assert client.get(f"/api/v1/orders/{order_id}", headers=admin_headers).status_code == 200
        assert client.get("/api/v1/orders/9999", headers=admin_headers).status_code == 404

    def test_listing(self, client, seed, order_id, buyer_headers, other_headers, admin_headers):
        assert client.get("/api/v1/orders", headers=buyer_headers).json()["meta"]["total"] == 1
        assert client.get("/api/v1/orders", headers=other_headers).json()["meta"]["total"] == 0
        assert client.get(f"/api/v1/orders/user/{seed['buyer']}", headers=other_headers).status_code == 403
        assert client.get("/api/v1/orders/status/pending", headers=buyer_headers).status_code == 403

        body = client.get("/api/v1/orders/status/pending", headers=admin_headers).json()
        assert body["meta"]["total"] == 1

    def test_status_changes_are_admin_only(self, client, order_id, buyer_headers, admin_headers):
        url = f"/api/v1/orders/{order_id}/status"
        assert client.patch(url, json={"status": "completed"}, headers=buyer_headers).status_code == 403

        response = client.put(f"/api/v1/orders/{order_id}", json={"status": "completed"}, headers=buyer_headers)
        assert response.status_code == 403

        assert client.patch(url, json={"status": "completed"}, headers=admin_headers).status_code == 200
        data = client.get(f"/api/v1/orders/{order_id}", headers=buyer_headers).json()["data"]
        assert data["status"] == "completed"

    def test_owner_updates_payment_method(self, client, order_id, buyer_headers):
        response = client.put(f"/api/v1/orders/{order_id}", json={"payment_method": "paypal"},
                              headers=buyer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["payment_method"] == "paypal"

    def test_add_item(self, client, seed, order_id, buyer_headers, other_headers):
        url = f"/api/v1/orders/{order_id}/items"
        assert client.post(url, json={"product_id": seed["p2"], "quantity": 2}, headers=other_headers).status_code == 403

        response = client.post(url, json={"product_id": seed["p2"], "quantity": 2}, headers=buyer_headers)
        assert response.status_code == 201

        data = client.get(f"/api/v1/orders/{order_id}", headers=buyer_headers).json()["data"]
        assert Decimal(str(data["total_amount"])) == Decimal("35.00")
        assert len(data["items"]) == 2

    def test_delete(self, client, seed, order_id, buyer_headers):
        assert client.delete(f"/api/v1/orders/{order_id}", headers=buyer_headers).status_code == 200
        assert client.get(f"/api/v1/orders/{order_id}", headers=buyer_headers).status_code == 404
        # stock is not restored
        assert client.get(f"/api/v1/products/{seed['p1']}").json()["data"]["stock"] == 2
