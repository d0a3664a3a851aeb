"""Integration tests for the order and payment endpoints via TestClient."""

import pytest
from storefront.payments.signature import compute_signature

ADDRESS = {"street": "12 MG Road", "city": "Bengaluru", "state": "KA", "zip_code": "560001", "country": "IN"}


@pytest.fixture()
def order_id(client, as_customer, product):
    product("prod-001", price=250.0, stock=10)
    client.post("/cart/items", json={"product_id": "prod-001", "quantity": 2}, headers=as_customer)
    response = client.post("/orders", json={"shipping_address": ADDRESS}, headers=as_customer)
    assert response.status_code == 201
    return response.json()["order_id"]


class TestPlaceOrder:
    def test_checkout_from_cart(self, client, as_customer, order_id, ledger):
        response = client.get(f"/orders/{order_id}", headers=as_customer)

        body = response.json()
        assert response.status_code == 200
        assert body["order_status"] == "pending"
        assert body["total_amount"] == 500.0
        assert body["order_number"].startswith("ORD")
        assert body["payment_info"]["status"] == "pending"
        assert [e["status"] for e in body["status_history"]] == ["pending"]
        assert ledger.available("prod-001") == 8
        assert client.get("/cart", headers=as_customer).json()["items"] == []

    def test_explicit_items(self, client, as_customer, product):
        product("prod-002", price=40.0)

        response = client.post(
            "/orders",
            json={"shipping_address": ADDRESS, "items": [{"product_id": "prod-002", "quantity": 3}]},
            headers=as_customer,
        )

        assert response.status_code == 201
        order = client.get(f"/orders/{response.json()['order_id']}", headers=as_customer).json()
        assert order["total_amount"] == 120.0

    def test_empty_cart(self, client, as_customer):
        response = client.post("/orders", json={"shipping_address": ADDRESS}, headers=as_customer)
        assert response.status_code == 400

    def test_out_of_stock_is_conflict(self, client, as_customer, product, ledger):
        product("prod-A", stock=5)
        product("prod-B", stock=1)

        response = client.post(
            "/orders",
            json={
                "shipping_address": ADDRESS,
                "items": [{"product_id": "prod-A", "quantity": 2}, {"product_id": "prod-B", "quantity": 2}],
            },
            headers=as_customer,
        )

        assert response.status_code == 409
        assert ledger.available("prod-A") == 5

    def test_missing_address(self, client, as_customer):
        response = client.post("/orders", json={}, headers=as_customer)
        assert response.status_code == 422


class TestReadOrders:
    def test_other_customer_is_forbidden(self, client, order_id, as_other_customer):
        response = client.get(f"/orders/{order_id}", headers=as_other_customer)
        assert response.status_code == 403

    def test_unknown_order(self, client, as_customer):
        response = client.get("/orders/no-such-order", headers=as_customer)
        assert response.status_code == 404

    def test_my_orders(self, client, order_id, as_customer, as_other_customer):
        mine = client.get("/orders/mine", headers=as_customer).json()
        theirs = client.get("/orders/mine", headers=as_other_customer).json()

        assert mine["count"] == 1
        assert mine["orders"][0]["order_id"] == order_id
        assert theirs["count"] == 0

    def test_admin_listing(self, client, order_id, as_admin, as_customer):
        assert client.get("/orders", headers=as_admin).json()["count"] == 1
        assert client.get("/orders", headers=as_customer).status_code == 403

    def test_admin_listing_by_status(self, client, order_id, as_admin):
        assert client.get("/orders?status=shipped", headers=as_admin).json()["count"] == 0
        assert client.get("/orders?status=pending", headers=as_admin).json()["count"] == 1


class TestPayment:
    def test_intent_then_verify(self, client, order_id, as_customer):
        intent = client.post("/orders/payment-intent", json={"order_id": order_id}, headers=as_customer)
        assert intent.status_code == 201
        intent_id = intent.json()["intent_id"]
        assert intent.json()["amount_minor"] == 50000

        response = client.post(
            "/orders/verify-payment",
            json={
                "gateway_order_id": intent_id,
                "gateway_payment_id": "pay_001",
                "signature": compute_signature(intent_id, "pay_001"),
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["payment_info"]["status"] == "completed"
        assert body["payment_info"]["amount_paid"] == 500.0
        assert body["order_status"] == "processing"

    def test_bad_signature(self, client, order_id, as_customer):
        intent_id = client.post("/orders/payment-intent", json={"order_id": order_id}, headers=as_customer).json()[
            "intent_id"
        ]

        response = client.post(
            "/orders/verify-payment",
            json={"gateway_order_id": intent_id, "gateway_payment_id": "pay_001", "signature": "forged"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VerificationFailed"
        order = client.get(f"/orders/{order_id}", headers=as_customer).json()
        assert order["payment_info"]["status"] == "failed"

    def test_gateway_outage(self, client, order_id, as_customer, gateway):
        gateway.configure(should_succeed=False)

        response = client.post("/orders/payment-intent", json={"order_id": order_id}, headers=as_customer)

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"


class TestLifecycle:
    def test_customer_cancel(self, client, order_id, as_customer, ledger):
        response = client.post(f"/orders/{order_id}/cancel", json={"reason": "Changed my mind"}, headers=as_customer)

        assert response.status_code == 200
        assert response.json()["order_status"] == "cancelled"
        assert ledger.available("prod-001") == 10

        again = client.post(f"/orders/{order_id}/cancel", headers=as_customer)
        assert again.status_code == 409

    def test_admin_status_progression(self, client, order_id, as_admin):
        for status in ("processing", "shipped", "delivered"):
            response = client.patch(f"/orders/{order_id}/status", json={"status": status}, headers=as_admin)
            assert response.status_code == 200

        assert response.json()["order_status"] == "delivered"
        assert len(response.json()["status_history"]) == 4

    def test_invalid_transition(self, client, order_id, as_admin):
        response = client.patch(f"/orders/{order_id}/status", json={"status": "delivered"}, headers=as_admin)
        assert response.status_code == 409
        assert response.json()["error"] == "InvalidStatusTransition"

    def test_customer_cannot_change_status(self, client, order_id, as_customer):
        response = client.patch(f"/orders/{order_id}/status", json={"status": "processing"}, headers=as_customer)
        assert response.status_code == 403

    def test_delivery_info(self, client, order_id, as_admin):
        response = client.patch(
            f"/orders/{order_id}/delivery",
            json={"tracking_number": "TRK123", "courier": "BlueDart"},
            headers=as_admin,
        )

        assert response.status_code == 200
        assert response.json()["delivery_info"]["tracking_number"] == "TRK123"
