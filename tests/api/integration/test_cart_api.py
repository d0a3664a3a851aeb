"""Integration tests for the cart endpoints via TestClient."""


def _add_item(client, headers, product_id="prod-001", quantity=1, size=None):
    response = client.post(
        "/cart/items",
        json={"product_id": product_id, "quantity": quantity, "size": size},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["item_id"]


class TestReadCart:
    def test_empty_cart_on_first_access(self, client, as_customer):
        response = client.get("/cart", headers=as_customer)

        assert response.status_code == 200
        body = response.json()
        assert body["customer_id"] == "cust-001"
        assert body["items"] == []
        assert body["total_amount"] == 0.0
        assert body["total_items"] == 0

    def test_requires_identity(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_unknown_role(self, client):
        response = client.get("/cart", headers={"X-Customer-Id": "cust-001", "X-Customer-Role": "root"})
        assert response.status_code == 401


class TestCartItems:
    def test_add_item(self, client, as_customer, product):
        product("prod-001", price=150.0)

        _add_item(client, as_customer, quantity=2)

        body = client.get("/cart", headers=as_customer).json()
        assert body["items"][0]["product_id"] == "prod-001"
        assert body["items"][0]["unit_price"] == 150.0
        assert body["total_amount"] == 300.0
        assert body["total_items"] == 2

    def test_same_product_and_size_replaces_quantity(self, client, as_customer, product):
        product("prod-001", sizes=("S", "M"))

        first = _add_item(client, as_customer, size="M")
        second = _add_item(client, as_customer, quantity=2, size="M")
        _add_item(client, as_customer, size="S")

        body = client.get("/cart", headers=as_customer).json()
        assert first == second
        assert len(body["items"]) == 2
        assert body["total_items"] == 3

    def test_insufficient_stock_is_conflict(self, client, as_customer, product):
        product("prod-001", stock=2)

        response = client.post("/cart/items", json={"product_id": "prod-001", "quantity": 3}, headers=as_customer)

        assert response.status_code == 409
        assert response.json()["error"] == "InsufficientStock"

    def test_unknown_product(self, client, as_customer):
        response = client.post("/cart/items", json={"product_id": "ghost", "quantity": 1}, headers=as_customer)
        assert response.status_code == 404

    def test_invalid_quantity(self, client, as_customer, product):
        product("prod-001")
        response = client.post("/cart/items", json={"product_id": "prod-001", "quantity": 0}, headers=as_customer)
        assert response.status_code == 422

    def test_update_item(self, client, as_customer, product):
        product("prod-001", price=10.0)
        item_id = _add_item(client, as_customer)

        response = client.put(f"/cart/items/{item_id}", json={"quantity": 5}, headers=as_customer)

        assert response.status_code == 200
        assert response.json()["total_amount"] == 50.0

    def test_remove_item(self, client, as_customer, product):
        product("prod-001")
        item_id = _add_item(client, as_customer)

        response = client.delete(f"/cart/items/{item_id}", headers=as_customer)

        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_remove_unknown_item(self, client, as_customer):
        response = client.delete("/cart/items/nope", headers=as_customer)
        assert response.status_code == 404

    def test_carts_are_per_customer(self, client, as_customer, as_other_customer, product):
        product("prod-001")
        item_id = _add_item(client, as_customer)

        response = client.delete(f"/cart/items/{item_id}", headers=as_other_customer)

        assert response.status_code == 404
        assert len(client.get("/cart", headers=as_customer).json()["items"]) == 1

    def test_clear_cart(self, client, as_customer, product):
        product("prod-001")
        product("prod-002")
        _add_item(client, as_customer, product_id="prod-001")
        _add_item(client, as_customer, product_id="prod-002")

        response = client.delete("/cart", headers=as_customer)

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["total_amount"] == 0.0
