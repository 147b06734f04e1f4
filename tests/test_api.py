def _create_item(client, **overrides):
    payload = {"name": "Raw honey", "price": "12.00", "size": 500, "quantity": 5}
    payload.update(overrides)
    response = client.post("/items/", json=payload)
    assert response.status_code == 201
    return response.json()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "farmshop-cart", "database": "ok"}


def test_reserve_update_and_remove_through_api(client):
    item = _create_item(client, quantity=5)

    response = client.post("/carts/u1/items", json={"product_id": item["id"], "quantity": 2})
    assert response.status_code == 201
    cart = response.json()
    assert cart["summary"]["total_items"] == 2
    line_id = cart["items"][0]["id"]
    assert client.get(f"/items/{item['id']}").json()["quantity"] == 3

    response = client.patch(f"/carts/u1/items/{line_id}", json={"quantity": 4})
    assert response.status_code == 200
    assert response.json()["items"][0]["quantity"] == 4
    assert client.get(f"/items/{item['id']}").json()["quantity"] == 1

    response = client.delete(f"/carts/u1/items/{line_id}")
    assert response.status_code == 200
    assert response.json()["items"] == []
    assert client.get(f"/items/{item['id']}").json()["quantity"] == 5


def test_insufficient_stock_is_bad_request(client):
    item = _create_item(client, quantity=1)

    response = client.post("/carts/u1/items", json={"product_id": item["id"], "quantity": 2})

    assert response.status_code == 400
    assert "Only 1 items available" in response.json()["detail"]


def test_unknown_product_is_not_found(client):
    response = client.post("/carts/u1/items", json={"product_id": "nope", "quantity": 1})

    assert response.status_code == 404


def test_zero_quantity_is_rejected_by_validation(client):
    item = _create_item(client)

    response = client.post("/carts/u1/items", json={"product_id": item["id"], "quantity": 0})

    assert response.status_code == 422


def test_missing_cart(client):
    assert client.get("/carts/ghost").status_code == 404
    summary = client.get("/carts/ghost/summary").json()
    assert summary["total_items"] == 0
    assert summary["line_count"] == 0


def test_expired_lines_disappear_on_read(client, clock):
    item = _create_item(client, quantity=5)
    client.post("/carts/u1/items", json={"product_id": item["id"], "quantity": 3})

    clock.advance(hours=24)

    assert client.get("/carts/u1").json()["items"] == []
    assert client.get(f"/items/{item['id']}").json()["quantity"] == 5


def test_clear_cart(client):
    item = _create_item(client, quantity=5)
    client.post("/carts/u1/items", json={"product_id": item["id"], "quantity": 3})

    assert client.delete("/carts/u1/items").status_code == 204
    assert client.get("/carts/u1").json()["items"] == []
    assert client.get(f"/items/{item['id']}").json()["quantity"] == 5


def test_low_stock_endpoint(client):
    _create_item(client, name="Tomatoes", quantity=2)
    _create_item(client, name="Eggs", quantity=50)

    response = client.get("/items/low-stock", params={"threshold": 5})

    assert response.status_code == 200
    assert [(i["name"], i["stock_level"]) for i in response.json()] == [("Tomatoes", "critical")]


def test_adjust_stock_endpoint(client):
    item = _create_item(client, quantity=5)

    assert client.post(f"/items/{item['id']}/stock", json={"delta": 3}).json()["quantity"] == 8
    assert client.post(f"/items/{item['id']}/stock", json={"delta": -9}).status_code == 400


def test_order_lifecycle(client):
    item = _create_item(client, price="6.50", quantity=10)

    response = client.post(
        "/orders/",
        json={
            "customer_name": "Jan Kowalski",
            "customer_email": "jan@example.com",
            "items": [{"item_id": item["id"], "quantity": 4}],
        },
    )
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "pending"
    assert order["total_amount"] == "26.00"

    response = client.patch(f"/orders/{order['id']}/status", json={"status": "fulfilled"})
    assert response.status_code == 200
    assert client.get(f"/items/{item['id']}").json()["quantity"] == 6

    client.patch(f"/orders/{order['id']}/status", json={"status": "cancelled"})
    assert client.get(f"/items/{item['id']}").json()["quantity"] == 10


def test_invalid_order_status_is_rejected(client):
    item = _create_item(client)
    order = client.post(
        "/orders/",
        json={
            "customer_name": "Jan",
            "customer_email": "jan@example.com",
            "items": [{"item_id": item["id"], "quantity": 1}],
        },
    ).json()

    response = client.patch(f"/orders/{order['id']}/status", json={"status": "shipped"})

    assert response.status_code == 400


def test_delete_item_endpoint(client):
    item = _create_item(client)

    assert client.delete(f"/items/{item['id']}").status_code == 204
    assert client.get(f"/items/{item['id']}").status_code == 404
