ADDRESS = {
    "name": "Olena Koval",
    "phone": "+380000000000",
    "email": "buyer@example.com",
    "country": "Ukraine",
    "city": "Kyiv",
    "address": "Khreshchatyk 1",
}


def test_checkout_keeps_declared_total(client, db, user_token, auth):
    payload = {"user": ADDRESS, "products": [{"id": "p1", "price": 100, "quantity": 2}], "total": 200}
    res = client.post("/api/checkout", json=payload, headers=auth(user_token))
    assert res.status_code == 201
    order = res.json()["order"]
    assert order["total"] == 200
    assert order["items"][0]["product_id"] == "p1"
    assert order["items"][0]["product"] is None
    assert order["address"]["city"] == "Kyiv"

    stored = db["order"].find_one({})
    assert stored["total"] == 200


def test_checkout_does_not_reprice(client, db, user_token, auth, products):
    pid = str(products[0]["_id"])
    payload = {"user": ADDRESS, "products": [{"id": pid, "name": "Cheap", "price": 1, "quantity": 3}], "total": 1}
    order = client.post("/api/checkout", json=payload, headers=auth(user_token)).json()["order"]
    assert order["total"] == 1
    assert order["items"][0]["name"] == "Cheap"
    assert order["items"][0]["price"] == 1
    assert order["items"][0]["product"]["id"] == pid


def test_checkout_validation(client, user_token, auth):
    empty = {"user": ADDRESS, "products": [], "total": 0}
    assert client.post("/api/checkout", json=empty, headers=auth(user_token)).status_code == 400
    zero_qty = {"user": ADDRESS, "products": [{"id": "p1", "price": 1, "quantity": 0}], "total": 0}
    assert client.post("/api/checkout", json=zero_qty, headers=auth(user_token)).status_code == 400
    no_total = {"user": ADDRESS, "products": [{"id": "p1", "price": 1, "quantity": 1}]}
    assert client.post("/api/checkout", json=no_total, headers=auth(user_token)).status_code == 400


def test_orders_newest_first_and_per_user(client, user_token, auth, products):
    for total in (10, 20, 30):
        payload = {"user": ADDRESS, "products": [{"id": str(products[0]["_id"]), "price": total, "quantity": 1}], "total": total}
        client.post("/api/checkout", json=payload, headers=auth(user_token))

    res = client.get("/api/user/orders", headers=auth(user_token))
    assert res.status_code == 200
    assert [o["total"] for o in res.json()] == [30, 20, 10]
    assert res.json()[0]["items"][0]["product"]["name"] == products[0]["name"]

    other = client.post("/api/auth/register", json={"email": "other@example.com", "password": "pw"}).json()["token"]
    assert client.get("/api/user/orders", headers=auth(other)).json() == []


def test_order_survives_product_deletion(client, db, user_token, auth, products):
    pid = str(products[0]["_id"])
    payload = {"user": ADDRESS, "products": [{"id": pid, "name": products[0]["name"], "price": 5, "quantity": 1}], "total": 5}
    client.post("/api/checkout", json=payload, headers=auth(user_token))
    db["product"].delete_one({"_id": products[0]["_id"]})

    item = client.get("/api/user/orders", headers=auth(user_token)).json()[0]["items"][0]
    assert item["product"] is None
    assert item["name"] == products[0]["name"]
