NEW_PRODUCT = {
    "name": "Pixel 8",
    "brand": "Google",
    "category": "Smartphones",
    "price": 27999,
    "discount": 7,
    "image": "https://placehold.co/400x400?text=Pixel+8",
    "description": "6.2\" OLED",
}


def test_admin_creates_product(client, admin_token, auth):
    res = client.post("/api/admin/products", json=NEW_PRODUCT, headers=auth(admin_token))
    assert res.status_code == 201
    body = res.json()
    assert body["name"] == "Pixel 8"
    assert body["id"]
    assert client.get("/api/products").json()["total"] == 1


def test_admin_create_accepts_legacy_field_names(client, admin_token, auth):
    payload = {"name": "Pixel 8", "price": 27999, "off": 7, "img": "pixel.png"}
    res = client.post("/api/admin/products", json=payload, headers=auth(admin_token))
    assert res.status_code == 201
    body = res.json()
    assert body["discount"] == 7
    assert body["image"] == "pixel.png"


def test_non_admin_is_forbidden(client, user_token, auth):
    res = client.post("/api/admin/products", json=NEW_PRODUCT, headers=auth(user_token))
    assert res.status_code == 403
    assert client.post("/api/admin/products", json=NEW_PRODUCT).status_code == 401


def test_product_validation(client, admin_token, auth):
    bad_price = dict(NEW_PRODUCT, price=-1)
    assert client.post("/api/admin/products", json=bad_price, headers=auth(admin_token)).status_code == 400
    bad_discount = dict(NEW_PRODUCT, discount=150)
    assert client.post("/api/admin/products", json=bad_discount, headers=auth(admin_token)).status_code == 400
    no_name = {k: v for k, v in NEW_PRODUCT.items() if k != "name"}
    assert client.post("/api/admin/products", json=no_name, headers=auth(admin_token)).status_code == 400


def test_admin_updates_product(client, admin_token, auth, products):
    pid = str(products[0]["_id"])
    res = client.put(f"/api/admin/products/{pid}", json={"price": 100, "discount": 50}, headers=auth(admin_token))
    assert res.status_code == 200
    body = res.json()
    assert body["price"] == 100
    assert body["discount"] == 50
    assert body["name"] == products[0]["name"]


def test_update_errors(client, admin_token, auth, products):
    pid = str(products[0]["_id"])
    assert client.put(f"/api/admin/products/{pid}", json={}, headers=auth(admin_token)).status_code == 400
    assert client.put("/api/admin/products/bad", json={"price": 1}, headers=auth(admin_token)).status_code == 400
    missing = client.put("/api/admin/products/0123456789abcdef01234567", json={"price": 1}, headers=auth(admin_token))
    assert missing.status_code == 404


def test_admin_deletes_product(client, admin_token, auth, products):
    pid = str(products[0]["_id"])
    res = client.delete(f"/api/admin/products/{pid}", headers=auth(admin_token))
    assert res.json() == {"ok": True, "id": pid}
    assert client.get(f"/api/products/{pid}").status_code == 404
    assert client.delete(f"/api/admin/products/{pid}", headers=auth(admin_token)).status_code == 404
