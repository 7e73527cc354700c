from bson import ObjectId

from catalog import resolve_products
from database import get_documents
from seed import import_products


def test_list_paginates(client, products):
    res = client.get("/api/products", params={"page": 1, "limit": 4})
    body = res.json()
    assert res.status_code == 200
    assert body["total"] == len(products)
    assert body["page"] == 1
    assert body["pages"] == 2
    assert len(body["products"]) == 4

    second = client.get("/api/products", params={"page": 2, "limit": 4}).json()
    assert len(second["products"]) == len(products) - 4
    seen = {p["id"] for p in body["products"]} | {p["id"] for p in second["products"]}
    assert seen == {str(p["_id"]) for p in products}


def test_list_defaults(client, products):
    body = client.get("/api/products").json()
    assert body["page"] == 1
    assert body["pages"] == 1
    assert body["products"][0]["name"] == products[0]["name"]
    assert "_id" not in body["products"][0]


def test_list_rejects_bad_paging(client):
    assert client.get("/api/products", params={"page": 0}).status_code == 400
    assert client.get("/api/products", params={"limit": 0}).status_code == 400
    assert client.get("/api/products", params={"limit": "abc"}).status_code == 400


def test_filter_by_category_is_case_insensitive_partial(client, products):
    body = client.get("/api/products/filter", params={"category": "smart"}).json()
    assert body["total"] == 3
    assert {p["category"] for p in body["products"]} == {"Smartphones"}


def test_filter_by_brand_and_category(client, products):
    body = client.get("/api/products/filter", params={"category": "smartphones", "brand": "APPLE"}).json()
    assert body["total"] == 1
    assert body["products"][0]["name"] == "iPhone 15"


def test_filter_ignores_undefined(client, products):
    body = client.get("/api/products/filter", params={"category": "undefined", "brand": "undefined"}).json()
    assert body["total"] == len(products)


def test_filter_without_matches(client, products):
    body = client.get("/api/products/filter", params={"category": "Furniture"}).json()
    assert body == {"products": [], "total": 0, "page": 1, "pages": 0}


def test_filter_matches_literally(client, products):
    body = client.get("/api/products/filter", params={"brand": "S.ny"}).json()
    assert body["total"] == 0
    assert client.get("/api/products/filter", params={"brand": "(["}).status_code == 200


def test_random_on_empty_catalog_is_null(client):
    res = client.get("/api/products/random")
    assert res.status_code == 200
    assert res.json() is None


def test_random_returns_a_catalog_product(client, products):
    ids = {str(p["_id"]) for p in products}
    for _ in range(5):
        assert client.get("/api/products/random").json()["id"] in ids


def test_get_product(client, products):
    pid = str(products[0]["_id"])
    assert client.get(f"/api/products/{pid}").json()["id"] == pid
    assert client.get("/api/products/not-an-id").status_code == 400
    assert client.get("/api/products/0123456789abcdef01234567").status_code == 404


def test_import_replaces_catalog(db, products):
    assert import_products(db, [{"name": "Only", "price": 1}]) == 1
    assert [p["name"] for p in db["product"].find({})] == ["Only"]


def test_import_accepts_legacy_field_names(db):
    assert import_products(db, [{"name": "X", "price": 1, "off": 15, "img": "x.png"}]) == 1
    doc = db["product"].find_one({"name": "X"})
    assert doc["discount"] == 15
    assert doc["image"] == "x.png"
    assert "off" not in doc and "img" not in doc


def test_get_documents_filters_and_limits(db, products):
    phones = get_documents(db, "product", {"category": "Smartphones"})
    assert sorted(p["name"] for p in phones) == ["Galaxy S24", "Redmi Note 13", "iPhone 15"]
    assert len(get_documents(db, "product", limit=2)) == 2
    assert len(get_documents(db, "product")) == len(products)


def test_resolve_products_skips_missing_and_malformed_ids(db, products):
    first = products[0]["_id"]
    resolved = resolve_products(db, [str(first), str(ObjectId()), "not-an-id"])
    assert list(resolved) == [first]
    assert resolved[first].name == products[0]["name"]
    assert resolve_products(db, ["not-an-id"]) == {}
