import os

# Must be set before the application modules read their configuration
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["OPENROUTER_KEY"] = ""
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ADMIN_EMAIL"] = "admin@megamart.com"

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import ensure_indexes, get_db
from main import app
from seed import SAMPLE_PRODUCTS, import_products


@pytest.fixture
def db():
    database = mongomock.MongoClient()["megamart_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def products(db):
    import_products(db, SAMPLE_PRODUCTS)
    return list(db["product"].find({}))


@pytest.fixture
def auth():
    def _auth(token):
        return {"Authorization": f"Bearer {token}"}
    return _auth


@pytest.fixture
def user_token(client):
    res = client.post("/api/auth/register", json={"email": "buyer@example.com", "password": "secret"})
    assert res.status_code == 201
    return res.json()["token"]


@pytest.fixture
def admin_token(client):
    res = client.post("/api/auth/register", json={"email": "admin@megamart.com", "password": "secret"})
    assert res.status_code == 201
    return res.json()["token"]
