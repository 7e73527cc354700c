import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, WebSocket
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

import catalog
import chat
import favorites
import orders
from config import ADMIN_EMAIL, CORS_ORIGINS, INSECURE_DEFAULT_SECRET, LOG_LEVEL, PORT, SECRET_KEY
from database import create_document, db as default_db, ensure_indexes, get_db, to_object_id
from models import (
    AuthResponse,
    CheckoutRequest,
    CheckoutResponse,
    DeleteResponse,
    LoginInput,
    OrderOut,
    ProductIn,
    ProductOut,
    ProductPage,
    ProductUpdate,
    RegisterInput,
    TokenIdentity,
)
from schemas import User as UserSchema
from security import get_current_identity, hash_password, issue_token, require_admin, verify_password

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("megamart")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if SECRET_KEY == INSECURE_DEFAULT_SECRET:
        logger.warning("JWT_SECRET is not set; tokens are signed with the insecure default secret")
    if default_db is None:
        logger.warning("DATABASE_URL is not set; database routes will fail")
    else:
        try:
            ensure_indexes(default_db)
        except PyMongoError as e:
            logger.error("Could not ensure indexes: %s", e)
    yield


app = FastAPI(title="MegaMart API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error handling

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())})


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


# Routes
@app.get("/")
def read_root():
    return {"message": "MegaMart API"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        if default_db is not None:
            response["database"] = "✅ Available"
            response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
            response["database_name"] = default_db.name
            response["connection_status"] = "Connected"
            response["collections"] = default_db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# Auth
@app.post("/api/auth/register", response_model=AuthResponse, status_code=201)
def register(payload: RegisterInput, db: Database = Depends(get_db)):
    email = payload.email.lower()
    if db["user"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="User already exists")
    user_model = UserSchema(
        email=email,
        password_hash=hash_password(payload.password),
        is_admin=email == ADMIN_EMAIL,
    )
    try:
        user_id = create_document(db, "user", user_model)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration of the same email
        raise HTTPException(status_code=400, detail="User already exists")
    user = db["user"].find_one({"_id": to_object_id(user_id)})
    logger.info("Registered %s (admin=%s)", email, user_model.is_admin)
    return AuthResponse(message="Registration successful", token=issue_token(user), email=email, isAdmin=user_model.is_admin)


@app.post("/api/auth/login", response_model=AuthResponse)
def login(payload: LoginInput, db: Database = Depends(get_db)):
    user = db["user"].find_one({"email": payload.email.lower()})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not verify_password(payload.password, user.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Invalid credentials")
    return AuthResponse(message="Login successful", token=issue_token(user), email=user["email"], isAdmin=bool(user.get("is_admin", False)))


@app.get("/api/auth/me", response_model=TokenIdentity)
def me(identity: TokenIdentity = Depends(get_current_identity)):
    return identity


# Products
@app.get("/api/products", response_model=ProductPage)
def list_products(page: int = Query(1, ge=1), limit: int = Query(catalog.DEFAULT_LIMIT, ge=1, le=catalog.MAX_LIMIT), db: Database = Depends(get_db)):
    return catalog.list_products(db, page, limit)


@app.get("/api/products/filter", response_model=ProductPage)
def filter_products(category: Optional[str] = None, brand: Optional[str] = None, page: int = Query(1, ge=1), limit: int = Query(catalog.DEFAULT_LIMIT, ge=1, le=catalog.MAX_LIMIT), db: Database = Depends(get_db)):
    return catalog.filter_products(db, category, brand, page, limit)


@app.get("/api/products/random", response_model=Optional[ProductOut])
def random_product(db: Database = Depends(get_db)):
    return catalog.random_product(db)


@app.get("/api/products/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Database = Depends(get_db)):
    return catalog.get_product(db, product_id)


# Admin
@app.post("/api/admin/products", response_model=ProductOut, status_code=201)
def create_product(data: ProductIn, _: TokenIdentity = Depends(require_admin), db: Database = Depends(get_db)):
    return catalog.create_product(db, data)


@app.put("/api/admin/products/{product_id}", response_model=ProductOut)
def update_product(product_id: str, data: ProductUpdate, _: TokenIdentity = Depends(require_admin), db: Database = Depends(get_db)):
    return catalog.update_product(db, product_id, data)


@app.delete("/api/admin/products/{product_id}", response_model=DeleteResponse)
def delete_product(product_id: str, _: TokenIdentity = Depends(require_admin), db: Database = Depends(get_db)):
    return DeleteResponse(ok=True, id=catalog.delete_product(db, product_id))


# Favorites
@app.get("/api/user/favorites", response_model=List[ProductOut])
def get_favorites(identity: TokenIdentity = Depends(get_current_identity), db: Database = Depends(get_db)):
    return favorites.get_favorites(db, identity.id)


@app.post("/api/user/favorites/{product_id}", response_model=List[ProductOut])
def toggle_favorite(product_id: str, identity: TokenIdentity = Depends(get_current_identity), db: Database = Depends(get_db)):
    return favorites.toggle_favorite(db, identity.id, product_id)


# Orders
@app.post("/api/checkout", response_model=CheckoutResponse, status_code=201)
def checkout(payload: CheckoutRequest, identity: TokenIdentity = Depends(get_current_identity), db: Database = Depends(get_db)):
    return CheckoutResponse(order=orders.checkout(db, identity.id, payload))


@app.get("/api/user/orders", response_model=List[OrderOut])
def list_orders(identity: TokenIdentity = Depends(get_current_identity), db: Database = Depends(get_db)):
    return orders.list_orders(db, identity.id)


# Chat
@app.websocket("/")
async def chat_socket(websocket: WebSocket, completion: chat.CompletionClient = Depends(chat.get_completion_client)):
    await chat.relay(websocket, completion)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
