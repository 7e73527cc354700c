"""
Client-side application state.

``AppState`` owns the two pieces of durable state, auth and cart. It is
loaded once from ``LocalStorage`` when constructed and written back after
every mutation; nothing else touches the storage file.

``CatalogBrowser`` holds the in-memory browsing state (filter, loaded
products, page, has-more) and is reset whenever the filter changes.
"""

import logging
import os
from typing import List, Optional

import httpx
from jose import JWTError, jwt
from pydantic import BaseModel, Field, ValidationError

from client import ApiError, MalformedResponse, StorefrontClient
from models import AuthResponse, CheckoutItem, OrderOut, ProductOut, ShippingAddress

logger = logging.getLogger(__name__)


class CartLine(BaseModel):
    product: ProductOut
    quantity: int = Field(1, ge=1)


class Cart(BaseModel):
    lines: List[CartLine] = Field(default_factory=list)

    def _find(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product.id == product_id), None)

    def add(self, product: ProductOut, quantity: int = 1) -> None:
        line = self._find(product.id)
        if line:
            line.quantity += quantity
        else:
            self.lines.append(CartLine(product=product, quantity=quantity))

    def decrease(self, product_id: str) -> None:
        line = self._find(product_id)
        if not line:
            return
        if line.quantity > 1:
            line.quantity -= 1
        else:
            self.lines.remove(line)

    def remove(self, product_id: str) -> None:
        self.lines = [line for line in self.lines if line.product.id != product_id]

    def clear(self) -> None:
        self.lines = []

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> float:
        return sum(line.product.price * line.quantity for line in self.lines)

    def checkout_items(self) -> List[CheckoutItem]:
        return [
            CheckoutItem(id=line.product.id, name=line.product.name, price=line.product.price, quantity=line.quantity)
            for line in self.lines
        ]


class AuthState(BaseModel):
    token: Optional[str] = None
    email: Optional[str] = None
    is_admin: bool = False

    @classmethod
    def from_token(cls, token: Optional[str]) -> "AuthState":
        """Read the email and admin flag out of the token without verifying it.

        The server is the only party that checks signatures; an unreadable
        token is treated as signed out.
        """
        if not token:
            return cls()
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            logger.warning("Stored token is unreadable; signing out")
            return cls()
        return cls(token=token, email=claims.get("email"), is_admin=bool(claims.get("isAdmin", False)))

    @property
    def signed_in(self) -> bool:
        return self.token is not None


class PersistedState(BaseModel):
    token: Optional[str] = None
    cart: Cart = Field(default_factory=Cart)


class LocalStorage:
    """JSON file standing in for the browser's local storage."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> PersistedState:
        if not os.path.exists(self.path):
            return PersistedState()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return PersistedState.model_validate_json(f.read())
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable state in %s: %s", self.path, e)
            return PersistedState()

    def save(self, state: PersistedState) -> None:
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(state.model_dump_json())
        os.replace(tmp, self.path)


class AppState:
    def __init__(self, storage: LocalStorage, client: StorefrontClient):
        self.storage = storage
        self.client = client
        persisted = storage.load()
        self.auth = AuthState.from_token(persisted.token)
        self.cart = persisted.cart
        self.client.token = self.auth.token

    def _save(self) -> None:
        self.storage.save(PersistedState(token=self.auth.token, cart=self.cart))

    def _signed_in(self, result: AuthResponse) -> AuthResponse:
        self.auth = AuthState(token=result.token, email=result.email, is_admin=result.isAdmin)
        self.client.token = result.token
        self._save()
        return result

    # Auth

    def register(self, email: str, password: str) -> AuthResponse:
        return self._signed_in(self.client.register(email, password))

    def login(self, email: str, password: str) -> AuthResponse:
        return self._signed_in(self.client.login(email, password))

    def logout(self) -> None:
        self.auth = AuthState()
        self.client.token = None
        self._save()

    # Cart

    def add_to_cart(self, product: ProductOut, quantity: int = 1) -> None:
        self.cart.add(product, quantity)
        self._save()

    def decrease(self, product_id: str) -> None:
        self.cart.decrease(product_id)
        self._save()

    def remove_from_cart(self, product_id: str) -> None:
        self.cart.remove(product_id)
        self._save()

    def clear_cart(self) -> None:
        self.cart.clear()
        self._save()

    def checkout(self, address: ShippingAddress) -> OrderOut:
        if not self.cart.lines:
            raise ValueError("Cart is empty")
        order = self.client.checkout(address, self.cart.checkout_items(), self.cart.total)
        self.clear_cart()
        return order


class CatalogBrowser:
    def __init__(self, client: StorefrontClient, limit: int = 20, threshold: int = 300):
        self.client = client
        self.limit = limit
        self.threshold = threshold
        self.category: Optional[str] = None
        self.brand: Optional[str] = None
        self.products: List[ProductOut] = []
        self.page = 0
        self.has_more = True
        self.loading = False

    def set_filter(self, category: Optional[str] = None, brand: Optional[str] = None) -> None:
        self.category = category
        self.brand = brand
        self.products = []
        self.page = 0
        self.has_more = True
        self.load_more()

    def load_more(self) -> None:
        if self.loading or not self.has_more:
            return
        self.loading = True
        try:
            result = self.client.filter_products(self.category, self.brand, page=self.page + 1, limit=self.limit)
        except (httpx.HTTPError, ApiError, MalformedResponse) as e:
            logger.warning("Catalog load failed: %s", e)
            self.products = []
            self.has_more = False
            return
        finally:
            self.loading = False
        self.products.extend(result.products)
        self.page = result.page
        self.has_more = result.page < result.pages

    def maybe_load_more(self, viewport_bottom: float, content_height: float) -> bool:
        """Load the next page when the viewport is within ``threshold`` of the end."""
        if content_height - viewport_bottom > self.threshold:
            return False
        before = self.page
        self.load_more()
        return self.page != before
