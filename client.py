"""
HTTP client for the MegaMart API.

Every response is decoded through the endpoint's pydantic model. A body that
does not fit raises ``MalformedResponse``; a non-2xx status raises
``ApiError``.
"""

from typing import Any, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from models import (
    AuthResponse,
    CheckoutItem,
    CheckoutRequest,
    CheckoutResponse,
    DeleteResponse,
    OrderOut,
    ProductIn,
    ProductOut,
    ProductPage,
    ProductUpdate,
    ShippingAddress,
)


class ApiError(Exception):
    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class MalformedResponse(Exception):
    pass


class StorefrontClient:
    def __init__(self, base_url: str = "http://localhost:8000", token: Optional[str] = None, http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _headers(self, auth: bool) -> dict:
        if not auth:
            return {}
        if not self.token:
            raise ApiError(401, "Not signed in")
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, schema: Any, auth: bool = False, **kwargs) -> Any:
        response = self.http.request(method, path, headers=self._headers(auth), **kwargs)
        if response.is_error:
            try:
                detail = response.json().get("detail")
            except (ValueError, AttributeError):
                detail = response.text
            raise ApiError(response.status_code, detail)
        try:
            return TypeAdapter(schema).validate_json(response.content)
        except ValidationError as e:
            raise MalformedResponse(f"{method} {path}: {e}") from e

    # Auth

    def register(self, email: str, password: str) -> AuthResponse:
        result = self._request("POST", "/api/auth/register", AuthResponse, json={"email": email, "password": password})
        self.token = result.token
        return result

    def login(self, email: str, password: str) -> AuthResponse:
        result = self._request("POST", "/api/auth/login", AuthResponse, json={"email": email, "password": password})
        self.token = result.token
        return result

    # Catalog

    def list_products(self, page: int = 1, limit: int = 20) -> ProductPage:
        return self._request("GET", "/api/products", ProductPage, params={"page": page, "limit": limit})

    def filter_products(self, category: Optional[str] = None, brand: Optional[str] = None, page: int = 1, limit: int = 20) -> ProductPage:
        params = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        if brand:
            params["brand"] = brand
        return self._request("GET", "/api/products/filter", ProductPage, params=params)

    def random_product(self) -> Optional[ProductOut]:
        return self._request("GET", "/api/products/random", Optional[ProductOut])

    def get_product(self, product_id: str) -> ProductOut:
        return self._request("GET", f"/api/products/{product_id}", ProductOut)

    # Admin

    def create_product(self, product: ProductIn) -> ProductOut:
        return self._request("POST", "/api/admin/products", ProductOut, auth=True, json=product.model_dump())

    def update_product(self, product_id: str, changes: ProductUpdate) -> ProductOut:
        return self._request("PUT", f"/api/admin/products/{product_id}", ProductOut, auth=True, json=changes.model_dump(exclude_unset=True))

    def delete_product(self, product_id: str) -> DeleteResponse:
        return self._request("DELETE", f"/api/admin/products/{product_id}", DeleteResponse, auth=True)

    # Account

    def favorites(self) -> List[ProductOut]:
        return self._request("GET", "/api/user/favorites", List[ProductOut], auth=True)

    def toggle_favorite(self, product_id: str) -> List[ProductOut]:
        return self._request("POST", f"/api/user/favorites/{product_id}", List[ProductOut], auth=True)

    def checkout(self, address: ShippingAddress, items: List[CheckoutItem], total: float) -> OrderOut:
        payload = CheckoutRequest(user=address, products=items, total=total)
        return self._request("POST", "/api/checkout", CheckoutResponse, auth=True, json=payload.model_dump()).order

    def orders(self) -> List[OrderOut]:
        return self._request("GET", "/api/user/orders", List[OrderOut], auth=True)
