"""
API request and response models.

One model per endpoint payload. The server uses them as ``response_model``
and the client decodes every response through them.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field

from schemas import Product


# Auth
class RegisterInput(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginInput(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    message: str = ""
    token: str
    email: str
    isAdmin: bool


class TokenIdentity(BaseModel):
    """Claims carried by a bearer token."""

    id: str
    email: str
    isAdmin: bool = False


# Products
class ProductIn(Product):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0, le=100, validation_alias=AliasChoices("discount", "off"))
    image: Optional[str] = Field(None, validation_alias=AliasChoices("image", "img"))
    description: Optional[str] = None


class ProductOut(Product):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductPage(BaseModel):
    products: List[ProductOut]
    total: int
    page: int
    pages: int


class DeleteResponse(BaseModel):
    ok: bool
    id: str


# Checkout / orders
class ShippingAddress(BaseModel):
    name: str = ""
    phone: str = ""
    email: str = ""
    country: str = ""
    city: str = ""
    address: str = ""


class CheckoutItem(BaseModel):
    id: str = Field(..., min_length=1, description="Product id")
    name: str = ""
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class CheckoutRequest(BaseModel):
    user: ShippingAddress
    products: List[CheckoutItem] = Field(..., min_length=1)
    total: float = Field(..., ge=0)


class OrderItemOut(BaseModel):
    product_id: str
    name: str = ""
    price: float
    quantity: int
    product: Optional[ProductOut] = None


class OrderOut(BaseModel):
    id: str
    user_id: str
    items: List[OrderItemOut]
    total: float
    address: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class CheckoutResponse(BaseModel):
    order: OrderOut


# Chat
class ChatFrame(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field("bot", alias="from")
    text: str
