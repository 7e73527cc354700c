"""
Database Schemas

MongoDB collection schemas as Pydantic models.
Each Pydantic model represents a collection in your database.
Model name lowercased is the collection name.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field


class Product(BaseModel):
    name: str = Field(..., min_length=1)
    brand: Optional[str] = None
    category: Optional[str] = None
    price: float = Field(..., ge=0)
    # "off" and "img" are the field names used by older catalog exports
    discount: float = Field(0, ge=0, le=100, validation_alias=AliasChoices("discount", "off"), description="Discount percentage")
    image: Optional[str] = Field(None, validation_alias=AliasChoices("image", "img"), description="Image URL or data URI")
    description: Optional[str] = None


class User(BaseModel):
    email: EmailStr = Field(..., description="Email address, stored lowercase")
    password_hash: str = Field(..., description="BCrypt hashed password")
    is_admin: bool = False
    favorites: List[Any] = Field(default_factory=list, description="Product ObjectIds, in the order they were added")


class OrderItem(BaseModel):
    product_id: Any = Field(..., description="Product ObjectId, or the raw id when it is not a well-formed ObjectId")
    name: str = ""
    price: float = Field(..., ge=0, description="Unit price at purchase time")
    quantity: int = Field(..., ge=1)


class Order(BaseModel):
    user_id: Any
    items: List[OrderItem]
    total: float = Field(..., ge=0)
    address: dict = Field(default_factory=dict, description="Shipping address snapshot")
    created_at: Optional[datetime] = None
