"""
Database Schemas

Checkout backend models.
Each collection model maps to a MongoDB collection (lowercased class name):
- Product -> "product" collection
- Order -> "order" collection

Money is stored in cents. Field names are snake_case in the database and
camelCase on the wire.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----- Products -----

class Product(ApiModel):
    name: str = Field(..., min_length=1, description="Product name")
    price: int = Field(..., ge=0, description="Unit price in cents")
    image: Optional[str] = Field("/uploads/example.jpeg", description="Image reference")
    description: Optional[str] = Field(None, description="Product description")
    category: Optional[str] = Field(None, description="Category, e.g. 'office', 'kitchen'")


class ProductOut(Product):
    id: str


# ----- Orders -----

class CartItem(ApiModel):
    """Client-submitted line. Any price, name or image sent along is dropped."""
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)


class OrderItem(ApiModel):
    """Catalog snapshot taken when the order was created."""
    product_id: str
    name: str
    unit_price: int = Field(..., ge=0, description="Unit price in cents")
    quantity: int = Field(..., ge=1)
    image: Optional[str] = None


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Order(ApiModel):
    model_config = ConfigDict(use_enum_values=True)

    id: Optional[str] = None
    user: str = Field(..., description="Owner user id")
    items: List[OrderItem] = Field(..., min_length=1)
    subtotal: int = Field(..., ge=0, description="Subtotal in cents")
    tax: int = Field(..., ge=0)
    shipping_fee: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    currency: str = Field("usd", description="ISO currency code")
    client_secret: str
    payment_intent_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ----- Requests / responses -----

class CreateOrderRequest(ApiModel):
    # Presence is checked by the workflow so missing fields get the same 400 messages
    items: Optional[List[CartItem]] = None
    tax: Optional[int] = Field(None, ge=0)
    shipping_fee: Optional[int] = Field(None, ge=0)


class UpdateOrderRequest(ApiModel):
    payment_intent_id: Optional[str] = None


class CreateOrderResponse(ApiModel):
    order: Order
    client_secret: str


class OrderResponse(ApiModel):
    order: Order


class OrderListResponse(ApiModel):
    orders: List[Order]
    count: int


class UpdateOrderResponse(ApiModel):
    order: Order
    payment_intent: str
