# app/models.py
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # wire format is camelCase, attributes stay snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(CamelModel):
    id: str
    name: str


class Product(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    currency: str = "USD"
    category_id: str
    tags: List[str] = Field(default_factory=list)
    in_stock: bool = True
    image_url: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, tags: List[str]) -> List[str]:
        return list(dict.fromkeys(tags))


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItem(CamelModel):
    product_id: str
    quantity: int = Field(ge=1, le=99)
    unit_price: float


class Order(CamelModel):
    id: str
    customer_email: str
    items: List[OrderItem]
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    created_at: str
    updated_at: str
