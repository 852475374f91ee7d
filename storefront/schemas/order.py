from pydantic import BaseModel, ConfigDict, Field
from typing import List, Tuple
from datetime import datetime
import enum

from storefront.schemas.cart import CartItem


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


# Order as held in local state; items are snapshots taken at placement time
class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    username: str
    items: Tuple[CartItem, ...] = ()
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime

    @property
    def product_ids(self) -> List[str]:
        return [it.product.id for it in self.items]


# Wire schema for one priced line of an order
class OrderLine(BaseModel):
    id: str
    name: str
    price: float = Field(ge=0)
    image: str = ""
    description: str = ""
    category: str = ""
    in_stock: bool = True
    quantity: int = Field(ge=1)


# Input schema for creating a new order on the authority
class OrderCreatePayload(BaseModel):
    user_id: int
    items: List[OrderLine]
    total_amount: float = Field(ge=0)


# Output schema representing the full order record
class OrderResponse(BaseModel):
    id: int
    user_id: int
    username: str
    items: List[OrderLine]
    total_amount: float
    status: OrderStatus
    created_at: datetime


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: str
