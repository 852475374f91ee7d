# storefront/utils/normalizer.py
"""
Translation between authority wire records and local entities.

Decoders never raise: a malformed record degrades field by field to the
defaults below so that the catalog and order views stay partially usable.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from storefront.schemas.cart import CartItem
from storefront.schemas.order import Order, OrderStatus
from storefront.schemas.product import Product, ProductBase
from storefront.schemas.user import User

logger = logging.getLogger(__name__)

UNKNOWN_USERNAME = "unknown"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_datetime_adapter = TypeAdapter(datetime)


# ---- HELPERS ----
def _as_mapping(raw: Any) -> Mapping[str, Any]:
    return raw if isinstance(raw, Mapping) else {}


def _identity(value: Any, default: str = "0") -> str:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _float(value: Any, default: float = 0.0, minimum: Optional[float] = None) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    if minimum is not None and number < minimum:
        return default
    return number


def _int(value: Any, default: int = 0, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    if minimum is not None and number < minimum:
        return default
    return number


def _bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return default


def _timestamp(value: Any) -> datetime:
    if value is None or isinstance(value, bool):
        return EPOCH
    try:
        parsed = _datetime_adapter.validate_python(value)
    except ValidationError:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _records(raw: Any) -> List[Any]:
    if isinstance(raw, (list, tuple)):
        return list(raw)
    if raw is not None:
        logger.warning(f"Expected a list of records, got {type(raw).__name__}")
    return []


# ---- STATUS ----
def decode_status(token: Any, default: OrderStatus = OrderStatus.PENDING) -> OrderStatus:
    if isinstance(token, str):
        try:
            return OrderStatus(token.strip().upper())
        except ValueError:
            pass
    return default


# ---- USER ----
def decode_user(raw: Any, referral_link: str = "") -> User:
    data = _as_mapping(raw)
    return User(
        id=_int(data.get("id"), 0),
        username=_text(data.get("username")) or UNKNOWN_USERNAME,
        balance=_float(data.get("balance"), 0.0),
        referrals=_int(data.get("referrals"), 0, minimum=0),
        referral_link=referral_link,
        is_admin=_bool(data.get("is_admin"), False),
    )


def encode_user(telegram_id: int, username: str, is_admin: bool) -> dict:
    return {"telegram_id": telegram_id, "username": username, "is_admin": is_admin}


# ---- PRODUCT ----
def decode_product(raw: Any) -> Product:
    data = _as_mapping(raw)
    return Product(
        id=_identity(data.get("id")),
        name=_text(data.get("name")),
        price=_float(data.get("price"), 0.0, minimum=0.0),
        image=_text(data.get("image")),
        description=_text(data.get("description")),
        category=_text(data.get("category")),
        in_stock=_bool(data.get("in_stock"), True),
    )


def decode_products(raw: Any) -> List[Product]:
    return [decode_product(r) for r in _records(raw)]


def encode_product(product: ProductBase) -> dict:
    return {
        "name": product.name,
        "price": product.price,
        "image": product.image,
        "description": product.description,
        "category": product.category,
        "in_stock": product.in_stock,
    }


# ---- CART ITEM (order line) ----
def decode_cart_item(raw: Any) -> CartItem:
    data = _as_mapping(raw)
    return CartItem(
        product=decode_product(data),
        quantity=_int(data.get("quantity"), 1, minimum=1),
    )


def encode_cart_item(item: CartItem) -> dict:
    line = {"id": item.product.id}
    line.update(encode_product(item.product))
    line["quantity"] = item.quantity
    return line


# ---- ORDER ----
def decode_order(raw: Any) -> Order:
    data = _as_mapping(raw)
    username = _text(data.get("username")) or UNKNOWN_USERNAME
    items = tuple(decode_cart_item(r) for r in _records(data.get("items")) if isinstance(r, Mapping))
    return Order(
        id=_identity(data.get("id")),
        user_id=_identity(data.get("user_id"), default=username),
        username=username,
        items=items,
        total_amount=_float(data.get("total_amount"), 0.0, minimum=0.0),
        status=decode_status(data.get("status")),
        created_at=_timestamp(data.get("created_at")),
    )


def decode_orders(raw: Any) -> List[Order]:
    return [decode_order(r) for r in _records(raw)]


def encode_order(user_id: int, items: Iterable[CartItem], total_amount: float) -> dict:
    return {
        "user_id": user_id,
        "items": [encode_cart_item(it) for it in items],
        "total_amount": total_amount,
    }
