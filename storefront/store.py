# storefront/store.py
"""
Reconciliation engine for the storefront view.

The Store is the only writer of the local products, cart, user and orders.
Cart operations are local and synchronous. Catalog operations touch local
state only after the authority confirmed them. Order operations update local
state right after the authority answered and then refetch the order list.

Synchronized operations are not serialized against each other: two
overlapping place_order() calls can both submit the same cart.
"""
import logging
from collections.abc import Mapping
from typing import Dict, List, Optional, Tuple

from storefront.config import settings
from storefront.schemas.cart import CartItem
from storefront.schemas.order import Order, OrderStatus
from storefront.schemas.product import Product, ProductBase
from storefront.schemas.user import User
from storefront.utils import normalizer
from storefront.utils.gateway import AuthorityGateway, GatewayError

logger = logging.getLogger(__name__)


class Store:
    def __init__(self, gateway: AuthorityGateway, refresh_catalog_after_confirm: Optional[bool] = None):
        self.gateway = gateway
        if refresh_catalog_after_confirm is None:
            refresh_catalog_after_confirm = settings.REFRESH_CATALOG_AFTER_CONFIRM
        self.refresh_catalog_after_confirm = refresh_catalog_after_confirm

        self._products: Dict[str, Product] = {}
        self._cart: Dict[str, CartItem] = {}
        self._orders: List[Order] = []
        self._user: Optional[User] = None
        self.loading = True

    # ---- READ ACCESS ----
    @property
    def products(self) -> Tuple[Product, ...]:
        return tuple(self._products.values())

    @property
    def cart(self) -> Tuple[CartItem, ...]:
        return tuple(self._cart.values())

    @property
    def orders(self) -> Tuple[Order, ...]:
        return tuple(self._orders)

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_admin(self) -> bool:
        return bool(self._user and self._user.is_admin)

    @property
    def cart_total(self) -> float:
        return sum(it.line_total for it in self._cart.values())

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def get_order(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    # ---- IDENTITY ----
    def set_user(self, user: User) -> None:
        self._user = user

    def reset_to_guest(self, user: User) -> None:
        # Degraded mode: no catalog, no orders
        self._user = user
        self._products = {}
        self._orders = []

    def finish_loading(self) -> None:
        self.loading = False

    # ---- CART ----
    def add_to_cart(self, product: Product) -> None:
        existing = self._cart.get(product.id)
        if existing:
            self._cart[product.id] = existing.model_copy(update={"quantity": existing.quantity + 1})
        else:
            self._cart[product.id] = CartItem(product=product, quantity=1)

    def update_cart_quantity(self, product_id: str, quantity: int) -> None:
        existing = self._cart.get(product_id)
        if not existing:
            return
        if quantity <= 0:
            del self._cart[product_id]
        else:
            self._cart[product_id] = existing.model_copy(update={"quantity": quantity})

    def remove_from_cart(self, product_id: str) -> None:
        self._cart.pop(product_id, None)

    def clear_cart(self) -> None:
        self._cart = {}

    # ---- CATALOG ----
    async def load_products(self) -> None:
        data = await self.gateway.list_products()
        self._products = {p.id: p for p in normalizer.decode_products(data)}

    async def refresh_products(self) -> None:
        try:
            await self.load_products()
        except GatewayError as e:
            logger.error(f"Failed to load products: {e}")

    async def add_product(self, product: ProductBase) -> Product:
        try:
            data = await self.gateway.create_product(product)
        except GatewayError as e:
            logger.error(f"Failed to add product: {e}")
            raise

        created = normalizer.decode_product(data)
        # Newest first
        rest = {pid: p for pid, p in self._products.items() if pid != created.id}
        self._products = {created.id: created, **rest}
        return created

    async def remove_product(self, product_id: str) -> None:
        try:
            await self.gateway.delete_product(product_id)
        except GatewayError as e:
            logger.error(f"Failed to remove product: {e}")
            raise

        self._products.pop(product_id, None)

    # ---- ORDERS ----
    async def load_orders(self) -> None:
        user = self._user
        if user is None:
            return
        if user.is_admin:
            data = await self.gateway.list_all_orders()
        else:
            data = await self.gateway.list_user_orders(user.id)
        self._orders = normalizer.decode_orders(data)

    async def refresh_orders(self) -> None:
        try:
            await self.load_orders()
        except GatewayError as e:
            logger.error(f"Failed to load orders: {e}")

    async def place_order(self) -> Optional[Order]:
        user = self._user
        if user is None or not self._cart:
            logger.debug("Nothing to order: no user or empty cart")
            return None

        items = tuple(self._cart.values())
        total = sum(it.line_total for it in items)

        try:
            data = await self.gateway.create_order(user.id, items, total)
        except GatewayError as e:
            logger.error(f"Failed to place order: {e}")
            raise

        created = normalizer.decode_order(data)
        order = Order(
            id=created.id,
            user_id=str(user.id),
            username=user.username,
            items=items,
            total_amount=total,
            status=OrderStatus.PENDING,
            created_at=created.created_at,
        )
        self._orders = [order] + self._orders
        self._cart = {}

        # Authority may have adjusted the order server-side
        await self.refresh_orders()
        return order

    async def process_order(self, order_id: str, approved: bool) -> None:
        new_status = OrderStatus.CONFIRMED if approved else OrderStatus.CANCELED

        try:
            ack = await self.gateway.update_order_status(order_id, new_status.value)
        except GatewayError as e:
            logger.error(f"Failed to process order {order_id}: {e}")
            raise

        applied = new_status
        if isinstance(ack, Mapping):
            applied = normalizer.decode_status(ack.get("status"), default=new_status)

        if applied is new_status:
            self._apply_transition(order_id, new_status)
        else:
            logger.info(f"Authority kept order {order_id} as {applied.value}, requested {new_status.value}")

        await self.refresh_orders()

        # Local catalog removal is not verified against the authority unless asked to
        if approved and applied is new_status and self.refresh_catalog_after_confirm:
            await self.refresh_products()

    def _apply_transition(self, order_id: str, status: OrderStatus) -> None:
        for index, order in enumerate(self._orders):
            if order.id != order_id:
                continue
            if status is OrderStatus.CONFIRMED:
                sold = set(order.product_ids)
                self._products = {pid: p for pid, p in self._products.items() if pid not in sold}
            self._orders[index] = order.model_copy(update={"status": status})
            return
        logger.debug(f"Order {order_id} not present locally, waiting for refresh")
