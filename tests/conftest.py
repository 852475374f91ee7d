import itertools

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import storefront.models.order  # noqa: F401
import storefront.models.product  # noqa: F401
import storefront.models.users  # noqa: F401
from storefront.database import Base, get_db
from storefront.main import app
from storefront.schemas.product import Product
from storefront.schemas.user import User
from storefront.store import Store
from storefront.utils.gateway import AuthorityGateway, GatewayError
from storefront.utils.normalizer import encode_cart_item, encode_product

CREATED_AT = "2026-01-02T03:04:05+00:00"


class FakeGateway:
    """In-memory authority double that records calls and fails on demand."""

    def __init__(self):
        self.calls = []
        self.fail = set()
        self.products = []
        self.orders = []
        self.usernames = {}
        self.next_order_id = None
        self.status_override = {}
        self._ids = itertools.count(100)

    def _record(self, name, *args):
        self.calls.append((name, args))
        if name in self.fail:
            raise GatewayError(name, f"Failed to {name}")

    def call_names(self):
        return [name for name, _ in self.calls]

    async def get_or_create_user(self, telegram_id, username, is_admin):
        self._record("get_or_create_user", telegram_id, username, is_admin)
        user_id = telegram_id + 1000
        self.usernames[user_id] = username
        return {"id": user_id, "username": username, "balance": 12.5, "referrals": 3, "is_admin": is_admin}

    async def list_products(self):
        self._record("list_products")
        return list(self.products)

    async def create_product(self, product):
        self._record("create_product", product)
        record = {"id": next(self._ids), **encode_product(product)}
        self.products.insert(0, record)
        return record

    async def delete_product(self, product_id):
        self._record("delete_product", product_id)
        self.products = [p for p in self.products if str(p["id"]) != product_id]
        return {"ok": True}

    async def list_all_orders(self):
        self._record("list_all_orders")
        return [dict(o) for o in self.orders]

    async def list_user_orders(self, user_id):
        self._record("list_user_orders", user_id)
        return [dict(o) for o in self.orders if o["user_id"] == user_id]

    async def create_order(self, user_id, items, total_amount):
        self._record("create_order", user_id, tuple(items), total_amount)
        order_id = self.next_order_id if self.next_order_id is not None else next(self._ids)
        self.next_order_id = None
        record = {
            "id": order_id,
            "user_id": user_id,
            "username": self.usernames.get(user_id, "alice"),
            "items": [encode_cart_item(it) for it in items],
            "total_amount": total_amount,
            "status": "PENDING",
            "created_at": CREATED_AT,
        }
        self.orders.insert(0, record)
        return record

    async def update_order_status(self, order_id, status):
        self._record("update_order_status", order_id, status)
        for record in self.orders:
            if str(record["id"]) == order_id:
                record["status"] = self.status_override.get(order_id, status)
                return dict(record)
        return {"ok": True}


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store(gateway):
    return Store(gateway, refresh_catalog_after_confirm=False)


@pytest.fixture
def alice():
    return User(id=1, username="alice", referral_link="https://t.me/ResellHubBot?start=7")


@pytest.fixture
def lamp():
    return Product(id="1", name="Lamp", price=10.0, category="Home")


@pytest.fixture
def desk():
    return Product(id="2", name="Desk", price=5.0, category="Home")


@pytest.fixture
def chair():
    return Product(id="3", name="Chair", price=7.5, category="Home")


# ---- Reference authority over ASGI ----
@pytest.fixture
def authority_db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield engine
    app.dependency_overrides.pop(get_db, None)
    engine.dispose()


@pytest.fixture
def authority_gateway(authority_db):
    return AuthorityGateway(
        base_url="http://authority/api",
        timeout=5.0,
        transport=httpx.ASGITransport(app=app),
    )
