import os

os.environ.setdefault("ENVIRONMENT", "test")

from typing import Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from database import now
from errors import PaymentError
from payments import FakePaymentIntentService, PaymentIntent
from schemas import Order, Product, ProductOut
from stores import OrderStore, ProductCatalog

OWNER_ID = "507f1f77bcf86cd799439012"
OTHER_USER_ID = "507f1f77bcf86cd799439013"


class InMemoryProductCatalog(ProductCatalog):
    def __init__(self) -> None:
        self.products: Dict[str, ProductOut] = {}
        self.lookups: List[str] = []

    def add(self, product_id: Optional[str] = None, **fields) -> ProductOut:
        product_id = product_id or str(ObjectId())
        product = ProductOut(id=product_id, **Product(**fields).model_dump())
        self.products[product_id] = product
        return product

    async def find_by_id(self, product_id: str) -> Optional[ProductOut]:
        self.lookups.append(product_id)
        product = self.products.get(product_id)
        return product.model_copy() if product else None

    async def find_all(self) -> List[ProductOut]:
        return [p.model_copy() for p in self.products.values()]

    async def insert(self, product: Product) -> ProductOut:
        return self.add(**product.model_dump())


class RecordingPaymentIntentService(FakePaymentIntentService):
    """Fake provider that records its calls and can be told to fail."""

    def __init__(self) -> None:
        self.should_succeed = True
        self.failure_reason = "Payment provider unavailable"
        self.calls: List[dict] = []
        self.cancelled: List[str] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment provider unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    async def create_intent(self, amount: int, currency: str) -> PaymentIntent:
        self.calls.append({"method": "create_intent", "amount": amount, "currency": currency})
        if not self.should_succeed:
            raise PaymentError(self.failure_reason)
        return await super().create_intent(amount, currency)

    async def cancel_intent(self, intent_id: str) -> None:
        self.calls.append({"method": "cancel_intent", "intent_id": intent_id})
        self.cancelled.append(intent_id)
        await super().cancel_intent(intent_id)


class InMemoryOrderStore(OrderStore):
    def __init__(self) -> None:
        self.orders: Dict[str, Order] = {}
        self.saves = 0
        self.fail_on_insert = False

    async def insert(self, order: Order) -> Order:
        if self.fail_on_insert:
            raise ConnectionError("order collection unavailable")
        stamp = now()
        stored = order.model_copy(update={"id": str(ObjectId()), "created_at": stamp, "updated_at": stamp}, deep=True)
        self.orders[stored.id] = stored
        return stored.model_copy(deep=True)

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        order = self.orders.get(order_id)
        return order.model_copy(deep=True) if order else None

    async def find_all(self) -> List[Order]:
        return [o.model_copy(deep=True) for o in self.orders.values()]

    async def find_by_owner(self, owner_id: str) -> List[Order]:
        return [o.model_copy(deep=True) for o in self.orders.values() if o.user == owner_id]

    async def save(self, order: Order) -> Order:
        assert order.id in self.orders
        self.saves += 1
        order.updated_at = now()
        self.orders[order.id] = order.model_copy(deep=True)
        return order


@pytest.fixture()
def catalog():
    return InMemoryProductCatalog()


@pytest.fixture()
def order_store():
    return InMemoryOrderStore()


@pytest.fixture()
def payments():
    return RecordingPaymentIntentService()


@pytest.fixture()
def client(catalog, order_store, payments):
    from main import app, get_catalog, get_order_store, get_payments

    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_order_store] = lambda: order_store
    app.dependency_overrides[get_payments] = lambda: payments
    yield TestClient(app)
    app.dependency_overrides.clear()


def user_headers(user_id: str = OWNER_ID, role: str = "user") -> dict:
    return {"X-User-Id": user_id, "X-User-Role": role}


def admin_headers() -> dict:
    return user_headers("507f1f77bcf86cd7994390aa", "admin")
