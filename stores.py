"""Persistence ports for products and orders, plus their MongoDB adapters.

The workflow only talks to ProductCatalog and OrderStore, so tests can swap
in in-memory versions without touching any order logic.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from database import create_document, get_documents, now, to_object_id, to_str_id
from schemas import Order, Product, ProductOut


class ProductCatalog(ABC):
    """Read side of the product collection used for pricing."""

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Optional[ProductOut]:
        """Return the product, or None when no such product exists."""
        ...

    @abstractmethod
    async def find_all(self) -> List[ProductOut]:
        ...

    @abstractmethod
    async def insert(self, product: Product) -> ProductOut:
        ...


class OrderStore(ABC):
    """Persistence of order records."""

    @abstractmethod
    async def insert(self, order: Order) -> Order:
        """Persist a new order and return it with its id and timestamps set."""
        ...

    @abstractmethod
    async def find_by_id(self, order_id: str) -> Optional[Order]:
        ...

    @abstractmethod
    async def find_all(self) -> List[Order]:
        ...

    @abstractmethod
    async def find_by_owner(self, owner_id: str) -> List[Order]:
        ...

    @abstractmethod
    async def save(self, order: Order) -> Order:
        """Write an existing order back under the same id."""
        ...


class MongoProductCatalog(ProductCatalog):
    collection = "product"

    def __init__(self, database) -> None:
        self.database = database

    async def find_by_id(self, product_id: str) -> Optional[ProductOut]:
        _id = to_object_id(product_id)
        if _id is None:
            return None
        doc = await self.database[self.collection].find_one({"_id": _id})
        if not doc:
            return None
        return ProductOut(**to_str_id(doc))

    async def find_all(self) -> List[ProductOut]:
        docs = await get_documents(self.database, self.collection)
        return [ProductOut(**to_str_id(d)) for d in docs]

    async def insert(self, product: Product) -> ProductOut:
        new_id = await create_document(self.database, self.collection, product)
        return ProductOut(id=new_id, **product.model_dump())


class MongoOrderStore(OrderStore):
    collection = "order"

    def __init__(self, database) -> None:
        self.database = database

    async def insert(self, order: Order) -> Order:
        new_id = await create_document(self.database, self.collection, order)
        return await self.find_by_id(new_id)

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        _id = to_object_id(order_id)
        if _id is None:
            return None
        doc = await self.database[self.collection].find_one({"_id": _id})
        if not doc:
            return None
        return Order(**to_str_id(doc))

    async def find_all(self) -> List[Order]:
        docs = await get_documents(self.database, self.collection)
        return [Order(**to_str_id(d)) for d in docs]

    async def find_by_owner(self, owner_id: str) -> List[Order]:
        docs = await get_documents(self.database, self.collection, {"user": owner_id})
        return [Order(**to_str_id(d)) for d in docs]

    async def save(self, order: Order) -> Order:
        order.updated_at = now()
        data = order.model_dump(exclude={"id"})
        await self.database[self.collection].replace_one({"_id": to_object_id(order.id)}, data)
        return order
