"""
MongoDB access

The async client is created once per process from DATABASE_URL /
DATABASE_NAME. When DATABASE_URL is not set ``db`` stays None and anything
needing storage fails with DatabaseNotConfigured.
"""
import os
from datetime import datetime, timezone
from typing import List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel
from pymongo import AsyncMongoClient

from errors import DatabaseNotConfigured

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "checkout")

client = AsyncMongoClient(DATABASE_URL, tz_aware=True) if DATABASE_URL else None
db = client[DATABASE_NAME] if client is not None else None


def require_db():
    if db is None:
        raise DatabaseNotConfigured()
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def to_str_id(doc: Optional[dict]) -> Optional[dict]:
    if not doc:
        return doc
    d = dict(doc)
    if d.get("_id") is not None:
        d["id"] = str(d.pop("_id"))
    return d


def to_object_id(id_str: str) -> Optional[ObjectId]:
    """Parse an id string; malformed ids can never match a document, so they map to None."""
    if not ObjectId.is_valid(id_str):
        return None
    return ObjectId(id_str)


async def create_document(database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude={"id"})
    else:
        data = dict(data)
    data.pop("id", None)
    stamp = now()
    data["created_at"] = stamp
    data["updated_at"] = stamp
    result = await database[collection_name].insert_one(data)
    return str(result.inserted_id)


async def get_documents(database, collection_name: str, filter_dict: Optional[dict] = None) -> List[dict]:
    cursor = database[collection_name].find(filter_dict or {}).sort("created_at", -1)
    return await cursor.to_list()
