"""
MongoDB access helpers.

The connection is opened once at import from DATABASE_URL / DATABASE_NAME.
Request handlers receive the database through the ``get_db`` dependency so
tests can swap in an in-memory database.
"""
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo import MongoClient
from pydantic import BaseModel

from errors import InternalError, NotFoundError

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")


def ensure_indexes(database) -> None:
    database["user"].create_index("email", unique=True)
    database["box"].create_index("slug", unique=True)
    database["cartitem"].create_index([("user_id", 1), ("box_id", 1)], unique=True)
    database["review"].create_index([("user_id", 1), ("box_id", 1)], unique=True)
    database["order"].create_index("order_number", unique=True)
    database["order"].create_index("tracking_number", unique=True)
    database["address"].create_index("user_id")
    database["wishlist"].create_index("user_id", unique=True)
    database["supportticket"].create_index("ticket_number", unique=True)


client = MongoClient(DATABASE_URL, tz_aware=True) if DATABASE_URL and DATABASE_NAME else None
db = client[DATABASE_NAME] if client is not None else None
if db is not None:
    ensure_indexes(db)


def get_db():
    if db is None:
        raise InternalError("Database not configured")
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # stored datetimes may come back naive depending on the driver
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_object_id(id_str: str, what: str = "Document") -> ObjectId:
    """Parse an id from a URL; malformed ids are reported as not found."""
    if isinstance(id_str, ObjectId):
        return id_str
    if not id_str or not ObjectId.is_valid(id_str):
        raise NotFoundError(f"{what} not found")
    return ObjectId(id_str)


def create_document(database, collection_name: str, data) -> str:
    if isinstance(data, BaseModel):
        data = data.model_dump()
    doc = dict(data)
    stamp = now()
    doc.setdefault("created_at", stamp)
    doc["updated_at"] = stamp
    result = database[collection_name].insert_one(doc)
    return str(result.inserted_id)


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def next_sequence_number(database, collection_name: str, field: str, prefix: str) -> str:
    """Daily human-readable numbers such as ORD-20240131-007."""
    day = now().strftime("%Y%m%d")
    stem = f"{prefix}-{day}-"
    seq = database[collection_name].count_documents({field: {"$regex": f"^{stem}"}}) + 1
    while database[collection_name].find_one({field: f"{stem}{seq:03d}"}):
        seq += 1
    return f"{stem}{seq:03d}"


def paginate(total: int, page: int, limit: int) -> Dict[str, Any]:
    total_pages = (total + limit - 1) // limit if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total": total,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
