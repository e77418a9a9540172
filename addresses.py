"""
Address book with a single default address per user.

Once a user has any address, exactly one of them is the default: the first
address is always the default, and deleting the default promotes the
earliest-created remaining address.
"""
import logging
from typing import Any, Dict, List

from database import create_document, now, serialize, to_object_id
from errors import NotFoundError
from schemas import Address, PostalAddress

logger = logging.getLogger("surprisetokri.addresses")

EDITABLE_FIELDS = set(PostalAddress.model_fields) | {"type"}


def _find(db, user_id: str, address_id: str) -> Dict[str, Any]:
    doc = db["address"].find_one({"_id": to_object_id(address_id, "Address"), "user_id": user_id})
    if not doc:
        raise NotFoundError("Address not found")
    return doc


def _make_default(db, user_id: str, address_oid) -> None:
    db["address"].update_many({"user_id": user_id, "_id": {"$ne": address_oid}},
                              {"$set": {"is_default": False, "updated_at": now()}})
    db["address"].update_one({"_id": address_oid}, {"$set": {"is_default": True, "updated_at": now()}})


def list_addresses(db, user_id: str) -> List[Dict[str, Any]]:
    cursor = db["address"].find({"user_id": user_id}).sort([("is_default", -1), ("created_at", -1), ("_id", -1)])
    return [serialize(a) for a in cursor]


def add_address(db, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    is_first = db["address"].count_documents({"user_id": user_id}) == 0
    wants_default = bool(fields.get("is_default")) or is_first
    data = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
    address = Address(user_id=user_id, is_default=False, **data)
    address_id = create_document(db, "address", address)
    oid = to_object_id(address_id)
    if wants_default:
        _make_default(db, user_id, oid)
    return serialize(db["address"].find_one({"_id": oid}))


def update_address(db, user_id: str, address_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    current = _find(db, user_id, address_id)
    changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None}
    merged = {k: current.get(k) for k in EDITABLE_FIELDS if k in current} | changes
    Address(user_id=user_id, **merged)
    db["address"].update_one({"_id": current["_id"]}, {"$set": changes | {"updated_at": now()}})
    # clearing the flag on the current default is ignored
    if fields.get("is_default"):
        _make_default(db, user_id, current["_id"])
    return serialize(db["address"].find_one({"_id": current["_id"]}))


def set_default(db, user_id: str, address_id: str) -> Dict[str, Any]:
    current = _find(db, user_id, address_id)
    _make_default(db, user_id, current["_id"])
    logger.info("Default address for user %s set to %s", user_id, address_id)
    return serialize(db["address"].find_one({"_id": current["_id"]}))


def delete_address(db, user_id: str, address_id: str) -> None:
    current = _find(db, user_id, address_id)
    db["address"].delete_one({"_id": current["_id"]})
    if not current.get("is_default"):
        return
    remaining = list(db["address"].find({"user_id": user_id}).sort([("created_at", 1), ("_id", 1)]).limit(1))
    if remaining:
        _make_default(db, user_id, remaining[0]["_id"])
        logger.info("Promoted address %s to default for user %s", remaining[0]["_id"], user_id)
