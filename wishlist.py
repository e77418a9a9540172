"""
Per-user wishlist.

Each user has at most one ``wishlist`` document holding the saved boxes in the
order they were added.
"""
import logging
from typing import Any, Dict, List

from database import now, to_object_id
from errors import ConflictError, NotFoundError
from schemas import WishlistItem

logger = logging.getLogger("surprisetokri.wishlist")


def _saved_ids(db, user_id: str) -> List[str]:
    doc = db["wishlist"].find_one({"user_id": user_id})
    return [i["box_id"] for i in doc.get("items", [])] if doc else []


def get_wishlist(db, user_id: str) -> Dict[str, Any]:
    doc = db["wishlist"].find_one({"user_id": user_id})
    items = []
    for entry in (doc or {}).get("items", []):
        box = db["box"].find_one({"_id": to_object_id(entry["box_id"], "Box")})
        if not box or not box.get("is_active", True):
            continue
        items.append({
            "id": str(box["_id"]),
            "name": box.get("name"),
            "slug": box.get("slug"),
            "price": box.get("price", 0),
            "main_image": box.get("main_image"),
            "category": box.get("category"),
            "stock": box.get("stock", 0),
            "rating": box.get("rating", 0),
            "review_count": box.get("review_count", 0),
            "added_at": entry.get("added_at"),
        })
    return {"items": items, "item_count": len(items)}


def add_item(db, user_id: str, box_id: str) -> Dict[str, Any]:
    box = db["box"].find_one({"_id": to_object_id(box_id, "Box")})
    if not box or not box.get("is_active", True):
        raise NotFoundError("Box not found or not available")
    box_id = str(box["_id"])
    if box_id in _saved_ids(db, user_id):
        raise ConflictError("Item already in wishlist")

    stamp = now()
    item = WishlistItem(box_id=box_id, added_at=stamp).model_dump()
    db["wishlist"].update_one(
        {"user_id": user_id},
        {"$push": {"items": item}, "$set": {"updated_at": stamp}, "$setOnInsert": {"created_at": stamp}},
        upsert=True,
    )
    logger.info("User %s saved box %s", user_id, box_id)
    return item


def remove_item(db, user_id: str, box_id: str) -> None:
    if box_id not in _saved_ids(db, user_id):
        raise NotFoundError("Item not found in wishlist")
    db["wishlist"].update_one({"user_id": user_id},
                              {"$pull": {"items": {"box_id": box_id}}, "$set": {"updated_at": now()}})
