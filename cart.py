"""
Per-user cart.

Lines live in the ``cartitem`` collection, one per (user, box). The applied
coupon is kept on the user's ``cart`` document. Summaries are always computed
from the current box prices.
"""
import logging
from typing import Any, Dict, List, Optional

import config
from database import now, serialize, to_object_id
from errors import InvalidQuantity, NotFoundError, OutOfStock, ValidationError
from pricing import compute_summary, resolve_coupon

logger = logging.getLogger("surprisetokri.cart")


def _active_box(db, box_id: str) -> Dict[str, Any]:
    box = db["box"].find_one({"_id": to_object_id(box_id, "Box")})
    if not box or not box.get("is_active", True):
        raise NotFoundError("Box not found or not available")
    return box


def _check_quantity(box: Dict[str, Any], quantity: int) -> None:
    if quantity > config.MAX_ITEM_QUANTITY:
        raise ValidationError(f"Cannot add more than {config.MAX_ITEM_QUANTITY} of the same item")
    stock = int(box.get("stock", 0))
    if quantity > stock:
        raise OutOfStock(f"Only {stock} items available in stock")


def _find_line(db, user_id: str, item_id: str) -> Dict[str, Any]:
    line = db["cartitem"].find_one({"_id": to_object_id(item_id, "Cart item"), "user_id": user_id})
    if not line:
        raise NotFoundError("Cart item not found")
    return line


def add_item(db, user_id: str, box_id: str, quantity: int = 1) -> Dict[str, Any]:
    quantity = max(1, int(quantity))
    box = _active_box(db, box_id)
    box_id = str(box["_id"])
    existing = db["cartitem"].find_one({"user_id": user_id, "box_id": box_id})
    new_quantity = quantity + (existing["quantity"] if existing else 0)
    _check_quantity(box, new_quantity)

    if existing:
        db["cartitem"].update_one({"_id": existing["_id"]},
                                  {"$set": {"quantity": new_quantity, "updated_at": now()}})
    else:
        stamp = now()
        db["cartitem"].insert_one({
            "user_id": user_id, "box_id": box_id, "quantity": new_quantity,
            "created_at": stamp, "updated_at": stamp,
        })
    return serialize(db["cartitem"].find_one({"user_id": user_id, "box_id": box_id}))


def update_quantity(db, user_id: str, item_id: str, quantity: int) -> Dict[str, Any]:
    if quantity is None or int(quantity) < 1:
        raise InvalidQuantity()
    quantity = int(quantity)
    line = _find_line(db, user_id, item_id)
    _check_quantity(_active_box(db, line["box_id"]), quantity)
    db["cartitem"].update_one({"_id": line["_id"]}, {"$set": {"quantity": quantity, "updated_at": now()}})
    return serialize(db["cartitem"].find_one({"_id": line["_id"]}))


def remove_item(db, user_id: str, item_id: str) -> None:
    res = db["cartitem"].delete_one({"_id": to_object_id(item_id, "Cart item"), "user_id": user_id})
    if res.deleted_count == 0:
        raise NotFoundError("Cart item not found")


def clear(db, user_id: str) -> None:
    db["cartitem"].delete_many({"user_id": user_id})
    db["cart"].delete_one({"user_id": user_id})


def stored_coupon(db, user_id: str) -> Optional[str]:
    cart = db["cart"].find_one({"user_id": user_id})
    return cart.get("coupon_code") if cart else None


def apply_coupon(db, user_id: str, code: str) -> Dict[str, Any]:
    rule = resolve_coupon(code)
    db["cart"].update_one({"user_id": user_id},
                          {"$set": {"coupon_code": rule["code"], "updated_at": now()}}, upsert=True)
    return rule


def remove_coupon(db, user_id: str) -> None:
    db["cart"].update_one({"user_id": user_id}, {"$set": {"coupon_code": None, "updated_at": now()}})


def cart_lines(db, user_id: str) -> List[Dict[str, Any]]:
    """Cart lines joined with their current box; lines for inactive or deleted boxes are skipped."""
    lines = []
    for line in db["cartitem"].find({"user_id": user_id}).sort([("created_at", 1), ("_id", 1)]):
        oid = to_object_id(line["box_id"], "Box")
        box = db["box"].find_one({"_id": oid})
        if not box or not box.get("is_active", True):
            continue
        lines.append({"line": line, "box": box})
    return lines


def get_cart(db, user_id: str, delivery_option: str = "standard") -> Dict[str, Any]:
    items = []
    for entry in cart_lines(db, user_id):
        line, box = entry["line"], entry["box"]
        items.append({
            "id": str(line["_id"]),
            "box": {
                "id": str(box["_id"]),
                "name": box.get("name"),
                "slug": box.get("slug"),
                "price": box.get("price", 0),
                "main_image": box.get("main_image"),
                "category": box.get("category"),
                "stock": box.get("stock", 0),
            },
            "quantity": line["quantity"],
            "total": round(float(box.get("price", 0)) * line["quantity"], 2),
            "added_at": line.get("created_at"),
        })
    summary = compute_summary(
        [{"unit_price": i["box"]["price"], "quantity": i["quantity"]} for i in items],
        coupon_code=stored_coupon(db, user_id),
        delivery_option=delivery_option,
    )
    return {"items": items, "summary": summary.model_dump()}
