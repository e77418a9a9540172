"""
Order lifecycle: checkout, status timeline and lookup.

Statuses move forward through pending -> processing -> packed -> shipped ->
delivered. Cancellation is only possible while pending or processing.
Delivered and cancelled orders accept no further updates.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId

import cart
import config
from database import create_document, next_sequence_number, now, paginate, serialize, to_object_id
from errors import EmptyCart, InvalidTransition, NotFoundError, OutOfStock, ValidationError
from pricing import compute_summary
from schemas import Order, OrderItem, PostalAddress, TimelineEntry

logger = logging.getLogger("surprisetokri.orders")

STAGES = ["pending", "processing", "packed", "shipped", "delivered"]
TERMINAL = {"delivered", "cancelled"}
CANCELLABLE = {"pending", "processing"}


def check_transition(current: str, target: str) -> None:
    if target not in STAGES and target != "cancelled":
        raise ValidationError(f"Unknown order status: {target}")
    if current in TERMINAL:
        raise InvalidTransition(f"Order is already {current}")
    if target == "cancelled":
        if current not in CANCELLABLE:
            raise InvalidTransition(f"Order cannot be cancelled once {current}")
        return
    if STAGES.index(target) < STAGES.index(current):
        raise InvalidTransition(f"Cannot move order from {current} back to {target}")


def tracking_number() -> str:
    return "STK" + secrets.token_hex(5).upper()


def _address_snapshot(doc: Dict[str, Any]) -> PostalAddress:
    return PostalAddress(**{k: doc.get(k) for k in PostalAddress.model_fields})


def resolve_shipping_address(db, user_id: str, shipping_address: Optional[Dict[str, Any]] = None,
                             address_id: Optional[str] = None) -> PostalAddress:
    if shipping_address:
        return PostalAddress(**shipping_address)
    if address_id:
        doc = db["address"].find_one({"_id": to_object_id(address_id, "Address"), "user_id": user_id})
        if not doc:
            raise NotFoundError("Address not found")
        return _address_snapshot(doc)
    doc = db["address"].find_one({"user_id": user_id, "is_default": True})
    if not doc:
        raise ValidationError("Shipping address is required")
    return _address_snapshot(doc)


def _restore_stock(db, items: List[OrderItem]) -> None:
    for item in items:
        db["box"].update_one({"_id": ObjectId(item.box_id)},
                             {"$inc": {"stock": item.quantity, "sales_count": -item.quantity}})


def preview_checkout(db, user_id: str, delivery_option: str = "standard") -> Dict[str, Any]:
    view = cart.get_cart(db, user_id, delivery_option)
    if not view["items"]:
        raise EmptyCart()
    issues = [
        {"box_id": i["box"]["id"], "name": i["box"]["name"],
         "requested": i["quantity"], "available": i["box"]["stock"]}
        for i in view["items"] if i["box"]["stock"] < i["quantity"]
    ]
    return {"valid": not issues, "items": view["items"], "summary": view["summary"],
            "stock_issues": issues or None}


def create_order(db, user_id: str, payment_method: str, shipping_address: Optional[Dict[str, Any]] = None,
                 address_id: Optional[str] = None, billing_address: Optional[Dict[str, Any]] = None,
                 delivery_option: str = "standard", notes: Optional[str] = None) -> Dict[str, Any]:
    entries = cart.cart_lines(db, user_id)
    if not entries:
        raise EmptyCart()
    for entry in entries:
        box, qty = entry["box"], entry["line"]["quantity"]
        if int(box.get("stock", 0)) < qty:
            raise OutOfStock(f"Insufficient stock for {box.get('name')}. Only {box.get('stock', 0)} available.")

    shipping = resolve_shipping_address(db, user_id, shipping_address, address_id)
    billing = PostalAddress(**billing_address) if billing_address else shipping

    items = [
        OrderItem(box_id=str(e["box"]["_id"]), name=e["box"].get("name", ""), price=float(e["box"]["price"]),
                  quantity=e["line"]["quantity"], total=round(float(e["box"]["price"]) * e["line"]["quantity"], 2))
        for e in entries
    ]
    summary = compute_summary([{"unit_price": i.price, "quantity": i.quantity} for i in items],
                              coupon_code=cart.stored_coupon(db, user_id), delivery_option=delivery_option)

    reserved: List[OrderItem] = []
    try:
        for item in items:
            res = db["box"].update_one(
                {"_id": ObjectId(item.box_id), "stock": {"$gte": item.quantity}},
                {"$inc": {"stock": -item.quantity, "sales_count": item.quantity}},
            )
            if res.modified_count == 0:
                raise OutOfStock(f"Insufficient stock for {item.name}")
            reserved.append(item)

        stamp = now()
        days = config.EXPRESS_DELIVERY_DAYS if delivery_option == "express" else config.STANDARD_DELIVERY_DAYS
        order = Order(
            user_id=user_id,
            order_number=next_sequence_number(db, "order", "order_number", "ORD"),
            items=items,
            subtotal=summary.subtotal,
            shipping=summary.shipping,
            tax=summary.tax,
            discount=summary.discount,
            total=summary.total,
            coupon_code=summary.coupon_code,
            delivery_option=delivery_option,
            payment_method=payment_method,
            shipping_address=shipping,
            billing_address=billing,
            tracking_number=tracking_number(),
            estimated_delivery=stamp + timedelta(days=days),
            timeline=[TimelineEntry(status="pending", description="Order placed", timestamp=stamp)],
            notes=notes,
        )
        order_id = create_document(db, "order", order)
    except Exception:
        logger.warning("Order creation for user %s failed, restoring stock for %d item(s)", user_id, len(reserved))
        _restore_stock(db, reserved)
        raise

    cart.clear(db, user_id)
    logger.info("Order %s created for user %s total=%.2f", order.order_number, user_id, order.total)
    return serialize(db["order"].find_one({"_id": ObjectId(order_id)}))


def _find_order(db, order_id: str) -> Dict[str, Any]:
    order = db["order"].find_one({"_id": to_object_id(order_id, "Order")})
    if not order:
        raise NotFoundError("Order not found")
    return order


def append_tracking_update(db, order_id: str, status: str, location: Optional[str] = None,
                           description: Optional[str] = None, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    order = _find_order(db, order_id)
    current = order.get("status", "pending")
    check_transition(current, status)

    entry = TimelineEntry(status=status, location=location, description=description,
                          timestamp=timestamp or now()).model_dump()
    updates: Dict[str, Any] = {"status": status, "updated_at": now()}
    if status == "delivered":
        updates["delivered_at"] = entry["timestamp"]
        if order.get("payment_method") == "COD":
            updates["payment_status"] = "Paid"

    # guard against a concurrent update having moved the order meanwhile
    res = db["order"].update_one({"_id": order["_id"], "status": current},
                                 {"$push": {"timeline": entry}, "$set": updates})
    if res.modified_count == 0:
        raise InvalidTransition("Order status changed, reload and try again")
    if status == "cancelled":
        _restore_stock(db, [OrderItem(**i) for i in order.get("items", [])])
    logger.info("Order %s: %s -> %s", order.get("order_number"), current, status)
    return {"tracking_update": entry, "order": serialize(db["order"].find_one({"_id": order["_id"]}))}


def cancel_order(db, user_id: str, order_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
    order = get_order_for_user(db, user_id, order_id)
    result = append_tracking_update(db, order["id"], "cancelled", description=reason or "Cancelled by customer")
    db["order"].update_one({"_id": ObjectId(order["id"])}, {"$set": {"cancel_reason": reason}})
    result["order"]["cancel_reason"] = reason
    return result["order"]


def lookup(db, key: str) -> Dict[str, Any]:
    key = (key or "").strip()
    order = None
    if ObjectId.is_valid(key):
        order = db["order"].find_one({"_id": ObjectId(key)})
    if not order and key:
        order = db["order"].find_one({"$or": [{"tracking_number": key.upper()}, {"order_number": key.upper()}]})
    if not order:
        raise NotFoundError("Order not found")
    return order


def tracking_view(order: Dict[str, Any]) -> Dict[str, Any]:
    timeline = order.get("timeline", [])
    status = order.get("status", "pending")
    return {
        "order_number": order.get("order_number"),
        "tracking_number": order.get("tracking_number"),
        "status": status,
        "status_display": config.STATUS_DISPLAY["order"].get(status),
        "estimated_delivery": order.get("estimated_delivery"),
        "delivered_at": order.get("delivered_at"),
        "latest": timeline[-1] if timeline else None,
        "timeline": timeline,
    }


def get_order_for_user(db, user_id: str, order_id: str) -> Dict[str, Any]:
    order = _find_order(db, order_id)
    if order.get("user_id") != user_id:
        raise NotFoundError("Order not found")
    return serialize(order)


def list_orders_for_user(db, user_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
    return list_orders(db, page=page, limit=limit, user_id=user_id)


def list_orders(db, status: Optional[str] = None, page: int = 1, limit: int = 20,
                user_id: Optional[str] = None) -> Dict[str, Any]:
    page, limit = max(1, page), min(max(1, limit), 100)
    query: Dict[str, Any] = {}
    if status:
        query["status"] = status
    if user_id:
        query["user_id"] = user_id
    total = db["order"].count_documents(query)
    cursor = db["order"].find(query).sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit)
    return {"orders": [serialize(o) for o in cursor], "pagination": paginate(total, page, limit)}
