import re
from typing import Any, Dict, Optional

from auth import public_user
from database import paginate
from errors import ValidationError

SORT_FIELDS = {"created_at", "name", "email"}


def _order_totals(db, user_ids) -> Dict[str, Dict[str, Any]]:
    totals: Dict[str, Dict[str, Any]] = {}
    query: Dict[str, Any] = {"status": {"$ne": "cancelled"}}
    if user_ids is not None:
        query["user_id"] = {"$in": list(user_ids)}
    for order in db["order"].find(query, {"user_id": 1, "total": 1}):
        entry = totals.setdefault(order["user_id"], {"total_orders": 0, "total_spent": 0.0})
        entry["total_orders"] += 1
        entry["total_spent"] += float(order.get("total", 0))
    return totals


def list_customers(db, search: Optional[str] = None, status: Optional[str] = None, sort_by: str = "created_at",
                   sort_order: str = "desc", page: int = 1, limit: int = 10) -> Dict[str, Any]:
    if sort_by not in SORT_FIELDS:
        raise ValidationError(f"sort_by must be one of: {', '.join(sorted(SORT_FIELDS))}")
    page, limit = max(1, page), min(max(1, limit), 100)

    query: Dict[str, Any] = {"role": "customer"}
    if search and search.strip():
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
            {"phone": {"$regex": pattern, "$options": "i"}},
        ]
    if status == "active":
        query["is_active"] = True
    elif status == "inactive":
        query["is_active"] = False

    direction = 1 if sort_order == "asc" else -1
    total = db["user"].count_documents(query)
    cursor = db["user"].find(query).sort([(sort_by, direction), ("_id", direction)])
    users = list(cursor.skip((page - 1) * limit).limit(limit))

    totals = _order_totals(db, [str(u["_id"]) for u in users])
    customers = []
    for user in users:
        spent = totals.get(str(user["_id"]), {"total_orders": 0, "total_spent": 0.0})
        customers.append(public_user(user) | {
            "is_active": user.get("is_active", True),
            "created_at": user.get("created_at"),
            "total_orders": spent["total_orders"],
            "total_spent": round(spent["total_spent"], 2),
        })

    everyone = {"role": "customer"}
    revenue = sum(t["total_spent"] for t in _order_totals(db, None).values())
    return {
        "customers": customers,
        "pagination": paginate(total, page, limit),
        "stats": {
            "total_customers": db["user"].count_documents(everyone),
            "active_customers": db["user"].count_documents(everyone | {"is_active": True}),
            "total_revenue": round(revenue, 2),
        },
    }
