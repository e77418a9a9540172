from collections import Counter, defaultdict
from datetime import timedelta
from typing import Any, Dict

from database import as_utc, now
from errors import ValidationError

PERIODS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}


def summary(db, period: str = "30d", top: int = 5) -> Dict[str, Any]:
    if period not in PERIODS:
        raise ValidationError(f"period must be one of: {', '.join(PERIODS)}")
    start = now() - timedelta(days=PERIODS[period])

    orders = list(db["order"].find({"created_at": {"$gte": start}}))
    by_status = Counter(o.get("status", "pending") for o in orders)
    payment_methods = Counter(o.get("payment_method") for o in orders)

    revenue = 0.0
    daily = defaultdict(lambda: {"revenue": 0.0, "orders": 0})
    box_sales: Dict[str, Dict[str, Any]] = {}
    counted = 0
    for o in orders:
        if o.get("status") == "cancelled":
            continue
        counted += 1
        total = float(o.get("total", 0))
        revenue += total
        day = as_utc(o["created_at"]).strftime("%Y-%m-%d")
        daily[day]["revenue"] += total
        daily[day]["orders"] += 1
        for item in o.get("items", []):
            entry = box_sales.setdefault(item["box_id"], {"box_id": item["box_id"], "name": item.get("name"),
                                                          "quantity": 0, "revenue": 0.0})
            entry["quantity"] += int(item.get("quantity", 0))
            entry["revenue"] += float(item.get("total", 0))

    top_boxes = sorted(box_sales.values(), key=lambda b: (-b["quantity"], -b["revenue"]))[:top]
    for b in top_boxes:
        b["revenue"] = round(b["revenue"], 2)

    return {
        "period": period,
        "revenue": round(revenue, 2),
        "orders": counted,
        "average_order_value": round(revenue / counted, 2) if counted else 0,
        "orders_by_status": dict(by_status),
        "payment_methods": dict(payment_methods),
        "revenue_by_day": [
            {"date": day, "revenue": round(v["revenue"], 2), "orders": v["orders"]}
            for day, v in sorted(daily.items())
        ],
        "top_boxes": top_boxes,
        "open_tickets": db["supportticket"].count_documents({"status": {"$in": ["Open", "In Progress"]}}),
        "pending_influencers": db["influencer"].count_documents({"status": "pending"}),
    }
