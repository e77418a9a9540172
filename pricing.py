"""
Cart and checkout pricing.

``compute_summary`` is a pure function of its inputs: the same lines, coupon
and delivery option always give the same summary. Tax is charged on the
pre-discount subtotal.
"""
from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel

import config
from errors import InvalidCoupon


class PriceSummary(BaseModel):
    item_count: int = 0
    total_quantity: int = 0
    subtotal: float = 0.0
    shipping: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    coupon_code: Optional[str] = None
    coupon_error: Optional[str] = None
    delivery_option: str = "standard"


def _validate_coupon_table(table: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    for code, rule in table.items():
        if rule.get("type") not in ("percent", "flat"):
            raise ValueError(f"Coupon {code}: type must be 'percent' or 'flat'")
        value = float(rule.get("value", -1))
        if value < 0:
            raise ValueError(f"Coupon {code}: value cannot be negative")
        if rule["type"] == "percent" and value > 100:
            raise ValueError(f"Coupon {code}: percent value cannot exceed 100")
    return {code.upper(): rule for code, rule in table.items()}


COUPONS = _validate_coupon_table(config.COUPONS)


def normalize_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


def resolve_coupon(code: Optional[str]) -> Dict[str, Any]:
    """Look up a coupon rule. Raises InvalidCoupon for unknown codes."""
    key = normalize_code(code)
    if not key or key not in COUPONS:
        raise InvalidCoupon()
    return {"code": key, **COUPONS[key]}


def coupon_discount(rule: Dict[str, Any], subtotal: float) -> float:
    if rule["type"] == "percent":
        discount = subtotal * float(rule["value"]) / 100.0
    else:
        discount = float(rule["value"])
    return round(min(discount, subtotal), 2)


def shipping_for(subtotal: float, delivery_option: str = "standard") -> float:
    shipping = 0.0 if subtotal >= config.FREE_SHIPPING_THRESHOLD else config.SHIPPING_FEE
    if delivery_option == "express":
        shipping += config.EXPRESS_SURCHARGE
    return round(shipping, 2)


def compute_summary(items: Iterable[Dict[str, Any]], coupon_code: Optional[str] = None,
                    delivery_option: str = "standard") -> PriceSummary:
    items = list(items)
    subtotal = round(sum(float(i["unit_price"]) * int(i["quantity"]) for i in items), 2)
    shipping = shipping_for(subtotal, delivery_option)
    tax = round(subtotal * config.TAX_RATE, 2)

    discount = 0.0
    applied = None
    coupon_error = None
    if normalize_code(coupon_code):
        try:
            rule = resolve_coupon(coupon_code)
        except InvalidCoupon as exc:
            coupon_error = exc.message
        else:
            applied = rule["code"]
            discount = coupon_discount(rule, subtotal)

    total = round(max(subtotal - discount + shipping + tax, 0.0), 2)
    return PriceSummary(
        item_count=len(items),
        total_quantity=sum(int(i["quantity"]) for i in items),
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        discount=discount,
        total=total,
        coupon_code=applied,
        coupon_error=coupon_error,
        delivery_option=delivery_option,
    )
