from datetime import datetime, timedelta, timezone

import jwt

import analytics
import cart
import config
import orders
from conftest import ADDRESS, PASSWORD


def test_root_and_config(client):
    assert client.get("/").json() == {"name": "Surprise Tokri", "status": "ok"}
    cfg = client.get("/config").json()
    assert cfg["currency"] == "INR"
    assert cfg["coupons"]["WELCOME10"]["type"] == "percent"
    assert cfg["statusDisplay"]["order"]["delivered"]["icon"] == "check-circle"


def test_register_login_me_logout(client):
    res = client.post("/api/auth/register", json={"name": "Neha", "email": "Neha@Example.com",
                                                  "password": "longenough1"})
    assert res.status_code == 201
    assert res.json()["data"]["user"]["email"] == "neha@example.com"

    dup = client.post("/api/auth/register", json={"name": "Neha", "email": "neha@example.com",
                                                  "password": "longenough1"})
    assert dup.status_code == 409

    short = client.post("/api/auth/register", json={"name": "N", "email": "n@example.com", "password": "short"})
    assert short.status_code == 400

    bad = client.post("/api/auth/login", json={"email": "neha@example.com", "password": "wrong-password"})
    assert bad.status_code == 401
    assert bad.json() == {"error": "Invalid credentials"}

    token = client.post("/api/auth/login", json={"email": "neha@example.com",
                                                 "password": "longenough1"}).json()["data"]["token"]
    headers = {"Authorization": f"Bearer {token}"}
    assert client.get("/api/auth/me", headers=headers).json()["data"]["name"] == "Neha"
    res = client.post("/api/auth/logout", headers=headers)
    assert res.json() == {"success": True, "data": None, "message": "Logged out successfully"}


def test_login_seeded_user(client, customer):
    res = client.post("/api/auth/login", json={"email": customer["email"], "password": PASSWORD})
    assert res.status_code == 200


def test_expired_and_malformed_tokens(client, customer):
    expired = jwt.encode({"sub": str(customer["_id"]), "email": customer["email"], "role": "customer",
                          "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
                         config.JWT_SECRET, algorithm="HS256")
    res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert res.status_code == 401
    assert res.json() == {"error": "Token expired"}

    res = client.get("/api/auth/me", headers={"Authorization": "Token abc"})
    assert res.status_code == 401


def test_role_claim_cannot_escalate(client, customer):
    forged = jwt.encode({"sub": str(customer["_id"]), "email": customer["email"], "role": "admin",
                         "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
                        config.JWT_SECRET, algorithm="HS256")
    res = client.get("/api/admin/analytics", headers={"Authorization": f"Bearer {forged}"})
    assert res.status_code == 403


def test_unknown_route_uses_error_envelope(client):
    res = client.get("/api/does-not-exist")
    assert res.status_code == 404
    assert res.json() == {"error": "Not Found"}


def test_analytics(db, client, customer, admin_headers, make_box):
    uid = str(customer["_id"])
    box = make_box(name="Party Box", price=299, stock=20)
    for qty in (1, 2):
        cart.add_item(db, uid, str(box["_id"]), qty)
        orders.create_order(db, uid, "COD", shipping_address=ADDRESS)
    cart.add_item(db, uid, str(box["_id"]), 1)
    doomed = orders.create_order(db, uid, "UPI", shipping_address=ADDRESS)
    orders.cancel_order(db, uid, doomed["id"])

    report = analytics.summary(db, "7d")
    assert report["orders"] == 2
    assert report["orders_by_status"] == {"pending": 2, "cancelled": 1}
    assert report["top_boxes"][0]["quantity"] == 3
    assert report["revenue"] == round(363.95 + (598 + 0 + 29.9), 2)

    res = client.get("/api/admin/analytics", params={"period": "1y"}, headers=admin_headers)
    assert res.status_code == 200
    assert client.get("/api/admin/analytics", params={"period": "2w"}, headers=admin_headers).status_code == 400

    listing = client.get("/api/admin/orders", params={"status": "cancelled"}, headers=admin_headers).json()
    assert listing["data"]["pagination"]["total"] == 1


def test_analytics_period_window(db):
    stamp = datetime.now(timezone.utc)
    for number, days in (("001", 3), ("002", 60)):
        db["order"].insert_one({"user_id": "u1", "status": "delivered", "payment_method": "UPI", "total": 100.0,
                                "order_number": f"ORD-OLD-{number}", "tracking_number": f"STKOLD{number}",
                                "items": [], "created_at": stamp - timedelta(days=days)})

    assert analytics.summary(db, "30d")["orders"] == 1
    assert analytics.summary(db, "90d")["revenue"] == 200.0
