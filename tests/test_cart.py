import pytest

import cart
from errors import InvalidCoupon, InvalidQuantity, NotFoundError, OutOfStock, ValidationError


@pytest.fixture
def uid(customer):
    return str(customer["_id"])


def test_add_item_merges_same_box(db, uid, make_box):
    box = make_box(stock=5)
    cart.add_item(db, uid, str(box["_id"]), 2)
    line = cart.add_item(db, uid, str(box["_id"]), 1)
    assert line["quantity"] == 3
    assert db["cartitem"].count_documents({"user_id": uid}) == 1


def test_add_item_clamps_to_one(db, uid, make_box):
    box = make_box()
    line = cart.add_item(db, uid, str(box["_id"]), 0)
    assert line["quantity"] == 1


def test_add_item_beyond_stock(db, uid, make_box):
    box = make_box(stock=2)
    with pytest.raises(OutOfStock):
        cart.add_item(db, uid, str(box["_id"]), 3)
    cart.add_item(db, uid, str(box["_id"]), 2)
    with pytest.raises(OutOfStock):
        cart.add_item(db, uid, str(box["_id"]), 1)


def test_add_item_per_line_limit(db, uid, make_box):
    box = make_box(stock=50)
    with pytest.raises(ValidationError):
        cart.add_item(db, uid, str(box["_id"]), 11)


def test_add_inactive_or_unknown_box(db, uid, make_box):
    box = make_box(is_active=False)
    with pytest.raises(NotFoundError):
        cart.add_item(db, uid, str(box["_id"]), 1)
    with pytest.raises(NotFoundError):
        cart.add_item(db, uid, "not-an-id", 1)


def test_update_quantity(db, uid, make_box):
    box = make_box(stock=5)
    line = cart.add_item(db, uid, str(box["_id"]), 1)
    assert cart.update_quantity(db, uid, line["id"], 4)["quantity"] == 4
    with pytest.raises(InvalidQuantity):
        cart.update_quantity(db, uid, line["id"], 0)
    with pytest.raises(OutOfStock):
        cart.update_quantity(db, uid, line["id"], 6)


def test_lines_are_private(db, uid, other_customer, make_box):
    box = make_box()
    line = cart.add_item(db, uid, str(box["_id"]), 1)
    with pytest.raises(NotFoundError):
        cart.update_quantity(db, str(other_customer["_id"]), line["id"], 2)
    with pytest.raises(NotFoundError):
        cart.remove_item(db, str(other_customer["_id"]), line["id"])


def test_remove_missing_item_is_not_found(db, uid, make_box):
    box = make_box()
    line = cart.add_item(db, uid, str(box["_id"]), 1)
    cart.remove_item(db, uid, line["id"])
    with pytest.raises(NotFoundError):
        cart.remove_item(db, uid, line["id"])


def test_summary_uses_current_prices(db, uid, make_box):
    box = make_box(price=299)
    cart.add_item(db, uid, str(box["_id"]), 1)
    assert cart.get_cart(db, uid)["summary"]["subtotal"] == 299
    db["box"].update_one({"_id": box["_id"]}, {"$set": {"price": 599}})
    summary = cart.get_cart(db, uid)["summary"]
    assert summary["subtotal"] == 599
    assert summary["shipping"] == 0


def test_inactive_boxes_are_skipped(db, uid, make_box):
    keep, hide = make_box(), make_box()
    cart.add_item(db, uid, str(keep["_id"]), 1)
    cart.add_item(db, uid, str(hide["_id"]), 1)
    db["box"].update_one({"_id": hide["_id"]}, {"$set": {"is_active": False}})
    view = cart.get_cart(db, uid)
    assert [i["box"]["id"] for i in view["items"]] == [str(keep["_id"])]


def test_coupon_apply_and_clear(db, uid, make_box):
    box = make_box(price=1000)
    cart.add_item(db, uid, str(box["_id"]), 1)
    with pytest.raises(InvalidCoupon):
        cart.apply_coupon(db, uid, "BOGUS")
    cart.apply_coupon(db, uid, "welcome10")
    assert cart.get_cart(db, uid)["summary"]["discount"] == 100
    cart.remove_coupon(db, uid)
    assert cart.get_cart(db, uid)["summary"]["discount"] == 0

    cart.apply_coupon(db, uid, "FIRST50")
    cart.clear(db, uid)
    view = cart.get_cart(db, uid)
    assert view["items"] == []
    assert view["summary"]["coupon_code"] is None


def test_cart_api_flow(client, user_headers, make_box):
    box = make_box(price=299, stock=3)
    res = client.post("/api/cart", json={"box_id": str(box["_id"]), "quantity": 2}, headers=user_headers)
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    item_id = body["data"]["items"][0]["id"]
    assert body["data"]["summary"]["subtotal"] == 598

    res = client.put(f"/api/cart/{item_id}", json={"quantity": 0}, headers=user_headers)
    assert res.status_code == 400
    assert "error" in res.json()

    res = client.post("/api/cart/coupon", json={"code": "NOPE"}, headers=user_headers)
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid coupon code"}

    res = client.post("/api/cart/coupon", json={"code": "FIRST50"}, headers=user_headers)
    assert res.json()["data"]["summary"]["discount"] == 50

    res = client.delete("/api/cart/coupon", headers=user_headers)
    assert res.json()["data"]["summary"]["discount"] == 0

    res = client.delete(f"/api/cart/{item_id}", headers=user_headers)
    assert res.json()["data"]["items"] == []
    assert client.delete(f"/api/cart/{item_id}", headers=user_headers).status_code == 404


def test_cart_requires_token(client):
    res = client.get("/api/cart")
    assert res.status_code == 401
    assert res.json() == {"error": "Access token required"}
    res = client.get("/api/cart", headers={"Authorization": "Bearer garbage"})
    assert res.status_code == 401
