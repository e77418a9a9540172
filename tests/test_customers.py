import pytest

import cart
import customers
import orders
from conftest import ADDRESS
from errors import ValidationError


def test_lists_customers_only(db, customer, other_customer, admin):
    result = customers.list_customers(db)
    assert sorted(c["email"] for c in result["customers"]) == ["asha@example.com", "ravi@example.com"]
    assert result["pagination"]["total"] == 2
    assert result["stats"]["total_customers"] == 2


def test_search_status_and_sort(db, customer, other_customer):
    db["user"].update_one({"_id": other_customer["_id"]}, {"$set": {"is_active": False}})

    assert [c["name"] for c in customers.list_customers(db, search="RAVI")["customers"]] == ["Ravi Kumar"]
    assert [c["name"] for c in customers.list_customers(db, status="inactive")["customers"]] == ["Ravi Kumar"]
    assert [c["name"] for c in customers.list_customers(db, status="active")["customers"]] == ["Asha Rao"]

    by_name = customers.list_customers(db, sort_by="name", sort_order="desc")
    assert [c["name"] for c in by_name["customers"]] == ["Ravi Kumar", "Asha Rao"]
    assert customers.list_customers(db)["stats"]["active_customers"] == 1

    with pytest.raises(ValidationError):
        customers.list_customers(db, sort_by="password_hash")


def test_order_totals_skip_cancelled(db, customer, make_box):
    uid = str(customer["_id"])
    box = make_box(price=299)
    cart.add_item(db, uid, str(box["_id"]), 1)
    orders.create_order(db, uid, "COD", shipping_address=ADDRESS)
    cart.add_item(db, uid, str(box["_id"]), 1)
    doomed = orders.create_order(db, uid, "COD", shipping_address=ADDRESS)
    orders.cancel_order(db, uid, doomed["id"])

    result = customers.list_customers(db)
    row = result["customers"][0]
    assert (row["total_orders"], row["total_spent"]) == (1, 363.95)
    assert result["stats"]["total_revenue"] == 363.95


def test_customers_api(client, customer, user_headers, admin_headers):
    assert client.get("/api/admin/customers", headers=user_headers).status_code == 403
    res = client.get("/api/admin/customers", params={"search": "asha", "sortBy": "email"}, headers=admin_headers)
    assert res.status_code == 200
    data = res.json()["data"]
    assert [c["email"] for c in data["customers"]] == ["asha@example.com"]
    assert "password_hash" not in data["customers"][0]
    assert client.get("/api/admin/customers", params={"status": "banned"}, headers=admin_headers).status_code == 400
