import random

import pytest

import addresses
from conftest import ADDRESS
from errors import NotFoundError


@pytest.fixture
def uid(customer):
    return str(customer["_id"])


def defaults(db, uid):
    return [a for a in addresses.list_addresses(db, uid) if a["is_default"]]


def test_first_address_is_default(db, uid):
    first = addresses.add_address(db, uid, dict(ADDRESS, is_default=False))
    assert first["is_default"] is True


def test_new_default_replaces_old(db, uid):
    first = addresses.add_address(db, uid, ADDRESS)
    second = addresses.add_address(db, uid, dict(ADDRESS, type="Office", is_default=True))
    assert [a["id"] for a in defaults(db, uid)] == [second["id"]]
    third = addresses.add_address(db, uid, dict(ADDRESS, type="Other"))
    assert third["is_default"] is False
    assert addresses.list_addresses(db, uid)[0]["id"] == second["id"]
    assert first["id"] != second["id"]


def test_set_default(db, uid, other_customer):
    first = addresses.add_address(db, uid, ADDRESS)
    second = addresses.add_address(db, uid, ADDRESS)
    addresses.set_default(db, uid, second["id"])
    assert [a["id"] for a in defaults(db, uid)] == [second["id"]]
    with pytest.raises(NotFoundError):
        addresses.set_default(db, str(other_customer["_id"]), first["id"])


def test_delete_default_promotes_earliest(db, uid):
    first = addresses.add_address(db, uid, ADDRESS)
    second = addresses.add_address(db, uid, ADDRESS)
    third = addresses.add_address(db, uid, dict(ADDRESS, is_default=True))
    addresses.delete_address(db, uid, third["id"])
    assert [a["id"] for a in defaults(db, uid)] == [first["id"]]
    addresses.delete_address(db, uid, first["id"])
    assert [a["id"] for a in defaults(db, uid)] == [second["id"]]
    addresses.delete_address(db, uid, second["id"])
    assert addresses.list_addresses(db, uid) == []


def test_update_keeps_single_default(db, uid):
    first = addresses.add_address(db, uid, ADDRESS)
    second = addresses.add_address(db, uid, ADDRESS)
    updated = addresses.update_address(db, uid, first["id"], {"city": "Chennai", "is_default": False})
    assert updated["city"] == "Chennai"
    assert updated["is_default"] is True
    addresses.update_address(db, uid, second["id"], {"is_default": True})
    assert [a["id"] for a in defaults(db, uid)] == [second["id"]]


def test_invariant_under_random_operations(db, uid):
    rng = random.Random(7)
    ids = []
    for _ in range(40):
        op = rng.choice(["add", "add", "delete", "default"])
        if op == "add" or not ids:
            ids.append(addresses.add_address(db, uid, dict(ADDRESS, is_default=rng.random() < 0.3))["id"])
        elif op == "delete":
            addresses.delete_address(db, uid, ids.pop(rng.randrange(len(ids))))
        else:
            addresses.set_default(db, uid, rng.choice(ids))
        if ids:
            assert len(defaults(db, uid)) == 1


def test_invalid_pincode_api(client, user_headers):
    res = client.post("/api/user/addresses", json=dict(ADDRESS, pincode="12345"), headers=user_headers)
    assert res.status_code == 400
    assert "pincode" in res.json()["error"]


def test_address_api(client, user_headers):
    res = client.post("/api/user/addresses", json=ADDRESS, headers=user_headers)
    assert res.status_code == 201
    first = res.json()["data"]
    second = client.post("/api/user/addresses", json=dict(ADDRESS, type="Office"), headers=user_headers).json()["data"]

    res = client.post(f"/api/user/addresses/{second['id']}/default", headers=user_headers)
    assert res.json()["data"]["is_default"] is True

    listing = client.get("/api/user/addresses", headers=user_headers).json()["data"]
    assert listing[0]["id"] == second["id"]

    assert client.delete(f"/api/user/addresses/{second['id']}", headers=user_headers).status_code == 200
    listing = client.get("/api/user/addresses", headers=user_headers).json()["data"]
    assert [(a["id"], a["is_default"]) for a in listing] == [(first["id"], True)]
    assert client.delete("/api/user/addresses/nope", headers=user_headers).status_code == 404
