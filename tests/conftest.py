import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from auth import create_token, hash_password
from database import create_document, ensure_indexes, get_db
from main import app
from schemas import Box, User

PASSWORD = "secret-pass-123"
PASSWORD_HASH = hash_password(PASSWORD)

ADDRESS = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


@pytest.fixture
def db():
    database = mongomock.MongoClient()["surprisetokri_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _user(db, name, email, role="customer"):
    user_id = create_document(db, "user", User(name=name, email=email, password_hash=PASSWORD_HASH, role=role))
    return db["user"].find_one({"_id": ObjectId(user_id)})


@pytest.fixture
def customer(db):
    return _user(db, "Asha Rao", "asha@example.com")


@pytest.fixture
def other_customer(db):
    return _user(db, "Ravi Kumar", "ravi@example.com")


@pytest.fixture
def admin(db):
    return _user(db, "Admin", "admin@surprisetokri.in", role="admin")


def bearer(user):
    return {"Authorization": f"Bearer {create_token(user)}"}


@pytest.fixture
def user_headers(customer):
    return bearer(customer)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def make_box(db):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "name": f"Snack Box {counter['n']}",
            "slug": f"snack-box-{counter['n']}",
            "description": "A surprise full of snacks",
            "price": 299,
            "category": "Snacks",
            "occasion": "Birthday",
            "stock": 10,
        }
        data.update(overrides)
        box_id = create_document(db, "box", Box(**data))
        return db["box"].find_one({"_id": ObjectId(box_id)})

    return _make
