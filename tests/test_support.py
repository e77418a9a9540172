import pytest

import support
from errors import EmptyMessage, MissingField, NotFoundError


@pytest.fixture
def uid(customer):
    return str(customer["_id"])


def open_ticket(db, uid, **overrides):
    fields = {"subject": "Box arrived damaged", "description": "The lid was crushed",
              "category": "Delivery Issue"}
    fields.update(overrides)
    return support.create_ticket(db, uid, **fields)


def test_create_ticket(db, uid):
    ticket = open_ticket(db, uid)
    assert ticket["ticket_number"].startswith("TKT-")
    assert ticket["status"] == "Open"
    assert ticket["priority"] == "Medium"
    assert ticket["messages"] == []


@pytest.mark.parametrize("missing", ["subject", "description", "category"])
def test_create_ticket_requires_fields(db, uid, missing):
    with pytest.raises(MissingField):
        open_ticket(db, uid, **{missing: "  "})


def test_messages_keep_insertion_order_and_status(db, uid):
    ticket = open_ticket(db, uid)
    support.add_message(db, ticket["id"], "user", "Hello?", user_id=uid)
    support.add_message(db, ticket["id"], "admin", "  Sorry about that  ")
    result = support.add_message(db, ticket["id"], "user", "Thanks", user_id=uid)
    assert [(m["sender"], m["message"]) for m in result["messages"]] == [
        ("user", "Hello?"), ("admin", "Sorry about that"), ("user", "Thanks"),
    ]
    assert result["status"] == "Open"


def test_blank_message_rejected(db, uid):
    ticket = open_ticket(db, uid)
    with pytest.raises(EmptyMessage):
        support.add_message(db, ticket["id"], "user", "   ", user_id=uid)


def test_users_cannot_touch_others_tickets(db, uid, other_customer):
    ticket = open_ticket(db, uid)
    other = str(other_customer["_id"])
    with pytest.raises(NotFoundError):
        support.get_ticket(db, ticket["id"], other)
    with pytest.raises(NotFoundError):
        support.add_message(db, ticket["id"], "user", "hi", user_id=other)


def test_admin_update(db, uid):
    ticket = open_ticket(db, uid)
    updated = support.update_ticket(db, ticket["id"], {
        "status": "In Progress", "assigned_to": "agent-1", "tags": [" refund ", "", "damage"],
        "is_escalated": True, "escalation_reason": "Repeat issue", "ignored": "x",
    })
    assert updated["status"] == "In Progress"
    assert updated["tags"] == ["refund", "damage"]
    assert updated["priority"] == "Urgent"
    assert updated["escalation_date"] is not None
    assert "ignored" not in updated

    resolved = support.update_ticket(db, ticket["id"], {"status": "Resolved"})
    assert resolved["resolution_time"] == 0


def test_list_tickets_filters(db, uid, other_customer):
    open_ticket(db, uid, subject="Late delivery")
    open_ticket(db, uid, category="Payment Problem", priority="High")
    open_ticket(db, str(other_customer["_id"]))
    assert support.list_tickets(db, user_id=uid)["pagination"]["total"] == 2
    assert support.list_tickets(db, priority="High")["pagination"]["total"] == 1
    assert support.list_tickets(db, search="late")["pagination"]["total"] == 1


def test_support_api(client, user_headers, admin_headers, other_customer):
    from conftest import bearer

    res = client.post("/api/user/support", json={"subject": "Where is my box?", "description": "No update",
                                                 "category": "Order Issue"}, headers=user_headers)
    assert res.status_code == 201
    ticket = res.json()["data"]

    res = client.post("/api/user/support", json={"subject": "x"}, headers=user_headers)
    assert res.status_code == 400

    res = client.post(f"/api/user/support/{ticket['id']}/messages", json={"message": " "}, headers=user_headers)
    assert res.status_code == 400
    res = client.post(f"/api/user/support/{ticket['id']}/messages", json={"message": "Any news?"},
                      headers=user_headers)
    assert res.json()["data"]["last_message"]["message"] == "Any news?"

    res = client.post(f"/api/user/support/{ticket['id']}/messages", json={"message": "hi"},
                      headers=bearer(other_customer))
    assert res.status_code == 404

    res = client.post(f"/api/admin/support/{ticket['id']}/reply", json={"message": "On its way"},
                      headers=admin_headers)
    assert [m["sender"] for m in res.json()["data"]["messages"]] == ["user", "admin"]
    assert client.post(f"/api/admin/support/{ticket['id']}/reply", json={"message": "x"},
                       headers=user_headers).status_code == 403

    res = client.put(f"/api/admin/support/{ticket['id']}", json={"internal_notes": "VIP", "priority": "High"},
                     headers=admin_headers)
    assert res.json()["data"]["priority"] == "High"

    mine = client.get(f"/api/user/support/{ticket['id']}", headers=user_headers).json()["data"]
    assert "internal_notes" not in mine
    listing = client.get("/api/admin/support?priority=High", headers=admin_headers).json()["data"]
    assert listing["tickets"][0]["internal_notes"] == "VIP"


def test_blank_message_on_foreign_ticket_is_not_found(db, uid, other_customer):
    ticket = open_ticket(db, uid)
    with pytest.raises(NotFoundError):
        support.add_message(db, ticket["id"], "user", "  ", user_id=str(other_customer["_id"]))
