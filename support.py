import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from database import as_utc, create_document, next_sequence_number, now, paginate, serialize, to_object_id
from errors import EmptyMessage, MissingField, NotFoundError, ValidationError
from schemas import Attachment, SupportTicket, TicketMessage

logger = logging.getLogger("surprisetokri.support")

ADMIN_FIELDS = ("status", "priority", "assigned_to", "internal_notes", "tags",
                "estimated_resolution", "is_escalated", "escalation_reason")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def create_ticket(db, user_id: str, subject: str, description: str, category: str,
                  priority: Optional[str] = None, order_id: Optional[str] = None) -> Dict[str, Any]:
    if _blank(subject) or _blank(description) or _blank(category):
        raise MissingField("Subject, description and category are required")
    if order_id:
        order = db["order"].find_one({"_id": to_object_id(order_id, "Order"), "user_id": user_id})
        if not order:
            raise NotFoundError("Order not found")
    ticket = SupportTicket(
        user_id=user_id,
        ticket_number=next_sequence_number(db, "supportticket", "ticket_number", "TKT"),
        subject=subject.strip(),
        description=description.strip(),
        category=category,
        priority=priority or "Medium",
        order_id=order_id,
    )
    ticket_id = create_document(db, "supportticket", ticket)
    logger.info("Ticket %s opened by user %s", ticket.ticket_number, user_id)
    return serialize(db["supportticket"].find_one({"_id": to_object_id(ticket_id)}))


def get_ticket(db, ticket_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
    """Fetch a ticket; when ``user_id`` is given the ticket must belong to that user."""
    query: Dict[str, Any] = {"_id": to_object_id(ticket_id, "Ticket")}
    if user_id is not None:
        query["user_id"] = user_id
    ticket = db["supportticket"].find_one(query)
    if not ticket:
        raise NotFoundError("Ticket not found")
    return ticket


def add_message(db, ticket_id: str, sender: str, text: Optional[str],
                attachments: Optional[List[Dict[str, Any]]] = None, user_id: Optional[str] = None) -> Dict[str, Any]:
    ticket = get_ticket(db, ticket_id, user_id)
    if _blank(text):
        raise EmptyMessage()
    message = TicketMessage(
        sender=sender,
        message=text.strip(),
        attachments=[Attachment(**a) for a in attachments or []],
        timestamp=now(),
    )
    db["supportticket"].update_one({"_id": ticket["_id"]}, {
        "$push": {"messages": message.model_dump()},
        "$set": {"updated_at": now()},
    })
    return serialize(db["supportticket"].find_one({"_id": ticket["_id"]}))


def update_ticket(db, ticket_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    ticket = get_ticket(db, ticket_id)
    updates = {k: v for k, v in changes.items() if k in ADMIN_FIELDS}
    if not updates:
        raise ValidationError("No updatable fields provided")

    if isinstance(updates.get("tags"), list):
        updates["tags"] = [str(t).strip() for t in updates["tags"] if str(t).strip()]
    if isinstance(updates.get("estimated_resolution"), str):
        try:
            updates["estimated_resolution"] = datetime.fromisoformat(updates["estimated_resolution"])
        except ValueError:
            raise ValidationError("estimated_resolution must be an ISO date")

    if updates.get("is_escalated") and not ticket.get("is_escalated"):
        updates["escalation_date"] = now()
        updates.setdefault("priority", "Urgent")
    if updates.get("status") == "Resolved" and ticket.get("status") != "Resolved":
        opened = as_utc(ticket.get("created_at") or now())
        updates["resolution_time"] = round((now() - opened).total_seconds() / 3600)

    merged = {k: v for k, v in ticket.items() if k in SupportTicket.model_fields} | updates
    SupportTicket(**merged)
    db["supportticket"].update_one({"_id": ticket["_id"]}, {"$set": updates | {"updated_at": now()}})
    logger.info("Ticket %s updated: %s", ticket.get("ticket_number"), ", ".join(sorted(updates)))
    return serialize(db["supportticket"].find_one({"_id": ticket["_id"]}))


def list_tickets(db, page: int = 1, limit: int = 10, user_id: Optional[str] = None, status: Optional[str] = None,
                 priority: Optional[str] = None, category: Optional[str] = None,
                 search: Optional[str] = None) -> Dict[str, Any]:
    page, limit = max(1, page), min(max(1, limit), 100)
    query: Dict[str, Any] = {}
    if user_id:
        query["user_id"] = user_id
    if status:
        query["status"] = status
    if priority:
        query["priority"] = priority
    if category:
        query["category"] = category
    if search and search.strip():
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"subject": {"$regex": pattern, "$options": "i"}},
            {"ticket_number": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    total = db["supportticket"].count_documents(query)
    cursor = db["supportticket"].find(query).sort([("created_at", -1), ("_id", -1)])
    tickets = [serialize(t) for t in cursor.skip((page - 1) * limit).limit(limit)]
    return {"tickets": tickets, "pagination": paginate(total, page, limit)}


def present_ticket(ticket: Dict[str, Any], admin: bool = False) -> Dict[str, Any]:
    view = serialize(ticket) if "_id" in ticket else dict(ticket)
    if not admin:
        for field in ("internal_notes", "assigned_to", "tags"):
            view.pop(field, None)
    view["last_message"] = view["messages"][-1] if view.get("messages") else None
    return view
