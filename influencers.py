import logging
import re
from typing import Any, Dict, List, Optional, Union

from email_validator import EmailNotValidError, validate_email

import config
from database import create_document, now, serialize, to_object_id
from errors import NotFoundError, ValidationError
from schemas import Influencer

logger = logging.getLogger("surprisetokri.influencers")

PLATFORMS = {"instagram": "Instagram", "youtube": "YouTube", "tiktok": "TikTok",
             "twitter": "Twitter", "facebook": "Facebook"}


def _number(value: Union[str, int, float, None], pattern: str, cast) -> Optional[Union[int, float]]:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = re.sub(pattern, "", value)
        if not cleaned:
            return None
        try:
            return cast(cleaned)
        except ValueError:
            return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("Followers and engagement rate must be numbers")
    return cast(value)


def _platform(platforms: Union[str, List[str]]) -> str:
    first = platforms[0] if isinstance(platforms, list) and platforms else platforms
    if not isinstance(first, str):
        return "Other"
    return PLATFORMS.get(first.strip().lower(), "Other")


def apply(db, name: Optional[str], email: Optional[str], platforms, followers, content_type: Optional[str],
          phone: Optional[str] = None, engagement_rate=None, handle: Optional[str] = None,
          message: Optional[str] = None) -> Dict[str, Any]:
    """Public application form; applicants start as pending."""
    if not name or not email or not platforms or not followers or not content_type:
        raise ValidationError("Name, email, social media platforms, followers, and content type are required")
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Please provide a valid email address")
    followers_number = _number(followers, r"[^0-9]", int) or 0
    if followers_number < config.MIN_INFLUENCER_FOLLOWERS:
        raise ValidationError(f"Minimum {config.MIN_INFLUENCER_FOLLOWERS:,} followers required to apply")

    influencer = Influencer(
        name=name.strip(),
        handle=handle,
        email=email.strip(),
        phone=phone,
        platform=_platform(platforms),
        followers_number=followers_number,
        engagement_rate=_number(engagement_rate, r"[^0-9.]", float) or 0,
        category=content_type,
        status="pending",
        bio=message,
    )
    influencer_id = create_document(db, "influencer", influencer)
    logger.info("Influencer application %s received from %s", influencer_id, influencer.email)
    return {"id": influencer_id}


def list_influencers(db, search: Optional[str] = None, status: Optional[str] = None,
                     category: Optional[str] = None) -> List[Dict[str, Any]]:
    query: Dict[str, Any] = {}
    if search and search.strip():
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"handle": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
        ]
    if status:
        query["status"] = status
    if category:
        query["category"] = category
    cursor = db["influencer"].find(query).sort([("created_at", -1), ("_id", -1)])
    return [serialize(i) for i in cursor]


def create_influencer(db, data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    data.setdefault("status", "active")
    influencer_id = create_document(db, "influencer", Influencer(**data))
    return get_influencer(db, influencer_id)


def get_influencer(db, influencer_id: str) -> Dict[str, Any]:
    doc = db["influencer"].find_one({"_id": to_object_id(influencer_id, "Influencer")})
    if not doc:
        raise NotFoundError("Influencer not found")
    return serialize(doc)


def update_influencer(db, influencer_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    current = db["influencer"].find_one({"_id": to_object_id(influencer_id, "Influencer")})
    if not current:
        raise NotFoundError("Influencer not found")
    changes = {k: v for k, v in changes.items() if k in Influencer.model_fields}
    merged = Influencer(**({k: v for k, v in current.items() if k in Influencer.model_fields} | changes))
    updates = {k: v for k, v in merged.model_dump().items() if k in changes}
    db["influencer"].update_one({"_id": current["_id"]}, {"$set": updates | {"updated_at": now()}})
    if "status" in updates and updates["status"] != current.get("status"):
        logger.info("Influencer %s status %s -> %s", influencer_id, current.get("status"), updates["status"])
    return get_influencer(db, influencer_id)


def delete_influencer(db, influencer_id: str) -> None:
    res = db["influencer"].delete_one({"_id": to_object_id(influencer_id, "Influencer")})
    if res.deleted_count == 0:
        raise NotFoundError("Influencer not found")
