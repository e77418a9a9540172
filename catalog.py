import logging
import re
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from database import create_document, now, paginate, serialize, to_object_id
from errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from schemas import Box, Review

logger = logging.getLogger("surprisetokri.catalog")

SORT_FIELDS = {"created_at", "price", "rating", "name", "sales_count"}
MAX_PAGE_SIZE = 100
RELATED_LIMIT = 4


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "box"


def present_box(doc: Dict[str, Any]) -> Dict[str, Any]:
    box = serialize(doc)
    original = box.get("original_price")
    price = box.get("price", 0)
    if original and original > price:
        box["discount_percentage"] = round((original - price) / original * 100)
    else:
        box["discount_percentage"] = 0
    box["in_stock"] = box.get("stock", 0) > 0
    return box


def build_box_query(category: Optional[str] = None, occasion: Optional[str] = None, gender: Optional[str] = None,
                    min_price: Optional[float] = None, max_price: Optional[float] = None,
                    search: Optional[str] = None, include_inactive: bool = False) -> Dict[str, Any]:
    query: Dict[str, Any] = {} if include_inactive else {"is_active": True}
    if category:
        query["category"] = category
    if occasion:
        query["occasion"] = occasion
    if gender:
        query["gender"] = gender
    if min_price is not None or max_price is not None:
        query["price"] = {}
        if min_price is not None:
            query["price"]["$gte"] = float(min_price)
        if max_price is not None:
            query["price"]["$lte"] = float(max_price)
    if search and search.strip():
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
            {"tags": {"$regex": pattern, "$options": "i"}},
        ]
    return query


def list_boxes(db, category: Optional[str] = None, occasion: Optional[str] = None, gender: Optional[str] = None,
               min_price: Optional[float] = None, max_price: Optional[float] = None, search: Optional[str] = None,
               sort_by: str = "created_at", sort_order: str = "desc", page: int = 1, limit: int = 20,
               include_inactive: bool = False) -> Dict[str, Any]:
    if sort_by not in SORT_FIELDS:
        raise ValidationError(f"sort_by must be one of: {', '.join(sorted(SORT_FIELDS))}")
    page = max(1, page)
    limit = min(max(1, limit), MAX_PAGE_SIZE)
    query = build_box_query(category, occasion, gender, min_price, max_price, search, include_inactive)
    direction = 1 if sort_order == "asc" else -1

    total = db["box"].count_documents(query)
    cursor = db["box"].find(query).sort([(sort_by, direction), ("_id", direction)])
    cursor = cursor.skip((page - 1) * limit).limit(limit)
    boxes = [present_box(b) for b in cursor]
    pagination = paginate(total, page, limit)
    pagination["total_boxes"] = pagination.pop("total")
    return {"boxes": boxes, "pagination": pagination}


def find_box(db, slug: str) -> Dict[str, Any]:
    box = db["box"].find_one({"slug": slug.lower()})
    if not box:
        raise NotFoundError("Box not found")
    return box


def get_box(db, slug: str) -> Dict[str, Any]:
    return present_box(find_box(db, slug))


def related_boxes(db, slug: str) -> List[Dict[str, Any]]:
    current = find_box(db, slug)
    cursor = db["box"].find({
        "_id": {"$ne": current["_id"]},
        "is_active": True,
        "category": current.get("category"),
        "occasion": current.get("occasion"),
    }).sort([("created_at", -1), ("_id", -1)]).limit(RELATED_LIMIT)
    return [present_box(b) for b in cursor]


# Admin box management

def create_box(db, data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    data["slug"] = slugify(data.get("slug") or data["name"])
    box = Box(**data)
    if db["box"].find_one({"slug": box.slug}):
        raise ConflictError("A box with this slug already exists")
    box_id = create_document(db, "box", box)
    logger.info("Created box %s (%s)", box.slug, box_id)
    return present_box(db["box"].find_one({"_id": to_object_id(box_id)}))


def update_box(db, box_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    oid = to_object_id(box_id, "Box")
    current = db["box"].find_one({"_id": oid})
    if not current:
        raise NotFoundError("Box not found")
    changes = {k: v for k, v in changes.items() if v is not None}
    if "slug" in changes:
        changes["slug"] = slugify(changes["slug"])
        clash = db["box"].find_one({"slug": changes["slug"], "_id": {"$ne": oid}})
        if clash:
            raise ConflictError("A box with this slug already exists")
    merged = {k: v for k, v in current.items() if k in Box.model_fields} | changes
    Box(**merged)
    try:
        db["box"].update_one({"_id": oid}, {"$set": changes | {"updated_at": now()}})
    except DuplicateKeyError:
        raise ConflictError("A box with this slug already exists")
    return present_box(db["box"].find_one({"_id": oid}))


def delete_box(db, box_id: str) -> None:
    res = db["box"].delete_one({"_id": to_object_id(box_id, "Box")})
    if res.deleted_count == 0:
        raise NotFoundError("Box not found")
    logger.info("Deleted box %s", box_id)


# Reviews

def list_reviews(db, slug: str, page: int = 1, limit: int = 10, rating: Optional[int] = None,
                 sort_order: str = "desc") -> Dict[str, Any]:
    box = find_box(db, slug)
    box_id = str(box["_id"])
    page = max(1, page)
    limit = min(max(1, limit), MAX_PAGE_SIZE)
    query: Dict[str, Any] = {"box_id": box_id, "status": "active"}
    if rating and 1 <= rating <= 5:
        query["rating"] = rating

    total = db["review"].count_documents(query)
    direction = 1 if sort_order == "asc" else -1
    cursor = db["review"].find(query).sort([("created_at", direction), ("_id", direction)])
    reviews = [serialize(r) for r in cursor.skip((page - 1) * limit).limit(limit)]

    distribution = {star: 0 for star in range(5, 0, -1)}
    for r in db["review"].find({"box_id": box_id, "status": "active"}, {"rating": 1}):
        distribution[int(r["rating"])] += 1

    pagination = paginate(total, page, limit)
    pagination["total_reviews"] = pagination.pop("total")
    return {
        "reviews": reviews,
        "pagination": pagination,
        "summary": {
            "average_rating": box.get("rating", 0),
            "total_reviews": box.get("review_count", 0),
            "rating_distribution": distribution,
        },
    }


def add_review(db, user_id: str, slug: str, rating: int, title: str, comment: str,
               images: Optional[List[str]] = None, order_id: Optional[str] = None) -> Dict[str, Any]:
    if not title or not title.strip() or not comment or not comment.strip():
        raise ValidationError("Rating, title, and comment are required")
    if rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5")
    box = find_box(db, slug)
    box_id = str(box["_id"])

    order_query: Dict[str, Any] = {"user_id": user_id, "items.box_id": box_id, "status": "delivered"}
    if order_id:
        order_query["_id"] = to_object_id(order_id, "Order")
    order = db["order"].find_one(order_query)
    if not order:
        raise ForbiddenError("You can only review products you have purchased and received")
    if db["review"].find_one({"user_id": user_id, "box_id": box_id}):
        raise ConflictError("You have already reviewed this product")

    review = Review(user_id=user_id, box_id=box_id, order_id=str(order["_id"]), rating=rating,
                    title=title.strip(), comment=comment.strip(), images=images or [])
    review_id = create_document(db, "review", review)

    count = int(box.get("review_count", 0))
    average = (float(box.get("rating", 0)) * count + rating) / (count + 1)
    db["box"].update_one({"_id": box["_id"]}, {
        "$set": {"rating": round(average, 1), "review_count": count + 1, "updated_at": now()},
    })
    logger.info("Review %s added for box %s", review_id, slug)
    return serialize(db["review"].find_one({"_id": to_object_id(review_id)}))
