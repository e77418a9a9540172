import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field
from pydantic import ValidationError as ModelValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

import addresses
import analytics
import cart
import catalog
import config
import customers
import influencers
import orders
import support
import wishlist
from auth import Session, authenticate, create_token, get_session, load_user, public_user, register_user, require_admin
from database import get_db
from errors import AppError
from pricing import COUPONS
from schemas import (AgeGroup, BoxCategory, DeliveryOption, Gender, InfluencerStatus, Occasion, OrderStatus,
                     PaymentMethod, Platform, TicketCategory, TicketPriority, TicketStatus)

# Logging
logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger("surprisetokri")

app = FastAPI(title="Surprise Tokri API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in config.ALLOWED_ORIGINS] if config.ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def ok(data: Any = None, **extra) -> Dict[str, Any]:
    return {"success": True, "data": data, **extra}


def _first_error(errors: List[Dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request"
    err = errors[0]
    loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header"))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


# Error handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _first_error(exc.errors())})


@app.exception_handler(ModelValidationError)
async def model_validation_handler(request: Request, exc: ModelValidationError):
    return JSONResponse(status_code=400, content={"error": _first_error(exc.errors())})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Health and config
@app.get("/")
def root():
    return {"name": config.STORE_NAME, "status": "ok"}


@app.get("/config")
def get_config():
    return {
        "storeName": config.STORE_NAME,
        "currency": config.PRIMARY_CURRENCY,
        "taxRate": config.TAX_RATE,
        "shipping": {
            "fee": config.SHIPPING_FEE,
            "freeAbove": config.FREE_SHIPPING_THRESHOLD,
            "expressSurcharge": config.EXPRESS_SURCHARGE,
        },
        "coupons": {code: {"type": c["type"], "value": c["value"], "description": c.get("description")}
                    for code, c in COUPONS.items()},
        "statusDisplay": config.STATUS_DISPLAY,
    }


# Auth
class RegisterDTO(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str
    phone: Optional[str] = None


class LoginDTO(BaseModel):
    email: EmailStr
    password: str


@app.post("/api/auth/register", status_code=201)
def register(data: RegisterDTO, db=Depends(get_db)):
    user = register_user(db, data.name, data.email, data.password, data.phone)
    return ok({"token": create_token(user), "user": public_user(user)}, message="Registration successful")


@app.post("/api/auth/login")
def login(data: LoginDTO, db=Depends(get_db)):
    user = authenticate(db, data.email, data.password)
    return ok({"token": create_token(user), "user": public_user(user)}, message="Login successful")


@app.get("/api/auth/me")
def me(session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(public_user(load_user(db, session)))


@app.post("/api/auth/logout")
def logout(session: Session = Depends(get_session)):
    # tokens are stateless; the client discards its copy
    logger.info("User %s logged out", session.user_id)
    return ok(None, message="Logged out successfully")


# Catalog
@app.get("/api/boxes")
def list_boxes(category: Optional[BoxCategory] = None, occasion: Optional[Occasion] = None,
               gender: Optional[Gender] = None,
               min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
               max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
               search: Optional[str] = None,
               sort_by: str = Query("created_at", alias="sortBy"),
               sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
               page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100), db=Depends(get_db)):
    return ok(catalog.list_boxes(db, category, occasion, gender, min_price, max_price, search,
                                 sort_by, sort_order, page, limit))


@app.get("/api/boxes/{slug}")
def get_box(slug: str, db=Depends(get_db)):
    return ok(catalog.get_box(db, slug))


@app.get("/api/boxes/{slug}/related")
def get_related_boxes(slug: str, db=Depends(get_db)):
    return ok(catalog.related_boxes(db, slug))


class ReviewDTO(BaseModel):
    rating: int
    title: str
    comment: str
    images: List[str] = []
    order_id: Optional[str] = None


@app.get("/api/boxes/{slug}/reviews")
def get_reviews(slug: str, page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
                rating: Optional[int] = None,
                sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"), db=Depends(get_db)):
    return ok(catalog.list_reviews(db, slug, page, limit, rating, sort_order))


@app.post("/api/boxes/{slug}/reviews", status_code=201)
def post_review(slug: str, data: ReviewDTO, session: Session = Depends(get_session), db=Depends(get_db)):
    review = catalog.add_review(db, session.user_id, slug, data.rating, data.title, data.comment,
                                data.images, data.order_id)
    return ok(review, message="Review added successfully")


# Cart
class CartAddDTO(BaseModel):
    box_id: str
    quantity: int = 1


class CartQuantityDTO(BaseModel):
    quantity: int


class CouponDTO(BaseModel):
    code: str


@app.get("/api/cart")
def get_cart(delivery_option: DeliveryOption = "standard", session: Session = Depends(get_session),
             db=Depends(get_db)):
    return ok(cart.get_cart(db, session.user_id, delivery_option))


@app.post("/api/cart", status_code=201)
def add_to_cart(data: CartAddDTO, session: Session = Depends(get_session), db=Depends(get_db)):
    cart.add_item(db, session.user_id, data.box_id, data.quantity)
    return ok(cart.get_cart(db, session.user_id), message="Item added to cart")


@app.delete("/api/cart")
def clear_cart(session: Session = Depends(get_session), db=Depends(get_db)):
    cart.clear(db, session.user_id)
    return ok(cart.get_cart(db, session.user_id), message="Cart cleared")


@app.post("/api/cart/coupon")
def apply_coupon(data: CouponDTO, session: Session = Depends(get_session), db=Depends(get_db)):
    rule = cart.apply_coupon(db, session.user_id, data.code)
    return ok(cart.get_cart(db, session.user_id), message=f"Coupon {rule['code']} applied")


@app.delete("/api/cart/coupon")
def remove_coupon(session: Session = Depends(get_session), db=Depends(get_db)):
    cart.remove_coupon(db, session.user_id)
    return ok(cart.get_cart(db, session.user_id), message="Coupon removed")


@app.put("/api/cart/{item_id}")
def update_cart_item(item_id: str, data: CartQuantityDTO, session: Session = Depends(get_session),
                     db=Depends(get_db)):
    cart.update_quantity(db, session.user_id, item_id, data.quantity)
    return ok(cart.get_cart(db, session.user_id))


@app.delete("/api/cart/{item_id}")
def remove_cart_item(item_id: str, session: Session = Depends(get_session), db=Depends(get_db)):
    cart.remove_item(db, session.user_id, item_id)
    return ok(cart.get_cart(db, session.user_id), message="Item removed from cart")


# Wishlist
class WishlistDTO(BaseModel):
    box_id: str


@app.get("/api/wishlist")
def get_wishlist(session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(wishlist.get_wishlist(db, session.user_id))


@app.post("/api/wishlist", status_code=201)
def add_to_wishlist(data: WishlistDTO, session: Session = Depends(get_session), db=Depends(get_db)):
    item = wishlist.add_item(db, session.user_id, data.box_id)
    return ok(item, message="Item added to wishlist successfully")


@app.delete("/api/wishlist")
def remove_from_wishlist(box_id: str = Query(..., alias="boxId", min_length=1),
                         session: Session = Depends(get_session), db=Depends(get_db)):
    wishlist.remove_item(db, session.user_id, box_id)
    return ok(wishlist.get_wishlist(db, session.user_id), message="Item removed from wishlist successfully")


# Checkout
class AddressDTO(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    landmark: Optional[str] = None


class CheckoutDTO(BaseModel):
    payment_method: PaymentMethod
    shipping_address: Optional[AddressDTO] = None
    address_id: Optional[str] = None
    billing_address: Optional[AddressDTO] = None
    delivery_option: DeliveryOption = "standard"
    notes: Optional[str] = None


@app.get("/api/checkout")
def checkout_preview(delivery_option: DeliveryOption = "standard", session: Session = Depends(get_session),
                     db=Depends(get_db)):
    return ok(orders.preview_checkout(db, session.user_id, delivery_option))


@app.post("/api/checkout", status_code=201)
def checkout(data: CheckoutDTO, session: Session = Depends(get_session), db=Depends(get_db)):
    order = orders.create_order(
        db, session.user_id, data.payment_method,
        shipping_address=data.shipping_address.model_dump() if data.shipping_address else None,
        address_id=data.address_id,
        billing_address=data.billing_address.model_dump() if data.billing_address else None,
        delivery_option=data.delivery_option,
        notes=data.notes,
    )
    return ok(order, message="Order created successfully")


# Orders
class CancelDTO(BaseModel):
    reason: Optional[str] = None


class TrackingUpdateDTO(BaseModel):
    status: OrderStatus
    location: Optional[str] = None
    description: Optional[str] = None
    timestamp: Optional[datetime] = None


@app.get("/api/user/orders")
def my_orders(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
              session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(orders.list_orders_for_user(db, session.user_id, page, limit))


@app.get("/api/user/orders/{order_id}")
def my_order(order_id: str, session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(orders.get_order_for_user(db, session.user_id, order_id))


@app.post("/api/user/orders/{order_id}/cancel")
def cancel_my_order(order_id: str, data: CancelDTO, session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(orders.cancel_order(db, session.user_id, order_id, data.reason), message="Order cancelled")


@app.get("/api/orders/{order_id}/tracking")
def get_tracking(order_id: str, tracking: Optional[str] = None, db=Depends(get_db)):
    return ok(orders.tracking_view(orders.lookup(db, tracking or order_id)))


@app.post("/api/orders/{order_id}/tracking")
def add_tracking_update(order_id: str, data: TrackingUpdateDTO, admin: Session = Depends(require_admin),
                        db=Depends(get_db)):
    result = orders.append_tracking_update(db, order_id, data.status, data.location, data.description,
                                           data.timestamp)
    return ok(result, message="Tracking update added successfully")


@app.get("/api/tracking")
def track(q: str = Query(..., min_length=1), db=Depends(get_db)):
    return ok(orders.tracking_view(orders.lookup(db, q)))


# Addresses
class AddressCreateDTO(AddressDTO):
    type: str = "Home"
    is_default: bool = False


class AddressUpdateDTO(BaseModel):
    type: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    landmark: Optional[str] = None
    is_default: Optional[bool] = None


@app.get("/api/user/addresses")
def list_addresses(session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(addresses.list_addresses(db, session.user_id))


@app.post("/api/user/addresses", status_code=201)
def add_address(data: AddressCreateDTO, session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(addresses.add_address(db, session.user_id, data.model_dump()), message="Address added successfully")


@app.put("/api/user/addresses/{address_id}")
def update_address(address_id: str, data: AddressUpdateDTO, session: Session = Depends(get_session),
                   db=Depends(get_db)):
    address = addresses.update_address(db, session.user_id, address_id, data.model_dump(exclude_unset=True))
    return ok(address, message="Address updated successfully")


@app.post("/api/user/addresses/{address_id}/default")
def set_default_address(address_id: str, session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(addresses.set_default(db, session.user_id, address_id))


@app.delete("/api/user/addresses/{address_id}")
def delete_address(address_id: str, session: Session = Depends(get_session), db=Depends(get_db)):
    addresses.delete_address(db, session.user_id, address_id)
    return ok(None, message="Address deleted successfully")


# Support
class TicketDTO(BaseModel):
    subject: Optional[str] = None
    description: Optional[str] = None
    category: Optional[TicketCategory] = None
    priority: TicketPriority = "Medium"
    order_id: Optional[str] = None


class AttachmentDTO(BaseModel):
    filename: Optional[str] = None
    url: str
    type: Optional[str] = None


class MessageDTO(BaseModel):
    message: Optional[str] = None
    attachments: List[AttachmentDTO] = []


class TicketUpdateDTO(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[str] = None
    internal_notes: Optional[str] = None
    tags: Optional[List[str]] = None
    estimated_resolution: Optional[datetime] = None
    is_escalated: Optional[bool] = None
    escalation_reason: Optional[str] = None


@app.get("/api/user/support")
def my_tickets(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
               session: Session = Depends(get_session), db=Depends(get_db)):
    result = support.list_tickets(db, page, limit, user_id=session.user_id)
    result["tickets"] = [support.present_ticket(t) for t in result["tickets"]]
    return ok(result)


@app.post("/api/user/support", status_code=201)
def open_ticket(data: TicketDTO, session: Session = Depends(get_session), db=Depends(get_db)):
    ticket = support.create_ticket(db, session.user_id, data.subject, data.description, data.category,
                                   data.priority, data.order_id)
    return ok(support.present_ticket(ticket))


@app.get("/api/user/support/{ticket_id}")
def my_ticket(ticket_id: str, session: Session = Depends(get_session), db=Depends(get_db)):
    return ok(support.present_ticket(support.get_ticket(db, ticket_id, session.user_id)))


@app.post("/api/user/support/{ticket_id}/messages")
def post_ticket_message(ticket_id: str, data: MessageDTO, session: Session = Depends(get_session),
                        db=Depends(get_db)):
    ticket = support.add_message(db, ticket_id, "user", data.message,
                                 [a.model_dump() for a in data.attachments], user_id=session.user_id)
    return ok(support.present_ticket(ticket))


# Influencers
class InfluencerApplicationDTO(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    handle: Optional[str] = None
    social_media_platforms: Any = Field(None, alias="socialMediaPlatforms")
    followers: Optional[Union[str, int, float]] = None
    engagement_rate: Optional[Union[str, int, float]] = Field(None, alias="engagementRate")
    content_type: Optional[str] = Field(None, alias="contentType")
    message: Optional[str] = None


class InfluencerDTO(BaseModel):
    name: str
    handle: Optional[str] = None
    email: EmailStr
    phone: Optional[str] = None
    platform: Platform
    followers_number: int = Field(..., ge=0)
    engagement_rate: float = 0
    category: Optional[str] = None
    status: InfluencerStatus = "active"
    commission_rate: float = 0
    total_sales: float = 0
    last_campaign: Optional[datetime] = None
    links: List[Dict[str, Any]] = []
    bio: Optional[str] = None


class InfluencerUpdateDTO(BaseModel):
    name: Optional[str] = None
    handle: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    platform: Optional[Platform] = None
    followers_number: Optional[int] = Field(None, ge=0)
    engagement_rate: Optional[float] = None
    category: Optional[str] = None
    status: Optional[InfluencerStatus] = None
    commission_rate: Optional[float] = None
    total_sales: Optional[float] = None
    last_campaign: Optional[datetime] = None
    links: Optional[List[Dict[str, Any]]] = None
    bio: Optional[str] = None


@app.post("/api/influencers", status_code=201)
def apply_as_influencer(data: InfluencerApplicationDTO, db=Depends(get_db)):
    result = influencers.apply(db, data.name, data.email, data.social_media_platforms, data.followers,
                               data.content_type, phone=data.phone, engagement_rate=data.engagement_rate,
                               handle=data.handle, message=data.message)
    return ok(result, message="Thank you! Your application has been received.")


# Admin
class BoxDTO(BaseModel):
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    category: BoxCategory
    occasion: Occasion = "Other"
    gender: Gender = "unisex"
    age_group: AgeGroup = "all"
    images: List[str] = []
    main_image: Optional[str] = None
    tags: List[str] = []
    stock: int = Field(0, ge=0)
    is_active: bool = True
    is_featured: bool = False
    is_trending: bool = False
    estimated_delivery: str = "3-5 days"


class BoxUpdateDTO(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    category: Optional[BoxCategory] = None
    occasion: Optional[Occasion] = None
    gender: Optional[Gender] = None
    age_group: Optional[AgeGroup] = None
    images: Optional[List[str]] = None
    main_image: Optional[str] = None
    tags: Optional[List[str]] = None
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_trending: Optional[bool] = None
    estimated_delivery: Optional[str] = None


@app.get("/api/admin/boxes")
def admin_list_boxes(search: Optional[str] = None, category: Optional[BoxCategory] = None,
                     page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100),
                     admin: Session = Depends(require_admin), db=Depends(get_db)):
    return ok(catalog.list_boxes(db, category=category, search=search, page=page, limit=limit,
                                 include_inactive=True))


@app.post("/api/admin/boxes", status_code=201)
def admin_create_box(data: BoxDTO, admin: Session = Depends(require_admin), db=Depends(get_db)):
    return ok(catalog.create_box(db, data.model_dump()))


@app.put("/api/admin/boxes/{box_id}")
def admin_update_box(box_id: str, data: BoxUpdateDTO, admin: Session = Depends(require_admin),
                     db=Depends(get_db)):
    return ok(catalog.update_box(db, box_id, data.model_dump(exclude_unset=True)))


@app.delete("/api/admin/boxes/{box_id}")
def admin_delete_box(box_id: str, admin: Session = Depends(require_admin), db=Depends(get_db)):
    catalog.delete_box(db, box_id)
    return ok(None, message="Box deleted")


@app.get("/api/admin/orders")
def admin_list_orders(status: Optional[OrderStatus] = None, page: int = Query(1, ge=1),
                      limit: int = Query(20, ge=1, le=100), admin: Session = Depends(require_admin),
                      db=Depends(get_db)):
    return ok(orders.list_orders(db, status, page, limit))


@app.get("/api/admin/customers")
def admin_list_customers(search: Optional[str] = None, status: Optional[Literal["active", "inactive"]] = None,
                         sort_by: str = Query("created_at", alias="sortBy"),
                         sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
                         page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
                         admin: Session = Depends(require_admin), db=Depends(get_db)):
    return ok(customers.list_customers(db, search, status, sort_by, sort_order, page, limit))


@app.get("/api/admin/influencers")
def admin_list_influencers(search: Optional[str] = None, status: Optional[InfluencerStatus] = None,
                           category: Optional[str] = None, admin: Session = Depends(require_admin),
                           db=Depends(get_db)):
    return ok(influencers.list_influencers(db, search, status, category))


@app.post("/api/admin/influencers", status_code=201)
def admin_create_influencer(data: InfluencerDTO, admin: Session = Depends(require_admin), db=Depends(get_db)):
    return ok(influencers.create_influencer(db, data.model_dump()))


@app.get("/api/admin/influencers/{influencer_id}")
def admin_get_influencer(influencer_id: str, admin: Session = Depends(require_admin), db=Depends(get_db)):
    return ok(influencers.get_influencer(db, influencer_id))


@app.put("/api/admin/influencers/{influencer_id}")
def admin_update_influencer(influencer_id: str, data: InfluencerUpdateDTO, admin: Session = Depends(require_admin),
                            db=Depends(get_db)):
    return ok(influencers.update_influencer(db, influencer_id, data.model_dump(exclude_unset=True)))


@app.delete("/api/admin/influencers/{influencer_id}")
def admin_delete_influencer(influencer_id: str, admin: Session = Depends(require_admin), db=Depends(get_db)):
    influencers.delete_influencer(db, influencer_id)
    return ok(None, message="Influencer deleted")


@app.get("/api/admin/support")
def admin_list_tickets(status: Optional[TicketStatus] = None, priority: Optional[TicketPriority] = None,
                       category: Optional[TicketCategory] = None, search: Optional[str] = None,
                       page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100),
                       admin: Session = Depends(require_admin), db=Depends(get_db)):
    result = support.list_tickets(db, page, limit, status=status, priority=priority, category=category,
                                  search=search)
    result["tickets"] = [support.present_ticket(t, admin=True) for t in result["tickets"]]
    return ok(result)


@app.get("/api/admin/support/{ticket_id}")
def admin_get_ticket(ticket_id: str, admin: Session = Depends(require_admin), db=Depends(get_db)):
    return ok(support.present_ticket(support.get_ticket(db, ticket_id), admin=True))


@app.put("/api/admin/support/{ticket_id}")
def admin_update_ticket(ticket_id: str, data: TicketUpdateDTO, admin: Session = Depends(require_admin),
                        db=Depends(get_db)):
    ticket = support.update_ticket(db, ticket_id, data.model_dump(exclude_unset=True))
    return ok(support.present_ticket(ticket, admin=True))


@app.post("/api/admin/support/{ticket_id}/reply")
def admin_reply(ticket_id: str, data: MessageDTO, admin: Session = Depends(require_admin), db=Depends(get_db)):
    ticket = support.add_message(db, ticket_id, "admin", data.message, [a.model_dump() for a in data.attachments])
    return ok(support.present_ticket(ticket, admin=True))


@app.get("/api/admin/analytics")
def admin_analytics(period: str = "30d", admin: Session = Depends(require_admin), db=Depends(get_db)):
    return ok(analytics.summary(db, period))


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
