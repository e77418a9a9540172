"""
Surprise Tokri Database Schemas

Each Pydantic model below represents one MongoDB collection. The collection name is the lowercase
class name. Example: class Box -> collection "box".

These schemas are used for validation before inserting/updating documents.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

BoxCategory = Literal["Snacks", "Premium", "Mini", "Gift"]
Occasion = Literal[
    "Birthday", "Valentine", "Friendship", "Diwali", "Holi",
    "New Year", "Anniversary", "Graduation", "Wedding", "Other",
]
Gender = Literal["male", "female", "unisex"]
AgeGroup = Literal["kids", "teens", "adults", "all"]

OrderStatus = Literal["pending", "processing", "packed", "shipped", "delivered", "cancelled"]
PaymentMethod = Literal["COD", "UPI", "Card", "Net Banking"]
PaymentStatus = Literal["Pending", "Paid", "Failed", "Refunded"]
DeliveryOption = Literal["standard", "express"]

TicketCategory = Literal[
    "Order Issue", "Product Question", "Payment Problem", "Delivery Issue",
    "Return/Refund", "Technical Support", "General Inquiry",
]
TicketPriority = Literal["Low", "Medium", "High", "Urgent"]
TicketStatus = Literal["Open", "In Progress", "Waiting for Customer", "Resolved", "Closed"]

Platform = Literal["Instagram", "YouTube", "TikTok", "Twitter", "Facebook", "Other"]
InfluencerStatus = Literal["pending", "active", "inactive", "rejected"]


class User(BaseModel):
    name: str
    email: EmailStr
    password_hash: str
    role: str = Field("customer", description="customer | admin")
    phone: Optional[str] = None
    is_active: bool = True


class Box(BaseModel):
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = Field(None, max_length=200)
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    category: BoxCategory
    occasion: Occasion = "Other"
    gender: Gender = "unisex"
    age_group: AgeGroup = "all"
    images: List[str] = Field(default_factory=list)
    main_image: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    stock: int = Field(0, ge=0)
    is_active: bool = True
    is_featured: bool = False
    is_trending: bool = False
    rating: float = Field(0, ge=0, le=5)
    review_count: int = 0
    sales_count: int = 0
    estimated_delivery: str = "3-5 days"


class Review(BaseModel):
    user_id: str
    box_id: str
    order_id: str
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., max_length=100)
    comment: str = Field(..., max_length=1000)
    images: List[str] = Field(default_factory=list)
    is_verified_purchase: bool = True
    status: str = Field("active", description="active | hidden | reported")


class CartItem(BaseModel):
    user_id: str
    box_id: str
    quantity: int = Field(1, ge=1)


class Cart(BaseModel):
    user_id: str
    coupon_code: Optional[str] = None


class WishlistItem(BaseModel):
    box_id: str
    added_at: datetime


class Wishlist(BaseModel):
    user_id: str
    items: List[WishlistItem] = Field(default_factory=list)


class PostalAddress(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., pattern=r"^\d{6}$")
    landmark: Optional[str] = None


class Address(PostalAddress):
    user_id: str
    type: Literal["Home", "Office", "Parents", "Other"] = "Home"
    is_default: bool = False


class OrderItem(BaseModel):
    box_id: str
    name: str
    price: float
    quantity: int = Field(..., ge=1)
    total: float


class TimelineEntry(BaseModel):
    status: OrderStatus
    location: Optional[str] = None
    description: Optional[str] = None
    timestamp: datetime


class Order(BaseModel):
    user_id: str
    order_number: str
    items: List[OrderItem]
    subtotal: float
    shipping: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float
    coupon_code: Optional[str] = None
    delivery_option: DeliveryOption = "standard"
    payment_method: PaymentMethod
    payment_status: PaymentStatus = "Pending"
    shipping_address: PostalAddress
    billing_address: PostalAddress
    status: OrderStatus = "pending"
    tracking_number: str
    estimated_delivery: datetime
    delivered_at: Optional[datetime] = None
    timeline: List[TimelineEntry] = Field(default_factory=list)
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None


class Attachment(BaseModel):
    filename: Optional[str] = None
    url: str
    type: Optional[str] = None


class TicketMessage(BaseModel):
    sender: Literal["user", "admin"]
    message: str
    attachments: List[Attachment] = Field(default_factory=list)
    timestamp: datetime


class SupportTicket(BaseModel):
    user_id: str
    ticket_number: str
    subject: str
    description: str
    category: TicketCategory
    priority: TicketPriority = "Medium"
    status: TicketStatus = "Open"
    order_id: Optional[str] = None
    messages: List[TicketMessage] = Field(default_factory=list)
    assigned_to: Optional[str] = None
    internal_notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    estimated_resolution: Optional[datetime] = None
    is_escalated: bool = False
    escalation_reason: Optional[str] = None
    escalation_date: Optional[datetime] = None
    resolution_time: Optional[int] = None  # hours


class InfluencerLink(BaseModel):
    label: Optional[str] = None
    url: str


class Influencer(BaseModel):
    name: str = Field(..., min_length=1)
    handle: Optional[str] = None
    email: EmailStr
    phone: Optional[str] = None
    platform: Platform
    followers_number: int = Field(..., ge=0)
    engagement_rate: float = 0  # percent
    category: Optional[str] = None
    status: InfluencerStatus = "pending"
    commission_rate: float = 0  # percent
    total_sales: float = 0
    last_campaign: Optional[datetime] = None
    links: List[InfluencerLink] = Field(default_factory=list)
    bio: Optional[str] = None
