import os

# Store
STORE_NAME = os.getenv("STORE_NAME", "Surprise Tokri")
PRIMARY_CURRENCY = os.getenv("PRIMARY_CURRENCY", "INR")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Security
JWT_SECRET = os.getenv("JWT_SECRET", "devsecret_change_me")
JWT_EXP_MIN = int(os.getenv("JWT_EXP_MIN", str(7 * 24 * 60)))

# Pricing
FREE_SHIPPING_THRESHOLD = float(os.getenv("FREE_SHIPPING_THRESHOLD", "500"))
SHIPPING_FEE = float(os.getenv("SHIPPING_FEE", "50"))
EXPRESS_SURCHARGE = float(os.getenv("EXPRESS_SURCHARGE", "50"))
TAX_RATE = float(os.getenv("TAX_RATE", "0.05"))  # 5%
MAX_ITEM_QUANTITY = int(os.getenv("MAX_ITEM_QUANTITY", "10"))

# Delivery estimates in days
STANDARD_DELIVERY_DAYS = int(os.getenv("STANDARD_DELIVERY_DAYS", "5"))
EXPRESS_DELIVERY_DAYS = int(os.getenv("EXPRESS_DELIVERY_DAYS", "2"))

MIN_INFLUENCER_FOLLOWERS = int(os.getenv("MIN_INFLUENCER_FOLLOWERS", "1000"))

COUPONS = {
    "WELCOME10": {"type": "percent", "value": 10, "description": "10% off your order"},
    "FIRST50": {"type": "flat", "value": 50, "description": "Flat 50 off your first order"},
}

# Shared by every page that renders an order or ticket status
STATUS_DISPLAY = {
    "order": {
        "pending": {"icon": "clock", "color_class": "text-yellow-600 bg-yellow-100"},
        "processing": {"icon": "settings", "color_class": "text-blue-600 bg-blue-100"},
        "packed": {"icon": "package", "color_class": "text-indigo-600 bg-indigo-100"},
        "shipped": {"icon": "truck", "color_class": "text-purple-600 bg-purple-100"},
        "delivered": {"icon": "check-circle", "color_class": "text-green-600 bg-green-100"},
        "cancelled": {"icon": "x-circle", "color_class": "text-red-600 bg-red-100"},
    },
    "ticket": {
        "Open": {"icon": "alert-circle", "color_class": "text-blue-600 bg-blue-100"},
        "In Progress": {"icon": "clock", "color_class": "text-yellow-600 bg-yellow-100"},
        "Waiting for Customer": {"icon": "message-circle", "color_class": "text-orange-600 bg-orange-100"},
        "Resolved": {"icon": "check-circle", "color_class": "text-green-600 bg-green-100"},
        "Closed": {"icon": "x-circle", "color_class": "text-gray-600 bg-gray-100"},
    },
}
