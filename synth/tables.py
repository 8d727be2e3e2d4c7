"""
Static reference data the event schemas draw from.
"""

OS_LIST = ["Android", "iOS", "Windows", "macOS"]
MOBILE_OS = {"Android", "iOS"}
GENDERS = ["male", "female"]

# -------------------------
# Shopping mall
# -------------------------
SHOP_EVENT_NAMES = [
    "page_view",
    "button_click",
    "add_to_cart",
    "purchase",
    "wishlist_add",
]

PAGE_PATHS = [
    "/",
    "/products",
    "/products/1",
    "/products/2",
    "/products/3",
    "/products/4",
    "/products/5",
    "/products/6",
    "/cart",
    "/checkout",
    "/checkout/success",
    "/wishlist",
    "/orders",
    "/login",
    "/register",
]

SHOP_NAME = "JUNGLE SHOP"
PAGE_TITLES = {
    "/": "JUNGLE SHOP - navy & mint marketplace",
    "/products": "Products - JUNGLE SHOP",
    "/cart": "Cart - JUNGLE SHOP",
    "/checkout": "Checkout - JUNGLE SHOP",
    "/checkout/success": "Order complete - JUNGLE SHOP",
    "/wishlist": "Wishlist - JUNGLE SHOP",
    "/orders": "Orders - JUNGLE SHOP",
    "/login": "Log in - JUNGLE SHOP",
    "/register": "Sign up - JUNGLE SHOP",
}

PRODUCT_CATEGORIES = [
    "electronics",
    "clothing",
    "sports",
    "home_living",
    "beauty",
    "books",
    "food",
    "furniture",
]

PRODUCT_NAMES = [
    "Wireless Bluetooth Earbuds",
    "Smartphone Case",
    "Cotton T-Shirt",
    "Sneakers",
    "Coffee Machine",
    "Yoga Mat",
    "Laptop",
    "Smartwatch",
    "Headphones",
    "Tablet",
    "Jeans",
    "Hoodie",
    "Tracksuit",
    "Suit",
    "Dress",
    "Bag",
    "Shoes",
    "Coffee Beans",
    "Tea",
    "Fruit Box",
    "Mixed Nuts",
    "Cosmetics",
    "Perfume",
    "Skincare Set",
]

BUTTON_LABELS = [
    "view_product",
    "add_to_cart",
    "buy_now",
    "add_to_wishlist",
    "view_reviews",
    "get_coupon",
    "sign_up",
    "log_in",
    "pay",
    "confirm_order",
    "track_delivery",
    "request_refund",
    "ask_question",
    "write_review",
    "rate_product",
]

PAYMENT_METHODS = ["card", "kakao_pay", "naver_pay", "bank_transfer"]
SHIPPING_ADDRESSES = [
    "Gangnam-gu, Seoul",
    "Seocho-gu, Seoul",
    "Mapo-gu, Seoul",
    "Haeundae-gu, Busan",
]

TRAFFIC_SOURCES = [
    "google",
    "naver",
    "kakao",
    "facebook",
    "instagram",
    "youtube",
    "direct",
]

UTM_CAMPAIGNS = [
    "summer_sale_2024",
    "new_user_welcome",
    "black_friday",
    "christmas_sale",
    "spring_collection",
    "electronics_deal",
    "fashion_week",
    "beauty_campaign",
]
UTM_CONTENTS = ["banner", "text", "image", "video"]

REFERRERS = {
    "google": "https://www.google.com/",
    "naver": "https://search.naver.com/",
    "kakao": "https://search.kakao.com/",
    "facebook": "https://www.facebook.com/",
    "instagram": "https://www.instagram.com/",
    "youtube": "https://www.youtube.com/",
    "direct": "",
}

TRAFFIC_MEDIUMS = {
    "google": "organic",
    "naver": "organic",
    "kakao": "organic",
    "facebook": "social",
    "instagram": "social",
    "youtube": "social",
    "direct": "direct",
}
DEFAULT_MEDIUM = "direct"

CITIES = ["Seoul", "Busan", "Incheon", "Daegu", "Daejeon", "Gwangju"]
BROWSERS = ["Chrome", "Safari", "Firefox", "Edge"]

# -------------------------
# Per-OS lookups (unknown OS -> Windows)
# -------------------------
FALLBACK_OS = "Windows"

USER_AGENTS = {
    "Windows": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
               "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "macOS": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
             "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Android": "Mozilla/5.0 (Linux; Android 13; SM-G991B) AppleWebKit/537.36 "
               "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36",
    "iOS": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1_2 like Mac OS X) AppleWebKit/605.1.15 "
           "(KHTML, like Gecko) Version/17.1.2 Mobile/15E148 Safari/604.1",
}

SCREEN_RESOLUTIONS = {
    "Windows": ["1920x1080", "2560x1440", "1366x768"],
    "macOS": ["2560x1600", "1920x1200", "1440x900"],
    "Android": ["1080x2400", "720x1600", "1440x3200"],
    "iOS": ["1170x2532", "1125x2436", "828x1792"],
}

VIEWPORT_SIZES = {
    "Windows": ["1200x800", "1600x900", "1024x768"],
    "macOS": ["1600x1000", "1200x750", "900x600"],
    "Android": ["360x800", "412x915", "384x854"],
    "iOS": ["390x844", "375x812", "414x896"],
}

# -------------------------
# Auto click (CLI simulator)
# -------------------------
AUTO_CLICK_EVENT_NAMES = ["auto_click"]
