from typing import Final

EARTH_RADIUS_KM: Final[float] = 6371.0
DISTANCE_DECIMALS: Final[int] = 2

# Roles
CONSUMER: Final[str] = "consumer"
SHOPKEEPER: Final[str] = "shopkeeper"
ROLES: Final[tuple] = (CONSUMER, SHOPKEEPER)

# Pantry item lifecycle
STOCKED: Final[str] = "STOCKED"
REFILL_REQUESTED: Final[str] = "REFILL_REQUESTED"
CONFIRMED: Final[str] = "CONFIRMED"
OUT_FOR_DELIVERY: Final[str] = "OUT_FOR_DELIVERY"
DELIVERED: Final[str] = "DELIVERED"
PANTRY_STATUSES: Final[tuple] = (STOCKED, REFILL_REQUESTED, CONFIRMED, OUT_FOR_DELIVERY, DELIVERED)

# Order lifecycle (CONFIRMED / DELIVERED shared with the pantry vocabulary)
PENDING: Final[str] = "PENDING"
SHIPPED: Final[str] = "SHIPPED"
CANCELLED: Final[str] = "CANCELLED"
ORDER_STATUSES: Final[tuple] = (PENDING, CONFIRMED, SHIPPED, DELIVERED, CANCELLED)

# Refill queue views for the shop dashboard
QUEUE_PENDING: Final[str] = "pending"
QUEUE_ACTIVE: Final[str] = "active"
QUEUE_ALL: Final[str] = "all"

# Expense windows in days (None = no cutoff)
TIMEFRAME_DAYS: Final[dict] = {"all": None, "week": 7, "month": 30, "year": 365}
RECENT_TRANSACTIONS_LIMIT: Final[int] = 10
UNKNOWN_SHOP_NAME: Final[str] = "Unknown Shop"
UNKNOWN_PRODUCT_NAME: Final[str] = "Unknown Product"

# Defaults used when a product starts being tracked in the pantry
DEFAULT_QUANTITY_PER_PACK: Final[int] = 1
DEFAULT_PACKS_OWNED: Final[int] = 2
DEFAULT_REFILL_THRESHOLD: Final[int] = 1

GENERIC_ERROR_MESSAGE: Final[str] = "Something went wrong. Please try again."
