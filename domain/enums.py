"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"
    CANCELLED = "cancelled"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class RoomSortOrder(str, Enum):
    FEATURED = "featured"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    RATING = "rating"


class AuthErrorCode(str, Enum):
    INVALID_CREDENTIAL = "invalid-credential"
    USER_NOT_FOUND = "user-not-found"
    WRONG_PASSWORD = "wrong-password"
    TOO_MANY_REQUESTS = "too-many-requests"


# Next statuses an administrator may move a reservation to
RESERVATION_TRANSITIONS = {
    ReservationStatus.PENDING: (ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED),
    ReservationStatus.CONFIRMED: (ReservationStatus.CHECKED_IN, ReservationStatus.CANCELLED),
    ReservationStatus.CHECKED_IN: (ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED),
    ReservationStatus.CHECKED_OUT: (),
    ReservationStatus.CANCELLED: (),
}
