"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional

from domain.enums import ReservationStatus


# ============================================================================
# ROOM SCHEMAS
# ============================================================================

class RoomResponse(BaseModel):
    """Room response DTO"""
    room_id: str
    name: str
    price: Decimal
    description: str
    rating: float
    total_reviews: int
    amenities: List[str]
    status: str
    images: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RoomStatusCountsResponse(BaseModel):
    """Room counts per status"""
    available: int
    occupied: int
    maintenance: int


# ============================================================================
# BOOKING / RESERVATION SCHEMAS
# ============================================================================

class GuestInfoRequest(BaseModel):
    """Guest contact details DTO"""
    full_name: str
    email: str
    phone: str


class QuoteRequest(BaseModel):
    """Stay quote request DTO"""
    room_id: str
    check_in: date
    check_out: date


class QuoteResponse(BaseModel):
    """Stay quote response DTO"""
    room_id: str
    room_name: str
    check_in: date
    check_out: date
    nights: int
    price_per_night: Decimal
    total_price: Decimal
    currency: str
    bookable: bool


class CreateReservationRequest(BaseModel):
    """Create reservation request DTO"""
    room_id: Optional[str] = None
    guest_info: GuestInfoRequest
    check_in: date
    check_out: date
    number_of_guests: int = Field(default=1, ge=1)
    special_requests: str = ""


class ModifyReservationRequest(BaseModel):
    """Modify reservation request DTO"""
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    number_of_guests: Optional[int] = Field(None, ge=1)
    special_requests: Optional[str] = None


class ChangeStatusRequest(BaseModel):
    """Change reservation status request DTO"""
    status: ReservationStatus


class StatusChangeResponse(BaseModel):
    """Status history entry DTO"""
    from_status: Optional[str] = None
    to_status: str
    changed_at: datetime
    changed_by: str


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: str
    guest_info: GuestInfoRequest
    room_id: str
    room_name: str
    check_in: date
    check_out: date
    number_of_guests: int
    number_of_nights: int
    price_per_night: Decimal
    total_price: Decimal
    currency: str
    special_requests: str
    status: str
    allowed_transitions: List[str]
    status_history: List[StatusChangeResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReservationStatsResponse(BaseModel):
    """Reservation dashboard stats DTO"""
    total: int
    pending: int
    confirmed: int
    checked_in: int
    revenue: Decimal
    currency: str


# ============================================================================
# MEDIA SCHEMAS
# ============================================================================

class GalleryResponse(BaseModel):
    """Gallery image URLs"""
    images: List[str]


class UploadResponse(BaseModel):
    """Uploaded image URL"""
    url: str


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class LoginRequest(BaseModel):
    """Login request DTO"""
    email: str
    password: str


class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str
    expires_at: Optional[datetime] = None


class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    email: str
    display_name: Optional[str] = None
    disabled: bool
