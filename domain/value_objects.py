"""Domain Value Objects"""
import re
from pydantic import BaseModel, Field, validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from domain.enums import ReservationStatus

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class DateRange(BaseModel):
    """Value Object for a stay's check-in / check-out dates.

    An inverted or empty range is allowed here; it simply yields zero nights
    and is reported as not bookable.
    """
    check_in: date
    check_out: date

    def nights(self) -> int:
        """Calculate number of billable nights"""
        from domain.pricing import calculate_nights
        return calculate_nights(self.check_in, self.check_out)

    def is_bookable(self) -> bool:
        return self.nights() > 0

    class Config:
        frozen = True


class GuestInfo(BaseModel):
    """Value Object for the guest contact details on a reservation"""
    full_name: str
    email: str
    phone: str

    @validator('full_name')
    def full_name_min_length(cls, v):
        v = v.strip()
        if len(v) < 3:
            raise ValueError('Full name must be at least 3 characters')
        return v

    @validator('email')
    def email_shape(cls, v):
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError('Invalid email address')
        return v

    @validator('phone')
    def phone_min_length(cls, v):
        v = v.strip()
        if len(v) < 10:
            raise ValueError('Phone number must be at least 10 digits')
        return v

    class Config:
        frozen = True


class StayQuote(BaseModel):
    """Result of pricing a stay: nights, nightly rate and total"""
    nights: int = Field(ge=0)
    price_per_night: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)

    @property
    def bookable(self) -> bool:
        return self.nights > 0

    class Config:
        frozen = True


class StatusChange(BaseModel):
    """Child Entity recording one reservation status transition"""
    from_status: Optional[ReservationStatus] = None
    to_status: ReservationStatus
    changed_at: datetime = Field(default_factory=datetime.utcnow)
    changed_by: str = "SYSTEM"

    class Config:
        from_attributes = True
