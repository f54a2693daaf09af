"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, List
from decimal import Decimal

from domain.enums import ReservationStatus, RoomStatus, RESERVATION_TRANSITIONS
from domain.pricing import quote_stay, to_money
from domain.value_objects import DateRange, GuestInfo, StatusChange


class Room(BaseModel):
    """Room Aggregate Root Entity"""

    # Identity (assigned by the document store)
    room_id: Optional[str] = None

    # Listing details
    name: str
    price: Decimal = Field(ge=0)
    description: str = ""
    rating: float = Field(default=0.0, ge=0, le=5)
    total_reviews: int = Field(default=0, ge=0)
    amenities: List[str] = []

    # Status
    status: RoomStatus = RoomStatus.AVAILABLE

    # Ordered image URLs
    images: List[str] = []

    # Metadata
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        name: str,
        price: Decimal,
        description: str,
        rating: float,
        total_reviews: int,
        amenities: List[str],
        status: RoomStatus = RoomStatus.AVAILABLE,
        images: Optional[List[str]] = None
    ) -> "Room":
        """Create a new room listing with form validation"""
        amenities = Room._clean_amenities(amenities)
        Room._validate_listing(name, description, amenities)

        return Room(
            name=name.strip(),
            price=to_money(price),
            description=description.strip(),
            rating=rating,
            total_reviews=total_reviews,
            amenities=amenities,
            status=status,
            images=list(images or [])
        )

    # ==================== MODIFICATION METHODS ====================
    def update_details(
        self,
        name: str,
        price: Decimal,
        description: str,
        rating: float,
        total_reviews: int,
        amenities: List[str],
        status: RoomStatus,
        images: List[str]
    ) -> None:
        """Overwrite the listing fields from the edit form"""
        amenities = Room._clean_amenities(amenities)
        Room._validate_listing(name, description, amenities)

        updated = Room(
            room_id=self.room_id,
            name=name.strip(),
            price=to_money(price),
            description=description.strip(),
            rating=rating,
            total_reviews=total_reviews,
            amenities=amenities,
            status=status,
            images=list(images),
            created_at=self.created_at,
            updated_at=datetime.utcnow()
        )
        for field_name in Room.model_fields:
            setattr(self, field_name, getattr(updated, field_name))

    # ==================== QUERY METHODS ====================
    def is_available(self) -> bool:
        return self.status == RoomStatus.AVAILABLE

    # ==================== PRIVATE VALIDATION METHODS ====================
    @staticmethod
    def _clean_amenities(amenities: List[str]) -> List[str]:
        return [a.strip() for a in amenities if a and a.strip()]

    @staticmethod
    def _validate_listing(name: str, description: str, amenities: List[str]) -> None:
        if len(name.strip()) < 3:
            raise ValueError("Room name must be at least 3 characters")
        if len(description.strip()) < 20:
            raise ValueError("Description must be at least 20 characters")
        if not amenities:
            raise ValueError("At least one amenity is required")


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: Optional[str] = None

    # Guest
    guest_info: GuestInfo

    # Room reference plus name snapshot taken at booking time
    room_id: str
    room_name: str

    # Stay
    date_range: DateRange
    number_of_guests: int = Field(ge=1)

    # Pricing snapshot and derived fields
    number_of_nights: int = Field(ge=0)
    price_per_night: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)

    special_requests: str = ""

    # Status and transition log
    status: ReservationStatus = ReservationStatus.PENDING
    status_history: List[StatusChange] = []

    # Metadata
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        guest_info: GuestInfo,
        room: Room,
        date_range: DateRange,
        number_of_guests: int,
        special_requests: str = "",
        created_by: str = "SYSTEM"
    ) -> "Reservation":
        """Create a pending reservation priced from the room's current rate"""
        if not room.room_id:
            raise ValueError("Please select a room")
        Reservation._validate_guest_count(number_of_guests)

        quote = quote_stay(date_range.check_in, date_range.check_out, room.price)
        if not quote.bookable:
            raise ValueError("Check-out date must be after check-in date")

        return Reservation(
            guest_info=guest_info,
            room_id=room.room_id,
            room_name=room.name,
            date_range=date_range,
            number_of_guests=number_of_guests,
            number_of_nights=quote.nights,
            price_per_night=quote.price_per_night,
            total_price=quote.total_price,
            special_requests=special_requests or "",
            status=ReservationStatus.PENDING,
            status_history=[
                StatusChange(to_status=ReservationStatus.PENDING, changed_by=created_by)
            ]
        )

    # ==================== MODIFICATION METHODS ====================
    def modify(
        self,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        number_of_guests: Optional[int] = None,
        special_requests: Optional[str] = None
    ) -> None:
        """Edit dates, guest count or special requests, repricing the stay"""
        new_range = DateRange(
            check_in=check_in or self.date_range.check_in,
            check_out=check_out or self.date_range.check_out
        )
        # Repriced from the stored nightly rate, never the room's current price
        quote = quote_stay(new_range.check_in, new_range.check_out, self.price_per_night)
        if not quote.bookable:
            raise ValueError("Check-out date must be after check-in date")

        if number_of_guests is not None:
            Reservation._validate_guest_count(number_of_guests)
            self.number_of_guests = number_of_guests

        if special_requests is not None:
            self.special_requests = special_requests

        self.date_range = new_range
        self.number_of_nights = quote.nights
        self.total_price = quote.total_price
        self.updated_at = datetime.utcnow()

    # ==================== STATE TRANSITION METHODS ====================
    def transition_to(
        self,
        new_status: ReservationStatus,
        changed_by: str = "SYSTEM",
        enforce: bool = True
    ) -> StatusChange:
        """Move to new_status, recording the change in status_history"""
        new_status = ReservationStatus(new_status)
        if enforce and not self.can_transition_to(new_status):
            raise ValueError(
                f"Cannot change reservation status from {self.status.value} to {new_status.value}"
            )

        change = StatusChange(
            from_status=self.status,
            to_status=new_status,
            changed_by=changed_by
        )
        self.status = new_status
        self.status_history.append(change)
        self.updated_at = change.changed_at
        return change

    def confirm(self, changed_by: str = "SYSTEM", enforce: bool = True) -> StatusChange:
        return self.transition_to(ReservationStatus.CONFIRMED, changed_by, enforce)

    def check_in(self, changed_by: str = "SYSTEM", enforce: bool = True) -> StatusChange:
        return self.transition_to(ReservationStatus.CHECKED_IN, changed_by, enforce)

    def check_out(self, changed_by: str = "SYSTEM", enforce: bool = True) -> StatusChange:
        return self.transition_to(ReservationStatus.CHECKED_OUT, changed_by, enforce)

    def cancel(self, changed_by: str = "SYSTEM", enforce: bool = True) -> StatusChange:
        return self.transition_to(ReservationStatus.CANCELLED, changed_by, enforce)

    # ==================== QUERY METHODS ====================
    def allowed_transitions(self) -> List[ReservationStatus]:
        return list(RESERVATION_TRANSITIONS[self.status])

    def can_transition_to(self, new_status: ReservationStatus) -> bool:
        return new_status in RESERVATION_TRANSITIONS[self.status]

    def is_terminal(self) -> bool:
        return not RESERVATION_TRANSITIONS[self.status]

    def get_nights(self) -> int:
        return self.date_range.nights()

    # ==================== PRIVATE VALIDATION METHODS ====================
    @staticmethod
    def _validate_guest_count(number_of_guests: int) -> None:
        if number_of_guests < 1:
            raise ValueError("At least 1 guest is required")
