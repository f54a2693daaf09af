"""Document Store Backed Repository Implementations"""
from datetime import date
from decimal import InvalidOperation
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from domain.entities import Room, Reservation
from domain.enums import ReservationStatus, RoomStatus
from domain.exceptions import BackendError, NotFoundError
from domain.pricing import to_money
from domain.repositories import DocumentStore, RoomRepository, ReservationRepository
from domain.value_objects import DateRange, GuestInfo, StatusChange
from infrastructure.logging_config import get_logger

logger = get_logger("repositories")

ROOMS = "rooms"
RESERVATIONS = "reservations"

MALFORMED_DOCUMENT_ERRORS = (ValidationError, KeyError, TypeError, ValueError, InvalidOperation)


# ============================================================================
# DOCUMENT MAPPING
# ============================================================================

def room_to_document(room: Room) -> Dict[str, Any]:
    """Convert Room entity to its stored document shape"""
    return {
        "name": room.name,
        "price": float(room.price),
        "description": room.description,
        "rating": room.rating,
        "totalReviews": room.total_reviews,
        "amenities": list(room.amenities),
        "status": room.status.value,
        "images": list(room.images),
    }


def room_from_document(document: Dict[str, Any]) -> Room:
    """Validate a stored room document into a Room entity"""
    return Room(
        room_id=document["id"],
        name=document.get("name", ""),
        price=to_money(document.get("price", 0)),
        description=document.get("description", ""),
        rating=document.get("rating", 0),
        total_reviews=document.get("totalReviews", 0),
        amenities=document.get("amenities") or [],
        status=document.get("status", RoomStatus.AVAILABLE.value),
        images=document.get("images") or [],
        created_at=document.get("createdAt"),
        updated_at=document.get("updatedAt"),
    )


def _status_change_to_document(change: StatusChange) -> Dict[str, Any]:
    return {
        "fromStatus": change.from_status.value if change.from_status else None,
        "toStatus": change.to_status.value,
        "changedAt": change.changed_at,
        "changedBy": change.changed_by,
    }


def reservation_to_document(reservation: Reservation) -> Dict[str, Any]:
    """Convert Reservation entity to its stored document shape"""
    return {
        "guestInfo": {
            "fullName": reservation.guest_info.full_name,
            "email": reservation.guest_info.email,
            "phone": reservation.guest_info.phone,
        },
        "roomId": reservation.room_id,
        "roomName": reservation.room_name,
        "checkIn": reservation.date_range.check_in.isoformat(),
        "checkOut": reservation.date_range.check_out.isoformat(),
        "numberOfGuests": reservation.number_of_guests,
        "numberOfNights": reservation.number_of_nights,
        "pricePerNight": float(reservation.price_per_night),
        "totalPrice": float(reservation.total_price),
        "specialRequests": reservation.special_requests,
        "status": reservation.status.value,
        "statusHistory": [_status_change_to_document(c) for c in reservation.status_history],
    }


def reservation_from_document(document: Dict[str, Any]) -> Reservation:
    """Validate a stored reservation document into a Reservation entity"""
    guest = document.get("guestInfo") or {}
    return Reservation(
        reservation_id=document["id"],
        guest_info=GuestInfo(
            full_name=guest.get("fullName", ""),
            email=guest.get("email", ""),
            phone=guest.get("phone", ""),
        ),
        room_id=document.get("roomId", ""),
        room_name=document.get("roomName", "N/A"),
        date_range=DateRange(
            check_in=date.fromisoformat(document["checkIn"]),
            check_out=date.fromisoformat(document["checkOut"]),
        ),
        number_of_guests=document.get("numberOfGuests", 1),
        number_of_nights=document.get("numberOfNights", 0),
        price_per_night=to_money(document.get("pricePerNight", 0)),
        total_price=to_money(document.get("totalPrice", 0)),
        special_requests=document.get("specialRequests") or "",
        status=document.get("status", ReservationStatus.PENDING.value),
        status_history=[
            StatusChange(
                from_status=c.get("fromStatus"),
                to_status=c["toStatus"],
                changed_at=c["changedAt"],
                changed_by=c.get("changedBy", "SYSTEM"),
            )
            for c in document.get("statusHistory") or []
        ],
        created_at=document.get("createdAt"),
        updated_at=document.get("updatedAt"),
    )


# ============================================================================
# REPOSITORIES
# ============================================================================

class DocumentRoomRepository(RoomRepository):
    """RoomRepository over the "rooms" document collection"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _load(self, document: Dict[str, Any]) -> Room:
        try:
            return room_from_document(document)
        except MALFORMED_DOCUMENT_ERRORS as e:
            raise BackendError(f"read room {document.get('id')}", e)

    async def add(self, room: Room) -> Room:
        room_id = await self.store.add(ROOMS, room_to_document(room))
        return await self.find_by_id(room_id)

    async def find_by_id(self, room_id: str) -> Optional[Room]:
        document = await self.store.get(ROOMS, room_id)
        if document is None:
            return None
        return self._load(document)

    async def find_all(self, status: Optional[RoomStatus] = None) -> List[Room]:
        filters = [("status", RoomStatus(status).value)] if status else None
        documents = await self.store.query(ROOMS, filters, order_by="createdAt", descending=True)
        rooms = []
        for document in documents:
            try:
                rooms.append(room_from_document(document))
            except MALFORMED_DOCUMENT_ERRORS as e:
                logger.warning("Skipping malformed room document %s: %s", document.get("id"), e)
        return rooms

    async def update(self, room: Room) -> Room:
        if not room.room_id:
            raise NotFoundError("Room", "")
        await self.store.update(ROOMS, room.room_id, room_to_document(room))
        return await self.find_by_id(room.room_id)

    async def delete(self, room_id: str) -> None:
        await self.store.delete(ROOMS, room_id)


class DocumentReservationRepository(ReservationRepository):
    """ReservationRepository over the "reservations" document collection"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _load(self, document: Dict[str, Any]) -> Reservation:
        try:
            return reservation_from_document(document)
        except MALFORMED_DOCUMENT_ERRORS as e:
            raise BackendError(f"read reservation {document.get('id')}", e)

    async def add(self, reservation: Reservation) -> Reservation:
        reservation_id = await self.store.add(RESERVATIONS, reservation_to_document(reservation))
        return await self.find_by_id(reservation_id)

    async def find_by_id(self, reservation_id: str) -> Optional[Reservation]:
        document = await self.store.get(RESERVATIONS, reservation_id)
        if document is None:
            return None
        return self._load(document)

    async def find_all(self, status: Optional[ReservationStatus] = None) -> List[Reservation]:
        filters = [("status", ReservationStatus(status).value)] if status else None
        documents = await self.store.query(RESERVATIONS, filters, order_by="createdAt", descending=True)
        reservations = []
        for document in documents:
            try:
                reservations.append(reservation_from_document(document))
            except MALFORMED_DOCUMENT_ERRORS as e:
                logger.warning("Skipping malformed reservation document %s: %s", document.get("id"), e)
        return reservations

    async def update(self, reservation: Reservation) -> Reservation:
        if not reservation.reservation_id:
            raise NotFoundError("Reservation", "")
        await self.store.update(
            RESERVATIONS, reservation.reservation_id, reservation_to_document(reservation)
        )
        return await self.find_by_id(reservation.reservation_id)

    async def delete(self, reservation_id: str) -> None:
        await self.store.delete(RESERVATIONS, reservation_id)
