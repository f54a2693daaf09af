"""Application Services - Business use cases"""
import os
import re
import time
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, Dict, List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel

from application.catalog import count_by_status, filter_rooms
from domain.auth import AdminSession, AdminUser
from domain.entities import Room, Reservation
from domain.enums import ReservationStatus, RoomSortOrder, RoomStatus
from domain.exceptions import BackendError, NotFoundError
from domain.pricing import quote_stay
from domain.repositories import (
    IdentityProvider, ObjectStore, ReservationRepository, RoomRepository
)
from domain.value_objects import DateRange, EMAIL_PATTERN, GuestInfo, StayQuote
from infrastructure.logging_config import get_logger

logger = get_logger("services")

ROOM_IMAGE_PREFIX = "rooms"
GALLERY_PREFIX = "gallery"


async def _backend_call(operation: str, awaitable: Awaitable[Any]) -> Any:
    """Await a collaborator call, logging and wrapping backend failures"""
    try:
        return await awaitable
    except NotFoundError:
        raise
    except BackendError:
        logger.error("Backend operation failed: %s", operation, exc_info=True)
        raise
    except Exception as e:
        logger.error("Backend operation failed: %s", operation, exc_info=True)
        raise BackendError(operation, e) from e


class ImageUpload(BaseModel):
    """An image file received from the admin console"""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class ReservationStats(BaseModel):
    total: int
    pending: int
    confirmed: int
    checked_in: int
    revenue: Decimal


class MediaService:
    """Service for room and gallery image uploads"""

    def __init__(self, object_store: ObjectStore, max_room_images: int = 4):
        self.object_store = object_store
        self.max_room_images = max_room_images

    @staticmethod
    def _object_path(prefix: str, filename: str) -> str:
        name = os.path.basename(filename or "image")
        name = re.sub(r"[^A-Za-z0-9._-]+", "-", name).strip("-") or "image"
        millis = int(time.time() * 1000)
        return f"{prefix}/{millis}-{uuid4().hex[:8]}-{name}"

    @staticmethod
    def _validate_image(image: ImageUpload) -> None:
        if not image.content_type.startswith("image/"):
            raise ValueError(f"{image.filename} is not an image file")
        if not image.content:
            raise ValueError(f"{image.filename} is empty")

    async def _upload(self, prefix: str, images: List[ImageUpload]) -> List[str]:
        for image in images:
            self._validate_image(image)

        uploaded: List[str] = []
        urls: List[str] = []
        for image in images:
            path = self._object_path(prefix, image.filename)
            try:
                await self.object_store.upload(path, image.content, image.content_type)
                urls.append(await self.object_store.get_download_url(path))
            except Exception as e:
                if uploaded:
                    # No rollback: earlier blobs stay in the object store
                    logger.warning("Upload of %s failed; orphaned objects: %s", path, uploaded)
                logger.error("Image upload failed: %s", path, exc_info=True)
                raise BackendError(f"upload {path}", e) from e
            uploaded.append(path)
        logger.info("Uploaded %d image(s) under %s/", len(urls), prefix)
        return urls

    def check_image_count(self, count: int) -> None:
        """A room needs between 1 and max_room_images images"""
        if count < 1:
            raise ValueError("Please upload at least one image")
        if count > self.max_room_images:
            raise ValueError(f"You can only have up to {self.max_room_images} images")

    async def upload_room_images(self, images: List[ImageUpload]) -> List[str]:
        """Upload images under rooms/, returning URLs in input order"""
        if len(images) > self.max_room_images:
            raise ValueError(f"You can only upload up to {self.max_room_images} images")
        return await self._upload(ROOM_IMAGE_PREFIX, images)

    async def upload_gallery_image(self, image: ImageUpload) -> str:
        urls = await self._upload(GALLERY_PREFIX, [image])
        return urls[0]

    async def list_gallery(self) -> List[str]:
        """URLs of every gallery and room image"""
        urls = []
        for prefix in (GALLERY_PREFIX, ROOM_IMAGE_PREFIX):
            paths = await _backend_call(f"list {prefix}/", self.object_store.list_all(f"{prefix}/"))
            for path in paths:
                urls.append(await _backend_call(f"url {path}", self.object_store.get_download_url(path)))
        return urls

    async def download(self, path: str) -> Tuple[bytes, str]:
        return await _backend_call(f"download {path}", self.object_store.download(path))


class RoomService:
    """Service for Room catalog and room administration use cases"""

    def __init__(self, repository: RoomRepository, media: MediaService):
        self.repository = repository
        self.media = media

    async def list_rooms(
        self,
        status: Optional[RoomStatus] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort_by: RoomSortOrder = RoomSortOrder.FEATURED,
        search: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Room]:
        """Fetch every room (newest first) then filter and sort in memory"""
        rooms = await _backend_call("list rooms", self.repository.find_all(status))
        logger.debug("Fetched %d rooms", len(rooms))
        return filter_rooms(
            rooms,
            min_price=min_price,
            max_price=max_price,
            sort_by=sort_by,
            search=search,
            limit=limit
        )

    async def get_room(self, room_id: str) -> Room:
        room = await _backend_call(f"get room {room_id}", self.repository.find_by_id(room_id))
        if room is None:
            raise NotFoundError("Room", room_id)
        return room

    async def room_status_counts(self) -> Dict[str, int]:
        rooms = await _backend_call("list rooms", self.repository.find_all())
        return count_by_status(rooms)

    async def create_room(
        self,
        name: str,
        price: Decimal,
        description: str,
        rating: float,
        total_reviews: int,
        amenities: List[str],
        status: RoomStatus,
        images: List[ImageUpload]
    ) -> Room:
        """Validate the listing, upload its images, then write the room"""
        self.media.check_image_count(len(images))
        draft = Room.create(
            name=name,
            price=price,
            description=description,
            rating=rating,
            total_reviews=total_reviews,
            amenities=amenities,
            status=status
        )
        draft.images = await self.media.upload_room_images(images)

        try:
            room = await _backend_call("add room", self.repository.add(draft))
        except BackendError:
            logger.warning("Room write failed; uploaded images left behind: %s", draft.images)
            raise
        logger.info("Created room %s (%s)", room.room_id, room.name)
        return room

    async def update_room(
        self,
        room_id: str,
        name: str,
        price: Decimal,
        description: str,
        rating: float,
        total_reviews: int,
        amenities: List[str],
        status: RoomStatus,
        keep_images: List[str],
        new_images: List[ImageUpload]
    ) -> Room:
        """Overwrite a room's fields; images = kept URLs + newly uploaded ones"""
        room = await self.get_room(room_id)
        foreign = [url for url in keep_images if url not in room.images]
        if foreign:
            raise ValueError("Kept images must already belong to the room")
        self.media.check_image_count(len(keep_images) + len(new_images))

        # Validate the form before uploading anything
        Room.create(
            name=name, price=price, description=description, rating=rating,
            total_reviews=total_reviews, amenities=amenities, status=status
        )
        new_urls = await self.media.upload_room_images(new_images) if new_images else []

        room.update_details(
            name=name,
            price=price,
            description=description,
            rating=rating,
            total_reviews=total_reviews,
            amenities=amenities,
            status=status,
            images=list(keep_images) + new_urls
        )
        updated = await _backend_call(f"update room {room_id}", self.repository.update(room))
        logger.info("Updated room %s", room_id)
        return updated

    async def delete_room(self, room_id: str) -> None:
        """Hard delete; reservations referencing the room are left untouched"""
        await self.get_room(room_id)
        await _backend_call(f"delete room {room_id}", self.repository.delete(room_id))
        logger.info("Deleted room %s", room_id)


class ReservationService:
    """Service for Reservation business use cases"""

    def __init__(
        self,
        repository: ReservationRepository,
        room_repository: RoomRepository,
        enforce_transitions: bool = True
    ):
        self.repository = repository
        self.room_repository = room_repository
        self.enforce_transitions = enforce_transitions

    async def _get_room(self, room_id: Optional[str]) -> Room:
        if not room_id:
            raise ValueError("Please select a room")
        room = await _backend_call(f"get room {room_id}", self.room_repository.find_by_id(room_id))
        if room is None:
            raise NotFoundError("Room", room_id)
        return room

    async def quote(self, room_id: str, check_in: date, check_out: date) -> Tuple[Room, StayQuote]:
        """Price a stay at the room's current rate; never raises for bad dates"""
        room = await self._get_room(room_id)
        return room, quote_stay(check_in, check_out, room.price)

    async def create_reservation(
        self,
        room_id: Optional[str],
        guest_info: GuestInfo,
        check_in: date,
        check_out: date,
        number_of_guests: int,
        special_requests: str = "",
        created_by: str = "SYSTEM"
    ) -> Reservation:
        """Create a pending reservation with a price snapshot of the room"""
        room = await self._get_room(room_id)
        if not room.is_available():
            raise ValueError("This room is not available for booking")
        reservation = Reservation.create(
            guest_info=guest_info,
            room=room,
            date_range=DateRange(check_in=check_in, check_out=check_out),
            number_of_guests=number_of_guests,
            special_requests=special_requests,
            created_by=created_by
        )
        saved = await _backend_call("add reservation", self.repository.add(reservation))
        logger.info(
            "Created reservation %s for room %s: %d night(s), total %s",
            saved.reservation_id, room.room_id, saved.number_of_nights, saved.total_price
        )
        return saved

    async def get_reservation(self, reservation_id: str) -> Reservation:
        reservation = await _backend_call(
            f"get reservation {reservation_id}", self.repository.find_by_id(reservation_id)
        )
        if reservation is None:
            raise NotFoundError("Reservation", reservation_id)
        return reservation

    async def list_reservations(
        self,
        status: Optional[ReservationStatus] = None,
        search: Optional[str] = None
    ) -> List[Reservation]:
        """All reservations newest first, optionally narrowed by status and search term"""
        reservations = await _backend_call("list reservations", self.repository.find_all(status))
        if search:
            term = search.strip().lower()
            reservations = [
                r for r in reservations
                if term in r.guest_info.full_name.lower()
                or term in r.guest_info.email.lower()
                or term in r.room_name.lower()
            ]
        return reservations

    async def reservation_stats(self) -> ReservationStats:
        reservations = await _backend_call("list reservations", self.repository.find_all())
        return ReservationStats(
            total=len(reservations),
            pending=sum(1 for r in reservations if r.status == ReservationStatus.PENDING),
            confirmed=sum(1 for r in reservations if r.status == ReservationStatus.CONFIRMED),
            checked_in=sum(1 for r in reservations if r.status == ReservationStatus.CHECKED_IN),
            revenue=sum(
                (r.total_price for r in reservations if r.status != ReservationStatus.CANCELLED),
                Decimal("0.00")
            )
        )

    async def modify_reservation(
        self,
        reservation_id: str,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        number_of_guests: Optional[int] = None,
        special_requests: Optional[str] = None
    ) -> Reservation:
        """Edit dates/guests/requests; nights and total are recomputed"""
        reservation = await self.get_reservation(reservation_id)
        reservation.modify(
            check_in=check_in,
            check_out=check_out,
            number_of_guests=number_of_guests,
            special_requests=special_requests
        )
        updated = await _backend_call(
            f"update reservation {reservation_id}", self.repository.update(reservation)
        )
        logger.info(
            "Modified reservation %s: %d night(s), total %s",
            reservation_id, updated.number_of_nights, updated.total_price
        )
        return updated

    async def change_status(
        self,
        reservation_id: str,
        new_status: ReservationStatus,
        changed_by: str = "SYSTEM"
    ) -> Reservation:
        reservation = await self.get_reservation(reservation_id)
        change = reservation.transition_to(
            new_status, changed_by=changed_by, enforce=self.enforce_transitions
        )
        updated = await _backend_call(
            f"update reservation {reservation_id}", self.repository.update(reservation)
        )
        logger.info(
            "Reservation %s: %s -> %s by %s",
            reservation_id, change.from_status.value, change.to_status.value, changed_by
        )
        return updated

    async def confirm_reservation(self, reservation_id: str, changed_by: str = "SYSTEM") -> Reservation:
        return await self.change_status(reservation_id, ReservationStatus.CONFIRMED, changed_by)

    async def check_in_guest(self, reservation_id: str, changed_by: str = "SYSTEM") -> Reservation:
        return await self.change_status(reservation_id, ReservationStatus.CHECKED_IN, changed_by)

    async def check_out_guest(self, reservation_id: str, changed_by: str = "SYSTEM") -> Reservation:
        return await self.change_status(reservation_id, ReservationStatus.CHECKED_OUT, changed_by)

    async def cancel_reservation(self, reservation_id: str, changed_by: str = "SYSTEM") -> Reservation:
        return await self.change_status(reservation_id, ReservationStatus.CANCELLED, changed_by)

    async def delete_reservation(self, reservation_id: str) -> None:
        """Hard delete"""
        await self.get_reservation(reservation_id)
        await _backend_call(
            f"delete reservation {reservation_id}", self.repository.delete(reservation_id)
        )
        logger.info("Deleted reservation %s", reservation_id)


class AuthService:
    """Service for admin sign-in and sign-out"""

    def __init__(self, identity: IdentityProvider):
        self.identity = identity

    async def sign_in(self, email: str, password: str) -> AdminSession:
        if not EMAIL_PATTERN.match(email.strip()):
            raise ValueError("Invalid email address")
        if len(password) < 6:
            raise ValueError("Password must be at least 6 characters")
        # AuthError passes through untouched; it is a user-facing outcome
        return await self.identity.sign_in(email, password)

    async def sign_out(self, token: str) -> None:
        await _backend_call("sign out", self.identity.sign_out(token))

    async def current_user(self, token: str) -> Optional[AdminUser]:
        return await self.identity.verify_token(token)
