"""Domain Repository and Collaborator Interfaces"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from domain.auth import AdminSession, AdminUser
from domain.entities import Room, Reservation
from domain.enums import ReservationStatus, RoomStatus

# (field, value) equality predicates
Filters = List[Tuple[str, Any]]


class DocumentStore(ABC):
    """Schema-less document database collaborator"""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one document (with its "id" key) or None"""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Dict[str, Any]]:
        """Fetch documents matching all equality filters"""
        pass

    @abstractmethod
    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document and return its generated id"""
        pass

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge partial data into an existing document"""
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove a document"""
        pass


class ObjectStore(ABC):
    """Blob storage collaborator"""

    @abstractmethod
    async def upload(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> None:
        pass

    @abstractmethod
    async def get_download_url(self, path: str) -> str:
        pass

    @abstractmethod
    async def list_all(self, prefix: str) -> List[str]:
        """List object paths under prefix"""
        pass

    @abstractmethod
    async def download(self, path: str) -> Tuple[bytes, str]:
        """Return (content, content_type) for a stored object"""
        pass


class IdentityProvider(ABC):
    """Authentication collaborator for administrative users"""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AdminSession:
        pass

    @abstractmethod
    async def sign_out(self, token: str) -> None:
        pass

    @abstractmethod
    async def verify_token(self, token: str) -> Optional[AdminUser]:
        """Resolve a bearer token to its user, or None if invalid or revoked"""
        pass


class RoomRepository(ABC):
    """Repository interface for Room Aggregate"""

    @abstractmethod
    async def add(self, room: Room) -> Room:
        """Persist a new room, returning it with its assigned id"""
        pass

    @abstractmethod
    async def find_by_id(self, room_id: str) -> Optional[Room]:
        pass

    @abstractmethod
    async def find_all(self, status: Optional[RoomStatus] = None) -> List[Room]:
        """Find all rooms, newest first"""
        pass

    @abstractmethod
    async def update(self, room: Room) -> Room:
        pass

    @abstractmethod
    async def delete(self, room_id: str) -> None:
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate"""

    @abstractmethod
    async def add(self, reservation: Reservation) -> Reservation:
        """Persist a new reservation, returning it with its assigned id"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: str) -> Optional[Reservation]:
        pass

    @abstractmethod
    async def find_all(self, status: Optional[ReservationStatus] = None) -> List[Reservation]:
        """Find all reservations, newest first"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        pass

    @abstractmethod
    async def delete(self, reservation_id: str) -> None:
        pass
