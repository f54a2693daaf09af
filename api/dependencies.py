"""API Dependencies - Authentication and backend wiring"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from application.services import AuthService, MediaService, ReservationService, RoomService
from domain.auth import AdminUser
from infrastructure.config import get_settings
from infrastructure.document_store import InMemoryDocumentStore
from infrastructure.identity import InMemoryIdentityProvider
from infrastructure.object_store import InMemoryObjectStore
from infrastructure.repositories.document_repositories import (
    DocumentReservationRepository, DocumentRoomRepository
)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

settings = get_settings()

# Backends shared by every request
document_store = InMemoryDocumentStore()
object_store = InMemoryObjectStore(base_url=settings.MEDIA_BASE_URL)
identity_provider = InMemoryIdentityProvider(
    max_failed_attempts=settings.MAX_FAILED_LOGIN_ATTEMPTS,
    lockout_minutes=settings.LOGIN_LOCKOUT_MINUTES,
    token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
)
identity_provider.add_user(
    settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_DISPLAY_NAME
)

room_repo = DocumentRoomRepository(document_store)
reservation_repo = DocumentReservationRepository(document_store)


# Dependency injection
def get_media_service() -> MediaService:
    return MediaService(object_store, max_room_images=settings.MAX_ROOM_IMAGES)


def get_room_service(media: MediaService = Depends(get_media_service)) -> RoomService:
    return RoomService(room_repo, media)


def get_reservation_service() -> ReservationService:
    return ReservationService(
        reservation_repo, room_repo, enforce_transitions=settings.ENFORCE_STATUS_TRANSITIONS
    )


def get_auth_service() -> AuthService:
    return AuthService(identity_provider)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service)
) -> AdminUser:
    user = await auth.current_user(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(current_user: AdminUser = Depends(get_current_user)) -> AdminUser:
    if current_user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user
