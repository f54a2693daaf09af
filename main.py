from fastapi import FastAPI, HTTPException, Depends, File, Form, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.security import OAuth2PasswordRequestForm
from decimal import Decimal
from typing import List, Optional

from api.schemas import (
    # Rooms
    RoomResponse, RoomStatusCountsResponse,
    # Bookings / reservations
    QuoteRequest, QuoteResponse, CreateReservationRequest, ModifyReservationRequest,
    ChangeStatusRequest, ReservationResponse, ReservationStatsResponse,
    GuestInfoRequest, StatusChangeResponse,
    # Media
    GalleryResponse, UploadResponse,
    # Auth
    LoginRequest, Token, UserResponse
)

from api.dependencies import (
    oauth2_scheme, get_current_active_user, get_auth_service,
    get_media_service, get_room_service, get_reservation_service
)
from application.services import (
    AuthService, ImageUpload, MediaService, ReservationService, RoomService
)
from domain.auth import AdminUser
from domain.entities import Room, Reservation
from domain.enums import (
    AuthErrorCode, ReservationStatus, RoomSortOrder, RoomStatus, RESERVATION_TRANSITIONS
)
from domain.exceptions import AuthError, BackendError, NotFoundError
from domain.value_objects import GuestInfo
from infrastructure.config import get_settings
from infrastructure.logging_config import setup_logging

settings = get_settings()
logger = setup_logging()

app = FastAPI(
    title=settings.APP_NAME,
    description="Hotel rooms, bookings and administration API",
    version=settings.APP_VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    return JSONResponse(
        status_code=503,
        content={"detail": "Service temporarily unavailable. Please try again."}
    )

@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    status_code = 429 if exc.code == AuthErrorCode.TOO_MANY_REQUESTS else 401
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code.value},
        headers={"WWW-Authenticate": "Bearer"},
    )

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus values and their allowed next statuses"""
    return {
        "values": [item.value for item in ReservationStatus],
        "transitions": {
            source.value: [target.value for target in targets]
            for source, targets in RESERVATION_TRANSITIONS.items()
        }
    }

@app.get("/api/enums/room-status", tags=["Enum Reference"])
async def get_room_statuses():
    """Get all RoomStatus values"""
    return {"values": [item.value for item in RoomStatus]}

@app.get("/api/enums/room-sort", tags=["Enum Reference"])
async def get_room_sort_orders():
    """Get all RoomSortOrder values"""
    return {"values": [item.value for item in RoomSortOrder]}

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth: AuthService = Depends(get_auth_service)
):
    """OAuth2 password flow; the username field carries the admin email"""
    try:
        session = await auth.sign_in(form_data.username, form_data.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"access_token": session.access_token, "token_type": session.token_type,
            "expires_at": session.expires_at}

@app.post("/api/auth/login", response_model=Token, tags=["Auth"])
async def login(
    request: LoginRequest,
    auth: AuthService = Depends(get_auth_service)
):
    """Sign in with email and password"""
    try:
        session = await auth.sign_in(request.email, request.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"access_token": session.access_token, "token_type": session.token_type,
            "expires_at": session.expires_at}

@app.post("/api/auth/logout", tags=["Auth"])
async def logout(
    token: str = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Revoke the current access token"""
    await auth.sign_out(token)
    return {"message": "Logged out successfully"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: AdminUser = Depends(get_current_active_user)):
    return current_user

# ============================================================================
# PUBLIC ROOM ENDPOINTS
# ============================================================================

@app.get("/api/rooms", response_model=List[RoomResponse], tags=["Rooms"])
async def list_rooms(
    status: Optional[RoomStatus] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    sort_by: RoomSortOrder = RoomSortOrder.FEATURED,
    limit: Optional[int] = Query(None, ge=1),
    service: RoomService = Depends(get_room_service)
):
    """List rooms, newest first unless another sort order is requested"""
    rooms = await service.list_rooms(
        status=status,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        limit=limit
    )
    return [_room_to_response(r) for r in rooms]

@app.get("/api/rooms/{room_id}", response_model=RoomResponse, tags=["Rooms"])
async def get_room(
    room_id: str,
    service: RoomService = Depends(get_room_service)
):
    """Get room by ID"""
    room = await service.get_room(room_id)
    return _room_to_response(room)

# ============================================================================
# PUBLIC BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings/quote", response_model=QuoteResponse, tags=["Bookings"])
async def quote_booking(
    request: QuoteRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Price a stay; a stay of zero nights comes back with bookable=false"""
    try:
        room, quote = await service.quote(request.room_id, request.check_in, request.check_out)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return QuoteResponse(
        room_id=room.room_id,
        room_name=room.name,
        check_in=request.check_in,
        check_out=request.check_out,
        nights=quote.nights,
        price_per_night=quote.price_per_night,
        total_price=quote.total_price,
        currency=settings.CURRENCY,
        bookable=quote.bookable
    )

@app.post("/api/bookings", response_model=ReservationResponse, status_code=201, tags=["Bookings"])
async def create_booking(
    request: CreateReservationRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Book a room as a guest"""
    return await _create_reservation(request, service, created_by="GUEST")

# ============================================================================
# MEDIA ENDPOINTS
# ============================================================================

@app.get("/api/gallery", response_model=GalleryResponse, tags=["Media"])
async def get_gallery(media: MediaService = Depends(get_media_service)):
    """URLs of gallery and room images"""
    return {"images": await media.list_gallery()}

@app.get("/media/{path:path}", tags=["Media"])
async def get_media(path: str, media: MediaService = Depends(get_media_service)):
    """Serve a stored image"""
    content, content_type = await media.download(path)
    return Response(content=content, media_type=content_type)

@app.post("/api/admin/gallery", response_model=UploadResponse, status_code=201, tags=["Media"])
async def upload_gallery_image(
    image: UploadFile = File(...),
    media: MediaService = Depends(get_media_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Upload a gallery image"""
    try:
        url = await media.upload_gallery_image(await _read_upload(image))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"url": url}

# ============================================================================
# ADMIN ROOM ENDPOINTS
# ============================================================================

@app.get("/api/admin/rooms", response_model=List[RoomResponse], tags=["Admin Rooms"])
async def admin_list_rooms(
    search: Optional[str] = None,
    status: Optional[RoomStatus] = None,
    service: RoomService = Depends(get_room_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """List rooms matching a name search and status"""
    rooms = await service.list_rooms(status=status, search=search)
    return [_room_to_response(r) for r in rooms]

@app.get("/api/admin/rooms/stats", response_model=RoomStatusCountsResponse, tags=["Admin Rooms"])
async def admin_room_stats(
    service: RoomService = Depends(get_room_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Room counts per status"""
    return await service.room_status_counts()

@app.get("/api/admin/rooms/{room_id}", response_model=RoomResponse, tags=["Admin Rooms"])
async def admin_get_room(
    room_id: str,
    service: RoomService = Depends(get_room_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Get room by ID for the edit form"""
    room = await service.get_room(room_id)
    return _room_to_response(room)

@app.post("/api/admin/rooms", response_model=RoomResponse, status_code=201, tags=["Admin Rooms"])
async def admin_create_room(
    name: str = Form(...),
    price: Decimal = Form(..., ge=0),
    description: str = Form(...),
    rating: float = Form(..., ge=0, le=5),
    total_reviews: int = Form(..., ge=0),
    amenities: List[str] = Form(...),
    status: RoomStatus = Form(RoomStatus.AVAILABLE),
    images: List[UploadFile] = File(...),
    service: RoomService = Depends(get_room_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Create a room listing; images are uploaded before the room is written"""
    try:
        room = await service.create_room(
            name=name,
            price=price,
            description=description,
            rating=rating,
            total_reviews=total_reviews,
            amenities=amenities,
            status=status,
            images=[await _read_upload(f) for f in images]
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _room_to_response(room)

@app.put("/api/admin/rooms/{room_id}", response_model=RoomResponse, tags=["Admin Rooms"])
async def admin_update_room(
    room_id: str,
    name: str = Form(...),
    price: Decimal = Form(..., ge=0),
    description: str = Form(...),
    rating: float = Form(..., ge=0, le=5),
    total_reviews: int = Form(..., ge=0),
    amenities: List[str] = Form(...),
    status: RoomStatus = Form(...),
    keep_images: Optional[List[str]] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    service: RoomService = Depends(get_room_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Edit a room; kept image URLs are followed by newly uploaded images"""
    try:
        room = await service.update_room(
            room_id=room_id,
            name=name,
            price=price,
            description=description,
            rating=rating,
            total_reviews=total_reviews,
            amenities=amenities,
            status=status,
            keep_images=keep_images or [],
            new_images=[await _read_upload(f) for f in images or []]
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _room_to_response(room)

@app.delete("/api/admin/rooms/{room_id}", status_code=204, tags=["Admin Rooms"])
async def admin_delete_room(
    room_id: str,
    service: RoomService = Depends(get_room_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Delete a room; existing reservations keep their room reference"""
    await service.delete_room(room_id)
    return Response(status_code=204)

# ============================================================================
# ADMIN RESERVATION ENDPOINTS
# ============================================================================

@app.get("/api/admin/reservations", response_model=List[ReservationResponse], tags=["Admin Reservations"])
async def admin_list_reservations(
    status: Optional[ReservationStatus] = None,
    search: Optional[str] = None,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """List reservations, newest first"""
    reservations = await service.list_reservations(status=status, search=search)
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/admin/reservations/stats", response_model=ReservationStatsResponse, tags=["Admin Reservations"])
async def admin_reservation_stats(
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Dashboard counts and revenue (cancelled reservations excluded)"""
    stats = await service.reservation_stats()
    return ReservationStatsResponse(**stats.model_dump(), currency=settings.CURRENCY)

@app.post("/api/admin/reservations", response_model=ReservationResponse, status_code=201, tags=["Admin Reservations"])
async def admin_create_reservation(
    request: CreateReservationRequest,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Create a reservation on behalf of a guest"""
    return await _create_reservation(request, service, created_by=current_user.email)

@app.get("/api/admin/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Admin Reservations"])
async def admin_get_reservation(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Get reservation by ID"""
    reservation = await service.get_reservation(reservation_id)
    return _reservation_to_response(reservation)

@app.put("/api/admin/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Admin Reservations"])
async def admin_modify_reservation(
    reservation_id: str,
    request: ModifyReservationRequest,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Edit dates, guest count or special requests"""
    try:
        reservation = await service.modify_reservation(
            reservation_id=reservation_id,
            check_in=request.check_in,
            check_out=request.check_out,
            number_of_guests=request.number_of_guests,
            special_requests=request.special_requests
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reservation_to_response(reservation)

@app.post("/api/admin/reservations/{reservation_id}/status", response_model=ReservationResponse, tags=["Admin Reservations"])
async def admin_change_reservation_status(
    reservation_id: str,
    request: ChangeStatusRequest,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Move a reservation to another status"""
    try:
        reservation = await service.change_status(
            reservation_id, request.status, changed_by=current_user.email
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reservation_to_response(reservation)

@app.post("/api/admin/reservations/{reservation_id}/confirm", response_model=ReservationResponse, tags=["Admin Reservations"])
async def admin_confirm_reservation(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Confirm a pending reservation"""
    try:
        reservation = await service.confirm_reservation(reservation_id, changed_by=current_user.email)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reservation_to_response(reservation)

@app.post("/api/admin/reservations/{reservation_id}/check-in", response_model=ReservationResponse, tags=["Admin Reservations"])
async def admin_check_in(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Check in the guest of a confirmed reservation"""
    try:
        reservation = await service.check_in_guest(reservation_id, changed_by=current_user.email)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reservation_to_response(reservation)

@app.post("/api/admin/reservations/{reservation_id}/check-out", response_model=ReservationResponse, tags=["Admin Reservations"])
async def admin_check_out(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Check out a checked-in guest"""
    try:
        reservation = await service.check_out_guest(reservation_id, changed_by=current_user.email)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reservation_to_response(reservation)

@app.post("/api/admin/reservations/{reservation_id}/cancel", response_model=ReservationResponse, tags=["Admin Reservations"])
async def admin_cancel_reservation(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Cancel a reservation that has not checked out"""
    try:
        reservation = await service.cancel_reservation(reservation_id, changed_by=current_user.email)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reservation_to_response(reservation)

@app.delete("/api/admin/reservations/{reservation_id}", status_code=204, tags=["Admin Reservations"])
async def admin_delete_reservation(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_active_user)
):
    """Permanently delete a reservation"""
    await service.delete_reservation(reservation_id)
    return Response(status_code=204)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

async def _create_reservation(
    request: CreateReservationRequest,
    service: ReservationService,
    created_by: str
) -> ReservationResponse:
    try:
        guest_info = GuestInfo(
            full_name=request.guest_info.full_name,
            email=request.guest_info.email,
            phone=request.guest_info.phone
        )
        reservation = await service.create_reservation(
            room_id=request.room_id,
            guest_info=guest_info,
            check_in=request.check_in,
            check_out=request.check_out,
            number_of_guests=request.number_of_guests,
            special_requests=request.special_requests,
            created_by=created_by
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reservation_to_response(reservation)

async def _read_upload(upload: UploadFile) -> ImageUpload:
    """Convert an UploadFile to an ImageUpload"""
    return ImageUpload(
        filename=upload.filename or "image",
        content=await upload.read(),
        content_type=upload.content_type or "application/octet-stream"
    )

def _room_to_response(room: Room) -> RoomResponse:
    """Convert Room entity to RoomResponse"""
    return RoomResponse(
        room_id=room.room_id,
        name=room.name,
        price=room.price,
        description=room.description,
        rating=room.rating,
        total_reviews=room.total_reviews,
        amenities=room.amenities,
        status=room.status.value,
        images=room.images,
        created_at=room.created_at,
        updated_at=room.updated_at
    )

def _reservation_to_response(reservation: Reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        guest_info=GuestInfoRequest(
            full_name=reservation.guest_info.full_name,
            email=reservation.guest_info.email,
            phone=reservation.guest_info.phone
        ),
        room_id=reservation.room_id,
        room_name=reservation.room_name,
        check_in=reservation.date_range.check_in,
        check_out=reservation.date_range.check_out,
        number_of_guests=reservation.number_of_guests,
        number_of_nights=reservation.number_of_nights,
        price_per_night=reservation.price_per_night,
        total_price=reservation.total_price,
        currency=settings.CURRENCY,
        special_requests=reservation.special_requests,
        status=reservation.status.value,
        allowed_transitions=[s.value for s in reservation.allowed_transitions()],
        status_history=[
            StatusChangeResponse(
                from_status=c.from_status.value if c.from_status else None,
                to_status=c.to_status.value,
                changed_at=c.changed_at,
                changed_by=c.changed_by
            )
            for c in reservation.status_history
        ],
        created_at=reservation.created_at,
        updated_at=reservation.updated_at
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
