# amenity_engine/routes/v1/amenities.py
"""
Amenity routes - API v1

Versioned amenity endpoints under /api/v1/amenities.
All business logic delegated to AmenityService.

Endpoints:
    GET    /                                    → List amenities (optionally by category / active)
    POST   /                                    → Create amenity
    GET    /reservations?guest_id=              → Reservations for a guest
    POST   /reservations                        → Create reservation
    GET    /reservations/{id}                   → Get reservation
    POST   /reservations/{id}/confirm           → pending → confirmed
    POST   /reservations/{id}/cancel            → pending|confirmed → cancelled
    POST   /reservations/{id}/complete          → confirmed → completed
    POST   /reservations/{id}/no-show           → confirmed → no_show
    GET    /{amenity_id}                        → Get amenity
    PATCH  /{amenity_id}                        → Update amenity
    DELETE /{amenity_id}                        → Delete amenity
    PUT    /{amenity_id}/status                 → Change amenity status
    POST   /{amenity_id}/activate               → Activate amenity
    POST   /{amenity_id}/deactivate             → Deactivate amenity
    GET    /{amenity_id}/schedule               → Weekly schedule overrides
    PUT    /{amenity_id}/schedule               → Replace weekly schedule
    GET    /{amenity_id}/open                   → Open at day/time, or right now
    GET    /{amenity_id}/reservations?date=     → Reservations for a date
    GET    /{amenity_id}/availability           → Is an interval free
    GET    /{amenity_id}/slots?date=            → Free slots for a date
    GET    /{amenity_id}/quote                  → Duration and cost of an interval
"""

import asyncio
from datetime import date
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from ...core.enums import AmenityCategory
from ...core.exceptions import DomainException, NotFoundException
from ...database import get_db
from ...schemas.amenity import (
    AmenityCreate,
    AmenityResponse,
    AmenityStatusUpdate,
    AmenityUpdate,
    AvailabilityResponse,
    OpenStatusResponse,
    ReservationCreate,
    ReservationCreatedResponse,
    ReservationQuote,
    ReservationResponse,
    ScheduleEntryResponse,
    ScheduleUpdate,
    TimeSlot,
)
from ...services.amenity_service import AmenityService
from ...utils.time_utils import normalize_time

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["amenities-v1"])


def get_amenity_service(db: Session = Depends(get_db)) -> AmenityService:
    """Dependency to get amenity service."""
    return AmenityService(db)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# SECTION 1: Collection routes (no path parameters)
# ============================================================================


@router.get("", response_model=List[AmenityResponse])
async def list_amenities(
    category: Optional[AmenityCategory] = Query(None),
    active_only: bool = Query(False),
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> List[AmenityResponse]:
    """List amenities, optionally filtered by category or to active ones only."""
    if category is not None:
        amenities = await asyncio.to_thread(amenity_service.get_amenities_by_category, category)
        if active_only:
            amenities = [a for a in amenities if a.is_active]
    elif active_only:
        amenities = await asyncio.to_thread(amenity_service.get_active_amenities)
    else:
        amenities = await asyncio.to_thread(amenity_service.get_amenities)

    return [AmenityResponse.model_validate(a) for a in amenities]


@router.post("", response_model=AmenityResponse, status_code=status.HTTP_201_CREATED)
async def create_amenity(
    payload: AmenityCreate,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> AmenityResponse:
    try:
        amenity = await asyncio.to_thread(amenity_service.create_amenity, payload)
        return AmenityResponse.model_validate(amenity)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Reservation routes (static prefix before /{amenity_id})
# ============================================================================


@router.get("/reservations", response_model=List[ReservationResponse])
async def list_guest_reservations(
    guest_id: str = Query(..., min_length=1),
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> List[ReservationResponse]:
    reservations = await asyncio.to_thread(amenity_service.get_reservations_for_guest, guest_id)
    return [ReservationResponse.model_validate(r) for r in reservations]


@router.post(
    "/reservations",
    response_model=ReservationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_reservation(
    payload: ReservationCreate,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> ReservationCreatedResponse:
    """
    Create a pending reservation.

    Returns the stored reservation together with its cost.

    Raises:
        HTTPException: 404 unknown amenity, 400 invalid request,
            422 amenity closed/inactive, 409 overlapping reservation
    """
    try:
        reservation = await asyncio.to_thread(amenity_service.create_reservation, payload)
        quote = await asyncio.to_thread(
            amenity_service.quote_reservation,
            reservation.amenity_id,
            reservation.start_time,
            reservation.end_time,
        )
    except DomainException as e:
        handle_domain_exception(e)

    body = ReservationResponse.model_validate(reservation).model_dump()
    return ReservationCreatedResponse(**body, cost=quote["cost"])


@router.get("/reservations/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> ReservationResponse:
    reservation = await asyncio.to_thread(amenity_service.get_reservation, reservation_id)
    if not reservation:
        handle_domain_exception(
            NotFoundException("Reservation not found", details={"reservation_id": reservation_id})
        )
    return ReservationResponse.model_validate(reservation)


@router.post("/reservations/{reservation_id}/confirm", response_model=ReservationResponse)
async def confirm_reservation(
    reservation_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> ReservationResponse:
    try:
        reservation = await asyncio.to_thread(amenity_service.confirm_reservation, reservation_id)
        return ReservationResponse.model_validate(reservation)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/reservations/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> ReservationResponse:
    try:
        reservation = await asyncio.to_thread(amenity_service.cancel_reservation, reservation_id)
        return ReservationResponse.model_validate(reservation)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/reservations/{reservation_id}/complete", response_model=ReservationResponse)
async def complete_reservation(
    reservation_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> ReservationResponse:
    try:
        reservation = await asyncio.to_thread(amenity_service.complete_reservation, reservation_id)
        return ReservationResponse.model_validate(reservation)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/reservations/{reservation_id}/no-show", response_model=ReservationResponse)
async def mark_no_show(
    reservation_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> ReservationResponse:
    try:
        reservation = await asyncio.to_thread(amenity_service.mark_no_show, reservation_id)
        return ReservationResponse.model_validate(reservation)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 3: Single amenity routes
# ============================================================================


@router.get("/{amenity_id}", response_model=AmenityResponse)
async def get_amenity(
    amenity_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> AmenityResponse:
    amenity = await asyncio.to_thread(amenity_service.get_amenity, amenity_id)
    if not amenity:
        handle_domain_exception(
            NotFoundException("Amenity not found", details={"amenity_id": amenity_id})
        )
    return AmenityResponse.model_validate(amenity)


@router.patch("/{amenity_id}", response_model=AmenityResponse)
async def update_amenity(
    amenity_id: str,
    payload: AmenityUpdate,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> AmenityResponse:
    try:
        amenity = await asyncio.to_thread(amenity_service.update_amenity, amenity_id, payload)
        return AmenityResponse.model_validate(amenity)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{amenity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_amenity(
    amenity_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> Response:
    try:
        await asyncio.to_thread(amenity_service.delete_amenity, amenity_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{amenity_id}/status", response_model=AmenityResponse)
async def set_amenity_status(
    amenity_id: str,
    payload: AmenityStatusUpdate,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> AmenityResponse:
    try:
        amenity = await asyncio.to_thread(amenity_service.set_status, amenity_id, payload.status)
        return AmenityResponse.model_validate(amenity)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{amenity_id}/activate", response_model=AmenityResponse)
async def activate_amenity(
    amenity_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> AmenityResponse:
    try:
        amenity = await asyncio.to_thread(amenity_service.activate_amenity, amenity_id)
        return AmenityResponse.model_validate(amenity)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{amenity_id}/deactivate", response_model=AmenityResponse)
async def deactivate_amenity(
    amenity_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> AmenityResponse:
    try:
        amenity = await asyncio.to_thread(amenity_service.deactivate_amenity, amenity_id)
        return AmenityResponse.model_validate(amenity)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{amenity_id}/schedule", response_model=List[ScheduleEntryResponse])
async def get_schedule(
    amenity_id: str,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> List[ScheduleEntryResponse]:
    entries = await asyncio.to_thread(amenity_service.get_schedule, amenity_id)
    return [ScheduleEntryResponse.model_validate(e) for e in entries]


@router.put("/{amenity_id}/schedule", response_model=List[ScheduleEntryResponse])
async def set_schedule(
    amenity_id: str,
    payload: ScheduleUpdate,
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> List[ScheduleEntryResponse]:
    try:
        entries = await asyncio.to_thread(
            amenity_service.set_schedule, amenity_id, payload.entries
        )
        return [ScheduleEntryResponse.model_validate(e) for e in entries]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{amenity_id}/open", response_model=OpenStatusResponse)
async def get_open_status(
    amenity_id: str,
    day_of_week: Optional[int] = Query(None, ge=0, le=6, description="0=Sunday .. 6=Saturday"),
    time: Optional[str] = Query(None, description="HH:MM"),
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> OpenStatusResponse:
    """
    Whether the amenity is open.

    With both day_of_week and time, checks that instant; with neither,
    checks the current resort-local time.
    """
    try:
        if day_of_week is None and time is None:
            day_of_week, time = amenity_service.current_day_and_time()
            is_open = await asyncio.to_thread(amenity_service.is_open_now, amenity_id)
        elif day_of_week is None or time is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="day_of_week and time must be given together",
            )
        else:
            time = normalize_time(time)
            is_open = await asyncio.to_thread(
                amenity_service.is_open_at, amenity_id, day_of_week, time
            )
    except DomainException as e:
        handle_domain_exception(e)

    return OpenStatusResponse(
        amenity_id=amenity_id, day_of_week=day_of_week, time=time, is_open=is_open
    )


@router.get("/{amenity_id}/reservations", response_model=List[ReservationResponse])
async def list_amenity_reservations(
    amenity_id: str,
    reservation_date: date = Query(..., alias="date"),
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> List[ReservationResponse]:
    reservations = await asyncio.to_thread(
        amenity_service.get_reservations_for_amenity, amenity_id, reservation_date
    )
    return [ReservationResponse.model_validate(r) for r in reservations]


@router.get("/{amenity_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    amenity_id: str,
    reservation_date: date = Query(..., alias="date"),
    start_time: str = Query(...),
    end_time: str = Query(...),
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> AvailabilityResponse:
    try:
        start_time = normalize_time(start_time)
        end_time = normalize_time(end_time)
        available = await asyncio.to_thread(
            amenity_service.check_availability, amenity_id, reservation_date, start_time, end_time
        )
    except DomainException as e:
        handle_domain_exception(e)

    return AvailabilityResponse(
        amenity_id=amenity_id,
        reservation_date=reservation_date,
        start_time=start_time,
        end_time=end_time,
        available=available,
    )


@router.get("/{amenity_id}/slots", response_model=List[TimeSlot])
async def get_available_slots(
    amenity_id: str,
    reservation_date: date = Query(..., alias="date"),
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> List[TimeSlot]:
    try:
        slots = await asyncio.to_thread(
            amenity_service.get_available_slots, amenity_id, reservation_date
        )
        return [TimeSlot(start_time=s.start_time, end_time=s.end_time) for s in slots]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{amenity_id}/quote", response_model=ReservationQuote)
async def quote_reservation(
    amenity_id: str,
    start_time: str = Query(...),
    end_time: str = Query(...),
    amenity_service: AmenityService = Depends(get_amenity_service),
) -> ReservationQuote:
    try:
        quote = await asyncio.to_thread(
            amenity_service.quote_reservation, amenity_id, start_time, end_time
        )
        return ReservationQuote(**quote)
    except DomainException as e:
        handle_domain_exception(e)
