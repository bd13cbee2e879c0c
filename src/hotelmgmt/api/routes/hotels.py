"""Hotel-scoped endpoints: room search for guests, front-desk views for staff.

GET /hotels/{hotel_id}/rooms/available?check_in=...&check_out=...  → search (authenticated)
GET /hotels/{hotel_id}/rooms                                       → list rooms (hotel staff)
GET /hotels/{hotel_id}/reservations?active=...                     → list reservations (hotel staff)
GET /hotels/{hotel_id}/occupancy                                   → occupancy summary (hotel staff)
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from hotelmgmt.api.auth import CurrentUser, get_current_user
from hotelmgmt.api.rbac import HotelStaffContext, require_hotel_staff
from hotelmgmt.api.serialization import (
    http_error,
    occupancy_to_dict,
    reservation_to_dict,
    room_to_dict,
)
from hotelmgmt.domain.errors import ReservationError
from hotelmgmt.observability.correlation import get_correlation_id
from hotelmgmt.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/hotels", tags=["hotels"])


def _get_hotel(hotel_id: int) -> dict | None:
    from hotelmgmt.infra.db import txn
    from hotelmgmt.infra.repositories.hotels_repository import get_hotel

    with txn() as cur:
        return get_hotel(cur, hotel_id)


def _require_hotel(hotel_id: int) -> dict:
    hotel = _get_hotel(hotel_id)
    if hotel is None:
        raise HTTPException(status_code=404, detail="Hotel not found")
    return hotel


# ── GET /hotels/{hotel_id}/rooms/available ───────────────────────────────────


@router.get("/{hotel_id}/rooms/available")
def search_available_rooms(
    hotel_id: int = Path(..., description="Hotel ID"),
    check_in: date = Query(...),
    check_out: date = Query(...),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """List rooms that can be booked for [check_in, check_out).

    Fails with 422 if check_out is not after check_in or check_in is in the
    past, 404 if the hotel does not exist, and 503 if the database fails.
    """
    from hotelmgmt.domain.availability import find_available_rooms, validate_stay_dates
    from hotelmgmt.infra.time import utc_today

    try:
        validate_stay_dates(check_in, check_out, today=utc_today())
    except ReservationError as exc:
        raise http_error(exc)

    hotel = _require_hotel(hotel_id)
    try:
        rooms = find_available_rooms(hotel_id, check_in, check_out)
    except ReservationError as exc:
        raise http_error(exc)

    logger.info(
        "room search",
        extra={
            "extra_fields": {
                "correlationId": get_correlation_id(),
                "hotel_id": hotel_id,
                "check_in": check_in.isoformat(),
                "check_out": check_out.isoformat(),
                "available": len(rooms),
            }
        },
    )

    return {
        "hotel": hotel,
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "rooms": [room_to_dict(room) for room in rooms],
    }


# ── GET /hotels/{hotel_id}/rooms ─────────────────────────────────────────────


def _list_rooms(hotel_id: int) -> list[dict]:
    from hotelmgmt.infra.db import txn
    from hotelmgmt.infra.repositories.rooms_repository import list_rooms_for_hotel

    with txn() as cur:
        rooms = list_rooms_for_hotel(cur, hotel_id)
    return [room_to_dict(room) for room in rooms]


@router.get("/{hotel_id}/rooms")
def list_rooms(ctx: HotelStaffContext = Depends(require_hotel_staff)) -> list[dict]:
    """List every room of the hotel with its current status.

    Requires hotel_admin of this hotel, or admin.
    """
    _require_hotel(ctx.hotel_id)
    return _list_rooms(ctx.hotel_id)


# ── GET /hotels/{hotel_id}/reservations ──────────────────────────────────────


def _list_reservations(hotel_id: int, active: bool) -> list[dict]:
    from hotelmgmt.infra.db import txn
    from hotelmgmt.infra.repositories.reservations_repository import (
        list_active_reservations_for_hotel,
        list_reservations_for_hotel,
    )
    from hotelmgmt.infra.time import utc_today

    with txn() as cur:
        if active:
            reservations = list_active_reservations_for_hotel(cur, hotel_id, utc_today())
        else:
            reservations = list_reservations_for_hotel(cur, hotel_id)
    return [reservation_to_dict(r) for r in reservations]


@router.get("/{hotel_id}/reservations")
def list_reservations(
    active: bool = Query(False, description="Only confirmed stays not yet ended"),
    ctx: HotelStaffContext = Depends(require_hotel_staff),
) -> list[dict]:
    """List reservations holding rooms of the hotel.

    With active=true: confirmed reservations ending today or later, earliest
    check-out first. Otherwise all reservations, latest check-in first.
    Requires hotel_admin of this hotel, or admin.
    """
    _require_hotel(ctx.hotel_id)
    return _list_reservations(ctx.hotel_id, active)


# ── GET /hotels/{hotel_id}/occupancy ─────────────────────────────────────────


@router.get("/{hotel_id}/occupancy")
def get_occupancy(ctx: HotelStaffContext = Depends(require_hotel_staff)) -> dict:
    """Room counts and today's arrivals, departures and in-house stays.

    Requires hotel_admin of this hotel, or admin.
    """
    from hotelmgmt.domain.occupancy import occupancy_summary

    _require_hotel(ctx.hotel_id)
    return occupancy_to_dict(occupancy_summary(ctx.hotel_id))
