"""JSON shapes for rooms and reservations returned by the API."""

from __future__ import annotations

from fastapi import HTTPException

from hotelmgmt.domain.errors import (
    DateConflictError,
    InvalidDateRangeError,
    InvalidRoomSelectionError,
    PersistenceError,
    ReservationError,
    ReservationNotFoundError,
    RoomUnavailableError,
)
from hotelmgmt.domain.models import Reservation, Room
from hotelmgmt.domain.occupancy import OccupancySummary


def room_to_dict(room: Room) -> dict:
    return {
        "id": room.id,
        "hotel_id": room.hotel_id,
        "room_number": room.room_number,
        "room_type": room.room_type,
        "price_cents": room.price_cents,
        "status": room.status.value,
        "reservation_id": room.reservation_id,
    }


def reservation_to_dict(reservation: Reservation) -> dict:
    return {
        "id": reservation.id,
        "guest_id": reservation.guest_id,
        "check_in": reservation.check_in.isoformat(),
        "check_out": reservation.check_out.isoformat(),
        "nights": reservation.nights,
        "num_guests": reservation.num_guests,
        "status": reservation.status.value,
        "booked_at": reservation.booked_at.isoformat(),
        "created_by_user_id": reservation.created_by_user_id,
        "rooms": [room_to_dict(room) for room in reservation.rooms],
    }


def occupancy_to_dict(summary: OccupancySummary) -> dict:
    return {
        "hotel_id": summary.hotel_id,
        "date": summary.date.isoformat(),
        "total_rooms": summary.total_rooms,
        "occupied_rooms": summary.occupied_rooms,
        "available_rooms": summary.available_rooms,
        "in_house": summary.in_house,
        "arrivals_today": summary.arrivals_today,
        "departures_today": summary.departures_today,
    }


_STATUS_BY_ERROR: list[tuple[type[ReservationError], int]] = [
    (InvalidDateRangeError, 422),
    (InvalidRoomSelectionError, 422),
    (RoomUnavailableError, 409),
    (DateConflictError, 409),
    (ReservationNotFoundError, 404),
    (PersistenceError, 503),
]


def http_error(exc: ReservationError) -> HTTPException:
    """Translate a reservation engine failure into an HTTPException.

    The detail carries the stable error code alongside the message.
    """
    status_code = 500
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": str(exc)},
    )
