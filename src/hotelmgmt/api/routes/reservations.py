"""Reservation endpoints: booking, guest history, cancellation and check-out.

POST /reservations                               → book rooms (customer)
GET  /reservations/mine                          → current guest's reservations
GET  /reservations/{id}                          → one reservation (owner or hotel staff)
POST /reservations/{id}/actions/cancel           → cancel (owner or admin)
POST /reservations/{id}/actions/check-out        → check out (hotel staff)
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, ConfigDict, Field

from hotelmgmt.api.auth import ROLE_ADMIN, CurrentUser, get_current_user
from hotelmgmt.api.rbac import (
    GuestContext,
    can_manage_hotel,
    get_current_guest,
    resolve_guest_id,
)
from hotelmgmt.api.serialization import http_error, reservation_to_dict
from hotelmgmt.domain.errors import ReservationError
from hotelmgmt.domain.models import Reservation
from hotelmgmt.observability.correlation import get_correlation_id
from hotelmgmt.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


class CreateReservationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hotel_id: int
    check_in: date
    check_out: date
    num_guests: int = Field(2, ge=1, le=20)
    room_ids: list[int] = Field(..., min_length=1)


# ── Helpers ───────────────────────────────────────────────────────────────────


def _load_reservation(reservation_id: int) -> tuple[Reservation | None, list[int]]:
    """Load a reservation and the hotels its rooms belong to."""
    from hotelmgmt.infra.db import txn
    from hotelmgmt.infra.repositories.reservations_repository import (
        get_reservation,
        list_reservation_hotel_ids,
    )

    with txn() as cur:
        reservation = get_reservation(cur, reservation_id)
        if reservation is None:
            return None, []
        return reservation, list_reservation_hotel_ids(cur, reservation_id)


def _require_reservation(reservation_id: int) -> tuple[Reservation, list[int]]:
    reservation, hotel_ids = _load_reservation(reservation_id)
    if reservation is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation, hotel_ids


def _is_owner(user: CurrentUser, reservation: Reservation) -> bool:
    guest_id = resolve_guest_id(user)
    return guest_id is not None and guest_id == reservation.guest_id


# ── POST /reservations ────────────────────────────────────────────────────────


@router.post("", status_code=201)
def create_reservation_action(
    body: CreateReservationRequest,
    guest: GuestContext = Depends(get_current_guest),
) -> dict:
    """Book the selected rooms of a hotel for the current guest.

    Dates are validated first (422). Rooms that are not available, or that
    overlap a confirmed reservation, fail the whole booking with 409.
    Requires a customer with a guest profile.
    """
    from hotelmgmt.domain.availability import validate_stay_dates
    from hotelmgmt.domain.booking import create_reservation
    from hotelmgmt.domain.models import ReservationDraft
    from hotelmgmt.infra.time import utc_today

    draft = ReservationDraft(
        guest_id=guest.guest_id,
        check_in=body.check_in,
        check_out=body.check_out,
        num_guests=body.num_guests,
    )

    try:
        validate_stay_dates(body.check_in, body.check_out, today=utc_today())
        reservation = create_reservation(draft, body.room_ids, hotel_id=body.hotel_id)
    except ReservationError as exc:
        logger.info(
            "booking rejected",
            extra={
                "extra_fields": {
                    "correlationId": get_correlation_id(),
                    "hotel_id": body.hotel_id,
                    "guest_id": guest.guest_id,
                    "code": exc.code,
                }
            },
        )
        raise http_error(exc)

    return reservation_to_dict(reservation)


# ── GET /reservations/mine ────────────────────────────────────────────────────


def _list_guest_reservations(guest_id: int) -> list[dict]:
    from hotelmgmt.infra.db import txn
    from hotelmgmt.infra.repositories.reservations_repository import (
        list_reservations_for_guest,
    )

    with txn() as cur:
        reservations = list_reservations_for_guest(cur, guest_id)
    return [reservation_to_dict(r) for r in reservations]


@router.get("/mine")
def list_my_reservations(guest: GuestContext = Depends(get_current_guest)) -> list[dict]:
    """List the current guest's reservations, most recent booking first."""
    return _list_guest_reservations(guest.guest_id)


# ── GET /reservations/{reservation_id} ───────────────────────────────────────


@router.get("/{reservation_id}")
def get_reservation(
    reservation_id: int = Path(..., description="Reservation ID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Return one reservation with its rooms.

    Visible to the owning guest, staff of a hotel the rooms belong to, and
    admins.
    """
    reservation, hotel_ids = _require_reservation(reservation_id)

    if not (can_manage_hotel(user, hotel_ids) or _is_owner(user, reservation)):
        raise HTTPException(status_code=403, detail="No access to reservation")

    return reservation_to_dict(reservation)


# ── POST /reservations/{reservation_id}/actions/cancel ───────────────────────


@router.post("/{reservation_id}/actions/cancel")
def cancel_reservation_action(
    reservation_id: int = Path(..., description="Reservation ID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Cancel a reservation and release its rooms.

    Allowed for the owning guest and admins. Cancelling twice is harmless.
    """
    from hotelmgmt.domain.lifecycle import cancel_reservation

    reservation, _ = _require_reservation(reservation_id)

    if not (user.role == ROLE_ADMIN or _is_owner(user, reservation)):
        raise HTTPException(status_code=403, detail="No access to reservation")

    try:
        cancelled = cancel_reservation(reservation_id)
    except ReservationError as exc:
        raise http_error(exc)

    logger.info(
        "cancel reservation completed",
        extra={
            "extra_fields": {
                "correlationId": get_correlation_id(),
                "reservation_id": reservation_id,
                "cancelled_by": user.id,
            }
        },
    )
    return reservation_to_dict(cancelled)


# ── POST /reservations/{reservation_id}/actions/check-out ────────────────────


@router.post("/{reservation_id}/actions/check-out")
def check_out_reservation_action(
    reservation_id: int = Path(..., description="Reservation ID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Complete a stay and release its rooms.

    Allowed for hotel_admin of a hotel the rooms belong to, and admins.
    """
    from hotelmgmt.domain.lifecycle import check_out_reservation

    _, hotel_ids = _require_reservation(reservation_id)

    if not can_manage_hotel(user, hotel_ids):
        raise HTTPException(status_code=403, detail="No access to reservation")

    try:
        completed = check_out_reservation(reservation_id)
    except ReservationError as exc:
        raise http_error(exc)

    logger.info(
        "check-out completed",
        extra={
            "extra_fields": {
                "correlationId": get_correlation_id(),
                "reservation_id": reservation_id,
                "checked_out_by": user.id,
            }
        },
    )
    return reservation_to_dict(completed)
