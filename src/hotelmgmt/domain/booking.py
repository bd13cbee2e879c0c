"""Create reservation domain logic - transactional room booking.

Books a set of rooms for a guest in a single transaction with guards:
lock rooms → verify availability → re-check date conflicts → insert
reservation → attach and occupy rooms → commit.

Availability is re-validated here even if the caller just searched with
find_available_rooms: the FOR UPDATE lock plus the conflict re-check is what
keeps two concurrent bookings off the same room.
"""

from __future__ import annotations

import logging

import psycopg2
from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.domain.availability import validate_date_range
from hotelmgmt.domain.errors import (
    InvalidRoomSelectionError,
    PersistenceError,
    RoomUnavailableError,
)
from hotelmgmt.domain.models import Reservation, ReservationDraft, ReservationStatus
from hotelmgmt.domain.room_conflict import assert_no_room_conflict
from hotelmgmt.infra.db import txn
from hotelmgmt.infra.repositories.reservations_repository import (
    get_reservation,
    insert_reservation,
)
from hotelmgmt.infra.repositories.rooms_repository import (
    attach_rooms,
    lock_available_rooms,
    occupy_rooms,
)
from hotelmgmt.infra.time import utc_now

logger = logging.getLogger(__name__)

# New bookings skip the pending state: there is no approval step.
INITIAL_STATUS = ReservationStatus.CONFIRMED


def create_reservation(
    draft: ReservationDraft,
    room_ids: list[int],
    *,
    hotel_id: int | None = None,
    cur: PgCursor | None = None,
) -> Reservation:
    """Create a confirmed reservation holding the given rooms.

    This function:
    1. Validates the date range and room selection (no DB access)
    2. Locks the requested rooms FOR UPDATE (id order), keeping only
       available ones; fewer rows than requested → RoomUnavailableError
    3. Re-checks date overlap against confirmed reservations → DateConflictError
    4. Defaults booked_at to now (UTC)
    5. Inserts the reservation with status 'confirmed'
    6. Attaches the rooms and marks them occupied
    7. Commits (or the caller's transaction does)

    Any failure rolls back everything: no reservation row and no room
    change survives a failed call.

    Args:
        draft: Guest, dates and guest count.
        room_ids: Rooms to book. Duplicates are ignored.
        hotel_id: If given, every room must belong to this hotel.
        cur: Optional cursor of an enclosing transaction.

    Returns:
        The persisted reservation with its attached rooms.

    Raises:
        InvalidDateRangeError: If check_out <= check_in.
        InvalidRoomSelectionError: If no rooms were requested.
        RoomUnavailableError: If any room is missing or not available.
        DateConflictError: If any room overlaps a confirmed reservation.
        PersistenceError: If the database fails.
    """
    validate_date_range(draft.check_in, draft.check_out)

    requested = list(dict.fromkeys(room_ids))
    if not requested:
        raise InvalidRoomSelectionError("Please select at least one room")

    booked_at = draft.booked_at or utc_now()

    def _do(c: PgCursor) -> Reservation:
        # Step 1: Lock and verify rooms
        rooms = lock_available_rooms(c, room_ids=requested, hotel_id=hotel_id)
        if len(rooms) != len(requested):
            locked = {room.id for room in rooms}
            raise RoomUnavailableError([rid for rid in requested if rid not in locked])

        # Step 2: Date conflicts against confirmed reservations
        assert_no_room_conflict(
            c,
            room_ids=requested,
            check_in=draft.check_in,
            check_out=draft.check_out,
        )

        # Step 3: Insert reservation
        reservation_id = insert_reservation(
            c,
            guest_id=draft.guest_id,
            check_in=draft.check_in,
            check_out=draft.check_out,
            num_guests=draft.num_guests,
            status=INITIAL_STATUS,
            booked_at=booked_at,
            created_by_user_id=draft.created_by_user_id,
        )

        # Step 4: Attach and occupy rooms
        attach_rooms(c, reservation_id=reservation_id, room_ids=requested)
        updated = occupy_rooms(c, reservation_id=reservation_id, room_ids=requested)
        if updated != len(requested):
            raise RoomUnavailableError(requested)

        return get_reservation(c, reservation_id)

    try:
        if cur is not None:
            reservation = _do(cur)
        else:
            with txn() as c:
                reservation = _do(c)
    except psycopg2.Error as exc:
        logger.error(
            "reservation persistence failed",
            extra={
                "extra_fields": {
                    "guest_id": draft.guest_id,
                    "room_ids": requested,
                    "pgcode": exc.pgcode,
                },
            },
        )
        raise PersistenceError("Failed to create reservation") from exc

    logger.info(
        "reservation created",
        extra={
            "extra_fields": {
                "reservation_id": reservation.id,
                "guest_id": reservation.guest_id,
                "check_in": reservation.check_in.isoformat(),
                "check_out": reservation.check_out.isoformat(),
                "room_ids": reservation.room_ids,
            },
        },
    )
    return reservation
