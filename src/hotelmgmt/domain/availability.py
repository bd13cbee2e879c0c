"""Room availability for a date range.

A room is available for [check_in, check_out) iff it belongs to the hotel,
its current status is available, and no confirmed stay attached to it
overlaps the range.

Overlap formula:  (check_in < other_check_out) AND (check_out > other_check_in)
Strict inequality allows check-out day == check-in day (touching dates are OK).
"""

from __future__ import annotations

import logging
from datetime import date

import psycopg2
from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.domain.errors import InvalidDateRangeError, PersistenceError
from hotelmgmt.domain.models import Room, Stay
from hotelmgmt.infra.db import txn
from hotelmgmt.infra.repositories.rooms_repository import (
    list_available_rooms_for_hotel,
    list_blocking_stays,
)

logger = logging.getLogger(__name__)


def dates_overlap(
    check_in: date,
    check_out: date,
    other_check_in: date,
    other_check_out: date,
) -> bool:
    """Half-open interval intersection of two stays."""
    return check_in < other_check_out and check_out > other_check_in


def validate_date_range(check_in: date, check_out: date) -> None:
    """Raise InvalidDateRangeError unless check_out is after check_in."""
    if check_out <= check_in:
        raise InvalidDateRangeError(check_in, check_out)


def validate_stay_dates(check_in: date, check_out: date, *, today: date) -> None:
    """Validate dates for a new search or booking.

    Same as validate_date_range, and check-in may not be in the past.
    """
    validate_date_range(check_in, check_out)
    if check_in < today:
        raise InvalidDateRangeError(
            check_in, check_out, "Check-in date cannot be in the past"
        )


def filter_available(
    rooms: list[Room],
    stays: list[Stay],
    check_in: date,
    check_out: date,
) -> list[Room]:
    """Drop rooms that are occupied or have a stay overlapping the range.

    Args:
        rooms: Candidate rooms.
        stays: Confirmed stays attached to any candidate.
        check_in: Requested check-in (inclusive).
        check_out: Requested check-out (exclusive).

    Returns:
        Available rooms, in the order given.
    """
    booked = {
        stay.room_id
        for stay in stays
        if dates_overlap(check_in, check_out, stay.check_in, stay.check_out)
    }
    return [room for room in rooms if room.is_available and room.id not in booked]


def find_available_rooms(
    hotel_id: int,
    check_in: date,
    check_out: date,
    *,
    cur: PgCursor | None = None,
) -> list[Room]:
    """Find the rooms of a hotel that can be booked for [check_in, check_out).

    Callers must validate the range first (validate_date_range); an inverted
    range yields a meaningless result.

    Args:
        hotel_id: Hotel identifier.
        check_in: Desired check-in date (inclusive).
        check_out: Desired check-out date (exclusive / departure day).
        cur: Optional cursor of an enclosing transaction.

    Returns:
        Available rooms ordered by room number.

    Raises:
        PersistenceError: If the database fails.
    """

    def _do(c: PgCursor) -> list[Room]:
        rooms = list_available_rooms_for_hotel(c, hotel_id)
        stays = list_blocking_stays(
            c,
            room_ids=[room.id for room in rooms],
            not_before=check_in,
        )
        return filter_available(rooms, stays, check_in, check_out)

    try:
        if cur is not None:
            return _do(cur)
        with txn() as c:
            return _do(c)
    except psycopg2.Error as exc:
        logger.error(
            "room search failed",
            extra={
                "extra_fields": {
                    "hotel_id": hotel_id,
                    "pgcode": exc.pgcode,
                },
            },
        )
        raise PersistenceError("Failed to search rooms") from exc
