"""Room conflict detection against confirmed reservations.

Checks whether any of a set of rooms is attached to a confirmed reservation
whose dates overlap a requested range. Runs inside the booking transaction,
after the rooms themselves are locked.

Overlap formula:  (new_check_in < existing_check_out) AND (new_check_out > existing_check_in)
Strict inequality allows check-out day == check-in day (touching dates are OK).

Only confirmed reservations generate conflicts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.domain.errors import DateConflictError
from hotelmgmt.domain.models import BLOCKING_STATUSES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoomConflict:
    room_id: int
    reservation_id: int
    check_in: date
    check_out: date


def check_room_conflict(
    cur: PgCursor,
    *,
    room_ids: list[int],
    check_in: date,
    check_out: date,
) -> RoomConflict | None:
    """Check if any of the rooms has an overlapping confirmed reservation.

    Args:
        cur: Database cursor (should be within a transaction).
        room_ids: Physical room identifiers.
        check_in: Desired check-in date (inclusive).
        check_out: Desired check-out date (exclusive / departure day).

    Returns:
        The earliest conflicting stay, or None if no conflict.
    """
    cur.execute(
        """
        SELECT rr.room_id, res.id, res.check_in, res.check_out
        FROM reservation_rooms rr
        JOIN reservations res ON res.id = rr.reservation_id
        WHERE rr.room_id = ANY(%s)
          AND res.status = ANY(%s::reservation_status[])
          AND res.check_in < %s   -- existing check_in < new check_out
          AND res.check_out > %s  -- existing check_out > new check_in
        ORDER BY res.check_in, rr.room_id
        LIMIT 1
        """,
        [room_ids, [s.value for s in BLOCKING_STATUSES], check_out, check_in],
    )
    row = cur.fetchone()

    if row is None:
        return None

    conflict = RoomConflict(
        room_id=row[0],
        reservation_id=row[1],
        check_in=row[2],
        check_out=row[3],
    )
    logger.warning(
        "room conflict detected",
        extra={
            "extra_fields": {
                "room_id": conflict.room_id,
                "requested_check_in": check_in.isoformat(),
                "requested_check_out": check_out.isoformat(),
                "conflicting_reservation_id": conflict.reservation_id,
                "existing_check_in": conflict.check_in.isoformat(),
                "existing_check_out": conflict.check_out.isoformat(),
            },
        },
    )
    return conflict


def assert_no_room_conflict(
    cur: PgCursor,
    *,
    room_ids: list[int],
    check_in: date,
    check_out: date,
) -> None:
    """Raise DateConflictError if any room has an overlapping reservation.

    All arguments are forwarded to check_room_conflict.
    """
    conflict = check_room_conflict(
        cur,
        room_ids=room_ids,
        check_in=check_in,
        check_out=check_out,
    )

    if conflict is not None:
        raise DateConflictError(
            room_id=conflict.room_id,
            conflicting_reservation_id=conflict.reservation_id,
            existing_check_in=conflict.check_in,
            existing_check_out=conflict.check_out,
        )
