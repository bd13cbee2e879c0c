"""Rooms repository - room inventory and room attachment persistence.

Uses raw SQL with psycopg2 (no ORM).

rooms.status and rooms.reservation_id always change together: occupy_rooms()
sets both, release_rooms() clears both. Nothing else in the codebase writes
these columns.
"""

from datetime import date

from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.domain.models import (
    BLOCKING_STATUSES,
    Room,
    RoomStatus,
    Stay,
)
from hotelmgmt.infra.db import fetchall, for_update_all

ROOM_COLUMNS = "r.id, r.hotel_id, r.room_number, r.room_type, r.price_cents, r.status, r.reservation_id"


def row_to_room(row: tuple) -> Room:
    """Build a Room from a row selected with ROOM_COLUMNS."""
    return Room(
        id=row[0],
        hotel_id=row[1],
        room_number=row[2],
        room_type=row[3],
        price_cents=row[4],
        status=RoomStatus(row[5]),
        reservation_id=row[6],
    )


def list_rooms_for_hotel(cur: PgCursor, hotel_id: int) -> list[Room]:
    """List every room of a hotel, ordered by room number."""
    rows = fetchall(
        cur,
        f"""
        SELECT {ROOM_COLUMNS}
        FROM rooms r
        WHERE r.hotel_id = %s
        ORDER BY r.room_number, r.id
        """,
        (hotel_id,),
    )
    return [row_to_room(row) for row in rows]


def list_available_rooms_for_hotel(cur: PgCursor, hotel_id: int) -> list[Room]:
    """List rooms of a hotel whose current status is available."""
    rows = fetchall(
        cur,
        f"""
        SELECT {ROOM_COLUMNS}
        FROM rooms r
        WHERE r.hotel_id = %s
          AND r.status = %s
        ORDER BY r.room_number, r.id
        """,
        (hotel_id, RoomStatus.AVAILABLE.value),
    )
    return [row_to_room(row) for row in rows]


def list_blocking_stays(
    cur: PgCursor,
    *,
    room_ids: list[int],
    not_before: date,
) -> list[Stay]:
    """List confirmed stays attached to any of the given rooms.

    Stays that ended on or before ``not_before`` cannot overlap anything
    starting at ``not_before`` and are left out.

    Args:
        cur: Database cursor.
        room_ids: Rooms to inspect.
        not_before: Earliest check-in of the range being tested.

    Returns:
        List of Stay records, ordered by room then check-in.
    """
    if not room_ids:
        return []

    rows = fetchall(
        cur,
        """
        SELECT rr.room_id, res.id, res.check_in, res.check_out
        FROM reservation_rooms rr
        JOIN reservations res ON res.id = rr.reservation_id
        WHERE rr.room_id = ANY(%s)
          AND res.status = ANY(%s::reservation_status[])
          AND res.check_out > %s
        ORDER BY rr.room_id, res.check_in
        """,
        (room_ids, [s.value for s in BLOCKING_STATUSES], not_before),
    )
    return [
        Stay(room_id=row[0], reservation_id=row[1], check_in=row[2], check_out=row[3])
        for row in rows
    ]


def lock_available_rooms(
    cur: PgCursor,
    *,
    room_ids: list[int],
    hotel_id: int | None = None,
) -> list[Room]:
    """Lock the requested rooms that are currently available.

    Rows are locked in id order so concurrent bookings of overlapping room
    sets acquire locks in the same order. A concurrent transaction that
    occupied one of the rooms first makes that row drop out of the result
    once its lock is released.

    Args:
        cur: Database cursor (within transaction).
        room_ids: Requested room ids.
        hotel_id: If given, rooms must also belong to this hotel.

    Returns:
        The locked, available rooms (possibly fewer than requested).
    """
    conditions = ["r.id = ANY(%s)", "r.status = %s"]
    params: list = [room_ids, RoomStatus.AVAILABLE.value]

    if hotel_id is not None:
        conditions.append("r.hotel_id = %s")
        params.append(hotel_id)

    where = " AND ".join(conditions)
    rows = for_update_all(
        cur,
        f"""
        SELECT {ROOM_COLUMNS}
        FROM rooms r
        WHERE {where}
        ORDER BY r.id
        """,
        params,
    )
    return [row_to_room(row) for row in rows]


def attach_rooms(cur: PgCursor, *, reservation_id: int, room_ids: list[int]) -> None:
    """Record the rooms booked under a reservation."""
    for room_id in room_ids:
        cur.execute(
            """
            INSERT INTO reservation_rooms (reservation_id, room_id)
            VALUES (%s, %s)
            """,
            (reservation_id, room_id),
        )


def occupy_rooms(cur: PgCursor, *, reservation_id: int, room_ids: list[int]) -> int:
    """Mark rooms occupied by a reservation.

    Guarded on the room still being available.

    Returns:
        Number of rooms updated.
    """
    cur.execute(
        """
        UPDATE rooms
        SET status = %s, reservation_id = %s, updated_at = now()
        WHERE id = ANY(%s)
          AND status = %s
        """,
        (RoomStatus.OCCUPIED.value, reservation_id, room_ids, RoomStatus.AVAILABLE.value),
    )
    return cur.rowcount


def release_rooms(cur: PgCursor, *, reservation_id: int) -> int:
    """Release every room currently occupied by a reservation.

    Returns:
        Number of rooms released (0 if already released).
    """
    cur.execute(
        """
        UPDATE rooms
        SET status = %s, reservation_id = NULL, updated_at = now()
        WHERE reservation_id = %s
        """,
        (RoomStatus.AVAILABLE.value, reservation_id),
    )
    return cur.rowcount


def list_attached_rooms(cur: PgCursor, reservation_ids: list[int]) -> dict[int, list[Room]]:
    """Load the room attachment sets of several reservations in one query.

    Returns:
        Mapping reservation_id -> rooms ordered by room number. Reservations
        without rooms are absent from the mapping.
    """
    if not reservation_ids:
        return {}

    rows = fetchall(
        cur,
        f"""
        SELECT rr.reservation_id, {ROOM_COLUMNS}
        FROM reservation_rooms rr
        JOIN rooms r ON r.id = rr.room_id
        WHERE rr.reservation_id = ANY(%s)
        ORDER BY rr.reservation_id, r.room_number, r.id
        """,
        (reservation_ids,),
    )

    attached: dict[int, list[Room]] = {}
    for row in rows:
        attached.setdefault(row[0], []).append(row_to_room(row[1:]))
    return attached


def count_rooms_by_status(cur: PgCursor, hotel_id: int) -> dict[RoomStatus, int]:
    """Count a hotel's rooms per status (missing statuses count as 0)."""
    rows = fetchall(
        cur,
        """
        SELECT status, count(*)
        FROM rooms
        WHERE hotel_id = %s
        GROUP BY status
        """,
        (hotel_id,),
    )
    counts = {status: 0 for status in RoomStatus}
    for status, count in rows:
        counts[RoomStatus(status)] = count
    return counts
