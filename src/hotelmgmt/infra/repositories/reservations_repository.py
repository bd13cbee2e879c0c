"""Reservations repository - persistence for reservation records.

Uses raw SQL with psycopg2 (no ORM).
"""

from datetime import date, datetime

from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.domain.models import Reservation, ReservationStatus
from hotelmgmt.infra.db import fetchall, fetchone
from hotelmgmt.infra.repositories.rooms_repository import list_attached_rooms

RESERVATION_COLUMNS = (
    "res.id, res.guest_id, res.check_in, res.check_out, res.num_guests, "
    "res.status, res.booked_at, res.created_by_user_id"
)


def _build(row: tuple, rooms: list | None = None) -> Reservation:
    return Reservation(
        id=row[0],
        guest_id=row[1],
        check_in=row[2],
        check_out=row[3],
        num_guests=row[4],
        status=ReservationStatus(row[5]),
        booked_at=row[6],
        created_by_user_id=str(row[7]) if row[7] is not None else None,
        rooms=tuple(rooms or ()),
    )


def _with_rooms(cur: PgCursor, rows: list[tuple]) -> list[Reservation]:
    attached = list_attached_rooms(cur, [row[0] for row in rows])
    return [_build(row, attached.get(row[0])) for row in rows]


def insert_reservation(
    cur: PgCursor,
    *,
    guest_id: int,
    check_in: date,
    check_out: date,
    num_guests: int,
    status: ReservationStatus,
    booked_at: datetime,
    created_by_user_id: str | None = None,
) -> int:
    """Insert a reservation row.

    Args:
        cur: Database cursor (within transaction).
        guest_id: Guest who holds the booking.
        check_in: Check-in date (inclusive).
        check_out: Check-out date (exclusive / departure day).
        num_guests: Number of guests.
        status: Initial status.
        booked_at: Booking timestamp.
        created_by_user_id: Staff user who made the booking on the guest's behalf.

    Returns:
        The new reservation id.
    """
    cur.execute(
        """
        INSERT INTO reservations (
            guest_id, check_in, check_out, num_guests,
            status, booked_at, created_by_user_id
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING id
        """,
        (
            guest_id,
            check_in,
            check_out,
            num_guests,
            status.value,
            booked_at,
            created_by_user_id,
        ),
    )
    return cur.fetchone()[0]


def get_reservation(cur: PgCursor, reservation_id: int) -> Reservation | None:
    """Load a reservation with its attached rooms.

    Returns:
        Reservation, or None if it does not exist.
    """
    row = fetchone(
        cur,
        f"SELECT {RESERVATION_COLUMNS} FROM reservations res WHERE res.id = %s",
        (reservation_id,),
    )
    if row is None:
        return None
    return _with_rooms(cur, [row])[0]


def lock_reservation_status(cur: PgCursor, reservation_id: int) -> ReservationStatus | None:
    """Lock a reservation row FOR UPDATE and return its status.

    Returns:
        Current status, or None if the reservation does not exist.
    """
    row = fetchone(
        cur,
        "SELECT status FROM reservations WHERE id = %s FOR UPDATE",
        (reservation_id,),
    )
    if row is None:
        return None
    return ReservationStatus(row[0])


def set_reservation_status(
    cur: PgCursor,
    reservation_id: int,
    status: ReservationStatus,
) -> None:
    cur.execute(
        """
        UPDATE reservations
        SET status = %s, updated_at = now()
        WHERE id = %s
        """,
        (status.value, reservation_id),
    )


def list_reservations_for_guest(cur: PgCursor, guest_id: int) -> list[Reservation]:
    """List a guest's reservations, most recently booked first."""
    rows = fetchall(
        cur,
        f"""
        SELECT {RESERVATION_COLUMNS}
        FROM reservations res
        WHERE res.guest_id = %s
        ORDER BY res.booked_at DESC, res.id DESC
        """,
        (guest_id,),
    )
    return _with_rooms(cur, rows)


def list_reservations_for_hotel(cur: PgCursor, hotel_id: int) -> list[Reservation]:
    """List reservations holding any room of a hotel, latest check-in first."""
    rows = fetchall(
        cur,
        f"""
        SELECT {RESERVATION_COLUMNS}
        FROM reservations res
        WHERE EXISTS (
            SELECT 1
            FROM reservation_rooms rr
            JOIN rooms r ON r.id = rr.room_id
            WHERE rr.reservation_id = res.id AND r.hotel_id = %s
        )
        ORDER BY res.check_in DESC, res.id DESC
        """,
        (hotel_id,),
    )
    return _with_rooms(cur, rows)


def list_active_reservations_for_hotel(
    cur: PgCursor,
    hotel_id: int,
    today: date,
) -> list[Reservation]:
    """List confirmed reservations of a hotel that have not ended before today.

    Ordered by check-out, earliest first (front-desk departures view).
    """
    rows = fetchall(
        cur,
        f"""
        SELECT {RESERVATION_COLUMNS}
        FROM reservations res
        WHERE res.status = %s
          AND res.check_out >= %s
          AND EXISTS (
            SELECT 1
            FROM reservation_rooms rr
            JOIN rooms r ON r.id = rr.room_id
            WHERE rr.reservation_id = res.id AND r.hotel_id = %s
          )
        ORDER BY res.check_out, res.id
        """,
        (ReservationStatus.CONFIRMED.value, today, hotel_id),
    )
    return _with_rooms(cur, rows)


def list_reservation_hotel_ids(cur: PgCursor, reservation_id: int) -> list[int]:
    """Hotels owning the rooms attached to a reservation."""
    rows = fetchall(
        cur,
        """
        SELECT DISTINCT r.hotel_id
        FROM reservation_rooms rr
        JOIN rooms r ON r.id = rr.room_id
        WHERE rr.reservation_id = %s
        ORDER BY r.hotel_id
        """,
        (reservation_id,),
    )
    return [row[0] for row in rows]
