"""Front-desk occupancy summary for a hotel."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.domain.models import Reservation, RoomStatus
from hotelmgmt.infra.db import txn
from hotelmgmt.infra.repositories.reservations_repository import (
    list_active_reservations_for_hotel,
)
from hotelmgmt.infra.repositories.rooms_repository import count_rooms_by_status
from hotelmgmt.infra.time import utc_today


@dataclass(frozen=True)
class OccupancySummary:
    hotel_id: int
    date: date
    total_rooms: int
    occupied_rooms: int
    available_rooms: int
    in_house: int
    arrivals_today: int
    departures_today: int


def summarize(
    hotel_id: int,
    today: date,
    room_counts: dict[RoomStatus, int],
    active: list[Reservation],
) -> OccupancySummary:
    """Build the summary from room counts and the active reservations.

    A reservation is in house when check_in <= today < check_out.
    """
    return OccupancySummary(
        hotel_id=hotel_id,
        date=today,
        total_rooms=sum(room_counts.values()),
        occupied_rooms=room_counts.get(RoomStatus.OCCUPIED, 0),
        available_rooms=room_counts.get(RoomStatus.AVAILABLE, 0),
        in_house=sum(1 for r in active if r.check_in <= today < r.check_out),
        arrivals_today=sum(1 for r in active if r.check_in == today),
        departures_today=sum(1 for r in active if r.check_out == today),
    )


def occupancy_summary(
    hotel_id: int,
    *,
    today: date | None = None,
    cur: PgCursor | None = None,
) -> OccupancySummary:
    """Count rooms and today's movements for a hotel.

    Args:
        hotel_id: Hotel identifier.
        today: Reference date (default: today, UTC).
        cur: Optional cursor of an enclosing transaction.
    """
    if today is None:
        today = utc_today()

    def _do(c: PgCursor) -> OccupancySummary:
        room_counts = count_rooms_by_status(c, hotel_id)
        active = list_active_reservations_for_hotel(c, hotel_id, today)
        return summarize(hotel_id, today, room_counts, active)

    if cur is not None:
        return _do(cur)

    with txn() as c:
        return _do(c)
