"""Reservation engine records - rooms, reservations and the booking draft.

Plain frozen snapshots loaded by explicit repository queries. A Reservation's
rooms are a tuple captured at load time, not a live relationship.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


# ── Enums ─────────────────────────────────────────────────


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Only these statuses hold rooms against other bookings.
BLOCKING_STATUSES = (ReservationStatus.CONFIRMED,)


# ── Records ───────────────────────────────────────────────


@dataclass(frozen=True)
class Room:
    id: int
    hotel_id: int
    room_number: str
    room_type: str
    price_cents: int
    status: RoomStatus
    reservation_id: int | None = None

    @property
    def is_available(self) -> bool:
        return self.status is RoomStatus.AVAILABLE


@dataclass(frozen=True)
class Reservation:
    id: int
    guest_id: int
    check_in: date
    check_out: date
    num_guests: int
    status: ReservationStatus
    booked_at: datetime
    rooms: tuple[Room, ...] = ()
    created_by_user_id: str | None = None

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def room_ids(self) -> list[int]:
        return [room.id for room in self.rooms]


@dataclass(frozen=True)
class ReservationDraft:
    """Caller-supplied booking request.

    There is no status field: new reservations are always persisted as
    confirmed.
    """

    guest_id: int
    check_in: date
    check_out: date
    num_guests: int = 1
    booked_at: datetime | None = None
    created_by_user_id: str | None = None


@dataclass(frozen=True)
class Stay:
    """A confirmed stay holding a room over [check_in, check_out)."""

    room_id: int
    reservation_id: int
    check_in: date
    check_out: date
