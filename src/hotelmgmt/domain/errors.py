"""Typed failures raised by the reservation engine.

Every failure carries a stable ``code`` so callers classify by type or code,
never by message text.
"""

from __future__ import annotations

from datetime import date


class ReservationError(Exception):
    """Base class for reservation engine failures."""

    code = "reservation_error"


class InvalidDateRangeError(ReservationError):
    """Raised when check-out is not after check-in (or check-in is in the past)."""

    code = "invalid_date_range"

    def __init__(self, check_in: date, check_out: date, message: str | None = None) -> None:
        self.check_in = check_in
        self.check_out = check_out
        super().__init__(message or "Check-out date must be after check-in date")


class InvalidRoomSelectionError(ReservationError):
    """Raised when no rooms were selected for a booking."""

    code = "invalid_room_selection"


class RoomUnavailableError(ReservationError):
    """Raised when requested rooms are not available at commit time."""

    code = "room_unavailable"

    def __init__(self, room_ids: list[int]) -> None:
        self.room_ids = room_ids
        super().__init__(
            "One or more selected rooms are not available: "
            + ", ".join(str(room_id) for room_id in room_ids)
        )


class DateConflictError(ReservationError):
    """Raised when a room has an overlapping confirmed reservation."""

    code = "date_conflict"

    def __init__(
        self,
        room_id: int,
        conflicting_reservation_id: int,
        existing_check_in: date,
        existing_check_out: date,
    ) -> None:
        self.room_id = room_id
        self.conflicting_reservation_id = conflicting_reservation_id
        self.existing_check_in = existing_check_in
        self.existing_check_out = existing_check_out
        super().__init__(
            f"Room {room_id} is already booked "
            f"({existing_check_in} to {existing_check_out})"
        )


class ReservationNotFoundError(ReservationError):
    """Raised when the reservation does not exist."""

    code = "not_found"

    def __init__(self, reservation_id: int) -> None:
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} not found")


class PersistenceError(ReservationError):
    """Raised when a storage write fails; the transaction has been rolled back."""

    code = "persistence_failure"
