"""Reservation lifecycle - cancellation and check-out.

Both transitions lock the reservation, set its final status and release the
rooms it occupies, in one transaction. Repeating a transition is harmless:
rooms that are already released stay available.
"""

from __future__ import annotations

import logging

import psycopg2
from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.domain.errors import PersistenceError, ReservationNotFoundError
from hotelmgmt.domain.models import Reservation, ReservationStatus
from hotelmgmt.infra.db import txn
from hotelmgmt.infra.repositories.reservations_repository import (
    get_reservation,
    lock_reservation_status,
    set_reservation_status,
)
from hotelmgmt.infra.repositories.rooms_repository import release_rooms

logger = logging.getLogger(__name__)


def _close_reservation(
    reservation_id: int,
    target: ReservationStatus,
    cur: PgCursor | None,
) -> tuple[Reservation, int]:
    def _do(c: PgCursor) -> tuple[Reservation, int]:
        current = lock_reservation_status(c, reservation_id)
        if current is None:
            raise ReservationNotFoundError(reservation_id)

        if current is not target:
            set_reservation_status(c, reservation_id, target)

        released = release_rooms(c, reservation_id=reservation_id)
        return get_reservation(c, reservation_id), released

    try:
        if cur is not None:
            return _do(cur)
        with txn() as c:
            return _do(c)
    except psycopg2.Error as exc:
        logger.error(
            "reservation persistence failed",
            extra={
                "extra_fields": {
                    "reservation_id": reservation_id,
                    "target_status": target.value,
                    "pgcode": exc.pgcode,
                },
            },
        )
        raise PersistenceError(
            f"Failed to update reservation {reservation_id}"
        ) from exc


def cancel_reservation(reservation_id: int, *, cur: PgCursor | None = None) -> Reservation:
    """Cancel a reservation and release its rooms.

    Args:
        reservation_id: Reservation id.
        cur: Optional cursor of an enclosing transaction.

    Returns:
        The reservation with status 'cancelled'.

    Raises:
        ReservationNotFoundError: If the reservation does not exist.
        PersistenceError: If the database fails.
    """
    reservation, released = _close_reservation(
        reservation_id, ReservationStatus.CANCELLED, cur
    )
    logger.info(
        "reservation cancelled",
        extra={
            "extra_fields": {
                "reservation_id": reservation_id,
                "rooms_released": released,
            },
        },
    )
    return reservation


def check_out_reservation(reservation_id: int, *, cur: PgCursor | None = None) -> Reservation:
    """Complete a stay and release its rooms.

    Same room release as cancel_reservation; the reservation ends as
    'completed'.

    Raises:
        ReservationNotFoundError: If the reservation does not exist.
        PersistenceError: If the database fails.
    """
    reservation, released = _close_reservation(
        reservation_id, ReservationStatus.COMPLETED, cur
    )
    logger.info(
        "reservation checked out",
        extra={
            "extra_fields": {
                "reservation_id": reservation_id,
                "rooms_released": released,
            },
        },
    )
    return reservation
