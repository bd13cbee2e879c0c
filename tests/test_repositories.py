"""Tests for the raw SQL repositories against a mocked cursor."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from hotelmgmt.domain.models import ReservationStatus, RoomStatus, Stay
from hotelmgmt.infra.repositories.guests_repository import get_guest_id_for_user
from hotelmgmt.infra.repositories.hotels_repository import get_hotel
from hotelmgmt.infra.repositories.reservations_repository import (
    get_reservation,
    insert_reservation,
    list_active_reservations_for_hotel,
    lock_reservation_status,
)
from hotelmgmt.infra.repositories.rooms_repository import (
    count_rooms_by_status,
    list_attached_rooms,
    list_blocking_stays,
    lock_available_rooms,
    occupy_rooms,
    release_rooms,
    row_to_room,
)

BOOKED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def cur():
    return MagicMock()


def _room_row(room_id=101, hotel_id=1, status="available", reservation_id=None):
    return (room_id, hotel_id, str(room_id), "Standard", 12000, status, reservation_id)


class TestRooms:
    def test_row_to_room(self):
        room = row_to_room(_room_row(status="occupied", reservation_id=4))
        assert room.status is RoomStatus.OCCUPIED
        assert room.reservation_id == 4
        assert room.is_available is False

    def test_blocking_stays_skips_query_without_rooms(self, cur):
        assert list_blocking_stays(cur, room_ids=[], not_before=date(2024, 6, 1)) == []
        cur.execute.assert_not_called()

    def test_blocking_stays(self, cur):
        cur.fetchall.return_value = [(101, 3, date(2024, 6, 1), date(2024, 6, 4))]

        stays = list_blocking_stays(cur, room_ids=[101], not_before=date(2024, 6, 2))

        assert stays == [Stay(room_id=101, reservation_id=3, check_in=date(2024, 6, 1), check_out=date(2024, 6, 4))]
        params = cur.execute.call_args[0][1]
        assert params == ([101], ["confirmed"], date(2024, 6, 2))

    def test_lock_available_rooms_scoped_to_hotel(self, cur):
        cur.fetchall.return_value = [_room_row(101), _room_row(102)]

        rooms = lock_available_rooms(cur, room_ids=[101, 102], hotel_id=1)

        sql, params = cur.execute.call_args[0]
        assert sql.endswith("FOR UPDATE")
        assert "ORDER BY r.id" in sql
        assert params == [[101, 102], "available", 1]
        assert [r.id for r in rooms] == [101, 102]

    def test_lock_available_rooms_any_hotel(self, cur):
        cur.fetchall.return_value = []
        lock_available_rooms(cur, room_ids=[101])
        sql, params = cur.execute.call_args[0]
        assert "r.hotel_id = %s" not in sql
        assert params == [[101], "available"]

    def test_occupy_rooms_returns_rowcount(self, cur):
        cur.rowcount = 2
        assert occupy_rooms(cur, reservation_id=9, room_ids=[101, 102]) == 2
        params = cur.execute.call_args[0][1]
        assert params == ("occupied", 9, [101, 102], "available")

    def test_release_rooms(self, cur):
        cur.rowcount = 0
        assert release_rooms(cur, reservation_id=9) == 0
        assert cur.execute.call_args[0][1] == ("available", 9)

    def test_list_attached_rooms_groups_by_reservation(self, cur):
        cur.fetchall.return_value = [
            (1,) + _room_row(101),
            (1,) + _room_row(102),
            (2,) + _room_row(201),
        ]

        attached = list_attached_rooms(cur, [1, 2, 3])

        assert [r.id for r in attached[1]] == [101, 102]
        assert [r.id for r in attached[2]] == [201]
        assert 3 not in attached

    def test_list_attached_rooms_empty(self, cur):
        assert list_attached_rooms(cur, []) == {}
        cur.execute.assert_not_called()

    def test_count_rooms_by_status_defaults(self, cur):
        cur.fetchall.return_value = [("available", 4)]
        assert count_rooms_by_status(cur, 1) == {
            RoomStatus.AVAILABLE: 4,
            RoomStatus.OCCUPIED: 0,
        }


class TestReservations:
    def test_insert_returns_id(self, cur):
        cur.fetchone.return_value = (17,)

        reservation_id = insert_reservation(
            cur,
            guest_id=1,
            check_in=date(2024, 6, 1),
            check_out=date(2024, 6, 3),
            num_guests=2,
            status=ReservationStatus.CONFIRMED,
            booked_at=BOOKED_AT,
        )

        assert reservation_id == 17
        params = cur.execute.call_args[0][1]
        assert params[4] == "confirmed"
        assert params[6] is None

    def test_get_reservation_missing(self, cur):
        cur.fetchone.return_value = None
        assert get_reservation(cur, 1) is None

    def test_get_reservation_with_rooms(self, cur):
        cur.fetchone.return_value = (
            5, 1, date(2024, 6, 1), date(2024, 6, 4), 2, "confirmed", BOOKED_AT, None,
        )
        cur.fetchall.return_value = [(5,) + _room_row(101, status="occupied", reservation_id=5)]

        reservation = get_reservation(cur, 5)

        assert reservation.status is ReservationStatus.CONFIRMED
        assert reservation.nights == 3
        assert reservation.room_ids == [101]
        assert reservation.created_by_user_id is None

    def test_lock_reservation_status(self, cur):
        cur.fetchone.return_value = ("cancelled",)
        assert lock_reservation_status(cur, 5) is ReservationStatus.CANCELLED
        assert "FOR UPDATE" in cur.execute.call_args[0][0]

    def test_lock_reservation_status_missing(self, cur):
        cur.fetchone.return_value = None
        assert lock_reservation_status(cur, 5) is None

    def test_active_reservations_params(self, cur):
        cur.fetchall.return_value = []
        assert list_active_reservations_for_hotel(cur, 1, date(2024, 6, 10)) == []
        assert cur.execute.call_args[0][1] == ("confirmed", date(2024, 6, 10), 1)


class TestLookups:
    def test_guest_id_for_user(self, cur):
        cur.fetchone.return_value = (3,)
        assert get_guest_id_for_user(cur, "u-1") == 3

    def test_guest_id_missing(self, cur):
        cur.fetchone.return_value = None
        assert get_guest_id_for_user(cur, "u-1") is None

    def test_get_hotel(self, cur):
        cur.fetchone.return_value = (1, "Demo Hotel", "Lisbon", "PT")
        assert get_hotel(cur, 1) == {"id": 1, "name": "Demo Hotel", "city": "Lisbon", "country": "PT"}

    def test_get_hotel_missing(self, cur):
        cur.fetchone.return_value = None
        assert get_hotel(cur, 1) is None
