"""Unit tests for cancellation and check-out."""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from hotelmgmt.domain.errors import PersistenceError, ReservationNotFoundError
from hotelmgmt.domain.lifecycle import cancel_reservation, check_out_reservation
from hotelmgmt.domain.models import ReservationStatus

from .helpers import make_reservation

LIFECYCLE = "hotelmgmt.domain.lifecycle"


@pytest.fixture
def repos():
    with patch(f"{LIFECYCLE}.lock_reservation_status") as lock, \
         patch(f"{LIFECYCLE}.set_reservation_status") as set_status, \
         patch(f"{LIFECYCLE}.release_rooms", return_value=2) as release, \
         patch(f"{LIFECYCLE}.get_reservation") as get:
        yield MagicMock(lock=lock, set_status=set_status, release=release, get=get)


class TestCancelReservation:
    def test_not_found(self, repos):
        repos.lock.return_value = None

        with pytest.raises(ReservationNotFoundError) as exc_info:
            cancel_reservation(404, cur=MagicMock())

        assert exc_info.value.code == "not_found"
        assert str(exc_info.value) == "Reservation 404 not found"
        repos.release.assert_not_called()

    def test_cancel_confirmed(self, repos):
        cur = MagicMock()
        repos.lock.return_value = ReservationStatus.CONFIRMED
        repos.get.return_value = make_reservation(5, status=ReservationStatus.CANCELLED)

        result = cancel_reservation(5, cur=cur)

        assert result.status is ReservationStatus.CANCELLED
        repos.set_status.assert_called_once_with(cur, 5, ReservationStatus.CANCELLED)
        repos.release.assert_called_once_with(cur, reservation_id=5)

    def test_cancel_twice_is_harmless(self, repos):
        cur = MagicMock()
        repos.lock.return_value = ReservationStatus.CANCELLED
        repos.release.return_value = 0
        repos.get.return_value = make_reservation(5, status=ReservationStatus.CANCELLED)

        result = cancel_reservation(5, cur=cur)

        assert result.status is ReservationStatus.CANCELLED
        repos.set_status.assert_not_called()
        repos.release.assert_called_once_with(cur, reservation_id=5)

    def test_cancel_completed_stay(self, repos):
        repos.lock.return_value = ReservationStatus.COMPLETED
        repos.get.return_value = make_reservation(5, status=ReservationStatus.CANCELLED)

        cancel_reservation(5, cur=MagicMock())

        assert repos.set_status.call_args[0][2] is ReservationStatus.CANCELLED

    def test_database_error_wrapped(self, repos):
        repos.lock.side_effect = psycopg2.OperationalError("gone")

        with pytest.raises(PersistenceError):
            cancel_reservation(5, cur=MagicMock())

    def test_database_error_logged(self, repos):
        repos.release.side_effect = psycopg2.OperationalError("gone")

        with patch(f"{LIFECYCLE}.logger") as mock_logger:
            with pytest.raises(PersistenceError):
                cancel_reservation(5, cur=MagicMock())

        mock_logger.error.assert_called_once()
        args, kwargs = mock_logger.error.call_args
        assert args == ("reservation persistence failed",)
        fields = kwargs["extra"]["extra_fields"]
        assert fields["reservation_id"] == 5
        assert fields["target_status"] == "cancelled"
        assert "pgcode" in fields
        mock_logger.info.assert_not_called()

    def test_opens_transaction_without_cursor(self, repos):
        cur = MagicMock()
        repos.lock.return_value = ReservationStatus.CONFIRMED
        repos.get.return_value = make_reservation(5, status=ReservationStatus.CANCELLED)

        with patch(f"{LIFECYCLE}.txn") as mock_txn:
            mock_txn.return_value.__enter__.return_value = cur
            cancel_reservation(5)

        repos.lock.assert_called_once_with(cur, 5)


class TestCheckOutReservation:
    def test_check_out(self, repos):
        cur = MagicMock()
        repos.lock.return_value = ReservationStatus.CONFIRMED
        repos.get.return_value = make_reservation(6, status=ReservationStatus.COMPLETED)

        result = check_out_reservation(6, cur=cur)

        assert result.status is ReservationStatus.COMPLETED
        repos.set_status.assert_called_once_with(cur, 6, ReservationStatus.COMPLETED)
        repos.release.assert_called_once_with(cur, reservation_id=6)

    def test_not_found(self, repos):
        repos.lock.return_value = None
        with pytest.raises(ReservationNotFoundError):
            check_out_reservation(6, cur=MagicMock())
