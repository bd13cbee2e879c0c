"""Shared test helper functions for hotelmgmt tests.

Regular functions (not fixtures) importable from any test module.
"""

from __future__ import annotations

import base64
import time
from datetime import date, datetime, timezone

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa

from hotelmgmt.api.auth import CurrentUser
from hotelmgmt.domain.models import Reservation, ReservationStatus, Room, RoomStatus

ISSUER = "https://auth.example.com"
AUDIENCE = "hotelmgmt-api"

OIDC_ENV = {
    "OIDC_ISSUER": ISSUER,
    "OIDC_AUDIENCE": AUDIENCE,
    "OIDC_JWKS_URL": "https://auth.example.com/.well-known/jwks.json",
}


def generate_rsa_keypair():
    """Generate RSA key pair for test JWT signing."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key, private_key.public_key()


def create_jwks(public_key, kid: str = "test-key-1") -> dict:
    """Create JWKS from public key."""
    public_numbers = public_key.public_numbers()

    def int_to_base64(n: int) -> str:
        byte_length = (n.bit_length() + 7) // 8
        return (
            base64.urlsafe_b64encode(n.to_bytes(byte_length, "big"))
            .rstrip(b"=")
            .decode()
        )

    return {
        "keys": [
            {
                "kty": "RSA",
                "use": "sig",
                "alg": "RS256",
                "kid": kid,
                "n": int_to_base64(public_numbers.n),
                "e": int_to_base64(public_numbers.e),
            }
        ]
    }


def create_token(
    private_key,
    kid: str = "test-key-1",
    sub: str = "user-123",
    iss: str = ISSUER,
    aud: str = AUDIENCE,
    exp: int | None = None,
    azp: str | None = None,
) -> str:
    """Create signed JWT for testing."""
    now = int(time.time())
    payload = {
        "sub": sub,
        "iss": iss,
        "aud": aud,
        "exp": exp if exp is not None else now + 3600,
        "iat": now,
    }
    if azp:
        payload["azp"] = azp

    return jwt.encode(payload, private_key, algorithm="RS256", headers={"kid": kid})


def make_user(role: str = "customer", hotel_id: int | None = None, user_id: str = "user-uuid-1") -> CurrentUser:
    return CurrentUser(
        id=user_id,
        external_subject=f"sub-{user_id}",
        email="test@example.com",
        name="Test User",
        role=role,
        hotel_id=hotel_id,
    )


def make_room(
    room_id: int = 101,
    hotel_id: int = 1,
    status: RoomStatus = RoomStatus.AVAILABLE,
    reservation_id: int | None = None,
) -> Room:
    return Room(
        id=room_id,
        hotel_id=hotel_id,
        room_number=str(room_id),
        room_type="Standard",
        price_cents=12000,
        status=status,
        reservation_id=reservation_id,
    )


def make_reservation(
    reservation_id: int = 1,
    guest_id: int = 1,
    check_in: date = date(2024, 6, 1),
    check_out: date = date(2024, 6, 5),
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    rooms: tuple[Room, ...] = (),
) -> Reservation:
    return Reservation(
        id=reservation_id,
        guest_id=guest_id,
        check_in=check_in,
        check_out=check_out,
        num_guests=2,
        status=status,
        booked_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        rooms=rooms,
    )
