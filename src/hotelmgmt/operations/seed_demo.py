"""Seed a demo hotel, its rooms, a customer and a hotel admin.

Idempotent: re-running reuses existing rows. The demo booking goes through
create_reservation, so it is skipped with a message when its room is taken.

Usage:
    DATABASE_URL=... SEED_CUSTOMER_SUBJECT=... python -m hotelmgmt.operations.seed_demo
"""

import os
from datetime import date, timedelta

from hotelmgmt.domain.booking import create_reservation
from hotelmgmt.domain.errors import ReservationError
from hotelmgmt.domain.models import ReservationDraft
from hotelmgmt.infra.db import txn

DEMO_ROOMS = [
    ("101", "Standard", 12000),
    ("102", "Standard", 12000),
    ("201", "Deluxe", 18000),
    ("301", "Suite", 32000),
]


def env(name: str, default: str | None = None) -> str:
    v = os.getenv(name, default)
    if v is None or v.strip() == "":
        raise RuntimeError(f"Missing env var: {name}")
    return v


def _upsert_user(cur, external_subject: str, role: str, hotel_id: int | None) -> str:
    cur.execute(
        """
        INSERT INTO users (external_subject, role, hotel_id)
        VALUES (%s, %s, %s)
        ON CONFLICT (external_subject)
        DO UPDATE SET role = EXCLUDED.role, hotel_id = EXCLUDED.hotel_id, updated_at = now()
        RETURNING id
        """,
        (external_subject, role, hotel_id),
    )
    return str(cur.fetchone()[0])


def main() -> int:
    hotel_name = env("SEED_HOTEL_NAME", "Demo Hotel")
    customer_subject = env("SEED_CUSTOMER_SUBJECT")
    staff_subject = env("SEED_STAFF_SUBJECT", customer_subject + "-staff")

    with txn() as cur:
        # 1) Hotel (matched by name)
        cur.execute("SELECT id FROM hotels WHERE name = %s ORDER BY id LIMIT 1", (hotel_name,))
        row = cur.fetchone()
        if row is None:
            cur.execute(
                "INSERT INTO hotels (name, city, country) VALUES (%s, %s, %s) RETURNING id",
                (hotel_name, env("SEED_HOTEL_CITY", "Lisbon"), env("SEED_HOTEL_COUNTRY", "PT")),
            )
            row = cur.fetchone()
        hotel_id = row[0]

        # 2) Rooms
        for room_number, room_type, price_cents in DEMO_ROOMS:
            cur.execute(
                """
                INSERT INTO rooms (hotel_id, room_number, room_type, price_cents)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (hotel_id, room_number) DO NOTHING
                """,
                (hotel_id, room_number, room_type, price_cents),
            )

        # 3) Users + guest profile
        customer_id = _upsert_user(cur, customer_subject, "customer", None)
        _upsert_user(cur, staff_subject, "hotel_admin", hotel_id)
        cur.execute(
            """
            INSERT INTO guests (user_id, first_name, last_name)
            VALUES (%s, 'Demo', 'Guest')
            ON CONFLICT (user_id) DO UPDATE SET updated_at = now()
            RETURNING id
            """,
            (customer_id,),
        )
        guest_id = cur.fetchone()[0]

        cur.execute(
            "SELECT id FROM rooms WHERE hotel_id = %s AND room_number = %s",
            (hotel_id, DEMO_ROOMS[0][0]),
        )
        room_id = cur.fetchone()[0]

    # 4) Demo booking through the engine
    check_in = date.today() + timedelta(days=7)
    draft = ReservationDraft(
        guest_id=guest_id,
        check_in=check_in,
        check_out=check_in + timedelta(days=2),
        num_guests=2,
    )
    reservation_id = None
    try:
        reservation_id = create_reservation(draft, [room_id], hotel_id=hotel_id).id
    except ReservationError as exc:
        print("demo booking skipped:", exc.code)

    print(
        "seed ok:",
        {
            "hotel_id": hotel_id,
            "customer_subject": customer_subject,
            "staff_subject": staff_subject,
            "guest_id": guest_id,
            "reservation_id": reservation_id,
        },
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
