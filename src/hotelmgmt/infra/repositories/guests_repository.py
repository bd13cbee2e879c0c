"""Guests repository - maps authenticated users to guest profiles.

Uses raw SQL with psycopg2 (no ORM).
"""

from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.infra.db import fetchone


def get_guest_id_for_user(cur: PgCursor, user_id: str) -> int | None:
    """Resolve the guest profile of a user.

    Args:
        cur: Database cursor.
        user_id: User UUID.

    Returns:
        Guest id, or None if the user has no guest profile.
    """
    row = fetchone(cur, "SELECT id FROM guests WHERE user_id = %s", (user_id,))
    if row is None:
        return None
    return row[0]
