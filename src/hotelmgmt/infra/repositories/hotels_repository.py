"""Hotels repository - hotel identity lookups.

Uses raw SQL with psycopg2 (no ORM).
"""

from psycopg2.extensions import cursor as PgCursor

from hotelmgmt.infra.db import fetchone


def get_hotel(cur: PgCursor, hotel_id: int) -> dict | None:
    """Fetch a hotel's public fields.

    Returns:
        Dict with id, name, city, country; or None if not found.
    """
    row = fetchone(
        cur,
        "SELECT id, name, city, country FROM hotels WHERE id = %s",
        (hotel_id,),
    )
    if row is None:
        return None
    return {"id": row[0], "name": row[1], "city": row[2], "country": row[3]}
