"""
Fill in coordinates for properties that have never been geocoded.

Rows are processed one at a time. Each successful lookup is committed on its
own, so a failure part way through keeps everything geocoded before it; the
failing row is logged and left for the next run.
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.engine import Connection

from listings.core.exceptions import GeocodingError
from listings.models import Property
from listings.services.geocoding import GeocodingService, format_address

logger = logging.getLogger(__name__)


def properties_without_geocode(conn: Connection, limit: Optional[int] = None) -> list[dict]:
    table = Property.__table__
    query = (
        select(table.c.id, table.c.address, table.c.city, table.c.state, table.c.zip_code, table.c.country)
        .where(table.c.geocode.is_(None))
        .order_by(table.c.id)
    )
    if limit:
        query = query.limit(limit)
    with conn.begin():
        return [dict(row) for row in conn.execute(query).mappings()]


def backfill_geocodes(
    conn: Connection,
    geocoder: GeocodingService,
    limit: Optional[int] = None,
) -> dict:
    """
    Geocode every property whose geocode is still null.

    Returns:
        Stats dict: total, updated, failed.
    """
    table = Property.__table__
    rows = properties_without_geocode(conn, limit=limit)
    stats = {"total": len(rows), "updated": 0, "failed": 0}
    logger.info(f"Found {len(rows)} properties without geocode ({geocoder.provider})")

    for row in rows:
        address = format_address(row["address"], row["city"], row["state"], row["zip_code"], row["country"])
        try:
            lat, lng = geocoder.geocode(address)
        except GeocodingError as e:
            stats["failed"] += 1
            logger.error(f"Failed to geocode property {row['id']}: {e.status}")
            continue

        with conn.begin():
            conn.execute(
                update(table)
                .where(table.c.id == row["id"])
                .values(geocode={"lat": lat, "lng": lng}, latitude=lat, longitude=lng)
            )
        stats["updated"] += 1
        logger.info(f"Geocode for property {row['id']} updated: ({lat}, {lng})")

    logger.info(
        f"Geocoding complete: {stats['updated']}/{stats['total']} updated, {stats['failed']} failed"
    )
    return stats
