"""PostgreSQL/PostGIS store for address points, routes and route addresses"""

import json
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import psycopg2
from psycopg2.extras import Json, execute_values
import structlog

from canvass.config.settings import settings
from canvass.database.connection_pool import DatabasePool
from canvass.utils.exceptions import DatabaseError
from canvass.utils.geojson import polygon_geojson
from canvass.utils.geometry import polygon_area_in_acres, ring_center

logger = structlog.get_logger(__name__)

LEAD_STATUSES = (
    "pending",
    "not_home",
    "interested",
    "not_interested",
    "callback",
    "do_not_contact",
)

ADDRESSES_IN_POLYGON_SQL = """
SELECT
    ogc_fid,
    address,
    city,
    zipcode,
    ST_X(wkb_geometry) AS lng,
    ST_Y(wkb_geometry) AS lat
FROM address_points
WHERE ST_Intersects(wkb_geometry, ST_SetSRID(ST_GeomFromGeoJSON(%s), 4326))
"""


def address_from_row(row: Dict, default_state: str = None) -> Dict:
    """Shape an address_points row the way the map client expects"""
    return {
        "id": str(row["ogc_fid"]),
        "address": row.get("address") or "Unknown Address",
        "city": row.get("city") or "",
        "state": default_state or settings.DEFAULT_STATE,
        "zip": row.get("zipcode") or "",
        "lat": row["lat"],
        "lng": row["lng"],
    }


def _serialize(row: Optional[Dict]) -> Optional[Dict]:
    if row is None:
        return None
    result = {}
    for key, value in dict(row).items():
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, uuid.UUID):
            value = str(value)
        elif key == "polygon_geojson" and isinstance(value, str):
            value = json.loads(value)
        result[key] = value
    return result


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False


class PostgresCanvassStore:
    """Route and address queries over an injected connection pool"""

    def __init__(self, pool: DatabasePool, default_state: str = None):
        self.pool = pool
        self.default_state = default_state or settings.DEFAULT_STATE

    def addresses_in_polygon(self, polygon: Dict) -> List[Dict]:
        """Address points intersecting a GeoJSON polygon"""
        start_time = datetime.now()
        try:
            rows = self.pool.execute_query(ADDRESSES_IN_POLYGON_SQL, (json.dumps(polygon),))
        except psycopg2.Error as e:
            logger.error("Address point query failed", error=str(e))
            raise DatabaseError("Database query failed") from e

        duration_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.info("Address point query completed",
                   address_count=len(rows),
                   duration_ms=round(duration_ms, 1))
        return [address_from_row(row, self.default_state) for row in rows]

    def create_route(self, name: str, polygon: Sequence[Sequence[float]], addresses: List[Dict],
                     destination_url: str = None, campaign_name: str = None) -> Dict:
        """Insert a route and its addresses in a single transaction"""
        center_lng, center_lat = ring_center(polygon)
        area_acres = polygon_area_in_acres(polygon)

        try:
            with self.pool.get_cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO routes (name, polygon_geojson, center_lat, center_lng,
                                        area_acres, address_count, destination_url, campaign_name)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING *
                    """,
                    (
                        name,
                        Json(polygon_geojson(polygon)),
                        center_lat,
                        center_lng,
                        area_acres,
                        len(addresses),
                        destination_url or settings.DEFAULT_DESTINATION_URL,
                        campaign_name or None,
                    ),
                )
                route = cur.fetchone()

                execute_values(
                    cur,
                    """
                    INSERT INTO route_addresses (route_id, address, city, state, zip, lat, lng, status)
                    VALUES %s
                    """,
                    [
                        (
                            route["id"],
                            addr.get("address"),
                            addr.get("city"),
                            addr.get("state") or self.default_state,
                            addr.get("zip"),
                            addr["lat"],
                            addr["lng"],
                            "pending",
                        )
                        for addr in addresses
                    ],
                )
        except psycopg2.Error as e:
            logger.error("Failed to create route", name=name, error=str(e))
            raise DatabaseError("Failed to create route") from e

        logger.info("Route created",
                   route_id=str(route["id"]),
                   address_count=len(addresses),
                   area_acres=round(area_acres, 2))
        return _serialize(route)

    def list_routes(self) -> List[Dict]:
        """All routes, newest first"""
        try:
            rows = self.pool.execute_query("SELECT * FROM routes ORDER BY created_at DESC")
        except psycopg2.Error as e:
            logger.error("Failed to fetch routes", error=str(e))
            raise DatabaseError("Failed to fetch routes") from e
        return [_serialize(row) for row in rows]

    def get_route(self, route_id: str) -> Optional[Dict]:
        if not _is_uuid(route_id):
            return None
        try:
            row = self.pool.execute_one("SELECT * FROM routes WHERE id = %s", (route_id,))
        except psycopg2.Error as e:
            logger.error("Failed to fetch route", route_id=route_id, error=str(e))
            raise DatabaseError("Failed to fetch route") from e
        return _serialize(row)

    def get_route_addresses(self, route_id: str) -> List[Dict]:
        if not _is_uuid(route_id):
            return []
        try:
            rows = self.pool.execute_query(
                "SELECT * FROM route_addresses WHERE route_id = %s ORDER BY address ASC",
                (route_id,),
            )
        except psycopg2.Error as e:
            logger.error("Failed to fetch route addresses", route_id=route_id, error=str(e))
            raise DatabaseError("Failed to fetch route addresses") from e
        return [_serialize(row) for row in rows]

    def delete_route(self, route_id: str) -> bool:
        """Delete a route; its addresses go with it via ON DELETE CASCADE"""
        if not _is_uuid(route_id):
            return False
        try:
            row = self.pool.execute_one("DELETE FROM routes WHERE id = %s RETURNING id", (route_id,))
        except psycopg2.Error as e:
            logger.error("Failed to delete route", route_id=route_id, error=str(e))
            raise DatabaseError("Failed to delete route") from e
        return row is not None

    def update_route_address(self, route_id: str, address_id: str,
                             status: str = None, notes: str = None,
                             update_notes: bool = False) -> Optional[Dict]:
        """Update status and/or notes of an address that belongs to route_id

        Returns None when the address is not part of the route. notes is only
        written when update_notes is set, so callers can clear it with None.
        """
        if not (_is_uuid(route_id) and _is_uuid(address_id)):
            return None

        assignments = ["updated_at = NOW()"]
        params = []
        if status:
            assignments.append("status = %s")
            params.append(status)
        if update_notes:
            assignments.append("notes = %s")
            params.append(notes)

        query = (
            f"UPDATE route_addresses SET {', '.join(assignments)} "
            "WHERE id = %s AND route_id = %s RETURNING *"
        )
        try:
            row = self.pool.execute_one(query, tuple(params) + (address_id, route_id))
        except psycopg2.Error as e:
            logger.error("Failed to update route address",
                        route_id=route_id, address_id=address_id, error=str(e))
            raise DatabaseError("Failed to update address") from e
        return _serialize(row)

    def health_check(self) -> bool:
        try:
            self.pool.execute_one("SELECT 1 AS ok")
            return True
        except psycopg2.Error as e:
            logger.warning("Database health check failed", error=str(e))
            return False
