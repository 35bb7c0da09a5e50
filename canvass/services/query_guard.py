"""Request validation and area ceilings applied before address queries

The geometry functions never reject input; this module decides what the API
accepts and which drawn areas are too expensive to query.
"""

import math
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Tuple

import structlog

from canvass.config.settings import settings
from canvass.utils.exceptions import (
    AreaTooLargeError,
    InvalidBoundsError,
    InvalidPolygonError,
    ValidationError,
)
from canvass.utils.geometry import Coordinate, bounding_box_area_sq_km, open_ring, polygon_area_in_acres

logger = structlog.get_logger(__name__)

MIN_AREA_WARNING_ACRES = 0.01
BOUND_KEYS = ("north", "south", "east", "west")


def _is_number(value: Any) -> bool:
    # bool is a Real subclass but never a coordinate
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def parse_body(value: Any) -> Dict:
    """JSON request body as a dict; a missing body is empty"""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError("Request body must be a JSON object")
    return value


def parse_ring(value: Any, field: str = "polygon") -> List[Coordinate]:
    """Validate a ring of at least 3 numeric [lng, lat] pairs

    The returned ring is open; a closing vertex does not count towards the 3.
    """
    too_few = f"Invalid {field} provided: at least 3 points are required"
    if not isinstance(value, (list, tuple)) or len(value) < 3:
        raise InvalidPolygonError(too_few)

    for coord in value:
        if (not isinstance(coord, (list, tuple)) or len(coord) < 2
                or not _is_number(coord[0]) or not _is_number(coord[1])):
            raise InvalidPolygonError(f"Invalid {field} provided: points must be [lng, lat] numbers")

    ring = open_ring(value)
    if len(ring) < 3:
        raise InvalidPolygonError(too_few)
    return ring


def parse_bounds(value: Any) -> Dict[str, float]:
    """Validate a viewport with numeric north/south/east/west"""
    if not isinstance(value, Mapping) or not all(_is_number(value.get(key)) for key in BOUND_KEYS):
        raise InvalidBoundsError("Invalid bounds provided")
    return {key: value[key] for key in BOUND_KEYS}


def parse_location(value: Any) -> Coordinate:
    """Validate a {lat, lng} position and return it as (lng, lat)"""
    if not isinstance(value, Mapping) or not _is_number(value.get("lat")) or not _is_number(value.get("lng")):
        raise ValidationError("Numeric lat and lng are required")
    return value["lng"], value["lat"]


def parse_addresses(value: Any) -> List[Dict]:
    """Validate the address list submitted with a new route"""
    if not isinstance(value, list) or not value:
        raise ValidationError("Missing required fields: name, polygon, and addresses")

    for addr in value:
        if not isinstance(addr, Mapping) or not _is_number(addr.get("lat")) or not _is_number(addr.get("lng")):
            raise ValidationError("Every address needs numeric lat and lng")
    return [dict(addr) for addr in value]


def check_polygon_area(ring: List[Coordinate], max_acres: float = None) -> float:
    """Acreage of ring, raising AreaTooLargeError above the ceiling"""
    limit = settings.MAX_AREA_ACRES if max_acres is None else max_acres
    area_acres = polygon_area_in_acres(ring)

    if area_acres > limit:
        logger.warning("Polygon too large",
                      area_acres=round(area_acres, 2),
                      max_acres=limit)
        raise AreaTooLargeError(area_acres, limit)

    if area_acres < MIN_AREA_WARNING_ACRES:
        logger.warning("Polygon very small", area_acres=round(area_acres, 4))

    return area_acres


def viewport_too_large(bounds: Mapping[str, float], max_sq_km: float = None) -> Tuple[bool, float]:
    """Whether a viewport exceeds the query ceiling, with its area in km²"""
    limit = settings.MAX_VIEWPORT_AREA_SQ_KM if max_sq_km is None else max_sq_km
    area_sq_km = bounding_box_area_sq_km(bounds)
    return area_sq_km > limit, area_sq_km


def parse_threshold(value: Any, field: str) -> Optional[float]:
    """Optional non-negative distance in meters"""
    if value is None:
        return None
    if not _is_number(value) or value < 0:
        raise ValidationError(f"{field} must be a non-negative number")
    return value
