"""Geometry utilities for service areas and field positions

Coordinates are (lng, lat) pairs in decimal degrees (WGS84), the same order
GeoJSON uses. Areas use a local flat-earth projection around the ring's mean
latitude: good for the tens of acres a canvassing route covers, increasingly
wrong for large or tall polygons.
"""

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

Coordinate = Tuple[float, float]

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_DEGREE_LAT = 111_320.0
KM_PER_DEGREE = 111.32
SQ_METERS_PER_ACRE = 4046.86

IN_AREA_THRESHOLD_M = 200.0
NEARBY_THRESHOLD_M = 30.0


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two lat/lng points"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2

    # Rounding can push a just outside [0, 1]; NaN fails both tests and propagates
    if a > 1.0:
        a = 1.0
    elif a < 0.0:
        a = 0.0

    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def great_circle_distance(point_a: Sequence[float], point_b: Sequence[float]) -> float:
    """Haversine distance in meters between two (lng, lat) coordinates"""
    return haversine_distance(point_a[1], point_a[0], point_b[1], point_b[0])


def is_within_radius(center: Sequence[float], point: Sequence[float],
                     threshold_m: float = IN_AREA_THRESHOLD_M) -> bool:
    """True when point lies within threshold_m of center (boundary inclusive)"""
    return great_circle_distance(center, point) <= threshold_m


def _lat_lng(point: Any) -> Tuple[float, float]:
    if isinstance(point, Mapping):
        return point["lat"], point["lng"]
    return point.lat, point.lng


def nearby_points_with_distance(origin: Sequence[float], points: Iterable[Any],
                                threshold_m: float = NEARBY_THRESHOLD_M) -> List[Tuple[Any, float]]:
    """Points within threshold_m of origin paired with their distance, nearest first

    Points are anything exposing lat/lng, either as mapping keys or attributes.
    The sort is stable, so equidistant points keep their input order.
    """
    matches = []
    for point in points:
        lat, lng = _lat_lng(point)
        distance = haversine_distance(origin[1], origin[0], lat, lng)
        if distance <= threshold_m:
            matches.append((point, distance))

    matches.sort(key=lambda match: match[1])
    return matches


def nearby_points(origin: Sequence[float], points: Iterable[Any],
                  threshold_m: float = NEARBY_THRESHOLD_M) -> List[Any]:
    """Points within threshold_m of origin, nearest first"""
    return [point for point, _ in nearby_points_with_distance(origin, points, threshold_m)]


def open_ring(ring: Sequence[Sequence[float]]) -> List[Coordinate]:
    """Ring without an explicit closing vertex"""
    coords = [(coord[0], coord[1]) for coord in ring]
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords.pop()
    return coords


def close_ring(ring: Sequence[Sequence[float]]) -> List[Coordinate]:
    """Ring whose last vertex repeats the first"""
    coords = open_ring(ring)
    if coords:
        coords.append(coords[0])
    return coords


def ring_center(ring: Sequence[Sequence[float]]) -> Optional[Coordinate]:
    """Vertex mean of a ring as (lng, lat); not an area-weighted centroid"""
    coords = open_ring(ring)
    if not coords:
        return None

    n = len(coords)
    return (
        sum(lng for lng, _ in coords) / n,
        sum(lat for _, lat in coords) / n,
    )


def polygon_area_sq_meters(ring: Sequence[Sequence[float]]) -> float:
    """Planar shoelace area of a ring in square meters"""
    coords = open_ring(ring)
    n = len(coords)
    if n < 3:
        return 0.0

    center_lat = sum(lat for _, lat in coords) / n
    meters_per_degree_lng = METERS_PER_DEGREE_LAT * math.cos(math.radians(center_lat))

    # Offsets from the first vertex keep the products small
    origin_lng, origin_lat = coords[0]
    projected = [
        ((lng - origin_lng) * meters_per_degree_lng, (lat - origin_lat) * METERS_PER_DEGREE_LAT)
        for lng, lat in coords
    ]

    area = 0.0
    for i in range(n):
        x1, y1 = projected[i]
        x2, y2 = projected[(i + 1) % n]
        area += x1 * y2 - x2 * y1

    return abs(area) / 2.0


def polygon_area_in_acres(ring: Sequence[Sequence[float]]) -> float:
    """Approximate area of a ring in acres"""
    return polygon_area_sq_meters(ring) / SQ_METERS_PER_ACRE


def bounding_box_area_sq_km(bbox: Mapping[str, float]) -> float:
    """Approximate area of a north/south/east/west box in square kilometers

    Boxes crossing the antimeridian (east < west) are not unwrapped.
    """
    center_lat = (bbox["north"] + bbox["south"]) / 2
    lat_distance_km = abs(bbox["north"] - bbox["south"]) * KM_PER_DEGREE
    lng_distance_km = abs(bbox["east"] - bbox["west"]) * KM_PER_DEGREE * math.cos(math.radians(center_lat))
    return lat_distance_km * lng_distance_km


def point_in_polygon(point: Sequence[float], ring: Sequence[Sequence[float]]) -> bool:
    """Even-odd ray casting test for a (lng, lat) point

    Points exactly on an edge or vertex may land either way.
    """
    coords = open_ring(ring)
    if len(coords) < 3:
        return False

    x, y = point[0], point[1]
    inside = False
    j = len(coords) - 1
    for i in range(len(coords)):
        xi, yi = coords[i]
        xj, yj = coords[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i

    return inside
