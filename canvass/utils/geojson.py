"""GeoJSON builders for PostGIS queries and stored routes"""

from typing import Dict, List, Mapping, Sequence

from shapely.geometry import Polygon, mapping

from canvass.utils.geometry import Coordinate, open_ring


def _as_lists(geometry: Dict) -> Dict:
    """shapely's mapping() yields nested tuples; JSON columns want lists"""
    return {
        "type": geometry["type"],
        "coordinates": [[list(coord) for coord in ring] for ring in geometry["coordinates"]],
    }


def polygon_geojson(ring: Sequence[Sequence[float]]) -> Dict:
    """GeoJSON Polygon for a ring, closed whether or not the input was"""
    shape = Polygon(open_ring(ring))
    return _as_lists(mapping(shape))


def bbox_geojson(bounds: Mapping[str, float]) -> Dict:
    """GeoJSON Polygon covering a north/south/east/west viewport"""
    west, south = bounds["west"], bounds["south"]
    east, north = bounds["east"], bounds["north"]
    shape = Polygon([(west, south), (east, south), (east, north), (west, north)])
    return _as_lists(mapping(shape))


def ring_from_geojson(geojson: Mapping) -> List[Coordinate]:
    """Outer ring of a stored GeoJSON Polygon, or [] if there is none"""
    if not geojson or geojson.get("type") != "Polygon":
        return []
    rings = geojson.get("coordinates") or []
    if not rings:
        return []
    return [(coord[0], coord[1]) for coord in rings[0]]
