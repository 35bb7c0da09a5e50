"""Field-mode evaluation for a rep's live position on a route"""

from typing import Dict, List

from canvass.config.settings import settings
from canvass.utils.geojson import ring_from_geojson
from canvass.utils.geometry import (
    Coordinate,
    great_circle_distance,
    is_within_radius,
    nearby_points_with_distance,
    point_in_polygon,
)

WALKING = "walking"
NAVIGATION = "navigation"

GOOGLE_MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1&destination={destination}"


def navigation_url(lat: float, lng: float) -> str:
    """Directions link any device can open"""
    return GOOGLE_MAPS_DIRECTIONS_URL.format(destination=f"{lat},{lng}")


def evaluate_position(route: Dict, addresses: List[Dict], location: Coordinate,
                      in_area_threshold_m: float = None,
                      nearby_threshold_m: float = None) -> Dict:
    """Decide walking vs. navigation mode and list the addresses at hand

    A rep within in_area_threshold_m of the route centre is walking the
    route; addresses within nearby_threshold_m are offered for status
    updates, nearest first.
    """
    if in_area_threshold_m is None:
        in_area_threshold_m = settings.IN_AREA_THRESHOLD_M
    if nearby_threshold_m is None:
        nearby_threshold_m = settings.NEARBY_THRESHOLD_M

    center = (route["center_lng"], route["center_lat"])
    in_area = is_within_radius(center, location, in_area_threshold_m)
    ring = ring_from_geojson(route.get("polygon_geojson"))

    nearby = [
        dict(address, distance_m=round(distance, 1))
        for address, distance in nearby_points_with_distance(location, addresses, nearby_threshold_m)
    ]

    return {
        "mode": WALKING if in_area else NAVIGATION,
        "in_area": in_area,
        "inside_route_polygon": point_in_polygon(location, ring),
        "distance_to_center_m": round(great_circle_distance(center, location), 1),
        "nearby": nearby,
        "navigation_url": navigation_url(route["center_lat"], route["center_lng"]),
        "thresholds": {
            "in_area_m": in_area_threshold_m,
            "nearby_m": nearby_threshold_m,
        },
    }
