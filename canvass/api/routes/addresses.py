"""Address point lookups for drawn polygons and map viewports"""

from flask import current_app, request
from flask_restx import Namespace, Resource, fields
import structlog

from canvass.services.query_guard import (
    check_polygon_area,
    parse_body,
    parse_bounds,
    parse_ring,
    viewport_too_large,
)
from canvass.utils.geojson import bbox_geojson, polygon_geojson

logger = structlog.get_logger(__name__)

addresses_ns = Namespace("addresses", description="Address points inside an area")

# Request/Response models
coordinates_request_model = addresses_ns.model("CoordinatesRequest", {
    "coordinates": fields.List(fields.List(fields.Float), required=True,
                               description="Polygon ring as [lng, lat] pairs")
})

polygon_request_model = addresses_ns.model("PolygonRequest", {
    "polygon": fields.List(fields.List(fields.Float), required=True,
                           description="Polygon ring as [lng, lat] pairs")
})

bounds_model = addresses_ns.model("Bounds", {
    "north": fields.Float(required=True),
    "south": fields.Float(required=True),
    "east": fields.Float(required=True),
    "west": fields.Float(required=True)
})

viewport_request_model = addresses_ns.model("ViewportRequest", {
    "bounds": fields.Nested(bounds_model, required=True)
})

def _addresses_in_ring(ring):
    """Apply the acreage ceiling, then query the address points inside ring"""
    area_acres = check_polygon_area(ring)
    logger.info("Querying address points", points=len(ring), area_acres=round(area_acres, 2))

    addresses = current_app.store.addresses_in_polygon(polygon_geojson(ring))
    return {
        "addresses": addresses,
        "areaAcres": round(area_acres, 2)
    }

@addresses_ns.route("")
class AddressesInCoordinates(Resource):
    """Addresses inside a drawn service area"""

    @addresses_ns.doc("addresses_in_coordinates")
    @addresses_ns.expect(coordinates_request_model)
    def post(self):
        """Fetch address points inside a polygon given as `coordinates`"""
        data = parse_body(request.get_json(silent=True))
        ring = parse_ring(data.get("coordinates"), field="coordinates")
        return _addresses_in_ring(ring)

@addresses_ns.route("/polygon")
class AddressesInPolygon(Resource):
    """Addresses inside a polygon drawn on the map"""

    @addresses_ns.doc("addresses_in_polygon")
    @addresses_ns.expect(polygon_request_model)
    def post(self):
        """Fetch address points inside a polygon given as `polygon`"""
        data = parse_body(request.get_json(silent=True))
        ring = parse_ring(data.get("polygon"))
        return _addresses_in_ring(ring)

@addresses_ns.route("/viewport")
class AddressesInViewport(Resource):
    """Addresses visible in the current map viewport"""

    @addresses_ns.doc("addresses_in_viewport")
    @addresses_ns.expect(viewport_request_model)
    def post(self):
        """Fetch address points inside the viewport, or ask the client to zoom in"""
        data = parse_body(request.get_json(silent=True))
        bounds = parse_bounds(data.get("bounds"))

        too_large, area_sq_km = viewport_too_large(bounds)
        logger.info("Viewport requested", area_sq_km=round(area_sq_km, 2), too_large=too_large)

        if too_large:
            return {
                "addresses": [],
                "tooLarge": True,
                "message": "Zoom in to see addresses"
            }

        return {
            "addresses": current_app.store.addresses_in_polygon(bbox_geojson(bounds))
        }
