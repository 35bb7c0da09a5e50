"""Saved canvassing routes, lead status updates and field positions"""

from flask import current_app, request
from flask_restx import Namespace, Resource, fields
import structlog

from canvass.config.settings import settings
from canvass.services.field_session import evaluate_position
from canvass.services.postgres_store import LEAD_STATUSES
from canvass.services.query_guard import (
    check_polygon_area,
    parse_addresses,
    parse_body,
    parse_location,
    parse_ring,
    parse_threshold,
)
from canvass.utils.exceptions import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

routes_ns = Namespace("routes", description="Canvassing routes")

# Request models
route_address_model = routes_ns.model("RouteAddressInput", {
    "address": fields.String(description="Street address"),
    "city": fields.String,
    "state": fields.String,
    "zip": fields.String,
    "lat": fields.Float(required=True),
    "lng": fields.Float(required=True)
})

create_route_model = routes_ns.model("CreateRoute", {
    "name": fields.String(required=True, description="Route name"),
    "polygon": fields.List(fields.List(fields.Float), required=True,
                           description="Service area ring as [lng, lat] pairs"),
    "addresses": fields.List(fields.Nested(route_address_model), required=True),
    "destinationUrl": fields.String(description="Landing page for printed codes"),
    "campaignName": fields.String
})

update_address_model = routes_ns.model("UpdateRouteAddress", {
    "status": fields.String(enum=list(LEAD_STATUSES)),
    "notes": fields.String
})

position_model = routes_ns.model("FieldPosition", {
    "lat": fields.Float(required=True),
    "lng": fields.Float(required=True),
    "inAreaThresholdM": fields.Float(description=f"Default {settings.IN_AREA_THRESHOLD_M:g} m"),
    "nearbyThresholdM": fields.Float(description=f"Default {settings.NEARBY_THRESHOLD_M:g} m")
})

def _get_route_or_404(route_id: str) -> dict:
    route = current_app.store.get_route(route_id)
    if route is None:
        raise NotFoundError("Route not found")
    return route

@routes_ns.route("")
class RouteList(Resource):
    """Create and list routes"""

    @routes_ns.doc("list_routes")
    def get(self):
        """List all routes, newest first"""
        return {"routes": current_app.store.list_routes()}

    @routes_ns.doc("create_route")
    @routes_ns.expect(create_route_model)
    def post(self):
        """Save a drawn polygon and its addresses as a route"""
        data = parse_body(request.get_json(silent=True))

        name = data.get("name")
        if not name or not data.get("polygon") or not data.get("addresses"):
            raise ValidationError("Missing required fields: name, polygon, and addresses")

        polygon = parse_ring(data["polygon"])
        addresses = parse_addresses(data["addresses"])
        check_polygon_area(polygon)

        route = current_app.store.create_route(
            name,
            polygon,
            addresses,
            destination_url=data.get("destinationUrl"),
            campaign_name=data.get("campaignName")
        )
        return {"route": route, "addressCount": len(addresses)}, 201

@routes_ns.route("/<string:route_id>")
class RouteDetail(Resource):
    """A single route"""

    @routes_ns.doc("get_route")
    def get(self, route_id):
        """Get a route with its addresses"""
        route = _get_route_or_404(route_id)
        return {
            "route": route,
            "addresses": current_app.store.get_route_addresses(route_id)
        }

    @routes_ns.doc("delete_route")
    def delete(self, route_id):
        """Delete a route and its addresses"""
        if not current_app.store.delete_route(route_id):
            raise NotFoundError("Route not found")
        logger.info("Route deleted", route_id=route_id)
        return {"success": True}

@routes_ns.route("/<string:route_id>/addresses/<string:address_id>")
class RouteAddress(Resource):
    """Lead status of one address on a route"""

    @routes_ns.doc("update_route_address")
    @routes_ns.expect(update_address_model)
    def patch(self, route_id, address_id):
        """Update an address's status or notes"""
        data = parse_body(request.get_json(silent=True))

        status = data.get("status")
        if status and status not in LEAD_STATUSES:
            raise ValidationError("Invalid status value")

        address = current_app.store.update_route_address(
            route_id,
            address_id,
            status=status,
            notes=data.get("notes"),
            update_notes="notes" in data
        )
        if address is None:
            raise NotFoundError("Address not found in this route")

        logger.info("Route address updated", route_id=route_id, address_id=address_id, status=status)
        return {"address": address}

@routes_ns.route("/<string:route_id>/position")
class RoutePosition(Resource):
    """Field mode for a rep's current position"""

    @routes_ns.doc("evaluate_position")
    @routes_ns.expect(position_model)
    def post(self, route_id):
        """Decide walking vs. navigation mode and list nearby addresses"""
        data = parse_body(request.get_json(silent=True))
        location = parse_location(data)
        in_area_threshold_m = parse_threshold(data.get("inAreaThresholdM"), "inAreaThresholdM")
        nearby_threshold_m = parse_threshold(data.get("nearbyThresholdM"), "nearbyThresholdM")

        route = _get_route_or_404(route_id)
        addresses = current_app.store.get_route_addresses(route_id)

        return evaluate_position(
            route,
            addresses,
            location,
            in_area_threshold_m=in_area_threshold_m,
            nearby_threshold_m=nearby_threshold_m
        )
