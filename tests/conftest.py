"""Shared fixtures: an in-memory store injected into the Flask app."""

import uuid
from datetime import datetime

import pytest

from canvass.app import create_app
from canvass.utils.geojson import polygon_geojson
from canvass.utils.geometry import polygon_area_in_acres, ring_center

CENTER_LNG = -122.0
CENTER_LAT = 37.8

# About 2.4 acres around the centre
SMALL_RING = [
    [CENTER_LNG - 0.0005, CENTER_LAT - 0.0005],
    [CENTER_LNG + 0.0005, CENTER_LAT - 0.0005],
    [CENTER_LNG + 0.0005, CENTER_LAT + 0.0005],
    [CENTER_LNG - 0.0005, CENTER_LAT + 0.0005],
]

# About 240 acres, well over the 50 acre ceiling
LARGE_RING = [
    [CENTER_LNG - 0.005, CENTER_LAT - 0.005],
    [CENTER_LNG + 0.005, CENTER_LAT - 0.005],
    [CENTER_LNG + 0.005, CENTER_LAT + 0.005],
    [CENTER_LNG - 0.005, CENTER_LAT + 0.005],
]


class FakeStore:
    """Stands in for PostgresCanvassStore"""

    def __init__(self, address_points=None):
        self.address_points = address_points or []
        self.polygon_queries = []
        self.routes = {}
        self.route_addresses = {}
        self.healthy = True

    def addresses_in_polygon(self, polygon):
        self.polygon_queries.append(polygon)
        return list(self.address_points)

    def create_route(self, name, polygon, addresses, destination_url=None, campaign_name=None):
        center_lng, center_lat = ring_center(polygon)
        route = {
            "id": str(uuid.uuid4()),
            "name": name,
            "polygon_geojson": polygon_geojson(polygon),
            "center_lat": center_lat,
            "center_lng": center_lng,
            "area_acres": polygon_area_in_acres(polygon),
            "address_count": len(addresses),
            "destination_url": destination_url or "https://www.brightersettings.com/",
            "campaign_name": campaign_name,
            "created_at": datetime.now().isoformat(),
        }
        self.routes[route["id"]] = route
        self.route_addresses[route["id"]] = [
            dict(addr, id=str(uuid.uuid4()), route_id=route["id"], status="pending", notes=None)
            for addr in addresses
        ]
        return route

    def list_routes(self):
        return sorted(self.routes.values(), key=lambda r: r["created_at"], reverse=True)

    def get_route(self, route_id):
        return self.routes.get(route_id)

    def get_route_addresses(self, route_id):
        return sorted(self.route_addresses.get(route_id, []), key=lambda a: a.get("address") or "")

    def delete_route(self, route_id):
        self.route_addresses.pop(route_id, None)
        return self.routes.pop(route_id, None) is not None

    def update_route_address(self, route_id, address_id, status=None, notes=None, update_notes=False):
        for addr in self.route_addresses.get(route_id, []):
            if addr["id"] == address_id:
                if status:
                    addr["status"] = status
                if update_notes:
                    addr["notes"] = notes
                return addr
        return None

    def health_check(self):
        return self.healthy


@pytest.fixture
def address_points():
    return [
        {"id": "1", "address": "100 MAIN ST", "city": "WALNUT CREEK", "state": "CA",
         "zip": "94596", "lat": CENTER_LAT, "lng": CENTER_LNG},
        {"id": "2", "address": "102 MAIN ST", "city": "WALNUT CREEK", "state": "CA",
         "zip": "94596", "lat": CENTER_LAT, "lng": CENTER_LNG + 0.0002},
    ]


@pytest.fixture
def store(address_points):
    return FakeStore(address_points)


@pytest.fixture
def app(store):
    return create_app(store=store, config={"DEBUG": False, "RATELIMIT_ENABLED": False})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def saved_route(client, address_points):
    response = client.post("/api/v1/routes", json={
        "name": "Main St",
        "polygon": SMALL_RING,
        "addresses": address_points,
    })
    assert response.status_code == 201
    return response.get_json()["route"]
