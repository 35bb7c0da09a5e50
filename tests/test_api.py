import uuid
import warnings

import pytest

from canvass.app import create_app

from conftest import CENTER_LAT, CENTER_LNG, LARGE_RING, SMALL_RING, FakeStore

API = "/api/v1"


# ── Addresses ─────────────────────────────────────────────────

class TestAddressesByCoordinates:
    def test_returns_addresses_and_area(self, client, store, address_points):
        response = client.post(f"{API}/addresses", json={"coordinates": SMALL_RING})

        assert response.status_code == 200
        data = response.get_json()
        assert data["addresses"] == address_points
        assert data["areaAcres"] == pytest.approx(2.4, rel=0.05)

        # The store receives a closed GeoJSON polygon
        queried = store.polygon_queries[0]
        assert queried["type"] == "Polygon"
        assert queried["coordinates"][0][0] == queried["coordinates"][0][-1]

    def test_too_few_points(self, client, store):
        response = client.post(f"{API}/addresses", json={"coordinates": SMALL_RING[:2]})

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidPolygonError"
        assert store.polygon_queries == []

    def test_missing_body(self, client):
        response = client.post(f"{API}/addresses")
        assert response.status_code == 400

    def test_area_too_large(self, client, store):
        response = client.post(f"{API}/addresses", json={"coordinates": LARGE_RING})

        assert response.status_code == 400
        data = response.get_json()
        assert data["error"] == "AreaTooLargeError"
        assert "max 50 acres" in data["message"]
        assert store.polygon_queries == []


class TestAddressesByPolygon:
    def test_returns_addresses(self, client, address_points):
        response = client.post(f"{API}/addresses/polygon", json={"polygon": SMALL_RING})

        assert response.status_code == 200
        assert response.get_json()["addresses"] == address_points

    def test_invalid_polygon(self, client):
        response = client.post(f"{API}/addresses/polygon", json={"polygon": "nope"})

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidPolygonError"

    def test_area_too_large(self, client):
        response = client.post(f"{API}/addresses/polygon", json={"polygon": LARGE_RING})
        assert response.status_code == 400

    @pytest.mark.parametrize("ring", [
        [[0, 0], [0.001, 0.001], [0, 0]],
        [[0, 0], [0, 0], [0, 0]],
    ])
    def test_closed_ring_with_two_vertices(self, client, store, ring):
        response = client.post(f"{API}/addresses/polygon", json={"polygon": ring})

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidPolygonError"
        assert store.polygon_queries == []

    def test_array_body(self, client, store):
        response = client.post(f"{API}/addresses", json=[[0, 0]])

        assert response.status_code == 400
        assert response.get_json() == {
            "error": "ValidationError",
            "message": "Request body must be a JSON object",
        }
        assert store.polygon_queries == []


class TestAddressesByViewport:
    def test_small_viewport(self, client, store, address_points):
        bounds = {"north": 37.801, "south": 37.799, "east": -121.999, "west": -122.001}
        response = client.post(f"{API}/addresses/viewport", json={"bounds": bounds})

        assert response.status_code == 200
        assert response.get_json() == {"addresses": address_points}
        assert store.polygon_queries[0]["coordinates"][0][0] == [-122.001, 37.799]

    def test_large_viewport_asks_to_zoom_in(self, client, store):
        bounds = {"north": 37.9, "south": 37.7, "east": -121.9, "west": -122.1}
        response = client.post(f"{API}/addresses/viewport", json={"bounds": bounds})

        assert response.status_code == 200
        assert response.get_json() == {
            "addresses": [],
            "tooLarge": True,
            "message": "Zoom in to see addresses",
        }
        assert store.polygon_queries == []

    def test_invalid_bounds(self, client):
        response = client.post(f"{API}/addresses/viewport", json={"bounds": {"north": "x"}})

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidBoundsError"

    def test_array_body(self, client):
        bounds = {"north": 37.801, "south": 37.799, "east": -121.999, "west": -122.001}
        response = client.post(f"{API}/addresses/viewport", json=[bounds])

        assert response.status_code == 400
        assert response.get_json()["error"] == "ValidationError"


# ── Routes ────────────────────────────────────────────────────

class TestCreateRoute:
    def test_creates_route_with_center(self, client, store, address_points):
        response = client.post(f"{API}/routes", json={
            "name": "Main St",
            "polygon": SMALL_RING,
            "addresses": address_points,
            "campaignName": "Spring",
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data["addressCount"] == 2
        assert data["route"]["center_lat"] == pytest.approx(CENTER_LAT)
        assert data["route"]["center_lng"] == pytest.approx(CENTER_LNG)
        assert data["route"]["campaign_name"] == "Spring"
        assert data["route"]["id"] in store.routes

    @pytest.mark.parametrize("missing", ["name", "polygon", "addresses"])
    def test_missing_fields(self, client, address_points, missing):
        body = {"name": "Main St", "polygon": SMALL_RING, "addresses": address_points}
        body.pop(missing)

        response = client.post(f"{API}/routes", json=body)

        assert response.status_code == 400
        assert "Missing required fields" in response.get_json()["message"]

    def test_area_too_large(self, client, store, address_points):
        response = client.post(f"{API}/routes", json={
            "name": "Everything",
            "polygon": LARGE_RING,
            "addresses": address_points,
        })

        assert response.status_code == 400
        assert store.routes == {}

    def test_closed_ring_with_two_vertices(self, client, store, address_points):
        response = client.post(f"{API}/routes", json={
            "name": "Sliver",
            "polygon": [[0, 0], [0.001, 0.001], [0, 0]],
            "addresses": address_points,
        })

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidPolygonError"
        assert store.routes == {}

    @pytest.mark.parametrize("body", [[], ["Main St"], "Main St"])
    def test_non_object_body(self, client, store, body):
        response = client.post(f"{API}/routes", json=body)

        assert response.status_code == 400
        assert store.routes == {}


class TestRouteLookup:
    def test_list_routes(self, client, saved_route):
        response = client.get(f"{API}/routes")

        assert response.status_code == 200
        assert [r["id"] for r in response.get_json()["routes"]] == [saved_route["id"]]

    def test_get_route_with_addresses(self, client, saved_route):
        response = client.get(f"{API}/routes/{saved_route['id']}")

        assert response.status_code == 200
        data = response.get_json()
        assert data["route"]["name"] == "Main St"
        assert [a["address"] for a in data["addresses"]] == ["100 MAIN ST", "102 MAIN ST"]
        assert {a["status"] for a in data["addresses"]} == {"pending"}

    def test_unknown_route(self, client):
        response = client.get(f"{API}/routes/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.get_json() == {"error": "NotFoundError", "message": "Route not found"}

    def test_delete_route(self, client, store, saved_route):
        response = client.delete(f"{API}/routes/{saved_route['id']}")

        assert response.status_code == 200
        assert response.get_json() == {"success": True}
        assert store.routes == {}

        assert client.delete(f"{API}/routes/{saved_route['id']}").status_code == 404


class TestUpdateRouteAddress:
    def _first_address(self, store, route):
        return store.route_addresses[route["id"]][0]

    def test_update_status_and_notes(self, client, store, saved_route):
        address = self._first_address(store, saved_route)

        response = client.patch(
            f"{API}/routes/{saved_route['id']}/addresses/{address['id']}",
            json={"status": "interested", "notes": "Call after 5"},
        )

        assert response.status_code == 200
        updated = response.get_json()["address"]
        assert updated["status"] == "interested"
        assert updated["notes"] == "Call after 5"

    def test_notes_only_keeps_status(self, client, store, saved_route):
        address = self._first_address(store, saved_route)

        response = client.patch(
            f"{API}/routes/{saved_route['id']}/addresses/{address['id']}",
            json={"notes": "Dog in yard"},
        )

        assert response.status_code == 200
        assert response.get_json()["address"]["status"] == "pending"

    def test_invalid_status(self, client, store, saved_route):
        address = self._first_address(store, saved_route)

        response = client.patch(
            f"{API}/routes/{saved_route['id']}/addresses/{address['id']}",
            json={"status": "maybe"},
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid status value"

    def test_address_from_another_route(self, client, saved_route):
        response = client.patch(
            f"{API}/routes/{saved_route['id']}/addresses/{uuid.uuid4()}",
            json={"status": "not_home"},
        )

        assert response.status_code == 404
        assert response.get_json()["message"] == "Address not found in this route"


# ── Field position ────────────────────────────────────────────

class TestRoutePosition:
    def test_walking_at_center(self, client, saved_route):
        response = client.post(
            f"{API}/routes/{saved_route['id']}/position",
            json={"lat": CENTER_LAT, "lng": CENTER_LNG},
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["mode"] == "walking"
        assert [a["address"] for a in data["nearby"]] == ["100 MAIN ST", "102 MAIN ST"]

    def test_navigation_when_far(self, client, saved_route):
        response = client.post(
            f"{API}/routes/{saved_route['id']}/position",
            json={"lat": CENTER_LAT + 0.01, "lng": CENTER_LNG},
        )

        data = response.get_json()
        assert data["mode"] == "navigation"
        assert data["nearby"] == []

    def test_threshold_override(self, client, saved_route):
        response = client.post(
            f"{API}/routes/{saved_route['id']}/position",
            json={"lat": CENTER_LAT, "lng": CENTER_LNG, "nearbyThresholdM": 5},
        )

        assert [a["address"] for a in response.get_json()["nearby"]] == ["100 MAIN ST"]

    def test_invalid_location(self, client, saved_route):
        response = client.post(f"{API}/routes/{saved_route['id']}/position", json={"lat": CENTER_LAT})
        assert response.status_code == 400

    def test_unknown_route(self, client):
        response = client.post(
            f"{API}/routes/{uuid.uuid4()}/position",
            json={"lat": CENTER_LAT, "lng": CENTER_LNG},
        )
        assert response.status_code == 404


# ── Health ────────────────────────────────────────────────────

def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["services"]["database"]["status"] == "healthy"
    assert "X-Response-Time" in response.headers


def test_health_degraded():
    store = FakeStore()
    store.healthy = False
    app = create_app(store=store, config={"DEBUG": False, "RATELIMIT_ENABLED": False})

    response = app.test_client().get("/health")

    assert response.status_code == 503
    assert response.get_json()["status"] == "degraded"


def test_app_build_uses_current_404_help_setting():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        app = create_app(store=FakeStore(), config={"DEBUG": False, "RATELIMIT_ENABLED": False})

    assert app.config["RESTX_ERROR_404_HELP"] is False
    assert "ERROR_404_HELP" not in app.config
    assert not [w for w in caught if "ERROR_404_HELP" in str(w.message)]
