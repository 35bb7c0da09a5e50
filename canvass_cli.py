#!/usr/bin/env python3
"""Canvass command line interface for area checks and route lookups"""

import argparse
import json
import requests
from typing import List, Optional
from tabulate import tabulate

from canvass.config.settings import settings
from canvass.utils.geojson import ring_from_geojson
from canvass.utils.geometry import bounding_box_area_sq_km, haversine_distance, open_ring, polygon_area_in_acres

# Default API endpoint
DEFAULT_API_URL = "http://localhost:5000/api/v1"

def load_ring(path: str) -> List:
    """Read a ring from a GeoJSON Polygon, Feature or bare [[lng, lat], ...] file"""
    with open(path, 'r') as f:
        data = json.load(f)

    if isinstance(data, dict) and data.get("type") == "Feature":
        data = data.get("geometry") or {}
    if isinstance(data, dict):
        return open_ring(ring_from_geojson(data))
    return open_ring(data)

class CanvassCli:
    """Command line interface for the canvassing API"""

    def __init__(self, api_url: str = DEFAULT_API_URL):
        self.api_url = api_url.rstrip('/')
        self.session = requests.Session()

    def area(self, path: str) -> None:
        """Acreage of a polygon file checked against the query ceiling"""
        ring = load_ring(path)
        acres = polygon_area_in_acres(ring)

        print(f"📐 {path}: {len(ring)} points, {acres:.2f} acres")
        if acres > settings.MAX_AREA_ACRES:
            print(f"⚠️  Larger than the {settings.MAX_AREA_ACRES:g} acre query limit")

    def viewport_area(self, north: float, south: float, east: float, west: float) -> None:
        """Area of a viewport checked against the query ceiling"""
        area = bounding_box_area_sq_km({"north": north, "south": south, "east": east, "west": west})

        print(f"🗺️  Viewport: {area:.3f} sq km")
        if area > settings.MAX_VIEWPORT_AREA_SQ_KM:
            print(f"⚠️  Larger than the {settings.MAX_VIEWPORT_AREA_SQ_KM:g} sq km viewport limit")

    def distance(self, lat1: float, lng1: float, lat2: float, lng2: float) -> None:
        """Great-circle distance between two points"""
        print(f"📏 {haversine_distance(lat1, lng1, lat2, lng2):.1f} m")

    def addresses(self, path: str) -> None:
        """Fetch the address points inside a polygon file from the API"""
        ring = load_ring(path)

        try:
            response = self.session.post(
                f"{self.api_url}/addresses/polygon",
                json={"polygon": [list(coord) for coord in ring]}
            )
            data = response.json()
            if response.status_code != 200:
                print(f"❌ {data.get('message', 'Request failed')}")
                return

            rows = [[a["id"], a["address"], a["city"], a["zip"]] for a in data.get("addresses", [])]
            print(f"🏠 {len(rows)} addresses in {data.get('areaAcres', 0):.2f} acres\n")
            if rows:
                print(tabulate(rows, headers=["ID", "Address", "City", "Zip"]))

        except requests.RequestException as e:
            print(f"❌ Error: {str(e)}")

    def routes(self) -> None:
        """List saved routes"""
        try:
            response = self.session.get(f"{self.api_url}/routes")
            response.raise_for_status()

            routes = response.json().get("routes", [])
            if not routes:
                print("No routes yet")
                return

            rows = [
                [r["id"], r["name"], r.get("address_count", 0),
                 f"{r.get('area_acres') or 0:.1f}", r.get("created_at", "")]
                for r in routes
            ]
            print(tabulate(rows, headers=["ID", "Name", "Addresses", "Acres", "Created"]))

        except requests.RequestException as e:
            print(f"❌ Error: {str(e)}")

def main(argv: Optional[List[str]] = None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Canvass CLI - area checks and route lookups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s area service_area.geojson
  %(prog)s viewport-area 37.81 37.79 -122.40 -122.42
  %(prog)s distance 37.8 -122.0 37.8 -122.0009
  %(prog)s addresses service_area.geojson
  %(prog)s routes
        """
    )

    parser.add_argument("--api-url", default=DEFAULT_API_URL, help="API base URL")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Area command
    area_parser = subparsers.add_parser("area", help="Acreage of a polygon file")
    area_parser.add_argument("file", help="GeoJSON Polygon/Feature or [[lng, lat], ...] file")

    # Viewport command
    viewport_parser = subparsers.add_parser("viewport-area", help="Area of a map viewport")
    for bound in ("north", "south", "east", "west"):
        viewport_parser.add_argument(bound, type=float)

    # Distance command
    distance_parser = subparsers.add_parser("distance", help="Distance between two points")
    for arg in ("lat1", "lng1", "lat2", "lng2"):
        distance_parser.add_argument(arg, type=float)

    # Addresses command
    addresses_parser = subparsers.add_parser("addresses", help="Addresses inside a polygon file")
    addresses_parser.add_argument("file", help="GeoJSON Polygon/Feature or [[lng, lat], ...] file")

    # Routes command
    subparsers.add_parser("routes", help="List saved routes")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    # Initialize CLI
    cli = CanvassCli(args.api_url)

    # Execute command
    if args.command == "area":
        cli.area(args.file)
    elif args.command == "viewport-area":
        cli.viewport_area(args.north, args.south, args.east, args.west)
    elif args.command == "distance":
        cli.distance(args.lat1, args.lng1, args.lat2, args.lng2)
    elif args.command == "addresses":
        cli.addresses(args.file)
    elif args.command == "routes":
        cli.routes()
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
