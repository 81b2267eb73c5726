"""Tests for LocationResolver."""

import base64
import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

# Add src to path so we can import moovit
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from moovit.config import resolve_config
from moovit.errors import LocationNotFoundError, UnknownAliasError
from moovit.http_client import HttpClient
from moovit.known_locations import LocationRegistry
from moovit.location import (
    AliasInput,
    CoordinateInput,
    LocationResolver,
    StopIdInput,
    TextInput,
    build_location_params,
)
from moovit.location_proto import LocationQuery, LocationResponse
from moovit.models import Coordinates, Location, LocationType


def search_response(*items) -> bytes:
    response = LocationResponse()
    for type_code, id_, name, lat, lon in items:
        r = response.results.add()
        r.type = type_code
        r.id = id_
        r.name = name
        r.coordinates.latitude = lat
        r.coordinates.longitude = lon
    return response.SerializeToString()


class TestLocationResolver(unittest.TestCase):
    """Test resolving each input kind."""

    def setUp(self):
        self.config = resolve_config(metro_id=1, user_key="ABC123")
        self.http = MagicMock(spec=HttpClient)
        self.resolver = LocationResolver(self.config, self.http, LocationRegistry())

    def test_resolve_coordinates(self):
        location = self.resolver.resolve(CoordinateInput(lat=32.1, lon=34.2))
        self.assertEqual(
            location,
            Location(
                id=0,
                type=LocationType.COORDINATE,
                coordinates=Coordinates(lat=32.1, lon=34.2),
                caption="32.100000, 34.200000",
            ),
        )

    def test_resolve_stop_id(self):
        location = self.resolver.resolve(StopIdInput(id=42))
        self.assertEqual(location.id, 42)
        self.assertEqual(location.type, LocationType.STOP)
        self.assertEqual(location.coordinates, Coordinates(lat=0, lon=0))
        self.assertEqual(location.caption, "Stop 42")
        self.http.post_raw.assert_not_called()

    def test_resolve_alias(self):
        location = self.resolver.resolve(AliasInput("Kotel"))
        self.assertEqual(location.id, 0)
        self.assertEqual(location.type, LocationType.COORDINATE)
        self.assertEqual(location.caption, "Western Wall")
        self.assertEqual(location.coordinates, Coordinates(lat=31.7767, lon=35.2343))

    def test_resolve_unknown_alias(self):
        with self.assertRaises(UnknownAliasError):
            self.resolver.resolve(AliasInput("narnia"))

    def test_resolve_registered_alias(self):
        self.resolver.register_location("office", "The Office", 32.0, 34.8, aliases=["work"])
        self.resolver.register_alias("desk", "office")
        self.assertEqual(self.resolver.resolve(AliasInput("DESK")).caption, "The Office")

    def test_resolve_text_takes_first_result(self):
        self.http.post_raw.return_value = search_response(
            (4, 555, "Savidor Center", 32104000, 34808000),
            (3, 556, "Savidor Mall", 32105000, 34809000),
        )

        location = self.resolver.resolve(TextInput(query="savidor"))

        self.assertEqual(location.id, 555)
        self.assertEqual(location.type, LocationType.STOP)
        self.assertEqual(location.caption, "Savidor Center")
        self.assertAlmostEqual(location.coordinates.lat, 32.104, places=6)

    def test_resolve_text_poi_maps_to_coordinate(self):
        self.http.post_raw.return_value = search_response((3, 9, "Museum", 32000000, 34000000))
        location = self.resolver.resolve(TextInput(query="museum"))
        self.assertEqual(location.type, LocationType.COORDINATE)

    def test_resolve_text_no_results(self):
        self.http.post_raw.return_value = b""
        with self.assertRaises(LocationNotFoundError):
            self.resolver.resolve(TextInput(query="nowhere at all"))

    def test_resolve_unknown_input(self):
        with self.assertRaises(TypeError):
            self.resolver.resolve("Azrieli")

    def test_search_locations_request(self):
        self.http.post_raw.return_value = b""

        self.resolver.search_locations("Dizengoff")

        endpoint, body = self.http.post_raw.call_args[0]
        headers = self.http.post_raw.call_args[1]["headers"]
        self.assertEqual(endpoint, "/location")
        self.assertEqual(headers["accept"], "application/x-protobuf")

        query = LocationQuery()
        query.ParseFromString(base64.b64decode(body["query"]))
        self.assertEqual(query.query, "Dizengoff")
        self.assertEqual(query.latitude, self.config.default_lat)
        self.assertEqual(query.longitude, self.config.default_lon)

    def test_search_locations_bias(self):
        self.http.post_raw.return_value = b""
        self.resolver.search_locations("Haifa", near_lat=32.8, near_lon=34.99)

        body = self.http.post_raw.call_args[0][1]
        query = LocationQuery()
        query.ParseFromString(base64.b64decode(body["query"]))
        self.assertEqual(query.latitude, 32.8)
        self.assertEqual(query.longitude, 34.99)


class TestBuildLocationParams(unittest.TestCase):
    """Test route query parameters for a location."""

    def test_params(self):
        location = Location(
            id=0,
            type=LocationType.COORDINATE,
            coordinates=Coordinates(lat=32.0853, lon=34.7818),
            caption="Home & Away",
        )
        self.assertEqual(
            build_location_params(location, "fromLocation"),
            {
                "fromLocation_id": "0",
                "fromLocation_type": "6",
                "fromLocation_latitude": "32085300",
                "fromLocation_longitude": "34781800",
                "fromLocation_caption": "Home%20%26%20Away",
            },
        )

    def test_caption_encoding(self):
        location = Location(
            id=5,
            type=LocationType.STOP,
            coordinates=Coordinates(lat=0, lon=0),
            caption="Tel Aviv (Savidor) - Rd. 4/5 'A' ~*!",
        )
        params = build_location_params(location, "toLocation")
        self.assertEqual(
            params["toLocation_caption"],
            "Tel%20Aviv%20(Savidor)%20-%20Rd.%204%2F5%20'A'%20~*!",
        )

    def test_caption_non_ascii(self):
        location = Location(
            id=0, type=LocationType.COORDINATE, coordinates=Coordinates(0, 0), caption="תחנה"
        )
        self.assertEqual(
            build_location_params(location, "fromLocation")["fromLocation_caption"],
            "%D7%AA%D7%97%D7%A0%D7%94",
        )


if __name__ == "__main__":
    unittest.main()
