"""Tests for configuration and header building."""

import re
import sys
import unittest
from pathlib import Path

# Add src to path so we can import moovit
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from moovit.config import ResolvedConfig, resolve_config
from moovit.headers import API_VERSION, build_headers, build_protobuf_headers, generate_user_key


class TestResolveConfig(unittest.TestCase):
    """Test default filling and overrides."""

    def test_defaults(self):
        config = resolve_config()
        self.assertEqual(config.metro_id, 1)
        self.assertEqual(config.language, "EN")
        self.assertEqual(config.customer_id, "4908")
        self.assertEqual(config.token_refresh_interval, 300_000)
        self.assertEqual(config.default_lat, 32.0853)
        self.assertEqual(config.default_lon, 34.7818)
        self.assertFalse(config.debug)
        self.assertEqual(config.browser_options, {})
        self.assertRegex(config.user_key, r"^[A-F0-9]{6}$")

    def test_overrides(self):
        config = resolve_config(metro_id=2, language="he", user_key="ABC123")
        self.assertEqual(config.metro_id, 2)
        self.assertEqual(config.language, "he")
        self.assertEqual(config.user_key, "ABC123")

    def test_none_falls_back_to_default(self):
        config = resolve_config(metro_id=None, user_key=None)
        self.assertEqual(config.metro_id, 1)
        self.assertRegex(config.user_key, r"^[A-F0-9]{6}$")

    def test_unbounded_polling_can_be_requested(self):
        self.assertIsNone(resolve_config(max_poll_attempts=None).max_poll_attempts)

    def test_unknown_option(self):
        with self.assertRaises(TypeError):
            resolve_config(metroid=2)

    def test_is_immutable(self):
        config = resolve_config()
        with self.assertRaises(AttributeError):
            config.metro_id = 5

    def test_from_env(self):
        environ = {
            "MOOVIT_METRO_ID": "3",
            "MOOVIT_LANGUAGE": "fr",
            "MOOVIT_DEBUG": "true",
            "MOOVIT_DEFAULT_LAT": "51.5",
        }
        config = ResolvedConfig.from_env(environ=environ, customer_id="c_web")
        self.assertEqual(config.metro_id, 3)
        self.assertEqual(config.language, "fr")
        self.assertTrue(config.debug)
        self.assertEqual(config.default_lat, 51.5)
        self.assertEqual(config.customer_id, "c_web")

    def test_from_env_invalid_value(self):
        with self.assertRaises(ValueError):
            ResolvedConfig.from_env(environ={"MOOVIT_METRO_ID": "tel-aviv"})


class TestHeaders(unittest.TestCase):
    """Test request header construction."""

    def setUp(self):
        self.config = resolve_config(
            metro_id=54, language="en", user_key="ABC123", customer_id="c_web"
        )

    def test_build_headers(self):
        self.assertEqual(
            build_headers(self.config),
            {
                "moovit_app_type": "WEB_TRIP_PLANNER",
                "moovit_client_version": API_VERSION,
                "moovit_customer_id": "c_web",
                "moovit_metro_id": "54",
                "moovit_phone_type": "2",
                "moovit_user_key": "ABC123",
                "moovit_gtfs_language": "en",
                "accept": "application/json",
            },
        )

    def test_protobuf_headers(self):
        base = build_headers(self.config)
        headers = build_protobuf_headers(self.config)

        self.assertEqual(headers["accept"], "application/x-protobuf")
        self.assertEqual(set(headers) - set(base), {"protobuf-version", "content-type"})
        self.assertEqual(headers["protobuf-version"], "V3")
        for key in base:
            if key != "accept":
                self.assertEqual(headers[key], base[key])

    def test_protobuf_headers_do_not_mutate_base(self):
        build_protobuf_headers(self.config)
        self.assertEqual(build_headers(self.config)["accept"], "application/json")

    def test_generate_user_key(self):
        keys = {generate_user_key() for _ in range(20)}
        for key in keys:
            self.assertTrue(re.fullmatch(r"[A-F0-9]{6}", key))
        self.assertGreater(len(keys), 1)


if __name__ == "__main__":
    unittest.main()
