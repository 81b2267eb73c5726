"""Tests for HttpClient error mapping and request building."""

import json
import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

import requests

# Add src to path so we can import moovit
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from moovit.errors import ApiError, RateLimitError, TokenExpiredError
from moovit.http_client import API_BASE, HttpClient


def fake_response(status=200, payload=None, content=b"", headers=None):
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.headers = headers or {}
    response.content = content
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


class TestHttpClient(unittest.TestCase):
    """Test HttpClient against a mocked requests.Session."""

    def setUp(self):
        self.session = MagicMock(spec=requests.Session)
        self.client = HttpClient(self.session, timeout=12.5)

    def test_build_url(self):
        self.assertEqual(self.client.build_url("/route/search"), f"{API_BASE}/route/search")
        self.assertEqual(self.client.build_url("lines/agency"), f"{API_BASE}/lines/agency")

    def test_get(self):
        self.session.request.return_value = fake_response(payload={"token": "abc"})

        data = self.client.get("/route/search", params={"a": "1"}, headers={"metroid": "1"})

        self.assertEqual(data, {"token": "abc"})
        self.session.request.assert_called_once_with(
            "GET",
            f"{API_BASE}/route/search",
            params={"a": "1"},
            data=None,
            headers={"metroid": "1"},
            timeout=12.5,
        )

    def test_post_encodes_json(self):
        self.session.request.return_value = fake_response(payload=[])

        self.client.post("/lines/linesarrival", {"params": {"lineStopPairs": []}}, headers={"x": "y"})

        kwargs = self.session.request.call_args[1]
        self.assertEqual(json.loads(kwargs["data"]), {"params": {"lineStopPairs": []}})
        self.assertEqual(kwargs["headers"], {"x": "y", "content-type": "application/json"})

    def test_post_keeps_explicit_content_type(self):
        self.session.request.return_value = fake_response(content=b"\x0a\x00")

        raw = self.client.post_raw("/location", {"query": "AA=="}, headers={"content-type": "text/plain"})

        self.assertEqual(raw, b"\x0a\x00")
        self.assertEqual(self.session.request.call_args[1]["headers"]["content-type"], "text/plain")

    def test_unauthorized(self):
        self.session.request.return_value = fake_response(status=401)
        with self.assertRaises(TokenExpiredError):
            self.client.get("/alert")

    def test_rate_limited(self):
        self.session.request.return_value = fake_response(status=429, headers={"Retry-After": "12"})
        with self.assertRaises(RateLimitError) as ctx:
            self.client.get("/alert")
        self.assertEqual(ctx.exception.retry_after, 12.0)
        self.assertEqual(ctx.exception.status_code, 429)

    def test_rate_limited_without_header(self):
        self.session.request.return_value = fake_response(status=429)
        with self.assertRaises(RateLimitError) as ctx:
            self.client.get("/alert")
        self.assertIsNone(ctx.exception.retry_after)

    def test_server_error(self):
        self.session.request.return_value = fake_response(status=500)
        with self.assertRaises(ApiError) as ctx:
            self.client.get("/alert/metro")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.endpoint, "/alert/metro")

    def test_network_error(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(ApiError) as ctx:
            self.client.get("/alert")
        self.assertEqual(ctx.exception.status_code, 0)

    def test_invalid_json(self):
        self.session.request.return_value = fake_response(payload=ValueError("bad json"))
        with self.assertRaises(ApiError):
            self.client.get("/alert")

    def test_before_request_hook(self):
        hook = MagicMock()
        client = HttpClient(self.session, before_request=hook)
        self.session.request.return_value = fake_response(payload={})

        client.get("/alert")
        client.post("/alert", {})

        self.assertEqual(hook.call_count, 2)


if __name__ == "__main__":
    unittest.main()
