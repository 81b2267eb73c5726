"""Tests for SessionManager with a mocked Playwright."""

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

import requests
from playwright.sync_api import Error as PlaywrightError

# Add src to path so we can import moovit
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from moovit.config import resolve_config
from moovit.errors import AuthenticationError
from moovit.session import (
    CHALLENGE_RETRY_WAIT_SECONDS,
    CHALLENGE_WAIT_SECONDS,
    LANDING_URL,
    USER_AGENT,
    SessionManager,
)

WAF_COOKIE = {"name": "aws-waf-token", "value": "tok-1", "domain": ".moovitapp.com", "path": "/"}
OTHER_COOKIE = {"name": "locale", "value": "en", "domain": ".moovitapp.com", "path": "/"}


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestSessionManager(unittest.TestCase):
    """Test browser lifecycle and token handling."""

    def setUp(self):
        self.factory = MagicMock()
        self.playwright = self.factory.return_value.start.return_value
        self.browser = self.playwright.chromium.launch.return_value
        self.context = self.browser.new_context.return_value
        self.page = self.context.new_page.return_value
        self.context.cookies.return_value = [OTHER_COOKIE, WAF_COOKIE]

        self.sleep = MagicMock()
        self.clock = FakeClock()
        # a long interval keeps the refresh timer from firing during tests
        self.config = resolve_config(
            token_refresh_interval=3_600_000,
            browser_options={"headless": False, "slow_mo": 50},
        )
        self.http_session = requests.Session()
        self.manager = SessionManager(
            self.config,
            http_session=self.http_session,
            playwright_factory=self.factory,
            sleep=self.sleep,
            clock=self.clock,
        )

    def tearDown(self):
        self.manager.close()

    def test_initialize(self):
        self.manager.initialize()

        self.assertTrue(self.manager.is_initialized)
        launch_kwargs = self.playwright.chromium.launch.call_args[1]
        self.assertFalse(launch_kwargs["headless"])
        self.assertEqual(launch_kwargs["slow_mo"], 50)
        self.assertIn("--no-sandbox", launch_kwargs["args"])
        self.assertEqual(self.browser.new_context.call_args[1]["user_agent"], USER_AGENT)
        self.page.goto.assert_called_once_with(LANDING_URL, wait_until="networkidle", timeout=60_000)
        self.sleep.assert_called_once_with(CHALLENGE_WAIT_SECONDS)

        self.assertEqual(self.http_session.cookies.get("aws-waf-token"), "tok-1")
        self.assertEqual(self.http_session.cookies.get("locale"), "en")
        self.assertEqual(self.http_session.headers["User-Agent"], USER_AGENT)
        self.assertIs(self.manager.get_page(), self.page)

    def test_initialize_is_idempotent(self):
        self.manager.initialize()
        self.manager.initialize()
        self.factory.assert_called_once()

    def test_cookie_appears_after_retry(self):
        self.context.cookies.side_effect = [[OTHER_COOKIE], [WAF_COOKIE]]

        self.manager.initialize()

        self.assertEqual(
            [c[0][0] for c in self.sleep.call_args_list],
            [CHALLENGE_WAIT_SECONDS, CHALLENGE_RETRY_WAIT_SECONDS],
        )
        self.assertEqual(self.http_session.cookies.get("aws-waf-token"), "tok-1")

    def test_cookie_never_appears(self):
        self.context.cookies.return_value = [OTHER_COOKIE]

        with self.assertRaises(AuthenticationError):
            self.manager.initialize()

        self.assertFalse(self.manager.is_initialized)
        self.browser.close.assert_called_once()
        self.playwright.stop.assert_called_once()

    def test_browser_failure(self):
        self.page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with self.assertRaises(AuthenticationError):
            self.manager.initialize()

        self.browser.close.assert_called_once()

    def test_launch_failure(self):
        self.playwright.chromium.launch.side_effect = RuntimeError("no chromium")

        with self.assertRaises(AuthenticationError):
            self.manager.initialize()

        self.playwright.stop.assert_called_once()

    def test_get_page_before_initialize(self):
        with self.assertRaises(AuthenticationError):
            self.manager.get_page()

    def test_token_staleness(self):
        self.assertTrue(self.manager.is_token_stale())
        self.manager.initialize()
        self.assertFalse(self.manager.is_token_stale())

        self.clock.now += 3599
        self.assertFalse(self.manager.is_token_stale())
        self.clock.now += 1
        self.assertTrue(self.manager.is_token_stale())

        self.manager.refresh_if_needed()
        self.assertEqual(self.page.goto.call_count, 2)
        self.assertFalse(self.manager.is_token_stale())

    def test_pending_refresh_runs_once(self):
        self.manager.initialize()
        self.manager.run_pending_refresh()
        self.assertEqual(self.page.goto.call_count, 1)

        self.manager._on_refresh_tick()
        self.manager.run_pending_refresh()
        self.manager.run_pending_refresh()

        self.assertEqual(self.page.goto.call_count, 2)

    def test_failed_refresh_is_logged(self):
        self.manager.initialize()
        self.page.goto.side_effect = PlaywrightError("boom")
        self.manager._on_refresh_tick()

        with self.assertLogs("moovit.session", "WARNING") as logs:
            self.manager.run_pending_refresh()

        self.assertIn("Token refresh failed", logs.output[0])
        self.assertEqual(self.http_session.cookies.get("aws-waf-token"), "tok-1")

    def test_refresh_timer(self):
        self.manager.initialize()
        timer = self.manager._timer
        self.assertTrue(timer.daemon)
        self.assertAlmostEqual(timer.interval, 2880.0)

        self.manager.close()
        self.assertIsNone(self.manager._timer)
        self.assertTrue(timer.finished.is_set())

    def test_close_twice(self):
        self.manager.initialize()
        self.manager.close()
        self.manager.close()

        self.browser.close.assert_called_once()
        self.playwright.stop.assert_called_once()
        self.assertFalse(self.manager.is_initialized)

    def test_close_tolerates_browser_errors(self):
        self.manager.initialize()
        self.browser.close.side_effect = PlaywrightError("already closed")

        with self.assertLogs("moovit.session", "WARNING"):
            self.manager.close()

        self.playwright.stop.assert_called_once()

    def test_context_manager(self):
        with self.manager as manager:
            self.assertTrue(manager.is_initialized)
        self.assertFalse(self.manager.is_initialized)


if __name__ == "__main__":
    unittest.main()
