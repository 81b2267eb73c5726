"""Browser-backed WAF session management.

The Moovit API sits behind an AWS WAF challenge that only a real browser
render can solve. SessionManager drives headless Chromium through
Playwright to the landing page, waits for the challenge to set the
``aws-waf-token`` cookie, and copies the browser's cookies into the
requests.Session every API call goes through.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .config import ResolvedConfig
from .errors import AuthenticationError
from .http_client import HttpClient

logger = logging.getLogger(__name__)

WAF_COOKIE_NAME = "aws-waf-token"
LANDING_URL = "https://moovitapp.com/israel-1/poi/en"
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
VIEWPORT = {"width": 1280, "height": 800}
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
]

NAVIGATION_TIMEOUT_MS = 60_000
CHALLENGE_WAIT_SECONDS = 3.0
CHALLENGE_RETRY_WAIT_SECONDS = 5.0
REFRESH_FRACTION = 0.8


class SessionManager:
    """
    Owns the browser lifetime and the WAF token refresh policy.

    One instance per client. Playwright's sync objects are bound to the
    thread that created them, so the refresh timer only marks the token as
    due; the owning thread re-acquires it before its next API request.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        http_session: Optional[requests.Session] = None,
        playwright_factory: Callable[[], Any] = sync_playwright,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.http_session = http_session or requests.Session()
        self.http_session.headers["User-Agent"] = USER_AGENT
        self.http = HttpClient(
            self.http_session,
            timeout=config.request_timeout,
            before_request=self.run_pending_refresh,
        )

        self._playwright_factory = playwright_factory
        self._sleep = sleep
        self._clock = clock

        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None
        self._initialized = False
        self._last_token_time: Optional[float] = None

        self._timer: Optional[threading.Timer] = None
        self._timer_lock = threading.Lock()
        self._refresh_due = threading.Event()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """
        Launch the browser and acquire the first WAF token.

        Does nothing if already initialized.

        Raises:
            AuthenticationError: If the browser cannot be started or the
                token cookie never appears. Resources are released first.
        """
        if self._initialized:
            return

        try:
            self._playwright = self._playwright_factory().start()
            launch_options: Dict[str, Any] = {"headless": True, "args": list(BROWSER_ARGS)}
            launch_options.update(self.config.browser_options)
            self._browser = self._playwright.chromium.launch(**launch_options)
            self._context = self._browser.new_context(viewport=VIEWPORT, user_agent=USER_AGENT)
            self._page = self._context.new_page()

            self.acquire_token()
            self._start_refresh_timer()
            self._initialized = True
            logger.info("Authentication initialized")
        except Exception as e:
            self.close()
            if isinstance(e, AuthenticationError):
                raise
            raise AuthenticationError(f"Failed to initialize authentication: {e}") from e

    def get_page(self):
        """Return the Playwright page that holds the WAF session."""
        if self._page is None:
            raise AuthenticationError("Auth manager not initialized")
        return self._page

    def acquire_token(self) -> None:
        """
        Load the landing page and wait for the WAF cookie.

        Raises:
            AuthenticationError: If the cookie is still missing after the
                second check, or the browser fails.
        """
        page = self.get_page()
        logger.debug("Acquiring WAF token")
        try:
            page.goto(LANDING_URL, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
            self._sleep(CHALLENGE_WAIT_SECONDS)
            cookies = self._context.cookies()

            if not _find_cookie(cookies, WAF_COOKIE_NAME):
                self._sleep(CHALLENGE_RETRY_WAIT_SECONDS)
                cookies = self._context.cookies()
                if not _find_cookie(cookies, WAF_COOKIE_NAME):
                    logger.debug(f"Available cookies: {[c.get('name') for c in cookies]}")
                    raise AuthenticationError("WAF token cookie not found")
        except PlaywrightError as e:
            raise AuthenticationError(f"Failed to acquire WAF token: {e}") from e

        self._copy_cookies(cookies)
        self._last_token_time = self._clock()
        logger.debug("WAF token acquired")

    def is_token_stale(self) -> bool:
        """True once the refresh interval has elapsed since the last acquisition."""
        if self._last_token_time is None:
            return True
        elapsed_ms = (self._clock() - self._last_token_time) * 1000
        return elapsed_ms >= self.config.token_refresh_interval

    def refresh_if_needed(self) -> None:
        """Re-acquire the token now if it is stale."""
        if self.is_token_stale():
            self.acquire_token()

    def run_pending_refresh(self) -> None:
        """
        Re-acquire the token if the refresh timer has fired.

        Failures are logged and swallowed; the previous cookie stays in use
        and the timer keeps running.
        """
        if not self._refresh_due.is_set() or self._page is None:
            return
        self._refresh_due.clear()
        try:
            self.acquire_token()
        except Exception as e:
            logger.warning(f"Token refresh failed: {e}")

    def close(self) -> None:
        """Stop the refresh timer and shut the browser down. Safe to call repeatedly."""
        self._cancel_refresh_timer()
        self._refresh_due.clear()

        if self._browser is not None:
            try:
                self._browser.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser: {e}")
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except PlaywrightError as e:
                logger.warning(f"Error stopping Playwright: {e}")

        was_initialized = self._initialized
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None
        self._initialized = False
        self.http_session.close()

        if was_initialized:
            logger.info("Authentication closed")

    def __enter__(self) -> "SessionManager":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _copy_cookies(self, cookies: List[Dict[str, Any]]) -> None:
        for cookie in cookies:
            self.http_session.cookies.set(
                cookie["name"],
                cookie["value"],
                domain=cookie.get("domain", ""),
                path=cookie.get("path", "/"),
            )

    def _refresh_period_seconds(self) -> float:
        return self.config.token_refresh_interval * REFRESH_FRACTION / 1000

    def _start_refresh_timer(self) -> None:
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._schedule_refresh_locked()

    def _schedule_refresh_locked(self) -> None:
        timer = threading.Timer(self._refresh_period_seconds(), self._on_refresh_tick)
        # must not keep the interpreter alive
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _on_refresh_tick(self) -> None:
        logger.debug("Token refresh due")
        self._refresh_due.set()
        with self._timer_lock:
            # cancelled by close()
            if self._timer is None:
                return
            self._schedule_refresh_locked()

    def _cancel_refresh_timer(self) -> None:
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


def _find_cookie(cookies: List[Dict[str, Any]], name: str) -> Optional[Dict[str, Any]]:
    for cookie in cookies:
        if cookie.get("name") == name:
            return cookie
    return None
