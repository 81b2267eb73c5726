"""HTTP execution channel shared by all API services."""

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urljoin

import requests

from .errors import ApiError, RateLimitError, TokenExpiredError

logger = logging.getLogger(__name__)

API_BASE = "https://moovitapp.com/api"


class HttpClient:
    """
    Issues API requests through one requests.Session.

    The session carries the browser's user agent and the cookies captured
    after the WAF challenge, so every call replays the same credentials.
    """

    def __init__(
        self,
        session: requests.Session,
        base_url: str = API_BASE,
        timeout: float = 30.0,
        before_request: Optional[Callable[[], None]] = None,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self._before_request = before_request

    def get(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """GET an endpoint and return the decoded JSON body."""
        response = self._request("GET", endpoint, params=params, headers=headers)
        return self._json(response, endpoint)

    def post(self, endpoint: str, body: Any, headers: Optional[Dict[str, str]] = None) -> Any:
        """POST a JSON body and return the decoded JSON body."""
        response = self._request("POST", endpoint, body=body, headers=headers)
        return self._json(response, endpoint)

    def post_raw(self, endpoint: str, body: Any, headers: Optional[Dict[str, str]] = None) -> bytes:
        """POST a JSON body and return the raw response bytes (protobuf endpoints)."""
        response = self._request("POST", endpoint, body=body, headers=headers)
        return response.content

    def build_url(self, endpoint: str) -> str:
        return urljoin(self.base_url, endpoint.lstrip("/"))

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        if self._before_request is not None:
            self._before_request()

        url = self.build_url(endpoint)
        request_headers = dict(headers or {})
        data = None
        if body is not None:
            data = json.dumps(body)
            request_headers.setdefault("content-type", "application/json")

        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                data=data,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {endpoint} failed: {e}")
            raise ApiError(0, endpoint, f"Request to {endpoint} failed: {e}") from e

        if not response.ok:
            self._raise_for_status(response, endpoint)
        return response

    @staticmethod
    def _raise_for_status(response: requests.Response, endpoint: str) -> None:
        status = response.status_code
        logger.debug(f"{endpoint} returned HTTP {status}")
        if status == 401:
            raise TokenExpiredError()
        if status == 429:
            raise RateLimitError(endpoint, _parse_retry_after(response.headers.get("Retry-After")))
        raise ApiError(status, endpoint)

    @staticmethod
    def _json(response: requests.Response, endpoint: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                response.status_code, endpoint, f"Invalid JSON from {endpoint}: {e}"
            ) from e


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        # HTTP-date form is not interpreted
        return None
