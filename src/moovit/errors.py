"""Exception types raised by the Moovit client."""

from typing import Optional


class MoovitError(Exception):
    """Base class for all client errors."""


class AuthenticationError(MoovitError):
    """WAF session token could not be acquired."""

    def __init__(self, message: str = "Failed to acquire WAF token"):
        super().__init__(message)


class TokenExpiredError(MoovitError):
    """The API rejected the session token (HTTP 401)."""

    def __init__(self, message: str = "WAF token has expired"):
        super().__init__(message)


class ClientNotInitializedError(MoovitError):
    """A client method was used before initialize()."""

    def __init__(self, message: str = "Client not initialized. Call initialize() first."):
        super().__init__(message)


class LocationNotFoundError(MoovitError):
    """A text location search returned no results."""

    def __init__(self, query: str):
        super().__init__(f'No locations found for "{query}"')
        self.query = query


class UnknownAliasError(MoovitError):
    """An alias, or the location an alias points to, is not registered."""

    def __init__(self, alias: str):
        super().__init__(f'Unknown location alias: "{alias}"')
        self.alias = alias


class RouteSearchError(MoovitError):
    """Route search submission or result polling failed."""


class RouteSearchTimeoutError(RouteSearchError):
    """The server never reported completion within the poll budget."""

    def __init__(self, attempts: int):
        super().__init__(f"Route search did not complete after {attempts} polls")
        self.attempts = attempts


class ApiError(MoovitError):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, endpoint: str, message: Optional[str] = None):
        super().__init__(message or f"API error {status_code} at {endpoint}")
        self.status_code = status_code
        self.endpoint = endpoint


class RateLimitError(ApiError):
    """HTTP 429 from the API."""

    def __init__(self, endpoint: str, retry_after: Optional[float] = None):
        super().__init__(429, endpoint, f"Rate limit exceeded at {endpoint}")
        self.retry_after = retry_after


class ProtobufError(MoovitError):
    """Location search payload could not be encoded or decoded."""
