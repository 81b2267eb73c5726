"""moovit - Python client for the Moovit public-transit web API."""

__version__ = "0.1.0"

from .client import MoovitClient
from .config import ResolvedConfig, resolve_config
from .coordinates import (
    calculate_distance,
    from_scaled,
    from_scaled_coordinates,
    is_valid_coordinates,
    to_scaled,
    to_scaled_coordinates,
)
from .errors import (
    ApiError,
    AuthenticationError,
    ClientNotInitializedError,
    LocationNotFoundError,
    MoovitError,
    ProtobufError,
    RateLimitError,
    RouteSearchError,
    RouteSearchTimeoutError,
    TokenExpiredError,
    UnknownAliasError,
)
from .headers import API_VERSION, build_headers, build_protobuf_headers, generate_user_key
from .known_locations import ISRAEL_KNOWN_LOCATIONS, LocationRegistry
from .location import AliasInput, CoordinateInput, StopIdInput, TextInput
from .models import (
    Coordinates,
    Itinerary,
    KnownLocation,
    LineStopPair,
    Location,
    LocationType,
    RouteSearchResult,
    RouteType,
    StopArrivals,
    TransitImage,
    TripPlanPreference,
)

__all__ = [
    "MoovitClient",
    "ResolvedConfig",
    "resolve_config",
    "AliasInput",
    "CoordinateInput",
    "StopIdInput",
    "TextInput",
    "Coordinates",
    "Itinerary",
    "KnownLocation",
    "LineStopPair",
    "Location",
    "LocationType",
    "RouteSearchResult",
    "RouteType",
    "StopArrivals",
    "TransitImage",
    "TripPlanPreference",
    "LocationRegistry",
    "ISRAEL_KNOWN_LOCATIONS",
    "MoovitError",
    "AuthenticationError",
    "TokenExpiredError",
    "ClientNotInitializedError",
    "LocationNotFoundError",
    "UnknownAliasError",
    "RouteSearchError",
    "RouteSearchTimeoutError",
    "ApiError",
    "RateLimitError",
    "ProtobufError",
    "API_VERSION",
    "build_headers",
    "build_protobuf_headers",
    "generate_user_key",
    "to_scaled",
    "from_scaled",
    "to_scaled_coordinates",
    "from_scaled_coordinates",
    "calculate_distance",
    "is_valid_coordinates",
]
