"""Resolve user location inputs into API locations."""

import base64
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union
from urllib.parse import quote

from .config import ResolvedConfig
from .coordinates import to_scaled
from .errors import LocationNotFoundError, UnknownAliasError
from .headers import build_protobuf_headers
from .http_client import HttpClient
from .known_locations import LocationRegistry
from .location_proto import decode_location_results, encode_location_query
from .models import (
    Coordinates,
    KnownLocation,
    Location,
    LocationSearchResult,
    LocationType,
)

logger = logging.getLogger(__name__)

LOCATION_SEARCH_ENDPOINT = "/location"


@dataclass(frozen=True)
class CoordinateInput:
    lat: float
    lon: float


@dataclass(frozen=True)
class AliasInput:
    """Name, id or alias of a location in the registry."""
    name: str


@dataclass(frozen=True)
class StopIdInput:
    id: int


@dataclass(frozen=True)
class TextInput:
    """Free-text query, optionally biased towards a point."""
    query: str
    near_lat: Optional[float] = None
    near_lon: Optional[float] = None


LocationInput = Union[CoordinateInput, AliasInput, StopIdInput, TextInput]


class LocationResolver:
    """Turns any LocationInput into a Location the route planner accepts."""

    def __init__(
        self,
        config: ResolvedConfig,
        http: HttpClient,
        registry: Optional[LocationRegistry] = None,
    ):
        self.config = config
        self.http = http
        self.registry = registry if registry is not None else LocationRegistry()

    def resolve(self, location_input: LocationInput) -> Location:
        """
        Resolve a location input.

        Args:
            location_input: CoordinateInput, AliasInput, StopIdInput or TextInput.

        Returns:
            Location object.

        Raises:
            UnknownAliasError: Alias not in the registry.
            LocationNotFoundError: Text search returned nothing.
            TypeError: Unsupported input type.
        """
        if isinstance(location_input, CoordinateInput):
            return self._resolve_coordinates(location_input)
        if isinstance(location_input, AliasInput):
            return self._resolve_alias(location_input)
        if isinstance(location_input, StopIdInput):
            return self._resolve_stop_id(location_input)
        if isinstance(location_input, TextInput):
            return self._resolve_text(location_input)
        raise TypeError(f"Unknown location input type: {type(location_input).__name__}")

    def search_locations(
        self,
        query: str,
        near_lat: Optional[float] = None,
        near_lon: Optional[float] = None,
    ) -> List[LocationSearchResult]:
        """
        Free-text location search, ordered as the server ranks it.

        Args:
            query: Text to search for.
            near_lat: Bias latitude (defaults to the configured default).
            near_lon: Bias longitude (defaults to the configured default).
        """
        lat = self.config.default_lat if near_lat is None else near_lat
        lon = self.config.default_lon if near_lon is None else near_lon

        encoded = encode_location_query(lat, lon, query)
        body = {"query": base64.b64encode(encoded).decode("ascii")}
        raw = self.http.post_raw(
            LOCATION_SEARCH_ENDPOINT, body, headers=build_protobuf_headers(self.config)
        )
        results = decode_location_results(raw)
        logger.debug(f"Location search {query!r} returned {len(results)} results")
        return results

    def register_alias(self, alias: str, location_id: str) -> None:
        self.registry.register_alias(alias, location_id)

    def register_location(
        self,
        id: str,
        name: str,
        lat: float,
        lon: float,
        aliases: Optional[List[str]] = None,
        category: Optional[str] = None,
    ) -> None:
        self.registry.register(
            KnownLocation(
                id=id,
                name=name,
                coordinates=Coordinates(lat=lat, lon=lon),
                aliases=aliases,
                category=category,
            )
        )

    def list_known_locations(self) -> List[KnownLocation]:
        return self.registry.list()

    @staticmethod
    def _resolve_coordinates(location_input: CoordinateInput) -> Location:
        return Location(
            id=0,
            type=LocationType.COORDINATE,
            coordinates=Coordinates(lat=location_input.lat, lon=location_input.lon),
            caption=f"{location_input.lat:.6f}, {location_input.lon:.6f}",
        )

    def _resolve_alias(self, location_input: AliasInput) -> Location:
        known = self.registry.get(location_input.name)
        if known is None:
            raise UnknownAliasError(location_input.name)
        return Location(
            id=0,
            type=LocationType.COORDINATE,
            coordinates=known.coordinates,
            caption=known.name,
        )

    @staticmethod
    def _resolve_stop_id(location_input: StopIdInput) -> Location:
        # the server fills in stop coordinates
        return Location(
            id=location_input.id,
            type=LocationType.STOP,
            coordinates=Coordinates(lat=0, lon=0),
            caption=f"Stop {location_input.id}",
        )

    def _resolve_text(self, location_input: TextInput) -> Location:
        results = self.search_locations(
            location_input.query, location_input.near_lat, location_input.near_lon
        )
        if not results:
            raise LocationNotFoundError(location_input.query)

        best = results[0]
        return Location(
            id=best.id,
            type=LocationType.STOP if best.type == "stop" else LocationType.COORDINATE,
            coordinates=Coordinates(lat=best.lat, lon=best.lon),
            caption=best.name,
        )


def build_location_params(location: Location, prefix: str) -> Dict[str, str]:
    """
    Query parameters describing a location in a route search.

    The caption is pre-encoded like JavaScript's encodeURIComponent; the
    server expects it percent-encoded inside the already-encoded query.

    Args:
        location: Resolved location.
        prefix: "fromLocation" or "toLocation".
    """
    return {
        f"{prefix}_id": str(location.id),
        f"{prefix}_type": str(int(location.type)),
        f"{prefix}_latitude": str(to_scaled(location.coordinates.lat)),
        f"{prefix}_longitude": str(to_scaled(location.coordinates.lon)),
        f"{prefix}_caption": quote(location.caption, safe="!*'()"),
    }
