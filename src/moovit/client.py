"""Main Moovit client class."""

import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence

from .alerts import AlertsService
from .config import ResolvedConfig, resolve_config
from .errors import ClientNotInitializedError
from .images import ImagesService
from .known_locations import LocationRegistry
from .lines import LinesService
from .location import LocationInput, LocationResolver
from .models import (
    AgencyInfo,
    AgencyOrderItem,
    Alert,
    AlertDetails,
    KnownLocation,
    LineStopPair,
    Location,
    LocationSearchResult,
    RouteSearchParams,
    RouteSearchResult,
    StopArrivals,
    TransitImage,
)
from .route import RouteService
from .session import SessionManager

logger = logging.getLogger(__name__)


class MoovitClient:
    """
    Client for the Moovit web API.

    This class provides methods to:
    - Plan routes between coordinates, known places, stops or text queries
    - Get real-time arrivals and agency listings
    - Get service alerts
    - Fetch transit images

    All calls go through one browser-backed session and must be made from
    the thread that called initialize(); the client is not safe for
    concurrent use.

    Example:
        with MoovitClient(metro_id=1) as client:
            result = client.search_routes(AliasInput("savidor"), AliasInput("azrieli"))
    """

    def __init__(
        self,
        config: Optional[ResolvedConfig] = None,
        registry: Optional[LocationRegistry] = None,
        session: Optional[SessionManager] = None,
        **overrides: Any,
    ):
        """
        Initialize the client. No network activity happens until initialize().

        Args:
            config: Base configuration; individual options may be given as keyword
                    overrides instead (metro_id, language, user_key, ...).
            registry: Known-location registry; a fresh default one per client if None.
            session: Session manager to use instead of a browser-backed one.
        """
        self.config = resolve_config(config, **overrides)
        if self.config.debug:
            logging.getLogger("moovit").setLevel(logging.DEBUG)

        self.session = session or SessionManager(self.config)
        self.registry = registry if registry is not None else LocationRegistry()

        self._location_resolver: Optional[LocationResolver] = None
        self._route_service: Optional[RouteService] = None
        self._lines_service: Optional[LinesService] = None
        self._alerts_service: Optional[AlertsService] = None
        self._images_service: Optional[ImagesService] = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Acquire the WAF token and bind the API services to the session."""
        if self._initialized:
            return

        self.session.initialize()
        http = self.session.http

        self._location_resolver = LocationResolver(self.config, http, self.registry)
        self._route_service = RouteService(self.config, http)
        self._lines_service = LinesService(self.config, http)
        self._alerts_service = AlertsService(self.config, http)
        self._images_service = ImagesService(self.config, http)
        self._initialized = True
        logger.info(f"Moovit client ready (metro {self.config.metro_id})")

    def close(self) -> None:
        """Release the browser and stop the token refresh timer."""
        self.session.close()
        self._initialized = False

    def __enter__(self) -> "MoovitClient":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require(self, service):
        if not self._initialized or service is None:
            raise ClientNotInitializedError()
        return service

    # Routes

    def search_routes(
        self,
        from_location: LocationInput,
        to_location: LocationInput,
        departure_time: Optional[datetime] = None,
        arrival_time: Optional[datetime] = None,
        route_types: Optional[List[int]] = None,
        preference: Optional[int] = None,
    ) -> RouteSearchResult:
        """
        Search for routes between two locations.

        Args:
            from_location: Origin, any LocationInput.
            to_location: Destination, any LocationInput.
            departure_time: Leave at this time (default: now).
            arrival_time: Arrive by this time, instead of departure_time.
            route_types: RouteType values to allow.
            preference: TripPlanPreference value.

        Returns:
            RouteSearchResult with sections and itineraries.
        """
        resolver = self._require(self._location_resolver)
        route_service = self._require(self._route_service)

        params = RouteSearchParams(
            from_location=resolver.resolve(from_location),
            to_location=resolver.resolve(to_location),
            departure_time=departure_time,
            arrival_time=arrival_time,
            route_types=route_types,
            preference=preference,
        )
        return route_service.search(params)

    # Lines and arrivals

    def get_arrivals(self, line_stop_pairs: Sequence[LineStopPair]) -> List[StopArrivals]:
        return self._require(self._lines_service).get_arrivals(line_stop_pairs)

    def get_line_arrival(self, line_id: int, stop_id: int) -> Optional[StopArrivals]:
        return self._require(self._lines_service).get_line_arrival(line_id, stop_id)

    def get_agencies(self) -> List[AgencyInfo]:
        return self._require(self._lines_service).get_agencies()

    def get_agency_order(self) -> List[AgencyOrderItem]:
        return self._require(self._lines_service).get_agency_order()

    # Locations

    def resolve_location(self, location_input: LocationInput) -> Location:
        return self._require(self._location_resolver).resolve(location_input)

    def search_locations(
        self,
        query: str,
        near_lat: Optional[float] = None,
        near_lon: Optional[float] = None,
    ) -> List[LocationSearchResult]:
        return self._require(self._location_resolver).search_locations(query, near_lat, near_lon)

    def register_alias(self, alias: str, location_id: str) -> None:
        """Add an alias for a registered location. Works before initialize()."""
        self.registry.register_alias(alias, location_id)

    def register_location(self, location: KnownLocation) -> None:
        """Add a named place usable through AliasInput. Works before initialize()."""
        self.registry.register(location)

    # Alerts

    def get_alerts(self) -> List[Alert]:
        return self._require(self._alerts_service).get_alerts()

    def get_metro_alerts(self) -> List[Alert]:
        return self._require(self._alerts_service).get_metro_alerts()

    def get_alert_details(self, alert_id: int, language: Optional[str] = None) -> Optional[AlertDetails]:
        return self._require(self._alerts_service).get_alert_details(alert_id, language)

    # Images

    def get_images(self, ids: Sequence[int]) -> List[TransitImage]:
        return self._require(self._images_service).get_images(ids)

    def get_image(self, image_id: int) -> Optional[TransitImage]:
        return self._require(self._images_service).get_image(image_id)

    def clear_image_cache(self) -> None:
        if self._images_service is not None:
            self._images_service.clear_cache()
