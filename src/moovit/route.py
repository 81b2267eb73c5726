"""Route planning: search submission, result polling and normalization."""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .config import ResolvedConfig
from .errors import MoovitError, RouteSearchError, RouteSearchTimeoutError
from .headers import build_headers
from .http_client import HttpClient
from .location import build_location_params
from .models import (
    BikeLeg,
    DeepLinks,
    Itinerary,
    Leg,
    Line,
    LineAlternative,
    LineWithAlternativesLeg,
    Place,
    RouteSearchParams,
    RouteSearchResult,
    ScooterLeg,
    StopInfo,
    TaxiLeg,
    TimeInfo,
    TransitLeg,
    TripPlanPreference,
    TripPlanSection,
    WaitForTaxiLeg,
    WaitLeg,
    WalkLeg,
)
from .utils import dig, latlon_to_coordinates, round_half_up, utc_from_ms

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "/route/search"
RESULT_ENDPOINT = "/route/result"

DEFAULT_ROUTE_TYPES = [3, 5, 4, 7, 6, 2, 1, 0]
ROUTE_TRANSPORT_OPTIONS = "1,5"

TIME_TYPE_ARRIVE_BY = 1
TIME_TYPE_DEPART_AT = 2


class RouteService:
    """
    Submits route searches and collects their results.

    A search is submitted once, answered with a continuation token, and
    then polled at increasing offsets until the server reports completion.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        http: HttpClient,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.http = http
        self._sleep = sleep

    def search(self, params: RouteSearchParams) -> RouteSearchResult:
        """
        Plan routes between two resolved locations.

        Raises:
            RouteSearchError: Submission or a poll round failed.
            RouteSearchTimeoutError: The server never reported completion.
        """
        token = self.initiate_search(params)
        raw_results = self.poll_results(token)
        result = self.parse_results(raw_results)
        logger.info(
            f"Route search {params.from_location.caption!r} -> {params.to_location.caption!r}: "
            f"{len(result.itineraries)} itineraries"
        )
        return result

    def initiate_search(self, params: RouteSearchParams) -> str:
        """Submit the query and return the server's continuation token."""
        query = self.build_search_query(params)
        try:
            data = self.http.get(SEARCH_ENDPOINT, params=query, headers=build_headers(self.config))
        except MoovitError as e:
            logger.error(f"Route search failed: {e}")
            raise RouteSearchError(f"Route search failed: {e}") from e

        token = dig(data, "token")
        if not token:
            raise RouteSearchError("No token received from route search")
        return token

    def build_search_query(self, params: RouteSearchParams) -> Dict[str, str]:
        when: datetime = params.departure_time or params.arrival_time or datetime.now()
        time_type = TIME_TYPE_ARRIVE_BY if params.arrival_time else TIME_TYPE_DEPART_AT
        is_current_time = params.departure_time is None and params.arrival_time is None
        route_types = params.route_types or DEFAULT_ROUTE_TYPES
        preference = params.preference or TripPlanPreference.BALANCED

        query = {
            "tripPlanPref": str(int(preference)),
            "time": str(int(when.timestamp() * 1000)),
            "timeType": str(time_type),
            "isCurrentTime": "true" if is_current_time else "false",
            "routeTypes": ",".join(str(int(t)) for t in route_types),
            "routeTransportOptions": ROUTE_TRANSPORT_OPTIONS,
        }
        query.update(build_location_params(params.from_location, "fromLocation"))
        query.update(build_location_params(params.to_location, "toLocation"))
        return query

    def poll_results(self, token: str) -> List[Any]:
        """
        Collect every result batch for a continuation token.

        Polls every ``config.poll_interval`` seconds, at most
        ``config.max_poll_attempts`` times (unbounded when None).
        """
        headers = build_headers(self.config)
        max_attempts = self.config.max_poll_attempts
        offset = 0
        attempts = 0
        all_results: List[Any] = []

        while True:
            try:
                data = self.http.get(
                    RESULT_ENDPOINT,
                    params={"token": token, "offset": str(offset)},
                    headers=headers,
                )
            except MoovitError as e:
                logger.error(f"Route result fetch failed: {e}")
                raise RouteSearchError(f"Route result fetch failed: {e}") from e
            attempts += 1

            batch = dig(data, "results") or []
            all_results.extend(batch)

            if dig(data, "completed") == 1:
                logger.debug(f"Route results complete after {attempts} polls")
                return all_results

            if max_attempts is not None and attempts >= max_attempts:
                raise RouteSearchTimeoutError(attempts)

            offset += len(batch)
            self._sleep(self.config.poll_interval)

    def parse_results(self, raw_results: List[Any]) -> RouteSearchResult:
        """Split raw result items into display sections and itineraries."""
        sections: List[TripPlanSection] = []
        itineraries: List[Itinerary] = []

        for item in raw_results:
            for s in dig(item, "result", "tripPlanSections", "tripPlanSections") or []:
                sections.append(
                    TripPlanSection(
                        name=s.get("name") or "",
                        section_id=s.get("sectionId") or 0,
                        max_items_to_display=s.get("maxItemsToDisplay") or 0,
                        section_type=s.get("sectionType") or 0,
                    )
                )

            raw_itinerary = dig(item, "result", "itinerary")
            if raw_itinerary:
                itinerary = self.parse_itinerary(raw_itinerary)
                if itinerary is not None:
                    itineraries.append(itinerary)

        return RouteSearchResult(itineraries=itineraries, sections=sections, completed=True)

    def parse_itinerary(self, raw: Dict[str, Any]) -> Optional[Itinerary]:
        """
        Build an Itinerary, or None when no leg could be parsed.

        Duration spans the earliest leg start to the latest leg end.
        """
        legs = [leg for leg in (parse_leg(r) for r in raw.get("legs") or []) if leg is not None]
        if not legs:
            return None

        start_ms = min(leg.time.start_time_utc for leg in legs)
        end_ms = max(leg.time.end_time_utc for leg in legs)
        walking = sum(leg.distance_in_meters for leg in legs if isinstance(leg, WalkLeg))

        return Itinerary(
            guid=raw.get("guid") or "",
            section_id=raw.get("sectionId") or 0,
            section_name=raw.get("sectionName"),
            group_type=raw.get("groupType") or 0,
            legs=legs,
            total_duration=round_half_up((end_ms - start_ms) / 60000),
            total_walking_distance=walking,
            departure_time=utc_from_ms(start_ms),
            arrival_time=utc_from_ms(end_ms),
        )


def parse_leg(raw: Dict[str, Any]) -> Optional[Leg]:
    """Decode one leg wrapper; unrecognized wrappers yield None."""
    for key, parser in LEG_PARSERS.items():
        body = raw.get(key)
        if isinstance(body, dict):
            return parser(body)
    logger.debug(f"Skipping unrecognized leg with keys {sorted(raw)}")
    return None


def _time(raw: Dict[str, Any]) -> TimeInfo:
    return TimeInfo(
        start_time_utc=dig(raw, "time", "startTimeUtc") or 0,
        end_time_utc=dig(raw, "time", "endTimeUtc") or 0,
    )


def _stop(raw: Optional[Dict[str, Any]]) -> StopInfo:
    return StopInfo(
        id=dig(raw, "id") or 0,
        name=dig(raw, "caption") or "",
        coordinates=latlon_to_coordinates(dig(raw, "latlon")),
    )


def _place(raw: Optional[Dict[str, Any]]) -> Place:
    return Place(
        caption=dig(raw, "caption") or "",
        coordinates=latlon_to_coordinates(dig(raw, "latlon")),
    )


def _line(raw: Optional[Dict[str, Any]]) -> Line:
    raw = raw or {}
    return Line(
        id=raw.get("id") or 0,
        short_name=raw.get("shortName"),
        number=raw.get("number"),
        agency_id=raw.get("agencyId"),
        agency_name=raw.get("agencyName"),
        color=raw.get("color"),
        type=raw.get("type"),
    )


def parse_walk_leg(raw: Dict[str, Any]) -> WalkLeg:
    return WalkLeg(
        time=_time(raw),
        distance_in_meters=dig(raw, "shape", "distanceInMeters") or 0,
        polyline=dig(raw, "shape", "polyline"),
    )


def parse_transit_leg(raw: Dict[str, Any]) -> TransitLeg:
    time_info = _time(raw)
    time_info.is_real_time = dig(raw, "time", "isRealTime")
    return TransitLeg(
        time=time_info,
        line=_line(raw.get("line")),
        origin=_stop(raw.get("origin")),
        destination=_stop(raw.get("dest")),
        num_stops=raw.get("numOfStopsInLeg") or 0,
        polyline=dig(raw, "shape", "polyline"),
    )


def parse_taxi_leg(raw: Dict[str, Any]) -> TaxiLeg:
    links = raw.get("deepLinks")
    return TaxiLeg(
        time=_time(raw),
        provider_name=raw.get("taxiProviderName") or "Taxi",
        distance_in_meters=dig(raw, "shape", "distanceInMeters") or 0,
        origin=_place(dig(raw, "journey", "origin")),
        destination=_place(dig(raw, "journey", "dest")),
        polyline=dig(raw, "shape", "polyline"),
        deep_links=DeepLinks(
            android=links.get("androidDeepLink"),
            ios=links.get("iosDeepLink"),
            web=links.get("webDeepLink"),
        ) if links else None,
    )


def parse_wait_leg(raw: Dict[str, Any]) -> WaitLeg:
    time_info = _time(raw)
    duration = 0
    if isinstance(raw.get("time"), dict):
        duration = round_half_up((time_info.end_time_utc - time_info.start_time_utc) / 60000)
    location = raw.get("waitAtLocation")
    return WaitLeg(
        time=time_info,
        wait_duration_minutes=duration,
        location=_place(location) if location else None,
    )


def parse_wait_for_taxi_leg(raw: Dict[str, Any]) -> WaitForTaxiLeg:
    return WaitForTaxiLeg(
        time=_time(raw),
        location=_place(raw.get("waitAtLocation")),
        approx_waiting_seconds=raw.get("approxWaitingSecFromOrdering") or 0,
        taxi_id=raw.get("taxiId") or 0,
    )


def parse_bike_leg(raw: Dict[str, Any]) -> BikeLeg:
    return BikeLeg(
        time=_time(raw),
        distance_in_meters=dig(raw, "shape", "distanceInMeters") or 0,
        polyline=dig(raw, "shape", "polyline"),
    )


def parse_scooter_leg(raw: Dict[str, Any]) -> ScooterLeg:
    return ScooterLeg(
        time=_time(raw),
        provider_name=raw.get("providerName") or "Scooter",
        distance_in_meters=dig(raw, "shape", "distanceInMeters") or 0,
        polyline=dig(raw, "shape", "polyline"),
    )


def parse_line_with_alternatives_leg(raw: Dict[str, Any]) -> LineWithAlternativesLeg:
    alternatives = []
    for alt in raw.get("lineWithAlternatives") or []:
        line = _line(alt.get("line"))
        # alternatives carry no color/type
        line.color = None
        line.type = None
        alternatives.append(
            LineAlternative(
                line=line,
                origin=_stop(alt.get("origin")),
                destination=_stop(alt.get("dest")),
            )
        )
    return LineWithAlternativesLeg(
        time=_time(raw),
        lines=alternatives,
        origin=_stop(raw.get("origin")),
        destination=_stop(raw.get("dest")),
    )


# Checked in order; the first wrapper key present wins.
LEG_PARSERS: Dict[str, Callable[[Dict[str, Any]], Leg]] = {
    "walkLeg": parse_walk_leg,
    "transitLeg": parse_transit_leg,
    "taxiLeg": parse_taxi_leg,
    "waitLeg": parse_wait_leg,
    "waitToTaxiLeg": parse_wait_for_taxi_leg,
    "bikeLeg": parse_bike_leg,
    "scooterLeg": parse_scooter_leg,
    "lineWithAlternativesLeg": parse_line_with_alternatives_leg,
    "pathwayWalkLeg": parse_walk_leg,
}
