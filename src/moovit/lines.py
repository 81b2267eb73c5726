"""Real-time arrivals and agency listings."""

import json
import logging
from typing import Any, List, Optional, Sequence

from .config import ResolvedConfig
from .headers import build_headers
from .http_client import HttpClient
from .models import (
    AgencyInfo,
    AgencyOrderItem,
    Arrival,
    ArrivalCertainty,
    LineStopPair,
    StopArrivals,
    TrafficStatus,
    VehicleLocation,
    VehicleProgress,
    VehicleStatus,
)
from .utils import dig, enum_or_int, latlon_to_coordinates, utc_from_ms

logger = logging.getLogger(__name__)

LINES_ARRIVAL_ENDPOINT = "/lines/linesarrival"
LINE_ARRIVAL_ENDPOINT = "/lines/linearrival"
AGENCY_ENDPOINT = "/lines/agency"
AGENCY_ORDER_ENDPOINT = "/lines/agency_order"

DEFAULT_POLLING_INTERVAL_SECS = 30


class LinesService:
    """Fetches line arrivals and agency metadata for the configured metro."""

    def __init__(self, config: ResolvedConfig, http: HttpClient):
        self.config = config
        self.http = http

    def get_arrivals(self, line_stop_pairs: Sequence[LineStopPair]) -> List[StopArrivals]:
        """
        Get real-time arrivals for several line/stop pairs in one request.

        Args:
            line_stop_pairs: Lines and the stops to query them at.

        Returns:
            One StopArrivals per pair the server answered for.
        """
        body = {
            "params": {
                "lineStopPairs": [
                    {"lineId": pair.line_id, "stopId": pair.stop_id} for pair in line_stop_pairs
                ],
            },
        }
        data = self.http.post(LINES_ARRIVAL_ENDPOINT, body, headers=build_headers(self.config))
        if not isinstance(data, list):
            return []

        return [
            StopArrivals(
                stop_id=item.get("stopId") or 0,
                line_id=dig(item, "lineArrivals", "lineId") or 0,
                arrivals=parse_arrivals(dig(item, "lineArrivals", "arrivals") or []),
                next_polling_interval_secs=item.get("nextPollingIntervalSecs")
                or DEFAULT_POLLING_INTERVAL_SECS,
            )
            for item in data
        ]

    def get_line_arrival(self, line_id: int, stop_id: int) -> Optional[StopArrivals]:
        """Get real-time arrivals of one line at one stop, or None if there are none."""
        body = {
            "stopId": stop_id,
            "lineIds": json.dumps({"ids": [line_id]}),
        }
        data = self.http.post(LINE_ARRIVAL_ENDPOINT, body, headers=build_headers(self.config))
        if not isinstance(data, list) or not data:
            return None

        item = data[0]
        return StopArrivals(
            stop_id=item.get("stopId") or 0,
            line_id=item.get("lineId") or 0,
            arrivals=parse_arrivals(item.get("arrivals") or []),
            next_polling_interval_secs=item.get("nextPollingIntervalSecs")
            or DEFAULT_POLLING_INTERVAL_SECS,
        )

    def get_agencies(self) -> List[AgencyInfo]:
        """List the transit agencies of the configured metro."""
        data = self.http.get(AGENCY_ENDPOINT, headers=build_headers(self.config))
        if isinstance(data, dict):
            data = data.get("agencies")
        if not isinstance(data, list):
            return []

        return [
            AgencyInfo(
                id=item.get("id") or 0,
                name=item.get("name") or "",
                url=item.get("url"),
                phone=item.get("phone"),
                timezone=item.get("timezone"),
                logo_image_id=item.get("logoImageId"),
            )
            for item in data
        ]

    def get_agency_order(self) -> List[AgencyOrderItem]:
        """Agency display order; falls back to list position when unset."""
        data = self.http.get(AGENCY_ORDER_ENDPOINT, headers=build_headers(self.config))
        if not isinstance(data, list):
            return []

        return [
            AgencyOrderItem(
                agency_id=item.get("agencyId") or 0,
                order=item["order"] if item.get("order") is not None else index,
            )
            for index, item in enumerate(data)
        ]


def parse_arrivals(data: List[Any]) -> List[Arrival]:
    """Normalize raw arrival records."""
    arrivals: List[Arrival] = []
    for r in data:
        static_etd = r.get("staticEtdUTC") or 0
        traffic = r.get("trafficStatus")
        arrivals.append(
            Arrival(
                trip_id=r.get("tripId") or 0,
                pattern_id=r.get("patternId"),
                scheduled_time=utc_from_ms(static_etd),
                real_time_eta=utc_from_ms(r.get("rtEtdUTC") or static_etd),
                duration_seconds=r.get("durationInSeconds") or 0,
                is_last=r.get("isLastArrival") == 1,
                certainty=enum_or_int(ArrivalCertainty, r.get("arrivalCertainty") or 1),
                traffic_status=enum_or_int(TrafficStatus, traffic) if traffic is not None else None,
                stop_index=r.get("stopIndex"),
                total_stops=r.get("patternStopsSize"),
                vehicle_location=_parse_vehicle_location(r.get("vehicleLocation")),
            )
        )
    return arrivals


def _parse_vehicle_location(raw: Optional[dict]) -> Optional[VehicleLocation]:
    if not raw:
        return None
    progress = raw.get("progress")
    return VehicleLocation(
        coordinates=latlon_to_coordinates(raw.get("latlon")),
        vehicle_id=raw.get("vehicleId") or "",
        sample_time=utc_from_ms(raw.get("vehicleSampleTimeUtc")),
        status=enum_or_int(VehicleStatus, raw.get("vehicleStatus") or 1),
        progress=VehicleProgress(
            next_stop_index=progress.get("nextStopIndex") or 0,
            progress_percent=progress.get("progress") or 0,
        ) if progress else None,
    )
