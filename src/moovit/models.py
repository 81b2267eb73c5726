"""Data models for the Moovit client."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import ClassVar, List, Optional, Union


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude in degrees."""
    lat: float
    lon: float


@dataclass(frozen=True)
class ScaledCoordinates:
    """Coordinates as sent on the wire (degrees * 1,000,000)."""
    latitude: int
    longitude: int


class LocationType(IntEnum):
    UNKNOWN = 0
    STOP = 4
    COORDINATE = 6


@dataclass(frozen=True)
class Location:
    """A resolved location ready to be used in a route query."""
    id: int
    type: LocationType
    coordinates: Coordinates
    caption: str


@dataclass
class KnownLocation:
    """A named place held by the location registry."""
    id: str
    name: str
    coordinates: Coordinates
    aliases: Optional[List[str]] = None
    category: Optional[str] = None  # e.g. "train-station", "bus-station", "landmark"


@dataclass
class LocationSearchResult:
    """One hit from the text location search."""
    type: str  # "poi", "address" or "stop"
    id: int
    name: str
    lat: float
    lon: float
    metro_id: Optional[int] = None
    subtitle: Optional[str] = None


# Route planning


class RouteType(IntEnum):
    BUS = 0
    LIGHT_RAIL = 1
    TRAIN = 2
    WALKING = 3
    BIKING = 4
    TAXI = 5
    FERRY = 6
    SCOOTER = 7


class TripPlanPreference(IntEnum):
    FASTEST = 1
    BALANCED = 2
    LEAST_WALKING = 3
    LEAST_TRANSFERS = 4


@dataclass
class RouteSearchParams:
    from_location: Location
    to_location: Location
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    route_types: Optional[List[int]] = None
    preference: Optional[int] = None


@dataclass
class TimeInfo:
    """Leg start/end as epoch milliseconds (UTC)."""
    start_time_utc: int = 0
    end_time_utc: int = 0
    is_real_time: Optional[int] = None


@dataclass
class Line:
    id: int
    short_name: Optional[str] = None
    number: Optional[str] = None
    agency_id: Optional[int] = None
    agency_name: Optional[str] = None
    color: Optional[str] = None
    type: Optional[int] = None


@dataclass
class StopInfo:
    id: int
    name: str
    coordinates: Coordinates


@dataclass
class Place:
    """Captioned point used by taxi and wait legs."""
    caption: str
    coordinates: Coordinates


@dataclass
class DeepLinks:
    android: Optional[str] = None
    ios: Optional[str] = None
    web: Optional[str] = None


@dataclass
class WalkLeg:
    type: ClassVar[str] = "walk"
    time: TimeInfo
    distance_in_meters: int = 0
    polyline: Optional[str] = None


@dataclass
class TransitLeg:
    type: ClassVar[str] = "transit"
    time: TimeInfo
    line: Line
    origin: StopInfo
    destination: StopInfo
    num_stops: int = 0
    polyline: Optional[str] = None


@dataclass
class TaxiLeg:
    type: ClassVar[str] = "taxi"
    time: TimeInfo
    provider_name: str
    distance_in_meters: int
    origin: Place
    destination: Place
    polyline: Optional[str] = None
    deep_links: Optional[DeepLinks] = None


@dataclass
class WaitLeg:
    type: ClassVar[str] = "wait"
    time: TimeInfo
    wait_duration_minutes: int
    location: Optional[Place] = None


@dataclass
class WaitForTaxiLeg:
    type: ClassVar[str] = "waitForTaxi"
    time: TimeInfo
    location: Place
    approx_waiting_seconds: int = 0
    taxi_id: int = 0


@dataclass
class BikeLeg:
    type: ClassVar[str] = "bike"
    time: TimeInfo
    distance_in_meters: int = 0
    polyline: Optional[str] = None


@dataclass
class ScooterLeg:
    type: ClassVar[str] = "scooter"
    time: TimeInfo
    provider_name: str
    distance_in_meters: int = 0
    polyline: Optional[str] = None


@dataclass
class LineAlternative:
    line: Line
    origin: StopInfo
    destination: StopInfo


@dataclass
class LineWithAlternativesLeg:
    type: ClassVar[str] = "lineWithAlternatives"
    time: TimeInfo
    lines: List[LineAlternative]
    origin: StopInfo
    destination: StopInfo


Leg = Union[
    WalkLeg,
    TransitLeg,
    TaxiLeg,
    WaitLeg,
    WaitForTaxiLeg,
    BikeLeg,
    ScooterLeg,
    LineWithAlternativesLeg,
]


@dataclass
class TripPlanSection:
    """Display category the server groups itineraries under."""
    name: str
    section_id: int
    max_items_to_display: int
    section_type: int


@dataclass
class Itinerary:
    """A complete journey from origin to destination."""
    guid: str
    section_id: int
    group_type: int
    legs: List[Leg]
    total_duration: int  # minutes
    total_walking_distance: int  # meters
    departure_time: datetime
    arrival_time: datetime
    section_name: Optional[str] = None


@dataclass
class RouteSearchResult:
    itineraries: List[Itinerary]
    sections: List[TripPlanSection]
    completed: bool = True


# Lines and arrivals


class ArrivalCertainty(IntEnum):
    HIGH = 1
    MEDIUM = 2
    LOW = 3


class TrafficStatus(IntEnum):
    NORMAL = 1
    SLOW = 2
    HEAVY = 3


class VehicleStatus(IntEnum):
    IN_SERVICE = 1
    STOPPED = 2


@dataclass
class LineStopPair:
    line_id: int
    stop_id: int


@dataclass
class VehicleProgress:
    next_stop_index: int
    progress_percent: float


@dataclass
class VehicleLocation:
    coordinates: Coordinates
    vehicle_id: str
    sample_time: datetime
    status: Union[VehicleStatus, int]
    progress: Optional[VehicleProgress] = None


@dataclass
class Arrival:
    """A single real-time arrival at a stop."""
    trip_id: int
    scheduled_time: datetime
    real_time_eta: datetime
    duration_seconds: int
    is_last: bool
    certainty: Union[ArrivalCertainty, int]
    pattern_id: Optional[int] = None
    traffic_status: Optional[Union[TrafficStatus, int]] = None
    stop_index: Optional[int] = None
    total_stops: Optional[int] = None
    vehicle_location: Optional[VehicleLocation] = None


@dataclass
class StopArrivals:
    stop_id: int
    line_id: int
    arrivals: List[Arrival]
    next_polling_interval_secs: int = 30


@dataclass
class AgencyInfo:
    id: int
    name: str
    url: Optional[str] = None
    phone: Optional[str] = None
    timezone: Optional[str] = None
    logo_image_id: Optional[int] = None


@dataclass
class AgencyOrderItem:
    agency_id: int
    order: int


# Alerts


class AlertSeverity(IntEnum):
    INFO = 1
    WARNING = 2
    SEVERE = 3


class AlertEffect(IntEnum):
    NO_SERVICE = 1
    REDUCED_SERVICE = 2
    SIGNIFICANT_DELAYS = 3
    DETOUR = 4
    ADDITIONAL_SERVICE = 5
    MODIFIED_SERVICE = 6
    OTHER = 7
    UNKNOWN = 8
    STOP_MOVED = 9


class AlertCause(IntEnum):
    UNKNOWN = 1
    OTHER = 2
    TECHNICAL_PROBLEM = 3
    STRIKE = 4
    DEMONSTRATION = 5
    ACCIDENT = 6
    HOLIDAY = 7
    WEATHER = 8
    MAINTENANCE = 9
    CONSTRUCTION = 10
    POLICE_ACTIVITY = 11
    MEDICAL_EMERGENCY = 12


@dataclass
class AffectedEntity:
    type: str  # "route", "stop" or "agency"
    id: int
    name: Optional[str] = None


@dataclass
class ActivePeriod:
    start: datetime
    end: datetime


@dataclass
class Alert:
    """Represents a service alert."""
    id: int
    title: str
    severity: Union[AlertSeverity, int]
    effect: Union[AlertEffect, int]
    description: Optional[str] = None
    url: Optional[str] = None
    cause: Optional[Union[AlertCause, int]] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    affected_entities: Optional[List[AffectedEntity]] = None


@dataclass
class AlertDetails(Alert):
    full_description: Optional[str] = None
    active_periods: Optional[List[ActivePeriod]] = field(default=None)


# Images


@dataclass
class TransitImage:
    id: int
    data: str  # base64 payload as returned by the API
    mime_type: str
