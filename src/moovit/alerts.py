"""Service alerts."""

import logging
from typing import Any, Dict, List, Optional

from .config import ResolvedConfig
from .errors import ApiError
from .headers import build_headers
from .http_client import HttpClient
from .models import (
    ActivePeriod,
    AffectedEntity,
    Alert,
    AlertCause,
    AlertDetails,
    AlertEffect,
    AlertSeverity,
)
from .utils import enum_or_int, utc_from_ms

logger = logging.getLogger(__name__)

ALERTS_ENDPOINT = "/alert"
METRO_ALERTS_ENDPOINT = "/alert/metro"
ALERT_DETAILS_ENDPOINT = "/alert/getAlertDetails/{alert_id}/{language}"


class AlertsService:
    """Service disruptions and announcements for the configured metro."""

    def __init__(self, config: ResolvedConfig, http: HttpClient):
        self.config = config
        self.http = http

    def get_alerts(self) -> List[Alert]:
        """All active alerts."""
        data = self.http.get(ALERTS_ENDPOINT, headers=build_headers(self.config))
        return parse_alerts_response(data)

    def get_metro_alerts(self) -> List[Alert]:
        """Alerts scoped to the whole metro."""
        data = self.http.get(METRO_ALERTS_ENDPOINT, headers=build_headers(self.config))
        return parse_alerts_response(data)

    def get_alert_details(self, alert_id: int, language: Optional[str] = None) -> Optional[AlertDetails]:
        """
        Full details of one alert.

        Args:
            alert_id: Alert id from get_alerts().
            language: Language code; defaults to the configured language, lower-cased.

        Returns:
            AlertDetails, or None if the server has no details (HTTP 404).
        """
        lang = language or self.config.language.lower()
        endpoint = ALERT_DETAILS_ENDPOINT.format(alert_id=alert_id, language=lang)
        try:
            data = self.http.get(endpoint, headers=build_headers(self.config))
        except ApiError as e:
            if e.status_code == 404:
                logger.debug(f"No details for alert {alert_id}")
                return None
            raise
        return parse_alert_details(data)


def parse_alerts_response(data: Any) -> List[Alert]:
    """Accepts ``{"data": [...]}`` or a bare list."""
    if isinstance(data, dict) and data.get("data"):
        items = data["data"]
    elif isinstance(data, list):
        items = data
    else:
        items = []
    return [parse_alert(item) for item in items]


def _alert_fields(r: Dict[str, Any]) -> Dict[str, Any]:
    entities = r.get("affectedEntities")
    cause = r.get("cause")
    return dict(
        id=r.get("id") or 0,
        title=r.get("title") or "",
        description=r.get("description"),
        url=r.get("url"),
        severity=enum_or_int(AlertSeverity, r.get("severity") or AlertSeverity.INFO),
        effect=enum_or_int(AlertEffect, r.get("effect") or AlertEffect.UNKNOWN),
        cause=enum_or_int(AlertCause, cause) if cause is not None else None,
        start_time=utc_from_ms(r["startTime"]) if r.get("startTime") else None,
        end_time=utc_from_ms(r["endTime"]) if r.get("endTime") else None,
        affected_entities=[
            AffectedEntity(type=e.get("type") or "route", id=e.get("id") or 0, name=e.get("name"))
            for e in entities
        ] if entities is not None else None,
    )


def parse_alert(r: Dict[str, Any]) -> Alert:
    return Alert(**_alert_fields(r))


def parse_alert_details(r: Dict[str, Any]) -> AlertDetails:
    periods = r.get("activePeriods")
    return AlertDetails(
        **_alert_fields(r),
        full_description=r.get("fullDescription"),
        active_periods=[
            ActivePeriod(start=utc_from_ms(p.get("start")), end=utc_from_ms(p.get("end")))
            for p in periods
        ] if periods is not None else None,
    )
