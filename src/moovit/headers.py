"""Request header construction."""

from typing import Dict

from .config import ResolvedConfig, generate_user_key

API_VERSION = "5.151.2/V567"

__all__ = ["API_VERSION", "build_headers", "build_protobuf_headers", "generate_user_key"]


def build_headers(config: ResolvedConfig) -> Dict[str, str]:
    """Standard headers sent with every JSON API request."""
    return {
        "moovit_app_type": "WEB_TRIP_PLANNER",
        "moovit_client_version": API_VERSION,
        "moovit_customer_id": config.customer_id,
        "moovit_metro_id": str(config.metro_id),
        "moovit_phone_type": "2",
        "moovit_user_key": config.user_key,
        "moovit_gtfs_language": config.language,
        "accept": "application/json",
    }


def build_protobuf_headers(config: ResolvedConfig) -> Dict[str, str]:
    """Headers for endpoints that answer in protobuf."""
    headers = build_headers(config)
    headers["accept"] = "application/x-protobuf"
    headers["protobuf-version"] = "V3"
    headers["content-type"] = "application/json"
    return headers
