"""Client configuration."""

import logging
import os
import random
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

USER_KEY_CHARS = "ABCDEF0123456789"

# Tel Aviv
DEFAULT_LAT = 32.0853
DEFAULT_LON = 34.7818


def generate_user_key() -> str:
    """Generate a random 6 character hex user key."""
    return "".join(random.choice(USER_KEY_CHARS) for _ in range(6))


@dataclass(frozen=True)
class ResolvedConfig:
    """Immutable configuration snapshot taken when a client is constructed."""

    metro_id: int = 1
    language: str = "EN"
    user_key: str = field(default_factory=generate_user_key)
    customer_id: str = "4908"
    token_refresh_interval: int = 300_000  # milliseconds
    default_lat: float = DEFAULT_LAT
    default_lon: float = DEFAULT_LON
    debug: bool = False
    browser_options: Dict[str, Any] = field(default_factory=dict)
    poll_interval: float = 0.5  # seconds between route result polls
    max_poll_attempts: Optional[int] = 120  # None polls until the server completes
    request_timeout: float = 30.0

    @classmethod
    def from_env(
        cls,
        prefix: str = "MOOVIT_",
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "ResolvedConfig":
        """
        Build a configuration from environment variables.

        Recognised variables (with the default prefix): MOOVIT_METRO_ID,
        MOOVIT_LANGUAGE, MOOVIT_USER_KEY, MOOVIT_CUSTOMER_ID,
        MOOVIT_TOKEN_REFRESH_INTERVAL, MOOVIT_DEFAULT_LAT, MOOVIT_DEFAULT_LON,
        MOOVIT_POLL_INTERVAL, MOOVIT_MAX_POLL_ATTEMPTS, MOOVIT_REQUEST_TIMEOUT
        and MOOVIT_DEBUG. Explicit keyword overrides win over the environment.
        """
        environ = os.environ if environ is None else environ
        converters = {
            "metro_id": int,
            "language": str,
            "user_key": str,
            "customer_id": str,
            "token_refresh_interval": int,
            "default_lat": float,
            "default_lon": float,
            "poll_interval": float,
            "max_poll_attempts": int,
            "request_timeout": float,
            "debug": _parse_bool,
        }
        values: Dict[str, Any] = {}
        for name, convert in converters.items():
            raw = environ.get(f"{prefix}{name.upper()}")
            if raw is None or raw == "":
                continue
            try:
                values[name] = convert(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {prefix}{name.upper()}: {raw!r}") from e
        values.update(overrides)
        return resolve_config(**values)


def resolve_config(config: Optional[ResolvedConfig] = None, **overrides: Any) -> ResolvedConfig:
    """
    Fill in defaults for any option that was not supplied.

    Args:
        config: Optional base configuration to start from.
        **overrides: Individual options; ``None`` values fall back to the default.

    Returns:
        A frozen ResolvedConfig.

    Raises:
        TypeError: If an unknown option is passed.
    """
    known = {f.name for f in fields(ResolvedConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")

    # max_poll_attempts=None is meaningful, so it is kept even when None
    values = {
        k: v for k, v in overrides.items() if v is not None or k == "max_poll_attempts"
    }
    if not values.get("user_key"):
        values.pop("user_key", None)

    if config is None:
        resolved = ResolvedConfig(**values)
    else:
        resolved = replace(config, **values)

    if resolved.token_refresh_interval <= 0:
        raise ValueError("token_refresh_interval must be positive")
    logger.debug(
        f"Resolved config: metro_id={resolved.metro_id} language={resolved.language} "
        f"customer_id={resolved.customer_id}"
    )
    return resolved


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")
