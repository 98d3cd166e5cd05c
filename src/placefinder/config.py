"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_ES_URL = "http://localhost:9200"
DEFAULT_INDEX = "places"

# Reference point used when a recommendation request omits lat/lon.
DEFAULT_LAT = 55.797129
DEFAULT_LON = 37.579789

_DEV_SECRET = "placefinder-dev-secret-change-me"


def _env_true(name: str, default: str = "0") -> bool:
    value = (os.getenv(name, default) or "").strip().lower()
    return value in ("1", "true", "yes", "on")


def _get_default_secret() -> str:
    """Signing key for access tokens, taken from the environment when set."""
    return os.getenv("PLACEFINDER_SECRET") or _DEV_SECRET


@dataclass(slots=True)
class AppConfig:
    es_url: str = DEFAULT_ES_URL
    index: str = DEFAULT_INDEX
    page_size: int = 10
    rec_limit: int = 3
    fetch_size: int = 20000
    timeout: float = 10.0
    default_lat: float = DEFAULT_LAT
    default_lon: float = DEFAULT_LON
    auth: bool = False
    secret_key: str = field(default_factory=_get_default_secret)
    token_ttl: int = 24 * 60 * 60
    token_subject: str = "username"

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        if self.rec_limit <= 0:
            raise ValueError("rec_limit must be positive")
        self.es_url = self.es_url.rstrip("/")

    @classmethod
    def from_env(cls, **overrides: object) -> "AppConfig":
        """Build a config from ``PLACEFINDER_*`` variables, then apply overrides.

        ``None`` overrides are ignored so CLI options left unset keep the
        environment value.
        """
        values: dict[str, object] = {
            "es_url": os.getenv("PLACEFINDER_ES_URL", DEFAULT_ES_URL),
            "index": os.getenv("PLACEFINDER_INDEX", DEFAULT_INDEX),
            "auth": _env_true("PLACEFINDER_AUTH"),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)  # type: ignore[arg-type]
