"""Configuration loading from environment variables."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from serverinfo.ports.settings import (
    DEFAULT_OFFLINE_TEMPLATE,
    DEFAULT_STATUS_TEMPLATE,
    SettingsPort,
)

__all__ = ["Settings", "load_settings", "reload_env"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")


class Settings(BaseModel):
    """Runtime configuration for the status poller.

    Attributes:
        enabled: Whether the rotation runs.
        servers: Raw "host:port" entries (validated later, per entry).
        status_template: Message announced for a server that answered.
        offline_template: Message announced for a server that did not.
        interval_sec: Seconds between polls (must be positive).
        rearm_on_failure: Keep rotating after an offline tick.
        query_timeout_sec: Per-query timeout in seconds.
        announce_retries: Attempts per webhook announcement (1 = no retry).
        announce_endpoint: Optional webhook receiving announcements.
        names_file_path: Optional JSON file with extra map/game type names.
    """

    enabled: bool = Field(default=False, description="Whether the rotation runs.")
    servers: list[str] = Field(default_factory=list, description="Raw host:port entries.")
    status_template: str = Field(default=DEFAULT_STATUS_TEMPLATE, min_length=1)
    offline_template: str = Field(default=DEFAULT_OFFLINE_TEMPLATE, min_length=1)
    interval_sec: int = Field(default=300, gt=0, description="Interval between polls in seconds.")
    rearm_on_failure: bool = Field(
        default=True,
        description="Keep rotating after an offline tick instead of stalling.",
    )
    query_timeout_sec: float = Field(default=5.0, gt=0, description="Query timeout in seconds.")
    announce_retries: int = Field(default=3, gt=0, description="Attempts per webhook announcement.")
    announce_endpoint: str | None = Field(
        default=None,
        description=(
            "Optional HTTP endpoint receiving announcements. "
            "If not set, announcements are written to the log."
        ),
    )
    names_file_path: str | None = Field(
        default=None, description="Optional JSON file with map and game type names."
    )

    @field_validator("announce_endpoint")
    @classmethod
    def validate_announce_endpoint(cls, v: str | None) -> str | None:
        """Validate that announce endpoint (if provided) is a valid HTTP(S) URL.

        Args:
            v: Endpoint URL to validate (can be None).

        Returns:
            The validated URL or None.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        if v is None:
            return v
        try:
            url = _http_url_adapter.validate_python(v)
            if url.scheme not in ("http", "https"):
                raise ValueError("Only http:// and https:// endpoints allowed")
        except Exception as e:
            raise ValueError(f"Invalid announce endpoint: {e}") from e
        return v

    def to_port(self) -> SettingsPort:
        """Return the subset of settings the core depends on."""
        return SettingsPort(
            enabled=self.enabled,
            servers=list(self.servers),
            status_template=self.status_template,
            offline_template=self.offline_template,
            interval_sec=self.interval_sec,
            rearm_on_failure=self.rearm_on_failure,
        )


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise RuntimeError(f"{name} must be a boolean (got: {raw})")


def _parse_number(name: str, default: float, kind: type[int] | type[float]) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = kind(raw)
        if value <= 0:
            raise ValueError("Must be positive")
    except ValueError as e:
        raise RuntimeError(f"{name} must be a positive {kind.__name__} (got: {raw})") from e
    return value


def reload_env() -> None:
    """Re-read the .env file, overriding previously loaded values."""
    load_dotenv(override=True)


def load_settings() -> Settings:
    """Load and validate settings from environment.

    Optional environment variables:
    - SERVERINFO_ENABLED: Boolean, default false.
    - SERVERINFO_SERVERS: Comma-separated "host:port" list.
    - SERVERINFO_MESSAGE / SERVERINFO_OFFLINE: Message templates.
    - SERVERINFO_INTERVAL: Positive integer, default 300.
    - SERVERINFO_REARM_ON_FAILURE: Boolean, default true.
    - QUERY_TIMEOUT_SEC: Positive number, default 5.
    - ANNOUNCE_RETRIES: Positive integer, default 3.
    - ANNOUNCE_ENDPOINT: Webhook URL for announcements.
    - NAMES_FILE_PATH: JSON file with map/game type names.

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If a variable cannot be parsed.
        ValueError: If configuration is invalid.
    """
    servers_raw = os.getenv("SERVERINFO_SERVERS", "")
    servers = [entry.strip() for entry in servers_raw.split(",") if entry.strip()]

    settings = Settings(
        enabled=_parse_bool("SERVERINFO_ENABLED", default=False),
        servers=servers,
        status_template=os.getenv("SERVERINFO_MESSAGE", DEFAULT_STATUS_TEMPLATE),
        offline_template=os.getenv("SERVERINFO_OFFLINE", DEFAULT_OFFLINE_TEMPLATE),
        interval_sec=_parse_number("SERVERINFO_INTERVAL", 300, int),
        rearm_on_failure=_parse_bool("SERVERINFO_REARM_ON_FAILURE", default=True),
        query_timeout_sec=_parse_number("QUERY_TIMEOUT_SEC", 5.0, float),
        announce_retries=_parse_number("ANNOUNCE_RETRIES", 3, int),
        announce_endpoint=os.getenv("ANNOUNCE_ENDPOINT") or None,
        names_file_path=os.getenv("NAMES_FILE_PATH") or None,
    )

    logger.info(
        f"Serverinfo configured: enabled={settings.enabled}, "
        f"servers={len(settings.servers)}, "
        f"interval={settings.interval_sec}s, "
        f"announce={settings.announce_endpoint or '<log>'}"
    )

    return settings
