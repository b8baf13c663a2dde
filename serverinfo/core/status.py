"""Normalization of raw query responses into status records."""

from collections.abc import Mapping
from typing import Any

from serverinfo.ports.status import StatusRecord

__all__ = ["FLAG_DEFAULTS", "UNKNOWN", "normalize_status"]

UNKNOWN = "unknown"

# flag name -> (raw info key, default)
FLAG_DEFAULTS: dict[str, tuple[str, int | str]] = {
    "hardcore": ("hc", 0),
    "knockout": ("kc", 0),
    "friendly_fire": ("ff", 0),
    "one_death": ("od", 0),
    "anti_cheat": ("pb", 0),
    "pure": ("pure", 0),
    "mod": ("mod", 0),
    "password": ("pswrd", 0),
    "protocol": ("protocol", UNKNOWN),
}


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _flag(value: Any, default: int | str) -> int | str:
    if isinstance(default, int):
        # mod names are free text; keep them when they are not numeric
        try:
            return int(value)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def _text(raw: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return str(value)
    return UNKNOWN


def normalize_status(raw: Mapping[str, Any], ping: int) -> StatusRecord:
    """Merge a raw info response against the documented defaults.

    Pure function: the returned record always has every field set, whatever
    subset of keys the server sent.

    Args:
        raw: Key/value pairs from the server's info response.
        ping: Measured round-trip time in milliseconds.

    Returns:
        Complete status record.
    """
    flags = {
        name: _flag(raw[key], default) if key in raw else default
        for name, (key, default) in FLAG_DEFAULTS.items()
    }

    return StatusRecord(
        hostname=_text(raw, "hostname", "sv_hostname"),
        map_name=_text(raw, "mapname"),
        game_type=_text(raw, "gametype"),
        current_players=_as_int(raw.get("clients")),
        max_players=_as_int(raw.get("sv_maxclients")),
        ping=ping,
        flags=flags,
    )
