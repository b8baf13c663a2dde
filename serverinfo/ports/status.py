"""Status query port definition (interface and DTOs)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["Endpoint", "StatusRecord", "QueryFailure", "StatusQueryPort"]


@dataclass(slots=True, frozen=True)
class Endpoint:
    """Validated address of a remote game server.

    Attributes:
        host: IPv4 address of the server.
        port: Query port of the server.
    """

    host: str
    port: int

    @property
    def label(self) -> str:
        """Return the "host:port" form used in messages and logs."""
        return f"{self.host}:{self.port}"


@dataclass(slots=True, frozen=True)
class StatusRecord:
    """Normalized result of one status query.

    Every field is always populated; see ``core.status`` for defaults.

    Attributes:
        hostname: Server name as advertised by the server.
        map_name: Short map code (e.g. "q3dm17").
        game_type: Short game type code (e.g. "4" or "war").
        current_players: Connected clients.
        max_players: Client slots.
        ping: Query round-trip time in milliseconds.
        flags: Secondary server flags (hardcore, pure, protocol, ...).
    """

    hostname: str
    map_name: str
    game_type: str
    current_players: int
    max_players: int
    ping: int
    flags: Mapping[str, int | str] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class QueryFailure:
    """Returned instead of a record when a server could not be queried.

    Attributes:
        endpoint: The server that failed.
        reason: Human-readable cause, for logs only.
    """

    endpoint: Endpoint
    reason: str = ""


class StatusQueryPort(Protocol):
    """Interface for querying a game server's status.

    Implementations never raise for transport problems: every failure
    cause is reported as a ``QueryFailure``.
    """

    async def query(self, endpoint: Endpoint, /) -> StatusRecord | QueryFailure:
        """Query one server.

        Args:
            endpoint: Server to query.

        Returns:
            Normalized status, or a failure marker.
        """
        ...
