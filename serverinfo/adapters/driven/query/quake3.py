"""Quake3 status query adapter backed by opengsq."""

import asyncio
import logging
from types import TracebackType
from typing import Any

from opengsq.protocols import Quake3

from serverinfo.core.status import normalize_status
from serverinfo.ports.status import Endpoint, QueryFailure, StatusRecord

__all__ = ["Quake3QueryClient", "Quake3Session"]

logger = logging.getLogger(__name__)

QUERY_TIMEOUT = 5.0


class Quake3Session:
    """One query session against a single server.

    Must be used as an async context manager so the protocol client is
    released on every exit path.
    """

    def __init__(self, endpoint: Endpoint, timeout_sec: float = QUERY_TIMEOUT) -> None:
        self.endpoint = endpoint
        self.timeout_sec = timeout_sec
        self.protocol: Quake3 | None = None
        self.last_ping = 0

    async def __aenter__(self) -> "Quake3Session":
        self.protocol = Quake3(
            host=self.endpoint.host, port=self.endpoint.port, timeout=self.timeout_sec
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.protocol = None
        logger.debug(f"Query session to {self.endpoint.label} closed")

    async def get_game_info(self) -> dict[str, Any]:
        """Request the server's info string and time the round trip.

        Returns:
            Raw info key/value pairs (may be empty).

        Raises:
            RuntimeError: If the session is not open.
            TimeoutError, OSError: Transport errors from opengsq.
        """
        if self.protocol is None:
            raise RuntimeError("Session not opened; use 'async with' context manager")

        loop = asyncio.get_running_loop()
        started = loop.time()
        info = await self.protocol.get_info()
        self.last_ping = round((loop.time() - started) * 1000)
        return dict(info or {})


class Quake3QueryClient:
    """StatusQueryPort implementation for Quake3-family servers.

    Every failure cause (timeout, refused connection, malformed or empty
    response) is reported as a ``QueryFailure``; nothing is retried.
    """

    def __init__(self, timeout_sec: float = QUERY_TIMEOUT) -> None:
        """Initialize query client.

        Args:
            timeout_sec: Per-query timeout in seconds.
        """
        self.timeout_sec = timeout_sec

    async def query(self, endpoint: Endpoint) -> StatusRecord | QueryFailure:
        """Query one server and normalize its info response.

        Args:
            endpoint: Server to query.

        Returns:
            Complete status record, or a failure marker.
        """
        try:
            async with Quake3Session(endpoint, self.timeout_sec) as session:
                info = await session.get_game_info()
                ping = session.last_ping
        except (asyncio.TimeoutError, TimeoutError):
            logger.debug(f"Query to {endpoint.label} timed out")
            return QueryFailure(endpoint=endpoint, reason="timeout")
        except OSError as e:
            logger.debug(f"Query to {endpoint.label} failed: {e}")
            return QueryFailure(endpoint=endpoint, reason=f"connection error: {e}")
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Invalid response from {endpoint.label}: {e!r}")
            return QueryFailure(endpoint=endpoint, reason=f"invalid response: {e!r}")

        if not info:
            return QueryFailure(endpoint=endpoint, reason="empty response")

        logger.debug(f"Query to {endpoint.label} answered in {ping} ms")
        return normalize_status(info, ping)
