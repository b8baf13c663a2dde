"""HTTP client adapter for webhook delivery."""

import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientResponseError, ClientTimeout

from serverinfo.adapters.driven.http.retry import (
    FIRST_SERVER_ERROR_CODE,
    RetryPolicy,
    call_with_retry,
)
from serverinfo.ports.http import HttpPort

__all__ = ["HttpClient"]

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
FIRST_FAILING_HTTP_CODE = 400


class HttpClient:
    """HTTP client posting JSON bodies with retry.

    Features:
    - Retry with backoff on connection errors and 5xx answers.
    - Responses are released inside the request, never leaked to callers.
    - Context manager for proper resource cleanup.
    """

    def __init__(self, timeout: int = REQUEST_TIMEOUT, retry_policy: RetryPolicy | None = None) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Total request timeout in seconds.
            retry_policy: Attempts and backoff per request.
        """
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession(timeout=ClientTimeout(total=self.timeout))
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session)."""
        if self.session:
            await self.session.close()

    async def _post_once(self, req: HttpPort) -> int:
        """Single HTTP POST; the response is released before returning.

        Returns:
            HTTP status code.

        Raises:
            RuntimeError: If session not initialized.
            ClientResponseError: On 5xx answers, so they are retried.
            aiohttp exceptions: Network/timeout errors.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        async with self.session.post(req.url, json=req.payload) as resp:
            if resp.status >= FIRST_SERVER_ERROR_CODE:
                raise ClientResponseError(
                    resp.request_info,
                    resp.history,
                    status=resp.status,
                    message=resp.reason or "",
                )
            return resp.status

    async def request(self, req: HttpPort) -> int:
        """POST a JSON body, retrying transient failures.

        Args:
            req: HTTP request object.

        Returns:
            Final HTTP status code (4xx answers are returned, not raised).
        """
        status = await call_with_retry(
            lambda: self._post_once(req), self.retry_policy, what=f"POST {req.url}"
        )
        if status >= FIRST_FAILING_HTTP_CODE:
            logger.warning(f"POST {req.url} rejected with status {status}")
        return status
