"""Announcer that posts messages to an HTTP webhook."""

import logging
from collections.abc import Awaitable, Callable

from serverinfo.ports.http import HttpPort

__all__ = ["WebhookAnnouncer"]

logger = logging.getLogger(__name__)


class WebhookAnnouncer:
    """AnnouncerPort delivering ``{"text": ...}`` JSON bodies.

    Delivery errors propagate to the caller once the HTTP client's own
    retries are exhausted.
    """

    def __init__(self, url: str, request_fn: Callable[[HttpPort], Awaitable[int]]) -> None:
        """Initialize announcer.

        Args:
            url: Webhook URL.
            request_fn: Async function sending one HTTP request and
                returning its status code.
        """
        self.url = url
        self.request_fn = request_fn

    async def announce(self, text: str) -> None:
        """POST one message to the webhook."""
        status = await self.request_fn(HttpPort(url=self.url, payload={"text": text}))
        if status < 400:
            logger.debug(f"Announced to {self.url}: {text}")
