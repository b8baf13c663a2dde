"""Announcer port definition (interface)."""

from typing import Protocol

__all__ = ["AnnouncerPort"]


class AnnouncerPort(Protocol):
    """Outbound channel for rendered messages (fire and forget)."""

    async def announce(self, text: str, /) -> None:
        """Deliver one message.

        Args:
            text: Rendered message.
        """
        ...
