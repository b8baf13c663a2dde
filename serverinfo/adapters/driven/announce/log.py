"""Announcer that writes messages to the log."""

import logging

__all__ = ["LogAnnouncer"]

logger = logging.getLogger(__name__)


class LogAnnouncer:
    """AnnouncerPort used when no webhook is configured."""

    async def announce(self, text: str) -> None:
        logger.info(f"Announcement: {text}")
