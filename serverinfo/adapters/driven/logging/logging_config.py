"""Console logging setup for the status poller."""

import logging
import os

__all__ = ["configure_logs", "HANDLER_NAME"]

HANDLER_NAME = "serverinfo-console"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"

# Chatty below WARNING: aiohttp per request, opengsq per packet
QUIET_LOGGERS = ("aiohttp", "asyncio", "opengsq")


def configure_logs(level: str | None = None) -> None:
    """Configure console logging for the service and its health check.

    The ``serverinfo`` loggers use ``level``, falling back to the
    SERVERINFO_LOG_LEVEL variable and then INFO. Calling this again only
    updates levels; the console handler is installed once.

    Args:
        level: Level name such as "DEBUG".

    Raises:
        ValueError: If the level name is unknown.
    """
    name = (level or os.getenv("SERVERINFO_LOG_LEVEL") or "INFO").upper()
    app_level = logging.getLevelName(name)
    if not isinstance(app_level, int):
        raise ValueError(f"Unknown log level: {name}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not any(h.get_name() == HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)

    for quiet in QUIET_LOGGERS:
        logging.getLogger(quiet).setLevel(logging.WARNING)

    logging.getLogger("serverinfo").setLevel(app_level)
