"""Application entrypoint."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from serverinfo.adapters.driven.announce.log import LogAnnouncer
from serverinfo.adapters.driven.announce.webhook import WebhookAnnouncer
from serverinfo.adapters.driven.config.settings import Settings, load_settings, reload_env
from serverinfo.adapters.driven.http.client import HttpClient
from serverinfo.adapters.driven.http.retry import RetryPolicy
from serverinfo.adapters.driven.logging.logging_config import configure_logs
from serverinfo.adapters.driven.naming.name_table import load_name_table
from serverinfo.adapters.driven.query.quake3 import Quake3QueryClient
from serverinfo.adapters.driving.signals import make_stop_on_sigterm
from serverinfo.core.plugin import ServerInfoPlugin
from serverinfo.ports.announce import AnnouncerPort
from serverinfo.ports.settings import SettingsPort

__all__ = ["main", "make_announcer", "make_reload_handler"]

logger = logging.getLogger(__name__)


def read_settings() -> SettingsPort:
    """Load settings and narrow them to what the core needs."""
    return load_settings().to_port()


def make_announcer(config: Settings, http: HttpClient) -> AnnouncerPort:
    """Pick the outbound channel.

    Args:
        config: Loaded settings.
        http: Open HTTP client.

    Returns:
        Webhook announcer if an endpoint is configured, log announcer otherwise.
    """
    if config.announce_endpoint:
        return WebhookAnnouncer(url=config.announce_endpoint, request_fn=http.request)
    return LogAnnouncer()


def make_reload_handler(plugin: ServerInfoPlugin) -> Callable[[], Awaitable[None]]:
    """Create SIGHUP callback re-reading .env before notifying the plugin."""

    async def reload() -> None:
        reload_env()
        await plugin.on_config_changed()

    return reload


async def main() -> None:
    """Start the serverinfo service.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Enable the rotation.
    4. Wait for SIGTERM (SIGHUP reloads configuration).
    5. Disable the rotation and close the HTTP session.
    """
    configure_logs()
    logger.info("Starting serverinfo service...")

    try:
        config = load_settings()
        names = load_name_table(config.names_file_path)
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check SERVERINFO_INTERVAL, SERVERINFO_ENABLED, ANNOUNCE_ENDPOINT "
            "and that NAMES_FILE_PATH (if set) exists and is valid JSON.",
            exc,
        )
        return

    http_client = HttpClient(retry_policy=RetryPolicy(attempts=config.announce_retries))

    async with http_client as http:
        plugin = ServerInfoPlugin(
            settings_fn=read_settings,
            query=Quake3QueryClient(timeout_sec=config.query_timeout_sec),
            naming=names,
            announcer=make_announcer(config, http),
        )
        stop = make_stop_on_sigterm(on_reload=make_reload_handler(plugin))

        try:
            plugin.on_enable()
            await stop.wait()
        except Exception as e:
            logger.error(f"Unhandled exception in serverinfo: {e}", exc_info=True)
        finally:
            await plugin.on_disable()

        logger.info("Serverinfo stopped.")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Shutdown requested by user (Ctrl+C).")
