"""Lifecycle hooks exposed to the host process."""

import logging
from collections.abc import Callable

from serverinfo.core.endpoints import parse_endpoints
from serverinfo.core.renderer import MessageRenderer
from serverinfo.core.scheduler import PollScheduler
from serverinfo.ports.announce import AnnouncerPort
from serverinfo.ports.naming import NamingPort
from serverinfo.ports.settings import SettingsPort
from serverinfo.ports.status import StatusQueryPort

__all__ = ["ServerInfoPlugin"]

logger = logging.getLogger(__name__)


class ServerInfoPlugin:
    """Wires configuration into the poll scheduler.

    The host calls ``on_enable`` once at startup, ``on_config_changed``
    whenever configuration may have changed, and ``on_disable`` before
    shutting down.
    """

    def __init__(
        self,
        settings_fn: Callable[[], SettingsPort],
        query: StatusQueryPort,
        naming: NamingPort,
        announcer: AnnouncerPort,
        warn: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize plugin.

        Args:
            settings_fn: Returns the current configuration. May raise
                RuntimeError or ValueError for invalid configuration.
            query: Status query capability.
            naming: Long map / game type name lookup.
            announcer: Outbound channel.
            warn: Sink for invalid server entries.
        """
        self.settings_fn = settings_fn
        self.naming = naming
        self.warn = warn
        self.settings: SettingsPort | None = None

        defaults = SettingsPort()
        self.scheduler = PollScheduler(
            query=query,
            renderer=self._make_renderer(defaults),
            announcer=announcer,
            interval_sec=defaults.interval_sec,
        )

    def on_enable(self) -> None:
        """Read configuration and start the rotation if enabled.

        Raises:
            RuntimeError: If configuration cannot be read.
            ValueError: If configuration is invalid.
        """
        self.settings = self.settings_fn()
        if not self.settings.enabled:
            logger.info("Serverinfo is disabled in configuration")
            return
        self._start(self.settings)

    async def on_disable(self) -> None:
        """Stop the rotation."""
        await self.scheduler.disable()

    async def on_config_changed(self) -> None:
        """Re-read configuration and reset the rotation.

        An invalid configuration is logged and the previous one kept.
        """
        try:
            settings = self.settings_fn()
        except (RuntimeError, ValueError) as exc:
            logger.error(f"Configuration reload failed, keeping previous configuration: {exc}")
            return

        self.settings = settings
        if not settings.enabled:
            if self.scheduler.enabled:
                logger.info("Serverinfo disabled by configuration change")
                await self.scheduler.disable()
            return

        if not self.scheduler.enabled:
            self._start(settings)
            return

        self.scheduler.rearm_on_failure = settings.rearm_on_failure
        self.scheduler.reconfigure(
            parse_endpoints(settings.servers, self.warn),
            interval_sec=settings.interval_sec,
            renderer=self._make_renderer(settings),
        )

    def _start(self, settings: SettingsPort) -> None:
        self.scheduler.renderer = self._make_renderer(settings)
        self.scheduler.interval_sec = settings.interval_sec
        self.scheduler.rearm_on_failure = settings.rearm_on_failure
        self.scheduler.enable(parse_endpoints(settings.servers, self.warn))

    def _make_renderer(self, settings: SettingsPort) -> MessageRenderer:
        return MessageRenderer(
            status_template=settings.status_template,
            offline_template=settings.offline_template,
            naming=self.naming,
        )
