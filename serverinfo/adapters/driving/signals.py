"""Signal handling for graceful shutdown and configuration reload."""

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable

__all__ = ["make_stop_on_sigterm"]

logger = logging.getLogger(__name__)


def make_stop_on_sigterm(
    on_reload: Callable[[], Awaitable[None]] | None = None,
) -> asyncio.Event:
    """Create SIGTERM-based stop event, with optional SIGHUP reload.

    Registers SIGTERM/SIGINT handlers that set the returned event. When
    ``on_reload`` is given, SIGHUP schedules it as a task on the running
    loop.

    On Docker/Kubernetes, SIGTERM is sent 30s before SIGKILL,
    allowing graceful shutdown.

    Args:
        on_reload: Coroutine function run on every SIGHUP.

    Returns:
        Event that is set once a termination signal has been received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    reloads: set[asyncio.Task[None]] = set()

    def handle_stop() -> None:
        """Signal handler that sets the stop event on SIGTERM/SIGINT."""
        logger.info("Termination signal received, initiating graceful shutdown...")
        stop.set()

    def handle_reload() -> None:
        """Signal handler that schedules a configuration reload on SIGHUP."""
        logger.info("Reload signal received, re-reading configuration...")
        task = loop.create_task(on_reload())
        reloads.add(task)
        task.add_done_callback(reloads.discard)

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_stop)
    if on_reload is not None:
        loop.add_signal_handler(signal.SIGHUP, handle_reload)

    return stop
