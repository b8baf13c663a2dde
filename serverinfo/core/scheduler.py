"""Self-rescheduling poller that rotates through the configured servers."""

import asyncio
import logging
from collections.abc import Sequence
from enum import Enum

from serverinfo.core.renderer import MessageRenderer
from serverinfo.ports.announce import AnnouncerPort
from serverinfo.ports.status import Endpoint, QueryFailure, StatusQueryPort

__all__ = ["PollScheduler", "PollState"]

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SEC = 300

_Reconfig = tuple[tuple[Endpoint, ...], float | None, MessageRenderer | None]


class PollState(Enum):
    """Lifecycle states of the scheduler."""

    IDLE = "idle"
    ARMED = "armed"
    TICKING = "ticking"


class PollScheduler:
    """Polls one endpoint per tick and announces the result.

    Rotation:
    - The cursor starts at 0 and advances only after a successful query.
    - A failed query announces the offline notice and keeps the cursor.
    - After each tick the scheduler re-arms its own timer for
      ``interval_sec`` (after failures only when ``rearm_on_failure``).

    The timer is an asyncio ``TimerHandle`` owned by the scheduler, so
    ``disable()`` can cancel a pending tick deterministically. A tick that
    is already running is allowed to finish but never re-arms once disable
    has been requested.

    Not thread-safe; all methods must run on the event loop thread.
    """

    def __init__(
        self,
        query: StatusQueryPort,
        renderer: MessageRenderer,
        announcer: AnnouncerPort,
        *,
        interval_sec: float = DEFAULT_INTERVAL_SEC,
        rearm_on_failure: bool = True,
    ) -> None:
        """Initialize scheduler in the IDLE state.

        Args:
            query: Status query capability.
            renderer: Builds status and offline messages.
            announcer: Outbound channel for rendered messages.
            interval_sec: Delay between two ticks.
            rearm_on_failure: Keep rotating after an offline tick. When False
                the rotation stalls after a failure until reconfigured.
        """
        self.query = query
        self.renderer = renderer
        self.announcer = announcer
        self.interval_sec = interval_sec
        self.rearm_on_failure = rearm_on_failure

        self._endpoints: tuple[Endpoint, ...] = ()
        self._cursor = 0
        self._state = PollState.IDLE
        self._enabled = False
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._pending: _Reconfig | None = None
        self._disabling = False

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def endpoints(self) -> tuple[Endpoint, ...]:
        return self._endpoints

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self, endpoints: Sequence[Endpoint], delay_sec: float = 0.0) -> None:
        """Start the rotation from the first endpoint.

        Args:
            endpoints: Rotation list.
            delay_sec: Delay before the first tick.
        """
        self._enabled = True
        if self._disabling or self._state is PollState.TICKING:
            # applied by disable() or at the end of the running tick
            self._pending = (tuple(endpoints), None, None)
            return

        self._cancel_timer()
        self._endpoints = tuple(endpoints)
        self._cursor = 0

        if not self._endpoints:
            logger.info("No valid servers configured, rotation stays idle")
            self._state = PollState.IDLE
            return

        logger.info(
            f"Rotation enabled: servers={len(self._endpoints)}, interval={self.interval_sec}s"
        )
        self._arm(delay_sec)

    def reconfigure(
        self,
        endpoints: Sequence[Endpoint],
        interval_sec: float | None = None,
        renderer: MessageRenderer | None = None,
    ) -> None:
        """Replace the rotation list and reset the cursor.

        While a tick is running the change is deferred until it finishes.

        Args:
            endpoints: New rotation list.
            interval_sec: New interval, if changed.
            renderer: New renderer, if templates changed.
        """
        change: _Reconfig = (tuple(endpoints), interval_sec, renderer)
        if self._state is PollState.TICKING:
            logger.debug("Poll in progress, deferring reconfiguration")
            self._pending = change
            return

        self._apply(change)
        if not self._enabled:
            return
        if not self._endpoints:
            self._cancel_timer()
            self._state = PollState.IDLE
        elif self._state is PollState.IDLE:
            self._arm(0.0)

    async def disable(self) -> None:
        """Stop the rotation and release its state.

        Cancels the pending timer and waits for an in-flight tick, which
        neither dispatches nor re-arms. An ``enable()`` that arrives while
        waiting is applied once the rotation has been reset.
        """
        self._enabled = False
        self._pending = None
        self._cancel_timer()

        task = self._task
        if task is not None and task is not asyncio.current_task():
            self._disabling = True
            try:
                await asyncio.gather(task, return_exceptions=True)
            finally:
                self._disabling = False

        pending, self._pending = self._pending, None
        self._cancel_timer()
        self._endpoints = ()
        self._cursor = 0
        self._state = PollState.IDLE
        logger.info("Rotation disabled")

        if self._enabled and pending is not None:
            logger.info("Rotation re-enabled while disabling, restarting")
            self.enable(pending[0])

    async def tick(self) -> None:
        """Run one poll: query the current endpoint and announce the result.

        With no endpoints the tick does nothing and leaves the scheduler IDLE
        rather than ARMED, since no timer is re-armed for an empty rotation.
        """
        if not self._endpoints:
            logger.debug("No servers to poll, skipping tick")
            self._state = PollState.IDLE
            return

        self._state = PollState.TICKING
        if self._cursor >= len(self._endpoints):
            self._cursor = 0

        endpoint = self._endpoints[self._cursor]
        result = await self.query.query(endpoint)

        if isinstance(result, QueryFailure):
            logger.info(f"{endpoint.label} is offline: {result.reason or 'no response'}")
            await self._dispatch(self.renderer.render_offline(endpoint.label))
            self._finish_tick(rearm=self.rearm_on_failure)
            return

        await self._dispatch(self.renderer.render_status(result, endpoint.label))
        self._cursor = (self._cursor + 1) % len(self._endpoints)
        self._finish_tick(rearm=True)

    async def _dispatch(self, text: str) -> None:
        if not self._enabled or self._disabling:
            logger.debug("Rotation disabled, dropping message")
            return
        try:
            await self.announcer.announce(text)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Failed to announce message: {e}", exc_info=True)

    def _finish_tick(self, rearm: bool) -> None:
        if self._disabling:
            self._state = PollState.IDLE
            return
        if self._pending is not None:
            change, self._pending = self._pending, None
            self._apply(change)
            rearm = True

        if rearm and self._enabled and self._endpoints:
            self._arm(self.interval_sec)
        else:
            self._state = PollState.IDLE

    def _apply(self, change: _Reconfig) -> None:
        endpoints, interval_sec, renderer = change
        self._endpoints = endpoints
        self._cursor = 0
        if interval_sec is not None:
            self.interval_sec = interval_sec
        if renderer is not None:
            self.renderer = renderer
        logger.info(f"Rotation reconfigured: servers={len(endpoints)}")

    def _arm(self, delay_sec: float) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay_sec, self._fire)
        self._state = PollState.ARMED

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        if not self._enabled:
            return
        self._task = asyncio.get_running_loop().create_task(self._run_tick())

    async def _run_tick(self) -> None:
        try:
            await self.tick()
        except Exception as e:  # noqa: BLE001
            logger.error(f"Unexpected error in poll tick: {e}", exc_info=True)
            self._finish_tick(rearm=True)
        finally:
            self._task = None
