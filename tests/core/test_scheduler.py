"""Tests for the poll scheduler state machine."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from serverinfo.adapters.driven.naming.name_table import NameTable
from serverinfo.core.renderer import MessageRenderer
from serverinfo.core.scheduler import PollScheduler, PollState
from serverinfo.core.status import normalize_status
from serverinfo.ports.status import Endpoint, QueryFailure

__all__ = []

FAR_AWAY = 3600

ENDPOINTS = [Endpoint("10.0.0.1", 27960), Endpoint("10.0.0.2", 27961), Endpoint("10.0.0.3", 27962)]


def online(endpoint: Endpoint):
    return normalize_status({"hostname": f"srv-{endpoint.port}", "mapname": "q3dm17"}, ping=5)


def make_scheduler(
    query: AsyncMock | None = None,
    interval_sec: float = FAR_AWAY,
    rearm_on_failure: bool = True,
) -> tuple[PollScheduler, AsyncMock]:
    """Create scheduler with mocked query and announcer.

    Returns:
        Tuple of (scheduler, announcer mock).
    """
    announcer = Mock()
    announcer.announce = AsyncMock()
    renderer = MessageRenderer(
        status_template="<SERVERNAME> <IP>",
        offline_template="<IP> OFFLINE",
        naming=NameTable(maps={"q3dm17": "The Longest Yard"}),
    )
    if query is None:
        query = AsyncMock(side_effect=online)
    scheduler = PollScheduler(
        query=Mock(query=query),
        renderer=renderer,
        announcer=announcer,
        interval_sec=interval_sec,
        rearm_on_failure=rearm_on_failure,
    )
    return scheduler, announcer.announce


@pytest.mark.asyncio
async def test_enable_arms_with_cursor_at_zero() -> None:
    """Enabling with servers should arm the timer from the first server."""
    scheduler, _ = make_scheduler()

    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)

    assert scheduler.state is PollState.ARMED
    assert scheduler.cursor == 0
    await scheduler.disable()


@pytest.mark.asyncio
async def test_enable_without_servers_stays_idle() -> None:
    """Enabling with an empty list should not arm anything."""
    scheduler, announce = make_scheduler()

    scheduler.enable([])

    assert scheduler.state is PollState.IDLE
    await asyncio.sleep(0)
    announce.assert_not_awaited()


@pytest.mark.asyncio
async def test_rotation_visits_each_endpoint_once_per_cycle() -> None:
    """N successful ticks should visit each of the N servers exactly once."""
    query = AsyncMock(side_effect=online)
    scheduler, announce = make_scheduler(query=query)
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)

    for _ in range(len(ENDPOINTS) * 2):
        await scheduler.tick()

    visited = [call.args[0] for call in query.await_args_list]
    assert visited == ENDPOINTS + ENDPOINTS
    assert scheduler.cursor == 0
    assert announce.await_count == 6
    await scheduler.disable()


@pytest.mark.asyncio
async def test_success_announces_status_and_rearms() -> None:
    """A successful tick should announce, advance and re-arm."""
    scheduler, announce = make_scheduler()
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)

    await scheduler.tick()

    announce.assert_awaited_once_with("srv-27960 10.0.0.1:27960")
    assert scheduler.cursor == 1
    assert scheduler.state is PollState.ARMED
    await scheduler.disable()


@pytest.mark.asyncio
async def test_failure_announces_offline_and_keeps_cursor() -> None:
    """A failed query should announce the offline text without advancing."""
    query = AsyncMock(side_effect=lambda e: QueryFailure(endpoint=e, reason="timeout"))
    scheduler, announce = make_scheduler(query=query)
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)

    await scheduler.tick()

    announce.assert_awaited_once_with("10.0.0.1:27960 OFFLINE")
    assert scheduler.cursor == 0
    assert scheduler.state is PollState.ARMED
    await scheduler.disable()


@pytest.mark.asyncio
async def test_failure_stalls_rotation_when_rearm_disabled() -> None:
    """With rearm_on_failure off, an offline tick should leave no timer."""
    query = AsyncMock(side_effect=lambda e: QueryFailure(endpoint=e))
    scheduler, _ = make_scheduler(query=query, rearm_on_failure=False)
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)

    await scheduler.tick()

    assert scheduler.state is PollState.IDLE
    assert scheduler.cursor == 0
    await scheduler.disable()


@pytest.mark.asyncio
async def test_tick_without_endpoints_does_nothing() -> None:
    """An empty list should produce no dispatch and no re-arm."""
    query = AsyncMock()
    scheduler, announce = make_scheduler(query=query)

    await scheduler.tick()

    query.assert_not_awaited()
    announce.assert_not_awaited()
    assert scheduler.state is PollState.IDLE


@pytest.mark.asyncio
async def test_cursor_out_of_range_wraps_to_zero() -> None:
    """A cursor left beyond a shrunk list should restart at the first server."""
    query = AsyncMock(side_effect=online)
    scheduler, _ = make_scheduler(query=query)
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)
    scheduler._cursor = 5

    await scheduler.tick()

    assert query.await_args.args[0] == ENDPOINTS[0]
    assert scheduler.cursor == 1
    await scheduler.disable()


@pytest.mark.asyncio
async def test_timer_drives_ticks() -> None:
    """Armed timer should fire ticks repeatedly on its own."""
    scheduler, announce = make_scheduler(interval_sec=0)
    scheduler.enable(ENDPOINTS[:2])

    for _ in range(20):
        await asyncio.sleep(0)
        if announce.await_count >= 3:
            break

    await scheduler.disable()
    assert announce.await_count >= 3
    assert scheduler.state is PollState.IDLE


@pytest.mark.asyncio
async def test_disable_cancels_pending_timer() -> None:
    """No tick should run after disable cancelled the timer."""
    scheduler, announce = make_scheduler()
    scheduler.enable(ENDPOINTS, delay_sec=0.01)

    await scheduler.disable()
    await asyncio.sleep(0.05)

    announce.assert_not_awaited()
    assert scheduler.state is PollState.IDLE
    assert scheduler.endpoints == ()


@pytest.mark.asyncio
async def test_disable_during_tick_prevents_rearm_and_dispatch() -> None:
    """A tick in flight should finish without announcing or re-arming."""
    release = asyncio.Event()

    async def slow_query(endpoint: Endpoint):
        await release.wait()
        return online(endpoint)

    scheduler, announce = make_scheduler(query=AsyncMock(side_effect=slow_query))
    scheduler.enable(ENDPOINTS)

    for _ in range(5):
        await asyncio.sleep(0)
    assert scheduler.state is PollState.TICKING

    disabling = asyncio.ensure_future(scheduler.disable())
    await asyncio.sleep(0)
    release.set()
    await disabling

    announce.assert_not_awaited()
    assert scheduler.state is PollState.IDLE


@pytest.mark.asyncio
async def test_reconfigure_resets_cursor() -> None:
    """Reconfiguring while armed should reset rotation to the new first server."""
    query = AsyncMock(side_effect=online)
    scheduler, _ = make_scheduler(query=query)
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)
    await scheduler.tick()

    scheduler.reconfigure(ENDPOINTS[1:], interval_sec=10)

    assert scheduler.cursor == 0
    assert scheduler.endpoints == tuple(ENDPOINTS[1:])
    assert scheduler.interval_sec == 10
    assert scheduler.state is PollState.ARMED
    await scheduler.disable()


@pytest.mark.asyncio
async def test_reconfigure_to_empty_goes_idle() -> None:
    """Removing every server should cancel the timer."""
    scheduler, _ = make_scheduler()
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)

    scheduler.reconfigure([])

    assert scheduler.state is PollState.IDLE
    await scheduler.disable()


@pytest.mark.asyncio
async def test_reconfigure_during_tick_is_deferred() -> None:
    """Changes requested mid-tick should apply once the tick finishes."""
    release = asyncio.Event()
    new_endpoints = [Endpoint("192.168.0.1", 1)]

    async def slow_query(endpoint: Endpoint):
        await release.wait()
        return online(endpoint)

    scheduler, _ = make_scheduler(query=AsyncMock(side_effect=slow_query))
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)

    ticking = asyncio.ensure_future(scheduler.tick())
    await asyncio.sleep(0)
    scheduler.reconfigure(new_endpoints)
    assert scheduler.endpoints == tuple(ENDPOINTS)

    release.set()
    await ticking

    assert scheduler.endpoints == tuple(new_endpoints)
    assert scheduler.cursor == 0
    assert scheduler.state is PollState.ARMED
    await scheduler.disable()


@pytest.mark.asyncio
async def test_announce_errors_do_not_stop_rotation() -> None:
    """An outbound failure should be logged and the rotation continue."""
    scheduler, announce = make_scheduler()
    announce.side_effect = RuntimeError("channel down")
    scheduler.enable(ENDPOINTS, delay_sec=FAR_AWAY)

    await scheduler.tick()

    assert scheduler.cursor == 1
    assert scheduler.state is PollState.ARMED
    await scheduler.disable()


@pytest.mark.asyncio
async def test_enable_while_disabling_restarts_rotation() -> None:
    """An enable issued while disable waits for a tick should win."""
    release = asyncio.Event()
    new_endpoints = [Endpoint("192.168.0.1", 1), Endpoint("192.168.0.2", 2)]

    async def slow_query(endpoint: Endpoint):
        await release.wait()
        return online(endpoint)

    scheduler, announce = make_scheduler(query=AsyncMock(side_effect=slow_query))
    scheduler.enable(ENDPOINTS)

    for _ in range(5):
        await asyncio.sleep(0)
    assert scheduler.state is PollState.TICKING

    disabling = asyncio.ensure_future(scheduler.disable())
    await asyncio.sleep(0)
    scheduler.enable(new_endpoints, delay_sec=FAR_AWAY)
    release.set()
    await disabling

    announce.assert_not_awaited()
    assert scheduler.enabled is True
    assert scheduler.endpoints == tuple(new_endpoints)
    assert scheduler.cursor == 0
    assert scheduler.state is PollState.ARMED
    await scheduler.disable()
