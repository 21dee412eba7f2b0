"""Visibility-aware status polling on asyncio.

One :class:`PollScheduler` owns at most one poll stream. Each stream belongs
to one selected device and one generation of the panel state; selecting
another device or stopping the scheduler starts a new generation, so late
results from the old stream are never applied.
"""

from __future__ import annotations

import asyncio
import itertools
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable

from loguru import logger

from switchpanel.exceptions import PanelError
from switchpanel.history import TrafficHistoryStore
from switchpanel.snapshot import parse_status_payload
from switchpanel.state import (
    AlwaysPollChanged,
    DeviceSelected,
    PanelEvent,
    PanelState,
    PollFailed,
    PortSelected,
    SnapshotReceived,
    VisibilityChanged,
    reduce,
    should_fetch,
)

DEFAULT_INTERVAL = 3.0

FetchFn = Callable[[int], Awaitable[Any]]
UpdateFn = Callable[[PanelState], None]
SleepFn = Callable[[float], Awaitable[Any]]


class SchedulerPhase(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    FETCHING = "fetching"
    CANCELLED = "cancelled"


class PollScheduler:
    """Fetch a device's status snapshot every *interval* seconds.

    The first fetch after :meth:`start` happens immediately; afterwards the
    delay runs from the end of one attempt to the start of the next. While
    the view is hidden and always-poll is off the loop keeps ticking but
    skips the fetch. Failed fetches are logged and retried on the same
    cadence.

    Usage::

        scheduler = PollScheduler(fetch=lambda dev: asyncio.to_thread(client.get_status, dev))
        scheduler.start(device_id)
        ...
        await scheduler.stop()

    Args:
        fetch: Coroutine function returning the decoded status payload for a
            device id. Should raise :class:`PanelError` on failure.
        history: Store receiving every applied snapshot.
        interval: Seconds between attempts.
        on_update: Called with the new state after each applied poll result.
        sleep: Awaitable delay, ``asyncio.sleep`` unless testing.
        clock: Source of snapshot timestamps.
    """

    def __init__(
        self,
        fetch: FetchFn,
        history: TrafficHistoryStore | None = None,
        interval: float = DEFAULT_INTERVAL,
        on_update: UpdateFn | None = None,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._fetch = fetch
        self.history = history if history is not None else TrafficHistoryStore()
        self.interval = interval
        self._on_update = on_update
        self._sleep = sleep
        self._clock = clock

        self._state = PanelState()
        self._phase = SchedulerPhase.IDLE
        self._task: asyncio.Task[None] | None = None
        self._request_ids = itertools.count(1)

        self.tick_count = 0
        self.fetch_count = 0

    @property
    def state(self) -> PanelState:
        return self._state

    @property
    def phase(self) -> SchedulerPhase:
        return self._phase

    # ── lifecycle ──────────────────────────────────────────────────────

    def start(self, device_id: int) -> asyncio.Task[None]:
        """Begin polling *device_id*, replacing any running stream.

        Must be called from within a running event loop.
        """
        self._cancel_task()
        self._dispatch(DeviceSelected(device_id=device_id))
        generation = self._state.generation
        self._phase = SchedulerPhase.SCHEDULED
        self._task = asyncio.get_running_loop().create_task(
            self._run(device_id, generation), name=f"switchpanel-poll-{device_id}"
        )
        logger.info(f"Polling device {device_id} every {self.interval:g}s")
        return self._task

    async def stop(self) -> None:
        """Tear down the current stream; pending results are discarded."""
        task = self._task
        self._cancel_task()
        self._dispatch(DeviceSelected(device_id=None))
        self._phase = SchedulerPhase.CANCELLED
        if task is not None:
            await asyncio.wait({task})

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    # ── view inputs ────────────────────────────────────────────────────

    def set_visible(self, visible: bool) -> None:
        self._dispatch(VisibilityChanged(visible=visible))

    def set_always_poll(self, enabled: bool) -> None:
        self._dispatch(AlwaysPollChanged(enabled=enabled))

    def select_port(self, if_name: str | None) -> None:
        self._dispatch(PortSelected(if_name=if_name))

    # ── poll loop ──────────────────────────────────────────────────────

    def _is_live(self, generation: int) -> bool:
        return self._state.generation == generation

    async def _run(self, device_id: int, generation: int) -> None:
        delay = 0.0
        try:
            while self._is_live(generation):
                self._phase = SchedulerPhase.SCHEDULED
                await self._sleep(delay)
                delay = self.interval
                if not self._is_live(generation):
                    break
                self.tick_count += 1
                if not should_fetch(self._state):
                    logger.trace(f"View hidden; skipping fetch for device {device_id}")
                    continue
                await self._poll_once(device_id, generation)
        except asyncio.CancelledError:
            logger.debug(f"Poll stream for device {device_id} cancelled")
            raise

    async def _poll_once(self, device_id: int, generation: int) -> None:
        request_id = next(self._request_ids)
        self._phase = SchedulerPhase.FETCHING
        self.fetch_count += 1
        try:
            payload = await self._fetch(device_id)
            snapshot = parse_status_payload(payload)
        except (PanelError, OSError) as e:
            if not self._is_live(generation):
                logger.debug(f"Ignoring failure of stale request {request_id} for device {device_id}")
                return
            logger.warning(f"Polling device {device_id} failed: {e}")
            self._dispatch(
                PollFailed(device_id=device_id, generation=generation, request_id=request_id, error=str(e))
            )
            return
        except Exception as e:
            # CancelledError is a BaseException and still ends the stream.
            if not self._is_live(generation):
                logger.debug(f"Ignoring error of stale request {request_id} for device {device_id}")
                return
            logger.opt(exception=e).warning(f"Unexpected error polling device {device_id}: {e!r}")
            self._dispatch(
                PollFailed(device_id=device_id, generation=generation, request_id=request_id, error=repr(e))
            )
            return

        if not self._is_live(generation):
            logger.debug(f"Discarding stale snapshot {request_id} for device {device_id}")
            return
        self._dispatch(
            SnapshotReceived(
                device_id=device_id,
                generation=generation,
                request_id=request_id,
                snapshot=snapshot,
                received_at=self._clock(),
            )
        )

    def _dispatch(self, event: PanelEvent) -> PanelState:
        previous = self._state
        self._state = reduce(previous, event)
        applied = self._state is not previous
        if isinstance(event, SnapshotReceived) and applied:
            self.history.record(self._state.sections, event.received_at)
        if isinstance(event, (SnapshotReceived, PollFailed)) and applied and self._on_update is not None:
            self._on_update(self._state)
        return self._state
