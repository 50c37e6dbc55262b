"""Single-flight status cache with an adaptive background refresh.

Every reader goes through :meth:`StatusCache.read`. While a fetch of
``/api/current_status`` is in flight, readers are parked on futures and all
released together, in arrival order, once the fetch settles. After every
fetch (successful or not) the refresh timer is re-armed with an interval
picked from the freshly cached state, so a docked robot is polled rarely and
a working one often.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import timedelta

from .api import ValetudoClient
from .const import ACTIVE_SCAN_INTERVAL, IDLE_SCAN_INTERVAL
from .errors import ValetudoError
from .models import VacuumStatus

_LOGGER = logging.getLogger(__name__)

StatusListener = Callable[[VacuumStatus | None, Exception | None], None]


def interval_for(status: VacuumStatus | None) -> timedelta:
    """Staleness budget and polling period for the given state."""
    if status is not None and status.is_quiescent:
        return IDLE_SCAN_INTERVAL
    return ACTIVE_SCAN_INTERVAL


class RefreshTimer:
    """At most one pending call_later handle."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._delay: timedelta | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def delay(self) -> timedelta | None:
        return self._delay

    def arm(self, delay: timedelta) -> None:
        self.cancel()
        self._delay = delay
        self._handle = asyncio.get_running_loop().call_later(delay.total_seconds(), self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._delay = None

    def _fire(self) -> None:
        self._handle = None
        self._delay = None
        self._callback()


class StatusCache:
    def __init__(
        self,
        client: ValetudoClient,
        *,
        interval_policy: Callable[[VacuumStatus | None], timedelta] = interval_for,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._interval_policy = interval_policy
        self._clock = clock

        self._status: VacuumStatus | None = None
        self._fetched_at: float | None = None
        self._waiters: list[asyncio.Future[VacuumStatus]] = []
        self._fetch_task: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[None]] = set()
        self._listeners: list[StatusListener] = []
        self._timer = RefreshTimer(self._on_timer)
        self._closed = False

    @property
    def status(self) -> VacuumStatus | None:
        return self._status

    @property
    def fetched_at(self) -> float | None:
        return self._fetched_at

    @property
    def fetch_in_flight(self) -> bool:
        return bool(self._waiters)

    @property
    def refresh_interval(self) -> timedelta:
        return self._interval_policy(self._status)

    @property
    def scheduled_refresh(self) -> timedelta | None:
        """Delay the background timer was armed with, None when idle."""
        return self._timer.delay

    @property
    def is_fresh(self) -> bool:
        if self._status is None or self._fetched_at is None:
            return False
        age = self._clock() - self._fetched_at
        return age < self.refresh_interval.total_seconds()

    def add_listener(self, listener: StatusListener) -> Callable[[], None]:
        """Call ``listener(status, error)`` after every fetch; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    async def read(self, forced: bool = False) -> VacuumStatus:
        if self._closed:
            raise ValetudoError("Status cache is closed")

        loop = asyncio.get_running_loop()
        if self._waiters:
            _LOGGER.debug("Status update in flight, queueing reader (%d already waiting)", len(self._waiters))
            waiter = loop.create_future()
            self._waiters.append(waiter)
            return await waiter

        if not forced and self.is_fresh:
            _LOGGER.debug("Returning cached status")
            assert self._status is not None
            return self._status

        self._timer.cancel()
        _LOGGER.debug("Fetching vacuum status, forced: %s", forced)
        waiter = loop.create_future()
        self._waiters.append(waiter)
        self._fetch_task = loop.create_task(self._async_fetch())
        return await waiter

    def request_refresh(self) -> None:
        """Fire-and-forget forced read."""
        if self._closed:
            return
        task = asyncio.get_running_loop().create_task(self._async_refresh())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def close(self) -> None:
        self._closed = True
        self._timer.cancel()
        for task in list(self._background):
            task.cancel()
        if self._fetch_task is not None and not self._fetch_task.done():
            self._fetch_task.cancel()
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter.cancel()
        self._listeners.clear()

    async def _async_refresh(self) -> None:
        try:
            await self.read(forced=True)
        except ValetudoError as err:
            _LOGGER.debug("Background status refresh failed: %s", err)

    def _on_timer(self) -> None:
        _LOGGER.debug("Refresh timer fired")
        self.request_refresh()

    async def _async_fetch(self) -> None:
        status: VacuumStatus | None = None
        error: Exception | None = None
        try:
            status = await self._client.get_current_status()
        except ValetudoError as err:
            _LOGGER.warning("Error fetching vacuum status from %s: %s", self._client.host, err)
            error = err
        except Exception as err:  # noqa: BLE001 - waiters must never be left hanging
            _LOGGER.exception("Unexpected error fetching vacuum status from %s", self._client.host)
            error = err
        else:
            _LOGGER.debug("Done fetching vacuum status: %s", status.state.name)
            self._status = status
            self._fetched_at = self._clock()
        finally:
            self._fetch_task = None

        self._release(status, error)
        if self._closed:
            return
        self._timer.arm(self.refresh_interval)
        _LOGGER.debug("Next status refresh in %ss", self.refresh_interval.total_seconds())
        self._notify(status, error)

    def _release(self, status: VacuumStatus | None, error: Exception | None) -> None:
        waiters, self._waiters = self._waiters, []
        _LOGGER.debug("Releasing %d queued readers", len(waiters))
        for waiter in waiters:
            if waiter.done():
                # Reader was cancelled while waiting.
                continue
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(status)

    def _notify(self, status: VacuumStatus | None, error: Exception | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(status, error)
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Error in status listener")
