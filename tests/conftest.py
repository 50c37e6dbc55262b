"""Shared fakes for the Valetudo integration tests."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientResponseError

from custom_components.valetudo_vacuum.models import VacuumState, VacuumStatus


def make_status(state: VacuumState = VacuumState.CHARGING, battery: int = 80, fan_power: int | None = 102) -> VacuumStatus:
    return VacuumStatus(state=state, battery=battery, fan_power=fan_power)


async def drain(rounds: int = 5) -> None:
    """Let scheduled tasks and callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeClient:
    """Stands in for ValetudoClient.

    With ``auto`` set, status fetches complete immediately with that value
    (or raise it). Otherwise each fetch parks on a future that the test
    settles with ``resolve``/``fail``.
    """

    host = "10.0.0.5"

    def __init__(self) -> None:
        self.auto: VacuumStatus | Exception | None = None
        self.status_calls = 0
        self.pending: list[asyncio.Future[VacuumStatus]] = []

        self.start_cleaning = AsyncMock()
        self.stop_cleaning = AsyncMock()
        self.drive_home = AsyncMock()
        self.go_to = AsyncMock()
        self.set_fan_speed = AsyncMock()
        self.find_robot = AsyncMock()
        self.set_sound_volume = AsyncMock()
        self.test_sound_volume = AsyncMock()
        self.get_sound_volume = AsyncMock(return_value=50)
        self.get_fw_version = AsyncMock(return_value="3.5.4_004004")
        self.get_config = AsyncMock(return_value={"dustCollection": False})

    async def get_current_status(self) -> VacuumStatus:
        self.status_calls += 1
        if isinstance(self.auto, Exception):
            raise self.auto
        if self.auto is not None:
            return self.auto
        fut: asyncio.Future[VacuumStatus] = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        return await fut

    def resolve(self, status: VacuumStatus) -> None:
        self.pending.pop(0).set_result(status)

    def fail(self, err: Exception) -> None:
        self.pending.pop(0).set_exception(err)


class FakeResponse:
    def __init__(self, body: str | bytes = "", status: int = 200) -> None:
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise ClientResponseError(MagicMock(), (), status=self.status, message="error")

    async def read(self) -> bytes:
        return self.body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> bool:
        return False


class FakeSession:
    def __init__(self, *responses: FakeResponse | BaseException) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def request(self, method: str, url: Any, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, str(url), kwargs))
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()
