from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

from .api import ValetudoClient
from .const import (
    MUTE_VOLUME,
    MUTED_BELOW_VOLUME,
    SETTLE_DELAY_SECONDS,
    UNMUTE_VOLUME,
)
from .engine import StatusCache
from .errors import ValetudoError, ValetudoPreconditionError
from .models import ChargingState, FanSpeed, PowerControl, Spot, VacuumState

_LOGGER = logging.getLogger(__name__)


class CommandExecutor:
    """State-changing operations and status accessors on top of the cache.

    Fire-and-forget commands follow one pipeline: optional precondition
    check against the cached status, the transport command, a settle delay,
    then a forced refresh. Transport failures of the command itself are
    logged, never raised; the next observed status tells the truth.
    """

    def __init__(
        self,
        client: ValetudoClient,
        cache: StatusCache,
        *,
        power_control: PowerControl | None = None,
        settle_delay: float = SETTLE_DELAY_SECONDS,
    ) -> None:
        self._client = client
        self._cache = cache
        self._power_control = power_control
        self._settle_delay = settle_delay
        self.volume_level: int | None = None

    @property
    def power_control(self) -> PowerControl | None:
        return self._power_control

    async def _async_run(self, description: str, command: Awaitable[Any], *, settle: bool = True) -> None:
        _LOGGER.debug("Executing %s", description)
        try:
            await command
        except ValetudoError as err:
            _LOGGER.error("Failed to execute %s: %s", description, err)
        if settle:
            await asyncio.sleep(self._settle_delay)
        self._cache.request_refresh()

    async def start_cleaning(self) -> None:
        await self._async_run("start cleaning", self._client.start_cleaning())

    async def stop_cleaning(self) -> None:
        status = await self._cache.read()
        if not status.is_stoppable:
            raise ValetudoPreconditionError(f"Cannot stop cleaning in current state ({status.state.name.lower()})")
        await self._async_run("stop cleaning", self._client.stop_cleaning())

    async def set_cleaning(self, on: bool) -> None:
        if on:
            await self.start_cleaning()
            return
        status = await self._cache.read(forced=True)
        if status.state is VacuumState.CLEANING:
            await self.stop_cleaning()

    async def go_home(self) -> None:
        await self._async_run("go home", self._client.drive_home())

    async def clean_spot(self, spot: Spot) -> None:
        _LOGGER.info("Executing spot cleaning %s (%d, %d)", spot.name, spot.x, spot.y)
        await self.go_to(spot.x, spot.y)

    async def go_to(self, x: int, y: int) -> None:
        await self._async_run(f"go to ({x}, {y})", self._client.go_to(x, y))

    async def set_fan_speed(self, speed: FanSpeed | str) -> None:
        if not isinstance(speed, FanSpeed):
            speed = FanSpeed.from_preset(speed)
        await self._async_run(f"set fan power to {speed.preset}", self._client.set_fan_speed(speed), settle=False)

    def _require_power_control(self) -> PowerControl:
        if self._power_control is None:
            raise ValetudoPreconditionError("Power control is not configured")
        return self._power_control

    async def set_high_speed(self, on: bool) -> None:
        power = self._require_power_control()
        active = power.is_high_speed(await self._cache.read())
        if on and not active:
            await self.set_fan_speed(power.high_speed)
        elif not on and active:
            await self.set_fan_speed(power.default_speed)

    async def set_mop_mode(self, on: bool) -> None:
        power = self._require_power_control()
        if not power.mop:
            raise ValetudoPreconditionError("Mop mode is not enabled")
        active = power.is_mopping(await self._cache.read())
        if on and not active:
            await self.set_fan_speed(FanSpeed.MOP)
        elif not on and active:
            await self.set_fan_speed(power.default_speed)

    async def locate(self) -> None:
        _LOGGER.debug("Executing vacuum find")
        try:
            await self._client.find_robot()
        except ValetudoError as err:
            _LOGGER.error("Failed to identify robot: %s", err)

    async def test_volume(self) -> None:
        try:
            await self._client.test_sound_volume()
        except ValetudoError as err:
            _LOGGER.error("Failed to test volume: %s", err)

    async def set_volume(self, level: int) -> None:
        volume = max(1, min(100, int(level)))
        _LOGGER.debug("Setting volume to %d", volume)
        try:
            await self._client.set_sound_volume(volume)
        except ValetudoError as err:
            _LOGGER.error("Failed to change volume: %s", err)
            return
        self.volume_level = volume
        await self.test_volume()

    async def volume(self) -> int:
        self.volume_level = await self._client.get_sound_volume()
        return self.volume_level

    async def set_mute(self, mute: bool) -> None:
        _LOGGER.debug("Setting mute to %s", mute)
        await self.set_volume(MUTE_VOLUME if mute else UNMUTE_VOLUME)
        try:
            await self.volume()
        except ValetudoError as err:
            _LOGGER.debug("Could not re-read volume after mute change: %s", err)

    async def is_muted(self) -> bool:
        return await self.volume() < MUTED_BELOW_VOLUME

    async def firmware_version(self) -> str:
        return await self._client.get_fw_version()

    async def device_config(self) -> dict[str, Any]:
        config = await self._client.get_config()
        _LOGGER.debug("Config retrieved %s", config)
        return config

    async def battery_level(self) -> int:
        return (await self._cache.read()).battery

    async def charging_state(self) -> ChargingState:
        return (await self._cache.read()).charging_state

    async def battery_low(self) -> bool:
        return (await self._cache.read()).battery_low

    async def is_cleaning(self) -> bool:
        return (await self._cache.read()).is_cleaning

    async def is_returning_home(self) -> bool:
        return (await self._cache.read()).is_returning_home

    async def is_spot_cleaning(self) -> bool:
        return (await self._cache.read()).is_spot_cleaning

    async def is_high_speed(self) -> bool:
        power = self._require_power_control()
        return power.is_high_speed(await self._cache.read())

    async def is_mopping(self) -> bool:
        power = self._require_power_control()
        return power.is_mopping(await self._cache.read())
