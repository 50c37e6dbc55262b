"""Tests for the command pipeline and status accessors."""

from __future__ import annotations

import logging

import pytest
from conftest import FakeClient, FakeClock, drain, make_status

from custom_components.valetudo_vacuum.commands import CommandExecutor
from custom_components.valetudo_vacuum.engine import StatusCache
from custom_components.valetudo_vacuum.errors import (
    ValetudoConfigurationError,
    ValetudoPreconditionError,
    ValetudoTransportError,
)
from custom_components.valetudo_vacuum.models import ChargingState, FanSpeed, PowerControl, Spot, VacuumState


def _executor(client: FakeClient, clock: FakeClock, power_control: PowerControl | None = None):
    cache = StatusCache(client, clock=clock)
    return cache, CommandExecutor(client, cache, power_control=power_control, settle_delay=0)


async def _seed(cache: StatusCache, client: FakeClient, state: VacuumState, fan_power: int | None = 102) -> None:
    client.auto = make_status(state, fan_power=fan_power)
    await cache.read(forced=True)


@pytest.mark.asyncio
async def test_start_cleaning_settles_then_forces_refresh(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    await _seed(cache, client, VacuumState.IDLE)

    client.auto = make_status(VacuumState.CLEANING)
    await executor.start_cleaning()
    await drain()

    client.start_cleaning.assert_awaited_once()
    assert client.status_calls == 2
    assert cache.status.state is VacuumState.CLEANING
    cache.close()


@pytest.mark.asyncio
async def test_command_failure_is_logged_and_still_refreshes(client: FakeClient, clock: FakeClock, caplog):
    cache, executor = _executor(client, clock)
    await _seed(cache, client, VacuumState.IDLE)
    client.drive_home.side_effect = ValetudoTransportError("connection refused")

    with caplog.at_level(logging.ERROR):
        await executor.go_home()
    await drain()

    assert "Failed to execute go home" in caplog.text
    assert client.status_calls == 2
    cache.close()


@pytest.mark.asyncio
async def test_stop_cleaning_rejected_while_idle_without_transport_call(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    await _seed(cache, client, VacuumState.IDLE)

    with pytest.raises(ValetudoPreconditionError):
        await executor.stop_cleaning()

    client.stop_cleaning.assert_not_awaited()
    assert client.status_calls == 1
    cache.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "state",
    [VacuumState.RETURNING_HOME, VacuumState.CHARGING, VacuumState.PAUSED, VacuumState.DOCKING],
)
async def test_stop_cleaning_rejected_in_non_stoppable_states(client: FakeClient, clock: FakeClock, state):
    cache, executor = _executor(client, clock)
    await _seed(cache, client, state)

    with pytest.raises(ValetudoPreconditionError):
        await executor.stop_cleaning()
    client.stop_cleaning.assert_not_awaited()
    cache.close()


@pytest.mark.asyncio
async def test_stop_cleaning_while_cleaning(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    await _seed(cache, client, VacuumState.CLEANING)

    client.auto = make_status(VacuumState.IDLE)
    await executor.stop_cleaning()
    await drain()

    client.stop_cleaning.assert_awaited_once()
    assert cache.status.state is VacuumState.IDLE
    cache.close()


@pytest.mark.asyncio
async def test_cleaning_off_is_noop_unless_cleaning(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    client.auto = make_status(VacuumState.CHARGING)

    await executor.set_cleaning(False)

    client.stop_cleaning.assert_not_awaited()
    # Switching off always re-reads the robot state first.
    assert client.status_calls == 1
    cache.close()


@pytest.mark.asyncio
async def test_clean_spot_sends_coordinates(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    client.auto = make_status(VacuumState.GOING_TO_TARGET)

    await executor.clean_spot(Spot(name="Kitchen", x=25500, y=24000))

    client.go_to.assert_awaited_once_with(25500, 24000)
    cache.close()


@pytest.mark.asyncio
async def test_set_fan_speed_by_preset_name(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    client.auto = make_status()

    await executor.set_fan_speed("max")
    await drain()

    client.set_fan_speed.assert_awaited_once_with(FanSpeed.MAX)
    assert client.status_calls == 1

    with pytest.raises(ValetudoConfigurationError):
        await executor.set_fan_speed("ludicrous")
    cache.close()


@pytest.mark.asyncio
async def test_high_speed_mode_switches_between_configured_presets(client: FakeClient, clock: FakeClock):
    power = PowerControl(default_speed=FanSpeed.BALANCED, high_speed=FanSpeed.MAX)
    cache, executor = _executor(client, clock, power)
    await _seed(cache, client, VacuumState.CLEANING, fan_power=FanSpeed.BALANCED)

    assert not await executor.is_high_speed()
    await executor.set_high_speed(False)
    client.set_fan_speed.assert_not_awaited()

    await executor.set_high_speed(True)
    client.set_fan_speed.assert_awaited_once_with(FanSpeed.MAX)
    await drain()

    await _seed(cache, client, VacuumState.CLEANING, fan_power=FanSpeed.MAX)
    client.set_fan_speed.reset_mock()
    await executor.set_high_speed(False)
    client.set_fan_speed.assert_awaited_once_with(FanSpeed.BALANCED)
    cache.close()


@pytest.mark.asyncio
async def test_power_modes_require_configuration(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    client.auto = make_status()

    with pytest.raises(ValetudoPreconditionError):
        await executor.set_high_speed(True)

    cache, executor = _executor(client, clock, PowerControl(mop=False))
    with pytest.raises(ValetudoPreconditionError):
        await executor.set_mop_mode(True)
    cache.close()


@pytest.mark.asyncio
async def test_mop_mode_toggles(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock, PowerControl(mop=True))
    await _seed(cache, client, VacuumState.IDLE, fan_power=FanSpeed.QUIET)

    await executor.set_mop_mode(True)
    client.set_fan_speed.assert_awaited_once_with(FanSpeed.MOP)
    await drain()

    await _seed(cache, client, VacuumState.IDLE, fan_power=FanSpeed.MOP)
    assert await executor.is_mopping()
    client.set_fan_speed.reset_mock()
    await executor.set_mop_mode(False)
    client.set_fan_speed.assert_awaited_once_with(FanSpeed.QUIET)
    cache.close()


@pytest.mark.asyncio
async def test_set_volume_clamps_and_plays_test_sound(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)

    await executor.set_volume(0)

    client.set_sound_volume.assert_awaited_once_with(1)
    client.test_sound_volume.assert_awaited_once()
    assert executor.volume_level == 1
    cache.close()


@pytest.mark.asyncio
async def test_set_volume_failure_skips_test_sound(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    client.set_sound_volume.side_effect = ValetudoTransportError("timeout")

    await executor.set_volume(40)

    client.test_sound_volume.assert_not_awaited()
    assert executor.volume_level is None
    cache.close()


@pytest.mark.asyncio
async def test_mute_sets_minimum_volume_and_rereads(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    client.get_sound_volume.return_value = 1

    await executor.set_mute(True)

    client.set_sound_volume.assert_awaited_once_with(1)
    client.get_sound_volume.assert_awaited_once()
    assert await executor.is_muted()

    client.set_sound_volume.reset_mock()
    client.get_sound_volume.return_value = 100
    await executor.set_mute(False)
    client.set_sound_volume.assert_awaited_once_with(100)
    assert not await executor.is_muted()
    cache.close()


@pytest.mark.asyncio
async def test_locate_swallows_transport_errors(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    client.find_robot.side_effect = ValetudoTransportError("unreachable")

    await executor.locate()

    client.find_robot.assert_awaited_once()
    assert client.status_calls == 0
    cache.close()


@pytest.mark.asyncio
async def test_firmware_and_config_errors_propagate(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    assert await executor.firmware_version() == "3.5.4_004004"
    assert await executor.device_config() == {"dustCollection": False}

    client.get_fw_version.side_effect = ValetudoTransportError("down")
    with pytest.raises(ValetudoTransportError):
        await executor.firmware_version()
    cache.close()


@pytest.mark.asyncio
async def test_status_accessors_share_cached_read(client: FakeClient, clock: FakeClock):
    cache, executor = _executor(client, clock)
    client.auto = make_status(VacuumState.CHARGING, battery=15)

    assert await executor.battery_level() == 15
    assert await executor.battery_low()
    assert await executor.charging_state() is ChargingState.CHARGING
    assert not await executor.is_cleaning()
    assert not await executor.is_returning_home()
    assert not await executor.is_spot_cleaning()
    assert client.status_calls == 1
    cache.close()
