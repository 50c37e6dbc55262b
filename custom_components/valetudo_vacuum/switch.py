from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN, MUTED_BELOW_VOLUME
from .coordinator import ValetudoCoordinator
from .entity import ValetudoEntity
from .errors import ValetudoError
from .models import Spot

_LOGGER = logging.getLogger(__name__)

# Only the mute switch polls (volume is not part of the status payload).
SCAN_INTERVAL = timedelta(minutes=1)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback) -> None:
    coordinator: ValetudoCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    entities: list[SwitchEntity] = [
        ValetudoCleanSwitch(coordinator),
        ValetudoGoHomeSwitch(coordinator),
    ]
    entities.extend(ValetudoSpotSwitch(coordinator, spot) for spot in coordinator.config.spots)

    power = coordinator.config.power_control
    if power is not None:
        entities.append(ValetudoHighSpeedSwitch(coordinator))
        if power.mop:
            entities.append(ValetudoMopSwitch(coordinator))
    async_add_entities(entities)
    # Volume is not in the status payload; read it once before the first state write.
    async_add_entities([ValetudoMuteSwitch(coordinator)], update_before_add=True)


class ValetudoCleanSwitch(ValetudoEntity, SwitchEntity):
    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="clean", name="Clean")

    @property
    def is_on(self) -> bool | None:
        return self._status.is_cleaning if self._status else None

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._commands.set_cleaning(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        try:
            await self._commands.set_cleaning(False)
        except ValetudoError as err:
            raise HomeAssistantError(str(err)) from err


class ValetudoGoHomeSwitch(ValetudoEntity, SwitchEntity):
    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="home", name="Go home")

    @property
    def is_on(self) -> bool | None:
        return self._status.is_returning_home if self._status else None

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._commands.go_home()

    async def async_turn_off(self, **kwargs: Any) -> None:
        # Nothing to cancel on the robot; resync the switch with reality.
        self.coordinator.cache.request_refresh()


class ValetudoSpotSwitch(ValetudoEntity, SwitchEntity):
    def __init__(self, coordinator: ValetudoCoordinator, spot: Spot) -> None:
        super().__init__(coordinator, unique_key=f"spotclean_{spot.key}", name=spot.name)
        self._spot = spot

    @property
    def is_on(self) -> bool | None:
        return self._status.is_spot_cleaning if self._status else None

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._commands.clean_spot(self._spot)

    async def async_turn_off(self, **kwargs: Any) -> None:
        raise HomeAssistantError("Spot cleaning cannot be stopped from this switch")


class ValetudoHighSpeedSwitch(ValetudoEntity, SwitchEntity):
    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="highspeed", name="High speed mode")

    @property
    def is_on(self) -> bool | None:
        power = self._commands.power_control
        if self._status is None or power is None:
            return None
        return power.is_high_speed(self._status)

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._set(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._set(False)

    async def _set(self, on: bool) -> None:
        try:
            await self._commands.set_high_speed(on)
        except ValetudoError as err:
            raise HomeAssistantError(str(err)) from err


class ValetudoMopSwitch(ValetudoEntity, SwitchEntity):
    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="mopspeed", name="Mopping mode")

    @property
    def is_on(self) -> bool | None:
        power = self._commands.power_control
        if self._status is None or power is None:
            return None
        return power.is_mopping(self._status)

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._set(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._set(False)

    async def _set(self, on: bool) -> None:
        try:
            await self._commands.set_mop_mode(on)
        except ValetudoError as err:
            raise HomeAssistantError(str(err)) from err


class ValetudoMuteSwitch(ValetudoEntity, SwitchEntity):
    _attr_should_poll = True

    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="mute", name="Mute")

    @property
    def is_on(self) -> bool | None:
        level = self._commands.volume_level
        return level < MUTED_BELOW_VOLUME if level is not None else None

    async def async_update(self) -> None:
        try:
            await self._commands.volume()
        except ValetudoError as err:
            _LOGGER.debug("Failed to get volume for mute: %s", err)

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._commands.set_mute(True)
        self.async_write_ha_state()

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._commands.set_mute(False)
        self.async_write_ha_state()
