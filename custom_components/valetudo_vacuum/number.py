from __future__ import annotations

import logging
from datetime import timedelta

from homeassistant.components.number import NumberEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import ValetudoCoordinator
from .entity import ValetudoEntity
from .errors import ValetudoError

_LOGGER = logging.getLogger(__name__)

SCAN_INTERVAL = timedelta(minutes=1)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback) -> None:
    coordinator: ValetudoCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities([ValetudoVolumeNumber(coordinator)], update_before_add=True)


class ValetudoVolumeNumber(ValetudoEntity, NumberEntity):
    _attr_native_min_value = 1
    _attr_native_max_value = 100
    _attr_native_step = 1
    _attr_native_unit_of_measurement = PERCENTAGE
    # Volume lives outside /api/current_status, so this entity polls on its own.
    _attr_should_poll = True

    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="volume", name="Volume")

    @property
    def native_value(self) -> float | None:
        level = self._commands.volume_level
        return float(level) if level is not None else None

    async def async_update(self) -> None:
        try:
            await self._commands.volume()
        except ValetudoError as err:
            _LOGGER.debug("Failed to get volume: %s", err)

    async def async_set_native_value(self, value: float) -> None:
        await self._commands.set_volume(int(value))
        self.async_write_ha_state()
