from __future__ import annotations

from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import ValetudoCoordinator
from .entity import ValetudoEntity
from .models import FanSpeed


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback) -> None:
    coordinator: ValetudoCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities([ValetudoFanSpeedSelect(coordinator)])


class ValetudoFanSpeedSelect(ValetudoEntity, SelectEntity):
    _attr_options = FanSpeed.presets()

    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="fan_speed", name="Fan speed")

    @property
    def current_option(self) -> str | None:
        speed = self._status.fan_speed if self._status else None
        return speed.preset if speed is not None else None

    async def async_select_option(self, option: str) -> None:
        await self._commands.set_fan_speed(option)
