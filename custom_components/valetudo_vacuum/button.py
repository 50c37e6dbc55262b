from __future__ import annotations

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import ValetudoCoordinator
from .entity import ValetudoEntity


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback) -> None:
    coordinator: ValetudoCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities([ValetudoLocateButton(coordinator), ValetudoTestVolumeButton(coordinator)])


class ValetudoLocateButton(ValetudoEntity, ButtonEntity):
    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="identify", name="Find")

    async def async_press(self) -> None:
        await self._commands.locate()


class ValetudoTestVolumeButton(ValetudoEntity, ButtonEntity):
    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="test_volume", name="Test volume")

    async def async_press(self) -> None:
        await self._commands.test_volume()
