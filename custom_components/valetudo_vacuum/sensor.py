from __future__ import annotations

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import ValetudoCoordinator
from .entity import ValetudoEntity
from .models import VacuumState


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback) -> None:
    coordinator: ValetudoCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities([ValetudoBatterySensor(coordinator), ValetudoStateSensor(coordinator)])


class ValetudoBatterySensor(ValetudoEntity, SensorEntity):
    _attr_device_class = SensorDeviceClass.BATTERY
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = PERCENTAGE

    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="battery", name="Battery")

    @property
    def native_value(self) -> int | None:
        return self._status.battery if self._status else None


class ValetudoStateSensor(ValetudoEntity, SensorEntity):
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [state.name.lower() for state in VacuumState]

    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="state", name="State")

    @property
    def native_value(self) -> str | None:
        return self._status.state.name.lower() if self._status else None
