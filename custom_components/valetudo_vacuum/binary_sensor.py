from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorDeviceClass, BinarySensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import ValetudoCoordinator
from .entity import ValetudoEntity
from .models import ChargingState


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback) -> None:
    coordinator: ValetudoCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities([ValetudoLowBatterySensor(coordinator), ValetudoChargingSensor(coordinator)])


class ValetudoLowBatterySensor(ValetudoEntity, BinarySensorEntity):
    _attr_device_class = BinarySensorDeviceClass.BATTERY

    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="battery_low", name="Battery low")

    @property
    def is_on(self) -> bool | None:
        return self._status.battery_low if self._status else None


class ValetudoChargingSensor(ValetudoEntity, BinarySensorEntity):
    _attr_device_class = BinarySensorDeviceClass.BATTERY_CHARGING

    def __init__(self, coordinator: ValetudoCoordinator) -> None:
        super().__init__(coordinator, unique_key="charging", name="Charging")

    @property
    def is_on(self) -> bool | None:
        if self._status is None:
            return None
        return self._status.charging_state is ChargingState.CHARGING

    @property
    def extra_state_attributes(self) -> dict[str, str] | None:
        if self._status is None:
            return None
        return {"charging_state": self._status.charging_state.value}
