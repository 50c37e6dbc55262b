from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .commands import CommandExecutor
from .const import DOMAIN, MANUFACTURER, MODEL
from .coordinator import ValetudoCoordinator
from .models import VacuumStatus


class ValetudoEntity(CoordinatorEntity[ValetudoCoordinator]):
    def __init__(self, coordinator: ValetudoCoordinator, *, unique_key: str, name: str) -> None:
        super().__init__(coordinator)
        self._unique_key = unique_key
        self._attr_name = f"{coordinator.config.name} {name}"
        self._attr_unique_id = f"{coordinator.client.host}-{unique_key}"

    @property
    def _status(self) -> VacuumStatus | None:
        return self.coordinator.data

    @property
    def _commands(self) -> CommandExecutor:
        return self.coordinator.commands

    @property
    def available(self) -> bool:
        return super().available and self._status is not None

    @property
    def device_info(self) -> DeviceInfo:
        host = self.coordinator.client.host
        return DeviceInfo(
            identifiers={(DOMAIN, host)},
            name=self.coordinator.config.name,
            manufacturer=MANUFACTURER,
            model=MODEL,
            sw_version=self.coordinator.firmware_version,
            configuration_url=str(self.coordinator.client.base_url),
        )
