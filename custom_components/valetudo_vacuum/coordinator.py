from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import ValetudoClient
from .commands import CommandExecutor
from .const import DOMAIN
from .engine import StatusCache
from .errors import ValetudoError
from .models import ValetudoConfig, VacuumStatus

_LOGGER = logging.getLogger(__name__)


class ValetudoCoordinator(DataUpdateCoordinator[VacuumStatus]):
    """Pushes StatusCache results to entities.

    update_interval stays None: polling cadence belongs to the cache, which
    adapts it to the robot state.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        client: ValetudoClient,
        config: ValetudoConfig,
    ) -> None:
        super().__init__(
            hass,
            logger=_LOGGER,
            config_entry=entry,
            name=f"{DOMAIN}_{client.host}",
            update_interval=None,
        )
        self.client = client
        self.config = config
        self.cache = StatusCache(client)
        self.commands = CommandExecutor(client, self.cache, power_control=config.power_control)
        self.firmware_version: str | None = None
        self._unsub_cache = self.cache.add_listener(self._handle_status)

    async def _async_update_data(self) -> VacuumStatus:
        try:
            return await self.cache.read()
        except ValetudoError as err:
            raise UpdateFailed(str(err)) from err

    @callback
    def _handle_status(self, status: VacuumStatus | None, error: Exception | None) -> None:
        if status is not None:
            self.async_set_updated_data(status)
        elif error is not None and self.data is None:
            # Once a status was seen, entities keep showing it while the robot is unreachable.
            self.async_set_update_error(error)

    async def async_shutdown(self) -> None:
        self._unsub_cache()
        self.cache.close()
        await super().async_shutdown()
