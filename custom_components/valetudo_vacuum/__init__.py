from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ConfigEntryError, ConfigEntryNotReady, HomeAssistantError
from homeassistant.helpers import aiohttp_client, device_registry as dr
from homeassistant.helpers.typing import ConfigType

from .api import ValetudoClient
from .const import DOMAIN, MANUFACTURER, MODEL, PLATFORMS
from .coordinator import ValetudoCoordinator
from .errors import ValetudoConfigurationError, ValetudoError
from .models import ValetudoConfig

_LOGGER = logging.getLogger(__name__)


def _get_coordinator_for_device_id(hass: HomeAssistant, device_id: str | None) -> ValetudoCoordinator:
    stores = hass.data.get(DOMAIN, {})
    if not stores:
        raise HomeAssistantError("No valetudo_vacuum entries configured")

    if device_id is None:
        if len(stores) == 1:
            return next(iter(stores.values()))["coordinator"]
        raise HomeAssistantError("Multiple vacuums configured; specify device_id")

    device = dr.async_get(hass).async_get(device_id)
    if device is None:
        raise HomeAssistantError(f"Unknown device_id {device_id}")

    for entry_id, store in stores.items():
        if entry_id in device.config_entries:
            return store["coordinator"]
    raise HomeAssistantError("device_id does not belong to valetudo_vacuum")


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    hass.data.setdefault(DOMAIN, {})
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    try:
        config = ValetudoConfig.from_mapping(entry.data)
    except ValetudoConfigurationError as e:
        raise ConfigEntryError(str(e)) from e

    session = aiohttp_client.async_get_clientsession(hass)
    client = ValetudoClient(session, host=config.host)

    coordinator = ValetudoCoordinator(hass, entry, client, config)
    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady:
        coordinator.cache.close()
        raise

    try:
        coordinator.firmware_version = await coordinator.commands.firmware_version()
    except ValetudoError as e:
        _LOGGER.warning("Error reading firmware version from %s: %s", config.host, e)

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "client": client,
        "coordinator": coordinator,
    }

    dr.async_get(hass).async_get_or_create(
        config_entry_id=entry.entry_id,
        identifiers={(DOMAIN, config.host)},
        manufacturer=MANUFACTURER,
        model=MODEL,
        name=config.name,
        sw_version=coordinator.firmware_version,
        configuration_url=str(client.base_url),
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _register_services(hass)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        store = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
        if store is not None:
            await store["coordinator"].async_shutdown()
    return unload_ok


def _register_services(hass: HomeAssistant) -> None:
    if hass.services.has_service(DOMAIN, "go_to"):
        return

    async def go_to(call: ServiceCall) -> None:
        coordinator = _get_coordinator_for_device_id(hass, call.data.get("device_id"))
        await coordinator.commands.go_to(call.data["x"], call.data["y"])

    hass.services.async_register(
        DOMAIN,
        "go_to",
        go_to,
        schema=vol.Schema(
            {
                vol.Optional("device_id"): str,
                vol.Required("x"): vol.Coerce(int),
                vol.Required("y"): vol.Coerce(int),
            }
        ),
    )
