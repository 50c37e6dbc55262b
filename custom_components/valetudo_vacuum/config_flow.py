from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.helpers import aiohttp_client

from .api import ValetudoClient, device_base_url
from .const import (
    CONF_DEFAULT_SPEED,
    CONF_HIGH_SPEED,
    CONF_HOST,
    CONF_MOP_ENABLED,
    CONF_NAME,
    CONF_POWER_CONTROL,
    CONF_SPOTS,
    DEFAULT_HIGH_SPEED_PRESET,
    DEFAULT_NAME,
    DEFAULT_SPEED_PRESET,
    DOMAIN,
)
from .errors import ValetudoConfigurationError, ValetudoError
from .models import FanSpeed, ValetudoConfig

_LOGGER = logging.getLogger(__name__)


def _normalize_host(raw: str) -> str:
    # Accept a pasted http://ip:port/ URL as well as a bare host[:port].
    url = device_base_url(raw)
    if url.host is None:
        return raw.strip()
    return url.host if url.is_default_port() else f"{url.host}:{url.port}"


async def _validate(hass: HomeAssistant, config: ValetudoConfig) -> None:
    session = aiohttp_client.async_get_clientsession(hass)
    client = ValetudoClient(session, host=config.host)
    await client.get_current_status()


class ConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        errors: dict[str, str] = {}

        if user_input is not None:
            data = {**user_input, CONF_HOST: _normalize_host(user_input[CONF_HOST])}
            try:
                config = ValetudoConfig.from_mapping(data)
            except ValetudoConfigurationError as e:
                _LOGGER.warning("Valetudo config flow rejected input: %s", e)
                errors[CONF_SPOTS if data.get(CONF_HOST) else CONF_HOST] = "invalid_config"
            else:
                try:
                    await _validate(self.hass, config)
                except ValetudoError:
                    _LOGGER.exception("Valetudo config flow failed host=%s", config.host)
                    errors["base"] = "cannot_connect"
                else:
                    await self.async_set_unique_id(config.host)
                    self._abort_if_unique_id_configured()
                    return self.async_create_entry(title=config.name, data=data)

        presets = FanSpeed.presets()
        schema = vol.Schema(
            {
                vol.Required(CONF_HOST): str,
                vol.Optional(CONF_NAME, default=DEFAULT_NAME): str,
                vol.Optional(CONF_POWER_CONTROL, default=False): bool,
                vol.Optional(CONF_DEFAULT_SPEED, default=DEFAULT_SPEED_PRESET): vol.In(presets),
                vol.Optional(CONF_HIGH_SPEED, default=DEFAULT_HIGH_SPEED_PRESET): vol.In(presets),
                vol.Optional(CONF_MOP_ENABLED, default=False): bool,
                vol.Optional(CONF_SPOTS, default=""): str,
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)
