from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import ClientError, ClientSession, ClientTimeout
from yarl import URL

from .const import REQUEST_TIMEOUT_SECONDS
from .errors import ValetudoParseError, ValetudoTransportError
from .models import VacuumStatus

_LOGGER = logging.getLogger(__name__)


class ValetudoClient:
    """Client for the legacy Valetudo JSON API (/api/*)."""

    def __init__(
        self,
        session: ClientSession,
        *,
        host: str,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._session = session
        self._host = host
        self._base_url = device_base_url(host)
        self._timeout = ClientTimeout(total=timeout)

    @property
    def host(self) -> str:
        return self._host

    @property
    def base_url(self) -> URL:
        return self._base_url

    async def request(self, method: str, path: str, *, json_data: Any | None = None) -> Any:
        """One request/response exchange; never retried here."""
        url = self._base_url.with_path(path)
        if json_data is not None:
            _LOGGER.debug("%s %s payload=%s", method, url, json_data)
        try:
            async with self._session.request(
                method,
                url,
                json=json_data,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            ) as resp:
                resp.raise_for_status()
                body = await resp.read()
        except asyncio.TimeoutError as e:
            raise ValetudoTransportError(f"Timed out waiting for {method} {url}") from e
        except ClientError as e:
            raise ValetudoTransportError(f"{method} {url} failed: {e}") from e

        _LOGGER.debug("Raw response from %s: %s", url, body)
        # Some firmware builds answer PUT commands with an empty body.
        # Bytes go straight to json.loads so bad encodings surface as ValueError too.
        if not body.strip():
            return None
        try:
            return json.loads(body)
        except ValueError as e:
            raise ValetudoParseError(f"Invalid JSON from {method} {url}: {body[:120]!r}") from e

    async def get_current_status(self) -> VacuumStatus:
        return VacuumStatus.from_payload(await self.request("GET", "/api/current_status"))

    async def start_cleaning(self) -> None:
        await self.request("PUT", "/api/start_cleaning")

    async def stop_cleaning(self) -> None:
        await self.request("PUT", "/api/stop_cleaning")

    async def drive_home(self) -> None:
        await self.request("PUT", "/api/drive_home")

    async def go_to(self, x: int, y: int) -> None:
        await self.request("PUT", "/api/go_to", json_data={"x": x, "y": y})

    async def set_fan_speed(self, speed: int) -> None:
        await self.request("PUT", "/api/fanspeed", json_data={"speed": int(speed)})

    async def find_robot(self) -> None:
        await self.request("PUT", "/api/find_robot")

    async def set_sound_volume(self, volume: int) -> None:
        await self.request("PUT", "/api/set_sound_volume", json_data={"volume": volume})

    async def test_sound_volume(self) -> None:
        await self.request("PUT", "/api/test_sound_volume")

    async def get_sound_volume(self) -> int:
        data = await self.request("GET", "/api/get_sound_volume")
        volume = data.get("volume") if isinstance(data, dict) else data
        if not isinstance(volume, int) or isinstance(volume, bool):
            raise ValetudoParseError(f"Unexpected /api/get_sound_volume response: {data!r}")
        return volume

    async def get_fw_version(self) -> str:
        data = await self.request("GET", "/api/get_fw_version")
        version = data.get("version") if isinstance(data, dict) else None
        if not isinstance(version, str):
            raise ValetudoParseError(f"Unexpected /api/get_fw_version response: {data!r}")
        return version

    async def get_config(self) -> dict[str, Any]:
        data = await self.request("GET", "/api/get_config")
        if not isinstance(data, dict):
            raise ValetudoParseError("Unexpected /api/get_config response shape")
        return data


def device_base_url(host: str) -> URL:
    """Accept ``ip``, ``ip:port`` or a full ``http://`` URL."""
    raw = host.strip()
    if "://" not in raw:
        raw = f"http://{raw}"
    return URL(raw).with_path("/")
