"""Kohler DTV+ controller API Client."""

from __future__ import annotations

import asyncio
import contextlib
import math
from http import HTTPStatus
from typing import Any

from yarl import URL

from .const import (
    DEFAULT_PORT,
    LOGGER,
    PATH_LIGHT_OFF,
    PATH_LIGHT_ON,
    PATH_MUSIC_OFF,
    PATH_MUSIC_ON,
    PATH_QUICK_SHOWER,
    PATH_START_USER,
    PATH_STEAM_OFF,
    PATH_STEAM_ON,
    PATH_STOP_SHOWER,
    PATH_SYSTEM_INFO,
    PATH_VALUES,
    TIMEOUT_COMMAND,
    TIMEOUT_INFO,
)
from .exceptions import (
    KohlerApiClientCommandRejectedError,
    KohlerApiClientCommunicationError,
    KohlerApiClientTimeoutError,
)
from .models import CompoundShowerCommand
from .parser import KohlerParser


def _wire_number(value: float) -> int:
    """Round half up to the integer the controller expects."""
    return math.floor(float(value) + 0.5)


class KohlerApiClient:
    """Kohler DTV+ API Client.

    Every call opens its own connection, so one instance can be shared by
    concurrent polls and commands for the same controller.
    """

    def __init__(
        self,
        address: str,
        info_timeout: float = TIMEOUT_INFO,
        command_timeout: float = TIMEOUT_COMMAND,
    ) -> None:
        """Initialize Kohler DTV+ API Client."""
        self._address = address
        self._info_timeout = info_timeout
        self._command_timeout = command_timeout
        self._parser = KohlerParser()

        try:
            url = URL(f"http://{address}")
            self._host: str = url.host or address
            self._port: int = url.port or DEFAULT_PORT
        except ValueError as exception:
            raise KohlerApiClientCommunicationError(
                f"Invalid controller address {address!r}: {exception}"
            ) from exception

    @property
    def address(self) -> str:
        """Return the controller address."""
        return self._address

    @staticmethod
    def _build_target(path: str, params: dict[str, Any] | None) -> str:
        query = {key: str(value) for key, value in (params or {}).items()}
        return str(URL.build(path=f"/{path}", query=query or None))

    async def _exchange(self, target: str, timeout: float) -> str:
        """Send one GET and read until the peer closes the connection."""
        request = (
            f"GET {target} HTTP/1.0\r\n"
            f"Host: {self._host}\r\n"
            "Connection: close\r\n\r\n"
        )
        writer: asyncio.StreamWriter | None = None
        try:
            async with asyncio.timeout(timeout):
                reader, writer = await asyncio.open_connection(self._host, self._port)
                writer.write(request.encode("ascii"))
                await writer.drain()
                data = await reader.read()
        except TimeoutError as exception:
            raise KohlerApiClientTimeoutError(
                f"Request to {target} timed out after {timeout}s"
            ) from exception
        except OSError as exception:
            raise KohlerApiClientCommunicationError(
                f"Error communicating with {self._address}: {exception}"
            ) from exception
        finally:
            if writer is not None:
                writer.close()
                with contextlib.suppress(OSError):
                    await writer.wait_closed()

        return data.decode("utf-8", errors="replace")

    async def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> str:
        """Perform a request and return the trimmed body."""
        target = self._build_target(path, params)
        LOGGER.debug("--- REQUEST: GET %s%s ---", self._address, target)

        raw = await self._exchange(target, timeout or self._info_timeout)

        status = self._parser.status_code(raw)
        if status is not None and status >= HTTPStatus.BAD_REQUEST:
            LOGGER.error(
                "Request %s to %s failed: %s - %s",
                target,
                self._address,
                status,
                raw[:200],
            )
            raise KohlerApiClientCommandRejectedError(
                f"Controller rejected {path}: status {status}"
            )

        return self._parser.extract_body(raw)

    async def _request_json(self, path: str) -> dict[str, Any]:
        body = await self._request(path, timeout=self._info_timeout)
        return self._parser.parse_json(body, path)

    # Queries

    async def async_read_values(self) -> dict[str, Any]:
        """Read the controller configuration (installed hardware, presets)."""
        return await self._request_json(PATH_VALUES)

    async def async_read_system_info(self) -> dict[str, Any]:
        """Read the real-time status (temperatures, valves, volume)."""
        return await self._request_json(PATH_SYSTEM_INFO)

    # Shower

    async def async_start_shower(
        self, command: CompoundShowerCommand | None = None
    ) -> str:
        """Send a compound shower command describing both valves."""
        command = command or CompoundShowerCommand()
        LOGGER.debug("Sending shower command to %s: %s", self._address, command)
        return await self._request(
            PATH_QUICK_SHOWER,
            {
                "valve_num": 1,
                "valve1_outlet": str(command.valve1_outlets),
                "valve1_massage": 0,
                "valve1_temp": _wire_number(command.valve1_temp),
                "valve2_outlet": str(command.valve2_outlets),
                "valve2_massage": 0,
                "valve2_temp": _wire_number(command.valve2_temp),
            },
            self._command_timeout,
        )

    async def async_stop_shower(self) -> str:
        """Stop the shower on both valves."""
        return await self._request(PATH_STOP_SHOWER, timeout=self._command_timeout)

    async def async_start_preset(self, preset_id: int = 1) -> str:
        """Start a user preset."""
        return await self._request(
            PATH_START_USER, {"user": preset_id}, self._command_timeout
        )

    # Steam

    async def async_steam_on(self, temperature: float = 110, minutes: int = 10) -> str:
        """Start the steamer."""
        return await self._request(
            PATH_STEAM_ON,
            {"temp": _wire_number(temperature), "time": _wire_number(minutes)},
            self._command_timeout,
        )

    async def async_steam_off(self) -> str:
        """Stop the steamer."""
        return await self._request(PATH_STEAM_OFF, timeout=self._command_timeout)

    # Music

    async def async_music_on(self, volume: float = 50) -> str:
        """Start the amplifier at ``volume`` percent."""
        return await self._request(PATH_MUSIC_ON, {"volume": _wire_number(volume)})

    async def async_music_off(self) -> str:
        """Stop the amplifier."""
        return await self._request(PATH_MUSIC_OFF)

    # Lights

    async def async_light_on(self, zone: int, level: float = 100) -> str:
        """Turn a light zone on at ``level`` percent."""
        return await self._request(
            PATH_LIGHT_ON, {"zone": zone, "level": _wire_number(level)}
        )

    async def async_light_off(self, zone: int) -> str:
        """Turn a light zone off."""
        return await self._request(PATH_LIGHT_OFF, {"zone": zone})
