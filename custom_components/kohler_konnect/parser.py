"""Parser for Kohler DTV+ controller responses."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from typing import Any

from .const import (
    LIGHT_ZONES,
    LIGHTING_CONNECTED,
    MAX_OUTLETS,
    MAX_PRESETS,
    ORDINALS,
    OUTLET_NAMES,
)
from .exceptions import KohlerApiClientDecodeError
from .models import (
    ControllerConfig,
    LightZoneConfig,
    OutletConfig,
    UserPreset,
    ValveConfig,
)

HEADER_SEPARATOR = "\r\n\r\n"
DECODE_SAMPLE_LENGTH = 100

_STATUS_LINE = re.compile(r"^HTTP/\d(?:\.\d)?\s+(\d{3})")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _is_truthy(value: Any) -> bool:
    """Interpret the controller's loosely typed flags."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class KohlerParser:
    """Parser for Kohler DTV+ data."""

    @staticmethod
    def extract_body(raw: str) -> str:
        """Return the body of a raw response.

        The controller sometimes answers with broken HTTP framing and
        sometimes with a bare body. Everything up to and including the
        first header separator is dropped; without a separator the whole
        stream is the body.
        """
        _, separator, body = raw.partition(HEADER_SEPARATOR)
        if not separator:
            body = raw
        return body.strip()

    @staticmethod
    def status_code(raw: str) -> int | None:
        """Return the HTTP status code of a raw response, if it has one."""
        match = _STATUS_LINE.match(raw.lstrip())
        if match:
            return int(match.group(1))
        return None

    @staticmethod
    def parse_json(body: str, path: str = "") -> dict[str, Any]:
        """Parse a JSON object out of a response body.

        Strict parsing is tried first, then the greedy span from the first
        ``{`` to the last ``}``.
        """
        try:
            data = json.loads(body)
        except ValueError:
            match = _JSON_OBJECT.search(body)
            if not match:
                raise KohlerApiClientDecodeError(
                    f"Invalid JSON from {path}: {body[:DECODE_SAMPLE_LENGTH]}",
                    body[:DECODE_SAMPLE_LENGTH],
                ) from None
            try:
                data = json.loads(match.group(0))
            except ValueError as exception:
                raise KohlerApiClientDecodeError(
                    f"Invalid JSON from {path}: {body[:DECODE_SAMPLE_LENGTH]}",
                    body[:DECODE_SAMPLE_LENGTH],
                ) from exception

        if not isinstance(data, dict):
            raise KohlerApiClientDecodeError(
                f"Expected a JSON object from {path}: {body[:DECODE_SAMPLE_LENGTH]}",
                body[:DECODE_SAMPLE_LENGTH],
            )
        return data

    # Temperatures

    @staticmethod
    def is_fahrenheit(info: Mapping[str, Any] | None) -> bool:
        """Return True when the controller reports Fahrenheit."""
        if not info:
            return False
        symbol = info.get("degree_symbol")
        return isinstance(symbol, str) and "F" in symbol

    @staticmethod
    def fahrenheit_to_celsius(value: float) -> float:
        """Convert to Celsius, rounded to one decimal."""
        return _round_half_up((value - 32) * 5 / 9, 1)

    @staticmethod
    def celsius_to_fahrenheit(value: float) -> int:
        """Convert to Fahrenheit, rounded to whole degrees."""
        return int(_round_half_up(value * 9 / 5 + 32))

    @classmethod
    def to_ha_temperature(
        cls, value: Any, info: Mapping[str, Any] | None
    ) -> float | None:
        """Convert a controller temperature to Celsius."""
        try:
            temperature = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(temperature):
            return None
        if cls.is_fahrenheit(info):
            return cls.fahrenheit_to_celsius(temperature)
        return temperature

    @classmethod
    def from_ha_temperature(
        cls, value: float, info: Mapping[str, Any] | None
    ) -> float:
        """Convert a Celsius temperature to the controller's unit."""
        if cls.is_fahrenheit(info):
            return cls.celsius_to_fahrenheit(value)
        return value

    # Values

    @staticmethod
    def parse_int(value: Any) -> int | None:
        """Parse the leading integer of a value like "50%"."""
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str):
            match = _LEADING_INT.match(value)
            if match:
                return int(match.group(1))
        return None

    @classmethod
    def parse_volume(cls, value: Any) -> int | None:
        """Parse the amplifier volume percentage."""
        return cls.parse_int(value)

    @staticmethod
    def is_steam_running(values: Mapping[str, Any] | None) -> bool:
        """Return True when values.cgi reports the steamer running."""
        if not values:
            return False
        return values.get("steam_running") in (True, "true", 1, "1")

    @staticmethod
    def outlet_type_number(type_string: Any) -> int:
        """Extract the outlet type number from a string like "outlet_23"."""
        if not isinstance(type_string, str):
            return 0
        match = _LEADING_INT.match(type_string.replace("outlet_", ""))
        return int(match.group(1)) if match else 0

    @classmethod
    def outlet_type_name(cls, type_string: Any) -> str:
        """Map an outlet type string to a human readable name."""
        number = cls.outlet_type_number(type_string)
        if 0 <= number < len(OUTLET_NAMES):
            return OUTLET_NAMES[number]
        return OUTLET_NAMES[0]

    def parse_controller_config(
        self, values: Mapping[str, Any], fallback_identifier: str
    ) -> ControllerConfig:
        """Describe the installed hardware from a values.cgi snapshot."""
        identifier = values.get("MAC") or fallback_identifier

        valves = [
            self._parse_valve(values, number, prefix)
            for number, prefix in ((1, ""), (2, "v2_"))
            if _is_truthy(values.get(f"valve{number}_installed"))
        ]
        if not valves:
            valves = [self._parse_valve(
                values, 1, "", name="DTV+ Shower", installed=False
            )]

        presets = []
        for preset_id in range(1, MAX_PRESETS + 1):
            name = values.get(f"user_{preset_id}") or values.get(
                f"user{preset_id}_string"
            )
            if name:
                presets.append(UserPreset(id=preset_id, name=str(name)))

        steam_installed = _is_truthy(values.get("steam_installed"))
        default_steam_temperature = None
        if steam_installed:
            try:
                default_steam_temperature = float(
                    values.get("steam_default_string_temp")
                )
            except (TypeError, ValueError):
                default_steam_temperature = None

        light_zones = []
        if values.get("lighting_con_string") == LIGHTING_CONNECTED:
            light_zones = [
                LightZoneConfig(
                    zone=zone,
                    name=values.get(f"light{zone}_name") or f"Light Zone {zone}",
                )
                for zone in LIGHT_ZONES
            ]

        return ControllerConfig(
            identifier=str(identifier),
            valves=valves,
            presets=presets,
            steam_installed=steam_installed,
            default_steam_temperature=default_steam_temperature,
            light_zones=light_zones,
        )

    def _parse_valve(
        self,
        values: Mapping[str, Any],
        number: int,
        prefix: str,
        name: str | None = None,
        installed: bool = True,
    ) -> ValveConfig:
        port_count = self.parse_int(values.get(f"valve{number}PortsAvailable"))
        if not port_count or port_count < 0:
            port_count = MAX_OUTLETS
        port_count = min(port_count, MAX_OUTLETS)

        outlets = tuple(
            OutletConfig(
                valve=number,
                number=outlet,
                type_number=self.outlet_type_number(
                    values.get(f"{prefix}{ORDINALS[outlet]}_type")
                ),
                type_name=self.outlet_type_name(
                    values.get(f"{prefix}{ORDINALS[outlet]}_type")
                ),
                has_massage=_is_truthy(
                    values.get(f"{prefix}{ORDINALS[outlet]}_massage")
                ),
            )
            for outlet in range(1, port_count + 1)
        )
        return ValveConfig(
            number=number,
            name=name
            or values.get(f"valve{number}_name")
            or f"DTV+ Shower Zone {number}",
            port_count=port_count,
            outlets=outlets,
            installed=installed,
        )
