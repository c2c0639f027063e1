"""Data models for Kohler Konnect."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, NamedTuple, Protocol

from .const import (
    CLOSED_OUTLETS,
    DEFAULT_MUSIC_VOLUME,
    DEFAULT_STEAM_DURATION,
    DEFAULT_STEAM_TEMPERATURE,
    MAX_OUTLETS,
    UNTOUCHED_TEMPERATURE,
)

if TYPE_CHECKING:
    from .hub import KohlerControllerHub

# Read-only views of the decoded system_info.cgi / values.cgi objects
SystemInfoSnapshot = Mapping[str, Any]
ValuesSnapshot = Mapping[str, Any]


@dataclass(frozen=True)
class OutletSelector:
    """Set of open outlets on one valve.

    Serialized the way the controller expects it: the outlet numbers as
    ascending digits ("135"), or "0" when no outlet is open.
    """

    outlets: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        for outlet in self.outlets:
            if not 1 <= outlet <= MAX_OUTLETS:
                raise ValueError(f"Outlet number out of range: {outlet}")

    def __str__(self) -> str:
        if not self.outlets:
            return CLOSED_OUTLETS
        return "".join(str(outlet) for outlet in sorted(self.outlets))

    def __contains__(self, outlet: object) -> bool:
        return outlet in self.outlets

    @property
    def is_closed(self) -> bool:
        """Return True when no outlet is open."""
        return not self.outlets

    @classmethod
    def parse(cls, value: str) -> OutletSelector:
        """Parse a concatenated-digit outlet string."""
        value = value.strip()
        if value in ("", CLOSED_OUTLETS):
            return cls()
        if not value.isdigit():
            raise ValueError(f"Invalid outlet string: {value!r}")
        return cls(frozenset(int(char) for char in value))

    @classmethod
    def for_ports(cls, port_count: int) -> OutletSelector:
        """Select every outlet of a valve with ``port_count`` ports."""
        return cls(frozenset(range(1, min(port_count, MAX_OUTLETS) + 1)))

    def with_outlet(self, outlet: int, is_open: bool) -> OutletSelector:
        """Return a copy with one outlet opened or closed."""
        if is_open:
            return OutletSelector(self.outlets | {outlet})
        return OutletSelector(self.outlets - {outlet})


@dataclass(frozen=True)
class CompoundShowerCommand:
    """A quick_shower.cgi write. Always states both valves."""

    valve1_outlets: OutletSelector = field(default_factory=OutletSelector)
    valve1_temp: float = UNTOUCHED_TEMPERATURE
    valve2_outlets: OutletSelector = field(default_factory=OutletSelector)
    valve2_temp: float = UNTOUCHED_TEMPERATURE


@dataclass(frozen=True)
class OutletConfig:
    """One physical outlet as configured on the controller."""

    valve: int
    number: int
    type_number: int
    type_name: str
    has_massage: bool = False


@dataclass(frozen=True)
class ValveConfig:
    """One valve (shower zone).

    ``installed`` is false for the default valve assumed when the controller
    reports none.
    """

    number: int
    name: str
    port_count: int
    outlets: tuple[OutletConfig, ...] = ()
    installed: bool = True


@dataclass(frozen=True)
class UserPreset:
    """A user preset stored on the controller."""

    id: int
    name: str


@dataclass(frozen=True)
class LightZoneConfig:
    """A light zone of the lighting module."""

    zone: int
    name: str


@dataclass
class ControllerConfig:
    """Installed hardware as reported by values.cgi."""

    identifier: str
    valves: list[ValveConfig] = field(default_factory=list)
    presets: list[UserPreset] = field(default_factory=list)
    steam_installed: bool = False
    default_steam_temperature: float | None = None
    light_zones: list[LightZoneConfig] = field(default_factory=list)


@dataclass
class ValvePreferences:
    """Local, per-valve choices applied when the valve is switched on."""

    enabled_outlets: OutletSelector
    target_temperature: float | None = None


@dataclass
class AmplifierPreferences:
    """Last requested amplifier state; the controller does not report on/off."""

    volume: int = DEFAULT_MUSIC_VOLUME
    is_on: bool = False


@dataclass
class SteamPreferences:
    """Temperature (Celsius) and duration used when starting the steamer."""

    target_temperature: float = DEFAULT_STEAM_TEMPERATURE
    duration: int = DEFAULT_STEAM_DURATION


@dataclass
class KohlerKonnectData:
    """Runtime data of one config entry."""

    hub: KohlerControllerHub
    address: str
    title: str
    entry_type: str
    config: ControllerConfig
    valves: dict[int, ValvePreferences] = field(default_factory=dict)
    amplifier: AmplifierPreferences = field(default_factory=AmplifierPreferences)
    steam: SteamPreferences = field(default_factory=SteamPreferences)
    light_levels: dict[int, int] = field(default_factory=dict)


class SubscriberRole(StrEnum):
    """Kind of logical device subscribed to a controller."""

    CONTROLLER = "controller"
    VALVE = "valve"
    OUTLET = "outlet"
    AMPLIFIER = "amplifier"
    STEAMER = "steamer"
    LIGHT = "light"
    PRESET = "preset"


class KnownController(NamedTuple):
    """A controller address with its display name."""

    address: str
    name: str


class ControllerSubscriber(Protocol):
    """Consumer of polled controller state.

    ``on_values`` is optional; the hub only calls it when present.
    """

    subscriber_role: SubscriberRole
    subscriber_name: str

    def on_system_info(self, snapshot: SystemInfoSnapshot) -> None:
        """Handle a new system_info.cgi snapshot."""
