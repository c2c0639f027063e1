"""Switch platform for Kohler Konnect."""

from __future__ import annotations

from collections import Counter
from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .composer import build_outlet_toggle_command
from .const import DOMAIN, ENTRY_TYPE_OUTLETS
from .entity import (
    KohlerAmplifierEntity,
    KohlerKonnectEntity,
    KohlerSteamEntity,
    KohlerValveEntity,
)
from .models import (
    KohlerKonnectData,
    OutletConfig,
    OutletSelector,
    SubscriberRole,
    ValveConfig,
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the switch platform."""
    data: KohlerKonnectData = hass.data[DOMAIN][entry.entry_id]

    if data.entry_type == ENTRY_TYPE_OUTLETS:
        async_add_entities(
            KohlerOutletSwitch(data, outlet, name)
            for outlet, name in outlet_device_names(
                [valve for valve in data.config.valves if valve.installed]
            )
        )
        return

    entities: list[SwitchEntity] = []
    for valve in data.config.valves:
        entities.append(KohlerValveSwitch(data, valve))
        entities.extend(
            KohlerValveOutletSwitch(data, valve, outlet) for outlet in valve.outlets
        )
    entities.append(KohlerMusicSwitch(data))
    if data.config.steam_installed:
        entities.append(KohlerSteamSwitch(data))

    async_add_entities(entities)


def outlet_device_names(
    valves: list[ValveConfig],
) -> list[tuple[OutletConfig, str]]:
    """Name every outlet "Zone N Type", numbering duplicate names."""
    named = [
        (outlet, f"Zone {valve.number} {outlet.type_name}")
        for valve in valves
        for outlet in valve.outlets
    ]
    totals = Counter(name for _, name in named)
    seen: Counter[str] = Counter()
    result = []
    for outlet, name in named:
        if totals[name] > 1:
            seen[name] += 1
            name = f"{name} {seen[name]}"
        result.append((outlet, name))
    return result


class KohlerValveSwitch(KohlerValveEntity, SwitchEntity):
    """Start or stop one valve with its enabled outlets."""

    _attr_name = None
    _attr_icon = "mdi:shower"

    def __init__(self, data: KohlerKonnectData, valve: ValveConfig) -> None:
        """Initialize."""
        super().__init__(data, valve, key="shower")

    @property
    def is_on(self) -> bool | None:
        """Return true if the valve is running."""
        if self._system_info is None:
            return None
        return self.is_running

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Open the enabled outlets at the target temperature."""
        outlets = self.preferences.enabled_outlets
        if outlets.is_closed:
            outlets = OutletSelector.for_ports(self._valve.port_count)
        await self._async_apply_outlets(outlets)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Close the valve, leaving the other valve running."""
        await self._async_apply_outlets(OutletSelector())


class KohlerValveOutletSwitch(KohlerValveEntity, SwitchEntity):
    """Select whether one outlet opens with its valve.

    While the valve is off this only changes the selection; while it runs
    the new selection is sent right away.
    """

    _attr_icon = "mdi:shower-head"

    def __init__(
        self, data: KohlerKonnectData, valve: ValveConfig, outlet: OutletConfig
    ) -> None:
        """Initialize."""
        super().__init__(data, valve, key=f"outlet{outlet.number}_enabled")
        self._outlet = outlet
        self._attr_name = f"{outlet.type_name} {outlet.number}"
        self._attr_extra_state_attributes = {
            "outlet_type": outlet.type_number,
            "massage": outlet.has_massage,
        }

    @property
    def is_on(self) -> bool:
        """Return true if the outlet is selected."""
        return self._outlet.number in self.preferences.enabled_outlets

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Select the outlet."""
        await self._async_select(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Deselect the outlet."""
        await self._async_select(False)

    async def _async_select(self, selected: bool) -> None:
        outlets = self.preferences.enabled_outlets.with_outlet(
            self._outlet.number, selected
        )
        if self.is_running:
            await self._async_apply_outlets(outlets)
        self.preferences.enabled_outlets = outlets
        self.async_write_ha_state()


class KohlerOutletSwitch(KohlerKonnectEntity, SwitchEntity):
    """One physical outlet, switched on its own.

    Both valves' outlets are rebuilt from the last snapshot with only this
    outlet flipped. When nothing is left open the shower is stopped.
    """

    subscriber_role = SubscriberRole.OUTLET
    _attr_name = None
    _attr_icon = "mdi:shower-head"

    def __init__(
        self, data: KohlerKonnectData, outlet: OutletConfig, device_name: str
    ) -> None:
        """Initialize."""
        super().__init__(
            data,
            key=f"valve{outlet.valve}_outlet{outlet.number}",
            device_key=f"valve{outlet.valve}_outlet{outlet.number}",
            device_name=device_name,
        )
        self._outlet = outlet

    @property
    def is_on(self) -> bool | None:
        """Return true if the outlet is open."""
        if self._system_info is None:
            return None
        key = f"valve{self._outlet.valve}outlet{self._outlet.number}"
        return bool(self._system_info.get(key))

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Open the outlet."""
        await self._async_toggle(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Close the outlet."""
        await self._async_toggle(False)

    async def _async_toggle(self, is_open: bool) -> None:
        command = build_outlet_toggle_command(
            self._outlet.valve, self._outlet.number, is_open, self.snapshot
        )
        if command is None:
            await self._async_send(self.client.async_stop_shower())
        else:
            await self._async_send(self.client.async_start_shower(command))


class KohlerMusicSwitch(KohlerAmplifierEntity, SwitchEntity):
    """Amplifier music on/off."""

    _attr_name = "Music"
    _attr_icon = "mdi:music"
    _attr_assumed_state = True

    def __init__(self, data: KohlerKonnectData) -> None:
        """Initialize."""
        super().__init__(data, key="music")

    @property
    def is_on(self) -> bool:
        """Return true if music was last turned on."""
        return self._data.amplifier.is_on

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Start music at the last volume."""
        await self._async_send(self.client.async_music_on(self._data.amplifier.volume))
        self._data.amplifier.is_on = True
        self.async_write_ha_state()

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Stop music."""
        await self._async_send(self.client.async_music_off())
        self._data.amplifier.is_on = False
        self.async_write_ha_state()


class KohlerSteamSwitch(KohlerSteamEntity, SwitchEntity):
    """Steamer on/off."""

    _attr_name = None
    _attr_icon = "mdi:weather-fog"

    def __init__(self, data: KohlerKonnectData) -> None:
        """Initialize."""
        super().__init__(data, key="steam")

    @property
    def is_on(self) -> bool:
        """Return true if the steamer is running."""
        return self.is_steam_running

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Start the steamer."""
        await self._async_start_steam()

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Stop the steamer."""
        await self._async_send(self.client.async_steam_off())
