"""KohlerKonnectEntity classes."""

from __future__ import annotations

from collections.abc import Awaitable

from homeassistant.core import callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity

from .api import KohlerApiClient
from .composer import (
    OutletRule,
    build_close_command,
    build_shower_command,
    current_outlets,
    is_valve_running,
)
from .const import (
    ATTRIBUTION,
    DEFAULT_VALVE_TEMPERATURE,
    DOMAIN,
    ENTRY_TYPE_CONTROLLER,
    MANUFACTURER,
    MODEL,
    VERSION,
)
from .exceptions import KohlerApiClientError
from .hub import KohlerControllerHub
from .models import (
    KohlerKonnectData,
    OutletSelector,
    SubscriberRole,
    SystemInfoSnapshot,
    ValveConfig,
    ValvePreferences,
    ValuesSnapshot,
)
from .parser import KohlerParser


class KohlerKonnectEntity(Entity):
    """Base entity; subscribes to its controller while added to hass."""

    _attr_attribution = ATTRIBUTION
    _attr_has_entity_name = True
    _attr_should_poll = False

    subscriber_role = SubscriberRole.CONTROLLER

    def __init__(
        self,
        data: KohlerKonnectData,
        key: str,
        device_key: str | None = None,
        device_name: str | None = None,
    ) -> None:
        """Initialize."""
        self._data = data
        self._system_info: SystemInfoSnapshot | None = None
        identifier = data.config.identifier
        self._attr_unique_id = f"{identifier}_{key}"

        if device_key is None:
            self.subscriber_name = data.title
            self._attr_device_info = DeviceInfo(
                identifiers={(DOMAIN, identifier)},
                name=data.title,
                manufacturer=MANUFACTURER,
                model=MODEL,
                sw_version=VERSION,
            )
        else:
            self.subscriber_name = device_name or device_key
            self._attr_device_info = DeviceInfo(
                identifiers={(DOMAIN, f"{identifier}_{device_key}")},
                name=self.subscriber_name,
                manufacturer=MANUFACTURER,
                model=MODEL,
            )
            if data.entry_type == ENTRY_TYPE_CONTROLLER:
                self._attr_device_info["via_device"] = (DOMAIN, identifier)

    @property
    def hub(self) -> KohlerControllerHub:
        """Return the shared controller hub."""
        return self._data.hub

    @property
    def address(self) -> str:
        """Return the controller address."""
        return self._data.address

    @property
    def client(self) -> KohlerApiClient:
        """Return the API client for the controller."""
        return self.hub.get_client(self.address)

    @property
    def snapshot(self) -> SystemInfoSnapshot | None:
        """Return the hub's latest system_info snapshot."""
        return self.hub.system_info(self.address)

    async def async_added_to_hass(self) -> None:
        """Subscribe to controller updates."""
        await super().async_added_to_hass()
        self.async_on_remove(self.hub.async_subscribe(self.address, self))

    @callback
    def on_system_info(self, snapshot: SystemInfoSnapshot) -> None:
        """Handle a new system_info snapshot from the hub."""
        self._system_info = snapshot
        self._handle_system_info(snapshot)
        self.async_write_ha_state()

    def _handle_system_info(self, snapshot: SystemInfoSnapshot) -> None:
        """Update local state from a snapshot before the state is written."""

    async def _async_send(self, command: Awaitable[str]) -> None:
        """Await a controller command and schedule a follow-up poll.

        Client errors are raised as HomeAssistantError.
        """
        try:
            await command
        except KohlerApiClientError as exception:
            raise HomeAssistantError(
                f"Command to {self.address} failed: {exception}"
            ) from exception
        self.hub.async_request_extra_poll(self.address)


class KohlerValveEntity(KohlerKonnectEntity):
    """Entity belonging to one valve (shower zone)."""

    subscriber_role = SubscriberRole.VALVE

    def __init__(self, data: KohlerKonnectData, valve: ValveConfig, key: str) -> None:
        """Initialize."""
        super().__init__(
            data,
            key=f"valve{valve.number}_{key}",
            device_key=f"valve{valve.number}",
            device_name=valve.name,
        )
        self._valve = valve

    @property
    def preferences(self) -> ValvePreferences:
        """Return the shared preferences of this valve."""
        return self._data.valves[self._valve.number]

    @property
    def is_running(self) -> bool:
        """Return True while the controller reports the valve running."""
        return is_valve_running(self._valve.number, self.snapshot)

    def _handle_system_info(self, snapshot: SystemInfoSnapshot) -> None:
        # While running, the controller is the source of truth
        number = self._valve.number
        if not is_valve_running(number, snapshot):
            return
        outlets = current_outlets(number, snapshot)
        if not outlets.is_closed:
            self.preferences.enabled_outlets = outlets
        temperature = KohlerParser.to_ha_temperature(
            snapshot.get(f"valve{number}Setpoint"), snapshot
        )
        if temperature is not None:
            self.preferences.target_temperature = temperature

    def _target_temperature(self) -> float:
        """Return the target temperature in Celsius."""
        if self.preferences.target_temperature is not None:
            return self.preferences.target_temperature
        snapshot = self.snapshot or {}
        temperature = KohlerParser.to_ha_temperature(
            snapshot.get(f"valve{self._valve.number}Setpoint"), snapshot
        )
        return temperature or DEFAULT_VALVE_TEMPERATURE

    async def _async_apply_outlets(self, outlets: OutletSelector) -> None:
        """Run this valve with ``outlets``, keeping the other valve as it is."""
        snapshot = self.snapshot
        number = self._valve.number

        if outlets.is_closed:
            command = build_close_command(number, snapshot)
            if command is None:
                await self._async_send(self.client.async_stop_shower())
                return
        else:
            command = build_shower_command(
                number,
                outlets,
                KohlerParser.from_ha_temperature(self._target_temperature(), snapshot),
                snapshot,
                OutletRule.RUNNING_ONLY,
            )
        await self._async_send(self.client.async_start_shower(command))


class KohlerAmplifierEntity(KohlerKonnectEntity):
    """Entity of the amplifier."""

    subscriber_role = SubscriberRole.AMPLIFIER

    def __init__(self, data: KohlerKonnectData, key: str) -> None:
        """Initialize."""
        super().__init__(
            data, key=f"amplifier_{key}", device_key="amplifier", device_name="Amplifier"
        )

    def _handle_system_info(self, snapshot: SystemInfoSnapshot) -> None:
        volume = KohlerParser.parse_volume(snapshot.get("volStatus"))
        if volume is not None:
            self._data.amplifier.volume = volume


class KohlerSteamEntity(KohlerKonnectEntity):
    """Entity of the steamer; its running state comes from values.cgi."""

    subscriber_role = SubscriberRole.STEAMER

    def __init__(self, data: KohlerKonnectData, key: str) -> None:
        """Initialize."""
        super().__init__(
            data, key=f"steam_{key}", device_key="steamer", device_name="Steamer"
        )

    @property
    def is_steam_running(self) -> bool:
        """Return True while values.cgi reports the steamer running."""
        return KohlerParser.is_steam_running(self.hub.values(self.address))

    @callback
    def on_values(self, snapshot: ValuesSnapshot) -> None:
        """Handle a new values snapshot from the hub."""
        self.async_write_ha_state()

    async def _async_start_steam(self) -> None:
        steam = self._data.steam
        await self._async_send(
            self.client.async_steam_on(
                KohlerParser.from_ha_temperature(
                    steam.target_temperature, self.snapshot
                ),
                steam.duration,
            )
        )
