"""Number platform for Kohler Konnect."""

from __future__ import annotations

from homeassistant.components.number import (
    NumberDeviceClass,
    NumberEntity,
    NumberMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, UnitOfTemperature, UnitOfTime
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import (
    DOMAIN,
    STEAM_MAX_DURATION,
    STEAM_MAX_TEMPERATURE,
    STEAM_MIN_DURATION,
    STEAM_MIN_TEMPERATURE,
    VALVE_MAX_TEMPERATURE,
    VALVE_MIN_TEMPERATURE,
)
from .entity import KohlerAmplifierEntity, KohlerSteamEntity, KohlerValveEntity
from .models import KohlerKonnectData, ValveConfig


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the number platform."""
    data: KohlerKonnectData = hass.data[DOMAIN][entry.entry_id]

    entities: list[NumberEntity] = [
        KohlerValveTargetTemperatureNumber(data, valve) for valve in data.config.valves
    ]
    entities.append(KohlerMusicVolumeNumber(data))
    if data.config.steam_installed:
        entities.append(KohlerSteamTemperatureNumber(data))
        entities.append(KohlerSteamDurationNumber(data))

    async_add_entities(entities)


class KohlerValveTargetTemperatureNumber(KohlerValveEntity, NumberEntity):
    """Target water temperature of a valve.

    Changes apply immediately while the valve runs and are kept for the
    next start otherwise.
    """

    _attr_device_class = NumberDeviceClass.TEMPERATURE
    _attr_native_unit_of_measurement = UnitOfTemperature.CELSIUS
    _attr_native_min_value = VALVE_MIN_TEMPERATURE
    _attr_native_max_value = VALVE_MAX_TEMPERATURE
    _attr_native_step = 0.5
    _attr_mode = NumberMode.SLIDER
    _attr_name = "Target temperature"

    def __init__(self, data: KohlerKonnectData, valve: ValveConfig) -> None:
        """Initialize."""
        super().__init__(data, valve, key="target_temperature")

    @property
    def native_value(self) -> float:
        """Return the target temperature in Celsius."""
        return self._target_temperature()

    async def async_set_native_value(self, value: float) -> None:
        """Set the target temperature."""
        previous = self.preferences.target_temperature
        self.preferences.target_temperature = value
        try:
            if self.is_running:
                await self._async_apply_outlets(self.preferences.enabled_outlets)
        except HomeAssistantError:
            self.preferences.target_temperature = previous
            raise
        self.async_write_ha_state()


class KohlerMusicVolumeNumber(KohlerAmplifierEntity, NumberEntity):
    """Amplifier volume. Setting it also starts the music."""

    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_native_min_value = 0
    _attr_native_max_value = 100
    _attr_native_step = 1
    _attr_mode = NumberMode.SLIDER
    _attr_icon = "mdi:volume-high"
    _attr_name = "Volume"

    def __init__(self, data: KohlerKonnectData) -> None:
        """Initialize."""
        super().__init__(data, key="volume")

    @property
    def native_value(self) -> int:
        """Return the volume in percent."""
        return self._data.amplifier.volume

    async def async_set_native_value(self, value: float) -> None:
        """Set the volume."""
        volume = round(value)
        await self._async_send(self.client.async_music_on(volume))
        self._data.amplifier.volume = volume
        self._data.amplifier.is_on = True
        self.async_write_ha_state()


class KohlerSteamTemperatureNumber(KohlerSteamEntity, NumberEntity):
    """Steam temperature; resent right away while the steamer runs."""

    _attr_device_class = NumberDeviceClass.TEMPERATURE
    _attr_native_unit_of_measurement = UnitOfTemperature.CELSIUS
    _attr_native_min_value = STEAM_MIN_TEMPERATURE
    _attr_native_max_value = STEAM_MAX_TEMPERATURE
    _attr_native_step = 1
    _attr_name = "Target temperature"

    def __init__(self, data: KohlerKonnectData) -> None:
        """Initialize."""
        super().__init__(data, key="target_temperature")

    @property
    def native_value(self) -> float:
        """Return the steam temperature in Celsius."""
        return self._data.steam.target_temperature

    async def async_set_native_value(self, value: float) -> None:
        """Set the steam temperature."""
        previous = self._data.steam.target_temperature
        self._data.steam.target_temperature = value
        try:
            if self.is_steam_running:
                await self._async_start_steam()
        except HomeAssistantError:
            self._data.steam.target_temperature = previous
            raise
        self.async_write_ha_state()


class KohlerSteamDurationNumber(KohlerSteamEntity, NumberEntity):
    """Steam session length used when the steamer is started."""

    _attr_device_class = NumberDeviceClass.DURATION
    _attr_native_unit_of_measurement = UnitOfTime.MINUTES
    _attr_native_min_value = STEAM_MIN_DURATION
    _attr_native_max_value = STEAM_MAX_DURATION
    _attr_native_step = 1
    _attr_mode = NumberMode.BOX
    _attr_name = "Duration"

    def __init__(self, data: KohlerKonnectData) -> None:
        """Initialize."""
        super().__init__(data, key="duration")

    @property
    def native_value(self) -> int:
        """Return the steam duration in minutes."""
        return self._data.steam.duration

    async def async_set_native_value(self, value: float) -> None:
        """Set the steam duration."""
        self._data.steam.duration = int(value)
        self.async_write_ha_state()
