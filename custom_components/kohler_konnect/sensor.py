"""Sensor platform for Kohler Konnect."""

from __future__ import annotations

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .entity import KohlerValveEntity
from .models import KohlerKonnectData, ValveConfig
from .parser import KohlerParser


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the sensor platform."""
    data: KohlerKonnectData = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        KohlerValveTemperatureSensor(data, valve) for valve in data.config.valves
    )


class KohlerValveTemperatureSensor(KohlerValveEntity, SensorEntity):
    """Current water temperature of a valve."""

    _attr_device_class = SensorDeviceClass.TEMPERATURE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfTemperature.CELSIUS
    _attr_name = "Water temperature"

    def __init__(self, data: KohlerKonnectData, valve: ValveConfig) -> None:
        """Initialize."""
        super().__init__(data, valve, key="temperature")

    @property
    def native_value(self) -> float | None:
        """Return the water temperature in Celsius."""
        if self._system_info is None:
            return None
        return KohlerParser.to_ha_temperature(
            self._system_info.get(f"valve{self._valve.number}Temp"),
            self._system_info,
        )
