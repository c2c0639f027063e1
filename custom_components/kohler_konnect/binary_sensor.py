"""Binary sensor platform for Kohler Konnect."""

from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .composer import is_valve_running
from .const import DOMAIN, VALVES
from .entity import KohlerKonnectEntity
from .models import KohlerKonnectData


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the binary_sensor platform."""
    data: KohlerKonnectData = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([KohlerShowerRunningBinarySensor(data)])


class KohlerShowerRunningBinarySensor(KohlerKonnectEntity, BinarySensorEntity):
    """On while either valve is running.

    This is the controller device's entity, which makes the controller
    show up in the hub's list of known controllers.
    """

    _attr_device_class = BinarySensorDeviceClass.RUNNING
    _attr_name = "Shower running"
    _attr_icon = "mdi:shower-head"

    def __init__(self, data: KohlerKonnectData) -> None:
        """Initialize."""
        super().__init__(data, key="shower_running")

    @property
    def is_on(self) -> bool | None:
        """Return true if any valve is running."""
        if self._system_info is None:
            return None
        return any(is_valve_running(valve, self._system_info) for valve in VALVES)
