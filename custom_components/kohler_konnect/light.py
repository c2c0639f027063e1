"""Light platform for Kohler Konnect."""

from __future__ import annotations

import math
from typing import Any

from homeassistant.components.light import ATTR_BRIGHTNESS, ColorMode, LightEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.util.color import brightness_to_value, value_to_brightness

from .const import DOMAIN
from .entity import KohlerKonnectEntity
from .models import KohlerKonnectData, LightZoneConfig, SubscriberRole

BRIGHTNESS_SCALE = (1, 100)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the light platform."""
    data: KohlerKonnectData = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(KohlerLightZone(data, zone) for zone in data.config.light_zones)


class KohlerLightZone(KohlerKonnectEntity, LightEntity):
    """One zone of the lighting module.

    The controller does not report light state, so the last level sent is
    shown instead.
    """

    subscriber_role = SubscriberRole.LIGHT
    _attr_name = None
    _attr_assumed_state = True
    _attr_color_mode = ColorMode.BRIGHTNESS
    _attr_supported_color_modes = {ColorMode.BRIGHTNESS}

    def __init__(self, data: KohlerKonnectData, zone: LightZoneConfig) -> None:
        """Initialize."""
        super().__init__(
            data,
            key=f"light{zone.zone}",
            device_key=f"light{zone.zone}",
            device_name=zone.name,
        )
        self._zone = zone.zone

    @property
    def _level(self) -> int:
        return self._data.light_levels.get(self._zone, 0)

    @property
    def is_on(self) -> bool:
        """Return true if the zone was last turned on."""
        return self._level > 0

    @property
    def brightness(self) -> int | None:
        """Return the brightness of the zone."""
        if not self.is_on:
            return None
        return value_to_brightness(BRIGHTNESS_SCALE, self._level)

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn the zone on."""
        level = 100
        if ATTR_BRIGHTNESS in kwargs:
            value = brightness_to_value(BRIGHTNESS_SCALE, kwargs[ATTR_BRIGHTNESS])
            level = max(1, math.ceil(value))
        await self._async_send(self.client.async_light_on(self._zone, level))
        self._data.light_levels[self._zone] = level
        self.async_write_ha_state()

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn the zone off."""
        await self._async_send(self.client.async_light_off(self._zone))
        self._data.light_levels[self._zone] = 0
        self.async_write_ha_state()
