"""Button platform for Kohler Konnect."""

from __future__ import annotations

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .entity import KohlerKonnectEntity
from .models import KohlerKonnectData, SubscriberRole, UserPreset


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the button platform."""
    data: KohlerKonnectData = hass.data[DOMAIN][entry.entry_id]

    entities: list[ButtonEntity] = [
        KohlerPresetButton(data, preset) for preset in data.config.presets
    ]
    entities.append(KohlerStopAllButton(data))
    async_add_entities(entities)


class KohlerPresetButton(KohlerKonnectEntity, ButtonEntity):
    """Start a user preset stored on the controller."""

    subscriber_role = SubscriberRole.PRESET
    _attr_icon = "mdi:account-play"

    def __init__(self, data: KohlerKonnectData, preset: UserPreset) -> None:
        """Initialize."""
        super().__init__(
            data, key=f"preset{preset.id}", device_key="presets", device_name="Presets"
        )
        self._preset = preset
        self._attr_name = preset.name

    async def async_press(self) -> None:
        """Start the preset."""
        await self._async_send(self.client.async_start_preset(self._preset.id))


class KohlerStopAllButton(KohlerKonnectEntity, ButtonEntity):
    """Stop both valves and the steamer."""

    _attr_name = "Stop all"
    _attr_icon = "mdi:stop-circle"

    def __init__(self, data: KohlerKonnectData) -> None:
        """Initialize."""
        super().__init__(data, key="stop_all")

    async def async_press(self) -> None:
        """Stop the shower, then the steamer."""
        await self._async_send(self.client.async_stop_shower())
        await self._async_send(self.client.async_steam_off())
