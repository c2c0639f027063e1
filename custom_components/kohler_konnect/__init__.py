"""Kohler Konnect integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from .const import (
    CONF_ENTRY_TYPE,
    CONTROLLER_PLATFORMS,
    DATA_HUB,
    DOMAIN,
    ENTRY_TYPE_CONTROLLER,
    ENTRY_TYPE_OUTLETS,
    LOGGER,
    OUTLET_PLATFORMS,
)
from .exceptions import KohlerApiClientError
from .hub import async_get_hub
from .models import KohlerKonnectData, OutletSelector, ValvePreferences
from .parser import KohlerParser


def _platforms(entry: ConfigEntry) -> list:
    if entry.data.get(CONF_ENTRY_TYPE) == ENTRY_TYPE_OUTLETS:
        return OUTLET_PLATFORMS
    return CONTROLLER_PLATFORMS


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Kohler Konnect from a config entry."""
    hub = async_get_hub(hass)
    address = entry.data[CONF_HOST]

    try:
        values = await hub.get_client(address).async_read_values()
    except KohlerApiClientError as exception:
        raise ConfigEntryNotReady(
            f"Unable to read configuration from {address}: {exception}"
        ) from exception

    config = KohlerParser().parse_controller_config(values, address)
    data = KohlerKonnectData(
        hub=hub,
        address=address,
        title=entry.title,
        entry_type=entry.data.get(CONF_ENTRY_TYPE, ENTRY_TYPE_CONTROLLER),
        config=config,
        valves={
            valve.number: ValvePreferences(
                enabled_outlets=OutletSelector.for_ports(valve.port_count)
            )
            for valve in config.valves
        },
    )
    if config.default_steam_temperature is not None:
        data.steam.target_temperature = config.default_steam_temperature

    hass.data[DOMAIN][entry.entry_id] = data
    LOGGER.debug(
        "Controller %s at %s: %d valve(s), steam=%s, light zones=%d",
        config.identifier,
        address,
        len(config.valves),
        config.steam_installed,
        len(config.light_zones),
    )

    await hass.config_entries.async_forward_entry_setups(entry, _platforms(entry))

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    if unload_ok := await hass.config_entries.async_unload_platforms(
        entry, _platforms(entry)
    ):
        domain_data = hass.data[DOMAIN]
        domain_data.pop(entry.entry_id)
        # Only the hub is left once the last entry is gone
        if set(domain_data) == {DATA_HUB}:
            domain_data.pop(DATA_HUB).async_shutdown()
            hass.data.pop(DOMAIN)

    return unload_ok
