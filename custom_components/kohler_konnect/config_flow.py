"""Config flow for Kohler Konnect integration."""

from __future__ import annotations

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.const import CONF_HOST
from homeassistant.helpers.selector import (
    SelectOptionDict,
    SelectSelector,
    SelectSelectorConfig,
    SelectSelectorMode,
)

from .api import KohlerApiClient
from .const import (
    CONF_CONTROLLER,
    CONF_ENTRY_TYPE,
    DOMAIN,
    ENTRY_TYPE_CONTROLLER,
    ENTRY_TYPE_OUTLETS,
    LOGGER,
    NAME,
)
from .exceptions import KohlerApiClientCommunicationError, KohlerApiClientError
from .hub import async_get_hub
from .parser import KohlerParser


def _unique_id(identifier: str, entry_type: str) -> str:
    if entry_type == ENTRY_TYPE_OUTLETS:
        return f"{identifier}_outlets"
    return identifier


class KohlerKonnectFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Config flow for Kohler Konnect."""

    VERSION = 1

    async def async_step_user(
        self,
        user_input: dict | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Handle a flow initialized by the user."""
        return self.async_show_menu(
            step_id="user",
            menu_options=[ENTRY_TYPE_CONTROLLER, ENTRY_TYPE_OUTLETS],
        )

    async def async_step_controller(
        self,
        user_input: dict | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Add a controller with its valves, steamer, lights and presets."""
        errors: dict[str, str] = {}

        if user_input is not None:
            host = user_input[CONF_HOST].strip()
            identifier = await self._async_probe(host, errors)
            if identifier is not None:
                await self.async_set_unique_id(
                    _unique_id(identifier, ENTRY_TYPE_CONTROLLER)
                )
                self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=f"{NAME} ({host})",
                    data={CONF_HOST: host, CONF_ENTRY_TYPE: ENTRY_TYPE_CONTROLLER},
                )

        return self.async_show_form(
            step_id="controller",
            data_schema=vol.Schema({vol.Required(CONF_HOST): str}),
            errors=errors,
        )

    async def async_step_outlets(
        self,
        user_input: dict | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Add one switch per outlet of a controller."""
        errors: dict[str, str] = {}

        known = async_get_hub(self.hass).list_known_controllers()
        if user_input is not None:
            host = user_input[CONF_CONTROLLER].strip()
            identifier = await self._async_probe(host, errors)
            if identifier is not None:
                await self.async_set_unique_id(
                    _unique_id(identifier, ENTRY_TYPE_OUTLETS)
                )
                self._abort_if_unique_id_configured()
                name = next(
                    (c.name for c in known if c.address == host),
                    f"{NAME} ({host})",
                )
                return self.async_create_entry(
                    title=f"{name} outlets",
                    data={CONF_HOST: host, CONF_ENTRY_TYPE: ENTRY_TYPE_OUTLETS},
                )

        return self.async_show_form(
            step_id="outlets",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_CONTROLLER): SelectSelector(
                        SelectSelectorConfig(
                            options=[
                                SelectOptionDict(
                                    value=controller.address,
                                    label=f"{controller.name} ({controller.address})",
                                )
                                for controller in known
                            ],
                            custom_value=True,
                            mode=SelectSelectorMode.DROPDOWN,
                        )
                    )
                }
            ),
            errors=errors,
        )

    async def async_step_reconfigure(
        self,
        user_input: dict | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Move an entry to a new controller address."""
        errors: dict[str, str] = {}
        entry = self._get_reconfigure_entry()

        if user_input is not None:
            host = user_input[CONF_HOST].strip()
            identifier = await self._async_probe(host, errors)
            if identifier is not None:
                entry_type = entry.data.get(CONF_ENTRY_TYPE, ENTRY_TYPE_CONTROLLER)
                await self.async_set_unique_id(_unique_id(identifier, entry_type))
                self._abort_if_unique_id_mismatch(reason="wrong_controller")
                return self.async_update_reload_and_abort(
                    entry, data_updates={CONF_HOST: host}
                )

        return self.async_show_form(
            step_id="reconfigure",
            data_schema=vol.Schema(
                {vol.Required(CONF_HOST, default=entry.data[CONF_HOST]): str}
            ),
            errors=errors,
        )

    async def _async_probe(self, host: str, errors: dict[str, str]) -> str | None:
        """Read values.cgi from ``host`` and return the controller identifier."""
        try:
            values = await KohlerApiClient(host).async_read_values()
        except KohlerApiClientCommunicationError:
            LOGGER.exception("Communication error during config flow")
            errors["base"] = "cannot_connect"
        except KohlerApiClientError:
            LOGGER.exception("Unknown error during config flow")
            errors["base"] = "unknown"
        else:
            return KohlerParser().parse_controller_config(values, host).identifier
        return None
