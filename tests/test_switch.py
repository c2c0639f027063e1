"""Tests for the Kohler Konnect switch entities."""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from homeassistant.exceptions import HomeAssistantError

from custom_components.kohler_konnect.const import DOMAIN, ENTRY_TYPE_OUTLETS
from custom_components.kohler_konnect.exceptions import (
    KohlerApiClientCommandRejectedError,
    KohlerApiClientCommunicationError,
)
from custom_components.kohler_konnect.models import (
    CompoundShowerCommand,
    OutletConfig,
    OutletSelector,
    SubscriberRole,
    ValveConfig,
)
from custom_components.kohler_konnect.parser import KohlerParser
from custom_components.kohler_konnect.switch import (
    KohlerMusicSwitch,
    KohlerOutletSwitch,
    KohlerSteamSwitch,
    KohlerValveOutletSwitch,
    KohlerValveSwitch,
    async_setup_entry,
    outlet_device_names,
)

VALVE2_RUNNING = {
    "valve1_Currentstatus": "Off",
    "valve2_Currentstatus": "On",
    "valve2outlet2": True,
    "valve2Setpoint": 38,
}


def _prepare(entity):
    entity.async_write_ha_state = MagicMock()
    return entity


class TestKohlerValveSwitch:
    """Test the valve switch."""

    def test_init(self, kohler_data):
        """Test identity and device of the valve switch."""
        entity = KohlerValveSwitch(kohler_data, kohler_data.config.valves[0])

        assert entity.unique_id == "00:1E:C0:AA:BB:CC_valve1_shower"
        assert entity.subscriber_role is SubscriberRole.VALVE
        assert entity.subscriber_name == "Main Shower"
        assert entity.device_info["via_device"] == ("kohler_konnect", "00:1E:C0:AA:BB:CC")

    def test_is_on(self, kohler_data, system_info_snapshot):
        """Test the running state."""
        entity = _prepare(KohlerValveSwitch(kohler_data, kohler_data.config.valves[0]))
        assert entity.is_on is None

        kohler_data.hub.system_info.return_value = system_info_snapshot
        entity.on_system_info(system_info_snapshot)

        assert entity.is_on is True
        entity.async_write_ha_state.assert_called_once()

    async def test_turn_on_keeps_other_valve(self, kohler_data, mock_hub):
        """Starting valve 1 restates the running valve 2."""
        mock_hub.system_info.return_value = VALVE2_RUNNING
        entity = _prepare(KohlerValveSwitch(kohler_data, kohler_data.config.valves[0]))

        await entity.async_turn_on()

        client = mock_hub.get_client.return_value
        client.async_start_shower.assert_awaited_once_with(
            CompoundShowerCommand(
                valve1_outlets=OutletSelector(frozenset({1, 2, 3})),
                valve1_temp=38.0,
                valve2_outlets=OutletSelector(frozenset({2})),
                valve2_temp=38,
            )
        )
        mock_hub.async_request_extra_poll.assert_called_once_with("10.0.0.5")

    async def test_turn_on_fahrenheit(self, kohler_data, mock_hub):
        """The target temperature is sent in the controller unit."""
        mock_hub.system_info.return_value = {"degree_symbol": "&deg;F"}
        kohler_data.valves[1].target_temperature = 40.0
        entity = _prepare(KohlerValveSwitch(kohler_data, kohler_data.config.valves[0]))

        await entity.async_turn_on()

        command = mock_hub.get_client.return_value.async_start_shower.call_args[0][0]
        assert command.valve1_temp == 104

    async def test_turn_off_only_valve_stops_shower(self, kohler_data, mock_hub):
        """Closing the only running valve sends a full stop."""
        mock_hub.system_info.return_value = {"valve1_Currentstatus": "On"}
        entity = _prepare(KohlerValveSwitch(kohler_data, kohler_data.config.valves[0]))

        await entity.async_turn_off()

        client = mock_hub.get_client.return_value
        client.async_stop_shower.assert_awaited_once()
        client.async_start_shower.assert_not_called()

    async def test_turn_off_keeps_other_valve(self, kohler_data, mock_hub):
        """Closing valve 1 while valve 2 runs leaves valve 2 running."""
        mock_hub.system_info.return_value = {**VALVE2_RUNNING, "valve1_Currentstatus": "On"}
        entity = _prepare(KohlerValveSwitch(kohler_data, kohler_data.config.valves[0]))

        await entity.async_turn_off()

        command = mock_hub.get_client.return_value.async_start_shower.call_args[0][0]
        assert command.valve1_outlets.is_closed
        assert str(command.valve2_outlets) == "2"

    async def test_command_failure(self, kohler_data, mock_hub):
        """Client errors are raised as HomeAssistantError."""
        client = mock_hub.get_client.return_value
        client.async_stop_shower.side_effect = KohlerApiClientCommandRejectedError(
            "status 500"
        )
        entity = _prepare(KohlerValveSwitch(kohler_data, kohler_data.config.valves[0]))

        with pytest.raises(HomeAssistantError):
            await entity.async_turn_off()

        mock_hub.async_request_extra_poll.assert_not_called()

    def test_preferences_follow_running_valve(self, kohler_data, system_info_snapshot):
        """While running, the controller's outlets and setpoint are adopted."""
        entity = _prepare(KohlerValveSwitch(kohler_data, kohler_data.config.valves[0]))

        entity.on_system_info(system_info_snapshot)

        preferences = kohler_data.valves[1]
        assert str(preferences.enabled_outlets) == "13"
        assert preferences.target_temperature == 39.0


class TestKohlerValveOutletSwitch:
    """Test the outlet selection switches of a valve."""

    def test_init(self, kohler_data):
        """Test naming and attributes."""
        valve = kohler_data.config.valves[0]
        entity = KohlerValveOutletSwitch(kohler_data, valve, valve.outlets[1])

        assert entity.name == "Hand Shower 2"
        assert entity.unique_id == "00:1E:C0:AA:BB:CC_valve1_outlet2_enabled"
        assert entity.extra_state_attributes == {"outlet_type": 7, "massage": True}
        assert entity.is_on is True

    async def test_deselect_while_off(self, kohler_data, mock_hub):
        """A stopped valve only remembers the selection."""
        valve = kohler_data.config.valves[0]
        entity = _prepare(KohlerValveOutletSwitch(kohler_data, valve, valve.outlets[1]))

        await entity.async_turn_off()

        assert str(kohler_data.valves[1].enabled_outlets) == "13"
        assert entity.is_on is False
        mock_hub.get_client.return_value.async_start_shower.assert_not_called()
        entity.async_write_ha_state.assert_called_once()

    async def test_select_while_running(self, kohler_data, mock_hub):
        """A running valve gets the new selection right away."""
        mock_hub.system_info.return_value = {"valve1_Currentstatus": "On"}
        kohler_data.valves[1].enabled_outlets = OutletSelector(frozenset({1}))
        valve = kohler_data.config.valves[0]
        entity = _prepare(KohlerValveOutletSwitch(kohler_data, valve, valve.outlets[2]))

        await entity.async_turn_on()

        command = mock_hub.get_client.return_value.async_start_shower.call_args[0][0]
        assert str(command.valve1_outlets) == "13"

    async def test_selection_kept_when_command_fails(self, kohler_data, mock_hub):
        """A refused command leaves the selection unchanged."""
        mock_hub.system_info.return_value = {"valve1_Currentstatus": "On"}
        client = mock_hub.get_client.return_value
        client.async_start_shower.side_effect = KohlerApiClientCommunicationError(
            "reset"
        )
        valve = kohler_data.config.valves[0]
        entity = _prepare(KohlerValveOutletSwitch(kohler_data, valve, valve.outlets[1]))

        with pytest.raises(HomeAssistantError):
            await entity.async_turn_off()

        assert str(kohler_data.valves[1].enabled_outlets) == "123"
        assert entity.is_on is True


class TestKohlerOutletSwitch:
    """Test the individual outlet switches."""

    def test_is_on(self, kohler_data, system_info_snapshot):
        """The state comes from the snapshot flags."""
        outlet = kohler_data.config.valves[0].outlets[2]
        entity = _prepare(KohlerOutletSwitch(kohler_data, outlet, "Zone 1 Body Spray"))
        assert entity.is_on is None

        entity.on_system_info(system_info_snapshot)

        assert entity.is_on is True
        assert entity.subscriber_role is SubscriberRole.OUTLET
        assert entity.subscriber_name == "Zone 1 Body Spray"

    async def test_toggle(self, kohler_data, mock_hub, system_info_snapshot):
        """Opening an outlet keeps the other open outlets."""
        mock_hub.system_info.return_value = system_info_snapshot
        outlet = kohler_data.config.valves[0].outlets[1]
        entity = _prepare(KohlerOutletSwitch(kohler_data, outlet, "Zone 1 Hand Shower"))

        await entity.async_turn_on()

        command = mock_hub.get_client.return_value.async_start_shower.call_args[0][0]
        assert str(command.valve1_outlets) == "123"
        assert command.valve1_temp == 39.0

    async def test_close_last_outlet(self, kohler_data, mock_hub):
        """Closing the last open outlet stops the shower."""
        mock_hub.system_info.return_value = {
            "valve1_Currentstatus": "On",
            "valve1outlet1": True,
        }
        outlet = kohler_data.config.valves[0].outlets[0]
        entity = _prepare(KohlerOutletSwitch(kohler_data, outlet, "Zone 1 Rain Head"))

        await entity.async_turn_off()

        mock_hub.get_client.return_value.async_stop_shower.assert_awaited_once()


class TestAmplifierAndSteam:
    """Test the music and steam switches."""

    async def test_music(self, kohler_data, mock_hub):
        """Music starts at the last volume."""
        kohler_data.amplifier.volume = 35
        entity = _prepare(KohlerMusicSwitch(kohler_data))

        await entity.async_turn_on()
        assert entity.is_on is True
        mock_hub.get_client.return_value.async_music_on.assert_awaited_once_with(35)

        await entity.async_turn_off()
        assert entity.is_on is False

    def test_volume_follows_snapshot(self, kohler_data, system_info_snapshot):
        """The volume is read from system_info."""
        entity = _prepare(KohlerMusicSwitch(kohler_data))

        entity.on_system_info(system_info_snapshot)

        assert kohler_data.amplifier.volume == 40

    async def test_steam(self, kohler_data, mock_hub):
        """The steamer starts with the stored temperature and duration."""
        kohler_data.steam.target_temperature = 44.0
        kohler_data.steam.duration = 20
        entity = _prepare(KohlerSteamSwitch(kohler_data))
        assert entity.is_on is False

        mock_hub.values.return_value = {"steam_running": "1"}
        assert entity.is_on is True

        await entity.async_turn_on()
        mock_hub.get_client.return_value.async_steam_on.assert_awaited_once_with(
            44.0, 20
        )

        await entity.async_turn_off()
        mock_hub.get_client.return_value.async_steam_off.assert_awaited_once()


def test_outlet_device_names():
    """Duplicate outlet names are numbered."""
    valve = ValveConfig(
        number=1,
        name="Shower",
        port_count=3,
        outlets=(
            OutletConfig(1, 1, 12, "Body Spray"),
            OutletConfig(1, 2, 11, "Rain Head"),
            OutletConfig(1, 3, 13, "Body Spray"),
        ),
    )

    names = [name for _, name in outlet_device_names([valve])]

    assert names == ["Zone 1 Body Spray 1", "Zone 1 Rain Head", "Zone 1 Body Spray 2"]


async def test_outlets_entry_skips_default_valve(kohler_data):
    """A controller reporting no valve gets no outlet switches."""
    data = replace(
        kohler_data,
        entry_type=ENTRY_TYPE_OUTLETS,
        config=KohlerParser().parse_controller_config({}, "10.0.0.5"),
    )
    hass = MagicMock()
    hass.data = {DOMAIN: {"entry": data}}
    async_add_entities = MagicMock()

    await async_setup_entry(hass, MagicMock(entry_id="entry"), async_add_entities)

    assert list(async_add_entities.call_args[0][0]) == []
