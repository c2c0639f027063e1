"""Tests for the Kohler Konnect light entities."""

from unittest.mock import MagicMock

from homeassistant.components.light import ATTR_BRIGHTNESS

from custom_components.kohler_konnect.light import KohlerLightZone
from custom_components.kohler_konnect.models import SubscriberRole


def _light(kohler_data, index=0):
    entity = KohlerLightZone(kohler_data, kohler_data.config.light_zones[index])
    entity.async_write_ha_state = MagicMock()
    return entity


def test_init(kohler_data):
    """Test the light zone device."""
    entity = _light(kohler_data)

    assert entity.unique_id == "00:1E:C0:AA:BB:CC_light1"
    assert entity.subscriber_role is SubscriberRole.LIGHT
    assert entity.subscriber_name == "Ceiling"
    assert entity.is_on is False
    assert entity.brightness is None


async def test_turn_on_full(kohler_data, mock_hub):
    """Turning on without brightness uses 100%."""
    entity = _light(kohler_data)

    await entity.async_turn_on()

    mock_hub.get_client.return_value.async_light_on.assert_awaited_once_with(1, 100)
    assert entity.is_on is True
    assert entity.brightness == 255


async def test_turn_on_brightness(kohler_data, mock_hub):
    """Brightness is sent as a 1-100 level."""
    entity = _light(kohler_data, 1)

    await entity.async_turn_on(**{ATTR_BRIGHTNESS: 128})

    level = mock_hub.get_client.return_value.async_light_on.call_args[0][1]
    assert 50 <= level <= 51
    assert kohler_data.light_levels[2] == level


async def test_turn_off(kohler_data, mock_hub):
    """Turning off sends the zone."""
    entity = _light(kohler_data, 2)
    kohler_data.light_levels[3] = 80

    await entity.async_turn_off()

    mock_hub.get_client.return_value.async_light_off.assert_awaited_once_with(3)
    assert entity.is_on is False
