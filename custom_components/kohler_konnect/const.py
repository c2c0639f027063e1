"""Constants for the Kohler Konnect integration."""

from datetime import timedelta
from logging import Logger, getLogger

from homeassistant.const import Platform

LOGGER: Logger = getLogger(__package__)

DOMAIN = "kohler_konnect"
NAME = "Kohler Konnect"
MANUFACTURER = "Kohler"
MODEL = "DTV+"
VERSION = "1.0.0"

CONF_ENTRY_TYPE = "entry_type"
CONF_CONTROLLER = "controller"

ENTRY_TYPE_CONTROLLER = "controller"
ENTRY_TYPE_OUTLETS = "outlets"

DATA_HUB = "hub"

CONTROLLER_PLATFORMS: list[Platform] = [
    Platform.BINARY_SENSOR,
    Platform.BUTTON,
    Platform.LIGHT,
    Platform.NUMBER,
    Platform.SENSOR,
    Platform.SWITCH,
]
OUTLET_PLATFORMS: list[Platform] = [Platform.SWITCH]

# One request per interval per address, shared by every subscriber
STATUS_POLL_INTERVAL = timedelta(seconds=30)
CONFIG_POLL_INTERVAL = timedelta(minutes=5)
COMMAND_POLL_DELAY = 2  # seconds

TIMEOUT_INFO = 5  # seconds
TIMEOUT_COMMAND = 10  # seconds

DEFAULT_PORT = 80

PATH_VALUES = "values.cgi"
PATH_SYSTEM_INFO = "system_info.cgi"
PATH_QUICK_SHOWER = "quick_shower.cgi"
PATH_STOP_SHOWER = "stop_shower.cgi"
PATH_START_USER = "start_user.cgi"
PATH_STEAM_ON = "steam_on.cgi"
PATH_STEAM_OFF = "steam_off.cgi"
PATH_MUSIC_ON = "music_on.cgi"
PATH_MUSIC_OFF = "music_off.cgi"
PATH_LIGHT_ON = "light_on.cgi"
PATH_LIGHT_OFF = "light_off.cgi"

VALVES = (1, 2)
MAX_OUTLETS = 6
MAX_PRESETS = 6
LIGHT_ZONES = (1, 2, 3)

# Wire value for "this side of the compound command is untouched"
CLOSED_OUTLETS = "0"
UNTOUCHED_TEMPERATURE = 100

STATUS_ON = "On"
LIGHTING_CONNECTED = "conn"

DEFAULT_VALVE_TEMPERATURE = 38.0
DEFAULT_STEAM_TEMPERATURE = 43.0
DEFAULT_STEAM_DURATION = 10
DEFAULT_MUSIC_VOLUME = 50

VALVE_MIN_TEMPERATURE = 30.0
VALVE_MAX_TEMPERATURE = 45.0
STEAM_MIN_TEMPERATURE = 35.0
STEAM_MAX_TEMPERATURE = 48.0
STEAM_MIN_DURATION = 1
STEAM_MAX_DURATION = 60

ORDINALS = ("", "one", "two", "three", "four", "five", "six")

# Outlet icon names indexed 0-23, matching the controller's icon grid.
OUTLET_NAMES = (
    "Outlet",
    "Shower Head",
    "Shower Head",
    "Shower Head",
    "Shower Head",
    "Shower Head",
    "Shower Head",
    "Hand Shower",
    "Hand Shower",
    "Tub Spout",
    "Tub Filler",
    "Rain Head",
    "Body Spray",
    "Body Spray",
    "Body Spray",
    "Body Spray",
    "Body Spray Panel",
    "Body Spray Panel",
    "Multi Spray",
    "Rain Panel",
    "Spray Panel",
    "Spray Panel",
    "WaterTile",
    "Real Rain",
)

ATTRIBUTION = "Data provided by the Kohler DTV+ controller"
