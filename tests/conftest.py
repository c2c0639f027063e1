import json
import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv
from pytest_socket import enable_socket, socket_allow_hosts
from yarl import URL

from custom_components.kohler_konnect.hub import KohlerControllerHub
from custom_components.kohler_konnect.models import (
    KohlerKonnectData,
    OutletSelector,
    ValvePreferences,
)
from custom_components.kohler_konnect.parser import KohlerParser

load_dotenv()

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    """Load a JSON fixture captured from a controller."""
    return json.loads((FIXTURES / name).read_text(encoding="utf-8"))


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    yield


@pytest.fixture(autouse=True)
def allow_socket_fixture(request):
    """Enable socket for integration tests."""
    if request.node.get_closest_marker("integration"):
        enable_socket()
        hosts = ["127.0.0.1", "localhost", "::1"]
        if address := os.getenv("KOHLER_HOST"):
            hosts.append(URL(f"http://{address}").host or address)
        socket_allow_hosts(hosts, allow_unix_socket=True)


@pytest.fixture
def values_snapshot():
    """values.cgi payload of a two-valve controller with steam and lights."""
    return load_fixture("values.json")


@pytest.fixture
def system_info_snapshot():
    """system_info.cgi payload with valve 1 running outlets 1 and 3."""
    return load_fixture("system_info.json")


@pytest.fixture
def mock_hub():
    """Mock the hub; its client answers every command."""
    hub = MagicMock(spec=KohlerControllerHub)
    hub.get_client.return_value = AsyncMock()
    hub.system_info.return_value = None
    hub.values.return_value = None
    return hub


@pytest.fixture
def kohler_data(mock_hub, values_snapshot):
    """Runtime data of a controller entry built from the values fixture."""
    config = KohlerParser().parse_controller_config(values_snapshot, "10.0.0.5")
    return KohlerKonnectData(
        hub=mock_hub,
        address="10.0.0.5",
        title="Kohler Konnect (10.0.0.5)",
        entry_type="controller",
        config=config,
        valves={
            valve.number: ValvePreferences(
                enabled_outlets=OutletSelector.for_ports(valve.port_count)
            )
            for valve in config.valves
        },
    )


pytest_plugins = "pytest_homeassistant_custom_component"
