"""Shared polling hub for Kohler DTV+ controllers.

One hub serves every config entry. For each controller address it keeps one
API client, one pair of polling timers and the last snapshots, and fans new
snapshots out to the subscribed entities. Polling runs only while at least
one entity is subscribed to the address.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import async_call_later, async_track_time_interval

from .api import KohlerApiClient
from .const import (
    COMMAND_POLL_DELAY,
    CONFIG_POLL_INTERVAL,
    DATA_HUB,
    DOMAIN,
    LOGGER,
    STATUS_POLL_INTERVAL,
)
from .exceptions import KohlerApiClientError
from .models import (
    ControllerSubscriber,
    KnownController,
    SubscriberRole,
    SystemInfoSnapshot,
    ValuesSnapshot,
)


@dataclass
class ControllerState:
    """Everything the hub tracks for one controller address."""

    client: KohlerApiClient
    subscribers: list[ControllerSubscriber] = field(default_factory=list)
    system_info: SystemInfoSnapshot | None = None
    values: ValuesSnapshot | None = None
    cancel_status_poll: CALLBACK_TYPE | None = None
    cancel_config_poll: CALLBACK_TYPE | None = None
    # Set while a command-triggered poll is pending; doubles as the debounce flag
    cancel_extra_poll: CALLBACK_TYPE | None = None
    tasks: set[asyncio.Task] = field(default_factory=set)
    status_issued: int = 0
    status_applied: int = 0
    config_issued: int = 0
    config_applied: int = 0


class KohlerControllerHub:
    """Owns per-address polling, snapshots and subscribers."""

    def __init__(
        self,
        hass: HomeAssistant,
        client_factory: Callable[[str], KohlerApiClient] | None = None,
    ) -> None:
        """Initialize."""
        self._hass = hass
        self._client_factory = client_factory or KohlerApiClient
        self._clients: dict[str, KohlerApiClient] = {}
        self._controllers: dict[str, ControllerState] = {}

    def get_client(self, address: str) -> KohlerApiClient:
        """Return the API client for ``address``, creating it once."""
        if address not in self._clients:
            self._clients[address] = self._client_factory(address)
        return self._clients[address]

    def system_info(self, address: str) -> SystemInfoSnapshot | None:
        """Return the last system_info.cgi snapshot for ``address``."""
        if state := self._controllers.get(address):
            return state.system_info
        return None

    def values(self, address: str) -> ValuesSnapshot | None:
        """Return the last values.cgi snapshot for ``address``."""
        if state := self._controllers.get(address):
            return state.values
        return None

    def is_polling(self, address: str) -> bool:
        """Return True while ``address`` has polling timers."""
        state = self._controllers.get(address)
        return state is not None and state.cancel_status_poll is not None

    @callback
    def async_subscribe(
        self, address: str, subscriber: ControllerSubscriber
    ) -> CALLBACK_TYPE:
        """Subscribe to snapshots of ``address``.

        The first subscriber starts polling. Cached snapshots are pushed to
        the new subscriber right away. Returns a callback that unsubscribes.
        """
        state = self._controllers.get(address)
        if state is None:
            state = ControllerState(client=self.get_client(address))
            self._controllers[address] = state

        @callback
        def _unsubscribe() -> None:
            self.async_unsubscribe(address, subscriber)

        if subscriber in state.subscribers:
            return _unsubscribe
        state.subscribers.append(subscriber)

        if state.system_info is not None:
            self._deliver(subscriber, "on_system_info", state.system_info)
        if state.values is not None:
            self._deliver(subscriber, "on_values", state.values)

        if len(state.subscribers) == 1:
            self._start_polling(address, state)

        return _unsubscribe

    @callback
    def async_unsubscribe(self, address: str, subscriber: ControllerSubscriber) -> None:
        """Remove a subscriber; the last one stops polling and drops the cache."""
        state = self._controllers.get(address)
        if state is None or subscriber not in state.subscribers:
            return
        state.subscribers.remove(subscriber)
        if not state.subscribers:
            self._teardown(address, state)

    @callback
    def async_request_extra_poll(self, address: str) -> None:
        """Poll status once, shortly after a command.

        Calls made while a poll is already pending are ignored, so any
        number of commands in the window produce a single poll.
        """
        state = self._controllers.get(address)
        if state is None or not state.subscribers:
            return
        if state.cancel_extra_poll is not None:
            return

        @callback
        def _handle_extra_poll(_: datetime) -> None:
            state.cancel_extra_poll = None
            self._schedule(state, self._async_poll_status(address, state))

        state.cancel_extra_poll = async_call_later(
            self._hass, COMMAND_POLL_DELAY, _handle_extra_poll
        )

    def list_known_controllers(self) -> list[KnownController]:
        """Return the addresses that have a subscribed controller device."""
        known: list[KnownController] = []
        for address, state in self._controllers.items():
            for subscriber in state.subscribers:
                if subscriber.subscriber_role is SubscriberRole.CONTROLLER:
                    known.append(KnownController(address, subscriber.subscriber_name))
                    break
        return known

    @callback
    def async_shutdown(self) -> None:
        """Stop polling every address."""
        for address, state in list(self._controllers.items()):
            state.subscribers.clear()
            self._teardown(address, state)

    def _start_polling(self, address: str, state: ControllerState) -> None:
        @callback
        def _handle_status_interval(_: datetime) -> None:
            self._schedule(state, self._async_poll_status(address, state))

        @callback
        def _handle_config_interval(_: datetime) -> None:
            self._schedule(state, self._async_poll_config(address, state))

        state.cancel_status_poll = async_track_time_interval(
            self._hass, _handle_status_interval, STATUS_POLL_INTERVAL
        )
        state.cancel_config_poll = async_track_time_interval(
            self._hass, _handle_config_interval, CONFIG_POLL_INTERVAL
        )
        LOGGER.debug("Polling started for controller at %s", address)

        self._schedule(state, self._async_poll_status(address, state))
        self._schedule(state, self._async_poll_config(address, state))

    def _teardown(self, address: str, state: ControllerState) -> None:
        for cancel in (
            state.cancel_status_poll,
            state.cancel_config_poll,
            state.cancel_extra_poll,
        ):
            if cancel is not None:
                cancel()
        state.cancel_status_poll = None
        state.cancel_config_poll = None
        state.cancel_extra_poll = None

        for task in state.tasks:
            task.cancel()
        state.tasks.clear()

        if self._controllers.get(address) is state:
            del self._controllers[address]
        LOGGER.debug("Polling stopped for controller at %s", address)

    def _schedule(
        self, state: ControllerState, target: Coroutine[Any, Any, None]
    ) -> None:
        task = self._hass.async_create_task(target)
        if task.done():
            return
        state.tasks.add(task)
        task.add_done_callback(state.tasks.discard)

    def _is_current(self, address: str, state: ControllerState) -> bool:
        """Return False once ``state`` was torn down or replaced."""
        return self._controllers.get(address) is state and bool(state.subscribers)

    async def _async_poll_status(self, address: str, state: ControllerState) -> None:
        state.status_issued += 1
        sequence = state.status_issued
        try:
            info = await state.client.async_read_system_info()
        except KohlerApiClientError as exception:
            LOGGER.error("system_info poll failed for %s: %s", address, exception)
            return

        if not self._is_current(address, state):
            LOGGER.debug("Discarding system_info for released controller %s", address)
            return
        if sequence <= state.status_applied:
            LOGGER.debug("Discarding out-of-order system_info for %s", address)
            return

        state.status_applied = sequence
        state.system_info = MappingProxyType(info)
        for subscriber in list(state.subscribers):
            self._deliver(subscriber, "on_system_info", state.system_info)

    async def _async_poll_config(self, address: str, state: ControllerState) -> None:
        state.config_issued += 1
        sequence = state.config_issued
        try:
            values = await state.client.async_read_values()
        except KohlerApiClientError as exception:
            LOGGER.error("values poll failed for %s: %s", address, exception)
            return

        if not self._is_current(address, state):
            LOGGER.debug("Discarding values for released controller %s", address)
            return
        if sequence <= state.config_applied:
            LOGGER.debug("Discarding out-of-order values for %s", address)
            return

        state.config_applied = sequence
        state.values = MappingProxyType(values)
        for subscriber in list(state.subscribers):
            self._deliver(subscriber, "on_values", state.values)

    @staticmethod
    def _deliver(
        subscriber: ControllerSubscriber, method: str, snapshot: Any
    ) -> None:
        handler = getattr(subscriber, method, None)
        if handler is None:
            return
        try:
            handler(snapshot)
        except Exception:  # noqa: BLE001
            LOGGER.exception(
                "Device %s %s update failed",
                subscriber.subscriber_name,
                "status" if method == "on_system_info" else "config",
            )


@callback
def async_get_hub(hass: HomeAssistant) -> KohlerControllerHub:
    """Return the hub shared by all config entries."""
    data = hass.data.setdefault(DOMAIN, {})
    if DATA_HUB not in data:
        data[DATA_HUB] = KohlerControllerHub(hass)
    return data[DATA_HUB]
