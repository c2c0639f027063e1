"""Compound shower command composition.

The controller only accepts shower writes that describe both valves. When a
logical device changes one valve, the other valve's side of the command is
rebuilt from the last polled snapshot so it keeps running as it was.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .const import CLOSED_OUTLETS, MAX_OUTLETS, STATUS_ON, UNTOUCHED_TEMPERATURE
from .models import CompoundShowerCommand, OutletSelector, SystemInfoSnapshot


class OutletRule(Enum):
    """How the untouched valve's open outlets are read from a snapshot.

    UNCONDITIONAL is used by the per-outlet switches: the outlet flags are
    taken as reported. RUNNING_ONLY is used by the valve switches: the flags
    only count while the valve reports running, because the controller keeps
    reporting outlet assignments after a valve is powered off. The two rules
    differ at the boundary between "outlet toggled while off" and "closed on
    resume".
    """

    UNCONDITIONAL = "unconditional"
    RUNNING_ONLY = "running_only"


def other_valve(valve: int) -> int:
    """Return the number of the valve that is not ``valve``."""
    return 2 if valve == 1 else 1


def is_valve_running(valve: int, snapshot: SystemInfoSnapshot | None) -> bool:
    """Return True when the snapshot reports ``valve`` running."""
    if not snapshot:
        return False
    return snapshot.get(f"valve{valve}_Currentstatus") == STATUS_ON


def current_outlets(
    valve: int, snapshot: SystemInfoSnapshot | None
) -> OutletSelector:
    """Return the outlets the snapshot flags as open on ``valve``."""
    if not snapshot:
        return OutletSelector()
    return OutletSelector(
        frozenset(
            outlet
            for outlet in range(1, MAX_OUTLETS + 1)
            if snapshot.get(f"valve{valve}outlet{outlet}")
        )
    )


def setpoint(valve: int, snapshot: SystemInfoSnapshot | None) -> float | None:
    """Return the device-native setpoint of ``valve``, if usable."""
    if not snapshot:
        return None
    value: Any = snapshot.get(f"valve{valve}Setpoint")
    try:
        temperature = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and zero mean "no setpoint reported"
    if temperature != temperature or temperature == 0:
        return None
    return temperature


def derive_other_valve_outlets(
    other: int,
    snapshot: SystemInfoSnapshot | None,
    rule: OutletRule,
) -> OutletSelector:
    """Return the open outlets to restate for the untouched valve."""
    if rule is OutletRule.RUNNING_ONLY and not is_valve_running(other, snapshot):
        return OutletSelector()
    return current_outlets(other, snapshot)


def build_shower_command(
    target_valve: int,
    desired_outlets: OutletSelector | str,
    desired_temp: float,
    snapshot: SystemInfoSnapshot | None,
    rule: OutletRule = OutletRule.RUNNING_ONLY,
) -> CompoundShowerCommand:
    """Build the compound command that applies one valve's change.

    The target valve takes ``desired_outlets``/``desired_temp`` verbatim;
    the other valve keeps its open outlets and setpoint from ``snapshot``,
    or the untouched defaults ("0", 100) when there is nothing to keep.
    """
    if isinstance(desired_outlets, str):
        desired_outlets = OutletSelector.parse(desired_outlets)

    other = other_valve(target_valve)
    other_outlets = derive_other_valve_outlets(other, snapshot, rule)
    other_temp = UNTOUCHED_TEMPERATURE
    if not other_outlets.is_closed:
        other_temp = setpoint(other, snapshot) or UNTOUCHED_TEMPERATURE

    if target_valve == 1:
        return CompoundShowerCommand(
            valve1_outlets=desired_outlets,
            valve1_temp=desired_temp,
            valve2_outlets=other_outlets,
            valve2_temp=other_temp,
        )
    return CompoundShowerCommand(
        valve1_outlets=other_outlets,
        valve1_temp=other_temp,
        valve2_outlets=desired_outlets,
        valve2_temp=desired_temp,
    )


def is_fully_closed(
    valve1_outlets: OutletSelector | str, valve2_outlets: OutletSelector | str
) -> bool:
    """Return True when both valves would end up with no open outlet.

    Callers send stop_shower.cgi instead of an all-zero compound command.
    """
    return (
        str(valve1_outlets) == CLOSED_OUTLETS
        and str(valve2_outlets) == CLOSED_OUTLETS
    )


def build_close_command(
    target_valve: int, snapshot: SystemInfoSnapshot | None
) -> CompoundShowerCommand | None:
    """Build the write that closes one valve from a valve switch.

    While the other valve runs, only the target side is zeroed. Returns None
    when the other valve is idle and a full stop should be sent instead.
    """
    if not is_valve_running(other_valve(target_valve), snapshot):
        return None
    return build_shower_command(
        target_valve,
        OutletSelector(),
        UNTOUCHED_TEMPERATURE,
        snapshot,
        OutletRule.RUNNING_ONLY,
    )


def build_outlet_toggle_command(
    valve: int,
    outlet: int,
    is_open: bool,
    snapshot: SystemInfoSnapshot | None,
) -> CompoundShowerCommand | None:
    """Build the write that flips one outlet from an outlet switch.

    Returns None when every outlet on both valves would be closed.
    """
    desired = current_outlets(valve, snapshot).with_outlet(outlet, is_open)
    command = build_shower_command(
        valve,
        desired,
        setpoint(valve, snapshot) or UNTOUCHED_TEMPERATURE,
        snapshot,
        OutletRule.UNCONDITIONAL,
    )
    if is_fully_closed(command.valve1_outlets, command.valve2_outlets):
        return None
    return command
