"""
Rule presets - behavior combinations for sets of devices.

Each preset captures a host engine and some device names and returns a
RuleDescriptor. The host registers the descriptor's subscriptions and calls
its handler with (trigger_name, trigger_state) on every state change of a
subscribed device or group.

Presets do not try to detect interactions between rules. Declaring the same
devices both "same" and "exclusive", or chaining "same" sets into a loop,
makes devices toggle forever. Avoiding that is up to whoever writes the rules.
"""

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Tuple

from home_behaviors.core.adapter import (
    STATE_GROUP_ON,
    STATE_OFF,
    STATE_ON,
    HostEngine,
    LogLevel,
)
from home_behaviors.core.peers import all_have_state, apply_state

from .models import (
    RuleDescriptor,
    RuleFamily,
    RuleHandler,
    Subscriptions,
    TimedSpec,
    TransitionTo,
)

logger = logging.getLogger(__name__)


def _require_name(value: str, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{what} must be a non-empty string, got {value!r}")
    return value


def _names(values: Iterable[str], what: str) -> Tuple[str, ...]:
    if isinstance(values, str):
        raise TypeError(f"{what} must be a list of names, not a single string")
    return tuple(_require_name(v, f"{what} entry") for v in values)


def _make_rule(
    family: RuleFamily,
    tag: str,
    subscriptions: Subscriptions,
    handler: RuleHandler,
) -> RuleDescriptor:
    rule = RuleDescriptor(
        family=family,
        tag=tag,
        subscriptions=subscriptions,
        handler=handler,
    )
    logger.debug(f"Created rule {rule.log_tag} watching {len(subscriptions.all())} names")
    return rule


def _set_main(
    host: HostEngine,
    main_name: str,
    trigger_name: str,
    state: str,
    trigger_state: str,
) -> None:
    """Bring a main device to state. Mains are devices, never groups.

    The log line reports trigger_state, which may differ from the state
    written (a cascade writes On for a Group On trigger).
    """
    main = host.lookup_device(main_name)
    if main is None:
        host.log(
            f"Main {main_name} of device {trigger_name} does not exist",
            LogLevel.ERROR,
        )
        return
    if main.state != state:
        main.set_state(state)
        host.log(
            f"{trigger_state} for {main_name} because {trigger_name} was changed",
            LogLevel.INFO,
        )


def same_devices(
    host: HostEngine,
    set_name: str,
    devices: Iterable[str],
) -> RuleDescriptor:
    """
    Create a rule for devices that are switched on and off together.

    Use this when you have multiple switches for the same device. Any state
    (including dimmer levels) is copied to the other devices.

    Args:
        host: Host engine
        set_name: Name of this set of devices (used in the log marker)
        devices: Names of the devices in the set

    Returns:
        Configured RuleDescriptor

    Example:
        rule = same_devices(host, "hall", ["hall_switch_1", "hall_switch_2"])
    """
    set_name = _require_name(set_name, "set_name")
    members = _names(devices, "devices")

    def handler(trigger_name: str, trigger_state: str) -> None:
        apply_state(host, trigger_name, trigger_state, members)

    return _make_rule(RuleFamily.SAME, set_name, Subscriptions(devices=members), handler)


def same_devices_groups(
    host: HostEngine,
    set_name: str,
    devices: Iterable[str],
    groups: Iterable[str],
) -> RuleDescriptor:
    """
    Create a rule that keeps devices and groups in the same state.

    Args:
        host: Host engine
        set_name: Name of this set (used in the log marker)
        devices: Names of devices in the set
        groups: Names of groups in the set

    Returns:
        Configured RuleDescriptor
    """
    set_name = _require_name(set_name, "set_name")
    member_devices = _names(devices, "devices")
    member_groups = _names(groups, "groups")
    members = member_devices + member_groups

    def handler(trigger_name: str, trigger_state: str) -> None:
        apply_state(host, trigger_name, trigger_state, members)

    return _make_rule(
        RuleFamily.SAME_GROUPS,
        set_name,
        Subscriptions(devices=member_devices, groups=member_groups),
        handler,
    )


def exclusive_devices(
    host: HostEngine,
    set_name: str,
    devices: Iterable[str],
) -> RuleDescriptor:
    """
    Create a rule for devices that must never be on at the same time.

    Good for: heavy loads on the same circuit (heater, kettle, dryer).
    When one device leaves "Off", all others are switched off.

    Args:
        host: Host engine
        set_name: Name of this set (used in the log marker)
        devices: Names of the devices in the set

    Returns:
        Configured RuleDescriptor
    """
    set_name = _require_name(set_name, "set_name")
    members = _names(devices, "devices")

    def handler(trigger_name: str, trigger_state: str) -> None:
        if trigger_state == STATE_OFF:
            return
        apply_state(host, trigger_name, STATE_OFF, members)

    return _make_rule(
        RuleFamily.EXCLUSIVE, set_name, Subscriptions(devices=members), handler
    )


def main_switches_all(
    host: HostEngine,
    main: str,
    transition_to: "str | TransitionTo",
    devices: Iterable[str],
) -> RuleDescriptor:
    """
    Create a rule where a main switch drives a set of devices.

    Args:
        host: Host engine
        main: Name of the main switch to watch
        transition_to: "on", "off" or "any"; the rule fires when the main
            switch changes to this state ("any" copies every state)
        devices: Names of devices that follow the main switch

    Returns:
        Configured RuleDescriptor

    Example:
        # Leaving the house turns everything off
        rule = main_switches_all(host, "away", "on", ["tv", "lamp"])
    """
    main = _require_name(main, "main")
    transition = TransitionTo.parse(transition_to)
    members = _names(devices, "devices")

    def handler(trigger_name: str, trigger_state: str) -> None:
        if transition is not TransitionTo.ANY and trigger_state != transition.value:
            logger.debug(f"{trigger_name} is {trigger_state}, waiting for {transition.value}")
            return
        apply_state(host, trigger_name, trigger_state, members)

    return _make_rule(
        RuleFamily.MAIN_SWITCHES_ALL,
        f"{main}, {transition.value}",
        Subscriptions(devices=(main,)),
        handler,
    )


def timed_devices(
    host: HostEngine,
    set_name: str,
    timed: Mapping[str, Any],
) -> RuleDescriptor:
    """
    Create a rule that switches devices off after a per-device timeout.

    Good for: devices that are often forgotten, or that should go off after
    a maximum time anyway.

    Args:
        host: Host engine
        set_name: Name of this rule (used in the log marker)
        timed: Device name -> timeout. Either a number of minutes (may be
            fractional) or {"timeout": n, "unit": "second"|"minute"|"hour"};
            unit defaults to minute.

    Returns:
        Configured RuleDescriptor

    Example:
        rule = timed_devices(host, "forgotten", {
            "dev-1": {"timeout": 5, "unit": "second"},
            "dev-2": {"timeout": 10.5, "unit": "minute"},  # 630 seconds
            "dev-3": 5,  # 5 minutes
            "dev-4": 0.5,  # 30 seconds
        })
    """
    set_name = _require_name(set_name, "set_name")
    specs = MappingProxyType(
        {_require_name(name, "device"): TimedSpec.from_value(value) for name, value in timed.items()}
    )

    def handler(trigger_name: str, trigger_state: str) -> None:
        if trigger_state != STATE_ON:
            return
        spec = specs.get(trigger_name)
        if spec is None:
            logger.debug(f"No timeout configured for {trigger_name}")
            return

        seconds = spec.seconds
        if seconds is None:
            host.log(
                f"Processing {trigger_name}: unit = {spec.raw_unit} not recognized",
                LogLevel.INFO,
            )
            return

        device = host.lookup_device(trigger_name)
        if device is None:
            host.log(f"Device {trigger_name} does not exist", LogLevel.ERROR)
            return

        device.cancel_scheduled()
        if seconds > 0:
            device.schedule_state_change(STATE_OFF, seconds)
            host.log(
                f"Scheduled Off for {trigger_name} in {seconds} seconds",
                LogLevel.INFO,
            )

    return _make_rule(
        RuleFamily.TIMED, set_name, Subscriptions(devices=tuple(specs)), handler
    )


def cascade(
    host: HostEngine,
    main: str,
    devices: Iterable[str],
) -> RuleDescriptor:
    """
    Create a rule where any of a number of devices turns a main device on.

    Good for: sub-alarms triggering a main alarm. The main is only ever
    switched on, never off.

    Args:
        host: Host engine
        main: Name of the main device (a device, not a group)
        devices: Names of devices that trigger the main

    Returns:
        Configured RuleDescriptor
    """
    main = _require_name(main, "main")
    members = _names(devices, "devices")

    def handler(trigger_name: str, trigger_state: str) -> None:
        if trigger_state not in (STATE_ON, STATE_GROUP_ON):
            return
        _set_main(host, main, trigger_name, STATE_ON, trigger_state)

    return _make_rule(RuleFamily.CASCADE, main, Subscriptions(devices=members), handler)


def mutual_group(
    host: HostEngine,
    main: str,
    devices: Iterable[str],
) -> RuleDescriptor:
    """
    Create a rule where a main device and its members follow each other.

    Switching the main sets every member. When all members agree on a
    state, the main follows. This behaves like a host group with an
    assigned main switch.

    Args:
        host: Host engine
        main: Name of the main device (a device, not a group)
        devices: Names of the member devices

    Returns:
        Configured RuleDescriptor
    """
    main = _require_name(main, "main")
    members = _names(devices, "devices")

    def handler(trigger_name: str, trigger_state: str) -> None:
        if trigger_name == main:
            apply_state(host, trigger_name, trigger_state, members)
            return
        if not all_have_state(host, trigger_name, trigger_state, members):
            return
        _set_main(host, main, trigger_name, trigger_state, trigger_state)

    return _make_rule(
        RuleFamily.MUTUAL_GROUP,
        main,
        Subscriptions(devices=members + (main,)),
        handler,
    )
