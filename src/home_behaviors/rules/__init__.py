"""
Rule presets for home-behaviors.

Provides idioms for behavior combinations across sets of devices.

Features:
- Synonym devices (same state everywhere), with or without groups
- Exclusive devices (never on at the same time)
- Main switch driving a set of devices
- Timed auto-off with per-device timeouts
- Cascade from any device to a main device
- Mutual group (main and members follow each other)
- Building rule sets from plain dict configuration

Architecture:
    Presets build RuleDescriptors. The host engine registers their
    subscriptions and calls their handlers; handlers call back into the
    host through the HostEngine interface.

    ┌─────────────────────────────────────────────┐
    │              Host engine                    │
    │        │ handler(name, state)   ▲           │
    │        ▼                        │ lookup/set│
    │          ┌─────────────────────┐            │
    │          │   RuleDescriptor    │            │
    │          └─────────────────────┘            │
    └─────────────────────────────────────────────┘
"""

from .models import (
    # Enums
    RuleFamily,
    TransitionTo,
    TimeUnit,
    # Specs
    TimedSpec,
    # Descriptor
    Subscriptions,
    RuleHandler,
    RuleDescriptor,
)
from .presets import (
    same_devices,
    same_devices_groups,
    exclusive_devices,
    main_switches_all,
    timed_devices,
    cascade,
    mutual_group,
)
from .config import RuleConfig, RuleSetConfig, build_rule, build_rules

__all__ = [
    # Enums
    "RuleFamily",
    "TransitionTo",
    "TimeUnit",
    # Specs
    "TimedSpec",
    # Descriptor
    "Subscriptions",
    "RuleHandler",
    "RuleDescriptor",
    # Presets
    "same_devices",
    "same_devices_groups",
    "exclusive_devices",
    "main_switches_all",
    "timed_devices",
    "cascade",
    "mutual_group",
    # Configuration
    "RuleConfig",
    "RuleSetConfig",
    "build_rule",
    "build_rules",
]
