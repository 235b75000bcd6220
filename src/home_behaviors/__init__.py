"""
home-behaviors: Rule presets for home-automation engines.

This library provides idioms for behavior combinations across devices:
- Synonym, exclusive and mutual-group device sets
- Main switches that drive, or are driven by, other devices
- Timed auto-off
- A minimal host engine interface (device/group lookup and logging)
"""

from home_behaviors.core.adapter import HostEngine, Peer, LogLevel
from home_behaviors.rules import (
    RuleDescriptor,
    same_devices,
    same_devices_groups,
    exclusive_devices,
    main_switches_all,
    timed_devices,
    cascade,
    mutual_group,
    build_rules,
)

__version__ = "0.1.0"

__all__ = [
    "HostEngine",
    "Peer",
    "LogLevel",
    "RuleDescriptor",
    "same_devices",
    "same_devices_groups",
    "exclusive_devices",
    "main_switches_all",
    "timed_devices",
    "cascade",
    "mutual_group",
    "build_rules",
]
