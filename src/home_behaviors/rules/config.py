"""
Dict-based configuration for rule sets.

Lets a host integration describe its rules as plain data (loaded from JSON,
YAML, or a Python literal) and build descriptors from it:

    {
        "version": 1,
        "rules": [
            {"type": "same", "name": "hall", "devices": ["sw_1", "sw_2"]},
            {"type": "main_switches_all", "main": "away",
             "transition_to": "on", "devices": ["tv", "lamp"]},
            {"type": "timed", "name": "forgotten",
             "timed": {"iron": 15, "fan": {"timeout": 30, "unit": "second"}}},
        ],
    }
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from home_behaviors.core.adapter import HostEngine

from .models import RuleDescriptor
from .presets import (
    cascade,
    exclusive_devices,
    main_switches_all,
    mutual_group,
    same_devices,
    same_devices_groups,
    timed_devices,
)

logger = logging.getLogger(__name__)

RULE_TYPES = (
    "same",
    "same_groups",
    "exclusive",
    "main_switches_all",
    "timed",
    "cascade",
    "mutual_group",
)


def _name_list(data: Dict[str, Any], key: str) -> List[str]:
    """Read a list of names; a bare string is rejected, not split into letters."""
    value = data.get(key, [])
    if isinstance(value, str):
        raise TypeError(f"{key} must be a list of names, not a single string")
    return list(value)


@dataclass
class RuleConfig:
    """Configuration for one rule.

    Which fields are used depends on type:
    - same, exclusive: name, devices
    - same_groups: name, devices, groups
    - main_switches_all: main, transition_to, devices
    - timed: name, timed
    - cascade, mutual_group: main, devices
    """

    type: str
    name: Optional[str] = None
    main: Optional[str] = None
    transition_to: str = "any"
    devices: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)
    timed: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict, leaving out fields the type does not use."""
        result: Dict[str, Any] = {"type": self.type}
        if self.name is not None:
            result["name"] = self.name
        if self.main is not None:
            result["main"] = self.main
        if self.type == "main_switches_all":
            result["transition_to"] = self.transition_to
        if self.devices:
            result["devices"] = list(self.devices)
        if self.groups:
            result["groups"] = list(self.groups)
        if self.timed:
            result["timed"] = dict(self.timed)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleConfig":
        """Deserialize from dict."""
        rule_type = data.get("type")
        if rule_type not in RULE_TYPES:
            raise ValueError(f"Unknown rule type: {rule_type}")

        return cls(
            type=rule_type,
            name=data.get("name"),
            main=data.get("main"),
            transition_to=data.get("transition_to", "any"),
            devices=_name_list(data, "devices"),
            groups=_name_list(data, "groups"),
            timed=dict(data.get("timed", {})),
        )


@dataclass
class RuleSetConfig:
    """A versioned list of rule configurations."""

    version: int = 1
    rules: List[RuleConfig] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict."""
        return {
            "version": self.version,
            "rules": [r.to_dict() for r in self.rules],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleSetConfig":
        """Deserialize from dict."""
        return cls(
            version=data.get("version", 1),
            rules=[RuleConfig.from_dict(r) for r in data.get("rules", [])],
        )


def build_rule(host: HostEngine, config: RuleConfig) -> RuleDescriptor:
    """
    Build a rule descriptor from its configuration.

    Raises:
        ValueError: If the type is unknown or a required name is missing
    """
    if config.type == "same":
        return same_devices(host, config.name, config.devices)
    elif config.type == "same_groups":
        return same_devices_groups(host, config.name, config.devices, config.groups)
    elif config.type == "exclusive":
        return exclusive_devices(host, config.name, config.devices)
    elif config.type == "main_switches_all":
        return main_switches_all(host, config.main, config.transition_to, config.devices)
    elif config.type == "timed":
        return timed_devices(host, config.name, config.timed)
    elif config.type == "cascade":
        return cascade(host, config.main, config.devices)
    elif config.type == "mutual_group":
        return mutual_group(host, config.main, config.devices)
    else:
        raise ValueError(f"Unknown rule type: {config.type}")


def build_rules(host: HostEngine, data: Dict[str, Any]) -> List[RuleDescriptor]:
    """
    Build every rule in a rule set dict.

    Args:
        host: Host engine the rules will call into
        data: Rule set dict (see module docstring)

    Returns:
        Rule descriptors in configuration order
    """
    rule_set = RuleSetConfig.from_dict(data)
    if rule_set.version != 1:
        raise ValueError(f"Unsupported rule set version: {rule_set.version}")

    rules = [build_rule(host, rule) for rule in rule_set.rules]
    logger.debug(f"Built {len(rules)} rules")
    return rules
