"""
Data models for rule presets.

Defines rule families, timed-off specs, subscriptions and the rule
descriptor handed to the host engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from home_behaviors.core.adapter import LogLevel


# =============================================================================
# Enums
# =============================================================================


class RuleFamily(Enum):
    """Behavior patterns. Values are the log marker prefixes."""

    SAME = "same"  # Synonym devices
    SAME_GROUPS = "same_dev_gr"  # Synonym devices and groups
    EXCLUSIVE = "exclusive"  # Never on at the same time
    MAIN_SWITCHES_ALL = "main_switches_all"  # Main drives devices
    TIMED = "timed_devices"  # Off after a timeout
    CASCADE = "cascade"  # Any device turns main on
    MUTUAL_GROUP = "dzv_group"  # Main and devices follow each other


class TransitionTo(Enum):
    """Main state transitions that drive a main_switches_all rule."""

    ON = "On"
    OFF = "Off"
    ANY = "Any"

    @classmethod
    def parse(cls, value: "str | TransitionTo") -> "TransitionTo":
        """Accept "on"/"off"/"any" in any case, or a member."""
        if isinstance(value, TransitionTo):
            return value
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        raise ValueError(f"Unknown transition: {value}")


class TimeUnit(Enum):
    """Units accepted by timed_devices specs."""

    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"

    @property
    def seconds(self) -> int:
        """Length of one unit in seconds."""
        return {"second": 1, "minute": 60, "hour": 3600}[self.value]


# =============================================================================
# Timed Specs
# =============================================================================


def _to_number(value: Any) -> Optional[float]:
    """Numbers pass through; numeric strings are parsed. Anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Real):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class TimedSpec:
    """Timeout for one device of a timed_devices rule.

    Built from either a plain number of minutes (numeric strings such as "5"
    are accepted) or a mapping
    {"timeout": n, "unit": "second" | "minute" | "hour"}. A unit string that
    is not recognized is kept in raw_unit with unit=None; the rule reports it
    when the device turns on.
    """

    timeout: float
    unit: Optional[TimeUnit] = TimeUnit.MINUTE
    raw_unit: Optional[str] = None

    @property
    def seconds(self) -> Optional[float]:
        """Timeout in seconds, or None if the unit is not recognized."""
        if self.unit is None:
            return None
        return self.timeout * self.unit.seconds

    @classmethod
    def from_value(cls, value: Any) -> "TimedSpec":
        """
        Normalize a plain number or a timeout mapping.

        Raises:
            TypeError: If value is neither a number nor a mapping with a
                numeric timeout
        """
        if isinstance(value, TimedSpec):
            return value
        minutes = _to_number(value)
        if minutes is not None:
            return cls(timeout=minutes, unit=TimeUnit.MINUTE)
        if not isinstance(value, Mapping):
            raise TypeError(f"Timed spec must be a number or a mapping, got {value!r}")

        timeout = _to_number(value.get("timeout"))
        if timeout is None:
            raise TypeError(f"Timed spec needs a numeric timeout, got {value.get('timeout')!r}")

        unit = value.get("unit")
        if unit is None:
            return cls(timeout=timeout, unit=TimeUnit.MINUTE)
        try:
            return cls(timeout=timeout, unit=TimeUnit(unit))
        except ValueError:
            return cls(timeout=timeout, unit=None, raw_unit=str(unit))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the mapping form."""
        unit = self.unit.value if self.unit else self.raw_unit
        return {"timeout": self.timeout, "unit": unit}


# =============================================================================
# Rule Descriptor
# =============================================================================


@dataclass(frozen=True)
class Subscriptions:
    """Device and group names the host must watch for a rule."""

    devices: Tuple[str, ...] = ()
    groups: Tuple[str, ...] = ()

    def all(self) -> FrozenSet[str]:
        """Every watched name."""
        return frozenset(self.devices) | frozenset(self.groups)

    def __contains__(self, name: object) -> bool:
        return name in self.devices or name in self.groups


RuleHandler = Callable[[str, str], None]


@dataclass(frozen=True)
class RuleDescriptor:
    """A rule ready to be registered with the host engine.

    Consists of:
    - family: Which behavior pattern built it
    - tag: Human-readable set name (or "main, transition")
    - subscriptions: Names whose state changes invoke the handler
    - handler: Called as handler(trigger_name, trigger_state)
    - log_level: Host log level for the rule's own messages

    The host must only call the handler for names in subscriptions. What the
    handler does for any other name is undefined.
    """

    family: RuleFamily
    tag: str
    subscriptions: Subscriptions
    handler: RuleHandler = field(compare=False, repr=False)
    log_level: LogLevel = LogLevel.INFO

    @property
    def log_tag(self) -> str:
        """Marker used in the host log, e.g. "same(kitchen)"."""
        return f"{self.family.value}({self.tag})"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the declarative part (triggers and logging)."""
        on: Dict[str, Any] = {"devices": list(self.subscriptions.devices)}
        if self.subscriptions.groups:
            on["groups"] = list(self.subscriptions.groups)
        return {
            "on": on,
            "logging": {"level": self.log_level.value, "marker": self.log_tag},
        }
