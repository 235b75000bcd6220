"""
Host engine interface for home-behaviors.

The adapter provides an abstraction layer between the rule presets and the
host automation engine (Domoticz/dzVents, or anything shaped like it). The
integration layer provides a concrete implementation.

Design Principle:
    The interface is intentionally minimal. The host owns the device registry,
    the event dispatch loop, the scheduler for delayed actions and the log
    sink. Rules only look things up by name, read and write states, and log.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


STATE_ON = "On"
STATE_OFF = "Off"
STATE_GROUP_ON = "Group On"


class LogLevel(Enum):
    """Levels understood by the host log sink."""

    ERROR = "error"
    INFO = "info"

    @property
    def python_level(self) -> int:
        """Matching stdlib logging level."""
        return logging.ERROR if self is LogLevel.ERROR else logging.INFO


class Peer(ABC):
    """
    A live device or group handle returned by the host registry.

    States are opaque strings. The host decides what "On" means for a
    dimmer or a selector switch.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the device or group."""
        pass

    @property
    @abstractmethod
    def state(self) -> str:
        """Current state."""
        pass

    @abstractmethod
    def set_state(self, state: str) -> None:
        """Switch the device or group to a new state."""
        pass

    @abstractmethod
    def schedule_state_change(self, state: str, delay_seconds: float) -> None:
        """
        Queue a state change in the host scheduler.

        Args:
            state: State to apply when the delay expires
            delay_seconds: Delay in seconds (may be fractional)
        """
        pass

    @abstractmethod
    def cancel_scheduled(self) -> None:
        """Drop every queued state change for this device."""
        pass


class HostEngine(ABC):
    """
    Abstract interface for host engine operations.

    This interface is intentionally minimal:
    - lookup_device: Find a single device by name
    - lookup_group: Find a named group by name
    - log: Write to the host log stream
    """

    @abstractmethod
    def lookup_device(self, name: str) -> Optional[Peer]:
        """
        Find a device in the registry.

        Args:
            name: Device name

        Returns:
            The device, or None if no device has that name
        """
        pass

    @abstractmethod
    def lookup_group(self, name: str) -> Optional[Peer]:
        """
        Find a group in the registry.

        Args:
            name: Group name

        Returns:
            The group, or None if no group has that name
        """
        pass

    @abstractmethod
    def log(self, message: str, level: LogLevel) -> None:
        """
        Write a line to the host log.

        Args:
            message: Text to log
            level: Host log level
        """
        pass


class MockDevice(Peer):
    """
    In-memory device for testing.

    Records every write and every scheduler call so tests can assert on them.
    """

    def __init__(self, name: str, state: str = STATE_OFF) -> None:
        self._name = name
        self._state = state
        self.set_state_calls: List[str] = []
        self.scheduled: List[Tuple[str, float]] = []
        self.cancel_count = 0

    def __repr__(self) -> str:
        return f"MockDevice({self._name!r}, {self._state!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> str:
        return self._state

    def force_state(self, state: str) -> None:
        """Change state without recording a write (simulates a manual switch)."""
        self._state = state

    # Peer implementation

    def set_state(self, state: str) -> None:
        self.set_state_calls.append(state)
        self._state = state

    def schedule_state_change(self, state: str, delay_seconds: float) -> None:
        self.scheduled.append((state, delay_seconds))

    def cancel_scheduled(self) -> None:
        self.cancel_count += 1
        self.scheduled.clear()


class MockHostEngine(HostEngine):
    """
    Mock host engine for testing.

    Holds separate device and group registries and records log lines.

    Example:
        host = MockHostEngine()
        host.add_device("switch_1", "On")
        host.add_group("downstairs", "Off")
    """

    def __init__(self) -> None:
        self._devices: Dict[str, MockDevice] = {}
        self._groups: Dict[str, MockDevice] = {}
        self._log: List[Tuple[LogLevel, str]] = []

    def add_device(self, name: str, state: str = STATE_OFF) -> MockDevice:
        """Register a device for testing."""
        device = MockDevice(name, state)
        self._devices[name] = device
        return device

    def add_group(self, name: str, state: str = STATE_OFF) -> MockDevice:
        """Register a group for testing."""
        group = MockDevice(name, state)
        self._groups[name] = group
        return group

    def remove(self, name: str) -> None:
        """Drop a device or group from the registry."""
        self._devices.pop(name, None)
        self._groups.pop(name, None)

    def get_log(self, level: Optional[LogLevel] = None) -> List[str]:
        """Get recorded log messages, optionally filtered by level."""
        return [msg for lvl, msg in self._log if level is None or lvl is level]

    def clear_log(self) -> None:
        """Clear recorded log messages."""
        self._log.clear()

    # HostEngine implementation

    def lookup_device(self, name: str) -> Optional[Peer]:
        return self._devices.get(name)

    def lookup_group(self, name: str) -> Optional[Peer]:
        return self._groups.get(name)

    def log(self, message: str, level: LogLevel) -> None:
        self._log.append((level, message))
        logger.log(level.python_level, message)
