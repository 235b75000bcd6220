"""
Core components of home-behaviors.

This package contains:
- adapter: Host engine interface and in-memory mocks
- peers: Peer resolution and state propagation helpers
"""

from home_behaviors.core.adapter import (
    STATE_ON,
    STATE_OFF,
    STATE_GROUP_ON,
    LogLevel,
    Peer,
    HostEngine,
    MockDevice,
    MockHostEngine,
)
from home_behaviors.core.peers import (
    Found,
    NotFound,
    Resolution,
    resolve_peer,
    apply_state,
    all_have_state,
)

__all__ = [
    "STATE_ON",
    "STATE_OFF",
    "STATE_GROUP_ON",
    "LogLevel",
    "Peer",
    "HostEngine",
    "MockDevice",
    "MockHostEngine",
    "Found",
    "NotFound",
    "Resolution",
    "resolve_peer",
    "apply_state",
    "all_have_state",
]
