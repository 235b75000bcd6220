"""
Peer resolution and state propagation shared by all rule presets.

A peer is any device or group named by a rule other than the device that
triggered it. Peers are resolved on every call, never cached, because the
host registry can change between events.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from .adapter import HostEngine, LogLevel, Peer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Found:
    """Resolution succeeded."""

    peer: Peer


@dataclass(frozen=True)
class NotFound:
    """Resolution failed.

    self_reference is True when the name was the trigger itself. That is
    expected and never logged.
    """

    name: str
    self_reference: bool = False


Resolution = Found | NotFound


def resolve_peer(host: HostEngine, peer_name: str, trigger_name: str) -> Resolution:
    """
    Resolve a peer name to a live device, falling back to groups.

    Args:
        host: Host engine
        peer_name: Device or group name to resolve
        trigger_name: Name of the device that triggered the rule

    Returns:
        Found with the peer, or NotFound
    """
    if peer_name == trigger_name:
        return NotFound(peer_name, self_reference=True)

    peer = host.lookup_device(peer_name)
    if peer is None:
        peer = host.lookup_group(peer_name)
    if peer is None:
        host.log(
            f"Peer {peer_name} of device {trigger_name} does not exist",
            LogLevel.ERROR,
        )
        return NotFound(peer_name)

    return Found(peer)


def apply_state(
    host: HostEngine,
    trigger_name: str,
    target_state: str,
    peer_names: Iterable[str],
) -> int:
    """
    Set every peer that is not already in target_state.

    Unresolved peers are skipped (the resolver has already logged them).

    Args:
        host: Host engine
        trigger_name: Name of the device that triggered the rule
        target_state: State to propagate
        peer_names: Device or group names

    Returns:
        Number of peers that were changed
    """
    changed = 0
    for peer_name in peer_names:
        result = resolve_peer(host, peer_name, trigger_name)
        if not isinstance(result, Found):
            continue

        peer = result.peer
        if peer.state == target_state:
            logger.debug(f"{peer_name} already {target_state}, skipping")
            continue

        peer.set_state(target_state)
        host.log(
            f"{target_state} for {peer_name} because {trigger_name} was changed",
            LogLevel.INFO,
        )
        changed += 1
    return changed


def all_have_state(
    host: HostEngine,
    trigger_name: str,
    target_state: str,
    peer_names: Iterable[str],
) -> bool:
    """
    Check whether every peer already holds target_state.

    The trigger itself is skipped. A peer that cannot be resolved counts
    as not matching.
    """
    for peer_name in peer_names:
        result = resolve_peer(host, peer_name, trigger_name)
        if isinstance(result, NotFound):
            if result.self_reference:
                continue
            return False
        if result.peer.state != target_state:
            return False
    return True
