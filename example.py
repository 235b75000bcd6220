#!/usr/bin/env python3
"""
Quick example demonstrating home-behaviors basic usage.

Run with: PYTHONPATH=src python3 example.py
"""

from home_behaviors.core import MockHostEngine
from home_behaviors.rules import build_rules, mutual_group, timed_devices

print("=" * 60)
print("home-behaviors Example")
print("=" * 60)

# 1. Host engine
print("\n1. Creating mock host...")
host = MockHostEngine()
for name in ("hall_1", "hall_2", "kettle", "heater", "living", "lamp_1", "lamp_2", "iron"):
    host.add_device(name)
print("   ✓ Registered 8 devices")

# 2. Rules from configuration
print("\n2. Building rules from configuration...")
rules = build_rules(
    host,
    {
        "rules": [
            {"type": "same", "name": "hall", "devices": ["hall_1", "hall_2"]},
            {"type": "exclusive", "name": "circuit", "devices": ["kettle", "heater"]},
        ]
    },
)
rules.append(mutual_group(host, "living", ["lamp_1", "lamp_2"]))
rules.append(timed_devices(host, "forgotten", {"iron": {"timeout": 20, "unit": "minute"}}))
for rule in rules:
    print(f"   ✓ {rule.log_tag} watches {sorted(rule.subscriptions.all())}")


def switch(name: str, state: str) -> None:
    """Simulate a manual switch and let the host dispatch it."""
    host.lookup_device(name).force_state(state)
    for rule in rules:
        if name in rule.subscriptions:
            rule.handler(name, state)


# 3. Events
print("\n3. Switching devices...")
switch("hall_1", "On")
switch("heater", "On")
switch("kettle", "On")
switch("lamp_1", "On")
switch("lamp_2", "On")
switch("iron", "On")

print("\n4. Host log:")
for line in host.get_log():
    print(f"   {line}")

print("\n5. Final states:")
for name in ("hall_2", "heater", "living", "iron"):
    print(f"   {name}: {host.lookup_device(name).state}")
print(f"   iron scheduled: {host.lookup_device('iron').scheduled}")
