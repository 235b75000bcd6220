"""Tests for rule presets."""

import pytest

from home_behaviors.core import LogLevel, MockHostEngine
from home_behaviors.rules import (
    RuleFamily,
    same_devices,
    same_devices_groups,
    exclusive_devices,
    main_switches_all,
    timed_devices,
    cascade,
    mutual_group,
)


@pytest.fixture
def host():
    """Create an empty mock host."""
    return MockHostEngine()


class TestSameDevices:
    """Tests for same_devices preset."""

    def test_subscriptions(self, host):
        """Test that the rule watches every device of the set."""
        rule = same_devices(host, "hall", ["A", "B"])

        assert rule.family is RuleFamily.SAME
        assert rule.log_tag == "same(hall)"
        assert rule.subscriptions.all() == frozenset({"A", "B"})

    def test_copies_state(self, host):
        """Test that the trigger state is copied to the other devices."""
        host.add_device("A", "On")
        b = host.add_device("B", "Off")
        rule = same_devices(host, "hall", ["A", "B"])

        rule.handler("A", "On")

        assert b.set_state_calls == ["On"]

    def test_idempotent(self, host):
        """Test that a second identical trigger writes nothing."""
        host.add_device("A", "On")
        b = host.add_device("B", "Off")
        c = host.add_device("C", "Off")
        rule = same_devices(host, "hall", ["A", "B", "C"])

        rule.handler("A", "On")
        rule.handler("A", "On")

        assert b.set_state_calls == ["On"]
        assert c.set_state_calls == ["On"]

    def test_never_sets_trigger(self, host):
        """Test that the triggering device is not written."""
        a = host.add_device("A", "Off")
        host.add_device("B", "Off")
        rule = same_devices(host, "hall", ["A", "B"])

        rule.handler("A", "On")

        assert a.set_state_calls == []

    def test_unresolved_peer(self, host):
        """Test one error per missing peer and no exception."""
        host.add_device("A", "On")
        b = host.add_device("B", "Off")
        rule = same_devices(host, "hall", ["A", "Ghost", "B"])

        rule.handler("A", "On")

        assert host.get_log(LogLevel.ERROR) == ["Peer Ghost of device A does not exist"]
        assert b.state == "On"

    def test_rejects_single_string(self, host):
        """Test that a bare string is not taken as a list of names."""
        with pytest.raises(TypeError):
            same_devices(host, "hall", "AB")

    def test_rejects_empty_name(self, host):
        """Test that the set name is required."""
        with pytest.raises(ValueError):
            same_devices(host, "", ["A", "B"])


class TestSameDevicesGroups:
    """Tests for same_devices_groups preset."""

    def test_subscriptions(self, host):
        """Test that devices and groups are watched separately."""
        rule = same_devices_groups(host, "floor", ["A"], ["G1", "G2"])

        assert rule.log_tag == "same_dev_gr(floor)"
        assert rule.subscriptions.devices == ("A",)
        assert rule.subscriptions.groups == ("G1", "G2")
        assert "G2" in rule.subscriptions

    def test_device_drives_groups(self, host):
        """Test that a device change reaches the groups."""
        host.add_device("A", "On")
        g = host.add_group("G1", "Off")
        rule = same_devices_groups(host, "floor", ["A"], ["G1"])

        rule.handler("A", "On")

        assert g.set_state_calls == ["On"]

    def test_group_drives_devices(self, host):
        """Test that a group change reaches the devices."""
        a = host.add_device("A", "Off")
        host.add_group("G1", "Group On")
        rule = same_devices_groups(host, "floor", ["A"], ["G1"])

        rule.handler("G1", "Group On")

        assert a.set_state_calls == ["Group On"]

    def test_missing_group(self, host):
        """Test one error for a missing group and no exception."""
        host.add_device("A", "On")
        g = host.add_group("G1", "Off")
        rule = same_devices_groups(host, "floor", ["A"], ["Ghost", "G1"])

        rule.handler("A", "On")

        assert host.get_log(LogLevel.ERROR) == ["Peer Ghost of device A does not exist"]
        assert g.state == "On"


class TestExclusiveDevices:
    """Tests for exclusive_devices preset."""

    def test_on_turns_others_off(self, host):
        """Test that switching one device on turns the others off."""
        host.add_device("H1", "On")
        h2 = host.add_device("H2", "On")
        rule = exclusive_devices(host, "heaters", ["H1", "H2"])

        rule.handler("H1", "On")

        assert rule.log_tag == "exclusive(heaters)"
        assert h2.set_state_calls == ["Off"]

    def test_off_is_noop(self, host):
        """Test that switching off does nothing."""
        host.add_device("H1", "Off")
        h2 = host.add_device("H2", "On")
        rule = exclusive_devices(host, "heaters", ["H1", "H2"])

        rule.handler("H1", "Off")

        assert h2.set_state_calls == []
        assert host.get_log() == []

    def test_dimmer_level_counts_as_on(self, host):
        """Test that any state other than Off enforces exclusivity."""
        host.add_device("H1", "Set Level: 20 %")
        h2 = host.add_device("H2", "On")
        rule = exclusive_devices(host, "heaters", ["H1", "H2"])

        rule.handler("H1", "Set Level: 20 %")

        assert h2.state == "Off"

    def test_missing_device(self, host):
        """Test one error for a missing device and the rest switched off."""
        host.add_device("H1", "On")
        h2 = host.add_device("H2", "On")
        rule = exclusive_devices(host, "heaters", ["H1", "Ghost", "H2"])

        rule.handler("H1", "On")

        assert host.get_log(LogLevel.ERROR) == ["Peer Ghost of device H1 does not exist"]
        assert h2.state == "Off"


class TestMainSwitchesAll:
    """Tests for main_switches_all preset."""

    @pytest.fixture
    def devices(self, host):
        host.add_device("M", "On")
        return host.add_device("S1", "Off"), host.add_device("S2", "Off")

    def test_any(self, host, devices):
        """Test that "any" copies the main state."""
        rule = main_switches_all(host, "M", "any", ["S1", "S2"])

        rule.handler("M", "On")

        assert rule.log_tag == "main_switches_all(M, Any)"
        assert rule.subscriptions.all() == frozenset({"M"})
        assert [s.state for s in devices] == ["On", "On"]

    def test_off_ignores_on(self, host, devices):
        """Test that an "off" rule ignores the main turning on."""
        rule = main_switches_all(host, "M", "off", ["S1", "S2"])

        rule.handler("M", "On")

        assert all(s.set_state_calls == [] for s in devices)

    def test_on_only(self, host, devices):
        """Test that an "on" rule fires on On and ignores Off."""
        s1, s2 = devices
        s1.force_state("On")
        s2.force_state("On")
        rule = main_switches_all(host, "M", "on", ["S1", "S2"])

        rule.handler("M", "Off")
        assert s1.state == "On"

        s1.force_state("Off")
        rule.handler("M", "On")
        assert s1.set_state_calls == ["On"]
        assert rule.log_tag == "main_switches_all(M, On)"

    def test_missing_device(self, host, devices):
        """Test one error for a missing device while the others still follow."""
        rule = main_switches_all(host, "M", "any", ["S1", "Ghost", "S2"])

        rule.handler("M", "On")

        assert host.get_log(LogLevel.ERROR) == ["Peer Ghost of device M does not exist"]
        assert [s.state for s in devices] == ["On", "On"]

    def test_unknown_transition(self, host):
        """Test that an unknown transition is rejected."""
        with pytest.raises(ValueError):
            main_switches_all(host, "M", "sometimes", ["S1"])


class TestTimedDevices:
    """Tests for timed_devices preset."""

    def test_subscriptions(self, host):
        """Test that the keys of the timeout mapping are watched."""
        rule = timed_devices(host, "forgotten", {"L1": 5, "L2": {"timeout": 1, "unit": "hour"}})

        assert rule.log_tag == "timed_devices(forgotten)"
        assert rule.subscriptions.all() == frozenset({"L1", "L2"})

    def test_minutes_with_unit(self, host):
        """Test 10.5 minutes schedules an off at 630 seconds."""
        light = host.add_device("L1", "On")
        rule = timed_devices(host, "t", {"L1": {"timeout": 10.5, "unit": "minute"}})

        rule.handler("L1", "On")

        assert light.scheduled == [("Off", 630)]
        assert host.get_log(LogLevel.INFO) == ["Scheduled Off for L1 in 630.0 seconds"]

    def test_off_does_not_schedule(self, host):
        """Test that turning off schedules nothing."""
        light = host.add_device("L1", "Off")
        rule = timed_devices(host, "t", {"L1": {"timeout": 10.5, "unit": "minute"}})

        rule.handler("L1", "Off")

        assert light.scheduled == []
        assert light.cancel_count == 0

    def test_plain_number_is_minutes(self, host):
        """Test that a plain number means minutes."""
        light = host.add_device("L2", "On")
        rule = timed_devices(host, "t", {"L2": 5})

        rule.handler("L2", "On")

        assert light.scheduled == [("Off", 300)]

    @pytest.mark.parametrize(
        "spec,seconds",
        [
            ({"timeout": 5, "unit": "second"}, 5),
            ({"timeout": 2}, 120),
            ({"timeout": 0.5, "unit": "hour"}, 1800),
            (0.5, 30),
        ],
    )
    def test_units(self, host, spec, seconds):
        """Test unit conversions."""
        light = host.add_device("L", "On")
        rule = timed_devices(host, "t", {"L": spec})

        rule.handler("L", "On")

        assert light.scheduled == [("Off", seconds)]

    def test_retrigger_cancels_previous(self, host):
        """Test that a new On replaces the pending off."""
        light = host.add_device("L", "On")
        rule = timed_devices(host, "t", {"L": 5})

        rule.handler("L", "On")
        rule.handler("L", "On")

        assert light.cancel_count == 2
        assert light.scheduled == [("Off", 300)]

    def test_zero_timeout_cancels_only(self, host):
        """Test that a zero timeout cancels without rescheduling."""
        light = host.add_device("L", "On")
        rule = timed_devices(host, "t", {"L": 0})

        rule.handler("L", "On")

        assert light.cancel_count == 1
        assert light.scheduled == []
        assert host.get_log() == []

    def test_unrecognized_unit(self, host):
        """Test that a bad unit is logged at info and nothing is scheduled."""
        light = host.add_device("L3", "On")
        other = host.add_device("L4", "On")
        rule = timed_devices(
            host, "t", {"L3": {"timeout": 2, "unit": "fortnight"}, "L4": 1}
        )

        rule.handler("L3", "On")
        rule.handler("L4", "On")

        assert light.scheduled == []
        assert host.get_log(LogLevel.INFO)[0] == "Processing L3: unit = fortnight not recognized"
        assert host.get_log(LogLevel.ERROR) == []
        assert other.scheduled == [("Off", 60)]

    def test_missing_device(self, host):
        """Test that a trigger missing from the registry logs an error."""
        rule = timed_devices(host, "t", {"L": 5})

        rule.handler("L", "On")

        assert host.get_log(LogLevel.ERROR) == ["Device L does not exist"]

    def test_numeric_string_is_minutes(self, host):
        """Test that a numeric string from a text config means minutes."""
        light = host.add_device("L", "On")
        rule = timed_devices(host, "t", {"L": "5"})

        rule.handler("L", "On")

        assert light.scheduled == [("Off", 300)]

    def test_bad_spec_rejected(self, host):
        """Test that a non-numeric timeout is rejected at construction."""
        with pytest.raises(TypeError):
            timed_devices(host, "t", {"L": "five"})


class TestCascade:
    """Tests for cascade preset."""

    def test_group_on_turns_main_on(self, host):
        """Test that Group On cascades to the main."""
        main = host.add_device("Main", "Off")
        host.add_device("S1", "Group On")
        rule = cascade(host, "Main", ["S1", "S2"])

        rule.handler("S1", "Group On")

        assert rule.log_tag == "cascade(Main)"
        assert rule.subscriptions.all() == frozenset({"S1", "S2"})
        assert main.set_state_calls == ["On"]
        assert host.get_log(LogLevel.INFO) == ["Group On for Main because S1 was changed"]

    def test_on_trigger_log(self, host):
        """Test that an On trigger writes On and logs On."""
        main = host.add_device("Main", "Off")
        rule = cascade(host, "Main", ["S1"])

        rule.handler("S1", "On")

        assert main.state == "On"
        assert host.get_log(LogLevel.INFO) == ["On for Main because S1 was changed"]

    def test_off_is_noop(self, host):
        """Test that Off never reaches the main."""
        main = host.add_device("Main", "On")
        rule = cascade(host, "Main", ["S1", "S2"])

        rule.handler("S1", "Off")

        assert main.set_state_calls == []

    def test_main_already_on(self, host):
        """Test that a main already on is not written."""
        main = host.add_device("Main", "On")
        rule = cascade(host, "Main", ["S1"])

        rule.handler("S1", "On")

        assert main.set_state_calls == []
        assert host.get_log() == []

    def test_missing_main(self, host):
        """Test that a missing main logs an error."""
        rule = cascade(host, "Main", ["S1"])

        rule.handler("S1", "On")

        assert host.get_log(LogLevel.ERROR) == ["Main Main of device S1 does not exist"]

    def test_main_is_not_looked_up_as_group(self, host):
        """Test that a group named like the main does not count."""
        group = host.add_group("Main", "Off")
        rule = cascade(host, "Main", ["S1"])

        rule.handler("S1", "On")

        assert group.set_state_calls == []
        assert len(host.get_log(LogLevel.ERROR)) == 1


class TestMutualGroup:
    """Tests for mutual_group preset."""

    @pytest.fixture
    def devices(self, host):
        return (
            host.add_device("Main", "Off"),
            host.add_device("S1", "Off"),
            host.add_device("S2", "Off"),
        )

    def test_subscriptions(self, host):
        """Test that main and members are watched."""
        rule = mutual_group(host, "Main", ["S1", "S2"])

        assert rule.log_tag == "dzv_group(Main)"
        assert rule.subscriptions.devices == ("S1", "S2", "Main")

    def test_main_follows_when_all_agree(self, host, devices):
        """Test that the main only follows once every member agrees."""
        main, s1, s2 = devices
        rule = mutual_group(host, "Main", ["S1", "S2"])

        s1.force_state("On")
        rule.handler("S1", "On")
        assert main.set_state_calls == []

        s2.force_state("On")
        rule.handler("S2", "On")
        assert main.set_state_calls == ["On"]

    def test_main_drives_members(self, host, devices):
        """Test that switching the main sets every member."""
        main, s1, s2 = devices
        for d in devices:
            d.force_state("On")
        rule = mutual_group(host, "Main", ["S1", "S2"])

        main.force_state("Off")
        rule.handler("Main", "Off")

        assert s1.set_state_calls == ["Off"]
        assert s2.set_state_calls == ["Off"]

    def test_missing_member_blocks_main(self, host, devices):
        """Test that an unresolved member counts as disagreeing."""
        main, s1, _ = devices
        rule = mutual_group(host, "Main", ["S1", "Ghost"])

        s1.force_state("On")
        rule.handler("S1", "On")

        assert main.set_state_calls == []
        assert host.get_log(LogLevel.ERROR) == ["Peer Ghost of device S1 does not exist"]

    def test_missing_main(self, host):
        """Test that a missing main logs an error and raises nothing."""
        host.add_device("S1", "On")
        rule = mutual_group(host, "Main", ["S1"])

        rule.handler("S1", "On")

        assert host.get_log(LogLevel.ERROR) == ["Main Main of device S1 does not exist"]
