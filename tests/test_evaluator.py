"""
Tests for the per-subsystem diagnostic evaluator.

Run with: python3 -m pytest tests/test_evaluator.py -v
"""

import sys
import os
import math

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from core.diagnostics import (
    ActionKind,
    CellularSnapshot,
    CloudSnapshot,
    DiagnosticStatus,
    Duplex,
    EthernetSnapshot,
    FirmwareSnapshot,
    InvalidSnapshotError,
    PowerSnapshot,
    PressureBand,
    PressureSnapshot,
    Reachability,
    SatelliteSnapshot,
    SatelliteState,
    SubsystemId,
    Thresholds,
    UnknownSubsystemError,
    WifiSnapshot,
    evaluate,
)
from core.diagnostics.evaluator import NO_VALUE, classify_voltage, parse_speed_mbps

SUCCESS = DiagnosticStatus.SUCCESS
WARNING = DiagnosticStatus.WARNING
ERROR = DiagnosticStatus.ERROR

ONLINE = Reachability.ONLINE
OFFLINE = Reachability.OFFLINE


def healthy_ethernet(**overrides):
    values = dict(link_detected=True, internet=ONLINE, rx_errors=0, tx_errors=0,
                  duplex=Duplex.FULL, speed="1000 Mb/s", ipv4_address="192.168.7.31")
    values.update(overrides)
    return EthernetSnapshot(**values)


class TestEthernet:
    """Ethernet link, reachability and error counters."""

    def test_healthy_link_is_connected(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet())
        assert verdict.status == SUCCESS
        assert verdict.summary_primary == "Connected"

    def test_secondary_summary(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet())
        assert verdict.summary_secondary == "192.168.7.31 • 1000 Mb/s • Link Yes"

    def test_no_link_is_offline(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(link_detected=False))
        assert verdict.status == ERROR
        assert verdict.summary_primary == "Offline"

    def test_link_without_internet_is_error(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(internet=OFFLINE))
        assert verdict.status == ERROR

    def test_unknown_internet_is_error(self):
        verdict = evaluate(SubsystemId.ETHERNET,
                           healthy_ethernet(internet=Reachability.UNKNOWN))
        assert verdict.status == ERROR

    def test_rx_errors_degrade(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(rx_errors=3))
        assert verdict.status == WARNING
        assert verdict.summary_primary == "Degraded"
        assert "RX/TX errors 3/0" in verdict.detail("Advisories")

    def test_tx_errors_degrade(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(tx_errors=1))
        assert verdict.status == WARNING

    def test_unknown_error_counters_degrade(self):
        """Link up with unreported counters is never a clean pass."""
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(rx_errors=None))
        assert verdict.status == WARNING

    def test_half_duplex_degrades(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(duplex=Duplex.HALF))
        assert verdict.status == WARNING
        assert "Half duplex" in verdict.detail("Advisories")

    def test_errors_with_no_link_stay_error(self):
        verdict = evaluate(SubsystemId.ETHERNET,
                           healthy_ethernet(link_detected=False, rx_errors=12))
        assert verdict.status == ERROR

    def test_speed_check_disabled_by_default(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(speed="100 Mb/s"))
        assert verdict.status == SUCCESS

    def test_slow_speed_with_threshold(self):
        thresholds = Thresholds(ethernet_min_speed_mbps=1000)
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(speed="100Mb/s"), thresholds)
        assert verdict.status == WARNING

    def test_expected_speed_with_threshold(self):
        thresholds = Thresholds(ethernet_min_speed_mbps=1000)
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(speed="1000Mb/s"), thresholds)
        assert verdict.status == SUCCESS

    def test_rx_dropped_threshold(self):
        thresholds = Thresholds(ethernet_max_rx_dropped=50)
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet(rx_dropped=76), thresholds)
        assert verdict.status == WARNING
        assert "RX dropped 76" in verdict.detail("Advisories")

    def test_empty_snapshot_is_error(self):
        verdict = evaluate(SubsystemId.ETHERNET, EthernetSnapshot())
        assert verdict.status == ERROR

    def test_missing_detail_renders_placeholder(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet())
        assert verdict.detail("Netmask") == NO_VALUE

    def test_no_advisory_row_when_connected(self):
        verdict = evaluate(SubsystemId.ETHERNET, healthy_ethernet())
        assert verdict.detail("Advisories") is None


class TestParseSpeed:
    """Test ethtool speed parsing."""

    def test_megabits(self):
        assert parse_speed_mbps("1000Mb/s") == 1000

    def test_gigabits(self):
        assert parse_speed_mbps("2.5 Gb/s") == 2500

    def test_unparseable(self):
        assert parse_speed_mbps("Unknown!") is None
        assert parse_speed_mbps(None) is None


class TestWifi:
    """Wi-Fi provisioning, power and reachability."""

    def test_provisioned_and_online(self):
        verdict = evaluate(SubsystemId.WIFI, WifiSnapshot(provisioned=True, internet=ONLINE))
        assert verdict.status == SUCCESS
        assert verdict.summary_primary == "Connected"
        assert verdict.remediation is None

    def test_provisioned_but_offline(self):
        verdict = evaluate(SubsystemId.WIFI, WifiSnapshot(provisioned=True, internet=OFFLINE))
        assert verdict.status == WARNING
        assert verdict.summary_primary == "No Internet"

    def test_unprovisioned_connected_online(self):
        snap = WifiSnapshot(provisioned=False, powered=True, connected=True, internet=ONLINE)
        assert evaluate(SubsystemId.WIFI, snap).status == SUCCESS

    def test_connected_but_offline(self):
        snap = WifiSnapshot(powered=True, connected=True, internet=OFFLINE)
        assert evaluate(SubsystemId.WIFI, snap).status == WARNING

    def test_disabled_is_optional(self):
        verdict = evaluate(SubsystemId.WIFI, WifiSnapshot(powered=False))
        assert verdict.status == WARNING
        assert verdict.summary_primary == "Disabled / Optional"
        assert verdict.summary_secondary == "Wi-Fi disabled"

    def test_disabled_offers_optional_setup(self):
        verdict = evaluate(SubsystemId.WIFI, WifiSnapshot(powered=False))
        assert verdict.remediation.title == "Optional"
        assert len(verdict.remediation.actions) == 1
        assert verdict.remediation.primary_action.kind == ActionKind.NAVIGATE_TO_NETWORK_SETUP

    def test_powered_not_connected_is_error(self):
        verdict = evaluate(SubsystemId.WIFI, WifiSnapshot(powered=True, connected=False))
        assert verdict.status == ERROR
        assert verdict.summary_primary == "Not Connected"
        assert verdict.summary_secondary == "No SSID connected"

    def test_error_requires_action(self):
        verdict = evaluate(SubsystemId.WIFI, WifiSnapshot(powered=True, connected=False))
        remediation = verdict.remediation
        assert remediation.title == "Action Required"
        assert [a.label for a in remediation.actions] == [
            "Configure Wi-Fi Network", "Wi-Fi Rulebook",
        ]
        assert remediation.primary_action.kind == ActionKind.NAVIGATE_TO_NETWORK_SETUP
        assert remediation.actions[1].kind == ActionKind.OPEN_RULEBOOK_ENTRY

    def test_unknown_flags_never_pass(self):
        """Unknown flags count as false."""
        verdict = evaluate(SubsystemId.WIFI, WifiSnapshot())
        assert verdict.status != SUCCESS

    def test_secondary_shows_ssid_and_strength(self):
        snap = WifiSnapshot(provisioned=True, internet=ONLINE, ssid="Southern Cousin",
                            strength_percent=100, strength_label="strong")
        verdict = evaluate(SubsystemId.WIFI, snap)
        assert verdict.summary_secondary == "Southern Cousin • ▮▮▮▮▮ 100/100 (strong)"

    def test_strength_label_derived_when_missing(self):
        snap = WifiSnapshot(provisioned=True, internet=ONLINE, ssid="Barn",
                            strength_percent=60)
        verdict = evaluate(SubsystemId.WIFI, snap)
        assert verdict.summary_secondary == "Barn • ▮▮▮▯▯ 60/100 (good)"

    def test_channel_detail(self):
        snap = WifiSnapshot(provisioned=True, internet=ONLINE, frequency_mhz=2412)
        verdict = evaluate(SubsystemId.WIFI, snap)
        assert verdict.detail("Channel") == "1"
        assert verdict.detail("Frequency") == "2412 MHz"

    def test_unknown_frequency_has_no_channel(self):
        verdict = evaluate(SubsystemId.WIFI, WifiSnapshot(provisioned=True, internet=ONLINE))
        assert verdict.detail("Channel") == NO_VALUE


class TestCellular:
    """Cellular reachability, packet loss and signal."""

    def test_healthy(self):
        snap = CellularSnapshot(internet=ONLINE, packet_loss_pct=0, strength_percent=60)
        verdict = evaluate(SubsystemId.CELLULAR, snap)
        assert verdict.status == SUCCESS
        assert verdict.summary_primary == "Connected"

    def test_boundaries_are_inclusive(self):
        snap = CellularSnapshot(internet=ONLINE, packet_loss_pct=2.0, strength_percent=40)
        assert evaluate(SubsystemId.CELLULAR, snap).status == SUCCESS

    def test_weak_signal(self):
        snap = CellularSnapshot(internet=ONLINE, packet_loss_pct=0, strength_percent=39)
        verdict = evaluate(SubsystemId.CELLULAR, snap)
        assert verdict.status == WARNING
        assert verdict.summary_primary == "Degraded"

    def test_packet_loss(self):
        snap = CellularSnapshot(internet=ONLINE, packet_loss_pct=2.5, strength_percent=80)
        assert evaluate(SubsystemId.CELLULAR, snap).status == WARNING

    def test_offline(self):
        snap = CellularSnapshot(internet=OFFLINE, packet_loss_pct=0, strength_percent=80)
        verdict = evaluate(SubsystemId.CELLULAR, snap)
        assert verdict.status == ERROR
        assert verdict.summary_primary == "Offline"

    def test_unknown_reachability(self):
        assert evaluate(SubsystemId.CELLULAR, CellularSnapshot()).status == ERROR

    def test_unknown_loss_while_online(self):
        snap = CellularSnapshot(internet=ONLINE, strength_percent=80)
        assert evaluate(SubsystemId.CELLULAR, snap).status == WARNING

    def test_nan_strength_while_online(self):
        snap = CellularSnapshot(internet=ONLINE, packet_loss_pct=0, strength_percent=math.nan)
        assert evaluate(SubsystemId.CELLULAR, snap).status == WARNING

    def test_provider_detail(self):
        snap = CellularSnapshot(internet=ONLINE, provider_name="Verizon", provider_id="311480")
        verdict = evaluate(SubsystemId.CELLULAR, snap)
        assert verdict.detail("Provider") == "Verizon (311480)"


class TestSatellite:
    """Satellite is a backup link and never blocks commissioning."""

    def test_enabled_ready(self):
        snap = SatelliteSnapshot(enabled=True, state=SatelliteState.READY)
        verdict = evaluate(SubsystemId.SATELLITE, snap)
        assert verdict.status == SUCCESS
        assert verdict.summary_primary == "Ready"

    def test_enabled_offline(self):
        snap = SatelliteSnapshot(enabled=True, state=SatelliteState.OFFLINE)
        verdict = evaluate(SubsystemId.SATELLITE, snap)
        assert verdict.status == WARNING
        assert verdict.summary_primary == "Offline"

    def test_not_enabled(self):
        verdict = evaluate(SubsystemId.SATELLITE, SatelliteSnapshot(enabled=False))
        assert verdict.status == WARNING
        assert verdict.summary_primary == "Not Configured"
        assert verdict.summary_secondary == "Not enabled"

    def test_enabled_not_configured(self):
        snap = SatelliteSnapshot(enabled=True, state=SatelliteState.NOT_CONFIGURED)
        verdict = evaluate(SubsystemId.SATELLITE, snap)
        assert verdict.status == WARNING
        assert verdict.summary_primary == "Offline"
        assert verdict.detail("Status") == "not-configured"

    @pytest.mark.parametrize("enabled", [True, False, None])
    @pytest.mark.parametrize("state", list(SatelliteState) + [None])
    def test_never_error(self, enabled, state):
        snap = SatelliteSnapshot(enabled=enabled, state=state)
        assert evaluate(SubsystemId.SATELLITE, snap).status != ERROR


class TestPower:
    """Supply voltage bands."""

    @pytest.mark.parametrize("voltage,status", [
        (13.4, SUCCESS),
        (12.0, SUCCESS),
        (15.0, SUCCESS),
        (11.99, WARNING),
        (11.0, WARNING),
        (15.01, WARNING),
        (16.0, WARNING),
        (10.99, ERROR),
        (16.01, ERROR),
        (0.0, ERROR),
    ])
    def test_voltage_bands(self, voltage, status):
        verdict = evaluate(SubsystemId.POWER, PowerSnapshot(voltage=voltage))
        assert verdict.status == status

    def test_summary(self):
        verdict = evaluate(SubsystemId.POWER, PowerSnapshot(voltage=13.4))
        assert verdict.summary_primary == "Normal"
        assert verdict.summary_secondary == "13.4 V"

    def test_marginal_label(self):
        verdict = evaluate(SubsystemId.POWER, PowerSnapshot(voltage=11.5))
        assert verdict.summary_primary == "Marginal"

    def test_out_of_range_label(self):
        verdict = evaluate(SubsystemId.POWER, PowerSnapshot(voltage=24.0))
        assert verdict.summary_primary == "Out of range"

    @pytest.mark.parametrize("voltage", [None, math.nan, math.inf])
    def test_no_reading_is_error(self, voltage):
        verdict = evaluate(SubsystemId.POWER, PowerSnapshot(voltage=voltage))
        assert verdict.status == ERROR
        assert verdict.summary_primary == "No reading"
        assert verdict.summary_secondary == NO_VALUE

    def test_classify_voltage_matches_evaluate(self):
        for tenths in range(90, 180):
            v = tenths / 10
            verdict = evaluate(SubsystemId.POWER, PowerSnapshot(voltage=v))
            assert verdict.status == classify_voltage(v)


class TestPressure:
    """Manifold and source pressure bands."""

    @pytest.mark.parametrize("psi,status,label", [
        (45, SUCCESS, "Normal"),
        (30, SUCCESS, "Normal"),
        (80, SUCCESS, "Normal"),
        (25, WARNING, "Marginal"),
        (20, WARNING, "Marginal"),
        (19.9, ERROR, "Low"),
        (0, ERROR, "Low"),
        (81, ERROR, "High"),
    ])
    def test_default_band(self, psi, status, label):
        verdict = evaluate(SubsystemId.MANIFOLD, PressureSnapshot(psi=psi))
        assert verdict.status == status
        assert verdict.summary_primary == label

    def test_no_reading(self):
        verdict = evaluate(SubsystemId.SOURCE, PressureSnapshot())
        assert verdict.status == ERROR
        assert verdict.summary_primary == "No reading"

    def test_snapshot_range_overrides_band(self):
        snap = PressureSnapshot(psi=35, expected_low=40, expected_high=60)
        verdict = evaluate(SubsystemId.MANIFOLD, snap)
        assert verdict.status == WARNING
        assert verdict.detail("Expected") == "40–60 PSI"

    def test_bands_are_per_sensor(self):
        thresholds = Thresholds(source=PressureBand(marginal_low=25))
        snap = PressureSnapshot(psi=22)
        assert evaluate(SubsystemId.SOURCE, snap, thresholds).status == ERROR
        assert evaluate(SubsystemId.MANIFOLD, snap, thresholds).status == WARNING

    def test_inverted_range_rejected(self):
        snap = PressureSnapshot(psi=50, expected_low=90, expected_high=80)
        with pytest.raises(InvalidSnapshotError):
            evaluate(SubsystemId.MANIFOLD, snap)

    def test_informational_rows(self):
        snap = PressureSnapshot(psi=62, source_type="Municipal", stability="Steady")
        verdict = evaluate(SubsystemId.SOURCE, snap)
        assert verdict.detail("Source type") == "Municipal"
        assert verdict.detail("Stability") == "Steady"
        assert verdict.detail("Last test") is None


class TestCloud:
    """Cloud endpoint reachability and ping time."""

    def test_synced(self):
        snap = CloudSnapshot(reachable=True, ping_ms=42, last_sync="Just now")
        verdict = evaluate(SubsystemId.CLOUD, snap)
        assert verdict.status == SUCCESS
        assert verdict.summary_primary == "Synced"
        assert verdict.summary_secondary == "Just now"

    def test_threshold_is_inclusive(self):
        snap = CloudSnapshot(reachable=True, ping_ms=250)
        assert evaluate(SubsystemId.CLOUD, snap).status == SUCCESS

    def test_slow_ping(self):
        snap = CloudSnapshot(reachable=True, ping_ms=251)
        verdict = evaluate(SubsystemId.CLOUD, snap)
        assert verdict.status == WARNING
        assert verdict.summary_primary == "Delayed"
        assert verdict.summary_secondary == "Ping 251 ms"

    def test_unreachable(self):
        verdict = evaluate(SubsystemId.CLOUD, CloudSnapshot(reachable=False, ping_ms=10))
        assert verdict.status == ERROR
        assert verdict.summary_primary == "Offline"

    def test_unknown_reachability(self):
        assert evaluate(SubsystemId.CLOUD, CloudSnapshot()).status == ERROR

    def test_unknown_ping_while_reachable(self):
        verdict = evaluate(SubsystemId.CLOUD, CloudSnapshot(reachable=True))
        assert verdict.status == WARNING
        assert verdict.summary_secondary == "Ping time unknown"

    def test_configured_threshold(self):
        thresholds = Thresholds(cloud_ping_threshold_ms=100)
        snap = CloudSnapshot(reachable=True, ping_ms=150)
        verdict = evaluate(SubsystemId.CLOUD, snap, thresholds)
        assert verdict.status == WARNING
        assert verdict.detail("Threshold") == "100 ms"


class TestFirmware:
    """Firmware support and update availability."""

    def test_current(self):
        snap = FirmwareSnapshot(version="r3.0.8", supported=True, update_available=False)
        verdict = evaluate(SubsystemId.FIRMWARE, snap)
        assert verdict.status == SUCCESS
        assert verdict.summary_primary == "Current"
        assert verdict.summary_secondary == "r3.0.8"

    def test_update_available(self):
        snap = FirmwareSnapshot(supported=True, update_available=True)
        verdict = evaluate(SubsystemId.FIRMWARE, snap)
        assert verdict.status == WARNING
        assert verdict.summary_primary == "Update available"

    def test_unsupported(self):
        snap = FirmwareSnapshot(supported=False, update_available=True)
        verdict = evaluate(SubsystemId.FIRMWARE, snap)
        assert verdict.status == ERROR
        assert verdict.summary_primary == "Unsupported"

    def test_unknown_support(self):
        verdict = evaluate(SubsystemId.FIRMWARE, FirmwareSnapshot(update_available=False))
        assert verdict.status == ERROR
        assert verdict.summary_primary == "Unknown"

    def test_unknown_update_flag(self):
        verdict = evaluate(SubsystemId.FIRMWARE, FirmwareSnapshot(supported=True))
        assert verdict.status == WARNING


class TestEvaluateContract:
    """Input handling shared by every subsystem."""

    def test_accepts_string_id(self):
        assert evaluate("power", PowerSnapshot(voltage=13.4)).subsystem == SubsystemId.POWER

    def test_accepts_plain_dict(self):
        verdict = evaluate("power", {'voltage': 13.4})
        assert verdict.status == SUCCESS

    def test_unknown_subsystem(self):
        with pytest.raises(UnknownSubsystemError):
            evaluate("modem", PowerSnapshot(voltage=13.4))

    def test_unknown_subsystem_is_value_error(self):
        with pytest.raises(ValueError):
            evaluate("", {})

    def test_wrong_snapshot_type(self):
        with pytest.raises(InvalidSnapshotError):
            evaluate(SubsystemId.POWER, EthernetSnapshot())

    def test_missing_snapshot(self):
        with pytest.raises(InvalidSnapshotError):
            evaluate(SubsystemId.POWER, None)

    def test_malformed_dict(self):
        with pytest.raises(InvalidSnapshotError):
            evaluate("power", {'voltage': 'high'})

    def test_unknown_field(self):
        with pytest.raises(InvalidSnapshotError):
            evaluate("power", {'volts': 12})

    def test_pure(self):
        """Same snapshot and thresholds give the same verdict."""
        snap = healthy_ethernet(rx_errors=2)
        assert evaluate("ethernet", snap) == evaluate("ethernet", snap)

    def test_only_wifi_carries_remediation(self):
        failing = {
            SubsystemId.ETHERNET: EthernetSnapshot(),
            SubsystemId.CELLULAR: CellularSnapshot(),
            SubsystemId.SATELLITE: SatelliteSnapshot(),
            SubsystemId.POWER: PowerSnapshot(),
            SubsystemId.MANIFOLD: PressureSnapshot(),
            SubsystemId.SOURCE: PressureSnapshot(),
            SubsystemId.CLOUD: CloudSnapshot(),
            SubsystemId.FIRMWARE: FirmwareSnapshot(),
        }
        for subsystem, snap in failing.items():
            verdict = evaluate(subsystem, snap)
            assert verdict.status != SUCCESS
            assert verdict.remediation is None, subsystem

    def test_empty_snapshots_never_succeed(self):
        from core.diagnostics.snapshots import SNAPSHOT_TYPES
        for subsystem, snapshot_type in SNAPSHOT_TYPES.items():
            assert evaluate(subsystem, snapshot_type()).status != SUCCESS, subsystem
