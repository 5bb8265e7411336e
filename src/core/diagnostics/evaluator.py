"""
Diagnostic Evaluator

Reduces one subsystem's Measurement Snapshot to a Verdict.

Every evaluation is a pure function of (snapshot, thresholds): no I/O,
no shared mutable state, safe to call from any thread. Unmeasured
values (None) never produce SUCCESS.

Usage:
    from core.diagnostics import evaluate, SubsystemId, PowerSnapshot
    verdict = evaluate(SubsystemId.POWER, PowerSnapshot(voltage=13.4))
"""

import logging
import math
import re
from typing import Callable, Dict, List, Optional, Tuple

from .config import (
    CELLULAR_MAX_PACKET_LOSS,
    CELLULAR_MIN_STRENGTH,
    DEFAULT_THRESHOLDS,
    POWER_MARGINAL_V,
    POWER_NORMAL_V,
    PressureBand,
    Thresholds,
)
from .exceptions import InvalidSnapshotError
from .models import (
    ActionKind,
    DetailItem,
    DiagnosticStatus,
    Remediation,
    RemediationAction,
    SubsystemId,
    Verdict,
)
from .signal_utils import signal_bars, strength_label, wifi_channel
from .snapshots import (
    CellularSnapshot,
    CloudSnapshot,
    Duplex,
    EthernetSnapshot,
    FirmwareSnapshot,
    PowerSnapshot,
    PressureSnapshot,
    Reachability,
    SatelliteSnapshot,
    SatelliteState,
    SNAPSHOT_TYPES,
    Snapshot,
    WifiSnapshot,
    resolve_subsystem,
    snapshot_from_dict,
)

logger = logging.getLogger(__name__)

SUCCESS = DiagnosticStatus.SUCCESS
WARNING = DiagnosticStatus.WARNING
ERROR = DiagnosticStatus.ERROR

NO_VALUE = "—"

_SPEED_RE = re.compile(r'([\d.]+)\s*([MG])b', re.IGNORECASE)


# === Formatting helpers ===

def _text(value) -> str:
    return NO_VALUE if value is None or value == "" else str(value)


def _yes_no(value: Optional[bool], yes: str = "Yes", no: str = "No") -> str:
    if value is None:
        return NO_VALUE
    return yes if value else no


def _num(value: Optional[float], unit: str = "") -> str:
    if value is None:
        return NO_VALUE
    return f"{value:g}{unit}"


def _finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def _details(*rows: Tuple[str, str]) -> Tuple[DetailItem, ...]:
    return tuple(DetailItem(label, value) for label, value in rows)


def _reachability(value: Reachability) -> str:
    return value.value if value else Reachability.UNKNOWN.value


def parse_speed_mbps(speed: Optional[str]) -> Optional[float]:
    """Parse an ethtool speed string ("1000Mb/s", "2.5 Gb/s") into Mb/s."""
    if not speed:
        return None
    match = _SPEED_RE.search(speed)
    if not match:
        return None
    try:
        value = float(match.group(1))
    except ValueError:
        return None
    return value * 1000 if match.group(2).upper() == 'G' else value


def _strength_text(percent: Optional[float], label: Optional[str],
                   dbm: Optional[float] = None) -> str:
    """'▮▮▮▯▯ 60/100 (good)' style signal description."""
    if percent is not None:
        text = f"{signal_bars(percent)} {percent:g}/100"
    elif dbm is not None:
        text = f"{signal_bars(None)} {dbm:g} dBm"
    else:
        return NO_VALUE
    word = label or strength_label(percent)
    return f"{text} ({word})" if word else text


# === Classification rules ===

def classify_voltage(voltage: Optional[float]) -> DiagnosticStatus:
    """Supply voltage band: normal is success, marginal is warning, else error."""
    if not _finite(voltage):
        return ERROR
    normal_lo, normal_hi = POWER_NORMAL_V
    marginal_lo, marginal_hi = POWER_MARGINAL_V
    if normal_lo <= voltage <= normal_hi:
        return SUCCESS
    if marginal_lo <= voltage < normal_lo or normal_hi < voltage <= marginal_hi:
        return WARNING
    return ERROR


def classify_pressure(psi: Optional[float], low: float, high: float,
                      marginal_low: float) -> DiagnosticStatus:
    """Pressure band: expected range is success, marginal band below it is warning."""
    if not _finite(psi):
        return ERROR
    if low <= psi <= high:
        return SUCCESS
    if marginal_low <= psi < low:
        return WARNING
    return ERROR


# === Per-subsystem evaluators ===

def _evaluate_ethernet(snap: EthernetSnapshot, thresholds: Thresholds) -> Verdict:
    link = snap.link_detected is True
    online = snap.internet == Reachability.ONLINE

    advisories: List[str] = []
    if snap.rx_errors is None or snap.tx_errors is None:
        advisories.append("Error counters not reported")
    elif snap.rx_errors > 0 or snap.tx_errors > 0:
        advisories.append(f"RX/TX errors {snap.rx_errors}/{snap.tx_errors}")
    if snap.duplex == Duplex.HALF:
        advisories.append("Half duplex")
    speed = parse_speed_mbps(snap.speed)
    if (thresholds.ethernet_min_speed_mbps is not None and speed is not None
            and speed < thresholds.ethernet_min_speed_mbps):
        advisories.append(f"Speed {snap.speed} below expected")
    if (thresholds.ethernet_max_rx_dropped is not None and snap.rx_dropped is not None
            and snap.rx_dropped > thresholds.ethernet_max_rx_dropped):
        advisories.append(f"RX dropped {snap.rx_dropped}")

    if not link or not online:
        status, primary = ERROR, "Offline"
    elif advisories:
        status, primary = WARNING, "Degraded"
    else:
        status, primary = SUCCESS, "Connected"

    rows = [
        ("Internet reachability", _reachability(snap.internet)),
        ("Ethernet state", _text(snap.state)),
        ("IPv4", _yes_no(snap.ipv4_present)),
        ("IPv6", _yes_no(snap.ipv6_present)),
        ("DNS", _text(snap.dns)),
        ("IPv4 Address", _text(snap.ipv4_address)),
        ("Netmask", _text(snap.netmask)),
        ("Speed", _text(snap.speed)),
        ("Duplex", snap.duplex.value.capitalize() if snap.duplex else NO_VALUE),
        ("Auto-negotiation", _yes_no(snap.autonegotiation, "On", "Off")),
        ("Link detected", _yes_no(snap.link_detected)),
        ("RX errors", _text(snap.rx_errors)),
        ("TX errors", _text(snap.tx_errors)),
        ("RX dropped", _text(snap.rx_dropped)),
    ]
    if status == WARNING:
        rows.append(("Advisories", "; ".join(advisories)))

    return Verdict(
        subsystem=SubsystemId.ETHERNET,
        status=status,
        summary_primary=primary,
        summary_secondary=(
            f"{_text(snap.ipv4_address)} • {_text(snap.speed)} • "
            f"Link {_yes_no(snap.link_detected)}"
        ),
        details=_details(*rows),
    )


_WIFI_ACTION_REQUIRED = Remediation(
    title="Action Required",
    actions=(
        RemediationAction("Configure Wi-Fi Network", ActionKind.NAVIGATE_TO_NETWORK_SETUP),
        RemediationAction("Wi-Fi Rulebook", ActionKind.OPEN_RULEBOOK_ENTRY),
    ),
)

_WIFI_OPTIONAL = Remediation(
    title="Optional",
    actions=(
        RemediationAction("Enable / Configure Wi-Fi (optional backup)",
                          ActionKind.NAVIGATE_TO_NETWORK_SETUP),
    ),
)


def _evaluate_wifi(snap: WifiSnapshot, thresholds: Thresholds) -> Verdict:
    provisioned = snap.provisioned is True
    powered = snap.powered is True
    connected = snap.connected is True
    online = snap.internet == Reachability.ONLINE

    # Provisioned + reachable => success
    # Disabled/off => warning (optional backup, not broken)
    # Connected or provisioned but offline => warning
    # Powered but not connected when expected => error
    if provisioned:
        status = SUCCESS if online else WARNING
    elif not powered:
        status = WARNING
    elif connected:
        status = SUCCESS if online else WARNING
    else:
        status = ERROR

    if status == SUCCESS:
        primary = "Connected"
    elif status == ERROR:
        primary = "Not Connected"
    elif not provisioned and not powered:
        primary = "Disabled / Optional"
    else:
        primary = "No Internet"

    strength = _strength_text(snap.strength_percent, snap.strength_label, snap.signal_dbm)
    if snap.ssid:
        secondary = f"{snap.ssid} • {strength}"
    elif not powered:
        secondary = "Wi-Fi disabled"
    else:
        secondary = "No SSID connected"

    if status == ERROR:
        remediation = _WIFI_ACTION_REQUIRED
    elif status == WARNING:
        remediation = _WIFI_OPTIONAL
    else:
        remediation = None

    channel = wifi_channel(snap.frequency_mhz)
    details = _details(
        ("Technology powered", _yes_no(snap.powered, "True", "False")),
        ("Connected", _yes_no(snap.connected, "True", "False")),
        ("Provisioned via secure pairing", "Yes" if provisioned else "No"),
        ("SSID", _text(snap.ssid)),
        ("Strength", _strength_text(snap.strength_percent, snap.strength_label)),
        ("Internet reachable", _reachability(snap.internet)),
        ("IPv4 Address", _text(snap.ipv4_address)),
        ("IPv6", _yes_no(snap.ipv6_present, "Present", "No")),
        ("DNS", _text(snap.dns)),
        ("Packet loss", _num(snap.packet_loss_pct, "%")),
        ("Avg latency", _num(snap.avg_latency_ms, " ms")),
        ("Frequency", _num(snap.frequency_mhz, " MHz")),
        ("Channel", _text(channel)),
        ("TX bitrate", _text(snap.tx_bitrate)),
        ("Signal (advanced)", _num(snap.signal_dbm, " dBm")),
        ("wifi-check", _text(snap.check_result)),
    )

    return Verdict(
        subsystem=SubsystemId.WIFI,
        status=status,
        summary_primary=primary,
        summary_secondary=secondary,
        details=details,
        remediation=remediation,
    )


def _evaluate_cellular(snap: CellularSnapshot, thresholds: Thresholds) -> Verdict:
    loss = snap.packet_loss_pct
    strength = snap.strength_percent

    if snap.internet != Reachability.ONLINE:
        status = ERROR
    elif not _finite(loss) or not _finite(strength):
        status = WARNING
    elif loss <= CELLULAR_MAX_PACKET_LOSS and strength >= CELLULAR_MIN_STRENGTH:
        status = SUCCESS
    else:
        status = WARNING

    primary = {SUCCESS: "Connected", WARNING: "Degraded", ERROR: "Offline"}[status]
    signal = _strength_text(strength, snap.strength_label)

    if snap.provider_name and snap.provider_id:
        provider = f"{snap.provider_name} ({snap.provider_id})"
    else:
        provider = _text(snap.provider_name or snap.provider_id)

    return Verdict(
        subsystem=SubsystemId.CELLULAR,
        status=status,
        summary_primary=primary,
        summary_secondary=f"{_text(snap.provider_name)} • {signal}",
        details=_details(
            ("Internet reachability", _reachability(snap.internet)),
            ("Cellular state", snap.state.value if snap.state else NO_VALUE),
            ("Provider", provider),
            ("Strength", signal),
            ("IPv4", _yes_no(snap.ipv4_present)),
            ("IPv6", _yes_no(snap.ipv6_present)),
            ("DNS", _text(snap.dns)),
            ("Packet loss", _num(loss, "%")),
            ("Avg latency", _num(snap.avg_latency_ms, " ms")),
            ("IMEI", _text(snap.imei)),
            ("ICCID", _text(snap.iccid)),
        ),
    )


def _evaluate_satellite(snap: SatelliteSnapshot, thresholds: Thresholds) -> Verdict:
    # Satellite is a backup link: offline or unconfigured is advisory only
    enabled = snap.enabled is True
    ready = snap.state == SatelliteState.READY

    status = SUCCESS if enabled and ready else WARNING

    if not enabled:
        primary = "Not Configured"
    elif ready:
        primary = "Ready"
    else:
        primary = "Offline"

    return Verdict(
        subsystem=SubsystemId.SATELLITE,
        status=status,
        summary_primary=primary,
        summary_secondary="Backup link" if enabled else "Not enabled",
        details=_details(
            ("Enabled", "Yes" if enabled else "No"),
            ("Status", snap.state.value if snap.state else Reachability.UNKNOWN.value),
            ("Modem IMEI", _text(snap.imei) if enabled else NO_VALUE),
            ("Last successful contact", _text(snap.last_contact) if enabled else "Not enabled"),
        ),
    )


def _evaluate_power(snap: PowerSnapshot, thresholds: Thresholds) -> Verdict:
    voltage = snap.voltage
    status = classify_voltage(voltage)

    if not _finite(voltage):
        primary, reading = "No reading", NO_VALUE
    else:
        primary = {SUCCESS: "Normal", WARNING: "Marginal", ERROR: "Out of range"}[status]
        reading = f"{voltage:.1f} V"

    return Verdict(
        subsystem=SubsystemId.POWER,
        status=status,
        summary_primary=primary,
        summary_secondary=reading,
        details=_details(
            ("Voltage", reading),
            ("Expected", f"{POWER_NORMAL_V[0]:.1f}–{POWER_NORMAL_V[1]:.1f} V"),
            ("Rule", "Green when within expected range"),
        ),
    )


def _pressure_range(snap: PressureSnapshot, band: PressureBand) -> Tuple[float, float]:
    low = band.expected_low if snap.expected_low is None else snap.expected_low
    high = band.expected_high if snap.expected_high is None else snap.expected_high
    if not (math.isfinite(low) and math.isfinite(high)) or low > high:
        raise InvalidSnapshotError(f"Invalid expected pressure range: {low}–{high}")
    return low, high


def _evaluate_pressure(subsystem: SubsystemId, snap: PressureSnapshot,
                       band: PressureBand) -> Verdict:
    low, high = _pressure_range(snap, band)
    psi = snap.psi
    status = classify_pressure(psi, low, high, band.marginal_low)

    if not _finite(psi):
        primary = "No reading"
    elif status == SUCCESS:
        primary = "Normal"
    elif status == WARNING:
        primary = "Marginal"
    else:
        primary = "High" if psi > high else "Low"

    rows = [
        ("Pressure", _num(psi if _finite(psi) else None, " PSI")),
        ("Expected", f"{low:g}–{high:g} PSI"),
        ("Marginal floor", f"{band.marginal_low:g} PSI"),
    ]
    for label, value in (("Last test", snap.last_test),
                         ("Source type", snap.source_type),
                         ("Stability", snap.stability)):
        if value:
            rows.append((label, value))

    return Verdict(
        subsystem=subsystem,
        status=status,
        summary_primary=primary,
        summary_secondary=_num(psi if _finite(psi) else None, " PSI"),
        details=_details(*rows),
    )


def _evaluate_manifold(snap: PressureSnapshot, thresholds: Thresholds) -> Verdict:
    return _evaluate_pressure(SubsystemId.MANIFOLD, snap, thresholds.manifold)


def _evaluate_source(snap: PressureSnapshot, thresholds: Thresholds) -> Verdict:
    return _evaluate_pressure(SubsystemId.SOURCE, snap, thresholds.source)


def _evaluate_cloud(snap: CloudSnapshot, thresholds: Thresholds) -> Verdict:
    limit = thresholds.cloud_ping_threshold_ms
    ping = snap.ping_ms if _finite(snap.ping_ms) else None

    if snap.reachable is not True:
        status = ERROR
    elif ping is not None and ping <= limit:
        status = SUCCESS
    else:
        status = WARNING

    primary = {SUCCESS: "Synced", WARNING: "Delayed", ERROR: "Offline"}[status]
    if status == SUCCESS:
        secondary = _text(snap.last_sync)
    elif ping is not None:
        secondary = f"Ping {ping:g} ms"
    else:
        secondary = "Unreachable" if status == ERROR else "Ping time unknown"

    return Verdict(
        subsystem=SubsystemId.CLOUD,
        status=status,
        summary_primary=primary,
        summary_secondary=secondary,
        details=_details(
            ("Endpoint", _text(snap.endpoint)),
            ("Last Sync", _text(snap.last_sync)),
            ("Ping Time", _num(ping, " ms")),
            ("Threshold", f"{limit:g} ms"),
        ),
    )


def _evaluate_firmware(snap: FirmwareSnapshot, thresholds: Thresholds) -> Verdict:
    if snap.supported is not True:
        status = ERROR
        primary = "Unsupported" if snap.supported is False else "Unknown"
    elif snap.update_available is False:
        status, primary = SUCCESS, "Current"
    else:
        status = WARNING
        primary = "Update available" if snap.update_available else "Update status unknown"

    return Verdict(
        subsystem=SubsystemId.FIRMWARE,
        status=status,
        summary_primary=primary,
        summary_secondary=_text(snap.version),
        details=_details(
            ("Version", _text(snap.version)),
            ("Supported", _yes_no(snap.supported)),
            ("Update available", _yes_no(snap.update_available)),
            ("Notes", "Recommended update" if snap.update_available else NO_VALUE),
        ),
    )


_EVALUATORS: Dict[SubsystemId, Callable[[Snapshot, Thresholds], Verdict]] = {
    SubsystemId.ETHERNET: _evaluate_ethernet,
    SubsystemId.WIFI: _evaluate_wifi,
    SubsystemId.CELLULAR: _evaluate_cellular,
    SubsystemId.SATELLITE: _evaluate_satellite,
    SubsystemId.POWER: _evaluate_power,
    SubsystemId.MANIFOLD: _evaluate_manifold,
    SubsystemId.SOURCE: _evaluate_source,
    SubsystemId.CLOUD: _evaluate_cloud,
    SubsystemId.FIRMWARE: _evaluate_firmware,
}


def evaluate(subsystem_id, snapshot, thresholds: Optional[Thresholds] = None) -> Verdict:
    """
    Evaluate one subsystem snapshot into a Verdict.

    Args:
        subsystem_id: SubsystemId or its string value (e.g. "power")
        snapshot: Matching snapshot object, or a plain dict of probe values
        thresholds: Deployment thresholds (defaults when None)

    Returns:
        Verdict with status, summaries, details and optional remediation

    Raises:
        UnknownSubsystemError: Id outside the nine subsystems
        InvalidSnapshotError: Snapshot missing, malformed or of the wrong type
    """
    subsystem = resolve_subsystem(subsystem_id)
    thresholds = thresholds or DEFAULT_THRESHOLDS

    if isinstance(snapshot, dict):
        snapshot = snapshot_from_dict(subsystem, snapshot)

    expected = SNAPSHOT_TYPES[subsystem]
    if not isinstance(snapshot, expected):
        raise InvalidSnapshotError(
            f"{subsystem.value}: expected {expected.__name__}, "
            f"got {type(snapshot).__name__}"
        )

    verdict = _EVALUATORS[subsystem](snapshot, thresholds)
    logger.debug(f"{subsystem.value}: {verdict.status.value} ({verdict.summary_primary})")
    return verdict
