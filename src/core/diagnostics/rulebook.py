"""
Diagnostics Rulebook

Red / Yellow / Green criteria and recommended actions for each subsystem.
This is operator-facing documentation; the executable thresholds live in
the evaluator. Numeric criteria are rendered from the same constants the
evaluator uses so the two cannot drift apart.

The table is built once at import time and never mutated.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from .config import (
    CELLULAR_MAX_PACKET_LOSS,
    CELLULAR_MIN_STRENGTH,
    DEFAULT_CLOUD_PING_THRESHOLD_MS,
    POWER_MARGINAL_V,
    POWER_NORMAL_V,
    PressureBand,
)
from .exceptions import RuleNotFoundError, UnknownSubsystemError
from .models import SubsystemId
from .snapshots import resolve_subsystem


@dataclass(frozen=True)
class RuleEntry:
    """Rulebook entry for one subsystem. `id` matches the SubsystemId value."""
    id: str
    title: str
    intent: str
    green: Tuple[str, ...]
    yellow: Tuple[str, ...]
    red: Tuple[str, ...]
    recommended_actions: Tuple[str, ...]

    @property
    def subsystem(self) -> SubsystemId:
        return SubsystemId(self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "intent": self.intent,
            "green": list(self.green),
            "yellow": list(self.yellow),
            "red": list(self.red),
            "recommended_actions": list(self.recommended_actions),
        }


def _volts(v: float) -> str:
    return f"{v:.1f}"


_PRESSURE = PressureBand()
_EXPECTED_PSI = f"{_PRESSURE.expected_low:g}–{_PRESSURE.expected_high:g} PSI"
_MARGINAL_PSI = f"{_PRESSURE.marginal_low:g} PSI"

_ENTRIES = (
    RuleEntry(
        id="ethernet",
        title="Ethernet",
        intent="Proves wired connectivity is stable enough for cloud sync and commissioning.",
        green=(
            "Link detected = Yes (ethtool)",
            "Internet reachable = Online (ethernet-check)",
            "RX/TX errors = 0",
            "Duplex = Full (ethtool)",
        ),
        yellow=(
            "RX/TX errors > 0 while link and internet are up",
            "Speed lower than expected (e.g., 100 Mb/s when Gigabit is available)",
            "RX drops above the expected level",
            "Duplex = Half",
        ),
        red=(
            "Link detected = No",
            "Internet unreachable or unknown",
        ),
        recommended_actions=(
            "Reseat/replace Ethernet cable with known-good cable",
            "Try a different router/switch port",
            "Re-run diagnostics",
            "If still failing: use Wi-Fi/Cellular and flag controller/cable/router for follow-up",
        ),
    ),
    RuleEntry(
        id="wifi",
        title="Wi-Fi",
        intent="Verifies Wi-Fi provisioning and link quality for primary or backup connectivity.",
        green=(
            "Provisioned via secure pairing and internet reachable",
            "Connected to SSID and internet reachable",
        ),
        yellow=(
            "Wi-Fi disabled (optional)",
            "Provisioned or connected but internet not reachable",
        ),
        red=(
            "Powered but not connected (when expected)",
        ),
        recommended_actions=(
            "Use current Wi-Fi via secure pairing (fast path)",
            "Provision selected Wi-Fi via secure pairing",
            "Move closer / choose stronger SSID",
            "Confirm passcode",
            "Use Ethernet/Cellular as fallback",
        ),
    ),
    RuleEntry(
        id="cellular",
        title="Cellular",
        intent="Verifies cellular modem is registered and usable as backup or primary uplink.",
        green=(
            "Internet reachable",
            f"Packet loss ≤ {CELLULAR_MAX_PACKET_LOSS:g}%",
            f"Signal ≥ {CELLULAR_MIN_STRENGTH}/100",
        ),
        yellow=(
            f"Signal < {CELLULAR_MIN_STRENGTH}/100 (still usable)",
            f"Packet loss > {CELLULAR_MAX_PACKET_LOSS:g}% or intermittent loss",
        ),
        red=(
            "Internet unreachable",
            "No provider / no session",
        ),
        recommended_actions=(
            "Check antenna/placement",
            "Verify SIM active",
            "Reboot modem/controller",
            "Escalate to support if still no session",
        ),
    ),
    RuleEntry(
        id="satellite",
        title="Satellite",
        intent="Confirms satellite backup is available when enabled.",
        green=(
            "Enabled and ready",
        ),
        yellow=(
            "Enabled but offline / not currently connected",
            "Not enabled or not configured (optional backup)",
        ),
        red=(
            "None: satellite is a backup link and never blocks commissioning",
        ),
        recommended_actions=(
            "Confirm satellite backup enabled",
            "Check antenna placement",
            "Re-run satellite diagnostic",
            "Escalate if modem not detected",
        ),
    ),
    RuleEntry(
        id="power",
        title="Power",
        intent="Ensures controller supply voltage is within safe operating range.",
        green=(
            f"{_volts(POWER_NORMAL_V[0])}–{_volts(POWER_NORMAL_V[1])} V",
        ),
        yellow=(
            f"{_volts(POWER_MARGINAL_V[0])}–<{_volts(POWER_NORMAL_V[0])} V",
            f">{_volts(POWER_NORMAL_V[1])}–{_volts(POWER_MARGINAL_V[1])} V",
        ),
        red=(
            f"< {_volts(POWER_MARGINAL_V[0])} V",
            f"> {_volts(POWER_MARGINAL_V[1])} V",
            "No voltage reading",
        ),
        recommended_actions=(
            "Check power supply and wiring",
            "Verify battery/solar configuration",
            "Measure with multimeter if readings look wrong",
        ),
    ),
    RuleEntry(
        id="manifold",
        title="Manifold Pressure",
        intent=(
            "Indicates pressure on the distribution/manifold side. "
            "Expected and marginal bands are deployment-specific."
        ),
        green=(
            f"Pressure within expected operating range (default {_EXPECTED_PSI})",
        ),
        yellow=(
            f"Pressure marginal: below expected range, at or above {_MARGINAL_PSI} by default",
        ),
        red=(
            f"Pressure too low for operation (below {_MARGINAL_PSI} by default)",
            "Pressure above expected range / unsafe",
            "No pressure reading",
        ),
        recommended_actions=(
            "Check pump/valves state",
            "Verify supply and filters",
            "Re-run pressure test",
        ),
    ),
    RuleEntry(
        id="source",
        title="Source Pressure",
        intent=(
            "Indicates supply pressure available from the water source. "
            "Expected and marginal bands are deployment-specific."
        ),
        green=(
            f"Source pressure within expected range (default {_EXPECTED_PSI})",
        ),
        yellow=(
            f"Low but usable: below expected range, at or above {_MARGINAL_PSI} by default",
        ),
        red=(
            f"No pressure / very low (below {_MARGINAL_PSI} by default)",
            "Pressure above expected range",
            "No pressure reading",
        ),
        recommended_actions=(
            "Check supply valve/source",
            "Confirm tank level / municipal pressure",
            "Inspect intake/strainer",
        ),
    ),
    RuleEntry(
        id="cloud",
        title="Cloud Sync",
        intent="Confirms controller can reach Frontline cloud services reliably.",
        green=(
            f"Ping succeeds within {DEFAULT_CLOUD_PING_THRESHOLD_MS:g} ms (default threshold)",
        ),
        yellow=(
            "Slow ping (above threshold) or ping time unknown",
        ),
        red=(
            "Cannot reach endpoint",
        ),
        recommended_actions=(
            "Fix underlying network (Ethernet/Wi-Fi/Cellular)",
            "Re-run diagnostics",
            "Confirm endpoint configured",
        ),
    ),
    RuleEntry(
        id="firmware",
        title="Firmware",
        intent="Shows installed firmware version and whether an update is recommended.",
        green=(
            "Version current / supported",
        ),
        yellow=(
            "Update available (recommended)",
        ),
        red=(
            "Unsupported / blocked version",
        ),
        recommended_actions=(
            "Schedule update",
            "Confirm update window and connectivity",
            "Escalate if version is blocked",
        ),
    ),
)

RULEBOOK: Mapping[SubsystemId, RuleEntry] = MappingProxyType(
    {SubsystemId(entry.id): entry for entry in _ENTRIES}
)


def lookup(subsystem_id) -> RuleEntry:
    """
    Get the rulebook entry for a subsystem.

    Args:
        subsystem_id: SubsystemId or its string value

    Raises:
        RuleNotFoundError: Id is not one of the nine subsystems
    """
    try:
        subsystem = resolve_subsystem(subsystem_id)
    except UnknownSubsystemError:
        raise RuleNotFoundError(subsystem_id) from None
    return RULEBOOK[subsystem]


def all_entries() -> Tuple[RuleEntry, ...]:
    """Every entry, in subsystem declaration order."""
    return tuple(RULEBOOK[s] for s in SubsystemId)


def title_for(subsystem_id) -> str:
    return lookup(subsystem_id).title
