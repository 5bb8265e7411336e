"""
Measurement Snapshots

One record per subsystem holding raw values reported by external probes
(ethtool, ifconfig, wifi-check, modem status, ADC readings, ...).

Every field is optional: None means "not measured". Snapshots are built
fresh for each diagnostics run and never cached between runs.

Usage:
    snap = EthernetSnapshot(link_detected=True, internet=Reachability.ONLINE,
                            rx_errors=0, tx_errors=0)
    # or, from parsed JSON/YAML
    snapshots = SnapshotSet.from_dict({'power': {'voltage': 13.4}})
"""

import math
from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Optional

from .exceptions import InvalidSnapshotError, UnknownSubsystemError
from .models import SubsystemId


# === Probe enums ===

class Reachability(Enum):
    """Internet reachability as reported by the connectivity checks."""
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


class Duplex(Enum):
    FULL = "full"
    HALF = "half"


class ModemState(Enum):
    """Cellular modem registration state."""
    READY = "ready"
    IDLE = "idle"
    OFFLINE = "offline"


class SatelliteState(Enum):
    READY = "ready"
    OFFLINE = "offline"
    NOT_CONFIGURED = "not-configured"


# === Field parsers ===
# Each parser turns a raw JSON/YAML value into the field's type or raises
# InvalidSnapshotError. None always passes through as "unknown".

_TRUE_WORDS = ('true', 'yes', 'on', '1')
_FALSE_WORDS = ('false', 'no', 'off', '0')


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise InvalidSnapshotError(f"{name}: expected boolean, got {value!r}")


def _parse_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidSnapshotError(f"{name}: expected number, got {value!r}")
    try:
        return float(value)
    except OverflowError:
        raise InvalidSnapshotError(f"{name}: number out of range") from None
    except (TypeError, ValueError):
        raise InvalidSnapshotError(f"{name}: expected number, got {value!r}") from None


def _parse_count(name: str, value: Any) -> int:
    number = _parse_float(name, value)
    if not math.isfinite(number) or number != int(number) or number < 0:
        raise InvalidSnapshotError(f"{name}: expected non-negative integer, got {value!r}")
    return int(number)


def _parse_str(name: str, value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    raise InvalidSnapshotError(f"{name}: expected string, got {value!r}")


def _enum_parser(enum_cls) -> Callable[[str, Any], Enum]:
    def parse(name: str, value: Any) -> Enum:
        if isinstance(value, enum_cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace(' ', '-').replace('_', '-')
            for member in enum_cls:
                if member.value == key:
                    return member
        allowed = ', '.join(m.value for m in enum_cls)
        raise InvalidSnapshotError(f"{name}: expected one of [{allowed}], got {value!r}")
    return parse


def _probe(parser: Callable[[str, Any], Any], default=None):
    """Declare a snapshot field with its parser attached as metadata."""
    return field(default=default, metadata={'parse': parser})


BOOL = _parse_bool
FLOAT = _parse_float
COUNT = _parse_count
TEXT = _parse_str
REACHABILITY = _enum_parser(Reachability)


# === Snapshots ===

@dataclass(frozen=True)
class Snapshot:
    """Base class for all measurement snapshots."""

    SUBSYSTEMS: ClassVar[tuple] = ()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Snapshot':
        """Build a snapshot from parsed JSON/YAML, validating every field.

        Raises:
            InvalidSnapshotError: Unknown keys or values of the wrong type
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidSnapshotError(
                f"{cls.__name__}: expected a mapping, got {type(data).__name__}"
            )

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise InvalidSnapshotError(f"{cls.__name__}: unknown field(s) {', '.join(unknown)}")

        kwargs = {}
        for name, value in data.items():
            if value is None:
                continue
            parse = known[name].metadata['parse']
            kwargs[name] = parse(f"{cls.__name__}.{name}", value)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        """Serialize for API/JSON output (enums as their values)."""
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = value.value if isinstance(value, Enum) else value
        return out


@dataclass(frozen=True)
class EthernetSnapshot(Snapshot):
    """Wired link as seen by ethtool, ifconfig and ethernet-check."""
    SUBSYSTEMS: ClassVar[tuple] = (SubsystemId.ETHERNET,)

    link_detected: Optional[bool] = _probe(BOOL)
    duplex: Optional[Duplex] = _probe(_enum_parser(Duplex))
    internet: Reachability = _probe(REACHABILITY, Reachability.UNKNOWN)
    ipv4_present: Optional[bool] = _probe(BOOL)
    rx_errors: Optional[int] = _probe(COUNT)
    tx_errors: Optional[int] = _probe(COUNT)
    rx_dropped: Optional[int] = _probe(COUNT)
    speed: Optional[str] = _probe(TEXT)
    autonegotiation: Optional[bool] = _probe(BOOL)
    # Informational only
    state: Optional[str] = _probe(TEXT)
    ipv6_present: Optional[bool] = _probe(BOOL)
    ipv4_address: Optional[str] = _probe(TEXT)
    netmask: Optional[str] = _probe(TEXT)
    dns: Optional[str] = _probe(TEXT)


@dataclass(frozen=True)
class WifiSnapshot(Snapshot):
    """Wireless link from wifi-check, plus secure-pairing provisioning state."""
    SUBSYSTEMS: ClassVar[tuple] = (SubsystemId.WIFI,)

    powered: Optional[bool] = _probe(BOOL)
    connected: Optional[bool] = _probe(BOOL)
    provisioned: Optional[bool] = _probe(BOOL)
    ssid: Optional[str] = _probe(TEXT)
    strength_percent: Optional[float] = _probe(FLOAT)
    internet: Reachability = _probe(REACHABILITY, Reachability.UNKNOWN)
    packet_loss_pct: Optional[float] = _probe(FLOAT)
    frequency_mhz: Optional[float] = _probe(FLOAT)
    avg_latency_ms: Optional[float] = _probe(FLOAT)
    # Informational only
    strength_label: Optional[str] = _probe(TEXT)
    signal_dbm: Optional[float] = _probe(FLOAT)
    tx_bitrate: Optional[str] = _probe(TEXT)
    ipv4_address: Optional[str] = _probe(TEXT)
    ipv6_present: Optional[bool] = _probe(BOOL)
    dns: Optional[str] = _probe(TEXT)
    check_result: Optional[str] = _probe(TEXT)


@dataclass(frozen=True)
class CellularSnapshot(Snapshot):
    SUBSYSTEMS: ClassVar[tuple] = (SubsystemId.CELLULAR,)

    internet: Reachability = _probe(REACHABILITY, Reachability.UNKNOWN)
    state: Optional[ModemState] = _probe(_enum_parser(ModemState))
    provider_id: Optional[str] = _probe(TEXT)
    provider_name: Optional[str] = _probe(TEXT)
    strength_percent: Optional[float] = _probe(FLOAT)
    packet_loss_pct: Optional[float] = _probe(FLOAT)
    avg_latency_ms: Optional[float] = _probe(FLOAT)
    # Informational only
    strength_label: Optional[str] = _probe(TEXT)
    ipv4_present: Optional[bool] = _probe(BOOL)
    ipv6_present: Optional[bool] = _probe(BOOL)
    dns: Optional[str] = _probe(TEXT)
    imei: Optional[str] = _probe(TEXT)
    iccid: Optional[str] = _probe(TEXT)


@dataclass(frozen=True)
class SatelliteSnapshot(Snapshot):
    SUBSYSTEMS: ClassVar[tuple] = (SubsystemId.SATELLITE,)

    enabled: Optional[bool] = _probe(BOOL)
    state: Optional[SatelliteState] = _probe(_enum_parser(SatelliteState))
    imei: Optional[str] = _probe(TEXT)
    last_contact: Optional[str] = _probe(TEXT)


@dataclass(frozen=True)
class PowerSnapshot(Snapshot):
    SUBSYSTEMS: ClassVar[tuple] = (SubsystemId.POWER,)

    voltage: Optional[float] = _probe(FLOAT)


@dataclass(frozen=True)
class PressureSnapshot(Snapshot):
    """Pressure transducer reading; used for both manifold and source.

    expected_low/expected_high fall back to the configured band when unset.
    """
    SUBSYSTEMS: ClassVar[tuple] = (SubsystemId.MANIFOLD, SubsystemId.SOURCE)

    psi: Optional[float] = _probe(FLOAT)
    expected_low: Optional[float] = _probe(FLOAT)
    expected_high: Optional[float] = _probe(FLOAT)
    # Informational only
    last_test: Optional[str] = _probe(TEXT)
    source_type: Optional[str] = _probe(TEXT)
    stability: Optional[str] = _probe(TEXT)


@dataclass(frozen=True)
class CloudSnapshot(Snapshot):
    SUBSYSTEMS: ClassVar[tuple] = (SubsystemId.CLOUD,)

    reachable: Optional[bool] = _probe(BOOL)
    ping_ms: Optional[float] = _probe(FLOAT)
    endpoint: Optional[str] = _probe(TEXT)
    last_sync: Optional[str] = _probe(TEXT)


@dataclass(frozen=True)
class FirmwareSnapshot(Snapshot):
    SUBSYSTEMS: ClassVar[tuple] = (SubsystemId.FIRMWARE,)

    version: Optional[str] = _probe(TEXT)
    supported: Optional[bool] = _probe(BOOL)
    update_available: Optional[bool] = _probe(BOOL)


SNAPSHOT_TYPES: Dict[SubsystemId, type] = {
    SubsystemId.ETHERNET: EthernetSnapshot,
    SubsystemId.WIFI: WifiSnapshot,
    SubsystemId.CELLULAR: CellularSnapshot,
    SubsystemId.SATELLITE: SatelliteSnapshot,
    SubsystemId.POWER: PowerSnapshot,
    SubsystemId.MANIFOLD: PressureSnapshot,
    SubsystemId.SOURCE: PressureSnapshot,
    SubsystemId.CLOUD: CloudSnapshot,
    SubsystemId.FIRMWARE: FirmwareSnapshot,
}


def resolve_subsystem(subsystem_id) -> SubsystemId:
    """Accept a SubsystemId or its string value.

    Raises:
        UnknownSubsystemError: Id is outside the fixed set
    """
    if isinstance(subsystem_id, SubsystemId):
        return subsystem_id
    try:
        return SubsystemId(subsystem_id)
    except ValueError:
        raise UnknownSubsystemError(subsystem_id) from None


def snapshot_from_dict(subsystem_id, data: Optional[Dict[str, Any]]) -> Snapshot:
    """Build the right snapshot type for a subsystem from a plain dict."""
    subsystem = resolve_subsystem(subsystem_id)
    return SNAPSHOT_TYPES[subsystem].from_dict(data)


@dataclass(frozen=True)
class SnapshotSet:
    """
    One snapshot per subsystem for a single diagnostics run.

    Subsystems that were not probed get an empty snapshot, which the
    evaluator resolves conservatively.
    """
    ethernet: EthernetSnapshot = field(default_factory=EthernetSnapshot)
    wifi: WifiSnapshot = field(default_factory=WifiSnapshot)
    cellular: CellularSnapshot = field(default_factory=CellularSnapshot)
    satellite: SatelliteSnapshot = field(default_factory=SatelliteSnapshot)
    power: PowerSnapshot = field(default_factory=PowerSnapshot)
    manifold: PressureSnapshot = field(default_factory=PressureSnapshot)
    source: PressureSnapshot = field(default_factory=PressureSnapshot)
    cloud: CloudSnapshot = field(default_factory=CloudSnapshot)
    firmware: FirmwareSnapshot = field(default_factory=FirmwareSnapshot)

    def get(self, subsystem_id) -> Snapshot:
        return getattr(self, resolve_subsystem(subsystem_id).value)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SnapshotSet':
        """Build a full set from {subsystem_id: {field: value}}.

        Raises:
            UnknownSubsystemError: A key is not one of the nine subsystem ids
            InvalidSnapshotError: A snapshot is malformed
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidSnapshotError(
                f"Snapshot set: expected a mapping, got {type(data).__name__}"
            )
        kwargs = {}
        for key, value in data.items():
            subsystem = resolve_subsystem(key)
            kwargs[subsystem.value] = snapshot_from_dict(subsystem, value)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {s.value: self.get(s).to_dict() for s in SubsystemId}
