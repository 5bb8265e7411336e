"""
Commissioning Diagnostic Engine for Frontline controllers

Reduces raw probe measurements from nine subsystems to success/warning/error
verdicts, then combines them into one commissioning summary.
CLI and Web API both consume this package.

Usage:
    from core.diagnostics import SnapshotSet, run_diagnostics, evaluate, lookup

    report = run_diagnostics(SnapshotSet.from_dict(probe_results))
    # or a single subsystem
    verdict = evaluate('power', {'voltage': 13.4})
    # or the operator rulebook
    entry = lookup('power')
"""

from .models import (
    SubsystemId,
    DiagnosticStatus,
    ActionKind,
    DetailItem,
    RemediationAction,
    Remediation,
    Verdict,
    OverallSummary,
    DiagnosticReport,
)
from .exceptions import (
    DiagnosticsError,
    UnknownSubsystemError,
    InvalidSnapshotError,
    RuleNotFoundError,
    InvalidVerdictSetError,
    ConfigError,
)
from .snapshots import (
    Reachability,
    Duplex,
    ModemState,
    SatelliteState,
    EthernetSnapshot,
    WifiSnapshot,
    CellularSnapshot,
    SatelliteSnapshot,
    PowerSnapshot,
    PressureSnapshot,
    CloudSnapshot,
    FirmwareSnapshot,
    SnapshotSet,
    snapshot_from_dict,
)
from .config import PressureBand, Thresholds, DEFAULT_THRESHOLDS, load_thresholds
from .signal_utils import signal_bars, strength_label, wifi_channel
from .rulebook import RuleEntry, RULEBOOK, lookup, all_entries
from .evaluator import evaluate
from .aggregator import aggregate, ALL_PASSED
from .engine import evaluate_all, run_diagnostics

__all__ = [
    'SubsystemId',
    'DiagnosticStatus',
    'ActionKind',
    'DetailItem',
    'RemediationAction',
    'Remediation',
    'Verdict',
    'OverallSummary',
    'DiagnosticReport',
    'DiagnosticsError',
    'UnknownSubsystemError',
    'InvalidSnapshotError',
    'RuleNotFoundError',
    'InvalidVerdictSetError',
    'ConfigError',
    'Reachability',
    'Duplex',
    'ModemState',
    'SatelliteState',
    'EthernetSnapshot',
    'WifiSnapshot',
    'CellularSnapshot',
    'SatelliteSnapshot',
    'PowerSnapshot',
    'PressureSnapshot',
    'CloudSnapshot',
    'FirmwareSnapshot',
    'SnapshotSet',
    'snapshot_from_dict',
    'PressureBand',
    'Thresholds',
    'DEFAULT_THRESHOLDS',
    'load_thresholds',
    'signal_bars',
    'strength_label',
    'wifi_channel',
    'RuleEntry',
    'RULEBOOK',
    'lookup',
    'all_entries',
    'evaluate',
    'aggregate',
    'ALL_PASSED',
    'evaluate_all',
    'run_diagnostics',
]
