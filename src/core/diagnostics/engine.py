"""
Commissioning Diagnostic Engine

One diagnostics pass: evaluate every subsystem snapshot, then aggregate.
CLI and Web API both consume this module.

Design Principles:
1. Stateless - no singleton, no caches; each pass starts from fresh snapshots
2. Thread-safe - only frozen inputs and outputs
3. Callback-driven - optional per-verdict notification for live UIs

Usage:
    snapshots = SnapshotSet.from_dict(probe_results)
    report = run_diagnostics(snapshots)
    print(report.summary.label)
"""

import logging
from typing import Callable, Optional, Tuple

from .aggregator import aggregate
from .config import Thresholds
from .evaluator import evaluate
from .models import DiagnosticReport, SubsystemId, Verdict
from .snapshots import SnapshotSet

logger = logging.getLogger(__name__)

VerdictCallback = Callable[[Verdict], None]
ProgressCallback = Callable[[str, int, int], None]  # (subsystem, current, total)


def evaluate_all(snapshots: SnapshotSet,
                 thresholds: Optional[Thresholds] = None,
                 on_verdict: Optional[VerdictCallback] = None,
                 on_progress: Optional[ProgressCallback] = None) -> Tuple[Verdict, ...]:
    """
    Evaluate every subsystem in declaration order.

    Callback errors are logged and never abort the pass.
    """
    subsystems = list(SubsystemId)
    verdicts = []
    for i, subsystem in enumerate(subsystems):
        if on_progress:
            _safe_call(on_progress, subsystem.value, i + 1, len(subsystems))
        verdict = evaluate(subsystem, snapshots.get(subsystem), thresholds)
        verdicts.append(verdict)
        if on_verdict:
            _safe_call(on_verdict, verdict)
    return tuple(verdicts)


def run_diagnostics(snapshots: SnapshotSet,
                    thresholds: Optional[Thresholds] = None,
                    on_verdict: Optional[VerdictCallback] = None,
                    on_progress: Optional[ProgressCallback] = None) -> DiagnosticReport:
    """
    Run a full diagnostics pass and build the report.

    Args:
        snapshots: One snapshot per subsystem
        thresholds: Deployment thresholds (defaults when None)
        on_verdict: Called with each Verdict as it is produced
        on_progress: Called with (subsystem, current, total) before each evaluation

    Returns:
        DiagnosticReport with nine verdicts and the overall summary
    """
    verdicts = evaluate_all(snapshots, thresholds, on_verdict, on_progress)
    report = DiagnosticReport(verdicts=verdicts, summary=aggregate(verdicts))
    counts = report.counts()
    logger.info(
        f"Diagnostics pass complete: {report.summary.label} "
        f"({counts['success']} ok, {counts['warning']} warning, {counts['error']} error)"
    )
    return report


def _safe_call(callback, *args):
    try:
        callback(*args)
    except Exception as e:
        logger.error(f"Diagnostics callback error: {e}")
