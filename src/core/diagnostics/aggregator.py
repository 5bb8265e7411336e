"""
Diagnostic Aggregator

Combines the nine per-subsystem verdicts into one commissioning summary.
Precedence is strict: a single ERROR anywhere outranks any number of
WARNINGs.
"""

from typing import Iterable, Tuple

from .exceptions import InvalidVerdictSetError
from .models import DiagnosticStatus, OverallSummary, SubsystemId, Verdict
from .rulebook import title_for

MAX_TOP_ISSUES = 3
ALL_PASSED = "All diagnostics passed."

LABEL_NEEDS_ATTENTION = "Needs Attention"
LABEL_GOOD = "Good (with advisories)"
LABEL_EXCELLENT = "Excellent"

_LABELS = {
    DiagnosticStatus.ERROR: (LABEL_NEEDS_ATTENTION, "Needs attention"),
    DiagnosticStatus.WARNING: (LABEL_GOOD, "Good"),
    DiagnosticStatus.SUCCESS: (LABEL_EXCELLENT, "Excellent"),
}


def _ordered(verdicts: Iterable[Verdict]) -> Tuple[Verdict, ...]:
    """Validate one verdict per subsystem and sort into declaration order."""
    by_subsystem = {}
    for verdict in verdicts:
        if not isinstance(verdict, Verdict):
            raise InvalidVerdictSetError(f"Not a Verdict: {verdict!r}")
        if verdict.subsystem in by_subsystem:
            raise InvalidVerdictSetError(f"Duplicate verdict for {verdict.subsystem.value}")
        by_subsystem[verdict.subsystem] = verdict

    missing = [s.value for s in SubsystemId if s not in by_subsystem]
    if missing:
        raise InvalidVerdictSetError(f"Missing verdicts for: {', '.join(missing)}")

    return tuple(by_subsystem[s] for s in SubsystemId)


def format_issue(verdict: Verdict) -> str:
    """'Title: Summary' line for a non-success verdict."""
    return f"{title_for(verdict.subsystem)}: {verdict.summary_primary}"


def aggregate(verdicts: Iterable[Verdict]) -> OverallSummary:
    """
    Combine all subsystem verdicts into an OverallSummary.

    Args:
        verdicts: Exactly one Verdict per subsystem, in any order

    Returns:
        OverallSummary with label and up to three top issues, listed in
        subsystem declaration order (not severity order)

    Raises:
        InvalidVerdictSetError: Missing, duplicate or foreign verdicts
    """
    ordered = _ordered(verdicts)

    status = DiagnosticStatus.worst(v.status for v in ordered)
    label, short_label = _LABELS[status]

    issues = [format_issue(v) for v in ordered if not v.is_ok()]
    top_issues = tuple(issues[:MAX_TOP_ISSUES]) if issues else (ALL_PASSED,)

    return OverallSummary(
        status=status,
        label=label,
        short_label=short_label,
        top_issues=top_issues,
        issue_count=len(issues),
    )
