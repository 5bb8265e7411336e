"""
Commissioning Diagnostic Data Models

These data structures are shared by every diagnostics consumer:
- CLI and Web API render the same Verdict objects
- JSON serialization built-in for API/storage
- Thread-safe: frozen dataclasses, tuples instead of lists
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


# === Enums ===

class SubsystemId(Enum):
    """The nine controller subsystems, in declaration order."""
    ETHERNET = "ethernet"
    WIFI = "wifi"
    CELLULAR = "cellular"
    SATELLITE = "satellite"
    POWER = "power"
    MANIFOLD = "manifold"
    SOURCE = "source"
    CLOUD = "cloud"
    FIRMWARE = "firmware"


class DiagnosticStatus(Enum):
    """Tri-state health verdict for one subsystem."""
    SUCCESS = "success"   # Green - ready for commissioning
    WARNING = "warning"   # Yellow - usable, advisory raised
    ERROR = "error"       # Red - action required

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def worst(cls, statuses) -> 'DiagnosticStatus':
        """Most severe status of an iterable (SUCCESS when empty)."""
        worst = cls.SUCCESS
        for status in statuses:
            if status.severity > worst.severity:
                worst = status
        return worst


_SEVERITY = {
    DiagnosticStatus.SUCCESS: 0,
    DiagnosticStatus.WARNING: 1,
    DiagnosticStatus.ERROR: 2,
}


class ActionKind(Enum):
    """External workflow a remediation action asks the caller to open."""
    NAVIGATE_TO_NETWORK_SETUP = "navigate-to-network-setup"
    OPEN_RULEBOOK_ENTRY = "open-rulebook-entry"


# === Verdict Types ===

@dataclass(frozen=True)
class DetailItem:
    """One (label, value) row shown under a verdict."""
    label: str
    value: str

    def to_dict(self) -> dict:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class RemediationAction:
    """A labelled action tagged with the workflow that handles it."""
    label: str
    kind: ActionKind

    def to_dict(self) -> dict:
        return {"label": self.label, "kind": self.kind.value}


@dataclass(frozen=True)
class Remediation:
    """
    Remediation block attached to a non-success verdict.

    The first action is the primary recommended next step.
    """
    title: str
    actions: Tuple[RemediationAction, ...]

    @property
    def primary_action(self) -> Optional[RemediationAction]:
        return self.actions[0] if self.actions else None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass(frozen=True)
class Verdict:
    """
    Health classification for a single subsystem.

    Every evaluation pass produces exactly one Verdict per subsystem.
    A Verdict is derived purely from its snapshot and is never patched;
    re-evaluate the snapshot to get a fresh one.

    Attributes:
        subsystem: Which subsystem was evaluated
        status: SUCCESS, WARNING or ERROR
        summary_primary: Short status label (e.g., "Connected")
        summary_secondary: One-line context (e.g., "192.168.7.31 • 1000 Mb/s")
        details: Ordered (label, value) rows
        remediation: Suggested actions, only for actionable subsystems
    """
    subsystem: SubsystemId
    status: DiagnosticStatus
    summary_primary: str
    summary_secondary: str
    details: Tuple[DetailItem, ...] = ()
    remediation: Optional[Remediation] = None

    def is_ok(self) -> bool:
        """Return True if the subsystem passed outright."""
        return self.status == DiagnosticStatus.SUCCESS

    def detail(self, label: str) -> Optional[str]:
        """Look up a detail value by label."""
        for item in self.details:
            if item.label == label:
                return item.value
        return None

    def to_dict(self) -> dict:
        """Serialize for API/JSON output."""
        return {
            "subsystem": self.subsystem.value,
            "status": self.status.value,
            "summary_primary": self.summary_primary,
            "summary_secondary": self.summary_secondary,
            "details": [d.to_dict() for d in self.details],
            "remediation": self.remediation.to_dict() if self.remediation else None,
        }


@dataclass(frozen=True)
class OverallSummary:
    """
    Overall commissioning health, combined from all nine verdicts.

    Attributes:
        status: Most severe status across all verdicts
        label: Overview label ("Needs Attention", "Good (with advisories)", "Excellent")
        short_label: Compact label for summary rows ("Needs attention", "Good", "Excellent")
        top_issues: Up to three "Title: Summary" lines, or the all-passed sentinel
        issue_count: Number of non-success verdicts (before truncation)
    """
    status: DiagnosticStatus
    label: str
    short_label: str
    top_issues: Tuple[str, ...]
    issue_count: int

    @property
    def all_passed(self) -> bool:
        return self.issue_count == 0

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "label": self.label,
            "short_label": self.short_label,
            "top_issues": list(self.top_issues),
            "issue_count": self.issue_count,
        }


@dataclass(frozen=True)
class DiagnosticReport:
    """
    Complete result of one diagnostics pass.

    Can be serialized to JSON for the API or saved by the caller.
    """
    verdicts: Tuple[Verdict, ...]
    summary: OverallSummary
    generated_at: datetime = field(default_factory=datetime.now)

    def verdict(self, subsystem: SubsystemId) -> Verdict:
        for v in self.verdicts:
            if v.subsystem == subsystem:
                return v
        raise KeyError(subsystem.value)

    @property
    def is_healthy(self) -> bool:
        """True if every subsystem passed."""
        return self.summary.all_passed

    @property
    def has_failures(self) -> bool:
        """True if any subsystem is in error."""
        return self.summary.status == DiagnosticStatus.ERROR

    def counts(self) -> dict:
        """Number of verdicts per status."""
        counts = {s.value: 0 for s in DiagnosticStatus}
        for v in self.verdicts:
            counts[v.status.value] += 1
        return counts

    def to_dict(self) -> dict:
        """Serialize for API/JSON output."""
        return {
            "generated_at": self.generated_at.isoformat(),
            "summary": self.summary.to_dict(),
            "counts": self.counts(),
            "verdicts": [v.to_dict() for v in self.verdicts],
        }
