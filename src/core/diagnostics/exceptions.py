"""Exceptions raised by the diagnostics engine for caller/integration bugs.

Degraded field conditions are never raised; they come back as verdicts.
"""


class DiagnosticsError(Exception):
    """Base class for diagnostics engine errors."""


class UnknownSubsystemError(DiagnosticsError, ValueError):
    """Subsystem id is outside the fixed nine-id set."""

    def __init__(self, subsystem_id):
        super().__init__(f"Unknown subsystem: {subsystem_id!r}")
        self.subsystem_id = subsystem_id


class InvalidSnapshotError(DiagnosticsError, ValueError):
    """Snapshot is malformed or does not match the requested subsystem."""


class RuleNotFoundError(DiagnosticsError, LookupError):
    """No rulebook entry exists for the requested id."""

    def __init__(self, subsystem_id):
        super().__init__(f"No rulebook entry for: {subsystem_id!r}")
        self.subsystem_id = subsystem_id


class InvalidVerdictSetError(DiagnosticsError, ValueError):
    """Verdicts passed to the aggregator are not one-per-subsystem."""


class ConfigError(DiagnosticsError, ValueError):
    """Threshold configuration is invalid."""
