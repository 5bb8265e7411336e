#!/usr/bin/env python3
"""Frontline Commissioning Diagnostics

Evaluates a controller's probe results and shows per-subsystem verdicts,
the overall commissioning status and the operator rulebook.

Usage:
    frontline-diagnose snapshots.yaml
    frontline-diagnose --demo --details
    frontline-diagnose snapshots.json --json
    frontline-diagnose --rulebook power

Exit codes:
    0  Excellent, or good with advisories
    1  Needs attention (at least one subsystem in error)
    2  Invalid input or configuration
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from core import __version__
from core.diagnostics import (
    DiagnosticReport,
    DiagnosticStatus,
    DiagnosticsError,
    InvalidSnapshotError,
    RuleEntry,
    SnapshotSet,
    Verdict,
    all_entries,
    load_thresholds,
    lookup,
    run_diagnostics,
)
from core.diagnostics.rulebook import title_for
from core.diagnostics.samples import demo_snapshots
from utils.console import STATUS_ICONS, get_console
from utils.env_config import get_config, load_env_file, show_config_summary, validate_config
from utils.logging_config import parse_level, setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NEEDS_ATTENTION = 1
EXIT_INVALID = 2


_PLAIN_SCALAR_TAGS = (
    'tag:yaml.org,2002:int',
    'tag:yaml.org,2002:float',
    'tag:yaml.org,2002:timestamp',
)


class SnapshotLoader(yaml.SafeLoader):
    """SafeLoader that keeps numbers and dates as written.

    Snapshot fields parse their own values, so `version: 1.10` stays "1.10"
    and `last_sync: 2024-05-01` stays a string. Booleans and nulls still
    resolve as usual.
    """


SnapshotLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _PLAIN_SCALAR_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_snapshot_file(path: Path) -> SnapshotSet:
    """Load a snapshot set from a YAML or JSON file.

    Raises:
        InvalidSnapshotError: File unreadable, unparseable or malformed
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.load(f, Loader=SnapshotLoader)
    except UnicodeDecodeError as e:
        raise InvalidSnapshotError(f"Cannot decode {path}: {e}") from e
    except OSError as e:
        raise InvalidSnapshotError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise InvalidSnapshotError(f"Cannot parse {path}: {e}") from e
    logger.debug(f"Loaded snapshot file {path}")
    return SnapshotSet.from_dict(data)


def _status_cell(status: DiagnosticStatus) -> str:
    return f"[{status.value}]{STATUS_ICONS[status.value]} {status.value}[/{status.value}]"


def render_report(report: DiagnosticReport, details: bool = False, console=None):
    """Print verdict table, optional per-subsystem details, and the overview."""
    console = console or get_console()

    table = Table(title="System Diagnostics", show_header=True, header_style="bold cyan")
    table.add_column("Subsystem", style="bold")
    table.add_column("Status")
    table.add_column("Summary")
    table.add_column("Info", style="dim")
    for verdict in report.verdicts:
        table.add_row(
            title_for(verdict.subsystem),
            _status_cell(verdict.status),
            escape(verdict.summary_primary),
            escape(verdict.summary_secondary),
        )
    console.print(table)

    for verdict in report.verdicts:
        if details:
            render_verdict_details(verdict, console)
        elif verdict.remediation:
            _render_remediation(verdict, console)

    render_summary(report, console)


def render_verdict_details(verdict: Verdict, console=None):
    console = console or get_console()
    table = Table(
        title=f"{title_for(verdict.subsystem)}: {verdict.summary_primary}",
        show_header=False,
        title_style=verdict.status.value,
    )
    table.add_column("Label", style="cyan")
    table.add_column("Value")
    for item in verdict.details:
        table.add_row(escape(item.label), escape(item.value))
    console.print(table)
    if verdict.remediation:
        _render_remediation(verdict, console)


def _render_remediation(verdict: Verdict, console):
    remediation = verdict.remediation
    console.print(f"[{verdict.status.value}]{title_for(verdict.subsystem)} - "
                  f"{remediation.title}[/{verdict.status.value}]")
    for action in remediation.actions:
        console.print(f"  → {action.label} [dim]({action.kind.value})[/dim]")


def render_summary(report: DiagnosticReport, console=None):
    console = console or get_console()
    summary = report.summary
    body = "\n".join(f"• {issue}" for issue in summary.top_issues)
    console.print(Panel(
        body,
        title=f"[{summary.status.value}]Overview: {summary.label}[/{summary.status.value}]",
        border_style=summary.status.value,
    ))


def render_rulebook(entries: List[RuleEntry], console=None):
    """Print Red / Yellow / Green criteria and recommended actions."""
    console = console or get_console()
    for entry in entries:
        console.print(f"\n[heading]{entry.title}[/heading] [dim]({entry.id})[/dim]")
        console.print(f"  {entry.intent}")
        for style, name, items in (("success", "Green", entry.green),
                                   ("warning", "Yellow", entry.yellow),
                                   ("error", "Red", entry.red)):
            console.print(f"  [{style}]{name}[/{style}]")
            for item in items:
                console.print(f"    • {item}")
        console.print("  [highlight]Recommended actions[/highlight]")
        for i, action in enumerate(entry.recommended_actions, 1):
            console.print(f"    {i}. {action}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='frontline-diagnose',
        description='Evaluate controller commissioning diagnostics',
    )
    parser.add_argument('snapshot', nargs='?', type=Path,
                        help='YAML/JSON file of probe results keyed by subsystem')
    parser.add_argument('--demo', action='store_true',
                        help='Use the built-in demo dataset')
    parser.add_argument('--json', action='store_true',
                        help='Print the report as JSON')
    parser.add_argument('--details', action='store_true',
                        help='Show every detail row per subsystem')
    parser.add_argument('--rulebook', nargs='?', const='all', metavar='SUBSYSTEM',
                        help='Show the diagnostics rulebook (all or one subsystem)')
    parser.add_argument('--config', type=Path,
                        help='Thresholds YAML (default ~/.config/frontline/diagnostics.yaml)')
    parser.add_argument('--show-config', action='store_true',
                        help='Show and validate environment configuration, then exit')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_env_file()
    level = logging.DEBUG if args.debug else parse_level(os.environ.get('LOG_LEVEL'), logging.WARNING)
    setup_logging(level=level, log_file=get_config('FRONTLINE_LOG_FILE') or None)

    console = get_console()

    if args.show_config:
        show_config_summary()
        results = validate_config()
        for warning in results['warnings']:
            console.print(f"[warning]Warning: {escape(warning)}[/warning]")
        for error in results['errors']:
            console.print(f"[error]Error: {escape(error)}[/error]")
        return EXIT_OK if results['valid'] else EXIT_INVALID

    try:
        if args.rulebook:
            entries = all_entries() if args.rulebook == 'all' else [lookup(args.rulebook)]
            if args.json:
                print(json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False))
            else:
                render_rulebook(entries, console)
            return EXIT_OK

        if args.demo:
            snapshots = demo_snapshots()
        elif args.snapshot:
            snapshots = load_snapshot_file(args.snapshot)
        else:
            parser.error("a snapshot file or --demo is required")

        thresholds = load_thresholds(args.config)
        report = run_diagnostics(snapshots, thresholds)
    except DiagnosticsError as e:
        logger.debug("Diagnostics rejected input", exc_info=True)
        console.print(f"[error]Error: {escape(str(e))}[/error]")
        return EXIT_INVALID

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        render_report(report, details=args.details, console=console)

    return EXIT_NEEDS_ATTENTION if report.has_failures else EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
