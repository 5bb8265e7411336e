"""
Diagnostics REST API

RESTful endpoints over the commissioning diagnostics engine.
All endpoints return JSON responses. The API only reports action-kind
tags; navigation is up to the client.

Endpoints:
    POST /api/diagnostics/evaluate              - Evaluate a full snapshot set
    POST /api/diagnostics/evaluate/<subsystem>  - Evaluate one subsystem snapshot
    GET  /api/diagnostics/rulebook              - All rulebook entries
    GET  /api/diagnostics/rulebook/<subsystem>  - One rulebook entry
"""

from flask import Blueprint, current_app, jsonify, request
import logging

from core.diagnostics import (
    DEFAULT_THRESHOLDS,
    DiagnosticsError,
    RuleNotFoundError,
    SnapshotSet,
    UnknownSubsystemError,
    all_entries,
    evaluate,
    lookup,
    run_diagnostics,
)

logger = logging.getLogger(__name__)

diagnostics_bp = Blueprint('diagnostics', __name__, url_prefix='/diagnostics')

THRESHOLDS_KEY = 'FRONTLINE_THRESHOLDS'


def _thresholds():
    """Thresholds configured on the app, or the defaults."""
    return current_app.config.get(THRESHOLDS_KEY) or DEFAULT_THRESHOLDS


def _json_body():
    data = request.get_json(silent=True)
    # A literal null body means no probe results, same as an empty body
    if data is None and request.data.strip() not in (b'', b'null'):
        return None, (jsonify({'error': 'Request body is not valid JSON'}), 400)
    return data or {}, None


@diagnostics_bp.route('/evaluate', methods=['POST'])
def evaluate_all_subsystems():
    """Evaluate all nine subsystems and return the full report."""
    data, error = _json_body()
    if error:
        return error

    try:
        snapshots = SnapshotSet.from_dict(data)
        report = run_diagnostics(snapshots, _thresholds())
    except DiagnosticsError as e:
        logger.warning(f"Rejected diagnostics request: {e}")
        return jsonify({'error': str(e)}), 400

    return jsonify(report.to_dict())


@diagnostics_bp.route('/evaluate/<subsystem>', methods=['POST'])
def evaluate_subsystem(subsystem: str):
    """Evaluate a single subsystem snapshot."""
    data, error = _json_body()
    if error:
        return error

    try:
        verdict = evaluate(subsystem, data, _thresholds())
    except UnknownSubsystemError as e:
        return jsonify({'error': str(e)}), 404
    except DiagnosticsError as e:
        logger.warning(f"Rejected {subsystem} snapshot: {e}")
        return jsonify({'error': str(e)}), 400

    return jsonify(verdict.to_dict())


@diagnostics_bp.route('/rulebook')
def get_rulebook():
    """Get every rulebook entry, in subsystem order."""
    entries = all_entries()
    return jsonify({
        'count': len(entries),
        'entries': [e.to_dict() for e in entries],
    })


@diagnostics_bp.route('/rulebook/<subsystem>')
def get_rule(subsystem: str):
    """Get the rulebook entry for one subsystem."""
    try:
        entry = lookup(subsystem)
    except RuleNotFoundError as e:
        return jsonify({'error': str(e)}), 404

    return jsonify(entry.to_dict())
