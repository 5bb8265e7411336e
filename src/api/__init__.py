"""
Frontline REST API

Flask blueprints for API endpoints.
"""

from typing import Optional

from flask import Blueprint, Flask

from .diagnostics import diagnostics_bp, THRESHOLDS_KEY

# Main API blueprint
api_bp = Blueprint('api', __name__, url_prefix='/api')
api_bp.register_blueprint(diagnostics_bp)


def create_app(thresholds=None, config: Optional[dict] = None) -> Flask:
    """
    Build a Flask app serving the diagnostics API.

    Args:
        thresholds: Thresholds used for every evaluation (defaults when None)
        config: Extra Flask config values
    """
    app = Flask(__name__)
    app.json.sort_keys = False
    if config:
        app.config.update(config)
    app.config[THRESHOLDS_KEY] = thresholds
    app.register_blueprint(api_bp)
    return app


__all__ = ['api_bp', 'diagnostics_bp', 'create_app']
