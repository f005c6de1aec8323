"""
Revenue Share Engine API Package.

This package contains the Flask blueprints for the revenue share API.

Blueprints:
- payouts: Allocation, buy-to-earn simulation/estimation, scheme catalog
- monitoring: Health check and metrics
"""

from flask import Flask

from api.monitoring import monitoring_bp
from api.payouts import payouts_bp
from engine_config import EngineConfig
from monitoring.logging import configure_from_config
from monitoring.middleware import setup_request_logging

# List of all blueprints for registration
# Tuple format: (blueprint, url_prefix)
ALL_BLUEPRINTS = [
    (payouts_bp, ""),      # /payouts/..., /schemes/...
    (monitoring_bp, ""),   # /health, /metrics
]


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    for blueprint, url_prefix in ALL_BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix)


def create_app(config: EngineConfig | None = None) -> Flask:
    """
    Create the Flask application.

    Args:
        config: Engine configuration; read from the environment (after
            loading .env) when omitted

    Returns:
        Configured Flask app
    """
    if config is None:
        from dotenv import load_dotenv

        load_dotenv()
        config = EngineConfig.from_env()
        configure_from_config(config)

    app = Flask(__name__)
    app.config["ENGINE_CONFIG"] = config
    app.json.sort_keys = False

    register_blueprints(app)
    setup_request_logging(app)
    return app
