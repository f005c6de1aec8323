"""
Monitoring and metrics API endpoints.

This blueprint provides:
- /metrics: Prometheus-compatible metrics endpoint
- /metrics/json: JSON format metrics
- /health: Basic health check
"""

import time

from flask import Blueprint, Response, current_app, jsonify

from monitoring import metrics

# Create the blueprint
monitoring_bp = Blueprint("monitoring", __name__)

# Track startup time
_startup_time = time.time()


@monitoring_bp.route("/metrics", methods=["GET"])
def prometheus_metrics():
    """
    Prometheus-compatible metrics endpoint.

    Returns metrics in Prometheus text exposition format.
    """
    return Response(metrics.to_prometheus(), mimetype="text/plain; charset=utf-8")


@monitoring_bp.route("/metrics/json", methods=["GET"])
def json_metrics():
    """Return all collected metrics as JSON."""
    return jsonify(metrics.get_all())


@monitoring_bp.route("/health", methods=["GET"])
def health():
    """Basic health check with uptime and active configuration."""
    return jsonify({
        "status": "healthy",
        "service": "revshare",
        "uptime_seconds": round(time.time() - _startup_time, 2),
        "config": current_app.config["ENGINE_CONFIG"].to_dict(),
    })
