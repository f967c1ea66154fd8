"""
Prometheus metrics blueprint.

Exposes /metrics with HTTP request metrics plus a few back-office counters.
The endpoint is unauthenticated: restrict it at the network level.
"""
from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY
import time
import os

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers share metrics through PROMETHEUS_MULTIPROC_DIR
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY

_metric_registry = registry if not MULTIPROCESS_MODE else None

http_requests_total = Counter(
    'backoffice_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'backoffice_http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

orders_created_total = Counter(
    'backoffice_orders_created_total',
    'Orders created through the order form',
    registry=_metric_registry
)

processing_orders_gauge = Gauge(
    'backoffice_processing_orders',
    'Processing orders seen by the last navigation badge poll',
    registry=_metric_registry,
    multiprocess_mode='livemax'
)


def setup_metrics_instrumentation(app):
    """Register before/after request hooks that record request metrics."""

    @app.before_request
    def before_request_metrics():
        g._metrics_start_time = time.time()

    @app.after_request
    def after_request_metrics(response):
        start = g.pop('_metrics_start_time', None)
        if start is None:
            return response

        endpoint = request.endpoint or 'unknown'
        try:
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - start)
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                http_status=response.status_code
            ).inc()
        except ValueError as e:
            app.logger.warning(f"Failed to record metrics: {e}")

        return response


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus text exposition of every registered metric."""
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
