"""
Dashboard blueprint.
Stats overview widget and navigation badges, both polled by the UI.
"""

from flask import Blueprint, current_app
from backoffice.database import get_session
from backoffice.services.dashboard_service import get_stats_overview, get_navigation_badges
from backoffice.blueprints.metrics import processing_orders_gauge


dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')


@dashboard_bp.route('/stats')
def stats():
    """
    Stats overview widget.

    Returns:
        - stats: Total Customers, Total Products, Pending Orders
        - poll_interval: seconds between client refreshes
    """
    db_session = get_session()
    return {
        'stats': get_stats_overview(db_session),
        'poll_interval': current_app.config.get('DASHBOARD_POLL_SECONDS', 15),
    }


@dashboard_bp.route('/badges')
def badges():
    """
    Navigation badges (products total, processing orders).

    Counts are read on every call so the badge always matches the table.
    """
    db_session = get_session()
    threshold = current_app.config.get('ORDER_BADGE_WARNING_THRESHOLD', 10)
    data = get_navigation_badges(db_session, threshold=threshold)
    processing_orders_gauge.set(data['orders']['count'])
    return data
