"""
Dashboard service.
Provides the stats overview widget and the navigation badges.

Every value is read straight from the current rows on each poll; nothing
is cached between requests.
"""

from typing import Dict, Any, List
from sqlalchemy import func
from backoffice.models import Customer, Product, Order, OrderStatus

DEFAULT_BADGE_WARNING_THRESHOLD = 10


def count_customers(session) -> int:
    """Total (non-trashed) customers."""
    return session.query(func.count(Customer.id)).filter(
        Customer.deleted_at.is_(None)
    ).scalar() or 0


def count_products(session) -> int:
    """Total (non-trashed) products."""
    return session.query(func.count(Product.id)).filter(
        Product.deleted_at.is_(None)
    ).scalar() or 0


def count_orders_with_status(session, status: OrderStatus) -> int:
    """Count of non-trashed orders currently in `status`."""
    return session.query(func.count(Order.id)).filter(
        Order.status == OrderStatus(status),
        Order.deleted_at.is_(None)
    ).scalar() or 0


def processing_badge_color(count: int, threshold: int = DEFAULT_BADGE_WARNING_THRESHOLD) -> str:
    """'warning' once processing orders exceed the threshold, else 'primary'."""
    return 'warning' if count > threshold else 'primary'


def get_stats_overview(session) -> List[Dict[str, Any]]:
    """
    Stats shown on the dashboard widget.

    Returns:
        list of dicts with label, value, description, description_icon,
        color and chart (sparkline points)
    """
    return [
        {
            'key': 'customers',
            'label': 'Total Customers',
            'value': count_customers(session),
            'description': 'Increase in customers',
            'description_icon': 'heroicon-m-arrow-trending-up',
            'color': 'success',
            'chart': [2, 5, 8, 10, 13],
        },
        {
            'key': 'products',
            'label': 'Total Products',
            'value': count_products(session),
            'description': 'Total products in app',
            'description_icon': 'heroicon-m-arrow-trending-down',
            'color': 'danger',
            'chart': [20, 14, 17, 15, 12, 9, 6, 2],
        },
        {
            'key': 'pending_orders',
            'label': 'Pending Orders',
            'value': count_orders_with_status(session, OrderStatus.PENDING),
            'description': 'Pending orders in app',
            'description_icon': 'heroicon-m-arrow-trending-up',
            'color': 'success',
            'chart': [1, 5, 9, 14, 16, 19, 22],
        },
    ]


def get_navigation_badges(session, threshold: int = DEFAULT_BADGE_WARNING_THRESHOLD) -> Dict[str, Dict[str, Any]]:
    """
    Badges for the navigation panel.

    - products: total product count
    - orders: processing order count, colored by processing_badge_color
    """
    processing = count_orders_with_status(session, OrderStatus.PROCESSING)
    return {
        'products': {'count': count_products(session), 'color': 'primary'},
        'orders': {'count': processing, 'color': processing_badge_color(processing, threshold)},
    }
