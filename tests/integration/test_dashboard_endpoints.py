"""
Integration tests for the dashboard widget, navigation badges and metrics.
"""

from backoffice.models import Order, OrderStatus


def add_processing_orders(session, customer, count):
    for i in range(count):
        session.add(Order(number=f'OR-{200000 + i}', customer=customer, status=OrderStatus.PROCESSING))
    session.commit()


def test_stats_widget(client, customer, product):
    body = client.get('/dashboard/stats').get_json()

    assert body['poll_interval'] == 15
    assert [stat['label'] for stat in body['stats']] == ['Total Customers', 'Total Products', 'Pending Orders']
    assert [stat['value'] for stat in body['stats']] == [1, 1, 0]


def test_badges_primary_up_to_threshold(client, session, customer, product):
    add_processing_orders(session, customer, 10)

    body = client.get('/dashboard/badges').get_json()
    assert body['orders'] == {'count': 10, 'color': 'primary'}
    assert body['products']['count'] == 1


def test_badges_warning_above_threshold(client, session, customer):
    add_processing_orders(session, customer, 11)

    body = client.get('/dashboard/badges').get_json()
    assert body['orders'] == {'count': 11, 'color': 'warning'}


def test_metrics_endpoint(client):
    client.get('/dashboard/stats')
    response = client.get('/metrics')

    assert response.status_code == 200
    assert b'backoffice_http_requests_total' in response.data
    assert b'backoffice_processing_orders' in response.data


def test_unknown_route_is_json(client):
    response = client.get('/does-not-exist')

    assert response.status_code == 404
    assert response.get_json() == {'status': 'error', 'message': 'Not Found'}
