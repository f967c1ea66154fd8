"""
Integration tests for the customer endpoints.
"""


def test_create_and_search(client):
    response = client.post('/customers/new', data={'name': 'Grace Hopper', 'email': 'Grace@Example.com'})

    assert response.status_code == 201
    assert response.get_json()['email'] == 'grace@example.com'

    results = client.get('/customers/?q=hopper').get_json()['results']
    assert [row['name'] for row in results] == ['Grace Hopper']


def test_invalid_email(client):
    response = client.post('/customers/new', data={'name': 'Nobody', 'email': 'not-an-email'})

    assert response.status_code == 422
    assert 'email' in response.get_json()['errors']


def test_duplicate_email(client, customer):
    response = client.post('/customers/new', data={'name': 'Ada Again', 'email': customer.email})

    assert response.status_code == 422
    assert 'email' in response.get_json()['errors']


def test_edit(client, customer):
    response = client.post(f'/customers/{customer.id}/edit', data={
        'name': 'Ada King',
        'email': customer.email,
        'phone': '',
    })

    assert response.status_code == 200
    data = response.get_json()
    assert data['name'] == 'Ada King'
    assert data['phone'] is None
