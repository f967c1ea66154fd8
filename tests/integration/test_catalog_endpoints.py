"""
Integration tests for the brand, category and product endpoints.
"""

import pytest
from datetime import date
from decimal import Decimal


def product_form(brand, categories, **overrides):
    data = {
        'name': 'Blue Hat',
        'sku': 'HAT-001',
        'price': '12.5',
        'quantity': '3',
        'type': 'Deliverable',
        'is_visible': 'y',
        'brand_id': str(brand.id),
        'category_ids': [str(category.id) for category in categories],
    }
    data.update(overrides)
    return data


class TestBrandEndpoints:

    def test_create_brand(self, client):
        response = client.post('/brands/new', data={
            'name': "Men's Wear",
            'url': 'https://mens.example.com',
            'is_visible': 'y',
            'slug': 'ignored',
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data['slug'] == 'mens-wear'
        assert data['is_visible'] is True

    def test_slug_preview(self, client):
        response = client.post('/brands/slug', json={'operation': 'create', 'name': "Men's Running Shoes!!"})
        assert response.get_json() == {'slug': 'mens-running-shoes'}

        response = client.post('/brands/slug', json={'operation': 'edit', 'name': 'Anything'})
        assert response.get_json() == {'slug': None}

    def test_edit_keeps_slug(self, client, brand):
        response = client.post(f'/brands/{brand.id}/edit', data={
            'name': 'Acme Two',
            'url': brand.url,
            'is_visible': 'y',
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['name'] == 'Acme Two'
        assert data['slug'] == 'acme'

    def test_form_errors(self, client):
        response = client.post('/brands/new', data={'name': '', 'url': '', 'primary_hex': 'red'})

        assert response.status_code == 422
        body = response.get_json()
        assert body['status'] == 'error'
        assert set(body['errors']) == {'name', 'url', 'primary_hex'}

    def test_duplicate_name(self, client, brand):
        response = client.post('/brands/new', data={'name': 'ACME', 'url': 'https://other.example.com'})

        assert response.status_code == 422
        assert 'name' in response.get_json()['errors']

    def test_unknown_brand(self, client):
        response = client.get('/brands/999')

        assert response.status_code == 404
        assert response.get_json()['status'] == 'error'

    def test_delete_restore_cycle(self, client, brand):
        response = client.post(f'/brands/{brand.id}/delete')
        assert response.status_code == 200
        assert response.get_json()['deleted_at'] is not None

        assert client.get('/brands/').get_json()['results'] == []
        assert len(client.get('/brands/?trashed=only').get_json()['results']) == 1

        response = client.post(f'/brands/{brand.id}/restore')
        assert response.get_json()['deleted_at'] is None
        assert len(client.get('/brands/').get_json()['results']) == 1

    def test_bulk_delete(self, client, session, brand):
        response = client.post('/brands/bulk-delete', json={'ids': [brand.id, 999]})
        assert response.get_json() == {'deleted': [brand.id]}


class TestProductEndpoints:

    def test_create_product(self, client, brand, category):
        response = client.post('/products/new', data=product_form(brand, [category]))

        assert response.status_code == 201
        data = response.get_json()
        assert data['slug'] == 'blue-hat'
        assert data['price'] == '12.50'
        assert data['category_ids'] == [category.id]
        assert data['brand_name'] == 'Acme'
        assert data['is_featured'] is False
        assert data['published_at'] == date.today().isoformat()

    @pytest.mark.parametrize('field,value', [('price', '1.234'), ('price', '1234567'), ('quantity', '101'), ('quantity', '-1')])
    def test_rejected_values(self, client, brand, category, field, value):
        response = client.post('/products/new', data=product_form(brand, [category], **{field: value}))

        assert response.status_code == 422
        assert field in response.get_json()['errors']

    def test_categories_required(self, client, brand):
        response = client.post('/products/new', data=product_form(brand, []))

        assert response.status_code == 422
        assert 'category_ids' in response.get_json()['errors']

    def test_edit_keeps_slug(self, client, product, brand, category):
        response = client.post(f'/products/{product.id}/edit', data=product_form(
            brand, [category], name='Trail Runner Pro', sku=product.sku, price='11.00'
        ))

        assert response.status_code == 200
        data = response.get_json()
        assert data['slug'] == 'trail-runner'
        assert data['price'] == '11.00'

    def test_filters(self, client, session, product, second_product):
        second_product.is_visible = False
        session.commit()

        hidden = client.get('/products/?visible=0').get_json()['results']
        assert [row['sku'] for row in hidden] == ['TS-002']

        everything = client.get('/products/?visible=&sort=price&direction=desc').get_json()['results']
        assert [row['sku'] for row in everything] == ['TR-001', 'TS-002']

        by_brand = client.get(f'/products/?brand_id={product.brand_id}').get_json()['results']
        assert len(by_brand) == 2


class TestCategoryEndpoints:

    def test_create_child_category(self, client, category):
        response = client.post('/categories/new', data={
            'name': 'Running Shoes',
            'is_visible': 'y',
            'parent_id': str(category.id),
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data['slug'] == 'running-shoes'
        assert data['parent_name'] == 'Shoes'

    def test_self_parent_is_rejected(self, client, category):
        response = client.post(f'/categories/{category.id}/edit', data={
            'name': category.name,
            'is_visible': 'y',
            'parent_id': str(category.id),
        })

        assert response.status_code == 422
        assert 'parent_id' in response.get_json()['errors']

    def test_products_relation(self, client, brand, category, product):
        response = client.post(f'/categories/{category.id}/products/new', data=product_form(brand, []))
        assert response.status_code == 201
        assert response.get_json()['category_ids'] == [category.id]

        listing = client.get(f'/categories/{category.id}/products').get_json()['results']
        assert {row['sku'] for row in listing} == {'TR-001', 'HAT-001'}

    def test_detach_last_category(self, client, category, product):
        response = client.post(f'/categories/{category.id}/products/{product.id}/detach')

        assert response.status_code == 400
        assert response.get_json()['status'] == 'error'
