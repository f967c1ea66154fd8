"""
Flask CLI commands.

Commands:
- flask init-db: Create the database tables
- flask seed-demo: Load a small demo catalog with a couple of orders
"""

import click
from backoffice.database import create_all, get_session
from backoffice.exceptions import AppError
from backoffice.models import Brand, OrderStatus
from backoffice.services import brand_service, category_service, product_service, customer_service, order_service


DEMO_BRANDS = [
    {'name': 'Acme', 'url': 'https://acme.example.com', 'primary_hex': '#d97706'},
    {'name': 'Northwind', 'url': 'https://northwind.example.com', 'primary_hex': '#2563eb'},
]

DEMO_CATEGORIES = [
    {'name': 'Shoes'},
    {'name': 'Running Shoes', 'parent': 'Shoes'},
    {'name': 'E-books'},
]

DEMO_PRODUCTS = [
    {'name': "Men's Running Shoes", 'sku': 'RUN-001', 'price': '89.90', 'quantity': 40,
     'type': 'Deliverable', 'brand': 'Acme', 'categories': ['Shoes', 'Running Shoes']},
    {'name': 'Trail Socks', 'sku': 'SOC-002', 'price': '9.50', 'quantity': 100,
     'type': 'Deliverable', 'brand': 'Northwind', 'categories': ['Shoes']},
    {'name': 'Marathon Training Guide', 'sku': 'EBK-003', 'price': '14.00', 'quantity': 0,
     'type': 'Downloadable', 'brand': 'Northwind', 'categories': ['E-books']},
]


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create every table."""
        create_all()
        click.echo(click.style('✅ Tablas creadas.', fg='green'))

    @app.cli.command('seed-demo')
    def seed_demo():
        """Load demo brands, categories, products, customers and orders."""
        session = get_session()

        if session.query(Brand).first():
            click.echo(click.style('❌ La base ya tiene datos; seed cancelado.', fg='red'))
            return

        try:
            brands = {data['name']: brand_service.create_brand(session, data) for data in DEMO_BRANDS}

            categories = {}
            for data in DEMO_CATEGORIES:
                parent = categories.get(data.get('parent'))
                categories[data['name']] = category_service.create_category(
                    session, {'name': data['name'], 'parent_id': parent.id if parent else None}
                )

            products = []
            for data in DEMO_PRODUCTS:
                values = {key: value for key, value in data.items() if key not in ('brand', 'categories')}
                values['brand_id'] = brands[data['brand']].id
                values['category_ids'] = [categories[name].id for name in data['categories']]
                products.append(product_service.create_product(session, values))

            ada = customer_service.create_customer(session, {'name': 'Ada Lovelace', 'email': 'ada@example.com'})
            alan = customer_service.create_customer(session, {'name': 'Alan Turing', 'email': 'alan@example.com'})

            order_service.create_order(session, {
                'customer_id': ada.id,
                'status': OrderStatus.PROCESSING.value,
                'shipping_price': '5.00',
                'items': [
                    {'product_id': products[0].id, 'quantity': 1},
                    {'product_id': products[1].id, 'quantity': 2},
                ],
            })
            order_service.create_order(session, {
                'customer_id': alan.id,
                'shipping_price': '0',
                'items': [{'product_id': products[2].id, 'quantity': 1}],
            })

            session.commit()
            click.echo(click.style('\n✅ Datos de demo cargados!', fg='green', bold=True))
            click.echo(f'   Marcas: {len(brands)}  Categorías: {len(categories)}  Productos: {len(products)}')

        except AppError as e:
            session.rollback()
            click.echo(click.style(f'❌ Error al cargar datos de demo: {e.message}', fg='red'))
