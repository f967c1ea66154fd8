import pytest
from decimal import Decimal

from backoffice import create_app
from backoffice.database import create_all, drop_all, get_session
from backoffice.models import Brand, Category, Product, ProductType, Customer


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite)."""
    return create_app('config.TestConfig')


@pytest.fixture(autouse=True)
def database(app):
    """Fresh schema for every test, inside an application context."""
    with app.app_context():
        create_all()
        yield
        get_session().remove()
        drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session():
    """Database session shared with the request handlers."""
    session = get_session()
    yield session
    session.rollback()


@pytest.fixture(scope='function')
def brand(session):
    brand = Brand(name='Acme', slug='acme', url='https://acme.example.com', is_visible=True)
    session.add(brand)
    session.commit()
    return brand


@pytest.fixture(scope='function')
def category(session):
    category = Category(name='Shoes', slug='shoes', is_visible=True)
    session.add(category)
    session.commit()
    return category


@pytest.fixture(scope='function')
def product(session, brand, category):
    """Visible product priced at 10.00."""
    product = Product(
        brand=brand,
        name='Trail Runner',
        slug='trail-runner',
        sku='TR-001',
        price=Decimal('10.00'),
        quantity=20,
        type=ProductType.DELIVERABLE,
        is_visible=True,
        is_featured=False,
        categories=[category],
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def second_product(session, brand, category):
    """Visible product priced at 5.50."""
    product = Product(
        brand=brand,
        name='Trail Socks',
        slug='trail-socks',
        sku='TS-002',
        price=Decimal('5.50'),
        quantity=100,
        type=ProductType.DELIVERABLE,
        is_visible=True,
        is_featured=False,
        categories=[category],
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def customer(session):
    customer = Customer(name='Ada Lovelace', email='ada@example.com', phone='555-0100')
    session.add(customer)
    session.commit()
    return customer
