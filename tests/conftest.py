import pytest
from decimal import Decimal

from inventory_manager.app import create_app, db
from inventory_manager.app.models import User, Item, Category, Location
from inventory_manager.config import TestConfig


@pytest.fixture
def app(tmp_path):
    class Config(TestConfig):
        QR_CODE_FOLDER = str(tmp_path / 'qrcodes')

    app = create_app(Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gate(app):
    return app.extensions['permission_gate']


@pytest.fixture
def engine(app):
    return app.extensions['lifecycle']


@pytest.fixture
def make_user(app):
    def make_user(role, username=None, password='password'):
        username = username or role
        user = User(username=username, email=f'{username}@example.com', role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return make_user


@pytest.fixture
def admin(make_user):
    return make_user('superadmin', 'admin')


@pytest.fixture
def property_admin(make_user):
    return make_user('property_administrator')


@pytest.fixture
def clerk(make_user):
    return make_user('inventory_clerk')


@pytest.fixture
def officer(make_user):
    return make_user('assignment_officer')


@pytest.fixture
def coordinator(make_user):
    return make_user('maintenance_coordinator')


@pytest.fixture
def auditor(make_user):
    return make_user('auditor')


@pytest.fixture
def staff(make_user):
    return make_user('staff')


@pytest.fixture
def other_staff(make_user):
    return make_user('staff', 'other_staff')


@pytest.fixture
def category(app):
    category = Category(name='Computers', code='comp')
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def location(app):
    location = Location(name='Main Office', code='main-1', building='Admin', floor='2', room='201')
    db.session.add(location)
    db.session.commit()
    return location


@pytest.fixture
def make_item(app):
    counter = {'n': 0}

    def make_item(status='available', **kwargs):
        counter['n'] += 1
        item = Item(property_number=kwargs.pop('property_number', f"PN-{counter['n']:04d}"),
                    name=kwargs.pop('name', f"Laptop {counter['n']}"),
                    acquisition_cost=kwargs.pop('acquisition_cost', Decimal('45000.00')),
                    status=status, **kwargs)
        db.session.add(item)
        db.session.commit()
        return item
    return make_item


@pytest.fixture
def item(make_item):
    return make_item()


@pytest.fixture
def login(client):
    def login(user, password='password'):
        response = client.post('/auth/login', json={'email': user.email, 'password': password})
        assert response.status_code == 200
        return response
    return login
