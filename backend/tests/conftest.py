"""
Pytest fixtures for tcoffice backend tests.

Provides an in-memory database, a test client, a registered user and a
small employee roster.
"""

import pytest

from tcoffice import create_app
from tcoffice.extensions import db
from tcoffice.services.auth_service import create_user
from tcoffice.services.employee_service import create_employee


TEST_EMAIL = "owner@tc.local"
TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'DB_STARTUP_CHECK': False,
        'ATTENDANCE_REQUIRE_EDIT_MODE': True,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function', autouse=True)
def db_session(app):
    """Fresh tables for each test."""
    db.session.rollback()
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def user(db_session):
    """A registered back-office user."""
    return create_user(email=TEST_EMAIL, password=TEST_PASSWORD, name="Owner")


@pytest.fixture(scope='function')
def auth_client(client, user):
    """Test client holding a session cookie for `user`."""
    response = client.post('/login', json={'email': TEST_EMAIL, 'password': TEST_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture(scope='function')
def employees(db_session):
    """Three employees with ids 1..3."""
    return [
        create_employee(1, "Asha"),
        create_employee(2, "Bilal"),
        create_employee(3, "Chen"),
    ]

