"""
Pytest fixtures for shopdesk backend tests.

Provides test database setup, per-user auth headers, and test client.
"""

import pytest
from shopdesk import create_app
from shopdesk.config import TestingConfig
from shopdesk.extensions import db
from shopdesk.services.auth_service import issue_token
from shopdesk.services.seed_service import seed_user_data


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def user_a(db_session):
    return "user-a"


@pytest.fixture(scope='function')
def user_b(db_session):
    return "user-b"


@pytest.fixture(scope='function')
def seeded_user(user_a):
    """user_a with the demo products, customers and invoices."""
    seed_user_data(user_a)
    return user_a


@pytest.fixture(scope='function')
def auth_headers(app):
    """Build Authorization headers for any user id."""
    def _headers(user_id):
        return {"Authorization": f"Bearer {issue_token(user_id)}"}
    return _headers


@pytest.fixture(scope='function')
def headers_a(auth_headers, user_a):
    return auth_headers(user_a)


@pytest.fixture(scope='function')
def headers_b(auth_headers, user_b):
    return auth_headers(user_b)
