"""Shared test fixtures for the hospital admin test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, CSRF off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped, cache cleared)
- seed_data: admin + HR users, one person, three board tasks
- api_headers: Bearer API key header
"""

import pytest
from werkzeug.security import generate_password_hash

from hospital_admin import create_app
from hospital_admin.extensions import db as _db
from hospital_admin.models.person import Person
from hospital_admin.models.user import User
from hospital_admin.services import task_service


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        app.extensions["cache"].invalidate()
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def api_headers(app):
    """Bearer header accepted by api_auth."""
    return {"Authorization": f"Bearer {app.config['API_KEY']}"}


@pytest.fixture
def seed_data(app, db_session):
    """Seed an admin, an HR user, a person and a small board.

    Board (in order):
      pending:      t1 "Renew medical license", t2 "Collect passport copies"
      in-progress:  t3 "Submit residence ID"
      completed:    (empty)
    """
    admin = User(
        email="admin@hospital.local",
        password_hash=generate_password_hash("admin123"),
        full_name="Admin User",
        role="ADMIN",
    )
    hr = User(
        email="hr@hospital.local",
        password_hash=generate_password_hash("hr12345"),
        full_name="HR Officer",
        role="HR",
    )
    _db.session.add_all([admin, hr])
    _db.session.flush()

    person = Person(
        ticket_number="FOR-000001",
        first_name="Anna",
        last_name="Lindqvist",
        nationality="Swedish",
        passport_no="SE1234567",
    )
    _db.session.add(person)
    _db.session.flush()

    t1 = task_service.create_task(admin.id, "Renew medical license", priority="high")
    t2 = task_service.create_task(admin.id, "Collect passport copies")
    t3 = task_service.create_task(admin.id, "Submit residence ID", status="in-progress")
    _db.session.commit()

    return {
        "admin": admin,
        "admin_id": admin.id,
        "hr_id": hr.id,
        "person": person,
        "person_id": person.id,
        "t1": t1.id,
        "t2": t2.id,
        "t3": t3.id,
    }
