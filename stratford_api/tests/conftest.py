import pytest
from argon2 import PasswordHasher

from stratford_api.config import Settings
from stratford_api.database.db_connection import Database
from stratford_api.database.models import User, Venue
from stratford_api.gateway.server import create_app

TEST_SECRET = "test_secret"

# Cheap parameters keep fixture hashing fast
fast_ph = PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def settings():
    return Settings(jwt_secret=TEST_SECRET, database_url="sqlite://", rate_limit_enabled=False)


@pytest.fixture
def db(settings):
    database = Database(settings.database_url)
    yield database
    database.dispose()


@pytest.fixture
def app(settings, db):
    app = create_app(settings=settings, database=db)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tokens(app):
    return app.extensions["tokens"]


@pytest.fixture
def make_user(db, tokens):
    """
    Insert a user directly and return (user, token).
    """
    counter = {"n": 0}

    def _make_user(role="READER", email=None, password="secret1", name="Test User"):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        with db.session() as session:
            user = User(
                email=email,
                password_hash=fast_ph.hash(password),
                name=name,
                role=role,
            )
            session.add(user)
            session.commit()
        return user, tokens.issue(user.id, user.email, user.role)

    return _make_user


@pytest.fixture
def make_venue(db):
    def _make_venue(owner, name="The Church Restaurant", address="70 Brunswick St"):
        with db.session() as session:
            venue = Venue(user_id=owner.id, name=name, address=address, amenities=["Bar"])
            session.add(venue)
            session.commit()
        return venue

    return _make_venue


@pytest.fixture
def auth_header():
    def _auth_header(token):
        return {"Authorization": f"Bearer {token}"}

    return _auth_header
