import pytest

from config import Config
from okfees import create_app, db
from okfees.models import Profile, User
from okfees.session import SessionContext

PASSWORD = "secret123"


class OkFeesTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = "noreply@okfees.test"


@pytest.fixture()
def app():
    app = create_app(OkFeesTestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    """Create a principal with its profile; returns the user id."""
    def _make(email="owner@example.com", password=PASSWORD, **profile):
        with app.app_context():
            user = User(email=email)
            user.set_password(password)
            user.profile = Profile(email=email, **profile)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture()
def login(app):
    """Sign in on a fresh test client."""
    def _login(email="owner@example.com", password=PASSWORD):
        client = app.test_client()
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.get_json()
        return client
    return _login


@pytest.fixture()
def auth_client(make_user, login):
    make_user()
    return login()


@pytest.fixture()
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def owners(app_ctx, make_user):
    """Session contexts for two institutes."""
    first = make_user("first@example.com")
    second = make_user("second@example.com")
    return SessionContext(first, "first@example.com"), SessionContext(second, "second@example.com")
