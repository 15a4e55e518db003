import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("SESSION_SWEEP_INTERVAL_SECONDS", "0")
os.environ.setdefault("TIMEZONE", "UTC")

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.security.passwords import generate_session_token, hash_password  # noqa: E402
from app.sessions import service as session_service  # noqa: E402
from app.users import crud as user_crud  # noqa: E402
from app.users.auth import SESSION_COOKIE_NAME  # noqa: E402
from app.utils.dates import utcnow  # noqa: E402

TEST_PASSWORD = "testpass"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    return user_crud.create_user(db, "testuser", hash_password(TEST_PASSWORD))


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_session(db, user):
    def _make(expires_in: timedelta = timedelta(days=30)):
        token = generate_session_token()
        session_service.create_session(db, token, user.id, utcnow() + expires_in)
        return token
    return _make


@pytest.fixture
def auth_client(client, make_session):
    client.cookies.set(SESSION_COOKIE_NAME, make_session())
    return client
