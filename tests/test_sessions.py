from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from app.security.passwords import generate_session_token
from app.sessions import service as session_service
from app.sessions.models import UserSession
from app.utils.dates import utcnow


def test_create_and_validate_session(db, user):
    token = generate_session_token()
    session_service.create_session(db, token, user.id, utcnow() + timedelta(days=30))

    info = session_service.validate_session_with_info(db, token)
    assert info is not None
    assert info.user.id == user.id
    assert info.user.username == "testuser"
    assert utcnow() - info.last_activity < timedelta(seconds=5)


def test_validate_session_returns_user(db, user, make_session):
    token = make_session()
    assert session_service.validate_session(db, token).username == "testuser"


def test_expired_session_is_treated_as_missing(db, make_session):
    token = make_session(expires_in=timedelta(seconds=-1))
    assert session_service.validate_session_with_info(db, token) is None
    assert session_service.validate_session_with_info(db, "no-such-token") is None
    assert session_service.validate_session_with_info(db, "") is None


def test_renew_session_moves_expiry_and_activity(db, make_session):
    token = make_session(expires_in=timedelta(days=1))
    before = session_service.validate_session_with_info(db, token)

    assert session_service.renew_session(db, token, utcnow() + timedelta(days=60))

    after = session_service.validate_session_with_info(db, token)
    assert after.expires_at > before.expires_at
    assert after.last_activity >= before.last_activity


def test_delete_session_is_idempotent(db, make_session):
    token = make_session()
    session_service.delete_session(db, token)
    assert session_service.validate_session(db, token) is None

    # second delete of the same token is not an error
    session_service.delete_session(db, token)


def test_clean_expired_sessions_keeps_live_ones(db, make_session):
    live = make_session()
    make_session(expires_in=timedelta(hours=-1))
    make_session(expires_in=timedelta(days=-3))

    assert session_service.clean_expired_sessions(db) == 2
    assert db.query(UserSession).count() == 1
    assert session_service.validate_session(db, live) is not None


def test_multiple_sessions_per_user(db, make_session):
    first = make_session()
    second = make_session()
    assert first != second
    assert session_service.validate_session(db, first) is not None
    assert session_service.validate_session(db, second) is not None


def test_renew_session_failure_leaves_row_unchanged(db, make_session, monkeypatch):
    token = make_session(expires_in=timedelta(days=1))
    before = session_service.validate_session_with_info(db, token)

    def failing_commit():
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(db, "commit", failing_commit)
    assert session_service.renew_session(db, token, utcnow() + timedelta(days=60)) is False
    monkeypatch.undo()

    after = session_service.validate_session_with_info(db, token)
    assert after.expires_at == before.expires_at
    assert after.last_activity == before.last_activity
