import pytest
from fastapi import HTTPException
from loguru import logger

from app.security.passwords import verify_password
from app.users import crud as user_crud
from app.users.bootstrap import bootstrap_admin


def test_bootstrap_with_credentials(db):
    user = bootstrap_admin(db, "owner", "s3cret-pass")
    assert user.username == "owner"
    assert verify_password("s3cret-pass", user.password_hash)
    assert user_crud.count_users(db) == 1


def test_bootstrap_generates_password_once(db):
    messages = []
    sink_id = logger.add(messages.append, level="WARNING")
    try:
        user = bootstrap_admin(db, None, None)
    finally:
        logger.remove(sink_id)

    assert user.username == "admin"
    password_lines = [m for m in messages if "Password: " in m]
    assert len(password_lines) == 1
    password = password_lines[0].rsplit("Password: ", 1)[1].strip()
    assert verify_password(password, user.password_hash)


def test_bootstrap_skips_when_users_exist(db, user):
    assert bootstrap_admin(db, "other", "pw") is None
    assert user_crud.count_users(db) == 1


def test_bootstrap_requires_both_values(db):
    user = bootstrap_admin(db, "owner", None)
    assert user.username == "admin"


def test_duplicate_username_is_conflict(db, user):
    with pytest.raises(HTTPException) as exc:
        user_crud.create_user(db, "testuser", "hash")
    assert exc.value.status_code == 409
