from datetime import timedelta

from fastapi import Depends, Request, Response
from loguru import logger
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.security.passwords import verify_password
from app.sessions import service as session_service
from app.users import crud as user_crud
from app.users.schemas import UserDisplaySchema
from app.utils.dates import utcnow

SESSION_COOKIE_NAME = "session_token"


class NotAuthenticatedError(Exception):
    """Raised when a request carries no usable session."""


def session_duration() -> timedelta:
    return timedelta(days=settings.SESSION_DURATION_DAYS)


def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        path="/",
        max_age=int(session_duration().total_seconds()),
        httponly=True,
        secure=settings.SECURE_COOKIE,
        samesite="lax",
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.SECURE_COOKIE,
        samesite="lax",
    )


def authenticate_user(db: Session, username: str, password: str):
    user = user_crud.get_user_by_username(db, username)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> UserDisplaySchema:
    """
    Resolve the logged-in user from the session cookie.

    Sessions in the second half of their lifetime are pushed forward by a
    full lifetime; the cookie is re-issued by the session middleware in
    app.main. A failed renewal leaves the current session in place.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise NotAuthenticatedError()

    info = session_service.validate_session_with_info(db, token)
    if info is None:
        raise NotAuthenticatedError()

    lifetime = session_duration()
    now = utcnow()
    if info.expires_at - now < lifetime / 2:
        if session_service.renew_session(db, token, now + lifetime):
            request.state.renewed_session_token = token
            logger.debug(f"Session renewed for user: {info.user.username}")

    return info.user
