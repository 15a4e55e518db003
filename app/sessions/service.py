from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.sessions.models import UserSession
from app.sessions.schemas import SessionInfo
from app.utils.dates import utcnow


# =========================
# Create
# =========================
def create_session(db: Session, token: str, user_id: int, expires_at: datetime):
    session_row = UserSession(
        token=token,
        user_id=user_id,
        expires_at=expires_at,
        last_activity=utcnow(),
    )
    db.add(session_row)
    db.commit()
    return session_row


# =========================
# Validate
# =========================
def validate_session_with_info(db: Session, token: str) -> Optional[SessionInfo]:
    """
    Returns the session's user and timestamps, or None.
    Missing, expired and forged tokens all come back as None.
    """
    if not token:
        return None

    session_row = (
        db.query(UserSession)
        .options(joinedload(UserSession.user))
        .filter(
            UserSession.token == token,
            UserSession.expires_at > utcnow()
        )
        .first()
    )

    if not session_row:
        return None

    return SessionInfo.model_validate(session_row)


def validate_session(db: Session, token: str):
    info = validate_session_with_info(db, token)
    return info.user if info else None


# =========================
# Renew
# =========================
def renew_session(db: Session, token: str, new_expires_at: datetime) -> bool:
    try:
        db.query(UserSession).filter(UserSession.token == token).update(
            {
                UserSession.last_activity: utcnow(),
                UserSession.expires_at: new_expires_at,
            },
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to renew session")
        return False
    return True


# =========================
# Delete
# =========================
def delete_session(db: Session, token: str):
    db.query(UserSession).filter(UserSession.token == token).delete(
        synchronize_session=False
    )
    db.commit()


def clean_expired_sessions(db: Session) -> int:
    removed = (
        db.query(UserSession)
        .filter(UserSession.expires_at <= utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()
    return removed
