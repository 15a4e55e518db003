from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.security.passwords import generate_random_password, hash_password
from app.users import crud as user_crud

DEFAULT_ADMIN_USERNAME = "admin"


def bootstrap_admin(
    db: Session,
    username: Optional[str] = None,
    password: Optional[str] = None,
):
    """
    Create the first account when the users table is empty.

    Without both credentials an ``admin`` account is created with a random
    password, which is logged once. Returns the created user or None.
    """
    if user_crud.count_users(db) > 0:
        return None

    if not username or not password:
        username = DEFAULT_ADMIN_USERNAME
        password = generate_random_password()
        logger.warning("=======================================================")
        logger.warning("Creating default admin user with random password")
        logger.warning(f"Password: {password}")
        logger.warning("=======================================================")

    user = user_crud.create_user(db, username.strip(), hash_password(password))
    logger.info(f"Created admin user: {user.username}")
    return user
