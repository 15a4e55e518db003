from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.security.passwords import generate_session_token
from app.sessions import service as session_service
from app.templating import render
from app.users.auth import (
    SESSION_COOKIE_NAME,
    authenticate_user,
    clear_session_cookie,
    session_duration,
    set_session_cookie,
)
from app.users.schemas import LoginSchema
from app.utils.dates import utcnow

router = APIRouter()


@router.get("/login")
def login_form(request: Request, db: Session = Depends(get_db)):
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token and session_service.validate_session(db, token):
        return RedirectResponse(url="/expenses", status_code=status.HTTP_302_FOUND)
    return render(request, "login.html", {"error": None})


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    form = LoginSchema(username=username, password=password)

    if not form.username or not form.password:
        return render(
            request, "login.html",
            {"error": "Username and password are required", "username": form.username},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    user = authenticate_user(db, form.username, form.password)
    if not user:
        logger.warning(f"Authentication denied for username: {form.username}")
        return render(
            request, "login.html",
            {"error": "Invalid username or password", "username": form.username},
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    token = generate_session_token()
    session_service.create_session(db, token, user.id, utcnow() + session_duration())
    logger.info(f"User authenticated: {user.username}")

    response = RedirectResponse(url="/expenses", status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, token)
    return response


@router.get("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        try:
            session_service.delete_session(db, token)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to delete session")

    response = RedirectResponse(url="/login", status_code=status.HTTP_302_FOUND)
    clear_session_cookie(response)
    return response
