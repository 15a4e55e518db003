import asyncio
import os
import sys
from contextlib import asynccontextmanager, suppress

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import FileResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import Base, SessionLocal, engine
from app.categories.service import load_catalog
from app.expenses import models as expense_models  # noqa: F401
from app.expenses.router import router as expenses_router
from app.sessions import models as session_models  # noqa: F401
from app.sessions import service as session_service
from app.statistics.router import router as statistics_router
from app.templating import is_htmx
from app.users import models as user_models  # noqa: F401
from app.users.auth import NotAuthenticatedError, clear_session_cookie, set_session_cookie
from app.users.bootstrap import bootstrap_admin
from app.users.routers import router as user_router

if settings.LOG_FILE:
    logger.add(settings.LOG_FILE, rotation=settings.LOG_ROTATION, level=settings.LOG_LEVEL)


def sweep_expired_sessions():
    db = SessionLocal()
    try:
        removed = session_service.clean_expired_sessions(db)
        if removed:
            logger.info(f"Removed {removed} expired session(s)")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Expired session sweep failed")
    finally:
        db.close()


def bootstrap_accounts():
    db = SessionLocal()
    try:
        bootstrap_admin(db, settings.ADMIN_USER, settings.ADMIN_PASSWORD)
    finally:
        db.close()


async def session_sweeper(interval_seconds: float):
    while True:
        await asyncio.sleep(interval_seconds)
        await asyncio.to_thread(sweep_expired_sessions)


# Database startup
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup")
    await asyncio.to_thread(Base.metadata.create_all, bind=engine)
    await asyncio.to_thread(bootstrap_accounts)
    await asyncio.to_thread(sweep_expired_sessions)

    sweeper = None
    if settings.SESSION_SWEEP_INTERVAL_SECONDS > 0:
        sweeper = asyncio.create_task(session_sweeper(settings.SESSION_SWEEP_INTERVAL_SECONDS))

    yield

    if sweeper:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
    logger.info("Application shutdown")


# Create app
app = FastAPI(
    title="EXPENSE TRACKER",
    description="Personal expense tracking with monthly and yearly statistics.",
    version="1.0.0",
    lifespan=lifespan
)

app.state.categories = load_catalog(settings.CATEGORY_CATALOG_PATH)


@app.middleware("http")
async def reissue_renewed_session_cookie(request: Request, call_next):
    response = await call_next(request)
    token = getattr(request.state, "renewed_session_token", None)
    if token:
        set_session_cookie(response, token)
    return response


@app.exception_handler(NotAuthenticatedError)
async def redirect_to_login(request: Request, exc: NotAuthenticatedError):
    response = RedirectResponse(url="/login", status_code=status.HTTP_302_FOUND)
    if is_htmx(request):
        response.headers["HX-Redirect"] = "/login"
    clear_session_cookie(response)
    return response


static_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")
if os.path.isdir(static_dir):
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
else:
    logger.warning(f"Static directory not found: {static_dir}, skipping static mount")


# Routers
app.include_router(user_router, tags=["Auth"])
app.include_router(expenses_router, prefix="/expenses", tags=["Expenses"])
app.include_router(statistics_router, prefix="/statistics", tags=["Statistics"])


@app.get("/")
def index():
    return RedirectResponse(url="/expenses", status_code=status.HTTP_302_FOUND)


@app.get("/sw.js", include_in_schema=False)
def service_worker():
    # served from the root so the worker may control every page
    return FileResponse(os.path.join(static_dir, "sw.js"), media_type="application/javascript")


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
    uvicorn.run("app.main:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT)
