import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Find .env even in frozen or packaged mode
POSSIBLE_ENV_PATHS = [
    Path(__file__).resolve().parent.parent / ".env",        # normal
    Path(sys.executable).resolve().parent / ".env",         # frozen exe
    Path.cwd() / ".env",                                    # runtime cwd
]

for env_path in POSSIBLE_ENV_PATHS:
    if env_path.exists():
        load_dotenv(env_path, override=False)
        break


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./expenses.db"

    # Sessions
    SESSION_DURATION_DAYS: int = 30
    SESSION_SWEEP_INTERVAL_SECONDS: int = 3600
    SECURE_COOKIE: bool = False
    BCRYPT_ROUNDS: int = 12

    # Bootstrap admin (both or neither)
    ADMIN_USER: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    # Presentation
    PAGE_SIZE: int = 50
    TIMEZONE: str = "UTC"
    CATEGORY_CATALOG_PATH: Optional[str] = None

    # Logging
    LOG_FILE: str = "app.log"
    LOG_LEVEL: str = "INFO"
    LOG_ROTATION: str = "500 MB"

    # Server
    SERVER_HOST: str = "127.0.0.1"
    SERVER_PORT: int = 8080

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
