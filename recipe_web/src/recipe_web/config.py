# src/recipe_web/config.py

import logging
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# .env is at the project root, two levels up from src/recipe_web/
CONFIG_FILE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT_DIR = CONFIG_FILE_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT_DIR / ".env"

if ENV_FILE_PATH.exists():
    load_dotenv(dotenv_path=ENV_FILE_PATH, override=True)
    logger.debug("RecipeWeb: loaded .env file from: %s", ENV_FILE_PATH)
else:
    logger.debug("RecipeWeb: .env file not found at %s. Relying on environment variables.", ENV_FILE_PATH)


class Settings(BaseSettings):
    # === Random Recipe backend (owns the Google login and the cookie session) ===
    API_BASE_URL: AnyHttpUrl = "https://localhost:7087"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # === This service ===
    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 3000

    LOG_LEVEL: str = "INFO"

    @property
    def API_BASE(self) -> str:
        return str(self.API_BASE_URL).rstrip("/")

    @property
    def LOGIN_URL(self) -> str:
        return f"{self.API_BASE}/api/account/login-google"

    @property
    def LOGOUT_URL(self) -> str:
        return f"{self.API_BASE}/api/account/logout"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )


try:
    settings = Settings()
    logger.debug("RecipeWeb: backend login URL: %s", settings.LOGIN_URL)
except Exception:
    logger.exception("RecipeWeb: error instantiating Settings")
    raise
