# src/recipe_auth/config.py

import logging
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# .env is at the client root, two levels up from src/recipe_auth/
CONFIG_FILE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT_DIR = CONFIG_FILE_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT_DIR / ".env"

if ENV_FILE_PATH.exists():
    load_dotenv(dotenv_path=ENV_FILE_PATH, override=True)
    logger.debug("Loaded .env file from: %s", ENV_FILE_PATH)
else:
    logger.debug(".env file not found at %s. Relying on environment variables.", ENV_FILE_PATH)


class Settings(BaseSettings):
    # === Random Recipe backend ===
    API_BASE_URL: AnyHttpUrl = "https://localhost:7087"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # === OAuth handshake ===
    # Where the external browser step sends the user back with ?code=...&state=...
    APP_REDIRECT_URI: str = "http://127.0.0.1:8765/auth"

    # === Session persistence ===
    STORAGE_PATH: Path = Path.home() / ".random-recipe" / "session.json"

    # === Navigation targets ===
    POST_LOGIN_PATH: str = "/hello"
    SIGNED_OUT_PATH: str = "/"

    LOG_LEVEL: str = "INFO"

    @property
    def API_BASE(self) -> str:
        return str(self.API_BASE_URL).rstrip("/")

    @property
    def COMPLETE_REDIRECT_URI(self) -> str:
        # Redirect URI the backend registered with Google; echoed back on code exchange.
        return f"{self.API_BASE}/api/account/mobile-auth-callback"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    @field_validator("POST_LOGIN_PATH", "SIGNED_OUT_PATH")
    @classmethod
    def must_be_app_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"Navigation path must start with '/': {v!r}")
        return v


try:
    settings = Settings()
    logger.debug("API base: %s", settings.API_BASE)
    logger.debug("App redirect URI: %s", settings.APP_REDIRECT_URI)
except Exception:
    logger.exception("Error instantiating recipe_auth Settings")
    raise
