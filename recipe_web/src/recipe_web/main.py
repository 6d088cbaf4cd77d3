# src/recipe_web/main.py

import contextlib
import logging
import typing

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from recipe_auth.observability import setup_logging
from recipe_auth.schemas import UserProfile

from . import auth_utils
from .config import settings

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    logger.info("--- RecipeWeb (FastAPI) starting up ---")
    logger.info("Backend API base: %s", settings.API_BASE)
    logger.info("Login URL: %s", settings.LOGIN_URL)
    yield


app = FastAPI(
    title="Random Recipe Web BFF",
    description="Browser-facing entry point: sends users to the backend's Google login and reports who is signed in.",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Dependencies ---

async def get_backend_client() -> typing.AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(base_url=settings.API_BASE, timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        yield client


async def get_optional_user(
        request: Request,
        client: httpx.AsyncClient = Depends(get_backend_client),
) -> typing.Optional[UserProfile]:
    return await auth_utils.get_logged_in_user(client, request.headers.get("cookie"))


async def get_authenticated_user(
        user: typing.Optional[UserProfile] = Depends(get_optional_user),
) -> UserProfile:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


# --- Authentication routes ---

@app.get("/login")
async def login():
    login_url = auth_utils.build_login_url()
    logger.info("/login - redirecting to backend Google login")
    return RedirectResponse(url=login_url, status_code=status.HTTP_302_FOUND)


@app.get("/logout")
async def logout():
    logout_url = auth_utils.build_logout_url()
    logger.info("/logout - redirecting to backend logout")
    return RedirectResponse(url=logout_url, status_code=status.HTTP_302_FOUND)


# --- BFF API endpoints ---

@app.get("/api/bff/userinfo")
async def get_user_info(user: UserProfile = Depends(get_authenticated_user)):
    return {"user": user.to_payload()}


@app.get("/")
async def read_root(user: typing.Optional[UserProfile] = Depends(get_optional_user)):
    return {
        "user": user.to_payload() if user else None,
        "isAuthenticated": user is not None,
    }


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.WEB_HOST, port=settings.WEB_PORT)
