# src/recipe_web/auth_utils.py

import logging
import typing

import httpx
from pydantic import ValidationError

from recipe_auth.schemas import UserProfile

from .config import settings

logger = logging.getLogger(__name__)

USER_ENDPOINT = "/api/account/user"


# --- Browser redirect targets ---
# The backend runs the Google OIDC challenge and sets its own session cookie,
# so the web client only has to send the browser there.

def build_login_url() -> str:
    return settings.LOGIN_URL


def build_logout_url() -> str:
    return settings.LOGOUT_URL


# --- Logged-in user ---

async def get_logged_in_user(client: httpx.AsyncClient, cookie_header: typing.Optional[str]) -> typing.Optional[UserProfile]:
    """
    Asks the backend who owns the browser's session cookie.
    Returns None when there is no session or the answer can't be trusted.
    """
    if not cookie_header:
        return None

    try:
        response = await client.get(USER_ENDPOINT, headers={"Cookie": cookie_header})
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.info(
            "Failed to fetch logged in user: %s %s",
            e.response.status_code, e.response.reason_phrase,
        )
        return None
    except httpx.RequestError as e:
        logger.error("Error fetching logged in user: %s", e)
        return None

    try:
        return UserProfile.model_validate(response.json())
    except ValidationError as e:
        logger.error("User validation failed: %s", e)
        return None
    except ValueError:
        logger.error("User endpoint returned a body that is not JSON")
        return None
