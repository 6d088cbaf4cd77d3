# src/recipe_auth/session_store.py

import json
import logging
import typing
from datetime import datetime, timezone

from pydantic import ValidationError

from .errors import StorageError
from .schemas import UserProfile
from .storage import StorageBackend

logger = logging.getLogger(__name__)


class StorageKeys:
    APP_TOKEN = "app_auth_token"
    TOKEN_EXPIRY = "token_expiry"
    USER_DATA = "user_data"
    OAUTH_STATE = "oauth_state"
    POST_LOGIN_REDIRECT = "post_login_redirect"

    # What clear_all() removes. Handshake keys are owned by the login flow.
    SESSION = (APP_TOKEN, TOKEN_EXPIRY, USER_DATA)


class SessionStore:
    """
    Durable session record (token, expiry, user profile) plus the transient
    OAuth handshake values, on top of a StorageBackend.

    Backend failures surface as StorageError. Malformed stored profiles are not
    errors: they are deleted and reported as absent.
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    # --- Raw key access ---

    def get(self, key: str) -> typing.Optional[str]:
        return self.backend.get(key)

    def set(self, key: str, value: str) -> None:
        self.backend.set(key, value)

    def delete(self, key: str) -> None:
        self.backend.delete(key)

    # --- Token ---

    def set_app_token(self, token: str, expires_at: typing.Optional[datetime] = None) -> None:
        values = {StorageKeys.APP_TOKEN: token}
        if expires_at is not None:
            values[StorageKeys.TOKEN_EXPIRY] = expires_at.isoformat()
        self.backend.set_many(values)

    def get_app_token(self) -> typing.Optional[str]:
        return self.backend.get(StorageKeys.APP_TOKEN)

    def get_token_expiry(self) -> typing.Optional[datetime]:
        raw = self.backend.get(StorageKeys.TOKEN_EXPIRY)
        if not raw:
            return None
        expiry = datetime.fromisoformat(raw)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return expiry

    def is_token_expired(self, now: typing.Optional[datetime] = None) -> bool:
        """A token without a recorded expiry never expires locally; an unreadable expiry counts as expired."""
        try:
            expiry = self.get_token_expiry()
        except ValueError:
            logger.warning("Stored token expiry is unreadable; treating token as expired.")
            return True
        if expiry is None:
            return False
        now = now or datetime.now(timezone.utc)
        return expiry <= now

    # --- User profile ---

    def set_user_data(self, user: typing.Union[UserProfile, dict]) -> None:
        self.backend.set(StorageKeys.USER_DATA, self._serialize_user(user))

    def get_user_data(self) -> typing.Optional[UserProfile]:
        raw = self.backend.get(StorageKeys.USER_DATA)
        if not raw:
            return None
        try:
            return UserProfile.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error("Stored user data failed validation, deleting it: %s", e)
            self.backend.delete(StorageKeys.USER_DATA)
            return None

    # --- Whole session ---

    def save_session(self, token: str, expires_at: datetime, user: typing.Union[UserProfile, dict]) -> None:
        """Token, expiry and profile in a single backend write: all of them or none."""
        self.backend.set_many({
            StorageKeys.APP_TOKEN: token,
            StorageKeys.TOKEN_EXPIRY: expires_at.isoformat(),
            StorageKeys.USER_DATA: self._serialize_user(user),
        })

    def clear_all(self) -> None:
        self.backend.delete_many(StorageKeys.SESSION)

    @staticmethod
    def _serialize_user(user: typing.Union[UserProfile, dict]) -> str:
        try:
            profile = user if isinstance(user, UserProfile) else UserProfile.model_validate(user)
        except ValidationError as e:
            raise StorageError(f"Refusing to store invalid user data: {e}") from e
        return json.dumps(profile.to_payload())
