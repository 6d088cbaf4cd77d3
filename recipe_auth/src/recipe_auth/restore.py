# src/recipe_auth/restore.py

import enum
import logging
import typing
from datetime import datetime

from .errors import StorageError
from .session_store import SessionStore
from .state import AuthStateStore

logger = logging.getLogger(__name__)


class RestoreOutcome(str, enum.Enum):
    NO_SESSION = "no_session"
    EXPIRED = "expired"
    INCONSISTENT = "inconsistent"
    RESTORED = "restored"
    FAILED = "failed"


def restore_session(
        store: SessionStore,
        state: AuthStateStore,
        now: typing.Optional[datetime] = None,
) -> RestoreOutcome:
    """
    Rebuild the in-memory session from storage at startup.

    Ends either authenticated with the stored profile or unauthenticated with
    the stored session removed. Problems are logged, never put on the state
    store: an error there would keep the user away from the sign-in screen.
    """
    state.set_loading(True)
    try:
        outcome = _restore(store, state, now)
    except Exception as e:
        logger.error("Error validating stored session, clearing it: %s", e)
        _clear_quietly(store)
        state.logout()
        outcome = RestoreOutcome.FAILED
    finally:
        state.set_loading(False)

    logger.info("Session restore finished: %s", outcome.value)
    return outcome


def _restore(store: SessionStore, state: AuthStateStore, now: typing.Optional[datetime]) -> RestoreOutcome:
    token = store.get_app_token()
    if not token:
        state.logout()
        return RestoreOutcome.NO_SESSION

    if store.is_token_expired(now):
        logger.info("Stored token has expired")
        store.clear_all()
        state.logout()
        return RestoreOutcome.EXPIRED

    user = store.get_user_data()
    if user is None:
        logger.warning("Token present but user data missing or invalid; clearing session")
        store.clear_all()
        state.logout()
        return RestoreOutcome.INCONSISTENT

    state.login(user)
    return RestoreOutcome.RESTORED


def _clear_quietly(store: SessionStore) -> None:
    try:
        store.clear_all()
    except StorageError as e:
        logger.error("Could not clear stored session: %s", e)
