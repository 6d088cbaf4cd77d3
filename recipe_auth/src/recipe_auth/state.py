# src/recipe_auth/state.py

"""
In-memory session state that UI code reads and subscribes to.

Only the login flow and session restoration write to it. Each mutation swaps in
a new immutable AuthState snapshot and notifies subscribers.
"""

import logging
import typing

from pydantic import BaseModel, ConfigDict

from .schemas import UserProfile

logger = logging.getLogger(__name__)


class AuthState(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: typing.Optional[UserProfile] = None
    is_loading: bool = False
    error: typing.Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


Listener = typing.Callable[[AuthState], None]


class AuthStateStore:
    def __init__(self, initial: typing.Optional[AuthState] = None):
        self._state = initial or AuthState()
        self._listeners: typing.List[Listener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: Listener) -> typing.Callable[[], None]:
        """Register listener for every state change. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Mutators ---

    def login(self, user: UserProfile) -> None:
        self._replace(user=user, is_loading=False, error=None)

    def logout(self) -> None:
        self._replace(user=None, is_loading=False, error=None)

    def set_loading(self, is_loading: bool) -> None:
        self._replace(is_loading=is_loading)

    def set_error(self, error: str) -> None:
        self._replace(error=error)

    def clear_error(self) -> None:
        self._replace(error=None)

    def _replace(self, **changes: typing.Any) -> None:
        new_state = self._state.model_copy(update=changes)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Auth state listener %r failed", listener)
