"""Shared fixtures and fakes for tests."""

from __future__ import annotations

import typing

import pytest

from recipe_auth import browser
from recipe_auth.config import Settings
from recipe_auth.errors import StorageError
from recipe_auth.oauth_flow import OAuthFlowController
from recipe_auth.schemas import CompleteAuthResponse, InitializeAuthResponse, UserProfile
from recipe_auth.session_store import SessionStore, StorageKeys
from recipe_auth.state import AuthStateStore
from recipe_auth.storage import InMemoryStorage

OAUTH_STATE = "state-123"
AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth?client_id=recipes"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeGateway:
    """Stands in for AuthGatewayClient; records the calls it receives."""

    def __init__(
            self,
            init_response: typing.Optional[InitializeAuthResponse],
            complete_response: typing.Optional[CompleteAuthResponse],
    ) -> None:
        self.init_response = init_response
        self.complete_response = complete_response
        self.init_calls: list[str] = []
        self.complete_calls: list[dict] = []

    async def initialize(self, redirect_uri: str) -> typing.Optional[InitializeAuthResponse]:
        self.init_calls.append(redirect_uri)
        return self.init_response

    async def complete(self, code: str, state: str, redirect_uri: str) -> typing.Optional[CompleteAuthResponse]:
        self.complete_calls.append({"code": code, "state": state, "redirect_uri": redirect_uri})
        return self.complete_response


class FakeAuthSession:
    """
    Plays the browser step. By default the provider redirects back with a code
    and the state the backend issued.
    """

    def __init__(
            self,
            store: SessionStore,
            result: typing.Optional[browser.AuthSessionResult] = None,
            query: str = f"code=auth-code&state={OAUTH_STATE}",
    ) -> None:
        self.store = store
        self.result = result
        self.query = query
        self.opened: list[tuple[str, str]] = []
        self.state_when_opened: typing.Optional[str] = None

    async def open(self, auth_url: str, redirect_uri: str) -> browser.AuthSessionResult:
        self.opened.append((auth_url, redirect_uri))
        self.state_when_opened = self.store.get(StorageKeys.OAUTH_STATE)
        if self.result is not None:
            return self.result
        return browser.AuthSessionResult(type=browser.SUCCESS, url=f"{redirect_uri}?{self.query}")


class BrokenStorage(InMemoryStorage):
    """In-memory storage whose multi-key writes and deletes fail."""

    def set_many(self, values: typing.Mapping[str, str]) -> None:
        raise StorageError("disk full")

    def delete_many(self, keys: typing.Iterable[str]) -> None:
        raise StorageError("storage is read-only")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return Settings(
        API_BASE_URL="https://api.recipes.test",
        APP_REDIRECT_URI="http://127.0.0.1:8765/auth",
        POST_LOGIN_PATH="/hello",
        SIGNED_OUT_PATH="/",
    )


@pytest.fixture
def user_payload() -> dict:
    return {
        "externalId": "google-oauth2|1234",
        "email": "alice@gmail.com",
        "firstName": "Alice",
        "lastName": "Baker",
    }


@pytest.fixture
def user(user_payload: dict) -> UserProfile:
    return UserProfile.model_validate(user_payload)


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(InMemoryStorage())


@pytest.fixture
def state() -> AuthStateStore:
    return AuthStateStore()


@pytest.fixture
def init_response() -> InitializeAuthResponse:
    return InitializeAuthResponse.model_validate({"authUrl": AUTH_URL, "state": OAUTH_STATE})


@pytest.fixture
def complete_response(user_payload: dict) -> CompleteAuthResponse:
    return CompleteAuthResponse.model_validate({
        "user": user_payload,
        "token": "app-token-xyz",
        "expiresAt": "2030-01-01T00:00:00Z",
    })


@pytest.fixture
def gateway(init_response: InitializeAuthResponse, complete_response: CompleteAuthResponse) -> FakeGateway:
    return FakeGateway(init_response, complete_response)


@pytest.fixture
def auth_session(store: SessionStore) -> FakeAuthSession:
    return FakeAuthSession(store)


@pytest.fixture
def navigator() -> browser.LoggingNavigator:
    return browser.LoggingNavigator()


@pytest.fixture
def controller(
        store: SessionStore,
        gateway: FakeGateway,
        state: AuthStateStore,
        auth_session: FakeAuthSession,
        navigator: browser.LoggingNavigator,
        settings: Settings,
) -> OAuthFlowController:
    return OAuthFlowController(
        store=store,
        gateway=gateway,
        state=state,
        auth_session=auth_session,
        navigator=navigator,
        settings=settings,
    )
