# src/recipe_auth/app.py

"""Wiring of the auth subsystem for one client process."""

import dataclasses
import logging
import typing

from . import browser
from .config import Settings, settings as default_settings
from .gateway import AuthGatewayClient
from .oauth_flow import OAuthFlowController
from .restore import RestoreOutcome, restore_session
from .session_store import SessionStore
from .state import AuthStateStore
from .storage import FileStorage, StorageBackend

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class AuthClient:
    settings: Settings
    store: SessionStore
    state: AuthStateStore
    gateway: AuthGatewayClient
    flow: OAuthFlowController
    restored: typing.Optional[RestoreOutcome] = None

    def start(self) -> RestoreOutcome:
        """Restore any stored session. Runs once; later calls return the first outcome."""
        if self.restored is None:
            self.restored = restore_session(self.store, self.state)
        return self.restored


def create_auth_client(
        settings: typing.Optional[Settings] = None,
        backend: typing.Optional[StorageBackend] = None,
        gateway: typing.Optional[AuthGatewayClient] = None,
        auth_session: typing.Optional[browser.AuthSession] = None,
        navigator: typing.Optional[browser.Navigator] = None,
) -> AuthClient:
    settings = settings or default_settings
    store = SessionStore(backend if backend is not None else FileStorage(settings.STORAGE_PATH))
    state = AuthStateStore()
    gateway = gateway or AuthGatewayClient(settings.API_BASE, timeout=settings.HTTP_TIMEOUT_SECONDS)
    flow = OAuthFlowController(
        store=store,
        gateway=gateway,
        state=state,
        auth_session=auth_session or browser.LoopbackAuthSession(),
        navigator=navigator or browser.LoggingNavigator(),
        settings=settings,
    )
    logger.debug("Auth client created (storage: %s)", type(store.backend).__name__)
    return AuthClient(settings=settings, store=store, state=state, gateway=gateway, flow=flow)
