# src/recipe_auth/oauth_flow.py

"""
Google sign-in for the native client, via the backend's mobile auth endpoints.

    sign_in()
      INITIALIZING            backend returns the Google URL and an anti-CSRF state
      AWAITING_EXTERNAL_AUTH  state is stored, then the browser is opened
      VALIDATING_CALLBACK     callback must carry code + the stored state
      EXCHANGING_CODE         backend trades the code for an app token
      PERSISTING              token, expiry and profile are written together
      REDIRECTING             state store goes authenticated, app navigates
      IDLE

Any failure moves to ERRORED, records a message on the state store and ends
in IDLE. A cancelled browser session returns to IDLE without an error.
"""

import enum
import hmac
import logging
import typing
from urllib.parse import parse_qs, urlsplit

from . import browser
from .config import Settings, settings as default_settings
from .errors import AuthFlowError, OAuthProtocolError, StorageError
from .gateway import AuthGatewayClient
from .schemas import CompleteAuthResponse
from .session_store import SessionStore, StorageKeys
from .state import AuthStateStore

logger = logging.getLogger(__name__)


class FlowPhase(str, enum.Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    AWAITING_EXTERNAL_AUTH = "awaiting_external_auth"
    VALIDATING_CALLBACK = "validating_callback"
    EXCHANGING_CODE = "exchanging_code"
    PERSISTING = "persisting"
    REDIRECTING = "redirecting"
    ERRORED = "errored"


class FlowOutcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    ERRORED = "errored"
    REJECTED = "rejected"  # another sign-in was already running


class OAuthFlowController:
    def __init__(
            self,
            store: SessionStore,
            gateway: AuthGatewayClient,
            state: AuthStateStore,
            auth_session: browser.AuthSession,
            navigator: browser.Navigator,
            settings: typing.Optional[Settings] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.state = state
        self.auth_session = auth_session
        self.navigator = navigator
        self.settings = settings or default_settings

        self.phase = FlowPhase.IDLE
        self.phases: typing.List[FlowPhase] = []  # path taken by the latest attempt
        self.last_outcome: typing.Optional[FlowOutcome] = None
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    # --- Sign in ---

    async def sign_in(self) -> bool:
        """Run one login attempt. True only when the user ends up signed in."""
        if self._in_progress:
            logger.warning("Sign-in requested while another attempt is running; ignoring it.")
            self.last_outcome = FlowOutcome.REJECTED
            return False

        self._in_progress = True
        self.phases = []
        self._enter(FlowPhase.INITIALIZING)
        self.state.set_loading(True)
        self.state.clear_error()
        logger.info("Signing in with Google")

        try:
            response = await self.gateway.initialize(self.settings.APP_REDIRECT_URI)
            if response is None:
                raise AuthFlowError("Failed to initialize authentication")

            # Stored before the browser opens so the callback can always be checked.
            self.store.set(StorageKeys.OAUTH_STATE, response.state)

            self._enter(FlowPhase.AWAITING_EXTERNAL_AUTH)
            result = await self.auth_session.open(str(response.auth_url), self.settings.APP_REDIRECT_URI)
            return await self.handle_auth_result(result)
        except AuthFlowError as e:
            self._fail(e)
            return False
        except StorageError as e:
            self._fail(AuthFlowError(f"Could not save session: {e}"))
            return False
        except Exception as e:
            logger.exception("Unexpected error signing in with Google")
            self._fail(AuthFlowError(str(e) or "Unknown error"))
            return False
        finally:
            self._discard_handshake()
            self.state.set_loading(False)
            self._in_progress = False
            self._enter(FlowPhase.IDLE)

    async def handle_auth_result(self, result: browser.AuthSessionResult) -> bool:
        if result.type == browser.SUCCESS:
            await self.handle_oauth_callback(result.url or "")
            self.redirect_after_auth()
            self.last_outcome = FlowOutcome.SUCCEEDED
            return True

        if result.type == browser.CANCEL:
            logger.info("User cancelled OAuth flow")
            self.last_outcome = FlowOutcome.CANCELLED
            return False

        raise AuthFlowError(f"Unrecognized authentication result: {result.type}")

    async def handle_oauth_callback(self, callback_url: str) -> CompleteAuthResponse:
        self._enter(FlowPhase.VALIDATING_CALLBACK)
        code, state = self.validate_callback(callback_url)

        self._enter(FlowPhase.EXCHANGING_CODE)
        auth_result = await self.gateway.complete(
            code=code,
            state=state,
            redirect_uri=self.settings.COMPLETE_REDIRECT_URI,
        )
        if auth_result is None:
            raise AuthFlowError("Failed to complete authentication")

        self._enter(FlowPhase.PERSISTING)
        # Token and profile define "signed in", so they go first and together.
        self.store.save_session(auth_result.token, auth_result.expires_at, auth_result.user)
        self.store.delete(StorageKeys.OAUTH_STATE)
        self.store.set(StorageKeys.POST_LOGIN_REDIRECT, self.settings.POST_LOGIN_PATH)
        logger.info("Authentication completed and stored successfully")
        return auth_result

    def validate_callback(self, callback_url: str) -> typing.Tuple[str, str]:
        """
        Returns (code, state) from the callback URL once the state matches the one
        stored at initialization. The stored state is single-use: it is deleted
        here whatever the result of the comparison.
        """
        if not callback_url:
            raise OAuthProtocolError("No callback URL provided")

        params = parse_qs(urlsplit(callback_url).query)
        code = (params.get("code") or [""])[0]
        returned_state = (params.get("state") or [""])[0]

        stored_state = self.store.get(StorageKeys.OAUTH_STATE)
        self.store.delete(StorageKeys.OAUTH_STATE)

        if not code or not returned_state:
            raise OAuthProtocolError("Missing code or state in callback")
        if not stored_state or not hmac.compare_digest(returned_state.encode(), stored_state.encode()):
            raise OAuthProtocolError("Invalid OAuth state - possible CSRF attempt")
        return code, returned_state

    def redirect_after_auth(self) -> None:
        self._enter(FlowPhase.REDIRECTING)
        user = self.store.get_user_data()
        if user is None:
            raise AuthFlowError("No user data found")

        self.state.login(user)
        target = self.store.get(StorageKeys.POST_LOGIN_REDIRECT) or self.settings.POST_LOGIN_PATH
        self.store.delete(StorageKeys.POST_LOGIN_REDIRECT)
        self.navigator.navigate(target)

    # --- Sign out ---

    def sign_out(self) -> None:
        """
        Forward-only: the state store ends unauthenticated even if the stored
        session could not be removed, in which case the error is recorded.
        """
        self.state.set_loading(True)
        self.state.clear_error()
        error: typing.Optional[str] = None
        try:
            try:
                self.store.clear_all()
            except StorageError as e:
                logger.error("Error signing out: %s", e)
                error = str(e)
            self.state.logout()
            try:
                self.navigator.navigate(self.settings.SIGNED_OUT_PATH)
            except Exception as e:
                logger.exception("Error navigating after sign out")
                error = error or str(e)
            if error:
                self.state.set_error(error)
            else:
                logger.info("Successfully signed out")
        finally:
            self.state.set_loading(False)

    # --- helpers ---

    def _enter(self, phase: FlowPhase) -> None:
        self.phase = phase
        self.phases.append(phase)
        logger.debug("Sign-in phase: %s", phase.value)

    def _fail(self, error: AuthFlowError) -> None:
        self._enter(FlowPhase.ERRORED)
        if isinstance(error, OAuthProtocolError):
            logger.warning("OAuth callback rejected: %s", error)
        else:
            logger.error("Error signing in with Google: %s", error)
        self.last_outcome = FlowOutcome.ERRORED
        self.state.set_error(str(error))

    def _discard_handshake(self) -> None:
        try:
            self.store.delete(StorageKeys.OAUTH_STATE)
        except StorageError as e:
            logger.error("Could not discard OAuth state: %s", e)
