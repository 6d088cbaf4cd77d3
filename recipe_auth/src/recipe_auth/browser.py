# src/recipe_auth/browser.py

"""
The parts of login that happen outside the client: the user's browser session
with the identity provider, and moving the app to another screen afterwards.
"""

import asyncio
import dataclasses
import logging
import socket
import typing
import webbrowser
from urllib.parse import urlsplit

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from .errors import AuthFlowError

logger = logging.getLogger(__name__)

SUCCESS = "success"
CANCEL = "cancel"
DISMISS = "dismiss"
ERROR = "error"


@dataclasses.dataclass(frozen=True)
class AuthSessionResult:
    type: str
    url: typing.Optional[str] = None


class AuthSession(typing.Protocol):
    async def open(self, auth_url: str, redirect_uri: str) -> AuthSessionResult: ...


class Navigator(typing.Protocol):
    def navigate(self, path: str) -> None: ...


class LoggingNavigator:
    """Navigator for headless clients: remembers where the app was sent."""

    def __init__(self) -> None:
        self.history: typing.List[str] = []

    @property
    def current(self) -> typing.Optional[str]:
        return self.history[-1] if self.history else None

    def navigate(self, path: str) -> None:
        logger.info("Navigating to %s", path)
        self.history.append(path)


def result_from_callback(url: str, query: typing.Mapping[str, str]) -> AuthSessionResult:
    error = query.get("error")
    if error == "access_denied":
        return AuthSessionResult(type=CANCEL)
    if error:
        return AuthSessionResult(type=ERROR, url=url)
    return AuthSessionResult(type=SUCCESS, url=url)


def build_callback_app(path: str, on_result: typing.Callable[[AuthSessionResult], None]) -> FastAPI:
    app = FastAPI(title="Random Recipe login callback", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get(path or "/")
    async def auth_callback(request: Request):
        result = result_from_callback(str(request.url), request.query_params)
        logger.debug("Login callback received, result type: %s", result.type)
        on_result(result)
        if result.type == SUCCESS:
            return PlainTextResponse("Signed in. You can close this window and return to Random Recipe.")
        return PlainTextResponse("Sign-in was not completed. You can close this window.")

    return app


class LoopbackAuthSession:
    """
    Opens the authorization URL in the system browser and waits for the backend
    to redirect it to a one-shot listener on the redirect URI's host and port.
    There is no timeout: the wait lasts until the redirect arrives.
    """

    def __init__(self, open_browser: typing.Callable[[str], bool] = webbrowser.open):
        self._open_browser = open_browser

    async def open(self, auth_url: str, redirect_uri: str) -> AuthSessionResult:
        target = urlsplit(redirect_uri)
        host = target.hostname or "127.0.0.1"
        port = target.port if target.port is not None else 80

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
        except OSError as e:
            sock.close()
            raise AuthFlowError(f"Could not listen for the login callback on {host}:{port}: {e}") from e

        result: asyncio.Future = asyncio.get_running_loop().create_future()

        def on_result(value: AuthSessionResult) -> None:
            if not result.done():
                result.set_result(value)

        app = build_callback_app(target.path, on_result)
        server = uvicorn.Server(uvicorn.Config(app, log_level="warning", lifespan="off"))
        serve_task = asyncio.create_task(server.serve(sockets=[sock]))
        try:
            while not server.started and not serve_task.done():
                await asyncio.sleep(0.05)

            logger.info("Opening browser for sign-in")
            opened = await asyncio.to_thread(self._open_browser, auth_url)
            if not opened:
                logger.error("Could not open a browser for the authorization URL")
                return AuthSessionResult(type=DISMISS)
            return await result
        finally:
            server.should_exit = True
            await serve_task
            sock.close()
