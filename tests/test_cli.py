"""Tests for client wiring and the command line front end."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from conftest import FakeGateway
from recipe_auth import browser, cli
from recipe_auth.app import create_auth_client
from recipe_auth.gateway import AuthGatewayClient
from recipe_auth.restore import RestoreOutcome
from recipe_auth.session_store import SessionStore
from recipe_auth.storage import InMemoryStorage


@pytest.fixture
def backend() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def client(settings, backend, gateway: FakeGateway):
    return create_auth_client(
        settings=settings,
        backend=backend,
        gateway=gateway,
        navigator=browser.LoggingNavigator(),
    )


class TestAuthClient:
    def test_start_restores_once(self, client, backend, user) -> None:
        SessionStore(backend).save_session("tok", datetime.now(timezone.utc) + timedelta(hours=1), user)

        assert client.start() == RestoreOutcome.RESTORED
        client.store.clear_all()
        assert client.start() == RestoreOutcome.RESTORED
        assert client.state.state.user == user

    def test_default_session_is_loopback(self, client) -> None:
        assert isinstance(client.flow.auth_session, browser.LoopbackAuthSession)


class TestCommands:
    def test_status_signed_out(self, client, capsys) -> None:
        client.start()

        assert cli.cmd_status(client) == 0
        assert "Not signed in." in capsys.readouterr().out

    def test_status_signed_in(self, client, backend, user, capsys) -> None:
        SessionStore(backend).save_session("tok", datetime(2099, 1, 1, tzinfo=timezone.utc), user)
        client.start()

        cli.cmd_status(client)

        out = capsys.readouterr().out
        assert "Signed in as Alice Baker <alice@gmail.com>" in out
        assert "2099-01-01" in out

    def test_logout(self, client, backend, user, capsys) -> None:
        SessionStore(backend).save_session("tok", datetime(2099, 1, 1, tzinfo=timezone.utc), user)
        client.start()

        assert cli.cmd_logout(client) == 0
        assert backend.keys() == []
        assert "Not signed in." in capsys.readouterr().out

    def test_whoami_requires_session(self, client, capsys) -> None:
        client.start()

        assert cli.cmd_whoami(client) == 1
        assert "Not signed in." in capsys.readouterr().out

    def test_whoami_sends_stored_token(self, settings, backend, user, user_payload, capsys) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=user_payload)

        client = create_auth_client(
            settings=settings,
            backend=backend,
            gateway=AuthGatewayClient(settings.API_BASE, transport=httpx.MockTransport(handler)),
            navigator=browser.LoggingNavigator(),
        )
        SessionStore(backend).save_session("tok", datetime(2099, 1, 1, tzinfo=timezone.utc), user)
        client.start()

        assert cli.cmd_whoami(client) == 0
        assert seen[0].headers["Authorization"] == "Bearer tok"
        assert "google-oauth2|1234 alice@gmail.com" in capsys.readouterr().out
