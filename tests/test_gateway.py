"""Tests for the backend auth endpoints client."""

from __future__ import annotations

import asyncio
import json
import typing
from datetime import datetime, timezone

import httpx

from recipe_auth.gateway import AuthGatewayClient

BASE = "https://api.recipes.test"


def _gateway(handler: typing.Callable[[httpx.Request], httpx.Response]) -> AuthGatewayClient:
    return AuthGatewayClient(BASE + "/", transport=httpx.MockTransport(handler))


class TestInitialize:
    def test_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"authUrl": "https://accounts.google.com/auth?x=1", "state": "s-1"})

        result = asyncio.run(_gateway(handler).initialize("http://127.0.0.1:8765/auth"))

        assert result is not None
        assert result.state == "s-1"
        assert str(result.auth_url) == "https://accounts.google.com/auth?x=1"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == f"{BASE}/api/account/mobile-auth-init"
        assert json.loads(seen[0].content) == {"redirectUri": "http://127.0.0.1:8765/auth"}

    def test_error_status(self) -> None:
        result = asyncio.run(_gateway(lambda r: httpx.Response(500)).initialize("x"))
        assert result is None

    def test_invalid_auth_url(self) -> None:
        handler = lambda r: httpx.Response(200, json={"authUrl": "not a url", "state": "s"})  # noqa: E731
        assert asyncio.run(_gateway(handler).initialize("x")) is None

    def test_missing_state(self) -> None:
        handler = lambda r: httpx.Response(200, json={"authUrl": "https://accounts.google.com/"})  # noqa: E731
        assert asyncio.run(_gateway(handler).initialize("x")) is None

    def test_body_not_json(self) -> None:
        handler = lambda r: httpx.Response(200, text="<html>oops</html>")  # noqa: E731
        assert asyncio.run(_gateway(handler).initialize("x")) is None

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        assert asyncio.run(_gateway(handler).initialize("x")) is None


class TestComplete:
    def test_success(self, user_payload: dict) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={"user": user_payload, "token": "app-token", "expiresAt": "2030-01-01T00:00:00Z"},
            )

        result = asyncio.run(_gateway(handler).complete("code-1", "s-1", "https://cb"))

        assert result is not None
        assert result.token == "app-token"
        assert result.expires_at == datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert result.user.to_payload() == user_payload
        assert seen == [{"code": "code-1", "state": "s-1", "redirectUri": "https://cb"}]

    def test_backend_user_field_name(self) -> None:
        handler = lambda r: httpx.Response(200, json={  # noqa: E731
            "user": {"googleUserId": "g-9", "email": "erin@gmail.com"},
            "token": "t",
            "expiresAt": "2030-01-01T00:00:00Z",
        })

        result = asyncio.run(_gateway(handler).complete("c", "s", "r"))

        assert result is not None
        assert result.user.external_id == "g-9"

    def test_naive_expiry_rejected(self, user_payload: dict) -> None:
        handler = lambda r: httpx.Response(  # noqa: E731
            200, json={"user": user_payload, "token": "t", "expiresAt": "2030-01-01T00:00:00"},
        )
        assert asyncio.run(_gateway(handler).complete("c", "s", "r")) is None

    def test_invalid_user(self) -> None:
        handler = lambda r: httpx.Response(  # noqa: E731
            200, json={"user": {"externalId": "g"}, "token": "t", "expiresAt": "2030-01-01T00:00:00Z"},
        )
        assert asyncio.run(_gateway(handler).complete("c", "s", "r")) is None

    def test_unauthorized(self) -> None:
        assert asyncio.run(_gateway(lambda r: httpx.Response(401)).complete("c", "s", "r")) is None


class TestCurrentUser:
    def test_sends_bearer_token(self, user_payload: dict) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=user_payload)

        result = asyncio.run(_gateway(handler).get_current_user({"Authorization": "Bearer tok"}))

        assert result is not None
        assert result.email == "alice@gmail.com"
        assert seen[0].method == "GET"
        assert seen[0].headers["Authorization"] == "Bearer tok"
        assert seen[0].url.path == "/api/account/user"
