# src/recipe_auth/gateway.py

import logging
import typing

import httpx
from pydantic import BaseModel, ValidationError

from .schemas import CompleteAuthRequest, CompleteAuthResponse, InitializeAuthResponse, UserProfile

logger = logging.getLogger(__name__)

ModelT = typing.TypeVar("ModelT", bound=BaseModel)

INIT_ENDPOINT = "/api/account/mobile-auth-init"
COMPLETE_ENDPOINT = "/api/account/mobile-auth-complete"
USER_ENDPOINT = "/api/account/user"


class AuthGatewayClient:
    """
    Stateless calls to the backend's mobile auth endpoints.

    Every failure (transport error, non-2xx status, body that is not the expected
    shape) is logged and collapsed to None. Nothing is retried here.
    """

    def __init__(
            self,
            base_url: str,
            timeout: float = 10.0,
            transport: typing.Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def initialize(self, redirect_uri: str) -> typing.Optional[InitializeAuthResponse]:
        return await self._request(
            "POST", INIT_ENDPOINT, InitializeAuthResponse,
            context="auth initialization",
            json={"redirectUri": redirect_uri},
        )

    async def complete(self, code: str, state: str, redirect_uri: str) -> typing.Optional[CompleteAuthResponse]:
        body = CompleteAuthRequest(code=code, state=state, redirect_uri=redirect_uri)
        return await self._request(
            "POST", COMPLETE_ENDPOINT, CompleteAuthResponse,
            context="auth completion",
            json=body.model_dump(by_alias=True),
        )

    async def get_current_user(self, auth_headers: typing.Mapping[str, str]) -> typing.Optional[UserProfile]:
        return await self._request(
            "GET", USER_ENDPOINT, UserProfile,
            context="logged in user",
            headers=dict(auth_headers),
        )

    async def _request(
            self,
            method: str,
            endpoint: str,
            model: typing.Type[ModelT],
            context: str,
            **kwargs: typing.Any,
    ) -> typing.Optional[ModelT]:
        async with self._client() as client:
            try:
                response = await client.request(method, endpoint, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    "Request for %s failed: %s %s",
                    context, e.response.status_code, e.response.reason_phrase,
                )
                return None
            except httpx.HTTPError as e:
                logger.error("Error requesting %s from %s: %s", context, endpoint, e)
                return None

        try:
            return model.model_validate(response.json())
        except ValueError as e:
            # ValidationError is a ValueError, as is a JSON decode failure.
            logger.error(
                "Invalid %s payload (status %s): %s",
                context, response.status_code, e if isinstance(e, ValidationError) else "body is not JSON",
            )
            return None
