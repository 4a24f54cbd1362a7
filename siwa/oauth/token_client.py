"""Token endpoint client for the authorization-code and refresh-token grants."""

import logging
from typing import Any

import httpx

from siwa.core.errors import DecodeError, ProviderError
from siwa.core.settings import HTTP_TIMEOUT_DEFAULT, TOKEN_URL_DEFAULT, AppleAuthSettings
from siwa.crypto.client_secret import ClientAssertionGenerator
from siwa.oauth.types import AuthorizationCodeGrant, RefreshTokenGrant, TokenResponse

logger = logging.getLogger(__name__)

Grant = AuthorizationCodeGrant | RefreshTokenGrant


class TokenClient:
    """Exchanges grants at the token endpoint, authenticating with a client assertion.

    Each call makes exactly one POST. Nothing is retried; retry policy belongs
    to the caller. When ``http_client`` is given it is used as-is and never
    closed here; its own timeout applies unless ``timeout`` is passed. Otherwise
    a short-lived client is opened per request with ``timeout`` or the default.
    """

    def __init__(
        self,
        generator: ClientAssertionGenerator,
        *,
        token_url: str = TOKEN_URL_DEFAULT,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._generator = generator
        self._token_url = token_url
        self._timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls,
        settings: AppleAuthSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> "TokenClient":
        """Wire a generator and client from settings."""
        generator = ClientAssertionGenerator(
            settings.identity(),
            settings.load_private_key_pem(),
            lifetime=settings.assertion_ttl,
            refresh_margin=settings.assertion_refresh_margin,
            audience=settings.audience,
        )
        return cls(
            generator,
            token_url=settings.token_url,
            timeout=settings.http_timeout,
            http_client=http_client,
        )

    @property
    def generator(self) -> ClientAssertionGenerator:
        return self._generator

    async def exchange_authorization_code(
        self, code: str, *, redirect_uri: str | None = None
    ) -> TokenResponse:
        """Trade an authorization code for access, refresh, and id tokens."""
        grant = AuthorizationCodeGrant.build(code, redirect_uri=redirect_uri)
        return await self._request(grant)

    async def exchange_refresh_token(self, refresh_token: str) -> TokenResponse:
        """Trade a refresh token for a new access token."""
        grant = RefreshTokenGrant.build(refresh_token)
        return await self._request(grant)

    async def _request(self, grant: Grant) -> TokenResponse:
        assertion = self._generator.current()
        form = grant.to_form(self._generator.identity.client_id, assertion.token)

        logger.debug("POST %s grant_type=%s", self._token_url, grant.grant_type)
        try:
            response = await self._post(form)
        except httpx.HTTPError as exc:
            logger.warning(
                "Token request failed grant_type=%s: %s",
                grant.grant_type,
                type(exc).__name__,
            )
            raise ProviderError(
                f"Token request to {self._token_url} failed: {type(exc).__name__}"
            ) from exc

        if not response.is_success:
            raise _provider_error(response, grant.grant_type)
        return _decode(response, grant.grant_type)

    async def _post(self, form: dict[str, str]) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self._http_client is not None:
            if self._timeout is None:
                return await self._http_client.post(
                    self._token_url, data=form, headers=headers
                )
            return await self._http_client.post(
                self._token_url, data=form, headers=headers, timeout=self._timeout
            )
        timeout = HTTP_TIMEOUT_DEFAULT if self._timeout is None else self._timeout
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(self._token_url, data=form, headers=headers)


def _oauth_error(payload: Any) -> str | None:
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return None


def _provider_error(response: httpx.Response, grant_type: str) -> ProviderError:
    try:
        error = _oauth_error(response.json())
    except ValueError:
        error = None
    logger.warning(
        "Token endpoint returned %d grant_type=%s error=%s",
        response.status_code,
        grant_type,
        error,
    )
    return ProviderError(
        f"Token endpoint returned HTTP {response.status_code}"
        + (f" ({error})" if error else ""),
        status_code=response.status_code,
        body=response.text,
        error=error,
    )


def _decode(response: httpx.Response, grant_type: str) -> TokenResponse:
    try:
        payload = response.json()
    except ValueError as exc:
        logger.warning(
            "Token endpoint returned non-JSON body grant_type=%s status=%d",
            grant_type,
            response.status_code,
        )
        raise DecodeError(
            "Token endpoint response is not valid JSON",
            status_code=response.status_code,
            body=response.text,
        ) from exc
    if not isinstance(payload, dict):
        logger.warning(
            "Token endpoint returned non-object JSON grant_type=%s status=%d",
            grant_type,
            response.status_code,
        )
        raise DecodeError(
            "Token endpoint response is not a JSON object",
            status_code=response.status_code,
            body=response.text,
        )
    return TokenResponse.model_validate(payload)
