"""Type definitions for token endpoint requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict

from siwa.core.errors import InvalidArgumentError


def _require(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} must be a non-empty string")
    return value


class AuthorizationCodeGrant(BaseModel):
    """grant_type=authorization_code: trade an authorization code for tokens."""

    grant_type: str = "authorization_code"
    code: str
    redirect_uri: str | None = None

    @classmethod
    def build(cls, code: object, redirect_uri: str | None = None) -> "AuthorizationCodeGrant":
        return cls(code=_require(code, "code"), redirect_uri=redirect_uri)

    def to_form(self, client_id: str, client_secret: str) -> dict[str, str]:
        form = {
            "grant_type": self.grant_type,
            "code": self.code,
            "client_id": client_id,
            "client_secret": client_secret,
        }
        if self.redirect_uri:
            form["redirect_uri"] = self.redirect_uri
        return form


class RefreshTokenGrant(BaseModel):
    """grant_type=refresh_token: trade a refresh token for a new access token."""

    grant_type: str = "refresh_token"
    refresh_token: str

    @classmethod
    def build(cls, refresh_token: object) -> "RefreshTokenGrant":
        return cls(refresh_token=_require(refresh_token, "refresh_token"))

    def to_form(self, client_id: str, client_secret: str) -> dict[str, str]:
        return {
            "grant_type": self.grant_type,
            "refresh_token": self.refresh_token,
            "client_id": client_id,
            "client_secret": client_secret,
        }


class TokenResponse(BaseModel):
    """Token endpoint response, passed through as the provider sent it."""

    model_config = ConfigDict(extra="allow")

    access_token: Any = None
    token_type: Any = None
    expires_in: Any = None
    refresh_token: Any = None
    id_token: Any = None

    def as_dict(self) -> dict[str, Any]:
        """The decoded JSON object, without fields the provider did not send."""
        return self.model_dump(exclude_unset=True)
