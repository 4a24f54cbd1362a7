"""Client settings loaded from environment variables or a config document."""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from siwa.core.errors import InvalidArgumentError, SigningKeyError
from siwa.crypto.client_secret import (
    APPLE_AUDIENCE,
    ASSERTION_TTL_DEFAULT,
    MAX_ASSERTION_TTL,
    REFRESH_MARGIN_DEFAULT,
)
from siwa.crypto.types import ServiceIdentity

TOKEN_URL_DEFAULT = "https://appleid.apple.com/auth/token"
HTTP_TIMEOUT_DEFAULT = 10.0


class AppleAuthSettings(BaseSettings):
    """Service identity, key source, and token endpoint settings."""

    model_config = SettingsConfigDict(env_prefix="APPLE_AUTH_", extra="ignore")

    client_id: str
    team_id: str
    key_id: str
    private_key: str = ""
    private_key_path: str = ""
    token_url: str = TOKEN_URL_DEFAULT
    audience: str = APPLE_AUDIENCE
    assertion_ttl: int = ASSERTION_TTL_DEFAULT
    assertion_refresh_margin: int = REFRESH_MARGIN_DEFAULT
    http_timeout: float = HTTP_TIMEOUT_DEFAULT

    @model_validator(mode="after")
    def _check_assertion_window(self) -> "AppleAuthSettings":
        if not 0 < self.assertion_ttl <= MAX_ASSERTION_TTL:
            raise ValueError(
                f"assertion_ttl must be between 1 and {MAX_ASSERTION_TTL} seconds"
            )
        if not 0 <= self.assertion_refresh_margin < self.assertion_ttl:
            raise ValueError(
                "assertion_refresh_margin must be non-negative and below assertion_ttl"
            )
        return self

    def identity(self) -> ServiceIdentity:
        """Build the service identity the assertions are issued for."""
        try:
            return ServiceIdentity(
                client_id=self.client_id, team_id=self.team_id, key_id=self.key_id
            )
        except ValidationError as exc:
            raise InvalidArgumentError("client_id, team_id and key_id are required") from exc

    def load_private_key_pem(self) -> str:
        """Return the PEM text of the signing key, reading the key file if needed."""
        if self.private_key:
            return self.private_key
        if not self.private_key_path:
            raise SigningKeyError("Neither private_key nor private_key_path is set")
        try:
            return Path(self.private_key_path).read_text(encoding="utf-8")
        except OSError as exc:
            raise SigningKeyError(
                f"Cannot read private key file {self.private_key_path}"
            ) from exc


def load_settings(config: Mapping[str, Any] | str | bytes) -> AppleAuthSettings:
    """Build settings from a mapping or a JSON document given as text or bytes."""
    if isinstance(config, (str, bytes)):
        try:
            config = json.loads(config)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidArgumentError("Config is not valid JSON") from exc
    if not isinstance(config, Mapping):
        raise InvalidArgumentError("Config must be a JSON object")
    try:
        return AppleAuthSettings(**config)
    except ValidationError as exc:
        raise InvalidArgumentError(f"Invalid config: {exc}") from exc
