"""Shared test fixtures for the Sign in with Apple client."""

import pytest

from siwa.crypto.keys import generate_ec_keypair
from siwa.crypto.types import ServiceIdentity, SigningKeyData

CLIENT_ID = "com.example.app.signin"
TEAM_ID = "TEAM123456"
KEY_ID = "KEY7890ABC"


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host APPLE_AUTH_* variables out of settings tests."""
    for name in (
        "APPLE_AUTH_CLIENT_ID",
        "APPLE_AUTH_TEAM_ID",
        "APPLE_AUTH_KEY_ID",
        "APPLE_AUTH_PRIVATE_KEY",
        "APPLE_AUTH_PRIVATE_KEY_PATH",
        "APPLE_AUTH_TOKEN_URL",
        "APPLE_AUTH_AUDIENCE",
        "APPLE_AUTH_ASSERTION_TTL",
        "APPLE_AUTH_ASSERTION_REFRESH_MARGIN",
        "APPLE_AUTH_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def keypair() -> SigningKeyData:
    """A P-256 keypair shared across the session; generation is slow-ish."""
    return generate_ec_keypair()


@pytest.fixture
def identity() -> ServiceIdentity:
    """The service identity used throughout the tests."""
    return ServiceIdentity(client_id=CLIENT_ID, team_id=TEAM_ID, key_id=KEY_ID)
