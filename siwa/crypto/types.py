"""Type definitions for service identity, signing keys, and client assertions."""

from pydantic import BaseModel, ConfigDict, Field


class ServiceIdentity(BaseModel):
    """The registered Services ID, team, and key that a client assertion speaks for.

    Constructing one directly with an empty field raises pydantic's
    ``ValidationError``; ``AppleAuthSettings.identity()`` reports the same
    failure as ``InvalidArgumentError``.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    team_id: str = Field(min_length=1)
    key_id: str = Field(min_length=1)


class SigningKeyData(BaseModel):
    """A P-256 keypair in PEM form."""

    private_key_pem: str
    public_key_pem: str


class AssertionClaims(BaseModel):
    """Payload of a client assertion JWT."""

    iss: str
    iat: int
    exp: int
    aud: str
    sub: str


class ClientAssertion(BaseModel):
    """A signed client assertion and its validity window (epoch seconds)."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(repr=False)
    issued_at: int
    expires_at: int

    def expires_within(self, now: float, margin: int) -> bool:
        """True if the assertion expires within ``margin`` seconds of ``now``."""
        return self.expires_at - margin <= now
