"""ES256 client assertion ("client secret") generation with caching."""

import logging
import threading
import time
from collections.abc import Callable

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

from siwa.core.errors import InvalidArgumentError, SigningKeyError
from siwa.crypto.keys import KeyMaterial, load_private_key
from siwa.crypto.types import AssertionClaims, ClientAssertion, ServiceIdentity

logger = logging.getLogger(__name__)

APPLE_AUDIENCE = "https://appleid.apple.com"
ALGORITHM = "ES256"
MAX_ASSERTION_TTL = 15_777_000
ASSERTION_TTL_DEFAULT = 3600
REFRESH_MARGIN_DEFAULT = 60


class ClientAssertionGenerator:
    """Signs client assertions for one service identity and reuses them until near expiry.

    The assertion is sent as ``client_secret`` on every token request. Signing
    happens lazily: on the first call to :meth:`current`, and again whenever the
    cached assertion is within ``refresh_margin`` seconds of expiring.
    """

    def __init__(
        self,
        identity: ServiceIdentity,
        private_key: KeyMaterial,
        *,
        lifetime: int = ASSERTION_TTL_DEFAULT,
        refresh_margin: int = REFRESH_MARGIN_DEFAULT,
        audience: str = APPLE_AUDIENCE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not 0 < lifetime <= MAX_ASSERTION_TTL:
            raise InvalidArgumentError(
                f"lifetime must be between 1 and {MAX_ASSERTION_TTL} seconds"
            )
        if not 0 <= refresh_margin < lifetime:
            raise InvalidArgumentError(
                "refresh_margin must be non-negative and shorter than lifetime"
            )
        self._identity = identity
        self._key_material = private_key
        self._signing_key: ec.EllipticCurvePrivateKey | None = None
        self._lifetime = lifetime
        self._refresh_margin = refresh_margin
        self._audience = audience
        self._clock = clock
        self._cached: ClientAssertion | None = None
        self._lock = threading.Lock()

    @property
    def identity(self) -> ServiceIdentity:
        return self._identity

    @property
    def lifetime(self) -> int:
        return self._lifetime

    def current(self) -> ClientAssertion:
        """Return a valid assertion, signing a new one only if the cached one is stale."""
        cached = self._cached
        if cached is not None and not cached.expires_within(
            self._clock(), self._refresh_margin
        ):
            return cached

        with self._lock:
            now = self._clock()
            cached = self._cached
            if cached is not None and not cached.expires_within(
                now, self._refresh_margin
            ):
                return cached
            assertion = self._sign(now)
            self._cached = assertion
            return assertion

    def _load_key(self) -> ec.EllipticCurvePrivateKey:
        if self._signing_key is None:
            self._signing_key = load_private_key(self._key_material)
        return self._signing_key

    def _sign(self, now: float) -> ClientAssertion:
        key = self._load_key()
        issued_at = int(now)
        claims = AssertionClaims(
            iss=self._identity.team_id,
            iat=issued_at,
            exp=issued_at + self._lifetime,
            aud=self._audience,
            sub=self._identity.client_id,
        )
        try:
            token = jwt.encode(
                claims.model_dump(),
                key,
                algorithm=ALGORITHM,
                headers={"kid": self._identity.key_id},
            )
        except (ValueError, TypeError, jwt.PyJWTError) as exc:
            raise SigningKeyError("Failed to sign client assertion") from exc

        logger.debug(
            "Signed client assertion kid=%s exp=%d", self._identity.key_id, claims.exp
        )
        return ClientAssertion(token=token, issued_at=claims.iat, expires_at=claims.exp)
