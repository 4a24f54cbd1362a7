"""Exception types raised by the Sign in with Apple client."""


class SiwaError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgumentError(SiwaError, ValueError):
    """Caller supplied an empty or malformed value."""


class SigningKeyError(SiwaError):
    """The private key is missing, unreadable, of the wrong curve, or signing failed."""


class ProviderError(SiwaError):
    """The token endpoint could not be reached or answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        error: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.error = error


class DecodeError(SiwaError):
    """The token endpoint answered 2xx but the body is not a JSON object."""

    def __init__(self, message: str, *, status_code: int, body: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
