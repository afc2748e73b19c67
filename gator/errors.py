"""Errors raised by gator.

Every error the CLI knows how to render derives from `GatorError`.
"""


class GatorError(Exception):
    pass


class NetworkError(GatorError):
    """The feed request could not be built or the transport failed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"error fetching {url}: {reason}")
        self.url = url
        self.reason = reason


class DecodeError(GatorError):
    """The response body is not a well-formed RSS document."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"error decoding feed {url}: {reason}")
        self.url = url
        self.reason = reason


class NotFoundError(GatorError):
    pass


class ConflictError(GatorError):
    pass


class AuthError(GatorError):
    pass


class NoFeedsError(GatorError):
    def __init__(self, message: str = "no feeds to fetch, add one with `gator addfeed`"):
        super().__init__(message)


class InvalidArgumentError(GatorError, ValueError):
    pass


class ConfigError(GatorError):
    pass
