"""
Errors raised while gating and aggregating the diagnostic report.

Every error carries the message written to the response body.
"""
from aeinfo.core.constants import FORBIDDEN_MESSAGE, QUEUE_STATS_MESSAGE


class PlatformError(Exception):
    """Base class; rendered as a plain-text 500 unless a subclass says otherwise."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LoginRequired(PlatformError):
    """No authenticated caller. Not an error response: answered with a redirect."""
    status_code = 307

    def __init__(self, login_url: str):
        super().__init__("login required")
        self.login_url = login_url


class AdminRequired(PlatformError):
    status_code = 403

    def __init__(self):
        super().__init__(FORBIDDEN_MESSAGE)


class LoginURLError(PlatformError):
    pass


class QueueStatsError(PlatformError):
    def __init__(self, message: str = QUEUE_STATS_MESSAGE):
        super().__init__(message)


class ProviderError(PlatformError):
    """A statistics provider failed; the message is the underlying error's."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


class SerializationError(PlatformError):
    pass
