"""
Exception classes for itunes-connect-client.
"""


class ITunesConnectError(Exception):
    """Base exception class for iTunes Connect errors."""

    pass


class AuthenticationError(ITunesConnectError):
    """Raised when there is no usable session."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """
    Raised when the login response lacks the required session cookies.

    iTunes Connect answers a wrong password and an unexpected login page
    the same way, so both end up here.
    """

    def __init__(self, message: str = "Invalid username and password combination", response=None):
        super().__init__(message)
        self.response = response


class LoginDiscoveryError(ITunesConnectError):
    """Raised when the login form URL cannot be found or fetched."""

    pass


class PreconditionError(ITunesConnectError):
    """Raised when a required parameter is missing before any request is sent."""

    pass


class RemoteValidationError(ITunesConnectError):
    """Raised when a response body carries section or field errors."""

    def __init__(self, messages):
        self.messages = list(messages)
        super().__init__(" ".join(str(m) for m in self.messages))


class UnexpectedResponseError(ITunesConnectError):
    """Raised when a response body does not have the expected shape."""

    pass


class RateLimitError(ITunesConnectError):
    """Raised when rate limits are exceeded."""

    pass


class NotFoundError(ITunesConnectError):
    """Raised when requested resource is not found."""

    pass


class PermissionError(ITunesConnectError):
    """Raised when insufficient permissions for operation."""

    pass


class ServerError(ITunesConnectError):
    """Raised when server returns 5xx error."""

    pass
