"""
itunes-connect-client

A Python client for the iTunes Connect web portal, managing apps,
versions, build trains and review submissions through a logged in session.
"""

from .client import ITunesConnectClient
from .manager import AppManager
from .languages import LanguageConverter, to_full_language, to_language_code
from .response import ResponseMessages, extract_messages, handle_itc_response
from .session import Session
from .exceptions import (
    ITunesConnectError,
    AuthenticationError,
    InvalidCredentialsError,
    LoginDiscoveryError,
    PreconditionError,
    RemoteValidationError,
    UnexpectedResponseError,
    RateLimitError,
    NotFoundError,
    PermissionError,
    ServerError,
)

__version__ = "0.1.0"

__all__ = [
    "ITunesConnectClient",
    "AppManager",
    "LanguageConverter",
    "ResponseMessages",
    "Session",
    "extract_messages",
    "handle_itc_response",
    "to_full_language",
    "to_language_code",
    "ITunesConnectError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "LoginDiscoveryError",
    "PreconditionError",
    "RemoteValidationError",
    "UnexpectedResponseError",
    "RateLimitError",
    "NotFoundError",
    "PermissionError",
    "ServerError",
]
