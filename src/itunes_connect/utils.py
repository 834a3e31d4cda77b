"""
Utility functions for itunes-connect-client.

Helpers for checking parameters before anything is sent to iTunes Connect.
"""

import re
from typing import Any, Union

from .exceptions import PreconditionError


def require_app_id(app_id: Union[str, int, None]) -> str:
    """
    Check that an app ID was given.

    Args:
        app_id: The app ID (Apple ID) of the application

    Returns:
        The app ID as a stripped string

    Raises:
        PreconditionError: If the app ID is missing or blank
    """
    if app_id is None:
        raise PreconditionError("app_id is required")

    app_id_str = str(app_id).strip()
    if not app_id_str:
        raise PreconditionError("app_id is required")

    return app_id_str


def require_value(name: str, value: Any) -> Any:
    """Raise PreconditionError when value is None or an empty string."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise PreconditionError(f"{name} is required")
    return value


def validate_version_string(version: str) -> str:
    """
    Validate an app version string.

    Args:
        version: The version string to validate

    Returns:
        The validated version string

    Raises:
        PreconditionError: If the version string is invalid
    """
    if not version:
        raise PreconditionError("Version string cannot be empty")

    version = str(version).strip()

    # X.Y or X.Y.Z
    if not re.match(r"^\d+\.\d+(\.\d+)?$", version):
        raise PreconditionError(
            f"Invalid version format. Expected format: 'X.Y.Z', got: {version}"
        )

    return version
