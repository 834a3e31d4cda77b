"""
Response handling for iTunes Connect.

iTunes Connect is a web application, not an API: validation errors show up
as ``errorKeys`` lists at whatever depth the offending form section lives,
plus a few top-level section keys. This module digs them out.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import requests

from .exceptions import RemoteValidationError, UnexpectedResponseError

logger = logging.getLogger(__name__)


@dataclass
class ResponseMessages:
    """Messages found in a response envelope."""

    errors: List[Any] = field(default_factory=list)
    info: List[Any] = field(default_factory=list)
    warnings: List[Any] = field(default_factory=list)


def collect_error_keys(value: Any) -> List[Any]:
    """
    Collect every non-empty ``errorKeys`` list in a nested structure.

    Depth first: inside a mapping each value is searched before that
    key's own ``errorKeys`` contribution is added.
    """
    errors: List[Any] = []
    if isinstance(value, dict):
        for key, child in value.items():
            errors.extend(collect_error_keys(child))
            if key == "errorKeys" and isinstance(child, list) and child:
                errors.extend(child)
    elif isinstance(value, list):
        for child in value:
            errors.extend(collect_error_keys(child))
    return errors


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def extract_messages(envelope: Any) -> ResponseMessages:
    """
    Scan an envelope for errors, info and warnings.

    Errors are ordered nested ``errorKeys`` first, then ``sectionErrorKeys``,
    then ``messages.error``.
    """
    if not isinstance(envelope, dict):
        return ResponseMessages()

    errors = collect_error_keys(envelope)
    errors.extend(_as_list(envelope.get("sectionErrorKeys")))

    messages = envelope.get("messages")
    if isinstance(messages, dict) and messages.get("error"):
        errors.extend(_as_list(messages["error"]))

    return ResponseMessages(
        errors=errors,
        info=_as_list(envelope.get("sectionInfoKeys")),
        warnings=_as_list(envelope.get("sectionWarningKeys")),
    )


def handle_itc_response(
    envelope: Any,
    reporter: Optional[Callable[[ResponseMessages], None]] = None,
) -> Any:
    """
    Raise on any error in an envelope, otherwise return it unchanged.

    Args:
        envelope: Parsed ``data`` member of a response
        reporter: Called with the ResponseMessages when the response
            carries info or warning keys

    Returns:
        The envelope, untouched

    Raises:
        RemoteValidationError: If any error message was found
    """
    if not isinstance(envelope, dict):
        return envelope

    found = extract_messages(envelope)

    if not found.errors and not found.info and not found.warnings:
        logger.debug("Request was successful")

    if found.errors:
        logger.error(f"iTunes Connect returned errors: {found.errors}")
        raise RemoteValidationError(found.errors)

    for message in found.info:
        logger.info(f"iTunes Connect: {message}")
    for message in found.warnings:
        logger.warning(f"iTunes Connect: {message}")

    if reporter is not None and (found.info or found.warnings):
        reporter(found)

    return envelope


def parse_response(response: requests.Response, expected_key: Optional[str] = None) -> Any:
    """
    Decode a JSON response body, optionally returning one member of it.

    Raises:
        UnexpectedResponseError: If the body is not JSON or lacks expected_key
    """
    try:
        body = response.json()
    except ValueError as e:
        raise UnexpectedResponseError(
            f"Expected a JSON response from iTunes Connect, got: {response.text[:200]!r}"
        ) from e

    if expected_key is None:
        return body

    if not isinstance(body, dict) or body.get(expected_key) is None:
        raise UnexpectedResponseError(
            f"Response from iTunes Connect is missing '{expected_key}'"
        )
    return body[expected_key]
