"""
Shared fixtures for itunes-connect-client tests.
"""

import pytest
from unittest.mock import Mock

from requests.cookies import cookiejar_from_dict

from itunes_connect import ITunesConnectClient, Session


def _make_response(status_code=200, json_data=None, text="", headers=None, cookies=None):
    """Build a fake requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    response.cookies = cookiejar_from_dict(cookies or {})
    if json_data is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def client():
    """A client that has not logged in yet."""
    return ITunesConnectClient()


@pytest.fixture
def logged_in_client():
    """A client holding a session."""
    api = ITunesConnectClient()
    api.session = Session(
        myacinfo="DAWTKNV2abc",
        woinst="3",
        wosid="Xyz123",
        login_url="https://itunesconnect.apple.com/WebObjects/iTunesConnect.woa/wo/0.0.1",
    )
    return api


@pytest.fixture
def make_response():
    """Factory for fake responses."""
    return _make_response
