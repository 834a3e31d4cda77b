"""
iTunes Connect web client.

This module logs into the iTunes Connect web portal with an Apple ID and
drives the same JSON endpoints the browser front end uses to manage apps,
versions, build trains and review submissions.
"""

import logging
import re
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import requests
from ratelimit import limits, sleep_and_retry

from .exceptions import (
    ITunesConnectError,
    AuthenticationError,
    InvalidCredentialsError,
    LoginDiscoveryError,
    NotFoundError,
    PermissionError,
    PreconditionError,
    RateLimitError,
    RemoteValidationError,
    ServerError,
    UnexpectedResponseError,
)
from .languages import LanguageConverter
from .response import ResponseMessages, extract_messages, handle_itc_response, parse_response
from .session import LoginUrlCache, Session, missing_cookies, session_cookies
from .utils import require_app_id, require_value

logger = logging.getLogger(__name__)


class ITunesConnectClient:
    """
    iTunes Connect web client.

    Log in once with ``login`` and then call the resource methods; every
    request carries the session cookies obtained at login.

    Args:
        cache_dir: Directory used to cache the discovered login URL
            (no file is written when omitted)
        timeout: Request timeout in seconds
        language_converter: Converter used for primary language names
        reporter: Called with the info/warning messages of successful responses
    """

    HOST = "https://itunesconnect.apple.com"
    HOSTNAME = "https://itunesconnect.apple.com/WebObjects/iTunesConnect.woa/"
    LOGIN_ACTION_PATTERN = re.compile(r'action="(/WebObjects/iTunesConnect\.woa/wo/[^"]*)"')
    DEFAULT_PRIMARY_LANGUAGE = "English_CA"

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]] = None,
        timeout: float = 30,
        language_converter: Optional[LanguageConverter] = None,
        reporter: Optional[Callable[[ResponseMessages], None]] = None,
    ):
        """Initialize the iTunes Connect client."""
        if not timeout or timeout <= 0:
            raise PreconditionError(f"timeout must be positive, got: {timeout}")

        self.timeout = timeout
        self.language_converter = language_converter or LanguageConverter()
        self.reporter = reporter
        self.session: Optional[Session] = None
        self._login_url_cache = LoginUrlCache(cache_dir)
        self._login_url: Optional[str] = None
        self._login_url_lock = threading.Lock()

    @classmethod
    def login_with(cls, username: str, password: str, **kwargs) -> "ITunesConnectClient":
        """Create a client and log in right away."""
        client = cls(**kwargs)
        client.login(username, password)
        return client

    # ===== LOGIN =====

    def login_url(self) -> str:
        """
        Get the URL the login form posts to.

        Looked up once per client: memory first, then the cache file, then
        the iTunes Connect landing page.
        """
        if self._login_url:
            return self._login_url

        with self._login_url_lock:
            if not self._login_url:
                cached = self._login_url_cache.read()
                if cached:
                    logger.debug(f"login_url: Using cached login URL {cached}")
                    self._login_url = cached
                else:
                    url = self._discover_login_url()
                    self._login_url_cache.write(url)
                    self._login_url = url
        return self._login_url

    def _discover_login_url(self) -> str:
        """Fetch the landing page and read the login form action."""
        failure = "Could not fetch the login URL from iTunes Connect, the server might be down"

        logger.info(f"_discover_login_url: GET {self.HOSTNAME}")
        try:
            response = requests.request(method="GET", url=self.HOSTNAME, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"_discover_login_url: Request failed: {e}")
            raise LoginDiscoveryError(failure) from e

        if response.status_code >= 400:
            logger.error(f"_discover_login_url: Status {response.status_code}")
            raise LoginDiscoveryError(failure)

        match = self.LOGIN_ACTION_PATTERN.search(response.text or "")
        if not match or not match.group(1):
            logger.error("_discover_login_url: No login form action found on the page")
            raise LoginDiscoveryError(failure)

        return self.HOST + match.group(1)

    def login(self, username: str, password: str) -> Session:
        """
        Log in with an Apple ID and keep the resulting session.

        Raises:
            PreconditionError: If username or password is missing
            LoginDiscoveryError: If the login form URL cannot be found
            InvalidCredentialsError: If the response lacks the session cookies
        """
        require_value("username", username)
        require_value("password", password)

        url = self.login_url()
        logger.info(f"login: POST {url}")
        try:
            response = requests.request(
                method="POST",
                url=url,
                data={"theAccountName": username, "theAccountPW": password},
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"login: Request failed: {e}")
            raise ITunesConnectError(f"Request failed: {e}") from e

        cookies = session_cookies(response.cookies)
        missing = missing_cookies(cookies)
        if missing:
            # Wrong credentials and a changed login page look the same from here
            logger.debug(
                f"login: Status {response.status_code}, missing cookies: {', '.join(missing)}"
            )
            raise InvalidCredentialsError(response=response)

        self.session = Session(login_url=url, **cookies)
        logger.info("login: Session established")
        return self.session

    def logout(self) -> None:
        """Forget the current session."""
        self.session = None

    def forget_login_url(self) -> None:
        """
        Drop the known login URL, in memory and in the cache file.

        The next login discovers it again, e.g. after Apple changed the form.
        """
        with self._login_url_lock:
            self._login_url = None
            self._login_url_cache.clear()

    # ===== TRANSPORT =====

    def _get_headers(self, json_body: bool = False) -> Dict[str, str]:
        """Get headers for authenticated requests."""
        if self.session is None:
            raise AuthenticationError("Not logged in - call login() first")

        headers = {"Cookie": self.session.cookie_header}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _make_request_raw(
        self,
        method: str = "GET",
        endpoint: Optional[str] = None,
        params: Optional[Dict] = None,
        data: Optional[Any] = None,
    ) -> requests.Response:
        """Make an authenticated request relative to HOSTNAME."""
        if endpoint is None:
            raise PreconditionError("endpoint is required")

        url = f"{self.HOSTNAME}{endpoint}"
        headers = self._get_headers(json_body=data is not None)

        logger.info(f"_make_request: {method} {url}")
        if params:
            logger.info(f"_make_request: params={params}")

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=data,
                timeout=self.timeout,
            )
            logger.info(f"_make_request: Response received - status={response.status_code}")
        except requests.exceptions.Timeout as e:
            logger.error(f"_make_request: Request timed out after {self.timeout}s: {e}")
            raise ITunesConnectError(f"Request failed: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"_make_request: Request failed: {e}")
            raise ITunesConnectError(f"Request failed: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError("Authentication failed - the session may have expired")
        elif response.status_code == 403:
            raise PermissionError("Insufficient permissions for this operation")
        elif response.status_code == 404:
            raise NotFoundError("Requested resource not found")
        elif response.status_code == 429:
            raise RateLimitError("Rate limit exceeded")
        elif response.status_code >= 500:
            logger.error(f"Server Error {response.status_code}")
            raise ServerError(f"Server Error {response.status_code}")
        elif response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                errors = extract_messages(body.get("data", body)).errors
                if errors:
                    raise RemoteValidationError(errors)
            logger.error(f"Request Error {response.status_code}: {response.text}")
            raise ITunesConnectError(f"Request Error {response.status_code}: {response.text}")

        return response

    @sleep_and_retry
    @limits(calls=3500, period=3600)
    def _make_request(self, *args, **kwargs) -> requests.Response:
        """Rate-limited wrapper for _make_request_raw."""
        return self._make_request_raw(*args, **kwargs)

    def _handle(self, response: requests.Response) -> Any:
        """Parse the ``data`` member of a response and check it for errors."""
        return handle_itc_response(parse_response(response, "data"), reporter=self.reporter)

    # ===== APPLICATIONS =====

    def applications(self) -> List[Dict]:
        """Get the summaries of all apps in the account."""
        response = self._make_request(method="GET", endpoint="ra/apps/manageyourapps/summary")
        data = self._handle(response)
        if not isinstance(data, dict):
            raise UnexpectedResponseError("Unexpected app summary response")
        return data.get("summaries") or []

    def create_application(
        self,
        name: Optional[str] = None,
        primary_language: Optional[str] = None,
        version: Optional[str] = None,
        sku: Optional[str] = None,
        bundle_id: Optional[str] = None,
        bundle_id_suffix: Optional[str] = None,
        app_type: str = "ios",
    ) -> Dict:
        """
        Create a new application on iTunes Connect.

        The empty form is fetched from iTunes Connect first, filled with the
        given values and sent back. All validation happens on Apple's side.

        Args:
            name: App name as it appears on the App Store (max 255 chars)
            primary_language: iTunes Connect language name or locale code,
                used where no localized information exists
            version: Version number shown on the App Store
            sku: Unique ID for the app, not visible on the App Store
            bundle_id: Bundle ID matching the one used in Xcode
            bundle_id_suffix: Suffix for wildcard bundle IDs
            app_type: Platform of the new app

        Returns:
            The data iTunes Connect returned for the new app
        """
        endpoint = "ra/apps/create/"
        params = {"appType": app_type}

        response = self._make_request(method="GET", endpoint=endpoint, params=params)
        data = parse_response(response, "data")

        language = primary_language or self.DEFAULT_PRIMARY_LANGUAGE
        language = self.language_converter.from_standard_to_itc(language) or language

        try:
            data["versionString"]["value"] = version
            new_app = data["newApp"]
            new_app["name"]["value"] = name
            new_app["bundleId"]["value"] = bundle_id
            new_app["primaryLanguage"]["value"] = language
            new_app["vendorId"]["value"] = sku
            new_app["bundleIdSuffix"]["value"] = bundle_id_suffix
        except (KeyError, TypeError) as e:
            raise UnexpectedResponseError(f"Unexpected app creation form: missing {e}") from e

        logger.info(f"create_application: Creating {name} ({bundle_id})")
        response = self._make_request(method="POST", endpoint=endpoint, params=params, data=data)
        return self._handle(response)

    def create_version(self, app_id: str, version_number: str) -> Dict:
        """Create a new version of an app."""
        app_id = require_app_id(app_id)
        require_value("version_number", version_number)

        response = self._make_request(
            method="POST",
            endpoint=f"ra/apps/version/create/{app_id}",
            data={"version": str(version_number)},
        )
        return self._handle(response)

    def get_resolution_center(self, app_id: str) -> Dict:
        """Get the resolution center thread (review feedback) of an app."""
        app_id = require_app_id(app_id)
        response = self._make_request(
            method="GET",
            endpoint=f"ra/apps/{app_id}/resolutionCenter",
            params={"v": "latest"},
        )
        return self._handle(response)

    # ===== APP VERSIONS =====

    def app_version(self, app_id: str, is_live: bool = False) -> Dict:
        """Get the editable version of an app, or the live one when is_live is set."""
        app_id = require_app_id(app_id)
        response = self._make_request(
            method="GET",
            endpoint=f"ra/apps/version/{app_id}",
            params={"v": "live"} if is_live else None,
        )
        return self._handle(response)

    def update_app_version(self, app_id: str, is_live: bool, data: Dict) -> Dict:
        """Save a modified app version as returned by app_version."""
        app_id = require_app_id(app_id)
        response = self._make_request(
            method="POST",
            endpoint=f"ra/apps/version/save/{app_id}",
            params={"v": "live"} if is_live else None,
            data=data,
        )
        return self._handle(response)

    # ===== BUILD TRAINS =====

    def build_trains(self, app_id: str) -> Dict:
        """Get the build trains of an app."""
        app_id = require_app_id(app_id)
        response = self._make_request(method="GET", endpoint=f"ra/apps/{app_id}/trains/")
        return self._handle(response)

    def update_build_trains(self, app_id: str, data: Dict) -> Dict:
        """Save modified build trains, e.g. to toggle beta testing."""
        app_id = require_app_id(app_id)
        response = self._make_request(
            method="POST", endpoint=f"ra/apps/{app_id}/trains/", data=data
        )
        return self._handle(response)

    # ===== SUBMIT FOR REVIEW =====

    def send_app_submission(self, app_id: str, data: Dict, stage: str) -> Dict:
        """
        Post one stage of the submit-for-review flow.

        Args:
            app_id: The app ID
            data: The submission form as returned by the previous stage
            stage: Pipeline stage, e.g. ``start`` or ``complete``
        """
        app_id = require_app_id(app_id)
        require_value("stage", stage)

        response = self._make_request(
            method="POST",
            endpoint=f"ra/apps/{app_id}/version/submit/{stage}",
            data=data,
        )
        return self._handle(response)
