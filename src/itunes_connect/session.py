"""
Session state for an iTunes Connect login.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

REQUIRED_COOKIES = ("myacinfo", "woinst", "wosid")


@dataclass(frozen=True)
class Session:
    """The cookies iTunes Connect hands out on a successful login."""

    myacinfo: str
    woinst: str
    wosid: str
    login_url: Optional[str] = None

    @property
    def cookie_header(self) -> str:
        return ";".join(f"{name}={getattr(self, name)}" for name in REQUIRED_COOKIES)


def session_cookies(cookies: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """
    Pick the session cookies out of the cookies a response set.

    Args:
        cookies: ``response.cookies`` of the login response

    Returns:
        The values of the REQUIRED_COOKIES that are present and non-empty
    """
    if not cookies:
        return {}
    return {name: cookies.get(name) for name in REQUIRED_COOKIES if cookies.get(name)}


def missing_cookies(cookies: Dict[str, str]) -> List[str]:
    return [name for name in REQUIRED_COOKIES if name not in cookies]


class LoginUrlCache:
    """
    Plain text file holding the last discovered login form URL.

    Without a cache directory nothing touches the file system.

    Args:
        cache_dir: Directory for the cache file, or None to disable it
    """

    FILENAME = "itunes_connect_login_url.txt"

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None):
        self.path = Path(cache_dir) / self.FILENAME if cache_dir else None

    def read(self) -> Optional[str]:
        if self.path is None:
            return None
        try:
            with open(self.path, "r") as f:
                url = f.read().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            # Treated as a miss, the URL gets discovered again
            logger.warning(f"Could not read login URL cache {self.path}: {e}")
            return None
        return url or None

    def write(self, url: str) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                f.write(url)
        except OSError as e:
            # The URL is still usable for this process
            logger.warning(f"Could not write login URL cache {self.path}: {e}")

    def clear(self) -> None:
        if self.path is None:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
