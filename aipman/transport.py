"""Where package data comes from: local files or HTTP(S) via requests."""

import os
from typing import Optional
from urllib.parse import unquote, urlparse

import requests  # type: ignore

from . import __version__

FILE_SCHEME = "file://"


def build_headers(token: Optional[str] = None) -> dict:
    """Request headers sent with every HTTP call. Adds a GitHub token when one is configured."""
    headers = {"User-Agent": f"aip-man/{__version__}"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def local_path(location: str) -> Optional[str]:
    """Return the filesystem path for a file:// URL or a plain path, or None for a remote URL."""
    if location.startswith(FILE_SCHEME):
        parsed = urlparse(location)
        # file://relative/path has the first component parsed as the host
        return unquote(parsed.netloc + parsed.path) if parsed.netloc else unquote(parsed.path)
    if "://" in location:
        return None
    return os.path.expanduser(location)


def http_get(url: str, headers: Optional[dict] = None, timeout: float = 30, stream: bool = False):
    """GET a URL, following redirects, and raise for non-2xx responses."""
    response = requests.get(url, headers=headers, allow_redirects=True, timeout=timeout, stream=stream)
    response.raise_for_status()
    return response
