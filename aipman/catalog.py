"""The catalog: the list of packages available to install."""

import json
from typing import List, Optional

import requests  # type: ignore

from .console import get_console
from .errors import CatalogError, PackageNotFoundError
from .package import Package
from .transport import http_get, local_path

DEFAULT_CATALOG_URL = "https://raw.githubusercontent.com/blueOkiris/aip-man-pkg-list/main/pkgs.json"


def parse_catalog(text: str, source: str = "catalog") -> List[Package]:
    """Parse a catalog JSON array into package records."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Failed to parse package list from {source}: {e}")

    if not isinstance(data, list):
        raise CatalogError(f"Package list from {source} must be a JSON array")

    packages = []
    for index, entry in enumerate(data):
        try:
            packages.append(Package.from_dict(entry))
        except ValueError as e:
            raise CatalogError(f"Invalid package entry #{index} in {source}: {e}")
    return packages


def fetch_catalog(location: Optional[str] = None, headers: Optional[dict] = None, timeout: float = 30,
                  console=None) -> List[Package]:
    """Pull the package list and parse it.

    Reads from disk for file:// locations and plain paths, otherwise downloads it. Any failure is fatal:
    a partial catalog is never returned."""
    console = get_console(console)
    location = location or DEFAULT_CATALOG_URL
    console.timing_start("fetch_catalog")
    try:
        packages = parse_catalog(_read_catalog(location, headers, timeout, console), location)
    finally:
        console.timing_end("fetch_catalog")
    console.verbose(f"Package list contains {len(packages)} packages")
    return packages


def _read_catalog(location: str, headers: Optional[dict], timeout: float, console) -> str:
    path = local_path(location)
    if path is not None:
        console.verbose(f"Reading package list from local file: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise CatalogError(f"Failed to read package list {path}: {e}")

    console.verbose(f"Downloading package list from: {location}")
    try:
        response = http_get(location, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise CatalogError(f"Failed to download package list from {location}: {e}")
    console.verbose(f"GET {location}: {response.status_code}")
    return response.text


def find_package(catalog: List[Package], name: str) -> Package:
    """Find a package by name. The first matching entry wins."""
    for package in catalog:
        if package.name == name:
            return package
    raise PackageNotFoundError(f"Package '{name}' not found in the package list")


def search_catalog(catalog: List[Package], term: str) -> List[Package]:
    """Search packages by a case-insensitive term in their name and description."""
    if not term:
        return list(catalog)

    term_lower = term.lower()
    return [
        package for package in catalog
        if term_lower in package.name.lower() or term_lower in package.description.lower()
    ]
