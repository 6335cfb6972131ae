"""
Bundle materializer: turns a package record into a runnable file on disk and back.

Every artifact lives at <app_dir>/<name>-<version>.<extension>, so removing or running a package only needs
its manifest entry.
"""

import os
import shutil
import subprocess
import tarfile
import zipfile
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

import requests  # type: ignore

from .console import get_console
from .errors import BundleError
from .package import Package, check_path_component
from .transport import http_get, local_path

DEFAULT_EXTENSION = "AppImage"
ARTIFACT_MODE = 0o755

ARCHIVE_SUFFIXES = [
    (".tar.gz", "tar"),
    (".tgz", "tar"),
    (".zip", "zip"),
]


def archive_kind(url: str):
    """Return (suffix, kind) for an archive URL, dispatched on the URL's suffix."""
    path = urlparse(url).path if "://" in url else url
    lowered = path.lower()
    for suffix, kind in ARCHIVE_SUFFIXES:
        if lowered.endswith(suffix):
            return suffix, kind
    raise BundleError(f"Unsupported archive type for '{url}' (expected .zip, .tar.gz or .tgz)")


def _inside(root: Path, name: str) -> bool:
    target = (root / name).resolve()
    return target == root or root in target.parents


class BundleMaterializer:
    def __init__(self, app_dir, extension: str = DEFAULT_EXTENSION, headers: Optional[dict] = None,
                 timeout: float = 30, console=None):
        self.app_dir = Path(app_dir)
        self.extension = extension
        self.headers = headers or {}
        self.timeout = timeout
        self.console = get_console(console)

    def artifact_path(self, package: Package) -> Path:
        try:
            check_path_component("name", package.name)
            check_path_component("version", package.version)
        except ValueError as e:
            raise BundleError(str(e))
        return self.app_dir / package.artifact_name(self.extension)

    def install(self, package: Package) -> Path:
        """Download a package and leave an executable artifact at its deterministic path."""
        self.console.timing_start(f"materialize {package.name}")
        try:
            return self._materialize(package)
        finally:
            self.console.timing_end(f"materialize {package.name}")

    def _materialize(self, package: Package) -> Path:
        target = self.artifact_path(package)
        try:
            self.app_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BundleError(f"Failed to create application directory {self.app_dir}: {e}")

        if package.compressed:
            self._install_from_archive(package, target)
        else:
            partial = target.with_name(target.name + ".part")
            self._download(package.url, partial)
            try:
                os.replace(partial, target)
            except OSError as e:
                self._discard(partial)
                raise BundleError(f"Failed to place {target}: {e}")

        try:
            os.chmod(target, ARTIFACT_MODE)
        except OSError as e:
            raise BundleError(f"Failed to make {target} executable: {e}")

        self.console.verbose(f"Installed artifact at {target}")
        return target

    def remove(self, package: Package) -> bool:
        """Delete a package's artifact. An artifact that is already gone only produces a warning."""
        target = self.artifact_path(package)
        try:
            target.unlink()
        except FileNotFoundError:
            self.console.warn(f"{target} was already removed")
            return False
        except OSError as e:
            raise BundleError(f"Failed to delete package {target}: {e}")
        self.console.verbose(f"Deleted {target}")
        return True

    def run(self, package: Package, args: Optional[List[str]] = None) -> int:
        """Run an installed artifact with the given arguments, attached to this terminal, and wait for it."""
        target = self.artifact_path(package)
        if not target.exists():
            raise BundleError(f"Artifact for '{package.name}' is missing: {target}")

        command = [str(target)] + list(args or [])
        self.console.verbose(f"Running: {command}")
        try:
            result = subprocess.run(command)
        except OSError as e:
            raise BundleError(f"Failed to start app {target}: {e}")
        self.console.verbose(f"{package.name} exited with status {result.returncode}")
        return result.returncode

    def _download(self, url: str, destination: Path):
        path = local_path(url)
        self.console.verbose(f"Downloading {url} to {destination}")
        try:
            if path is not None:
                shutil.copyfile(path, destination)
            else:
                response = http_get(url, headers=self.headers, timeout=self.timeout, stream=True)
                self.console.verbose(f"GET {url}: {response.status_code}")
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=64 * 1024):
                        if chunk:
                            f.write(chunk)
        except (OSError, requests.RequestException) as e:
            self._discard(destination)
            raise BundleError(f"Failed to download package from {url}: {e}")

    def _install_from_archive(self, package: Package, target: Path):
        suffix, kind = archive_kind(package.url)
        stem = f"{package.name}-{package.version}"
        archive = self.app_dir / f"{stem}{suffix}"
        scratch = self.app_dir / f".{stem}.extract"

        self._download(package.url, archive)
        try:
            if scratch.exists():
                shutil.rmtree(scratch)
            scratch.mkdir()
            self._extract(archive, kind, scratch)

            matches = sorted(p for p in scratch.rglob(f"*.{self.extension}") if p.is_file())
            if not matches:
                raise BundleError(f"No *.{self.extension} file found inside {package.url}")
            if len(matches) > 1:
                self.console.warn(
                    f"Archive for '{package.name}' contains {len(matches)} *.{self.extension} files, "
                    f"using {matches[0].relative_to(scratch)}"
                )
            self.console.verbose(f"Moving {matches[0]} to {target}")
            shutil.move(str(matches[0]), str(target))
        except OSError as e:
            raise BundleError(f"Failed to unpack {archive}: {e}")
        finally:
            self._cleanup(scratch, archive)

    def _extract(self, archive: Path, kind: str, scratch: Path):
        root = scratch.resolve()
        try:
            if kind == "zip":
                with zipfile.ZipFile(archive) as zf:
                    for name in zf.namelist():
                        if not _inside(root, name):
                            raise BundleError(f"Archive member '{name}' escapes the extraction directory")
                    zf.extractall(scratch)
            else:
                with tarfile.open(archive, "r:gz") as tf:
                    for member in tf.getmembers():
                        if not _inside(root, member.name):
                            raise BundleError(f"Archive member '{member.name}' escapes the extraction directory")
                        if member.issym() or member.islnk():
                            link_base = os.path.dirname(member.name) if member.issym() else ""
                            if not _inside(root, os.path.join(link_base, member.linkname)):
                                raise BundleError(f"Archive link '{member.name}' points outside the extraction directory")
                    if hasattr(tarfile, "data_filter"):
                        tf.extractall(scratch, filter="data")
                    else:
                        tf.extractall(scratch)
        except (zipfile.BadZipFile, tarfile.TarError, EOFError) as e:
            raise BundleError(f"Failed to extract {archive}: {e}")

    def _cleanup(self, scratch: Path, archive: Path):
        try:
            if scratch.exists():
                shutil.rmtree(scratch)
        except OSError as e:
            self.console.warn(f"Failed to remove temporary directory {scratch}: {e}")
        self._discard(archive)

    def _discard(self, path: Path):
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            self.console.warn(f"Failed to remove {path}: {e}")
