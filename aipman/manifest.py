"""The installed manifest: the list of packages currently on disk."""

import json
import os
from pathlib import Path
from typing import List

from .console import get_console
from .errors import ManifestError
from .package import Package

MANIFEST_NAME = "aip_man_pkg_list.json"


class ManifestStore:
    def __init__(self, path, console=None):
        self.path = Path(path)
        self.console = get_console(console)

    def load(self) -> List[Package]:
        """Read (or create) the installed package manifest."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.console.info("Local manifest does not exist. Creating...")
                with open(self.path, "w", encoding="utf-8") as f:
                    f.write("[\n]")

            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ManifestError(f"Failed to read manifest {self.path}: {e}")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Failed to parse manifest file {self.path}: {e}")
        if not isinstance(data, list):
            raise ManifestError(f"Manifest file {self.path} must contain a JSON array")

        packages = []
        seen = set()
        for index, entry in enumerate(data):
            try:
                package = Package.from_dict(entry)
            except ValueError as e:
                raise ManifestError(f"Invalid entry #{index} in manifest {self.path}: {e}")
            # Older releases could record a package twice; the first entry is the one on disk
            if package.name in seen:
                self.console.warn(
                    f"Manifest lists '{package.name}' more than once, ignoring duplicate version {package.version}"
                )
                continue
            seen.add(package.name)
            packages.append(package)

        self.console.verbose(f"Loaded {len(packages)} installed packages from {self.path}")
        return packages

    def save(self, packages: List[Package]):
        """Overwrite the manifest with new data."""
        names = [package.name for package in packages]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ManifestError(f"Refusing to save manifest with duplicate packages: {', '.join(duplicates)}")

        self.console.verbose("Updating manifest...")
        text = json.dumps([package.to_dict() for package in packages], indent=4)
        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(text)
                f.write("\n")
            os.replace(temp_path, self.path)
        except OSError as e:
            raise ManifestError(f"Failed to save manifest {self.path}: {e}")
        self.console.verbose(f"Saved {len(packages)} packages to {self.path}")
