"""
Package lifecycle manager.

Reconciles the catalog against the installed manifest and decides, per package name, whether a command means
install, upgrade, remove or nothing at all. Every command follows the same order: read the manifest, decide,
change the artifacts on disk, then save the manifest.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from colorama import Fore, Style  # type: ignore

from .catalog import find_package, search_catalog
from .console import get_console
from .errors import AipManError, PackageNotFoundError, UpgradeError
from .manifest import ManifestStore
from .bundle import BundleMaterializer
from .package import Package
from .prompt import assume_yes


class Outcome(Enum):
    INSTALLED = "installed"
    UPGRADED = "upgraded"
    ALREADY_CURRENT = "already-current"
    UP_TO_DATE = "up-to-date"
    REMOVED = "removed"
    NOT_FOUND = "not-found"
    NOT_INSTALLED = "not-installed"
    DECLINED = "declined"


@dataclass(frozen=True)
class Absent:
    name: str


@dataclass(frozen=True)
class Installed:
    package: Package


PackageState = Union[Absent, Installed]


def state_of(manifest: List[Package], name: str) -> PackageState:
    for package in manifest:
        if package.name == name:
            return Installed(package)
    return Absent(name)


def _replace_entry(manifest: List[Package], old: Package, new: Package) -> List[Package]:
    return [new if package.name == old.name else package for package in manifest]


class Lifecycle:
    def __init__(self, store: ManifestStore, materializer: BundleMaterializer,
                 catalog_source: Callable[[], List[Package]], confirm: Callable[[str], bool] = assume_yes,
                 console=None):
        self.store = store
        self.materializer = materializer
        self.catalog_source = catalog_source
        self.confirm = confirm
        self.console = get_console(console)

    def install(self, name: str) -> Outcome:
        """Install a package from the catalog, or upgrade it if an older version is installed."""
        self.console.timing_start(f"install {name}")
        try:
            return self._install(name)
        finally:
            self.console.timing_end(f"install {name}")

    def _install(self, name: str) -> Outcome:
        manifest = self.store.load()
        catalog = self.catalog_source()

        try:
            candidate = find_package(catalog, name)
        except PackageNotFoundError:
            self.console.error(f"X Package '{name}' was not found in the package list.")
            self.console.info(f"Try 'aip-man search {name}' to find similar packages.")
            return Outcome.NOT_FOUND

        state = state_of(manifest, name)
        if isinstance(state, Installed):
            current = state.package
            if not current.upgradable_to(candidate, self.console):
                self.console.success(f"Package '{name}' is already up to date ({current.version}).")
                return Outcome.ALREADY_CURRENT

            self.console.plain(candidate.describe())
            if not self.confirm(f"Upgrade '{name}' from {current.version} to {candidate.version}?"):
                self.console.info("Upgrade cancelled.")
                return Outcome.DECLINED

            self.console.info(f"Upgrading {name} {current.version} -> {candidate.version}...")
            self.materializer.install(candidate)
            try:
                self.materializer.remove(current)
            finally:
                # The new artifact is on disk either way, so the manifest must point at it
                self.store.save(_replace_entry(manifest, current, candidate))
            self.console.success(f"> Upgraded '{name}' to {candidate.version}")
            return Outcome.UPGRADED

        self.console.plain(candidate.describe())
        if not self.confirm(f"Install '{name}' {candidate.version}?"):
            self.console.info("Installation cancelled.")
            return Outcome.DECLINED

        self.console.info(f"Installing {name} {candidate.version}...")
        path = self.materializer.install(candidate)
        self.store.save(manifest + [candidate])
        self.console.success(f"> Successfully installed '{name}' to {path}")
        return Outcome.INSTALLED

    def remove(self, name: str) -> Outcome:
        """Remove an installed package."""
        manifest = self.store.load()
        state = state_of(manifest, name)
        if isinstance(state, Absent):
            self.console.error(f"X Package '{name}' is not installed.")
            return Outcome.NOT_INSTALLED

        package = state.package
        self.console.plain(package.describe())
        if not self.confirm(f"Remove '{name}' {package.version}?"):
            self.console.info("Removal cancelled.")
            return Outcome.DECLINED

        self.materializer.remove(package)
        self.store.save([entry for entry in manifest if entry.name != name])
        self.console.success(f"> Successfully removed '{name}'")
        return Outcome.REMOVED

    def upgrade(self) -> Outcome:
        """Upgrade every installed package that has a newer version in the catalog.

        Each package is handled on its own: a failure is recorded and the rest carry on. The new manifest is
        saved once at the end, including when an unexpected error stops the loop, and UpgradeError is raised
        afterwards if anything failed."""
        self.console.timing_start("upgrade")
        try:
            manifest = self.store.load()
            catalog = self.catalog_source()

            processed = []
            pending = list(manifest)
            failures = {}
            upgraded = 0
            try:
                while pending:
                    current = pending[0]
                    candidate = self._install_newer(current, catalog, failures)
                    pending.pop(0)
                    if candidate is None:
                        processed.append(current)
                        continue

                    # The new entry is recorded before the old file goes
                    processed.append(candidate)
                    upgraded += 1
                    try:
                        self.materializer.remove(current)
                    except AipManError as e:
                        self.console.warn(f"Upgraded {current.name} but could not remove the old version: {e}")
                    self.console.success(f"> Upgraded '{current.name}' to {candidate.version}")
            finally:
                if upgraded:
                    self.store.save(processed + pending)
        finally:
            self.console.timing_end("upgrade")

        if failures:
            raise UpgradeError(failures)
        if not upgraded:
            self.console.success("All packages are up to date.")
            return Outcome.UP_TO_DATE
        self.console.success(f"> Upgraded {upgraded} package(s).")
        return Outcome.UPGRADED

    def _install_newer(self, current: Package, catalog: List[Package], failures: dict) -> Optional[Package]:
        """Install the catalog's newer version of one manifest entry. Returns it, or None if nothing changed."""
        try:
            candidate = find_package(catalog, current.name)
        except PackageNotFoundError:
            self.console.verbose(f"'{current.name}' is not in the package list, keeping {current.version}")
            return None

        if not current.upgradable_to(candidate, self.console):
            self.console.verbose(f"'{current.name}' {current.version} is up to date")
            return None

        self.console.plain(
            f"{Fore.BLUE}--- {Fore.CYAN}{current.name}{Fore.BLUE}: "
            f"{current.version} -> {candidate.version} ---{Style.RESET_ALL}"
        )
        if not self.confirm(f"Upgrade '{current.name}' from {current.version} to {candidate.version}?"):
            self.console.info(f"Skipping {current.name}.")
            return None

        try:
            self.materializer.install(candidate)
        except AipManError as e:
            self.console.error(f"Failed to upgrade {current.name}: {e}")
            failures[current.name] = str(e)
            return None
        return candidate

    def list(self) -> List[Package]:
        """List installed packages."""
        manifest = self.store.load()
        if not manifest:
            self.console.info("No packages installed.")
            return manifest

        self.console.plain(f"{Fore.BLUE}Installed Packages:{Style.RESET_ALL}")
        for package in manifest:
            self.console.plain(package.describe())
        return manifest

    def run(self, name: str, args: Optional[List[str]] = None) -> int:
        """Run an installed application and return its exit status."""
        manifest = self.store.load()
        state = state_of(manifest, name)
        if isinstance(state, Absent):
            self.console.error(f"X Package '{name}' is not installed.")
            return 0
        return self.materializer.run(state.package, args or [])

    def info(self, name: str) -> Outcome:
        """Display catalog and install details for a package."""
        manifest = self.store.load()
        catalog = self.catalog_source()
        state = state_of(manifest, name)

        try:
            candidate = find_package(catalog, name)
        except PackageNotFoundError:
            candidate = None

        if candidate is None and isinstance(state, Absent):
            self.console.error(f"X Package '{name}' was not found in the package list.")
            return Outcome.NOT_FOUND

        self.console.plain((candidate or state.package).describe())
        if isinstance(state, Installed):
            self.console.plain(f"| Installed: {Fore.GREEN}{state.package.version}{Style.RESET_ALL}")
            self.console.plain(f"| Artifact: {self.materializer.artifact_path(state.package)}")
            if candidate is not None and state.package.upgradable_to(candidate, self.console):
                self.console.info(f"An upgrade to {candidate.version} is available.")
            return Outcome.INSTALLED
        self.console.plain("| Installed: no")
        return Outcome.NOT_INSTALLED

    def search(self, term: str) -> List[Package]:
        """Search the catalog by name and description."""
        catalog = self.catalog_source()
        results = search_catalog(catalog, term)
        if not results:
            self.console.info(f"No packages match '{term}'.")
            return results

        installed = {package.name: package.version for package in self.store.load()}
        for package in results:
            marker = f" {Fore.GREEN}[installed {installed[package.name]}]" if package.name in installed else ""
            self.console.plain(
                f"  {Fore.CYAN}{package.name} {Fore.WHITE}({package.version}){marker}{Style.RESET_ALL} - "
                f"{package.description}"
            )
        return results
