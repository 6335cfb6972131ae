"""Exceptions raised by aip-man."""


class AipManError(Exception):
    """Base class for errors that abort the current command."""
    pass


class ConfigError(AipManError):
    """Custom exception for an unreadable or invalid configuration file."""
    pass


class CatalogError(AipManError):
    """Custom exception for a package catalog that could not be fetched or parsed."""
    pass


class ManifestError(AipManError):
    """Custom exception for an installed manifest that could not be read or written."""
    pass


class BundleError(AipManError):
    """Custom exception for download, extraction, placement or launch failures."""
    pass


class BackupError(AipManError):
    """Custom exception for backup and restore failures."""
    pass


class UpgradeError(AipManError):
    """Raised after a bulk upgrade in which one or more packages failed."""

    def __init__(self, failures):
        self.failures = dict(failures)
        names = ", ".join(self.failures)
        super().__init__(f"Failed to upgrade {len(self.failures)} package(s): {names}")


class PackageNotFoundError(AipManError):
    """Custom exception for when a package cannot be found in the catalog."""
    pass


class VersionParseError(ValueError):
    """Custom exception for version strings that cannot be compared."""
    pass
