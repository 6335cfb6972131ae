"""Package records, as found in the catalog and in the installed manifest."""

import os
from dataclasses import dataclass

from colorama import Fore, Style  # type: ignore

from .version import is_upgradable_to


def check_path_component(field: str, value: str):
    """Raise ValueError unless value is safe to use as part of a single file name."""
    separators = {"/", "\0"} | {sep for sep in (os.sep, os.altsep) if sep}
    if any(sep in value for sep in separators) or value.startswith("."):
        raise ValueError(f"Package field '{field}' must not contain path separators or start with '.': {value!r}")


@dataclass(frozen=True)
class Package:
    name: str
    version: str
    description: str
    url: str
    compressed: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Package":
        """Build a package from one element of a catalog or manifest JSON array.

        Raises ValueError when a required field is missing or has the wrong type."""
        if not isinstance(data, dict):
            raise ValueError(f"Package entry must be an object, got {type(data).__name__}")

        required_fields = ["name", "version", "url"]
        for field in required_fields:
            if field not in data:
                raise ValueError(f"Package entry missing required field '{field}'")
            if not isinstance(data[field], str) or not data[field]:
                raise ValueError(f"Package field '{field}' must be a non-empty string")

        # name and version end up in a file name under the application directory
        for field in ("name", "version"):
            check_path_component(field, data[field])

        description = data.get("description", "")
        if not isinstance(description, str):
            raise ValueError("Package field 'description' must be a string")

        compressed = data.get("compressed", False)
        if not isinstance(compressed, bool):
            raise ValueError("Package field 'compressed' must be true or false")

        return cls(
            name=data["name"],
            version=data["version"],
            description=description,
            url=data["url"],
            compressed=compressed,
        )

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "url": self.url,
        }
        if self.compressed:
            data["compressed"] = True
        return data

    def artifact_name(self, extension: str) -> str:
        """File name of this package's bundle on disk. Always derived, never stored."""
        return f"{self.name}-{self.version}.{extension}"

    def upgradable_to(self, other: "Package", console=None) -> bool:
        """Check if another package is a newer version of this one."""
        return is_upgradable_to(self, other, console)

    def describe(self) -> str:
        lines = [
            f"{Fore.BLUE}Package:{Style.RESET_ALL}",
            f"| Name: {Fore.CYAN}{self.name}{Style.RESET_ALL}",
            f"| Description: {self.description}",
            f"| Version: {Fore.GREEN}{self.version}{Style.RESET_ALL}",
            f"| Url: {self.url}",
        ]
        if self.compressed:
            lines.append("| Compressed: yes")
        return "\n".join(lines)
