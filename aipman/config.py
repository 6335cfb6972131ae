"""
Settings for aip-man.

Resolution order, later wins:
    1. built-in defaults
    2. YAML config file (~/.config/aip-man/config.yaml, or the path in AIPMAN_CONFIG)
    3. environment variables
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml  # type: ignore

from .catalog import DEFAULT_CATALOG_URL
from .errors import ConfigError
from .manifest import MANIFEST_NAME

DEFAULT_CONFIG_PATH = os.path.join("~", ".config", "aip-man", "config.yaml")

ENV_OVERRIDES = {
    "AIPMAN_HOME": "app_dir",
    "AIPMAN_REPO": "catalog_url",
    "AIPMAN_BACKUP": "backup_path",
    "AIPMAN_GH_TOKEN": "github_token",
    "AIPMAN_SENTRY_DSN": "sentry_dsn",
}


@dataclass(frozen=True)
class Settings:
    app_dir: Path
    backup_path: Path
    manifest_name: str = MANIFEST_NAME
    catalog_url: str = DEFAULT_CATALOG_URL
    artifact_extension: str = "AppImage"
    timeout: float = 30.0
    ask: bool = False
    github_token: Optional[str] = None
    sentry_dsn: Optional[str] = None

    @property
    def manifest_path(self) -> Path:
        return self.app_dir / self.manifest_name


def default_settings() -> Settings:
    home = Path(os.path.expanduser("~"))
    return Settings(app_dir=home / "Applications", backup_path=home / "aip-man-backup.tar.gz")


def _coerce(name: str, value):
    if name in ("app_dir", "backup_path"):
        return Path(os.path.expanduser(str(value))).resolve()
    if name == "timeout":
        try:
            timeout = float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"'timeout' must be a number, got {value!r}")
        if timeout <= 0:
            raise ConfigError("'timeout' must be positive")
        return timeout
    if name == "ask":
        if isinstance(value, bool):
            return value
        if str(value).lower() in ("1", "true", "yes", "on"):
            return True
        if str(value).lower() in ("0", "false", "no", "off"):
            return False
        raise ConfigError(f"'ask' must be true or false, got {value!r}")
    if value is None:
        return None
    return str(value)


def read_config_file(path) -> dict:
    """Read a YAML config file. A missing file is an empty config."""
    path = Path(os.path.expanduser(str(path)))
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    known = {field.name for field in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown setting(s) in {path}: {', '.join(unknown)}")
    return data


def load_settings(config_path=None, environ=None) -> Settings:
    environ = os.environ if environ is None else environ
    config_path = config_path or environ.get("AIPMAN_CONFIG") or DEFAULT_CONFIG_PATH

    overrides = {}
    for name, value in read_config_file(config_path).items():
        overrides[name] = _coerce(name, value)
    for variable, name in ENV_OVERRIDES.items():
        if environ.get(variable):
            overrides[name] = _coerce(name, environ[variable])

    return replace(default_settings(), **overrides)
