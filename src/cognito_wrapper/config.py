"""Helpers for loading suite settings from testsettings.json.

Configuration hierarchy:
- `testsettings.json` holds the base values (required)
- `testsettings.local.json` is a local override layer (optional, not
  required to contain every key)

Files are looked up in TESTSETTINGS_DIR when set, else the current working
directory.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

BASE_SETTINGS_FILE = "testsettings.json"
LOCAL_SETTINGS_FILE = "testsettings.local.json"


class ConfigError(Exception):
    """Raised when the settings files cannot be read or parsed."""
    pass


@dataclass(frozen=True)
class SuiteSettings:
    """Immutable view over the merged settings files.

    Missing keys are not validated here; they come back as None and surface
    only in the step that needs them.
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    sources: Tuple[Path, ...] = ()

    def __post_init__(self):
        # Read-only copy of the merged values
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, key: str, fallback: Any = None) -> Any:
        return self.values.get(key, fallback)

    @property
    def user_name(self) -> Optional[str]:
        return self.values.get("UserName")

    @property
    def email(self) -> Optional[str]:
        return self.values.get("Email")

    @property
    def password(self) -> Optional[str]:
        return self.values.get("Password")

    @property
    def client_id(self) -> Optional[str]:
        return self.values.get("ClientId")

    @property
    def user_pool_id(self) -> Optional[str]:
        return self.values.get("UserPoolId")

    @property
    def region(self) -> Optional[str]:
        return self.values.get("Region")

    @property
    def mfa_secret(self) -> Optional[str]:
        return self.values.get("MfaSecret")


def settings_dir() -> Path:
    """Directory holding the settings files."""
    override = os.environ.get("TESTSETTINGS_DIR")
    if override:
        return Path(override)
    return Path.cwd()


def load_settings(directory: Path | str | None = None) -> SuiteSettings:
    """Load the base settings file, then overlay the local file if present.

    Raises:
        ConfigError: If the base file is missing, or either file is unreadable
            or not a JSON object
    """
    directory = Path(directory) if directory is not None else settings_dir()

    base_path = directory / BASE_SETTINGS_FILE
    if not base_path.exists():
        raise ConfigError(f"Settings file not found: {base_path}")

    merged: Dict[str, Any] = {}
    sources = [base_path]
    merged.update(_read_json(base_path))

    local_path = directory / LOCAL_SETTINGS_FILE
    if local_path.exists():
        merged.update(_read_json(local_path))
        sources.append(local_path)

    logger.info(f"Loaded settings from {', '.join(p.name for p in sources)}")
    return SuiteSettings(values=merged, sources=tuple(sources))


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Malformed settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")
    return data
