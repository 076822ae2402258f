"""Configuration loading.

Configuration comes from three layers, in increasing precedence:
1. An optional TOML file with an [aur-publish] table
2. Environment variables (the INPUT_* names a GitHub Action receives)
3. Command-line options

Layers 2 and 3 are resolved by click (each option declares its envvar), so
this module only reads the file and merges the layers into one frozen
PublishConfig.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError
from .models import PublishConfig

TABLE = "aur-publish"


def load_config_file(path: Path) -> dict[str, Any]:
    """Read the [aur-publish] table from a TOML file.

    Keys may use hyphens or underscores ("package-name" or "package_name").
    A file without the table yields an empty dict.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    try:
        doc = tomlkit.parse(path.read_text())
    except (OSError, TOMLKitError) as exc:
        raise ConfigError(f"Cannot load config file {path}: {exc}") from exc

    table = doc.get(TABLE)
    if table is None:
        return {}
    if not isinstance(table, Mapping):
        raise ConfigError(f"[{TABLE}] in {path} must be a table")
    return {str(k).replace("-", "_"): v for k, v in table.unwrap().items()}


def build_config(
    file_values: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> PublishConfig:
    """Merge config layers into a PublishConfig.

    Overrides whose value is None were not given and do not mask the file.

    Raises:
        ConfigError: If the merged values fail validation.
    """
    values: dict[str, Any] = dict(file_values or {})
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    try:
        return PublishConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration:\n{exc}") from exc
