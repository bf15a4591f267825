from __future__ import annotations

import argparse
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError, field_validator

from ouilookup.records import validate_delimiter

DEFAULT_REGISTRY_PATH = Path.home() / ".local" / "share" / "oui" / "IEEE_OUI.csv"


class RegistrySettings(BaseModel):
    path: Path = DEFAULT_REGISTRY_PATH
    strict: bool = True
    delimiter: Optional[str] = None

    @field_validator("path")
    @classmethod
    def _expand(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("delimiter")
    @classmethod
    def _single_char(cls, value: Optional[str]) -> Optional[str]:
        return validate_delimiter(value)


def load_config() -> Dict[str, Any]:
    """
    Load configuration from:
    1. ~/.ouilookup.toml
    2. ./ouilookup.toml

    Later files override earlier ones.
    """
    paths = [
        Path.home() / ".ouilookup.toml",
        Path("ouilookup.toml"),
    ]

    config: Dict[str, Any] = {}
    for path in paths:
        if path.exists():
            try:
                with path.open("rb") as f:
                    data = tomllib.load(f)
                _deep_update(config, data)
            except (OSError, tomllib.TOMLDecodeError) as e:
                print(f"warning: failed to load config {path}: {e}", file=sys.stderr)

    return config


def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and key in target and isinstance(target[key], dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


def registry_settings(config: Dict[str, Any]) -> RegistrySettings:
    """Validate the ``[registry]`` table, falling back to defaults."""
    section = config.get("registry", {})
    try:
        return RegistrySettings(**section)
    except ValidationError as e:
        print(f"warning: invalid [registry] config, using defaults: {e}", file=sys.stderr)
        return RegistrySettings()


def apply_config(parser: argparse.ArgumentParser, config: Dict[str, Any]) -> None:
    """
    Apply the ``[registry]`` table to the global parser defaults.

    Example config:
    [registry]
    path = "~/oui/IEEE_OUI.csv"
    strict = false

    ``strict = false`` becomes ``--lenient``.  An unusable delimiter is
    reported and ignored.  Subcommand sections are read by the CLI when it
    builds each subparser (see :func:`section_defaults`).
    """
    defaults: Dict[str, Any] = {}

    registry = config.get("registry", {})
    if "path" in registry:
        defaults["registry"] = str(Path(registry["path"]).expanduser())
    if "strict" in registry:
        defaults["lenient"] = not registry["strict"]
    if "delimiter" in registry:
        try:
            defaults["delimiter"] = validate_delimiter(registry["delimiter"])
        except ValueError as e:
            print(f"warning: ignoring [registry] delimiter: {e}", file=sys.stderr)

    parser.set_defaults(**defaults)


def section_defaults(config: Dict[str, Any], section: str, *keys: str) -> Dict[str, Any]:
    """Pick ``keys`` out of one config section, e.g. ``[web]`` host/port."""
    values = config.get(section, {})
    if not isinstance(values, dict):
        return {}
    return {key: values[key] for key in keys if key in values}
