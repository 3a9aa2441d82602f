"""Validator settings loaded from a `[conformctl]` TOML table."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

from ..contracts.ids import SETTINGS
from ..contracts.validate import validate
from .errors import ScriptError, SettingsError

SETTINGS_ENV = "CONFORMCTL_SETTINGS"
SETTINGS_TABLE = "conformctl"


@dataclass(frozen=True)
class Settings:
    description_subject: str = "cop"
    version_sentinel: str = "<<next>>"
    structural_keys: tuple[str, ...] = ("inherit_mode", "AllCops")
    field_order_ignored_key: str = "inherit_mode"
    issue_host: str = "github.com"
    issue_org: str = "rubocop"
    issue_repo: str = "rubocop-rails"
    fragment_prefixes: tuple[str, ...] = ("new", "fix", "change")
    contributor_cutoff_header: str = ""
    supported_fields: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "structural_keys", tuple(str(k) for k in self.structural_keys))
        object.__setattr__(self, "fragment_prefixes", tuple(str(p) for p in self.fragment_prefixes))
        object.__setattr__(self, "supported_fields", dict(self.supported_fields))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Settings":
        try:
            validate(SETTINGS, dict(raw))
        except ScriptError as exc:
            raise SettingsError(str(exc)) from exc
        known = {f.name for f in fields(cls)}
        values = {key: (tuple(value) if isinstance(value, list) else value) for key, value in raw.items() if key in known}
        return replace(cls(), **values)


DEFAULT_SETTINGS = Settings()


def load_settings(path: Path | str | None = None) -> Settings:
    """Load settings from `path`, falling back to `$CONFORMCTL_SETTINGS`, then defaults."""
    raw_path = path or os.environ.get(SETTINGS_ENV, "")
    if not raw_path:
        return DEFAULT_SETTINGS
    settings_path = Path(raw_path)
    try:
        payload = tomllib.loads(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SettingsError(f"settings file not found: {settings_path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"{settings_path}: invalid TOML: {exc}") from exc
    table = payload.get(SETTINGS_TABLE, {})
    if not isinstance(table, dict):
        raise SettingsError(f"{settings_path}: `[{SETTINGS_TABLE}]` must be a table")
    return Settings.from_mapping(table)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_ENV", "Settings", "load_settings"]
