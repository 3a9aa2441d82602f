"""Entry-name registries consumed by the configuration checks."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol, runtime_checkable

from ..core.errors import ScriptError
from ..core.exit_codes import ERR_CONFIG
from ..documents.loader import ConfigDocument


@runtime_checkable
class NameRegistry(Protocol):
    def list_entries(self) -> tuple[str, ...]: ...

    def capability_group(self, name: str) -> str: ...


def group_of(name: str) -> str:
    return name.split("/", 1)[0] if "/" in name else ""


@dataclass(frozen=True)
class StaticNameRegistry:
    names: tuple[str, ...]

    def __post_init__(self) -> None:
        ordered: dict[str, None] = {}
        for name in self.names:
            value = str(name).strip()
            if value:
                ordered.setdefault(value, None)
        object.__setattr__(self, "names", tuple(ordered))

    def list_entries(self) -> tuple[str, ...]:
        return self.names

    def capability_group(self, name: str) -> str:
        if name not in self.names:
            raise KeyError(name)
        return group_of(name)

    def with_group(self, group: str) -> "StaticNameRegistry":
        return StaticNameRegistry(tuple(name for name in self.names if group_of(name) == group))


class DocumentNameRegistry(StaticNameRegistry):
    """Entries declared by a configuration document: namespaced top-level keys."""

    def __init__(self, document: ConfigDocument, structural_keys: Iterable[str] = ()) -> None:
        skip = set(structural_keys)
        super().__init__(tuple(key for key in document.top_level_keys() if "/" in key and key not in skip))


def load_names_file(path: Path) -> StaticNameRegistry:
    """Read one entry name per line; blank lines and `#` comments are ignored."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ScriptError(f"names file not found: {path}", ERR_CONFIG, "config_error") from exc
    names = [line.strip() for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]
    return StaticNameRegistry(tuple(names))


__all__ = ["DocumentNameRegistry", "NameRegistry", "StaticNameRegistry", "group_of", "load_names_file"]
