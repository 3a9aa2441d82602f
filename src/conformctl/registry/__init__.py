from __future__ import annotations

from .names import (
    DocumentNameRegistry,
    NameRegistry,
    StaticNameRegistry,
    group_of,
    load_names_file,
)

__all__ = [
    "DocumentNameRegistry",
    "NameRegistry",
    "StaticNameRegistry",
    "group_of",
    "load_names_file",
]
