"""The fixed set of payload contracts conformctl emits or reads."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Mapping

from ..core.errors import ScriptError
from ..core.exit_codes import ERR_VALIDATION
from .ids import CHECK_RUN, ERROR, SETTINGS
from .schemas import schemas_root

SCHEMA_FILES: Mapping[str, str] = {name: f"{name}.schema.json" for name in (CHECK_RUN, ERROR, SETTINGS)}


@lru_cache(maxsize=None)
def packaged_schemas() -> dict[str, Path]:
    """Resolve every contract to its packaged file; a missing file is a broken install."""
    root = schemas_root()
    paths = {name: root / file_name for name, file_name in SCHEMA_FILES.items()}
    missing = sorted(name for name, path in paths.items() if not path.is_file())
    if missing:
        raise ScriptError(f"packaged schemas missing: {', '.join(missing)}", ERR_VALIDATION)
    return paths


def schema_path_for(schema_name: str) -> Path:
    path = packaged_schemas().get(schema_name)
    if path is None:
        raise ScriptError(f"unknown schema: {schema_name}", ERR_VALIDATION)
    return path


__all__ = ["SCHEMA_FILES", "packaged_schemas", "schema_path_for"]
