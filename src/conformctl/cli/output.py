"""CLI payload output helpers."""

from __future__ import annotations

import json
from typing import Any

from ..contracts.ids import ERROR
from ..contracts.validate import validate_self


def resolve_output_format(*, cli_json: bool, cli_format: str | None) -> str:
    if cli_json:
        return "json"
    return cli_format or "text"


def error_payload(*, message: str, code: int, kind: str = "generic_error", run_id: str = "") -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_name": ERROR,
        "schema_version": 1,
        "tool": "conformctl",
        "status": "error",
        "run_id": run_id,
        "errors": [{"code": code, "kind": kind, "message": message}],
    }
    return validate_self(ERROR, payload)


def render_error(*, as_json: bool, message: str, code: int, kind: str = "generic_error", run_id: str = "") -> str:
    if as_json:
        return json.dumps(error_payload(message=message, code=code, kind=kind, run_id=run_id), sort_keys=True)
    return message


__all__ = ["error_payload", "render_error", "resolve_output_format"]
