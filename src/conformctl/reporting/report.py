from __future__ import annotations

import json
from typing import Any, Iterable

from .. import __version__
from ..checks.model import CheckDef, CheckResult, CheckRunReport, Violation
from ..contracts.ids import CHECK_RUN
from ..contracts.validate import validate_self


def violation_row(item: Violation) -> dict[str, Any]:
    return {
        "code": str(item.code),
        "message": item.message,
        "hint": item.hint,
        "path": item.path,
        "line": item.line,
        "column": item.column,
        "severity": str(item.severity),
    }


def results_as_rows(results: Iterable[CheckResult]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for result in sorted(results, key=lambda row: row.canonical_key):
        rows.append(
            {
                "id": result.id,
                "document": result.document,
                "domain": result.domain,
                "status": str(result.status).upper(),
                "duration_ms": int(result.duration_ms),
                "result_code": result.result_code,
                "violations": [violation_row(item) for item in result.violations],
                "errors": list(result.errors),
                "hint": result.fix_hint,
            }
        )
    return rows


def build_report_payload(report: CheckRunReport, *, run_id: str = "") -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_name": CHECK_RUN,
        "schema_version": 1,
        "tool": "conformctl",
        "tool_version": __version__,
        "kind": "check-run",
        "run_id": run_id,
        "status": report.status,
        "passed": report.passed,
        "summary": dict(report.summary),
        "timings": dict(report.timings),
        "documents": list(report.documents),
        "rows": results_as_rows(report.rows),
        "violations": [violation_row(item) for item in report.violations],
        "errors": [
            {"document": err.document, "kind": err.kind, "message": err.message, "line": err.line}
            for err in report.errors
        ],
    }
    return validate_self(CHECK_RUN, payload)


def render_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True)


def _location(row: dict[str, Any]) -> str:
    path = str(row.get("path", ""))
    line = int(row.get("line", 0))
    if not path:
        return ""
    return f"{path}:{line}: " if line else f"{path}: "


def render_text(payload: dict[str, Any], *, quiet: bool = False, verbose: bool = False) -> str:
    out: list[str] = []
    for err in payload.get("errors", []):
        out.append(f"ERROR {err['document']}: {err['message']}")
    rows = payload.get("rows", [])
    for row in rows:
        status = row.get("status", "UNKNOWN")
        if status == "ERROR":
            out.append(f"ERROR {row['id']} {row['document']}: {'; '.join(row.get('errors', []))}")
            continue
        if status != "FAIL":
            if verbose:
                out.append(f"{status} {row['id']} {row['document']} ({int(row.get('duration_ms', 0))}ms)")
            continue
        if quiet:
            out.append(f"FAIL {row['id']} {row['document']}")
            continue
        out.append(f"FAIL {row['id']} {row['document']}")
        for item in row.get("violations", []):
            out.append(f"  {_location(item)}{item['message']}")
            if verbose and item.get("hint"):
                out.append(f"    hint: {item['hint']}")
    if quiet:
        return "\n".join(out) if out else "PASS"
    summary = payload.get("summary", {})
    out.append(
        f"summary: documents={int(summary.get('documents', 0))} passed={int(summary.get('passed', 0))} "
        f"failed={int(summary.get('failed', 0))} errors={int(summary.get('errors', 0))} "
        f"violations={int(summary.get('violations', 0))} total={int(summary.get('total', 0))}"
    )
    out.append("PASS" if payload.get("passed") else "FAIL")
    return "\n".join(out)


def check_row(check: CheckDef) -> dict[str, Any]:
    return {
        "id": check.id,
        "domain": str(check.domain),
        "description": check.description,
        "result_code": str(check.result_code),
        "applies_to": [kind.value for kind in check.applies_to],
        "hint": check.fix_hint,
    }


def render_list(checks: Iterable[CheckDef], *, as_json: bool) -> str:
    rows = [check_row(check) for check in checks]
    if as_json:
        return json.dumps({"schema_version": 1, "tool": "conformctl", "status": "ok", "checks": rows}, sort_keys=True)
    return "\n".join(f"{row['id']}\t{row['description']}" for row in rows)


def render_explain(check: CheckDef) -> str:
    payload = {"schema_version": 1, "tool": "conformctl", "status": "ok", "check": check_row(check)}
    return json.dumps(payload, sort_keys=True)


__all__ = [
    "build_report_payload",
    "check_row",
    "render_explain",
    "render_json",
    "render_list",
    "render_text",
    "results_as_rows",
    "violation_row",
]
