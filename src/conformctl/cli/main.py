from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .. import __version__
from ..checks.model import CheckStatus
from ..checks.registry import get_check, list_checks, select_checks
from ..checks.runner import collect_sources, run_checks
from ..core.context import RunContext
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_INTERNAL, ERR_PARSE, ERR_USAGE, ERR_VIOLATIONS, OK
from ..core.logging import log_event
from ..core.settings import load_settings
from ..registry.names import load_names_file
from ..reporting.report import build_report_payload, render_explain, render_json, render_list, render_text
from .output import render_error, resolve_output_format


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="conformctl", description="validate configuration metadata and changelog conventions")
    p.add_argument("--version", action="version", version=f"conformctl {__version__}")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--run-id", help="run identifier for logs and reports")
    p.add_argument("--log-json", action="store_true", help="emit structured log events as JSON")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit failures")
    sub = p.add_subparsers(dest="cmd", required=True)

    check_p = sub.add_parser("check", help="validate documents")
    check_p.add_argument("--config", type=Path, help="configuration YAML document")
    check_p.add_argument("--changelog", type=Path, help="main changelog document")
    check_p.add_argument("--fragments", type=Path, help="directory of unreleased changelog fragments (*.md)")
    check_p.add_argument("--names", type=Path, help="entry names file, one per line (default: derived from --config)")
    check_p.add_argument("--settings", type=Path, help="settings TOML file with a [conformctl] table")
    check_p.add_argument("--select", action="append", default=[], help="check id glob; repeatable")
    check_p.add_argument("--jobs", type=int, default=1, help="validate documents in parallel")
    check_p.add_argument("--out-file", type=Path, help="also write the JSON report to this path")

    list_p = sub.add_parser("list", help="list registered checks")
    list_p.add_argument("--domain", choices=["config", "changelog"], default="", help="filter by domain")

    explain_p = sub.add_parser("explain", help="describe one check")
    explain_p.add_argument("check_id")

    sub.add_parser("version", help="print version")
    return p


def _run_check_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    if ns.config is None and ns.changelog is None and ns.fragments is None:
        raise ScriptError("nothing to validate: pass --config, --changelog or --fragments", ERR_USAGE, "usage_error")
    if ns.jobs < 1:
        raise ScriptError("--jobs must be >= 1", ERR_USAGE, "usage_error")
    settings = load_settings(ns.settings)
    registry = load_names_file(ns.names) if ns.names is not None else None
    checks = select_checks(tuple(ns.select))
    sources = collect_sources(ns.config, ns.changelog, ns.fragments)
    if ctx.verbose:
        log_event(ctx, "info", "cli", "check.start", documents=len(sources), checks=len(checks), jobs=ns.jobs)
    report = run_checks(sources, checks=checks, registry=registry, settings=settings, jobs=ns.jobs, run_ctx=ctx)
    payload = build_report_payload(report, run_id=ctx.run_id)
    if ns.out_file is not None:
        ns.out_file.parent.mkdir(parents=True, exist_ok=True)
        ns.out_file.write_text(render_json(payload) + "\n", encoding="utf-8")
    if ctx.output_format == "json":
        print(render_json(payload))
    else:
        print(render_text(payload, quiet=ctx.quiet, verbose=ctx.verbose))
    if ctx.verbose:
        log_event(ctx, "info", "cli", "check.finish", ok=report.passed, **dict(report.summary))
    if report.errors:
        return ERR_PARSE
    if any(row.status == CheckStatus.ERROR for row in report.rows):
        return ERR_INTERNAL
    return OK if report.passed else ERR_VIOLATIONS


def dispatch_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    as_json = ctx.output_format == "json"
    if ns.cmd == "check":
        return _run_check_command(ctx, ns)
    if ns.cmd == "list":
        print(render_list(select_checks(domain=ns.domain) if ns.domain else list_checks(), as_json=as_json))
        return OK
    if ns.cmd == "explain":
        try:
            check = get_check(ns.check_id)
        except KeyError as exc:
            raise ScriptError(f"unknown check id `{ns.check_id}`", ERR_USAGE, "usage_error") from exc
        print(render_explain(check))
        return OK
    if ns.cmd == "version":
        payload = {"schema_version": 1, "tool": "conformctl", "status": "ok", "version": __version__}
        print(json.dumps(payload, sort_keys=True) if as_json else f"conformctl {__version__}")
        return OK
    raise ScriptError(f"unknown command `{ns.cmd}`", ERR_USAGE, "usage_error")


def main(argv: list[str] | None = None) -> int:
    raw_argv = argv if argv is not None else sys.argv[1:]
    ns = build_parser().parse_args(raw_argv)
    fmt = resolve_output_format(cli_json=bool(ns.json), cli_format=ns.format)
    ctx = RunContext.from_args(ns.run_id, fmt, ns.verbose, ns.quiet, ns.log_json)  # type: ignore[arg-type]
    try:
        return dispatch_command(ctx, ns)
    except ScriptError as exc:
        print(render_error(as_json=fmt == "json", message=str(exc), code=exc.code, kind=exc.kind, run_id=ctx.run_id), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        log_event(ctx, "error", "cli", "internal_error", cmd=ns.cmd, error=str(exc))
        print(render_error(as_json=fmt == "json", message=f"internal error: {exc}", code=ERR_INTERNAL, run_id=ctx.run_id), file=sys.stderr)
        return ERR_INTERNAL


__all__ = ["build_parser", "dispatch_command", "main"]
