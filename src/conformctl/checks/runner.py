from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from ..core.context import RunContext
from ..core.errors import DocumentParseError, ScriptError
from ..core.exit_codes import ERR_CONFIG
from ..core.logging import log_debug
from ..core.settings import DEFAULT_SETTINGS, Settings
from ..documents.changelog import DocumentKind, parse_changelog
from ..documents.loader import load_document
from ..registry.names import DocumentNameRegistry, NameRegistry
from .model import (
    ChangelogCheckContext,
    CheckContext,
    CheckDef,
    CheckResult,
    CheckRunReport,
    CheckStatus,
    ConfigCheckContext,
    DocumentError,
    Violation,
)
from .registry import list_checks

CONFIG = "config"


@dataclass(frozen=True)
class DocumentSource:
    document_id: str
    text: str
    kind: str = CONFIG

    def __post_init__(self) -> None:
        if self.kind != CONFIG:
            object.__setattr__(self, "kind", DocumentKind(self.kind).value)

    @classmethod
    def from_path(cls, path: Path, kind: str = CONFIG) -> "DocumentSource":
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ScriptError(f"document not found: {path}", ERR_CONFIG, "config_error") from exc
        return cls(document_id=path.as_posix(), text=text, kind=kind)


def collect_sources(
    config: Path | None = None,
    changelog: Path | None = None,
    fragments_dir: Path | None = None,
) -> list[DocumentSource]:
    sources: list[DocumentSource] = []
    if config is not None:
        sources.append(DocumentSource.from_path(config, CONFIG))
    if changelog is not None:
        sources.append(DocumentSource.from_path(changelog, DocumentKind.CHANGELOG.value))
    if fragments_dir is not None:
        if not fragments_dir.is_dir():
            raise ScriptError(f"fragments directory not found: {fragments_dir}", ERR_CONFIG, "config_error")
        for path in sorted(fragments_dir.glob("*.md")):
            sources.append(DocumentSource.from_path(path, DocumentKind.FRAGMENT.value))
    return sources


def _run_single_check(check: CheckDef, ctx: CheckContext, document_id: str) -> CheckResult:
    started = time.perf_counter()
    try:
        violations: list[Violation] = check.run(ctx)
    except Exception as exc:
        duration_ms = int((time.perf_counter() - started) * 1000)
        return CheckResult(
            id=check.id,
            document=document_id,
            domain=str(check.domain),
            status=CheckStatus.ERROR,
            result_code=str(check.result_code),
            fix_hint=check.fix_hint,
            duration_ms=duration_ms,
            errors=(f"{exc.__class__.__name__}: {exc}",),
        )
    duration_ms = int((time.perf_counter() - started) * 1000)
    return CheckResult(
        id=check.id,
        document=document_id,
        domain=str(check.domain),
        status=CheckStatus.FAIL if violations else CheckStatus.PASS,
        violations=tuple(violations),
        result_code=str(check.result_code),
        fix_hint=check.fix_hint,
        duration_ms=duration_ms,
    )


def _build_context(source: DocumentSource, registry: NameRegistry | None, settings: Settings) -> CheckContext:
    if source.kind == CONFIG:
        document = load_document(source.text, source.document_id)
        names = registry if registry is not None else DocumentNameRegistry(document, settings.structural_keys)
        return ConfigCheckContext(document=document, registry=names, settings=settings)
    return ChangelogCheckContext(document=parse_changelog(source.text, source.document_id, source.kind), settings=settings)


def validate_source(
    source: DocumentSource,
    checks: Sequence[CheckDef],
    *,
    registry: NameRegistry | None = None,
    settings: Settings = DEFAULT_SETTINGS,
    run_ctx: RunContext | None = None,
) -> tuple[list[CheckResult], DocumentError | None]:
    """Run every applicable check over one document; a parse failure yields a `DocumentError`."""
    log_debug(run_ctx, "runner", "document.start", document=source.document_id, kind=source.kind)
    try:
        ctx = _build_context(source, registry, settings)
    except DocumentParseError as exc:
        log_debug(run_ctx, "runner", "document.parse_error", document=source.document_id)
        return [], DocumentError(document=source.document_id, message=str(exc), kind=exc.kind, line=exc.line)
    kind = None if source.kind == CONFIG else DocumentKind(source.kind)
    rows = [_run_single_check(check, ctx, source.document_id) for check in checks if check.applies(kind)]
    log_debug(
        run_ctx,
        "runner",
        "document.finish",
        document=source.document_id,
        checks=len(rows),
        violations=sum(len(row.violations) for row in rows),
    )
    return rows, None


def run_checks(
    sources: Iterable[DocumentSource],
    *,
    checks: Sequence[CheckDef] | None = None,
    registry: NameRegistry | None = None,
    settings: Settings = DEFAULT_SETTINGS,
    jobs: int = 1,
    run_ctx: RunContext | None = None,
) -> CheckRunReport:
    selected = tuple(checks) if checks is not None else list_checks()
    items = list(sources)
    started = time.perf_counter()

    def _validate(source: DocumentSource) -> tuple[list[CheckResult], DocumentError | None]:
        return validate_source(source, selected, registry=registry, settings=settings, run_ctx=run_ctx)

    if jobs > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            outcomes = list(pool.map(_validate, items))
    else:
        outcomes = [_validate(source) for source in items]

    rows: list[CheckResult] = []
    errors: list[DocumentError] = []
    for source_rows, error in outcomes:
        rows.extend(source_rows)
        if error is not None:
            errors.append(error)
    total_duration = int((time.perf_counter() - started) * 1000)
    return CheckRunReport(
        rows=tuple(rows),
        errors=tuple(errors),
        documents=tuple(source.document_id for source in items),
        timings={"duration_ms": total_duration},
    )


__all__ = ["DocumentSource", "collect_sources", "run_checks", "validate_source"]
