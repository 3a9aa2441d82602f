from __future__ import annotations

from pathlib import Path

import pytest
from conformctl.checks.model import CheckDef, CheckStatus
from conformctl.checks.registry import select_checks
from conformctl.checks.runner import DocumentSource, collect_sources, run_checks, validate_source
from conformctl.core.errors import ScriptError
from conformctl.core.exit_codes import ERR_CONFIG
from conformctl.registry.names import StaticNameRegistry
from helpers import GOOD_CHANGELOG, GOOD_CONFIG, write


def test_good_documents_pass(project_root: Path) -> None:
    config = write(project_root / "config" / "default.yml", GOOD_CONFIG)
    changelog = write(project_root / "CHANGELOG.md", GOOD_CHANGELOG)
    write(project_root / "changelog" / "fix_thing.md", "* Fix the thing. ([@alice][])\n")
    sources = collect_sources(config, changelog, project_root / "changelog")
    assert [source.kind for source in sources] == ["config", "changelog", "fragment"]
    report = run_checks(sources)
    assert report.passed
    assert report.summary["documents"] == 3
    assert report.summary["failed"] == 0
    assert {row.domain for row in report.rows} == {"config", "changelog"}


def test_parse_error_is_isolated_to_its_document() -> None:
    sources = [
        DocumentSource("broken.yml", "Rails/A: [\n"),
        DocumentSource("CHANGELOG.md", GOOD_CHANGELOG, "changelog"),
    ]
    report = run_checks(sources)
    assert [(err.document, err.kind) for err in report.errors] == [("broken.yml", "parse_error")]
    assert report.status == "error"
    assert {row.document for row in report.rows} == {"CHANGELOG.md"}
    assert all(row.status == CheckStatus.PASS for row in report.rows)


def test_validate_source_uses_explicit_registry() -> None:
    source = DocumentSource("default.yml", "Rails/A:\n  Description: Checks.\n  VersionAdded: '1.0'\n")
    rows, error = validate_source(source, select_checks(("checks_config_entries_configured",)), registry=StaticNameRegistry(("Rails/A", "Rails/B")))
    assert error is None
    assert [item.code for row in rows for item in row.violations] == ["ENTRY_CONFIG_MISSING"]


def test_parallel_run_matches_serial() -> None:
    sources = [DocumentSource(f"frag{idx}.md", "* fix it\n", "fragment") for idx in range(4)]
    serial = run_checks(sources, jobs=1)
    parallel = run_checks(sources, jobs=3)
    assert [row.canonical_key for row in serial.rows] == [row.canonical_key for row in parallel.rows]
    assert serial.summary["violations"] == parallel.summary["violations"] > 0


def test_crashing_check_becomes_error_row() -> None:
    def _boom(ctx: object) -> list:
        raise RuntimeError("boom")

    check = CheckDef("checks_changelog_boom_case", "changelog", "crashes", _boom, "BOOM")
    report = run_checks([DocumentSource("CHANGELOG.md", "* Fix.\n", "changelog")], checks=(check,))
    assert report.rows[0].status == CheckStatus.ERROR
    assert report.rows[0].errors == ("RuntimeError: boom",)
    assert report.status == "error"


def test_missing_inputs_are_config_errors(tmp_path: Path) -> None:
    with pytest.raises(ScriptError) as excinfo:
        collect_sources(config=tmp_path / "missing.yml")
    assert excinfo.value.code == ERR_CONFIG
    with pytest.raises(ScriptError):
        collect_sources(fragments_dir=tmp_path / "nowhere")


def test_unknown_document_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        DocumentSource("x.md", "", "readme")
