from __future__ import annotations

import json

import pytest
from conformctl.checks.model import CheckResult, CheckRunReport, DocumentError, Violation
from conformctl.checks.registry import get_check, list_checks
from conformctl.checks.runner import DocumentSource, run_checks
from conformctl.cli.output import error_payload, render_error
from conformctl.contracts.catalog import SCHEMA_FILES, packaged_schemas, schema_path_for
from conformctl.contracts.ids import CHECK_RUN, ERROR, SETTINGS
from conformctl.contracts.validate import validate
from conformctl.core.errors import ScriptError
from conformctl.core.exit_codes import ERR_VALIDATION
from conformctl.reporting.report import build_report_payload, render_explain, render_json, render_list, render_text

FAILING_ROW = CheckResult(
    id="checks_changelog_body_case",
    document="CHANGELOG.md",
    domain="changelog",
    status="fail",
    violations=(Violation(code="ENTRY_BODY_LOWERCASE", message="entry body must not start with a lower case letter", path="CHANGELOG.md", line=4, hint="capitalize"),),
    result_code="ENTRY_BODY_LOWERCASE",
)
PASSING_ROW = CheckResult(id="checks_changelog_issue_url", document="CHANGELOG.md", domain="changelog", status="pass")


def test_payload_validates_against_contract() -> None:
    report = run_checks([DocumentSource("CHANGELOG.md", "* fix it\n", "changelog")])
    payload = build_report_payload(report, run_id="r1")
    assert payload["schema_name"] == CHECK_RUN
    assert payload["run_id"] == "r1"
    assert payload["status"] == "ok"
    assert payload["passed"] is False
    assert {row["status"] for row in payload["rows"]} <= {"PASS", "FAIL"}
    assert json.loads(render_json(payload)) == payload


def test_payload_records_document_errors() -> None:
    report = CheckRunReport(errors=(DocumentError(document="a.yml", message="a.yml: invalid YAML", line=2),), documents=("a.yml",))
    payload = build_report_payload(report)
    assert payload["status"] == "error"
    assert payload["errors"] == [{"document": "a.yml", "kind": "parse_error", "message": "a.yml: invalid YAML", "line": 2}]
    assert payload["summary"]["errors"] == 1


def test_render_text_lists_failures_and_summary() -> None:
    payload = build_report_payload(CheckRunReport(rows=(FAILING_ROW, PASSING_ROW), documents=("CHANGELOG.md",)))
    text = render_text(payload)
    lines = text.splitlines()
    assert lines[0] == "FAIL checks_changelog_body_case CHANGELOG.md"
    assert lines[1] == "  CHANGELOG.md:4: entry body must not start with a lower case letter"
    assert lines[-2] == "summary: documents=1 passed=1 failed=1 errors=0 violations=1 total=2"
    assert lines[-1] == "FAIL"


def test_render_text_verbose_and_quiet() -> None:
    payload = build_report_payload(CheckRunReport(rows=(FAILING_ROW, PASSING_ROW), documents=("CHANGELOG.md",)))
    verbose = render_text(payload, verbose=True)
    assert "PASS checks_changelog_issue_url CHANGELOG.md" in verbose
    assert "    hint: capitalize" in verbose
    assert render_text(payload, quiet=True) == "FAIL checks_changelog_body_case CHANGELOG.md"
    clean = build_report_payload(CheckRunReport(rows=(PASSING_ROW,), documents=("CHANGELOG.md",)))
    assert render_text(clean, quiet=True) == "PASS"
    assert render_text(clean).splitlines()[-1] == "PASS"


def test_list_and_explain_payloads() -> None:
    listed = json.loads(render_list(list_checks(), as_json=True))
    assert [row["id"] for row in listed["checks"]] == [check.id for check in list_checks()]
    text = render_list(list_checks(), as_json=False)
    assert text.splitlines()[0].startswith("checks_changelog_body_case\t")
    explained = json.loads(render_explain(get_check("checks_changelog_fragment_name")))
    assert explained["check"]["applies_to"] == ["fragment"]
    assert explained["check"]["result_code"] == "FRAGMENT_NAME"


def test_catalog_resolves_packaged_schemas() -> None:
    assert set(SCHEMA_FILES) == {CHECK_RUN, ERROR, SETTINGS}
    assert all(path.is_file() for path in packaged_schemas().values())
    assert schema_path_for(CHECK_RUN).is_file()
    with pytest.raises(ScriptError) as excinfo:
        schema_path_for("conformctl.unknown.v1")
    assert excinfo.value.code == ERR_VALIDATION


def test_contract_rejects_malformed_payload() -> None:
    payload = build_report_payload(CheckRunReport(rows=(PASSING_ROW,)))
    payload["rows"][0]["status"] = "MAYBE"
    with pytest.raises(ScriptError, match="rows/0/status"):
        validate(CHECK_RUN, payload)


def test_error_envelope_validates_against_contract() -> None:
    payload = error_payload(message="unknown check id", code=2, kind="usage_error", run_id="r1")
    assert payload["schema_name"] == ERROR
    validate(ERROR, payload)
    assert json.loads(render_error(as_json=True, message="boom", code=99, run_id="r1"))["errors"] == [
        {"code": 99, "kind": "generic_error", "message": "boom"}
    ]
    assert render_error(as_json=False, message="boom", code=99) == "boom"
    with pytest.raises(ScriptError, match="errors/0/code"):
        error_payload(message="not an error", code=0)


def test_contract_has_no_skipped_status() -> None:
    payload = build_report_payload(CheckRunReport(rows=(PASSING_ROW,)))
    payload["rows"][0]["status"] = "SKIP"
    with pytest.raises(ScriptError):
        validate(CHECK_RUN, payload)
