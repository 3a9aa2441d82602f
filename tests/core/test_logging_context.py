from __future__ import annotations

import json

import pytest
from conformctl.core.context import RunContext
from conformctl.core.errors import DocumentParseError, ScriptError
from conformctl.core.exit_codes import ERR_PARSE
from conformctl.core.logging import log_debug, log_event


def test_run_id_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RUN_ID", "env-run")
    assert RunContext.from_args(None).run_id == "env-run"
    assert RunContext.from_args("cli-run").run_id == "cli-run"


def test_run_id_default_shape(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RUN_ID", raising=False)
    assert RunContext.from_args(None).run_id.startswith("conform-")


def test_log_event_json(capsys: pytest.CaptureFixture[str]) -> None:
    ctx = RunContext(run_id="r1", log_json=True)
    log_event(ctx, "info", "cli", "check.start", documents=2)
    payload = json.loads(capsys.readouterr().err)
    assert payload["run_id"] == "r1"
    assert payload["component"] == "cli"
    assert payload["action"] == "check.start"
    assert payload["documents"] == 2


def test_log_event_key_value(capsys: pytest.CaptureFixture[str]) -> None:
    log_event(RunContext(run_id="r1"), "info", "runner", "document.finish", violations=3, checks=1)
    line = capsys.readouterr().err.strip()
    assert "run_id=r1 component=runner action=document.finish" in line
    assert line.endswith("checks=1 violations=3")


def test_log_debug_requires_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    log_debug(None, "runner", "skip")
    log_debug(RunContext(run_id="r1"), "runner", "skip")
    log_debug(RunContext(run_id="r1", verbose=True, quiet=True), "runner", "skip")
    assert capsys.readouterr().err == ""
    log_debug(RunContext(run_id="r1", verbose=True), "runner", "emit")
    assert "action=emit" in capsys.readouterr().err


def test_errors_carry_code_and_kind() -> None:
    err = DocumentParseError("bad yaml", document_id="a.yml", line=3)
    assert isinstance(err, ScriptError)
    assert (err.code, err.kind, err.document_id, err.line) == (ERR_PARSE, "parse_error", "a.yml", 3)
    assert str(err) == "bad yaml"
