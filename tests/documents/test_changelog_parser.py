from __future__ import annotations

from pathlib import Path

import pytest
from conformctl.documents.changelog import (
    DocumentKind,
    LineKind,
    classify_line,
    load_changelog,
    parse_changelog,
    split_lines,
)
from helpers import GOOD_CHANGELOG, write


@pytest.mark.parametrize(
    ("text", "kind"),
    [
        ("# Change log", LineKind.HEADER),
        ("### Bug fixes", LineKind.HEADER),
        ("", LineKind.BLANK),
        ("* Fix it.", LineKind.ENTRY),
        ("*Fix it.", LineKind.ENTRY),
        ("[@alice]: https://github.com/alice", LineKind.CONTRIBUTOR_REF),
        ("some prose", LineKind.OTHER),
        (" * indented", LineKind.OTHER),
    ],
)
def test_classify_line(text: str, kind: LineKind) -> None:
    assert classify_line(text) == kind


def test_split_lines_drops_terminators_only() -> None:
    assert split_lines("a\r\nb\n") == ["a", "b"]
    assert split_lines("a\n\nb") == ["a", "", "b"]
    assert split_lines("") == []


def test_parse_changelog_collects_entries_issues_and_contributors() -> None:
    doc = parse_changelog(GOOD_CHANGELOG, "CHANGELOG.md")
    assert doc.kind == DocumentKind.CHANGELOG
    assert doc.name == "CHANGELOG.md"
    assert [entry.line for entry in doc.entries] == [7, 11, 15]
    first, second, third = doc.entries
    assert first.issue is not None
    assert (first.issue.number, first.issue.digits) == ("#12", "12")
    assert first.issue.url == "https://github.com/rubocop/rubocop-rails/pull/12"
    assert first.contributors == ("alice",)
    assert second.contributors == ("bob", "alice")
    assert third.issue is None
    assert third.contributors == ()


def test_reference_block_starts_at_first_contributor_line() -> None:
    doc = parse_changelog(GOOD_CHANGELOG, "CHANGELOG.md")
    assert [line.number for line in doc.reference_lines] == [17, 18]
    assert all(not line.in_reference_block for line in doc.body_lines)
    assert [(item.name, item.line) for item in doc.contributor_definitions] == [("@alice", 17), ("@bob", 18)]


def test_entry_without_contributor_definition_line() -> None:
    doc = parse_changelog("* Fix the thing.\n[@alice][]\n\n[@alice]: https://example.com/alice\n")
    assert [entry.text for entry in doc.entries] == ["* Fix the thing."]
    assert [(item.name, item.target) for item in doc.definitions] == [("@alice", "https://example.com/alice")]
    assert [line.number for line in doc.reference_lines] == [2, 3, 4]


def test_entries_before_header() -> None:
    doc = parse_changelog(GOOD_CHANGELOG, "CHANGELOG.md")
    assert [entry.line for entry in doc.entries_before("## 0.1.0")] == [7, 11]
    assert doc.entries_before("## missing") == doc.entries


def test_load_changelog_as_fragment(tmp_path: Path) -> None:
    path = write(tmp_path / "changelog" / "fix_thing.md", "* Fix the thing. ([@alice][])\n")
    doc = load_changelog(path, "fragment")
    assert doc.kind == DocumentKind.FRAGMENT
    assert doc.name == "fix_thing.md"
    assert doc.entries[0].contributors == ("alice",)


def test_entry_collects_chained_issue_links() -> None:
    doc = parse_changelog("* [#1](https://x/issues/1), [#2](https://x/pull/2): Fix. [#9](https://x/issues/9)\n")
    entry = doc.entries[0]
    assert [issue.number for issue in entry.issues] == ["#1", "#2"]
    assert entry.issue is entry.issues[0]
    assert entry.issues[0].start == 2
    assert entry.text[entry.issues[-1].end :].startswith(": Fix.")
