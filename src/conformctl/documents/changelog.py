"""Changelog parsing: one classification pass, then entries and link definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class LineKind(str, Enum):
    HEADER = "header"
    BLANK = "blank"
    ENTRY = "entry"
    CONTRIBUTOR_REF = "contributor_ref"
    OTHER = "other"


class DocumentKind(str, Enum):
    CHANGELOG = "changelog"
    FRAGMENT = "fragment"


ISSUE_LINK_RE = re.compile(r"\[(?P<number>[#\d]+)\]\((?P<url>[^)]+)\)")
ISSUE_RUN_SEPARATOR = ", "
CONTRIBUTOR_SUFFIX_RE = re.compile(r"\((?P<names>\[@\S+\]\[\](?:, \[@\S+\]\[\])*)\)$")
CONTRIBUTOR_NAME_RE = re.compile(r"\[@(?P<name>[^\]]+)\]\[\]")
LINK_DEFINITION_RE = re.compile(r"^\[(?P<name>[^\]]+)\]:\s*(?P<target>\S*)")
IMPLICIT_LINK_RE = re.compile(r"\[([^\]]+)\]\[\]")


def classify_line(text: str) -> LineKind:
    if text.startswith("[@"):
        return LineKind.CONTRIBUTOR_REF
    if text.startswith("#"):
        return LineKind.HEADER
    if text.startswith("*"):
        return LineKind.ENTRY
    if text == "":
        return LineKind.BLANK
    return LineKind.OTHER


def split_lines(text: str) -> list[str]:
    """Split on newlines only, dropping terminators and the empty tail after a final newline."""
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


@dataclass(frozen=True)
class ChangelogLine:
    number: int
    text: str
    kind: LineKind
    in_reference_block: bool = False


@dataclass(frozen=True)
class IssueReference:
    number: str
    url: str
    start: int
    end: int

    @property
    def digits(self) -> str:
        return re.sub(r"\D", "", self.number)


def _issue_run(text: str) -> tuple[IssueReference, ...]:
    """Return the first issue link and any links chained to it by `, `."""
    run: list[IssueReference] = []
    match = ISSUE_LINK_RE.search(text)
    while match:
        run.append(IssueReference(match.group("number"), match.group("url"), match.start(), match.end()))
        if not text.startswith(ISSUE_RUN_SEPARATOR, match.end()):
            break
        match = ISSUE_LINK_RE.match(text, match.end() + len(ISSUE_RUN_SEPARATOR))
    return tuple(run)


@dataclass(frozen=True)
class ChangelogEntry:
    text: str
    line: int
    issues: tuple[IssueReference, ...] = ()
    contributors: tuple[str, ...] = ()

    @property
    def issue(self) -> IssueReference | None:
        return self.issues[0] if self.issues else None

    @classmethod
    def from_line(cls, line: ChangelogLine) -> "ChangelogEntry":
        issues = _issue_run(line.text)
        suffix = CONTRIBUTOR_SUFFIX_RE.search(line.text)
        names = tuple(CONTRIBUTOR_NAME_RE.findall(suffix.group("names"))) if suffix else ()
        return cls(text=line.text, line=line.number, issues=issues, contributors=names)


@dataclass(frozen=True)
class LinkDefinition:
    name: str
    target: str
    line: int

    @property
    def is_contributor(self) -> bool:
        return self.name.startswith("@")


@dataclass(frozen=True)
class ChangelogDocument:
    document_id: str
    text: str
    kind: DocumentKind
    lines: tuple[ChangelogLine, ...]
    entries: tuple[ChangelogEntry, ...]
    definitions: tuple[LinkDefinition, ...]

    @property
    def name(self) -> str:
        return Path(self.document_id).name

    @property
    def body_lines(self) -> tuple[ChangelogLine, ...]:
        return tuple(line for line in self.lines if not line.in_reference_block)

    @property
    def reference_lines(self) -> tuple[ChangelogLine, ...]:
        return tuple(line for line in self.lines if line.in_reference_block)

    @property
    def contributor_definitions(self) -> tuple[LinkDefinition, ...]:
        return tuple(item for item in self.definitions if item.is_contributor)

    def entries_before(self, header: str) -> tuple[ChangelogEntry, ...]:
        """Return the entries above the first line starting with `header`."""
        cutoff = next((line.number for line in self.lines if line.kind == LineKind.HEADER and line.text.startswith(header)), None)
        if cutoff is None:
            return self.entries
        return tuple(entry for entry in self.entries if entry.line < cutoff)


def parse_changelog(text: str, document_id: str = "<memory>", kind: DocumentKind | str = DocumentKind.CHANGELOG) -> ChangelogDocument:
    lines: list[ChangelogLine] = []
    entries: list[ChangelogEntry] = []
    definitions: list[LinkDefinition] = []
    in_reference_block = False
    for number, raw in enumerate(split_lines(text), start=1):
        line_kind = classify_line(raw)
        if line_kind == LineKind.CONTRIBUTOR_REF:
            in_reference_block = True
        line = ChangelogLine(number=number, text=raw, kind=line_kind, in_reference_block=in_reference_block)
        lines.append(line)
        if line_kind == LineKind.ENTRY and not in_reference_block:
            entries.append(ChangelogEntry.from_line(line))
        definition = LINK_DEFINITION_RE.match(raw)
        if definition:
            definitions.append(LinkDefinition(definition.group("name"), definition.group("target"), number))
    return ChangelogDocument(
        document_id=document_id,
        text=text,
        kind=DocumentKind(kind),
        lines=tuple(lines),
        entries=tuple(entries),
        definitions=tuple(definitions),
    )


def load_changelog(path: Path, kind: DocumentKind | str = DocumentKind.CHANGELOG) -> ChangelogDocument:
    return parse_changelog(path.read_text(encoding="utf-8"), document_id=path.as_posix(), kind=kind)


__all__ = [
    "ChangelogDocument",
    "ChangelogEntry",
    "ChangelogLine",
    "DocumentKind",
    "IMPLICIT_LINK_RE",
    "IssueReference",
    "LineKind",
    "LinkDefinition",
    "classify_line",
    "load_changelog",
    "parse_changelog",
    "split_lines",
]
