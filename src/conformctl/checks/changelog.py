"""Changelog format and cross-reference checks."""

from __future__ import annotations

import re
from collections import Counter

from ..documents.changelog import IMPLICIT_LINK_RE, ChangelogEntry, LineKind, split_lines
from .model import ChangelogCheckContext, Violation

ENTRY_SPACING_RE = re.compile(r"^\* \S")
ISSUE_NUMBER_RE = re.compile(r"^#\d+$")
LINK_COLON_RE = re.compile(r": ")
LEADING_ISSUE_RE = re.compile(r"^\*\s*\[")
CODE_SPAN_RE = re.compile(r"`[^`]+`")
BODY_PREFIX_RE = re.compile(r"^\*\s*(?:\[.+?\):\s*)?")
BODY_SUFFIX_RE = re.compile(r"\s*\([^)]+\)$")
LOWERCASE_START_RE = re.compile(r"^[a-z]")
BODY_END_RE = re.compile(r"[.!]$")


def entry_body(text: str) -> str:
    """Strip code spans, the leading issue link segment and a trailing parenthetical."""
    body = CODE_SPAN_RE.sub("``", text)
    body = BODY_PREFIX_RE.sub("", body, count=1)
    return BODY_SUFFIX_RE.sub("", body, count=1)


def issue_url_pattern(host: str, org: str, repo: str, digits: str) -> re.Pattern[str]:
    base = "/".join(re.escape(part) for part in (host, org, repo))
    return re.compile(rf"^https://{base}/(?:issues|pull)/{re.escape(digits)}$")


def _entry_violation(ctx: ChangelogCheckContext, entry: ChangelogEntry, code: str, message: str, hint: str = "") -> Violation:
    return Violation(code, message, hint=hint, path=ctx.document.document_id, line=entry.line)


def check_trailing_newline(ctx: ChangelogCheckContext) -> list[Violation]:
    if ctx.document.text.endswith("\n"):
        return []
    last = ctx.document.lines[-1].number if ctx.document.lines else 0
    return [Violation("CHANGELOG_NO_TRAILING_NEWLINE", f"{ctx.document.name} must end with a newline.", path=ctx.document.document_id, line=last)]


def check_line_shapes(ctx: ChangelogCheckContext) -> list[Violation]:
    return [
        Violation(
            "CHANGELOG_LINE_SHAPE",
            f"line must be an entry (`* `), a header (`#`) or blank: {line.text!r}",
            path=ctx.document.document_id,
            line=line.number,
        )
        for line in ctx.document.body_lines
        if line.kind == LineKind.OTHER
    ]


def check_entry_spacing(ctx: ChangelogCheckContext) -> list[Violation]:
    return [
        _entry_violation(ctx, entry, "ENTRY_SPACING", "entry must have exactly one space between `*` and the body.", "write `* Body`")
        for entry in ctx.document.entries
        if not ENTRY_SPACING_RE.match(entry.text)
    ]


def check_issue_number(ctx: ChangelogCheckContext) -> list[Violation]:
    return [
        _entry_violation(ctx, entry, "ISSUE_NUMBER_FORMAT", f"issue reference `{issue.number}` must be `#` followed by digits.")
        for entry in ctx.document.entries
        for issue in entry.issues
        if not ISSUE_NUMBER_RE.match(issue.number)
    ]


def check_issue_url(ctx: ChangelogCheckContext) -> list[Violation]:
    settings = ctx.settings
    violations: list[Violation] = []
    for entry in ctx.document.entries:
        for issue in entry.issues:
            pattern = issue_url_pattern(settings.issue_host, settings.issue_org, settings.issue_repo, issue.digits)
            if pattern.match(issue.url):
                continue
            expected = f"https://{settings.issue_host}/{settings.issue_org}/{settings.issue_repo}/issues/{issue.digits}"
            violations.append(
                _entry_violation(ctx, entry, "ISSUE_URL", f"issue URL `{issue.url}` does not match `{expected}` (or `/pull/`).")
            )
    return violations


def check_issue_colon(ctx: ChangelogCheckContext) -> list[Violation]:
    """Entries that open with a link need `: ` after the last link of the opening run."""
    violations: list[Violation] = []
    for entry in ctx.document.entries:
        leading = LEADING_ISSUE_RE.match(entry.text)
        if not leading:
            continue
        if entry.issues and entry.issues[0].start == leading.end() - 1:
            ok = bool(LINK_COLON_RE.match(entry.text, entry.issues[-1].end))
        else:
            ok = "): " in entry.text
        if not ok:
            violations.append(_entry_violation(ctx, entry, "ISSUE_LINK_COLON", "issue link must be followed by `: ` before the body.", "write `[#123](url): Body`"))
    return violations


def check_body_case(ctx: ChangelogCheckContext) -> list[Violation]:
    return [
        _entry_violation(ctx, entry, "ENTRY_BODY_LOWERCASE", f"entry body must not start with a lower case letter: {entry_body(entry.text)!r}")
        for entry in ctx.document.entries
        if LOWERCASE_START_RE.match(entry_body(entry.text))
    ]


def check_body_punctuation(ctx: ChangelogCheckContext) -> list[Violation]:
    return [
        _entry_violation(ctx, entry, "ENTRY_BODY_PUNCTUATION", f"entry body must end with `.` or `!`: {entry_body(entry.text)!r}")
        for entry in ctx.document.entries
        if not BODY_END_RE.search(entry_body(entry.text))
    ]


def check_unique_contributors(ctx: ChangelogCheckContext) -> list[Violation]:
    definitions = ctx.document.contributor_definitions
    counts = Counter(item.name for item in definitions)
    seen: set[str] = set()
    violations: list[Violation] = []
    for item in definitions:
        if counts[item.name] > 1 and item.name in seen:
            violations.append(
                Violation(
                    "CONTRIBUTOR_DUPLICATE",
                    f"contributor `[{item.name}]` is defined {counts[item.name]} times.",
                    path=ctx.document.document_id,
                    line=item.line,
                )
            )
        seen.add(item.name)
    return violations


def check_links_resolved(ctx: ChangelogCheckContext) -> list[Violation]:
    defined = {item.name for item in ctx.document.definitions if item.target.startswith("http")}
    reported: set[str] = set()
    violations: list[Violation] = []
    for line in ctx.document.lines:
        for name in IMPLICIT_LINK_RE.findall(line.text):
            if name in defined or name in reported:
                continue
            reported.add(name)
            violations.append(
                Violation(
                    "LINK_DEFINITION_MISSING",
                    f"missing a link for {name}. Please add this link to the bottom of the file.",
                    hint=f"add `[{name}]: https://...`",
                    path=ctx.document.document_id,
                    line=line.number,
                )
            )
    return violations


def check_contributor_suffix(ctx: ChangelogCheckContext) -> list[Violation]:
    if ctx.is_fragment:
        entries = ctx.document.entries
    elif ctx.settings.contributor_cutoff_header:
        entries = ctx.document.entries_before(ctx.settings.contributor_cutoff_header)
    else:
        return []
    return [
        _entry_violation(ctx, entry, "CONTRIBUTOR_SUFFIX_MISSING", "entry must end with contributor links like `([@name][])`.")
        for entry in entries
        if not entry.contributors
    ]


def check_fragment_single_line(ctx: ChangelogCheckContext) -> list[Violation]:
    count = len(split_lines(ctx.document.text))
    if count == 1:
        return []
    return [Violation("FRAGMENT_LINE_COUNT", f"{ctx.document.name} must have a single line, found {count}.", path=ctx.document.document_id)]


def check_fragment_name(ctx: ChangelogCheckContext) -> list[Violation]:
    prefixes = "|".join(re.escape(prefix) for prefix in ctx.settings.fragment_prefixes)
    if re.match(rf"\A(?:{prefixes})_.+", ctx.document.name):
        return []
    allowed = ", ".join(f"`{prefix}_`" for prefix in ctx.settings.fragment_prefixes)
    return [Violation("FRAGMENT_NAME", f"{ctx.document.name} must start with one of {allowed}.", path=ctx.document.document_id)]


__all__ = [
    "check_body_case",
    "check_body_punctuation",
    "check_contributor_suffix",
    "check_entry_spacing",
    "check_fragment_name",
    "check_fragment_single_line",
    "check_issue_colon",
    "check_issue_number",
    "check_issue_url",
    "check_line_shapes",
    "check_links_resolved",
    "check_trailing_newline",
    "check_unique_contributors",
    "entry_body",
    "issue_url_pattern",
]
