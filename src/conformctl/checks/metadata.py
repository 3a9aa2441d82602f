"""Per-entry metadata checks over the configuration document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping

from ..core.settings import Settings
from ..documents.loader import ParsedNode
from .model import ConfigCheckContext, Violation

ENFORCED_PREFIX = "Enforced"

DEFAULT_SUPPORTED_FIELDS: Mapping[str, str] = {
    "EnforcedStyle": "SupportedStyles",
    "EnforcedStyleAlignWith": "SupportedStylesAlignWith",
    "EnforcedStyleForEmptyBraces": "SupportedStylesForEmptyBraces",
    "EnforcedStyleForEmptyBrackets": "SupportedStylesForEmptyBrackets",
    "EnforcedStyleForMultiline": "SupportedStylesForMultiline",
    "EnforcedStyleForRationalLiterals": "SupportedStylesForRationalLiterals",
    "EnforcedShorthandSyntax": "SupportedShorthandSyntax",
    "EnforcedColonStyle": "SupportedColonStyles",
    "EnforcedHashRocketStyle": "SupportedHashRocketStyles",
    "EnforcedLastArgumentHashStyle": "SupportedLastArgumentHashStyles",
}


def version_pattern(sentinel: str) -> re.Pattern[str]:
    return re.compile(rf"\A\d+\.\d+\Z|\A{re.escape(sentinel)}\Z")


def subject_pattern(subject: str) -> re.Pattern[str]:
    return re.compile(rf"\AThis {re.escape(subject)} (?P<verb>.+?) .*")


def conventional_supported_field(enforced: str) -> str:
    """`EnforcedStyleX` names `SupportedStylesX`; other suffixes are kept as-is."""
    suffix = enforced[len(ENFORCED_PREFIX):] if enforced.startswith(ENFORCED_PREFIX) else enforced
    return "Supported" + suffix.replace("Style", "Styles", 1)


@dataclass(frozen=True)
class EnforcedFieldMap:
    """Explicit Enforced-field to Supported-field association."""

    pairs: Mapping[str, str]

    @classmethod
    def build(cls, field_names: Iterable[str], overrides: Mapping[str, str] | None = None) -> "EnforcedFieldMap":
        pairs = dict(DEFAULT_SUPPORTED_FIELDS)
        pairs.update(overrides or {})
        for name in field_names:
            if name.startswith(ENFORCED_PREFIX) and name not in pairs:
                pairs[name] = conventional_supported_field(name)
        return cls(pairs)

    def supported_for(self, enforced: str) -> str:
        return self.pairs[enforced]


@dataclass(frozen=True)
class EntryView:
    name: str
    node: ParsedNode
    line: int

    def field(self, key: str) -> ParsedNode | None:
        return self.node.get(key)

    def field_line(self, key: str) -> int:
        parsed = self.node.get_key(key)
        return parsed.line if parsed is not None else self.line


def iter_entries(ctx: ConfigCheckContext) -> Iterator[EntryView]:
    """Yield registered entries that have a mapping in the document."""
    for name in ctx.registry.list_entries():
        node = ctx.document.get_node(name)
        if node is None or not node.is_mapping:
            continue
        yield EntryView(name=name, node=node, line=ctx.document.line_of(name))


def check_entries_configured(ctx: ConfigCheckContext) -> list[Violation]:
    violations: list[Violation] = []
    path = ctx.document.document_id
    for name in ctx.registry.list_entries():
        node = ctx.document.get_node(name)
        if node is None:
            violations.append(Violation("ENTRY_CONFIG_MISSING", f"`{name}` has no configuration.", path=path))
        elif not node.is_mapping:
            violations.append(
                Violation("ENTRY_CONFIG_NOT_MAPPING", f"configuration for `{name}` must be a mapping.", path=path, line=ctx.document.line_of(name))
            )
    return violations


def _description_suggestion(match: re.Match[str]) -> str:
    verb = match.group("verb")
    return verb.capitalize() if verb else "a verb"


def check_description_format(ctx: ConfigCheckContext) -> list[Violation]:
    violations: list[Violation] = []
    path = ctx.document.document_id
    banned = subject_pattern(ctx.settings.description_subject)
    for entry in iter_entries(ctx):
        node = entry.field("Description")
        if node is None or (node.is_scalar and node.value is None):
            violations.append(Violation("DESCRIPTION_MISSING", f"`Description` is required for `{entry.name}`.", path=path, line=entry.line))
            continue
        line = entry.field_line("Description")
        if not node.is_scalar or not isinstance(node.value, str):
            violations.append(Violation("DESCRIPTION_NOT_STRING", f"`Description` for `{entry.name}` must be a string.", path=path, line=line))
            continue
        if "\n" in node.value:
            violations.append(Violation("DESCRIPTION_MULTILINE", f"`Description` for `{entry.name}` must be a single line.", path=path, line=line))
        match = banned.match(node.value)
        if match:
            suggestion = _description_suggestion(match)
            violations.append(
                Violation(
                    "DESCRIPTION_SUBJECT_PREFIX",
                    f"`Description` for `{entry.name}` should be started with `{suggestion}` instead of `This {ctx.settings.description_subject} ...`.",
                    hint=f"start with `{suggestion}`",
                    path=path,
                    line=line,
                )
            )
    return violations


def check_description_period(ctx: ConfigCheckContext) -> list[Violation]:
    violations: list[Violation] = []
    for entry in iter_entries(ctx):
        node = entry.field("Description")
        if node is None or not isinstance(node.value, str):
            continue
        if not node.value.endswith("."):
            violations.append(
                Violation(
                    "DESCRIPTION_NO_PERIOD",
                    f"`Description` for `{entry.name}` must end with a period.",
                    path=ctx.document.document_id,
                    line=entry.field_line("Description"),
                )
            )
    return violations


def _version_violations(ctx: ConfigCheckContext, field_name: str, *, required: bool) -> list[Violation]:
    violations: list[Violation] = []
    path = ctx.document.document_id
    pattern = version_pattern(ctx.settings.version_sentinel)
    for entry in iter_entries(ctx):
        node = entry.field(field_name)
        if node is None or (node.is_scalar and node.value is None):
            if required:
                violations.append(
                    Violation("VERSION_MISSING", f"`{field_name}` configuration is required for `{entry.name}`.", path=path, line=entry.line)
                )
            continue
        if not node.is_scalar or not pattern.match(node.raw):
            shown = node.raw if node.is_scalar else node.kind.value
            violations.append(
                Violation(
                    "VERSION_FORMAT",
                    f"{shown} should be format ('X.Y' or '{ctx.settings.version_sentinel}') for {entry.name}.",
                    hint=f"{field_name} must look like `2.1` or `{ctx.settings.version_sentinel}`",
                    path=path,
                    line=entry.field_line(field_name),
                )
            )
    return violations


def check_version_added(ctx: ConfigCheckContext) -> list[Violation]:
    return _version_violations(ctx, "VersionAdded", required=True)


def check_version_changed(ctx: ConfigCheckContext) -> list[Violation]:
    return _version_violations(ctx, "VersionChanged", required=False)


def check_version_removed(ctx: ConfigCheckContext) -> list[Violation]:
    return _version_violations(ctx, "VersionRemoved", required=False)


def _permitted_values(node: ParsedNode) -> list[object]:
    if node.is_sequence:
        return [item.value for item in node.items if item.is_scalar]
    if node.is_scalar:
        return [node.value]
    return []


def check_enforced_supported(ctx: ConfigCheckContext) -> list[Violation]:
    violations: list[Violation] = []
    path = ctx.document.document_id
    entries = list(iter_entries(ctx))
    association = enforced_field_map(entries, ctx.settings)
    for entry in entries:
        for key, node in entry.node.pairs:
            if not key.text.startswith(ENFORCED_PREFIX):
                continue
            supported_key = association.supported_for(key.text)
            supported = entry.field(supported_key)
            if supported is None:
                violations.append(
                    Violation("SUPPORTED_FIELD_MISSING", f"{supported_key} is missing for {entry.name}", path=path, line=key.line)
                )
                continue
            if node.is_scalar and node.value in _permitted_values(supported):
                continue
            shown = node.raw if node.is_scalar else node.kind.value
            violations.append(
                Violation(
                    "ENFORCED_VALUE_UNSUPPORTED",
                    f"invalid {key.text} '{shown}' for {entry.name} found",
                    hint=f"use one of the values listed in {supported_key}",
                    path=path,
                    line=key.line,
                )
            )
    return violations


def enforced_field_map(entries: Iterable[EntryView], settings: Settings) -> EnforcedFieldMap:
    names = {key for entry in entries for key in entry.node.keys()}
    return EnforcedFieldMap.build(sorted(names), settings.supported_fields)


def check_no_safe_true(ctx: ConfigCheckContext) -> list[Violation]:
    violations: list[Violation] = []
    for entry in iter_entries(ctx):
        node = entry.field("Safe")
        if node is not None and node.value is True:
            violations.append(
                Violation(
                    "SAFE_TRUE_REDUNDANT",
                    f"`{entry.name}` has unnecessary `Safe: true` config.",
                    hint="remove `Safe: true`; it is the default",
                    path=ctx.document.document_id,
                    line=entry.field_line("Safe"),
                )
            )
    return violations


__all__ = [
    "DEFAULT_SUPPORTED_FIELDS",
    "EnforcedFieldMap",
    "EntryView",
    "check_description_format",
    "check_description_period",
    "check_enforced_supported",
    "check_entries_configured",
    "check_no_safe_true",
    "check_version_added",
    "check_version_changed",
    "check_version_removed",
    "conventional_supported_field",
    "enforced_field_map",
    "iter_entries",
    "subject_pattern",
    "version_pattern",
]
