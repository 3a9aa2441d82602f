"""Registered conformance checks."""

from __future__ import annotations

from fnmatch import fnmatch

from . import changelog as cl
from . import metadata as md
from . import ordering as od
from .model import CheckDef

CONFIG_CHECKS: tuple[CheckDef, ...] = (
    CheckDef("checks_config_entries_configured", "config", "every registered entry has a configuration mapping", md.check_entries_configured, "ENTRY_CONFIG_MISSING", "Add a mapping for the entry to the configuration document."),
    CheckDef("checks_config_description_format", "config", "descriptions exist, are single-line and do not start with `This <subject>`", md.check_description_format, "DESCRIPTION_FORMAT", "Write the description as a one-line assertion starting with a verb."),
    CheckDef("checks_config_description_period", "config", "descriptions end with a period", md.check_description_period, "DESCRIPTION_NO_PERIOD", "End the description with `.`."),
    CheckDef("checks_config_version_added", "config", "`VersionAdded` is present and formatted", md.check_version_added, "VERSION_ADDED", "Set `VersionAdded: 'X.Y'` or the unreleased sentinel."),
    CheckDef("checks_config_version_changed", "config", "`VersionChanged` is formatted when present", md.check_version_changed, "VERSION_CHANGED", "Use `X.Y` or the unreleased sentinel."),
    CheckDef("checks_config_version_removed", "config", "`VersionRemoved` is formatted when present", md.check_version_removed, "VERSION_REMOVED", "Use `X.Y` or the unreleased sentinel."),
    CheckDef("checks_config_enforced_supported", "config", "every `Enforced*` field has a Supported field listing its value", md.check_enforced_supported, "ENFORCED_SUPPORTED", "Add the Supported field or fix the enforced value."),
    CheckDef("checks_config_no_safe_true", "config", "`Safe: true` is never configured", md.check_no_safe_true, "SAFE_TRUE_REDUNDANT", "Remove `Safe: true`."),
    CheckDef("checks_config_entry_names_sorted", "config", "top-level entry names are sorted", od.check_entry_names_sorted, "ENTRY_NAMES_UNSORTED", "Sort entries alphabetically."),
    CheckDef("checks_config_entry_fields_sorted", "config", "fields of each entry are sorted", od.check_entry_fields_sorted, "ENTRY_FIELDS_UNSORTED", "Sort the entry's fields alphabetically."),
    CheckDef("checks_config_no_duplicate_keys", "config", "no mapping repeats a key", od.check_no_duplicate_keys, "DUPLICATE_KEY", "Merge or remove the repeated key."),
)

CHANGELOG_CHECKS: tuple[CheckDef, ...] = (
    CheckDef("checks_changelog_trailing_newline", "changelog", "document ends with a newline", cl.check_trailing_newline, "CHANGELOG_NO_TRAILING_NEWLINE", "Add a final newline."),
    CheckDef("checks_changelog_line_shapes", "changelog", "lines are entries, headers or blank", cl.check_line_shapes, "CHANGELOG_LINE_SHAPE", "Turn stray lines into entries or remove them."),
    CheckDef("checks_changelog_entry_spacing", "changelog", "entries have one space after `*`", cl.check_entry_spacing, "ENTRY_SPACING", "Write `* Body`."),
    CheckDef("checks_changelog_issue_number", "changelog", "issue references are `#<digits>`", cl.check_issue_number, "ISSUE_NUMBER_FORMAT", "Write `[#123](url)`."),
    CheckDef("checks_changelog_issue_url", "changelog", "issue URLs point at the project issue tracker", cl.check_issue_url, "ISSUE_URL", "Link to the project's issues/ or pull/ URL with the same number."),
    CheckDef("checks_changelog_issue_colon", "changelog", "issue links are followed by `: `", cl.check_issue_colon, "ISSUE_LINK_COLON", "Write `[#123](url): Body`."),
    CheckDef("checks_changelog_body_case", "changelog", "entry bodies do not start lower case", cl.check_body_case, "ENTRY_BODY_LOWERCASE", "Capitalize the first word."),
    CheckDef("checks_changelog_body_punctuation", "changelog", "entry bodies end with `.` or `!`", cl.check_body_punctuation, "ENTRY_BODY_PUNCTUATION", "End the sentence with punctuation."),
    CheckDef("checks_changelog_unique_contributors", "changelog", "contributor link definitions are unique", cl.check_unique_contributors, "CONTRIBUTOR_DUPLICATE", "Remove the repeated contributor definition."),
    CheckDef("checks_changelog_links_resolved", "changelog", "implicit links have definitions", cl.check_links_resolved, "LINK_DEFINITION_MISSING", "Add the link definition to the bottom of the file.", applies_to=("changelog",)),
    CheckDef("checks_changelog_contributor_suffix", "changelog", "entries end with contributor links", cl.check_contributor_suffix, "CONTRIBUTOR_SUFFIX_MISSING", "End the entry with `([@name][])`."),
    CheckDef("checks_changelog_fragment_single_line", "changelog", "fragments have a single line", cl.check_fragment_single_line, "FRAGMENT_LINE_COUNT", "Keep one entry per fragment file.", applies_to=("fragment",)),
    CheckDef("checks_changelog_fragment_name", "changelog", "fragment file names start with an allowed prefix", cl.check_fragment_name, "FRAGMENT_NAME", "Rename the fragment to `new_*`, `fix_*` or `change_*`.", applies_to=("fragment",)),
)

ALL_CHECKS: tuple[CheckDef, ...] = CONFIG_CHECKS + CHANGELOG_CHECKS


def list_checks() -> tuple[CheckDef, ...]:
    return tuple(sorted(ALL_CHECKS, key=lambda check: check.id))


def get_check(check_id: str) -> CheckDef:
    for check in ALL_CHECKS:
        if check.id == check_id:
            return check
    raise KeyError(check_id)


def select_checks(patterns: tuple[str, ...] = (), domain: str = "") -> tuple[CheckDef, ...]:
    selected = []
    for check in list_checks():
        if domain and check.domain != domain:
            continue
        if patterns and not any(fnmatch(check.id, pattern) for pattern in patterns):
            continue
        selected.append(check)
    return tuple(selected)


def validate_registry(checks: tuple[CheckDef, ...] = ALL_CHECKS) -> list[str]:
    errors: list[str] = []
    seen: set[str] = set()
    for check in checks:
        if check.id in seen:
            errors.append(f"duplicate check id: {check.id}")
        seen.add(check.id)
        if not check.description:
            errors.append(f"{check.id}: missing description")
    return sorted(errors)


__all__ = [
    "ALL_CHECKS",
    "CHANGELOG_CHECKS",
    "CONFIG_CHECKS",
    "get_check",
    "list_checks",
    "select_checks",
    "validate_registry",
]
