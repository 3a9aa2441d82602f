"""Key ordering and duplicate-key checks.

Ordering compares plain `str` values, i.e. by code point, which is the same
order as comparing the UTF-8 bytes. No case folding or locale collation.
"""

from __future__ import annotations

from .metadata import iter_entries
from .model import ConfigCheckContext, Violation


def check_entry_names_sorted(ctx: ConfigCheckContext) -> list[Violation]:
    violations: list[Violation] = []
    skip = set(ctx.settings.structural_keys)
    previous = ""
    for key, _ in ctx.document.root.pairs:
        name = key.text
        if name in skip:
            continue
        if previous > name:
            violations.append(
                Violation(
                    "ENTRY_NAMES_UNSORTED",
                    f"Entries should be sorted alphabetically. Please sort {name}.",
                    hint=f"move `{name}` before `{previous}`",
                    path=ctx.document.document_id,
                    line=key.line,
                )
            )
        previous = name
    return violations


def check_entry_fields_sorted(ctx: ConfigCheckContext) -> list[Violation]:
    violations: list[Violation] = []
    ignored = ctx.settings.field_order_ignored_key
    for entry in iter_entries(ctx):
        keys = [key for key in entry.node.keys() if key != ignored]
        expected = sorted(keys)
        if keys == expected:
            continue
        first_bad = next(idx for idx, (got, want) in enumerate(zip(keys, expected)) if got != want)
        violations.append(
            Violation(
                "ENTRY_FIELDS_UNSORTED",
                f"fields of `{entry.name}` should be sorted alphabetically: expected {', '.join(expected)}.",
                hint=f"`{keys[first_bad]}` is out of order",
                path=ctx.document.document_id,
                line=entry.field_line(keys[first_bad]),
            )
        )
    return violations


def check_no_duplicate_keys(ctx: ConfigCheckContext) -> list[Violation]:
    path = ctx.document.document_id
    return [
        Violation(
            "DUPLICATE_KEY",
            f"{path} has duplication of {dup.key} on line {dup.first_line} and line {dup.second_line}",
            hint=f"under {dup.location}",
            path=path,
            line=dup.second_line,
        )
        for dup in ctx.document.duplicates
    ]


__all__ = ["check_entry_fields_sorted", "check_entry_names_sorted", "check_no_duplicate_keys"]
