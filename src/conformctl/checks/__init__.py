"""Conformance check system public API.

- Check types live in ``conformctl.checks.model``.
- Registered checks come from ``conformctl.checks.registry``.
- Execution and aggregation happen in ``conformctl.checks.runner``.
"""

from __future__ import annotations

from .model import (
    CheckDef,
    CheckResult,
    CheckRunReport,
    CheckStatus,
    DocumentError,
    Severity,
    Violation,
)
from .registry import get_check, list_checks, select_checks
from .runner import DocumentSource, collect_sources, run_checks

__all__ = [
    "CheckDef",
    "CheckResult",
    "CheckRunReport",
    "CheckStatus",
    "DocumentError",
    "DocumentSource",
    "Severity",
    "Violation",
    "collect_sources",
    "get_check",
    "list_checks",
    "run_checks",
    "select_checks",
]
