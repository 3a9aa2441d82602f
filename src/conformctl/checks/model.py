from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Union

from ..core.settings import DEFAULT_SETTINGS, Settings
from ..documents.changelog import ChangelogDocument, DocumentKind
from ..documents.loader import ConfigDocument
from ..registry.names import NameRegistry

_CHECK_ID_PATTERN = re.compile(r"^checks_[a-z0-9]+(?:_[a-z0-9]+)+$")
_RESULT_CODE_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")
_DOMAIN_VOCAB = frozenset({"config", "changelog"})


@dataclass(frozen=True, order=True)
class CheckId:
    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", str(self.value).strip())

    @classmethod
    def parse(cls, value: str, *, domain: str | None = None) -> "CheckId":
        raw = str(value).strip()
        if not _CHECK_ID_PATTERN.fullmatch(raw):
            raise ValueError(f"invalid check id `{raw}`: expected checks_<domain>_<name> snake_case")
        if domain:
            parsed_domain = raw.split("_", 2)[1]
            if parsed_domain != str(domain).strip():
                raise ValueError(f"invalid check id `{raw}`: domain segment `{parsed_domain}` must match `{domain}`")
        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class DomainId:
    value: str

    def __post_init__(self) -> None:
        value = str(self.value).strip()
        if value not in _DOMAIN_VOCAB:
            raise ValueError(f"invalid domain `{value}`: must be one of {sorted(_DOMAIN_VOCAB)}")
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class ResultCode:
    value: str

    def __post_init__(self) -> None:
        value = str(self.value).strip()
        if not _RESULT_CODE_PATTERN.fullmatch(value):
            raise ValueError(f"invalid result_code `{value}`: expected UPPER_SNAKE_CASE")
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return self.value


class Severity(str, Enum):
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class CheckStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Violation:
    code: ResultCode | str
    message: str
    hint: str = ""
    path: str = ""
    line: int = 0
    column: int = 0
    severity: Severity = Severity.ERROR

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", str(ResultCode(str(self.code).strip() or "CHECK_GENERIC")))
        object.__setattr__(self, "message", str(self.message).strip())
        object.__setattr__(self, "hint", str(self.hint).strip())
        object.__setattr__(self, "path", str(self.path).strip())
        object.__setattr__(self, "line", int(self.line or 0))
        object.__setattr__(self, "column", int(self.column or 0))

    @property
    def location(self) -> str:
        if not self.path:
            return ""
        return f"{self.path}:{self.line}" if self.line else self.path

    @property
    def canonical_key(self) -> tuple[str, int, int, str, str]:
        return (self.path, self.line, self.column, self.code, self.message)


@dataclass(frozen=True)
class DocumentError:
    document: str
    message: str
    kind: str = "parse_error"
    line: int = 0


@dataclass(frozen=True)
class ConfigCheckContext:
    document: ConfigDocument
    registry: NameRegistry
    settings: Settings = DEFAULT_SETTINGS


@dataclass(frozen=True)
class ChangelogCheckContext:
    document: ChangelogDocument
    settings: Settings = DEFAULT_SETTINGS

    @property
    def is_fragment(self) -> bool:
        return self.document.kind == DocumentKind.FRAGMENT


CheckContext = Union[ConfigCheckContext, ChangelogCheckContext]
CheckFn = Callable[..., list[Violation]]


@dataclass(frozen=True)
class CheckDef:
    check_id: CheckId | str
    domain: DomainId | str
    description: str
    fn: CheckFn
    result_code: ResultCode | str = "CHECK_GENERIC"
    fix_hint: str = ""
    applies_to: tuple[DocumentKind | str, ...] = ()

    def __post_init__(self) -> None:
        did = self.domain if isinstance(self.domain, DomainId) else DomainId(str(self.domain))
        cid = self.check_id if isinstance(self.check_id, CheckId) else CheckId.parse(str(self.check_id), domain=str(did))
        object.__setattr__(self, "check_id", str(cid))
        object.__setattr__(self, "domain", str(did))
        object.__setattr__(self, "description", str(self.description).strip())
        object.__setattr__(self, "result_code", str(ResultCode(str(self.result_code or "CHECK_GENERIC"))))
        object.__setattr__(self, "applies_to", tuple(DocumentKind(kind) for kind in self.applies_to))

    @property
    def id(self) -> str:
        return str(self.check_id)

    def applies(self, kind: DocumentKind | None) -> bool:
        """Config checks have no document kind; changelog checks may be limited to some kinds."""
        if kind is None:
            return self.domain == "config"
        if self.domain != "changelog":
            return False
        return not self.applies_to or kind in self.applies_to

    def run(self, ctx: CheckContext) -> list[Violation]:
        return list(self.fn(ctx))


@dataclass(frozen=True)
class CheckResult:
    id: str
    document: str
    domain: str
    status: CheckStatus | str
    violations: tuple[Violation, ...] = ()
    result_code: str = "CHECK_GENERIC"
    fix_hint: str = ""
    duration_ms: int = 0
    errors: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        status = self.status if isinstance(self.status, CheckStatus) else CheckStatus(str(self.status).strip().lower())
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "violations", tuple(sorted(self.violations, key=lambda row: row.canonical_key)))
        object.__setattr__(self, "errors", tuple(str(msg).strip() for msg in self.errors if str(msg).strip()))

    @property
    def canonical_key(self) -> tuple[str, str, str]:
        return (self.document, self.domain, self.id)


@dataclass(frozen=True)
class CheckRunReport:
    rows: tuple[CheckResult, ...] = ()
    errors: tuple[DocumentError, ...] = ()
    documents: tuple[str, ...] = ()
    summary: Mapping[str, int] = field(default_factory=dict)
    timings: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.rows, key=lambda row: row.canonical_key))
        object.__setattr__(self, "rows", ordered)
        object.__setattr__(self, "errors", tuple(sorted(self.errors, key=lambda err: err.document)))
        if not self.summary:
            object.__setattr__(
                self,
                "summary",
                {
                    "passed": sum(1 for row in ordered if row.status == CheckStatus.PASS),
                    "failed": sum(1 for row in ordered if row.status == CheckStatus.FAIL),
                    "errors": sum(1 for row in ordered if row.status == CheckStatus.ERROR) + len(self.errors),
                    "total": len(ordered),
                    "violations": len(self.violations),
                    "documents": len(self.documents),
                },
            )

    @property
    def violations(self) -> tuple[Violation, ...]:
        return tuple(item for row in self.rows for item in row.violations)

    @property
    def status(self) -> str:
        return "error" if self.errors or any(row.status == CheckStatus.ERROR for row in self.rows) else "ok"

    @property
    def passed(self) -> bool:
        return self.status == "ok" and not self.violations


__all__ = [
    "ChangelogCheckContext",
    "CheckContext",
    "CheckDef",
    "CheckFn",
    "CheckId",
    "CheckResult",
    "CheckRunReport",
    "CheckStatus",
    "ConfigCheckContext",
    "DocumentError",
    "DomainId",
    "ResultCode",
    "Severity",
    "Violation",
]
