from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_CONFIG, ERR_PARSE


@dataclass
class ScriptError(Exception):
    message: str
    code: int
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class DocumentParseError(ScriptError):
    def __init__(self, message: str, *, document_id: str = "", line: int = 0) -> None:
        super().__init__(message, ERR_PARSE, "parse_error")
        self.document_id = document_id
        self.line = line


class SettingsError(ScriptError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_CONFIG, "config_error")
