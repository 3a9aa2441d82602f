"""Line-annotated YAML loading with duplicate-key detection.

PyYAML's `safe_load` keeps only the last value of a repeated mapping key. The
loader works on the composed node graph instead, so sibling order and source
lines survive and every repeated key is recorded against its first occurrence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from yaml.constructor import ConstructorError, SafeConstructor

from ..core.errors import DocumentParseError


class NodeKind(str, Enum):
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


@dataclass(frozen=True)
class ParsedKey:
    text: str
    line: int


@dataclass(frozen=True)
class ParsedNode:
    kind: NodeKind
    line: int
    pairs: tuple[tuple[ParsedKey, "ParsedNode"], ...] = ()
    items: tuple["ParsedNode", ...] = ()
    raw: str = ""
    value: Any = None

    @property
    def is_mapping(self) -> bool:
        return self.kind == NodeKind.MAPPING

    @property
    def is_sequence(self) -> bool:
        return self.kind == NodeKind.SEQUENCE

    @property
    def is_scalar(self) -> bool:
        return self.kind == NodeKind.SCALAR

    def keys(self) -> tuple[str, ...]:
        return tuple(key.text for key, _ in self.pairs)

    def __contains__(self, key: object) -> bool:
        return any(k.text == key for k, _ in self.pairs)

    def get_key(self, key: str) -> ParsedKey | None:
        for k, _ in self.pairs:
            if k.text == key:
                return k
        return None

    def get(self, key: str) -> "ParsedNode | None":
        for k, node in self.pairs:
            if k.text == key:
                return node
        return None

    def to_python(self) -> Any:
        if self.kind == NodeKind.SCALAR:
            return self.value
        if self.kind == NodeKind.SEQUENCE:
            return [item.to_python() for item in self.items]
        out: dict[str, Any] = {}
        for key, node in self.pairs:
            out.setdefault(key.text, node.to_python())
        return out


@dataclass(frozen=True)
class DuplicateKey:
    key: str
    first_line: int
    second_line: int
    parent_path: tuple[str, ...] = ()

    @property
    def location(self) -> str:
        return "/".join(self.parent_path) or "<root>"


@dataclass(frozen=True)
class ConfigDocument:
    document_id: str
    root: ParsedNode
    duplicates: tuple[DuplicateKey, ...] = ()

    def get_node(self, *path: str) -> ParsedNode | None:
        node: ParsedNode | None = self.root
        for part in path:
            if node is None or not node.is_mapping:
                return None
            node = node.get(part)
        return node

    def get_value(self, *path: str) -> Any:
        node = self.get_node(*path)
        return None if node is None else node.to_python()

    def line_of(self, *path: str) -> int:
        if not path:
            return self.root.line
        parent = self.get_node(*path[:-1])
        if parent is None or not parent.is_mapping:
            return 0
        key = parent.get_key(path[-1])
        return 0 if key is None else key.line

    def top_level_keys(self) -> tuple[str, ...]:
        return self.root.keys()


@dataclass
class _Builder:
    constructor: SafeConstructor = field(default_factory=SafeConstructor)
    duplicates: list[DuplicateKey] = field(default_factory=list)
    built: dict[int, ParsedNode] = field(default_factory=dict)

    def build(self, node: yaml.Node, path: tuple[str, ...] = ()) -> ParsedNode:
        cached = self.built.get(id(node))
        if cached is not None:
            return cached
        line = node.start_mark.line + 1
        if isinstance(node, yaml.MappingNode):
            parsed = self._mapping(node, line, path)
        elif isinstance(node, yaml.SequenceNode):
            items = tuple(self.build(item, (*path, str(idx))) for idx, item in enumerate(node.value))
            parsed = ParsedNode(kind=NodeKind.SEQUENCE, line=line, items=items)
        else:
            parsed = ParsedNode(kind=NodeKind.SCALAR, line=line, raw=str(node.value), value=self._scalar(node))
        self.built[id(node)] = parsed
        return parsed

    def _scalar(self, node: yaml.Node) -> Any:
        try:
            return self.constructor.construct_object(node, deep=True)
        except ConstructorError:
            # application tags such as !ruby/regexp keep their source text
            return str(node.value)

    def _mapping(self, node: yaml.MappingNode, line: int, path: tuple[str, ...]) -> ParsedNode:
        seen: dict[str, ParsedKey] = {}
        pairs: list[tuple[ParsedKey, ParsedNode]] = []
        for key_node, value_node in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                raise DocumentParseError(
                    f"unsupported non-scalar mapping key on line {key_node.start_mark.line + 1}",
                    line=key_node.start_mark.line + 1,
                )
            key = ParsedKey(text=str(key_node.value), line=key_node.start_mark.line + 1)
            first = seen.get(key.text)
            if first is None:
                seen[key.text] = key
            else:
                self.duplicates.append(DuplicateKey(key.text, first.line, key.line, path))
            pairs.append((key, self.build(value_node, (*path, key.text))))
        return ParsedNode(kind=NodeKind.MAPPING, line=line, pairs=tuple(pairs))


def _compose(text: str, document_id: str) -> yaml.Node | None:
    try:
        return yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        line = mark.line + 1 if mark is not None else 0
        raise DocumentParseError(f"{document_id}: invalid YAML: {exc}", document_id=document_id, line=line) from exc


def load_document(text: str, document_id: str = "<memory>") -> ConfigDocument:
    """Parse `text` into a `ConfigDocument`.

    Raises `DocumentParseError` when the text is not YAML or its root is not a
    mapping. Repeated keys are not errors; they are returned in `duplicates`.
    """
    composed = _compose(text, document_id)
    if composed is None:
        return ConfigDocument(document_id=document_id, root=ParsedNode(kind=NodeKind.MAPPING, line=1))
    builder = _Builder()
    try:
        root = builder.build(composed)
    except DocumentParseError as exc:
        raise DocumentParseError(f"{document_id}: {exc}", document_id=document_id, line=exc.line) from exc
    except yaml.YAMLError as exc:
        raise DocumentParseError(f"{document_id}: invalid YAML value: {exc}", document_id=document_id) from exc
    if not root.is_mapping:
        raise DocumentParseError(
            f"{document_id}: configuration root must be a mapping, got {root.kind.value}",
            document_id=document_id,
            line=root.line,
        )
    return ConfigDocument(document_id=document_id, root=root, duplicates=tuple(builder.duplicates))


def load_file(path: Path) -> ConfigDocument:
    return load_document(path.read_text(encoding="utf-8"), document_id=path.as_posix())


def find_duplicates(text: str, document_id: str = "<memory>") -> tuple[DuplicateKey, ...]:
    return load_document(text, document_id).duplicates


__all__ = [
    "ConfigDocument",
    "DuplicateKey",
    "NodeKind",
    "ParsedKey",
    "ParsedNode",
    "find_duplicates",
    "load_document",
    "load_file",
]
