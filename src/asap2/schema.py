"""
Static grammar schema for ASAP2 node types.

Each node type is a dataclass whose fields are declared with ``element()``.
The ``asap2_node`` decorator turns the class into a dataclass, builds its
Schema (ordered FieldDescriptors plus lookup tables used by the decoder),
validates it and registers the type under its keyword. Any inconsistency is
a SchemaError raised while the class is being defined, i.e. at import time.

Example:
    @asap2_node("BIT_MASK", simple=True)
    class BitMask(Node):
        value: int = element(0, Role.ARGUMENT, int, as_hex=True)
"""

from __future__ import annotations

import dataclasses
from dataclasses import MISSING, dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Mapping

from .base import Node, NodeDict
from .errors import SchemaError

_ELEMENT_KEY = "asap2_element"


class Role(Enum):
    """Grammar role of one node member."""
    NAME = "name"            # unquoted identifier, also the dictionary key
    ARGUMENT = "argument"    # unquoted literal: number, identifier or enum label
    STRING = "string"        # quoted string
    TEXT = "text"            # verbatim block body (A2ML, IF_DATA)
    COMMENT = "comment"      # /* ... */ line, write only
    FLAG = "flag"            # keyword present or absent
    NODE = "node"            # optional single child
    LIST = "list"            # ordered children
    DICT = "dict"            # children keyed by their own name


class NodeKind(Enum):
    ROOT = "root"
    BLOCK = "block"
    SIMPLE = "simple"


_VALUE_ROLES = frozenset({Role.NAME, Role.ARGUMENT, Role.STRING, Role.TEXT})
_CHILD_ROLES = frozenset({Role.NODE, Role.LIST, Role.DICT})
_SCALAR_KINDS = (str, int, Decimal)


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Serialization metadata of one node member.

    Attributes:
        name: Attribute name on the node
        ordinal: Emission and match position among the node's members
        role: Grammar role
        kind: Value type (str, int, Decimal, an Enum or a node type)
        keyword: Introducing keyword of an optional scalar or flag
        comment: Display comment written when comments are enabled
        as_hex: Render an integer as a 0x literal
        new_line: Start a fresh line before the value
        repeated: Positional scalar that holds a list of values
        required: Must be present in a valid document
        key: Value is the node's dictionary key
    """
    name: str
    ordinal: int
    role: Role
    kind: Any = None
    keyword: str | None = None
    comment: str | None = None
    as_hex: bool = False
    new_line: bool = False
    repeated: bool = False
    required: bool = False
    key: bool = False

    @property
    def positional(self) -> bool:
        return self.role in _VALUE_ROLES and self.keyword is None

    @property
    def child_schema(self) -> Schema:
        return self.kind.__asap2_schema__


class Schema:
    """Validated, ordinal-ordered descriptor table of one node type."""

    def __init__(self, node_type: type, keyword: str | None, kind: NodeKind,
                 fields: list[FieldDescriptor]) -> None:
        self.node_type = node_type
        self.keyword = keyword
        self.kind = kind
        self.fields: tuple[FieldDescriptor, ...] = tuple(sorted(fields, key=lambda f: f.ordinal))
        self.positional: tuple[FieldDescriptor, ...] = tuple(f for f in self.fields if f.positional)
        self.key_field: FieldDescriptor | None = next((f for f in self.fields if f.key), None)
        # lookup tables for the decoder, filled by _index()
        self.block_keywords: dict[str, FieldDescriptor] = {}
        self.statement_keywords: dict[str, FieldDescriptor] = {}
        self.anonymous: tuple[FieldDescriptor, ...] = ()

    @property
    def label(self) -> str:
        return self.keyword or self.node_type.__name__

    @property
    def is_simple(self) -> bool:
        return self.kind is NodeKind.SIMPLE

    @property
    def is_block(self) -> bool:
        return self.kind is NodeKind.BLOCK

    def field(self, name: str) -> FieldDescriptor:
        for fd in self.fields:
            if fd.name == name:
                return fd
        raise KeyError(name)

    def prepare(self, node: Node) -> None:
        """Check required values of a freshly built node, normalize numbers and text."""
        for fd in self.fields:
            if fd.role not in _VALUE_ROLES:
                continue
            value = getattr(node, fd.name)
            if value is None:
                if fd.required:
                    raise SchemaError(f"{self.label}: required field '{fd.name}' is not set")
                continue
            if fd.role is Role.TEXT and isinstance(value, str):
                setattr(node, fd.name, value.strip().replace("\r\n", "\n").replace("\r", "\n"))
            elif fd.kind is Decimal:
                if fd.repeated:
                    setattr(node, fd.name, [_to_decimal(v) for v in value])
                else:
                    setattr(node, fd.name, _to_decimal(value))

    def __repr__(self) -> str:
        return f"<Schema {self.label} ({self.kind.value}, {len(self.fields)} fields)>"


def _to_decimal(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    return Decimal(str(value))


# --------------------------
# Declaration helpers
# --------------------------

def element(ordinal: int, role: Role, kind: Any = None, *,
            keyword: str | None = None,
            comment: str | None = None,
            as_hex: bool = False,
            new_line: bool = False,
            repeated: bool = False,
            required: bool | None = None,
            key: bool = False,
            default: Any = MISSING,
            default_factory: Callable[[], Any] | Any = MISSING) -> Any:
    """
    Declare a node member and its grammar metadata.

    Positional values are required constructor arguments unless a default is
    given; everything else defaults to absent (None, False or empty).
    """
    if kind is None:
        if role in (Role.NAME, Role.STRING, Role.TEXT, Role.COMMENT):
            kind = str
        elif role is Role.FLAG:
            kind = bool
    if required is None:
        required = role in _VALUE_ROLES and keyword is None and not repeated
    if default is MISSING and default_factory is MISSING:
        if repeated or role is Role.LIST:
            default_factory = list
        elif role is Role.DICT:
            default_factory = NodeDict
        elif role is Role.FLAG:
            default = False
        elif not required:
            default = None
    metadata = {
        _ELEMENT_KEY: dict(
            ordinal=ordinal, role=role, kind=kind, keyword=keyword, comment=comment,
            as_hex=as_hex, new_line=new_line, repeated=repeated, required=required,
            key=key or role is Role.NAME,
        )
    }
    return dataclasses.field(default=default, default_factory=default_factory,
                             compare=role is not Role.COMMENT, metadata=metadata)


_registry: dict[str, type] = {}


def asap2_node(keyword: str | None = None, *, simple: bool = False,
               root: bool = False) -> Callable[[type], type]:
    """
    Class decorator declaring an ASAP2 node type.

    Args:
        keyword: Grammar keyword; None for the document root and for
            anonymous statements that start with their first value
        simple: Single statement without /begin ... /end
        root: Document root (no keyword, no delimiters)
    """
    if simple and root:
        raise SchemaError("a node type cannot be both simple and root")
    kind = NodeKind.ROOT if root else NodeKind.SIMPLE if simple else NodeKind.BLOCK

    def wrap(cls: type) -> type:
        cls = dataclass(cls)
        schema = _build_schema(cls, keyword, kind)
        if keyword is not None:
            other = _registry.get(keyword)
            if other is not None and other.__qualname__ != cls.__qualname__:
                raise SchemaError(f"keyword {keyword} already declared by {other.__name__}")
            _registry[keyword] = cls
        cls.__asap2_schema__ = schema
        return cls

    return wrap


def schema_of(node: Any) -> Schema:
    """Return the Schema of a node instance or node type."""
    try:
        return node.__asap2_schema__
    except AttributeError:
        raise SchemaError(f"{node!r} is not an ASAP2 node type") from None


def lookup(keyword: str) -> type | None:
    return _registry.get(keyword)


def node_types() -> tuple[type, ...]:
    return tuple(_registry.values())


def grammar_keywords() -> frozenset[str]:
    """Every keyword the registered node types use, for the lexer."""
    words: set[str] = set(_registry)
    for cls in _registry.values():
        words.update(fd.keyword for fd in cls.__asap2_schema__.fields if fd.keyword)
    return frozenset(words)


def verbatim_keywords() -> frozenset[str]:
    """Block keywords whose body is read as one verbatim TEXT token."""
    return frozenset(
        kw for kw, cls in _registry.items()
        if any(fd.role is Role.TEXT for fd in cls.__asap2_schema__.fields)
    )


# --------------------------
# Validation
# --------------------------

def _is_node_type(kind: Any) -> bool:
    return isinstance(kind, type) and issubclass(kind, Node) and hasattr(kind, "__asap2_schema__")


def _is_enum_type(kind: Any) -> bool:
    return isinstance(kind, type) and issubclass(kind, Enum)


def _build_schema(cls: type, keyword: str | None, kind: NodeKind) -> Schema:
    label = keyword or cls.__name__
    if not issubclass(cls, Node):
        raise SchemaError(f"{label}: node types must derive from Node")
    if kind is NodeKind.BLOCK and not keyword:
        raise SchemaError(f"{label}: block nodes need a keyword")
    if kind is NodeKind.ROOT and keyword:
        raise SchemaError(f"{label}: the root node has no keyword")

    descriptors: list[FieldDescriptor] = []
    seen: dict[int, str] = {}
    for f in dataclasses.fields(cls):
        declared = f.metadata.get(_ELEMENT_KEY)
        if declared is None:
            raise SchemaError(f"{label}.{f.name} has no element descriptor")
        fd = FieldDescriptor(name=f.name, **declared)
        if fd.ordinal in seen:
            raise SchemaError(
                f"{label}: fields '{seen[fd.ordinal]}' and '{fd.name}' share ordinal {fd.ordinal}"
            )
        seen[fd.ordinal] = fd.name
        _check_field(label, fd)
        descriptors.append(fd)

    schema = Schema(cls, keyword, kind, descriptors)
    _check_layout(schema)
    _index(schema)
    return schema


def _check_field(label: str, fd: FieldDescriptor) -> None:
    where = f"{label}.{fd.name}"
    if fd.role in _CHILD_ROLES:
        if not _is_node_type(fd.kind):
            raise SchemaError(f"{where}: child fields need a declared node type")
        if fd.keyword or fd.as_hex or fd.repeated:
            raise SchemaError(f"{where}: child fields take no keyword, hex or repeated flag")
        if fd.role is Role.DICT and fd.child_schema.key_field is None:
            raise SchemaError(f"{where}: {fd.kind.__name__} has no key field for a dictionary")
        if fd.required and fd.role is not Role.NODE:
            raise SchemaError(f"{where}: only single children can be required")
        return
    if fd.role is Role.FLAG:
        if not fd.keyword:
            raise SchemaError(f"{where}: flags need a keyword")
        if fd.as_hex or fd.repeated or fd.required:
            raise SchemaError(f"{where}: flags take no hex, repeated or required option")
        return
    if fd.role in (Role.TEXT, Role.COMMENT, Role.NAME) and (fd.keyword or fd.repeated):
        raise SchemaError(f"{where}: {fd.role.value} fields take no keyword or repeated flag")
    if fd.keyword and fd.repeated:
        raise SchemaError(f"{where}: keyword values cannot be repeated")
    if fd.role in (Role.STRING, Role.TEXT, Role.COMMENT) and fd.kind is not str:
        raise SchemaError(f"{where}: {fd.role.value} fields hold text")
    if fd.role is Role.NAME and not (fd.kind is str or _is_enum_type(fd.kind)):
        raise SchemaError(f"{where}: name fields hold an identifier or enum label")
    if fd.role is Role.ARGUMENT and not (fd.kind in _SCALAR_KINDS or _is_enum_type(fd.kind)):
        raise SchemaError(f"{where}: unsupported argument type {fd.kind!r}")
    if fd.as_hex and not (fd.role is Role.ARGUMENT and fd.kind is int):
        raise SchemaError(f"{where}: only integer arguments can be coded as hex")
    if fd.key and fd.role not in (Role.NAME, Role.ARGUMENT, Role.STRING):
        raise SchemaError(f"{where}: key fields must hold a scalar value")


def _check_layout(schema: Schema) -> None:
    label = schema.label
    keys = [fd.name for fd in schema.fields if fd.key]
    if len(keys) > 1:
        raise SchemaError(f"{label}: more than one key field ({', '.join(keys)})")
    if schema.key_field is not None and not schema.key_field.positional:
        raise SchemaError(f"{label}: key field must be positional")

    positional = [fd for fd in schema.fields if fd.positional]
    members = [fd for fd in schema.fields if not fd.positional and fd.role is not Role.COMMENT]
    if positional and members and positional[-1].ordinal > members[0].ordinal:
        raise SchemaError(f"{label}: positional field '{positional[-1].name}' follows keyword members")

    if schema.kind is NodeKind.SIMPLE:
        if members or any(fd.role in (Role.TEXT, Role.COMMENT) for fd in schema.fields):
            raise SchemaError(f"{label}: simple nodes hold positional values only")
        if schema.keyword is None and (not positional or positional[0].repeated):
            raise SchemaError(f"{label}: anonymous statements must start with a single value")
    if schema.kind is NodeKind.ROOT and positional:
        raise SchemaError(f"{label}: the root node holds no positional values")


def _index(schema: Schema) -> None:
    anonymous: list[FieldDescriptor] = []
    for fd in schema.fields:
        if fd.positional or fd.role is Role.COMMENT:
            continue
        if fd.role in _CHILD_ROLES:
            child = fd.child_schema
            if child.keyword is None:
                anonymous.append(fd)
                continue
            table: Mapping[str, FieldDescriptor] = (
                schema.block_keywords if child.is_block else schema.statement_keywords
            )
            word = child.keyword
        else:
            table = schema.statement_keywords
            word = fd.keyword
        if word in table:
            raise SchemaError(f"{schema.label}: keyword {word} used by '{table[word].name}' and '{fd.name}'")
        table[word] = fd  # type: ignore[index]
    schema.anonymous = tuple(anonymous)
