"""TypeModel: structural description of wire types.

This module defines the immutable nodes that describe a record layout
independent of Python's memory layout, a registry for named (and recursive)
types, a small type-tag parser, and introspection of Pydantic models into
record nodes.
"""

from __future__ import annotations

import enum
import functools
import json
import re
import types
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    Annotated,
    Any,
    Dict,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from ..exceptions import InvalidSchema, SchemaError
from ..models.fields import CompactLen, FixedLen, WireType

INTEGER_WIDTHS = {
    "u8": 1,
    "u16": 2,
    "u32": 4,
    "u64": 8,
    "u128": 16,
    "i8": 1,
    "i16": 2,
    "i32": 4,
    "i64": 8,
    "i128": 16,
}
FLOAT_WIDTHS = {"f32": 4, "f64": 8}
PRIMITIVE_KINDS = frozenset(
    [*INTEGER_WIDTHS, *FLOAT_WIDTHS, "bool", "string", "bytes", "unit"]
)


@dataclass(frozen=True)
class Primitive:
    """A scalar, or a length-prefixed ``string``/``bytes`` blob."""

    kind: str

    def __post_init__(self) -> None:
        if self.kind not in PRIMITIVE_KINDS:
            raise InvalidSchema(f"Unknown primitive kind: {self.kind!r}")

    @property
    def width(self) -> Optional[int]:
        """Fixed encoded width in bytes, or None for string/bytes."""
        if self.kind in INTEGER_WIDTHS:
            return INTEGER_WIDTHS[self.kind]
        if self.kind in FLOAT_WIDTHS:
            return FLOAT_WIDTHS[self.kind]
        if self.kind == "bool":
            return 1
        if self.kind == "unit":
            return 0
        return None

    @property
    def is_integer(self) -> bool:
        return self.kind in INTEGER_WIDTHS

    @property
    def is_signed(self) -> bool:
        return self.kind.startswith("i")

    @property
    def is_float(self) -> bool:
        return self.kind in FLOAT_WIDTHS

    def __str__(self) -> str:
        return self.kind


@dataclass(frozen=True)
class FixedArray:
    """Exactly ``length`` elements, no length prefix."""

    element: "TypeNode"
    length: int

    def __post_init__(self) -> None:
        if self.length < 1:
            raise InvalidSchema(f"FixedArray length must be >= 1, got {self.length}")

    def __str__(self) -> str:
        return f"[{self.element}; {self.length}]"


@dataclass(frozen=True)
class Sequence:
    """Length-prefixed elements; ``compact`` selects the short-vec prefix."""

    element: "TypeNode"
    compact: bool = False

    def __str__(self) -> str:
        return f"{'short_vec' if self.compact else 'vec'}<{self.element}>"


@dataclass(frozen=True)
class Option:
    """Optional value; ``None`` is the absent case, so options cannot nest."""

    inner: "TypeNode"

    def __post_init__(self) -> None:
        if isinstance(self.inner, Option):
            raise InvalidSchema(
                f"Nested option<{self.inner}> cannot tell Some(None) from None"
            )

    def __str__(self) -> str:
        return f"option<{self.inner}>"


@dataclass(frozen=True)
class Field:
    name: str
    type: "TypeNode"


@dataclass(frozen=True)
class Record:
    """Ordered fields encoded back to back.

    Field order is the only wire identity; names key the in-memory value.
    When built from a Pydantic model, ``model`` is that class and decoding
    produces instances of it.
    """

    name: str
    fields: Tuple[Field, ...]
    model: Optional[Type[BaseModel]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        _check_unique(self.name, [f.name for f in self.fields], "field")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Variant:
    name: str
    payload: Optional["TypeNode"] = None


@dataclass(frozen=True)
class TaggedUnion:
    """Ordered variants; the discriminant is the variant's declared index.

    ``enum`` is set for unions derived from an ``enum.Enum`` class, in which
    case decoded values are members of that enum.
    """

    name: str
    variants: Tuple[Variant, ...]
    enum: Optional[Type[enum.Enum]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", tuple(self.variants))
        if not self.variants:
            raise InvalidSchema(f"TaggedUnion {self.name} declares no variants")
        _check_unique(self.name, [v.name for v in self.variants], "variant")

    def index_of(self, variant_name: str) -> int:
        for index, variant in enumerate(self.variants):
            if variant.name == variant_name:
                return index
        raise KeyError(variant_name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Ref:
    """Indirection to a named type in a registry; the only legal cycle edge."""

    name: str
    registry: "TypeRegistry" = field(compare=False, repr=False)

    def resolve(self) -> "TypeNode":
        return self.registry.resolve(self.name)

    def __str__(self) -> str:
        return self.name


TypeNode = Union[Primitive, FixedArray, Sequence, Option, Record, TaggedUnion, Ref]


class UnionValue(NamedTuple):
    """In-memory value of a tagged union: variant name plus payload."""

    variant: str
    payload: Any = None


def _check_unique(owner: str, names: List[str], what: str) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise InvalidSchema(f"{owner}: duplicate {what} name {name!r}")
        seen.add(name)


def resolve(node: TypeNode) -> TypeNode:
    """Follow Ref indirections until a concrete node is reached."""
    seen = set()
    while isinstance(node, Ref):
        if node.name in seen:
            raise InvalidSchema(f"Ref cycle without a concrete type at {node.name}")
        seen.add(node.name)
        node = node.resolve()
    return node


class TypeRegistry:
    """Named Record and TaggedUnion types.

    Named types may refer to each other (and themselves) through ``Ref``
    nodes. A cycle must pass through an Option, Sequence or TaggedUnion,
    otherwise no finite value of the type exists.

    Example:
        >>> registry = TypeRegistry()
        >>> registry.register(Record("Node", [
        ...     Field("value", Primitive("u32")),
        ...     Field("next", Option(registry.ref("Node"))),
        ... ]))
        >>> registry.validate()
    """

    def __init__(self) -> None:
        self._types: Dict[str, TypeNode] = {}

    def register(self, node: TypeNode, name: Optional[str] = None) -> TypeNode:
        """Register a node under ``name`` (defaults to the node's own name)."""
        if not isinstance(node, (Record, TaggedUnion)):
            raise SchemaError(f"Only record and union types can be named, got {node}")
        if name is None:
            name = getattr(node, "name", None)
        if not name:
            raise SchemaError(f"Cannot register unnamed type {node}")
        if name in self._types or name in PRIMITIVE_KINDS:
            raise SchemaError(f"Type {name!r} is already defined")
        self._types[name] = node
        return node

    def ref(self, name: str) -> Ref:
        return Ref(name, self)

    def resolve(self, name: str) -> TypeNode:
        try:
            return self._types[name]
        except KeyError:
            raise SchemaError(f"Unknown type {name!r}") from None

    def names(self) -> List[str]:
        return list(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def validate(self) -> None:
        """Check every Ref resolves and no cycle lacks a terminating construct.

        Raises:
            SchemaError: If a Ref is dangling
            InvalidSchema: If a type can only be infinitely large
        """
        edges = {name: set(_unguarded_refs(node, self)) for name, node in self._types.items()}

        visiting: set = set()
        done: set = set()

        def visit(name: str, path: List[str]) -> None:
            if name in done:
                return
            if name in visiting:
                cycle = " -> ".join(path[path.index(name) :] + [name])
                raise InvalidSchema(
                    f"Recursive type has no finite encoding: {cycle}. "
                    f"Wrap the recursion in option<>, vec<> or a union variant."
                )
            visiting.add(name)
            for target in sorted(edges.get(name, ())):
                visit(target, path + [name])
            visiting.discard(name)
            done.add(name)

        for name in self._types:
            visit(name, [])

    @classmethod
    def from_document(cls, document: Any) -> TypeRegistry:
        """Build a registry from a parsed JSON schema document.

        Raises:
            SchemaError: If the document is malformed or references unknown types
        """
        try:
            parsed = SchemaDocument.model_validate(document)
        except ValidationError as e:
            raise SchemaError(f"Malformed schema document: {e}") from e

        registry = cls()
        declared = set(parsed.types)
        for name, definition in parsed.types.items():
            if definition.record is not None:
                node: TypeNode = Record(
                    name,
                    [
                        Field(field_name, _parse(tag, registry, declared))
                        for field_name, tag in definition.record
                    ],
                )
            elif definition.union is not None:
                node = TaggedUnion(
                    name,
                    [
                        Variant(
                            variant_name,
                            None if tag is None else _parse(tag, registry, declared),
                        )
                        for variant_name, tag in definition.union
                    ],
                )
            else:
                raise SchemaError(f"Type {name} defines neither a record nor a union")
            registry.register(node)
        registry.validate()
        return registry


def _unguarded_refs(node: TypeNode, registry: TypeRegistry) -> Iterator[str]:
    """Yield names reachable from ``node`` without crossing a terminating construct."""
    if isinstance(node, Ref):
        node.resolve()
        yield node.name
    elif isinstance(node, FixedArray):
        yield from _unguarded_refs(node.element, registry)
    elif isinstance(node, Record):
        for f in node.fields:
            yield from _unguarded_refs(f.type, registry)
    elif isinstance(node, (Option, Sequence)):
        _check_refs(node.inner if isinstance(node, Option) else node.element, registry)
    elif isinstance(node, TaggedUnion):
        for variant in node.variants:
            if variant.payload is not None:
                _check_refs(variant.payload, registry)


def _check_refs(node: TypeNode, registry: TypeRegistry) -> None:
    for _ in _unguarded_refs(node, registry):
        pass


class TypeDefinition(BaseModel):
    """One named type in a schema document: either a record or a union."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    record: Optional[List[Tuple[str, str]]] = None
    union: Optional[List[Tuple[str, Optional[str]]]] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> TypeDefinition:
        if (self.record is None) == (self.union is None):
            raise ValueError("a type definition needs exactly one of 'record' or 'union'")
        return self


class SchemaDocument(BaseModel):
    """Top-level schema file: ``{"types": {name: definition}}``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    types: Dict[str, TypeDefinition]


def load_schema(path: Union[str, Path]) -> TypeRegistry:
    """Load a JSON schema document into a TypeRegistry.

    Raises:
        SchemaError: If the file is unreadable or the schema is invalid
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SchemaError(f"Cannot read schema file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Schema file {path} is not valid JSON: {e}") from e
    return TypeRegistry.from_document(document)


# Type tag parsing -----------------------------------------------------------

_TOKEN = re.compile(r"\s*(?:(?P<ident>[A-Za-z_][A-Za-z0-9_]*)|(?P<number>\d+)|(?P<punct>[<>\[\];]))")


def _tokenize(tag: str) -> List[str]:
    tokens = []
    position = 0
    tag = tag.rstrip()
    while position < len(tag):
        match = _TOKEN.match(tag, position)
        if match is None:
            raise SchemaError(f"Invalid type tag {tag!r} at position {position}")
        tokens.append(match.group(match.lastgroup))
        position = match.end()
    return tokens


class _TagParser:
    def __init__(
        self, tag: str, registry: Optional[TypeRegistry], refs: Optional[set]
    ) -> None:
        self.tag = tag
        self.tokens = _tokenize(tag)
        self.index = 0
        self.registry = registry
        self.refs = refs

    def _next(self) -> str:
        if self.index >= len(self.tokens):
            raise SchemaError(f"Unexpected end of type tag {self.tag!r}")
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _expect(self, token: str) -> None:
        actual = self._next()
        if actual != token:
            raise SchemaError(f"Expected {token!r} in type tag {self.tag!r}, got {actual!r}")

    def parse(self) -> TypeNode:
        node = self._node()
        if self.index != len(self.tokens):
            raise SchemaError(f"Unexpected {self.tokens[self.index]!r} in type tag {self.tag!r}")
        return node

    def _node(self) -> TypeNode:
        token = self._next()
        if token == "[":
            element = self._node()
            self._expect(";")
            length = self._next()
            if not length.isdigit():
                raise SchemaError(f"Array length must be a number in {self.tag!r}")
            self._expect("]")
            return FixedArray(element, int(length))
        if token in ("option", "vec", "short_vec"):
            self._expect("<")
            inner = self._node()
            self._expect(">")
            if token == "option":
                return Option(inner)
            return Sequence(inner, compact=token == "short_vec")
        if token in PRIMITIVE_KINDS:
            return Primitive(token)
        if self.refs is not None and token in self.refs and self.registry is not None:
            return self.registry.ref(token)
        if self.registry is not None and token in self.registry:
            return self.registry.resolve(token)
        raise SchemaError(f"Unknown type {token!r} in type tag {self.tag!r}")


def _parse(tag: str, registry: TypeRegistry, declared: set) -> TypeNode:
    return _TagParser(tag, registry, declared).parse()


def describe(kind: str, registry: Optional[TypeRegistry] = None) -> TypeNode:
    """Parse a type tag into a TypeModel node.

    Supported tags: primitive kinds (``u8`` ... ``i128``, ``bool``, ``f32``,
    ``f64``, ``string``, ``bytes``, ``unit``), ``option<T>``, ``vec<T>``,
    ``short_vec<T>``, ``[T; N]`` and names registered in ``registry``.

    Args:
        kind: Type tag to parse
        registry: Registry providing named record/union types

    Returns:
        TypeModel node (shared, read-only)

    Raises:
        SchemaError: If the tag is malformed or names an unknown type

    Example:
        >>> describe("option<[u8; 4]>")
        Option(inner=FixedArray(element=Primitive(kind='u8'), length=4))
    """
    return _TagParser(kind, registry, None).parse()


# Pydantic model introspection -------------------------------------------------


@functools.lru_cache(maxsize=None)
def schema_from_model(model_class: Type[BaseModel]) -> Record:
    """Build a Record node from a Pydantic model class.

    Integer fields need a width marker (``U8``, ``I64``, ``WireType(...)``);
    floats default to ``f64``. ``list[T]`` becomes ``vec<T>`` unless marked
    with ``FixedLen(n)`` or ``CompactLen()``. ``Optional[T]`` becomes
    ``option<T>``, nested models become nested records and ``enum.Enum``
    classes become unit-variant unions in member order.

    Raises:
        SchemaError: If a field's type has no wire representation
    """
    fields = []
    for field_name, field_info in model_class.model_fields.items():
        annotation = field_info.annotation
        if annotation is None:
            raise SchemaError(f"Field {field_name} has no type annotation")
        try:
            node = _node_from_annotation(annotation, tuple(field_info.metadata))
        except SchemaError as e:
            raise SchemaError(f"{model_class.__name__}.{field_name}: {e}") from e
        fields.append(Field(field_name, node))
    return Record(model_class.__name__, fields, model=model_class)


def _node_from_annotation(annotation: Any, metadata: Tuple[Any, ...]) -> TypeNode:
    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return _node_from_annotation(args[0], metadata + tuple(args[1:]))

    if origin is Union or origin is types.UnionType:
        non_none_args = [arg for arg in args if arg is not type(None)]
        if len(non_none_args) != 1 or len(args) != 2:
            raise SchemaError(f"complex Union types not supported: {annotation}")
        return Option(_node_from_annotation(non_none_args[0], metadata))

    if origin is list:
        if not args:
            raise SchemaError("list fields need an element type")
        element = _node_from_annotation(args[0], ())
        for marker in metadata:
            if isinstance(marker, FixedLen):
                return FixedArray(element, marker.length)
            if isinstance(marker, CompactLen):
                return Sequence(element, compact=True)
        return Sequence(element)

    wire_kind = next((m.kind for m in metadata if isinstance(m, WireType)), None)

    if annotation is bool:
        return Primitive("bool")
    if annotation is int:
        if wire_kind is None or wire_kind not in INTEGER_WIDTHS:
            raise SchemaError("integer fields require a width marker such as U32")
        return Primitive(wire_kind)
    if annotation is float:
        if wire_kind is not None and wire_kind not in FLOAT_WIDTHS:
            raise SchemaError(f"float field with non-float width marker {wire_kind}")
        return Primitive(wire_kind or "f64")
    if annotation is str:
        return Primitive("string")
    if annotation is bytes:
        return Primitive("bytes")
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return TaggedUnion(
            annotation.__name__,
            [Variant(member.name) for member in annotation],
            enum=annotation,
        )
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return schema_from_model(annotation)

    raise SchemaError(
        f"unsupported type {annotation}. "
        f"Supported: bool, sized int/float, str, bytes, list, Optional, enum, nested models."
    )
