"""Type layout CLI command."""

from __future__ import annotations

from typing import List, Optional

from ..codec.formats import FormatLike, WireFormat, get_format
from ..codec.schema import (
    FixedArray,
    Option,
    Primitive,
    Record,
    Ref,
    Sequence,
    TaggedUnion,
    TypeNode,
    TypeRegistry,
    describe,
)
from ..utils.sizing import min_size, static_size

LINE_WIDTH = 54


def print_layout(
    type_tag: str, registry: Optional[TypeRegistry] = None, codec: FormatLike = "fixed"
) -> None:
    """Print a breakdown of how a type is laid out on the wire.

    Args:
        type_tag: Type tag to describe
        registry: Registry providing named record/union types
        codec: ``"fixed"`` or ``"tagged"``
    """
    wire_format = get_format(codec)
    node = describe(type_tag, registry)

    print(f"{'=' * 12} {type_tag} ({wire_format.name}) {'=' * 12}")
    size = static_size(node, wire_format)
    if size is not None:
        print(f"Encoded size: {size} bytes (fixed)")
    else:
        print(f"Encoded size: variable, at least {min_size(node, wire_format)} bytes")
    print(
        f"Length prefix: {wire_format.length_width} bytes, "
        f"discriminant: {wire_format.discriminant_width} bytes"
    )
    print()

    print(f"{'-' * 24} Layout {'-' * 24}")
    for line in layout_lines(node, wire_format):
        print(line)
    print()


def layout_lines(node: TypeNode, codec: FormatLike = "fixed") -> List[str]:
    """Return one line per node of the type tree with its encoded size."""
    lines: List[str] = []
    _walk(node, get_format(codec), str(node), 0, lines, frozenset())
    return lines


def _line(lines: List[str], depth: int, label: str, size: str, note: str = "") -> None:
    head = f"{'  ' * depth}{label}"
    dots = "." * max(1, LINE_WIDTH - len(head) - len(size))
    lines.append(f"{head}{dots}{size}{'  ' + note if note else ''}")


def _size_text(node: TypeNode, wire_format: WireFormat) -> str:
    size = static_size(node, wire_format)
    if size is not None:
        return f"{size} bytes"
    return f">={min_size(node, wire_format)} bytes"


def _walk(
    node: TypeNode,
    wire_format: WireFormat,
    label: str,
    depth: int,
    lines: List[str],
    visiting: frozenset,
) -> None:
    if isinstance(node, Ref):
        if node.name in visiting:
            _line(lines, depth, label, "...", f"(recursive {node.name})")
            return
        visiting = visiting | {node.name}
        node = node.resolve()

    size = _size_text(node, wire_format)

    if isinstance(node, Primitive):
        if node.width is None:
            note = f"{node.kind}: {wire_format.length_width}-byte length + data"
        else:
            note = node.kind
        _line(lines, depth, label, size, note)
    elif isinstance(node, FixedArray):
        _line(lines, depth, label, size, f"{node.length} elements, no prefix")
        _walk(node.element, wire_format, "element", depth + 1, lines, visiting)
    elif isinstance(node, Sequence):
        prefix = (
            "compact count (1-3 bytes)"
            if node.compact
            else f"{wire_format.length_width}-byte count"
        )
        _line(lines, depth, label, size, prefix)
        _walk(node.element, wire_format, "element", depth + 1, lines, visiting)
    elif isinstance(node, Option):
        _line(lines, depth, label, size, "1-byte tag (0 = absent, 1 = present)")
        _walk(node.inner, wire_format, "some", depth + 1, lines, visiting)
    elif isinstance(node, Record):
        _line(lines, depth, label, size, f"record {node.name}")
        for i, f in enumerate(node.fields, 1):
            _walk(f.type, wire_format, f"{i}. {f.name}", depth + 1, lines, visiting)
    elif isinstance(node, TaggedUnion):
        _line(
            lines,
            depth,
            label,
            size,
            f"union {node.name}, {wire_format.discriminant_width}-byte discriminant",
        )
        for index, variant in enumerate(node.variants):
            variant_label = f"{index}: {variant.name}"
            if variant.payload is None:
                _line(lines, depth + 1, variant_label, "0 bytes", "(unit)")
            else:
                _walk(variant.payload, wire_format, variant_label, depth + 1, lines, visiting)
