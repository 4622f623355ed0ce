"""Golden test vector files.

A vector file is a JSON array of entries:

    [
      {"name": "u32_42", "codec": "fixed", "type_tag": "u32",
       "value": 42, "encoded": [42, 0, 0, 0]}
    ]

Vectors are validated with Pydantic on load and are immutable afterwards.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, ClassVar, Dict, Iterable, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..codec.schema import Primitive, TypeNode, TypeRegistry, describe, resolve
from ..exceptions import SchemaError, VectorLoadError

logger = logging.getLogger(__name__)

CodecName = Literal["fixed", "tagged", "compact_len"]
CODEC_NAMES: Tuple[str, ...] = ("fixed", "tagged", "compact_len")

# Type tags accepted for compact_len vectors, all meaning u16.
COMPACT_TYPE_TAGS = frozenset(["u16", "compact_u16"])

Byte = Annotated[int, Field(ge=0, le=255, strict=True)]


class TestVector(BaseModel):
    """One externally authored (value, expected bytes) pair.

    Attributes:
        name: Unique vector name, used to order the report
        codec: ``fixed``, ``tagged`` or ``compact_len``
        type_tag: Type tag resolved with ``describe()``
        value: JSON representation of the logical value
        encoded: Expected encoding as a list of byte values
    """

    __test__: ClassVar[bool] = False

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    codec: CodecName
    type_tag: str = Field(min_length=1)
    value: Any
    encoded: Tuple[Byte, ...]

    @property
    def expected_bytes(self) -> bytes:
        return bytes(self.encoded)


_VECTOR_LIST = TypeAdapter(List[TestVector])


def parse_vectors(text: Union[str, bytes], source: str = "<string>") -> List[TestVector]:
    """Parse and validate a vector document.

    Raises:
        VectorLoadError: If the JSON is malformed, an entry is invalid, or
            two vectors share a name
    """
    try:
        vectors = _VECTOR_LIST.validate_json(text)
    except ValidationError as e:
        raise VectorLoadError(f"Invalid vector file {source}: {e}") from e

    seen: Dict[str, int] = {}
    for index, vector in enumerate(vectors):
        if vector.name in seen:
            raise VectorLoadError(
                f"Invalid vector file {source}: duplicate vector name {vector.name!r} "
                f"(entries {seen[vector.name]} and {index})"
            )
        seen[vector.name] = index
    return vectors


def load_vectors(path: Union[str, Path]) -> List[TestVector]:
    """Load and validate a vector file.

    Raises:
        VectorLoadError: If the file is unreadable or malformed
    """
    path = Path(path)
    try:
        text = path.read_bytes()
    except OSError as e:
        raise VectorLoadError(f"Cannot read vector file {path}: {e}") from e

    vectors = parse_vectors(text, str(path))
    logger.debug("Loaded %d vectors from %s", len(vectors), path)
    return vectors


def resolve_model(vector: TestVector, registry: Optional[TypeRegistry] = None) -> TypeNode:
    """Resolve a vector's type tag to a TypeModel node.

    Raises:
        SchemaError: If the tag is unknown or unusable with the vector's codec
    """
    if vector.codec == "compact_len":
        if vector.type_tag not in COMPACT_TYPE_TAGS:
            raise SchemaError(
                f"Vector {vector.name}: compact_len vectors must use type_tag "
                f"{' or '.join(sorted(COMPACT_TYPE_TAGS))}, got {vector.type_tag!r}"
            )
        return Primitive("u16")

    try:
        return resolve(describe(vector.type_tag, registry))
    except SchemaError as e:
        raise SchemaError(f"Vector {vector.name}: {e}") from e


def resolve_models(
    vectors: Iterable[TestVector], registry: Optional[TypeRegistry] = None
) -> Dict[str, TypeNode]:
    """Resolve every vector's type tag up front, keyed by vector name."""
    return {vector.name: resolve_model(vector, registry) for vector in vectors}
