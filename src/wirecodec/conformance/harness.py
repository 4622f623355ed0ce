"""Cross-implementation conformance harness.

Each vector runs through ``Encode -> CompareBytes -> Decode -> CompareValue``
and ends in a pass or a failure record naming the stage that failed. Codec
errors are converted into failure records so that one bad vector never stops
the rest of the run. Schema errors stay fatal: nothing can be compared
without a type.

Design Patterns:
- Work-list over independent vectors: codecs are pure, so vectors can run on
  a thread pool without synchronization
- Report normalization: results are sorted by vector name, so completion
  order never changes the report
"""

from __future__ import annotations

import enum
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

from ..codec.codecs import get_codec
from ..codec.schema import TypeNode, TypeRegistry
from ..exceptions import DecodeError, EncodeError, TrailingBytes
from .values import from_json, to_json, values_equal
from .vectors import CODEC_NAMES, TestVector, load_vectors, resolve_models

logger = logging.getLogger(__name__)


class Stage(str, enum.Enum):
    """Harness stage at which a vector failed."""

    ENCODE_ERROR = "EncodeError"
    ENCODE_MISMATCH = "EncodeMismatch"
    DECODE_ERROR = "DecodeError"
    TRAILING_BYTES = "TrailingBytes"
    DECODE_MISMATCH = "DecodeMismatch"


@dataclass(frozen=True)
class ByteDiff:
    """First differing byte between expected and actual encodings.

    ``expected``/``actual`` is None where that side ended before ``offset``.
    """

    offset: int
    expected: Optional[int]
    actual: Optional[int]

    def describe(self) -> str:
        return (
            f"first difference at offset {self.offset}: "
            f"expected {_fmt_byte(self.expected)}, actual {_fmt_byte(self.actual)}"
        )


def _fmt_byte(byte: Optional[int]) -> str:
    return "<end>" if byte is None else f"0x{byte:02x}"


def first_difference(expected: bytes, actual: bytes) -> Optional[ByteDiff]:
    """Locate the first offset at which two byte strings differ.

    Returns:
        ByteDiff, or None if the byte strings are identical
    """
    for offset, (want, got) in enumerate(zip(expected, actual)):
        if want != got:
            return ByteDiff(offset, want, got)
    if len(expected) == len(actual):
        return None
    offset = min(len(expected), len(actual))
    return ByteDiff(
        offset,
        expected[offset] if offset < len(expected) else None,
        actual[offset] if offset < len(actual) else None,
    )


@dataclass(frozen=True)
class VectorResult:
    """Outcome of one vector: passed when ``stage`` is None."""

    name: str
    codec: str
    type_tag: str
    stage: Optional[Stage] = None
    detail: str = ""
    diff: Optional[ByteDiff] = None

    @property
    def passed(self) -> bool:
        return self.stage is None

    def diagnostic(self) -> str:
        """One-line description of a failure."""
        if self.passed:
            return f"PASS {self.name} [{self.codec}]"
        return f"FAIL {self.name} [{self.codec}] {self.stage.value}: {self.detail}"

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "codec": self.codec,
            "type_tag": self.type_tag,
            "passed": self.passed,
        }
        if not self.passed:
            result["stage"] = self.stage.value
            result["detail"] = self.detail
        if self.diff is not None:
            result["diff"] = {
                "offset": self.diff.offset,
                "expected": self.diff.expected,
                "actual": self.diff.actual,
            }
        return result


@dataclass
class ConformanceReport:
    """Results of a harness run, ordered by vector name."""

    results: List[VectorResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    @property
    def failures(self) -> List[VectorResult]:
        return [r for r in self.results if not r.passed]

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def summary(self) -> str:
        return f"{self.passed} passed, {self.failed} failed"

    def diagnostics(self) -> List[str]:
        return [r.diagnostic() for r in self.failures]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class HarnessConfig:
    """Configuration for a conformance run.

    Attributes:
        codecs: Codec names to run; vectors for other codecs are skipped
            (default: all of ``fixed``, ``tagged``, ``compact_len``)
        jobs: Worker threads; 1 runs vectors sequentially in file order
        registry: Named record/union types referenced by type tags

    Examples:
        ```python
        from wirecodec.conformance import HarnessConfig, verify_file

        # Only the borsh-style vectors, four at a time
        config = HarnessConfig(codecs=frozenset({"tagged"}), jobs=4)
        report = verify_file("vectors.json", config)
        ```
    """

    codecs: FrozenSet[str] = frozenset(CODEC_NAMES)
    jobs: int = 1
    registry: Optional[TypeRegistry] = None

    def __post_init__(self) -> None:
        self.codecs = frozenset(self.codecs)
        unknown = self.codecs - set(CODEC_NAMES)
        if unknown:
            raise ValueError(
                f"Unknown codec(s) {', '.join(sorted(unknown))}. "
                f"Must be among: {', '.join(CODEC_NAMES)}"
            )
        if self.jobs < 1:
            raise ValueError(f"jobs must be >= 1, got {self.jobs}")


def run_vector(vector: TestVector, model: TypeNode) -> VectorResult:
    """Run one vector through encode, byte comparison, decode and value comparison.

    Codec errors become failure records; anything else propagates.
    """
    codec = get_codec(vector.codec)
    expected = vector.expected_bytes

    def fail(stage: Stage, detail: str, diff: Optional[ByteDiff] = None) -> VectorResult:
        result = VectorResult(vector.name, vector.codec, vector.type_tag, stage, detail, diff)
        logger.debug("%s", result.diagnostic())
        return result

    # Encode
    try:
        value = from_json(model, vector.value)
        actual = codec.encode(model, value)
    except EncodeError as e:
        return fail(Stage.ENCODE_ERROR, str(e))

    # CompareBytes
    diff = first_difference(expected, actual)
    mismatch = None
    if diff is not None:
        mismatch = f"{diff.describe()} (expected {len(expected)} bytes, got {len(actual)})"
        # Expected bytes that only extend our encoding go on to decode, which
        # reports them as trailing input.
        if diff.actual is not None:
            return fail(Stage.ENCODE_MISMATCH, mismatch, diff)

    # Decode
    try:
        decoded = codec.decode_exact(model, expected)
    except TrailingBytes as e:
        return fail(Stage.TRAILING_BYTES, str(e))
    except DecodeError as e:
        if mismatch is not None:
            return fail(Stage.ENCODE_MISMATCH, mismatch, diff)
        return fail(Stage.DECODE_ERROR, str(e))
    if mismatch is not None:
        return fail(Stage.ENCODE_MISMATCH, mismatch, diff)

    # CompareValue
    if not values_equal(model, decoded, value):
        return fail(
            Stage.DECODE_MISMATCH,
            f"decoded {json.dumps(to_json(model, decoded))}, "
            f"expected {json.dumps(vector.value)}",
        )

    logger.debug("PASS %s [%s]", vector.name, vector.codec)
    return VectorResult(vector.name, vector.codec, vector.type_tag)


def run_vectors(
    vectors: Iterable[TestVector], config: Optional[HarnessConfig] = None
) -> ConformanceReport:
    """Run every selected vector and collect a report.

    Args:
        vectors: Loaded test vectors
        config: Harness configuration (defaults to all codecs, sequential)

    Returns:
        ConformanceReport with results sorted by vector name

    Raises:
        SchemaError: If any selected vector's type tag cannot be resolved
    """
    config = config or HarnessConfig()
    selected = [v for v in vectors if v.codec in config.codecs]

    # Types are resolved before any vector runs; a bad type aborts the run.
    models = resolve_models(selected, config.registry)

    if config.jobs == 1 or len(selected) < 2:
        results = [run_vector(v, models[v.name]) for v in selected]
    else:
        with ThreadPoolExecutor(max_workers=config.jobs) as pool:
            futures = [pool.submit(run_vector, v, models[v.name]) for v in selected]
            results = [future.result() for future in futures]

    results.sort(key=lambda r: (r.name, r.codec))
    report = ConformanceReport(results)
    logger.info("Conformance run: %s", report.summary())
    return report


def verify_file(
    path: Union[str, Path], config: Optional[HarnessConfig] = None
) -> ConformanceReport:
    """Load a vector file and run it.

    Raises:
        VectorLoadError: If the file is unreadable or malformed
        SchemaError: If a type tag cannot be resolved
    """
    return run_vectors(load_vectors(path), config)
