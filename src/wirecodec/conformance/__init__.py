"""Golden-vector conformance harness for wirecodec.

This module loads externally authored test vectors, drives the codecs and
reports byte-exact pass/fail results.
"""

from __future__ import annotations

from .harness import (
    ByteDiff,
    ConformanceReport,
    HarnessConfig,
    Stage,
    VectorResult,
    first_difference,
    run_vector,
    run_vectors,
    verify_file,
)
from .values import from_json, to_json, values_equal
from .vectors import TestVector, load_vectors, parse_vectors, resolve_model

__all__ = [
    "TestVector",
    "load_vectors",
    "parse_vectors",
    "resolve_model",
    "from_json",
    "to_json",
    "values_equal",
    "Stage",
    "ByteDiff",
    "first_difference",
    "VectorResult",
    "ConformanceReport",
    "HarnessConfig",
    "run_vector",
    "run_vectors",
    "verify_file",
]
