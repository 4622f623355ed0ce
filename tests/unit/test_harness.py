"""Tests for vector loading and the conformance harness."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from wirecodec import (
    DecodeError,
    HarnessConfig,
    SchemaError,
    Stage,
    TestVector,
    TypeRegistry,
    VectorLoadError,
    describe,
    load_vectors,
    run_vectors,
    verify_file,
)
from wirecodec.codec.codecs import CODECS
from wirecodec.conformance import first_difference, parse_vectors, resolve_model, run_vector


def make_vector(**overrides: Any) -> TestVector:
    fields = {"name": "v", "codec": "fixed", "type_tag": "u32", "value": 42, "encoded": [42, 0, 0, 0]}
    fields.update(overrides)
    return TestVector(**fields)


class TestVectorLoading:
    """Test vector file parsing."""

    def test_load(self, vectors_path: Path) -> None:
        vectors = load_vectors(vectors_path)
        assert len(vectors) == 21
        assert vectors[1].name == "u32_42"
        assert vectors[1].expected_bytes == b"*\x00\x00\x00"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(VectorLoadError, match="Cannot read"):
            load_vectors(tmp_path / "missing.json")

    def test_invalid_json(self) -> None:
        with pytest.raises(VectorLoadError):
            parse_vectors("[{")

    def test_missing_key(self) -> None:
        document = [{"name": "v", "codec": "fixed", "type_tag": "u8", "encoded": [1]}]
        with pytest.raises(VectorLoadError, match="value"):
            parse_vectors(json.dumps(document))

    def test_null_value_is_present(self) -> None:
        document = [{"name": "v", "codec": "fixed", "type_tag": "option<u8>", "value": None, "encoded": [0]}]
        assert parse_vectors(json.dumps(document))[0].value is None

    @pytest.mark.parametrize("encoded", [[256], [-1], ["1"], [1.5]])
    def test_bad_byte(self, encoded: list) -> None:
        document = [{"name": "v", "codec": "fixed", "type_tag": "u8", "value": 1, "encoded": encoded}]
        with pytest.raises(VectorLoadError):
            parse_vectors(json.dumps(document))

    def test_unknown_codec(self) -> None:
        document = [{"name": "v", "codec": "protobuf", "type_tag": "u8", "value": 1, "encoded": [1]}]
        with pytest.raises(VectorLoadError):
            parse_vectors(json.dumps(document))

    def test_duplicate_names(self) -> None:
        entry = {"name": "v", "codec": "fixed", "type_tag": "u8", "value": 1, "encoded": [1]}
        with pytest.raises(VectorLoadError, match="duplicate vector name 'v'"):
            parse_vectors(json.dumps([entry, entry]))


class TestResolveModel:
    """Test type tag resolution for vectors."""

    def test_compact_tags(self) -> None:
        assert resolve_model(make_vector(codec="compact_len", type_tag="compact_u16")) == describe("u16")

    def test_compact_rejects_other_tags(self) -> None:
        with pytest.raises(SchemaError, match="compact_len"):
            resolve_model(make_vector(codec="compact_len", type_tag="u32"))

    def test_unknown_tag_names_vector(self) -> None:
        with pytest.raises(SchemaError, match="Vector v"):
            resolve_model(make_vector(type_tag="Point"))

    def test_registry(self, registry: TypeRegistry) -> None:
        vector = make_vector(type_tag="Point", value={"x": 0, "y": 0}, encoded=[0] * 8)
        assert resolve_model(vector, registry) == describe("Point", registry)


class TestFirstDifference:
    """Test byte diff location."""

    def test_identical(self) -> None:
        assert first_difference(b"abc", b"abc") is None

    def test_differing_byte(self) -> None:
        diff = first_difference(b"\x2b\x00", b"\x2a\x00")
        assert (diff.offset, diff.expected, diff.actual) == (0, 0x2B, 0x2A)
        assert diff.describe() == "first difference at offset 0: expected 0x2b, actual 0x2a"

    def test_length_difference(self) -> None:
        diff = first_difference(b"\x01\x00", b"\x01")
        assert (diff.offset, diff.expected, diff.actual) == (1, 0, None)
        assert "actual <end>" in diff.describe()


class TestRunVector:
    """Test the per-vector state machine."""

    def test_pass(self) -> None:
        result = run_vector(make_vector(), describe("u32"))
        assert result.passed
        assert result.stage is None

    def test_encode_error(self) -> None:
        result = run_vector(make_vector(type_tag="u8", value=256, encoded=[0]), describe("u8"))
        assert result.stage is Stage.ENCODE_ERROR
        assert "out of range" in result.detail

    def test_value_not_representable(self) -> None:
        result = run_vector(make_vector(value="forty-two"), describe("u32"))
        assert result.stage is Stage.ENCODE_ERROR

    def test_encode_mismatch(self) -> None:
        result = run_vector(make_vector(encoded=[43, 0, 0, 0]), describe("u32"))
        assert result.stage is Stage.ENCODE_MISMATCH
        assert result.diff is not None
        assert result.diff.offset == 0
        assert "expected 0x2b, actual 0x2a" in result.detail

    def test_expected_shorter(self) -> None:
        result = run_vector(make_vector(encoded=[42, 0, 0]), describe("u32"))
        assert result.stage is Stage.ENCODE_MISMATCH
        assert result.diff.expected is None

    def test_trailing_bytes(self) -> None:
        result = run_vector(make_vector(type_tag="u8", value=1, encoded=[1, 0]), describe("u8"))
        assert result.stage is Stage.TRAILING_BYTES

    def test_decode_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class BrokenDecoder:
            name = "fixed"

            def encode(self, model: Any, value: Any) -> bytes:
                return CODECS["tagged"].encode(model, value)

            def decode_exact(self, model: Any, data: bytes) -> Any:
                raise DecodeError("broken", codec="fixed", offset=0)

        monkeypatch.setitem(CODECS, "fixed", BrokenDecoder())
        result = run_vector(make_vector(), describe("u32"))
        assert result.stage is Stage.DECODE_ERROR
        assert "broken" in result.detail

    def test_decode_mismatch(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class OffByOne:
            name = "fixed"

            def encode(self, model: Any, value: Any) -> bytes:
                return CODECS["tagged"].encode(model, value)

            def decode_exact(self, model: Any, data: bytes) -> int:
                return CODECS["tagged"].decode_exact(model, data) + 1

        monkeypatch.setitem(CODECS, "fixed", OffByOne())
        result = run_vector(make_vector(), describe("u32"))
        assert result.stage is Stage.DECODE_MISMATCH
        assert result.detail == "decoded 43, expected 42"

    def test_diagnostic(self) -> None:
        result = run_vector(make_vector(name="bad", encoded=[43, 0, 0, 0]), describe("u32"))
        assert result.diagnostic().startswith("FAIL bad [fixed] EncodeMismatch: ")


class TestRunVectors:
    """Test whole-file runs."""

    def test_all_pass(self, vectors_path: Path, registry: TypeRegistry) -> None:
        report = verify_file(vectors_path, HarnessConfig(registry=registry))
        assert report.diagnostics() == []
        assert report.ok
        assert report.passed == 21

    def test_failures_do_not_stop_run(self, failing_vectors_path: Path) -> None:
        report = verify_file(failing_vectors_path)
        stages = {r.name: r.stage for r in report.results}
        assert stages == {
            "a_passes": None,
            "b_trailing": Stage.TRAILING_BYTES,
            "c_wrong_byte": Stage.ENCODE_MISMATCH,
            "d_out_of_range": Stage.ENCODE_ERROR,
            "e_tagged_passes": None,
        }
        assert report.summary() == "2 passed, 3 failed"
        assert not report.ok
        assert len(report.diagnostics()) == 3

    def test_codec_filter(self, failing_vectors_path: Path) -> None:
        report = verify_file(failing_vectors_path, HarnessConfig(codecs=frozenset({"tagged"})))
        assert [r.name for r in report.results] == ["e_tagged_passes"]
        assert report.ok

    def test_parallel_matches_sequential(self, vectors_path: Path, registry: TypeRegistry) -> None:
        sequential = verify_file(vectors_path, HarnessConfig(registry=registry))
        parallel = verify_file(vectors_path, HarnessConfig(registry=registry, jobs=4))
        assert parallel.to_dict() == sequential.to_dict()

    def test_results_sorted_by_name(self) -> None:
        vectors = [make_vector(name="z"), make_vector(name="a"), make_vector(name="m")]
        report = run_vectors(vectors, HarnessConfig(jobs=2))
        assert [r.name for r in report.results] == ["a", "m", "z"]

    def test_unknown_type_is_fatal(self) -> None:
        vectors = [make_vector(name="ok"), make_vector(name="bad", type_tag="Nope")]
        with pytest.raises(SchemaError):
            run_vectors(vectors)

    def test_report_json(self, failing_vectors_path: Path) -> None:
        document = verify_file(failing_vectors_path).to_dict()
        assert document["passed"] == 2
        assert document["failed"] == 3
        wrong = next(r for r in document["results"] if r["name"] == "c_wrong_byte")
        assert wrong["stage"] == "EncodeMismatch"
        assert wrong["diff"] == {"offset": 0, "expected": 43, "actual": 42}


class TestHarnessConfig:
    """Test HarnessConfig validation."""

    def test_defaults(self) -> None:
        config = HarnessConfig()
        assert config.codecs == frozenset({"fixed", "tagged", "compact_len"})
        assert config.jobs == 1

    def test_unknown_codec(self) -> None:
        with pytest.raises(ValueError, match="Unknown codec"):
            HarnessConfig(codecs=frozenset({"json"}))

    def test_jobs(self) -> None:
        with pytest.raises(ValueError, match="jobs"):
            HarnessConfig(jobs=0)
