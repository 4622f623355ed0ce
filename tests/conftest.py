"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from wirecodec import TypeRegistry, load_schema

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding vector and schema files."""
    return FIXTURES


@pytest.fixture
def schema_path() -> Path:
    """Schema defining Point, Shape and the recursive Node list."""
    return FIXTURES / "schema.json"


@pytest.fixture
def vectors_path() -> Path:
    """Vector file in which every vector passes."""
    return FIXTURES / "vectors.json"


@pytest.fixture
def failing_vectors_path() -> Path:
    """Vector file mixing passing vectors with one failure per stage."""
    return FIXTURES / "failing_vectors.json"


@pytest.fixture
def registry(schema_path: Path) -> TypeRegistry:
    """Registry loaded from the shared schema file."""
    return load_schema(schema_path)
