"""End-to-end integration tests."""

from __future__ import annotations

import enum
import json
from pathlib import Path
from typing import Annotated, Optional

from wirecodec import (
    U8,
    U16,
    U32,
    U64,
    BaseRecord,
    CompactLen,
    FixedLen,
    HarnessConfig,
    Stage,
    encoded_size,
    field_sizes,
    load_schema,
    schema_from_model,
    static_size,
    verify_file,
)
from wirecodec.conformance import to_json


class Phase(enum.Enum):
    """Mission phase enum."""

    STARTUP = 1
    TRANSIT = 2
    SURVEY = 3


class AccountMeta(BaseRecord):
    """Account reference inside an instruction."""

    key: Annotated[list[U8], FixedLen(32)]
    writable: bool


class Instruction(BaseRecord):
    """Instruction with compact-length account and data lists."""

    program: U8
    accounts: Annotated[list[AccountMeta], CompactLen()]
    data: Annotated[list[U8], CompactLen()]


class StatusReport(BaseRecord):
    """Vehicle status report."""

    vehicle_id: U16
    phase: Phase
    depth_cm: U32
    timestamp: U64
    label: Optional[str] = None


class TestEndToEndWorkflow:
    """Test complete end-to-end workflows."""

    def test_status_report_both_formats(self) -> None:
        status = StatusReport(vehicle_id=7, phase=Phase.SURVEY, depth_cm=1500, timestamp=2**40)

        fixed = status.encode("fixed")
        tagged = status.encode("tagged")

        # Only the discriminant width differs for this record.
        assert len(fixed) == 2 + 4 + 4 + 8 + 1
        assert len(tagged) == 2 + 1 + 4 + 8 + 1
        assert StatusReport.decode(fixed) == status
        assert StatusReport.decode(tagged, "tagged") == status

    def test_instruction_layout(self) -> None:
        instruction = Instruction(
            program=2,
            accounts=[AccountMeta(key=[1] * 32, writable=True)],
            data=list(range(200)),
        )
        data = instruction.encode("tagged")

        assert data[0] == 2
        assert data[1] == 1  # one account, compact prefix
        assert data[2:34] == bytes([1] * 32)
        assert data[34] == 1
        assert data[35:37] == bytes([0xC8, 0x01])  # 200 as a compact length
        assert len(data) == 37 + 200
        assert encoded_size(Instruction, instruction, "tagged") == len(data)
        assert Instruction.decode(data, "tagged") == instruction

    def test_sizes(self) -> None:
        assert static_size(AccountMeta) == 33
        assert static_size(Instruction) is None
        assert field_sizes(StatusReport, "tagged") == {
            "vehicle_id": 2,
            "phase": 1,
            "depth_cm": 4,
            "timestamp": 8,
            "label": None,
        }

    def test_model_values_serialize_to_vectors(self, tmp_path: Path) -> None:
        """Bytes produced here verify as golden vectors."""
        status = StatusReport(vehicle_id=1, phase=Phase.TRANSIT, depth_cm=3, timestamp=4, label="x")
        record = schema_from_model(StatusReport)
        vectors = [
            {
                "name": f"status_{codec}",
                "codec": codec,
                "type_tag": "StatusReport",
                "value": to_json(record, status),
                "encoded": list(status.encode(codec)),
            }
            for codec in ("fixed", "tagged")
        ]
        schema = {
            "types": {
                "Phase": {"union": [["STARTUP", None], ["TRANSIT", None], ["SURVEY", None]]},
                "StatusReport": {
                    "record": [
                        ["vehicle_id", "u16"],
                        ["phase", "Phase"],
                        ["depth_cm", "u32"],
                        ["timestamp", "u64"],
                        ["label", "option<string>"],
                    ]
                },
            }
        }
        vector_path = tmp_path / "vectors.json"
        schema_path = tmp_path / "schema.json"
        vector_path.write_text(json.dumps(vectors))
        schema_path.write_text(json.dumps(schema))

        report = verify_file(vector_path, HarnessConfig(registry=load_schema(schema_path)))
        assert report.ok, report.diagnostics()
        assert report.passed == 2


class TestConformanceWorkflow:
    """Test running shipped vector files."""

    def test_shipped_vectors(self, vectors_path: Path, schema_path: Path) -> None:
        report = verify_file(vectors_path, HarnessConfig(registry=load_schema(schema_path), jobs=4))
        assert report.ok, report.diagnostics()

    def test_mixed_file(self, failing_vectors_path: Path) -> None:
        report = verify_file(failing_vectors_path)
        failure_stages = [r.stage for r in report.failures]
        assert failure_stages == [Stage.TRAILING_BYTES, Stage.ENCODE_MISMATCH, Stage.ENCODE_ERROR]
