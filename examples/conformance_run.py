#!/usr/bin/env python3
"""Conformance harness example for wirecodec.

Runs the vectors shipped next to this file against all three codecs, the
same check ``wirecodec verify vectors.json --schema schema.json`` performs.
"""

from __future__ import annotations

import logging
from pathlib import Path

from wirecodec import HarnessConfig, load_schema, verify_file

HERE = Path(__file__).parent


def main() -> None:
    """Run the conformance example."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = HarnessConfig(registry=load_schema(HERE / "schema.json"), jobs=4)
    report = verify_file(HERE / "vectors.json", config)

    for result in report.results:
        print(result.diagnostic())
    print(report.summary())


if __name__ == "__main__":
    main()
