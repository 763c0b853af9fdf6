#!/usr/bin/env python3
"""Quick smoke test: import the app, then run metadata, forensic and ELA passes on a generated photo."""

import asyncio
import io
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
try:
    import metalens  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    sys.path.insert(0, str(ROOT))
    import metalens  # type: ignore  # noqa: F401

from metalens.log import configure_logging
from metalens.pipeline import analyze_forensics, extract_metadata, run_ela_analysis
from metalens.registry import get_registry


def build_sample() -> bytes:
    from PIL import Image

    exif = Image.Exif()
    exif[0x010F] = "SmokeCam"
    exif[0x0110] = "SC-1"
    exif[0x0132] = "2024:01:01 00:00:00"

    img = Image.new("RGB", (96, 64), color=(200, 180, 160))
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=92, exif=exif)
    return buffer.getvalue()


async def run(data: bytes) -> int:
    metadata = await extract_metadata(data)
    failed = [sid for sid, src in metadata["sources"].items() if src["status"] != "success"]
    print("Strategies:")
    for sid, src in metadata["sources"].items():
        mark = "✅" if src["status"] == "success" else "❌"
        print(f"  {mark} {sid} ({src['unique_fields']} fields)")
    if failed:
        print(f"Strategies failed: {', '.join(failed)}")
        return 1

    make = metadata["consolidated"].get("Make", {})
    print(f"Make: {make.get('value')} (confidence {make.get('confidence')}, sources {make.get('sources')})")

    report = await analyze_forensics(data)
    print(f"Signature: {report['signature']['type']}, entropy {report['entropy']['overall']}")

    ela = await run_ela_analysis(data)
    print(f"ELA: score {ela.overall_score:.2f}, verdict {ela.verdict.value}")
    return 0


def main() -> int:
    if os.getenv("SMOKE_VERBOSE", "").lower() in {"1", "true", "yes"}:
        configure_logging()

    import app  # noqa: F401

    print(f"Registered strategies: {', '.join(get_registry())}")
    code = asyncio.run(run(build_sample()))
    if code == 0:
        print("Smoke test passed: app importable and all strategies succeeded.")
    return code


if __name__ == "__main__":
    sys.exit(main())
