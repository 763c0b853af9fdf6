import asyncio

import pytest

from metalens.cache import AnalysisCache, FileIdentity
from metalens.config import DEFAULT_THRESHOLDS
from metalens.errors import StrategyFailure
from metalens.extractors import MetadataExtractor
from metalens.models import ExtractionStatus
from metalens.pipeline import (
    analyze_forensics,
    extract_fields,
    extract_metadata,
    run_ela_analysis,
    run_strategies,
)
from metalens.registry import build_extractors

from conftest import CAMERA_MAKE


class ExplodingExtractor(MetadataExtractor):
    strategy_id = "exploding"
    label = "Exploding"

    def extract(self, data):
        return {}

    async def parse(self, data):
        raise RuntimeError("kaboom")


def test_strategy_results_keep_priority_order(exif_jpeg):
    results = asyncio.run(run_strategies(exif_jpeg))
    assert [r.strategy_id for r in results] == [
        "pillow_exif",
        "segment_scanner",
        "binary_structure",
        "xmp_packet",
    ]
    assert all(r.ok for r in results)


def test_raising_parse_becomes_error_result(flat_jpeg):
    extractors = build_extractors(["binary_structure"]) + [ExplodingExtractor()]
    results = asyncio.run(run_strategies(flat_jpeg, extractors))
    assert results[0].ok
    assert results[1].status is ExtractionStatus.ERROR
    assert results[1].error == "kaboom"


def test_metadata_agreement_across_sources(exif_jpeg):
    payload = asyncio.run(extract_metadata(exif_jpeg))
    make = payload["consolidated"]["Make"]
    assert make["value"] == CAMERA_MAKE
    assert make["sources"] == ["pillow_exif", "segment_scanner"]
    assert make["confidence"] == 100
    assert "conflicts" not in make
    assert payload["sources"]["xmp_packet"]["data"] == {"xmp_found": False}
    assert payload["inconsistency"]["severity"] in ("low", "medium")
    assert set(payload["derived"]) == {
        "focal_length_35mm",
        "hyperfocal_distance",
        "exposure_value",
        "light_value",
    }


def test_xmp_disagreement_is_a_conflict(exif_jpeg, xmp_blob):
    payload = asyncio.run(extract_metadata(exif_jpeg + xmp_blob))
    make = payload["consolidated"]["Make"]
    assert make["value"] == CAMERA_MAKE
    assert make["sources"][-1] == "xmp_packet"
    assert make["confidence"] == 67
    assert make["conflicts"] == [{"source": "xmp_packet", "value": "Nikon"}]
    assert payload["analysis"]["conflicts"] >= 1


def test_metadata_for_garbage_still_reports_scanners():
    payload = asyncio.run(extract_metadata(b"garbage bytes"))
    assert payload["sources"]["pillow_exif"]["status"] == "error"
    assert payload["consolidated"]["file_size"]["value"] == 13


def test_metadata_is_cached_per_identity(exif_jpeg):
    cache = AnalysisCache()
    identity = FileIdentity.for_bytes("cam.jpg", exif_jpeg)
    first = asyncio.run(extract_metadata(exif_jpeg, cache=cache, identity=identity))
    second = asyncio.run(extract_metadata(b"", cache=cache, identity=identity))
    assert second is first


def test_extract_fields_raises_when_primary_fails():
    with pytest.raises(StrategyFailure) as excinfo:
        asyncio.run(extract_fields(b"junk"))
    assert excinfo.value.strategy_id == "pillow_exif"


def test_forensic_report_for_zip_in_zeros(zip_in_zeros):
    report = asyncio.run(analyze_forensics(zip_in_zeros))
    assert report["file_size"] == 100
    assert report["signature"]["type"] == "Unknown"
    assert report["embedded_objects"] == [{"type": "ZIP", "offset": 40}]
    patterns = {p["pattern"]: p for p in report["suspicious_patterns"]}
    assert patterns["zip_signature"]["locations"] == [40]
    assert patterns["null_run"]["locations"] == [0, 44]
    assert report["hex_dump"]["total_bytes"] == 100
    assert report["hex_dump"]["displayed_bytes"] == 100
    assert len(report["hex_dump"]["lines"]) == 7
    assert report["jpeg_structure"]["is_jpeg"] is False
    assert set(report["hashes"]) == {"md5", "sha1", "sha256", "sha512", "crc32"}
    assert 0 < report["compression_ratio"] < 1


def test_forensic_hex_dump_respects_requested_bytes(flat_jpeg):
    report = asyncio.run(analyze_forensics(flat_jpeg, hex_bytes=32))
    assert report["hex_dump"]["displayed_bytes"] == 32
    assert len(report["hex_dump"]["lines"]) == 2
    assert report["signature"]["type"] == "JPEG (JFIF)"
    assert report["jpeg_structure"]["has_eoi"] is True


def test_forensics_on_empty_input():
    report = asyncio.run(analyze_forensics(b""))
    assert report["signature"]["type"] == "Unknown"
    assert report["embedded_objects"] == []
    assert report["suspicious_patterns"] == []
    assert report["entropy"]["overall"] == 0.0
    assert report["hex_dump"]["lines"] == []
    assert report["compression_ratio"] == 0.0


def test_ela_cache_is_keyed_by_parameters(flat_jpeg):
    cache = AnalysisCache()
    identity = FileIdentity.for_bytes("flat.jpg", flat_jpeg)
    q90 = asyncio.run(run_ela_analysis(flat_jpeg, cache=cache, identity=identity))
    q70 = asyncio.run(run_ela_analysis(flat_jpeg, 70, cache=cache, identity=identity))
    again = asyncio.run(run_ela_analysis(flat_jpeg, cache=cache, identity=identity))
    assert q90.quality == 90
    assert q70.quality == 70
    assert again is q90
    assert len(cache) == 2


def test_forensic_cache_is_keyed_by_hex_window(flat_jpeg):
    cache = AnalysisCache()
    identity = FileIdentity.for_bytes("flat.jpg", flat_jpeg)
    full = asyncio.run(analyze_forensics(flat_jpeg, cache=cache, identity=identity))
    narrow = asyncio.run(analyze_forensics(flat_jpeg, hex_bytes=32, cache=cache, identity=identity))
    assert full["hex_dump"]["displayed_bytes"] == len(flat_jpeg)
    assert narrow["hex_dump"]["displayed_bytes"] == 32
    assert len(narrow["hex_dump"]["lines"]) == 2
    again = asyncio.run(analyze_forensics(flat_jpeg, cache=cache, identity=identity))
    assert again is full
    assert len(cache) == 2


def test_forensic_cache_is_keyed_by_thresholds(zip_in_zeros):
    cache = AnalysisCache()
    identity = FileIdentity.for_bytes("zeros.bin", zip_in_zeros)
    default = asyncio.run(analyze_forensics(zip_in_zeros, cache=cache, identity=identity))
    strict = DEFAULT_THRESHOLDS.with_overrides(null_run_length=80)
    tuned = asyncio.run(
        analyze_forensics(zip_in_zeros, thresholds=strict, cache=cache, identity=identity)
    )
    assert tuned is not default
    default_patterns = {p["pattern"] for p in default["suspicious_patterns"]}
    tuned_patterns = {p["pattern"] for p in tuned["suspicious_patterns"]}
    assert "null_run" in default_patterns
    assert "null_run" not in tuned_patterns


def test_pipeline_stores_trim_the_cache(flat_jpeg):
    cache = AnalysisCache()
    for i in range(201):
        identity = FileIdentity(name=f"f{i}.jpg", size=len(flat_jpeg))
        asyncio.run(analyze_forensics(flat_jpeg, hex_bytes=0, cache=cache, identity=identity))
    # the 201st store crossed the hard limit
    assert len(cache) == 0


def test_forensic_report_includes_strings_and_lsb_sections(zip_in_zeros, plain_png):
    data = zip_in_zeros + b"contact admin@example.com"
    report = asyncio.run(analyze_forensics(data))
    assert report["strings"]["interesting"] == ["contact admin@example.com"]
    assert report["steganography"] == {"suspicious": False, "reason": "Could not analyze image data"}

    report = asyncio.run(analyze_forensics(plain_png))
    assert report["steganography"]["lsb_ratio"] == 0.3333
    assert report["steganography"]["suspicious"] is False
