"""Async orchestration of strategies and forensic sub-analyses for one file."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence

from .analyzers.digests import compression_ratio, digest_all
from .analyzers.ela import run_ela
from .analyzers.entropy import analyze_entropy
from .analyzers.hexview import render_hex
from .analyzers.inconsistency import check_inconsistencies
from .analyzers.jpeg_structure import walk_jpeg
from .analyzers.lsb import detect_lsb_steganography
from .analyzers.patterns import scan_patterns
from .analyzers.signatures import detect_signature, scan_embedded_objects
from .analyzers.strings import extract_strings
from .cache import AnalysisCache, CacheKind, FileIdentity
from .codecs import ImageCodec
from .config import DEFAULT_THRESHOLDS, ForensicThresholds
from .consolidation import chosen_values, consolidate
from .derived import derive_values
from .errors import StrategyFailure
from .exporters import consolidated_export
from .extractors import MetadataExtractor
from .extractors.base import failed_result
from .log import get_logger
from .models import ELAResult, ExtractionResult
from .registry import build_extractors
from .values import MetadataValue

LOGGER = get_logger("pipeline")


def _cached(cache: Optional[AnalysisCache], kind: CacheKind, identity: Optional[FileIdentity]) -> Any:
    if cache is None or identity is None:
        return None
    return cache.get(kind, identity)


def _store(
    cache: Optional[AnalysisCache], kind: CacheKind, identity: Optional[FileIdentity], value: Any
) -> None:
    if cache is not None and identity is not None:
        cache.set(kind, identity, value)
        cache.trim()


def _keyed(identity: Optional[FileIdentity], suffix: str) -> Optional[FileIdentity]:
    """Fold call parameters into the identity so differently-shaped results never share a slot."""
    if identity is None:
        return None
    return replace(identity, name=f"{identity.name}@{suffix}")


async def run_strategies(
    data: bytes, extractors: Optional[Sequence[MetadataExtractor]] = None
) -> List[ExtractionResult]:
    """
    Issue every strategy concurrently and wait for all of them.

    The returned list keeps the extractor (priority) order. A strategy whose
    ``parse`` raises is recorded as an ERROR result.
    """
    extractors = list(extractors) if extractors is not None else build_extractors()
    outcomes = await asyncio.gather(
        *(extractor.parse(data) for extractor in extractors), return_exceptions=True
    )

    results: List[ExtractionResult] = []
    for extractor, outcome in zip(extractors, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            failure = StrategyFailure(extractor.strategy_id, str(outcome) or type(outcome).__name__)
            LOGGER.warning("Strategy failed: %s", failure)
            results.append(
                failed_result(
                    extractor.strategy_id,
                    failure.reason,
                    label=getattr(extractor, "label", ""),
                    library=getattr(extractor, "library", ""),
                )
            )
        else:
            results.append(outcome)
    return results


async def extract_metadata(
    data: bytes,
    extractors: Optional[Sequence[MetadataExtractor]] = None,
    *,
    cache: Optional[AnalysisCache] = None,
    identity: Optional[FileIdentity] = None,
) -> Dict[str, Any]:
    """Consolidated multi-source metadata export plus derived values and sanity checks."""
    cached = _cached(cache, CacheKind.EXIF_DATA, identity)
    if cached is not None:
        return cached

    results = await run_strategies(data, extractors)
    consolidated = consolidate(results)
    values = chosen_values(consolidated)

    payload = consolidated_export(results, consolidated)
    payload["derived"] = derive_values(values)
    payload["inconsistency"] = check_inconsistencies(values)

    _store(cache, CacheKind.EXIF_DATA, identity, payload)
    return payload


async def extract_fields(
    data: bytes, extractors: Optional[Sequence[MetadataExtractor]] = None
) -> Dict[str, MetadataValue]:
    """
    Chosen consolidated values for one file, as used by batch processing.

    Raises StrategyFailure when the highest-priority strategy failed, since the
    remaining scanners alone cannot vouch for the file being a readable image.
    """
    results = await run_strategies(data, extractors)
    if not results:
        return {}
    primary = results[0]
    if not primary.ok:
        raise StrategyFailure(primary.strategy_id, primary.error or "failed")
    return chosen_values(consolidate(results))


async def analyze_forensics(
    data: bytes,
    *,
    hex_bytes: Optional[int] = None,
    thresholds: ForensicThresholds = DEFAULT_THRESHOLDS,
    cache: Optional[AnalysisCache] = None,
    identity: Optional[FileIdentity] = None,
) -> Dict[str, Any]:
    """
    Byte-level forensic report: signature, embedded objects, entropy, patterns,
    hex dump, digests, JPEG structure, printable strings and an LSB check.
    Sub-analyses run concurrently; one failing section is reported in place
    and does not sink the others.
    """
    data = bytes(data)
    cap = thresholds.hex_cap if hex_bytes is None else max(0, min(hex_bytes, thresholds.hex_cap))

    # frozen dataclass of numbers, so the hash is stable for the process
    keyed = _keyed(identity, f"hex{cap}#{hash(thresholds) & 0xFFFFFFFFFFFFFFFF:x}")
    cached = _cached(cache, CacheKind.FORENSIC_ANALYSIS, keyed)
    if cached is not None:
        return cached

    def hex_dump(buf: bytes) -> Dict[str, Any]:
        rows = render_hex(buf, cap=cap)
        return {
            "lines": [row.to_dict() for row in rows],
            "total_bytes": len(buf),
            "displayed_bytes": min(len(buf), cap),
        }

    sections: Dict[str, Callable[[bytes], Any]] = {
        "signature": lambda buf: detect_signature(buf, window=thresholds.header_window).to_dict(),
        "embedded_objects": lambda buf: [
            hit.to_dict() for hit in scan_embedded_objects(buf, thresholds.embedded_scan_limit)
        ],
        "entropy": lambda buf: analyze_entropy(buf, thresholds=thresholds).to_dict(),
        "suspicious_patterns": lambda buf: [
            pattern.to_dict() for pattern in scan_patterns(buf, thresholds=thresholds)
        ],
        "hex_dump": hex_dump,
        "hashes": digest_all,
        "compression_ratio": lambda buf: round(compression_ratio(buf), 4),
        "jpeg_structure": walk_jpeg,
        "strings": lambda buf: extract_strings(buf, thresholds),
        "steganography": lambda buf: detect_lsb_steganography(buf, thresholds=thresholds),
    }
    outcomes = await asyncio.gather(
        *(asyncio.to_thread(func, data) for func in sections.values()), return_exceptions=True
    )

    report: Dict[str, Any] = {"file_size": len(data)}
    for name, outcome in zip(sections, outcomes):
        if isinstance(outcome, Exception):
            LOGGER.warning("Forensic section %s failed: %s", name, outcome)
            report[name] = {"status": "error", "error": str(outcome)}
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            report[name] = outcome

    _store(cache, CacheKind.FORENSIC_ANALYSIS, keyed, report)
    return report


async def run_ela_analysis(
    data: bytes,
    quality: Optional[int] = None,
    threshold: Optional[float] = None,
    *,
    codec: Optional[ImageCodec] = None,
    render_map: bool = False,
    thresholds: ForensicThresholds = DEFAULT_THRESHOLDS,
    cache: Optional[AnalysisCache] = None,
    identity: Optional[FileIdentity] = None,
) -> ELAResult:
    """ELA off the event loop. DecodeFailure propagates to the caller."""
    q = thresholds.ela_quality if quality is None else quality
    t = thresholds.ela_threshold if threshold is None else threshold
    keyed = _keyed(
        identity,
        f"q{q}t{t}{'+map' if render_map else ''}#{hash(thresholds) & 0xFFFFFFFFFFFFFFFF:x}",
    )

    cached = _cached(cache, CacheKind.ELA_ANALYSIS, keyed)
    if cached is not None:
        return cached

    result = await asyncio.to_thread(
        run_ela,
        data,
        quality,
        threshold,
        codec=codec,
        render_map=render_map,
        thresholds=thresholds,
    )
    _store(cache, CacheKind.ELA_ANALYSIS, keyed, result)
    return result
