"""Regex scan of the hex stream for suspicious byte runs and foreign signatures."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from ..config import DEFAULT_THRESHOLDS, ForensicThresholds
from ..models import Severity, SuspiciousPattern
from .hexview import hex_stream


@dataclass(frozen=True)
class PatternRule:
    pattern_id: str
    regex: Pattern[str]
    description: str
    severity: Severity


def build_catalogue(thresholds: ForensicThresholds = DEFAULT_THRESHOLDS) -> Tuple[PatternRule, ...]:
    return (
        PatternRule(
            "null_run",
            re.compile(r"(?:00){%d,}" % thresholds.null_run_length),
            "Long sequence of null bytes (possible padding or hidden data)",
            Severity.MEDIUM,
        ),
        PatternRule(
            "ff_run",
            re.compile(r"(?:ff){%d,}" % thresholds.ff_run_length),
            "Long sequence of 0xFF bytes (possible corruption or manipulation)",
            Severity.MEDIUM,
        ),
        PatternRule(
            "zip_signature",
            re.compile(r"504b0304|504b0506"),
            "ZIP file signature found (possible embedded archive)",
            Severity.HIGH,
        ),
        PatternRule(
            "pdf_signature",
            re.compile(r"25504446"),
            "PDF signature found (possible embedded document)",
            Severity.HIGH,
        ),
        PatternRule(
            "ole_signature",
            re.compile(r"d0cf11e0"),
            "Microsoft Office (OLE) document signature",
            Severity.HIGH,
        ),
        PatternRule(
            "pe_signature",
            re.compile(r"4d5a"),
            "Executable (MZ/PE) file signature (possible malware)",
            Severity.CRITICAL,
        ),
    )


PATTERN_CATALOGUE = build_catalogue()


def _aligned_offsets(rule: PatternRule, stream: str) -> List[int]:
    """Byte offsets of matches that start on an octet boundary."""
    offsets: List[int] = []
    pos = 0
    while True:
        match = rule.regex.search(stream, pos)
        if match is None:
            break
        start = match.start()
        if start % 2:
            # straddles two bytes; retry one nibble later
            pos = start + 1
            continue
        offsets.append(start // 2)
        pos = match.end() if match.end() > start else start + 2
    return offsets


def scan_patterns(
    data: bytes,
    thresholds: Optional[ForensicThresholds] = None,
    catalogue: Optional[Tuple[PatternRule, ...]] = None,
) -> List[SuspiciousPattern]:
    """Return every catalogued pattern that occurs in ``data`` with all its offsets."""
    if catalogue is None:
        catalogue = PATTERN_CATALOGUE if thresholds is None else build_catalogue(thresholds)

    stream = hex_stream(data)
    found: List[SuspiciousPattern] = []
    for rule in catalogue:
        offsets = _aligned_offsets(rule, stream)
        if offsets:
            found.append(
                SuspiciousPattern(
                    pattern_id=rule.pattern_id,
                    description=rule.description,
                    severity=rule.severity,
                    occurrence_offsets=tuple(offsets),
                )
            )
    return found
