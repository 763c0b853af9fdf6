"""Raw-binary structural scanner: header bytes, size and signature sightings."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from ..analyzers.signatures import detect_signature
from .base import MetadataExtractor

STRUCTURE_PATTERNS: Tuple[Tuple[str, bytes], ...] = (
    ("JPEG_SOI", b"\xff\xd8"),
    ("PNG_SIGNATURE", b"\x89PNG"),
    ("PDF_SIGNATURE", b"%PDF"),
    ("ZIP_SIGNATURE", b"PK\x03\x04"),
)
MAX_SIGHTINGS = 64


def find_sightings(data: bytes, limit: int = MAX_SIGHTINGS) -> List[str]:
    """``NAME_at_OFFSET`` labels for every structural pattern occurrence, offset 0 included."""
    sightings: List[str] = []
    for name, pattern in STRUCTURE_PATTERNS:
        idx = data.find(pattern)
        while idx != -1 and len(sightings) < limit:
            sightings.append(f"{name}_at_{idx}")
            idx = data.find(pattern, idx + 1)
    return sightings


class BinaryStructureExtractor(MetadataExtractor):
    strategy_id = "binary_structure"
    label = "Binary Analysis"

    def extract(self, data: bytes) -> Dict[str, Any]:
        data = bytes(data)
        signature = detect_signature(data)
        return {
            "file_signature": data[:16].hex(),
            "file_size": len(data),
            "detected_format": signature.type_name,
            "embedded_patterns": find_sightings(data),
        }
