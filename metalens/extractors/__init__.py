"""Pluggable metadata extraction strategies."""

from .base import MetadataExtractor, estimate_coverage
from .binary_structure import BinaryStructureExtractor
from .pillow_exif import PillowExifExtractor
from .segment_scanner import SegmentScannerExtractor
from .xmp_packet import XmpPacketExtractor

__all__ = [
    "BinaryStructureExtractor",
    "MetadataExtractor",
    "PillowExifExtractor",
    "SegmentScannerExtractor",
    "XmpPacketExtractor",
    "estimate_coverage",
]
