"""Byte-level and pixel-level forensic analyzers."""

from .digests import compression_ratio, digest, digest_all
from .ela import run_ela
from .entropy import analyze_entropy, shannon_entropy
from .hexview import hex_stream, parse_hex_rows, render_hex
from .inconsistency import check_inconsistencies
from .jpeg_structure import walk_jpeg
from .lsb import detect_lsb_steganography, lsb_ratio
from .patterns import scan_patterns
from .signatures import detect_signature, scan_embedded_objects
from .strings import extract_strings, find_strings

__all__ = [
    "analyze_entropy",
    "check_inconsistencies",
    "compression_ratio",
    "detect_lsb_steganography",
    "detect_signature",
    "digest",
    "digest_all",
    "extract_strings",
    "find_strings",
    "hex_stream",
    "lsb_ratio",
    "parse_hex_rows",
    "render_hex",
    "run_ela",
    "scan_embedded_objects",
    "scan_patterns",
    "shannon_entropy",
    "walk_jpeg",
]
