"""Printable ASCII string extraction, the ``strings(1)`` view of a file."""

from __future__ import annotations

import re
from typing import Any, Dict, List

from ..config import DEFAULT_THRESHOLDS, ForensicThresholds

# substrings that make an extracted string worth a second look
INTERESTING_MARKERS = ("http", "www", "@", "password", "key", "secret")


def find_strings(data: bytes, min_length: int = DEFAULT_THRESHOLDS.string_min_length) -> List[str]:
    """Every run of at least ``min_length`` bytes in 0x20..0x7E, in file order."""
    if min_length <= 0:
        raise ValueError(f"min_length must be positive, got {min_length}")
    pattern = re.compile(rb"[\x20-\x7e]{%d,}" % min_length)
    return [match.group().decode("ascii") for match in pattern.finditer(bytes(data))]


def is_interesting(text: str) -> bool:
    return any(marker in text for marker in INTERESTING_MARKERS)


def extract_strings(data: bytes, thresholds: ForensicThresholds = DEFAULT_THRESHOLDS) -> Dict[str, Any]:
    """
    ``{total_strings, strings, interesting}``. ``strings`` holds the first
    ``string_limit`` runs; ``interesting`` is drawn from all of them.
    """
    found = find_strings(data, thresholds.string_min_length)
    return {
        "total_strings": len(found),
        "strings": found[: thresholds.string_limit],
        "interesting": [text for text in found if is_interesting(text)],
    }
