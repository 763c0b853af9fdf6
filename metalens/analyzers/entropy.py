"""Shannon entropy over whole buffers and fixed-size chunks."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from ..config import DEFAULT_THRESHOLDS, ForensicThresholds
from ..models import EntropyChunk, EntropyReport


def shannon_entropy(data: bytes) -> float:
    """Bits per byte in [0, 8]; 0.0 for empty input."""
    if not data:
        return 0.0
    arr = np.frombuffer(bytes(data), dtype=np.uint8)
    counts = np.bincount(arr, minlength=256)
    probs = counts[counts > 0] / arr.size
    # -sum(p log2 p) can come out as -0.0 for single-symbol input
    return float(abs(-np.sum(probs * np.log2(probs))))


def assess_entropy(value: float, thresholds: ForensicThresholds = DEFAULT_THRESHOLDS) -> str:
    if value > thresholds.high_entropy:
        return "High (possibly encrypted/compressed)"
    if value > thresholds.medium_entropy:
        return "Medium"
    return "Low (predictable data)"


def analyze_entropy(
    data: bytes,
    chunk_size: Optional[int] = None,
    high_threshold: Optional[float] = None,
    thresholds: ForensicThresholds = DEFAULT_THRESHOLDS,
) -> EntropyReport:
    """
    Global entropy plus per-chunk entropy; chunks at or above the high threshold
    are flagged as possible encryption/compression. The trailing partial chunk
    is included.
    """
    size = chunk_size if chunk_size is not None else thresholds.entropy_chunk_size
    limit = high_threshold if high_threshold is not None else thresholds.high_entropy
    if size <= 0:
        raise ValueError(f"chunk_size must be positive, got {size}")

    overall = shannon_entropy(data)
    chunks: List[EntropyChunk] = []
    for start in range(0, len(data), size):
        value = shannon_entropy(data[start : start + size])
        chunks.append(EntropyChunk(start_offset=start, entropy=value, high=value >= limit))

    return EntropyReport(
        overall=overall,
        chunks=tuple(chunks),
        chunk_size=size,
        assessment=assess_entropy(overall, thresholds),
    )
