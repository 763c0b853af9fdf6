"""Error level analysis: recompress, diff, and flag blocks with outlying error."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from ..codecs import ImageCodec, PillowCodec, encode_png
from ..config import DEFAULT_THRESHOLDS, ForensicThresholds
from ..log import get_logger
from ..models import ELAResult, ELAVerdict, SuspiciousBlock

LOGGER = get_logger("analyzers.ela")

MIN_QUALITY = 10
MAX_QUALITY = 100
# mean raw difference that maps to a score of 100
SCORE_SATURATION = 50.0


def verdict_for(score: float) -> ELAVerdict:
    if score < 10:
        return ELAVerdict.LOW
    if score < 30:
        return ELAVerdict.MODERATE
    if score < 60:
        return ELAVerdict.HIGH
    return ELAVerdict.VERY_HIGH


def difference_map(
    original: np.ndarray, recompressed: np.ndarray, amplification: float
) -> tuple[np.ndarray, np.ndarray]:
    """Return (raw per-pixel mean RGB difference, amplified uint8 map)."""
    if original.shape != recompressed.shape:
        raise ValueError(
            f"Pixel buffers differ in shape: {original.shape} vs {recompressed.shape}"
        )
    diff = np.abs(original[..., :3].astype(np.int16) - recompressed[..., :3].astype(np.int16))
    per_pixel = diff.mean(axis=2)
    amplified = np.clip(per_pixel * amplification, 0, 255).astype(np.uint8)
    return per_pixel, amplified


def find_suspicious_blocks(
    amplified: np.ndarray, block_size: int, threshold: float
) -> List[SuspiciousBlock]:
    """Blocks (full blocks only) whose mean amplified difference exceeds ``threshold``."""
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")

    height, width = amplified.shape[:2]
    blocks: List[SuspiciousBlock] = []
    for y in range(0, height - block_size + 1, block_size):
        for x in range(0, width - block_size + 1, block_size):
            block_mean = float(amplified[y : y + block_size, x : x + block_size].mean())
            if block_mean > threshold:
                blocks.append(
                    SuspiciousBlock(
                        x=x,
                        y=y,
                        width=block_size,
                        height=block_size,
                        confidence=min(100.0, block_mean / 255.0 * 100.0),
                    )
                )
    return blocks


def run_ela(
    data: bytes,
    quality: Optional[int] = None,
    threshold: Optional[float] = None,
    *,
    block_size: Optional[int] = None,
    amplification: Optional[float] = None,
    codec: Optional[ImageCodec] = None,
    render_map: bool = False,
    thresholds: ForensicThresholds = DEFAULT_THRESHOLDS,
) -> ELAResult:
    """
    Round-trip the decoded image through the lossy codec at ``quality`` and
    score how much it changed.

    Raises DecodeFailure if either decode fails; no partial result is returned.
    """
    quality = thresholds.ela_quality if quality is None else int(quality)
    threshold = thresholds.ela_threshold if threshold is None else float(threshold)
    block_size = thresholds.ela_block_size if block_size is None else int(block_size)
    amplification = thresholds.ela_amplification if amplification is None else amplification

    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise ValueError(f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}")

    codec = codec or PillowCodec()
    original = codec.decode(data)
    recompressed = codec.decode(codec.encode(original, quality))

    per_pixel, amplified = difference_map(original, recompressed, amplification)
    mean_diff = float(per_pixel.mean()) if per_pixel.size else 0.0
    max_diff = float(per_pixel.max()) if per_pixel.size else 0.0
    score = min(100.0, mean_diff / SCORE_SATURATION * 100.0)

    blocks = find_suspicious_blocks(amplified, block_size, threshold)
    height, width = original.shape[:2]
    LOGGER.debug(
        "ELA %dx%d q=%d: mean=%.3f score=%.2f blocks=%d",
        width, height, quality, mean_diff, score, len(blocks),
    )

    return ELAResult(
        overall_score=score,
        suspicious_blocks=tuple(blocks),
        verdict=verdict_for(score),
        mean_difference=mean_diff,
        max_difference=max_diff,
        quality=quality,
        threshold=threshold,
        width=width,
        height=height,
        difference_map=encode_png(amplified) if render_map else None,
    )
