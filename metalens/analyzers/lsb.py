"""Least-significant-bit balance check for naive LSB steganography."""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from ..codecs import ImageCodec, PillowCodec
from ..config import DEFAULT_THRESHOLDS, ForensicThresholds
from ..errors import DecodeFailure
from ..log import get_logger

LOGGER = get_logger("analyzers.lsb")


def lsb_ratio(pixels: np.ndarray) -> float:
    """Fraction of set low bits across the RGB channels; 0.0 for an empty buffer."""
    rgb = np.asarray(pixels)[..., :3]
    if rgb.size == 0:
        return 0.0
    return float((rgb & 1).mean())


def detect_lsb_steganography(
    data: bytes,
    *,
    codec: Optional[ImageCodec] = None,
    thresholds: ForensicThresholds = DEFAULT_THRESHOLDS,
) -> Dict[str, Any]:
    """
    Flag images whose low bits sit inside the ``lsb_ratio_low``..``lsb_ratio_high``
    band, as a uniformly random payload would leave them. A weak hint: natural
    noisy photos land there too.

    Undecodable input is reported, not raised, so the byte-level report still
    covers non-image files.
    """
    codec = codec or PillowCodec()
    try:
        pixels = codec.decode(data)
    except DecodeFailure as exc:
        LOGGER.debug("LSB check skipped: %s", exc)
        return {"suspicious": False, "reason": "Could not analyze image data"}

    total_pixels = int(pixels.shape[0] * pixels.shape[1])
    lsb_variation = int((pixels[..., :3] & 1).sum())
    ratio = lsb_ratio(pixels)
    suspicious = thresholds.lsb_ratio_low < ratio < thresholds.lsb_ratio_high

    return {
        "suspicious": suspicious,
        "lsb_ratio": round(ratio, 4),
        "analysis": "Potential steganography detected" if suspicious else "No obvious steganography",
        "details": {
            "total_pixels": total_pixels,
            "lsb_variation": lsb_variation,
            "recommendation": "Further analysis recommended" if suspicious else "Image appears clean",
        },
    }
