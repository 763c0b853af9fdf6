"""Image decode/encode collaborators used by error level analysis."""

from __future__ import annotations

import io
from typing import Protocol

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeFailure


class ImageCodec(Protocol):
    def decode(self, data: bytes) -> np.ndarray:
        """Return an (H, W, 3) uint8 RGB pixel buffer."""

    def encode(self, pixels: np.ndarray, quality: int) -> bytes:
        """Lossy-encode an RGB pixel buffer at ``quality``."""


class PillowCodec:
    """JPEG round-trips through Pillow."""

    def decode(self, data: bytes) -> np.ndarray:
        if not data:
            raise DecodeFailure("Cannot decode empty image data")
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                rgb = img.convert("RGB")
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as exc:
            raise DecodeFailure(f"Failed to decode image: {str(exc)}") from exc
        return np.array(rgb, dtype=np.uint8)

    def encode(self, pixels: np.ndarray, quality: int) -> bytes:
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"Expected (H, W, 3) pixel buffer, got shape {pixels.shape}")
        buffer = io.BytesIO()
        try:
            Image.fromarray(pixels.astype(np.uint8)).save(buffer, format="JPEG", quality=int(quality))
        except (OSError, ValueError) as exc:
            raise DecodeFailure(f"Failed to re-encode image: {str(exc)}") from exc
        return buffer.getvalue()


def encode_png(pixels: np.ndarray) -> bytes:
    """Lossless PNG of a grayscale or RGB buffer (used for difference maps)."""
    buffer = io.BytesIO()
    Image.fromarray(pixels.astype(np.uint8)).save(buffer, format="PNG")
    return buffer.getvalue()
