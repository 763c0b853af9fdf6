"""Offset/hex/ASCII rendering of byte ranges."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..config import DEFAULT_THRESHOLDS
from ..models import HexRow

ROW_WIDTH = 16
DEFAULT_HEX_CAP = DEFAULT_THRESHOLDS.hex_cap


def _ascii(chunk: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in chunk)


def render_hex(
    data: bytes,
    start: int = 0,
    length: Optional[int] = None,
    *,
    cap: int = DEFAULT_HEX_CAP,
    row_width: int = ROW_WIDTH,
) -> List[HexRow]:
    """
    Render ``data[start:start + min(length, cap)]`` as rows of ``row_width`` bytes.

    Offsets are absolute within ``data``. The hex column of a short final row
    is space-padded so every row has the same width.
    """
    if start < 0:
        raise ValueError(f"start must be non-negative, got {start}")
    if row_width <= 0:
        raise ValueError(f"row_width must be positive, got {row_width}")

    span = cap if length is None else min(length, cap)
    window = bytes(data[start : start + max(0, span)])
    hex_width = row_width * 3 - 1

    rows: List[HexRow] = []
    for i in range(0, len(window), row_width):
        chunk = window[i : i + row_width]
        rows.append(
            HexRow(
                offset=f"{start + i:08X}",
                hex=" ".join(f"{b:02X}" for b in chunk).ljust(hex_width),
                ascii=_ascii(chunk),
            )
        )
    return rows


def parse_hex_rows(rows: Iterable[HexRow]) -> bytes:
    """Inverse of ``render_hex``: recover the rendered bytes."""
    return b"".join(bytes.fromhex(row.hex.strip()) for row in rows)


def hex_stream(data: bytes) -> str:
    """Contiguous lowercase hex of the whole buffer (two characters per byte)."""
    return bytes(data).hex()
