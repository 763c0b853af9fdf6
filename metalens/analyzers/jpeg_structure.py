"""Marker-segment walk of a JPEG stream."""

from __future__ import annotations

import struct
from typing import Any, Dict, List

SEGMENT_NAMES = {
    0xD8: "SOI (Start of Image)",
    0xD9: "EOI (End of Image)",
    0xDA: "Start of Scan",
    0xDB: "Quantization Table",
    0xC4: "Huffman Table",
    0xDD: "Restart Interval",
    0xFE: "Comment",
    0xE0: "APP0 (JFIF)",
    0xE1: "APP1 (EXIF/XMP)",
    0xE2: "APP2 (ICC)",
    0xED: "APP13 (IPTC)",
    0xEE: "APP14 (Adobe)",
}

# SOF0..SOF15 minus DHT (C4), JPG (C8) and DAC (CC)
SOF_MARKERS = {m for m in range(0xC0, 0xD0) if m not in (0xC4, 0xC8, 0xCC)}
# markers with no length field
STANDALONE = {0x01} | set(range(0xD0, 0xD8))


def _segment_name(marker: int) -> str:
    if marker in SEGMENT_NAMES:
        return SEGMENT_NAMES[marker]
    if marker in SOF_MARKERS:
        return f"Start of Frame (SOF{marker - 0xC0})"
    if 0xE0 <= marker <= 0xEF:
        return f"APP{marker - 0xE0}"
    return f"Marker 0x{marker:02X}"


def _segment(marker: int, offset: int, size: int = 0) -> Dict[str, Any]:
    return {
        "name": _segment_name(marker),
        "marker": f"FF {marker:02X}",
        "offset": f"{offset:08X}",
        "size": size,
    }


def walk_jpeg(data: bytes) -> Dict[str, Any]:
    """
    Walk JPEG marker segments from SOI through the first SOS, then look for EOI.

    Never raises; truncated or non-JPEG input yields a partial description.
    """
    analysis: Dict[str, Any] = {
        "is_jpeg": False,
        "has_soi": False,
        "has_eoi": False,
        "has_app0": False,
        "has_app1": False,
        "quantization_tables": 0,
        "huffman_tables": 0,
        "image_size": {"width": 0, "height": 0},
        "segments": [],
        "truncated": False,
    }
    if len(data) < 4 or data[0] != 0xFF or data[1] != 0xD8:
        return analysis

    analysis["is_jpeg"] = True
    analysis["has_soi"] = True
    segments: List[Dict[str, Any]] = analysis["segments"]
    segments.append(_segment(0xD8, 0))

    pos = 2
    size = len(data)
    while pos < size:
        if data[pos] != 0xFF:
            analysis["truncated"] = True
            break
        # fill bytes
        while pos < size and data[pos] == 0xFF:
            pos += 1
        if pos >= size:
            analysis["truncated"] = True
            break
        marker = data[pos]
        marker_offset = pos - 1
        pos += 1

        if marker in STANDALONE:
            segments.append(_segment(marker, marker_offset))
            continue
        if marker == 0xD9:
            segments.append(_segment(marker, marker_offset))
            analysis["has_eoi"] = True
            return analysis
        if pos + 2 > size:
            analysis["truncated"] = True
            break

        (length,) = struct.unpack(">H", data[pos : pos + 2])
        segments.append(_segment(marker, marker_offset, length))
        if marker == 0xE0:
            analysis["has_app0"] = True
        elif marker == 0xE1:
            analysis["has_app1"] = True
        elif marker == 0xDB:
            analysis["quantization_tables"] += 1
        elif marker == 0xC4:
            analysis["huffman_tables"] += 1
        elif marker in SOF_MARKERS and pos + 7 <= size:
            height, width = struct.unpack(">HH", data[pos + 3 : pos + 7])
            analysis["image_size"] = {"width": width, "height": height}

        if length < 2 or pos + length > size:
            analysis["truncated"] = True
            break
        pos += length

        if marker == 0xDA:
            # entropy-coded data follows; EOI is the last marker of a well-formed file
            eoi = data.rfind(b"\xff\xd9", pos)
            if eoi != -1:
                segments.append(_segment(0xD9, eoi))
                analysis["has_eoi"] = True
            return analysis

    return analysis
