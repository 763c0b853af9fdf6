"""Manual container-segment scanner: locate the EXIF payload and read IFD0 by hand."""

from __future__ import annotations

import struct
from typing import Any, Dict, Optional, Tuple

from .base import MetadataExtractor

EXIF_HEADER = b"Exif\x00\x00"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"

# The handful of tags worth cross-checking against the primary parser.
IFD0_TAGS = {
    0x010E: "ImageDescription",
    0x010F: "Make",
    0x0110: "Model",
    0x0112: "Orientation",
    0x0131: "Software",
    0x0132: "DateTime",
    0x013B: "Artist",
    0x8298: "Copyright",
}
EXIF_IFD_TAGS = {
    0x9003: "DateTimeOriginal",
    0x9004: "DateTimeDigitized",
    0x8827: "ISOSpeedRatings",
}
EXIF_IFD_POINTER = 0x8769

TYPE_ASCII = 2
TYPE_SHORT = 3
TYPE_LONG = 4


def find_jpeg_exif(data: bytes) -> Optional[Tuple[int, int, bytes]]:
    """Return (segment offset, segment length, TIFF payload) of the first EXIF APP1."""
    pos = 2 if data[:2] == b"\xff\xd8" else 0
    while pos + 4 <= len(data):
        if data[pos] != 0xFF:
            pos += 1
            continue
        marker = data[pos + 1]
        if marker == 0xE1:
            (length,) = struct.unpack(">H", data[pos + 2 : pos + 4])
            body = data[pos + 4 : pos + 2 + length]
            if body.startswith(EXIF_HEADER):
                return pos, length, body[len(EXIF_HEADER) :]
        pos += 1
    return None


def find_png_exif(data: bytes) -> Optional[Tuple[int, int, bytes]]:
    """Return (chunk offset, chunk length, TIFF payload) of the PNG eXIf chunk."""
    pos = len(PNG_MAGIC)
    while pos + 8 <= len(data):
        length, ctype = struct.unpack(">I4s", data[pos : pos + 8])
        if ctype == b"eXIf":
            return pos, length, data[pos + 8 : pos + 8 + length]
        if ctype == b"IEND":
            break
        pos += 12 + length
    return None


def _read_ifd(tiff: bytes, offset: int, endian: str, names: Dict[int, str]) -> Tuple[Dict[str, Any], Optional[int]]:
    fields: Dict[str, Any] = {}
    exif_pointer: Optional[int] = None
    if offset + 2 > len(tiff):
        return fields, None

    (count,) = struct.unpack(endian + "H", tiff[offset : offset + 2])
    for i in range(count):
        entry = offset + 2 + i * 12
        if entry + 12 > len(tiff):
            break
        tag, typ, n = struct.unpack(endian + "HHI", tiff[entry : entry + 8])
        raw = tiff[entry + 8 : entry + 12]

        if tag == EXIF_IFD_POINTER and typ == TYPE_LONG:
            (exif_pointer,) = struct.unpack(endian + "I", raw)
            continue
        if tag not in names:
            continue

        if typ == TYPE_ASCII:
            if n <= 4:
                blob = raw[:n]
            else:
                (value_offset,) = struct.unpack(endian + "I", raw)
                blob = tiff[value_offset : value_offset + n]
            if blob.endswith(b"\x00"):
                blob = blob[:-1]
            fields[names[tag]] = blob.decode("latin-1", "replace")
        elif typ == TYPE_SHORT and n == 1:
            fields[names[tag]] = struct.unpack(endian + "H", raw[:2])[0]
        elif typ == TYPE_LONG and n == 1:
            fields[names[tag]] = struct.unpack(endian + "I", raw)[0]
    return fields, exif_pointer


def parse_tiff_header(tiff: bytes) -> Dict[str, Any]:
    if len(tiff) < 8:
        return {}
    if tiff[:2] == b"II":
        endian = "<"
    elif tiff[:2] == b"MM":
        endian = ">"
    else:
        return {}
    magic, ifd0 = struct.unpack(endian + "HI", tiff[2:8])
    if magic != 42:
        return {}

    fields, exif_pointer = _read_ifd(tiff, ifd0, endian, IFD0_TAGS)
    fields["manual_byte_order"] = "little" if endian == "<" else "big"
    if exif_pointer:
        sub, _ = _read_ifd(tiff, exif_pointer, endian, EXIF_IFD_TAGS)
        fields.update(sub)
    return fields


class SegmentScannerExtractor(MetadataExtractor):
    strategy_id = "segment_scanner"
    label = "Manual Parser"

    def extract(self, data: bytes) -> Dict[str, Any]:
        data = bytes(data)
        found = find_png_exif(data) if data.startswith(PNG_MAGIC) else find_jpeg_exif(data)

        result: Dict[str, Any] = {"manual_exif_segment_found": found is not None}
        if found is None:
            return result

        offset, length, tiff = found
        result["manual_exif_segment_size"] = length
        result["manual_exif_offset"] = offset
        result.update(parse_tiff_header(tiff))
        return result
