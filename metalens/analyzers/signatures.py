"""Magic-byte header detection and embedded-object discovery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..config import DEFAULT_THRESHOLDS
from ..models import EmbeddedObjectHit, SignatureMatch

HEADER_WINDOW = DEFAULT_THRESHOLDS.header_window
EMBEDDED_SCAN_LIMIT = DEFAULT_THRESHOLDS.embedded_scan_limit


@dataclass(frozen=True)
class Signature:
    name: str
    magic: bytes
    extension: str
    description: str
    confidence: int = 100
    # Only distinctive (4+ byte) signatures are slid across the buffer.
    embeddable: bool = True


# Ordered: first match wins, so specific prefixes precede generic ones.
SIGNATURES: Tuple[Signature, ...] = (
    Signature("JPEG (JFIF)", b"\xff\xd8\xff\xe0", "jpg", "JPEG/JFIF Image"),
    Signature("JPEG (EXIF)", b"\xff\xd8\xff\xe1", "jpg", "JPEG/EXIF Image"),
    Signature("JPEG (ICC)", b"\xff\xd8\xff\xe2", "jpg", "JPEG Image with ICC profile"),
    Signature("JPEG (SPIFF)", b"\xff\xd8\xff\xe8", "jpg", "JPEG/SPIFF Image"),
    Signature("JPEG (Adobe)", b"\xff\xd8\xff\xee", "jpg", "JPEG Image (Adobe)"),
    Signature("JPEG (raw)", b"\xff\xd8\xff\xdb", "jpg", "JPEG Image without APP segment"),
    Signature("PNG", b"\x89PNG\r\n\x1a\n", "png", "PNG Image"),
    Signature("GIF", b"GIF87a", "gif", "GIF Image (87a)"),
    Signature("GIF", b"GIF89a", "gif", "GIF Image (89a)"),
    Signature("TIFF (Little Endian)", b"II*\x00", "tif", "TIFF Image (LE)"),
    Signature("TIFF (Big Endian)", b"MM\x00*", "tif", "TIFF Image (BE)"),
    Signature("RIFF", b"RIFF", "webp", "RIFF container (WebP/AVI/WAV)", confidence=80),
    Signature("ZIP", b"PK\x03\x04", "zip", "ZIP Archive"),
    Signature("ZIP", b"PK\x05\x06", "zip", "ZIP Archive (empty)"),
    Signature("PDF", b"%PDF", "pdf", "PDF Document"),
    Signature("OLE", b"\xd0\xcf\x11\xe0", "doc", "Microsoft Office Document"),
    Signature("7Z", b"7z\xbc\xaf\x27\x1c", "7z", "7-Zip Archive"),
    Signature("RAR", b"Rar!", "rar", "RAR Archive"),
    Signature("GZIP", b"\x1f\x8b\x08", "gz", "GZIP Stream", embeddable=False),
    Signature("ICO", b"\x00\x00\x01\x00", "ico", "Windows Icon", confidence=70, embeddable=False),
    Signature("JPEG", b"\xff\xd8\xff", "jpg", "JPEG Image", confidence=90, embeddable=False),
    Signature("BMP", b"BM", "bmp", "BMP Image", confidence=60, embeddable=False),
)

UNKNOWN = SignatureMatch("Unknown", 0)


def detect_signature(
    data: bytes, signatures: Tuple[Signature, ...] = SIGNATURES, window: int = HEADER_WINDOW
) -> SignatureMatch:
    """Match the first ``window`` bytes against the ordered signature table."""
    if not data:
        return UNKNOWN

    header = bytes(data[:window])
    for sig in signatures:
        if header.startswith(sig.magic):
            return SignatureMatch(
                type_name=sig.name,
                confidence=sig.confidence,
                extension=sig.extension,
                description=sig.description,
                header_hex=header.hex(),
            )
    return SignatureMatch("Unknown", 0, header_hex=header.hex())


def find_signature(name: str) -> Optional[Signature]:
    for sig in SIGNATURES:
        if sig.name == name:
            return sig
    return None


def scan_embedded_objects(
    data: bytes,
    limit: int = EMBEDDED_SCAN_LIMIT,
    signatures: Tuple[Signature, ...] = SIGNATURES,
) -> List[EmbeddedObjectHit]:
    """
    Report every embeddable signature found past offset 0 within ``data[:limit]``.

    Offset 0 is the container's own header and is never reported.
    """
    window = bytes(data[: max(0, limit)])
    hits: List[EmbeddedObjectHit] = []
    for sig in signatures:
        if not sig.embeddable:
            continue
        idx = window.find(sig.magic, 1)
        while idx != -1:
            hits.append(EmbeddedObjectHit(format_type=sig.name, byte_offset=idx))
            idx = window.find(sig.magic, idx + 1)
    hits.sort(key=lambda hit: (hit.byte_offset, hit.format_type))
    return hits
