"""Primary strategy: full EXIF/GPS decode delegated to Pillow."""

from __future__ import annotations

import io
from typing import Any, Dict, Mapping, Optional

from PIL import ExifTags, Image, UnidentifiedImageError

from ..errors import DecodeFailure
from .base import MetadataExtractor

# MakerNote is vendor-private binary; it only adds noise to reconciliation.
SKIPPED_TAGS = {0x927C}


def _dms_to_decimal(dms: Any, ref: Any) -> Optional[float]:
    try:
        degrees, minutes, seconds = (float(part) for part in dms)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    value = degrees + minutes / 60.0 + seconds / 3600.0
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", "ignore")
    if isinstance(ref, str) and ref.strip().upper() in ("S", "W"):
        value = -value
    return round(value, 7)


def _named(ifd: Mapping[int, Any], names: Mapping[int, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for tag, value in ifd.items():
        if tag in SKIPPED_TAGS:
            continue
        out[names.get(tag, f"Tag0x{tag:04X}")] = value
    return out


class PillowExifExtractor(MetadataExtractor):
    strategy_id = "pillow_exif"
    label = "Pillow EXIF"
    library = "pillow"

    def extract(self, data: bytes) -> Dict[str, Any]:
        try:
            with Image.open(io.BytesIO(data)) as img:
                # IFDs are read lazily from the open file
                return self._collect(img)
        except (UnidentifiedImageError, OSError) as exc:
            raise DecodeFailure(f"Failed to open image: {str(exc)}") from exc

    def _collect(self, img: Image.Image) -> Dict[str, Any]:
        exif = img.getexif()
        fmt = img.format
        fields: Dict[str, Any] = {"FileFormat": fmt} if fmt else {}
        if not exif:
            return fields

        fields.update(_named({k: v for k, v in exif.items() if k not in (0x8769, 0x8825)}, ExifTags.TAGS))
        fields.update(_named(exif.get_ifd(ExifTags.IFD.Exif), ExifTags.TAGS))

        gps = exif.get_ifd(ExifTags.IFD.GPSInfo)
        if gps:
            fields.update(_named(gps, ExifTags.GPSTAGS))
            lat = _dms_to_decimal(gps.get(2), gps.get(1))
            lng = _dms_to_decimal(gps.get(4), gps.get(3))
            if lat is not None and lng is not None:
                fields["latitude"] = lat
                fields["longitude"] = lng

        return fields
