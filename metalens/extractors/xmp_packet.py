"""Embedded XMP packet scanner."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from .base import MetadataExtractor

XMP_OPEN = b"<x:xmpmeta"
XMP_CLOSE = b"</x:xmpmeta>"

# XMP property -> flat field name shared with the EXIF strategies
PROPERTY_FIELDS = {
    "tiff:Make": "Make",
    "tiff:Model": "Model",
    "xmp:CreatorTool": "Software",
    "exif:DateTimeOriginal": "DateTimeOriginal",
    "xmp:CreateDate": "xmp_create_date",
    "xmp:ModifyDate": "xmp_modify_date",
    "photoshop:DateCreated": "xmp_date_created",
}


def _property(packet: str, name: str) -> Optional[str]:
    escaped = re.escape(name)
    element = re.search(rf"<{escaped}[^>]*>([^<]*)</{escaped}>", packet)
    if element and element.group(1).strip():
        return element.group(1).strip()
    attribute = re.search(rf'{escaped}="([^"]*)"', packet)
    if attribute:
        return attribute.group(1)
    return None


def _first_list_item(packet: str, name: str) -> Optional[str]:
    """dc:title / dc:creator are rdf:Alt / rdf:Seq containers; take the first rdf:li."""
    escaped = re.escape(name)
    block = re.search(rf"<{escaped}[^>]*>(.*?)</{escaped}>", packet, re.S)
    if not block:
        return None
    item = re.search(r"<rdf:li[^>]*>([^<]*)</rdf:li>", block.group(1))
    if item:
        return item.group(1).strip()
    text = block.group(1).strip()
    return text or None


class XmpPacketExtractor(MetadataExtractor):
    strategy_id = "xmp_packet"
    label = "XMP Parser"

    def extract(self, data: bytes) -> Dict[str, Any]:
        data = bytes(data)
        start = data.find(XMP_OPEN)
        end = data.find(XMP_CLOSE, start + 1) if start != -1 else -1
        if start == -1 or end == -1:
            return {"xmp_found": False}

        raw = data[start : end + len(XMP_CLOSE)]
        packet = raw.decode("utf-8", "replace")
        result: Dict[str, Any] = {
            "xmp_found": True,
            "xmp_size": len(raw),
            "xmp_start_offset": start,
        }

        title = _first_list_item(packet, "dc:title")
        if title:
            result["xmp_title"] = title
        creator = _first_list_item(packet, "dc:creator")
        if creator:
            result["xmp_creator"] = creator

        for prop, field in PROPERTY_FIELDS.items():
            value = _property(packet, prop)
            if value:
                result[field] = value
        return result
