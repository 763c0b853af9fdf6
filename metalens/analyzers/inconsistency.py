"""Cross-field sanity checks on consolidated metadata."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ..models import Severity

EDITING_SOFTWARE = ("photoshop", "gimp", "lightroom", "affinity", "pixelmator", "snapseed")
_DATE_FORMATS = ("%Y:%m:%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S")


def _parse_date(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    text = value.strip()[:19]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _timestamp_issues(fields: Mapping[str, Any]) -> List[str]:
    issues: List[str] = []
    modified = _parse_date(fields.get("DateTime"))
    original = _parse_date(fields.get("DateTimeOriginal"))
    digitized = _parse_date(fields.get("DateTimeDigitized"))
    if original and modified and original > modified:
        issues.append("DateTimeOriginal is later than DateTime (modification time)")
    if original and digitized and digitized < original:
        issues.append("DateTimeDigitized precedes DateTimeOriginal")
    return issues


def _gps_issues(fields: Mapping[str, Any]) -> List[str]:
    issues: List[str] = []
    lat = _as_float(fields.get("latitude"))
    lng = _as_float(fields.get("longitude"))
    if lat is not None and not -90.0 <= lat <= 90.0:
        issues.append(f"GPS latitude out of range: {lat}")
    if lng is not None and not -180.0 <= lng <= 180.0:
        issues.append(f"GPS longitude out of range: {lng}")
    return issues


def _device_issues(fields: Mapping[str, Any]) -> List[str]:
    if fields.get("Model") and not fields.get("Make"):
        return ["Camera model present without a camera make"]
    return []


def _software_warnings(fields: Mapping[str, Any]) -> List[str]:
    software = fields.get("Software")
    if not isinstance(software, str):
        return []
    lowered = software.lower()
    return [
        f"Image processed with editing software: {software}"
        for marker in EDITING_SOFTWARE
        if marker in lowered
    ][:1]


def check_inconsistencies(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Flat field map in, ``{inconsistencies, warnings, severity, recommendation}`` out."""
    inconsistencies = _timestamp_issues(fields) + _gps_issues(fields) + _device_issues(fields)
    warnings = _software_warnings(fields)

    if len(inconsistencies) > 3:
        severity = Severity.CRITICAL
    elif len(inconsistencies) > 1:
        severity = Severity.HIGH
    elif inconsistencies or warnings:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    if inconsistencies:
        recommendation = "Metadata inconsistencies detected. Further investigation recommended."
    else:
        recommendation = "No significant metadata issues detected."

    return {
        "inconsistencies": inconsistencies,
        "warnings": warnings,
        "severity": severity.value,
        "recommendation": recommendation,
    }
