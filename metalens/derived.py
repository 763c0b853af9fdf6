"""Photographic values computed from consolidated EXIF fields."""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

CIRCLE_OF_CONFUSION_MM = 0.03  # full frame


def _num(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None


def crop_factor(make: Any, model: Any) -> float:
    if not isinstance(make, str) or not make:
        return 1.0
    make_upper = make.upper()
    model = model if isinstance(model, str) else ""
    if "CANON" in make_upper:
        return 1.0 if any(tag in model for tag in ("5D", "6D", "1D")) else 1.6
    if "NIKON" in make_upper:
        return 1.0 if any(tag in model for tag in ("D850", "D780", "Z")) else 1.5
    if "SONY" in make_upper:
        return 1.0 if any(tag in model for tag in ("A7", "A9")) else 1.5
    return 1.0


def derive_values(fields: Mapping[str, Any]) -> Dict[str, Optional[float]]:
    focal = _num(fields.get("FocalLength"))
    aperture = _num(fields.get("FNumber"))
    exposure = _num(fields.get("ExposureTime"))
    iso = _num(fields.get("ISOSpeedRatings", fields.get("ISO")))

    out: Dict[str, Optional[float]] = {
        "focal_length_35mm": None,
        "hyperfocal_distance": None,
        "exposure_value": None,
        "light_value": None,
    }
    if focal:
        out["focal_length_35mm"] = round(focal * crop_factor(fields.get("Make"), fields.get("Model")))
    if focal and aperture:
        out["hyperfocal_distance"] = round(focal * focal / (aperture * CIRCLE_OF_CONFUSION_MM))
    if aperture and exposure:
        ev = math.log2(aperture * aperture / exposure)
        out["exposure_value"] = round(ev)
        if iso:
            out["light_value"] = round(ev + math.log2(iso / 100))
    return out
