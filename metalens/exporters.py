"""Export payloads: consolidated metadata JSON, forensic JSON, batch CSV/JSON."""

from __future__ import annotations

import csv
import io
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .consolidation import summarize_consolidation
from .models import ConsolidatedField, ExtractionResult, FileOutcome

CSV_COLUMNS = [
    "Filename",
    "Size",
    "Status",
    "Camera",
    "GPS Lat",
    "GPS Lng",
    "Date Taken",
    "ISO",
    "Aperture",
    "Shutter Speed",
]


def consolidated_export(
    results: Sequence[ExtractionResult], consolidated: Mapping[str, ConsolidatedField]
) -> Dict[str, Any]:
    return {
        "sources": {result.strategy_id: result.to_dict() for result in results},
        "consolidated": {name: entry.to_dict() for name, entry in consolidated.items()},
        "analysis": summarize_consolidation(dict(consolidated)),
    }


def forensic_export(report: Mapping[str, Any]) -> Dict[str, Any]:
    """Forensic reports are already JSON-ready; copy so callers can't mutate ours."""
    return dict(report)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _shutter(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return ""
    return f"1/{round(1 / value)}s"


def csv_row(outcome: FileOutcome) -> List[str]:
    fields = outcome.fields if outcome.ok else {}
    camera = ""
    if outcome.ok:
        camera = f"{_text(fields.get('Make'))} {_text(fields.get('Model'))}".strip()
    fnumber = fields.get("FNumber")
    return [
        outcome.file_name,
        str(outcome.size),
        outcome.status.value,
        camera,
        _text(fields.get("latitude")),
        _text(fields.get("longitude")),
        _text(fields.get("DateTimeOriginal") or fields.get("DateTime")),
        _text(fields.get("ISOSpeedRatings", fields.get("ISO"))),
        f"f/{fnumber}" if fnumber else "",
        _shutter(fields.get("ExposureTime")),
    ]


def batch_csv(outcomes: Iterable[FileOutcome]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for outcome in outcomes:
        writer.writerow(csv_row(outcome))
    return buffer.getvalue()


def batch_json(outcomes: Iterable[FileOutcome]) -> List[Dict[str, Any]]:
    return [outcome.to_dict() for outcome in outcomes]
