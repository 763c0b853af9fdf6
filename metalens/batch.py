"""Per-file extraction across a file set and its aggregate summary."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .log import get_logger
from .models import BatchSummary, ExtractionStatus, FileOutcome
from .values import MetadataValue

LOGGER = get_logger("batch")

DEFAULT_DATE_FIELDS = ("DateTimeOriginal", "DateTime")
DEFAULT_CONCURRENCY = 4

ProgressCallback = Callable[[int, int, str], None]
Extractor = Callable[[bytes], Awaitable[Dict[str, MetadataValue]]]


def camera_identity(fields: Mapping[str, Any]) -> str:
    make = fields.get("Make")
    model = fields.get("Model")
    if make and model:
        return f"{make} {model}"
    return "Unknown"


def has_gps(fields: Mapping[str, Any]) -> bool:
    return fields.get("latitude") is not None and fields.get("longitude") is not None


def summarize_batch(
    outcomes: Iterable[FileOutcome], date_fields: Sequence[str] = DEFAULT_DATE_FIELDS
) -> BatchSummary:
    """
    Aggregate per-file outcomes.

    The date range compares raw date strings lexically, so EXIF
    ``YYYY:MM:DD`` and ISO ``YYYY-MM-DD`` text mixed in one batch do not order
    as calendar dates.
    """
    summary = BatchSummary()
    for outcome in outcomes:
        summary.total += 1
        if not outcome.ok:
            summary.errors += 1
            continue
        summary.successful += 1

        fields = outcome.fields or {}
        if has_gps(fields):
            summary.with_gps += 1

        camera = camera_identity(fields)
        summary.cameras[camera] = summary.cameras.get(camera, 0) + 1

        date_str = next((fields[f] for f in date_fields if fields.get(f)), None)
        if isinstance(date_str, str):
            if summary.earliest is None or date_str < summary.earliest:
                summary.earliest = date_str
            if summary.latest is None or date_str > summary.latest:
                summary.latest = date_str
    return summary


async def process_batch(
    files: Sequence[Tuple[str, bytes]],
    extract: Extractor,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    on_progress: Optional[ProgressCallback] = None,
) -> List[FileOutcome]:
    """
    Run ``extract`` over every ``(file_name, data)`` pair, in parallel by file.

    A failing file yields an error outcome and never affects its siblings.
    Progress is reported as each file finishes (completion order); the returned
    list follows input order.
    """
    if concurrency <= 0:
        raise ValueError(f"concurrency must be positive, got {concurrency}")

    semaphore = asyncio.Semaphore(concurrency)
    total = len(files)
    done = 0

    async def run_one(name: str, data: bytes) -> FileOutcome:
        nonlocal done
        async with semaphore:
            try:
                fields = await extract(data)
                outcome = FileOutcome(
                    file_name=name, status=ExtractionStatus.SUCCESS, fields=dict(fields), size=len(data)
                )
            except Exception as exc:
                LOGGER.warning("Batch extraction failed for %s: %s", name, exc)
                outcome = FileOutcome(
                    file_name=name,
                    status=ExtractionStatus.ERROR,
                    error=str(exc) or type(exc).__name__,
                    size=len(data),
                )
        done += 1
        if on_progress is not None:
            try:
                on_progress(done, total, name)
            except Exception as exc:
                LOGGER.warning("Progress callback failed for %s: %s", name, exc)
        return outcome

    return list(await asyncio.gather(*(run_one(name, data) for name, data in files)))
