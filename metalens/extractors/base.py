"""Common contract for pluggable metadata extraction strategies."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Mapping

from ..log import get_logger
from ..models import ExtractionResult, ExtractionStatus
from ..values import normalize_fields

LOGGER = get_logger("extractors")

# Approximate number of distinct EXIF fields a thorough parser can surface.
TOTAL_POSSIBLE_FIELDS = 200


def estimate_coverage(field_count: int, total: int = TOTAL_POSSIBLE_FIELDS) -> float:
    """Self-reported coverage in [0, 100]; informational only."""
    if total <= 0:
        return 0.0
    return min(field_count / total * 100.0, 100.0)


def failed_result(strategy_id: str, reason: str, *, label: str = "", library: str = "") -> ExtractionResult:
    return ExtractionResult(
        strategy_id=strategy_id,
        fields={},
        status=ExtractionStatus.ERROR,
        error=reason,
        label=label,
        library=library,
    )


class MetadataExtractor(ABC):
    """
    One independent way of reading metadata out of raw file bytes.

    Subclasses implement ``extract`` (synchronous, CPU-bound); ``parse`` runs it
    off the event loop and packages the outcome as an ExtractionResult. A raising
    ``extract`` becomes an ERROR result rather than propagating.
    """

    strategy_id: str = ""
    label: str = ""
    library: str = "custom"

    @abstractmethod
    def extract(self, data: bytes) -> Mapping[str, Any]:
        raise NotImplementedError

    async def parse(self, data: bytes) -> ExtractionResult:
        try:
            raw = await asyncio.to_thread(self.extract, data)
            fields = normalize_fields(raw)
        except Exception as exc:
            LOGGER.warning("Strategy %s failed: %s", self.strategy_id, exc)
            return failed_result(
                self.strategy_id,
                str(exc) or type(exc).__name__,
                label=self.label,
                library=self.library,
            )

        return ExtractionResult(
            strategy_id=self.strategy_id,
            fields=fields,
            status=ExtractionStatus.SUCCESS,
            coverage_estimate=estimate_coverage(len(fields)),
            label=self.label,
            library=self.library,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.strategy_id}>"
