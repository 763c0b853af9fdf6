"""Result entities produced by the analyzers, strategies and summarizers."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .values import MetadataValue


class ExtractionStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ELAVerdict(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"

    @property
    def narrative(self) -> str:
        return ELA_NARRATIVES[self]


ELA_NARRATIVES = {
    ELAVerdict.LOW: "Low manipulation probability. Image appears authentic.",
    ELAVerdict.MODERATE: "Moderate manipulation probability. Some areas may have been edited.",
    ELAVerdict.HIGH: "High manipulation probability. Significant editing detected.",
    ELAVerdict.VERY_HIGH: "Very high manipulation probability. Extensive editing detected.",
}


@dataclass(frozen=True)
class ExtractionResult:
    strategy_id: str
    fields: Dict[str, MetadataValue]
    status: ExtractionStatus
    coverage_estimate: float = 0.0
    error: Optional[str] = None
    label: str = ""
    library: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.SUCCESS

    @property
    def unique_fields(self) -> int:
        return len(self.fields)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.label or self.strategy_id,
            "library": self.library,
            "status": self.status.value,
            "coverage": round(self.coverage_estimate, 2),
            "unique_fields": self.unique_fields,
            "data": dict(self.fields),
        }
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class Conflict:
    source: str
    divergent_value: MetadataValue

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "value": self.divergent_value}


@dataclass(frozen=True)
class ConsolidatedField:
    name: str
    chosen_value: MetadataValue
    contributing_sources: Tuple[str, ...]
    confidence: int
    conflicts: Tuple[Conflict, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "value": self.chosen_value,
            "sources": list(self.contributing_sources),
            "confidence": self.confidence,
        }
        if self.conflicts:
            out["conflicts"] = [c.to_dict() for c in self.conflicts]
        return out


@dataclass(frozen=True)
class SignatureMatch:
    type_name: str
    confidence: int
    extension: str = ""
    description: str = ""
    header_hex: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type_name,
            "confidence": self.confidence,
            "extension": self.extension,
            "description": self.description,
            "header": self.header_hex,
        }


@dataclass(frozen=True)
class EmbeddedObjectHit:
    format_type: str
    byte_offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.format_type, "offset": self.byte_offset}


@dataclass(frozen=True)
class SuspiciousPattern:
    pattern_id: str
    description: str
    severity: Severity
    occurrence_offsets: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern_id,
            "description": self.description,
            "severity": self.severity.value,
            "locations": list(self.occurrence_offsets),
        }


@dataclass(frozen=True)
class EntropyChunk:
    start_offset: int
    entropy: float
    high: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"offset": self.start_offset, "entropy": round(self.entropy, 4), "high": self.high}


@dataclass(frozen=True)
class EntropyReport:
    overall: float
    chunks: Tuple[EntropyChunk, ...]
    chunk_size: int
    assessment: str

    @property
    def high_entropy_offsets(self) -> List[int]:
        return [chunk.start_offset for chunk in self.chunks if chunk.high]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": round(self.overall, 4),
            "assessment": self.assessment,
            "chunk_size": self.chunk_size,
            "chunks": [chunk.to_dict() for chunk in self.chunks],
            "high_entropy_offsets": self.high_entropy_offsets,
        }


@dataclass(frozen=True)
class HexRow:
    offset: str
    hex: str
    ascii: str

    def to_dict(self) -> Dict[str, str]:
        return {"offset": self.offset, "hex": self.hex, "ascii": self.ascii}


@dataclass(frozen=True)
class SuspiciousBlock:
    x: int
    y: int
    width: int
    height: int
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "confidence": round(self.confidence, 2),
        }


@dataclass(frozen=True)
class ELAResult:
    overall_score: float
    suspicious_blocks: Tuple[SuspiciousBlock, ...]
    verdict: ELAVerdict
    mean_difference: float
    max_difference: float
    quality: int
    threshold: float
    width: int
    height: int
    difference_map: Optional[bytes] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "overall_score": round(self.overall_score, 2),
            "verdict": self.verdict.value,
            "analysis": self.verdict.narrative,
            "suspicious_blocks": [block.to_dict() for block in self.suspicious_blocks],
            "mean_difference": round(self.mean_difference, 4),
            "max_difference": round(self.max_difference, 4),
            "quality": self.quality,
            "threshold": self.threshold,
            "width": self.width,
            "height": self.height,
        }
        if self.difference_map is not None:
            out["difference_map"] = "data:image/png;base64," + base64.b64encode(
                self.difference_map
            ).decode()
        return out


@dataclass
class FileOutcome:
    file_name: str
    status: ExtractionStatus
    fields: Dict[str, MetadataValue] = field(default_factory=dict)
    error: Optional[str] = None
    size: int = 0

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.file_name,
            "size": self.size,
            "status": self.status.value,
            "exifData": dict(self.fields) if self.ok else None,
            "error": self.error,
        }


@dataclass
class BatchSummary:
    total: int = 0
    successful: int = 0
    errors: int = 0
    with_gps: int = 0
    cameras: Dict[str, int] = field(default_factory=dict)
    earliest: Optional[str] = None
    latest: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFiles": self.total,
            "successful": self.successful,
            "errors": self.errors,
            "withGPS": self.with_gps,
            "cameras": dict(self.cameras),
            "dateRange": {"earliest": self.earliest, "latest": self.latest},
        }
