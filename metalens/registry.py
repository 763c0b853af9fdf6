"""Registry of metadata extraction strategies.

Registration order is the consolidation priority: when strategies disagree on
a field, the value from the earliest-registered strategy is kept. The default
order is

1. ``pillow_exif``      full EXIF/GPS decode (most comprehensive)
2. ``segment_scanner``  hand-read EXIF segment, IFD0 + date tags
3. ``binary_structure`` raw header/signature sightings
4. ``xmp_packet``       embedded XMP packet
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .extractors import (
    BinaryStructureExtractor,
    MetadataExtractor,
    PillowExifExtractor,
    SegmentScannerExtractor,
    XmpPacketExtractor,
)


@dataclass(frozen=True)
class StrategyOption:
    strategy_id: str
    label: str
    library: str
    factory: Callable[[], MetadataExtractor]


OPTIONS: Dict[str, StrategyOption] = {
    "pillow_exif": StrategyOption(
        strategy_id="pillow_exif",
        label="Pillow EXIF",
        library="pillow",
        factory=PillowExifExtractor,
    ),
    "segment_scanner": StrategyOption(
        strategy_id="segment_scanner",
        label="Manual Parser",
        library="custom",
        factory=SegmentScannerExtractor,
    ),
    "binary_structure": StrategyOption(
        strategy_id="binary_structure",
        label="Binary Analysis",
        library="custom",
        factory=BinaryStructureExtractor,
    ),
    "xmp_packet": StrategyOption(
        strategy_id="xmp_packet",
        label="XMP Parser",
        library="custom",
        factory=XmpPacketExtractor,
    ),
}


def get_registry() -> Dict[str, StrategyOption]:
    return OPTIONS


def get_option(strategy_id: str) -> Optional[StrategyOption]:
    return OPTIONS.get(strategy_id)


def build_extractors(strategy_ids: Optional[Sequence[str]] = None) -> List[MetadataExtractor]:
    """Instantiate strategies in priority order (optionally a subset; priority order is kept)."""
    if strategy_ids is None:
        return [option.factory() for option in OPTIONS.values()]

    unknown = [sid for sid in strategy_ids if sid not in OPTIONS]
    if unknown:
        raise ValueError(f"Unknown strategy '{unknown[0]}'")
    wanted = set(strategy_ids)
    return [option.factory() for sid, option in OPTIONS.items() if sid in wanted]
