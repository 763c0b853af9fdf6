"""Merge per-strategy extraction results into one field-indexed view.

Priority: results are consumed in the order given, which callers take from the
strategy registry (see ``metalens.registry``). For each field the value from
the first successful strategy that reported it is chosen; every later source
whose canonical serialization differs is recorded as a conflict.

Confidence is ``round(100 * (k - u + 1) / k)`` where ``k`` is the number of
contributing sources and ``u`` the number of distinct serialized values. All
agree gives 100; all distinct gives ``100 / k``. It is an agreement heuristic,
not a probability.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .models import Conflict, ConsolidatedField, ExtractionResult
from .values import MetadataValue, serialize_value


def field_confidence(serialized_values: Sequence[str]) -> int:
    k = len(serialized_values)
    if k == 0:
        return 0
    u = len(set(serialized_values))
    return round(100 * (k - u + 1) / k)


def consolidate_field(name: str, reports: Sequence[Tuple[str, MetadataValue]]) -> ConsolidatedField:
    """Reconcile one field from ``(strategy_id, value)`` pairs in priority order."""
    if not reports:
        raise ValueError(f"No reports for field '{name}'")

    serialized = [serialize_value(value) for _, value in reports]
    chosen_key = serialized[0]
    conflicts = tuple(
        Conflict(source=source, divergent_value=value)
        for (source, value), key in zip(reports[1:], serialized[1:])
        if key != chosen_key
    )
    return ConsolidatedField(
        name=name,
        chosen_value=reports[0][1],
        contributing_sources=tuple(source for source, _ in reports),
        confidence=field_confidence(serialized),
        conflicts=conflicts,
    )


def consolidate(results: Iterable[ExtractionResult]) -> Dict[str, ConsolidatedField]:
    """
    Union the fields of every successful result and reconcile each one.

    Failed results contribute nothing; no successful results yields ``{}``.
    Coverage estimates are ignored. Output keys are sorted so repeated runs
    over the same results are identical.
    """
    successful: List[ExtractionResult] = [r for r in results if r.ok]
    names = sorted({name for result in successful for name in result.fields})

    consolidated: Dict[str, ConsolidatedField] = {}
    for name in names:
        reports = [
            (result.strategy_id, result.fields[name]) for result in successful if name in result.fields
        ]
        consolidated[name] = consolidate_field(name, reports)
    return consolidated


def chosen_values(consolidated: Dict[str, ConsolidatedField]) -> Dict[str, MetadataValue]:
    return {name: entry.chosen_value for name, entry in consolidated.items()}


def summarize_consolidation(consolidated: Dict[str, ConsolidatedField]) -> Dict[str, Any]:
    total = len(consolidated)
    return {
        "total_unique_fields": total,
        "conflicts": sum(1 for entry in consolidated.values() if entry.conflicts),
        "avg_confidence": round(sum(e.confidence for e in consolidated.values()) / total) if total else 0,
    }
