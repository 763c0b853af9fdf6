"""Multi-source image metadata reconciliation and binary forensics."""

from .consolidation import consolidate, summarize_consolidation
from .pipeline import analyze_forensics, extract_metadata, run_ela_analysis

__all__ = [
    "analyze_forensics",
    "consolidate",
    "extract_metadata",
    "run_ela_analysis",
    "summarize_consolidation",
]

__version__ = "0.3.0"
