"""Policy constants for the forensic checks.

These are heuristics, not physics: every threshold can be overridden per call
(``with_overrides``) or per process (``from_env``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

ENV_PREFIX = "METALENS_"


@dataclass(frozen=True)
class ForensicThresholds:
    # entropy
    high_entropy: float = 7.5
    medium_entropy: float = 6.5
    entropy_chunk_size: int = 256
    # pattern scanner run lengths, in bytes
    null_run_length: int = 20
    ff_run_length: int = 10
    # signature / hex windows
    header_window: int = 16
    embedded_scan_limit: int = 10_000
    hex_cap: int = 4096
    # printable string extraction
    string_min_length: int = 4
    string_limit: int = 100
    # LSB ratio band treated as a steganography hint
    lsb_ratio_low: float = 0.4
    lsb_ratio_high: float = 0.6
    # error level analysis
    ela_quality: int = 90
    ela_threshold: float = 15.0
    ela_block_size: int = 32
    ela_amplification: float = 10.0
    # cache
    cache_ttl_seconds: float = 30 * 60

    def with_overrides(self, **overrides: Any) -> "ForensicThresholds":
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise ValueError(f"Unknown threshold(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, prefix: str = ENV_PREFIX
    ) -> "ForensicThresholds":
        """Build thresholds from ``METALENS_<FIELD>`` environment variables."""
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            caster = float if f.type in ("float", float) else int
            try:
                overrides[f.name] = caster(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {prefix}{f.name.upper()}: {raw!r}") from exc
        return cls(**overrides)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_THRESHOLDS = ForensicThresholds()
