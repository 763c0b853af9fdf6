"""Caller-owned TTL store for analysis results.

Purely an optimization: nothing in the analysis core requires a cache. Entries
are keyed by analysis kind plus file identity (name, size, modification time,
and a content fingerprint when no modification time is known) and expire after
a TTL; expired entries are dropped on access or by an explicit ``sweep``.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .analyzers.digests import digest
from .config import DEFAULT_THRESHOLDS
from .log import get_logger

LOGGER = get_logger("cache")


class CacheKind(str, Enum):
    EXIF_DATA = "exif_data"
    HEX_ANALYSIS = "hex_analysis"
    ELA_ANALYSIS = "ela_analysis"
    FORENSIC_ANALYSIS = "forensic_analysis"
    BATCH_SUMMARY = "batch_summary"


@dataclass(frozen=True)
class FileIdentity:
    name: str
    size: int
    modified: float = 0
    fingerprint: str = ""

    @classmethod
    def for_bytes(cls, name: str, data: bytes, modified: float = 0) -> "FileIdentity":
        return cls(name=name, size=len(data), modified=modified)

    @classmethod
    def for_content(cls, name: str, data: bytes) -> "FileIdentity":
        """Identity for uploads without a modification time; the digest stands in for it."""
        return cls(name=name, size=len(data), fingerprint=digest(data, "sha1")[:16])


@dataclass
class _Entry:
    data: Any
    stored_at: float
    expires_at: float


def cache_key(kind: CacheKind, identity: FileIdentity) -> str:
    key = f"{kind.value}_{identity.name}_{identity.size}_{identity.modified}"
    return f"{key}_{identity.fingerprint}" if identity.fingerprint else key


class AnalysisCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_THRESHOLDS.cache_ttl_seconds,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _live(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def get(self, kind: CacheKind, identity: FileIdentity) -> Optional[Any]:
        entry = self._live(cache_key(kind, identity))
        return entry.data if entry else None

    def has(self, kind: CacheKind, identity: FileIdentity) -> bool:
        return self._live(cache_key(kind, identity)) is not None

    def set(self, kind: CacheKind, identity: FileIdentity, data: Any, ttl: Optional[float] = None) -> None:
        now = self._clock()
        self._entries[cache_key(kind, identity)] = _Entry(
            data=data, stored_at=now, expires_at=now + (ttl if ttl is not None else self.ttl_seconds)
        )

    def delete(self, kind: CacheKind, identity: FileIdentity) -> bool:
        return self._entries.pop(cache_key(kind, identity), None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            LOGGER.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    def trim(self, soft_limit: int = 100, hard_limit: int = 200) -> None:
        """Sweep past ``soft_limit`` entries; clear everything if still past ``hard_limit``."""
        if len(self._entries) > soft_limit:
            self.sweep()
        if len(self._entries) > hard_limit:
            LOGGER.info("Cache over %d entries after sweep; clearing", hard_limit)
            self.clear()

    def stats(self) -> Dict[str, Any]:
        now = self._clock()
        expired = 0
        total_size = 0
        for key, entry in self._entries.items():
            if now > entry.expires_at:
                expired += 1
            # rough footprint
            total_size += len(json.dumps(entry.data, default=str)) + len(key)
        return {
            "size": len(self._entries),
            "expired_entries": expired,
            "memory_usage": f"{total_size / 1024:.2f} KB",
        }
