"""Hash-based integrity reporting."""

from __future__ import annotations

import hashlib
import zlib
from typing import Dict, Iterable

DEFAULT_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")

_ALIASES = {
    "sha-1": "sha1",
    "sha-256": "sha256",
    "sha-384": "sha384",
    "sha-512": "sha512",
}


def digest(data: bytes, algorithm: str) -> str:
    """Hex digest of ``data``; accepts hashlib names, WebCrypto-style names and crc32."""
    alg = _ALIASES.get(algorithm.lower(), algorithm.lower())
    if alg == "crc32":
        return f"{zlib.crc32(data) & 0xFFFFFFFF:08x}"
    try:
        hasher = hashlib.new(alg)
    except ValueError as exc:
        raise ValueError(f"Unsupported digest algorithm '{algorithm}'") from exc
    hasher.update(data)
    return hasher.hexdigest()


def digest_all(data: bytes, algorithms: Iterable[str] = DEFAULT_ALGORITHMS + ("crc32",)) -> Dict[str, str]:
    return {alg: digest(data, alg) for alg in algorithms}


def compression_ratio(data: bytes) -> float:
    """Size after zlib over size before; near 1.0 means already compressed/random."""
    if not data:
        return 0.0
    return len(zlib.compress(data)) / len(data)
