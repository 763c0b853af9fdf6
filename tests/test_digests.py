import hashlib

import pytest

from metalens.analyzers.digests import compression_ratio, digest, digest_all


def test_known_vectors():
    assert digest(b"abc", "sha256") == hashlib.sha256(b"abc").hexdigest()
    assert digest(b"abc", "SHA-256") == digest(b"abc", "sha256")
    assert digest(b"abc", "crc32") == "352441c2"


def test_digest_all_includes_crc():
    hashes = digest_all(b"")
    assert hashes["md5"] == "d41d8cd98f00b204e9800998ecf8427e"
    assert hashes["crc32"] == "00000000"


def test_unknown_algorithm():
    with pytest.raises(ValueError, match="Unsupported digest algorithm"):
        digest(b"abc", "rot13")


def test_compression_ratio():
    assert compression_ratio(b"") == 0.0
    assert compression_ratio(b"\x00" * 4096) < 0.05
