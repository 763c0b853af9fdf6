import base64

import numpy as np
import pytest

from metalens.analyzers.ela import difference_map, find_suspicious_blocks, run_ela, verdict_for
from metalens.errors import DecodeFailure
from metalens.models import ELAVerdict


class StubCodec:
    """Decodes b"original" to one buffer and anything else to another."""

    def __init__(self, original, recompressed):
        self.original = original
        self.recompressed = recompressed
        self.qualities = []

    def decode(self, data):
        return self.original if data == b"original" else self.recompressed

    def encode(self, pixels, quality):
        self.qualities.append(quality)
        return b"recompressed"


def _edited_pair():
    original = np.zeros((64, 64, 3), dtype=np.uint8)
    recompressed = original.copy()
    recompressed[:32, :32] = 10
    return original, recompressed


def test_edited_block_is_flagged():
    codec = StubCodec(*_edited_pair())
    result = run_ela(b"original", quality=80, codec=codec)

    assert codec.qualities == [80]
    assert result.mean_difference == pytest.approx(2.5)
    assert result.max_difference == pytest.approx(10.0)
    assert result.overall_score == pytest.approx(5.0)
    assert result.verdict is ELAVerdict.LOW
    assert len(result.suspicious_blocks) == 1
    block = result.suspicious_blocks[0]
    assert (block.x, block.y, block.width, block.height) == (0, 0, 32, 32)
    assert block.confidence == pytest.approx(100 / 255 * 100)


def test_threshold_is_strict():
    codec = StubCodec(*_edited_pair())
    # block mean after x10 amplification is exactly 100
    assert run_ela(b"original", threshold=100, codec=codec).suspicious_blocks == ()
    assert len(run_ela(b"original", threshold=99.9, codec=codec).suspicious_blocks) == 1


def test_partial_edge_blocks_are_skipped():
    amplified = np.full((40, 40), 255, dtype=np.uint8)
    blocks = find_suspicious_blocks(amplified, block_size=32, threshold=15)
    assert [(b.x, b.y) for b in blocks] == [(0, 0)]


def test_amplification_saturates():
    a = np.zeros((1, 2, 3), dtype=np.uint8)
    b = np.array([[[30, 30, 30], [3, 0, 0]]], dtype=np.uint8)
    per_pixel, amplified = difference_map(a, b, 10)
    assert per_pixel.tolist() == [[30.0, 1.0]]
    assert amplified.tolist() == [[255, 10]]


def test_shape_mismatch_rejected():
    with pytest.raises(ValueError):
        difference_map(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)), 10)


def test_verdict_bands():
    assert verdict_for(0) is ELAVerdict.LOW
    assert verdict_for(9.99) is ELAVerdict.LOW
    assert verdict_for(10) is ELAVerdict.MODERATE
    assert verdict_for(30) is ELAVerdict.HIGH
    assert verdict_for(60) is ELAVerdict.VERY_HIGH
    assert verdict_for(100) is ELAVerdict.VERY_HIGH


def test_flat_jpeg_is_low_risk(flat_jpeg):
    result = run_ela(flat_jpeg)
    assert result.quality == 90
    assert (result.width, result.height) == (64, 48)
    assert result.verdict is ELAVerdict.LOW
    assert result.suspicious_blocks == ()
    assert result.difference_map is None


def test_difference_map_rendered_as_png(flat_jpeg):
    payload = run_ela(flat_jpeg, render_map=True).to_dict()
    prefix = "data:image/png;base64,"
    assert payload["difference_map"].startswith(prefix)
    assert base64.b64decode(payload["difference_map"][len(prefix):])[:8] == b"\x89PNG\r\n\x1a\n"
    assert payload["analysis"] == ELAVerdict.LOW.narrative


def test_quality_out_of_range():
    with pytest.raises(ValueError):
        run_ela(b"original", quality=5, codec=StubCodec(*_edited_pair()))
    with pytest.raises(ValueError):
        run_ela(b"original", quality=101, codec=StubCodec(*_edited_pair()))


def test_undecodable_input():
    with pytest.raises(DecodeFailure):
        run_ela(b"not an image")
    with pytest.raises(DecodeFailure):
        run_ela(b"")


def test_untouched_textured_photo_scores_low(textured_jpeg):
    # re-saving at the quality it was written with changes very little
    result = run_ela(textured_jpeg, quality=90)
    assert (result.width, result.height) == (128, 96)
    assert result.overall_score < 10
    assert result.verdict is ELAVerdict.LOW
    assert result.suspicious_blocks == ()
