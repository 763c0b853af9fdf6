import pytest

from metalens.analyzers.strings import extract_strings, find_strings, is_interesting
from metalens.config import DEFAULT_THRESHOLDS


def test_runs_shorter_than_minimum_are_dropped():
    data = b"\x00abc\x00abcd\x01hello world\xff"
    assert find_strings(data) == ["abcd", "hello world"]


def test_printable_range_is_space_to_tilde():
    assert find_strings(b"\x1f a~b \x7f") == [" a~b "]


def test_custom_minimum_length():
    assert find_strings(b"ab\x00cd", min_length=2) == ["ab", "cd"]
    with pytest.raises(ValueError):
        find_strings(b"ab", min_length=0)


def test_interesting_markers():
    assert is_interesting("see http://example.com")
    assert is_interesting("admin@example.com")
    assert is_interesting("api_key=abc")
    assert not is_interesting("Canon EOS 5D")


def test_strings_capped_but_interesting_drawn_from_all():
    data = b"\x00".join(b"word%04d" % i for i in range(150)) + b"\x00password=hunter2"
    report = extract_strings(data)
    assert report["total_strings"] == 151
    assert len(report["strings"]) == DEFAULT_THRESHOLDS.string_limit
    assert report["strings"][0] == "word0000"
    assert report["interesting"] == ["password=hunter2"]


def test_limit_comes_from_thresholds():
    thresholds = DEFAULT_THRESHOLDS.with_overrides(string_limit=1, string_min_length=3)
    report = extract_strings(b"abc\x00defg", thresholds)
    assert report == {"total_strings": 2, "strings": ["abc"], "interesting": []}


def test_empty_input():
    assert extract_strings(b"") == {"total_strings": 0, "strings": [], "interesting": []}
