import pytest

from metalens.extractors import MetadataExtractor
from metalens.registry import OPTIONS, build_extractors, get_option, get_registry


PRIORITY = ["pillow_exif", "segment_scanner", "binary_structure", "xmp_packet"]

EXPECTED_LABELS = {
    "pillow_exif": "Pillow EXIF",
    "segment_scanner": "Manual Parser",
    "binary_structure": "Binary Analysis",
    "xmp_packet": "XMP Parser",
}


def test_registry_order_is_priority_order():
    assert list(OPTIONS) == PRIORITY
    assert get_registry() is OPTIONS


def test_registry_labels_match_expected():
    for strategy_id, option in OPTIONS.items():
        assert option.label == EXPECTED_LABELS[strategy_id]


def test_factories_build_matching_extractors():
    for strategy_id, option in OPTIONS.items():
        extractor = option.factory()
        assert isinstance(extractor, MetadataExtractor)
        assert extractor.strategy_id == strategy_id
        assert extractor.label == option.label
        assert extractor.library == option.library


def test_subset_keeps_priority_order():
    extractors = build_extractors(["xmp_packet", "pillow_exif"])
    assert [e.strategy_id for e in extractors] == ["pillow_exif", "xmp_packet"]


def test_unknown_strategy_rejected():
    with pytest.raises(ValueError, match="Unknown strategy"):
        build_extractors(["exiftool"])


def test_get_option():
    assert get_option("xmp_packet").library == "custom"
    assert get_option("missing") is None
