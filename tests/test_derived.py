from metalens.derived import crop_factor, derive_values


def test_crop_factors():
    assert crop_factor("Canon", "Canon EOS 80D") == 1.6
    assert crop_factor("Canon", "Canon EOS 5D Mark IV") == 1.0
    assert crop_factor("NIKON CORPORATION", "NIKON D7500") == 1.5
    assert crop_factor("SONY", "ILCE-7M3 A7") == 1.0
    assert crop_factor(None, None) == 1.0


def test_derived_values():
    derived = derive_values(
        {
            "Make": "Canon",
            "Model": "Canon EOS 80D",
            "FocalLength": 50.0,
            "FNumber": 2.8,
            "ExposureTime": 0.008,
            "ISOSpeedRatings": 200,
        }
    )
    assert derived == {
        "focal_length_35mm": 80,
        "hyperfocal_distance": 29762,
        "exposure_value": 10,
        "light_value": 11,
    }


def test_missing_inputs_give_nulls():
    assert derive_values({"FocalLength": "n/a", "FNumber": 0}) == {
        "focal_length_35mm": None,
        "hyperfocal_distance": None,
        "exposure_value": None,
        "light_value": None,
    }
