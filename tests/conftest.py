import io

import numpy as np
import pytest
from PIL import Image

CAMERA_MAKE = "Canon"
CAMERA_MODEL = "Canon EOS 5D"
DATE_TIME = "2023:05:01 12:00:00"
DATE_TIME_ORIGINAL = "2023:05:01 10:30:00"

XMP_PACKET = (
    b'<?xpacket begin="" id="W5M0MpCehiHzreSzNTczkc9d"?>'
    b'<x:xmpmeta xmlns:x="adobe:ns:meta/">'
    b'<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">'
    b'<rdf:Description rdf:about="" tiff:Make="Nikon" xmp:CreatorTool="GIMP 2.10">'
    b"<tiff:Model>D850</tiff:Model>"
    b"<xmp:CreateDate>2022-01-02T03:04:05</xmp:CreateDate>"
    b'<dc:title><rdf:Alt><rdf:li xml:lang="x-default">Harbour at dusk</rdf:li></rdf:Alt></dc:title>'
    b"<dc:creator><rdf:Seq><rdf:li>Jane Doe</rdf:li></rdf:Seq></dc:creator>"
    b"</rdf:Description></rdf:RDF></x:xmpmeta>"
    b'<?xpacket end="w"?>'
)


def _save(img, fmt, **params):
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def _camera_exif():
    exif = Image.Exif()
    exif[0x010F] = CAMERA_MAKE
    exif[0x0110] = CAMERA_MODEL
    exif[0x0132] = DATE_TIME
    exif[0x8769] = {0x9003: DATE_TIME_ORIGINAL}
    exif[0x8825] = {
        1: "N",
        2: (40.0, 26.0, 46.0),
        3: "W",
        4: (79.0, 58.0, 56.0),
    }
    return exif


@pytest.fixture
def flat_jpeg():
    return _save(Image.new("RGB", (64, 48), (128, 128, 128)), "JPEG", quality=95)


@pytest.fixture
def textured_jpeg():
    """Gradient plus mild sensor-like noise, saved once at quality 90."""
    rng = np.random.default_rng(0)
    ys, xs = np.mgrid[0:96, 0:128]
    base = 40 + xs * 1.2 + ys * 0.6
    noise = rng.normal(0, 3, size=(96, 128, 3))
    pixels = np.clip(base[..., None] + np.array([10, 0, -10]) + noise, 0, 255).astype(np.uint8)
    return _save(Image.fromarray(pixels), "JPEG", quality=90)


@pytest.fixture
def exif_jpeg():
    return _save(Image.new("RGB", (64, 48), (90, 120, 200)), "JPEG", quality=95, exif=_camera_exif())


@pytest.fixture
def plain_png():
    return _save(Image.new("RGB", (8, 8), (0, 255, 0)), "PNG")


@pytest.fixture
def exif_png():
    return _save(Image.new("RGB", (8, 8), (0, 255, 0)), "PNG", exif=_camera_exif())


@pytest.fixture
def xmp_blob():
    return b"\x00" * 32 + XMP_PACKET + b"\x00" * 8


@pytest.fixture
def zip_in_zeros():
    data = bytearray(100)
    data[40:44] = b"PK\x03\x04"
    return bytes(data)
