from io import BytesIO

import pytest
from PIL import Image, features

from conftest import encode_image
from images import ImagePayload, InvalidImage, download_filename, load_upload, to_png


@pytest.mark.parametrize(
    "fmt, mime_type",
    [
        ("PNG", "image/png"),
        ("JPEG", "image/jpeg"),
        pytest.param(
            "WEBP",
            "image/webp",
            marks=pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WEBP"),
        ),
    ],
)
def test_load_upload_supported_types(fmt, mime_type):
    data = encode_image(fmt)
    payload = load_upload(data, mime_type)
    assert payload.mime_type == mime_type
    assert payload.data == data
    assert payload.to_data_uri().startswith(f"data:{mime_type};base64,")
    assert len(payload.to_base64()) > 0


def test_load_upload_uses_detected_type_over_declared():
    payload = load_upload(encode_image("JPEG"), "image/png")
    assert payload.mime_type == "image/jpeg"


def test_load_upload_rejects_empty():
    with pytest.raises(InvalidImage):
        load_upload(b"")


def test_load_upload_rejects_non_image():
    with pytest.raises(InvalidImage, match="not a valid image"):
        load_upload(b"definitely not an image", "image/png")


def test_load_upload_rejects_unsupported_format():
    with pytest.raises(InvalidImage, match="Only PNG, JPG and WEBP"):
        load_upload(encode_image("GIF"), "image/gif")


def test_load_upload_rejects_oversized():
    with pytest.raises(InvalidImage, match="limit"):
        load_upload(encode_image("PNG"), max_mb=0.00001)


def test_data_uri_decodes_back(png_bytes):
    payload = ImagePayload.from_data_uri(ImagePayload(png_bytes).to_data_uri())
    assert payload == ImagePayload(png_bytes, "image/png")


@pytest.mark.parametrize("uri", ["not a uri", "data:image/png,abc", "data:image/png;base64,@@@", "data:image/png;base64,"])
def test_from_data_uri_rejects_malformed(uri):
    with pytest.raises(InvalidImage):
        ImagePayload.from_data_uri(uri)


def test_to_png_passthrough(png_bytes):
    assert to_png(ImagePayload(png_bytes, "image/png")) == png_bytes


def test_to_png_converts_jpeg():
    png = to_png(ImagePayload(encode_image("JPEG"), "image/jpeg"))
    with Image.open(BytesIO(png)) as image:
        assert image.format == "PNG"
        assert image.size == (8, 8)


def test_download_filename():
    assert download_filename("corporate-grey") == "headshot-corporate-grey.png"
    assert download_filename(None) == "headshot-professional.png"
