from io import BytesIO

import pytest
from PIL import Image

from exifposter.engine import RenderEngine
from exifposter.errors import DecodeFailure, RenderFailure, UnsupportedFormat
from exifposter.models import MetadataSnapshot
from exifposter.templates.registry import build_registry


class _BrokenTemplate:
    template_id = "broken"
    name = "Broken"
    description = "always raises"

    def render(self, photo, metadata):
        raise ZeroDivisionError("font metrics")


def test_render_bytes_reads_metadata_when_missing(jpeg_bytes: bytes) -> None:
    data = RenderEngine().render_bytes(jpeg_bytes, None, "blur-background", "jpg", 0.8, filename="a.jpg")
    with Image.open(BytesIO(data)) as image:
        assert image.format == "JPEG"
        assert image.width > 120


def test_render_returns_rgb_canvas() -> None:
    photo = Image.new("RGB", (64, 48), "gray")
    canvas = RenderEngine().render("classic", photo, MetadataSnapshot())
    assert canvas.mode == "RGB"
    assert canvas.width > photo.width


def test_template_exception_becomes_render_failure(jpeg_bytes: bytes) -> None:
    engine = RenderEngine(registry=build_registry([_BrokenTemplate()], default_id="broken"))
    with pytest.raises(RenderFailure) as excinfo:
        engine.render_bytes(jpeg_bytes, MetadataSnapshot(), "broken", "png")
    assert isinstance(excinfo.value.__cause__, ZeroDivisionError)


def test_decode_and_format_errors_are_typed(jpeg_bytes: bytes) -> None:
    engine = RenderEngine()
    with pytest.raises(DecodeFailure):
        engine.render_bytes(b"nope", MetadataSnapshot(), "classic", "png")
    with pytest.raises(UnsupportedFormat):
        engine.render_bytes(jpeg_bytes, MetadataSnapshot(), "classic", "tiff")


def test_oversized_image_is_a_decode_failure(oversized_tiff: bytes) -> None:
    with pytest.raises(DecodeFailure):
        RenderEngine().render_bytes(oversized_tiff, None, "classic", "png", filename="huge.tif")
