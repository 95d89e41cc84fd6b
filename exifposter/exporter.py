from __future__ import annotations

from io import BytesIO

from PIL import Image, features

from exifposter.constants import DEFAULT_JPEG_QUALITY
from exifposter.errors import EncodeFailure, EncoderUnavailable, UnsupportedFormat

_CODECS = {"PNG": "zlib", "JPEG": "jpg"}


def resolve_output_format(fmt: str) -> tuple[str, str]:
    """Map a user format name to (file extension, Pillow format)."""
    f = (fmt or "").strip().lower().lstrip(".")
    if f in {"jpeg", "jpg"}:
        return "jpg", "JPEG"
    if f == "png":
        return "png", "PNG"
    raise UnsupportedFormat(f"output format must be jpeg/jpg or png, got: {fmt!r}")


def _ensure_encoder(pil_format: str) -> None:
    if not features.check_codec(_CODECS[pil_format]):
        raise EncoderUnavailable(f"no {pil_format} encoder available in this Pillow build")


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in {"RGBA", "LA", "PA"} or (image.mode == "P" and "transparency" in image.info)


def flatten_on_white(image: Image.Image) -> Image.Image:
    """Composite an image with alpha onto opaque white; returns an RGB image."""
    rgba = image.convert("RGBA")
    background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    background.alpha_composite(rgba)
    if rgba is not image:
        rgba.close()
    flattened = background.convert("RGB")
    background.close()
    return flattened


def _encode(image: Image.Image, pil_format: str, **params) -> bytes:
    buffer = BytesIO()
    try:
        image.save(buffer, format=pil_format, **params)
    except (OSError, ValueError) as exc:
        raise EncodeFailure(f"{pil_format} encoding failed: {exc}") from exc
    return buffer.getvalue()


def export_png(canvas: Image.Image) -> bytes:
    _ensure_encoder("PNG")
    return _encode(canvas, "PNG", optimize=True)


def export_jpeg(canvas: Image.Image, quality: float = DEFAULT_JPEG_QUALITY) -> bytes:
    """Encode as JPEG; ``quality`` is a factor in (0, 1]."""
    if not 0 < quality <= 1:
        raise ValueError(f"JPEG quality must be in (0, 1], got: {quality}")
    _ensure_encoder("JPEG")

    if _has_alpha(canvas):
        rgb = flatten_on_white(canvas)
    elif canvas.mode != "RGB":
        rgb = canvas.convert("RGB")
    else:
        rgb = canvas
    try:
        pil_quality = max(1, min(100, int(round(quality * 100))))
        return _encode(rgb, "JPEG", quality=pil_quality, optimize=True, progressive=True)
    finally:
        if rgb is not canvas:
            rgb.close()


def export_image(canvas: Image.Image, fmt: str, quality: float | None = None) -> bytes:
    _, pil_format = resolve_output_format(fmt)
    if pil_format == "JPEG":
        return export_jpeg(canvas, DEFAULT_JPEG_QUALITY if quality is None else quality)
    return export_png(canvas)
