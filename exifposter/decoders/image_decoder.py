from __future__ import annotations

from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from exifposter.constants import HEIF_EXTENSIONS
from exifposter.errors import DecodeFailure

_HEIF_REGISTERED = False


def _register_heif_opener() -> bool:
    global _HEIF_REGISTERED
    if _HEIF_REGISTERED:
        return True
    try:
        from pillow_heif import register_heif_opener
    except ImportError:
        return False
    register_heif_opener()
    _HEIF_REGISTERED = True
    return True


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in {"RGBA", "LA", "PA"} or (image.mode == "P" and "transparency" in image.info)


def decode_image(data: bytes, name: str | None = None) -> Image.Image:
    """Decode encoded bytes into an RGB (or RGBA when the source has alpha) image.

    Orientation is left as stored; callers apply the EXIF code themselves.
    """
    if not data:
        raise DecodeFailure(f"empty input: {name or '<bytes>'}")
    heif_ready = _register_heif_opener()
    if name and Path(name).suffix.lower() in HEIF_EXTENSIONS and not heif_ready:
        raise DecodeFailure("pillow-heif is required to decode HEIF/HEIC/HIF")
    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            mode = "RGBA" if _has_alpha(image) else "RGB"
            return image.convert(mode)
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DecodeFailure(f"cannot decode image {name or '<bytes>'}: {exc}") from exc


def decode_file(path: Path) -> Image.Image:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DecodeFailure(f"cannot read {path}: {exc}") from exc
    return decode_image(data, name=path.name)
