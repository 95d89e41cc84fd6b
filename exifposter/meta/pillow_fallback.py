from __future__ import annotations

import logging
from io import BytesIO
from typing import Any

from PIL import ExifTags, Image, UnidentifiedImageError

LOGGER = logging.getLogger(__name__)


def _collect(target: dict[str, Any], tags: dict[int, Any]) -> None:
    for tag_id, value in tags.items():
        tag = ExifTags.TAGS.get(tag_id, str(tag_id))
        if isinstance(value, bytes) and tag not in {"LensModel", "Make", "Model"}:
            continue
        target.setdefault(tag, value)


def extract_pillow_metadata(data: bytes, source_name: str | None = None) -> dict[str, Any]:
    """Read EXIF tags (IFD0 and the Exif sub-IFD) from encoded image bytes.

    Never raises: unreadable input yields only the ``SourceFile`` entry.
    """
    metadata: dict[str, Any] = {}
    if source_name:
        metadata["SourceFile"] = source_name
    if not data:
        return metadata
    try:
        with Image.open(BytesIO(data)) as image:
            exif = image.getexif()
            if not exif:
                return metadata
            _collect(metadata, dict(exif.items()))
            _collect(metadata, dict(exif.get_ifd(ExifTags.IFD.Exif).items()))
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        LOGGER.debug("Pillow metadata read failed for %s: %s", source_name or "<bytes>", exc)
    return metadata
