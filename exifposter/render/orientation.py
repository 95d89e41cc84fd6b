from __future__ import annotations

import logging
from typing import Any

from PIL import Image

LOGGER = logging.getLogger(__name__)

# EXIF orientation -> transpose that brings the pixels upright.
# 90° rotations and mirrors are exact pixel permutations, no resampling involved.
_TRANSPOSES: dict[int, Image.Transpose] = {
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}

_INVERSE = {1: 1, 2: 2, 3: 3, 4: 4, 5: 5, 6: 8, 7: 7, 8: 6}

SWAPS_DIMENSIONS = frozenset({5, 6, 7, 8})


def resolve_orientation(code: Any) -> int:
    try:
        value = int(code)
    except (TypeError, ValueError):
        return 1
    return value if value in _INVERSE else 1


def inverse_orientation(code: Any) -> int:
    return _INVERSE[resolve_orientation(code)]


def normalize_orientation(image: Image.Image, code: Any) -> Image.Image:
    """Return ``image`` turned upright according to an EXIF orientation code.

    Code 1 and unknown codes hand back the very same object. Every other code
    returns a new image and the caller takes over the input, which must not be
    reused afterwards.
    """
    resolved = resolve_orientation(code)
    if resolved == 1:
        return image
    rotated = image.transpose(_TRANSPOSES[resolved])
    LOGGER.debug(
        "orientation %s applied: %sx%s -> %sx%s",
        resolved,
        image.width,
        image.height,
        rotated.width,
        rotated.height,
    )
    return rotated
