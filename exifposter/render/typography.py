from __future__ import annotations

import platform
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from PIL import ImageDraw, ImageFont

FontLike = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True, slots=True)
class FontSet:
    """Explicit font files; None means system candidates then Pillow's default."""

    regular: Path | None = None
    bold: Path | None = None


def _system_font_candidates(bold: bool = False) -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        if bold:
            return [
                Path(r"C:\Windows\Fonts\arialbd.ttf"),
                Path(r"C:\Windows\Fonts\segoeuib.ttf"),
                Path(r"C:\Windows\Fonts\msyhbd.ttc"),
            ]
        return [
            Path(r"C:\Windows\Fonts\arial.ttf"),
            Path(r"C:\Windows\Fonts\segoeui.ttf"),
            Path(r"C:\Windows\Fonts\msyh.ttc"),
        ]
    if "darwin" in system:
        if bold:
            return [
                Path("/System/Library/Fonts/Supplemental/Arial Bold.ttf"),
                Path("/Library/Fonts/Arial Bold.ttf"),
            ]
        return [
            Path("/System/Library/Fonts/Supplemental/Arial.ttf"),
            Path("/Library/Fonts/Arial.ttf"),
            Path("/System/Library/Fonts/Helvetica.ttc"),
        ]
    if bold:
        return [
            Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
            Path("/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"),
            Path("/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf"),
        ]
    return [
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf"),
    ]


@lru_cache(maxsize=64)
def load_font(font_path: Path | None, size: int, bold: bool = False) -> FontLike:
    candidates: list[Path] = []
    if font_path:
        candidates.append(font_path)
    candidates.extend(_system_font_candidates(bold=bold))
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


def font_size_of(font: FontLike) -> int:
    return int(getattr(font, "size", 10))


def line_height(font: FontLike) -> int:
    """Ascent + descent, the height one text line occupies in a layout."""
    getmetrics = getattr(font, "getmetrics", None)
    if getmetrics is not None:
        ascent, descent = getmetrics()
        return max(1, ascent + descent)
    left, top, right, bottom = font.getbbox("Ag")
    return max(1, bottom)


def text_width(font: FontLike, text: str) -> int:
    return int(round(font.getlength(text)))


def tracked_text_width(font: FontLike, text: str, tracking: float) -> int:
    if not text:
        return 0
    spacing = font_size_of(font) * tracking
    advance = sum(font.getlength(ch) for ch in text)
    return int(round(advance + spacing * (len(text) - 1)))


def draw_centered_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    *,
    canvas_width: int,
    top: int,
    font: FontLike,
    fill,
) -> None:
    x = (canvas_width - text_width(font, text)) // 2
    draw.text((x, top), text, font=font, fill=fill)


def draw_tracked_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    *,
    x: float,
    top: int,
    font: FontLike,
    fill,
    tracking: float,
) -> None:
    spacing = font_size_of(font) * tracking
    cursor = float(x)
    for ch in text:
        draw.text((round(cursor), top), ch, font=font, fill=fill)
        cursor += font.getlength(ch) + spacing
