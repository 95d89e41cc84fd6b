from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image, ImageDraw

from exifposter.constants import BLUR_BACKGROUND_TEMPLATE_ID
from exifposter.meta.normalize import format_camera_model, format_params_line, lens_line
from exifposter.models import MetadataSnapshot
from exifposter.render.compositing import (
    BLACK,
    center_crop_to_ratio,
    draw_vertical_gradient,
    gaussian_blur,
    overlay_color,
    round_mask,
    sample_luma,
    text_colors_for_luma,
)
from exifposter.render.typography import (
    FontLike,
    FontSet,
    draw_tracked_text,
    line_height,
    load_font,
    tracked_text_width,
)
from exifposter.templates.base import scaled

LOGGER = logging.getLogger(__name__)

BORDER_RATIO = 0.08
CORNER_RADIUS_RATIO = 0.03
WATERMARK_HEIGHT_RATIO = 0.18
FONT_BRAND_RATIO = 0.045
FONT_LENS_RATIO = 0.02
FONT_PARAMS_RATIO = 0.028
LINE_SPACING_RATIO = 0.015
SHADOW_EXPAND_RATIO = 0.012
SHADOW_BLUR_RATIO = 0.015
SHADOW_OFFSET_RATIO = 0.006

# backdrop is blurred at a quarter of the canvas resolution
BG_SCALE_FACTOR = 0.25
BG_MIN_PROCESS_SIZE = 100
BLUR_RADIUS_RATIO = 0.05
BLUR_RADIUS_MIN = 10.0
BLUR_RADIUS_MAX = 60.0
BG_WASH_ALPHA = 50

GRADIENT_BOTTOM_ALPHA = 100
SHADOW_ALPHA = 140
SHADOW_BLUR_MAX = 50

LETTER_SPACING = 0.12
TEXT_SHADOW_OFFSET = 2
PARAMS_SEPARATOR = "   "


@dataclass(slots=True)
class BlurLayout:
    base_size: int
    border: int
    corner_radius: int
    watermark_height: int
    line_spacing: int
    shadow_expand: int
    shadow_blur: int
    shadow_offset: int
    font_brand: int
    font_lens: int
    font_params: int

    def canvas_size(self, photo_width: int, photo_height: int) -> tuple[int, int]:
        return (
            photo_width + self.border * 2,
            photo_height + self.border * 2 + self.watermark_height,
        )


def compute_layout(photo_width: int, photo_height: int) -> BlurLayout:
    base_size = max(1, min(photo_width, photo_height))
    return BlurLayout(
        base_size=base_size,
        border=scaled(base_size, BORDER_RATIO, 8),
        corner_radius=scaled(base_size, CORNER_RADIUS_RATIO, 2),
        watermark_height=scaled(base_size, WATERMARK_HEIGHT_RATIO, 120),
        line_spacing=scaled(base_size, LINE_SPACING_RATIO, 4),
        shadow_expand=scaled(base_size, SHADOW_EXPAND_RATIO, 2),
        shadow_blur=min(SHADOW_BLUR_MAX, scaled(base_size, SHADOW_BLUR_RATIO, 8)),
        shadow_offset=scaled(base_size, SHADOW_OFFSET_RATIO, 1),
        font_brand=scaled(base_size, FONT_BRAND_RATIO, 28),
        font_lens=scaled(base_size, FONT_LENS_RATIO, 18),
        font_params=scaled(base_size, FONT_PARAMS_RATIO, 22),
    )


def backdrop_blur_radius(short_side: int) -> float:
    return max(BLUR_RADIUS_MIN, min(short_side * BLUR_RADIUS_RATIO, BLUR_RADIUS_MAX))


def blurred_backdrop(photo: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Photo cropped to the canvas ratio, blurred at low resolution and darkened (RGBA)."""
    target_width, target_height = size
    process_size = (
        max(BG_MIN_PROCESS_SIZE, int(target_width * BG_SCALE_FACTOR)),
        max(BG_MIN_PROCESS_SIZE, int(target_height * BG_SCALE_FACTOR)),
    )
    cropped = center_crop_to_ratio(photo, target_width / float(target_height))
    small = cropped.convert("RGB").resize(process_size, resample=Image.Resampling.BILINEAR)
    if cropped is not photo:
        cropped.close()

    blurred = gaussian_blur(small, backdrop_blur_radius(min(process_size)))
    small.close()
    backdrop = blurred.resize((target_width, target_height), resample=Image.Resampling.BILINEAR).convert("RGBA")
    blurred.close()
    overlay_color(backdrop, BLACK, BG_WASH_ALPHA)
    return backdrop


def soft_drop_shadow(photo_size: tuple[int, int], corner_radius: int, expand: int, blur_radius: int) -> Image.Image:
    width, height = photo_size
    block = Image.new("RGBA", (width, height), (*BLACK, SHADOW_ALPHA))
    silhouette = round_mask(block, corner_radius)
    block.close()
    layer = Image.new("RGBA", (width + expand * 2, height + expand * 2), (0, 0, 0, 0))
    layer.paste(silhouette, (expand, expand))
    silhouette.close()
    shadow = gaussian_blur(layer, blur_radius)
    layer.close()
    return shadow


def _draw_text_line(
    draw: ImageDraw.ImageDraw,
    text: str,
    *,
    canvas_width: int,
    top: int,
    font: FontLike,
    fill: tuple[int, int, int, int],
    shadow: tuple[int, int, int, int],
) -> int:
    x = (canvas_width - tracked_text_width(font, text, LETTER_SPACING)) / 2.0
    draw_tracked_text(
        draw,
        text,
        x=x + TEXT_SHADOW_OFFSET,
        top=top + TEXT_SHADOW_OFFSET,
        font=font,
        fill=shadow,
        tracking=LETTER_SPACING,
    )
    draw_tracked_text(draw, text, x=x, top=top, font=font, fill=fill, tracking=LETTER_SPACING)
    return top + line_height(font)


class BlurBackgroundTemplate:
    """Rounded photo floating on a blurred, darkened copy of itself, text in the bottom band."""

    template_id = BLUR_BACKGROUND_TEMPLATE_ID
    name = "Frosted Glass"
    description = "Blurred photo backdrop with a soft shadow and adaptive text color"

    def __init__(self, fonts: FontSet | None = None) -> None:
        self.fonts = fonts or FontSet()

    def render(self, photo: Image.Image, metadata: MetadataSnapshot) -> Image.Image:
        photo_width, photo_height = photo.size
        layout = compute_layout(photo_width, photo_height)
        canvas_width, canvas_height = layout.canvas_size(photo_width, photo_height)
        photo_x = photo_y = layout.border
        photo_bottom = photo_y + photo_height

        canvas = blurred_backdrop(photo, (canvas_width, canvas_height))
        draw_vertical_gradient(
            canvas,
            top=photo_bottom - layout.border,
            color=BLACK,
            top_alpha=0,
            bottom_alpha=GRADIENT_BOTTOM_ALPHA,
        )

        shadow = soft_drop_shadow(photo.size, layout.corner_radius, layout.shadow_expand, layout.shadow_blur)
        canvas.alpha_composite(
            shadow,
            (photo_x - layout.shadow_expand, photo_y - layout.shadow_expand + layout.shadow_offset),
        )
        shadow.close()

        rounded = round_mask(photo, layout.corner_radius)
        canvas.alpha_composite(rounded, (photo_x, photo_y))
        rounded.close()

        luma = sample_luma(canvas, canvas_height - layout.watermark_height, layout.watermark_height)
        text_fill, shadow_fill = text_colors_for_luma(luma)
        LOGGER.debug("watermark band luma=%.3f", luma)

        text_layer = Image.new("RGBA", (canvas_width, canvas_height - photo_bottom), (0, 0, 0, 0))
        self._draw_text(
            ImageDraw.Draw(text_layer),
            metadata,
            layout,
            canvas_width=canvas_width,
            fill=text_fill,
            shadow=shadow_fill,
        )
        canvas.alpha_composite(text_layer, (0, photo_bottom))
        text_layer.close()

        output = canvas.convert("RGB")
        canvas.close()
        return output

    def _draw_text(
        self,
        draw: ImageDraw.ImageDraw,
        metadata: MetadataSnapshot,
        layout: BlurLayout,
        *,
        canvas_width: int,
        fill: tuple[int, int, int, int],
        shadow: tuple[int, int, int, int],
    ) -> None:
        # y is relative to the photo's bottom edge
        y = layout.border // 2 + layout.line_spacing

        brand_font = load_font(self.fonts.bold, layout.font_brand, bold=True)
        y = _draw_text_line(
            draw,
            format_camera_model(metadata),
            canvas_width=canvas_width,
            top=y,
            font=brand_font,
            fill=fill,
            shadow=shadow,
        )
        y += layout.line_spacing

        lens_text = lens_line(metadata)
        if lens_text is not None:
            lens_font = load_font(self.fonts.regular, layout.font_lens)
            y = _draw_text_line(
                draw,
                lens_text,
                canvas_width=canvas_width,
                top=y,
                font=lens_font,
                fill=fill,
                shadow=shadow,
            )
            y += layout.line_spacing * 2

        params_font = load_font(self.fonts.regular, layout.font_params)
        _draw_text_line(
            draw,
            self.params_text(metadata),
            canvas_width=canvas_width,
            top=y,
            font=params_font,
            fill=fill,
            shadow=shadow,
        )

    @staticmethod
    def params_text(metadata: MetadataSnapshot) -> str:
        return format_params_line(metadata, separator=PARAMS_SEPARATOR)
