from __future__ import annotations

from dataclasses import dataclass

from PIL import Image, ImageDraw

from exifposter.constants import CLASSIC_TEMPLATE_ID
from exifposter.meta.normalize import format_camera_model, format_params_line, lens_line
from exifposter.models import MetadataSnapshot
from exifposter.render.compositing import round_mask
from exifposter.render.typography import FontSet, draw_centered_text, line_height, load_font
from exifposter.templates.base import scaled

BACKGROUND = (255, 255, 255)
TEXT_PRIMARY = (26, 26, 26)
TEXT_SECONDARY = (136, 136, 136)
SEPARATOR = (220, 220, 220)

PADDING_RATIO = 0.05
PHOTO_TEXT_GAP_RATIO = 0.025
MODEL_GAP_RATIO = 0.01
SEPARATOR_GAP_RATIO = 0.018
SEPARATOR_WIDTH_RATIO = 0.4
CORNER_RADIUS_RATIO = 0.004
FONT_CAMERA_RATIO = 0.035
FONT_LENS_RATIO = 0.02
FONT_PARAMS_RATIO = 0.025

SEPARATOR_THICKNESS = 1


@dataclass(slots=True)
class ClassicLayout:
    base_size: int
    padding: int
    photo_text_gap: int
    model_gap: int
    separator_gap: int
    corner_radius: int
    font_camera: int
    font_lens: int
    font_params: int


def compute_layout(photo_width: int, photo_height: int) -> ClassicLayout:
    base_size = max(1, min(photo_width, photo_height))
    return ClassicLayout(
        base_size=base_size,
        padding=scaled(base_size, PADDING_RATIO, 8),
        photo_text_gap=scaled(base_size, PHOTO_TEXT_GAP_RATIO, 4),
        model_gap=scaled(base_size, MODEL_GAP_RATIO, 2),
        separator_gap=scaled(base_size, SEPARATOR_GAP_RATIO, 4),
        corner_radius=scaled(base_size, CORNER_RADIUS_RATIO),
        font_camera=scaled(base_size, FONT_CAMERA_RATIO, 28),
        font_lens=scaled(base_size, FONT_LENS_RATIO, 18),
        font_params=scaled(base_size, FONT_PARAMS_RATIO, 22),
    )


class ClassicTemplate:
    """White card: photo on top, camera / lens / separator / parameters centered below."""

    template_id = CLASSIC_TEMPLATE_ID
    name = "Classic White"
    description = "Clean white card with centered camera and exposure details"

    def __init__(self, fonts: FontSet | None = None) -> None:
        self.fonts = fonts or FontSet()

    def text_block_height(self, layout: ClassicLayout, has_lens: bool) -> int:
        camera_font = load_font(self.fonts.bold, layout.font_camera, bold=True)
        lens_font = load_font(self.fonts.regular, layout.font_lens)
        params_font = load_font(self.fonts.regular, layout.font_params)
        height = layout.photo_text_gap + line_height(camera_font) + layout.model_gap
        if has_lens:
            height += line_height(lens_font)
        height += layout.separator_gap + SEPARATOR_THICKNESS + layout.separator_gap
        height += line_height(params_font)
        return height

    def canvas_size(self, photo_size: tuple[int, int], metadata: MetadataSnapshot) -> tuple[int, int]:
        width, height = photo_size
        layout = compute_layout(width, height)
        text_height = self.text_block_height(layout, has_lens=lens_line(metadata) is not None)
        return width + layout.padding * 2, layout.padding + height + text_height + layout.padding

    def render(self, photo: Image.Image, metadata: MetadataSnapshot) -> Image.Image:
        photo_width, photo_height = photo.size
        layout = compute_layout(photo_width, photo_height)
        camera_font = load_font(self.fonts.bold, layout.font_camera, bold=True)
        lens_font = load_font(self.fonts.regular, layout.font_lens)
        params_font = load_font(self.fonts.regular, layout.font_params)

        lens_text = lens_line(metadata)
        canvas_width, canvas_height = self.canvas_size(photo.size, metadata)
        canvas = Image.new("RGB", (canvas_width, canvas_height), color=BACKGROUND)

        if layout.corner_radius > 0:
            rounded = round_mask(photo, layout.corner_radius)
            canvas.paste(rounded, (layout.padding, layout.padding), rounded)
            rounded.close()
        else:
            canvas.paste(photo.convert("RGB") if photo.mode != "RGB" else photo, (layout.padding, layout.padding))

        draw = ImageDraw.Draw(canvas)
        current_y = layout.padding + photo_height + layout.photo_text_gap

        draw_centered_text(
            draw,
            format_camera_model(metadata),
            canvas_width=canvas_width,
            top=current_y,
            font=camera_font,
            fill=TEXT_PRIMARY,
        )
        current_y += line_height(camera_font) + layout.model_gap

        if lens_text is not None:
            draw_centered_text(
                draw,
                lens_text,
                canvas_width=canvas_width,
                top=current_y,
                font=lens_font,
                fill=TEXT_SECONDARY,
            )
            current_y += line_height(lens_font)

        current_y += layout.separator_gap
        separator_width = int(canvas_width * SEPARATOR_WIDTH_RATIO)
        separator_x = (canvas_width - separator_width) // 2
        if separator_width > 0:
            draw.rectangle(
                (separator_x, current_y, separator_x + separator_width - 1, current_y + SEPARATOR_THICKNESS - 1),
                fill=SEPARATOR,
            )
        current_y += SEPARATOR_THICKNESS + layout.separator_gap

        draw_centered_text(
            draw,
            self.params_text(metadata),
            canvas_width=canvas_width,
            top=current_y,
            font=params_font,
            fill=TEXT_PRIMARY,
        )
        return canvas

    @staticmethod
    def params_text(metadata: MetadataSnapshot) -> str:
        return format_params_line(metadata, separator="  ")
