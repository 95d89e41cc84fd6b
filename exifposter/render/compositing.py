# Shared pixel helpers for the poster templates (PIL only).
from __future__ import annotations

from PIL import Image, ImageChops, ImageDraw, ImageFilter

from exifposter.constants import TEXT_LUMA_THRESHOLD

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def clamp_radius(width: int, height: int, radius: int) -> int:
    return max(0, min(int(radius), min(width, height) // 2))


def rounded_rect_mask(size: tuple[int, int], radius: int) -> Image.Image:
    width, height = size
    mask = Image.new("L", (width, height), 0)
    radius = clamp_radius(width, height, radius)
    draw = ImageDraw.Draw(mask)
    if radius <= 0:
        draw.rectangle((0, 0, width - 1, height - 1), fill=255)
    else:
        draw.rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=255)
    return mask


def round_mask(image: Image.Image, radius: int) -> Image.Image:
    """Keep only the part of ``image`` covered by a rounded rectangle.

    The result is a new RGBA image; outside the shape alpha is 0, inside it is
    the source alpha (source-in compositing).
    """
    output = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
    if radius <= 0:
        return output
    shape = rounded_rect_mask(output.size, radius)
    output.putalpha(ImageChops.multiply(output.getchannel("A"), shape))
    return output


def gaussian_blur(image: Image.Image, radius: float) -> Image.Image:
    # radius is the kernel extent; a Gaussian kernel reaches ~3 sigma
    sigma = max(0.1, float(radius) / 3.0)
    return image.filter(ImageFilter.GaussianBlur(sigma))


def center_crop_to_ratio(image: Image.Image, target_ratio: float) -> Image.Image:
    width, height = image.size
    if height == 0 or target_ratio <= 0:
        return image
    ratio = width / float(height)
    if abs(ratio - target_ratio) < 0.0001:
        return image
    if ratio > target_ratio:
        new_width = max(1, int(height * target_ratio))
        left = (width - new_width) // 2
        box = (left, 0, left + new_width, height)
    else:
        new_height = max(1, int(width / target_ratio))
        top = (height - new_height) // 2
        box = (0, top, width, top + new_height)
    return image.crop(box)


def overlay_color(image: Image.Image, color: tuple[int, int, int], alpha: int) -> None:
    """Alpha-composite a uniform wash over an RGBA image in place."""
    wash = Image.new("RGBA", image.size, color=(*color, alpha))
    image.alpha_composite(wash)


def draw_vertical_gradient(
    image: Image.Image,
    *,
    top: int,
    color: tuple[int, int, int],
    top_alpha: int,
    bottom_alpha: int,
) -> None:
    """Paint a vertical alpha ramp from row ``top`` down to the bottom of an RGBA image."""
    width, canvas_height = image.size
    top = max(0, min(canvas_height, top))
    height = canvas_height - top
    if width <= 0 or height <= 0:
        return
    denominator = max(1, height - 1)
    pixels: list[tuple[int, int, int, int]] = []
    for row in range(height):
        t = row / float(denominator)
        alpha = int(round(top_alpha + (bottom_alpha - top_alpha) * t))
        pixels.append((*color, alpha))
    gradient = Image.new("RGBA", (1, height))
    gradient.putdata(pixels)
    if width > 1:
        gradient = gradient.resize((width, height), resample=Image.Resampling.BILINEAR)
    overlay = Image.new("RGBA", image.size, color=(0, 0, 0, 0))
    overlay.paste(gradient, (0, top))
    image.alpha_composite(overlay)


def sample_luma(image: Image.Image, top: int, height: int) -> float:
    """Mean luma in [0, 1] over a sparse grid of the rows ``top .. top + height``.

    Returns 0.5 when the region is empty.
    """
    width = image.width
    rows = min(height, image.height - top)
    if rows <= 0 or width <= 0:
        return 0.5
    rgb = image if image.mode in ("RGB", "RGBA") else image.convert("RGB")
    step = max(width // 20, 10)
    total = 0
    count = 0
    for y in range(max(0, top), top + rows, step):
        for x in range(0, width, step):
            r, g, b = rgb.getpixel((x, y))[:3]
            total += int(0.299 * r + 0.587 * g + 0.114 * b)
            count += 1
    if count == 0:
        return 0.5
    return (total / float(count)) / 255.0


def text_colors_for_luma(
    luma: float,
) -> tuple[tuple[int, int, int, int], tuple[int, int, int, int]]:
    """(text, shadow) colors for text drawn over a region of the given mean luma."""
    if luma < TEXT_LUMA_THRESHOLD:
        return (*WHITE, 255), (*BLACK, 120)
    return (*BLACK, 255), (*WHITE, 100)
