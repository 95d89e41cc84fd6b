from __future__ import annotations

import logging
import time

from PIL import Image

from exifposter.decoders.image_decoder import decode_image
from exifposter.errors import PosterError, RenderFailure
from exifposter.exporter import export_image, resolve_output_format
from exifposter.meta.normalize import normalize_metadata
from exifposter.meta.pillow_fallback import extract_pillow_metadata
from exifposter.models import MetadataSnapshot, TemplateInfo
from exifposter.render.orientation import normalize_orientation
from exifposter.render.typography import FontSet
from exifposter.templates.base import PosterTemplate
from exifposter.templates.registry import TemplateRegistry, build_default_registry

LOGGER = logging.getLogger(__name__)


def read_metadata(data: bytes, filename: str | None = None) -> MetadataSnapshot:
    return normalize_metadata(extract_pillow_metadata(data, filename), original_filename=filename)


def _close_all(*images: Image.Image | None) -> None:
    seen: set[int] = set()
    for image in images:
        if image is None or id(image) in seen:
            continue
        seen.add(id(image))
        image.close()


class RenderEngine:
    def __init__(self, registry: TemplateRegistry | None = None, fonts: FontSet | None = None) -> None:
        self.registry = registry or build_default_registry(fonts)

    def resolve(self, template_id: str | None) -> PosterTemplate:
        return self.registry.resolve(template_id)

    def list_templates(self) -> list[TemplateInfo]:
        return self.registry.list()

    def render(self, template_id: str | None, photo: Image.Image, metadata: MetadataSnapshot) -> Image.Image:
        template = self.resolve(template_id)
        LOGGER.info("rendering with template [%s], photo %dx%d", template.name, photo.width, photo.height)
        started = time.perf_counter()
        poster = template.render(photo, metadata)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        LOGGER.info("poster rendered in %.0fms, output %dx%d", elapsed_ms, poster.width, poster.height)
        return poster

    def render_bytes(
        self,
        data: bytes,
        metadata: MetadataSnapshot | None = None,
        template_id: str | None = None,
        fmt: str = "png",
        quality: float | None = None,
        *,
        filename: str | None = None,
    ) -> bytes:
        """Decode, orient, render and encode one photo.

        Failures surface as DecodeFailure, RenderFailure, EncodeFailure or
        EncoderUnavailable.
        """
        resolve_output_format(fmt)
        if metadata is None:
            metadata = read_metadata(data, filename)

        decoded = decode_image(data, name=filename)
        upright: Image.Image | None = None
        poster: Image.Image | None = None
        try:
            upright = normalize_orientation(decoded, metadata.orientation)
            try:
                poster = self.render(template_id, upright, metadata)
            except PosterError:
                raise
            except Exception as exc:
                raise RenderFailure(f"template {template_id!r} failed: {exc}") from exc
            return export_image(poster, fmt, quality)
        finally:
            _close_all(decoded, upright, poster)
