from __future__ import annotations

from typing import Protocol, runtime_checkable

from PIL import Image

from exifposter.models import MetadataSnapshot, TemplateInfo


@runtime_checkable
class PosterTemplate(Protocol):
    """A poster layout: pure function of (upright photo, metadata) -> RGB canvas."""

    template_id: str
    name: str
    description: str

    def render(self, photo: Image.Image, metadata: MetadataSnapshot) -> Image.Image: ...


def template_info(template: PosterTemplate) -> TemplateInfo:
    return TemplateInfo(id=template.template_id, name=template.name, description=template.description)


def scaled(base_size: int, ratio: float, minimum: int = 0) -> int:
    return max(minimum, int(base_size * ratio))
