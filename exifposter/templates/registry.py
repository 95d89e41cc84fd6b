from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from exifposter.constants import DEFAULT_TEMPLATE_ID
from exifposter.models import TemplateInfo
from exifposter.render.typography import FontSet
from exifposter.templates.base import PosterTemplate, template_info
from exifposter.templates.blur_background import BlurBackgroundTemplate
from exifposter.templates.classic import ClassicTemplate

LOGGER = logging.getLogger(__name__)


class TemplateRegistry:
    """Template id -> template, filled once at startup and read-only after ``freeze()``."""

    def __init__(self, default_id: str = DEFAULT_TEMPLATE_ID) -> None:
        self.default_id = default_id
        self._templates: dict[str, PosterTemplate] = {}
        self._frozen = False

    def register(self, template: PosterTemplate) -> None:
        if self._frozen:
            raise RuntimeError("template registry is frozen; register templates at startup")
        template_id = template.template_id
        if template_id in self._templates:
            raise ValueError(f"duplicate template id: {template_id}")
        self._templates[template_id] = template

    def freeze(self) -> TemplateRegistry:
        if self.default_id not in self._templates:
            raise ValueError(f"default template is not registered: {self.default_id}")
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def templates(self) -> Mapping[str, PosterTemplate]:
        return MappingProxyType(self._templates)

    def resolve(self, template_id: str | None) -> PosterTemplate:
        key = (template_id or "").strip().lower()
        template = self._templates.get(key)
        if template is None:
            LOGGER.warning("template %r not found, falling back to %r", template_id, self.default_id)
            return self._templates[self.default_id]
        return template

    def list(self) -> list[TemplateInfo]:
        return [template_info(template) for template in self._templates.values()]

    def ids(self) -> list[str]:
        return list(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)


def build_registry(
    templates: Iterable[PosterTemplate],
    default_id: str = DEFAULT_TEMPLATE_ID,
) -> TemplateRegistry:
    registry = TemplateRegistry(default_id=default_id)
    for template in templates:
        registry.register(template)
    registry.freeze()
    LOGGER.info("poster templates registered: %d %s", len(registry), registry.ids())
    return registry


def build_default_registry(fonts: FontSet | None = None) -> TemplateRegistry:
    return build_registry([ClassicTemplate(fonts), BlurBackgroundTemplate(fonts)])
