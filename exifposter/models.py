from __future__ import annotations

import zipfile
from dataclasses import dataclass, field, fields
from io import BytesIO
from typing import Any, Iterator

from exifposter.constants import UNKNOWN

VALID_ORIENTATIONS = range(1, 9)


def is_known(value: str | None) -> bool:
    return bool(value) and value.strip() != "" and value != UNKNOWN


def _coerce_orientation(value: Any) -> int:
    try:
        code = int(value)
    except (TypeError, ValueError):
        return 1
    return code if code in VALID_ORIENTATIONS else 1


@dataclass(frozen=True, slots=True)
class MetadataSnapshot:
    """Shooting metadata for one photo.

    String fields hold display strings (``"1/250 sec"``, ``"f/2.8"``,
    ``"50 mm"``). Absent values are the ``"unknown"`` sentinel, never None.
    """

    camera_make: str = UNKNOWN
    camera_model: str = UNKNOWN
    lens_model: str = UNKNOWN
    shutter_speed: str = UNKNOWN
    aperture: str = UNKNOWN
    iso: str = UNKNOWN
    focal_length: str = UNKNOWN
    exposure_bias: str = UNKNOWN
    metering_mode: str = UNKNOWN
    white_balance: str = UNKNOWN
    flash: str = UNKNOWN
    date_time: str = UNKNOWN
    original_filename: str = UNKNOWN
    orientation: int = 1

    def __post_init__(self) -> None:
        for item in fields(self):
            if item.name == "orientation":
                continue
            value = getattr(self, item.name)
            text = "" if value is None else str(value).strip()
            object.__setattr__(self, item.name, text or UNKNOWN)
        object.__setattr__(self, "orientation", _coerce_orientation(self.orientation))

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True, slots=True)
class TemplateInfo:
    id: str
    name: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "description": self.description}


@dataclass(slots=True)
class RenderJob:
    data: bytes
    metadata: MetadataSnapshot | None = None
    filename: str | None = None


@dataclass(slots=True)
class BatchResult:
    archive: bytes
    names: list[str] = field(default_factory=list)
    total: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.names)

    def entries(self) -> Iterator[tuple[str, bytes]]:
        with zipfile.ZipFile(BytesIO(self.archive)) as archive:
            for name in self.names:
                yield name, archive.read(name)
