from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any

from exifposter.models import MetadataSnapshot, is_known

_METERING_MODES = {
    0: "Unknown",
    1: "Average",
    2: "Center weighted average",
    3: "Spot",
    4: "Multi-spot",
    5: "Multi-segment",
    6: "Partial",
    255: "Other",
}

_WHITE_BALANCE = {0: "Auto white balance", 1: "Manual white balance"}


def _normalize_lookup(raw: dict[str, Any]) -> dict[str, Any]:
    lookup: dict[str, Any] = {}
    for key, value in raw.items():
        k = str(key).strip().lower()
        if not k:
            continue
        lookup.setdefault(k, value)
        if ":" in k:
            lookup.setdefault(k.split(":")[-1], value)
    return lookup


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    if isinstance(value, (list, tuple)):
        text_items = [str(v).strip() for v in value if str(v).strip()]
        value = " ".join(text_items)
    text = str(value).replace("\x00", " ").strip()
    text = re.sub(r"\s+", " ", text)
    return text or None


def _pick(lookup: dict[str, Any], candidates: list[str]) -> Any | None:
    for key in candidates:
        value = lookup.get(key.lower())
        if value in (None, "", " "):
            continue
        return value
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    # IFDRational and fractions.Fraction
    return getattr(value, "numerator", None) is not None and getattr(value, "denominator", None) is not None


def _to_float(value: Any) -> float | None:
    if value is None:
        return None
    if _is_number(value):
        try:
            number = float(value)
        except (TypeError, ValueError, ZeroDivisionError):
            return None
        return number if math.isfinite(number) else None
    text = _clean_text(value)
    if not text:
        return None
    match = re.search(r"[-+]?\d+(\.\d+)?", text)
    if not match:
        return None
    try:
        number = float(match.group(0))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    numeric = _to_float(value)
    if numeric is None:
        return None
    return int(round(numeric))


def _describe_exposure_time(value: Any) -> str | None:
    if value is None:
        return None
    if not _is_number(value):
        return _clean_text(value)
    seconds = _to_float(value)
    if seconds is None or seconds <= 0:
        return None
    if seconds < 1:
        reciprocal = 1 / seconds
        if not math.isfinite(reciprocal):
            return None
        denominator = round(reciprocal)
        if denominator > 0:
            return f"1/{denominator} sec"
    return f"{seconds:g} sec"


def _describe_fnumber(value: Any) -> str | None:
    if value is None:
        return None
    if not _is_number(value):
        text = _clean_text(value)
        if text and re.fullmatch(r"[-+]?\d+(\.\d+)?", text):
            return f"f/{float(text):g}"
        return text
    number = _to_float(value)
    if number is None or number <= 0:
        return None
    return f"f/{number:g}"


def _describe_focal_length(value: Any) -> str | None:
    if value is None:
        return None
    if not _is_number(value):
        text = _clean_text(value)
        if text and re.fullmatch(r"[-+]?\d+(\.\d+)?", text):
            return f"{float(text):g} mm"
        return text
    number = _to_float(value)
    if number is None or number <= 0:
        return None
    return f"{number:g} mm"


def _describe_iso(value: Any) -> str | None:
    if isinstance(value, (list, tuple)) and value:
        value = value[0]
    number = _to_int(value)
    if number is None or number <= 0:
        return None if _is_number(value) else _clean_text(value)
    return str(number)


def _describe_exposure_bias(value: Any) -> str | None:
    if value is None:
        return None
    if not _is_number(value):
        return _clean_text(value)
    number = _to_float(value)
    if number is None:
        return None
    if number == 0:
        return "0 EV"
    return f"{number:+.2g} EV"


def _describe_enum(value: Any, table: dict[int, str]) -> str | None:
    if value is None:
        return None
    if _is_number(value):
        number = _to_int(value)
        return table.get(number) if number is not None else None
    return _clean_text(value)


def _describe_flash(value: Any) -> str | None:
    if value is None:
        return None
    if not _is_number(value):
        return _clean_text(value)
    number = _to_int(value) or 0
    return "Flash fired" if number & 0x1 else "Flash did not fire"


def _describe_datetime(value: Any) -> str | None:
    text = _clean_text(value)
    if not text:
        return None
    try:
        return datetime.strptime(text[:19], "%Y:%m:%d %H:%M:%S").strftime("%Y:%m:%d %H:%M:%S")
    except ValueError:
        return text


def normalize_metadata(
    raw_metadata: dict[str, Any],
    *,
    original_filename: str | None = None,
) -> MetadataSnapshot:
    """Build a snapshot from a raw tag dictionary (Pillow or exiftool style keys)."""
    lookup = _normalize_lookup(raw_metadata)

    make = _clean_text(_pick(lookup, ["Make"]))
    model = _clean_text(_pick(lookup, ["Model", "CameraModelName"]))
    lens = _clean_text(
        _pick(
            lookup,
            [
                "LensModel",
                "Lens",
                "LensID",
                "LensType",
                "LensSpecification",
                "XMP:Lens",
            ],
        )
    )

    return MetadataSnapshot(
        camera_make=make,
        camera_model=model,
        lens_model=lens,
        shutter_speed=_describe_exposure_time(_pick(lookup, ["ExposureTime", "ShutterSpeed"])),
        aperture=_describe_fnumber(_pick(lookup, ["FNumber", "Aperture"])),
        iso=_describe_iso(_pick(lookup, ["ISOSpeedRatings", "PhotographicSensitivity", "ISO"])),
        focal_length=_describe_focal_length(_pick(lookup, ["FocalLength"])),
        exposure_bias=_describe_exposure_bias(_pick(lookup, ["ExposureBiasValue", "ExposureCompensation"])),
        metering_mode=_describe_enum(_pick(lookup, ["MeteringMode"]), _METERING_MODES),
        white_balance=_describe_enum(_pick(lookup, ["WhiteBalance"]), _WHITE_BALANCE),
        flash=_describe_flash(_pick(lookup, ["Flash"])),
        date_time=_describe_datetime(_pick(lookup, ["DateTimeOriginal", "CreateDate", "DateTime"])),
        original_filename=original_filename or _clean_text(_pick(lookup, ["FileName"])),
        orientation=_to_int(_pick(lookup, ["Orientation"])) or 1,
    )


def format_focal_length(value: str) -> str:
    if not is_known(value):
        return "?mm"
    text = value.replace(" ", "")
    if text.endswith(".0mm"):
        text = text[: -len(".0mm")] + "mm"
    elif text.endswith(".0"):
        text = text[: -len(".0")]
    return text


def format_shutter_speed(value: str) -> str:
    if not is_known(value):
        return "?s"
    return value.strip().replace(" sec", "s").replace("sec", "s")


def format_iso(value: str) -> str:
    if not is_known(value):
        return "?"
    return value.replace("ISO ", "").replace("ISO", "").strip()


def format_aperture(value: str) -> str:
    if not is_known(value):
        return "f/?"
    return value.strip()


def format_camera_model(meta: MetadataSnapshot) -> str:
    if not is_known(meta.camera_model):
        return "Unknown Camera"
    return meta.camera_model


def format_params_line(meta: MetadataSnapshot, separator: str = "  ") -> str:
    """``"50mm  f/2.8  1/250s  ISO 100"`` for the given snapshot."""
    return separator.join(
        [
            format_focal_length(meta.focal_length),
            format_aperture(meta.aperture),
            format_shutter_speed(meta.shutter_speed),
            f"ISO {format_iso(meta.iso)}",
        ]
    )


def lens_line(meta: MetadataSnapshot) -> str | None:
    return meta.lens_model if is_known(meta.lens_model) else None

