from __future__ import annotations

import re

from exifposter.constants import DEFAULT_NAME_SUFFIX, UNKNOWN

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')
_EXTENSION = re.compile(r"\.[^.]+$")


def sanitize_token(value: str | None, fallback: str = "") -> str:
    text = (value or "").strip()
    if not text:
        return fallback
    text = INVALID_FILENAME_CHARS.sub("_", text)
    text = re.sub(r"\s+", "_", text)
    text = text.strip(" ._")
    return text or fallback


def base_name(original_name: str | None) -> str:
    """File name without directories and without its last extension."""
    if not original_name or original_name == UNKNOWN:
        return ""
    name = re.split(r"[/\\]", original_name.strip())[-1]
    return sanitize_token(_EXTENSION.sub("", name))


def build_output_name(
    original_name: str | None,
    index: int,
    extension: str,
    suffix: str = DEFAULT_NAME_SUFFIX,
) -> str:
    """``<base>_poster.<ext>``; the base falls back to ``poster_<index>`` (1-based)."""
    ext = extension.lower().lstrip(".")
    base = base_name(original_name) or f"poster_{index}"
    return f"{base}{suffix}.{ext}"


def dedupe_name(name: str, used: dict[str, int]) -> str:
    """Append ``_2``, ``_3``… to a name that was already handed out."""
    count = used.get(name, 0)
    used[name] = count + 1
    if count == 0:
        return name
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    candidate = f"{stem}_{count + 1}.{ext}" if ext else f"{stem}_{count + 1}"
    return dedupe_name(candidate, used)
