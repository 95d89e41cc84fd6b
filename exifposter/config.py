from __future__ import annotations

import copy
import os
import platform
from pathlib import Path
from typing import Any

import yaml

from exifposter.constants import DEFAULT_JPEG_QUALITY, DEFAULT_NAME_SUFFIX, DEFAULT_TEMPLATE_ID
from exifposter.render.typography import FontSet

DEFAULT_CONFIG: dict[str, Any] = {
    "template": DEFAULT_TEMPLATE_ID,
    "output_format": "jpeg",
    "quality": DEFAULT_JPEG_QUALITY,
    "font_path": None,
    "bold_font_path": None,
    "name_suffix": DEFAULT_NAME_SUFFIX,
    "log_level": "info",
}


def get_user_data_dir() -> Path:
    """返回用户可写的配置目录（按平台区分）。"""
    system_name = platform.system().lower()
    if system_name == "windows":
        base = (
            os.environ.get("APPDATA")
            or os.environ.get("LOCALAPPDATA")
            or str(Path.home() / "AppData" / "Roaming")
        )
        return Path(base) / "ExifPoster"
    if system_name == "darwin":
        return Path.home() / "Library" / "Application Support" / "ExifPoster"

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "ExifPoster"
    return Path.home() / ".config" / "ExifPoster"


def get_config_path() -> Path:
    override = os.environ.get("EXIFPOSTER_CONFIG")
    if override:
        return Path(override)
    return get_user_data_dir() / "Config" / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    text = cfg_path.read_text(encoding="utf-8")
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        loaded = {}
    return _deep_merge(DEFAULT_CONFIG, loaded)


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg_path.write_text(yaml.safe_dump(cfg, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return cfg_path


def fonts_from_config(cfg: dict[str, Any]) -> FontSet:
    regular = cfg.get("font_path")
    bold = cfg.get("bold_font_path")
    return FontSet(
        regular=Path(regular).expanduser() if regular else None,
        bold=Path(bold).expanduser() if bold else None,
    )
