from pathlib import Path

from exifposter.config import (
    DEFAULT_CONFIG,
    fonts_from_config,
    get_config_path,
    load_config,
    write_default_config,
)


def test_config_path_env_override(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "custom.yaml"
    monkeypatch.setenv("EXIFPOSTER_CONFIG", str(target))
    assert get_config_path() == target


def test_missing_config_returns_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path / "absent.yaml") == DEFAULT_CONFIG


def test_write_and_merge_config(tmp_path: Path) -> None:
    path = write_default_config(tmp_path / "cfg" / "config.yaml")
    assert path.exists()
    assert load_config(path) == DEFAULT_CONFIG

    path.write_text("template: blur-background\nquality: 0.75\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg["template"] == "blur-background"
    assert cfg["quality"] == 0.75
    assert cfg["output_format"] == DEFAULT_CONFIG["output_format"]

    # existing file is kept unless forced
    write_default_config(path)
    assert load_config(path)["template"] == "blur-background"
    write_default_config(path, force=True)
    assert load_config(path)["template"] == DEFAULT_CONFIG["template"]


def test_non_mapping_yaml_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_config(path) == DEFAULT_CONFIG


def test_fonts_from_config(tmp_path: Path) -> None:
    fonts = fonts_from_config({"font_path": str(tmp_path / "a.ttf"), "bold_font_path": None})
    assert fonts.regular == tmp_path / "a.ttf"
    assert fonts.bold is None
