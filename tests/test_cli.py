import json
import logging
import zipfile
from pathlib import Path

from PIL import Image
from typer.testing import CliRunner

from exifposter.cli import _output_format, _template_id, app
from exifposter.config import load_config

runner = CliRunner()


def _photo_dir(tmp_path: Path, encode_photo) -> Path:
    photos = tmp_path / "photos"
    photos.mkdir()
    for i, name in enumerate(["a.jpg", "b.jpg"]):
        (photos / name).write_bytes(encode_photo(color=(i * 90, 60, 30)))
    return photos


def test_templates_command_prints_json() -> None:
    result = runner.invoke(app, ["templates"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [item["id"] for item in payload] == ["classic", "blur-background"]


def test_render_command_writes_posters(tmp_path: Path, encode_photo) -> None:
    photos = _photo_dir(tmp_path, encode_photo)
    out = tmp_path / "out"
    result = runner.invoke(app, ["render", str(photos), "--out", str(out), "--format", "png"])
    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in out.iterdir()) == ["a_poster.png", "b_poster.png"]
    with Image.open(out / "a_poster.png") as image:
        assert image.format == "PNG"

    again = runner.invoke(app, ["render", str(photos), "--out", str(out), "--format", "png"])
    assert again.exit_code == 0
    assert "skipped=2" in again.stdout


def test_render_command_reports_failures(tmp_path: Path, encode_photo) -> None:
    photos = _photo_dir(tmp_path, encode_photo)
    (photos / "broken.jpg").write_bytes(b"not a jpeg")
    result = runner.invoke(app, ["render", str(photos), "--out", str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "failed=1" in result.stdout


def test_render_command_rejects_unknown_format(tmp_path: Path, encode_photo) -> None:
    photos = _photo_dir(tmp_path, encode_photo)
    result = runner.invoke(app, ["render", str(photos), "--format", "gif"])
    assert result.exit_code == 1


def test_batch_command_writes_archive(tmp_path: Path, encode_photo) -> None:
    photos = _photo_dir(tmp_path, encode_photo)
    archive = tmp_path / "posters.zip"
    result = runner.invoke(
        app,
        ["batch", str(photos / "b.jpg"), str(photos / "a.jpg"), "--out", str(archive), "--template", "blur-background"],
    )
    assert result.exit_code == 0, result.output
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["b_poster.jpg", "a_poster.jpg"]


def test_batch_command_all_failed(tmp_path: Path) -> None:
    bad = tmp_path / "bad.jpg"
    bad.write_bytes(b"garbage")
    result = runner.invoke(app, ["batch", str(bad), "--out", str(tmp_path / "x.zip")])
    assert result.exit_code == 1
    assert not (tmp_path / "x.zip").exists()


def test_inspect_command(tmp_path: Path, encode_photo) -> None:
    exif = Image.Exif()
    exif[0x0110] = "EOS R5"
    exif[0x0112] = 6
    photo = tmp_path / "IMG_1.jpg"
    photo.write_bytes(encode_photo(exif=exif))
    result = runner.invoke(app, ["inspect", str(photo)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["camera_model"] == "EOS R5"
    assert payload["orientation"] == 6
    assert payload["lens_model"] == "unknown"


def test_init_config(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "cfg.yaml"
    monkeypatch.setenv("EXIFPOSTER_CONFIG", str(target))
    result = runner.invoke(app, ["init-config"])
    assert result.exit_code == 0
    assert target.exists()
    assert "template: classic" in target.read_text(encoding="utf-8")


def test_render_continues_past_oversized_image(tmp_path: Path, encode_photo, oversized_tiff: bytes) -> None:
    photos = tmp_path / "photos"
    photos.mkdir()
    (photos / "a_huge.tif").write_bytes(oversized_tiff)
    (photos / "b.jpg").write_bytes(encode_photo())
    out = tmp_path / "out"
    result = runner.invoke(app, ["render", str(photos), "--out", str(out)])
    assert result.exit_code == 1
    assert "success=1" in result.stdout
    assert "failed=1" in result.stdout
    assert (out / "b_poster.jpg").exists()


def test_batch_counts_unreadable_file_as_failed(tmp_path: Path, encode_photo, monkeypatch) -> None:
    photos = _photo_dir(tmp_path, encode_photo)
    original_read_bytes = Path.read_bytes

    def read_bytes(self: Path) -> bytes:
        if self.name == "b.jpg":
            raise PermissionError(13, "Permission denied", str(self))
        return original_read_bytes(self)

    monkeypatch.setattr(Path, "read_bytes", read_bytes)
    archive = tmp_path / "posters.zip"
    result = runner.invoke(app, ["batch", str(photos), "--out", str(archive)])
    assert result.exit_code == 0, result.output
    assert "success=1 skipped=0 failed=1" in result.stdout
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["a_poster.jpg"]


def test_null_template_in_config_uses_default(tmp_path: Path, encode_photo, monkeypatch, caplog) -> None:
    config = tmp_path / "cfg.yaml"
    config.write_text("template:\noutput_format:\n", encoding="utf-8")
    monkeypatch.setenv("EXIFPOSTER_CONFIG", str(config))
    assert _template_id(None, load_config()) == "classic"
    assert _output_format(None, load_config()) == "jpeg"
    assert _template_id("blur-background", load_config()) == "blur-background"

    photos = _photo_dir(tmp_path, encode_photo)
    with caplog.at_level(logging.WARNING):
        result = runner.invoke(app, ["render", str(photos), "--out", str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    assert "not found" not in caplog.text
    assert (tmp_path / "out" / "a_poster.jpg").exists()
