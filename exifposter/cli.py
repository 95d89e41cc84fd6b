from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from exifposter.batch import run_batch
from exifposter.config import fonts_from_config, load_config, write_default_config
from exifposter.constants import DEFAULT_TEMPLATE_ID
from exifposter.discover import discover_inputs
from exifposter.engine import RenderEngine, read_metadata
from exifposter.errors import BatchAllFailed, PosterError
from exifposter.exporter import resolve_output_format
from exifposter.models import RenderJob
from exifposter.naming import build_output_name

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Photo + EXIF poster CLI.")
LOGGER = logging.getLogger("exifposter")


@dataclass(slots=True)
class _Result:
    source: Path
    status: str  # ok | skipped | failed
    output: Path | None = None
    elapsed: float = 0.0
    error: str | None = None


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _fail(message: str) -> NoReturn:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(1)


def _quality_value(quality: float | None, cfg: dict) -> float:
    value = float(quality if quality is not None else cfg.get("quality", 0.9))
    if not 0 < value <= 1:
        _fail(f"quality must be in (0, 1], got: {value}")
    return value


def _template_id(option: str | None, cfg: dict) -> str:
    return option or cfg.get("template") or DEFAULT_TEMPLATE_ID


def _output_format(option: str | None, cfg: dict) -> str:
    return option or cfg.get("output_format") or "jpeg"


def _build_engine(cfg: dict) -> RenderEngine:
    return RenderEngine(fonts=fonts_from_config(cfg))


@app.command()
def render(
    input_path: Path = typer.Argument(..., exists=True, resolve_path=True),
    out: Path | None = typer.Option(None, "--out", help="Output directory."),
    recursive: bool = typer.Option(False, "--recursive", help="Recursively scan input directories."),
    template: str | None = typer.Option(None, "--template", help="Template id, e.g. classic, blur-background."),
    output_format: str | None = typer.Option(None, "--format", help="Output format: jpeg|jpg|png"),
    quality: float | None = typer.Option(None, "--quality", help="JPEG quality factor in (0, 1]."),
    skip_existing: bool = typer.Option(True, "--skip-existing/--no-skip-existing"),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Render one poster file per input photo."""
    cfg = load_config()
    _setup_logging(log_level or str(cfg.get("log_level", "info")))

    fmt_str = _output_format(output_format, cfg)
    try:
        out_ext, _ = resolve_output_format(fmt_str)
    except PosterError as exc:
        _fail(str(exc))
    quality_val = _quality_value(quality, cfg)
    template_id = _template_id(template, cfg)
    suffix = str(cfg.get("name_suffix") or "_poster")

    files = discover_inputs(input_path, recursive=recursive, suffix=suffix)
    if not files:
        typer.echo("No supported image files found.")
        raise typer.Exit(0)

    out_dir = out
    if out_dir is None:
        out_dir = (input_path / "output") if input_path.is_dir() else (input_path.parent / "output")
    out_dir.mkdir(parents=True, exist_ok=True)

    engine = _build_engine(cfg)

    def process_one(index: int, source: Path) -> _Result:
        t0 = time.perf_counter()
        output_file = out_dir / build_output_name(source.name, index, out_ext, suffix=suffix)
        if skip_existing and output_file.exists():
            return _Result(source=source, status="skipped", output=output_file)
        try:
            data = source.read_bytes()
            metadata = read_metadata(data, source.name)
            poster = engine.render_bytes(data, metadata, template_id, fmt_str, quality_val, filename=source.name)
            output_file.write_bytes(poster)
        except (PosterError, OSError) as exc:
            return _Result(source=source, status="failed", error=str(exc), elapsed=time.perf_counter() - t0)
        return _Result(source=source, status="ok", output=output_file, elapsed=time.perf_counter() - t0)

    results: list[_Result] = []
    for index, f in enumerate(files, start=1):
        r = process_one(index, f)
        results.append(r)
        if r.status == "ok":
            LOGGER.info("OK   %s -> %s  (%.2fs)", r.source.name, r.output.name if r.output else "-", r.elapsed)
        elif r.status == "skipped":
            LOGGER.info("SKIP %s (exists)", r.source.name)
        else:
            LOGGER.error("FAIL %s  %s", r.source.name, r.error)

    ok = sum(1 for r in results if r.status == "ok")
    skipped = sum(1 for r in results if r.status == "skipped")
    failed = [r for r in results if r.status == "failed"]
    typer.echo(f"Done. success={ok} skipped={skipped} failed={len(failed)}")
    if failed:
        typer.secho("Failures:", fg=typer.colors.RED)
        for r in failed:
            typer.secho(f"  {r.source}: {r.error}", fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def batch(
    inputs: list[Path] = typer.Argument(..., exists=True, resolve_path=True),
    out: Path = typer.Option(..., "--out", help="Zip archive to write."),
    recursive: bool = typer.Option(False, "--recursive", help="Recursively scan input directories."),
    template: str | None = typer.Option(None, "--template", help="Template id."),
    output_format: str | None = typer.Option(None, "--format", help="Output format: jpeg|jpg|png"),
    quality: float | None = typer.Option(None, "--quality", help="JPEG quality factor in (0, 1]."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Render every input photo and bundle the posters into one zip archive."""
    cfg = load_config()
    _setup_logging(log_level or str(cfg.get("log_level", "info")))

    suffix = str(cfg.get("name_suffix") or "_poster")
    files = discover_inputs(inputs, recursive=recursive, suffix=suffix)
    if not files:
        typer.echo("No supported image files found.")
        raise typer.Exit(0)

    jobs: list[RenderJob] = []
    unreadable = 0
    for path in files:
        try:
            data = path.read_bytes()
        except OSError as exc:
            LOGGER.error("FAIL %s  %s", path.name, exc)
            unreadable += 1
            continue
        jobs.append(RenderJob(data=data, filename=path.name))

    try:
        if not jobs:
            raise BatchAllFailed(total=len(files), failed=unreadable)
        result = run_batch(
            jobs,
            _template_id(template, cfg),
            _output_format(output_format, cfg),
            engine=_build_engine(cfg),
            quality=_quality_value(quality, cfg),
            suffix=suffix,
        )
    except PosterError as exc:
        _fail(str(exc))

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(result.archive)
    typer.echo(
        f"Done. success={result.succeeded} skipped={result.skipped} failed={result.failed + unreadable} archive={out}"
    )


@app.command("templates")
def list_templates() -> None:
    """Print the available templates as JSON."""
    cfg = load_config()
    engine = _build_engine(cfg)
    payload = [info.to_dict() for info in engine.list_templates()]
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command("inspect")
def inspect_file(
    file: Path = typer.Argument(..., exists=True, resolve_path=True, dir_okay=False),
) -> None:
    """Print the metadata snapshot read from one photo."""
    try:
        data = file.read_bytes()
    except OSError as exc:
        _fail(f"Metadata extraction failed: {exc}")
    metadata = read_metadata(data, file.name)
    typer.echo(json.dumps(metadata.to_dict(), ensure_ascii=False, indent=2))


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
