from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from typing import Iterable

from exifposter.constants import DEFAULT_NAME_SUFFIX
from exifposter.engine import RenderEngine
from exifposter.errors import BatchAllFailed, EncoderUnavailable
from exifposter.exporter import resolve_output_format
from exifposter.models import BatchResult, RenderJob
from exifposter.naming import build_output_name, dedupe_name

LOGGER = logging.getLogger(__name__)


def _job_name(job: RenderJob) -> str | None:
    if job.filename:
        return job.filename
    if job.metadata is not None:
        return job.metadata.original_filename
    return None


def run_batch(
    jobs: Iterable[RenderJob],
    template_id: str | None,
    fmt: str,
    *,
    engine: RenderEngine | None = None,
    quality: float | None = None,
    suffix: str = DEFAULT_NAME_SUFFIX,
) -> BatchResult:
    """Render every job into one zip archive, in submission order.

    A failing job is logged and dropped; only a batch with zero successes
    raises BatchAllFailed. EncoderUnavailable aborts the whole batch.
    """
    extension, _ = resolve_output_format(fmt)
    engine = engine or RenderEngine()
    jobs = list(jobs)
    total = len(jobs)

    buffer = BytesIO()
    names: list[str] = []
    used: dict[str, int] = {}
    failed = 0
    skipped = 0

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for index, job in enumerate(jobs, start=1):
            source = _job_name(job) or f"#{index}"
            if not job.data:
                LOGGER.warning("SKIP %s (empty input)", source)
                skipped += 1
                continue
            try:
                data = engine.render_bytes(
                    job.data,
                    job.metadata,
                    template_id,
                    fmt,
                    quality,
                    filename=job.filename,
                )
            except EncoderUnavailable:
                raise
            except Exception as exc:
                failed += 1
                LOGGER.error("FAIL %s  %s", source, exc)
                continue

            entry_name = dedupe_name(build_output_name(_job_name(job), index, extension, suffix=suffix), used)
            archive.writestr(entry_name, data)
            names.append(entry_name)
            LOGGER.info("OK   %d/%d %s -> %s", len(names), total, source, entry_name)

    if not names:
        raise BatchAllFailed(total=total, failed=failed, skipped=skipped)

    result = BatchResult(archive=buffer.getvalue(), names=names, total=total, failed=failed, skipped=skipped)
    LOGGER.info(
        "batch done. success=%d failed=%d skipped=%d archive=%dKB",
        result.succeeded,
        failed,
        skipped,
        len(result.archive) // 1024,
    )
    return result
