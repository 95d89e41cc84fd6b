from __future__ import annotations

from pathlib import Path
from typing import Iterable

from exifposter.constants import DEFAULT_NAME_SUFFIX, SUPPORTED_EXTENSIONS


def _is_candidate(path: Path, suffix: str) -> bool:
    if not path.is_file() or path.name.startswith("."):
        return False
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        return False
    # 跳过本工具之前生成的海报
    return not (suffix and path.stem.endswith(suffix))


def discover_inputs(
    inputs: Iterable[Path] | Path,
    recursive: bool = False,
    suffix: str = DEFAULT_NAME_SUFFIX,
) -> list[Path]:
    """Photos under the given files/directories, sorted per directory, without duplicates.

    Files named explicitly are kept even when they look like generated posters.
    """
    if isinstance(inputs, Path):
        inputs = [inputs]
    found: list[Path] = []
    seen: set[Path] = set()
    for input_path in inputs:
        if input_path.is_file():
            candidates = [input_path] if input_path.suffix.lower() in SUPPORTED_EXTENSIONS else []
        elif input_path.is_dir():
            pattern = input_path.rglob("*") if recursive else input_path.iterdir()
            candidates = sorted(p for p in pattern if _is_candidate(p, suffix))
        else:
            candidates = []
        for candidate in candidates:
            key = candidate.resolve(strict=False)
            if key in seen:
                continue
            seen.add(key)
            found.append(candidate)
    return found
