from __future__ import annotations


class PosterError(Exception):
    """Base class for every failure the poster pipeline raises on purpose."""


class DecodeFailure(PosterError):
    """Input bytes could not be decoded as an image."""


class RenderFailure(PosterError):
    """A template raised while composing the poster."""


class EncodeFailure(PosterError):
    """The encoder rejected a finished canvas."""


class EncoderUnavailable(PosterError):
    """No codec for the requested output format in this Pillow build.

    This is a deployment defect, so batch processing does not isolate it per item.
    """


class UnsupportedFormat(PosterError, ValueError):
    pass


class BatchAllFailed(PosterError):
    def __init__(self, total: int, failed: int, skipped: int = 0) -> None:
        self.total = total
        self.failed = failed
        self.skipped = skipped
        super().__init__(
            f"no poster was produced: total={total} failed={failed} skipped={skipped}"
        )
