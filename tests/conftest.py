from __future__ import annotations

import struct
from io import BytesIO

import pytest
from PIL import Image


def _encode_photo(
    size: tuple[int, int] = (120, 80),
    color: tuple[int, int, int] = (40, 90, 160),
    fmt: str = "JPEG",
    exif: Image.Exif | None = None,
) -> bytes:
    image = Image.new("RGB", size, color=color)
    buffer = BytesIO()
    params = {"exif": exif.tobytes()} if exif is not None else {}
    image.save(buffer, format=fmt, **params)
    return buffer.getvalue()


@pytest.fixture
def encode_photo():
    return _encode_photo


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _encode_photo()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch) -> None:
    # 测试里不读写用户目录下的真实配置
    monkeypatch.setenv("EXIFPOSTER_CONFIG", str(tmp_path / "config" / "config.yaml"))


def _oversized_tiff(width: int = 20000, height: int = 20000) -> bytes:
    """Header-only grayscale TIFF whose declared size is past Pillow's bomb limit."""
    short, long_ = 3, 4
    entries = [
        (256, long_, width),  # ImageWidth
        (257, long_, height),  # ImageLength
        (258, short, 8),  # BitsPerSample
        (259, short, 1),  # Compression: none
        (262, short, 1),  # PhotometricInterpretation: black is zero
        (273, long_, 0),  # StripOffsets, patched below
        (277, short, 1),  # SamplesPerPixel
        (278, long_, height),  # RowsPerStrip
        (279, long_, width * height),  # StripByteCounts
    ]
    ifd_offset = 8
    data_offset = ifd_offset + 2 + len(entries) * 12 + 4
    body = bytearray(b"II*\x00" + struct.pack("<I", ifd_offset))
    body += struct.pack("<H", len(entries))
    for tag, kind, value in entries:
        if tag == 273:
            value = data_offset
        packed = struct.pack("<H2x", value) if kind == short else struct.pack("<I", value)
        body += struct.pack("<HHI", tag, kind, 1) + packed
    body += struct.pack("<I", 0)
    body += b"\x00" * 16
    return bytes(body)


@pytest.fixture
def oversized_tiff() -> bytes:
    return _oversized_tiff()
