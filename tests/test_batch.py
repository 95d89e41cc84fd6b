from io import BytesIO

import pytest
from PIL import Image, features

from exifposter.batch import run_batch
from exifposter.errors import BatchAllFailed, EncoderUnavailable
from exifposter.models import MetadataSnapshot, RenderJob


def test_corrupt_job_is_dropped_and_order_kept(encode_photo) -> None:
    jobs = [
        RenderJob(data=encode_photo(color=(i * 40, 10, 10)), filename=f"IMG_{i}.JPG")
        for i in range(1, 6)
    ]
    jobs[2] = RenderJob(data=b"definitely not an image", filename="IMG_3.JPG")

    result = run_batch(jobs, "classic", "jpeg")

    assert result.names == ["IMG_1_poster.jpg", "IMG_2_poster.jpg", "IMG_4_poster.jpg", "IMG_5_poster.jpg"]
    assert result.total == 5
    assert result.failed == 1
    assert result.succeeded == 4
    for name, data in result.entries():
        with Image.open(BytesIO(data)) as image:
            assert image.format == "JPEG", name


def test_empty_input_is_skipped_not_failed(encode_photo) -> None:
    jobs = [RenderJob(data=b"", filename="empty.jpg"), RenderJob(data=encode_photo(), filename="ok.jpg")]
    result = run_batch(jobs, "blur-background", "png")
    assert result.names == ["ok_poster.png"]
    assert result.skipped == 1
    assert result.failed == 0


def test_fallback_and_duplicate_names(encode_photo) -> None:
    data = encode_photo()
    jobs = [
        RenderJob(data=data),
        RenderJob(data=data, filename="dir/shot.final.jpg"),
        RenderJob(data=data, filename="shot.final.png"),
        RenderJob(data=data, metadata=MetadataSnapshot(original_filename="from_meta.heic")),
    ]
    result = run_batch(jobs, "classic", "png")
    assert result.names == [
        "poster_1_poster.png",
        "shot.final_poster.png",
        "shot.final_poster_2.png",
        "from_meta_poster.png",
    ]


def test_unknown_template_falls_back_to_default(encode_photo) -> None:
    result = run_batch([RenderJob(data=encode_photo(), filename="a.jpg")], "no-such-template", "png")
    assert result.names == ["a_poster.png"]


def test_all_failed_raises() -> None:
    jobs = [RenderJob(data=b"garbage", filename="a.jpg"), RenderJob(data=b"", filename="b.jpg")]
    with pytest.raises(BatchAllFailed) as excinfo:
        run_batch(jobs, "classic", "jpeg")
    assert excinfo.value.total == 2
    assert excinfo.value.failed == 1
    assert excinfo.value.skipped == 1


def test_empty_job_list_raises() -> None:
    with pytest.raises(BatchAllFailed):
        run_batch([], "classic", "jpeg")


def test_missing_encoder_aborts_batch(monkeypatch, encode_photo) -> None:
    monkeypatch.setattr(features, "check_codec", lambda name: False)
    jobs = [RenderJob(data=encode_photo(), filename=f"{i}.jpg") for i in range(3)]
    with pytest.raises(EncoderUnavailable):
        run_batch(jobs, "classic", "jpeg")
