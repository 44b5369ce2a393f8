"""Tests for frame encoding."""

from pathlib import Path

import cv2
import numpy as np
import pytest

from print_intake.errors import EncodingError
from print_intake.services.frames import JpegFrameEncoder, load_image_file


def _decode(data: bytes) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)


def test_encode_keeps_frame_dimensions() -> None:
    frame = np.zeros((600, 800, 3), dtype=np.uint8)

    image = JpegFrameEncoder().encode(frame)

    assert (image.width, image.height) == (800, 600)
    assert image.mime_type == "image/jpeg"
    assert image.data.startswith(b"\xff\xd8\xff")
    assert _decode(image.data).shape[:2] == (600, 800)


def test_encode_handles_non_standard_sizes() -> None:
    frame = np.full((721, 1283, 3), 200, dtype=np.uint8)

    image = JpegFrameEncoder().encode(frame)

    assert (image.width, image.height) == (1283, 721)


def test_encode_accepts_grayscale_and_bgra() -> None:
    gray = JpegFrameEncoder().encode(np.zeros((10, 20), dtype=np.uint8))
    bgra = JpegFrameEncoder().encode(np.zeros((10, 20, 4), dtype=np.uint8))

    assert (gray.width, gray.height) == (20, 10)
    assert (bgra.width, bgra.height) == (20, 10)


def test_default_quality_is_ninety_percent() -> None:
    assert JpegFrameEncoder().quality == 0.9


@pytest.mark.parametrize(
    "frame",
    [
        None,
        b"not-a-frame",
        np.zeros((0, 0, 3), dtype=np.uint8),
        np.zeros((10, 10, 3), dtype=np.float32),
        np.zeros((10, 10, 2), dtype=np.uint8),
        np.zeros((2, 10, 10, 3), dtype=np.uint8),
    ],
)
def test_encode_rejects_malformed_frames(frame: object) -> None:
    with pytest.raises(EncodingError):
        JpegFrameEncoder().encode(frame)


def test_load_image_file_reencodes_as_jpeg(tmp_path: Path) -> None:
    ok, png = cv2.imencode(".png", np.zeros((30, 40, 3), dtype=np.uint8))
    assert ok
    path = tmp_path / "print.png"
    path.write_bytes(png.tobytes())

    image = load_image_file(path)

    assert (image.width, image.height) == (40, 30)
    assert image.data.startswith(b"\xff\xd8\xff")


def test_load_image_file_rejects_garbage(tmp_path: Path) -> None:
    path = tmp_path / "junk.jpg"
    path.write_bytes(b"definitely not an image")

    with pytest.raises(EncodingError):
        load_image_file(path)


def test_load_image_file_rejects_missing_file(tmp_path: Path) -> None:
    with pytest.raises(EncodingError):
        load_image_file(tmp_path / "missing.jpg")
