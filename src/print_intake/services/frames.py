"""Still-frame encoding."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import cv2
import numpy as np

from print_intake.domain.capture import JPEG_MIME_TYPE, EncodedImage
from print_intake.errors import EncodingError

JPEG_QUALITY = 0.9


class FrameEncoder(Protocol):
    """Interface for turning a raw video frame into compressed bytes."""

    def encode(self, frame: object) -> EncodedImage:
        """Compress a frame without changing its dimensions."""


@dataclass(frozen=True)
class JpegFrameEncoder(FrameEncoder):
    """JPEG encoder for OpenCV BGR frames."""

    quality: float = JPEG_QUALITY

    def encode(self, frame: object) -> EncodedImage:
        """Encode a frame as JPEG at the configured quality factor."""
        pixels = _validated_pixels(frame)
        if pixels.ndim == 3 and pixels.shape[2] == 4:  # noqa: PLR2004
            pixels = cv2.cvtColor(pixels, cv2.COLOR_BGRA2BGR)
        height, width = pixels.shape[:2]
        try:
            ok, buffer = cv2.imencode(
                ".jpg", pixels, [cv2.IMWRITE_JPEG_QUALITY, round(self.quality * 100)]
            )
        except cv2.error as exc:
            raise EncodingError(f"JPEG encoder rejected frame: {exc}") from exc
        if not ok:
            raise EncodingError("JPEG encoder returned no data")
        return EncodedImage(
            data=buffer.tobytes(),
            width=width,
            height=height,
            mime_type=JPEG_MIME_TYPE,
        )


def _validated_pixels(frame: object) -> np.ndarray:
    """Return the frame as an 8-bit pixel array or raise EncodingError."""
    if not isinstance(frame, np.ndarray):
        raise EncodingError("Frame is not a pixel array")
    if frame.size == 0:
        raise EncodingError("Frame is empty")
    if frame.dtype != np.uint8:
        raise EncodingError(f"Unsupported pixel type: {frame.dtype}")
    if frame.ndim == 2:  # noqa: PLR2004
        return frame
    if frame.ndim == 3 and frame.shape[2] in {1, 3, 4}:  # noqa: PLR2004
        return frame
    raise EncodingError(f"Unsupported frame shape: {frame.shape}")


def load_image_file(path: Path, encoder: FrameEncoder | None = None) -> EncodedImage:
    """Decode an image file and re-encode it the same way as camera frames."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise EncodingError(f"Could not read image file {path}: {exc}") from exc
    if not raw:
        raise EncodingError(f"Image file is empty: {path}")
    frame = cv2.imdecode(np.frombuffer(raw, dtype=np.uint8), cv2.IMREAD_COLOR)
    if frame is None:
        raise EncodingError(f"Not a readable image file: {path}")
    return (encoder or JpegFrameEncoder()).encode(frame)
