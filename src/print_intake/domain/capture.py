"""Models for camera streams and captured images."""

from dataclasses import dataclass, field
from enum import StrEnum

JPEG_MIME_TYPE = "image/jpeg"


class CaptureState(StrEnum):
    """Lifecycle states of a capture session."""

    INACTIVE = "inactive"
    ACQUIRING = "acquiring"
    STREAMING = "streaming"
    CAPTURING = "capturing"
    RELEASED = "released"


class Facing(StrEnum):
    """Which camera source was granted for a stream."""

    ENVIRONMENT = "environment"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class EncodedImage:
    """Compressed image bytes with their pixel dimensions."""

    data: bytes
    width: int
    height: int
    mime_type: str = JPEG_MIME_TYPE


@dataclass
class StreamHandle:
    """An open camera stream and the source that was granted."""

    device_index: int
    facing: Facing
    capture: object = field(repr=False)
    released: bool = False
