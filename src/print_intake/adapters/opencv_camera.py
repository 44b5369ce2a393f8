"""OpenCV camera adapter."""

import logging
from dataclasses import dataclass, field

import cv2

from print_intake.config import ClientSettings, parse_index_list
from print_intake.domain.capture import EncodedImage, Facing, StreamHandle
from print_intake.errors import DeviceUnavailable, NoActiveStream
from print_intake.services.capture import CaptureDevice
from print_intake.services.frames import FrameEncoder, JpegFrameEncoder

logger = logging.getLogger(__name__)


@dataclass
class OpenCVCaptureDevice(CaptureDevice):
    """Capture device backed by ``cv2.VideoCapture``.

    ``device_index`` is the rear-facing (environment) camera. Fallback
    indexes are only tried when it cannot be opened, and the handle records
    that a fallback source was granted.
    """

    device_index: int = 0
    fallback_indexes: tuple[int, ...] = ()
    width: int | None = None
    height: int | None = None
    encoder: FrameEncoder = field(default_factory=JpegFrameEncoder)

    @classmethod
    def create(cls, settings: ClientSettings) -> "OpenCVCaptureDevice":
        """Create a capture device from client settings."""
        return cls(
            device_index=settings.camera_index,
            fallback_indexes=tuple(
                parse_index_list(settings.camera_fallback_indexes)
            ),
            width=settings.camera_width,
            height=settings.camera_height,
        )

    def open(self) -> StreamHandle:
        """Open the environment camera, then any configured fallback."""
        candidates = [(self.device_index, Facing.ENVIRONMENT)] + [
            (index, Facing.FALLBACK)
            for index in self.fallback_indexes
            if index != self.device_index
        ]
        for index, facing in candidates:
            capture = self._try_open(index)
            if capture is None:
                continue
            if facing is Facing.FALLBACK:
                logger.warning(
                    "Environment camera %s unavailable; granted fallback device %s",
                    self.device_index,
                    index,
                )
            return StreamHandle(device_index=index, facing=facing, capture=capture)
        raise DeviceUnavailable(
            "Could not access camera. Please ensure permissions are granted."
        )

    def grab_frame(self, handle: StreamHandle) -> EncodedImage:
        """Read the current frame and encode it at its delivered size."""
        if handle.released:
            raise NoActiveStream("Camera stream has been released")
        ok, frame = handle.capture.read()
        if not ok or frame is None:
            raise NoActiveStream("Camera stream stopped delivering frames")
        image = self.encoder.encode(frame)
        logger.debug(
            "Captured frame %dx%d from device %s",
            image.width,
            image.height,
            handle.device_index,
        )
        return image

    def close(self, handle: StreamHandle) -> None:
        """Release the underlying device once."""
        if handle.released:
            return
        handle.released = True
        try:
            handle.capture.release()
        except cv2.error:
            logger.exception("Camera device %s failed to release", handle.device_index)

    def _try_open(self, index: int) -> "cv2.VideoCapture | None":
        capture = None
        try:
            capture = cv2.VideoCapture(index)
            if not capture.isOpened():
                logger.warning("Camera device %s could not be opened", index)
                capture.release()
                return None
            if self.width:
                capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            if self.height:
                capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        except cv2.error:
            logger.exception("Camera device %s failed during open", index)
            if capture is not None:
                capture.release()
            return None
        return capture
