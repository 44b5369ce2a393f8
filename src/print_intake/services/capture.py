"""Camera capture sessions."""

import asyncio
import logging
from types import TracebackType
from typing import Protocol

from print_intake.domain.capture import CaptureState, EncodedImage, StreamHandle
from print_intake.errors import NoActiveStream

logger = logging.getLogger(__name__)


class CaptureDevice(Protocol):
    """Interface for a camera that yields encoded still frames."""

    def open(self) -> StreamHandle:
        """Acquire a live stream, raising DeviceUnavailable on failure."""

    def grab_frame(self, handle: StreamHandle) -> EncodedImage:
        """Encode the frame currently delivered by the stream."""

    def close(self, handle: StreamHandle) -> None:
        """Release the stream. Safe to call more than once."""


class CaptureSession:
    """Owns exactly one camera stream from acquisition to release.

    Use as ``async with CaptureSession(device) as session``; the stream is
    released when the block exits, whether it ends normally, raises, or is
    cancelled. A failed acquisition moves the session straight to
    ``released`` without holding a handle.
    """

    def __init__(self, device: CaptureDevice) -> None:
        self.device = device
        self.state = CaptureState.INACTIVE
        self._handle: StreamHandle | None = None

    @property
    def handle(self) -> StreamHandle | None:
        """The stream handle while streaming, otherwise None."""
        return self._handle

    async def __aenter__(self) -> "CaptureSession":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    async def open(self) -> None:
        """Acquire the camera stream."""
        if self.state is not CaptureState.INACTIVE:
            raise RuntimeError(f"Capture session cannot open from {self.state}")
        self.state = CaptureState.ACQUIRING
        opening = asyncio.ensure_future(asyncio.to_thread(self.device.open))
        try:
            handle = await asyncio.shield(opening)
        except asyncio.CancelledError:
            opening.add_done_callback(self._release_late_handle)
            self.state = CaptureState.RELEASED
            raise
        except Exception:
            self.state = CaptureState.RELEASED
            raise
        self._handle = handle
        self.state = CaptureState.STREAMING
        logger.info(
            "Camera stream acquired (device=%s, facing=%s)",
            handle.device_index,
            handle.facing,
        )

    async def capture(self) -> EncodedImage:
        """Grab and encode the current frame, keeping the stream open."""
        handle = self._handle
        if self.state is not CaptureState.STREAMING or handle is None:
            raise NoActiveStream(f"No active stream (state={self.state})")
        self.state = CaptureState.CAPTURING
        try:
            return await asyncio.to_thread(self.device.grab_frame, handle)
        finally:
            if self.state is CaptureState.CAPTURING:
                self.state = CaptureState.STREAMING

    def close(self) -> None:
        """Release the stream. Safe to call in any state."""
        handle, self._handle = self._handle, None
        if handle is not None:
            self.device.close(handle)
            logger.info("Camera stream released (device=%s)", handle.device_index)
        self.state = CaptureState.RELEASED

    def _release_late_handle(self, opening: "asyncio.Future[StreamHandle]") -> None:
        if opening.cancelled() or opening.exception() is not None:
            return
        self.device.close(opening.result())
        logger.info("Released camera stream acquired after cancellation")


async def capture_still(device: CaptureDevice) -> EncodedImage:
    """Open a session, grab one frame, and release the stream."""
    async with CaptureSession(device) as session:
        return await session.capture()
