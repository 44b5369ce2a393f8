"""Customer-facing capture and submit flow."""

import logging
from typing import Protocol

from print_intake.domain.capture import CaptureState, EncodedImage
from print_intake.domain.submissions import UploadReceipt
from print_intake.errors import (
    DeviceUnavailable,
    EncodingError,
    NoActiveStream,
    UploadError,
)
from print_intake.services.capture import CaptureDevice, CaptureSession

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Please fill out all fields and take a photo."


class SubmissionTransport(Protocol):
    """Interface for sending a captured photo to the upload endpoint."""

    async def submit(
        self, image: EncodedImage, email: str, folder_number: str
    ) -> UploadReceipt:
        """Upload the image, raising UploadError on any failure."""


class IntakeController:
    """Holds the kiosk form state between capture and submission."""

    def __init__(self, device: CaptureDevice, transport: SubmissionTransport) -> None:
        self.device = device
        self.transport = transport
        self.captured_image: EncodedImage | None = None
        self.receipt: UploadReceipt | None = None
        self.error: str | None = None
        self.submitting = False
        self._session: CaptureSession | None = None

    @property
    def camera_open(self) -> bool:
        """Whether a capture session currently holds the camera."""
        return self._session is not None and self._session.state not in {
            CaptureState.INACTIVE,
            CaptureState.RELEASED,
        }

    @property
    def submitted(self) -> bool:
        """Whether the last submission succeeded."""
        return self.receipt is not None

    def can_submit(self, email: str, folder_number: str) -> bool:
        """Whether the submit action should be enabled."""
        return bool(
            email.strip()
            and folder_number.strip()
            and self.captured_image is not None
            and not self.submitting
        )

    async def capture(self) -> EncodedImage | None:
        """Take (or retake) the photo of the print."""
        if self.camera_open:
            return None
        self.error = None
        session = self._session = CaptureSession(self.device)
        try:
            async with session:
                image = await session.capture()
        except (DeviceUnavailable, NoActiveStream, EncodingError) as exc:
            logger.warning("Photo capture failed: %s", exc)
            self.error = str(exc)
            return None
        self.captured_image = image
        return image

    def use_image(self, image: EncodedImage) -> None:
        """Use an already encoded image instead of a camera capture."""
        self.captured_image = image

    async def submit(self, email: str, folder_number: str) -> UploadReceipt | None:
        """Upload the captured photo with the form fields."""
        if self.submitting:
            return None
        image = self.captured_image
        if image is None or not self.can_submit(email, folder_number):
            self.error = MISSING_FIELDS_MESSAGE
            return None
        self.submitting = True
        self.error = None
        try:
            receipt = await self.transport.submit(
                image, email.strip(), folder_number.strip()
            )
        except UploadError as exc:
            self.error = str(exc)
            return None
        finally:
            self.submitting = False
        self.receipt = receipt
        return receipt

    def reset(self) -> None:
        """Clear the form for the next customer."""
        self.captured_image = None
        self.receipt = None
        self.error = None
