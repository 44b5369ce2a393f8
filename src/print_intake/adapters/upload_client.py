"""Upload endpoint client."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import httpx

from print_intake.domain.capture import EncodedImage
from print_intake.domain.submissions import UploadReceipt, submission_filename
from print_intake.errors import UploadError
from print_intake.services.intake import SubmissionTransport

logger = logging.getLogger(__name__)

NETWORK_FAILURE_MESSAGE = (
    "An unknown error occurred. Please check your connection and try again."
)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class HttpxSubmissionTransport(SubmissionTransport):
    """Submits captured photos to the upload endpoint with httpx.

    A single attempt is made per call; the caller decides whether to retry.
    """

    base_url: str
    http_client: httpx.AsyncClient
    clock: Callable[[], datetime] = field(default=_utc_now)

    @classmethod
    def create(cls, base_url: str) -> "HttpxSubmissionTransport":
        """Create a transport with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def submit(
        self, image: EncodedImage, email: str, folder_number: str
    ) -> UploadReceipt:
        """Upload one image with its email and folder number."""
        file_name = submission_filename(
            email, folder_number, int(self.clock().timestamp() * 1000)
        )
        logger.info("Starting upload of %s (%d bytes)", file_name, len(image.data))
        try:
            response = await self.http_client.post(
                f"{self.base_url}/upload",
                files={"file": (file_name, image.data, image.mime_type)},
                data={"email": email, "folderNumber": folder_number},
                timeout=30,
            )
        except httpx.HTTPError as exc:
            logger.warning("Upload request failed: %s", exc)
            raise UploadError(NETWORK_FAILURE_MESSAGE) from exc

        if not response.is_success:
            message = _error_message(response)
            logger.warning("Upload rejected (%s): %s", response.status_code, message)
            raise UploadError(message)

        try:
            payload = response.json()
        except ValueError as exc:
            raise UploadError(
                response.text.strip() or "Upload response was not valid JSON."
            ) from exc
        record_id = payload.get("id") if isinstance(payload, dict) else None
        name = payload.get("name") if isinstance(payload, dict) else None
        if not isinstance(record_id, str) or not isinstance(name, str):
            raise UploadError("Upload response did not include a record id and name.")
        logger.info("Upload successful: %s", record_id)
        return UploadReceipt(record_id=record_id, name=name)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _error_message(response: httpx.Response) -> str:
    """Pick the most specific failure message a response offers."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    text = response.text.strip()
    return text or f"Upload failed with status: {response.status_code}"
