"""Server-side submission intake, listing and deletion."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from print_intake.domain.capture import JPEG_MIME_TYPE
from print_intake.domain.submissions import (
    Submission,
    UploadReceipt,
    has_basic_email_shape,
    submission_filename,
)
from print_intake.errors import RecordNotFound, UploadTooLarge, ValidationError
from print_intake.services.records import RecordStore

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._@+-]")


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SubmissionService:
    """Accepts uploads into the target folder and manages stored submissions."""

    record_store: RecordStore
    target_folder_name: str
    max_upload_bytes: int
    clock: Callable[[], datetime] = field(default=_utc_now)

    def upload(  # noqa: PLR0913
        self,
        *,
        filename: str | None,
        content: bytes,
        content_type: str | None,
        email: str,
        folder_number: str,
    ) -> UploadReceipt:
        """Validate an upload and store it as a submission."""
        email = email.strip()
        folder_number = folder_number.strip()
        if not content:
            raise ValidationError("No file uploaded.")
        if len(content) > self.max_upload_bytes:
            raise UploadTooLarge(
                f"File exceeds the {self.max_upload_bytes} byte upload limit."
            )
        if not email or not folder_number:
            raise ValidationError("Email and folder number are required.")
        if not has_basic_email_shape(email):
            raise ValidationError("Email address is not valid.")

        name = safe_object_name(filename) or submission_filename(
            email, folder_number, int(self.clock().timestamp() * 1000)
        )
        logger.info("Received file %s (%d bytes)", name, len(content))
        folder_id = self.record_store.ensure_folder(self.target_folder_name)
        record_id = self.record_store.create(
            folder_id,
            name,
            content,
            content_type or JPEG_MIME_TYPE,
            email,
            folder_number,
        )
        return UploadReceipt(record_id=record_id, name=name)

    def list_submissions(self) -> list[Submission]:
        """Return stored submissions, most recent first."""
        folder_id = self.record_store.find_folder(self.target_folder_name)
        if folder_id is None:
            return []
        return self.record_store.list(folder_id)

    def delete_submission(self, record_id: str) -> None:
        """Delete a stored submission from the target folder."""
        folder_id = self.record_store.find_folder(self.target_folder_name)
        if folder_id is None:
            raise RecordNotFound(f"Submission not found: {record_id}")
        self.record_store.delete(folder_id, record_id)


def safe_object_name(filename: str | None) -> str | None:
    """Reduce a client-supplied file name to a flat, storage-safe name."""
    if not filename:
        return None
    base = re.split(r"[\\/]", filename)[-1]
    cleaned = _UNSAFE_NAME_CHARS.sub("_", base).lstrip(".")
    return cleaned or None
