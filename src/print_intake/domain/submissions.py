"""Domain models for customer submissions."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

EMAIL_FIELD = "email"
FOLDER_NUMBER_FIELD = "folderNumber"


class Submission(BaseModel):
    """A stored submission as exposed by the listing endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    email: str
    folder_number: str = Field(alias="folderNumber")
    photo_ref: str = Field(alias="photo")

    def to_wire(self) -> dict[str, str]:
        """Serialize using the listing endpoint's field names."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class UploadReceipt:
    """Identifiers returned by a successful upload."""

    record_id: str
    name: str


def has_basic_email_shape(value: str) -> bool:
    """Return True when the value looks like ``local@domain``."""
    local, sep, domain = value.strip().partition("@")
    return bool(sep and local and domain) and "@" not in domain


def submission_metadata(email: str, folder_number: str) -> dict[str, str]:
    """Build the per-object metadata fields for a submission."""
    return {EMAIL_FIELD: email, FOLDER_NUMBER_FIELD: folder_number}


def submission_filename(email: str, folder_number: str, timestamp_ms: int) -> str:
    """Name an upload uniquely from its fields and a millisecond timestamp."""
    return f"{email}-{folder_number}-{timestamp_ms}.jpg"
