"""Submission records emulated on top of a folder-based object store.

The backing store only knows two things: which folder an object lives in,
and a flat set of key/value metadata fields on each object. A submission is
an image object carrying both the ``email`` and ``folderNumber`` fields;
anything else in the folder (placeholders, stray uploads) is ignored.

Known limitations:

* ``ensure_folder`` is check-then-create and not atomic. Two first-time
  callers racing can both miss the lookup; depending on the backing store
  that yields two folders with the same name or a conflict error for the
  loser. Neither outcome is corrected here.
* ``list`` returns only the first ``page_size`` objects of a folder.
* Stores that do not return custom fields with a listing may need one
  extra metadata request per listed object, so a full page can cost up to
  ``page_size`` additional round trips.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from print_intake.domain.submissions import (
    EMAIL_FIELD,
    FOLDER_NUMBER_FIELD,
    Submission,
    submission_metadata,
)
from print_intake.errors import RecordNotFound

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


@dataclass(frozen=True)
class StoredObject:
    """An object listed from a folder of the backing store."""

    id: str
    name: str
    created_at: datetime | None
    properties: dict[str, str] = field(default_factory=dict)


class ObjectStore(Protocol):
    """Folder and metadata primitives offered by the backing store.

    Implementations raise StoreError for remote failures and RecordNotFound
    when deleting an object that does not exist.
    """

    def find_folder(self, name: str) -> str | None:
        """Return the id of the folder with this exact name, if any."""

    def create_folder(self, name: str) -> str:
        """Create a folder and return its id."""

    def put_object(  # noqa: PLR0913
        self,
        folder_id: str,
        name: str,
        content: bytes,
        content_type: str,
        properties: dict[str, str],
    ) -> str:
        """Store content as a child of the folder and return its id."""

    def list_children(self, folder_id: str, limit: int) -> list[StoredObject]:
        """Return up to ``limit`` objects in the folder, newest first."""

    def thumbnail_ref(self, object_id: str) -> str:
        """Return a preview reference for an object."""

    def delete_object(self, object_id: str) -> None:
        """Remove an object by id."""

    def in_folder(self, object_id: str, folder_id: str) -> bool:
        """Whether the id names a stored object directly inside the folder."""


@dataclass
class RecordStore:
    """Create, list and delete submissions in an object store."""

    object_store: ObjectStore
    page_size: int = PAGE_SIZE

    def find_folder(self, name: str) -> str | None:
        """Return the folder id for ``name`` without creating it."""
        return self.object_store.find_folder(name)

    def ensure_folder(self, name: str) -> str:
        """Return the folder id for ``name``, creating the folder if absent."""
        folder_id = self.object_store.find_folder(name)
        if folder_id is not None:
            logger.info("Found folder '%s' with id %s", name, folder_id)
            return folder_id
        logger.info("Folder '%s' not found, creating it", name)
        folder_id = self.object_store.create_folder(name)
        logger.info("Created folder '%s' with id %s", name, folder_id)
        return folder_id

    def create(  # noqa: PLR0913
        self,
        folder_id: str,
        name: str,
        image: bytes,
        content_type: str,
        email: str,
        folder_number: str,
    ) -> str:
        """Store an image with its submission fields and return the record id."""
        record_id = self.object_store.put_object(
            folder_id,
            name,
            image,
            content_type,
            submission_metadata(email, folder_number),
        )
        logger.info("Stored submission %s (%d bytes)", record_id, len(image))
        return record_id

    def list(self, folder_id: str) -> list[Submission]:
        """List submissions in a folder, most recent first."""
        objects = self.object_store.list_children(folder_id, self.page_size)
        submissions: list[Submission] = []
        for stored in _newest_first(objects):
            email = stored.properties.get(EMAIL_FIELD, "").strip()
            folder_number = stored.properties.get(FOLDER_NUMBER_FIELD, "").strip()
            if not email or not folder_number:
                logger.debug("Skipping non-submission object %s", stored.id)
                continue
            submissions.append(
                Submission(
                    id=stored.id,
                    email=email,
                    folder_number=folder_number,
                    photo_ref=self.object_store.thumbnail_ref(stored.id),
                )
            )
        if len(objects) >= self.page_size:
            logger.warning(
                "Folder %s has at least %d objects; only the first page is listed",
                folder_id,
                self.page_size,
            )
        return submissions

    def delete(self, folder_id: str, record_id: str) -> None:
        """Delete a submission, refusing ids outside the folder."""
        if not self.object_store.in_folder(record_id, folder_id):
            raise RecordNotFound(f"Submission not found: {record_id}")
        self.object_store.delete_object(record_id)
        logger.info("Deleted submission %s", record_id)


def _newest_first(objects: list[StoredObject]) -> list[StoredObject]:
    """Sort by creation time descending, keeping undated objects last."""
    dated = [obj for obj in objects if obj.created_at is not None]
    undated = [obj for obj in objects if obj.created_at is None]
    dated.sort(key=lambda obj: obj.created_at, reverse=True)  # type: ignore[arg-type,return-value]
    return dated + undated
