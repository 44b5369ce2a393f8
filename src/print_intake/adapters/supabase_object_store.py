"""Supabase Storage implementation of the object store."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TypeVar

import httpx
from storage3.utils import StorageException
from supabase import Client

from print_intake.errors import RecordNotFound, StoreError
from print_intake.services.records import ObjectStore, StoredObject

logger = logging.getLogger(__name__)

FOLDER_PLACEHOLDER = ".emptyFolderPlaceholder"

T = TypeVar("T")


@dataclass
class SupabaseObjectStore(ObjectStore):
    """Object store over one Supabase Storage bucket.

    Folders are key prefixes made visible by a placeholder object, the same
    way the Supabase dashboard creates them. Object ids are keys relative to
    the bucket (``<folder>/<name>``); custom fields are stored as the
    object's user metadata.
    """

    client: Client
    bucket: str
    thumbnail_size: int = 400

    def find_folder(self, name: str) -> str | None:
        """Return the folder prefix if a top-level folder has this name."""
        entries = self._call(
            "look up folder",
            lambda: self._files().list("", {"limit": 100, "search": name}),
        )
        for entry in entries:
            if entry.get("name") == name and entry.get("id") is None:
                return name
        return None

    def create_folder(self, name: str) -> str:
        """Create a folder by uploading its placeholder object."""
        self._call(
            "create folder",
            lambda: self._files().upload(
                f"{name}/{FOLDER_PLACEHOLDER}",
                b"",
                {"content-type": "text/plain", "upsert": "false"},
            ),
        )
        return name

    def put_object(  # noqa: PLR0913
        self,
        folder_id: str,
        name: str,
        content: bytes,
        content_type: str,
        properties: dict[str, str],
    ) -> str:
        """Upload content under the folder with user metadata attached."""
        path = f"{folder_id}/{name}"
        self._call(
            "upload object",
            lambda: self._files().upload(
                path,
                content,
                {
                    "content-type": content_type,
                    "upsert": "false",
                    "metadata": properties,
                },
            ),
        )
        return path

    def list_children(self, folder_id: str, limit: int) -> list[StoredObject]:
        """List files directly inside the folder, newest first."""
        entries = self._call(
            "list folder",
            lambda: self._files().list(
                folder_id,
                {
                    "limit": limit,
                    "offset": 0,
                    "sortBy": {"column": "created_at", "order": "desc"},
                },
            ),
        )
        objects: list[StoredObject] = []
        for entry in entries:
            if entry.get("id") is None:
                continue
            path = f"{folder_id}/{entry['name']}"
            objects.append(
                StoredObject(
                    id=path,
                    name=entry["name"],
                    created_at=_parse_timestamp(entry.get("created_at")),
                    properties=self._user_metadata(path, entry),
                )
            )
        return objects

    def thumbnail_ref(self, object_id: str) -> str:
        """Return a resized public render URL for the object."""
        return self._files().get_public_url(
            object_id,
            {
                "transform": {
                    "width": self.thumbnail_size,
                    "height": self.thumbnail_size,
                    "resize": "cover",
                }
            },
        )

    def delete_object(self, object_id: str) -> None:
        """Remove an object, raising RecordNotFound if nothing was removed."""
        removed = self._call("delete object", lambda: self._files().remove([object_id]))
        if not removed:
            raise RecordNotFound(f"Submission not found: {object_id}")

    def in_folder(self, object_id: str, folder_id: str) -> bool:
        """Whether the key is a direct, non-placeholder child of the folder."""
        prefix = f"{folder_id}/"
        if not object_id.startswith(prefix):
            return False
        name = object_id[len(prefix) :]
        return bool(name) and "/" not in name and name != FOLDER_PLACEHOLDER

    def _files(self):  # type: ignore[no-untyped-def]
        return self.client.storage.from_(self.bucket)

    def _user_metadata(self, path: str, entry: dict[str, object]) -> dict[str, str]:
        raw = entry.get("user_metadata")
        if raw is None:
            info = self._call("read object metadata", lambda: self._files().info(path))
            raw = info.get("metadata")
        if not isinstance(raw, dict):
            return {}
        return {str(key): str(value) for key, value in raw.items() if value is not None}

    def _call(self, action: str, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except (StorageException, httpx.HTTPError) as exc:
            logger.exception("Supabase Storage failed to %s", action)
            raise StoreError(f"Failed to {action}: {exc}") from exc


def _parse_timestamp(raw: object) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None
