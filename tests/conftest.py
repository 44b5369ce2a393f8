"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import numpy as np
import pytest

from print_intake.config import ClientSettings, Settings
from print_intake.containers import AppContainer
from print_intake.domain.capture import EncodedImage, Facing, StreamHandle
from print_intake.domain.submissions import Submission, UploadReceipt
from print_intake.errors import (
    DeviceUnavailable,
    NoActiveStream,
    RecordNotFound,
    StoreError,
    UploadError,
)
from print_intake.services.capture import CaptureDevice
from print_intake.services.drafts import DraftClient
from print_intake.services.frames import JpegFrameEncoder
from print_intake.services.intake import SubmissionTransport
from print_intake.services.records import ObjectStore, RecordStore, StoredObject
from print_intake.services.submission_cache import SubmissionsClient
from print_intake.services.submissions import SubmissionService

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@dataclass
class InMemoryObjectStore(ObjectStore):
    """In-memory folder/metadata store for tests."""

    folders: dict[str, str] = field(default_factory=dict)
    objects: dict[str, dict[str, object]] = field(default_factory=dict)
    folder_creations: int = 0
    fail_with: Exception | None = None

    def find_folder(self, name: str) -> str | None:
        self._maybe_fail()
        return self.folders.get(name)

    def create_folder(self, name: str) -> str:
        self._maybe_fail()
        self.folder_creations += 1
        folder_id = f"folder-{self.folder_creations}"
        self.folders[name] = folder_id
        return folder_id

    def put_object(  # noqa: PLR0913
        self,
        folder_id: str,
        name: str,
        content: bytes,
        content_type: str,
        properties: dict[str, str],
    ) -> str:
        self._maybe_fail()
        object_id = f"f{len(self.objects) + 1}"
        self.add(object_id, folder_id, name, properties, content=content)
        return object_id

    def add(  # noqa: PLR0913
        self,
        object_id: str,
        folder_id: str,
        name: str,
        properties: dict[str, str],
        content: bytes = b"",
        created_at: datetime | None = None,
    ) -> None:
        self.objects[object_id] = {
            "folder_id": folder_id,
            "name": name,
            "content": content,
            "properties": dict(properties),
            "created_at": created_at
            or BASE_TIME + timedelta(minutes=len(self.objects)),
        }

    def list_children(self, folder_id: str, limit: int) -> list[StoredObject]:
        self._maybe_fail()
        children = [
            StoredObject(
                id=object_id,
                name=str(data["name"]),
                created_at=data["created_at"],  # type: ignore[arg-type]
                properties=data["properties"],  # type: ignore[arg-type]
            )
            for object_id, data in self.objects.items()
            if data["folder_id"] == folder_id
        ]
        return children[:limit]

    def thumbnail_ref(self, object_id: str) -> str:
        return f"https://thumbs.test/{object_id}"

    def delete_object(self, object_id: str) -> None:
        self._maybe_fail()
        if object_id not in self.objects:
            raise RecordNotFound(f"Submission not found: {object_id}")
        del self.objects[object_id]

    def in_folder(self, object_id: str, folder_id: str) -> bool:
        stored = self.objects.get(object_id)
        return stored is not None and stored["folder_id"] == folder_id

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with


@dataclass
class FakeVideoCapture:
    """Stand-in for ``cv2.VideoCapture`` returning a fixed-size frame."""

    width: int = 800
    height: int = 600
    opened: bool = True
    released: bool = False
    frames_left: int | None = None

    def isOpened(self) -> bool:  # noqa: N802
        return self.opened and not self.released

    def read(self) -> tuple[bool, np.ndarray | None]:
        if self.released or self.frames_left == 0:
            return False, None
        if self.frames_left is not None:
            self.frames_left -= 1
        return True, np.full((self.height, self.width, 3), 127, dtype=np.uint8)

    def set(self, _prop: int, _value: float) -> bool:
        return True

    def release(self) -> None:
        self.released = True


@dataclass
class FakeCaptureDevice(CaptureDevice):
    """Capture device that hands out fake streams and records releases."""

    width: int = 800
    height: int = 600
    available: bool = True
    grab_error: Exception | None = None
    opened: list[StreamHandle] = field(default_factory=list)
    encoder: JpegFrameEncoder = field(default_factory=JpegFrameEncoder)

    def open(self) -> StreamHandle:
        if not self.available:
            raise DeviceUnavailable("Could not access camera.")
        handle = StreamHandle(
            device_index=0,
            facing=Facing.ENVIRONMENT,
            capture=FakeVideoCapture(width=self.width, height=self.height),
        )
        self.opened.append(handle)
        return handle

    def grab_frame(self, handle: StreamHandle) -> EncodedImage:
        if handle.released:
            raise NoActiveStream("released")
        if self.grab_error is not None:
            raise self.grab_error
        ok, frame = handle.capture.read()  # type: ignore[attr-defined]
        assert ok
        return self.encoder.encode(frame)

    def close(self, handle: StreamHandle) -> None:
        if handle.released:
            return
        handle.released = True
        handle.capture.release()  # type: ignore[attr-defined]

    @property
    def active_handles(self) -> list[StreamHandle]:
        return [handle for handle in self.opened if not handle.released]


@dataclass
class FakeTransport(SubmissionTransport):
    """Records submissions and returns a canned receipt."""

    error: UploadError | None = None
    calls: list[tuple[EncodedImage, str, str]] = field(default_factory=list)

    async def submit(
        self, image: EncodedImage, email: str, folder_number: str
    ) -> UploadReceipt:
        self.calls.append((image, email, folder_number))
        if self.error is not None:
            raise self.error
        return UploadReceipt(
            record_id="f1", name=f"{email}-{folder_number}-1717243200000.jpg"
        )


@dataclass
class FakeSubmissionsClient(SubmissionsClient):
    """In-memory submissions backend with switchable failures."""

    remote: list[Submission] = field(default_factory=list)
    list_calls: int = 0
    deleted: list[str] = field(default_factory=list)
    fail_list: bool = False
    fail_delete: bool = False
    seen_during_delete: list[list[str]] = field(default_factory=list)
    cache_probe: object | None = None

    async def list_submissions(self) -> list[Submission]:
        self.list_calls += 1
        if self.fail_list:
            raise StoreError("Failed to fetch submissions.")
        return list(self.remote)

    async def delete_submission(self, record_id: str) -> None:
        if self.cache_probe is not None:
            self.seen_during_delete.append(
                [entry.id for entry in self.cache_probe.entries]  # type: ignore[attr-defined]
            )
        if self.fail_delete:
            raise StoreError("Failed to delete the submission on the server.")
        if not any(entry.id == record_id for entry in self.remote):
            raise RecordNotFound(record_id)
        self.remote = [entry for entry in self.remote if entry.id != record_id]
        self.deleted.append(record_id)


@dataclass
class FakeDraftClient(DraftClient):
    """Draft client returning fixed text or failing."""

    text: str = "Hi! Your photo is attached. Thanks for choosing us."
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)
    observer: object | None = None

    async def complete(self, *, model: str, prompt: str) -> str:
        self.prompts.append(prompt)
        if callable(self.observer):
            self.observer()
        if self.error is not None:
            raise self.error
        return self.text


def make_submission(record_id: str, email: str = "a@b.com", folder: str = "A101"):
    return Submission(
        id=record_id,
        email=email,
        folder_number=folder,
        photo_ref=f"https://thumbs.test/{record_id}",
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
    )


@pytest.fixture
def client_settings() -> ClientSettings:
    return ClientSettings(
        intake_api_base_url="https://intake.test",
        admin_token="admin-token",
        dashboard_password="photo-admin",
        openai_api_key="openai-key",
    )


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def container(settings: Settings, object_store: InMemoryObjectStore) -> AppContainer:
    record_store = RecordStore(object_store)
    submission_service = SubmissionService(
        record_store=record_store,
        target_folder_name=settings.target_folder_name,
        max_upload_bytes=64 * 1024,
        clock=lambda: BASE_TIME,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        record_store=record_store,
        submission_service=submission_service,
        close_resources=close_resources,
    )
