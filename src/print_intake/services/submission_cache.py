"""Client-side mirror of the stored submissions."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Protocol

from print_intake.domain.submissions import Submission
from print_intake.errors import RecordNotFound

logger = logging.getLogger(__name__)

Observer = Callable[[list[Submission]], None]


class SubmissionsClient(Protocol):
    """Interface for reading and deleting stored submissions."""

    async def list_submissions(self) -> list[Submission]:
        """Return submissions in server order."""

    async def delete_submission(self, record_id: str) -> None:
        """Delete a submission, raising RecordNotFound for unknown ids."""


class SubmissionCache:
    """Ordered, id-keyed cache of the most recent listing.

    Deletes are optimistic: the entry disappears from the cache (and
    observers are told) before the remote delete is sent, and is put back
    after its nearest surviving predecessor if the remote delete fails, so
    server order holds even when other deletes finished meanwhile. A remote
    "not found" counts as success because the record is gone either way.
    Operations on the same id are serialized.
    """

    def __init__(self, client: SubmissionsClient) -> None:
        self.client = client
        self.loading = False
        self._entries: list[Submission] = []
        self._observers: list[Observer] = []
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @property
    def entries(self) -> list[Submission]:
        """A copy of the cached submissions in server order."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, record_id: object) -> bool:
        return self.index_of(record_id) is not None

    def get(self, record_id: str) -> Submission | None:
        """Return the cached submission for an id, if present."""
        index = self.index_of(record_id)
        return None if index is None else self._entries[index]

    def index_of(self, record_id: object) -> int | None:
        """Return the position of an id in the cache, if present."""
        for index, entry in enumerate(self._entries):
            if entry.id == record_id:
                return index
        return None

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer and return a function that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    async def load(self) -> None:
        """Replace the cache with a fresh listing; unchanged on failure."""
        self.loading = True
        try:
            submissions = await self.client.list_submissions()
        finally:
            self.loading = False
        self._replace(_unique_by_id(submissions))
        logger.info("Loaded %d submissions", len(self._entries))

    async def remove(self, record_id: str) -> None:
        """Optimistically remove an entry, rolling back if the delete fails."""
        async with self._serialized(record_id):
            index = self.index_of(record_id)
            if index is None:
                logger.info("Submission %s is not cached; nothing to delete", record_id)
                return
            entry = self._entries[index]
            predecessors = [cached.id for cached in self._entries[:index]]
            self._replace(self._entries[:index] + self._entries[index + 1 :])
            try:
                await self.client.delete_submission(record_id)
            except RecordNotFound:
                logger.info("Submission %s was already deleted", record_id)
            except Exception:
                logger.warning("Delete of %s failed; restoring entry", record_id)
                self._restore(entry, predecessors)
                raise

    def clear(self) -> None:
        """Drop every cached entry."""
        self._replace([])

    def _restore(self, entry: Submission, predecessors: list[str]) -> None:
        """Reinsert after the nearest earlier neighbour that is still cached."""
        if self.index_of(entry.id) is not None:
            return
        position = 0
        for neighbour in reversed(predecessors):
            neighbour_index = self.index_of(neighbour)
            if neighbour_index is not None:
                position = neighbour_index + 1
                break
        entries = list(self._entries)
        entries.insert(position, entry)
        self._replace(entries)

    def _replace(self, entries: list[Submission]) -> None:
        self._entries = entries
        for observer in list(self._observers):
            observer(self.entries)

    @asynccontextmanager
    async def _serialized(self, record_id: str) -> AsyncIterator[None]:
        """Hold the per-id lock, dropping it once no caller needs it."""
        lock = self._locks.get(record_id)
        if lock is None:
            lock = self._locks[record_id] = asyncio.Lock()
        self._lock_users[record_id] = self._lock_users.get(record_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[record_id] -= 1
            if not self._lock_users[record_id]:
                del self._lock_users[record_id]
                del self._locks[record_id]


def _unique_by_id(submissions: list[Submission]) -> list[Submission]:
    """Keep the first occurrence of each id, preserving order."""
    seen: set[str] = set()
    unique: list[Submission] = []
    for submission in submissions:
        if submission.id in seen:
            continue
        seen.add(submission.id)
        unique.append(submission)
    return unique
