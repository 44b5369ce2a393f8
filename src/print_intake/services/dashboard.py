"""Operator dashboard state."""

import logging
from dataclasses import dataclass

from print_intake.domain.submissions import Submission
from print_intake.errors import AuthenticationRequired, PrintIntakeError
from print_intake.services.auth import AuthGate
from print_intake.services.drafts import DraftService
from print_intake.services.submission_cache import SubmissionCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenDraft:
    """A generated draft shown for one submission."""

    entry: Submission
    body: str


class DashboardController:
    """Composes the auth gate, submission cache and draft service.

    The cache is loaded once each time the gate opens and cleared when it
    closes. Failures never propagate out of the public actions; they are
    stored in ``error`` until dismissed or the next action starts.
    """

    def __init__(
        self, gate: AuthGate, cache: SubmissionCache, drafts: DraftService
    ) -> None:
        self.gate = gate
        self.cache = cache
        self.drafts = drafts
        self.error: str | None = None
        self.draft: OpenDraft | None = None
        self._generating: set[str] = set()
        gate.subscribe(self._on_auth_change)

    @property
    def submissions(self) -> list[Submission]:
        """Cached submissions in server order."""
        return self.cache.entries

    @property
    def loading(self) -> bool:
        """Whether a listing is in flight."""
        return self.cache.loading

    def is_generating(self, record_id: str) -> bool:
        """Whether a draft is being generated for this entry."""
        return record_id in self._generating

    async def refresh(self) -> bool:
        """Reload the cache from the store."""
        self._require_authenticated()
        self.error = None
        try:
            await self.cache.load()
        except PrintIntakeError as exc:
            self._fail(str(exc))
            return False
        return True

    async def delete(self, record_id: str) -> bool:
        """Delete an entry, keeping it visible again if the server refuses."""
        self._require_authenticated()
        try:
            await self.cache.remove(record_id)
        except PrintIntakeError as exc:
            self._fail(str(exc) or "Could not delete submission.")
            return False
        return True

    async def generate_draft(self, record_id: str) -> str | None:
        """Generate and open a draft for one entry."""
        self._require_authenticated()
        entry = self.cache.get(record_id)
        if entry is None or record_id in self._generating:
            return None
        self._generating.add(record_id)
        self.error = None
        try:
            body = await self.drafts.generate(entry.email, entry.folder_number)
        except PrintIntakeError as exc:
            self._fail(str(exc))
            return None
        finally:
            self._generating.discard(record_id)
        self.draft = OpenDraft(entry=entry, body=body)
        return body

    def close_draft(self) -> None:
        """Close the open draft."""
        self.draft = None

    def dismiss_error(self) -> None:
        """Clear the current error message."""
        self.error = None

    async def _on_auth_change(self, authenticated: bool) -> None:
        if authenticated:
            await self.refresh()
            return
        self.cache.clear()
        self.draft = None
        self.error = None

    def _require_authenticated(self) -> None:
        if not self.gate.authenticated:
            raise AuthenticationRequired("Dashboard login required.")

    def _fail(self, message: str) -> None:
        logger.warning("Dashboard action failed: %s", message)
        self.error = message
