"""Listing and deletion endpoint client."""

from dataclasses import dataclass
from urllib.parse import quote

import httpx

from print_intake.domain.submissions import Submission
from print_intake.errors import RecordNotFound, StoreError
from print_intake.services.submission_cache import SubmissionsClient


@dataclass
class HttpxSubmissionsClient(SubmissionsClient):
    """Reads and deletes stored submissions through the backend API."""

    base_url: str
    http_client: httpx.AsyncClient
    admin_token: str | None = None

    @classmethod
    def create(
        cls, base_url: str, admin_token: str | None = None
    ) -> "HttpxSubmissionsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            admin_token=admin_token,
        )

    async def list_submissions(self) -> list[Submission]:
        """Fetch all listed submissions, most recent first."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/submissions", headers=self._headers(), timeout=15
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError(
                "Failed to fetch submissions. Please ensure the backend is running."
            ) from exc
        try:
            return [Submission.model_validate(item) for item in response.json()]
        except (ValueError, TypeError) as exc:
            raise StoreError("Submission listing was not understood.") from exc

    async def delete_submission(self, record_id: str) -> None:
        """Delete a submission, raising RecordNotFound for unknown ids."""
        url = f"{self.base_url}/submissions/{quote(record_id, safe='/@')}"
        try:
            response = await self.http_client.delete(
                url, headers=self._headers(), timeout=15
            )
        except httpx.HTTPError as exc:
            raise StoreError("Could not delete submission.") from exc
        if response.status_code == httpx.codes.NOT_FOUND:
            raise RecordNotFound(f"Submission not found: {record_id}")
        if not response.is_success:
            raise StoreError("Failed to delete the submission on the server.")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _headers(self) -> dict[str, str]:
        if not self.admin_token:
            return {}
        return {"X-Admin-Token": self.admin_token}
