"""Submission listing and deletion endpoints with shared-secret auth."""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from print_intake.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/submissions", tags=["submissions"])


def _configured_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    expected: str = Depends(_configured_token),
) -> None:
    """Reject requests whose X-Admin-Token does not match the shared secret."""
    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning("Rejected submissions request without a valid admin token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("", dependencies=[Depends(require_admin)])
async def list_submissions(request: Request) -> list[dict[str, str]]:
    """Return stored submissions, most recent first."""
    container: AppContainer = request.app.state.container
    submissions = container.submission_service.list_submissions()
    return [submission.to_wire() for submission in submissions]


@router.delete("/{record_id:path}", dependencies=[Depends(require_admin)])
async def delete_submission(record_id: str, request: Request) -> dict[str, str]:
    """Delete one stored submission."""
    container: AppContainer = request.app.state.container
    container.submission_service.delete_submission(record_id)
    logger.info("Deleted submission %s on request", record_id)
    return {"status": "deleted"}
