"""Dependency container wiring for the backend and the kiosk client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from print_intake.adapters.openai_draft_client import OpenAIDraftClient
from print_intake.adapters.opencv_camera import OpenCVCaptureDevice
from print_intake.adapters.submissions_client import HttpxSubmissionsClient
from print_intake.adapters.supabase_object_store import SupabaseObjectStore
from print_intake.adapters.upload_client import HttpxSubmissionTransport
from print_intake.config import ClientSettings, Settings
from print_intake.services.auth import AuthGate
from print_intake.services.capture import CaptureDevice
from print_intake.services.dashboard import DashboardController
from print_intake.services.drafts import DraftService
from print_intake.services.intake import IntakeController
from print_intake.services.records import RecordStore
from print_intake.services.submission_cache import SubmissionCache
from print_intake.services.submissions import SubmissionService


@dataclass
class AppContainer:
    """Holds backend dependencies."""

    settings: Settings
    record_store: RecordStore
    submission_service: SubmissionService
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class ClientContainer:
    """Holds kiosk and dashboard dependencies."""

    settings: ClientSettings
    capture_device: CaptureDevice
    intake: IntakeController
    dashboard: DashboardController
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default backend container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    object_store = SupabaseObjectStore(
        client=supabase_client,
        bucket=resolved_settings.storage_bucket,
        thumbnail_size=resolved_settings.thumbnail_size,
    )
    record_store = RecordStore(object_store)
    submission_service = SubmissionService(
        record_store=record_store,
        target_folder_name=resolved_settings.target_folder_name,
        max_upload_bytes=resolved_settings.max_upload_bytes,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        record_store=record_store,
        submission_service=submission_service,
        close_resources=close_resources,
    )


def build_client_container(settings: ClientSettings | None = None) -> ClientContainer:
    """Create the default kiosk and dashboard container."""
    resolved_settings = settings or ClientSettings()
    capture_device = OpenCVCaptureDevice.create(resolved_settings)
    transport = HttpxSubmissionTransport.create(resolved_settings.intake_api_base_url)
    submissions_client = HttpxSubmissionsClient.create(
        resolved_settings.intake_api_base_url, resolved_settings.admin_token
    )
    draft_client = (
        OpenAIDraftClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    draft_service = DraftService(client=draft_client, model=resolved_settings.openai_model)
    dashboard = DashboardController(
        gate=AuthGate(secret=resolved_settings.dashboard_password),
        cache=SubmissionCache(submissions_client),
        drafts=draft_service,
    )

    async def close_resources() -> None:
        await transport.close()
        await submissions_client.close()
        if draft_client is not None:
            await draft_client.close()

    return ClientContainer(
        settings=resolved_settings,
        capture_device=capture_device,
        intake=IntakeController(capture_device, transport),
        dashboard=dashboard,
        close_resources=close_resources,
    )
