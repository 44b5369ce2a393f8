"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, Form, Request, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from print_intake.api.submissions import router as submissions_router
from print_intake.app_logging import configure_logging
from print_intake.config import parse_csv_list
from print_intake.containers import AppContainer
from print_intake.errors import (
    RecordNotFound,
    StoreError,
    UploadTooLarge,
    ValidationError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_csv_list(container.settings.cors_allow_origins) or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(submissions_router)

    @app.exception_handler(ValidationError)
    async def validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)}
        )

    @app.exception_handler(UploadTooLarge)
    async def upload_too_large(_request: Request, exc: UploadTooLarge) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"message": str(exc)},
        )

    @app.exception_handler(RecordNotFound)
    async def record_not_found(_request: Request, exc: RecordNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"message": str(exc)}
        )

    @app.exception_handler(StoreError)
    async def store_error(_request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Storage request failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": f"Storage error: {exc}"},
        )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Plain-text liveness message."""
        return "Print intake backend is running!"

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/upload")
    async def upload(
        request: Request,
        file: UploadFile | None = File(default=None),
        email: str = Form(default=""),
        folder_number: str = Form(default="", alias="folderNumber"),
    ) -> dict[str, str]:
        """Store an uploaded photo with its email and folder number."""
        state_container: AppContainer = request.app.state.container
        if file is None:
            raise ValidationError("No file uploaded.")
        limit = state_container.settings.max_upload_bytes
        content = await file.read(limit + 1)
        receipt = state_container.submission_service.upload(
            filename=file.filename,
            content=content,
            content_type=file.content_type,
            email=email,
            folder_number=folder_number,
        )
        logger.info("File uploaded successfully. Record id: %s", receipt.record_id)
        return {
            "message": "File uploaded successfully!",
            "id": receipt.record_id,
            "name": receipt.name,
        }

    return app
