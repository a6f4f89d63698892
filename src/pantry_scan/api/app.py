"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from pantry_scan.adapters.image_source import (
    InvalidImageReferenceError,
    check_image_ref,
)
from pantry_scan.api.models import (
    BatchResolvePayload,
    CorrectionPayload,
    ResolveItemPayload,
    ScanRequest,
    ScanResultPayload,
)
from pantry_scan.app_logging import configure_logging
from pantry_scan.containers import AppContainer
from pantry_scan.domain.expiry import ResolveRequest
from pantry_scan.domain.scans import ScanProgress, ScanResult

_UNPROCESSABLE = 422


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

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/scans")
    async def scan(payload: ScanRequest, request: Request) -> dict[str, object]:
        """Run both recognizers on a photo and return the joined result."""
        state_container: AppContainer = request.app.state.container
        image_ref = _checked_image_ref(payload.image_ref)
        result = await state_container.scan_orchestrator.scan(image_ref)
        return jsonable_encoder(result)

    @app.post("/scans/process")
    async def process_scan(payload: ScanRequest, request: Request) -> dict[str, object]:
        """Scan a photo, resolve expiry dates and store the items."""
        state_container: AppContainer = request.app.state.container
        events: list[ScanProgress] = []
        try:
            processed = await state_container.scan_orchestrator.scan_with_progress(
                payload.image_ref, on_progress=events.append
            )
        except InvalidImageReferenceError as exc:
            raise HTTPException(status_code=_UNPROCESSABLE, detail=str(exc)) from exc
        except Exception as exc:
            logger.exception("Processed scan failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_error_detail(state_container, exc, "Scan failed."),
            ) from exc
        return jsonable_encoder({"result": processed, "progress": events})

    @app.post("/scans/validate")
    async def validate_scan(
        payload: ScanResultPayload, request: Request
    ) -> dict[str, object]:
        """Report quality issues in a scan result."""
        state_container: AppContainer = request.app.state.container
        scan_result = ScanResult(
            success=payload.success,
            products=payload.products,
            dates=payload.dates,
            processing_time_ms=payload.processing_time_ms,
            error=payload.error,
        )
        return jsonable_encoder(state_container.scan_orchestrator.validate(scan_result))

    @app.post("/expiry/resolve")
    async def resolve_expiry(
        payload: ResolveItemPayload, request: Request
    ) -> dict[str, object]:
        """Resolve an expiry date for one item."""
        state_container: AppContainer = request.app.state.container
        resolution = state_container.expiry_resolver.resolve(
            payload.item_name, payload.ocr_dates, payload.brand
        )
        return jsonable_encoder(resolution)

    @app.post("/expiry/resolve/batch")
    async def resolve_expiry_batch(
        payload: BatchResolvePayload, request: Request
    ) -> dict[str, object]:
        """Resolve expiry dates for several items in order."""
        state_container: AppContainer = request.app.state.container
        resolutions = state_container.expiry_resolver.batch_resolve(
            [
                ResolveRequest(
                    name=item.item_name, ocr_dates=item.ocr_dates, brand=item.brand
                )
                for item in payload.items
            ]
        )
        return {"resolutions": jsonable_encoder(resolutions)}

    @app.post("/expiry/corrections", status_code=status.HTTP_201_CREATED)
    async def record_correction(
        payload: CorrectionPayload, request: Request
    ) -> dict[str, object]:
        """Record a user correction for future confidence scoring."""
        state_container: AppContainer = request.app.state.container
        correction = state_container.expiry_resolver.record_correction(
            payload.item_name,
            payload.original_date,
            payload.corrected_date,
            payload.original_source,
        )
        return jsonable_encoder(correction)

    @app.get("/expiry/storage")
    async def storage_recommendations(
        item_name: str, request: Request
    ) -> dict[str, object]:
        """Return storage recommendations for an item."""
        state_container: AppContainer = request.app.state.container
        return {
            "item_name": item_name,
            "storage_conditions": (
                state_container.expiry_resolver.storage_recommendations(item_name)
            ),
        }

    return app


def _checked_image_ref(image_ref: str) -> str:
    """Validate an image reference or fail the request with 422."""
    try:
        return check_image_ref(image_ref)
    except InvalidImageReferenceError as exc:
        raise HTTPException(status_code=_UNPROCESSABLE, detail=str(exc)) from exc


def _error_detail(state_container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a client-facing error message with local debug info."""
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
