"""Scan orchestration: concurrent recognition, date extraction and storage."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import TypeVar

from pantry_scan.adapters.image_source import check_image_ref
from pantry_scan.clock import today_utc
from pantry_scan.domain.dates import DateExtractionResult
from pantry_scan.domain.expiry import ExpiryResolution
from pantry_scan.domain.inventory import InventoryItem
from pantry_scan.domain.products import RecognitionResult
from pantry_scan.domain.scans import (
    ProcessedScan,
    ScanProgress,
    ScanResult,
    ScanStage,
    ScanValidation,
)
from pantry_scan.services.date_extraction import DateExtractor
from pantry_scan.services.expiry import ExpiryResolver
from pantry_scan.services.inventory import InventoryService
from pantry_scan.services.recognition import ProductRecognizer
from pantry_scan.services.vision import elapsed_ms

_logger = logging.getLogger(__name__)

LOW_CONFIDENCE = 0.3
BOTH_FAILED_ERROR = "Both recognition and OCR failed"
CANCELLED_ERROR = "Scan cancelled"

ProgressCallback = Callable[[ScanProgress], None]
_ResultT = TypeVar("_ResultT", RecognitionResult, DateExtractionResult)


@dataclass
class CancellationToken:
    """Lets a caller abandon an in-flight scan."""

    _event: asyncio.Event = field(init=False, default_factory=asyncio.Event)

    def cancel(self) -> None:
        """Signal cancellation to every scan holding this token."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Return true once cancellation was requested."""
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until cancellation is requested."""
        await self._event.wait()


@dataclass
class ScanOrchestrator:
    """Runs both recognizers for a photo and joins their results.

    The product recognizer and the date extractor always run concurrently and the
    orchestrator waits for both to settle. A failure, timeout or exception on one
    side only empties that side of the result.
    """

    recognizer: ProductRecognizer
    date_extractor: DateExtractor
    resolver: ExpiryResolver
    inventory_service: InventoryService
    recognizer_timeout_seconds: float = 30.0
    date_extractor_timeout_seconds: float = 30.0
    today: Callable[[], date] = today_utc

    async def scan(
        self, image_ref: str, cancel_token: CancellationToken | None = None
    ) -> ScanResult:
        """Recognize products and extract dates from one photo."""
        started = time.perf_counter()
        if cancel_token is not None and cancel_token.cancelled:
            return _cancelled_result(started)

        recognition_task, extraction_task = self._start(image_ref)
        tasks = (recognition_task, extraction_task)
        try:
            for task in tasks:
                if not await _wait_for(task, cancel_token):
                    await _cancel_all(tasks)
                    _logger.info("Scan cancelled", extra={"image_ref": image_ref})
                    return _cancelled_result(started)
        finally:
            _abandon(tasks)

        return _merge(recognition_task.result(), extraction_task.result(), started)

    async def retry(
        self, image_ref: str, cancel_token: CancellationToken | None = None
    ) -> ScanResult:
        """Run the same scan again."""
        _logger.info("Retrying scan", extra={"image_ref": image_ref})
        return await self.scan(image_ref, cancel_token)

    async def scan_with_progress(  # noqa: PLR0915
        self,
        image_ref: str,
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ProcessedScan:
        """Scan, resolve expiry dates and store items while reporting progress."""
        total_started = time.perf_counter()
        emit = _emitter(on_progress)
        tasks: tuple[asyncio.Task, ...] = ()
        try:
            emit(ScanStage.INITIALIZING, 10, "Initializing scan...")
            cleaned_ref = check_image_ref(image_ref)
            started = time.perf_counter()
            if cancel_token is not None and cancel_token.cancelled:
                return _cancelled_scan(emit, started, total_started)

            recognition_task, extraction_task = self._start(cleaned_ref)
            tasks = (recognition_task, extraction_task)

            emit(ScanStage.RECOGNIZING, 25, "Recognizing products...")
            if not await _wait_for(recognition_task, cancel_token):
                await _cancel_all(tasks)
                return _cancelled_scan(emit, started, total_started)
            emit(ScanStage.RECOGNIZING, 50, "Products recognized")

            emit(ScanStage.EXTRACTING_DATES, 60, "Extracting expiration dates...")
            if not await _wait_for(extraction_task, cancel_token):
                await _cancel_all(tasks)
                return _cancelled_scan(emit, started, total_started)
            emit(ScanStage.EXTRACTING_DATES, 80, "Dates extracted")

            scan_result = _merge(
                recognition_task.result(), extraction_task.result(), started
            )
        except Exception:
            _logger.exception("Processed scan failed", extra={"image_ref": image_ref})
            emit(ScanStage.ERROR, 0, "Scan failed. Please try again.")
            raise
        finally:
            _abandon(tasks)

        emit(ScanStage.SAVING, 85, "Saving to inventory...")
        resolved_items: list[InventoryItem] = []
        resolutions: list[ExpiryResolution] = []
        failed_items: list[str] = []
        ocr_dates = [extracted.date for extracted in scan_result.dates]
        for product in scan_result.products:
            # Brand is not read from the photo yet, so none is passed on.
            resolution = self.resolver.resolve(product.name, ocr_dates)
            resolutions.append(resolution)
            try:
                add_result = self.inventory_service.add_item(
                    product, scan_result.dates, cleaned_ref, resolution
                )
            except Exception as exc:
                _logger.exception(
                    "Inventory write raised", extra={"item_name": product.name}
                )
                failed_items.append(f"{product.name}: {exc}")
                continue
            if add_result.success and add_result.item is not None:
                resolved_items.append(add_result.item)
            else:
                _logger.warning(
                    "Inventory write failed for %s: %s", product.name, add_result.error
                )
                failed_items.append(f"{product.name}: {add_result.error}")

        if failed_items:
            message = f"Scan completed; {len(failed_items)} item(s) could not be saved."
        else:
            message = "Scan completed successfully!"
        emit(ScanStage.COMPLETE, 100, message)

        return ProcessedScan(
            scan_result=scan_result,
            resolved_items=resolved_items,
            total_processing_time_ms=elapsed_ms(total_started),
            resolutions=resolutions,
            failed_items=failed_items,
        )

    def validate(self, scan_result: ScanResult) -> ScanValidation:
        """Flag weak or missing signals in a scan result."""
        return validate_scan_result(scan_result, self.today())

    def _start(
        self, image_ref: str
    ) -> tuple["asyncio.Task[RecognitionResult]", "asyncio.Task[DateExtractionResult]"]:
        recognition_task = asyncio.create_task(
            _settle(
                self.recognizer.recognize(image_ref),
                timeout=self.recognizer_timeout_seconds,
                label="Product recognition",
                on_failure=lambda error, ms: RecognitionResult(
                    success=False, processing_time_ms=ms, error=error
                ),
            )
        )
        extraction_task = asyncio.create_task(
            _settle(
                self.date_extractor.extract(image_ref),
                timeout=self.date_extractor_timeout_seconds,
                label="Date extraction",
                on_failure=lambda error, ms: DateExtractionResult(
                    success=False, processing_time_ms=ms, error=error
                ),
            )
        )
        return recognition_task, extraction_task


def validate_scan_result(scan_result: ScanResult, today: date) -> ScanValidation:
    """Return the quality issues found in a scan result."""
    issues: list[str] = []

    if not scan_result.products:
        issues.append("No products were recognized")
    for product in scan_result.products:
        if product.confidence < LOW_CONFIDENCE:
            issues.append(
                f"Low confidence recognition for {product.name} "
                f"({product.confidence:.0%})"
            )

    if not scan_result.dates:
        issues.append("No expiration dates were found")
    for extracted in scan_result.dates:
        if extracted.confidence < LOW_CONFIDENCE:
            issues.append(
                f"Low confidence date extraction ({extracted.confidence:.0%})"
            )
        if extracted.date <= today:
            issues.append(f"Extracted date is not in the future: {extracted.raw_text}")

    return ScanValidation(is_valid=not issues, issues=issues)


async def _settle(
    call: Awaitable[_ResultT],
    *,
    timeout: float,
    label: str,
    on_failure: Callable[[str, int], _ResultT],
) -> _ResultT:
    """Await a collaborator call, turning timeouts and errors into a failed result."""
    started = time.perf_counter()
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except TimeoutError:
        _logger.warning("%s timed out after %ss", label, timeout)
        return on_failure(f"{label} timed out after {timeout}s", elapsed_ms(started))
    except Exception as exc:
        _logger.exception("%s raised", label)
        return on_failure(f"{label} failed: {exc}", elapsed_ms(started))


async def _wait_for(task: asyncio.Task, cancel_token: CancellationToken | None) -> bool:
    """Wait for a task; return False if cancellation came first."""
    if cancel_token is None:
        await asyncio.wait({task})
        return True
    if cancel_token.cancelled:
        return False
    cancel_waiter = asyncio.ensure_future(cancel_token.wait())
    try:
        done, _ = await asyncio.wait(
            {task, cancel_waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        cancel_waiter.cancel()
    return task in done


async def _cancel_all(tasks: Sequence[asyncio.Task]) -> None:
    """Cancel unfinished tasks and wait until they have stopped."""
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def _abandon(tasks: Sequence[asyncio.Task]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()


def _merge(
    recognition: RecognitionResult,
    extraction: DateExtractionResult,
    started: float,
) -> ScanResult:
    """Join both sides; either success is enough for a successful scan."""
    processing_time_ms = elapsed_ms(started)
    if not recognition.success and not extraction.success:
        _logger.warning(
            "Scan failed on both sides: recognition=%s extraction=%s",
            recognition.error,
            extraction.error,
        )
        return ScanResult(
            success=False,
            products=[],
            dates=[],
            processing_time_ms=processing_time_ms,
            error=BOTH_FAILED_ERROR,
        )
    if not recognition.success:
        _logger.warning("Product recognition failed: %s", recognition.error)
    if not extraction.success:
        _logger.warning("Date extraction failed: %s", extraction.error)
    result = ScanResult(
        success=True,
        products=list(recognition.products) if recognition.success else [],
        dates=list(extraction.dates) if extraction.success else [],
        processing_time_ms=processing_time_ms,
    )
    _logger.info(
        "Scan joined: products=%s dates=%s in %sms",
        len(result.products),
        len(result.dates),
        result.processing_time_ms,
    )
    return result


def _cancelled_result(started: float) -> ScanResult:
    return ScanResult(
        success=False,
        products=[],
        dates=[],
        processing_time_ms=elapsed_ms(started),
        error=CANCELLED_ERROR,
        cancelled=True,
    )


def _cancelled_scan(
    emit: Callable[[ScanStage, int, str], None], started: float, total_started: float
) -> ProcessedScan:
    emit(ScanStage.CANCELLED, 0, "Scan cancelled.")
    return ProcessedScan(
        scan_result=_cancelled_result(started),
        resolved_items=[],
        total_processing_time_ms=elapsed_ms(total_started),
    )


def _emitter(
    on_progress: ProgressCallback | None,
) -> Callable[[ScanStage, int, str], None]:
    def emit(stage: ScanStage, percent_complete: int, message: str) -> None:
        if on_progress is not None:
            on_progress(
                ScanProgress(
                    stage=stage, percent_complete=percent_complete, message=message
                )
            )

    return emit
