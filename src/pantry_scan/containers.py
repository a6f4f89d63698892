"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from pantry_scan.adapters.image_source import HttpxImageSource
from pantry_scan.adapters.openai_vision_client import OpenAIVisionClient
from pantry_scan.adapters.supabase_correction_repository import (
    SupabaseCorrectionRepository,
)
from pantry_scan.adapters.supabase_inventory_repository import (
    SupabaseInventoryRepository,
)
from pantry_scan.config import Settings
from pantry_scan.services.corrections import CorrectionLedger
from pantry_scan.services.date_extraction import VisionDateExtractor
from pantry_scan.services.expiry import ExpiryResolver
from pantry_scan.services.inventory import InventoryService
from pantry_scan.services.knowledge_base import ProductKnowledgeBase
from pantry_scan.services.recognition import VisionProductRecognizer
from pantry_scan.services.scanning import ScanOrchestrator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    correction_ledger: CorrectionLedger
    expiry_resolver: ExpiryResolver
    inventory_service: InventoryService
    scan_orchestrator: ScanOrchestrator
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    correction_ledger = CorrectionLedger(
        repository=SupabaseCorrectionRepository(supabase_client),
        window=resolved_settings.correction_window,
    )
    expiry_resolver = ExpiryResolver(
        ledger=correction_ledger,
        knowledge_base=ProductKnowledgeBase(),
    )
    inventory_service = InventoryService(SupabaseInventoryRepository(supabase_client))

    image_source = HttpxImageSource.create()
    vision_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    recognizer = VisionProductRecognizer(
        client=vision_client,
        image_source=image_source,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    date_extractor = VisionDateExtractor(
        client=vision_client,
        image_source=image_source,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    scan_orchestrator = ScanOrchestrator(
        recognizer=recognizer,
        date_extractor=date_extractor,
        resolver=expiry_resolver,
        inventory_service=inventory_service,
        recognizer_timeout_seconds=resolved_settings.recognizer_timeout_seconds,
        date_extractor_timeout_seconds=resolved_settings.date_extractor_timeout_seconds,
    )

    async def close_resources() -> None:
        await image_source.close()
        await vision_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        correction_ledger=correction_ledger,
        expiry_resolver=expiry_resolver,
        inventory_service=inventory_service,
        scan_orchestrator=scan_orchestrator,
        close_resources=close_resources,
    )
