"""Tests for expiry date resolution."""

from datetime import date, timedelta

from pantry_scan.domain.expiry import (
    ResolutionConfidence,
    ResolutionSource,
    ResolveRequest,
)
from pantry_scan.services.corrections import CorrectionLedger
from pantry_scan.services.expiry import ExpiryResolver
from tests.conftest import FIXED_TODAY, InMemoryCorrectionRepository


def test_resolve_prefers_future_ocr_date(resolver: ExpiryResolver) -> None:
    label_date = date(2026, 7, 20)

    resolution = resolver.resolve("carrot", [label_date, date(2026, 9, 1)])

    assert resolution.confidence == ResolutionConfidence.HIGH
    assert resolution.source == ResolutionSource.OCR
    assert resolution.final_date == label_date
    assert resolution.ocr_result == label_date
    assert resolution.requires_user_input is False


def test_resolve_ignores_ocr_date_that_is_not_in_the_future(
    resolver: ExpiryResolver,
) -> None:
    resolution = resolver.resolve("carrot", [FIXED_TODAY])

    assert resolution.source == ResolutionSource.AI
    assert resolution.ocr_result is None


def test_resolve_ignores_non_date_ocr_values(resolver: ExpiryResolver) -> None:
    resolution = resolver.resolve("carrot", ["12/05/2026", None])

    assert resolution.source == ResolutionSource.AI


def test_resolve_uses_knowledge_for_carrot(resolver: ExpiryResolver) -> None:
    resolution = resolver.resolve("Carrot", [])

    assert resolution.confidence == ResolutionConfidence.MEDIUM
    assert resolution.source == ResolutionSource.AI
    assert resolution.requires_user_input is False
    assert resolution.final_date == FIXED_TODAY + timedelta(days=14)
    assert resolution.ai_suggestion == resolution.final_date
    assert resolution.storage_conditions == [
        "refrigerated",
        "dark_place",
        "high_humidity",
    ]
    assert resolution.reasoning == "Based on Carrot storage guidelines (summer season)"


def test_resolve_unknown_item_requires_manual_entry(resolver: ExpiryResolver) -> None:
    resolution = resolver.resolve("dragonfruit", [])

    assert resolution.confidence == ResolutionConfidence.LOW
    assert resolution.source == ResolutionSource.MANUAL
    assert resolution.requires_user_input is True
    assert resolution.final_date is None
    assert resolution.reasoning == "Unable to determine expiry date automatically"


def test_resolve_applies_winter_season(ledger: CorrectionLedger) -> None:
    resolver = ExpiryResolver(ledger=ledger, today=lambda: date(2026, 1, 10))

    suggestion = resolver.suggest("tomato")

    assert suggestion.date == date(2026, 1, 20)
    assert "winter" in suggestion.reasoning


def test_suggest_without_seasonal_entry_uses_baseline(ledger: CorrectionLedger) -> None:
    resolver = ExpiryResolver(ledger=ledger, today=lambda: date(2026, 4, 1))

    suggestion = resolver.suggest("carrot")

    assert suggestion.date == date(2026, 4, 22)
    assert suggestion.reasoning == "Based on Carrot storage guidelines"


def test_suggest_applies_brand_override(resolver: ExpiryResolver) -> None:
    organic = resolver.suggest("milk", brand="Organic")
    ultra = resolver.suggest("milk", brand="Ultra Pasteurized")
    unknown_brand = resolver.suggest("milk", brand="Corner Shop")

    assert organic.date == FIXED_TODAY + timedelta(days=5)
    assert "(Organic brand)" in organic.reasoning
    assert ultra.date == FIXED_TODAY + timedelta(days=14)
    assert unknown_brand.date == FIXED_TODAY + timedelta(days=7)
    assert "brand" not in unknown_brand.reasoning


def test_suggest_for_unknown_item_uses_category_fallback(
    resolver: ExpiryResolver,
) -> None:
    suggestion = resolver.suggest("greek yogurt drink")

    assert suggestion.confidence == 0.5
    assert suggestion.date == FIXED_TODAY + timedelta(days=7)
    assert suggestion.reasoning == "Based on typical dairy item storage guidelines"
    assert suggestion.storage_conditions == ["refrigerated", "back_of_fridge"]


def test_corrections_lower_confidence_monotonically(resolver: ExpiryResolver) -> None:
    confidences = [resolver.suggest("carrot").confidence]
    for _ in range(4):
        resolver.record_correction(
            "carrot", FIXED_TODAY, FIXED_TODAY + timedelta(days=1), ResolutionSource.AI
        )
        confidences.append(resolver.suggest("carrot").confidence)

    assert confidences == [0.9, 0.8, 0.7, 0.6, 0.6]


def test_corrections_push_item_to_manual_entry(resolver: ExpiryResolver) -> None:
    assert resolver.resolve("milk", []).source == ResolutionSource.AI

    resolver.record_correction(
        "Milk", FIXED_TODAY, FIXED_TODAY + timedelta(days=1), ResolutionSource.AI
    )

    resolution = resolver.resolve("milk", [])
    assert resolution.source == ResolutionSource.MANUAL
    assert resolution.requires_user_input is True


def test_corrections_do_not_change_ocr_resolution(resolver: ExpiryResolver) -> None:
    for _ in range(3):
        resolver.record_correction(
            "carrot", FIXED_TODAY, FIXED_TODAY, ResolutionSource.OCR
        )

    resolution = resolver.resolve("carrot", [date(2026, 8, 1)])

    assert resolution.confidence == ResolutionConfidence.HIGH


def test_significant_correction_is_noted_in_reasoning(
    resolver: ExpiryResolver,
) -> None:
    resolver.record_correction(
        "banana", FIXED_TODAY, FIXED_TODAY + timedelta(days=1), ResolutionSource.AI
    )
    assert "previous corrections" not in resolver.suggest("banana").reasoning

    resolver.record_correction(
        "banana", FIXED_TODAY, FIXED_TODAY + timedelta(days=5), ResolutionSource.AI
    )
    assert "adjusted based on your previous corrections" in (
        resolver.suggest("banana").reasoning
    )


def test_record_correction_normalizes_and_persists(
    resolver: ExpiryResolver, correction_repository: InMemoryCorrectionRepository
) -> None:
    correction = resolver.record_correction(
        "  Carrot ", FIXED_TODAY, FIXED_TODAY + timedelta(days=3), "ai"
    )

    assert correction.item_name == "carrot"
    assert correction.original_source == ResolutionSource.AI
    assert correction_repository.corrections == [correction]


def test_resolve_falls_back_to_manual_on_error(ledger: CorrectionLedger) -> None:
    def broken_selector(_candidates: object) -> object:
        raise ValueError("bad candidates")

    resolver = ExpiryResolver(
        ledger=ledger, today=lambda: FIXED_TODAY, candidate_selector=broken_selector
    )

    resolution = resolver.resolve("carrot", [date(2026, 8, 1)])

    assert resolution.source == ResolutionSource.MANUAL
    assert resolution.confidence == ResolutionConfidence.LOW
    assert resolution.reasoning == "Error occurred during date resolution"


def test_candidate_selector_picks_ocr_date(ledger: CorrectionLedger) -> None:
    resolver = ExpiryResolver(
        ledger=ledger, today=lambda: FIXED_TODAY, candidate_selector=max
    )

    resolution = resolver.resolve("carrot", [date(2026, 7, 20), date(2026, 9, 1)])

    assert resolution.final_date == date(2026, 9, 1)


def test_batch_resolve_preserves_order(resolver: ExpiryResolver) -> None:
    resolutions = resolver.batch_resolve(
        [
            ResolveRequest(name="carrot", ocr_dates=[date(2026, 8, 1)]),
            ResolveRequest(name="dragonfruit"),
            ResolveRequest(name="milk", brand="organic"),
        ]
    )

    assert [resolution.item_name for resolution in resolutions] == [
        "carrot",
        "dragonfruit",
        "milk",
    ]
    assert [resolution.source for resolution in resolutions] == [
        ResolutionSource.OCR,
        ResolutionSource.MANUAL,
        ResolutionSource.AI,
    ]


def test_storage_recommendations(resolver: ExpiryResolver) -> None:
    assert resolver.storage_recommendations("Lettuce") == [
        "refrigerated",
        "crisper_drawer",
        "paper_towel",
    ]
    assert resolver.storage_recommendations("frozen peas") == ["frozen", "deep_freeze"]
    assert resolver.storage_recommendations("chocolate milk") == [
        "refrigerated",
        "back_of_fridge",
    ]
    assert resolver.storage_recommendations("paper towels") == ["room_temperature"]


def test_unreadable_history_does_not_break_resolution() -> None:
    repository = InMemoryCorrectionRepository(fail_reads=True)
    resolver = ExpiryResolver(
        ledger=CorrectionLedger(repository), today=lambda: FIXED_TODAY
    )

    assert resolver.resolve("carrot", []).source == ResolutionSource.AI

    correction = resolver.record_correction(
        "carrot", FIXED_TODAY, FIXED_TODAY + timedelta(days=1), ResolutionSource.AI
    )

    assert repository.corrections == [correction]
    assert resolver.suggest("carrot").confidence == 0.8
    assert repository.list_calls == 1
