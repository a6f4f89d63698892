"""Expiry date resolution through an OCR, knowledge, manual cascade."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

from pantry_scan.clock import today_utc
from pantry_scan.domain.expiry import (
    ExpiryResolution,
    ExpirySuggestion,
    ResolutionConfidence,
    ResolutionSource,
    ResolveRequest,
    UserCorrection,
)
from pantry_scan.domain.knowledge import ProductKnowledge
from pantry_scan.services.corrections import CorrectionLedger
from pantry_scan.services.knowledge_base import (
    ProductKnowledgeBase,
    normalize_brand,
    normalize_item_name,
    season_for,
)

_logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.8
CORRECTION_PENALTY = 0.1
MAX_COUNTED_CORRECTIONS = 3
WELL_KNOWN_BONUS = 0.1
MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 0.9
CATEGORY_CONFIDENCE = 0.5
AI_ACCEPT_THRESHOLD = 0.7
SIGNIFICANT_CORRECTION_DAYS = 2

CandidateSelector = Callable[[Sequence[object]], object | None]


def first_candidate(candidates: Sequence[object]) -> object | None:
    """Pick the first OCR candidate, if any."""
    return candidates[0] if candidates else None


@dataclass
class ExpiryResolver:
    """Decides one expiry date per item from OCR candidates and product knowledge."""

    ledger: CorrectionLedger
    knowledge_base: ProductKnowledgeBase = field(default_factory=ProductKnowledgeBase)
    today: Callable[[], date] = today_utc
    candidate_selector: CandidateSelector = first_candidate

    def resolve(
        self,
        item_name: str,
        ocr_dates: Sequence[object],
        brand: str | None = None,
    ) -> ExpiryResolution:
        """Resolve an expiry date, falling back to manual entry on any failure."""
        try:
            today = self.today()
            candidate = _as_date(self.candidate_selector(ocr_dates))
            if candidate is not None and candidate > today:
                return ExpiryResolution(
                    item_name=item_name,
                    confidence=ResolutionConfidence.HIGH,
                    source=ResolutionSource.OCR,
                    requires_user_input=False,
                    ocr_result=candidate,
                    final_date=candidate,
                    reasoning="Date successfully extracted from product label",
                )

            suggestion = self.suggest(item_name, brand)
            if suggestion.confidence > AI_ACCEPT_THRESHOLD:
                return ExpiryResolution(
                    item_name=item_name,
                    confidence=ResolutionConfidence.MEDIUM,
                    source=ResolutionSource.AI,
                    requires_user_input=False,
                    ai_suggestion=suggestion.date,
                    final_date=suggestion.date,
                    storage_conditions=list(suggestion.storage_conditions),
                    reasoning=suggestion.reasoning,
                )

            return _manual_resolution(
                item_name, "Unable to determine expiry date automatically"
            )
        except Exception:
            _logger.exception(
                "Expiry resolution failed", extra={"item_name": item_name}
            )
            return _manual_resolution(
                item_name, "Error occurred during date resolution"
            )

    def suggest(self, item_name: str, brand: str | None = None) -> ExpirySuggestion:
        """Estimate an expiry date from the knowledge base."""
        normalized = normalize_item_name(item_name)
        entry = self.knowledge_base.lookup(normalized)
        today = self.today()
        if entry is None:
            return self._category_suggestion(normalized, today)

        expiration_days = entry.baseline_expiration_days
        reasoning = f"Based on {entry.name} storage guidelines"

        season = season_for(today)
        seasonal_days = entry.seasonal_variations.get(season)
        if seasonal_days:
            expiration_days = seasonal_days
            reasoning += f" ({season} season)"

        if brand:
            brand_days = entry.brand_variations.get(normalize_brand(brand))
            if brand_days:
                expiration_days = brand_days
                reasoning += f" ({brand} brand)"

        latest = self.ledger.latest_for(normalized)
        if latest is not None:
            shift = abs((latest.corrected_date - latest.original_date).days)
            if shift > SIGNIFICANT_CORRECTION_DAYS:
                reasoning += " (adjusted based on your previous corrections)"

        return ExpirySuggestion(
            date=today + timedelta(days=expiration_days),
            confidence=self._confidence(normalized, entry),
            source=ResolutionSource.AI,
            reasoning=reasoning,
            storage_conditions=list(entry.storage_conditions),
        )

    def record_correction(
        self,
        item_name: str,
        original_date: date,
        corrected_date: date,
        original_source: ResolutionSource,
    ) -> UserCorrection:
        """Record a user correction to bias future confidence for the item."""
        correction = UserCorrection(
            item_name=normalize_item_name(item_name),
            original_date=original_date,
            corrected_date=corrected_date,
            original_source=ResolutionSource(original_source),
            recorded_at=datetime.now(tz=UTC),
        )
        self.ledger.append(correction)
        _logger.info(
            "Recorded expiry correction",
            extra={"item_name": correction.item_name},
        )
        return correction

    def storage_recommendations(self, item_name: str) -> list[str]:
        """Return storage conditions for an item."""
        return self.knowledge_base.storage_for(item_name)

    def batch_resolve(self, items: Sequence[ResolveRequest]) -> list[ExpiryResolution]:
        """Resolve each item independently, preserving order."""
        return [self.resolve(item.name, item.ocr_dates, item.brand) for item in items]

    def _category_suggestion(self, normalized: str, today: date) -> ExpirySuggestion:
        guess = self.knowledge_base.classify(normalized)
        return ExpirySuggestion(
            date=today + timedelta(days=guess.expiration_days),
            confidence=CATEGORY_CONFIDENCE,
            source=ResolutionSource.AI,
            reasoning=(
                f"Based on typical {guess.category.value} item storage guidelines"
            ),
            storage_conditions=self.knowledge_base.storage_for(normalized),
        )

    def _confidence(self, normalized: str, entry: ProductKnowledge) -> float:
        """Damp confidence by past corrections, reward well-characterized items.

        Rounded to two decimals, so a two-condition item with one correction
        lands exactly on the AI threshold (0.7) and goes to manual entry.
        """
        confidence = BASE_CONFIDENCE
        corrections = min(self.ledger.count_for(normalized), MAX_COUNTED_CORRECTIONS)
        confidence -= CORRECTION_PENALTY * corrections
        if len(entry.storage_conditions) > 2:  # noqa: PLR2004
            confidence += WELL_KNOWN_BONUS
        return round(max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence)), 2)


def _as_date(value: object) -> date | None:
    """Return a calendar date for date-like OCR values, else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _manual_resolution(item_name: str, reasoning: str) -> ExpiryResolution:
    return ExpiryResolution(
        item_name=item_name,
        confidence=ResolutionConfidence.LOW,
        source=ResolutionSource.MANUAL,
        requires_user_input=True,
        reasoning=reasoning,
    )
