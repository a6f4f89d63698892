"""Parsing printed expiry dates out of label text."""

import re
from datetime import date

from pantry_scan.domain.dates import DateFormat, ExtractedDate

_DATE = r"(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4})"

# Checked in order; the generic pattern only applies when no label matched.
DATE_PATTERNS: tuple[tuple[re.Pattern[str], DateFormat], ...] = (
    (re.compile(rf"best\s*before\s*end\s*:?\s*{_DATE}", re.I), DateFormat.BEST_BEFORE),
    (re.compile(rf"best\s*before\s*:?\s*{_DATE}", re.I), DateFormat.BEST_BEFORE),
    (re.compile(rf"\bbb\s*:?\s*{_DATE}", re.I), DateFormat.BEST_BEFORE),
    (re.compile(rf"expires\s*:?\s*{_DATE}", re.I), DateFormat.EXPIRES_ON),
    (re.compile(rf"expiry\s*:?\s*{_DATE}", re.I), DateFormat.EXPIRES_ON),
    (re.compile(rf"\bexp\s*:?\s*{_DATE}", re.I), DateFormat.EXPIRES_ON),
    (re.compile(rf"use\s*by\s*:?\s*{_DATE}", re.I), DateFormat.USE_BY),
    (re.compile(rf"use\s*before\s*:?\s*{_DATE}", re.I), DateFormat.USE_BY),
    (re.compile(rf"sell\s*by\s*:?\s*{_DATE}", re.I), DateFormat.SELL_BY),
)
_GENERIC_PATTERN = re.compile(_DATE)
_DAY_MONTH_YEAR = re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})")


def parse_date_string(value: str) -> date | None:
    """Parse a day-first date such as 05/11/2026 or 5-11-26."""
    match = _DAY_MONTH_YEAR.search(value)
    if not match:
        return None
    day, month, year = match.groups()
    if len(year) == 3:  # noqa: PLR2004
        return None
    full_year = int(f"20{year}") if len(year) == 2 else int(year)  # noqa: PLR2004
    try:
        return date(full_year, int(month), int(day))
    except ValueError:
        return None


def extract_label_dates(text: str, confidence: float) -> list[ExtractedDate]:
    """Return every parseable date in a line of label text."""
    found: list[ExtractedDate] = []
    seen: set[tuple[int, int]] = set()
    for pattern, date_format in DATE_PATTERNS:
        for match in pattern.finditer(text):
            span = match.span(1)
            if span in seen:
                continue
            parsed = parse_date_string(match.group(1))
            if parsed is None:
                continue
            seen.add(span)
            found.append(
                ExtractedDate(
                    date=parsed,
                    confidence=confidence,
                    format=date_format,
                    raw_text=match.group(0).strip(),
                )
            )
    if found:
        return found

    for match in _GENERIC_PATTERN.finditer(text):
        parsed = parse_date_string(match.group(1))
        if parsed is None:
            continue
        found.append(
            ExtractedDate(
                date=parsed,
                confidence=confidence,
                format=DateFormat.BEST_BEFORE,
                raw_text=match.group(0).strip(),
            )
        )
    return found
