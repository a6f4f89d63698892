"""Calendar helpers shared by services."""

from datetime import UTC, date, datetime


def today_utc() -> date:
    """Return the current UTC calendar date."""
    return datetime.now(tz=UTC).date()
