"""Bounded, append-only ledger of user expiry corrections."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Protocol

from pantry_scan.domain.expiry import UserCorrection

_logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 100


class CorrectionRepository(Protocol):
    """Persistence interface for user corrections."""

    def list_recent(self, limit: int) -> list[UserCorrection]:
        """Return up to `limit` most recent corrections, oldest first."""

    def add_correction(self, correction: UserCorrection) -> None:
        """Persist a single correction."""


@dataclass
class CorrectionLedger:
    """Keeps the most recent corrections in insertion order.

    History is loaded from the repository on first use. Appends are serialized
    with a lock so concurrent scans cannot interleave the append-and-trim step.
    Entries are never edited after they are written.
    """

    repository: CorrectionRepository
    window: int = DEFAULT_WINDOW
    _entries: list[UserCorrection] = field(init=False, default_factory=list)
    _loaded: bool = field(init=False, default=False)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock)

    def __post_init__(self) -> None:
        if self.window < 1:
            raise ValueError("Correction window must be positive")

    def append(self, correction: UserCorrection) -> None:
        """Append a correction and drop the oldest entries beyond the window."""
        with self._lock:
            self._load()
            self._entries.append(correction)
            if len(self._entries) > self.window:
                del self._entries[: len(self._entries) - self.window]
        try:
            self.repository.add_correction(correction)
        except Exception:
            _logger.exception(
                "Failed to persist expiry correction",
                extra={"item_name": correction.item_name},
            )

    def entries(self) -> list[UserCorrection]:
        """Return a snapshot of the retained corrections."""
        with self._lock:
            self._load()
            return list(self._entries)

    def count_for(self, item_name: str) -> int:
        """Return how many retained corrections exist for an item name."""
        with self._lock:
            self._load()
            return sum(1 for entry in self._entries if entry.item_name == item_name)

    def latest_for(self, item_name: str) -> UserCorrection | None:
        """Return the most recent correction for an item name."""
        with self._lock:
            self._load()
            for entry in reversed(self._entries):
                if entry.item_name == item_name:
                    return entry
        return None

    def __len__(self) -> int:
        with self._lock:
            self._load()
            return len(self._entries)

    def _load(self) -> None:
        """Populate the window from the repository once. Caller holds the lock.

        A failed read leaves the window empty and is not retried.
        """
        if self._loaded:
            return
        self._loaded = True
        try:
            stored = list(self.repository.list_recent(self.window))
        except Exception:
            _logger.exception("Failed to load expiry correction history")
            return
        self._entries = stored[-self.window :]
