"""
Visited-set with atomic claim-or-skip admission.
"""
from __future__ import annotations

import enum
import threading
from typing import Set

__all__ = ("ClaimResult", "VisitedTracker")


class ClaimResult(enum.Enum):
    ADMITTED = "admitted"
    ALREADY_CLAIMED = "already_claimed"


class VisitedTracker:
    """Records which identifiers have been claimed during one crawl run.

    Entries are added once and never removed. The lock makes check-and-set
    indivisible for coroutines and for threads alike.
    """

    def __init__(self) -> None:
        self._claimed: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, url: str) -> ClaimResult:
        with self._lock:
            if url in self._claimed:
                return ClaimResult.ALREADY_CLAIMED
            self._claimed.add(url)
            return ClaimResult.ADMITTED

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._claimed

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)
