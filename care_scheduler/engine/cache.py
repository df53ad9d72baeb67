"""In-process cache of recent optimization results."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from care_scheduler.domain.entities import OptimizationResult


DEFAULT_TTL_SECONDS = 3600


def result_key(organization_id: str, start: datetime) -> str:
    return f"schedule:optimization:{organization_id}:{start.isoformat()}"


class ResultCache:
    """
    Optimization results keyed by organization and window start.

    Entries expire ``ttl_seconds`` after they were stored. A newer run for
    the same key replaces the older entry.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, OptimizationResult]] = {}

    def set(self, organization_id: str, start: datetime, result: OptimizationResult) -> None:
        self._entries[result_key(organization_id, start)] = (self._clock() + self.ttl_seconds, result)

    def get(self, organization_id: str, start: datetime) -> Optional[OptimizationResult]:
        key = result_key(organization_id, start)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, result = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return result

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
