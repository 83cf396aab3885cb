"""In-memory cache for progress analyses, keyed by content.

The key is goal id + a digest of the goal fields the analysis reads +
activity-store cursor + as-of date, so an edited goal or any new or edited
activity changes the key and stale entries simply stop being hit.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date

from goalkernel.engine.models import Goal, ProgressAnalysis

# Cached write-back and display fields; the analysis never reads them.
_UNANALYZED_FIELDS = {"current_value", "status", "title", "description", "priority", "category"}


def goal_digest(goal: Goal) -> str:
    payload = goal.model_dump_json(exclude=_UNANALYZED_FIELDS)
    return hashlib.sha256(payload.encode()).hexdigest()


@dataclass(frozen=True, slots=True)
class AnalysisKey:
    goal_id: str
    goal_digest: str
    store_cursor: str
    as_of: date


class AnalysisCache:
    """Bounded cache; evicts the oldest insertion when full."""

    def __init__(self, max_size: int = 512):
        self._cache: dict[AnalysisKey, ProgressAnalysis] = {}
        self._max_size = max_size

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, key: AnalysisKey) -> ProgressAnalysis | None:
        return self._cache.get(key)

    def put(self, key: AnalysisKey, analysis: ProgressAnalysis) -> None:
        if key not in self._cache and len(self._cache) >= self._max_size:
            oldest_key = next(iter(self._cache))
            del self._cache[oldest_key]
        self._cache[key] = analysis

    def invalidate(self, goal_id: str) -> int:
        """Drop every entry for a goal. Returns how many were removed."""
        stale = [k for k in self._cache if k.goal_id == goal_id]
        for k in stale:
            del self._cache[k]
        return len(stale)

    def clear(self) -> None:
        self._cache.clear()
