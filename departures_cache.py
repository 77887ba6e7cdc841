# In-process snapshot of the last parsed departures board.

from dataclasses import dataclass
import threading
from typing import Optional, Sequence, Tuple

from flight_table import FlightRecord


@dataclass(frozen=True)
class CacheEntry:
    records: Optional[Tuple[FlightRecord, ...]] = None
    refreshed_at: Optional[float] = None

    @property
    def has_records(self) -> bool:
        # An empty board from a successful refresh still counts.
        return self.records is not None


class FreshnessCache:
    """Holds one immutable ``CacheEntry``, swapped whole on each refresh.

    Stale entries are kept; they are the fallback when a refresh fails.
    """

    def __init__(self) -> None:
        self._entry = CacheEntry()
        self._lock = threading.Lock()

    def get(self) -> CacheEntry:
        with self._lock:
            return self._entry

    def is_fresh(self, now: float, window_sec: float) -> bool:
        entry = self.get()
        if not entry.has_records or entry.refreshed_at is None:
            return False
        return now - entry.refreshed_at < window_sec

    def set(self, records: Sequence[FlightRecord], now: float) -> CacheEntry:
        entry = CacheEntry(records=tuple(records), refreshed_at=now)
        with self._lock:
            self._entry = entry
        return entry
