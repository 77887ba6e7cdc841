# Departures fetch policy: fresh cache, single refresh, stale fallback.

from dataclasses import dataclass
import logging
import random
import threading
from typing import List, Optional
from urllib.parse import urlencode

from departures_cache import CacheEntry, FreshnessCache
from flight_table import FlightRecord, parse_flights
from renderers import RenderError, RenderOptions, Renderer

log = logging.getLogger("fids_proxy.departures")

DEFAULT_WINDOW_SEC = 15 * 60
SOURCE_CACHE = "cache"
SOURCE_REFRESH = "refresh"
SOURCE_STALE = "stale"


class UpstreamError(Exception):
    def __init__(self, details: str):
        super().__init__(details)
        self.details = details


@dataclass(frozen=True)
class DeparturesResult:
    records: List[FlightRecord]
    source: str
    refreshed_at: Optional[float]


def build_target_url(base_url: str, flight_way: str = "D", rn: Optional[float] = None) -> str:
    if rn is None:
        rn = random.random()
    query = urlencode({"FltWay": flight_way, "FltNum": "", "FltFrom": "", "rn": rn})
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{query}"


class PendingRefresh:
    """Outcome of the refresh in flight, shared with requests that arrive meanwhile."""

    def __init__(self) -> None:
        self.done = threading.Event()
        self.entry: Optional[CacheEntry] = None
        self.error: Optional[Exception] = None


def serve(entry: CacheEntry, source: str) -> DeparturesResult:
    return DeparturesResult(list(entry.records or ()), source, entry.refreshed_at)


class DepartureFetcher:
    def __init__(
        self,
        renderer: Renderer,
        cache: FreshnessCache,
        *,
        base_url: str,
        flight_way: str = "D",
        window_sec: float = DEFAULT_WINDOW_SEC,
        render_options: Optional[RenderOptions] = None,
    ) -> None:
        self.renderer = renderer
        self.cache = cache
        self.base_url = base_url
        self.flight_way = flight_way
        self.window_sec = window_sec
        self.render_options = render_options or RenderOptions()
        self._state_lock = threading.Lock()
        self._inflight: Optional[PendingRefresh] = None

    def refresh(self, now: float) -> CacheEntry:
        url = build_target_url(self.base_url, self.flight_way)
        log.info("Cache is stale or empty. Fetching new data from %s", url)
        result = self.renderer.render(url, self.render_options)
        if not result.status_ok:
            raise RenderError(f"Airport server responded with {result.status_code}")
        flights = parse_flights(result.html)
        entry = self.cache.set(flights, now)
        log.info("Cache updated successfully with %d flights.", len(flights))
        return entry

    def fetch(self, now: float) -> DeparturesResult:
        if self.cache.is_fresh(now, self.window_sec):
            log.debug("Serving request from cache.")
            return serve(self.cache.get(), SOURCE_CACHE)

        with self._state_lock:
            # Another request may have finished a refresh since the check above.
            if self.cache.is_fresh(now, self.window_sec):
                return serve(self.cache.get(), SOURCE_CACHE)
            pending = self._inflight
            leader = pending is None
            if pending is None:
                pending = self._inflight = PendingRefresh()

        if leader:
            try:
                pending.entry = self.refresh(now)
            except Exception as exc:
                log.warning("Departures refresh failed: %s", exc)
                pending.error = exc
            finally:
                with self._state_lock:
                    self._inflight = None
                pending.done.set()
        else:
            stale = self.cache.get()
            if stale.has_records:
                log.debug("Refresh in progress, serving stale data.")
                return serve(stale, SOURCE_STALE)
            pending.done.wait()

        if pending.entry is not None:
            return serve(pending.entry, SOURCE_REFRESH if leader else SOURCE_CACHE)

        stale = self.cache.get()
        if stale.has_records:
            log.warning("Serving stale data due to fetch error.")
            return serve(stale, SOURCE_STALE)
        error = pending.error
        raise UpstreamError(str(error) or type(error).__name__) from error

    def get_departures(self, now: float) -> List[FlightRecord]:
        return self.fetch(now).records
