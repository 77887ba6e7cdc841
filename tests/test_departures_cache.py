from departures_cache import FreshnessCache
from flight_table import FlightRecord

WINDOW = 900


def record(flight_no):
    return FlightRecord(None, "Other", flight_no, "Delhi", "10:00", "10:00", 0, "", "")


def test_starts_empty():
    cache = FreshnessCache()
    entry = cache.get()
    assert entry.records is None
    assert entry.refreshed_at is None
    assert not entry.has_records
    assert cache.is_fresh(0, WINDOW) is False


def test_freshness_window_boundaries():
    cache = FreshnessCache()
    t = 1_700_000_000.0
    cache.set([record("AI 1")], t)
    assert cache.is_fresh(t + WINDOW - 1, WINDOW) is True
    assert cache.is_fresh(t + WINDOW, WINDOW) is False
    assert cache.is_fresh(t + WINDOW + 1, WINDOW) is False


def test_set_replaces_whole_entry():
    cache = FreshnessCache()
    cache.set([record("AI 1"), record("AI 2")], 10.0)
    cache.set([record("SG 3")], 20.0)
    entry = cache.get()
    assert [r.flight_no for r in entry.records] == ["SG 3"]
    assert entry.refreshed_at == 20.0


def test_stale_entry_is_retained():
    cache = FreshnessCache()
    cache.set([record("AI 1")], 0.0)
    assert cache.is_fresh(WINDOW * 10, WINDOW) is False
    assert [r.flight_no for r in cache.get().records] == ["AI 1"]


def test_empty_board_counts_as_records():
    cache = FreshnessCache()
    cache.set([], 5.0)
    assert cache.get().has_records
    assert cache.is_fresh(6.0, WINDOW) is True


def test_snapshot_not_affected_by_caller_list():
    cache = FreshnessCache()
    records = [record("AI 1")]
    cache.set(records, 1.0)
    records.append(record("AI 2"))
    assert len(cache.get().records) == 1
