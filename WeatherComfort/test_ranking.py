"""Tests for the comfort ranking aggregator."""
import threading
import pytest
from observation_cache import AggregateCache, RawObservationCache
from ranking import RankingAggregator, rank_observations
from weather_data import Observation
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_service import WeatherService


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def obs(city_id, name, temp=24.0, humidity=50, wind=3.0, clouds=20):
    return Observation(city_id, name, temp, humidity, wind, clouds, "clear sky")


class TableProvider(WeatherProviderBase):
    """Serves observations from a dict; ids missing from it fail."""

    def __init__(self, table):
        self.table = table
        self.call_count = 0
        self._lock = threading.Lock()

    def get_current(self, city_id):
        with self._lock:
            self.call_count += 1
        if city_id not in self.table:
            raise WeatherProviderError("404 city not found")
        return self.table[city_id]


@pytest.fixture
def clock():
    return FakeClock()


def build(table, city_ids, clock, single_flight=True):
    provider = TableProvider(table)
    service = WeatherService(provider, RawObservationCache(clock=clock))
    aggregator = RankingAggregator(
        service=service,
        city_ids=lambda: city_ids,
        cache=AggregateCache(clock=clock),
        single_flight=single_flight,
    )
    return provider, aggregator


def test_rank_observations_sorts_descending_with_contiguous_ranks():
    records = rank_observations([
        obs(1, "Hot", temp=35),
        obs(2, "Ideal"),
        obs(3, "Humid", humidity=80),
    ])

    assert [r.city for r in records] == ["Ideal", "Humid", "Hot"]
    assert [r.comfort_index for r in records] == [100, 80, 64]
    assert [r.rank for r in records] == [1, 2, 3]


def test_rank_observations_is_stable_for_ties():
    records = rank_observations([
        obs(1, "First", temp=20),
        obs(2, "Best"),
        obs(3, "Second", temp=28),
        obs(4, "Third", temp=20),
    ])

    assert [r.city for r in records] == ["Best", "First", "Second", "Third"]
    assert [r.rank for r in records] == [1, 2, 3, 4]


def test_rank_observations_copies_display_fields():
    record = rank_observations([
        Observation("5128581", "New York", 9.5, 71, 6.2, 90, "overcast clouds")
    ])[0]

    assert record.city == "New York"
    assert record.temperature == 9.5
    assert record.humidity == 71
    assert record.wind_speed == 6.2
    assert record.weather == "overcast clouds"


def test_rank_observations_empty():
    assert rank_observations([]) == []


def test_get_ranking_cache_hit_skips_fetch(clock):
    table = {1: obs(1, "A", temp=30), 2: obs(2, "B")}
    provider, aggregator = build(table, [1, 2], clock)

    first = aggregator.get_ranking()
    raw_stats = aggregator.service.cache.get_stats()
    second = aggregator.get_ranking()

    assert first == second
    assert provider.call_count == 2
    assert aggregator.service.cache.get_stats() == raw_stats
    stats = aggregator.cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_get_ranking_recomputes_after_ttl(clock):
    table = {1: obs(1, "A")}
    provider, aggregator = build(table, [1], clock)

    aggregator.get_ranking()
    clock.now += 300
    aggregator.get_ranking()

    # Raw entry expired at the same moment, so the city is fetched again
    assert provider.call_count == 2
    assert aggregator.cache.get_stats()["misses"] == 2


def test_get_ranking_with_partial_failure(clock):
    table = {i: obs(i, f"City {i}") for i in range(10) if i not in (3, 6, 8)}
    _, aggregator = build(table, list(range(10)), clock)

    ranking = aggregator.get_ranking()

    assert len(ranking) == 7
    assert [r.rank for r in ranking] == list(range(1, 8))


def test_get_ranking_total_failure_is_empty(clock):
    _, aggregator = build({}, [1, 2, 3], clock)

    assert aggregator.get_ranking() == []


def test_scoring_failure_propagates_and_caches_nothing(clock):
    broken = Observation(1, "Broken", None, 50, 3.0, 20, "clear sky")
    _, aggregator = build({1: broken}, [1], clock)

    with pytest.raises(TypeError):
        aggregator.get_ranking()

    assert aggregator.cache.get_stats()["hasData"] is False


def test_returned_list_is_a_copy(clock):
    _, aggregator = build({1: obs(1, "A")}, [1], clock)

    aggregator.get_ranking().clear()

    assert len(aggregator.get_ranking()) == 1


def _run_concurrently(aggregator, callers):
    results = []
    threads = [threading.Thread(target=lambda: results.append(aggregator.get_ranking())) for _ in range(callers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    return results


class GatedService(WeatherService):
    """Blocks fetch_all until released so callers pile up on a miss."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.release = threading.Event()
        self.fetch_calls = 0
        self._calls_lock = threading.Lock()

    def fetch_all(self, city_ids):
        with self._calls_lock:
            self.fetch_calls += 1
        self.release.wait(timeout=5)
        return super().fetch_all(city_ids)


def _gated(clock, single_flight):
    service = GatedService(TableProvider({1: obs(1, "A")}), RawObservationCache(clock=clock))
    aggregator = RankingAggregator(service, lambda: [1], AggregateCache(clock=clock), single_flight=single_flight)
    return service, aggregator


def test_single_flight_coalesces_concurrent_misses(clock):
    service, aggregator = _gated(clock, single_flight=True)
    threading.Timer(0.2, service.release.set).start()

    results = _run_concurrently(aggregator, 4)

    assert service.fetch_calls == 1
    assert len(results) == 4
    assert all(r == results[0] for r in results)


def test_without_single_flight_each_miss_recomputes(clock):
    service, aggregator = _gated(clock, single_flight=False)
    threading.Timer(0.2, service.release.set).start()

    results = _run_concurrently(aggregator, 3)

    assert service.fetch_calls == 3
    assert len(results) == 3
