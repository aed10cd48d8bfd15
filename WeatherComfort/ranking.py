"""Comfort ranking with an aggregate snapshot cache."""
import logging
import threading
from typing import Callable, List, Sequence, Tuple

import comfort
from observation_cache import AggregateCache
from weather_data import CityId, ComfortRecord, Observation
from weather_service import WeatherService


def rank_observations(observations: Sequence[Observation]) -> List[ComfortRecord]:
    """
    Score and rank observations, most comfortable first.

    Equal scores keep their input order; ranks are 1-based positions.
    """
    scored = [(comfort.score(obs), obs) for obs in observations]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [
        ComfortRecord(
            city=obs.name,
            temperature=obs.temperature,
            humidity=obs.humidity,
            wind_speed=obs.wind_speed,
            weather=obs.description,
            comfort_index=value,
            rank=position,
        )
        for position, (value, obs) in enumerate(scored, start=1)
    ]


class RankingAggregator:
    """
    Serves the ranked comfort table, recomputing it at most once per TTL.

    With single_flight enabled, callers that miss the cache while a refresh is
    already running wait for that refresh and share its result instead of
    issuing their own upstream fetches.
    """

    def __init__(
        self,
        service: WeatherService,
        city_ids: Callable[[], Sequence[CityId]],
        cache: AggregateCache[Tuple[ComfortRecord, ...]],
        single_flight: bool = True
    ):
        """
        Args:
            service: Fetcher used on a cache miss
            city_ids: Returns the cities to rank
            cache: Aggregate snapshot cache
            single_flight: Coalesce concurrent miss-time refreshes
        """
        self.service = service
        self.city_ids = city_ids
        self.cache = cache
        self.single_flight = single_flight
        self._refresh_lock = threading.Lock()

    def get_ranking(self) -> List[ComfortRecord]:
        cached = self.cache.get()
        if cached is not None:
            logging.debug("Comfort ranking served from aggregate cache")
            return list(cached)

        if not self.single_flight:
            return list(self._refresh())

        with self._refresh_lock:
            # Another caller may have refreshed while we waited
            cached = self.cache.peek()
            if cached is not None:
                return list(cached)
            return list(self._refresh())

    def _refresh(self) -> Tuple[ComfortRecord, ...]:
        logging.info("Aggregate cache miss, recomputing comfort ranking")
        observations = self.service.fetch_all(self.city_ids())
        records = tuple(rank_observations(observations))
        self.cache.put(records)
        logging.info(f"Comfort ranking refreshed with {len(records)} cities")
        return records
