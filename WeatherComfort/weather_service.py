"""Weather service: concurrent per-city fetching behind the raw observation cache."""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional
from weather_provider import WeatherProviderBase
from weather_data import CityId, Observation
from observation_cache import RawObservationCache


class WeatherService:
    """
    Service that wraps a weather provider with a per-city cache.

    Each city is served from the cache while its entry is fresh; only the
    misses go to the provider. A failing city is logged and left out of the
    result, it never fails the whole batch.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache: RawObservationCache,
        max_workers: Optional[int] = None
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            cache: Raw observation cache shared with the diagnostics endpoint
            max_workers: Upper bound on concurrent provider calls (None: one
                worker per city)
        """
        self.provider = provider
        self.cache = cache
        self.max_workers = max_workers

    def fetch_all(self, city_ids: Iterable[CityId]) -> List[Observation]:
        """
        Fetch one observation per city, concurrently.

        Returns:
            Observations for every city served from cache or fetched
            successfully. Order is unspecified.
        """
        city_ids = list(city_ids)
        if not city_ids:
            return []

        workers = self.max_workers or len(city_ids)
        logging.debug(f"Fetching weather for {len(city_ids)} cities ({workers} workers)")
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(self._fetch_one, city_ids))

        results = [obs for obs in outcomes if obs is not None]
        if len(results) < len(city_ids):
            logging.warning(f"Weather available for {len(results)}/{len(city_ids)} cities")
        return results

    def _fetch_one(self, city_id: CityId) -> Optional[Observation]:
        cached = self.cache.get(city_id)
        if cached is not None:
            return cached

        try:
            observation = self.provider.get_current(city_id)
        except Exception as e:
            logging.error(f"Failed to fetch weather for city {city_id}: {e}")
            return None

        self.cache.put(city_id, observation)
        return observation
