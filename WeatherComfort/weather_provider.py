"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from weather_data import CityId, Observation


class WeatherProviderBase(ABC):
    """Abstract base class for per-city weather data providers."""

    @abstractmethod
    def get_current(self, city_id: CityId) -> Observation:
        """
        Fetch current weather for one city.

        Args:
            city_id: Provider-specific city identifier

        Returns:
            Observation: Current weather for the city

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    pass
