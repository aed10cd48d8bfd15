"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass
from typing import Any, Dict, Union

CityId = Union[int, str]


@dataclass(frozen=True)
class Observation:
    """Weather snapshot for one city, normalized from a provider payload."""
    city_id: CityId
    name: str
    temperature: float  # °C
    humidity: int  # percentage
    wind_speed: float  # m/s
    cloudiness: int  # percentage
    description: str  # e.g., "broken clouds", "light rain"

    # Display-only fields carried through to /api/weather
    feels_like: float = 0.0
    condition_main: str = ""  # e.g., "Clouds", "Rain", "Clear"
    icon: str = ""

    def to_payload(self) -> Dict[str, Any]:
        """Render in the OpenWeather current-weather shape the dashboard reads."""
        return {
            "id": self.city_id,
            "name": self.name,
            "main": {
                "temp": self.temperature,
                "feels_like": self.feels_like,
                "humidity": self.humidity,
            },
            "wind": {"speed": self.wind_speed},
            "clouds": {"all": self.cloudiness},
            "weather": [
                {
                    "main": self.condition_main,
                    "description": self.description,
                    "icon": self.icon,
                }
            ],
        }


@dataclass(frozen=True)
class ComfortRecord:
    """One ranked row of the comfort index table."""
    city: str
    temperature: float
    humidity: int
    wind_speed: float
    weather: str
    comfort_index: int
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "city": self.city,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
            "weather": self.weather,
            "comfortIndex": self.comfort_index,
            "rank": self.rank,
        }
