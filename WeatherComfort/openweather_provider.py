"""OpenWeather Current Weather API provider implementation."""
import logging
import requests
from typing import Any, Dict
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_data import CityId, Observation


def parse_observation(city_id: CityId, data: Dict[str, Any]) -> Observation:
    """
    Normalize a Current Weather API payload into an Observation.

    All defaulting for optional upstream fields happens here so scoring and
    serialization can rely on a fully populated record.

    Raises:
        WeatherProviderError: If the payload lacks the 'main' block or its
            temperature/humidity readings
    """
    main_data = data.get("main") or {}
    if not main_data:
        raise WeatherProviderError("Response missing 'main' block")
    if main_data.get("temp") is None or main_data.get("humidity") is None:
        raise WeatherProviderError("Response missing temperature or humidity")

    weather_array = data.get("weather") or []
    if not weather_array:
        logging.warning(f"Response for city {city_id} missing 'weather' array")
    weather = weather_array[0] if weather_array else {}

    wind_data = data.get("wind") or {}
    clouds_data = data.get("clouds") or {}

    # Keys present with a null value fall back like absent ones
    wind_speed = wind_data.get("speed")
    cloudiness = clouds_data.get("all")
    feels_like = main_data.get("feels_like")

    try:
        temperature = float(main_data["temp"])
        return Observation(
            city_id=city_id,
            name=data.get("name") or str(city_id),
            temperature=temperature,
            humidity=int(round(float(main_data["humidity"]))),
            wind_speed=max(0.0, float(wind_speed or 0.0)),
            cloudiness=int(round(float(cloudiness or 0))),
            description=weather.get("description") or "",
            feels_like=temperature if feels_like is None else float(feels_like),
            condition_main=weather.get("main") or "Unknown",
            icon=weather.get("icon") or "",
        )
    except (TypeError, ValueError) as e:
        raise WeatherProviderError(f"Failed to parse response: {str(e)}")


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using OpenWeather Current Weather API, queried by city ID.

    Uses the free Current Weather API: https://openweathermap.org/current
    """

    BASE_URL = "https://api.openweathermap.org/data/2.5/weather"

    def __init__(
        self,
        api_key: str,
        lang: str = "en",
        timeout: int = 10
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            lang: Language code for descriptions (e.g., "en", "de")
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.lang = lang
        self.timeout = timeout

    def get_current(self, city_id: CityId) -> Observation:
        """
        Fetch current weather for one city ID.

        Returns:
            Observation: Current weather information

        Raises:
            WeatherProviderError: If the API request fails
        """
        params = {
            "id": city_id,
            "appid": self.api_key,
            "units": "metric",
            "lang": self.lang,
        }

        try:
            logging.debug(f"OpenWeather request for city {city_id}: {self.BASE_URL}")

            response = requests.get(self.BASE_URL, params=params, timeout=self.timeout)

            logging.debug(f"API response status for city {city_id}: {response.status_code}")

            if not response.ok:
                logging.debug(f"API request for city {city_id} failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
            logging.debug(f"API response (truncated): {str(data)[:500]}...")

            observation = parse_observation(city_id, data)
            logging.info(
                f"Fetched weather for {observation.name} ({city_id}): "
                f"{observation.temperature}°C, {observation.description}"
            )
            return observation

        except WeatherProviderError:
            raise
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request for city {city_id}: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}")
        except (KeyError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse API response for city {city_id}: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.debug(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise WeatherProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}"
            )

        cod = error_data.get("cod", response.status_code)
        message = error_data.get("message", "Unknown error")
        parameters = error_data.get("parameters") or []
        logging.debug(f"OpenWeather API error response: {error_data}")

        error_msg = f"OpenWeather API error {cod}: {message}"
        if parameters:
            error_msg += f" (parameters: {', '.join(str(p) for p in parameters)})"
        raise WeatherProviderError(error_msg)
