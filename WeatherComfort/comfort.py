"""Comfort index scoring - pure functions for testability."""
import math
from weather_data import Observation

TEMP_MAX_POINTS = 40
HUMIDITY_MAX_POINTS = 25
WIND_MAX_POINTS = 20
CLOUD_MAX_POINTS = 15


def temperature_points(temp_c: float) -> float:
    """40 points inside 22-26°C, minus 4 per degree outside the band."""
    if 22 <= temp_c <= 26:
        return TEMP_MAX_POINTS
    distance = 22 - temp_c if temp_c < 22 else temp_c - 26
    return max(0, TEMP_MAX_POINTS - 4 * distance)


def humidity_points(humidity: float) -> float:
    """25 points inside 40-60%, minus 1 per percent outside the band."""
    if 40 <= humidity <= 60:
        return HUMIDITY_MAX_POINTS
    distance = 40 - humidity if humidity < 40 else humidity - 60
    return max(0, HUMIDITY_MAX_POINTS - 1 * distance)


def wind_points(speed: float) -> float:
    """20 points inside 1-5 m/s; calm costs 5 per m/s, gusts 4 per m/s."""
    if 1 <= speed <= 5:
        return WIND_MAX_POINTS
    if speed < 1:
        return max(0, WIND_MAX_POINTS - 5 * (1 - speed))
    return max(0, WIND_MAX_POINTS - 4 * (speed - 5))


def cloud_points(cloudiness: float) -> float:
    """15 points up to 50% cover, minus 0.3 per percent above."""
    if cloudiness <= 50:
        return CLOUD_MAX_POINTS
    return max(0, CLOUD_MAX_POINTS - 0.3 * (cloudiness - 50))


def score(observation: Observation) -> int:
    """
    Comfort index for one observation, an integer in [0, 100].

    The four sub-scores are summed, capped at 100 and rounded half up.
    """
    total = (
        temperature_points(observation.temperature)
        + humidity_points(observation.humidity)
        + wind_points(observation.wind_speed)
        + cloud_points(observation.cloudiness)
    )
    return int(math.floor(min(100, total) + 0.5))
