"""Comfort index API server for the monitored cities."""
import argparse
import logging
import os
import sys
from typing import Optional, Tuple

from dotenv import load_dotenv

from app import DEFAULT_FRONTEND_ORIGIN, create_app
from auth import build_authorizer
from cities import DEFAULT_CITIES_FILE, CityListError, load_city_codes
from observation_cache import AggregateCache, RawObservationCache
from openweather_provider import OpenWeatherProvider
from ranking import RankingAggregator
from weather_service import WeatherService

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "weather-comfort.log")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser("City comfort index API")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--cache-ttl", type=int, default=300, help="Seconds both caches keep their entries")
    parser.add_argument("--timeout", type=int, default=10, help="HTTP timeout in seconds")
    parser.add_argument("--city-limit", type=int, default=10)
    parser.add_argument("--max-workers", type=int, default=None, help="Bound on concurrent city fetches")
    parser.add_argument("--no-single-flight", action="store_true", help="Let concurrent cache misses each recompute")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def load_config() -> Tuple[str, Optional[str], Optional[str], str, str]:
    load_dotenv()
    api_key = os.getenv("OPENWEATHER_API_KEY")
    auth_domain = os.getenv("AUTH0_DOMAIN")
    auth_audience = os.getenv("AUTH0_AUDIENCE")
    frontend_url = os.getenv("FRONTEND_URL", DEFAULT_FRONTEND_ORIGIN)
    cities_file = os.getenv("CITIES_FILE", DEFAULT_CITIES_FILE)

    if not api_key:
        raise SystemExit("Missing OPENWEATHER_API_KEY in environment")

    logging.info("Configuration loaded: cities_file=%s frontend=%s", cities_file, frontend_url)
    return api_key, auth_domain, auth_audience, frontend_url, cities_file


def build_aggregator(api_key: str, cities_file: str, args: argparse.Namespace) -> RankingAggregator:
    try:
        city_codes = load_city_codes(cities_file, limit=args.city_limit)
    except CityListError as exc:
        raise SystemExit(str(exc)) from exc
    logging.info("Monitoring cities: %s", city_codes)

    provider = OpenWeatherProvider(
        api_key=api_key,
        lang=os.getenv("WEATHER_LANG", "en"),
        timeout=args.timeout,
    )
    service = WeatherService(
        provider=provider,
        cache=RawObservationCache(ttl_seconds=args.cache_ttl),
        max_workers=args.max_workers,
    )
    aggregator = RankingAggregator(
        service=service,
        city_ids=lambda: city_codes,
        cache=AggregateCache(ttl_seconds=args.cache_ttl),
        single_flight=not args.no_single_flight,
    )
    logging.info("Comfort ranking ready (cache ttl=%ss)", args.cache_ttl)
    return aggregator


def main() -> None:
    args = parse_args()
    setup_logging(args.log_file, args.verbose)
    api_key, auth_domain, auth_audience, frontend_url, cities_file = load_config()

    aggregator = build_aggregator(api_key, cities_file, args)
    app = create_app(
        service=aggregator.service,
        aggregator=aggregator,
        authorizer=build_authorizer(auth_domain, auth_audience),
        frontend_origin=frontend_url,
    )

    logging.info("Server running on http://%s:%s", args.host, args.port)
    app.run(host=args.host, port=args.port, threaded=True)


if __name__ == "__main__":
    main()
