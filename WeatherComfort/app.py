"""Flask application exposing weather, comfort index and cache diagnostics."""
import logging
from functools import wraps
from typing import Optional

from flask import Flask, current_app, jsonify, request

from auth import AuthError, BearerAuthorizer
from ranking import RankingAggregator
from weather_service import WeatherService

DEFAULT_FRONTEND_ORIGIN = "http://localhost:3000"


def require_auth_if_configured(view):
    """Enforce the bearer gate when an authorizer is installed, else pass through."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        authorizer = current_app.config.get("AUTHORIZER")
        if authorizer is not None:
            try:
                authorizer.authorize(request.headers.get("Authorization"))
            except AuthError as exc:
                logging.warning("Rejected request to %s: %s", request.path, exc)
                return jsonify({"message": "Unauthorized"}), 401
        return view(*args, **kwargs)
    return wrapper


def create_app(
    service: WeatherService,
    aggregator: RankingAggregator,
    authorizer: Optional[BearerAuthorizer] = None,
    frontend_origin: str = DEFAULT_FRONTEND_ORIGIN
) -> Flask:
    app = Flask(__name__)
    app.config["AUTHORIZER"] = authorizer

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = frontend_origin
        response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
        return response

    @app.route("/api/weather", methods=["GET"])
    def weather():
        try:
            observations = service.fetch_all(aggregator.city_ids())
            return jsonify([obs.to_payload() for obs in observations])
        except Exception:
            logging.exception("Error fetching weather data")
            return jsonify({"message": "Error fetching weather data"}), 500

    @app.route("/api/weather/comfortindex", methods=["GET"])
    @require_auth_if_configured
    def comfort_index():
        try:
            ranking = aggregator.get_ranking()
            return jsonify([record.to_dict() for record in ranking])
        except Exception:
            logging.exception("Error calculating comfort index")
            return jsonify({"message": "Error calculating comfort index"}), 500

    @app.route("/api/cache-status", methods=["GET"])
    def cache_status():
        return jsonify({
            "rawCache": service.cache.get_stats(),
            "processedCache": aggregator.cache.get_stats(),
        })

    return app
