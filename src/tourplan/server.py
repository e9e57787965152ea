"""
HTTP API for route optimization and itinerary reordering.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from tourplan.data import generate_stops, stops_by_id
from tourplan.report import format_route
from tourplan.store import (
    ItemMismatchError,
    ItineraryExistsError,
    ItineraryNotFoundError,
    ItineraryStore,
    optimize_itinerary,
)
from tourplan.solver import NEAREST_NEIGHBOR, optimize_route

logger = logging.getLogger(__name__)


def _error(message: str, status: int):
    return jsonify({"status": "error", "message": message}), status


def create_app(store: Optional[ItineraryStore] = None, solver_config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    CORS(app)

    store = store if store is not None else ItineraryStore()
    solver_config = solver_config or {"strategy": NEAREST_NEIGHBOR, "max_solve_seconds": 5}

    def solver_args(body: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "strategy": body.get("strategy") or solver_config["strategy"],
            "max_solve_seconds": int(body.get("max_solve_seconds") or solver_config["max_solve_seconds"]),
        }

    @app.errorhandler(ItineraryNotFoundError)
    def handle_not_found(exc):
        return _error(str(exc), 404)

    @app.errorhandler(ItineraryExistsError)
    @app.errorhandler(ItemMismatchError)
    def handle_mismatch(exc):
        return _error(str(exc), 409)

    @app.errorhandler(ValueError)
    def handle_bad_request(exc):
        return _error(str(exc), 400)

    @app.route("/api/optimize", methods=["POST"])
    def api_optimize():
        body = request.get_json(force=True, silent=True) or {}
        stops = body.get("stops")
        if not isinstance(stops, list):
            return _error("'stops' must be a list", 400)
        result = optimize_route(stops, **solver_args(body))
        return jsonify(result)

    @app.route("/api/stops", methods=["GET"])
    def api_stops():
        count = int(request.args.get("count", 10))
        seed = int(request.args.get("seed", 999))
        return jsonify({"stops": generate_stops(seed=seed, n=count)})

    @app.route("/api/itineraries", methods=["POST"])
    def api_create_itinerary():
        body = request.get_json(force=True, silent=True) or {}
        items = body.get("items") or []
        if not isinstance(items, list):
            return _error("'items' must be a list", 400)
        itinerary = store.create_itinerary(body.get("name", "Untitled trip"), itinerary_id=body.get("id"), items=items)
        return jsonify(itinerary), 201

    @app.route("/api/itineraries/<itinerary_id>", methods=["GET"])
    def api_get_itinerary(itinerary_id: str):
        return jsonify(store.get_itinerary(itinerary_id))

    @app.route("/api/itineraries/<itinerary_id>/order", methods=["PUT"])
    def api_reorder_itinerary(itinerary_id: str):
        body = request.get_json(force=True, silent=True) or {}
        item_ids = body.get("item_ids")
        if not isinstance(item_ids, list):
            return _error("'item_ids' must be a list", 400)
        store.reorder_items(itinerary_id, item_ids)
        return jsonify(store.get_itinerary(itinerary_id))

    @app.route("/api/itineraries/<itinerary_id>/optimize", methods=["POST"])
    def api_optimize_itinerary(itinerary_id: str):
        body = request.get_json(force=True, silent=True) or {}
        result = optimize_itinerary(store, itinerary_id, **solver_args(body))
        if result["unlocated_ids"]:
            logger.info("Itinerary %s: %d stop(s) without location", itinerary_id, len(result["unlocated_ids"]))
        result["summary"] = format_route(result, stops_by_id(store.get_items(itinerary_id)))
        return jsonify(result)

    return app
