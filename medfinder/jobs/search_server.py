"""HTTP entrypoint exposing search, re-filtering and saved-record endpoints."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

from flask import Flask, jsonify, request

from medfinder.core.config import ConfigError, get_settings
from medfinder.core.db import list_saved_professionals, save_professionals
from medfinder.core.filtering import filter_results, quick_filter
from medfinder.core.search import search_professionals
from medfinder.models import FilterConfig, MedicalProfessional, SearchParams
from medfinder.vendors.google_maps import GoogleMapsError

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

SEARCH_FAILED_MESSAGE = "An error occurred while searching. Please try again."

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, no DB connection."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "maps_configured": bool(settings.google_maps_api_key),
                "database_configured": bool(settings.database_url),
                "distance_mode": settings.distance_mode,
            }
        ),
        200,
    )


@app.post("/search")
def search() -> Any:
    """
    Run a proximity search and return the filtered partition.
    Required JSON fields: address, radius (miles), specialty
    Optional: exclude_empty_fields (bool), excluded_keywords (list), term (str)
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}

    required = ("address", "radius", "specialty")
    missing = [f for f in required if not payload.get(f)]
    if missing:
        return jsonify({"error": f"missing fields: {', '.join(missing)}"}), 400

    try:
        params = SearchParams(
            address=str(payload["address"]).strip(),
            radius=float(payload["radius"]),
            specialty=str(payload["specialty"]).strip(),
        )
        params.validate()
        config = _filter_config_from(payload)
    except (TypeError, ValueError) as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        results = search_professionals(params)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return jsonify({"error": "service is not configured"}), 500
    except GoogleMapsError as exc:
        logger.error("Search failed for address=%r: %s", params.address, exc)
        return jsonify({"error": SEARCH_FAILED_MESSAGE}), 502

    filtered = quick_filter(filter_results(results, config), payload.get("term"))
    return jsonify({"data": filtered.to_dict()}), 200


@app.post("/filter")
def refilter() -> Any:
    """Re-apply filter settings to a previously fetched result list without a new search."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    try:
        results = _professionals_from(payload.get("results") or [])
        config = _filter_config_from(payload)
    except (TypeError, ValueError) as exc:
        return jsonify({"error": str(exc)}), 400

    filtered = quick_filter(filter_results(results, config), payload.get("term"))
    return jsonify({"data": filtered.to_dict()}), 200


@app.post("/professionals")
def save() -> Any:
    """Save one ({"professional": {...}}) or many ({"professionals": [...]}) records."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    raw = payload.get("professionals")
    if raw is None and payload.get("professional") is not None:
        raw = [payload["professional"]]
    if not raw:
        return jsonify({"error": "professional or professionals is required"}), 400

    try:
        professionals = _professionals_from(raw)
    except (TypeError, ValueError) as exc:
        return jsonify({"error": str(exc)}), 400

    result = save_professionals(professionals)
    status = 201 if result.success else 500
    return jsonify(result.to_dict()), status


@app.get("/professionals")
def saved() -> Any:
    try:
        professionals = list_saved_professionals()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error fetching saved results: %s", exc)
        return jsonify({"error": "Failed to load saved professionals."}), 500
    return jsonify({"data": [p.to_dict() for p in professionals]}), 200


# ---------- Internals ----------


def _filter_config_from(payload: Dict[str, Any]) -> FilterConfig:
    settings = get_settings()
    keywords = payload.get("excluded_keywords", settings.default_excluded_keywords)
    if isinstance(keywords, str) or not isinstance(keywords, (list, tuple)):
        raise ValueError("excluded_keywords must be a list of strings")
    exclude_empty = payload.get("exclude_empty_fields", settings.default_exclude_empty_fields)
    if not isinstance(exclude_empty, bool):
        raise ValueError("exclude_empty_fields must be a boolean")
    return FilterConfig(exclude_empty_fields=exclude_empty, excluded_keywords=tuple(keywords))


def _professionals_from(raw: Any) -> List[MedicalProfessional]:
    if not isinstance(raw, list):
        raise ValueError("expected a list of professionals")
    if not all(isinstance(item, dict) for item in raw):
        raise ValueError("each professional must be an object")
    return [MedicalProfessional.from_dict(item) for item in raw]


def main() -> None:
    port = int(os.getenv("PORT") or get_settings().worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
