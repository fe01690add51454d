"""Proximity search: geocode, nearby search, per-candidate enrichment and ranking."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import requests

from medfinder.core.config import Settings, get_settings, require_api_key
from medfinder.core.geo import distance_km
from medfinder.etl.transform import resolve_location, sort_by_distance, to_professional
from medfinder.models import GeoLocation, MedicalProfessional, SearchParams
from medfinder.vendors.google_maps import GoogleMapsClient, GoogleMapsError

logger = logging.getLogger(__name__)


class ProfessionalSearch:
    """Runs one search against an injected maps client.

    Detail lookups fan out over a bounded thread pool; each candidate is
    isolated so a failing lookup only drops that candidate.
    """

    def __init__(self, client: GoogleMapsClient, *, max_workers: int = 8, distance_mode: str = "haversine") -> None:
        self.client = client
        self.max_workers = max(1, max_workers)
        self.distance_mode = distance_mode

    def search(self, params: SearchParams) -> List[MedicalProfessional]:
        params.validate()

        origin = self.client.geocode(params.address)
        logger.info("Geocoded %r to %s,%s", params.address, origin.lat, origin.lng)

        candidates = self.client.nearby_search(origin, params.radius_meters, params.specialty)
        logger.info("Nearby search returned %d candidates for specialty=%s", len(candidates), params.specialty)
        if not candidates:
            return []

        workers = min(self.max_workers, len(candidates))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._assemble, candidate, origin, params.specialty) for candidate in candidates
            ]
            professionals = []
            for candidate, future in zip(candidates, futures):
                try:
                    professional = future.result()
                except Exception as exc:  # noqa: BLE001
                    logger.warning("Failed to assemble %s: %s", candidate.get("place_id"), exc)
                    continue
                if professional is not None:
                    professionals.append(professional)

        dropped = len(candidates) - len(professionals)
        if dropped:
            logger.info("Dropped %d of %d candidates", dropped, len(candidates))
        return sort_by_distance(professionals)

    def _assemble(self, candidate: Dict[str, Any], origin: GeoLocation, specialty: str) -> Optional[MedicalProfessional]:
        place_id = candidate.get("place_id")
        if not place_id:
            logger.debug("Skipping candidate without place_id: %s", candidate.get("name"))
            return None

        try:
            details = self.client.place_details(place_id)
        except (GoogleMapsError, requests.RequestException, ValueError) as exc:
            logger.warning("Failed to fetch details for %s: %s", place_id, exc)
            return None

        location = resolve_location(candidate, details)
        if location is None:
            logger.warning("Skipping %s without coordinates", place_id)
            return None

        return to_professional(
            candidate,
            details,
            specialty=specialty,
            location=location,
            distance=self._distance(origin, location),
        )

    def _distance(self, origin: GeoLocation, location: GeoLocation) -> Optional[float]:
        if self.distance_mode != "driving":
            return distance_km(origin.lat, origin.lng, location.lat, location.lng)
        try:
            meters = self.client.driving_distance_meters(origin, location)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Driving distance lookup failed: %s", exc)
            return None
        return meters / 1000 if meters is not None else None


def build_search(settings: Optional[Settings] = None) -> ProfessionalSearch:
    settings = settings or get_settings()
    client = GoogleMapsClient(require_api_key(settings), timeout=settings.http_timeout_seconds)
    return ProfessionalSearch(
        client,
        max_workers=settings.max_detail_workers,
        distance_mode=settings.distance_mode,
    )


def search_professionals(params: SearchParams, settings: Optional[Settings] = None) -> List[MedicalProfessional]:
    """Search using a client built from environment settings."""
    return build_search(settings).search(params)
