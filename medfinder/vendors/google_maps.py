"""Client utilities for the Google Maps web services (geocoding, places, distance matrix)."""

import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from medfinder.models import GeoLocation

logger = logging.getLogger(__name__)
_LOCAL = threading.local()
_BASE_URL = "https://maps.googleapis.com/maps/api"
_DETAIL_FIELDS = "name,formatted_address,formatted_phone_number,geometry"
_NEARBY_PLACE_TYPE = "doctor"


class GoogleMapsError(RuntimeError):
    """Raised when a Maps web service returns a non-successful response."""


class GeocodeError(GoogleMapsError):
    """The search address could not be resolved to coordinates."""


class PlacesSearchError(GoogleMapsError):
    """The nearby search itself failed."""


class PlaceDetailsError(GoogleMapsError):
    """A single place's detail lookup failed."""


class GoogleMapsClient:
    """Thin wrapper over the Maps JSON endpoints.

    Every call is a single GET with no retry; a non-OK ``status`` in the
    payload (``ZERO_RESULTS`` included) becomes the matching
    ``GoogleMapsError`` subclass.
    """

    def __init__(self, api_key: str, timeout: float = 10, session: Optional[requests.Session] = None) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.session = session

    def _session(self) -> requests.Session:
        """Injected session, else one ``requests.Session`` per worker thread."""
        if self.session is not None:
            return self.session
        session = getattr(_LOCAL, "session", None)
        if session is None:
            session = _LOCAL.session = requests.Session()
        return session

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {**params, "key": self.api_key}
        response = self._session().get(f"{_BASE_URL}/{path}/json", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def geocode(self, address: str) -> GeoLocation:
        try:
            payload = self._get("geocode", {"address": address})
        except (requests.RequestException, ValueError) as exc:
            raise GeocodeError(f"Failed to geocode address: {exc}") from exc

        status = payload.get("status")
        results = payload.get("results") or []
        if status != "OK" or not results:
            logger.error("geocode failed: status=%s, error_message=%s", status, payload.get("error_message"))
            raise GeocodeError("Failed to geocode address")

        location = results[0].get("geometry", {}).get("location", {})
        try:
            return GeoLocation(lat=float(location["lat"]), lng=float(location["lng"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodeError("Failed to geocode address") from exc

    def nearby_search(self, origin: GeoLocation, radius_meters: float, keyword: str) -> List[Dict[str, Any]]:
        params = {
            "location": f"{origin.lat},{origin.lng}",
            "radius": radius_meters,
            "type": _NEARBY_PLACE_TYPE,
            "keyword": keyword,
        }
        try:
            payload = self._get("place/nearbysearch", params)
        except (requests.RequestException, ValueError) as exc:
            raise PlacesSearchError(f"Places API error: {exc}") from exc

        status = payload.get("status")
        if status != "OK":
            logger.error("nearby_search failed: status=%s, error_message=%s", status, payload.get("error_message"))
            raise PlacesSearchError(f"Places API error: {status}")
        return payload.get("results", [])

    def place_details(self, place_id: str) -> Dict[str, Any]:
        try:
            payload = self._get("place/details", {"place_id": place_id, "fields": _DETAIL_FIELDS})
        except (requests.RequestException, ValueError) as exc:
            raise PlaceDetailsError(str(exc)) from exc

        status = payload.get("status")
        if status != "OK":
            logger.debug("place_details failed for %s: status=%s", place_id, status)
            raise PlaceDetailsError(payload.get("error_message") or status)
        return payload.get("result", {})

    def driving_distance_meters(self, origin: GeoLocation, destination: GeoLocation) -> Optional[float]:
        """Shortest OK element of a Distance Matrix response, or None when none is usable."""
        params = {
            "origins": f"{origin.lat},{origin.lng}",
            "destinations": f"{destination.lat},{destination.lng}",
        }
        payload = self._get("distancematrix", params)
        if payload.get("status") != "OK":
            logger.warning("distancematrix failed: status=%s", payload.get("status"))
            return None

        best: Optional[float] = None
        for row in payload.get("rows", []):
            for element in row.get("elements", []):
                if element.get("status") != "OK":
                    continue
                value = element.get("distance", {}).get("value")
                if value is not None and (best is None or value < best):
                    best = float(value)
        return best
