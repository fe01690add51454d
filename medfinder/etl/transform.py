"""Utilities for transforming Google Places responses into MedicalProfessional records."""

import logging
from typing import Any, Dict, Optional

from medfinder.models import PHONE_NOT_AVAILABLE, GeoLocation, MedicalProfessional

logger = logging.getLogger(__name__)


def _location_of(result: Dict[str, Any]) -> Optional[GeoLocation]:
    location = ((result or {}).get("geometry") or {}).get("location") or {}
    lat = location.get("lat")
    lng = location.get("lng")
    if lat is None or lng is None:
        return None
    try:
        return GeoLocation(lat=float(lat), lng=float(lng))
    except (TypeError, ValueError):
        return None


def resolve_location(candidate: Dict[str, Any], details: Dict[str, Any]) -> Optional[GeoLocation]:
    """Precise detail geometry when present, otherwise the candidate's coarse one."""
    return _location_of(details) or _location_of(candidate)


def to_professional(
    candidate: Dict[str, Any],
    details: Dict[str, Any],
    *,
    specialty: str,
    location: GeoLocation,
    distance: Optional[float],
) -> MedicalProfessional:
    details = details or {}
    return MedicalProfessional(
        name=details.get("name") or candidate.get("name") or "",
        address=details.get("formatted_address") or candidate.get("vicinity") or "",
        workplace=candidate.get("name") or "",
        phone=details.get("formatted_phone_number") or PHONE_NOT_AVAILABLE,
        specialty=specialty,
        latitude=location.lat,
        longitude=location.lng,
        distance=distance,
    )


def sort_by_distance(professionals):
    """Ascending by distance; records without one sort as 0, ties keep input order."""
    return sorted(professionals, key=lambda p: p.distance or 0)
