"""Core data models shared by the search, filter and persistence layers."""

from __future__ import annotations

import hashlib
import math
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

MILES_TO_METERS = 1609.34
PHONE_NOT_AVAILABLE = "Not available"
DEFAULT_EXCLUDED_KEYWORDS: Tuple[str, ...] = ("cloudnine", "apollo")


@dataclass(frozen=True, slots=True)
class GeoLocation:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class MedicalProfessional:
    """Assembled search result.

    Instances are immutable; persisting one yields a copy carrying the
    storage-issued ``id`` and ``created_at``.
    """

    name: str
    address: str
    workplace: str
    phone: str
    specialty: str
    latitude: float
    longitude: float
    distance: Optional[float] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def record_key(self) -> str:
        """Content hash identifying this record within a search session."""
        parts = (
            " ".join((self.name or "").lower().split()),
            " ".join((self.address or "").lower().split()),
            f"{self.latitude:.6f}",
            f"{self.longitude:.6f}",
        )
        return hashlib.sha1("\x1f".join(parts).encode("utf-8")).hexdigest()

    def with_persisted(self, record_id: Any, created_at: Optional[datetime]) -> "MedicalProfessional":
        return replace(self, id=str(record_id) if record_id is not None else None, created_at=created_at)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.created_at is not None:
            data["created_at"] = self.created_at.isoformat()
        data["record_key"] = self.record_key
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MedicalProfessional":
        """Build a record from a JSON-like mapping, raising ValueError on bad coordinates."""
        try:
            latitude = float(data["latitude"])
            longitude = float(data["longitude"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError("latitude and longitude are required numeric fields") from exc

        distance_raw = data.get("distance")
        distance = float(distance_raw) if distance_raw is not None else None
        created_raw = data.get("created_at")
        created_at = datetime.fromisoformat(created_raw) if isinstance(created_raw, str) else created_raw

        return cls(
            name=str(data.get("name") or ""),
            address=str(data.get("address") or ""),
            workplace=str(data.get("workplace") or ""),
            phone=str(data.get("phone") or ""),
            specialty=str(data.get("specialty") or ""),
            latitude=latitude,
            longitude=longitude,
            distance=distance,
            id=str(data["id"]) if data.get("id") is not None else None,
            created_at=created_at,
        )


@dataclass(frozen=True, slots=True)
class SearchParams:
    address: str
    radius: float
    specialty: str

    @property
    def radius_meters(self) -> float:
        return float(self.radius) * MILES_TO_METERS

    def validate(self) -> None:
        missing = [name for name in ("address", "specialty") if not str(getattr(self, name) or "").strip()]
        if missing:
            raise ValueError(f"missing fields: {', '.join(missing)}")
        try:
            radius = float(self.radius)
        except (TypeError, ValueError) as exc:
            raise ValueError("radius must be numeric") from exc
        if not math.isfinite(radius) or radius <= 0:
            raise ValueError("radius must be a positive number")


def _normalise_keywords(keywords: Iterable[str]) -> Tuple[str, ...]:
    seen: List[str] = []
    for keyword in keywords:
        cleaned = str(keyword).strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return tuple(seen)


@dataclass(frozen=True, slots=True)
class FilterConfig:
    exclude_empty_fields: bool = True
    excluded_keywords: Tuple[str, ...] = DEFAULT_EXCLUDED_KEYWORDS

    def __post_init__(self) -> None:
        object.__setattr__(self, "excluded_keywords", _normalise_keywords(self.excluded_keywords))

    def with_keyword(self, keyword: str) -> "FilterConfig":
        return replace(self, excluded_keywords=self.excluded_keywords + (keyword,))

    def without_keyword(self, keyword: str) -> "FilterConfig":
        target = str(keyword).strip().lower()
        return replace(self, excluded_keywords=tuple(k for k in self.excluded_keywords if k != target))


@dataclass(slots=True)
class FilteredResults:
    included: List[MedicalProfessional] = field(default_factory=list)
    excluded: List[MedicalProfessional] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "included": [p.to_dict() for p in self.included],
            "excluded": [p.to_dict() for p in self.excluded],
            "total": len(self.included) + len(self.excluded),
        }


@dataclass(slots=True)
class SaveResult:
    """Outcome of a save; persistence errors are reported here, never raised."""

    success: bool
    data: List[MedicalProfessional] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "data": [p.to_dict() for p in self.data],
            "error": self.error,
        }
