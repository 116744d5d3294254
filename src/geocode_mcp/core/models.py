from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Candidate:
    text: str
    strategy: str
    rank: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "strategy": self.strategy, "rank": self.rank}


def _to_float(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _pick_str(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float | None
    longitude: float | None
    display_name: str | None = None
    importance: float | None = None
    place_class: str | None = None
    place_type: str | None = None

    # backend item as received (debug/extension)
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_usable(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_payload(cls, item: dict[str, Any]) -> GeocodeResult:
        """
        Build a result from one Nominatim search item.

        ``lat``/``lon`` arrive as strings; anything that does not parse to a
        finite number leaves the coordinate empty and the result unusable.
        """
        return cls(
            latitude=_to_float(item.get("lat")),
            longitude=_to_float(item.get("lon")),
            display_name=_pick_str(item.get("display_name")),
            importance=_to_float(item.get("importance")),
            place_class=_pick_str(item.get("class")),
            place_type=_pick_str(item.get("type")),
            raw=item,
        )


@dataclass(frozen=True)
class CachedLocation:
    latitude: float
    longitude: float
    display_address: str | None = None
    geocode_address: str | None = None

    @classmethod
    def parse(
        cls,
        latitude: Any,
        longitude: Any,
        display_address: str | None = None,
        geocode_address: str | None = None,
    ) -> CachedLocation | None:
        lat = _to_float(latitude)
        lon = _to_float(longitude)
        if lat is None or lon is None:
            return None
        return cls(
            latitude=lat,
            longitude=lon,
            display_address=_pick_str(display_address),
            geocode_address=_pick_str(geocode_address),
        )


@dataclass(frozen=True)
class ResolutionOutcome:
    candidate: Candidate | None
    result: GeocodeResult | None
    attempts_made: int
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.result is not None and self.result.is_usable

    @property
    def latitude(self) -> float | None:
        return self.result.latitude if self.result else None

    @property
    def longitude(self) -> float | None:
        return self.result.longitude if self.result else None

    @property
    def display_name(self) -> str | None:
        return self.result.display_name if self.result else None

    @classmethod
    def failure(cls, attempts_made: int) -> ResolutionOutcome:
        return cls(candidate=None, result=None, attempts_made=attempts_made)

    @classmethod
    def from_cache_entry(cls, address: str, entry: CachedLocation) -> ResolutionOutcome:
        result = GeocodeResult(
            latitude=entry.latitude,
            longitude=entry.longitude,
            display_name=entry.display_address or address,
        )
        candidate = Candidate(text=entry.geocode_address or address, strategy="cache")
        return cls(candidate=candidate, result=result, attempts_made=0, from_cache=True)

    def to_dict(self) -> dict[str, Any]:
        if not self.ok:
            return {"ok": False, "attempts_made": self.attempts_made}

        return {
            "ok": True,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "display_name": self.display_name,
            "successful_address": self.candidate.text if self.candidate else None,
            "strategy": self.candidate.strategy if self.candidate else None,
            "attempts_made": self.attempts_made,
            "from_cache": self.from_cache,
        }


@dataclass(frozen=True)
class AddressDiagnosis:
    address: str
    is_valid: bool
    problems: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "is_valid": self.is_valid, "problems": list(self.problems)}


@dataclass(frozen=True)
class BatchSummary:
    outcomes: list[ResolutionOutcome]
    resolved: int
    cached: int
    failed: int

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "resolved": self.resolved,
            "cached": self.cached,
            "failed": self.failed,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
