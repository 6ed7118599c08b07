"""Value types shared by the Brave client, the formatters and the tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Per-call limit of the /local/pois and /local/descriptions endpoints
MAX_IDS_PER_REQUEST = 20

MIN_RESULT_COUNT = 1
MAX_RESULT_COUNT = 20


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class SearchQuery:
    """Immutable input of a local search."""

    text: str
    result_count: int = 10

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("Search query must not be empty")
        if not MIN_RESULT_COUNT <= self.result_count <= MAX_RESULT_COUNT:
            raise ValueError(
                f"result_count must be between {MIN_RESULT_COUNT} and {MAX_RESULT_COUNT}, "
                f"got {self.result_count}"
            )


@dataclass(frozen=True)
class DayHours:
    """One opening interval of one weekday."""

    abbr_name: str
    full_name: str
    opens: str
    closes: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DayHours":
        return cls(
            abbr_name=str(data.get("abbr_name") or ""),
            full_name=str(data.get("full_name") or ""),
            opens=str(data.get("opens") or ""),
            closes=str(data.get("closes") or ""),
        )

    @property
    def interval(self) -> str:
        return f"{self.opens}–{self.closes}"


@dataclass(frozen=True)
class OpeningHours:
    """Weekly schedule as returned by Brave.

    ``days`` holds one list of intervals per weekday, in the order the API
    returns them. ``today`` holds the intervals of the current day.
    """

    today: List[DayHours] = field(default_factory=list)
    days: List[List[DayHours]] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Any) -> Optional["OpeningHours"]:
        if not isinstance(data, dict):
            return None
        today = [DayHours.from_api(d) for d in data.get("current_day") or [] if isinstance(d, dict)]
        days = [
            [DayHours.from_api(d) for d in slot if isinstance(d, dict)]
            for slot in data.get("days") or []
            if isinstance(slot, list)
        ]
        if not today and not any(days):
            return None
        return cls(today=today, days=days)


@dataclass(frozen=True)
class PoiRecord:
    """Structured place attributes from /local/pois, keyed by location id."""

    location_id: str
    title: Optional[str] = None
    cuisines: List[str] = field(default_factory=list)
    display_address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    price_range: Optional[str] = None
    rating_value: Optional[float] = None
    review_count: Optional[int] = None
    opening_hours: Optional[OpeningHours] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any], location_id: str) -> "PoiRecord":
        """Build a record from one POI result.

        The POI endpoint does not echo the id back, so the caller supplies it.
        Malformed or missing fields become ``None`` instead of raising.
        """
        data = _as_dict(data)
        contact = _as_dict(data.get("contact"))
        rating = _as_dict(data.get("rating"))
        cuisines = data.get("serves_cuisine")
        return cls(
            location_id=location_id,
            title=_as_text(data.get("title")),
            cuisines=[str(c) for c in cuisines] if isinstance(cuisines, list) else [],
            display_address=_as_text(_as_dict(data.get("postal_address")).get("displayAddress")),
            phone=_as_text(contact.get("telephone")),
            email=_as_text(contact.get("email")),
            price_range=_as_text(data.get("price_range")),
            rating_value=rating.get("ratingValue"),
            review_count=rating.get("reviewCount"),
            opening_hours=OpeningHours.from_api(data.get("opening_hours")),
        )


@dataclass(frozen=True)
class PoiDescription:
    """Free-text description from /local/descriptions."""

    location_id: str
    description: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["PoiDescription"]:
        data = _as_dict(data)
        location_id = data.get("id")
        if not location_id:
            return None
        return cls(location_id=str(location_id), description=_as_text(data.get("description")))


@dataclass(frozen=True)
class MergedPoiView:
    """A POI record joined with its description, if one was returned."""

    record: PoiRecord
    description: Optional[PoiDescription] = None
