"""
Data models for the Midnight Tracker booking sync.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Dict, Any, List
from enum import Enum


class BookingType(Enum):
    """Kinds of travel booking the parser recognises."""
    FLIGHT = "flight"
    HOTEL = "hotel"


class BookingSource(Enum):
    """Where a booking was scraped from."""
    CALENDAR = "calendar"
    EMAIL = "email"


class SyncMode(Enum):
    """Run modes sharing the same core logic."""
    PERIODIC = "periodic"
    BACKFILL = "backfill"


@dataclass
class RawItem:
    """A calendar event or email as handed over by an item source."""
    kind: BookingSource
    subject: str
    body_text: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location_text: str = ""
    folder_hint: Optional[BookingType] = None
    item_id: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.kind, str):
            self.kind = BookingSource(self.kind.lower())
        if isinstance(self.folder_hint, str):
            self.folder_hint = BookingType(self.folder_hint.lower())
        if isinstance(self.start_date, datetime):
            self.start_date = self.start_date.date()
        if isinstance(self.end_date, datetime):
            self.end_date = self.end_date.date()

    @property
    def text(self) -> str:
        """Combined text the classifier and extractors work on."""
        parts = [self.subject or "", self.body_text or ""]
        if self.kind == BookingSource.CALENDAR:
            parts.append(self.location_text or "")
        return " ".join(parts)


@dataclass
class Booking:
    """A single travel fact for one calendar day."""
    type: BookingType
    date: date
    source: BookingSource
    flights: List[str] = field(default_factory=list)
    city: str = ""
    country: str = ""
    place: str = ""
    raw: str = ""

    def __post_init__(self):
        if isinstance(self.type, str):
            self.type = BookingType(self.type.lower())
        if isinstance(self.source, str):
            self.source = BookingSource(self.source.lower())
        if isinstance(self.date, str):
            self.date = date.fromisoformat(self.date)

    @property
    def date_key(self) -> str:
        return self.date.isoformat()

    def __str__(self) -> str:
        label = self.place or ", ".join(self.flights) or "-"
        return (f"{self.date_key} | {self.type.value:<6} | {label[:30]:<30} | "
                f"{(self.city or '?')[:15]:<15} | {self.country or '?'} | {self.source.value}")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class LocationRecord:
    """
    Persisted per-day location entry.

    Field names follow Python conventions; ``to_dict``/``from_dict`` map them
    to the camelCase keys the tracker web app stores.
    """
    place: str = ""
    city: str = ""
    country: str = ""
    flights: str = ""
    notes: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    working: Optional[bool] = None
    auto_gps: bool = False
    auto_booking: bool = False
    booking_source: str = ""
    country_conflict: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    KNOWN_KEYS = (
        "place", "city", "country", "flights", "notes", "lat", "lon", "working",
        "autoGps", "autoBooking", "bookingSource", "countryConflict",
    )

    @property
    def is_manual(self) -> bool:
        """A human set this day; the sync engine must leave it alone."""
        return bool(self.city) and not self.auto_gps and not self.auto_booking

    @classmethod
    def from_dict(cls, data: Any) -> "LocationRecord":
        """Build a record from stored data, treating missing or odd fields as empty."""
        if not isinstance(data, dict):
            return cls()

        working = data.get("working")
        return cls(
            place=_as_text(data.get("place")),
            city=_as_text(data.get("city")),
            country=_as_text(data.get("country")),
            flights=_as_text(data.get("flights")),
            notes=_as_text(data.get("notes")),
            lat=_as_float(data.get("lat")),
            lon=_as_float(data.get("lon")),
            working=bool(working) if working is not None else None,
            auto_gps=bool(data.get("autoGps", False)),
            auto_booking=bool(data.get("autoBooking", False)),
            booking_source=_as_text(data.get("bookingSource")),
            country_conflict=data.get("countryConflict") or None,
            extra={k: v for k, v in data.items() if k not in cls.KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored representation; optional fields only when set."""
        data: Dict[str, Any] = dict(self.extra)
        data.update({
            "place": self.place,
            "city": self.city,
            "country": self.country,
            "flights": self.flights,
            "notes": self.notes,
            "autoBooking": self.auto_booking,
            "bookingSource": self.booking_source,
        })
        if self.lat is not None:
            data["lat"] = self.lat
        if self.lon is not None:
            data["lon"] = self.lon
        if self.working is not None:
            data["working"] = self.working
        if self.auto_gps:
            data["autoGps"] = self.auto_gps
        if self.country_conflict:
            data["countryConflict"] = self.country_conflict
        return data


@dataclass
class SyncSummary:
    """Result of one sync run."""
    updates_applied: int = 0
    new_count: int = 0
    merged_count: int = 0
    skipped_count: int = 0
    bookings_found: int = 0
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updates_applied": self.updates_applied,
            "new_count": self.new_count,
            "merged_count": self.merged_count,
            "skipped_count": self.skipped_count,
            "bookings_found": self.bookings_found,
            "dry_run": self.dry_run,
        }
