"""
Merges extracted bookings into the per-day location log.

The engine fills gaps and never overwrites: a day a human set is left alone,
existing place/city/country always win over booking data, flights are a
union, and the audit trail only grows.
"""
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..utils.models import Booking, BookingSource, BookingType, LocationRecord
from ..utils.logger import get_logger
from config.settings import sync_config

DEFAULT_SOURCE_PRIORITY: Tuple[BookingSource, ...] = (BookingSource.CALENDAR, BookingSource.EMAIL)

AUDIT_SEPARATOR = " | "

FlightsValue = Union[str, Iterable[str], None]


def flight_list(value: FlightsValue) -> List[str]:
    """Split a comma/space separated string (or list of them) into unique codes."""
    if not value:
        return []
    chunks = [value] if isinstance(value, str) else [str(v) for v in value]

    flights: List[str] = []
    for chunk in chunks:
        for code in re.split(r'[,\s]+', chunk):
            if code and code not in flights:
                flights.append(code)
    return flights


def normalize_flights(value: FlightsValue) -> str:
    return ", ".join(flight_list(value))


def merge_flights(existing: FlightsValue, new: FlightsValue) -> str:
    """Union of two flight sets, rendered comma-joined in first-seen order."""
    return normalize_flights(flight_list(existing) + flight_list(new))


def append_audit(existing: str, source_info: str) -> str:
    """Append a source line to an audit trail unless it is already there."""
    if not existing:
        return source_info
    if source_info in existing:
        return existing
    return existing + AUDIT_SEPARATOR + source_info


def deduplicate_bookings(
    bookings: Sequence[Booking],
    source_priority: Sequence[BookingSource] = DEFAULT_SOURCE_PRIORITY
) -> List[Booking]:
    """
    Collapse bookings sharing a (date, type).

    The booking from the highest priority source is kept; flight numbers from
    the others are folded into it. Input bookings are not modified.
    """
    rank = {source: index for index, source in enumerate(source_priority)}
    ordered = sorted(bookings, key=lambda b: rank.get(b.source, len(rank)))

    kept: Dict[Tuple[str, BookingType], Booking] = {}
    result: List[Booking] = []
    for booking in ordered:
        key = (booking.date_key, booking.type)
        first = kept.get(key)
        if first is None:
            first = replace(booking, flights=list(booking.flights))
            kept[key] = first
            result.append(first)
        elif booking.flights:
            first.flights = flight_list(first.flights + list(booking.flights))
    return result


@dataclass
class ReconcileResult:
    """Update set for the record store plus run counters."""
    updates: Dict[str, LocationRecord] = field(default_factory=dict)
    new_count: int = 0
    merged_count: int = 0
    skipped_count: int = 0
    conflicts: Dict[str, str] = field(default_factory=dict)


class ReconciliationEngine:
    """Diffs bookings against existing records and produces minimal upserts."""

    def __init__(self, audit_snippet_length: Optional[int] = None):
        self.logger = get_logger("reconciliation")
        self.audit_snippet_length = (audit_snippet_length if audit_snippet_length is not None
                                     else sync_config.audit_snippet_length)

    def reconcile(
        self,
        existing: Mapping[str, Any],
        bookings: Iterable[Booking]
    ) -> ReconcileResult:
        """
        Merge bookings into the existing per-day records.

        Args:
            existing: Snapshot of the store keyed by ISO date; values may be
                LocationRecord objects or raw stored dicts
            bookings: Deduplicated bookings for this run

        Returns:
            ReconcileResult whose ``updates`` holds only dates that changed
        """
        result = ReconcileResult()

        for booking in bookings:
            key = booking.date_key
            pending = key in result.updates
            current = result.updates[key] if pending else self._as_record(existing.get(key))

            if current is not None and current.is_manual:
                result.skipped_count += 1
                self.logger.debug("Skipping manually set day", date=key, city=current.city)
                continue

            merged = self.merge(current, booking)

            if merged.country_conflict and (current is None or
                                            merged.country_conflict != current.country_conflict):
                result.conflicts[key] = merged.country_conflict
                self.logger.debug("Country conflict", date=key, conflict=merged.country_conflict)

            if not self._adds_information(current, merged):
                result.skipped_count += 1
                continue

            result.updates[key] = merged
            if current is None:
                result.new_count += 1
            else:
                result.merged_count += 1

        self.logger.info("Reconciled bookings",
                         updates=len(result.updates),
                         new=result.new_count,
                         merged=result.merged_count,
                         skipped=result.skipped_count)
        return result

    def merge(self, current: Optional[LocationRecord], booking: Booking) -> LocationRecord:
        """Merged record for one booking; ``current`` is never modified."""
        base = current or LocationRecord()
        source_info = f"{booking.source.value}: {(booking.raw or '')[:self.audit_snippet_length]}"

        merged = LocationRecord(
            place=base.place or booking.place or "",
            city=base.city or booking.city or "",
            country=base.country or booking.country or "",
            flights=merge_flights(base.flights, booking.flights),
            notes=base.notes,
            lat=base.lat,
            lon=base.lon,
            working=base.working,
            auto_gps=base.auto_gps,
            auto_booking=True,
            booking_source=append_audit(base.booking_source, source_info),
            country_conflict=base.country_conflict,
            extra=dict(base.extra),
        )

        if base.auto_gps and base.country and booking.country and base.country != booking.country:
            merged.country_conflict = f"GPS says {base.country}, booking says {booking.country}"

        return merged

    def _adds_information(self, current: Optional[LocationRecord], merged: LocationRecord) -> bool:
        if current is None:
            return True
        for name in ("place", "city", "country", "booking_source", "country_conflict"):
            if getattr(current, name) != getattr(merged, name):
                return True
        return set(flight_list(current.flights)) != set(flight_list(merged.flights))

    def _as_record(self, value: Any) -> Optional[LocationRecord]:
        if value is None:
            return None
        if isinstance(value, LocationRecord):
            return value
        return LocationRecord.from_dict(value)


def reconcile(existing: Mapping[str, Any], bookings: Iterable[Booking]) -> ReconcileResult:
    """Reconcile with a default engine."""
    return ReconciliationEngine().reconcile(existing, bookings)
