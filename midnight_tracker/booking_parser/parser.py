"""
Booking parser turning calendar events and travel emails into per-day bookings.
"""
import re
from datetime import date
from typing import Optional, List

from ..utils.models import RawItem, Booking, BookingType, BookingSource
from ..utils.logger import get_logger
from .classifier import Classifier, RegexClassifier
from .dates import expand_nights, extract_dates_from_free_text, stay_bounds
from .extractors import (
    extract_city, extract_destination, extract_flights, extract_hotel_name
)
from .gazetteer import AirportGazetteer
from config.settings import sync_config


class BookingParser:
    """Parser for extracting flight and hotel bookings from raw items."""

    def __init__(
        self,
        gazetteer: Optional[AirportGazetteer] = None,
        classifier: Optional[Classifier] = None,
        year_min: Optional[int] = None,
        year_max: Optional[int] = None,
        date_floor: Optional[date] = None
    ):
        self.logger = get_logger("booking_parser")
        self.gazetteer = gazetteer or AirportGazetteer.default()
        self.classifier = classifier or RegexClassifier()
        self.year_min = year_min if year_min is not None else sync_config.year_min
        self.year_max = year_max if year_max is not None else sync_config.year_max
        self.date_floor = date_floor

    def parse_item(self, item: RawItem) -> List[Booking]:
        """
        Parse one calendar event or email.

        Args:
            item: Raw item from an item source

        Returns:
            Bookings found, one per flight and one per hotel night; empty when
            the item is not travel related or is a car rental
        """
        if item.kind == BookingSource.CALENDAR:
            return self.parse_calendar_event(item)
        return self.parse_email(item)

    def parse_calendar_event(self, item: RawItem) -> List[Booking]:
        """Bookings from a calendar event; its start/end bound a hotel stay."""
        text = self._clean_text(item.text)
        classification = self.classifier.classify(text, BookingSource.CALENDAR, item.folder_hint)
        if classification.discard:
            return []

        start = item.start_date
        if not start or not self._after_floor(start):
            return []

        bookings: List[Booking] = []
        upper = text.upper()

        if classification.is_flight:
            destination = extract_destination(upper, self.gazetteer)
            bookings.append(Booking(
                type=BookingType.FLIGHT,
                date=start,
                source=BookingSource.CALENDAR,
                flights=extract_flights(upper),
                city=destination.city if destination else (extract_city(text) or ""),
                country=destination.country if destination else "",
                raw=item.subject,
            ))

        if classification.is_hotel and item.end_date:
            hotel_name = extract_hotel_name(text) or ""
            city = extract_city(text) or item.location_text or ""
            for night in expand_nights(start, item.end_date):
                if not self._after_floor(night):
                    continue
                bookings.append(Booking(
                    type=BookingType.HOTEL,
                    date=night,
                    source=BookingSource.CALENDAR,
                    city=city,
                    place=hotel_name,
                    raw=item.subject,
                ))

        return bookings

    def parse_email(self, item: RawItem) -> List[Booking]:
        """Bookings from an email; dates come from the text itself."""
        text = self._clean_text(item.text)
        classification = self.classifier.classify(text, BookingSource.EMAIL, item.folder_hint)
        if classification.discard:
            return []

        dates = [d for d in extract_dates_from_free_text(text, self.year_min, self.year_max)
                 if self._after_floor(d)]
        if not dates:
            self.logger.debug("No usable dates in email", subject=item.subject[:60])
            return []

        bookings: List[Booking] = []
        upper = text.upper()

        if classification.is_flight:
            destination = extract_destination(upper, self.gazetteer)
            bookings.append(Booking(
                type=BookingType.FLIGHT,
                date=dates[0],
                source=BookingSource.EMAIL,
                flights=extract_flights(upper),
                city=destination.city if destination else "",
                country=destination.country if destination else "",
                raw=item.subject,
            ))

        if classification.is_hotel:
            check_in, check_out = stay_bounds(dates)
            hotel_name = extract_hotel_name(text) or ""
            city = extract_city(text) or ""
            for night in expand_nights(check_in, check_out):
                if not self._after_floor(night):
                    continue
                bookings.append(Booking(
                    type=BookingType.HOTEL,
                    date=night,
                    source=BookingSource.EMAIL,
                    city=city,
                    place=hotel_name,
                    raw=item.subject,
                ))

        return bookings

    def _after_floor(self, day: date) -> bool:
        return self.date_floor is None or day >= self.date_floor

    def _clean_text(self, text: str) -> str:
        """Collapse whitespace so single-line patterns see the whole body."""
        return re.sub(r'\s+', ' ', text or '').strip()
