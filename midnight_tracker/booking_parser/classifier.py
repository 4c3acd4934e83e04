"""
Decides whether a calendar event or email describes a flight, a hotel stay, or neither.
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..utils.models import BookingSource, BookingType
from .extractors import extract_flights

CAR_RENTAL_PATTERN = re.compile(
    r'\b(car\s*rental|hertz|avis|europcar|sixt|enterprise|rent.?a.?car|'
    r'pick.?up.*drop.?off|vehicle\s*collect)',
    re.IGNORECASE
)

FLIGHT_KEYWORDS_PATTERN = re.compile(
    r'\b(flight|fly|depart|arrive|airport|boarding|'
    r'BA\d|EK\d|LH\d|AF\d|AZ\d|FR\d|U2\d|QR\d|EY\d|SQ\d|CX\d|TK\d)',
    re.IGNORECASE
)
EMAIL_FLIGHT_KEYWORDS_PATTERN = re.compile(
    r'\b(itinerary|boarding|e-?ticket|airline)',
    re.IGNORECASE
)

HOTEL_KEYWORDS_PATTERN = re.compile(
    r'\b(hotel|check.?in|check.?out|booking|reservation|stay|accommodation|airbnb|nights?)',
    re.IGNORECASE
)


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one item."""
    is_flight: bool = False
    is_hotel: bool = False
    excluded: bool = False

    @property
    def discard(self) -> bool:
        return self.excluded or not (self.is_flight or self.is_hotel)


class Classifier(ABC):
    """Capability interface so rule tables or models can replace the regexes."""

    @abstractmethod
    def classify(
        self,
        text: str,
        context: BookingSource,
        folder_hint: Optional[BookingType] = None
    ) -> Classification:
        """Classify combined subject/body/location text."""


class RegexClassifier(Classifier):
    """Keyword classifier for English travel confirmations."""

    def classify(
        self,
        text: str,
        context: BookingSource,
        folder_hint: Optional[BookingType] = None
    ) -> Classification:
        text = text or ""

        # Car rentals mention airports and reservations; never count them
        if CAR_RENTAL_PATTERN.search(text):
            return Classification(excluded=True)

        is_flight = folder_hint == BookingType.FLIGHT or bool(FLIGHT_KEYWORDS_PATTERN.search(text))
        if not is_flight and context == BookingSource.EMAIL:
            is_flight = (bool(EMAIL_FLIGHT_KEYWORDS_PATTERN.search(text))
                         or bool(extract_flights(text.upper())))

        is_hotel = folder_hint == BookingType.HOTEL or bool(HOTEL_KEYWORDS_PATTERN.search(text))

        return Classification(is_flight=is_flight, is_hotel=is_hotel)
