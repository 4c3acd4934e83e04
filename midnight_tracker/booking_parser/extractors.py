"""
Text extractors for travel confirmations.

All functions are total: no match yields None or an empty list, never an
exception. Callers uppercase the text before looking for flight numbers and
airport codes.
"""
import re
from typing import List, Optional

from .gazetteer import Airport, AirportGazetteer

FLIGHT_PATTERN = re.compile(r'\b([A-Z]{2})(\d{1,4})\b')

ROUTE_PATTERN = re.compile(
    r'\b([A-Z]{3})\b\s*(?:to|→|->|>|–|—|-)\s*([A-Z]{3})\b',
    re.IGNORECASE
)
ARRIVAL_PATTERN = re.compile(
    r'(?:arriving|arr\.?|destination)\s*:?\s*([A-Z]{3})\b',
    re.IGNORECASE
)

HOTEL_NAME_PATTERNS = [
    re.compile(
        r'(?:booking|reservation|confirmation)\s+(?:at|for)\s+(.+?)'
        r'(?:\s*[-–|,]|\s+in\s+|\s+on\s+|$)',
        re.IGNORECASE
    ),
    re.compile(
        r'(?:hotel|resort|inn|lodge|hostel|apartment|residence|suites?)\s*:?\s*(.+?)'
        r'(?:\s*[-–|,]|$)',
        re.IGNORECASE
    ),
    re.compile(
        r'(?:your stay at|check.?in at|welcome to)\s+(.+?)'
        r'(?:\s*[-–|,]|\s+on\s+|$)',
        re.IGNORECASE
    ),
]

CITY_PATTERN = re.compile(r'\bin\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)')

HOTEL_NAME_MIN_LENGTH = 2
HOTEL_NAME_MAX_LENGTH = 80


def extract_flights(text: Optional[str]) -> List[str]:
    """
    Flight designators such as BA123 or LH1234, unique, in first-seen order.
    """
    if not text:
        return []

    flights: List[str] = []
    for carrier, number in FLIGHT_PATTERN.findall(text):
        code = carrier + number
        if code not in flights:
            flights.append(code)
    return flights


def extract_airports(text: Optional[str], gazetteer: AirportGazetteer) -> List[str]:
    """Known airport codes appearing as standalone words, in gazetteer order."""
    if not text:
        return []
    return [code for code in gazetteer if re.search(r'\b' + code + r'\b', text)]


def extract_destination(text: Optional[str], gazetteer: AirportGazetteer) -> Optional[Airport]:
    """
    Resolve the arrival city of a flight.

    Tries an explicit route ("LHR to MXP", "LHR → MXP", "LHR - MXP"), then an
    arrival label ("Arriving: MXP"), then falls back to the airport codes
    mentioned anywhere: the last one wins when there are several, since
    confirmations list the origin before the destination.
    """
    if not text:
        return None

    for match in ROUTE_PATTERN.finditer(text):
        airport = gazetteer.lookup(match.group(2))
        if airport:
            return airport

    for match in ARRIVAL_PATTERN.finditer(text):
        airport = gazetteer.lookup(match.group(1))
        if airport:
            return airport

    airports = extract_airports(text.upper(), gazetteer)
    if airports:
        return gazetteer.lookup(airports[-1])
    return None


def extract_hotel_name(text: Optional[str]) -> Optional[str]:
    """Hotel or venue name from a confirmation subject or body."""
    if not text:
        return None

    for pattern in HOTEL_NAME_PATTERNS:
        match = pattern.search(text)
        if match:
            name = match.group(1).strip()
            if HOTEL_NAME_MIN_LENGTH < len(name) < HOTEL_NAME_MAX_LENGTH:
                return name
    return None


def extract_city(text: Optional[str]) -> Optional[str]:
    """City from an "in <City>" phrase, one or two capitalised words."""
    if not text:
        return None
    match = CITY_PATTERN.search(text)
    return match.group(1) if match else None
