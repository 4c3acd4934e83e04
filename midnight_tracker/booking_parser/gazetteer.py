"""
Airport code lookup used to turn flight routes into a destination city and country.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Airport:
    """City and country an airport serves."""
    city: str
    country: str


DEFAULT_AIRPORTS: Tuple[Tuple[str, str, str], ...] = (
    ("LHR", "London", "UK"), ("LGW", "London", "UK"),
    ("STN", "London", "UK"), ("LTN", "London", "UK"),
    ("LCY", "London", "UK"), ("MXP", "Milan", "Italy"),
    ("FCO", "Rome", "Italy"), ("BKK", "Bangkok", "Thailand"),
    ("DMK", "Bangkok", "Thailand"), ("CDG", "Paris", "France"),
    ("ORY", "Paris", "France"), ("AMS", "Amsterdam", "Netherlands"),
    ("FRA", "Frankfurt", "Germany"), ("MUC", "Munich", "Germany"),
    ("BCN", "Barcelona", "Spain"), ("MAD", "Madrid", "Spain"),
    ("ZRH", "Zurich", "Switzerland"), ("GVA", "Geneva", "Switzerland"),
    ("IST", "Istanbul", "Turkey"), ("DXB", "Dubai", "UAE"),
    ("SIN", "Singapore", "Singapore"), ("HKG", "Hong Kong", "Hong Kong"),
    ("NRT", "Tokyo", "Japan"), ("HND", "Tokyo", "Japan"),
    ("ICN", "Seoul", "South Korea"), ("TPE", "Taipei", "Taiwan"),
    ("DEL", "Delhi", "India"), ("BOM", "Mumbai", "India"),
    ("JFK", "New York", "USA"), ("LAX", "Los Angeles", "USA"),
    ("SFO", "San Francisco", "USA"), ("ORD", "Chicago", "USA"),
    ("SYD", "Sydney", "Australia"), ("MEL", "Melbourne", "Australia"),
    ("YYZ", "Toronto", "Canada"), ("LIS", "Lisbon", "Portugal"),
    ("ATH", "Athens", "Greece"), ("VCE", "Venice", "Italy"),
    ("NAP", "Naples", "Italy"), ("BGY", "Milan", "Italy"),
    ("LIN", "Milan", "Italy"), ("PMO", "Palermo", "Italy"),
    ("CTA", "Catania", "Italy"), ("BHX", "Birmingham", "UK"),
    ("MAN", "Manchester", "UK"), ("EDI", "Edinburgh", "UK"),
    ("OXF", "Oxford", "UK"),
)


class AirportGazetteer:
    """
    Immutable airport code -> Airport lookup.

    Iteration follows the order the table was built in; destination fallback
    logic depends on that order, not on where a code appears in the text.
    """

    def __init__(self, airports: Mapping[str, Airport]):
        self._airports: Mapping[str, Airport] = MappingProxyType(
            {code.upper(): airport for code, airport in airports.items()}
        )

    @classmethod
    def from_rows(cls, rows) -> "AirportGazetteer":
        """Build from (code, city, country) rows."""
        table: Dict[str, Airport] = {}
        for code, city, country in rows:
            table[code] = Airport(city=city, country=country)
        return cls(table)

    @classmethod
    def default(cls) -> "AirportGazetteer":
        return cls.from_rows(DEFAULT_AIRPORTS)

    def lookup(self, code: Optional[str]) -> Optional[Airport]:
        if not code:
            return None
        return self._airports.get(code.upper())

    def codes(self) -> Tuple[str, ...]:
        return tuple(self._airports)

    def __contains__(self, code) -> bool:
        return isinstance(code, str) and code.upper() in self._airports

    def __iter__(self) -> Iterator[str]:
        return iter(self._airports)

    def __len__(self) -> int:
        return len(self._airports)
