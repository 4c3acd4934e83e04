"""
Booking extraction: airport lookup, text extractors, classifier and parser.
"""

from .gazetteer import Airport, AirportGazetteer
from .classifier import Classification, Classifier, RegexClassifier
from .parser import BookingParser

__all__ = [
    'Airport', 'AirportGazetteer', 'Classification', 'Classifier',
    'RegexClassifier', 'BookingParser'
]
