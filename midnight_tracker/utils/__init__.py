"""
Utility modules for the Midnight Tracker booking sync.
"""

from .models import (
    BookingType, BookingSource, SyncMode, RawItem, Booking,
    LocationRecord, SyncSummary
)
from .logger import setup_logger, get_logger, SyncLogger

__all__ = [
    'BookingType', 'BookingSource', 'SyncMode', 'RawItem', 'Booking',
    'LocationRecord', 'SyncSummary', 'setup_logger', 'get_logger', 'SyncLogger'
]
