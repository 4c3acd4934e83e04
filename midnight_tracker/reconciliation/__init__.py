"""
Reconciliation of extracted bookings with the stored location log.
"""

from .engine import (
    ReconciliationEngine, ReconcileResult, reconcile, deduplicate_bookings,
    merge_flights, normalize_flights, DEFAULT_SOURCE_PRIORITY
)

__all__ = [
    'ReconciliationEngine', 'ReconcileResult', 'reconcile', 'deduplicate_bookings',
    'merge_flights', 'normalize_flights', 'DEFAULT_SOURCE_PRIORITY'
]
