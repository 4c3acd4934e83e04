"""
Midnight Tracker Booking Sync.

Extracts flight and hotel bookings from calendar events and travel email
folders and merges them into the day-by-day residency log kept in Firebase.
"""

__version__ = "1.0.0"
__author__ = "Midnight Tracker"
__description__ = "Booking extraction and merge engine for tax-residency day counting"
