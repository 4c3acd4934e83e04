"""
Firebase Realtime Database access for the location log.
"""

from .location_store import LocationStore, RecordStoreError

__all__ = ['LocationStore', 'RecordStoreError']
