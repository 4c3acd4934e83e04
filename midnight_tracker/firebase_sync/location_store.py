"""
Firebase Realtime Database store for the per-day location log.
"""
import firebase_admin
from firebase_admin import credentials, db
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from ..utils.models import LocationRecord
from ..utils.logger import get_logger
from config.settings import firebase_config


class RecordStoreError(Exception):
    """The location log could not be read or written."""


class LocationStore:
    """Reads and writes ``locations/<YYYY-MM-DD>`` records."""

    APP_NAME = "midnight-tracker-sync"

    def __init__(self, dry_run: bool = False):
        self.logger = get_logger("location_store")
        self.app: Optional[firebase_admin.App] = None
        self.initialized = False
        self.dry_run = dry_run

    def initialize(self) -> bool:
        """
        Initialize the Firebase Admin app for the Realtime Database.

        Returns:
            True if initialization successful, False otherwise
        """
        if self.initialized:
            return True

        try:
            cred_dict = firebase_config.get_credentials_dict()
            if not cred_dict.get('project_id'):
                self.logger.error("Firebase service account not configured")
                return False
            if not firebase_config.database_url:
                self.logger.error("Firebase database URL not configured")
                return False

            try:
                self.app = firebase_admin.get_app(self.APP_NAME)
            except ValueError:
                self.app = firebase_admin.initialize_app(
                    credentials.Certificate(cred_dict),
                    {'databaseURL': firebase_config.database_url},
                    name=self.APP_NAME,
                )

            self.initialized = True
            self.logger.info("Firebase Realtime Database initialized",
                             project_id=cred_dict.get('project_id'))
            return True

        except Exception as e:
            self.logger.error("Failed to initialize Firebase", error=str(e))
            self.initialized = False
            return False

    def read_all(self) -> Dict[str, LocationRecord]:
        """
        Snapshot of every stored day.

        Raises:
            RecordStoreError: if the store cannot be reached. Merging against
                an empty snapshot would bypass the manual-entry protection.
        """
        self._require_initialized()
        try:
            raw = db.reference(firebase_config.locations_path, app=self.app).get() or {}
        except Exception as e:
            self.logger.error("Error reading location records", error=str(e))
            raise RecordStoreError(f"Failed to read location records: {e}") from e

        records = {date_key: LocationRecord.from_dict(value) for date_key, value in raw.items()}
        self.logger.info("Loaded location records", count=len(records))
        return records

    def apply_updates(self, updates: Dict[str, LocationRecord]) -> None:
        """
        Write all updated days in one multi-path update.

        Raises:
            RecordStoreError: if the write fails; nothing is retried
        """
        if not updates:
            return

        payload: Dict[str, Any] = {
            f"{firebase_config.locations_path}/{date_key}": record.to_dict()
            for date_key, record in updates.items()
        }

        if self.dry_run:
            self.logger.info("DRY RUN: Would update location records", count=len(payload))
            return

        self._require_initialized()
        try:
            db.reference(app=self.app).update(payload)
        except Exception as e:
            self.logger.error("Error writing location records", count=len(payload), error=str(e))
            raise RecordStoreError(f"Failed to write location records: {e}") from e

        self.logger.info("Updated location records", count=len(payload))

    def set_last_sync_timestamp(self, key: str = "lastBookingSync") -> Optional[str]:
        """Record when a sync finished under ``settings/<key>``."""
        timestamp = datetime.now(timezone.utc).isoformat()

        if self.dry_run:
            self.logger.info("DRY RUN: Would set sync timestamp", key=key, timestamp=timestamp)
            return timestamp

        self._require_initialized()
        try:
            db.reference(f"{firebase_config.settings_path}/{key}", app=self.app).set(timestamp)
        except Exception as e:
            self.logger.error("Error setting sync timestamp", key=key, error=str(e))
            raise RecordStoreError(f"Failed to set {key}: {e}") from e

        return timestamp

    def _require_initialized(self):
        if not self.initialized and not self.initialize():
            raise RecordStoreError("Firebase Realtime Database is not configured")
