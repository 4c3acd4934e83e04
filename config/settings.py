"""
Configuration settings for the Midnight Tracker booking sync.
"""
import json
import os
from typing import Dict, Any, Tuple
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _split_env(name: str, default: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in os.getenv(name, default).split(",") if part.strip())


@dataclass
class GmailConfig:
    """IMAP settings for the mailbox holding travel confirmation folders."""
    email: str = os.getenv("GMAIL_EMAIL", "")
    password: str = os.getenv("GMAIL_PASSWORD", "")
    imap_server: str = os.getenv("GMAIL_IMAP_SERVER", "imap.gmail.com")
    imap_port: int = int(os.getenv("GMAIL_IMAP_PORT", "993"))

    # First existing folder wins
    hotel_folders: Tuple[str, ...] = field(
        default_factory=lambda: _split_env("HOTEL_FOLDERS", "Hotels,Hotel"))
    flight_folders: Tuple[str, ...] = field(
        default_factory=lambda: _split_env("FLIGHT_FOLDERS", "Flights,Flight"))
    max_messages_per_folder: int = int(os.getenv("MAX_MESSAGES_PER_FOLDER", "500"))


@dataclass
class CalendarConfig:
    """Google Calendar service account settings."""
    credentials_file: str = os.getenv("GOOGLE_CREDENTIALS_FILE", "config/google_credentials.json")
    calendar_id: str = os.getenv("GOOGLE_CALENDAR_ID", "primary")
    page_size: int = int(os.getenv("CALENDAR_PAGE_SIZE", "250"))


@dataclass
class FirebaseConfig:
    """Firebase Realtime Database settings."""
    service_account: str = os.getenv("FIREBASE_SERVICE_ACCOUNT", "")
    database_url: str = os.getenv("FIREBASE_DATABASE_URL", "")
    locations_path: str = "locations"
    settings_path: str = "settings"

    def get_credentials_dict(self) -> Dict[str, Any]:
        """
        Service account credentials.

        FIREBASE_SERVICE_ACCOUNT may hold the JSON document itself or a path to it.
        """
        value = self.service_account.strip()
        if not value:
            return {}
        if value.startswith("{"):
            return json.loads(value)
        with open(value, "r", encoding="utf-8") as fh:
            return json.load(fh)


@dataclass
class SyncConfig:
    """Sync window and parsing settings."""
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Periodic run windows
    days_ahead: int = int(os.getenv("SYNC_DAYS_AHEAD", "90"))
    days_back: int = int(os.getenv("SYNC_DAYS_BACK", "7"))
    calendar_days_back: int = int(os.getenv("SYNC_CALENDAR_DAYS_BACK", "3"))

    # Backfill floor: start of the UK tax year
    tax_year_start: str = os.getenv("TAX_YEAR_START", "2025-04-06")

    # Dates found in free text outside these years are ignored
    year_min: int = int(os.getenv("BOOKING_YEAR_MIN", "2025"))
    year_max: int = int(os.getenv("BOOKING_YEAR_MAX", "2028"))

    audit_snippet_length: int = 120

    last_sync_keys: Dict[str, str] = None

    def __post_init__(self):
        if self.last_sync_keys is None:
            self.last_sync_keys = {
                "periodic": "lastBookingSync",
                "backfill": "lastBackfill",
            }


gmail_config = GmailConfig()
calendar_config = CalendarConfig()
firebase_config = FirebaseConfig()
sync_config = SyncConfig()
