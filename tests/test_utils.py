"""
Unit tests for utility modules.
"""
import logging
import pytest
from unittest.mock import Mock
from datetime import date, datetime

from midnight_tracker.utils.models import (
    Booking, BookingSource, BookingType, LocationRecord, RawItem, SyncMode, SyncSummary
)
from midnight_tracker.utils.logger import setup_logger, get_logger, SyncLogger


class TestModels:
    """Test cases for data models."""

    def test_enums(self):
        """Test enum values and creation from strings."""
        assert BookingType("flight") == BookingType.FLIGHT
        assert BookingSource("email") == BookingSource.EMAIL
        assert SyncMode("backfill") == SyncMode.BACKFILL

    def test_raw_item_coercion(self):
        """Test string enums and datetimes are normalised."""
        item = RawItem(
            kind="Calendar",
            subject="Flight",
            start_date=datetime(2025, 6, 1, 9, 30),
            end_date=datetime(2025, 6, 2, 11, 0),
            folder_hint="hotel",
        )

        assert item.kind == BookingSource.CALENDAR
        assert item.folder_hint == BookingType.HOTEL
        assert item.start_date == date(2025, 6, 1)
        assert item.end_date == date(2025, 6, 2)

    def test_raw_item_text(self):
        """Test location only joins the text for calendar events."""
        calendar = RawItem(kind=BookingSource.CALENDAR, subject="Hotel", body_text="stay",
                           location_text="Rome")
        email = RawItem(kind=BookingSource.EMAIL, subject="Hotel", body_text="stay",
                        location_text="Rome")

        assert "Rome" in calendar.text
        assert "Rome" not in email.text

    def test_booking(self):
        """Test Booking creation and display."""
        booking = Booking(type="hotel", date="2025-06-01", source="email", place="Hotel Roma",
                          city="Rome")

        assert booking.type == BookingType.HOTEL
        assert booking.date == date(2025, 6, 1)
        assert booking.date_key == "2025-06-01"
        assert booking.flights == []
        assert "Hotel Roma" in str(booking)
        assert str(booking).endswith("email")

    def test_location_record_from_dict(self):
        """Test stored camelCase keys are read."""
        record = LocationRecord.from_dict({
            "place": "Hotel Roma", "city": "Rome", "country": "Italy", "flights": "BA1",
            "lat": "41.9", "lon": 12.5, "working": True, "autoGps": True,
            "bookingSource": "email: x", "countryConflict": "GPS says UK, booking says Italy",
            "gpsConfirmed": True,
        })

        assert record.place == "Hotel Roma"
        assert record.lat == 41.9
        assert record.lon == 12.5
        assert record.working is True
        assert record.auto_gps is True
        assert record.auto_booking is False
        assert record.booking_source == "email: x"
        assert record.country_conflict == "GPS says UK, booking says Italy"
        assert record.extra == {"gpsConfirmed": True}

    def test_location_record_from_odd_values(self):
        """Test non-dict and partial values."""
        assert LocationRecord.from_dict(None) == LocationRecord()
        assert LocationRecord.from_dict(["x"]) == LocationRecord()
        record = LocationRecord.from_dict({"city": 5, "lat": "north"})
        assert record.city == "5"
        assert record.lat is None

    def test_location_record_to_dict(self):
        """Test optional keys are only written when set."""
        data = LocationRecord(city="Rome", auto_booking=True, booking_source="calendar: x").to_dict()

        assert data == {
            "place": "", "city": "Rome", "country": "", "flights": "", "notes": "",
            "autoBooking": True, "bookingSource": "calendar: x",
        }

        full = LocationRecord(city="London", lat=51.5, lon=-0.1, working=True, auto_gps=True,
                              country_conflict="GPS says UK, booking says Italy").to_dict()
        assert full["lat"] == 51.5
        assert full["working"] is True
        assert full["autoGps"] is True
        assert full["countryConflict"] == "GPS says UK, booking says Italy"

        not_working = LocationRecord.from_dict({"city": "London", "working": False}).to_dict()
        assert not_working["working"] is False

    def test_is_manual(self):
        """Test what counts as a manually set day."""
        assert LocationRecord(city="Paris").is_manual
        assert not LocationRecord(city="Paris", auto_gps=True).is_manual
        assert not LocationRecord(city="Paris", auto_booking=True).is_manual
        assert not LocationRecord(notes="no city").is_manual

    def test_sync_summary(self):
        """Test SyncSummary defaults and dict conversion."""
        summary = SyncSummary(updates_applied=3, new_count=2, merged_count=1)

        assert summary.to_dict()["updates_applied"] == 3
        assert summary.to_dict()["dry_run"] is False
        assert summary.skipped_count == 0


class TestLogger:
    """Test cases for logging utilities."""

    def test_setup_logger(self):
        """Test logger setup."""
        logger = setup_logger("test_logger", "DEBUG")

        assert logger is not None
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logger_does_not_duplicate_handlers(self):
        """Test repeated setup keeps a single console handler."""
        setup_logger("first")
        setup_logger("second")

        ours = [h for h in logging.getLogger().handlers if getattr(h, "_midnight_tracker", False)]
        assert len(ours) == 1

    def test_get_logger(self):
        """Test getting a component logger."""
        assert get_logger("gmail_client") is not None


class TestSyncLogger:
    """Test cases for SyncLogger class."""

    @pytest.fixture
    def mock_logger(self):
        return Mock()

    @pytest.fixture
    def sync_logger(self, mock_logger):
        return SyncLogger(mock_logger)

    def test_initial_stats(self, sync_logger):
        """Test counters start at zero."""
        assert sync_logger.stats['items_processed'] == 0
        assert sync_logger.stats['errors'] == 0
        assert sync_logger.stats['sources'] == {}

    def test_counters(self, sync_logger, mock_logger):
        """Test each log call updates its counter."""
        sync_logger.log_item_processed("calendar", "Flight BA123")
        sync_logger.log_item_processed("email", "Hotel Roma")
        sync_logger.log_item_processed("email", "Newsletter")
        sync_logger.log_item_discarded("email", "Newsletter", "no travel booking")
        sync_logger.log_bookings_extracted("email", "Hotel Roma", 3)
        sync_logger.log_reconcile_result(2, 1, 4)
        sync_logger.log_conflict("2025-06-01", "GPS says UK, booking says Italy")
        sync_logger.log_error(ValueError("bad"), "context")

        stats = sync_logger.stats
        assert stats['items_processed'] == 3
        assert stats['sources'] == {"calendar": 1, "email": 2}
        assert stats['items_discarded'] == 1
        assert stats['bookings_extracted'] == 3
        assert stats['new_records'] == 2
        assert stats['merged_records'] == 1
        assert stats['skipped_bookings'] == 4
        assert stats['conflicts'] == 1
        assert stats['errors'] == 1
        mock_logger.warning.assert_called_once()
        mock_logger.error.assert_called_once_with(
            "Error occurred", error="bad", error_type="ValueError", context="context"
        )

    def test_print_summary(self, sync_logger, capsys):
        """Test the summary is printed."""
        sync_logger.log_item_processed("calendar", "Flight BA123")
        sync_logger.print_summary()

        captured = capsys.readouterr()
        assert "BOOKING SYNC SUMMARY" in captured.out
        assert "Items processed: 1" in captured.out
        assert "calendar: 1" in captured.out

    def test_reset_stats(self, sync_logger):
        """Test counters reset."""
        sync_logger.log_error(Exception("x"))
        sync_logger.reset_stats()

        assert sync_logger.stats['errors'] == 0
