"""
Unit tests for the main orchestrator and CLI functionality.
"""
import pytest
from unittest.mock import Mock, patch
from datetime import date, datetime, timedelta, timezone
from click.testing import CliRunner

from midnight_tracker.main import BookingSync, window_for, main
from midnight_tracker.firebase_sync.location_store import RecordStoreError
from midnight_tracker.utils.models import (
    Booking, BookingSource, BookingType, LocationRecord, RawItem, SyncMode, SyncSummary
)
from config.settings import sync_config

NOW = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)


class TestWindowFor:
    """Test cases for run mode windows."""

    def test_periodic(self):
        """Test the rolling window around now."""
        window = window_for(SyncMode.PERIODIC, NOW)

        assert window.calendar_start == NOW - timedelta(days=sync_config.calendar_days_back)
        assert window.calendar_end == NOW + timedelta(days=sync_config.days_ahead)
        assert window.email_since == (NOW - timedelta(days=sync_config.days_back)).date()
        assert window.date_floor is None

    def test_backfill(self):
        """Test the backfill window starts at the tax year floor."""
        window = window_for(SyncMode.BACKFILL, NOW)
        floor = date.fromisoformat(sync_config.tax_year_start)

        assert window.calendar_start.date() == floor
        assert window.calendar_start.tzinfo is not None
        assert window.calendar_end == NOW
        assert window.email_since == floor
        assert window.date_floor == floor


class TestBookingSync:
    """Test cases for BookingSync class."""

    @pytest.fixture
    def sync(self):
        """Create BookingSync with mocked item sources and store."""
        sync = BookingSync()
        sync.store = Mock()
        sync.store.read_all.return_value = {}
        sync.gmail_client = Mock()
        sync.calendar_client = Mock()
        return sync

    @pytest.fixture
    def calendar_flight(self):
        return RawItem(
            kind=BookingSource.CALENDAR,
            subject="Flight BA123 LHR to MXP",
            start_date=date(2025, 6, 12),
            end_date=date(2025, 6, 12),
        )

    @pytest.fixture
    def hotel_email(self):
        return RawItem(
            kind=BookingSource.EMAIL,
            subject="Reservation at Hotel Roma - confirmed",
            body_text="Check-in: 1 June 2025. Check-out: 4 June 2025. See you in Rome.",
            folder_hint=BookingType.HOTEL,
        )

    def test_initialization(self):
        """Test BookingSync initialization."""
        sync = BookingSync(dry_run=True)

        assert sync.gmail_client is not None
        assert sync.calendar_client is not None
        assert sync.store.dry_run is True
        assert sync.engine is not None
        assert sync.sync_logger is not None
        assert sync.source_priority == (BookingSource.CALENDAR, BookingSource.EMAIL)

    def test_sync_bookings_new_days(self, sync, calendar_flight, hotel_email):
        """Test bookings from both sources land in one write."""
        summary = sync.sync_bookings([calendar_flight, hotel_email], last_sync_key="lastBookingSync")

        assert summary.bookings_found == 4
        assert summary.updates_applied == 4
        assert summary.new_count == 4
        assert summary.skipped_count == 0

        sync.store.apply_updates.assert_called_once()
        updates = sync.store.apply_updates.call_args[0][0]
        assert set(updates) == {"2025-06-01", "2025-06-02", "2025-06-03", "2025-06-12"}
        assert updates["2025-06-12"].city == "Milan"
        assert updates["2025-06-12"].flights == "BA123"
        assert updates["2025-06-01"].place == "Hotel Roma"
        sync.store.set_last_sync_timestamp.assert_called_once_with("lastBookingSync")

    def test_sync_bookings_manual_day(self, sync, calendar_flight, hotel_email):
        """Test a manually set day is skipped."""
        sync.store.read_all.return_value = {"2025-06-12": LocationRecord(city="Paris")}

        summary = sync.sync_bookings([calendar_flight, hotel_email])

        assert summary.skipped_count == 1
        assert summary.updates_applied == 3
        assert "2025-06-12" not in sync.store.apply_updates.call_args[0][0]

    def test_sync_bookings_calendar_preferred(self, sync):
        """Test the calendar copy of a night is the one merged."""
        calendar_hotel = RawItem(
            kind=BookingSource.CALENDAR,
            subject="Hotel Roma",
            body_text="Reservation at Hotel Roma in Rome.",
            start_date=date(2025, 6, 1),
            end_date=date(2025, 6, 2),
        )
        email_hotel = RawItem(
            kind=BookingSource.EMAIL,
            subject="Reservation at Hotel Roma - confirmed",
            body_text="Check-in: 1 June 2025.",
            folder_hint=BookingType.HOTEL,
        )

        summary = sync.sync_bookings([email_hotel, calendar_hotel])

        assert summary.updates_applied == 1
        record = sync.store.apply_updates.call_args[0][0]["2025-06-01"]
        assert record.booking_source == "calendar: Hotel Roma"

    def test_sync_bookings_conflict_logged_once(self, sync, calendar_flight):
        """Test a new country conflict produces a single warning."""
        sync.store.read_all.return_value = {
            "2025-06-12": LocationRecord(city="London", country="UK", auto_gps=True)
        }
        sync.engine.logger = Mock()
        sync.sync_logger.logger = Mock()

        sync.sync_bookings([calendar_flight])

        assert sync.sync_logger.stats['conflicts'] == 1
        sync.sync_logger.logger.warning.assert_called_once_with(
            "Country conflict", date="2025-06-12", conflict="GPS says UK, booking says Italy"
        )
        sync.engine.logger.warning.assert_not_called()

    def test_sync_bookings_nothing_found(self, sync):
        """Test no store read or write happens without bookings, but the run is stamped."""
        items = [RawItem(kind=BookingSource.CALENDAR, subject="Dentist", start_date=date(2025, 6, 1))]

        summary = sync.sync_bookings(items, last_sync_key="lastBackfill")

        assert summary.bookings_found == 0
        assert summary.updates_applied == 0
        sync.store.read_all.assert_not_called()
        sync.store.apply_updates.assert_not_called()
        sync.store.set_last_sync_timestamp.assert_called_once_with("lastBackfill")

    def test_sync_bookings_date_floor(self, sync, calendar_flight):
        """Test bookings before the floor are ignored."""
        summary = sync.sync_bookings([calendar_flight], date_floor=date(2025, 7, 1))

        assert summary.bookings_found == 0

    def test_sync_bookings_store_failure(self, sync, calendar_flight):
        """Test store failures abort the run without stamping it."""
        sync.store.apply_updates.side_effect = RecordStoreError("write failed")

        with pytest.raises(RecordStoreError):
            sync.sync_bookings([calendar_flight])

        sync.store.set_last_sync_timestamp.assert_not_called()

    def test_extract_bookings_continues_after_error(self, sync, calendar_flight):
        """Test one failing item does not stop the rest."""
        booking = Booking(type=BookingType.FLIGHT, date=date(2025, 6, 12), source=BookingSource.CALENDAR)
        parser = Mock()
        parser.parse_item.side_effect = [Exception("Parse error"), [booking]]

        bookings = sync.extract_bookings([calendar_flight, calendar_flight], parser)

        assert bookings == [booking]
        assert sync.sync_logger.stats['errors'] == 1
        assert sync.sync_logger.stats['items_processed'] == 2

    def test_collect_items(self, sync, calendar_flight, hotel_email):
        """Test calendar events come first, then both mail folders."""
        sync.calendar_client.fetch_events.return_value = [calendar_flight]
        sync.gmail_client.connect.return_value = True
        sync.gmail_client.fetch_folder_items.side_effect = [[hotel_email], []]
        window = window_for(SyncMode.PERIODIC, NOW)

        items = sync.collect_items(window)

        assert items == [calendar_flight, hotel_email]
        folder_types = [c.args[0] for c in sync.gmail_client.fetch_folder_items.call_args_list]
        assert folder_types == [BookingType.HOTEL, BookingType.FLIGHT]
        sync.gmail_client.disconnect.assert_called_once()

    def test_collect_items_gmail_unavailable(self, sync, calendar_flight):
        """Test calendar items are still used when Gmail is down."""
        sync.calendar_client.fetch_events.return_value = [calendar_flight]
        sync.gmail_client.connect.return_value = False

        items = sync.collect_items(window_for(SyncMode.PERIODIC, NOW))

        assert items == [calendar_flight]
        sync.gmail_client.fetch_folder_items.assert_not_called()
        assert sync.sync_logger.stats['errors'] == 1

    def test_run_backfill(self, sync, calendar_flight):
        """Test a backfill run uses the tax year floor and its own settings key."""
        sync.calendar_client.fetch_events.return_value = [calendar_flight]
        sync.gmail_client.connect.return_value = True
        sync.gmail_client.fetch_folder_items.return_value = []

        summary = sync.run(SyncMode.BACKFILL, NOW)

        time_min, time_max = sync.calendar_client.fetch_events.call_args[0]
        assert time_min.date() == date.fromisoformat(sync_config.tax_year_start)
        assert time_max == NOW
        assert summary.new_count == 1
        sync.store.set_last_sync_timestamp.assert_called_once_with("lastBackfill")


class TestCLI:
    """Test cases for CLI functionality."""

    @pytest.fixture
    def runner(self):
        """Create CLI runner for testing."""
        return CliRunner()

    def test_cli_periodic(self, runner):
        """Test the default periodic run."""
        with patch('midnight_tracker.main.BookingSync') as mock_sync_class:
            mock_sync = Mock()
            mock_sync.run.return_value = SyncSummary(
                updates_applied=2, new_count=1, merged_count=1, bookings_found=3
            )
            mock_sync_class.return_value = mock_sync

            result = runner.invoke(main, [])

        assert result.exit_code == 0
        assert "Booking sync completed (periodic)" in result.output
        assert "Updates applied: 2" in result.output
        mock_sync.run.assert_called_once_with(SyncMode.PERIODIC)

    def test_cli_backfill_dry_run(self, runner):
        """Test backfill with dry run."""
        with patch('midnight_tracker.main.BookingSync') as mock_sync_class:
            mock_sync = Mock()
            mock_sync.run.return_value = SyncSummary(dry_run=True)
            mock_sync_class.return_value = mock_sync

            result = runner.invoke(main, ['--mode', 'backfill', '--dry-run', '--log-level', 'DEBUG'])

        assert result.exit_code == 0
        assert "DRY RUN MODE" in result.output
        mock_sync_class.assert_called_once_with('DEBUG', None, dry_run=True)
        mock_sync.run.assert_called_once_with(SyncMode.BACKFILL)

    def test_cli_error(self, runner):
        """Test a fatal error exits non-zero."""
        with patch('midnight_tracker.main.BookingSync') as mock_sync_class:
            mock_sync_class.return_value.run.side_effect = RecordStoreError("Failed to read location records")

            result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert "Fatal error: Failed to read location records" in result.output

    def test_cli_invalid_mode(self, runner):
        """Test unknown modes are rejected."""
        result = runner.invoke(main, ['--mode', 'weekly'])

        assert result.exit_code != 0
