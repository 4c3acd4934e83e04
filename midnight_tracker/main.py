"""
Main orchestrator for the Midnight Tracker booking sync.
"""
import click
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, List, Sequence

from .booking_parser.parser import BookingParser
from .calendar_integration.google_calendar_client import GoogleCalendarClient
from .email_reader.gmail_client import GmailClient
from .firebase_sync.location_store import LocationStore
from .reconciliation.engine import (
    ReconciliationEngine, deduplicate_bookings, DEFAULT_SOURCE_PRIORITY
)
from .utils.models import Booking, BookingSource, BookingType, RawItem, SyncMode, SyncSummary
from .utils.logger import setup_logger, SyncLogger
from config.settings import sync_config


@dataclass
class SyncWindow:
    """What to fetch for one run."""
    calendar_start: datetime
    calendar_end: datetime
    email_since: date
    date_floor: Optional[date] = None


def window_for(mode: SyncMode, now: Optional[datetime] = None) -> SyncWindow:
    """
    Fetch window for a run mode.

    Periodic runs look a few days back and three months ahead; a backfill
    covers everything from the start of the tax year and drops older dates.
    """
    now = now or datetime.now(timezone.utc)
    if mode == SyncMode.BACKFILL:
        floor = date.fromisoformat(sync_config.tax_year_start)
        return SyncWindow(
            calendar_start=datetime.combine(floor, time.min, tzinfo=timezone.utc),
            calendar_end=now,
            email_since=floor,
            date_floor=floor,
        )
    return SyncWindow(
        calendar_start=now - timedelta(days=sync_config.calendar_days_back),
        calendar_end=now + timedelta(days=sync_config.days_ahead),
        email_since=(now - timedelta(days=sync_config.days_back)).date(),
    )


class BookingSync:
    """Main orchestrator: fetch items, extract bookings, merge into the location log."""

    def __init__(
        self,
        log_level: str = "INFO",
        log_file: Optional[str] = None,
        dry_run: bool = False,
        source_priority: Sequence[BookingSource] = DEFAULT_SOURCE_PRIORITY
    ):
        self.logger = setup_logger("booking_sync", log_level, log_file)
        self.sync_logger = SyncLogger(self.logger)
        self.dry_run = dry_run
        self.source_priority = tuple(source_priority)

        # Initialize components
        self.gmail_client = GmailClient()
        self.calendar_client = GoogleCalendarClient()
        self.store = LocationStore(dry_run=dry_run)
        self.engine = ReconciliationEngine()

    def run(self, mode: SyncMode = SyncMode.PERIODIC, now: Optional[datetime] = None) -> SyncSummary:
        """
        Fetch calendar events and emails for the mode's window and sync them.

        Raises:
            RecordStoreError: if the location log cannot be read or written
        """
        window = window_for(mode, now)
        self.logger.info("Starting booking sync",
                         mode=mode.value,
                         calendar_start=window.calendar_start.isoformat(),
                         calendar_end=window.calendar_end.isoformat(),
                         email_since=window.email_since.isoformat(),
                         dry_run=self.dry_run)

        items = self.collect_items(window)
        summary = self.sync_bookings(
            items,
            date_floor=window.date_floor,
            last_sync_key=sync_config.last_sync_keys[mode.value],
        )
        self.sync_logger.print_summary()
        return summary

    def collect_items(self, window: SyncWindow) -> List[RawItem]:
        """Calendar events first, then hotel and flight folder emails."""
        items: List[RawItem] = []

        events = self.calendar_client.fetch_events(window.calendar_start, window.calendar_end)
        self.logger.info("Calendar items", count=len(events))
        items.extend(events)

        if not self.gmail_client.connect():
            self.sync_logger.log_error(Exception("Failed to connect to Gmail"), "Email items skipped")
            return items

        try:
            for folder_type in (BookingType.HOTEL, BookingType.FLIGHT):
                emails = self.gmail_client.fetch_folder_items(folder_type, window.email_since)
                self.logger.info("Email items", folder_type=folder_type.value, count=len(emails))
                items.extend(emails)
        finally:
            self.gmail_client.disconnect()

        return items

    def extract_bookings(self, items: Sequence[RawItem], parser: BookingParser) -> List[Booking]:
        """Parse every item; a failing item is logged and skipped."""
        bookings: List[Booking] = []
        for item in items:
            source = item.kind.value
            self.sync_logger.log_item_processed(source, item.subject)
            try:
                found = parser.parse_item(item)
            except Exception as e:
                self.sync_logger.log_error(e, f"Parsing failed: {item.subject[:60]}")
                continue

            if found:
                self.sync_logger.log_bookings_extracted(source, item.subject, len(found))
                bookings.extend(found)
            else:
                self.sync_logger.log_item_discarded(source, item.subject, "no travel booking")
        return bookings

    def sync_bookings(
        self,
        items: Sequence[RawItem],
        date_floor: Optional[date] = None,
        last_sync_key: str = "lastBookingSync"
    ) -> SyncSummary:
        """
        Core entry point shared by periodic and backfill runs.

        Args:
            items: Raw calendar events and emails
            date_floor: Bookings before this day are ignored
            last_sync_key: Settings key stamped after a successful run

        Returns:
            SyncSummary with update counts
        """
        parser = BookingParser(date_floor=date_floor)
        bookings = deduplicate_bookings(self.extract_bookings(items, parser), self.source_priority)

        self.logger.info("Unique bookings", count=len(bookings))
        for booking in sorted(bookings, key=lambda b: (b.date, b.type.value)):
            self.logger.debug("Booking", entry=str(booking))

        summary = SyncSummary(bookings_found=len(bookings), dry_run=self.dry_run)

        if bookings:
            existing = self.store.read_all()
            result = self.engine.reconcile(existing, bookings)
            for date_key, conflict in result.conflicts.items():
                self.sync_logger.log_conflict(date_key, conflict)

            self.store.apply_updates(result.updates)

            summary.updates_applied = len(result.updates)
            summary.new_count = result.new_count
            summary.merged_count = result.merged_count
            summary.skipped_count = result.skipped_count
            self.sync_logger.log_reconcile_result(result.new_count, result.merged_count,
                                                  result.skipped_count)
        else:
            self.logger.info("No bookings to update")

        self.store.set_last_sync_timestamp(last_sync_key)

        self.logger.info("Booking sync finished", **summary.to_dict())
        return summary


@click.command()
@click.option('--mode', type=click.Choice([m.value for m in SyncMode]), default=SyncMode.PERIODIC.value,
              help='periodic: short rolling window; backfill: everything since the tax year start')
@click.option('--dry-run', is_flag=True,
              help='Parse and reconcile without writing to Firebase')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              default=sync_config.log_level.upper(), help='Logging level')
@click.option('--log-file', type=str,
              help='Log file path (optional)')
def main(mode, dry_run, log_level, log_file):
    """
    Midnight Tracker booking sync.

    Reads calendar events and hotel/flight email folders, extracts travel
    bookings and merges them into the day-by-day location log.
    """
    try:
        sync = BookingSync(log_level, log_file, dry_run=dry_run)
        summary = sync.run(SyncMode(mode))

        click.echo(f"\nBooking sync completed ({mode}):")
        click.echo(f"  Bookings found: {summary.bookings_found}")
        click.echo(f"  Updates applied: {summary.updates_applied}")
        click.echo(f"  New: {summary.new_count}")
        click.echo(f"  Merged: {summary.merged_count}")
        click.echo(f"  Skipped: {summary.skipped_count}")

        if dry_run:
            click.echo("\n⚠️  DRY RUN MODE - No data was written to Firebase")

        return 0

    except Exception as e:
        click.echo(f"Fatal error: {str(e)}")
        click.get_current_context().exit(1)


if __name__ == "__main__":
    main()
