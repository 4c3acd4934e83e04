"""
Logging utility for the Midnight Tracker booking sync.
"""
import logging
import sys
from typing import Optional
from colorama import Fore, Style, init
import structlog

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class ColorizedFormatter(logging.Formatter):
    """Custom formatter with colorized output."""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA + Style.BRIGHT,
    }

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{Style.RESET_ALL}"

        if record.levelno >= logging.WARNING:
            record.msg = f"{Fore.RED}{record.msg}{Style.RESET_ALL}"
        elif record.levelno == logging.INFO:
            record.msg = f"{Fore.GREEN}{record.msg}{Style.RESET_ALL}"

        return super().format(record)


def setup_logger(
    name: str = "midnight_tracker",
    level: str = "INFO",
    log_file: Optional[str] = None
) -> structlog.BoundLogger:
    """
    Set up structured logging with colorized console output.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging to file

    Returns:
        Configured structured logger
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_file else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger(name)

    # Component loggers ("gmail_client", "location_store", ...) are separate
    # stdlib loggers, so the level and handlers go on the root logger.
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    if not any(getattr(h, "_midnight_tracker", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColorizedFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        console_handler._midnight_tracker = True
        root_logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            file_handler._midnight_tracker = True
            root_logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "midnight_tracker") -> structlog.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


class SyncLogger:
    """Logger for a booking sync run that keeps summary counters."""

    def __init__(self, logger: structlog.BoundLogger):
        self.logger = logger
        self.reset_stats()

    def log_item_processed(self, source: str, subject: str):
        """Log when a calendar event or email has been looked at."""
        self.stats['items_processed'] += 1
        self.stats['sources'][source] = self.stats['sources'].get(source, 0) + 1
        self.logger.debug("Item processed", source=source, subject=subject[:60])

    def log_item_discarded(self, source: str, subject: str, reason: str):
        """Log an item that produced no booking."""
        self.stats['items_discarded'] += 1
        self.logger.debug("Item discarded", source=source, reason=reason, subject=subject[:60])

    def log_bookings_extracted(self, source: str, subject: str, count: int):
        """Log bookings produced from one item."""
        self.stats['bookings_extracted'] += count
        self.logger.info("Bookings extracted", source=source, count=count, subject=subject[:60])

    def log_reconcile_result(self, new_count: int, merged_count: int, skipped_count: int):
        self.stats['new_records'] += new_count
        self.stats['merged_records'] += merged_count
        self.stats['skipped_bookings'] += skipped_count

    def log_conflict(self, date_key: str, conflict: str):
        """Log a GPS-vs-booking country disagreement."""
        self.stats['conflicts'] += 1
        self.logger.warning("Country conflict", date=date_key, conflict=conflict)

    def log_error(self, error: Exception, context: str = ""):
        """Log an error."""
        self.stats['errors'] += 1
        self.logger.error(
            "Error occurred",
            error=str(error),
            error_type=type(error).__name__,
            context=context
        )

    def print_summary(self):
        """Print a summary of the run."""
        self.logger.info("Sync summary", **self.stats)

        print(f"\n{Fore.CYAN}{'='*50}")
        print(f"{Fore.WHITE}BOOKING SYNC SUMMARY")
        print(f"{Fore.CYAN}{'='*50}")
        print(f"{Fore.GREEN}✓ Items processed: {self.stats['items_processed']}")
        print(f"{Fore.GREEN}✓ Bookings extracted: {self.stats['bookings_extracted']}")
        print(f"{Fore.BLUE}✓ New days: {self.stats['new_records']}")
        print(f"{Fore.BLUE}✓ Merged days: {self.stats['merged_records']}")
        print(f"{Fore.YELLOW}⚠ Skipped: {self.stats['skipped_bookings']}")
        print(f"{Fore.YELLOW}⚠ Country conflicts: {self.stats['conflicts']}")
        print(f"{Fore.RED}✗ Errors: {self.stats['errors']}")

        if self.stats['sources']:
            print(f"\n{Fore.WHITE}By Source:")
            for source, count in self.stats['sources'].items():
                print(f"  {Fore.CYAN}{source}: {count}")

        print(f"{Fore.CYAN}{'='*50}\n")

    def reset_stats(self):
        """Reset statistics."""
        self.stats = {
            'items_processed': 0,
            'items_discarded': 0,
            'bookings_extracted': 0,
            'new_records': 0,
            'merged_records': 0,
            'skipped_bookings': 0,
            'conflicts': 0,
            'errors': 0,
            'sources': {}
        }
