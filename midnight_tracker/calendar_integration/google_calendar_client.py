from googleapiclient.discovery import build
from google.oauth2 import service_account
from bs4 import BeautifulSoup
from datetime import datetime
from typing import List, Optional

from ..booking_parser.dates import to_date
from ..utils.logger import get_logger
from ..utils.models import RawItem, BookingSource
from config.settings import calendar_config


class GoogleCalendarClient:
    SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]

    def __init__(
        self,
        credentials_file: Optional[str] = None,
        calendar_id: Optional[str] = None,
    ):
        self.logger = get_logger("google_calendar")
        self.credentials_file = credentials_file or calendar_config.credentials_file
        self.calendar_id = calendar_id or calendar_config.calendar_id
        self.service = None

    def initialize(self) -> bool:
        """Build the Calendar API service from the service account file."""
        if self.service is not None:
            return True
        try:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_file, scopes=self.SCOPES
            )
            self.service = build("calendar", "v3", credentials=creds, cache_discovery=False)
            return True
        except Exception as e:
            self.logger.error(
                "Failed to initialize Google Calendar",
                error=str(e),
                credentials_file=self.credentials_file,
            )
            return False

    def fetch_events(self, time_min: datetime, time_max: datetime) -> List[RawItem]:
        """
        Events between two instants, recurring events expanded.

        Follows nextPageToken until the window is exhausted. On an API error
        the events read so far are returned.
        """
        if not self.initialize():
            return []

        self.logger.info(
            "Reading calendar events",
            calendar=self.calendar_id,
            time_min=time_min.isoformat(),
            time_max=time_max.isoformat(),
        )

        items: List[RawItem] = []
        page_token = None
        page = 1
        try:
            while True:
                response = (
                    self.service.events()
                    .list(
                        calendarId=self.calendar_id,
                        timeMin=time_min.isoformat(),
                        timeMax=time_max.isoformat(),
                        singleEvents=True,
                        orderBy="startTime",
                        maxResults=calendar_config.page_size,
                        pageToken=page_token,
                    )
                    .execute()
                )
                events = response.get("items", [])
                for event in events:
                    if event.get("status") == "cancelled":
                        continue
                    items.append(self._to_raw_item(event))

                self.logger.debug("Calendar page read", page=page, count=len(events), total=len(items))
                page_token = response.get("nextPageToken")
                if not page_token:
                    break
                page += 1
        except Exception as e:
            self.logger.error(
                "Failed to read calendar events",
                error=str(e),
                calendar=self.calendar_id,
                read_so_far=len(items),
            )

        self.logger.info("Fetched calendar events", count=len(items))
        return items

    def _to_raw_item(self, event: dict) -> RawItem:
        start = event.get("start") or {}
        end = event.get("end") or {}
        description = event.get("description") or ""
        if "<" in description:
            description = BeautifulSoup(description, "html.parser").get_text(" ", strip=True)

        return RawItem(
            kind=BookingSource.CALENDAR,
            subject=event.get("summary") or "",
            body_text=description,
            start_date=to_date(start.get("dateTime") or start.get("date")),
            end_date=to_date(end.get("dateTime") or end.get("date")),
            location_text=event.get("location") or "",
            item_id=event.get("id"),
        )
