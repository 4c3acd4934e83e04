"""
Gmail IMAP client for reading hotel and flight confirmation folders.
"""
import imaplib
import email
import email.utils
import re
from email.header import decode_header
from datetime import date, datetime
from typing import List, Optional, Sequence
from bs4 import BeautifulSoup

from ..utils.models import RawItem, BookingSource, BookingType
from ..utils.logger import get_logger
from config.settings import gmail_config

LIST_RESPONSE_PATTERN = re.compile(r'\((?P<flags>[^)]*)\)\s+(?P<delimiter>"[^"]*"|NIL)\s+(?P<name>.+)')


class GmailClient:
    """Gmail IMAP client for reading travel confirmation emails."""

    def __init__(self):
        self.logger = get_logger("gmail_client")
        self.connection: Optional[imaplib.IMAP4_SSL] = None
        self.connected = False

    def connect(self) -> bool:
        """Connect to Gmail IMAP server."""
        try:
            self.logger.info(
                "Connecting to Gmail IMAP server",
                server=gmail_config.imap_server,
                port=gmail_config.imap_port,
            )

            self.connection = imaplib.IMAP4_SSL(
                gmail_config.imap_server,
                gmail_config.imap_port,
            )
            self.connection.login(gmail_config.email, gmail_config.password)
            self.connected = True

            self.logger.info("Successfully connected to Gmail")
            return True
        except Exception as e:
            self.logger.error("Failed to connect to Gmail", error=str(e))
            self.connected = False
            return False

    def disconnect(self):
        """Disconnect from Gmail IMAP server."""
        if self.connection and self.connected:
            try:
                self.connection.logout()
                self.connected = False
                self.logger.info("Disconnected from Gmail")
            except Exception as e:
                self.logger.error("Error disconnecting from Gmail", error=str(e))

    def list_folders(self) -> List[str]:
        """All mailbox names, nested ones as full paths (e.g. "Travel/Hotels")."""
        if not self.connected:
            self.logger.error("Not connected to Gmail")
            return []

        try:
            status, lines = self.connection.list()
            if status != "OK":
                self.logger.error("Failed to list folders", status=status)
                return []

            folders = []
            for line in lines or []:
                if isinstance(line, bytes):
                    line = line.decode("utf-8", errors="ignore")
                match = LIST_RESPONSE_PATTERN.match(line or "")
                if match:
                    folders.append(match.group("name").strip().strip('"'))
            return folders
        except Exception as e:
            self.logger.error("Error listing folders", error=str(e))
            return []

    def find_folder(self, candidates: Sequence[str]) -> Optional[str]:
        """
        First candidate that exists, either top-level or as a child folder.

        Returns:
            Full folder path to select, or None
        """
        folders = self.list_folders()
        for candidate in candidates:
            for folder in folders:
                if folder == candidate or re.split(r'[/.]', folder)[-1] == candidate:
                    self.logger.info("Found folder", candidate=candidate, folder=folder)
                    return folder

        self.logger.warning("Folder not found", candidates=list(candidates))
        return None

    def fetch_folder_items(
        self,
        folder_type: BookingType,
        since: date,
        limit: Optional[int] = None
    ) -> List[RawItem]:
        """
        Emails received since a date in the hotel or flight folder.

        Any failure (not connected, folder missing, search error) is logged
        and yields an empty list.
        """
        if not self.connected:
            self.logger.error("Not connected to Gmail")
            return []

        candidates = (gmail_config.hotel_folders if folder_type == BookingType.HOTEL
                      else gmail_config.flight_folders)
        folder = self.find_folder(candidates)
        if not folder:
            return []

        try:
            status, _ = self.connection.select(f'"{folder}"', readonly=True)
            if status != "OK":
                self.logger.error("Failed to select folder", folder=folder, status=status)
                return []

            criteria = ["SINCE", since.strftime("%d-%b-%Y")]
            self.logger.info("Searching emails", folder=folder, criteria=criteria)
            status, email_ids = self.connection.search(None, *criteria)
            if status != "OK":
                self.logger.error("Failed to search emails", folder=folder, status=status)
                return []

            email_id_list = email_ids[0].split()
            limit = limit or gmail_config.max_messages_per_folder
            if limit:
                email_id_list = email_id_list[-limit:]

        except Exception as e:
            self.logger.error("Error searching emails", folder=folder, error=str(e))
            return []

        items = []
        for eid in email_id_list:
            item = self.fetch_email(eid.decode() if isinstance(eid, bytes) else eid, folder_type)
            if item:
                items.append(item)

        self.logger.info("Fetched emails", folder=folder, folder_type=folder_type.value, count=len(items))
        return items

    def fetch_email(self, email_id: str, folder_type: Optional[BookingType] = None) -> Optional[RawItem]:
        """Fetch one message without marking it read."""
        try:
            status, msg_data = self.connection.fetch(email_id, "(BODY.PEEK[])")
            if status != "OK":
                self.logger.error("Failed to fetch email", email_id=email_id, status=status)
                return None

            email_message = email.message_from_bytes(msg_data[0][1])
            subject = self._decode_header(email_message["subject"])

            try:
                received = email.utils.parsedate_to_datetime(email_message["date"])
            except Exception:
                received = datetime.now()

            body_text, body_html = self._extract_body(email_message)
            if not body_text.strip() and body_html:
                body_text = self._html_to_text(body_html)

            return RawItem(
                kind=BookingSource.EMAIL,
                subject=subject,
                body_text=body_text,
                start_date=received,
                folder_hint=folder_type,
                item_id=email_id,
            )

        except Exception as e:
            self.logger.error("Error fetching email", email_id=email_id, error=str(e))
            return None

    def _decode_header(self, header: str) -> str:
        """Decode email header safely."""
        if not header:
            return ""

        try:
            decoded_string = ""
            for part, encoding in decode_header(header):
                if isinstance(part, bytes):
                    decoded_string += part.decode(encoding or "utf-8", errors="ignore")
                else:
                    decoded_string += str(part)
            return decoded_string
        except Exception:
            return str(header)

    def _extract_body(self, email_message) -> tuple[str, str]:
        """Extract text and HTML body from email."""
        body_text = ""
        body_html = ""

        parts = email_message.walk() if email_message.is_multipart() else [email_message]
        for part in parts:
            if part.is_multipart():
                continue
            if "attachment" in str(part.get("Content-Disposition")):
                continue

            try:
                payload = part.get_payload(decode=True)
                body = payload.decode(part.get_content_charset() or "utf-8", errors="ignore")
            except Exception:
                continue

            content_type = part.get_content_type()
            if content_type == "text/html":
                body_html += body
            elif content_type == "text/plain" or not email_message.is_multipart():
                body_text += body

        return body_text, body_html

    def _html_to_text(self, html: str) -> str:
        return BeautifulSoup(html, "html.parser").get_text(" ", strip=True)
