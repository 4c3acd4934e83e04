from .google_calendar_client import GoogleCalendarClient

__all__ = ['GoogleCalendarClient']
