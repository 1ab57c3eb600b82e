"""
Google Calendar access for the calendar tools.

Credentials are an OAuth client plus a long-lived refresh token; the access
token is refreshed by google-auth on first use.
"""

from typing import Any, Dict, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from loguru import logger

from chat_agent.config.settings import settings
from chat_agent.utils.errors import CalendarAuthError, UpstreamServiceError
from chat_agent.utils.metrics import record_degradation


TOKEN_URI = "https://oauth2.googleapis.com/token"
SCOPES = ["https://www.googleapis.com/auth/calendar"]
_AUTH_STATUS_CODES = (401, 403)


def _is_auth_failure(error: Exception) -> bool:
    if isinstance(error, (CalendarAuthError, GoogleAuthError)):
        return True
    if isinstance(error, HttpError):
        return getattr(error.resp, "status", None) in _AUTH_STATUS_CODES
    return False


class CalendarService:
    """Creates and lists events on one Google calendar."""

    def __init__(
        self,
        service: Any = None,
        calendar_id: Optional[str] = None,
        timezone: Optional[str] = None,
    ):
        """
        Args:
            service: Pre-built Calendar v3 resource (tests pass a fake)
            calendar_id: Calendar to use (defaults to settings.google_calendar_id)
            timezone: IANA timezone sent with created events
        """
        self._service = service
        self.calendar_id = calendar_id or settings.google_calendar_id
        self.timezone = timezone or settings.agent_timezone

    def _credentials(self) -> Credentials:
        if not (settings.google_client_id and settings.google_client_secret and settings.google_refresh_token):
            raise CalendarAuthError("Google Calendar credentials are not configured")
        return Credentials(
            token=None,
            refresh_token=settings.google_refresh_token,
            token_uri=TOKEN_URI,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            scopes=SCOPES,
        )

    @property
    def service(self) -> Any:
        if self._service is None:
            self._service = build("calendar", "v3", credentials=self._credentials(), cache_discovery=False)
        return self._service

    def add_event(
        self,
        summary: str,
        description: str,
        start_time: str,
        end_time: str,
        attendees: Optional[List[Dict[str, str]]] = None,
    ) -> Dict[str, Any]:
        """
        Insert one event

        Returns:
            The created event resource (includes htmlLink)

        Raises:
            UpstreamServiceError: If the provider rejects the event
        """
        body = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": start_time, "timeZone": self.timezone},
            "end": {"dateTime": end_time, "timeZone": self.timezone},
            "attendees": [
                {k: v for k, v in attendee.items() if v is not None}
                for attendee in (attendees or [])
            ],
        }

        try:
            event = self.service.events().insert(calendarId=self.calendar_id, body=body).execute()
        except (HttpError, GoogleAuthError, CalendarAuthError) as e:
            logger.error(f"Failed to create calendar event: {e}")
            raise UpstreamServiceError(
                "Failed to create calendar event. Please check the details or try again later."
            ) from e

        logger.info(f"Calendar event created: {event.get('htmlLink')}")
        return event

    def get_events_in_range(self, start_time: str, end_time: str) -> List[Dict[str, Any]]:
        """
        List single events between two timestamps, ordered by start time

        Authentication failures degrade to an empty list so the agent loop
        keeps going.

        Raises:
            UpstreamServiceError: For any other provider failure
        """
        try:
            response = self.service.events().list(
                calendarId=self.calendar_id,
                timeMin=start_time,
                timeMax=end_time,
                singleEvents=True,
                orderBy="startTime",
            ).execute()
        except (HttpError, GoogleAuthError, CalendarAuthError) as e:
            if _is_auth_failure(e):
                logger.bind(event="calendar_auth_degraded", component="calendar").warning(
                    f"Calendar authentication failed, returning empty events list: {e}"
                )
                record_degradation("calendar", "auth")
                return []
            logger.error(f"Failed to fetch calendar events: {e}")
            raise UpstreamServiceError(
                "Failed to fetch calendar events. Please check the time range format."
            ) from e

        return response.get("items", []) or []
