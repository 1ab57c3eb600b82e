"""
Calendar tools - addCalendarEvent and getEventsInRange
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from chat_agent.services.calendar_service import CalendarService
from chat_agent.tools.base import (
    AgentTool,
    ToolContext,
    ToolName,
    validate_email_address,
    validate_offset_timestamp,
)


EVENT_CREATE_FAILED = "Failed to create the calendar event. Please check the details or try again later."
EVENTS_FETCH_FAILED = "Failed to fetch calendar events. Please check the time range format."
NO_EVENTS = "No events found in this time range."


class Attendee(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., description="Email of the attendee")
    display_name: Optional[str] = Field(None, alias="displayName", description="Name of the attendee")

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return validate_email_address(value)


class _TimeRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(..., alias="startTime")
    end_time: str = Field(..., alias="endTime")

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_offset(cls, value: str) -> str:
        return validate_offset_timestamp(value)

    @model_validator(mode="after")
    def _check_order(self):
        if datetime.fromisoformat(self.end_time) <= datetime.fromisoformat(self.start_time):
            raise ValueError("endTime must be after startTime")
        return self


class CreateCalendarEventArgs(_TimeRange):
    summary: str = Field(..., description="Title of the calendar event")
    description: str = Field("", description="Details of the event")
    start_time: str = Field(
        ..., alias="startTime",
        description="Start time in ISO format with timezone, e.g. 2025-07-03T14:00:00+05:00",
    )
    end_time: str = Field(
        ..., alias="endTime",
        description="End time in ISO format with timezone, e.g. 2025-07-03T15:00:00+05:00",
    )
    attendees: List[Attendee] = Field(
        default_factory=list, description="List of attendees to invite to the event"
    )


class QueryCalendarRangeArgs(_TimeRange):
    start_time: str = Field(
        ..., alias="startTime",
        description="Start of the time range in ISO 8601 format with timezone, e.g. 2025-07-03T00:00:00+05:00",
    )
    end_time: str = Field(
        ..., alias="endTime",
        description="End of the time range in ISO 8601 format with timezone, e.g. 2025-07-03T23:59:59+05:00",
    )


def format_event(event: Dict[str, Any]) -> str:
    start = event.get("start", {}).get("dateTime") or event.get("start", {}).get("date")
    end = event.get("end", {}).get("dateTime") or event.get("end", {}).get("date")
    return f"📅 {event.get('summary', '(No title)')} ({start} → {end})"


class CreateCalendarEventTool(AgentTool):
    name = ToolName.CREATE_CALENDAR_EVENT
    description = (
        "Schedule a new event in Google Calendar. "
        "Provide the title, description, start, and end time."
    )
    args_model = CreateCalendarEventArgs
    failure_message = EVENT_CREATE_FAILED
    side_effecting = True

    def __init__(self, calendar_service: CalendarService):
        self.calendar_service = calendar_service

    def run(self, args: CreateCalendarEventArgs, context: ToolContext) -> str:
        event = self.calendar_service.add_event(
            summary=args.summary,
            description=args.description,
            start_time=args.start_time,
            end_time=args.end_time,
            attendees=[
                {"email": a.email, "displayName": a.display_name} for a in args.attendees
            ],
        )
        return f"Event created: {event.get('htmlLink', '')}"


class QueryCalendarRangeTool(AgentTool):
    name = ToolName.QUERY_CALENDAR_RANGE
    description = (
        "Get all calendar events between a given start and end time. "
        "Use ISO format with timezone offset."
    )
    args_model = QueryCalendarRangeArgs
    failure_message = EVENTS_FETCH_FAILED

    def __init__(self, calendar_service: CalendarService):
        self.calendar_service = calendar_service

    def run(self, args: QueryCalendarRangeArgs, context: ToolContext) -> str:
        events = self.calendar_service.get_events_in_range(args.start_time, args.end_time)
        if not events:
            return NO_EVENTS
        formatted = "\n".join(format_event(event) for event in events)
        return f"Found {len(events)} event(s):\n\n{formatted}"
