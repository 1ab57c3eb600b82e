"""
Tests for the tool set: argument validation, result texts, failure conversion
"""

import pytest

from chat_agent.agents.rag.prompts import NO_MATCH_ANSWER
from chat_agent.config.settings import settings
from chat_agent.models.domain import ToolCall
from chat_agent.tools import ToolContext, ToolName, build_tool_set
from chat_agent.tools.calendar_tools import CreateCalendarEventArgs, QueryCalendarRangeArgs
from chat_agent.tools.email_tool import EMAIL_FAILED, EMAIL_NOT_CONFIGURED, EMAIL_SENT
from chat_agent.utils.errors import UpstreamServiceError
from chat_agent.utils.metrics import get_metrics_summary

from fakes import FakeCalendarService, FakeEmailService, StubRAGAgent


CTX = ToolContext(user_id=42)


def call(name, args, call_id="call_1"):
    return ToolCall(name=name, arguments=args, call_id=call_id)


@pytest.fixture
def email():
    return FakeEmailService()


@pytest.fixture
def calendar():
    return FakeCalendarService()


@pytest.fixture
def rag():
    return StubRAGAgent()


@pytest.fixture
def tool_set(email, calendar, rag):
    return build_tool_set(email_service=email, calendar_service=calendar, rag_agent=rag)


class TestToolSetSchemas:
    def test_exposes_the_four_tools(self, tool_set):
        names = [schema["function"]["name"] for schema in tool_set.schemas()]
        assert names == ["sendEmail", "addCalendarEvent", "getEventsInRange", "queryDocuments"]

    def test_calendar_schema_uses_camel_case(self, tool_set):
        schema = next(s for s in tool_set.schemas() if s["function"]["name"] == "addCalendarEvent")
        properties = schema["function"]["parameters"]["properties"]
        assert "startTime" in properties
        assert "endTime" in properties
        assert "attendees" in properties

    def test_duplicate_tools_rejected(self, email):
        from chat_agent.tools import SendEmailTool, ToolSet
        with pytest.raises(ValueError):
            ToolSet([SendEmailTool(email), SendEmailTool(email)])

    def test_lookup_by_name(self, tool_set):
        assert tool_set.get("sendEmail").side_effecting
        assert tool_set.get("addCalendarEvent").side_effecting
        assert not tool_set.get("getEventsInRange").side_effecting
        assert not tool_set.get("queryDocuments").side_effecting
        assert tool_set.get("deleteAllFiles") is None



class TestSendEmail:
    def test_sends(self, tool_set, email):
        result = tool_set.execute(
            call("sendEmail", {"to": "alice@example.com", "subject": "X", "text": "Y"}), CTX
        )
        assert result.ok
        assert result.content == EMAIL_SENT
        assert email.sent == [{"to": "alice@example.com", "subject": "X", "text": "Y"}]

    def test_not_configured(self, calendar, rag):
        tool_set = build_tool_set(FakeEmailService(configured=False), calendar, rag)
        result = tool_set.execute(
            call("sendEmail", {"to": "alice@example.com", "subject": "X", "text": "Y"}), CTX
        )
        assert not result.ok
        assert result.content == EMAIL_NOT_CONFIGURED
        assert get_metrics_summary()["by_component"]["tool:sendEmail"] == {"tool_error": 1}

    def test_transport_failure_becomes_text(self, calendar, rag):
        tool_set = build_tool_set(FakeEmailService(error=UpstreamServiceError("smtp down")), calendar, rag)
        result = tool_set.execute(
            call("sendEmail", {"to": "alice@example.com", "subject": "X", "text": "Y"}), CTX
        )
        assert not result.ok
        assert result.content == EMAIL_FAILED
        assert "smtp down" not in result.content
        assert get_metrics_summary()["by_component"]["tool:sendEmail"] == {"exception": 1}

    def test_invalid_address_rejected_before_sending(self, tool_set, email):
        result = tool_set.execute(
            call("sendEmail", {"to": "not-an-address", "subject": "X", "text": "Y"}), CTX
        )
        assert not result.ok
        assert "Invalid arguments for sendEmail" in result.content
        assert email.sent == []


class TestCalendarArguments:
    """Timestamps need an explicit ±HH:MM offset"""

    def test_accepts_offset(self):
        args = QueryCalendarRangeArgs.model_validate(
            {"startTime": "2025-07-03T00:00:00+05:00", "endTime": "2025-07-03T23:59:59+05:00"}
        )
        assert args.start_time == "2025-07-03T00:00:00+05:00"

    @pytest.mark.parametrize("value", [
        "2025-07-03T09:00:00Z",
        "2025-07-03T14:00:00",
        "2025-07-03",
        "tomorrow at 2pm",
    ])
    def test_rejects_missing_or_z_offset(self, value):
        with pytest.raises(Exception):
            QueryCalendarRangeArgs.model_validate(
                {"startTime": value, "endTime": "2025-07-04T00:00:00+05:00"}
            )

    def test_end_must_follow_start(self):
        with pytest.raises(Exception):
            CreateCalendarEventArgs.model_validate({
                "summary": "Standup",
                "startTime": "2025-07-03T15:00:00+05:00",
                "endTime": "2025-07-03T14:00:00+05:00",
            })

    def test_attendees_parsed(self):
        args = CreateCalendarEventArgs.model_validate({
            "summary": "Review",
            "description": "Quarterly review",
            "startTime": "2025-07-03T14:00:00+05:00",
            "endTime": "2025-07-03T15:00:00+05:00",
            "attendees": [{"email": "lead@example.com", "displayName": "Team Lead"}],
        })
        assert args.attendees[0].display_name == "Team Lead"


class TestCalendarTools:
    def test_create_event(self, tool_set, calendar):
        result = tool_set.execute(call("addCalendarEvent", {
            "summary": "Review",
            "description": "Quarterly review",
            "startTime": "2025-07-03T14:00:00+05:00",
            "endTime": "2025-07-03T15:00:00+05:00",
            "attendees": [{"email": "lead@example.com", "displayName": "Team Lead"}],
        }), CTX)
        assert result.ok
        assert result.content == "Event created: https://calendar.example.com/event/1"
        assert calendar.created[0]["attendees"] == [{"email": "lead@example.com", "displayName": "Team Lead"}]

    def test_create_event_with_z_suffix_not_sent(self, tool_set, calendar):
        result = tool_set.execute(call("addCalendarEvent", {
            "summary": "Review",
            "description": "",
            "startTime": "2025-07-03T09:00:00Z",
            "endTime": "2025-07-03T10:00:00Z",
        }), CTX)
        assert not result.ok
        assert calendar.created == []

    def test_create_event_failure(self, email, rag):
        tool_set = build_tool_set(email, FakeCalendarService(error=UpstreamServiceError("boom")), rag)
        result = tool_set.execute(call("addCalendarEvent", {
            "summary": "Review",
            "description": "",
            "startTime": "2025-07-03T14:00:00+05:00",
            "endTime": "2025-07-03T15:00:00+05:00",
        }), CTX)
        assert result.content == "Failed to create the calendar event. Please check the details or try again later."

    def test_query_range_lists_events(self, email, rag):
        events = [
            {"summary": "Standup", "start": {"dateTime": "2025-07-03T09:00:00+05:00"},
             "end": {"dateTime": "2025-07-03T09:15:00+05:00"}},
            {"summary": "Holiday", "start": {"date": "2025-07-04"}, "end": {"date": "2025-07-05"}},
        ]
        tool_set = build_tool_set(email, FakeCalendarService(events=events), rag)
        result = tool_set.execute(call("getEventsInRange", {
            "startTime": "2025-07-03T00:00:00+05:00",
            "endTime": "2025-07-05T23:59:59+05:00",
        }), CTX)
        assert result.content.startswith("Found 2 event(s):\n\n")
        assert "Standup (2025-07-03T09:00:00+05:00 → 2025-07-03T09:15:00+05:00)" in result.content
        assert "Holiday (2025-07-04 → 2025-07-05)" in result.content

    def test_query_range_empty(self, tool_set):
        result = tool_set.execute(call("getEventsInRange", {
            "startTime": "2025-07-03T00:00:00+05:00",
            "endTime": "2025-07-03T23:59:59+05:00",
        }), CTX)
        assert result.content == "No events found in this time range."

    def test_query_range_failure(self, email, rag):
        tool_set = build_tool_set(email, FakeCalendarService(error=RuntimeError("boom")), rag)
        result = tool_set.execute(call("getEventsInRange", {
            "startTime": "2025-07-03T00:00:00+05:00",
            "endTime": "2025-07-03T23:59:59+05:00",
        }), CTX)
        assert result.content == "Failed to fetch calendar events. Please check the time range format."


class TestSearchDocuments:
    def test_scoped_to_calling_user(self, tool_set, rag):
        result = tool_set.execute(call("queryDocuments", {"query": "warranty length?"}), ToolContext(user_id=7))
        assert result.content == "The warranty lasts two years."
        assert rag.calls == [(7, "warranty length?")]

    def test_failure_reads_as_nothing_found(self, email, calendar):
        tool_set = build_tool_set(email, calendar, StubRAGAgent(error=UpstreamServiceError("index down")))
        result = tool_set.execute(call("queryDocuments", {"query": "warranty?"}), CTX)
        assert result.content == NO_MATCH_ANSWER

    def test_blank_query_rejected(self, tool_set, rag):
        result = tool_set.execute(call("queryDocuments", {"query": "   "}), CTX)
        assert not result.ok
        assert rag.calls == []

    def test_depth_defaults_to_settings(self, email, calendar, rag, monkeypatch):
        monkeypatch.setattr(settings, "rag_top_k", 3)
        tool_set = build_tool_set(email, calendar, rag)
        tool_set.execute(call("queryDocuments", {"query": "warranty?"}), CTX)
        assert rag.top_ks == [3]



class TestUnknownTools:
    def test_unknown_name_is_textual_error(self, tool_set):
        result = tool_set.execute(call("deleteAllFiles", {}), CTX)
        assert not result.ok
        assert "Unknown tool 'deleteAllFiles'" in result.content
        assert get_metrics_summary()["by_component"]["tools"] == {"unknown_tool": 1}

    def test_tool_names_are_closed(self):
        assert {name.value for name in ToolName} == {
            "sendEmail", "addCalendarEvent", "getEventsInRange", "queryDocuments"
        }
