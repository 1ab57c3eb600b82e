"""
External transports used by the tools - email and calendar
"""

from chat_agent.services.calendar_service import CalendarService
from chat_agent.services.email_service import EmailService, EmailReceipt

__all__ = [
    "CalendarService",
    "EmailService",
    "EmailReceipt",
]
