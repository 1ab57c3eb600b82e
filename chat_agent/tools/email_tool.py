"""
sendEmail tool
"""

from pydantic import BaseModel, Field, field_validator

from chat_agent.services.email_service import EmailService
from chat_agent.tools.base import AgentTool, ToolContext, ToolName, validate_email_address
from chat_agent.utils.errors import ToolExecutionError


EMAIL_SENT = "Email sent."
EMAIL_NOT_CONFIGURED = (
    "Email service is not configured. Please set up SMTP credentials to enable email functionality."
)
EMAIL_FAILED = (
    "It seems there is an issue with sending the email. "
    "Please try again later or check the email address for any errors."
)


class SendEmailArgs(BaseModel):
    to: str = Field(..., description="Recipient email")
    subject: str = Field(..., description="Subject of the email")
    text: str = Field(..., description="Body of the email")

    @field_validator("to")
    @classmethod
    def _check_recipient(cls, value: str) -> str:
        return validate_email_address(value)


class SendEmailTool(AgentTool):
    name = ToolName.SEND_EMAIL
    description = "Send an email with a subject and body to a given email address."
    args_model = SendEmailArgs
    failure_message = EMAIL_FAILED
    side_effecting = True

    def __init__(self, email_service: EmailService):
        self.email_service = email_service

    def run(self, args: SendEmailArgs, context: ToolContext) -> str:
        receipt = self.email_service.send_email(to=args.to, subject=args.subject, text=args.text)
        if receipt.disabled:
            raise ToolExecutionError(EMAIL_NOT_CONFIGURED)
        return EMAIL_SENT
