"""
Email transport over SMTP.
"""

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Optional

from loguru import logger

from chat_agent.config.settings import settings
from chat_agent.utils.errors import UpstreamServiceError


DISABLED_MESSAGE_ID = "disabled"


@dataclass(frozen=True)
class EmailReceipt:
    message_id: str
    response: str

    @property
    def disabled(self) -> bool:
        return self.message_id == DISABLED_MESSAGE_ID


class EmailService:
    """
    Sends plain-text emails through an SMTP relay (STARTTLS).

    Without SMTP credentials the service stays disabled: send_email returns
    a receipt marked "disabled" instead of failing.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.user = user if user is not None else settings.smtp_user
        self.password = password if password is not None else settings.smtp_password
        self.sender = sender or settings.smtp_from or formataddr((settings.email_sender_name, self.user))
        self.timeout = timeout or settings.tool_timeout_seconds

        logger.info(f"SMTP_USER: {'SET' if self.user else 'NOT SET'}")
        logger.info(f"SMTP_HOST: {self.host}:{self.port}")
        if self.configured:
            logger.info("Email service configured successfully")
        else:
            logger.warning("Email credentials not provided. Email functionality will be disabled.")

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    def send_email(self, to: str, subject: str, text: str) -> EmailReceipt:
        """
        Send an email

        Returns:
            EmailReceipt; receipt.disabled is True when SMTP is not configured

        Raises:
            UpstreamServiceError: If the SMTP exchange fails
        """
        if not self.configured:
            logger.warning("Email service not configured. Email not sent.")
            return EmailReceipt(message_id=DISABLED_MESSAGE_ID, response="Email service not configured")

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(text)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.user, self.password)
                refused = smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            raise UpstreamServiceError("Failed to send email. Please try again later.") from e

        if refused:
            logger.error(f"SMTP server refused recipients: {refused}")
            raise UpstreamServiceError("Failed to send email. Please try again later.")

        logger.info(f"Email sent successfully to {to}")
        return EmailReceipt(message_id=message["Message-ID"], response="sent")
