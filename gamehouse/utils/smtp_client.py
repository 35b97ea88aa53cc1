"""
SMTP Client
Outbound mail for password reset links
"""

import asyncio
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, List, Optional

import aiosmtplib
import structlog

from gamehouse.config import Settings, get_settings

logger = structlog.get_logger(__name__)


class SMTPError(Exception):
    """Raised when a message could not be delivered"""
    pass


class EmailMessage:
    """Email message container"""

    def __init__(
        self,
        to_emails: List[str],
        subject: str,
        html_content: Optional[str] = None,
        text_content: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None
    ):
        self.to_emails = to_emails if isinstance(to_emails, list) else [to_emails]
        self.subject = subject
        self.html_content = html_content
        self.text_content = text_content
        self.from_email = from_email
        self.from_name = from_name

        if not self.to_emails:
            raise ValueError("At least one recipient email is required")
        if not self.subject:
            raise ValueError("Subject is required")
        if not self.html_content and not self.text_content:
            raise ValueError("Either HTML or text content is required")


class SMTPClient:
    """SMTP client with retry logic"""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or get_settings()

    async def send_email(
        self,
        email_message: EmailMessage,
        retry_count: int = 2,
        retry_delay: float = 1.0
    ) -> Dict[str, Any]:
        """
        Send email with retry logic

        Args:
            email_message: Email message to send
            retry_count: Number of retry attempts
            retry_delay: Base delay between retries in seconds

        Raises:
            SMTPError: when every attempt failed
        """
        last_error = None

        for attempt in range(retry_count + 1):
            try:
                mime_message = self._create_mime_message(email_message)
                await aiosmtplib.send(
                    mime_message,
                    hostname=self.config.smtp_host,
                    port=self.config.smtp_port,
                    username=self.config.smtp_username,
                    password=self.config.smtp_password,
                    use_tls=self.config.smtp_use_tls,
                    timeout=self.config.smtp_timeout
                )
                logger.info("Email sent", recipients=len(email_message.to_emails), attempts=attempt + 1)
                return {"success": True, "recipients": email_message.to_emails, "attempts": attempt + 1}

            except aiosmtplib.SMTPException as e:
                last_error = e
                logger.warning("Email send attempt failed", attempt=attempt + 1, error=str(e))
                if attempt < retry_count:
                    await asyncio.sleep(retry_delay * (2 ** attempt))

        raise SMTPError(f"Failed to send email after {retry_count + 1} attempts: {last_error}")

    def _create_mime_message(self, email_message: EmailMessage) -> MIMEMultipart:
        """Create MIME message from EmailMessage"""
        from_email = email_message.from_email or self.config.smtp_from_email
        from_name = email_message.from_name or self.config.smtp_from_name
        from_address = f"{from_name} <{from_email}>" if from_name else from_email

        if email_message.html_content and email_message.text_content:
            msg = MIMEMultipart('alternative')
        else:
            msg = MIMEMultipart()

        msg['From'] = from_address
        msg['To'] = ', '.join(email_message.to_emails)
        msg['Subject'] = email_message.subject

        if email_message.text_content:
            msg.attach(MIMEText(email_message.text_content, 'plain', 'utf-8'))
        if email_message.html_content:
            msg.attach(MIMEText(email_message.html_content, 'html', 'utf-8'))
        return msg


# Global SMTP client instance
smtp_client = SMTPClient()


def get_smtp_client() -> SMTPClient:
    """Get SMTP client instance"""
    return smtp_client
