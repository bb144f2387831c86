"""Email integration utilities for sending emails."""

import smtplib
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, List
import logging

from starlette.concurrency import run_in_threadpool

from core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Email service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
    ):
        """
        Initialize email service.

        Args:
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            smtp_user: SMTP username
            smtp_password: SMTP password
            from_email: Default sender email
            from_name: Default sender name
        """
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_user = smtp_user or settings.smtp_user
        self.smtp_password = smtp_password or settings.smtp_password
        self.from_email = from_email or settings.from_email
        self.from_name = from_name or settings.from_name

    def send_email(
        self,
        to_email: str | List[str],
        subject: str,
        body: str,
        html: bool = False,
        reply_to: Optional[str] = None,
    ) -> bool:
        """
        Send an email.

        Args:
            to_email: Recipient email address(es)
            subject: Email subject
            body: Email body
            html: Whether body is HTML
            reply_to: Reply-to email address

        Returns:
            True if email sent successfully
        """
        try:
            msg = MIMEMultipart()
            msg['From'] = f"{self.from_name} <{self.from_email}>"

            if isinstance(to_email, list):
                msg['To'] = ", ".join(to_email)
                recipients = list(to_email)
            else:
                msg['To'] = to_email
                recipients = [to_email]

            msg['Subject'] = subject

            if reply_to:
                msg['Reply-To'] = reply_to

            msg.attach(MIMEText(body, 'html' if html else 'plain'))

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg, from_addr=self.from_email, to_addrs=recipients)

            logger.info(f"Email sent to {to_email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email: {e}")
            return False

    async def send_email_async(self, *args, **kwargs) -> bool:
        """``send_email`` off the event loop."""
        return await run_in_threadpool(self.send_email, *args, **kwargs)


class EmailTemplates:
    """Pre-configured email templates."""

    @staticmethod
    def company_invitation(club_name: str, signup_url: str) -> dict:
        """Invitation for a company to join a club on the marketplace."""
        club = escape(club_name)
        url = escape(signup_url)
        return {
            'subject': f'{club_name} invited you to join as a partner company',
            'body': f"""
                <html>
                <body>
                    <h2>You're invited!</h2>
                    <p>{club} would like your company to join its partner network.</p>
                    <p>Create your company account here: <a href="{url}">{url}</a></p>
                    <p>Best regards,<br>The {settings.from_name} Team</p>
                </body>
                </html>
            """,
            'html': True
        }


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get the shared email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
