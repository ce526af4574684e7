import asyncio
import logging
import smtplib
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import List
from askanai.core.config import Settings

logger = logging.getLogger(__name__)


def _build_messages(settings: Settings, user_email: str) -> List[EmailMessage]:
    user_message = EmailMessage()
    user_message["From"] = settings.SMTP_USER
    user_message["To"] = user_email
    user_message["Subject"] = "Your AskAnAI account was created"
    user_message.set_content(
        "Your account was created successfully.\n\n"
        f"Email: {user_email}\n\n"
        "You can now sign in with the password you chose."
    )
    messages = [user_message]

    if settings.mail_recipients:
        admin_message = EmailMessage()
        admin_message["From"] = settings.SMTP_USER
        admin_message["To"] = ", ".join(settings.mail_recipients)
        admin_message["Subject"] = "AskAnAI new user registration"
        admin_message.set_content(
            "A new account was created.\n\n"
            f"User email: {user_email}\n"
            f"Created at (UTC): {datetime.now(timezone.utc).isoformat()}\n"
        )
        messages.append(admin_message)
    return messages


def _send(settings: Settings, messages: List[EmailMessage]) -> None:
    if settings.SMTP_PORT == 465:
        server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=15)
    else:
        server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=15)
    with server:
        if settings.SMTP_PORT != 465:
            server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        for message in messages:
            server.send_message(message)


async def send_account_created_emails(settings: Settings, user_email: str) -> bool:
    """
    Best effort: returns False when SMTP is not configured or sending fails,
    never raises.
    """
    if not (settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASSWORD):
        return False
    try:
        await asyncio.to_thread(_send, settings, _build_messages(settings, user_email))
        return True
    except Exception as e:
        logger.error(f"failed to send account emails: {e}", exc_info=True)
        return False
