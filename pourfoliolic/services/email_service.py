import logging
from email.message import EmailMessage

import aiosmtplib

from pourfoliolic.config import settings

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, body_html: str) -> bool:
    """Send an email via SMTP. Returns True on success."""
    if not settings.SMTP_HOST:
        logger.warning("SMTP not configured, email not sent to %s", to)
        return False

    message = EmailMessage()
    message["From"] = settings.SMTP_FROM_EMAIL
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body_html, subtype="html")

    try:
        await aiosmtplib.send(
            message,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME or None,
            password=settings.SMTP_PASSWORD or None,
            start_tls=True,
        )
        return True
    except Exception:
        logger.exception("Failed to send email to %s", to)
        return False


async def send_welcome_email(to: str, first_name: str | None = None) -> bool:
    """Greet a user on their first sign-in."""
    name = first_name or "there"
    html = f"""
    <p>Hi {name},</p>
    <p>Welcome to Pourfoliolic! Your tasting journal is ready.</p>
    <ul>
      <li>Log every wine, beer, spirit and cocktail with nose, palate and finish notes</li>
      <li>See your stats and get recommendations from what you rate highly</li>
      <li>Follow friends, cheer their pours and trade notes in chat</li>
    </ul>
    <p><a href="{settings.FRONTEND_URL}">Open your journal</a></p>
    <p>Sip smart. Log honestly.</p>
    """
    return await send_email(to, "Welcome to Pourfoliolic", html)
