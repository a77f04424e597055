"""
Transactional e-mail over SMTP.

smtplib is blocking, so sends run in the threadpool; routes schedule them as
background tasks after the response. With EMAIL_ENABLED off (development,
tests) messages are logged instead of sent.
"""

import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from pathlib import Path

from fastapi.concurrency import run_in_threadpool
from jinja2 import Environment, FileSystemLoader, select_autoescape

from lutonai.core.config import get_settings
from lutonai.core.logging import get_logger
from lutonai.core.metrics import record_email
from lutonai.core.timeutils import as_utc
from lutonai.models.event import Event
from lutonai.models.registration import EventRegistration, RegistrationStatus

logger = get_logger(__name__)
settings = get_settings()

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def build_message(to: str, subject: str, html: str, text: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.SMTP_FROM_NAME, settings.SMTP_FROM))
    msg["To"] = to
    msg["Message-ID"] = make_msgid(domain=settings.SMTP_FROM.split("@")[-1])
    msg["List-Unsubscribe"] = f"<mailto:unsubscribe@{settings.SMTP_FROM.split('@')[-1]}>"
    msg.set_content(text)
    msg.add_alternative(html, subtype="html")
    return msg


def _deliver(msg: EmailMessage) -> None:
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as server:
        if settings.SMTP_USE_TLS:
            server.starttls()
        if settings.SMTP_USER:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.send_message(msg)


async def send_email(template: str, msg: EmailMessage) -> bool:
    """Send a message; returns False instead of raising so background tasks never crash."""
    if not settings.EMAIL_ENABLED:
        record_email(template, "skipped")
        logger.info("email_skipped", template=template, to=msg["To"], subject=msg["Subject"])
        return False

    try:
        await run_in_threadpool(_deliver, msg)
    except (smtplib.SMTPException, OSError) as e:
        record_email(template, "failed")
        logger.error("email_failed", template=template, to=msg["To"], error=str(e))
        return False

    record_email(template, "sent")
    logger.info("email_sent", template=template, to=msg["To"])
    return True


async def send_welcome_email(name: str, email: str) -> bool:
    html = templates.get_template("welcome.html").render(
        name=name,
        site_name=settings.SMTP_FROM_NAME,
        site_url=settings.SITE_URL,
    )
    text = (
        f"Hi {name},\n\n"
        f"Welcome to the {settings.SMTP_FROM_NAME} community! "
        f"Browse upcoming events at {settings.SITE_URL}/events.\n"
    )
    msg = build_message(email, f"Welcome to {settings.SMTP_FROM_NAME} Community!", html, text)
    return await send_email("welcome", msg)


async def send_registration_email(registration: EventRegistration, event: Event) -> bool:
    waitlisted = registration.status == RegistrationStatus.WAITLISTED
    starts_at = as_utc(event.start_datetime).strftime("%A, %d %B %Y %H:%M UTC")
    html = templates.get_template("registration.html").render(
        name=registration.name,
        waitlisted=waitlisted,
        event_title=event.title,
        event_id=event.id,
        starts_at=starts_at,
        venue=event.venue,
        site_name=settings.SMTP_FROM_NAME,
        site_url=settings.SITE_URL,
    )
    if waitlisted:
        subject = f"Waitlisted: {event.title}"
        text = f"Hi {registration.name},\n\n{event.title} is full. You are on the waitlist.\n"
    else:
        subject = f"Registration confirmed: {event.title}"
        text = f"Hi {registration.name},\n\nYour place at {event.title} ({starts_at}) is confirmed.\n"
    msg = build_message(registration.email, subject, html, text)
    return await send_email("registration", msg)
