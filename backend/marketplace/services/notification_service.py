"""Booking confirmation emails sent over SMTP."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from marketplace.config import settings
from marketplace.errors import UpstreamError
from marketplace.models.booking import Booking
from marketplace.models.property import Property

logger = logging.getLogger(__name__)

TEMPLATES = {
    "booking_confirmation": {
        "subject": "Booking Confirmation: {title}",
        "body": (
            "Hi {guest_name},\n\n"
            'Your booking for "{title}" from {check_in} to {check_out} has been confirmed.\n\n'
            "Nights: {nights}\n"
            "Total: {total_price} {currency}\n\n"
            "Booking reference: {booking_id}\n"
        ),
    },
}


def compose_confirmation(booking: Booking, prop: Property) -> EmailMessage:
    """Render the confirmation email for a booking."""
    template = TEMPLATES["booking_confirmation"]
    context = {
        "guest_name": booking.guest_name,
        "title": prop.title,
        "check_in": booking.check_in.isoformat(),
        "check_out": booking.check_out.isoformat(),
        "nights": (booking.check_out - booking.check_in).days,
        "total_price": booking.total_price,
        "currency": settings.stripe_currency.upper(),
        "booking_id": booking.id,
    }

    message = EmailMessage()
    message["From"] = settings.smtp_from
    message["To"] = booking.guest_email
    message["Subject"] = template["subject"].format(**context)
    message.set_content(template["body"].format(**context))
    return message


def _deliver(message: EmailMessage) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
        if settings.smtp_use_tls:
            smtp.starttls()
        if settings.smtp_user:
            smtp.login(settings.smtp_user, settings.smtp_password)
        smtp.send_message(message)


async def send_booking_confirmation(booking: Booking, prop: Property) -> bool:
    """Email the guest their confirmation.

    Returns ``False`` when SMTP is not configured.

    Raises:
        UpstreamError: the mail server rejected or could not be reached.
    """
    if not settings.smtp_host:
        logger.info("SMTP not configured, skipping confirmation email for booking %s", booking.id)
        return False

    message = compose_confirmation(booking, prop)
    try:
        await asyncio.to_thread(_deliver, message)
    except (smtplib.SMTPException, OSError) as e:
        raise UpstreamError(f"Could not send confirmation email: {e}") from e

    logger.info("Sent confirmation email for booking %s", booking.id)
    return True
