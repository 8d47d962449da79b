"""E-mail the assigned buyer when their vehicle record changes."""
import asyncio
import logging
import smtplib
from email.message import EmailMessage

from app.config import settings
from app.models.vehicle import Vehicle
from app.utils.exceptions import NotificationFailed

logger = logging.getLogger(__name__)

SUBJECT_TEMPLATE = "Update for your vehicle {year} {make} {model} (VIN {vin})"

BODY_TEMPLATE = """\
Hello {name},

There is an update on your vehicle:

  VIN:          {vin}
  Lot:          {lot}
  Vehicle:      {year} {make} {model}
  Destination:  {destination}
  Container:    {container}
  Booking:      {booking}
  ETD:          {etd}
  ETA:          {eta}

Log in to see photos and documents.
"""


def build_message(vehicle: Vehicle, recipient: str, name: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.mail_from
    msg["To"] = recipient
    msg["Subject"] = SUBJECT_TEMPLATE.format(
        year=vehicle.year, make=vehicle.make, model=vehicle.model, vin=vehicle.vin
    )
    msg.set_content(BODY_TEMPLATE.format(
        name=name,
        vin=vehicle.vin,
        lot=vehicle.lot,
        year=vehicle.year,
        make=vehicle.make,
        model=vehicle.model,
        destination=vehicle.destination,
        container=vehicle.container_number or "-",
        booking=vehicle.booking_number or "-",
        etd=vehicle.etd or "-",
        eta=vehicle.eta or "-",
    ))
    return msg


def _send(msg: EmailMessage) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
        if settings.smtp_use_tls:
            smtp.starttls()
        if settings.smtp_username:
            smtp.login(settings.smtp_username, settings.smtp_password)
        smtp.send_message(msg)


async def send_vehicle_update(vehicle: Vehicle, recipient: str, name: str) -> bool:
    """Send one update e-mail. Returns False when SMTP is not configured.

    No retry: SMTP errors surface to the caller as NotificationFailed.
    """
    if not settings.smtp_host:
        logger.info("No SMTP host configured, skipping notification for vehicle %s", vehicle.id)
        return False

    msg = build_message(vehicle, recipient, name)
    try:
        await asyncio.to_thread(_send, msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Notification for vehicle %s failed", vehicle.id)
        raise NotificationFailed(f"Could not send notification: {e}")

    logger.info("Sent update notification for vehicle %s to %s", vehicle.id, recipient)
    return True
