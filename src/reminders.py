import time
import uuid
from typing import Dict, Optional

from booking_core.errors import NotificationFailed
from booking_core.logger import get_logger
from booking_core.messages import build_message
from booking_core.models import ReminderLog
from booking_core.services import Services, get_services

logger = get_logger("reminders")


def sweep(services: Services, now: Optional[int] = None) -> Dict[str, int]:
    """
    Send the pre-appointment reminder for every Accepted booking whose
    `reminderAt` has passed and whose reminder has not gone out yet.

    Bookings are handled one at a time and independently: a failed send is
    logged and the booking stays eligible for the next sweep.
    """
    now = int(time.time()) if now is None else now
    lead_hours = services.settings.reminder_lead_hours
    counts = {"matched": 0, "sent": 0, "failed": 0}

    for booking in services.store.due_for_reminder(now):
        counts["matched"] += 1
        message = build_message("reminder", booking, lead_hours=lead_hours)

        try:
            services.notifier.send(booking.client_phone, message, booking.method)
        except NotificationFailed as e:
            counts["failed"] += 1
            logger.error(
                "reminders.send_failed",
                extra={"booking_id": booking.booking_id, "phone": booking.client_phone, "error": str(e)},
            )
            continue
        except Exception as e:
            counts["failed"] += 1
            logger.exception(
                "reminders.send_error",
                extra={"booking_id": booking.booking_id, "phone": booking.client_phone, "error": str(e)},
            )
            continue

        try:
            services.store.log_reminder(
                ReminderLog(
                    log_id=str(uuid.uuid4()),
                    booking_id=booking.booking_id,
                    client_name=booking.client_name,
                    phone=booking.client_phone,
                    method=booking.method,
                    sent_at=int(time.time()),
                    type=f"{lead_hours}-hour",
                )
            )
            services.store.mark_reminder_sent(booking.booking_id)
        except Exception as e:
            counts["failed"] += 1
            logger.exception(
                "reminders.bookkeeping_failed",
                extra={"booking_id": booking.booking_id, "error": str(e)},
            )
            continue

        counts["sent"] += 1
        logger.info("reminders.sent", extra={"booking_id": booking.booking_id})

    return counts


def lambda_handler(event, context, services: Optional[Services] = None):
    """EventBridge `rate(5 minutes)` entry point; the event itself is ignored."""
    services = services or get_services()
    counts = sweep(services)
    logger.info("reminders.sweep_done", extra=counts)
    return counts
